"""
Trip endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.database import get_async_db
from ausflug.core.security import get_current_user, get_current_user_optional
from ausflug.models.user import User
from ausflug.schemas.trip import (
    CostLevel,
    RatingCreate,
    RatingResponse,
    RatingSummary,
    TripCreate,
    TripResponse,
    TripSearchResponse,
    TripUpdate,
)
from ausflug.services.trip_service import TripService

router = APIRouter()


@router.get("/", response_model=List[TripResponse])
async def get_trips(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_async_db),
):
    return await TripService(db).list_trips(skip, limit)


@router.get("/mine", response_model=List[TripResponse])
async def get_my_trips(
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await TripService(db).list_user_trips(current_user.id)


@router.get("/public", response_model=List[TripResponse])
async def get_public_trips(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_async_db),
):
    return await TripService(db).list_public_trips(skip, limit)


@router.get("/statistics")
async def get_statistics(db: AsyncSession = Depends(get_async_db)):
    return await TripService(db).get_statistics()


@router.get("/search", response_model=TripSearchResponse)
async def search_trips(
    keyword: Optional[str] = Query(None, max_length=255),
    region: Optional[str] = None,
    category: Optional[str] = None,
    cost: Optional[CostLevel] = None,
    attributes: Optional[List[str]] = Query(None),
    is_public: Optional[bool] = None,
    user_id: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    """Filter trips; every given attribute must be present"""
    trips, total = await TripService(db).search_trips(
        keyword=keyword,
        region=region,
        category=category,
        cost=cost,
        attributes=attributes,
        is_public=is_public,
        user_id=user_id,
        skip=skip,
        limit=limit,
    )
    return {"trips": trips, "total": total, "skip": skip, "limit": limit}


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    return await TripService(db).get_visible_trip(trip_id, current_user)


@router.post("/", response_model=TripResponse, status_code=201)
async def create_trip(
    trip_in: TripCreate,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await TripService(db).create_trip(trip_in, current_user.id)


@router.put("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: int,
    trip_in: TripUpdate,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    service = TripService(db)
    trip = await service.get_editable_trip(trip_id, current_user)
    return await service.update_trip(trip, trip_in)


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    service = TripService(db)
    trip = await service.get_editable_trip(trip_id, current_user)
    await service.delete_trip(trip)
    return {"success": True, "message": "Ausflug gelöscht"}


@router.post("/{trip_id}/favorite")
async def toggle_favorite(
    trip_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    service = TripService(db)
    trip = await service.get_editable_trip(trip_id, current_user)
    return {"is_favorite": await service.toggle_flag(trip, "is_favorite")}


@router.post("/{trip_id}/done")
async def toggle_done(
    trip_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    service = TripService(db)
    trip = await service.get_editable_trip(trip_id, current_user)
    return {"is_done": await service.toggle_flag(trip, "is_done")}


# ---- ratings ----
@router.post("/{trip_id}/ratings", response_model=RatingSummary)
async def rate_trip(
    trip_id: int,
    rating: RatingCreate,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    service = TripService(db)
    await service.get_visible_trip(trip_id, current_user)
    average, count = await service.upsert_rating(trip_id, current_user.id, rating.score, rating.comment)
    return {"average": average, "count": count}


@router.get("/{trip_id}/ratings", response_model=List[RatingResponse])
async def get_ratings(
    trip_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    service = TripService(db)
    await service.get_visible_trip(trip_id, current_user)
    return await service.get_ratings(trip_id, skip, limit)


@router.get("/{trip_id}/ratings/summary", response_model=RatingSummary)
async def get_rating_summary(
    trip_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    service = TripService(db)
    await service.get_visible_trip(trip_id, current_user)
    average, count = await service.get_rating_summary(trip_id)
    return {"average": average, "count": count}
