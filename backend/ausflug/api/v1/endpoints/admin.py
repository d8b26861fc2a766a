"""
Admin endpoints: import, categories, geocoding and stats
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.database import get_async_db
from ausflug.core.errors import ValidationError
from ausflug.core.security import require_admin
from ausflug.models.day_plan import DayPlan
from ausflug.models.notification import PushSubscription
from ausflug.models.trip import Trip
from ausflug.models.user import User
from ausflug.schemas.admin import ImportRequest, ImportResult
from ausflug.services.category_service import assign_categories
from ausflug.services.import_service import import_excursions
from ausflug.services.trip_service import TripService

router = APIRouter()


@router.post("/import", response_model=ImportResult)
async def import_from_body(
    payload: ImportRequest,
    db: AsyncSession = Depends(get_async_db),
    admin: User = Depends(require_admin),
):
    return await import_excursions(db, payload.file_content, payload.filename, admin.id, payload.make_public)


@router.post("/import/upload", response_model=ImportResult)
async def import_from_upload(
    file: UploadFile = File(...),
    make_public: bool = Form(True),
    db: AsyncSession = Depends(get_async_db),
    admin: User = Depends(require_admin),
):
    raw = await file.read()
    try:
        content = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("Datei muss UTF-8 kodiert sein")
    return await import_excursions(db, content, file.filename or "", admin.id, make_public)


@router.post("/assign-categories")
async def assign_trip_categories(
    overwrite: bool = False,
    db: AsyncSession = Depends(get_async_db),
    admin: User = Depends(require_admin),
):
    return await assign_categories(db, overwrite)


@router.post("/geocode-trips")
async def geocode_trips(
    db: AsyncSession = Depends(get_async_db),
    admin: User = Depends(require_admin),
):
    return await TripService(db).geocode_trips()


@router.get("/stats")
async def get_stats(
    db: AsyncSession = Depends(get_async_db),
    admin: User = Depends(require_admin),
):
    async def count(column, *conditions) -> int:
        return int((await db.execute(select(func.count(column)).where(*conditions))).scalar() or 0)

    return {
        "users": await count(User.id),
        "trips": await count(Trip.id),
        "public_trips": await count(Trip.id, Trip.is_public == True),  # noqa: E712
        "day_plans": await count(DayPlan.id),
        "push_subscriptions": await count(PushSubscription.id),
    }
