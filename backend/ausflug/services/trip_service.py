"""
Trip service
"""
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy import delete, distinct, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.errors import ForbiddenError, NotFoundError, ValidationError
from ausflug.core.security import is_admin
from ausflug.models.day_plan import DayPlanItem
from ausflug.models.trip import (
    Trip,
    TripAttribute,
    TripComment,
    TripJournalEntry,
    TripParticipant,
    TripPhoto,
    TripRating,
    TripVideo,
)
from ausflug.models.user import User
from ausflug.schemas.trip import TripCreate, TripUpdate
from ausflug.services.geocoding_service import geocode_address

TRIP_CHILD_MODELS = (
    TripPhoto, TripVideo, TripJournalEntry, TripRating,
    TripAttribute, TripComment, TripParticipant, DayPlanItem,
)


def can_view_trip(trip: Trip, user: Optional[User]) -> bool:
    if trip.is_public:
        return True
    return user is not None and (is_admin(user) or trip.user_id == user.id)


def can_edit_trip(trip: Trip, user: User) -> bool:
    return is_admin(user) or trip.user_id == user.id


class TripService:
    """Trip CRUD, search, toggles and ratings"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_trip(self, trip_id: int) -> Optional[Trip]:
        result = await self.db.execute(select(Trip).where(Trip.id == trip_id))
        return result.scalar_one_or_none()

    async def get_visible_trip(self, trip_id: int, user: Optional[User]) -> Trip:
        trip = await self.get_trip(trip_id)
        if not trip or not can_view_trip(trip, user):
            raise NotFoundError("Ausflug", trip_id)
        return trip

    async def get_editable_trip(self, trip_id: int, user: User) -> Trip:
        trip = await self.get_trip(trip_id)
        if not trip:
            raise NotFoundError("Ausflug", trip_id)
        if not can_edit_trip(trip, user):
            raise ForbiddenError("Nur der Besitzer kann diesen Ausflug bearbeiten")
        return trip

    async def list_trips(self, skip: int = 0, limit: int = 100) -> List[Trip]:
        result = await self.db.execute(
            select(Trip).order_by(Trip.created_at, Trip.id).offset(skip).limit(limit)
        )
        return result.scalars().all()

    async def list_user_trips(self, user_id: int) -> List[Trip]:
        result = await self.db.execute(
            select(Trip).where(Trip.user_id == user_id).order_by(Trip.created_at, Trip.id)
        )
        return result.scalars().all()

    async def list_public_trips(self, skip: int = 0, limit: int = 100) -> List[Trip]:
        result = await self.db.execute(
            select(Trip)
            .where(Trip.is_public == True)  # noqa: E712
            .order_by(Trip.created_at, Trip.id)
            .offset(skip)
            .limit(limit)
        )
        return result.scalars().all()

    async def search_trips(
        self,
        keyword: Optional[str] = None,
        region: Optional[str] = None,
        category: Optional[str] = None,
        cost: Optional[str] = None,
        attributes: Optional[List[str]] = None,
        is_public: Optional[bool] = None,
        user_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Trip], int]:
        """Filter trips; attributes must all be present on a trip"""
        conditions = []
        if keyword:
            like = f"%{keyword}%"
            conditions.append(or_(
                Trip.title.ilike(like),
                Trip.description.ilike(like),
                Trip.destination.ilike(like),
            ))
        if region:
            conditions.append(Trip.region == region)
        if category:
            conditions.append(Trip.category == category)
        if cost:
            conditions.append(Trip.cost == cost)
        if is_public is not None:
            conditions.append(Trip.is_public == is_public)
        if user_id is not None:
            conditions.append(Trip.user_id == user_id)
        for attribute in attributes or []:
            conditions.append(
                Trip.id.in_(select(TripAttribute.trip_id).where(TripAttribute.attribute == attribute))
            )

        count_query = select(func.count(Trip.id)).where(*conditions)
        total = (await self.db.execute(count_query)).scalar() or 0
        result = await self.db.execute(
            select(Trip).where(*conditions).order_by(Trip.created_at.desc(), Trip.id.desc()).offset(skip).limit(limit)
        )
        return result.scalars().all(), int(total)

    async def get_statistics(self) -> dict:
        """Counts over public trips"""
        public = Trip.is_public == True  # noqa: E712
        total = (await self.db.execute(select(func.count(Trip.id)).where(public))).scalar() or 0
        free = (await self.db.execute(
            select(func.count(Trip.id)).where(public, Trip.cost == "free")
        )).scalar() or 0
        categories = (await self.db.execute(
            select(func.count(distinct(Trip.category))).where(
                public, Trip.category.isnot(None), Trip.category != ""
            )
        )).scalar() or 0
        return {
            "total_activities": int(total),
            "free_activities": int(free),
            "total_categories": int(categories),
        }

    async def _fill_coordinates(self, trip: Trip) -> None:
        if trip.latitude is not None and trip.longitude is not None:
            return
        coords = await geocode_address(trip.address or trip.destination)
        if coords:
            trip.latitude, trip.longitude = coords
            logger.info(f"📍 Geocoded trip '{trip.title}' -> {coords}")

    async def create_trip(self, data: TripCreate, user_id: int) -> Trip:
        trip = Trip(**data.model_dump(), user_id=user_id)
        await self._fill_coordinates(trip)
        self.db.add(trip)
        await self.db.commit()
        await self.db.refresh(trip)
        logger.info(f"Trip {trip.id} created by user {user_id}")
        return trip

    async def update_trip(self, trip: Trip, data: TripUpdate) -> Trip:
        changes = data.model_dump(exclude_unset=True)
        start = changes.get("start_date", trip.start_date)
        end = changes.get("end_date", trip.end_date)
        if start and end and end < start:
            raise ValidationError("Enddatum muss nach dem Startdatum liegen")

        location_changed = any(
            field in changes and changes[field] != getattr(trip, field)
            for field in ("address", "destination")
        )
        for field, value in changes.items():
            setattr(trip, field, value)

        if location_changed and "latitude" not in changes and "longitude" not in changes:
            trip.latitude = None
            trip.longitude = None
            await self._fill_coordinates(trip)

        await self.db.commit()
        await self.db.refresh(trip)
        return trip

    async def delete_trip(self, trip: Trip) -> None:
        """Delete a trip together with everything attached to it"""
        for model in TRIP_CHILD_MODELS:
            await self.db.execute(delete(model).where(model.trip_id == trip.id))
        await self.db.delete(trip)
        await self.db.commit()
        logger.info(f"Trip {trip.id} deleted")

    async def toggle_flag(self, trip: Trip, field: str) -> bool:
        new_value = not getattr(trip, field)
        await self.db.execute(update(Trip).where(Trip.id == trip.id).values({field: new_value}))
        await self.db.commit()
        setattr(trip, field, new_value)
        return new_value

    async def trips_missing_coordinates(self, include_all: bool = False) -> List[Trip]:
        query = select(Trip)
        if not include_all:
            query = query.where(or_(Trip.latitude.is_(None), Trip.longitude.is_(None)))
        result = await self.db.execute(query.order_by(Trip.id))
        return result.scalars().all()

    async def geocode_trips(self, include_all: bool = False) -> dict:
        """Geocode trips without coordinates (or all trips)"""
        updated, failed = 0, 0
        for trip in await self.trips_missing_coordinates(include_all):
            coords = await geocode_address(trip.address or trip.destination)
            if coords:
                trip.latitude, trip.longitude = coords
                updated += 1
            else:
                failed += 1
        await self.db.commit()
        logger.info(f"📍 Geocoding finished: {updated} updated, {failed} failed")
        return {"updated": updated, "failed": failed}

    # ---- ratings ----
    async def upsert_rating(self, trip_id: int, user_id: int, score: int, comment: Optional[str]) -> Tuple[float, int]:
        """Insert or update the user's rating and return (average, count)"""
        existing = await self.db.execute(
            select(TripRating).where(TripRating.trip_id == trip_id, TripRating.user_id == user_id)
        )
        rating = existing.scalar_one_or_none()
        if rating:
            await self.db.execute(
                update(TripRating).where(TripRating.id == rating.id).values(score=score, comment=comment)
            )
        else:
            self.db.add(TripRating(trip_id=trip_id, user_id=user_id, score=score, comment=comment))
        await self.db.commit()
        return await self.get_rating_summary(trip_id)

    async def get_ratings(self, trip_id: int, skip: int = 0, limit: int = 20) -> List[dict]:
        result = await self.db.execute(
            select(TripRating, User.name)
            .join(User, User.id == TripRating.user_id)
            .where(TripRating.trip_id == trip_id)
            .order_by(TripRating.created_at.desc(), TripRating.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return [
            {
                "id": rating.id,
                "user_id": rating.user_id,
                "user_name": name,
                "score": rating.score,
                "comment": rating.comment,
                "created_at": rating.created_at,
            }
            for rating, name in result.all()
        ]

    async def get_rating_summary(self, trip_id: int) -> Tuple[float, int]:
        result = await self.db.execute(
            select(func.avg(TripRating.score), func.count(TripRating.id)).where(TripRating.trip_id == trip_id)
        )
        avg_score, count = result.first() or (None, 0)
        average = round(float(avg_score), 1) if avg_score is not None else 0.0
        return average, int(count or 0)
