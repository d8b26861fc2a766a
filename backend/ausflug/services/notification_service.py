"""
Notification settings, history, user locations and nearby-trip checks
"""

import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.config import settings
from ausflug.core.errors import NotFoundError
from ausflug.models.notification import Notification
from ausflug.models.trip import Trip
from ausflug.models.user import UserLocation
from ausflug.schemas.push import NotificationSettingsUpdate
from ausflug.services.push_service import DEFAULT_SETTINGS, PushNotificationService, settings_to_dict

EARTH_RADIUS_M = 6371000


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in metres"""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class NotificationService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.push = PushNotificationService(db)

    # ---- settings ----
    async def get_settings(self, user_id: int) -> Dict[str, Any]:
        return settings_to_dict(await self.push.get_settings_row(user_id))

    async def update_settings(self, user_id: int, data: NotificationSettingsUpdate) -> Dict[str, Any]:
        row = await self.push.ensure_settings(user_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(row, field, value)
        await self.db.commit()
        return settings_to_dict(row)

    # ---- location ----
    async def update_location(self, user_id: int, latitude: float, longitude: float,
                              accuracy: Optional[float] = None) -> bool:
        """Store the position; refused when tracking is off or no settings exist"""
        row = await self.push.get_settings_row(user_id)
        if row is None or not row.location_tracking_enabled:
            return False

        result = await self.db.execute(select(UserLocation).where(UserLocation.user_id == user_id))
        location = result.scalar_one_or_none()
        if location:
            location.latitude = latitude
            location.longitude = longitude
            location.accuracy = accuracy
        else:
            self.db.add(UserLocation(user_id=user_id, latitude=latitude, longitude=longitude, accuracy=accuracy))
        await self.db.commit()
        return True

    # ---- history ----
    async def list_notifications(self, user_id: int, limit: int = 20, unread_only: bool = False) -> List[Notification]:
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read == False)  # noqa: E712
        result = await self.db.execute(
            query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
        )
        return result.scalars().all()

    async def unread_count(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id, Notification.is_read == False  # noqa: E712
            )
        )
        return int(result.scalar() or 0)

    async def mark_as_read(self, user_id: int, notification_id: int) -> None:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
        )
        if not result.rowcount:
            raise NotFoundError("Benachrichtigung", notification_id)
        await self.db.commit()

    async def mark_all_as_read(self, user_id: int) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
        )
        await self.db.commit()
        return result.rowcount or 0

    async def cleanup_old(self, days: int) -> int:
        """Remove read notifications older than the given number of days"""
        cutoff = datetime.utcnow() - timedelta(days=days)
        result = await self.db.execute(
            delete(Notification).where(Notification.is_read == True, Notification.created_at < cutoff)  # noqa: E712
        )
        await self.db.commit()
        return result.rowcount or 0

    # ---- nearby trips ----
    async def _recently_notified(self, user_id: int, trip_id: int, now: datetime) -> bool:
        result = await self.db.execute(
            select(func.max(Notification.created_at)).where(
                Notification.user_id == user_id,
                Notification.type == "nearby_trip",
                Notification.related_id == trip_id,
            )
        )
        last = result.scalar()
        return last is not None and now - last < timedelta(hours=settings.NEARBY_TRIP_RENOTIFY_HOURS)

    async def check_nearby_trips(self, user_id: int) -> List[Dict[str, Any]]:
        """Notify the user about public trips within their distance threshold"""
        result = await self.db.execute(select(UserLocation).where(UserLocation.user_id == user_id))
        location = result.scalar_one_or_none()
        if location is None:
            logger.debug(f"No location for user {user_id}")
            return []

        prefs = await self.get_settings(user_id)
        threshold = prefs.get("nearby_trip_distance") or DEFAULT_SETTINGS["nearby_trip_distance"]

        trips = (await self.db.execute(
            select(Trip).where(
                Trip.is_public == True,  # noqa: E712
                Trip.latitude.isnot(None),
                Trip.longitude.isnot(None),
            )
        )).scalars().all()

        now = datetime.utcnow()
        notified = []
        for trip in trips:
            distance = haversine_distance(location.latitude, location.longitude, trip.latitude, trip.longitude)
            if distance > threshold:
                continue
            if await self._recently_notified(user_id, trip.id, now):
                continue
            if await self.push.notify_nearby_trip(user_id, trip, distance):
                notified.append({"trip_id": trip.id, "title": trip.title, "distance": round(distance)})

        if notified:
            logger.info(f"📍 User {user_id} notified about {len(notified)} nearby trips")
        return notified

    async def users_with_tracking(self) -> List[int]:
        from ausflug.models.user import UserSettings
        result = await self.db.execute(
            select(UserLocation.user_id)
            .join(UserSettings, UserSettings.user_id == UserLocation.user_id)
            .where(UserSettings.location_tracking_enabled == True)  # noqa: E712
        )
        return [row[0] for row in result.all()]
