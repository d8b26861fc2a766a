"""
Push notification delivery (Web Push with VAPID) and subscription management
"""

import asyncio
import json
from typing import Any, Dict, Optional

from loguru import logger
from pywebpush import WebPushException, webpush
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.config import settings
from ausflug.core.websocket import manager as ws_manager
from ausflug.models.notification import Notification, PushSubscription
from ausflug.models.trip import Trip
from ausflug.models.user import User, UserSettings

ICON = "/icons/icon-192.png"

DEFAULT_SETTINGS = {
    "notifications_enabled": True,
    "friend_request_notifications": True,
    "friend_request_accepted_notifications": True,
    "nearby_trip_notifications": True,
    "nearby_trip_distance": settings.NEARBY_TRIP_DEFAULT_DISTANCE,
    "location_tracking_enabled": True,
}

# Per-type switches in user_settings; other types only follow notifications_enabled
TYPE_SETTING = {
    "friend_request": "friend_request_notifications",
    "friend_accepted": "friend_request_accepted_notifications",
    "nearby_trip": "nearby_trip_notifications",
}


def build_payload(title: str, message: str, notification_type: str,
                  related_id: Optional[int] = None, url: Optional[str] = None,
                  tag: Optional[str] = None) -> Dict[str, Any]:
    """Payload consumed by the service worker"""
    return {
        "title": title,
        "message": message,
        "icon": ICON,
        "badge": ICON,
        "tag": tag or f"{notification_type}-{related_id or 0}",
        "data": {"type": notification_type, "related_id": related_id, "url": url},
    }


def settings_to_dict(row: Optional[UserSettings]) -> Dict[str, Any]:
    if row is None:
        return dict(DEFAULT_SETTINGS)
    return {field: getattr(row, field) for field in DEFAULT_SETTINGS}


def _send_webpush(subscription: PushSubscription, payload: Dict[str, Any]) -> None:
    webpush(
        subscription_info={
            "endpoint": subscription.endpoint,
            "keys": {"auth": subscription.auth, "p256dh": subscription.p256dh},
        },
        data=json.dumps(payload, ensure_ascii=False),
        vapid_private_key=settings.VAPID_PRIVATE_KEY,
        vapid_claims={"sub": settings.VAPID_CLAIMS_EMAIL},
    )


class PushNotificationService:
    """Stores in-app notifications and fans them out to Web Push and WebSocket clients"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_settings_row(self, user_id: int) -> Optional[UserSettings]:
        result = await self.db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
        return result.scalar_one_or_none()

    async def ensure_settings(self, user_id: int) -> UserSettings:
        row = await self.get_settings_row(user_id)
        if row is None:
            row = UserSettings(user_id=user_id, **DEFAULT_SETTINGS)
            self.db.add(row)
            await self.db.flush()
        return row

    async def send_to_user(self, user_id: int, payload: Dict[str, Any], notification_type: str = "system") -> bool:
        """Deliver a notification; False when the user disabled it or no channel received it"""
        prefs = settings_to_dict(await self.get_settings_row(user_id))
        if not prefs["notifications_enabled"]:
            logger.debug(f"Notifications disabled for user {user_id}")
            return False
        type_setting = TYPE_SETTING.get(notification_type)
        if type_setting and not prefs[type_setting]:
            logger.debug(f"{notification_type} notifications disabled for user {user_id}")
            return False

        data = payload.get("data") or {}
        self.db.add(Notification(
            user_id=user_id,
            title=payload["title"],
            message=payload["message"],
            type=notification_type,
            related_id=data.get("related_id"),
        ))
        await self.db.commit()

        delivered = await ws_manager.send_to_user(
            user_id, payload["title"], payload["message"], notification_type,
            data.get("related_id"), data.get("url"),
        )

        pushed = await self._push_to_subscriptions(user_id, payload)
        return delivered or pushed > 0

    async def _push_to_subscriptions(self, user_id: int, payload: Dict[str, Any]) -> int:
        if not (settings.VAPID_PUBLIC_KEY and settings.VAPID_PRIVATE_KEY):
            logger.warning("⚠️ VAPID keys not configured, skipping web push")
            return 0

        result = await self.db.execute(
            select(PushSubscription).where(
                PushSubscription.user_id == user_id, PushSubscription.platform == "web"
            )
        )
        subscriptions = result.scalars().all()

        success = 0
        for subscription in subscriptions:
            try:
                await asyncio.to_thread(_send_webpush, subscription, payload)
                success += 1
            except WebPushException as e:
                status = getattr(e.response, "status_code", None)
                if status in (404, 410):
                    await self.db.execute(delete(PushSubscription).where(PushSubscription.id == subscription.id))
                    await self.db.commit()
                    logger.info(f"🗑️ Removed expired push subscription {subscription.id}")
                else:
                    logger.error(f"❌ Push to subscription {subscription.id} failed: {e}")
            except Exception as e:
                logger.error(f"❌ Push to subscription {subscription.id} failed: {e}")
        if success:
            logger.info(f"📨 Push sent to {success}/{len(subscriptions)} subscriptions of user {user_id}")
        return success

    async def _user_name(self, user_id: int) -> Optional[str]:
        result = await self.db.execute(select(User.name).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def notify_friend_request(self, from_user_id: int, to_user_id: int) -> bool:
        name = await self._user_name(from_user_id) or "Ein Benutzer"
        payload = build_payload(
            "Freundschaftsanfrage", f"{name} möchte dein Freund sein",
            "friend_request", from_user_id, "/friends", tag=f"friend-request-{from_user_id}",
        )
        return await self.send_to_user(to_user_id, payload, "friend_request")

    async def notify_friend_accepted(self, from_user_id: int, to_user_id: int) -> bool:
        name = await self._user_name(from_user_id) or "Ein Benutzer"
        payload = build_payload(
            "Freundschaftsanfrage akzeptiert", f"{name} hat deine Freundschaftsanfrage akzeptiert",
            "friend_accepted", from_user_id, "/friends", tag=f"friend-accepted-{from_user_id}",
        )
        return await self.send_to_user(to_user_id, payload, "friend_accepted")

    async def notify_nearby_trip(self, user_id: int, trip: Trip, distance_m: float) -> bool:
        payload = build_payload(
            "Ausflug in der Nähe", f"\"{trip.title}\" ist nur noch {distance_m / 1000:.1f} km entfernt!",
            "nearby_trip", trip.id, f"/trips/{trip.id}", tag=f"nearby-trip-{trip.id}",
        )
        return await self.send_to_user(user_id, payload, "nearby_trip")

    # ---- subscriptions ----
    async def subscribe(self, user_id: int, endpoint: str, auth: str, p256dh: str,
                        user_agent: Optional[str] = None) -> bool:
        """Store a web push subscription; returns True when it is new"""
        result = await self.db.execute(
            select(PushSubscription).where(
                PushSubscription.user_id == user_id, PushSubscription.endpoint == endpoint
            )
        )
        existing = result.scalar_one_or_none()
        await self.ensure_settings(user_id)
        if existing:
            existing.auth = auth
            existing.p256dh = p256dh
            await self.db.commit()
            return False

        self.db.add(PushSubscription(
            user_id=user_id, endpoint=endpoint, auth=auth, p256dh=p256dh,
            user_agent=(user_agent or "")[:500] or None, platform="web",
        ))
        await self.db.commit()
        logger.info(f"🔔 Push subscription stored for user {user_id}")
        return True

    async def unsubscribe(self, user_id: int, endpoint: str) -> int:
        result = await self.db.execute(
            delete(PushSubscription).where(
                PushSubscription.user_id == user_id, PushSubscription.endpoint == endpoint
            )
        )
        await self.db.commit()
        return result.rowcount or 0

    async def store_capacitor_token(self, user_id: int, token: str, device_platform: str) -> bool:
        result = await self.db.execute(
            select(PushSubscription).where(
                PushSubscription.user_id == user_id, PushSubscription.endpoint == token
            )
        )
        existing = result.scalar_one_or_none()
        await self.ensure_settings(user_id)
        if existing:
            existing.device_platform = device_platform
            await self.db.commit()
            return False
        self.db.add(PushSubscription(
            user_id=user_id, endpoint=token, platform="capacitor", device_platform=device_platform,
        ))
        await self.db.commit()
        return True
