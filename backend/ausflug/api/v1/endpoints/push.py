"""
Push subscription, location and notification settings endpoints
"""

from fastapi import APIRouter, Depends, Request
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.config import settings
from ausflug.core.database import get_async_db
from ausflug.core.security import get_current_user
from ausflug.models.user import User
from ausflug.schemas.push import (
    CapacitorToken,
    LocationUpdate,
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    PushSubscribe,
    PushUnsubscribe,
)
from ausflug.services.notification_service import NotificationService
from ausflug.services.push_service import PushNotificationService

router = APIRouter()


def schedule_nearby_check(user_id: int) -> bool:
    """Queue a nearby-trip check; a missing broker is logged, not raised"""
    from ausflug.tasks.notification_tasks import check_nearby_trips_task
    try:
        check_nearby_trips_task.delay(user_id)
        return True
    except Exception as e:
        logger.warning(f"Could not queue nearby check for user {user_id}: {e}")
        return False


@router.get("/vapid-public-key")
async def get_vapid_public_key():
    return {"public_key": settings.VAPID_PUBLIC_KEY}


@router.post("/subscribe")
async def subscribe(
    subscription: PushSubscribe,
    request: Request,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    is_new = await PushNotificationService(db).subscribe(
        current_user.id,
        str(subscription.endpoint),
        subscription.keys.auth,
        subscription.keys.p256dh,
        request.headers.get("user-agent"),
    )
    message = "Push-Benachrichtigungen aktiviert" if is_new else "Abonnement aktualisiert"
    return {"success": True, "is_new": is_new, "message": message}


@router.post("/unsubscribe")
async def unsubscribe(
    payload: PushUnsubscribe,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    removed = await PushNotificationService(db).unsubscribe(current_user.id, payload.endpoint)
    return {"success": True, "removed": removed}


@router.post("/capacitor-token")
async def register_capacitor_token(
    payload: CapacitorToken,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    is_new = await PushNotificationService(db).store_capacitor_token(current_user.id, payload.token, payload.platform)
    return {"success": True, "is_new": is_new}


@router.post("/location")
async def update_location(
    location: LocationUpdate,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    stored = await NotificationService(db).update_location(
        current_user.id, location.latitude, location.longitude, location.accuracy
    )
    if not stored:
        return {"success": False, "message": "Standortverfolgung ist deaktiviert"}
    schedule_nearby_check(current_user.id)
    return {"success": True}


@router.get("/settings", response_model=NotificationSettingsResponse)
async def get_settings(
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await NotificationService(db).get_settings(current_user.id)


@router.put("/settings", response_model=NotificationSettingsResponse)
async def update_settings(
    payload: NotificationSettingsUpdate,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await NotificationService(db).update_settings(current_user.id, payload)
