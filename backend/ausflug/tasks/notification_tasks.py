"""
Notification tasks
"""

from typing import Optional

from loguru import logger

from ausflug.core.async_loop import run_coro
from ausflug.core.celery import celery_app
from ausflug.core.database import async_session
from ausflug.services.notification_service import NotificationService
from ausflug.services.push_service import PushNotificationService, build_payload


async def _check_user(user_id: int) -> int:
    async with async_session() as db:
        notified = await NotificationService(db).check_nearby_trips(user_id)
    return len(notified)


@celery_app.task
def check_nearby_trips_task(user_id: int):
    """Check one user's location against public trips"""
    try:
        notified = run_coro(_check_user(user_id))
        return {"status": "success", "user_id": user_id, "notified": notified}
    except Exception as e:
        logger.error(f"Nearby check for user {user_id} failed: {e}")
        raise


@celery_app.task
def check_all_nearby_trips_task():
    """Nearby check for every user with a location and tracking enabled"""

    async def run_all():
        async with async_session() as db:
            user_ids = await NotificationService(db).users_with_tracking()
        total = 0
        for user_id in user_ids:
            try:
                total += await _check_user(user_id)
            except Exception as e:
                logger.error(f"Nearby check for user {user_id} failed: {e}")
        return len(user_ids), total

    try:
        users, notified = run_coro(run_all())
        logger.info(f"📍 Nearby check finished: {users} users, {notified} notifications")
        return {"status": "success", "users": users, "notified": notified}
    except Exception as e:
        logger.error(f"Nearby check failed: {e}")
        raise


@celery_app.task
def send_notification_task(user_id: int, title: str, message: str, notification_type: str = "system",
                           related_id: Optional[int] = None, url: Optional[str] = None):
    async def run_send():
        async with async_session() as db:
            payload = build_payload(title, message, notification_type, related_id, url)
            return await PushNotificationService(db).send_to_user(user_id, payload, notification_type)

    try:
        delivered = run_coro(run_send())
        return {"status": "success", "delivered": delivered}
    except Exception as e:
        logger.error(f"Sending notification to user {user_id} failed: {e}")
        raise
