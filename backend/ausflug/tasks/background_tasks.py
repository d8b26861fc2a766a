"""
Maintenance tasks
"""

from loguru import logger
from sqlalchemy import text

from ausflug.core.async_loop import run_coro
from ausflug.core.celery import celery_app
from ausflug.core.config import settings
from ausflug.core.database import async_session, get_async_engine
from ausflug.core.redis import clear_cache_pattern, get_redis
from ausflug.services.notification_service import NotificationService
from ausflug.services.password_reset_service import PasswordResetService
from ausflug.services.trip_service import TripService

CACHE_PATTERNS = ("weather:*", "geocode:*")


@celery_app.task
def cleanup_expired_reset_tokens_task():
    async def run_cleanup():
        async with async_session() as db:
            return await PasswordResetService(db).cleanup_expired()

    try:
        removed = run_coro(run_cleanup())
        logger.info(f"🧹 Removed {removed} expired reset tokens")
        return {"status": "success", "removed": removed}
    except Exception as e:
        logger.error(f"Reset token cleanup failed: {e}")
        raise


@celery_app.task
def cleanup_old_notifications_task(days: int = None):
    days = days or settings.NOTIFICATION_RETENTION_DAYS

    async def run_cleanup():
        async with async_session() as db:
            return await NotificationService(db).cleanup_old(days)

    try:
        removed = run_coro(run_cleanup())
        logger.info(f"🧹 Removed {removed} read notifications older than {days} days")
        return {"status": "success", "removed": removed}
    except Exception as e:
        logger.error(f"Notification cleanup failed: {e}")
        raise


@celery_app.task
def cache_cleanup_task():
    async def run_cleanup():
        total = 0
        for pattern in CACHE_PATTERNS:
            total += await clear_cache_pattern(pattern)
        return total

    try:
        cleared = run_coro(run_cleanup())
        return {"status": "success", "cleared_keys": cleared}
    except Exception as e:
        logger.error(f"Cache cleanup failed: {e}")
        raise


@celery_app.task
def health_check_task():
    async def run_checks():
        engine = get_async_engine()
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

        redis_client = await get_redis()
        await redis_client.ping()
        return {"status": "success", "checks": {"database": "healthy", "redis": "healthy"}}

    try:
        return run_coro(run_checks())
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise


@celery_app.task
def geocode_missing_trips_task():
    async def run_geocoding():
        async with async_session() as db:
            return await TripService(db).geocode_trips()

    try:
        return {"status": "success", **run_coro(run_geocoding())}
    except Exception as e:
        logger.error(f"Geocoding task failed: {e}")
        raise
