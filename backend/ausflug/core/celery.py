"""
Celery application
"""

from celery import Celery
from ausflug.core.config import settings
from ausflug.core.logging_config import setup_logging
import platform

celery_app = Celery(
    "ausflug",
    broker=settings.CELERY_BROKER_URL or settings.REDIS_URL,
    backend=settings.CELERY_RESULT_BACKEND or settings.REDIS_URL,
    include=[
        "ausflug.tasks.notification_tasks",
        "ausflug.tasks.background_tasks"
    ]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.WEATHER_TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=settings.TASK_TIMEOUT,
    worker_prefetch_multiplier=settings.CELERY_PREFETCH_MULTIPLIER,
    worker_max_tasks_per_child=1000,
    result_expires=3600,
    broker_connection_retry_on_startup=True,
)

setup_logging()

if settings.CELERY_WORKER_POOL:
    celery_app.conf.worker_pool = settings.CELERY_WORKER_POOL
if settings.CELERY_WORKER_CONCURRENCY:
    celery_app.conf.worker_concurrency = settings.CELERY_WORKER_CONCURRENCY

# Windows only runs reliably with the solo pool
if not settings.CELERY_WORKER_POOL:
    if platform.system().lower().startswith("win"):
        celery_app.conf.worker_pool = "solo"
        celery_app.conf.worker_concurrency = 1
    else:
        celery_app.conf.worker_concurrency = settings.CELERY_WORKER_CONCURRENCY or settings.MAX_CONCURRENT_TASKS

celery_app.conf.beat_schedule = {
    "nearby-trips-check": {
        "task": "ausflug.tasks.notification_tasks.check_all_nearby_trips_task",
        "schedule": 900.0,  # every 15 minutes
    },
    "reset-token-cleanup": {
        "task": "ausflug.tasks.background_tasks.cleanup_expired_reset_tokens_task",
        "schedule": 3600.0,
    },
    "notification-cleanup": {
        "task": "ausflug.tasks.background_tasks.cleanup_old_notifications_task",
        "schedule": 86400.0,
    },
    "cache-cleanup": {
        "task": "ausflug.tasks.background_tasks.cache_cleanup_task",
        "schedule": 3600.0,
    },
    "health-check": {
        "task": "ausflug.tasks.background_tasks.health_check_task",
        "schedule": 600.0,
    },
}
