"""
In-process background tasks started with the API
"""

import asyncio
from typing import List

from loguru import logger
from sqlalchemy import text

from ausflug.core.config import settings
from ausflug.core.redis import ping_redis
from ausflug.core.websocket import manager as ws_manager


class BackgroundTaskManager:
    """WebSocket heartbeat and periodic health logging"""

    HEALTH_INTERVAL = 300

    def __init__(self):
        self.running = False
        self._tasks: List[asyncio.Task] = []

    async def start_tasks(self):
        if self.running:
            logger.warning("Background tasks already running")
            return

        self.running = True
        self._tasks = [
            asyncio.create_task(self.heartbeat_task()),
            asyncio.create_task(self.health_check_task()),
        ]
        logger.info("✅ Background tasks started")

    async def stop_tasks(self):
        self.running = False
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
        logger.info("Background tasks stopped")

    async def heartbeat_task(self):
        while self.running:
            await asyncio.sleep(settings.WS_HEARTBEAT_INTERVAL)
            try:
                await ws_manager.heartbeat()
            except Exception as e:
                logger.error(f"WebSocket heartbeat failed: {e}")

    async def health_check_task(self):
        await asyncio.sleep(10)
        while self.running:
            try:
                database_ok = await self._check_database()
                redis_ok = await ping_redis()
                logger.debug(
                    f"Health: database={'ok' if database_ok else 'down'}, "
                    f"redis={'ok' if redis_ok else 'down'}, websockets={ws_manager.client_count}"
                )
            except Exception as e:
                logger.error(f"Health check failed: {e}")
            await asyncio.sleep(self.HEALTH_INTERVAL)

    async def _check_database(self) -> bool:
        from ausflug.core.database import get_async_engine
        try:
            async with get_async_engine().begin() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database check failed: {e}")
            return False


task_manager = BackgroundTaskManager()


async def start_background_tasks():
    await task_manager.start_tasks()


async def stop_background_tasks():
    await task_manager.stop_tasks()
