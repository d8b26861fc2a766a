"""
WebSocket connection registry for real-time notifications
"""

import asyncio
import json
import time
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from fastapi import WebSocket
from loguru import logger

from ausflug.core.config import settings


class _Client:
    __slots__ = ("websocket", "user_id", "last_ping")

    def __init__(self, websocket: WebSocket, user_id: int):
        self.websocket = websocket
        self.user_id = user_id
        self.last_ping = time.monotonic()


class NotificationConnectionManager:
    """Tracks authenticated sockets per user and pushes notifications to them."""

    def __init__(self):
        self._clients: Dict[int, List[_Client]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, user_id: int):
        """Accept and register a socket for a user."""
        await websocket.accept()
        async with self._lock:
            self._clients.setdefault(user_id, []).append(_Client(websocket, user_id))
        logger.info(f"🔌 WebSocket connected: user {user_id} (total {self.client_count})")

    async def disconnect(self, websocket: WebSocket):
        async with self._lock:
            self._remove(websocket)
        logger.info(f"🔌 WebSocket disconnected (total {self.client_count})")

    def _remove(self, websocket: WebSocket):
        for user_id in list(self._clients):
            remaining = [c for c in self._clients[user_id] if c.websocket is not websocket]
            if remaining:
                self._clients[user_id] = remaining
            else:
                del self._clients[user_id]

    async def touch(self, websocket: WebSocket):
        async with self._lock:
            for clients in self._clients.values():
                for client in clients:
                    if client.websocket is websocket:
                        client.last_ping = time.monotonic()

    async def handle_message(self, websocket: WebSocket, raw: str):
        """Answer pings; other messages are ignored."""
        try:
            message = json.loads(raw)
        except ValueError:
            logger.debug("Ignoring non-JSON WebSocket message")
            return
        if isinstance(message, dict) and message.get("type") == "ping":
            await self.touch(websocket)
            await websocket.send_text(json.dumps({"type": "pong"}))

    async def send_to_user(
        self,
        user_id: int,
        title: str,
        message: str,
        notification_type: str,
        related_id: Optional[int] = None,
        url: Optional[str] = None,
    ) -> bool:
        """Send a notification to every socket of a user; True when at least one received it."""
        payload = json.dumps({
            "type": "notification",
            "data": {
                "title": title,
                "message": message,
                "notification_type": notification_type,
                "related_id": related_id,
                "url": url,
                "timestamp": datetime.utcnow().isoformat(),
            },
        }, ensure_ascii=False)

        async with self._lock:
            clients = list(self._clients.get(user_id, []))

        delivered = False
        stale: List[WebSocket] = []
        for client in clients:
            try:
                await client.websocket.send_text(payload)
                delivered = True
            except Exception as e:
                logger.debug(f"WebSocket send failed for user {user_id}: {e}")
                stale.append(client.websocket)

        if stale:
            async with self._lock:
                for ws in stale:
                    self._remove(ws)
            logger.info(f"Removed {len(stale)} stale WebSocket connections")

        return delivered

    async def broadcast(self, user_ids: Iterable[int], title: str, message: str,
                        notification_type: str, related_id: Optional[int] = None,
                        url: Optional[str] = None) -> int:
        """Returns how many users were reached."""
        reached = 0
        for user_id in user_ids:
            if await self.send_to_user(user_id, title, message, notification_type, related_id, url):
                reached += 1
        return reached

    async def heartbeat(self):
        """Ping all clients and close those that stopped answering."""
        now = time.monotonic()
        async with self._lock:
            clients = [c for group in self._clients.values() for c in group]

        expired: List[WebSocket] = []
        for client in clients:
            if now - client.last_ping > settings.WS_HEARTBEAT_TIMEOUT:
                expired.append(client.websocket)
                try:
                    await client.websocket.close(code=1000, reason="Heartbeat timeout")
                except Exception as e:
                    logger.debug(f"Closing timed-out socket failed: {e}")
                continue
            try:
                await client.websocket.send_text(json.dumps({"type": "ping"}))
            except Exception:
                expired.append(client.websocket)

        if expired:
            async with self._lock:
                for ws in expired:
                    self._remove(ws)
            logger.info(f"💓 Heartbeat removed {len(expired)} connections")
        return len(expired)

    @property
    def client_count(self) -> int:
        return sum(len(group) for group in self._clients.values())

    def user_client_count(self, user_id: int) -> int:
        return len(self._clients.get(user_id, []))

    def is_user_connected(self, user_id: int) -> bool:
        return self.user_client_count(user_id) > 0


manager = NotificationConnectionManager()
