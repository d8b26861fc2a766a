"""
Tests for the WebSocket connection registry.
"""

import json
import time
from unittest.mock import AsyncMock

import pytest

from ausflug.core import websocket as ws_module
from ausflug.core.websocket import NotificationConnectionManager


def fake_socket():
    socket = AsyncMock()
    socket.send_text = AsyncMock()
    return socket


@pytest.fixture
def manager():
    return NotificationConnectionManager()


class TestConnections:
    async def test_connect_and_disconnect(self, manager):
        first, second = fake_socket(), fake_socket()
        await manager.connect(first, 1)
        await manager.connect(second, 1)

        first.accept.assert_awaited_once()
        assert manager.user_client_count(1) == 2
        assert manager.client_count == 2

        await manager.disconnect(first)
        assert manager.user_client_count(1) == 1
        await manager.disconnect(second)
        assert manager.is_user_connected(1) is False

    async def test_send_reaches_every_socket_of_user(self, manager):
        mine, also_mine, theirs = fake_socket(), fake_socket(), fake_socket()
        await manager.connect(mine, 1)
        await manager.connect(also_mine, 1)
        await manager.connect(theirs, 2)

        assert await manager.send_to_user(1, "Titel", "Nachricht", "system", 4, "/trips/4") is True

        message = json.loads(mine.send_text.await_args.args[0])
        assert message["type"] == "notification"
        assert message["data"]["title"] == "Titel"
        assert message["data"]["notification_type"] == "system"
        assert message["data"]["related_id"] == 4
        also_mine.send_text.assert_awaited_once()
        theirs.send_text.assert_not_awaited()

    async def test_send_without_connection(self, manager):
        assert await manager.send_to_user(9, "T", "M", "system") is False

    async def test_failed_socket_is_dropped(self, manager):
        broken, healthy = fake_socket(), fake_socket()
        broken.send_text.side_effect = RuntimeError("closed")
        await manager.connect(broken, 1)
        await manager.connect(healthy, 1)

        assert await manager.send_to_user(1, "T", "M", "system") is True
        assert manager.user_client_count(1) == 1

    async def test_broadcast_counts_reached_users(self, manager):
        await manager.connect(fake_socket(), 1)
        await manager.connect(fake_socket(), 2)
        assert await manager.broadcast([1, 2, 3], "T", "M", "new_trip") == 2


class TestHeartbeat:
    async def test_ping_is_answered_with_pong(self, manager):
        socket = fake_socket()
        await manager.connect(socket, 1)
        await manager.handle_message(socket, json.dumps({"type": "ping"}))
        socket.send_text.assert_awaited_once_with(json.dumps({"type": "pong"}))

    async def test_garbage_is_ignored(self, manager):
        socket = fake_socket()
        await manager.connect(socket, 1)
        await manager.handle_message(socket, "kein json")
        await manager.handle_message(socket, json.dumps({"type": "hello"}))
        socket.send_text.assert_not_awaited()

    async def test_heartbeat_closes_silent_clients(self, manager, monkeypatch):
        silent, alive = fake_socket(), fake_socket()
        await manager.connect(silent, 1)
        await manager.connect(alive, 2)

        later = time.monotonic() + ws_module.settings.WS_HEARTBEAT_TIMEOUT + 5
        await manager.handle_message(alive, json.dumps({"type": "ping"}))
        monkeypatch.setattr(ws_module.time, "monotonic", lambda: later)
        await manager.touch(alive)

        assert await manager.heartbeat() == 1
        silent.close.assert_awaited_once()
        assert manager.is_user_connected(1) is False
        assert manager.is_user_connected(2) is True
        assert json.loads(alive.send_text.await_args.args[0]) == {"type": "ping"}
