"""
Tests for push delivery rules, subscription handling and the push endpoints.
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import requests
from pywebpush import WebPushException
from sqlalchemy import select

from ausflug.api.v1.endpoints import push as push_endpoints
from ausflug.models.notification import Notification, PushSubscription
from ausflug.models.user import UserSettings
from ausflug.services import push_service
from ausflug.services.push_service import DEFAULT_SETTINGS, PushNotificationService, build_payload


@pytest.fixture
def ws(monkeypatch):
    fake = MagicMock()
    fake.send_to_user = AsyncMock(return_value=False)
    monkeypatch.setattr(push_service, "ws_manager", fake)
    return fake


@pytest.fixture
def vapid(monkeypatch):
    monkeypatch.setattr(push_service.settings, "VAPID_PUBLIC_KEY", "public-key")
    monkeypatch.setattr(push_service.settings, "VAPID_PRIVATE_KEY", "private-key")


@pytest.fixture
def webpush(monkeypatch):
    mock = MagicMock()
    monkeypatch.setattr(push_service, "webpush", mock)
    return mock


async def add_subscription(db, user_id, endpoint, platform="web"):
    db.add(PushSubscription(user_id=user_id, endpoint=endpoint, auth="a", p256dh="p", platform=platform))
    await db.commit()


def gone(status):
    return WebPushException("push failed", response=SimpleNamespace(status_code=status))


class TestBuildPayload:
    def test_shape(self):
        payload = build_payload("Titel", "Text", "nearby_trip", 5, "/trips/5")
        assert payload == {
            "title": "Titel",
            "message": "Text",
            "icon": "/icons/icon-192.png",
            "badge": "/icons/icon-192.png",
            "tag": "nearby_trip-5",
            "data": {"type": "nearby_trip", "related_id": 5, "url": "/trips/5"},
        }


# ---------------------------------------------------------------------------
# Delivery rules
# ---------------------------------------------------------------------------

class TestSendToUser:
    async def test_disabled_notifications_store_nothing(self, db, user, ws, vapid, webpush):
        db.add(UserSettings(user_id=user.id, **{**DEFAULT_SETTINGS, "notifications_enabled": False}))
        await db.commit()

        sent = await PushNotificationService(db).send_to_user(user.id, build_payload("T", "M", "system"))
        assert sent is False
        assert (await db.execute(select(Notification))).scalars().all() == []
        ws.send_to_user.assert_not_awaited()
        webpush.assert_not_called()

    async def test_type_toggle_blocks_only_that_type(self, db, user, ws):
        db.add(UserSettings(user_id=user.id, **{**DEFAULT_SETTINGS, "friend_request_notifications": False}))
        await db.commit()
        service = PushNotificationService(db)

        assert await service.send_to_user(user.id, build_payload("T", "M", "friend_request"), "friend_request") is False
        await service.send_to_user(user.id, build_payload("T", "M", "nearby_trip"), "nearby_trip")

        types = (await db.execute(select(Notification.type))).scalars().all()
        assert types == ["nearby_trip"]

    async def test_missing_settings_use_defaults(self, db, user, ws):
        ws.send_to_user.return_value = True
        sent = await PushNotificationService(db).send_to_user(user.id, build_payload("Hallo", "Welt", "system", 3))
        assert sent is True
        stored = (await db.execute(select(Notification))).scalar_one()
        assert (stored.title, stored.related_id, stored.is_read) == ("Hallo", 3, False)

    async def test_stored_even_without_any_channel(self, db, user, ws, webpush):
        sent = await PushNotificationService(db).send_to_user(user.id, build_payload("T", "M", "system"))
        assert sent is False
        assert len((await db.execute(select(Notification))).scalars().all()) == 1
        webpush.assert_not_called()

    async def test_web_push_to_web_subscriptions_only(self, db, user, ws, vapid, webpush):
        await add_subscription(db, user.id, "https://push.example/web")
        await add_subscription(db, user.id, "capacitor-token", platform="capacitor")

        payload = build_payload("Titel", "Grüezi", "system")
        assert await PushNotificationService(db).send_to_user(user.id, payload) is True

        webpush.assert_called_once()
        kwargs = webpush.call_args.kwargs
        assert kwargs["subscription_info"]["endpoint"] == "https://push.example/web"
        assert kwargs["subscription_info"]["keys"] == {"auth": "a", "p256dh": "p"}
        assert kwargs["vapid_private_key"] == "private-key"
        assert json.loads(kwargs["data"])["message"] == "Grüezi"

    @pytest.mark.parametrize("status", [404, 410])
    async def test_expired_subscription_is_removed(self, db, user, ws, vapid, webpush, status):
        await add_subscription(db, user.id, "https://push.example/alt")
        webpush.side_effect = gone(status)

        sent = await PushNotificationService(db).send_to_user(user.id, build_payload("T", "M", "system"))
        assert sent is False
        assert (await db.execute(select(PushSubscription))).scalars().all() == []

    async def test_other_push_errors_keep_subscription(self, db, user, ws, vapid, webpush):
        await add_subscription(db, user.id, "https://push.example/a")
        await add_subscription(db, user.id, "https://push.example/b")
        webpush.side_effect = [gone(500), None]

        sent = await PushNotificationService(db).send_to_user(user.id, build_payload("T", "M", "system"))
        assert sent is True
        assert len((await db.execute(select(PushSubscription))).scalars().all()) == 2

    async def test_network_error_skips_to_next_subscription(self, db, user, ws, vapid, webpush):
        await add_subscription(db, user.id, "https://push.example/a")
        await add_subscription(db, user.id, "https://push.example/b")
        webpush.side_effect = [requests.exceptions.ConnectionError("offline"), None]

        sent = await PushNotificationService(db).send_to_user(user.id, build_payload("T", "M", "system"))
        assert sent is True
        assert webpush.call_count == 2
        assert len((await db.execute(select(PushSubscription))).scalars().all()) == 2


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------

class TestSubscriptions:
    async def test_subscribe_is_idempotent_and_creates_settings(self, db, user):
        service = PushNotificationService(db)
        assert await service.subscribe(user.id, "https://push.example/1", "a", "p", "Firefox") is True
        assert await service.subscribe(user.id, "https://push.example/1", "a2", "p2") is False

        subscription = (await db.execute(select(PushSubscription))).scalar_one()
        assert (subscription.auth, subscription.p256dh, subscription.user_agent) == ("a2", "p2", "Firefox")
        assert await service.get_settings_row(user.id) is not None

    async def test_unsubscribe_counts_rows(self, db, user):
        service = PushNotificationService(db)
        await service.subscribe(user.id, "https://push.example/1", "a", "p")
        assert await service.unsubscribe(user.id, "https://push.example/1") == 1
        assert await service.unsubscribe(user.id, "https://push.example/1") == 0

    async def test_capacitor_token(self, db, user):
        service = PushNotificationService(db)
        assert await service.store_capacitor_token(user.id, "tok", "ios") is True
        assert await service.store_capacitor_token(user.id, "tok", "android") is False
        row = (await db.execute(select(PushSubscription))).scalar_one()
        assert (row.platform, row.device_platform) == ("capacitor", "android")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

class TestPushEndpoints:
    async def test_vapid_public_key(self, client, vapid):
        resp = await client.get("/api/v1/push/vapid-public-key")
        assert resp.json() == {"public_key": "public-key"}

    async def test_subscribe_stores_user_agent(self, client, db, user_headers):
        body = {"endpoint": "https://fcm.googleapis.com/fcm/send/abc", "keys": {"auth": "a", "p256dh": "p"}}
        headers = {**user_headers, "User-Agent": "TestBrowser/1.0"}
        first = await client.post("/api/v1/push/subscribe", headers=headers, json=body)
        second = await client.post("/api/v1/push/subscribe", headers=headers, json=body)
        assert first.json()["is_new"] is True
        assert second.json()["is_new"] is False
        row = (await db.execute(select(PushSubscription))).scalar_one()
        assert row.user_agent == "TestBrowser/1.0"

    async def test_subscribe_requires_keys(self, client, user_headers):
        resp = await client.post("/api/v1/push/subscribe", headers=user_headers, json={
            "endpoint": "https://fcm.googleapis.com/fcm/send/abc", "keys": {"auth": ""},
        })
        assert resp.status_code == 400

    async def test_settings_roundtrip(self, client, user_headers):
        defaults = (await client.get("/api/v1/push/settings", headers=user_headers)).json()
        assert defaults["nearby_trip_distance"] == 5000

        resp = await client.put("/api/v1/push/settings", headers=user_headers, json={
            "nearby_trip_distance": 2000, "friend_request_notifications": False,
        })
        assert resp.json()["nearby_trip_distance"] == 2000
        assert resp.json()["friend_request_notifications"] is False
        assert resp.json()["notifications_enabled"] is True

    async def test_distance_bounds(self, client, user_headers):
        resp = await client.put("/api/v1/push/settings", headers=user_headers, json={"nearby_trip_distance": 50})
        assert resp.status_code == 400

    async def test_location_without_settings_is_refused(self, client, user_headers, monkeypatch):
        scheduled = MagicMock()
        monkeypatch.setattr(push_endpoints, "schedule_nearby_check", scheduled)
        resp = await client.post("/api/v1/push/location", headers=user_headers, json={"latitude": 47.0, "longitude": 8.0})
        assert resp.json()["success"] is False
        scheduled.assert_not_called()

    async def test_location_schedules_check(self, client, user, user_headers, monkeypatch):
        scheduled = MagicMock()
        monkeypatch.setattr(push_endpoints, "schedule_nearby_check", scheduled)
        await client.put("/api/v1/push/settings", headers=user_headers, json={"location_tracking_enabled": True})

        resp = await client.post("/api/v1/push/location", headers=user_headers, json={
            "latitude": 47.0, "longitude": 8.0, "accuracy": 12.5,
        })
        assert resp.json() == {"success": True}
        scheduled.assert_called_once_with(user.id)

    def test_schedule_failure_is_swallowed(self, monkeypatch):
        from ausflug.tasks import notification_tasks
        monkeypatch.setattr(notification_tasks.check_nearby_trips_task, "delay", MagicMock(side_effect=OSError("no broker")))
        assert push_endpoints.schedule_nearby_check(1) is False
