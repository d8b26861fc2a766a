"""
Tests for trip CRUD, visibility, search, statistics and ratings.
"""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from ausflug.models.trip import Trip, TripAttribute, TripPhoto
from ausflug.services import trip_service
from ausflug.services.trip_service import TripService

WHEN = datetime(2026, 5, 1, 10, 0)


async def create_trip(client, headers, payload, **overrides):
    body = {**payload, **overrides}
    resp = await client.post("/api/v1/trips/", headers=headers, json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestTripCrud:
    async def test_create_and_fetch(self, client, user, user_headers, trip_payload):
        trip = await create_trip(client, user_headers, trip_payload)
        assert trip["user_id"] == user.id
        assert trip["status"] == "planned"
        assert trip["is_favorite"] is False

        resp = await client.get(f"/api/v1/trips/{trip['id']}")
        assert resp.status_code == 200
        assert resp.json()["title"] == "Rheinfall Schaffhausen"

    async def test_create_requires_login(self, client, trip_payload):
        resp = await client.post("/api/v1/trips/", json=trip_payload)
        assert resp.status_code == 401

    async def test_end_before_start_is_rejected(self, client, user_headers, trip_payload):
        resp = await client.post("/api/v1/trips/", headers=user_headers, json={
            **trip_payload, "start_date": "2026-07-02T09:00:00", "end_date": "2026-07-01T09:00:00",
        })
        assert resp.status_code == 400

    async def test_unknown_cost_level_is_rejected(self, client, user_headers, trip_payload):
        resp = await client.post("/api/v1/trips/", headers=user_headers, json={**trip_payload, "cost": "cheap"})
        assert resp.status_code == 400

    async def test_private_trip_hidden_from_others(self, client, user_headers, other_headers, trip_payload):
        trip = await create_trip(client, user_headers, trip_payload, is_public=False)

        anonymous = await client.get(f"/api/v1/trips/{trip['id']}")
        assert anonymous.status_code == 404
        stranger = await client.get(f"/api/v1/trips/{trip['id']}", headers=other_headers)
        assert stranger.status_code == 404
        owner = await client.get(f"/api/v1/trips/{trip['id']}", headers=user_headers)
        assert owner.status_code == 200

    async def test_only_owner_or_admin_may_update(self, client, user_headers, other_headers, admin_headers, trip_payload):
        trip = await create_trip(client, user_headers, trip_payload)

        denied = await client.put(f"/api/v1/trips/{trip['id']}", headers=other_headers, json={"title": "Gekapert"})
        assert denied.status_code == 403

        by_admin = await client.put(f"/api/v1/trips/{trip['id']}", headers=admin_headers, json={"title": "Rheinfall"})
        assert by_admin.status_code == 200
        assert by_admin.json()["title"] == "Rheinfall"

    async def test_update_rejects_end_before_existing_start(self, client, user_headers, trip_payload):
        trip = await create_trip(client, user_headers, trip_payload)
        resp = await client.put(f"/api/v1/trips/{trip['id']}", headers=user_headers, json={
            "end_date": "2026-06-01T09:00:00",
        })
        assert resp.status_code == 400

    async def test_delete_removes_children(self, client, db, user_headers, trip_payload):
        trip = await create_trip(client, user_headers, trip_payload)
        db.add_all([
            TripPhoto(trip_id=trip["id"], photo_url="https://example.ch/a.jpg", is_primary=True),
            TripAttribute(trip_id=trip["id"], attribute="kinderwagen"),
        ])
        await db.commit()

        resp = await client.delete(f"/api/v1/trips/{trip['id']}", headers=user_headers)
        assert resp.status_code == 200

        assert (await db.execute(select(Trip).where(Trip.id == trip["id"]))).scalar_one_or_none() is None
        assert (await db.execute(select(TripPhoto))).scalars().all() == []
        assert (await db.execute(select(TripAttribute))).scalars().all() == []

    async def test_get_missing_trip(self, client):
        resp = await client.get("/api/v1/trips/999")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Ausflug mit ID 999 nicht gefunden"


# ---------------------------------------------------------------------------
# Toggles
# ---------------------------------------------------------------------------

class TestToggles:
    async def test_favorite_flips_each_call(self, client, user_headers, trip_payload):
        trip = await create_trip(client, user_headers, trip_payload)
        first = await client.post(f"/api/v1/trips/{trip['id']}/favorite", headers=user_headers)
        assert first.json() == {"is_favorite": True}
        second = await client.post(f"/api/v1/trips/{trip['id']}/favorite", headers=user_headers)
        assert second.json() == {"is_favorite": False}

    async def test_done_toggle_persists(self, client, user_headers, trip_payload):
        trip = await create_trip(client, user_headers, trip_payload)
        await client.post(f"/api/v1/trips/{trip['id']}/done", headers=user_headers)
        resp = await client.get(f"/api/v1/trips/{trip['id']}")
        assert resp.json()["is_done"] is True

    async def test_toggle_by_stranger_is_forbidden(self, client, user_headers, other_headers, trip_payload):
        trip = await create_trip(client, user_headers, trip_payload)
        resp = await client.post(f"/api/v1/trips/{trip['id']}/favorite", headers=other_headers)
        assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Listing, search and statistics
# ---------------------------------------------------------------------------

class TestListing:
    async def test_public_and_mine(self, client, user_headers, other_headers, trip_payload):
        await create_trip(client, user_headers, trip_payload, title="Öffentlich")
        await create_trip(client, user_headers, trip_payload, title="Privat", is_public=False)
        await create_trip(client, other_headers, trip_payload, title="Fremd")

        public = await client.get("/api/v1/trips/public")
        assert {t["title"] for t in public.json()} == {"Öffentlich", "Fremd"}

        mine = await client.get("/api/v1/trips/mine", headers=user_headers)
        assert {t["title"] for t in mine.json()} == {"Öffentlich", "Privat"}

    async def test_lists_are_oldest_first(self, client, user_headers, trip_payload):
        for title in ("first", "second", "third"):
            await create_trip(client, user_headers, trip_payload, title=title)

        for path in ("/api/v1/trips/", "/api/v1/trips/public", "/api/v1/trips/mine"):
            resp = await client.get(path, headers=user_headers)
            assert [t["title"] for t in resp.json()] == ["first", "second", "third"]

    async def test_search_by_keyword_and_cost(self, client, user_headers, trip_payload):
        await create_trip(client, user_headers, trip_payload, title="Zoo Zürich", cost="medium")
        await create_trip(client, user_headers, trip_payload, title="Uetliberg", cost="free")

        resp = await client.get("/api/v1/trips/search", params={"keyword": "zoo"})
        body = resp.json()
        assert body["total"] == 1
        assert body["trips"][0]["title"] == "Zoo Zürich"

        resp = await client.get("/api/v1/trips/search", params={"cost": "free"})
        assert [t["title"] for t in resp.json()["trips"]] == ["Uetliberg"]

    async def test_search_requires_all_attributes(self, client, db, user_headers, trip_payload):
        both = await create_trip(client, user_headers, trip_payload, title="Beides")
        one = await create_trip(client, user_headers, trip_payload, title="Eines")
        db.add_all([
            TripAttribute(trip_id=both["id"], attribute="kinderwagen"),
            TripAttribute(trip_id=both["id"], attribute="grillstelle"),
            TripAttribute(trip_id=one["id"], attribute="kinderwagen"),
        ])
        await db.commit()

        resp = await client.get(
            "/api/v1/trips/search", params=[("attributes", "kinderwagen"), ("attributes", "grillstelle")],
        )
        assert resp.json()["total"] == 1
        assert resp.json()["trips"][0]["title"] == "Beides"

    async def test_search_limit_is_capped(self, client):
        resp = await client.get("/api/v1/trips/search", params={"limit": 101})
        assert resp.status_code == 400

    async def test_search_paginates_but_counts_everything(self, client, user_headers, trip_payload):
        for i in range(3):
            await create_trip(client, user_headers, trip_payload, title=f"Ausflug {i}")
        resp = await client.get("/api/v1/trips/search", params={"limit": 2})
        body = resp.json()
        assert body["total"] == 3
        assert len(body["trips"]) == 2

    async def test_statistics_count_public_trips_only(self, client, user_headers, trip_payload):
        await create_trip(client, user_headers, trip_payload, cost="free", category="Museen")
        await create_trip(client, user_headers, trip_payload, cost="low", category="Natur & Landschaft")
        await create_trip(client, user_headers, trip_payload, cost="free", category="Zoos", is_public=False)

        resp = await client.get("/api/v1/trips/statistics")
        assert resp.json() == {"total_activities": 2, "free_activities": 1, "total_categories": 2}


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------

class TestRatings:
    async def test_rating_is_upserted_per_user(self, client, user_headers, other_headers, trip_payload):
        trip = await create_trip(client, user_headers, trip_payload)
        url = f"/api/v1/trips/{trip['id']}/ratings"

        await client.post(url, headers=user_headers, json={"score": 5})
        await client.post(url, headers=other_headers, json={"score": 2})
        resp = await client.post(url, headers=user_headers, json={"score": 4, "comment": "Schön"})
        assert resp.json() == {"average": 3.0, "count": 2}

        ratings = await client.get(url)
        assert len(ratings.json()) == 2
        assert {r["user_name"] for r in ratings.json()} == {"Anna Muster", "Beat Beispiel"}

    async def test_score_out_of_range(self, client, user_headers, trip_payload):
        trip = await create_trip(client, user_headers, trip_payload)
        resp = await client.post(f"/api/v1/trips/{trip['id']}/ratings", headers=user_headers, json={"score": 6})
        assert resp.status_code == 400

    async def test_summary_of_unrated_trip(self, client, user_headers, trip_payload):
        trip = await create_trip(client, user_headers, trip_payload)
        resp = await client.get(f"/api/v1/trips/{trip['id']}/ratings/summary")
        assert resp.json() == {"average": 0.0, "count": 0}


# ---------------------------------------------------------------------------
# Geocoding on create and update
# ---------------------------------------------------------------------------

class TestTripGeocoding:
    @pytest.fixture
    def fake_geocode(self, monkeypatch):
        mock = AsyncMock(return_value=(46.9481, 7.4474))
        monkeypatch.setattr(trip_service, "geocode_address", mock)
        return mock

    async def test_missing_coordinates_are_geocoded(self, client, user_headers, trip_payload, fake_geocode):
        payload = {k: v for k, v in trip_payload.items() if k not in ("latitude", "longitude")}
        trip = await create_trip(client, user_headers, payload, address="Bundesplatz 3, Bern")
        assert (trip["latitude"], trip["longitude"]) == (46.9481, 7.4474)
        fake_geocode.assert_awaited_once_with("Bundesplatz 3, Bern")

    async def test_given_coordinates_are_kept(self, client, user_headers, trip_payload, fake_geocode):
        trip = await create_trip(client, user_headers, trip_payload)
        assert trip["latitude"] == 47.6779
        fake_geocode.assert_not_awaited()

    async def test_changed_address_triggers_new_lookup(self, client, user_headers, trip_payload, fake_geocode):
        trip = await create_trip(client, user_headers, trip_payload)
        resp = await client.put(f"/api/v1/trips/{trip['id']}", headers=user_headers, json={"address": "Bundesplatz 3, Bern"})
        assert resp.json()["latitude"] == 46.9481

    async def test_geocode_trips_counts_failures(self, db, user, fake_geocode):
        fake_geocode.side_effect = [(47.0, 8.0), None]
        for title in ("A", "B"):
            db.add(Trip(
                user_id=user.id, title=title, destination=title,
                start_date=WHEN, end_date=WHEN,
            ))
        await db.commit()

        result = await TripService(db).geocode_trips()
        assert result == {"updated": 1, "failed": 1}
