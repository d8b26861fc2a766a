"""
Tests for photos, videos, journal, attributes, comments and participants.
"""

import base64
from pathlib import Path

import pytest

from ausflug.core.errors import ValidationError
from ausflug.services import storage_service
from ausflug.services.trip_content_service import parse_video_url

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def png_data_url(data: bytes = PNG_BYTES, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode()}"


@pytest.fixture
async def trip(client, user_headers, trip_payload):
    resp = await client.post("/api/v1/trips/", headers=user_headers, json=trip_payload)
    return resp.json()


# ---------------------------------------------------------------------------
# Video URL parsing
# ---------------------------------------------------------------------------

class TestParseVideoUrl:
    @pytest.mark.parametrize("url, expected", [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", ("youtube", "dQw4w9WgXcQ")),
        ("https://www.youtube.com/watch?list=abc&v=dQw4w9WgXcQ", ("youtube", "dQw4w9WgXcQ")),
        ("https://youtu.be/dQw4w9WgXcQ", ("youtube", "dQw4w9WgXcQ")),
        ("https://www.tiktok.com/@wanderlust.ch/video/7234567890123456789", ("tiktok", "7234567890123456789")),
        ("https://vm.tiktok.com/ZMabc123", ("tiktok", "ZMabc123")),
    ])
    def test_known_platforms(self, url, expected):
        assert parse_video_url(url) == expected

    def test_other_hosts_are_rejected(self):
        assert parse_video_url("https://vimeo.com/12345") is None


# ---------------------------------------------------------------------------
# Image storage
# ---------------------------------------------------------------------------

class TestStorage:
    def test_base64_png_is_written(self):
        stored = storage_service.save_base64_image(png_data_url(), "Mein Foto.PNG")
        assert stored["path"].startswith("/uploads/images/")
        assert stored["filename"].endswith("-mein_foto.png")
        assert (storage_service.images_dir() / stored["filename"]).read_bytes() == PNG_BYTES

    def test_signature_must_match_mime(self):
        with pytest.raises(ValidationError):
            storage_service.save_base64_image(png_data_url(b"GIF89a" + b"\x00" * 10, "image/png"))

    def test_disallowed_type(self):
        with pytest.raises(ValidationError):
            storage_service.save_base64_image(png_data_url(b"<svg/>", "image/svg+xml"))

    def test_not_a_data_url(self):
        with pytest.raises(ValidationError):
            storage_service.save_base64_image("https://example.ch/bild.png")

    def test_too_large(self, monkeypatch):
        monkeypatch.setattr(storage_service.settings, "MAX_IMAGE_SIZE", 16)
        with pytest.raises(ValidationError):
            storage_service.validate_image(PNG_BYTES, "image/png")

    def test_sanitize_without_name(self):
        name = storage_service.sanitize_filename(None, "image/webp")
        assert name.startswith("image-") and name.endswith(".webp")

    def test_delete_ignores_path_components(self):
        stored = storage_service.save_base64_image(png_data_url())
        assert storage_service.delete_image(f"../../{stored['filename']}") is True
        assert not (storage_service.images_dir() / stored["filename"]).exists()

    def test_filename_from_url(self):
        assert storage_service.filename_from_url("/uploads/images/a.png") == "a.png"
        assert storage_service.filename_from_url("https://example.ch/a.png") is None


# ---------------------------------------------------------------------------
# Photos
# ---------------------------------------------------------------------------

class TestPhotos:
    async def test_primary_photo_is_unique_and_sets_image_url(self, client, user_headers, trip):
        url = f"/api/v1/trips/{trip['id']}/photos"
        first = await client.post(url, headers=user_headers, json={
            "photo_url": "https://example.ch/1.jpg", "is_primary": True,
        })
        second = await client.post(url, headers=user_headers, json={
            "photo_url": "https://example.ch/2.jpg", "is_primary": True,
        })
        assert first.status_code == second.status_code == 201

        photos = (await client.get(url)).json()
        assert [p["is_primary"] for p in photos] == [False, True]

        fetched = (await client.get(f"/api/v1/trips/{trip['id']}")).json()
        assert fetched["image_url"] == "https://example.ch/2.jpg"

        resp = await client.post(f"{url}/{first.json()['id']}/primary", headers=user_headers)
        assert resp.json()["is_primary"] is True
        fetched = (await client.get(f"/api/v1/trips/{trip['id']}")).json()
        assert fetched["image_url"] == "https://example.ch/1.jpg"

    async def test_invalid_photo_url(self, client, user_headers, trip):
        resp = await client.post(f"/api/v1/trips/{trip['id']}/photos", headers=user_headers, json={
            "photo_url": "javascript:alert(1)",
        })
        assert resp.status_code == 400

    async def test_base64_upload_and_delete_removes_file(self, client, user_headers, trip):
        resp = await client.post(f"/api/v1/trips/{trip['id']}/photos/base64", headers=user_headers, json={
            "data": png_data_url(), "filename": "aussicht.png",
        })
        assert resp.status_code == 201
        photo = resp.json()
        stored = Path(storage_service.images_dir()) / storage_service.filename_from_url(photo["photo_url"])
        assert stored.exists()

        resp = await client.delete(f"/api/v1/trips/{trip['id']}/photos/{photo['id']}", headers=user_headers)
        assert resp.status_code == 200
        assert not stored.exists()

    async def test_multipart_upload(self, client, user_headers, trip):
        resp = await client.post(
            f"/api/v1/trips/{trip['id']}/photos/upload",
            headers=user_headers,
            files={"file": ("see.png", PNG_BYTES, "image/png")},
            data={"caption": "Am See", "is_primary": "true"},
        )
        assert resp.status_code == 201
        assert resp.json()["caption"] == "Am See"
        assert resp.json()["is_primary"] is True

    async def test_stranger_cannot_add_photo(self, client, other_headers, trip):
        resp = await client.post(f"/api/v1/trips/{trip['id']}/photos", headers=other_headers, json={
            "photo_url": "https://example.ch/x.jpg",
        })
        assert resp.status_code == 403

    async def test_delete_photo_of_other_trip_is_404(self, client, user_headers, trip, trip_payload):
        other = (await client.post("/api/v1/trips/", headers=user_headers, json=trip_payload)).json()
        photo = (await client.post(f"/api/v1/trips/{other['id']}/photos", headers=user_headers, json={
            "photo_url": "https://example.ch/x.jpg",
        })).json()
        resp = await client.delete(f"/api/v1/trips/{trip['id']}/photos/{photo['id']}", headers=user_headers)
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Videos and journal
# ---------------------------------------------------------------------------

class TestVideosAndJournal:
    async def test_add_video_stores_platform(self, client, user_headers, trip):
        resp = await client.post(f"/api/v1/trips/{trip['id']}/videos", headers=user_headers, json={
            "url": "https://youtu.be/dQw4w9WgXcQ", "title": "Drohnenflug",
        })
        assert resp.status_code == 201
        assert resp.json()["platform"] == "youtube"
        assert resp.json()["video_id"] == "dQw4w9WgXcQ"

    async def test_unsupported_video_url(self, client, user_headers, trip):
        resp = await client.post(f"/api/v1/trips/{trip['id']}/videos", headers=user_headers, json={
            "url": "https://vimeo.com/1",
        })
        assert resp.status_code == 400
        assert resp.json()["message"] == "Ungültige YouTube oder TikTok URL"

    async def test_journal_sorted_newest_first(self, client, user_headers, trip):
        url = f"/api/v1/trips/{trip['id']}/journal"
        await client.post(url, headers=user_headers, json={"content": "Anreise", "entry_date": "2026-07-01T08:00:00"})
        await client.post(url, headers=user_headers, json={
            "content": "Gipfel", "entry_date": "2026-07-02T12:00:00Z", "mood": "excited",
        })
        entries = (await client.get(url)).json()
        assert [e["content"] for e in entries] == ["Gipfel", "Anreise"]

    async def test_journal_rejects_blank_content_and_unknown_mood(self, client, user_headers, trip):
        url = f"/api/v1/trips/{trip['id']}/journal"
        blank = await client.post(url, headers=user_headers, json={"content": "   ", "entry_date": "2026-07-01T08:00:00"})
        assert blank.status_code == 400
        mood = await client.post(url, headers=user_headers, json={
            "content": "Hallo", "entry_date": "2026-07-01T08:00:00", "mood": "grumpy",
        })
        assert mood.status_code == 400

    async def test_journal_patch_keeps_untouched_fields(self, client, user_headers, trip):
        url = f"/api/v1/trips/{trip['id']}/journal"
        entry = (await client.post(url, headers=user_headers, json={
            "content": "Anreise", "entry_date": "2026-07-01T08:00:00", "mood": "happy",
        })).json()
        resp = await client.patch(f"{url}/{entry['id']}", headers=user_headers, json={"mood": "tired"})
        assert resp.json()["content"] == "Anreise"
        assert resp.json()["mood"] == "tired"


# ---------------------------------------------------------------------------
# Attributes, comments and participants
# ---------------------------------------------------------------------------

class TestSocialContent:
    async def test_attribute_is_added_once(self, client, user_headers, trip):
        url = f"/api/v1/trips/{trip['id']}/attributes"
        first = await client.post(url, headers=user_headers, json={"attribute": "kinderwagen"})
        second = await client.post(url, headers=user_headers, json={"attribute": " kinderwagen "})
        assert first.json()["id"] == second.json()["id"]
        assert len((await client.get(url)).json()) == 1

    async def test_comment_by_other_user_on_public_trip(self, client, user_headers, other_headers, trip):
        url = f"/api/v1/trips/{trip['id']}/comments"
        resp = await client.post(url, headers=other_headers, json={"content": "Super Tipp!"})
        assert resp.status_code == 201
        assert resp.json()["user_name"] == "Beat Beispiel"

        # the trip owner may not delete someone else's comment
        denied = await client.delete(f"{url}/{resp.json()['id']}", headers=user_headers)
        assert denied.status_code == 403
        allowed = await client.delete(f"{url}/{resp.json()['id']}", headers=other_headers)
        assert allowed.status_code == 200

    async def test_comments_are_oldest_first(self, client, user_headers, other_headers, trip):
        url = f"/api/v1/trips/{trip['id']}/comments"
        await client.post(url, headers=other_headers, json={"content": "Erster"})
        await client.post(url, headers=user_headers, json={"content": "Zweiter"})
        assert [c["content"] for c in (await client.get(url)).json()] == ["Erster", "Zweiter"]

    async def test_participant_status_update(self, client, user_headers, trip):
        url = f"/api/v1/trips/{trip['id']}/participants"
        created = (await client.post(url, headers=user_headers, json={"name": "Carla"})).json()
        assert created["status"] == "pending"

        resp = await client.patch(f"{url}/{created['id']}", headers=user_headers, json={"status": "confirmed"})
        assert resp.json()["status"] == "confirmed"

        bad = await client.patch(f"{url}/{created['id']}", headers=user_headers, json={"status": "vielleicht"})
        assert bad.status_code == 400
