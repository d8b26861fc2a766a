"""
Tests for iCalendar and text export of day plans.
"""

from datetime import datetime
from types import SimpleNamespace

import pytest

from ausflug.services.export_service import (
    build_plan_ics,
    build_plan_text,
    escape_ics_text,
    export_filename,
    item_schedule,
)

NOW = datetime(2026, 6, 15, 8, 30)


def make_plan(**overrides):
    values = dict(
        id=7, title="Zürich, Bern; Basel", description=None,
        start_date=datetime(2026, 7, 1), end_date=datetime(2026, 7, 3),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def make_item(item_id=1, day_number=1, start_time=None, end_time=None, notes=None, trip=None):
    trip = trip or SimpleNamespace(title="Zoo Zürich", destination="Zürich", description="Tiere")
    return SimpleNamespace(
        id=item_id, day_number=day_number, start_time=start_time, end_time=end_time, notes=notes, trip=trip,
    )


class TestIcs:
    def test_escaping(self):
        assert escape_ics_text("a,b;c\\d\ne") == "a\\,b\\;c\\\\d\\ne"
        assert escape_ics_text(None) == ""

    def test_default_time_and_duration(self):
        start, end = item_schedule(make_plan(), make_item(day_number=2))
        assert start == datetime(2026, 7, 2, 9, 0)
        assert end == datetime(2026, 7, 2, 11, 0)

    def test_end_before_start_falls_back_to_duration(self):
        start, end = item_schedule(make_plan(), make_item(start_time="15:00", end_time="14:00"))
        assert end == datetime(2026, 7, 1, 17, 0)

    def test_calendar_structure(self):
        ics = build_plan_ics(make_plan(), [make_item(start_time="10:00", end_time="12:30", notes="Eingang Nord")], now=NOW)
        lines = ics.split("\r\n")
        assert lines[0] == "BEGIN:VCALENDAR"
        assert "X-WR-CALNAME:Zürich\\, Bern\\; Basel" in lines
        assert "UID:plan-7-1@ausflugfinder.ch" in lines
        assert "DTSTART;TZID=Europe/Zurich:20260701T100000" in lines
        assert "DTEND;TZID=Europe/Zurich:20260701T123000" in lines
        assert "DTSTAMP:20260615T083000Z" in lines
        assert "DESCRIPTION:Eingang Nord" in lines
        assert ics.endswith("END:VCALENDAR\r\n")

    def test_description_falls_back_to_trip(self):
        ics = build_plan_ics(make_plan(), [make_item()], now=NOW)
        assert "DESCRIPTION:Tiere" in ics

    def test_empty_plan_has_no_events(self):
        assert "BEGIN:VEVENT" not in build_plan_ics(make_plan(), [], now=NOW)


class TestText:
    def test_text_lists_items(self):
        text = build_plan_text(
            make_plan(description="Drei Tage Städte"),
            [make_item(start_time="10:00", notes="Tickets online"), make_item(item_id=2, day_number=2)],
            now=NOW,
        )
        assert "Zeitraum: 01.07.2026 - 03.07.2026" in text
        assert "Beschreibung: Drei Tage Städte" in text
        assert "1. Zoo Zürich (Tag 1)" in text
        assert "   Zeit: 10:00 - --:--" in text
        assert "   Notizen: Tickets online" in text
        assert "2. Zoo Zürich (Tag 2)" in text
        assert text.endswith("Generiert am: 15.06.2026 08:30")

    def test_empty_plan(self):
        assert "Keine Ausflüge geplant." in build_plan_text(make_plan(), [], now=NOW)

    @pytest.mark.parametrize("title, expected", [
        ("Sommer 2026!", "sommer_2026.ics"),
        ("???", "tagesplan.ics"),
    ])
    def test_filename(self, title, expected):
        assert export_filename(make_plan(title=title), "ics") == expected


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

class TestExportEndpoints:
    @pytest.fixture
    async def plan_with_item(self, client, user_headers, trip_payload):
        trip = (await client.post("/api/v1/trips/", headers=user_headers, json=trip_payload)).json()
        plan = (await client.post("/api/v1/day-plans/", headers=user_headers, json={
            "title": "Rheinfall Tag", "start_date": "2026-07-01T00:00:00", "end_date": "2026-07-01T00:00:00",
        })).json()
        await client.post(f"/api/v1/day-plans/{plan['id']}/items", headers=user_headers, json={
            "trip_id": trip["id"], "start_time": "09:30",
        })
        return plan

    async def test_ical_download(self, client, user_headers, plan_with_item):
        resp = await client.get(f"/api/v1/export/day-plans/{plan_with_item['id']}/ical", headers=user_headers)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/calendar")
        assert resp.headers["content-disposition"] == 'attachment; filename="rheinfall_tag.ics"'
        assert "SUMMARY:Rheinfall Schaffhausen" in resp.text

    async def test_text_as_json(self, client, user_headers, plan_with_item):
        resp = await client.get(
            f"/api/v1/export/day-plans/{plan_with_item['id']}/text", headers=user_headers, params={"as_json": "true"},
        )
        assert "Titel: Rheinfall Tag" in resp.json()["content"]

    async def test_draft_not_exported_for_strangers(self, client, other_headers, plan_with_item):
        resp = await client.get(f"/api/v1/export/day-plans/{plan_with_item['id']}/ical", headers=other_headers)
        assert resp.status_code == 404
