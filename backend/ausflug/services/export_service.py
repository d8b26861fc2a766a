"""
Day plan export to iCalendar and plain text
"""

from datetime import datetime, timedelta
from typing import List, Optional

from ausflug.core.config import settings
from ausflug.models.day_plan import DayPlan, DayPlanItem

DEFAULT_START_TIME = "09:00"
DEFAULT_EVENT_DURATION = timedelta(hours=2)


def escape_ics_text(value: Optional[str]) -> str:
    if not value:
        return ""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def _format_ics_datetime(dt: datetime) -> str:
    return dt.strftime("%Y%m%dT%H%M%S")


def _at_time(day: datetime, hhmm: str) -> datetime:
    hour, minute = (int(part) for part in hhmm.split(":"))
    return datetime(day.year, day.month, day.day, hour, minute)


def item_schedule(plan: DayPlan, item: DayPlanItem) -> tuple:
    """Start and end of an item: plan start date shifted by day_number, 2h default length"""
    day = plan.start_date + timedelta(days=max(item.day_number, 1) - 1)
    start = _at_time(day, item.start_time or DEFAULT_START_TIME)
    end = _at_time(day, item.end_time) if item.end_time else start + DEFAULT_EVENT_DURATION
    if end <= start:
        end = start + DEFAULT_EVENT_DURATION
    return start, end


def build_plan_ics(plan: DayPlan, items: List[DayPlanItem], now: Optional[datetime] = None) -> str:
    """Generate an ICS calendar with one event per plan item."""
    now = now or datetime.utcnow()
    tz = settings.WEATHER_TIMEZONE
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Ausflug Manager//DE",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{escape_ics_text(plan.title)}",
        f"X-WR-TIMEZONE:{tz}",
    ]
    for item in items:
        trip = item.trip
        start, end = item_schedule(plan, item)
        description = item.notes or (trip.description if trip else None)
        lines.extend([
            "BEGIN:VEVENT",
            f"UID:plan-{plan.id}-{item.id}@ausflugfinder.ch",
            f"DTSTAMP:{now.strftime('%Y%m%dT%H%M%SZ')}",
            f"DTSTART;TZID={tz}:{_format_ics_datetime(start)}",
            f"DTEND;TZID={tz}:{_format_ics_datetime(end)}",
            f"SUMMARY:{escape_ics_text(trip.title if trip else 'Ausflug')}",
            f"LOCATION:{escape_ics_text(trip.destination if trip else '')}",
            f"DESCRIPTION:{escape_ics_text(description)}",
            "STATUS:CONFIRMED",
            "SEQUENCE:0",
            "END:VEVENT",
        ])
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


def _de_date(dt: datetime) -> str:
    return dt.strftime("%d.%m.%Y")


def build_plan_text(plan: DayPlan, items: List[DayPlanItem], now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    lines = [
        "AUSFLUG MANAGER - PLANUNG",
        "=" * 40,
        "",
        f"Titel: {plan.title}",
        f"Zeitraum: {_de_date(plan.start_date)} - {_de_date(plan.end_date)}",
    ]
    if plan.description:
        lines.append(f"Beschreibung: {plan.description}")
    lines.extend(["", "=== GEPLANTE AUSFLÜGE ===", ""])

    if not items:
        lines.append("Keine Ausflüge geplant.")
    for index, item in enumerate(items, start=1):
        trip = item.trip
        lines.append(f"{index}. {trip.title if trip else 'Ausflug'} (Tag {item.day_number})")
        if trip:
            lines.append(f"   Ziel: {trip.destination}")
        if item.start_time or item.end_time:
            lines.append(f"   Zeit: {item.start_time or '--:--'} - {item.end_time or '--:--'}")
        if item.notes:
            lines.append(f"   Notizen: {item.notes}")
        lines.append("")

    lines.extend([
        "-" * 40,
        "Erstellt mit Ausflug Manager",
        f"Generiert am: {now.strftime('%d.%m.%Y %H:%M')}",
    ])
    return "\n".join(lines)


def export_filename(plan: DayPlan, extension: str) -> str:
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in plan.title.lower()).strip("_")
    return f"{safe or 'tagesplan'}.{extension}"
