"""
Excursion import from JSON or CSV files
"""

import csv
import io
import json
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.errors import ValidationError
from ausflug.models.trip import Trip
from ausflug.services.category_service import detect_category

UNSUPPORTED_FORMAT = "Nicht unterstütztes Dateiformat. Bitte JSON oder CSV verwenden."

COST_BY_NUMBER = {0: "free", 1: "low", 2: "medium", 3: "high", 4: "very_high"}

CSV_COLUMNS = {
    "name": ("name", "title", "ausflug"),
    "description": ("description", "beschreibung", "desc"),
    "destination": ("destination", "adresse", "address", "ort"),
    "region": ("region", "area"),
    "category": ("category", "categories", "kategorie"),
    "cost": ("cost", "kosten_stufe", "price"),
    "website_url": ("website", "website_url", "url"),
    "latitude": ("lat", "latitude"),
    "longitude": ("lng", "longitude"),
}


@dataclass
class ImportedExcursion:
    name: str
    description: str = ""
    destination: str = ""
    address: str = ""
    region: str = ""
    category: str = ""
    cost: Optional[str] = None
    website_url: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    route_type: str = "location"
    age_recommendation: Optional[str] = None


@dataclass
class ParseResult:
    excursions: List[ImportedExcursion] = field(default_factory=list)
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> int:
        return len(self.excursions)


def normalize_cost(value: Any) -> Optional[str]:
    """Map 0..4 or a cost word to a cost level; unknown values give None"""
    if value is None or value == "":
        return None
    text = str(value).lower().strip()
    try:
        number = float(text)
    except ValueError:
        number = None
    if number is not None:
        if math.isfinite(number) and number.is_integer():
            return COST_BY_NUMBER.get(int(number))
        return None
    for word, level in (("free", "free"), ("low", "low"), ("medium", "medium"),
                        ("very", "very_high"), ("high", "high")):
        if word in text:
            return level
    return None


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _flag(value: Any) -> bool:
    return str(value).strip().lower() in ("1", "true", "ja", "yes")


def route_type_from_flags(is_round_trip: Any, is_one_way: Any) -> str:
    if _flag(is_round_trip):
        return "round_trip"
    if _flag(is_one_way):
        return "one_way"
    return "location"


def _first(item: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def parse_json(content: str) -> ParseResult:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValidationError(f"JSON Fehler: {e.msg}")

    items = data if isinstance(data, list) else (data.get("excursions") if isinstance(data, dict) else None)
    if not isinstance(items, list):
        raise ValidationError("Ungültiges JSON: erwartet wird eine Liste oder ein Objekt mit 'excursions'")

    result = ParseResult()
    for index, item in enumerate(items, start=1):
        try:
            if not isinstance(item, dict):
                raise ValueError("Eintrag ist kein Objekt")
            result.excursions.append(ImportedExcursion(
                name=_text(_first(item, "name", "title")) or f"Excursion {index}",
                description=_text(_first(item, "description", "beschreibung")),
                destination=_text(_first(item, "destination", "adresse")),
                address=_text(_first(item, "address", "adresse")),
                region=_text(item.get("region")),
                category=_text(_first(item, "category", "categories")),
                cost=normalize_cost(_first(item, "cost", "kosten_stufe")),
                website_url=_text(_first(item, "website_url", "website")),
                latitude=_to_float(_first(item, "latitude", "lat")),
                longitude=_to_float(_first(item, "longitude", "lng")),
                route_type=route_type_from_flags(item.get("is_rundtour"), item.get("is_von_a_nach_b")),
                age_recommendation=_text(item.get("altersempfehlung")) or None,
            ))
        except (TypeError, ValueError) as e:
            result.failed += 1
            result.errors.append(f"Row {index}: {e}")
    return result


def parse_csv(content: str) -> ParseResult:
    rows = [row for row in csv.reader(io.StringIO(content.strip())) if any(cell.strip() for cell in row)]
    if len(rows) < 2:
        raise ValidationError("CSV benötigt eine Kopfzeile und mindestens eine Datenzeile")

    headers = [header.strip().lower() for header in rows[0]]
    columns = {}
    for name, aliases in CSV_COLUMNS.items():
        columns[name] = next((i for i, header in enumerate(headers) if header in aliases), None)
    if columns["name"] is None:
        raise ValidationError("CSV benötigt eine Spalte 'name' oder 'title'")

    def cell(values: List[str], name: str) -> str:
        index = columns[name]
        if index is None or index >= len(values):
            return ""
        return values[index].strip()

    result = ParseResult()
    for index, values in enumerate(rows[1:], start=2):
        try:
            destination = cell(values, "destination")
            result.excursions.append(ImportedExcursion(
                name=cell(values, "name") or f"Excursion {index - 1}",
                description=cell(values, "description"),
                destination=destination,
                address=destination,
                region=cell(values, "region"),
                category=cell(values, "category"),
                cost=normalize_cost(cell(values, "cost")) if columns["cost"] is not None else "free",
                website_url=cell(values, "website_url"),
                latitude=_to_float(cell(values, "latitude")),
                longitude=_to_float(cell(values, "longitude")),
            ))
        except ValueError as e:
            result.failed += 1
            result.errors.append(f"Row {index}: {e}")
    return result


def parse_import_file(content: str, filename: str) -> ParseResult:
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if extension == "json":
        return parse_json(content)
    if extension == "csv":
        return parse_csv(content)
    raise ValidationError(UNSUPPORTED_FORMAT)


def _valid_coordinate(value: Optional[float], limit: float) -> Optional[float]:
    if value is None or not -limit <= value <= limit:
        return None
    return value


def excursion_to_trip(excursion: ImportedExcursion, user_id: int, make_public: bool,
                      now: Optional[datetime] = None) -> Trip:
    now = now or datetime.utcnow()
    destination = excursion.destination or excursion.address or excursion.region or "Schweiz"
    return Trip(
        user_id=user_id,
        title=excursion.name[:255],
        description=excursion.description or None,
        destination=destination[:255],
        address=excursion.address or None,
        region=excursion.region or None,
        category=excursion.category or detect_category(excursion.name, excursion.description, destination),
        cost=excursion.cost or "free",
        route_type=excursion.route_type,
        age_recommendation=excursion.age_recommendation,
        website_url=excursion.website_url or None,
        latitude=_valid_coordinate(excursion.latitude, 90),
        longitude=_valid_coordinate(excursion.longitude, 180),
        start_date=now,
        end_date=now,
        status="planned",
        participants=1,
        is_public=make_public,
    )


async def import_excursions(db: AsyncSession, content: str, filename: str, user_id: int,
                            make_public: bool = True) -> Dict[str, Any]:
    """Parse a file and store every excursion as a trip owned by user_id"""
    parsed = parse_import_file(content, filename)
    now = datetime.utcnow()
    for excursion in parsed.excursions:
        db.add(excursion_to_trip(excursion, user_id, make_public, now))
    await db.commit()
    logger.info(f"📥 Imported {parsed.success} excursions from {filename} ({parsed.failed} failed)")
    return {"imported": parsed.success, "failed": parsed.failed, "errors": parsed.errors}
