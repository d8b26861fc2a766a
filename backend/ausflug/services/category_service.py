"""
Keyword based trip categorisation
"""

from typing import Optional

from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.models.trip import Trip

DEFAULT_CATEGORY = "Ausflüge"

# checked in order, first match wins
CATEGORY_KEYWORDS = {
    "Kultur & Museen": ["museum", "kultur", "kunsthaus", "galerie", "ausstellung", "theater", "oper"],
    "Sport & Aktion": ["sport", "klettern", "wandern", "radfahren", "ski", "action", "lasertag", "bike", "adventure"],
    "Familie & Kinder": ["kids", "kinder", "spielplatz", "zoo", "minigolf", "trampolin", "kindsvill"],
    "Natur & Landschaft": ["natur", "berg", "wald", "see", "wasser", "fluss", "park", "wanderung", "botanik"],
    "Essen & Trinken": ["restaurant", "cafe", "kaffee", "chocolate", "schokolade", "bakery", "brewery"],
    "Shopping & Märkte": ["shopping", "markt", "outlet", "mall", "geschäft"],
    "Abenteuer": ["abenteuer", "expedition", "rafting", "canyoning", "paragliding", "bungee"],
}


def detect_category(title: Optional[str], description: Optional[str] = None,
                    destination: Optional[str] = None) -> str:
    text = f"{title or ''} {description or ''} {destination or ''}".lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in text for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


async def assign_categories(db: AsyncSession, overwrite: bool = False) -> dict:
    """Fill missing categories (or all with overwrite) and return {updated, skipped}"""
    result = await db.execute(select(Trip).order_by(Trip.id))
    updated, skipped = 0, 0
    for trip in result.scalars().all():
        if trip.category and not overwrite:
            skipped += 1
            continue
        category = detect_category(trip.title, trip.description, trip.destination)
        if trip.category == category:
            skipped += 1
            continue
        trip.category = category
        updated += 1
    await db.commit()
    logger.info(f"🏷️ Categories assigned: {updated} updated, {skipped} skipped")
    return {"updated": updated, "skipped": skipped}


async def count_uncategorised(db: AsyncSession) -> int:
    result = await db.execute(select(Trip.id).where(or_(Trip.category.is_(None), Trip.category == "")))
    return len(result.all())
