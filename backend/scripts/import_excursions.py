#!/usr/bin/env python3
"""
Import excursions from a JSON or CSV file.

Usage:
  python scripts/import_excursions.py data/ausfluege.json --user-id 1
  python scripts/import_excursions.py data/ausfluege.csv --private --clear
"""
import argparse
import asyncio
import os
import sys
from pathlib import Path

from loguru import logger
from sqlalchemy import select

backend_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_root not in sys.path:
    sys.path.append(backend_root)

from ausflug.core.database import async_session, close_db, init_db  # noqa: E402
from ausflug.core.errors import AppError  # noqa: E402
from ausflug.models.trip import Trip  # noqa: E402
from ausflug.models.user import User  # noqa: E402
from ausflug.services.import_service import import_excursions  # noqa: E402
from ausflug.services.trip_service import TripService  # noqa: E402


async def resolve_owner(db, user_id: int = None) -> int:
    if user_id:
        return user_id
    admin_id = (await db.execute(
        select(User.id).where(User.role == "admin").order_by(User.id).limit(1)
    )).scalar_one_or_none()
    if admin_id is None:
        raise SystemExit("No admin user found, pass --user-id")
    return admin_id


async def clear_trips(db, user_id: int) -> int:
    service = TripService(db)
    trips = (await db.execute(select(Trip).where(Trip.user_id == user_id))).scalars().all()
    for trip in trips:
        await service.delete_trip(trip)
    return len(trips)


async def run(path: Path, user_id: int, make_public: bool, clear: bool):
    content = path.read_text(encoding="utf-8-sig")
    await init_db()
    async with async_session() as db:
        owner_id = await resolve_owner(db, user_id)
        if clear:
            removed = await clear_trips(db, owner_id)
            logger.info(f"🧹 Removed {removed} existing trips of user {owner_id}")
        result = await import_excursions(db, content, path.name, owner_id, make_public)

    logger.info(f"✅ Imported {result['imported']}, failed {result['failed']}")
    for error in result["errors"]:
        logger.warning(error)


async def main():
    parser = argparse.ArgumentParser(description="Import excursions from JSON or CSV")
    parser.add_argument("file", type=Path)
    parser.add_argument("--user-id", type=int, default=None)
    parser.add_argument("--private", action="store_true", help="import trips as private")
    parser.add_argument("--clear", action="store_true", help="delete the owner's trips first")
    args = parser.parse_args()

    if not args.file.exists():
        logger.error(f"❌ File not found: {args.file}")
        sys.exit(1)

    try:
        await run(args.file, args.user_id, not args.private, args.clear)
    except AppError as e:
        logger.error(f"❌ Import failed: {e.message}")
        sys.exit(1)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
