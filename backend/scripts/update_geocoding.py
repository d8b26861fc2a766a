#!/usr/bin/env python3
"""
Geocode trips through the Google Geocoding API.

Usage:
  python scripts/update_geocoding.py        # trips without coordinates
  python scripts/update_geocoding.py --all  # every trip
"""
import argparse
import asyncio
import os
import sys

from loguru import logger

backend_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_root not in sys.path:
    sys.path.append(backend_root)

from ausflug.core.config import settings  # noqa: E402
from ausflug.core.database import async_session, close_db  # noqa: E402
from ausflug.core.redis import close_redis  # noqa: E402
from ausflug.services.trip_service import TripService  # noqa: E402


async def main():
    parser = argparse.ArgumentParser(description="Geocode trips")
    parser.add_argument("--all", action="store_true", help="re-geocode trips that already have coordinates")
    args = parser.parse_args()

    if not settings.GOOGLE_MAPS_API_KEY:
        logger.error("❌ GOOGLE_MAPS_API_KEY is not set")
        sys.exit(1)

    try:
        async with async_session() as db:
            result = await TripService(db).geocode_trips(include_all=args.all)
        logger.info(f"✅ Updated {result['updated']}, failed {result['failed']}")
    finally:
        await close_redis()
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
