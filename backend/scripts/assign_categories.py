#!/usr/bin/env python3
"""
Assign keyword-detected categories to trips.

Usage:
  python scripts/assign_categories.py [--overwrite]
"""
import argparse
import asyncio
import os
import sys

from loguru import logger

backend_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_root not in sys.path:
    sys.path.append(backend_root)

from ausflug.core.database import async_session, close_db  # noqa: E402
from ausflug.services.category_service import assign_categories, count_uncategorised  # noqa: E402


async def main():
    parser = argparse.ArgumentParser(description="Assign categories to trips")
    parser.add_argument("--overwrite", action="store_true", help="recompute categories that are already set")
    args = parser.parse_args()

    try:
        async with async_session() as db:
            missing = await count_uncategorised(db)
            logger.info(f"🏷️ {missing} trips without category")
            result = await assign_categories(db, overwrite=args.overwrite)
        logger.info(f"✅ Updated {result['updated']}, skipped {result['skipped']}")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
