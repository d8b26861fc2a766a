#!/usr/bin/env python3
"""
Promote a user to admin, optionally resetting the password.

Usage:
  python scripts/make_admin.py --email admin@example.ch
  python scripts/make_admin.py --user-id 1 --password "NeuesPasswort123"
"""
import argparse
import asyncio
import os
import sys

from loguru import logger
from sqlalchemy import select

backend_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_root not in sys.path:
    sys.path.append(backend_root)

from ausflug.core.database import async_session, close_db  # noqa: E402
from ausflug.core.security import get_password_hash  # noqa: E402
from ausflug.models.user import User  # noqa: E402


async def make_admin(user_id: int = None, email: str = None, password: str = None) -> bool:
    async with async_session() as db:
        query = select(User).where(User.id == user_id) if user_id else select(User).where(User.email == email.lower())
        user = (await db.execute(query)).scalar_one_or_none()
        if user is None:
            logger.error(f"❌ User not found: {user_id or email}")
            return False

        user.role = "admin"
        if password:
            user.hashed_password = get_password_hash(password)
            logger.info("🔑 Password reset")
    logger.info(f"✅ User {user.id} ({user.email}) is now admin")
    return True


async def main():
    parser = argparse.ArgumentParser(description="Promote a user to admin")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--user-id", type=int)
    target.add_argument("--email", type=str)
    parser.add_argument("--password", type=str, default=None)
    args = parser.parse_args()

    try:
        ok = await make_admin(args.user_id, args.email, args.password)
    finally:
        await close_db()
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    asyncio.run(main())
