"""
Shared fixtures: in-memory database, HTTP client and authenticated users.
"""

import os
import sys
import tempfile

# Settings are read at import time, so the environment is prepared first.
_UPLOAD_DIR = tempfile.mkdtemp(prefix="ausflug-uploads-")
os.environ.update({
    "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
    "RATE_LIMIT_ENABLED": "false",
    "LOG_TO_FILE": "false",
    "LOG_LEVEL": "WARNING",
    "UPLOAD_DIR": _UPLOAD_DIR,
    "GOOGLE_MAPS_API_KEY": "",
    "VAPID_PUBLIC_KEY": "",
    "VAPID_PRIVATE_KEY": "",
    "SECRET_KEY": "test-secret-key",
})

BACKEND_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from unittest.mock import AsyncMock  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from ausflug.core import redis as redis_cache  # noqa: E402
from ausflug.core.database import get_async_db  # noqa: E402
from ausflug.core.security import create_access_token, get_password_hash  # noqa: E402
from ausflug.models import Base  # noqa: E402
from ausflug.models.user import User  # noqa: E402

PASSWORD = "Passwort123"


# ---------------------------------------------------------------------------
# External services
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Every Redis access fails, so caches miss and the rate limiter fails open."""
    monkeypatch.setattr(redis_cache, "get_redis", AsyncMock(side_effect=ConnectionError("redis disabled")))


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(session_factory):
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

async def _create_user(db, email: str, name: str, role: str = "user") -> User:
    user = User(
        email=email,
        name=name,
        hashed_password=get_password_hash(PASSWORD),
        login_method="local",
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
def make_user(db):
    async def _factory(email: str, name: str = "Test Person", role: str = "user") -> User:
        return await _create_user(db, email, name, role)
    return _factory


@pytest.fixture
async def user(db):
    return await _create_user(db, "anna@example.ch", "Anna Muster")


@pytest.fixture
async def other_user(db):
    return await _create_user(db, "beat@example.ch", "Beat Beispiel")


@pytest.fixture
async def admin(db):
    return await _create_user(db, "admin@example.ch", "Admin", role="admin")


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def user_headers(user):
    return auth_headers(user)


@pytest.fixture
def other_headers(other_user):
    return auth_headers(other_user)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def trip_payload():
    return {
        "title": "Rheinfall Schaffhausen",
        "description": "Grösster Wasserfall Europas",
        "destination": "Neuhausen am Rheinfall",
        "start_date": "2026-07-01T09:00:00",
        "end_date": "2026-07-01T17:00:00",
        "participants": 2,
        "cost": "low",
        "region": "Schaffhausen",
        "category": "Natur & Landschaft",
        "latitude": 47.6779,
        "longitude": 8.6152,
        "is_public": True,
    }


@pytest.fixture
def password():
    return PASSWORD
