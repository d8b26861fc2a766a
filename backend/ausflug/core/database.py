"""
Database engine and session management
"""

from sqlalchemy import inspect, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
import asyncio
from loguru import logger

from ausflug.core.config import settings
from ausflug.models.base import Base

# One async engine and session factory per event loop; engines must not cross loops
_engines_by_loop: dict = {}
_sessionmaker_by_loop: dict = {}


def _current_loop_id():
    try:
        return id(asyncio.get_running_loop())
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        return id(loop)


def _async_database_url(url: str) -> str:
    """Swap in the async driver for plain PostgreSQL URLs"""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _get_async_engine_for_current_loop():
    loop_id = _current_loop_id()
    engine = _engines_by_loop.get(loop_id)
    if not engine:
        url = _async_database_url(settings.DATABASE_URL)
        options = {"echo": settings.DATABASE_ECHO, "pool_pre_ping": True}
        if not url.startswith("sqlite"):
            options["pool_recycle"] = 300
        engine = create_async_engine(url, **options)
        _engines_by_loop[loop_id] = engine
    return engine


def _get_sessionmaker_for_current_loop():
    loop_id = _current_loop_id()
    sm = _sessionmaker_by_loop.get(loop_id)
    if not sm:
        engine = _get_async_engine_for_current_loop()
        sm = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        _sessionmaker_by_loop[loop_id] = sm
    return sm


def get_async_engine():
    return _get_async_engine_for_current_loop()


def get_async_session_local():
    return _get_sessionmaker_for_current_loop()


async def get_async_db():
    """FastAPI dependency yielding an async session"""
    AsyncSessionFactory = _get_sessionmaker_for_current_loop()
    async with AsyncSessionFactory() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {e}")
            raise


def _import_models():
    """Register every model on Base.metadata"""
    from ausflug.models import user, trip, destination, day_plan, notification  # noqa: F401


async def init_db(create_tables_directly: bool = True):
    """
    Initialise the database

    Args:
        create_tables_directly: create missing tables from the model metadata
    """
    try:
        await create_database_if_not_exists()

        if create_tables_directly:
            await create_tables_if_not_exists()
        else:
            logger.warning("⚠️ Table creation skipped")

        await seed_initial_data()

        logger.info("✅ Database initialised")

    except Exception as e:
        logger.error(f"❌ Database initialisation failed: {e}")
        raise


async def create_database_if_not_exists():
    """Create the PostgreSQL database when it is missing"""
    if not settings.DATABASE_URL.startswith("postgresql"):
        return
    try:
        import asyncpg
        from urllib.parse import urlparse

        parsed = urlparse(settings.DATABASE_URL)
        db_name = parsed.path[1:]

        conn = await asyncpg.connect(
            host=parsed.hostname,
            port=parsed.port or 5432,
            user=parsed.username,
            password=parsed.password,
            database="postgres"
        )

        try:
            exists = await conn.fetchval(
                "SELECT 1 FROM pg_database WHERE datname = $1", db_name
            )
            if not exists:
                await conn.execute(f'CREATE DATABASE "{db_name}"')
                logger.info(f"✅ Database '{db_name}' created")
            else:
                logger.info(f"✅ Database '{db_name}' exists")
        finally:
            await conn.close()

    except Exception as e:
        # Missing privileges are common on managed databases; table creation still proceeds
        logger.warning(f"⚠️ Database existence check failed: {e}")


async def create_tables_if_not_exists():
    """Create tables that exist in the models but not in the database"""
    try:
        _import_models()

        engine = _get_async_engine_for_current_loop()

        async with engine.begin() as conn:
            existing_tables = set(
                await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
            )
            model_tables = set(Base.metadata.tables.keys())
            tables_to_create = model_tables - existing_tables

            if tables_to_create:
                logger.info(f"Creating {len(tables_to_create)} tables: {', '.join(sorted(tables_to_create))}")
                await conn.run_sync(Base.metadata.create_all)
                logger.info(f"✅ Created {len(tables_to_create)} tables")
            else:
                logger.info(f"✅ All tables exist ({len(model_tables)})")

    except Exception as e:
        logger.error(f"❌ Table creation failed: {e}")
        raise


async def create_default_admin():
    """Create the configured administrator account if it does not exist yet"""
    if not (settings.DEFAULT_ADMIN_EMAIL and settings.DEFAULT_ADMIN_PASSWORD):
        return
    try:
        from ausflug.models.user import User
        from ausflug.core.security import get_password_hash

        async with async_session() as session:
            result = await session.execute(
                select(User.id).where(User.email == settings.DEFAULT_ADMIN_EMAIL)
            )
            if result.scalar_one_or_none():
                logger.debug(f"Admin {settings.DEFAULT_ADMIN_EMAIL} exists, skipping")
                return
            session.add(User(
                email=settings.DEFAULT_ADMIN_EMAIL,
                name="Administrator",
                hashed_password=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
                login_method="local",
                role="admin",
                is_active=True,
            ))
        logger.info(f"✅ Default admin {settings.DEFAULT_ADMIN_EMAIL} created")
    except Exception as e:
        logger.warning(f"⚠️ Default admin creation failed: {e}")


async def seed_initial_data():
    await create_default_admin()


async def close_db():
    """Dispose every engine"""
    for engine in _engines_by_loop.values():
        await engine.dispose()
    _engines_by_loop.clear()
    _sessionmaker_by_loop.clear()
    logger.info("✅ Database connections closed")


class async_session:
    """Session context manager committing on success and rolling back on error"""
    def __init__(self):
        self._session = None

    async def __aenter__(self) -> AsyncSession:
        factory = _get_sessionmaker_for_current_loop()
        self._session = factory()
        return self._session

    async def __aexit__(self, exc_type, exc, tb):
        try:
            if exc:
                await self._session.rollback()
            else:
                await self._session.commit()
        finally:
            await self._session.close()
