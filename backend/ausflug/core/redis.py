"""
Redis connection and JSON cache helpers
"""

import json
import asyncio

import redis.asyncio as redis
from redis.asyncio import ConnectionPool
from loguru import logger

from ausflug.core.config import settings

redis_pool: ConnectionPool = None
redis_client: redis.Redis = None
_redis_loop_id: int = None


async def init_redis():
    """Create the connection pool and ping the server"""
    global redis_pool, redis_client, _redis_loop_id

    try:
        redis_pool = ConnectionPool.from_url(
            settings.REDIS_URL,
            password=settings.REDIS_PASSWORD,
            max_connections=20,
            retry_on_timeout=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            health_check_interval=15
        )
        redis_client = redis.Redis(connection_pool=redis_pool)
        _redis_loop_id = id(asyncio.get_running_loop())

        await asyncio.wait_for(redis_client.ping(), timeout=3)
        logger.info("✅ Redis connected")

    except Exception as e:
        logger.error(f"❌ Redis connection failed: {e}")
        raise


async def get_redis() -> redis.Redis:
    """Return the client, reconnecting when called from another event loop"""
    current_loop_id = id(asyncio.get_running_loop())
    if redis_client is None or _redis_loop_id != current_loop_id:
        await close_redis()
        await init_redis()
    return redis_client


async def close_redis():
    global redis_client, redis_pool

    if redis_client:
        try:
            await redis_client.aclose()
        except Exception as e:
            logger.debug(f"Redis close failed: {e}")
        redis_client = None

    if redis_pool:
        await redis_pool.disconnect()
        redis_pool = None


def cache_key(prefix: str, *args, **kwargs):
    """Build a colon-separated cache key"""
    key_parts = [prefix]
    for arg in args:
        key_parts.append(str(arg))
    for key, value in sorted(kwargs.items()):
        key_parts.append(f"{key}:{value}")
    return ":".join(key_parts)


async def get_cache(key: str):
    try:
        client = await get_redis()
        value = await client.get(key)
        if value:
            return json.loads(value)
        return None
    except Exception as e:
        logger.error(f"Cache read failed: {e}")
        return None


async def set_cache(key: str, value, ttl: int = None):
    try:
        client = await get_redis()
        if ttl is None:
            ttl = settings.CACHE_TTL
        await client.setex(key, ttl, json.dumps(value, ensure_ascii=False, default=str))
        return True
    except Exception as e:
        logger.error(f"Cache write failed: {e}")
        return False


async def delete_cache(key: str):
    try:
        client = await get_redis()
        await client.delete(key)
        return True
    except Exception as e:
        logger.error(f"Cache delete failed: {e}")
        return False


async def clear_cache_pattern(pattern: str):
    """Delete every key matching pattern and return how many were removed"""
    try:
        client = await get_redis()
        keys = [key async for key in client.scan_iter(match=pattern)]
        if keys:
            await client.delete(*keys)
        return len(keys)
    except Exception as e:
        logger.error(f"Cache clear failed: {e}")
        return 0


async def incr_window_counter(key: str, window_seconds: int) -> int:
    """Increment a fixed-window counter, setting its expiry on first hit"""
    client = await get_redis()
    count = await client.incr(key)
    if count == 1:
        await client.expire(key, window_seconds)
    return count


async def ping_redis() -> bool:
    try:
        client = await get_redis()
        return bool(await client.ping())
    except Exception as e:
        logger.warning(f"Redis ping failed: {e}")
        return False
