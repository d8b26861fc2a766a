"""
Fixed-window rate limiting backed by Redis
"""

import time
from typing import Tuple

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger

from ausflug.core.config import settings
from ausflug.core.errors import RateLimitError, format_error_response
from ausflug.core import redis as redis_cache

AUTH_LIMITED_PATHS = (
    "/api/v1/auth/login",
    "/api/v1/auth/register",
    "/api/v1/auth/forgot-password",
)


async def check_rate_limit(bucket: str, identity: str, limit: int, window_seconds: int) -> Tuple[bool, int]:
    """Count one hit; returns (allowed, count). Fails open when Redis is unavailable."""
    if limit <= 0:
        return True, 0

    window = int(time.time() // window_seconds)
    key = f"rl:{bucket}:{identity}:{window}"
    try:
        count = await redis_cache.incr_window_counter(key, window_seconds + 5)
        return count <= limit, count
    except Exception as e:
        logger.warning(f"Rate limiter unavailable, allowing request: {e}")
        return True, 0


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP limits: general API traffic and a tighter bucket for auth endpoints"""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if (
            not settings.RATE_LIMIT_ENABLED
            or not path.startswith("/api/")
            or path in settings.RATE_LIMIT_EXCLUDE_PATHS
        ):
            return await call_next(request)

        if path in AUTH_LIMITED_PATHS and request.method == "POST":
            bucket, limit = "auth", settings.AUTH_RATE_LIMIT_MAX_REQUESTS
        else:
            bucket, limit = "api", settings.RATE_LIMIT_MAX_REQUESTS

        window = settings.RATE_LIMIT_WINDOW_SECONDS
        ip = _client_ip(request)
        allowed, count = await check_rate_limit(bucket, ip, limit, window)

        if not allowed:
            logger.warning(f"🚫 Rate limit hit: {bucket} {ip} ({count}/{limit})")
            response = format_error_response(RateLimitError(retry_after=window))
        else:
            response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(max(limit - count, 0))
        return response
