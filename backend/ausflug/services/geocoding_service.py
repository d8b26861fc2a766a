"""
Address geocoding via the Google Geocoding API
"""

import time
from typing import Optional, Tuple

import httpx
from loguru import logger

from ausflug.core.config import settings
from ausflug.core.logging_config import log_external_api_call
from ausflug.core.redis import cache_key, get_cache, set_cache


async def geocode_address(address: Optional[str]) -> Optional[Tuple[float, float]]:
    """Return (lat, lng) of the first match, or None when the lookup is not possible"""
    if not address or not address.strip():
        return None
    if not settings.GOOGLE_MAPS_API_KEY:
        logger.warning("GOOGLE_MAPS_API_KEY not configured, skipping geocoding")
        return None

    address = address.strip()
    key = cache_key("geocode", address.lower())
    cached = await get_cache(key)
    if cached:
        return cached["lat"], cached["lng"]

    start = time.perf_counter()
    try:
        async with httpx.AsyncClient(timeout=settings.EXTERNAL_API_TIMEOUT) as client:
            response = await client.get(
                settings.GEOCODING_URL,
                params={"address": address, "key": settings.GOOGLE_MAPS_API_KEY},
            )
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        log_external_api_call("google-geocoding", address, "error", (time.perf_counter() - start) * 1000)
        logger.error(f"Geocoding request failed for '{address}': {e}")
        return None

    log_external_api_call("google-geocoding", address, data.get("status", "unknown"), (time.perf_counter() - start) * 1000)

    results = data.get("results") or []
    if data.get("status") != "OK" or not results:
        logger.warning(f"Geocoding found nothing for '{address}': {data.get('status')}")
        return None

    try:
        location = results[0]["geometry"]["location"]
        lat, lng = float(location["lat"]), float(location["lng"])
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Malformed geocoding result for '{address}': {e}")
        return None
    await set_cache(key, {"lat": lat, "lng": lng}, ttl=settings.GEOCODING_CACHE_TTL)
    return lat, lng
