"""
Weather forecasts from Open-Meteo
"""

import time
from typing import Any, Dict, List

import httpx
from loguru import logger

from ausflug.core.config import settings
from ausflug.core.errors import InternalError
from ausflug.core.logging_config import log_external_api_call
from ausflug.core.redis import cache_key, get_cache, set_cache

WEATHER_CODES = {
    0: "Klar",
    1: "Überwiegend klar",
    2: "Teilweise bewölkt",
    3: "Bewölkt",
    45: "Nebel",
    48: "Gefrierender Nebel",
    51: "Leichter Nieselregen",
    53: "Mäßiger Nieselregen",
    55: "Starker Nieselregen",
    61: "Leichter Regen",
    63: "Mäßiger Regen",
    65: "Starker Regen",
    71: "Leichter Schneefall",
    73: "Mäßiger Schneefall",
    75: "Starker Schneefall",
    77: "Schneegriesel",
    80: "Leichte Regenschauer",
    81: "Mäßige Regenschauer",
    82: "Starke Regenschauer",
    85: "Leichte Schneeschauer",
    86: "Starke Schneeschauer",
    95: "Gewitter",
    96: "Gewitter mit leichtem Hagel",
    99: "Gewitter mit starkem Hagel",
}

FORECAST_ERROR = "Wettervorhersage konnte nicht abgerufen werden"


def describe_weather_code(code) -> str:
    try:
        return WEATHER_CODES.get(int(code), "Unbekannt")
    except (TypeError, ValueError):
        return "Unbekannt"


def _round(value):
    return round(value) if value is not None else None


def _location_label(latitude: float, longitude: float) -> str:
    return f"{latitude:.2f}, {longitude:.2f}"


class WeatherService:
    """Daily and hourly forecasts with a short Redis cache"""

    async def _fetch(self, params: Dict[str, Any]) -> Dict[str, Any]:
        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=settings.EXTERNAL_API_TIMEOUT) as client:
                response = await client.get(settings.OPEN_METEO_URL, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            log_external_api_call("open-meteo", "forecast", "error", (time.perf_counter() - start) * 1000)
            logger.error(f"Weather request failed: {e}")
            raise InternalError(FORECAST_ERROR)
        log_external_api_call("open-meteo", "forecast", "ok", (time.perf_counter() - start) * 1000)
        return data

    async def get_forecast(self, latitude: float, longitude: float, days: int = 7) -> Dict[str, Any]:
        key = cache_key("weather", "daily", f"{latitude:.3f}", f"{longitude:.3f}", days)
        cached = await get_cache(key)
        if cached:
            return cached

        data = await self._fetch({
            "latitude": latitude,
            "longitude": longitude,
            "daily": "temperature_2m_max,temperature_2m_min,precipitation_probability_max,weather_code",
            "timezone": settings.WEATHER_TIMEZONE,
            "forecast_days": days,
        })
        daily = data.get("daily")
        if not daily or "time" not in daily:
            raise InternalError(FORECAST_ERROR)

        forecasts: List[Dict[str, Any]] = []
        try:
            for i, date in enumerate(daily["time"]):
                code = daily["weather_code"][i]
                precipitation = (daily.get("precipitation_probability_max") or [None] * len(daily["time"]))[i]
                forecasts.append({
                    "date": date,
                    "temperature_max": _round(daily["temperature_2m_max"][i]),
                    "temperature_min": _round(daily["temperature_2m_min"][i]),
                    "precipitation_probability": precipitation or 0,
                    "weather_code": code,
                    "weather_description": describe_weather_code(code),
                })
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Malformed daily forecast: {e}")
            raise InternalError(FORECAST_ERROR)

        result = {
            "location": _location_label(latitude, longitude),
            "latitude": latitude,
            "longitude": longitude,
            "forecasts": forecasts,
        }
        await set_cache(key, result, ttl=settings.WEATHER_CACHE_TTL)
        return result

    async def get_hourly(self, latitude: float, longitude: float, days: int = 7) -> Dict[str, Any]:
        key = cache_key("weather", "hourly", f"{latitude:.3f}", f"{longitude:.3f}", days)
        cached = await get_cache(key)
        if cached:
            return cached

        data = await self._fetch({
            "latitude": latitude,
            "longitude": longitude,
            "hourly": "temperature_2m,precipitation_probability,weather_code",
            "timezone": settings.WEATHER_TIMEZONE,
            "forecast_days": days,
        })
        hourly = data.get("hourly")
        if not hourly or "time" not in hourly:
            raise InternalError(FORECAST_ERROR)

        precipitation = hourly.get("precipitation_probability") or [None] * len(hourly["time"])
        try:
            entries = [
                {
                    "time": moment,
                    "temperature": _round(hourly["temperature_2m"][i]),
                    "weather_code": hourly["weather_code"][i],
                    "weather_description": describe_weather_code(hourly["weather_code"][i]),
                    "precipitation_probability": precipitation[i] or 0,
                }
                for i, moment in enumerate(hourly["time"])
            ]
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Malformed hourly forecast: {e}")
            raise InternalError(FORECAST_ERROR)

        result = {
            "location": _location_label(latitude, longitude),
            "latitude": latitude,
            "longitude": longitude,
            "hourly": entries,
        }
        await set_cache(key, result, ttl=settings.WEATHER_CACHE_TTL)
        return result


weather_service = WeatherService()
