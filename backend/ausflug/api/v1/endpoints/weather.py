"""
Weather endpoints
"""

from fastapi import APIRouter, Query

from ausflug.services.weather_service import weather_service

router = APIRouter()


@router.get("/forecast")
async def get_forecast(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    days: int = Query(7, ge=1, le=16),
):
    return await weather_service.get_forecast(latitude, longitude, days)


@router.get("/hourly")
async def get_hourly(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    days: int = Query(7, ge=1, le=16),
):
    return await weather_service.get_hourly(latitude, longitude, days)
