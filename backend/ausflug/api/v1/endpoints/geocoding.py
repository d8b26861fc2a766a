"""
Geocoding endpoint
"""

from fastapi import APIRouter, Query

from ausflug.core.errors import NotFoundError
from ausflug.services.geocoding_service import geocode_address

router = APIRouter()


@router.get("")
async def geocode(address: str = Query(..., min_length=1, max_length=500)):
    coords = await geocode_address(address)
    if coords is None:
        raise NotFoundError("Adresse")
    latitude, longitude = coords
    return {"address": address, "latitude": latitude, "longitude": longitude}
