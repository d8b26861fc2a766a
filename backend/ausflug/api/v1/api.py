"""
API v1 router
"""

from fastapi import APIRouter
from ausflug.api.v1.endpoints import (
    admin,
    auth,
    day_plans,
    destinations,
    export,
    friends,
    geocoding,
    notifications,
    push,
    trip_content,
    trips,
    users,
    weather,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(trips.router, prefix="/trips", tags=["trips"])
api_router.include_router(trip_content.router, prefix="/trips", tags=["trip-content"])
api_router.include_router(destinations.router, prefix="/destinations", tags=["destinations"])
api_router.include_router(day_plans.router, prefix="/day-plans", tags=["day-plans"])
api_router.include_router(export.router, prefix="/export", tags=["export"])
api_router.include_router(weather.router, prefix="/weather", tags=["weather"])
api_router.include_router(geocoding.router, prefix="/geocoding", tags=["geocoding"])
api_router.include_router(push.router, prefix="/push", tags=["push"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(friends.router, prefix="/friends", tags=["friends"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
