"""
Push, notification and friendship schemas
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, HttpUrl, model_validator


class PushKeys(BaseModel):
    auth: str = Field(..., min_length=1)
    p256dh: str = Field(..., min_length=1)


class PushSubscribe(BaseModel):
    endpoint: HttpUrl
    keys: PushKeys


class PushUnsubscribe(BaseModel):
    endpoint: str = Field(..., min_length=1)


class CapacitorToken(BaseModel):
    token: str = Field(..., min_length=1)
    platform: Literal["ios", "android"]


class LocationUpdate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: Optional[float] = Field(None, ge=0)


class NotificationSettingsUpdate(BaseModel):
    notifications_enabled: Optional[bool] = None
    friend_request_notifications: Optional[bool] = None
    friend_request_accepted_notifications: Optional[bool] = None
    nearby_trip_notifications: Optional[bool] = None
    nearby_trip_distance: Optional[int] = Field(None, ge=100, le=100000)
    location_tracking_enabled: Optional[bool] = None


class NotificationSettingsResponse(BaseModel):
    notifications_enabled: bool = True
    friend_request_notifications: bool = True
    friend_request_accepted_notifications: bool = True
    nearby_trip_notifications: bool = True
    nearby_trip_distance: int = 5000
    location_tracking_enabled: bool = True

    class Config:
        from_attributes = True


class NotificationResponse(BaseModel):
    id: int
    title: str
    message: str
    type: str
    related_id: Optional[int] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class FriendRequestCreate(BaseModel):
    user_id: Optional[int] = None
    email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def require_target(self):
        if self.user_id is None and self.email is None:
            raise ValueError("user_id oder email erforderlich")
        return self
