"""
Trip schemas
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from ausflug.schemas.common import parse_naive_datetime

TripStatus = Literal["planned", "ongoing", "completed", "cancelled"]
CostLevel = Literal["free", "low", "medium", "high", "very_high"]
RouteType = Literal["round_trip", "one_way", "location"]
Mood = Literal["happy", "excited", "relaxed", "tired", "adventurous", "grateful"]
ParticipantStatus = Literal["confirmed", "pending", "declined"]


class TripBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, description="Titel")
    description: Optional[str] = Field(None, description="Beschreibung")
    destination: str = Field(..., min_length=1, max_length=255, description="Ziel")
    start_date: datetime = Field(..., description="Startdatum")
    end_date: datetime = Field(..., description="Enddatum")
    participants: int = Field(1, ge=1, description="Anzahl Teilnehmende")
    status: TripStatus = "planned"
    cost: CostLevel = "free"
    age_recommendation: Optional[str] = Field(None, max_length=100)
    route_type: RouteType = "location"
    category: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=500)
    website_url: Optional[str] = Field(None, max_length=500)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=50)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    image_url: Optional[str] = Field(None, max_length=500)
    is_public: bool = False

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_datetime(cls, v):
        return parse_naive_datetime(v)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("Enddatum muss nach dem Startdatum liegen")
        return self


class TripCreate(TripBase):
    pass


class TripUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    destination: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    participants: Optional[int] = Field(None, ge=1)
    status: Optional[TripStatus] = None
    cost: Optional[CostLevel] = None
    age_recommendation: Optional[str] = Field(None, max_length=100)
    route_type: Optional[RouteType] = None
    category: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=500)
    website_url: Optional[str] = Field(None, max_length=500)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=50)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    image_url: Optional[str] = Field(None, max_length=500)
    is_public: Optional[bool] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_datetime(cls, v):
        return parse_naive_datetime(v)


class TripResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    destination: str
    start_date: datetime
    end_date: datetime
    participants: int
    status: str
    cost: str
    age_recommendation: Optional[str] = None
    route_type: str
    category: Optional[str] = None
    region: Optional[str] = None
    address: Optional[str] = None
    website_url: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_url: Optional[str] = None
    is_favorite: bool
    is_done: bool
    is_public: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RatingCreate(BaseModel):
    score: int = Field(..., ge=1, le=5, description="Bewertung 1-5")
    comment: Optional[str] = Field(None, max_length=2000)


class PhotoCreate(BaseModel):
    photo_url: str = Field(..., min_length=1, max_length=500)
    caption: Optional[str] = None
    is_primary: bool = False

    @field_validator("photo_url")
    @classmethod
    def check_url(cls, v: str) -> str:
        if not (v.startswith("http://") or v.startswith("https://") or v.startswith("/uploads/")):
            raise ValueError("Ungültige Foto-URL")
        return v


class PhotoUpload(BaseModel):
    """Base64 data URL upload"""
    data: str = Field(..., min_length=1, description="data:image/...;base64,...")
    filename: Optional[str] = None
    caption: Optional[str] = None
    is_primary: bool = False


class PhotoResponse(BaseModel):
    id: int
    trip_id: int
    photo_url: str
    caption: Optional[str] = None
    is_primary: bool
    created_at: datetime

    class Config:
        from_attributes = True


class VideoCreate(BaseModel):
    url: str = Field(..., min_length=1, max_length=500)
    title: Optional[str] = Field(None, max_length=255)


class VideoResponse(BaseModel):
    id: int
    trip_id: int
    user_id: int
    video_id: str
    url: str
    title: Optional[str] = None
    platform: str
    created_at: datetime

    class Config:
        from_attributes = True


class JournalCreate(BaseModel):
    content: str = Field(..., min_length=1)
    entry_date: datetime
    mood: Optional[Mood] = None

    @field_validator("entry_date", mode="before")
    @classmethod
    def parse_datetime(cls, v):
        return parse_naive_datetime(v)

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Inhalt darf nicht leer sein")
        return v


class JournalUpdate(BaseModel):
    content: Optional[str] = None
    entry_date: Optional[datetime] = None
    mood: Optional[Mood] = None

    @field_validator("entry_date", mode="before")
    @classmethod
    def parse_datetime(cls, v):
        return parse_naive_datetime(v)

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Inhalt darf nicht leer sein")
        return v


class JournalResponse(BaseModel):
    id: int
    trip_id: int
    user_id: int
    content: str
    entry_date: datetime
    mood: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AttributeCreate(BaseModel):
    attribute: str = Field(..., min_length=1, max_length=100)


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class ParticipantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    user_id: Optional[int] = None
    status: ParticipantStatus = "pending"


class ParticipantStatusUpdate(BaseModel):
    status: ParticipantStatus


class AttributeResponse(BaseModel):
    id: int
    trip_id: int
    attribute: str

    class Config:
        from_attributes = True


class CommentResponse(BaseModel):
    id: int
    trip_id: int
    user_id: int
    user_name: Optional[str] = None
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class ParticipantResponse(BaseModel):
    id: int
    trip_id: int
    user_id: Optional[int] = None
    name: str
    email: Optional[str] = None
    status: str

    class Config:
        from_attributes = True


class RatingResponse(BaseModel):
    id: int
    user_id: int
    user_name: Optional[str] = None
    score: int
    comment: Optional[str] = None
    created_at: datetime


class RatingSummary(BaseModel):
    average: float
    count: int


class TripSearchResponse(BaseModel):
    trips: List[TripResponse]
    total: int
    skip: int
    limit: int
