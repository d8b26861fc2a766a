"""
Trip (excursion) model and the content attached to it
"""

from sqlalchemy import Column, String, Text, Integer, Float, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from ausflug.models.base import BaseModel

TRIP_STATUSES = ("planned", "ongoing", "completed", "cancelled")
COST_LEVELS = ("free", "low", "medium", "high", "very_high")
ROUTE_TYPES = ("round_trip", "one_way", "location")
PARTICIPANT_STATUSES = ("confirmed", "pending", "declined")
JOURNAL_MOODS = ("happy", "excited", "relaxed", "tired", "adventurous", "grateful")
VIDEO_PLATFORMS = ("youtube", "tiktok")


class Trip(BaseModel):
    """Excursion"""
    __tablename__ = "trips"

    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    destination = Column(String(255), nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    participants = Column(Integer, default=1, nullable=False)

    status = Column(String(20), default="planned", nullable=False)  # planned, ongoing, completed, cancelled
    cost = Column(String(20), default="free", nullable=False)  # free, low, medium, high, very_high
    age_recommendation = Column(String(100), nullable=True)
    route_type = Column(String(20), default="location", nullable=False)  # round_trip, one_way, location

    category = Column(String(100), index=True, nullable=True)
    region = Column(String(100), index=True, nullable=True)
    address = Column(String(500), nullable=True)
    website_url = Column(String(500), nullable=True)
    contact_email = Column(String(320), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    image_url = Column(String(500), nullable=True)

    is_favorite = Column(Boolean, default=False, nullable=False)
    is_done = Column(Boolean, default=False, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="trips")
    photos = relationship("TripPhoto", back_populates="trip", cascade="all, delete-orphan", passive_deletes=True)
    videos = relationship("TripVideo", back_populates="trip", cascade="all, delete-orphan", passive_deletes=True)
    journal_entries = relationship("TripJournalEntry", back_populates="trip", cascade="all, delete-orphan", passive_deletes=True)
    ratings = relationship("TripRating", back_populates="trip", cascade="all, delete-orphan", passive_deletes=True)
    attributes = relationship("TripAttribute", back_populates="trip", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("TripComment", back_populates="trip", cascade="all, delete-orphan", passive_deletes=True)
    participant_entries = relationship("TripParticipant", back_populates="trip", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        try:
            obj_id = getattr(self, 'id', 'N/A')
            title = getattr(self, 'title', 'N/A')
            return f"<Trip(id={obj_id}, title='{title}')>"
        except Exception:
            return "<Trip(instance)>"


class TripPhoto(BaseModel):
    __tablename__ = "trip_photos"

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), index=True, nullable=False)
    photo_url = Column(String(500), nullable=False)
    caption = Column(Text, nullable=True)
    is_primary = Column(Boolean, default=False, nullable=False)

    trip = relationship("Trip", back_populates="photos")


class TripVideo(BaseModel):
    """YouTube or TikTok video linked to a trip"""
    __tablename__ = "trip_videos"

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    video_id = Column(String(255), nullable=False)
    url = Column(String(500), nullable=False)
    title = Column(String(255), nullable=True)
    platform = Column(String(20), nullable=False)  # youtube, tiktok

    trip = relationship("Trip", back_populates="videos")


class TripJournalEntry(BaseModel):
    __tablename__ = "trip_journal"

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    entry_date = Column(DateTime, nullable=False)
    mood = Column(String(20), nullable=True)

    trip = relationship("Trip", back_populates="journal_entries")


class TripRating(BaseModel):
    """One rating per user and trip"""
    __tablename__ = "trip_ratings"
    __table_args__ = (UniqueConstraint("trip_id", "user_id", name="uq_trip_rating_user"),)

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    score = Column(Integer, nullable=False)  # 1-5
    comment = Column(Text, nullable=True)

    trip = relationship("Trip", back_populates="ratings")
    user = relationship("User")


class TripAttribute(BaseModel):
    __tablename__ = "trip_attributes"
    __table_args__ = (UniqueConstraint("trip_id", "attribute", name="uq_trip_attribute"),)

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), index=True, nullable=False)
    attribute = Column(String(100), nullable=False)

    trip = relationship("Trip", back_populates="attributes")


class TripComment(BaseModel):
    __tablename__ = "trip_comments"

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)

    trip = relationship("Trip", back_populates="comments")
    user = relationship("User")


class TripParticipant(BaseModel):
    __tablename__ = "trip_participants"

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=True)
    status = Column(String(20), default="pending", nullable=False)  # confirmed, pending, declined

    trip = relationship("Trip", back_populates="participant_entries")
