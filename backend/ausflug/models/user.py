"""
User, settings, location and password reset models
"""

from sqlalchemy import Column, String, DateTime, Boolean, Integer, Float, ForeignKey
from sqlalchemy.orm import relationship
from ausflug.models.base import BaseModel


class User(BaseModel):
    """Account"""
    __tablename__ = "users"

    username = Column(String(64), unique=True, index=True, nullable=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=True)

    hashed_password = Column(String(255), nullable=True)
    login_method = Column(String(64), nullable=False, default="local")

    role = Column(String(20), nullable=False, default="user")  # admin, user

    is_active = Column(Boolean, default=True, nullable=False)
    last_signed_in = Column(DateTime, nullable=True)

    trips = relationship("Trip", back_populates="user", cascade="all, delete-orphan")
    day_plans = relationship("DayPlan", back_populates="user", cascade="all, delete-orphan")
    settings = relationship("UserSettings", back_populates="user", uselist=False, cascade="all, delete-orphan")
    location = relationship("UserLocation", back_populates="user", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        try:
            obj_id = getattr(self, 'id', 'N/A')
            return f"<User(id={obj_id})>"
        except Exception:
            return "<User(instance)>"


class UserSettings(BaseModel):
    """Notification preferences, one row per user"""
    __tablename__ = "user_settings"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    notifications_enabled = Column(Boolean, default=True, nullable=False)
    friend_request_notifications = Column(Boolean, default=True, nullable=False)
    friend_request_accepted_notifications = Column(Boolean, default=True, nullable=False)
    nearby_trip_notifications = Column(Boolean, default=True, nullable=False)
    nearby_trip_distance = Column(Integer, default=5000, nullable=False)  # metres
    location_tracking_enabled = Column(Boolean, default=True, nullable=False)

    user = relationship("User", back_populates="settings")


class UserLocation(BaseModel):
    """Last reported position of a user"""
    __tablename__ = "user_locations"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=True)

    user = relationship("User", back_populates="location")


class PasswordResetToken(BaseModel):
    __tablename__ = "password_reset_tokens"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    token = Column(String(255), unique=True, index=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
