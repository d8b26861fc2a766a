"""
Notifications, push subscriptions and friendships
"""

from sqlalchemy import Column, String, Text, Integer, ForeignKey, Boolean, UniqueConstraint
from ausflug.models.base import BaseModel

NOTIFICATION_TYPES = ("friend_request", "friend_accepted", "nearby_trip", "new_trip", "system")
FRIENDSHIP_STATUSES = ("pending", "accepted", "blocked")


class Notification(BaseModel):
    """In-app notification history"""
    __tablename__ = "notifications"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False)
    related_id = Column(Integer, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)


class PushSubscription(BaseModel):
    """Web push endpoint or native device token"""
    __tablename__ = "push_subscriptions"
    __table_args__ = (UniqueConstraint("user_id", "endpoint", name="uq_push_user_endpoint"),)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    endpoint = Column(String(1000), nullable=False)
    auth = Column(String(255), nullable=True)
    p256dh = Column(String(255), nullable=True)
    user_agent = Column(String(500), nullable=True)
    platform = Column(String(20), default="web", nullable=False)  # web, capacitor
    device_platform = Column(String(20), nullable=True)  # ios, android


class Friendship(BaseModel):
    """Directed friendship row; every relation is stored in both directions"""
    __tablename__ = "friendships"
    __table_args__ = (UniqueConstraint("user_id", "friend_id", name="uq_friendship_pair"),)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    friend_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    requested_by = Column(Integer, ForeignKey("users.id"), nullable=False)
