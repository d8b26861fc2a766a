"""
Data models
"""

from .base import Base
from .user import User, UserSettings, UserLocation, PasswordResetToken
from .trip import (
    Trip,
    TripPhoto,
    TripVideo,
    TripJournalEntry,
    TripRating,
    TripAttribute,
    TripComment,
    TripParticipant,
)
from .destination import Destination
from .day_plan import DayPlan, DayPlanItem, PackingListItem, BudgetItem, ChecklistItem
from .notification import Notification, PushSubscription, Friendship

__all__ = [
    "Base",
    "User",
    "UserSettings",
    "UserLocation",
    "PasswordResetToken",
    "Trip",
    "TripPhoto",
    "TripVideo",
    "TripJournalEntry",
    "TripRating",
    "TripAttribute",
    "TripComment",
    "TripParticipant",
    "Destination",
    "DayPlan",
    "DayPlanItem",
    "PackingListItem",
    "BudgetItem",
    "ChecklistItem",
    "Notification",
    "PushSubscription",
    "Friendship",
]
