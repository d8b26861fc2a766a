"""
Destination model
"""

from sqlalchemy import Column, String, Text, Integer, ForeignKey
from ausflug.models.base import BaseModel


class Destination(BaseModel):
    """Saved place owned by a user"""
    __tablename__ = "destinations"

    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=False)
    image_url = Column(String(500), nullable=True)

    def __repr__(self):
        try:
            return f"<Destination(id={getattr(self, 'id', 'N/A')}, name='{getattr(self, 'name', 'N/A')}')>"
        except Exception:
            return "<Destination(instance)>"
