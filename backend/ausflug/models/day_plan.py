"""
Day plans and their planning lists
"""

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Boolean, Numeric
from sqlalchemy.orm import relationship
from ausflug.models.base import BaseModel

CHECKLIST_PRIORITIES = ("low", "medium", "high")


class DayPlan(BaseModel):
    """Itinerary spanning one or more days"""
    __tablename__ = "day_plans"

    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)
    is_draft = Column(Boolean, default=True, nullable=False)

    user = relationship("User", back_populates="day_plans")
    items = relationship("DayPlanItem", back_populates="day_plan", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        try:
            return f"<DayPlan(id={getattr(self, 'id', 'N/A')}, title='{getattr(self, 'title', 'N/A')}')>"
        except Exception:
            return "<DayPlan(instance)>"


class DayPlanItem(BaseModel):
    """Trip scheduled on a given day of a plan"""
    __tablename__ = "day_plan_items"

    day_plan_id = Column(Integer, ForeignKey("day_plans.id", ondelete="CASCADE"), index=True, nullable=False)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), index=True, nullable=False)
    day_number = Column(Integer, default=1, nullable=False)
    order_index = Column(Integer, default=0, nullable=False)
    start_time = Column(String(5), nullable=True)  # HH:MM
    end_time = Column(String(5), nullable=True)  # HH:MM
    notes = Column(Text, nullable=True)

    day_plan = relationship("DayPlan", back_populates="items")
    trip = relationship("Trip")


class PackingListItem(BaseModel):
    __tablename__ = "packing_list_items"

    day_plan_id = Column(Integer, ForeignKey("day_plans.id", ondelete="CASCADE"), index=True, nullable=False)
    item = Column(String(255), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    is_packed = Column(Boolean, default=False, nullable=False)
    category = Column(String(100), nullable=True)


class BudgetItem(BaseModel):
    __tablename__ = "budget_items"

    day_plan_id = Column(Integer, ForeignKey("day_plans.id", ondelete="CASCADE"), index=True, nullable=False)
    category = Column(String(100), nullable=False)
    description = Column(String(255), nullable=False)
    estimated_cost = Column(Numeric(10, 2), nullable=False)
    actual_cost = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(3), default="CHF", nullable=False)


class ChecklistItem(BaseModel):
    __tablename__ = "checklist_items"

    day_plan_id = Column(Integer, ForeignKey("day_plans.id", ondelete="CASCADE"), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    priority = Column(String(10), default="medium", nullable=False)  # low, medium, high
    due_date = Column(DateTime, nullable=True)
