"""
Day plan and planning list schemas
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ausflug.schemas.common import parse_naive_datetime, validate_time_of_day
from ausflug.schemas.trip import TripResponse

Priority = Literal["low", "medium", "high"]


class DayPlanCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    is_public: bool = False
    is_draft: bool = True

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_datetime(cls, v):
        return parse_naive_datetime(v)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("Enddatum muss nach dem Startdatum liegen")
        return self


class DayPlanUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_public: Optional[bool] = None
    is_draft: Optional[bool] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_datetime(cls, v):
        return parse_naive_datetime(v)


class DayPlanResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    is_public: bool
    is_draft: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DayPlanItemCreate(BaseModel):
    trip_id: int
    day_number: int = Field(1, ge=1)
    order_index: Optional[int] = Field(None, ge=0)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, v):
        return validate_time_of_day(v)


class DayPlanItemUpdate(BaseModel):
    day_number: Optional[int] = Field(None, ge=1)
    order_index: Optional[int] = Field(None, ge=0)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, v):
        return validate_time_of_day(v)


class DayPlanItemResponse(BaseModel):
    id: int
    day_plan_id: int
    trip_id: int
    day_number: int
    order_index: int
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    notes: Optional[str] = None
    trip: Optional[TripResponse] = None

    class Config:
        from_attributes = True


class PackingItemCreate(BaseModel):
    item: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(1, ge=1)
    category: Optional[str] = Field(None, max_length=100)


class PackingItemUpdate(BaseModel):
    item: Optional[str] = Field(None, min_length=1, max_length=255)
    quantity: Optional[int] = Field(None, ge=1)
    category: Optional[str] = Field(None, max_length=100)


class PackingItemToggle(BaseModel):
    is_packed: bool


class PackingItemResponse(BaseModel):
    id: int
    day_plan_id: int
    item: str
    quantity: int
    is_packed: bool
    category: Optional[str] = None

    class Config:
        from_attributes = True


class BudgetItemCreate(BaseModel):
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=255)
    estimated_cost: Decimal = Field(..., ge=0, decimal_places=2)
    actual_cost: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    currency: str = Field("CHF", min_length=3, max_length=3)


class BudgetActualUpdate(BaseModel):
    actual_cost: Optional[Decimal] = Field(None, ge=0, decimal_places=2)


class BudgetItemResponse(BaseModel):
    id: int
    day_plan_id: int
    category: str
    description: str
    estimated_cost: float
    actual_cost: Optional[float] = None
    currency: str

    class Config:
        from_attributes = True


class BudgetSummary(BaseModel):
    items: List[BudgetItemResponse]
    estimated: float
    actual: float
    currency: str


class ChecklistItemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    priority: Priority = "medium"
    due_date: Optional[datetime] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_datetime(cls, v):
        return parse_naive_datetime(v)


class ChecklistItemToggle(BaseModel):
    is_completed: bool


class ChecklistItemResponse(BaseModel):
    id: int
    day_plan_id: int
    title: str
    is_completed: bool
    priority: str
    due_date: Optional[datetime] = None

    class Config:
        from_attributes = True
