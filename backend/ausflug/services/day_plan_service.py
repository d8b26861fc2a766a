"""
Day plans, plan items and planning lists
"""
from decimal import Decimal
from typing import List, Optional

from loguru import logger
from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ausflug.core.errors import ForbiddenError, NotFoundError, ValidationError
from ausflug.core.security import is_admin
from ausflug.models.day_plan import BudgetItem, ChecklistItem, DayPlan, DayPlanItem, PackingListItem
from ausflug.models.trip import Trip
from ausflug.models.user import User
from ausflug.schemas.day_plan import (
    BudgetItemCreate,
    ChecklistItemCreate,
    DayPlanCreate,
    DayPlanItemCreate,
    DayPlanItemUpdate,
    DayPlanUpdate,
    PackingItemCreate,
    PackingItemUpdate,
)

PLAN_CHILD_MODELS = (DayPlanItem, PackingListItem, BudgetItem, ChecklistItem)

LIST_RESOURCE_NAMES = {
    PackingListItem: "Packlisteneintrag",
    BudgetItem: "Budgetposten",
    ChecklistItem: "Checklisteneintrag",
}


def can_view_plan(plan: DayPlan, user: Optional[User]) -> bool:
    if plan.is_public or not plan.is_draft:
        return True
    return user is not None and (is_admin(user) or plan.user_id == user.id)


class DayPlanService:
    """Day plan CRUD with items, packing list, budget and checklist"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_plan(self, plan_id: int) -> Optional[DayPlan]:
        result = await self.db.execute(select(DayPlan).where(DayPlan.id == plan_id))
        return result.scalar_one_or_none()

    async def get_visible_plan(self, plan_id: int, user: Optional[User]) -> DayPlan:
        plan = await self.get_plan(plan_id)
        if not plan or not can_view_plan(plan, user):
            raise NotFoundError("Tagesplan", plan_id)
        return plan

    async def get_editable_plan(self, plan_id: int, user: User) -> DayPlan:
        plan = await self.get_plan(plan_id)
        if not plan:
            raise NotFoundError("Tagesplan", plan_id)
        if not (is_admin(user) or plan.user_id == user.id):
            raise ForbiddenError("Nur der Besitzer kann diesen Tagesplan bearbeiten")
        return plan

    async def list_for_user(self, user_id: int) -> List[DayPlan]:
        result = await self.db.execute(
            select(DayPlan).where(DayPlan.user_id == user_id).order_by(DayPlan.start_date.desc(), DayPlan.id.desc())
        )
        return result.scalars().all()

    async def create_plan(self, data: DayPlanCreate, user_id: int) -> DayPlan:
        plan = DayPlan(user_id=user_id, **data.model_dump())
        self.db.add(plan)
        await self.db.commit()
        await self.db.refresh(plan)
        logger.info(f"Day plan {plan.id} created by user {user_id}")
        return plan

    async def update_plan(self, plan: DayPlan, data: DayPlanUpdate) -> DayPlan:
        changes = data.model_dump(exclude_unset=True)
        start = changes.get("start_date") or plan.start_date
        end = changes.get("end_date") or plan.end_date
        if end < start:
            raise ValidationError("Enddatum muss nach dem Startdatum liegen")
        for field, value in changes.items():
            if field in ("title", "start_date", "end_date") and value is None:
                continue
            setattr(plan, field, value)
        await self.db.commit()
        await self.db.refresh(plan)
        return plan

    async def delete_plan(self, plan: DayPlan) -> None:
        for model in PLAN_CHILD_MODELS:
            await self.db.execute(delete(model).where(model.day_plan_id == plan.id))
        await self.db.delete(plan)
        await self.db.commit()
        logger.info(f"Day plan {plan.id} deleted")

    # ---- items ----
    async def get_items(self, plan_id: int) -> List[DayPlanItem]:
        """Items with their trip, ordered by day then position"""
        result = await self.db.execute(
            select(DayPlanItem)
            .options(selectinload(DayPlanItem.trip))
            .where(DayPlanItem.day_plan_id == plan_id)
            .order_by(DayPlanItem.day_number, DayPlanItem.order_index, DayPlanItem.id)
        )
        return result.scalars().all()

    async def add_item(self, plan: DayPlan, data: DayPlanItemCreate) -> DayPlanItem:
        trip = (await self.db.execute(select(Trip.id).where(Trip.id == data.trip_id))).scalar_one_or_none()
        if trip is None:
            raise NotFoundError("Ausflug", data.trip_id)

        values = data.model_dump()
        if values["order_index"] is None:
            last = (await self.db.execute(
                select(func.max(DayPlanItem.order_index)).where(
                    DayPlanItem.day_plan_id == plan.id, DayPlanItem.day_number == data.day_number
                )
            )).scalar()
            values["order_index"] = 0 if last is None else last + 1

        item = DayPlanItem(day_plan_id=plan.id, **values)
        self.db.add(item)
        await self.db.commit()
        return await self._reload_item(item.id)

    async def _reload_item(self, item_id: int) -> DayPlanItem:
        result = await self.db.execute(
            select(DayPlanItem).options(selectinload(DayPlanItem.trip)).where(DayPlanItem.id == item_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def get_editable_item(self, item_id: int, user: User) -> DayPlanItem:
        result = await self.db.execute(select(DayPlanItem).where(DayPlanItem.id == item_id))
        item = result.scalar_one_or_none()
        if not item:
            raise NotFoundError("Planeintrag", item_id)
        await self.get_editable_plan(item.day_plan_id, user)
        return item

    async def update_item(self, item: DayPlanItem, data: DayPlanItemUpdate) -> DayPlanItem:
        for field, value in data.model_dump(exclude_unset=True).items():
            if field in ("day_number", "order_index") and value is None:
                continue
            setattr(item, field, value)
        await self.db.commit()
        return await self._reload_item(item.id)

    async def remove_item(self, item: DayPlanItem) -> None:
        await self.db.delete(item)
        await self.db.commit()

    # ---- planning lists ----
    async def _get_list_item(self, model, item_id: int, plan_id: int):
        result = await self.db.execute(
            select(model).where(model.id == item_id, model.day_plan_id == plan_id)
        )
        item = result.scalar_one_or_none()
        if not item:
            raise NotFoundError(LIST_RESOURCE_NAMES[model], item_id)
        return item

    async def _save(self, obj):
        self.db.add(obj)
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def delete_list_item(self, model, item_id: int, plan_id: int) -> None:
        item = await self._get_list_item(model, item_id, plan_id)
        await self.db.delete(item)
        await self.db.commit()

    async def list_packing(self, plan_id: int) -> List[PackingListItem]:
        result = await self.db.execute(
            select(PackingListItem)
            .where(PackingListItem.day_plan_id == plan_id)
            .order_by(PackingListItem.category, PackingListItem.id)
        )
        return result.scalars().all()

    async def add_packing(self, plan: DayPlan, data: PackingItemCreate) -> PackingListItem:
        return await self._save(PackingListItem(day_plan_id=plan.id, **data.model_dump()))

    async def update_packing(self, plan: DayPlan, item_id: int, data: PackingItemUpdate) -> PackingListItem:
        item = await self._get_list_item(PackingListItem, item_id, plan.id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if field in ("item", "quantity") and value is None:
                continue
            setattr(item, field, value)
        return await self._save(item)

    async def toggle_packing(self, plan: DayPlan, item_id: int, is_packed: bool) -> PackingListItem:
        item = await self._get_list_item(PackingListItem, item_id, plan.id)
        item.is_packed = is_packed
        return await self._save(item)

    async def list_budget(self, plan_id: int) -> dict:
        result = await self.db.execute(
            select(BudgetItem).where(BudgetItem.day_plan_id == plan_id).order_by(BudgetItem.category, BudgetItem.id)
        )
        items = result.scalars().all()
        estimated = sum((Decimal(item.estimated_cost) for item in items), Decimal("0"))
        actual = sum((Decimal(item.actual_cost) for item in items if item.actual_cost is not None), Decimal("0"))
        currency = items[0].currency if items else "CHF"
        return {"items": items, "estimated": float(estimated), "actual": float(actual), "currency": currency}

    async def add_budget(self, plan: DayPlan, data: BudgetItemCreate) -> BudgetItem:
        values = data.model_dump()
        values["currency"] = values["currency"].upper()
        return await self._save(BudgetItem(day_plan_id=plan.id, **values))

    async def update_budget_actual(self, plan: DayPlan, item_id: int, actual_cost: Optional[Decimal]) -> BudgetItem:
        item = await self._get_list_item(BudgetItem, item_id, plan.id)
        item.actual_cost = actual_cost
        return await self._save(item)

    async def list_checklist(self, plan_id: int) -> List[ChecklistItem]:
        priority_rank = case(
            (ChecklistItem.priority == "high", 0),
            (ChecklistItem.priority == "medium", 1),
            else_=2,
        )
        result = await self.db.execute(
            select(ChecklistItem)
            .where(ChecklistItem.day_plan_id == plan_id)
            .order_by(
                ChecklistItem.is_completed,
                priority_rank,
                ChecklistItem.due_date.is_(None),
                ChecklistItem.due_date,
                ChecklistItem.id,
            )
        )
        return result.scalars().all()

    async def add_checklist(self, plan: DayPlan, data: ChecklistItemCreate) -> ChecklistItem:
        return await self._save(ChecklistItem(day_plan_id=plan.id, **data.model_dump()))

    async def toggle_checklist(self, plan: DayPlan, item_id: int, is_completed: bool) -> ChecklistItem:
        item = await self._get_list_item(ChecklistItem, item_id, plan.id)
        item.is_completed = is_completed
        return await self._save(item)
