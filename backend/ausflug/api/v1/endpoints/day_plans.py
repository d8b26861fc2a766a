"""
Day plan endpoints: plans, items, packing list, budget and checklist
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.database import get_async_db
from ausflug.core.security import get_current_user, get_current_user_optional
from ausflug.models.day_plan import BudgetItem, ChecklistItem, DayPlan, PackingListItem
from ausflug.models.user import User
from ausflug.schemas.day_plan import (
    BudgetActualUpdate,
    BudgetItemCreate,
    BudgetItemResponse,
    BudgetSummary,
    ChecklistItemCreate,
    ChecklistItemResponse,
    ChecklistItemToggle,
    DayPlanCreate,
    DayPlanItemCreate,
    DayPlanItemResponse,
    DayPlanItemUpdate,
    DayPlanResponse,
    DayPlanUpdate,
    PackingItemCreate,
    PackingItemResponse,
    PackingItemToggle,
    PackingItemUpdate,
)
from ausflug.services.day_plan_service import DayPlanService

router = APIRouter()


async def visible_plan(
    plan_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
) -> DayPlan:
    return await DayPlanService(db).get_visible_plan(plan_id, current_user)


async def editable_plan(
    plan_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
) -> DayPlan:
    return await DayPlanService(db).get_editable_plan(plan_id, current_user)


@router.get("/", response_model=List[DayPlanResponse])
async def get_day_plans(
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await DayPlanService(db).list_for_user(current_user.id)


@router.post("/", response_model=DayPlanResponse, status_code=201)
async def create_day_plan(
    plan_in: DayPlanCreate,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await DayPlanService(db).create_plan(plan_in, current_user.id)


@router.patch("/items/{item_id}", response_model=DayPlanItemResponse)
async def update_item(
    item_id: int,
    item_in: DayPlanItemUpdate,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    service = DayPlanService(db)
    item = await service.get_editable_item(item_id, current_user)
    return await service.update_item(item, item_in)


@router.delete("/items/{item_id}")
async def remove_item(
    item_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    service = DayPlanService(db)
    item = await service.get_editable_item(item_id, current_user)
    await service.remove_item(item)
    return {"success": True}


@router.get("/{plan_id}", response_model=DayPlanResponse)
async def get_day_plan(plan: DayPlan = Depends(visible_plan)):
    return plan


@router.put("/{plan_id}", response_model=DayPlanResponse)
async def update_day_plan(
    plan_in: DayPlanUpdate,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    return await DayPlanService(db).update_plan(plan, plan_in)


@router.delete("/{plan_id}")
async def delete_day_plan(plan: DayPlan = Depends(editable_plan), db: AsyncSession = Depends(get_async_db)):
    await DayPlanService(db).delete_plan(plan)
    return {"success": True, "message": "Tagesplan gelöscht"}


# ---- items ----
@router.get("/{plan_id}/items", response_model=List[DayPlanItemResponse])
async def get_items(plan: DayPlan = Depends(visible_plan), db: AsyncSession = Depends(get_async_db)):
    return await DayPlanService(db).get_items(plan.id)


@router.post("/{plan_id}/items", response_model=DayPlanItemResponse, status_code=201)
async def add_item(
    item_in: DayPlanItemCreate,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    return await DayPlanService(db).add_item(plan, item_in)


# ---- packing list ----
@router.get("/{plan_id}/packing", response_model=List[PackingItemResponse])
async def get_packing_list(plan: DayPlan = Depends(visible_plan), db: AsyncSession = Depends(get_async_db)):
    return await DayPlanService(db).list_packing(plan.id)


@router.post("/{plan_id}/packing", response_model=PackingItemResponse, status_code=201)
async def add_packing_item(
    item_in: PackingItemCreate,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    return await DayPlanService(db).add_packing(plan, item_in)


@router.patch("/{plan_id}/packing/{item_id}", response_model=PackingItemResponse)
async def update_packing_item(
    item_id: int,
    item_in: PackingItemUpdate,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    return await DayPlanService(db).update_packing(plan, item_id, item_in)


@router.post("/{plan_id}/packing/{item_id}/toggle", response_model=PackingItemResponse)
async def toggle_packing_item(
    item_id: int,
    payload: PackingItemToggle,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    return await DayPlanService(db).toggle_packing(plan, item_id, payload.is_packed)


@router.delete("/{plan_id}/packing/{item_id}")
async def delete_packing_item(
    item_id: int,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    await DayPlanService(db).delete_list_item(PackingListItem, item_id, plan.id)
    return {"success": True}


# ---- budget ----
@router.get("/{plan_id}/budget", response_model=BudgetSummary)
async def get_budget(plan: DayPlan = Depends(visible_plan), db: AsyncSession = Depends(get_async_db)):
    return await DayPlanService(db).list_budget(plan.id)


@router.post("/{plan_id}/budget", response_model=BudgetItemResponse, status_code=201)
async def add_budget_item(
    item_in: BudgetItemCreate,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    return await DayPlanService(db).add_budget(plan, item_in)


@router.patch("/{plan_id}/budget/{item_id}", response_model=BudgetItemResponse)
async def update_budget_actual(
    item_id: int,
    payload: BudgetActualUpdate,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    return await DayPlanService(db).update_budget_actual(plan, item_id, payload.actual_cost)


@router.delete("/{plan_id}/budget/{item_id}")
async def delete_budget_item(
    item_id: int,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    await DayPlanService(db).delete_list_item(BudgetItem, item_id, plan.id)
    return {"success": True}


# ---- checklist ----
@router.get("/{plan_id}/checklist", response_model=List[ChecklistItemResponse])
async def get_checklist(plan: DayPlan = Depends(visible_plan), db: AsyncSession = Depends(get_async_db)):
    return await DayPlanService(db).list_checklist(plan.id)


@router.post("/{plan_id}/checklist", response_model=ChecklistItemResponse, status_code=201)
async def add_checklist_item(
    item_in: ChecklistItemCreate,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    return await DayPlanService(db).add_checklist(plan, item_in)


@router.post("/{plan_id}/checklist/{item_id}/toggle", response_model=ChecklistItemResponse)
async def toggle_checklist_item(
    item_id: int,
    payload: ChecklistItemToggle,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    return await DayPlanService(db).toggle_checklist(plan, item_id, payload.is_completed)


@router.delete("/{plan_id}/checklist/{item_id}")
async def delete_checklist_item(
    item_id: int,
    plan: DayPlan = Depends(editable_plan),
    db: AsyncSession = Depends(get_async_db),
):
    await DayPlanService(db).delete_list_item(ChecklistItem, item_id, plan.id)
    return {"success": True}
