"""
Day plan export endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.database import get_async_db
from ausflug.core.security import get_current_user_optional
from ausflug.models.user import User
from ausflug.services.day_plan_service import DayPlanService
from ausflug.services.export_service import build_plan_ics, build_plan_text, export_filename

router = APIRouter()


def _export_response(content: str, media_type: str, filename: str, as_json: bool):
    if as_json:
        return {"content": content}
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/day-plans/{plan_id}/ical")
async def export_ical(
    plan_id: int,
    as_json: bool = False,
    db: AsyncSession = Depends(get_async_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    service = DayPlanService(db)
    plan = await service.get_visible_plan(plan_id, current_user)
    items = await service.get_items(plan.id)
    return _export_response(
        build_plan_ics(plan, items), "text/calendar; charset=utf-8", export_filename(plan, "ics"), as_json
    )


@router.get("/day-plans/{plan_id}/text")
async def export_text(
    plan_id: int,
    as_json: bool = False,
    db: AsyncSession = Depends(get_async_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    service = DayPlanService(db)
    plan = await service.get_visible_plan(plan_id, current_user)
    items = await service.get_items(plan.id)
    return _export_response(
        build_plan_text(plan, items), "text/plain; charset=utf-8", export_filename(plan, "txt"), as_json
    )
