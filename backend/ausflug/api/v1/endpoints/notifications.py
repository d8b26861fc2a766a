"""
Notification centre endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.database import get_async_db
from ausflug.core.security import get_current_user
from ausflug.models.user import User
from ausflug.schemas.push import NotificationResponse
from ausflug.services.notification_service import NotificationService

router = APIRouter()


@router.get("/", response_model=List[NotificationResponse])
async def get_notifications(
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = False,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await NotificationService(db).list_notifications(current_user.id, limit, unread_only)


@router.get("/unread-count")
async def get_unread_count(
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": await NotificationService(db).unread_count(current_user.id)}


@router.post("/read-all")
async def mark_all_read(
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    updated = await NotificationService(db).mark_all_as_read(current_user.id)
    return {"success": True, "updated": updated}


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    await NotificationService(db).mark_as_read(current_user.id, notification_id)
    return {"success": True}
