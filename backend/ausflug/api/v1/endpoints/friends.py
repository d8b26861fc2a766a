"""
Friend endpoints
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.database import get_async_db
from ausflug.core.security import get_current_user
from ausflug.models.user import User
from ausflug.schemas.push import FriendRequestCreate
from ausflug.services.friend_service import FriendService

router = APIRouter()


@router.get("/")
async def get_friends(
    status: Literal["accepted", "pending", "blocked"] = "accepted",
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await FriendService(db).list_friends(current_user.id, status)


@router.get("/lookup")
async def lookup_user(
    email: EmailStr = Query(...),
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await FriendService(db).lookup_by_email(email, current_user)


@router.post("/requests", status_code=201)
async def send_friend_request(
    payload: FriendRequestCreate,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await FriendService(db).send_request(current_user, payload.user_id, payload.email)


@router.post("/requests/{from_user_id}/accept")
async def accept_friend_request(
    from_user_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await FriendService(db).accept_request(current_user, from_user_id)
