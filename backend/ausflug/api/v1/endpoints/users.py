"""
User endpoints
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.database import get_async_db
from ausflug.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ausflug.core.security import get_current_user, get_password_hash, is_admin, require_admin, verify_password
from ausflug.models.user import User
from ausflug.schemas.auth import ChangePassword, UserOut, UserUpdate

router = APIRouter()


@router.get("/", response_model=List[UserOut])
async def get_users(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(require_admin),
):
    """List users (admin only)"""
    result = await db.execute(select(User).order_by(User.id).offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/me", response_model=UserOut)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=UserOut)
async def update_me(
    payload: UserUpdate,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    """Update name and email; the email stays unique"""
    if payload.email is not None:
        email = payload.email.lower()
        if email != current_user.email:
            existing = await db.execute(select(User.id).where(User.email == email, User.id != current_user.id))
            if existing.scalar_one_or_none() is not None:
                raise ConflictError("E-Mail bereits vergeben")
            current_user.email = email

    if payload.name is not None:
        current_user.name = payload.name

    await db.commit()
    await db.refresh(current_user)
    return current_user


@router.post("/change-password")
async def change_password(
    payload: ChangePassword,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.old_password, current_user.hashed_password):
        raise ValidationError("Altes Passwort ist falsch")
    current_user.hashed_password = get_password_hash(payload.new_password)
    await db.commit()
    return {"success": True, "message": "Passwort geändert"}


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    """Admin or the user themselves"""
    if not (is_admin(current_user) or current_user.id == user_id):
        raise ForbiddenError("Nur Administratoren oder der Benutzer selbst")
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user:
        raise NotFoundError("Benutzer", user_id)
    return user
