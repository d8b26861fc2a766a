"""
Authentication endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.database import get_async_db
from ausflug.core.errors import ConflictError, UnauthorizedError
from ausflug.core.security import create_access_token, get_current_user, get_password_hash, verify_password
from ausflug.models.user import User
from ausflug.schemas.auth import ForgotPassword, ResetPassword, Token, UserLogin, UserOut, UserRegister
from ausflug.services.password_reset_service import PasswordResetService

router = APIRouter()

INVALID_CREDENTIALS = "Ungültige E-Mail oder Passwort"


@router.post("/register", response_model=UserOut, status_code=201)
async def register(user_in: UserRegister, db: AsyncSession = Depends(get_async_db)):
    email = user_in.email.lower()
    filters = [User.email == email]
    if user_in.username:
        filters.append(User.username == user_in.username)

    existing = await db.execute(select(User).where(or_(*filters)))
    if existing.scalars().first():
        raise ConflictError("E-Mail oder Benutzername bereits registriert")

    user = User(
        email=email,
        username=user_in.username,
        name=user_in.name,
        hashed_password=get_password_hash(user_in.password),
        login_method="local",
        role="user",
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"👤 User {user.id} registered")
    return user


@router.post("/login", response_model=Token)
async def login(form: UserLogin, db: AsyncSession = Depends(get_async_db)):
    if form.email:
        query = select(User).where(User.email == form.email.lower())
    else:
        query = select(User).where(User.username == form.username)
    user = (await db.execute(query)).scalar_one_or_none()

    if not user or not user.is_active or not verify_password(form.password, user.hashed_password):
        raise UnauthorizedError(INVALID_CREDENTIALS)

    user.last_signed_in = datetime.utcnow()
    await db.commit()

    access_token = create_access_token(data={"sub": str(user.id)})
    return Token(access_token=access_token)


@router.get("/me", response_model=UserOut)
async def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/logout")
async def logout():
    """Tokens are stateless; the client discards its token"""
    return {"success": True}


@router.post("/forgot-password")
async def forgot_password(payload: ForgotPassword, db: AsyncSession = Depends(get_async_db)):
    message = await PasswordResetService(db).request_reset(payload.email)
    return {"success": True, "message": message}


@router.post("/reset-password")
async def reset_password(payload: ResetPassword, db: AsyncSession = Depends(get_async_db)):
    await PasswordResetService(db).reset_password(payload.token, payload.new_password)
    return {"success": True, "message": "Passwort wurde zurückgesetzt"}
