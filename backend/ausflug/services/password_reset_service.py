"""
Password reset tokens
"""

import secrets
from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.config import settings
from ausflug.core.errors import ValidationError
from ausflug.core.security import get_password_hash
from ausflug.models.user import PasswordResetToken, User

RESET_REQUESTED_MESSAGE = "Falls ein Konto mit dieser E-Mail existiert, wurde ein Link zum Zurücksetzen gesendet"


def generate_reset_token() -> str:
    return secrets.token_hex(32)


def reset_link(token: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/reset-password?token={token}"


class PasswordResetService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def request_reset(self, email: str) -> str:
        """Create a token for an existing account; the answer is identical either way"""
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()
        if user is None or not user.is_active:
            logger.info(f"Password reset requested for unknown address {email}")
            return RESET_REQUESTED_MESSAGE

        await self.db.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user.id))
        token = generate_reset_token()
        self.db.add(PasswordResetToken(
            user_id=user.id,
            token=token,
            expires_at=datetime.utcnow() + timedelta(hours=settings.PASSWORD_RESET_TOKEN_EXPIRE_HOURS),
        ))
        await self.db.commit()

        # no mail transport configured; the link goes to the log
        logger.info(f"📧 Password reset link for user {user.id}: {reset_link(token)}")
        return RESET_REQUESTED_MESSAGE

    async def reset_password(self, token: str, new_password: str) -> None:
        result = await self.db.execute(select(PasswordResetToken).where(PasswordResetToken.token == token))
        reset = result.scalar_one_or_none()
        if reset is None:
            raise ValidationError("Ungültiger oder abgelaufener Token")

        if reset.expires_at < datetime.utcnow():
            await self.db.execute(delete(PasswordResetToken).where(PasswordResetToken.id == reset.id))
            await self.db.commit()
            raise ValidationError("Token abgelaufen")

        user = (await self.db.execute(select(User).where(User.id == reset.user_id))).scalar_one_or_none()
        if user is None:
            raise ValidationError("Ungültiger oder abgelaufener Token")

        user.hashed_password = get_password_hash(new_password)
        await self.db.execute(delete(PasswordResetToken).where(PasswordResetToken.id == reset.id))
        await self.db.commit()
        logger.info(f"🔑 Password reset for user {user.id}")

    async def cleanup_expired(self) -> int:
        result = await self.db.execute(
            delete(PasswordResetToken).where(PasswordResetToken.expires_at < datetime.utcnow())
        )
        await self.db.commit()
        return result.rowcount or 0
