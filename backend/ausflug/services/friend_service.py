"""
Friend requests and friendships
"""

from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ausflug.models.notification import Friendship
from ausflug.models.user import User
from ausflug.services.push_service import PushNotificationService

SELF_FRIEND_ERROR = "Du kannst dich nicht selbst als Freund hinzufügen"


class FriendService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.push = PushNotificationService(db)

    async def lookup_by_email(self, email: str, current_user: User) -> Optional[Dict[str, Any]]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()
        if user is None:
            return None
        if user.id == current_user.id:
            raise ValidationError(SELF_FRIEND_ERROR)
        return {"id": user.id, "name": user.name, "email": user.email}

    async def _pair_rows(self, user_id: int, friend_id: int) -> List[Friendship]:
        result = await self.db.execute(
            select(Friendship).where(or_(
                and_(Friendship.user_id == user_id, Friendship.friend_id == friend_id),
                and_(Friendship.user_id == friend_id, Friendship.friend_id == user_id),
            ))
        )
        return result.scalars().all()

    async def send_request(self, current_user: User, user_id: Optional[int] = None,
                           email: Optional[str] = None) -> Dict[str, Any]:
        if user_id is not None:
            target = (await self.db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
            if target is None:
                raise NotFoundError("Benutzer", user_id)
        else:
            target = (await self.db.execute(
                select(User).where(User.email == email.lower())
            )).scalar_one_or_none()
            if target is None:
                raise NotFoundError("Benutzer")

        if target.id == current_user.id:
            raise ValidationError(SELF_FRIEND_ERROR)

        existing = await self._pair_rows(current_user.id, target.id)
        statuses = {row.status for row in existing}
        if "blocked" in statuses:
            raise ForbiddenError("Freundschaftsanfrage nicht möglich")
        if "accepted" in statuses:
            raise ConflictError("Ihr seid bereits befreundet")
        if "pending" in statuses:
            raise ConflictError("Freundschaftsanfrage bereits gesendet")

        self.db.add_all([
            Friendship(user_id=current_user.id, friend_id=target.id, status="pending", requested_by=current_user.id),
            Friendship(user_id=target.id, friend_id=current_user.id, status="pending", requested_by=current_user.id),
        ])
        await self.db.commit()
        logger.info(f"🤝 Friend request {current_user.id} -> {target.id}")

        await self.push.notify_friend_request(current_user.id, target.id)
        return {"success": True, "friend_id": target.id}

    async def accept_request(self, current_user: User, from_user_id: int) -> Dict[str, Any]:
        """Only the recipient of a pending request may accept it"""
        result = await self.db.execute(
            update(Friendship)
            .where(
                Friendship.status == "pending",
                Friendship.requested_by == from_user_id,
                or_(
                    and_(Friendship.user_id == current_user.id, Friendship.friend_id == from_user_id),
                    and_(Friendship.user_id == from_user_id, Friendship.friend_id == current_user.id),
                ),
            )
            .values(status="accepted")
        )
        if not result.rowcount:
            await self.db.rollback()
            raise NotFoundError("Freundschaftsanfrage")
        await self.db.commit()
        logger.info(f"🤝 Friend request {from_user_id} -> {current_user.id} accepted")

        await self.push.notify_friend_accepted(current_user.id, from_user_id)
        return {"success": True}

    async def list_friends(self, user_id: int, status: str = "accepted") -> List[Dict[str, Any]]:
        result = await self.db.execute(
            select(Friendship, User)
            .join(User, User.id == Friendship.friend_id)
            .where(Friendship.user_id == user_id, Friendship.status == status)
            .order_by(Friendship.created_at.desc(), Friendship.id.desc())
        )
        friends = []
        for friendship, friend in result.all():
            entry = {
                "id": friendship.id,
                "friend_id": friend.id,
                "name": friend.name,
                "email": friend.email,
                "status": friendship.status,
                "created_at": friendship.created_at,
            }
            if status == "pending":
                entry["is_sender"] = friendship.requested_by == user_id
            friends.append(entry)
        return friends
