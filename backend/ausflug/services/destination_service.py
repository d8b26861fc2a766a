"""
Destination service
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.errors import NotFoundError
from ausflug.models.destination import Destination
from ausflug.schemas.destination import DestinationCreate, DestinationUpdate


class DestinationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: int) -> List[Destination]:
        result = await self.db.execute(
            select(Destination).where(Destination.user_id == user_id).order_by(Destination.name)
        )
        return result.scalars().all()

    async def get(self, destination_id: int) -> Optional[Destination]:
        result = await self.db.execute(select(Destination).where(Destination.id == destination_id))
        return result.scalar_one_or_none()

    async def get_owned(self, destination_id: int, user_id: int) -> Destination:
        """Other users' destinations are reported as missing"""
        destination = await self.get(destination_id)
        if not destination or destination.user_id != user_id:
            raise NotFoundError("Ziel", destination_id)
        return destination

    async def create(self, data: DestinationCreate, user_id: int) -> Destination:
        destination = Destination(user_id=user_id, **data.model_dump())
        self.db.add(destination)
        await self.db.commit()
        await self.db.refresh(destination)
        return destination

    async def update(self, destination_id: int, data: DestinationUpdate, user_id: int) -> Destination:
        destination = await self.get_owned(destination_id, user_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(destination, field, value)
        await self.db.commit()
        await self.db.refresh(destination)
        return destination

    async def delete(self, destination_id: int, user_id: int) -> None:
        destination = await self.get_owned(destination_id, user_id)
        await self.db.delete(destination)
        await self.db.commit()
