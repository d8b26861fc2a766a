"""
Destination endpoints
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.database import get_async_db
from ausflug.core.errors import NotFoundError
from ausflug.core.security import get_current_user
from ausflug.models.user import User
from ausflug.schemas.destination import DestinationCreate, DestinationResponse, DestinationUpdate
from ausflug.services.destination_service import DestinationService

router = APIRouter()


@router.get("/", response_model=List[DestinationResponse])
async def get_destinations(
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await DestinationService(db).list_for_user(current_user.id)


@router.get("/{destination_id}", response_model=DestinationResponse)
async def get_destination(destination_id: int, db: AsyncSession = Depends(get_async_db)):
    destination = await DestinationService(db).get(destination_id)
    if not destination:
        raise NotFoundError("Ziel", destination_id)
    return destination


@router.post("/", response_model=DestinationResponse, status_code=201)
async def create_destination(
    destination: DestinationCreate,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await DestinationService(db).create(destination, current_user.id)


@router.put("/{destination_id}", response_model=DestinationResponse)
async def update_destination(
    destination_id: int,
    destination: DestinationUpdate,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await DestinationService(db).update(destination_id, destination, current_user.id)


@router.delete("/{destination_id}")
async def delete_destination(
    destination_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    await DestinationService(db).delete(destination_id, current_user.id)
    return {"success": True, "message": "Ziel gelöscht"}
