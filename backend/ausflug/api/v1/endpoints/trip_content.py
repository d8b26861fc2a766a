"""
Trip photos, videos, journal, attributes, comments and participants
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.database import get_async_db
from ausflug.core.security import get_current_user, get_current_user_optional
from ausflug.models.trip import Trip
from ausflug.models.user import User
from ausflug.schemas.trip import (
    AttributeCreate,
    AttributeResponse,
    CommentCreate,
    CommentResponse,
    JournalCreate,
    JournalResponse,
    JournalUpdate,
    ParticipantCreate,
    ParticipantResponse,
    ParticipantStatusUpdate,
    PhotoCreate,
    PhotoResponse,
    PhotoUpload,
    VideoCreate,
    VideoResponse,
)
from ausflug.services import storage_service
from ausflug.services.trip_content_service import TripContentService
from ausflug.services.trip_service import TripService

router = APIRouter()


async def visible_trip(
    trip_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
) -> Trip:
    return await TripService(db).get_visible_trip(trip_id, current_user)


async def editable_trip(
    trip_id: int,
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
) -> Trip:
    return await TripService(db).get_editable_trip(trip_id, current_user)


# ---- photos ----
@router.get("/{trip_id}/photos", response_model=List[PhotoResponse])
async def list_photos(trip: Trip = Depends(visible_trip), db: AsyncSession = Depends(get_async_db)):
    return await TripContentService(db).list_photos(trip.id)


@router.post("/{trip_id}/photos", response_model=PhotoResponse, status_code=201)
async def add_photo(
    photo: PhotoCreate,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    return await TripContentService(db).add_photo(trip, photo.photo_url, photo.caption, photo.is_primary)


@router.post("/{trip_id}/photos/base64", response_model=PhotoResponse, status_code=201)
async def upload_photo_base64(
    upload: PhotoUpload,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    stored = storage_service.save_base64_image(upload.data, upload.filename)
    return await TripContentService(db).add_photo(trip, stored["path"], upload.caption, upload.is_primary)


@router.post("/{trip_id}/photos/upload", response_model=PhotoResponse, status_code=201)
async def upload_photo(
    file: UploadFile = File(...),
    caption: Optional[str] = Form(None),
    is_primary: bool = Form(False),
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    stored = await storage_service.save_upload(file)
    return await TripContentService(db).add_photo(trip, stored["path"], caption, is_primary)


@router.post("/{trip_id}/photos/{photo_id}/primary", response_model=PhotoResponse)
async def set_primary_photo(
    photo_id: int,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    return await TripContentService(db).set_primary_photo(trip, photo_id)


@router.delete("/{trip_id}/photos/{photo_id}")
async def delete_photo(
    photo_id: int,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    await TripContentService(db).delete_photo(trip, photo_id)
    return {"success": True}


# ---- videos ----
@router.get("/{trip_id}/videos", response_model=List[VideoResponse])
async def list_videos(trip: Trip = Depends(visible_trip), db: AsyncSession = Depends(get_async_db)):
    return await TripContentService(db).list_videos(trip.id)


@router.post("/{trip_id}/videos", response_model=VideoResponse, status_code=201)
async def add_video(
    video: VideoCreate,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await TripContentService(db).add_video(trip, current_user.id, video.url, video.title)


@router.delete("/{trip_id}/videos/{video_id}")
async def delete_video(
    video_id: int,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    await TripContentService(db).delete_video(trip, video_id)
    return {"success": True}


# ---- journal ----
@router.get("/{trip_id}/journal", response_model=List[JournalResponse])
async def list_journal(trip: Trip = Depends(visible_trip), db: AsyncSession = Depends(get_async_db)):
    return await TripContentService(db).list_journal(trip.id)


@router.post("/{trip_id}/journal", response_model=JournalResponse, status_code=201)
async def add_journal_entry(
    entry: JournalCreate,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    return await TripContentService(db).add_journal_entry(trip, current_user.id, entry)


@router.patch("/{trip_id}/journal/{entry_id}", response_model=JournalResponse)
async def update_journal_entry(
    entry_id: int,
    entry: JournalUpdate,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    return await TripContentService(db).update_journal_entry(trip, entry_id, entry)


@router.delete("/{trip_id}/journal/{entry_id}")
async def delete_journal_entry(
    entry_id: int,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    await TripContentService(db).delete_journal_entry(trip, entry_id)
    return {"success": True}


# ---- attributes ----
@router.get("/{trip_id}/attributes", response_model=List[AttributeResponse])
async def list_attributes(trip: Trip = Depends(visible_trip), db: AsyncSession = Depends(get_async_db)):
    return await TripContentService(db).list_attributes(trip.id)


@router.post("/{trip_id}/attributes", response_model=AttributeResponse, status_code=201)
async def add_attribute(
    attribute: AttributeCreate,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    return await TripContentService(db).add_attribute(trip, attribute.attribute)


@router.delete("/{trip_id}/attributes/{attribute_id}")
async def delete_attribute(
    attribute_id: int,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    await TripContentService(db).delete_attribute(trip, attribute_id)
    return {"success": True}


# ---- comments ----
@router.get("/{trip_id}/comments", response_model=List[CommentResponse])
async def list_comments(trip: Trip = Depends(visible_trip), db: AsyncSession = Depends(get_async_db)):
    return await TripContentService(db).list_comments(trip.id)


@router.post("/{trip_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(
    comment: CommentCreate,
    trip: Trip = Depends(visible_trip),
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    created = await TripContentService(db).add_comment(trip, current_user.id, comment.content)
    return {
        "id": created.id,
        "trip_id": created.trip_id,
        "user_id": created.user_id,
        "user_name": current_user.name,
        "content": created.content,
        "created_at": created.created_at,
    }


@router.delete("/{trip_id}/comments/{comment_id}")
async def delete_comment(
    comment_id: int,
    trip: Trip = Depends(visible_trip),
    db: AsyncSession = Depends(get_async_db),
    current_user: User = Depends(get_current_user),
):
    await TripContentService(db).delete_comment(trip, comment_id, current_user)
    return {"success": True}


# ---- participants ----
@router.get("/{trip_id}/participants", response_model=List[ParticipantResponse])
async def list_participants(trip: Trip = Depends(visible_trip), db: AsyncSession = Depends(get_async_db)):
    return await TripContentService(db).list_participants(trip.id)


@router.post("/{trip_id}/participants", response_model=ParticipantResponse, status_code=201)
async def add_participant(
    participant: ParticipantCreate,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    return await TripContentService(db).add_participant(trip, participant)


@router.patch("/{trip_id}/participants/{participant_id}", response_model=ParticipantResponse)
async def update_participant_status(
    participant_id: int,
    payload: ParticipantStatusUpdate,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    return await TripContentService(db).update_participant_status(trip, participant_id, payload.status)


@router.delete("/{trip_id}/participants/{participant_id}")
async def delete_participant(
    participant_id: int,
    trip: Trip = Depends(editable_trip),
    db: AsyncSession = Depends(get_async_db),
):
    await TripContentService(db).delete_participant(trip, participant_id)
    return {"success": True}
