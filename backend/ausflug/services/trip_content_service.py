"""
Photos, videos, journal entries, attributes, comments and participants of a trip
"""

import re
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ausflug.core.errors import ForbiddenError, NotFoundError, ValidationError
from ausflug.core.security import is_admin
from ausflug.models.trip import (
    Trip,
    TripAttribute,
    TripComment,
    TripJournalEntry,
    TripParticipant,
    TripPhoto,
    TripVideo,
)
from ausflug.models.user import User
from ausflug.schemas.trip import JournalCreate, JournalUpdate, ParticipantCreate
from ausflug.services import storage_service

VIDEO_PATTERNS = {
    "youtube": [
        re.compile(r"youtube\.com/watch\?(?:.*&)?v=([a-zA-Z0-9_-]{11})"),
        re.compile(r"youtu\.be/([a-zA-Z0-9_-]{11})"),
    ],
    "tiktok": [
        re.compile(r"tiktok\.com/@[\w.]+/video/(\d+)"),
        re.compile(r"vm\.tiktok\.com/(\w+)"),
        re.compile(r"vt\.tiktok\.com/(\w+)"),
    ],
}


RESOURCE_NAMES = {
    TripPhoto: "Foto",
    TripVideo: "Video",
    TripJournalEntry: "Tagebucheintrag",
    TripAttribute: "Merkmal",
    TripComment: "Kommentar",
    TripParticipant: "Teilnehmer",
}


def parse_video_url(url: str) -> Optional[Tuple[str, str]]:
    """Return (platform, video_id) for YouTube and TikTok links"""
    for platform, patterns in VIDEO_PATTERNS.items():
        for pattern in patterns:
            match = pattern.search(url)
            if match:
                return platform, match.group(1)
    return None


class TripContentService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_owned(self, model, item_id: int, trip_id: int):
        result = await self.db.execute(
            select(model).where(model.id == item_id, model.trip_id == trip_id)
        )
        item = result.scalar_one_or_none()
        if not item:
            raise NotFoundError(RESOURCE_NAMES.get(model, "Eintrag"), item_id)
        return item

    # ---- photos ----
    async def list_photos(self, trip_id: int) -> List[TripPhoto]:
        result = await self.db.execute(
            select(TripPhoto).where(TripPhoto.trip_id == trip_id).order_by(TripPhoto.created_at, TripPhoto.id)
        )
        return result.scalars().all()

    async def add_photo(self, trip: Trip, photo_url: str, caption: Optional[str] = None,
                        is_primary: bool = False) -> TripPhoto:
        photo = TripPhoto(trip_id=trip.id, photo_url=photo_url, caption=caption, is_primary=False)
        self.db.add(photo)
        await self.db.flush()
        if is_primary:
            await self._make_primary(trip, photo)
        await self.db.commit()
        await self.db.refresh(photo)
        return photo

    async def _make_primary(self, trip: Trip, photo: TripPhoto) -> None:
        await self.db.execute(
            update(TripPhoto).where(TripPhoto.trip_id == trip.id).values(is_primary=False)
        )
        photo.is_primary = True
        trip.image_url = photo.photo_url

    async def set_primary_photo(self, trip: Trip, photo_id: int) -> TripPhoto:
        photo = await self._get_owned(TripPhoto, photo_id, trip.id)
        await self._make_primary(trip, photo)
        await self.db.commit()
        await self.db.refresh(photo)
        return photo

    async def delete_photo(self, trip: Trip, photo_id: int) -> None:
        photo = await self._get_owned(TripPhoto, photo_id, trip.id)
        if photo.is_primary and trip.image_url == photo.photo_url:
            trip.image_url = None
        filename = storage_service.filename_from_url(photo.photo_url)
        await self.db.delete(photo)
        await self.db.commit()
        if filename:
            storage_service.delete_image(filename)

    # ---- videos ----
    async def list_videos(self, trip_id: int) -> List[TripVideo]:
        result = await self.db.execute(
            select(TripVideo).where(TripVideo.trip_id == trip_id).order_by(TripVideo.created_at.desc(), TripVideo.id.desc())
        )
        return result.scalars().all()

    async def add_video(self, trip: Trip, user_id: int, url: str, title: Optional[str] = None) -> TripVideo:
        parsed = parse_video_url(url)
        if not parsed:
            raise ValidationError("Ungültige YouTube oder TikTok URL")
        platform, video_id = parsed
        video = TripVideo(trip_id=trip.id, user_id=user_id, video_id=video_id,
                          url=url, title=title, platform=platform)
        self.db.add(video)
        await self.db.commit()
        await self.db.refresh(video)
        logger.info(f"🎬 {platform} video {video_id} added to trip {trip.id}")
        return video

    async def delete_video(self, trip: Trip, video_id: int) -> None:
        video = await self._get_owned(TripVideo, video_id, trip.id)
        await self.db.delete(video)
        await self.db.commit()

    # ---- journal ----
    async def list_journal(self, trip_id: int) -> List[TripJournalEntry]:
        result = await self.db.execute(
            select(TripJournalEntry)
            .where(TripJournalEntry.trip_id == trip_id)
            .order_by(TripJournalEntry.entry_date.desc(), TripJournalEntry.id.desc())
        )
        return result.scalars().all()

    async def add_journal_entry(self, trip: Trip, user_id: int, data: JournalCreate) -> TripJournalEntry:
        entry = TripJournalEntry(trip_id=trip.id, user_id=user_id, **data.model_dump())
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)
        return entry

    async def update_journal_entry(self, trip: Trip, entry_id: int, data: JournalUpdate) -> TripJournalEntry:
        entry = await self._get_owned(TripJournalEntry, entry_id, trip.id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if field in ("content", "entry_date") and value is None:
                continue
            setattr(entry, field, value)
        await self.db.commit()
        await self.db.refresh(entry)
        return entry

    async def delete_journal_entry(self, trip: Trip, entry_id: int) -> None:
        entry = await self._get_owned(TripJournalEntry, entry_id, trip.id)
        await self.db.delete(entry)
        await self.db.commit()

    # ---- attributes ----
    async def list_attributes(self, trip_id: int) -> List[TripAttribute]:
        result = await self.db.execute(
            select(TripAttribute).where(TripAttribute.trip_id == trip_id).order_by(TripAttribute.attribute)
        )
        return result.scalars().all()

    async def add_attribute(self, trip: Trip, attribute: str) -> TripAttribute:
        attribute = attribute.strip()
        existing = await self.db.execute(
            select(TripAttribute).where(TripAttribute.trip_id == trip.id, TripAttribute.attribute == attribute)
        )
        found = existing.scalar_one_or_none()
        if found:
            return found
        item = TripAttribute(trip_id=trip.id, attribute=attribute)
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)
        return item

    async def delete_attribute(self, trip: Trip, attribute_id: int) -> None:
        item = await self._get_owned(TripAttribute, attribute_id, trip.id)
        await self.db.delete(item)
        await self.db.commit()

    # ---- comments ----
    async def list_comments(self, trip_id: int) -> List[dict]:
        result = await self.db.execute(
            select(TripComment, User.name)
            .join(User, User.id == TripComment.user_id)
            .where(TripComment.trip_id == trip_id)
            .order_by(TripComment.created_at, TripComment.id)
        )
        return [
            {
                "id": comment.id,
                "trip_id": comment.trip_id,
                "user_id": comment.user_id,
                "user_name": name,
                "content": comment.content,
                "created_at": comment.created_at,
            }
            for comment, name in result.all()
        ]

    async def add_comment(self, trip: Trip, user_id: int, content: str) -> TripComment:
        comment = TripComment(trip_id=trip.id, user_id=user_id, content=content)
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)
        return comment

    async def delete_comment(self, trip: Trip, comment_id: int, user: User) -> None:
        comment = await self._get_owned(TripComment, comment_id, trip.id)
        if not (is_admin(user) or comment.user_id == user.id):
            raise ForbiddenError("Nur eigene Kommentare können gelöscht werden")
        await self.db.delete(comment)
        await self.db.commit()

    # ---- participants ----
    async def list_participants(self, trip_id: int) -> List[TripParticipant]:
        result = await self.db.execute(
            select(TripParticipant).where(TripParticipant.trip_id == trip_id).order_by(TripParticipant.id)
        )
        return result.scalars().all()

    async def add_participant(self, trip: Trip, data: ParticipantCreate) -> TripParticipant:
        participant = TripParticipant(trip_id=trip.id, **data.model_dump())
        self.db.add(participant)
        await self.db.commit()
        await self.db.refresh(participant)
        return participant

    async def update_participant_status(self, trip: Trip, participant_id: int, status: str) -> TripParticipant:
        participant = await self._get_owned(TripParticipant, participant_id, trip.id)
        participant.status = status
        await self.db.commit()
        await self.db.refresh(participant)
        return participant

    async def delete_participant(self, trip: Trip, participant_id: int) -> None:
        participant = await self._get_owned(TripParticipant, participant_id, trip.id)
        await self.db.delete(participant)
        await self.db.commit()
