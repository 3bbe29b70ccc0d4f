from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.domain.models import Photo


async def get_photo(session: AsyncSession, photo_id: str) -> Photo | None:
    result = await session.execute(
        select(Photo).where(Photo.id == photo_id, or_(Photo.is_deleted.is_(False), Photo.is_deleted.is_(None)))
    )
    return result.scalar_one_or_none()


async def list_photos(
    session: AsyncSession,
    *,
    inspection_id: str | None = None,
    location_id: str | None = None,
) -> list[Photo]:
    stmt = select(Photo).where(or_(Photo.is_deleted.is_(False), Photo.is_deleted.is_(None)))
    if inspection_id:
        stmt = stmt.where(Photo.inspection_id == inspection_id)
    if location_id:
        stmt = stmt.where(Photo.location_id == location_id)
    result = await session.execute(stmt.order_by(Photo.created_at, Photo.id))
    return list(result.scalars().all())


async def create_photo(session: AsyncSession, values: dict[str, Any], *, created_by: str) -> Photo:
    photo = Photo(**values, created_by=created_by, updated_by=created_by, is_deleted=False)
    session.add(photo)
    await session.flush()
    return photo


async def soft_delete_photo(session: AsyncSession, photo: Photo, *, deleted_by: str) -> Photo:
    now = datetime.now(timezone.utc)
    photo.is_deleted = True
    photo.deleted_at = now
    photo.deleted_by = deleted_by
    photo.updated_by = deleted_by
    photo.updated_at = now
    await session.flush()
    return photo
