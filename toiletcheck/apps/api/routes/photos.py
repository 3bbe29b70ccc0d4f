from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, StrictStr, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.apps.api.deps import get_db, parse_body, read_json_object, require_level
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import success_response
from toiletcheck.domain.models import Photo
from toiletcheck.persistence.repos import inspections as inspections_repo
from toiletcheck.persistence.repos import photos as photos_repo
from toiletcheck.services.auth.guard import AuthContext


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["photos"], responses=DEFAULT_ERROR_RESPONSES)

_require_user = require_level(0, "Authentication required")


class PhotoCreate(BaseModel):
    # The binary is already on the CDN; only its metadata is registered here.
    file_url: StrictStr = Field(min_length=1)
    inspection_id: str | None = None
    location_id: str | None = None
    file_name: str | None = None
    file_size: int | None = Field(default=None, ge=0)
    mime_type: str | None = None
    caption: str | None = None
    field_reference: str | None = None

    @model_validator(mode="after")
    def _require_owner(self) -> "PhotoCreate":
        if not self.inspection_id and not self.location_id:
            raise ValueError("inspection_id or location_id is required")
        return self


def _photo_payload(photo: Photo) -> dict[str, Any]:
    return {column.key: getattr(photo, column.key) for column in photo.__table__.columns}


async def _require_inspection_access(db: AsyncSession, inspection_id: str, auth: AuthContext) -> None:
    # Inspection photos follow the inspection: owner or admin only.
    record = await inspections_repo.get_inspection(db, inspection_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Inspection not found")
    if record.user_id != auth.user_id and not auth.is_admin:
        raise HTTPException(status_code=403, detail="Access denied - not your inspection")


@router.get("")
async def list_photos(
    inspection_id: str | None = None,
    location_id: str | None = None,
    auth: AuthContext = Depends(_require_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if not inspection_id and not location_id:
        raise HTTPException(status_code=400, detail="inspection_id or location_id required")
    try:
        if inspection_id:
            await _require_inspection_access(db, inspection_id, auth)
        photos = await photos_repo.list_photos(db, inspection_id=inspection_id, location_id=location_id)
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc
    return success_response([_photo_payload(photo) for photo in photos], "Photos retrieved")


@router.post("")
async def register_photo(
    request: Request,
    auth: AuthContext = Depends(_require_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    body = parse_body(
        PhotoCreate,
        await read_json_object(request),
        "Missing required fields: file_url and inspection_id or location_id",
    )
    try:
        if body.inspection_id:
            await _require_inspection_access(db, body.inspection_id, auth)
        photo = await photos_repo.create_photo(db, body.model_dump(), created_by=auth.user_id)
        await db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc
    logger.info("photo_registered id=%s user_id=%s", photo.id, auth.user_id)
    return success_response(_photo_payload(photo), "Photo registered")


@router.delete("")
async def delete_photo(
    id: str | None = None,
    auth: AuthContext = Depends(_require_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if not id:
        raise HTTPException(status_code=400, detail="Photo ID required")
    try:
        photo = await photos_repo.get_photo(db, id)
        if photo is None:
            raise HTTPException(status_code=404, detail="Photo not found")
        if photo.created_by != auth.user_id and not auth.is_admin:
            raise HTTPException(status_code=403, detail="Access denied - not your photo")
        photo = await photos_repo.soft_delete_photo(db, photo, deleted_by=auth.user_id)
        await db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc
    return success_response(_photo_payload(photo), "Photo deleted")
