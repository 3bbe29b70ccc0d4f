from __future__ import annotations

from datetime import date, datetime, time, timezone
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, StrictStr
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.apps.api.deps import get_db, parse_body, read_json_object, require_level
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import success_response
from toiletcheck.core.errors import InspectionWriteError
from toiletcheck.domain.models import InspectionRecord
from toiletcheck.persistence.repos import inspections as inspections_repo
from toiletcheck.persistence.repos import resources as resources_repo
from toiletcheck.services.auth.guard import AuthContext


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inspections", tags=["inspections"], responses=DEFAULT_ERROR_RESPONSES)

_require_user = require_level(0, "Authentication required")


class ComponentInput(BaseModel):
    component_name: StrictStr = Field(min_length=1)
    rating: int
    notes: str | None = None


class InspectionCreate(BaseModel):
    location_id: StrictStr = Field(min_length=1)
    inspection_date: date
    responses: dict[str, Any]
    template_id: str | None = None
    inspection_time: time | None = None
    overall_status: str | None = None
    photo_urls: list[str] | None = None
    notes: str | None = None
    submitted_at: datetime | None = None
    duration_seconds: int | None = None
    verification_notes: str | None = None
    verified_at: datetime | None = None
    verified_by: str | None = None
    components: list[ComponentInput] = Field(default_factory=list)


class InspectionUpdate(BaseModel):
    responses: dict[str, Any] | None = None
    photo_urls: list[str] | None = None
    notes: str | None = None
    overall_status: str | None = None


def record_payload(record: InspectionRecord) -> dict[str, Any]:
    return {column.key: getattr(record, column.key) for column in record.__table__.columns}


def detail_payload(detail: dict[str, Any]) -> dict[str, Any]:
    payload = record_payload(detail["record"])
    payload["location"] = detail["location"]
    payload["user"] = detail["user"]
    return payload


async def _owned_record(db: AsyncSession, inspection_id: str, user_id: str) -> InspectionRecord:
    record = await inspections_repo.get_inspection(db, inspection_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Inspection not found")
    if record.user_id != user_id:
        raise HTTPException(status_code=403, detail="Access denied - not your inspection")
    return record


@router.get("")
async def get_inspections(
    id: str | None = None,
    auth: AuthContext = Depends(_require_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """List the caller's inspections, or one of them with ``?id=``."""
    try:
        if id:
            detail = await inspections_repo.get_inspection_detail(db, id, user_id=auth.user_id)
            if detail is None:
                raise HTTPException(status_code=404, detail="Inspection not found")
            payload = detail_payload(detail)
            components = await inspections_repo.list_components(db, id)
            payload["components"] = [
                {"id": c.id, "component_name": c.component_name, "rating": c.rating, "notes": c.notes}
                for c in components
            ]
            return success_response(payload, "Inspection retrieved")
        details = await inspections_repo.list_inspection_details(db, user_id=auth.user_id)
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc
    return success_response([detail_payload(detail) for detail in details], "Inspections retrieved")


@router.post("")
async def create_inspection(
    request: Request,
    auth: AuthContext = Depends(_require_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    body = parse_body(
        InspectionCreate,
        await read_json_object(request),
        "Missing required fields: location_id, inspection_date, responses",
    )
    now = datetime.now(timezone.utc)
    try:
        if await resources_repo.get_active_location(db, body.location_id) is None:
            raise HTTPException(status_code=404, detail="Location not found")
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc

    notes = body.notes.strip() if body.notes else None
    record = InspectionRecord(
        user_id=auth.user_id,
        location_id=body.location_id,
        template_id=body.template_id or None,
        inspection_date=body.inspection_date,
        inspection_time=body.inspection_time or now.time().replace(microsecond=0),
        overall_status=body.overall_status or "satisfactory",
        responses=body.responses,
        photo_urls=body.photo_urls or None,
        notes=notes or None,
        submitted_at=body.submitted_at or now,
        duration_seconds=body.duration_seconds or None,
        verification_notes=body.verification_notes or None,
        verified_at=body.verified_at,
        verified_by=body.verified_by or None,
    )
    components = [component.model_dump() for component in body.components]
    logger.info(
        "inspection_create user_id=%s location_id=%s photos=%s components=%s",
        auth.user_id,
        body.location_id,
        len(body.photo_urls or []),
        len(components),
    )
    try:
        record = await inspections_repo.create_inspection(db, record, components)
    except InspectionWriteError as exc:
        logger.error("inspection_create_failed user_id=%s", auth.user_id, exc_info=exc)
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc

    return success_response(
        {
            "id": record.id,
            "location_id": record.location_id,
            "overall_status": record.overall_status,
            "submitted_at": record.submitted_at,
            "component_count": len(components),
        },
        "Inspection created",
    )


@router.patch("")
async def update_inspection(
    request: Request,
    id: str | None = None,
    auth: AuthContext = Depends(_require_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if not id:
        raise HTTPException(status_code=400, detail="Inspection ID required")
    body = parse_body(InspectionUpdate, await read_json_object(request), "Invalid update fields")
    updates = body.model_dump(exclude_unset=True)
    if "responses" in updates and updates["responses"] is None:
        raise HTTPException(status_code=400, detail="responses cannot be null")
    if "overall_status" in updates and not updates["overall_status"]:
        raise HTTPException(status_code=400, detail="overall_status cannot be empty")
    try:
        record = await _owned_record(db, id, auth.user_id)
        record = await inspections_repo.update_inspection(db, record, updates)
        await db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc
    return success_response(record_payload(record), "Inspection updated")


@router.delete("")
async def delete_inspection(
    id: str | None = None,
    auth: AuthContext = Depends(_require_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if not id:
        raise HTTPException(status_code=400, detail="Inspection ID required")
    try:
        record = await _owned_record(db, id, auth.user_id)
        payload = record_payload(record)
        await inspections_repo.delete_inspection(db, record)
        await db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc
    logger.info("inspection_deleted id=%s user_id=%s", id, auth.user_id)
    return success_response(payload, "Inspection deleted")
