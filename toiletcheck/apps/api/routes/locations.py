from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.apps.api.deps import get_db, require_level
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import success_response
from toiletcheck.core.errors import QrCodeError
from toiletcheck.domain.models import Location
from toiletcheck.persistence.repos import resources as resources_repo
from toiletcheck.services.auth.guard import AuthContext
from toiletcheck.services.qr import resolve_location_id


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["locations"], responses=DEFAULT_ERROR_RESPONSES)

_require_user = require_level(0, "Authentication required")


def _location_payload(location: Location, building_name: str | None) -> dict[str, Any]:
    return {
        "id": location.id,
        "name": location.name,
        "floor": location.floor,
        "area": location.area,
        "code": location.code,
        "building_id": location.building_id,
        "organization_id": location.organization_id,
        "qr_code": location.qr_code,
        "is_active": location.is_active,
        "building": building_name,
    }


async def _active_location(db: AsyncSession, location_id: str) -> dict[str, Any]:
    try:
        found = await resources_repo.get_active_location(db, location_id)
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to retrieve location: {exc}") from exc
    if found is None:
        raise HTTPException(status_code=404, detail="Location not found or inactive")
    location, building_name = found
    return _location_payload(location, building_name)


@router.get("")
async def get_location(
    id: str | None = None,
    auth: AuthContext = Depends(_require_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if not id:
        raise HTTPException(status_code=400, detail="Location ID required")
    return success_response(await _active_location(db, id), "Location retrieved")


@router.get("/scan")
async def scan_location(
    data: str | None = None,
    auth: AuthContext = Depends(_require_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Resolve decoded QR sticker text to the active location it names."""
    if not data:
        raise HTTPException(status_code=400, detail="QR data required")
    try:
        location_id = resolve_location_id(data)
    except QrCodeError as exc:
        logger.info("qr_scan_rejected user_id=%s reason=%s", auth.user_id, exc)
        raise HTTPException(status_code=400, detail="Invalid QR code format") from exc
    return success_response(await _active_location(db, location_id), "Location retrieved")
