from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.apps.api.deps import get_db, require_level
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.routes.inspections import detail_payload
from toiletcheck.apps.api.response import success_response
from toiletcheck.core.config import get_settings
from toiletcheck.persistence.repos import inspections as inspections_repo
from toiletcheck.services.auth.guard import AuthContext
from toiletcheck.services.auth.roles import ADMIN_LEVEL


router = APIRouter(prefix="/admin/inspections", tags=["admin"], responses=DEFAULT_ERROR_RESPONSES)

# Admins read here; writes go through /api/inspections as the owner.
_MAX_LIMIT = 1000


@router.get("")
async def list_admin_inspections(
    id: str | None = None,
    user_id: str | None = None,
    location_id: str | None = None,
    filter_date: date | None = Query(default=None, alias="date"),
    limit: int | None = Query(default=None, ge=1, le=_MAX_LIMIT),
    auth: AuthContext = Depends(require_level(ADMIN_LEVEL, "Access denied - Admin privileges required")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        if id:
            detail = await inspections_repo.get_inspection_detail(db, id)
            if detail is None:
                raise HTTPException(status_code=404, detail="Inspection not found")
            return success_response(detail_payload(detail), "Inspection retrieved")

        parsed_limit = limit or get_settings().admin_inspections_default_limit
        details = await inspections_repo.list_inspection_details(
            db,
            user_id=user_id,
            location_id=location_id,
            inspection_date=filter_date,
            limit=parsed_limit,
        )
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc

    inspections: list[dict[str, Any]] = [detail_payload(detail) for detail in details]
    return success_response(
        {
            "inspections": inspections,
            "count": len(inspections),
            "filters": {
                "user_id": user_id,
                "location_id": location_id,
                "date": filter_date,
                "limit": parsed_limit,
            },
        },
        "Inspections retrieved",
    )
