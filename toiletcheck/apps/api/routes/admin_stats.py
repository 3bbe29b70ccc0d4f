from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.apps.api.deps import get_db, require_level
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import success_response
from toiletcheck.services.auth.guard import AuthContext
from toiletcheck.services.auth.roles import ADMIN_LEVEL
from toiletcheck.services.stats import collect_admin_stats


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/stats", tags=["admin"], responses=DEFAULT_ERROR_RESPONSES)


@router.get("")
async def admin_stats(
    auth: AuthContext = Depends(require_level(ADMIN_LEVEL, "Access denied - Admin privileges required")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        stats = await collect_admin_stats(db)
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to retrieve statistics: {exc}") from exc
    logger.info("admin_stats user_id=%s", auth.user_id)
    return success_response(stats, "Statistics retrieved successfully")
