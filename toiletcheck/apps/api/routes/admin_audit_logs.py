from __future__ import annotations

from datetime import datetime
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.apps.api.deps import get_db, require_level
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import success_response
from toiletcheck.core.config import get_settings
from toiletcheck.domain.models import AuditLog
from toiletcheck.persistence.repos import audit as audit_repo
from toiletcheck.services.auth.guard import AuthContext
from toiletcheck.services.auth.roles import ADMIN_LEVEL


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/audit-logs", tags=["audit"], responses=DEFAULT_ERROR_RESPONSES)


def _log_payload(log: AuditLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "user_id": log.user_id,
        "action": log.action,
        "resource_type": log.resource_type,
        "resource_id": log.resource_id,
        "details": log.details,
        "success": log.success,
        "error_message": log.error_message,
        "created_at": log.created_at,
    }


@router.get("")
async def list_audit_logs(
    limit: int | None = Query(default=None, ge=1),
    userId: str | None = None,
    action: str | None = None,
    success: str | None = None,
    since: datetime | None = None,
    auth: AuthContext = Depends(require_level(ADMIN_LEVEL, "Access denied - Admin privileges required")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Newest audit entries first, filtered by actor, action, outcome and start time."""
    settings = get_settings()
    # Oversized limits are capped rather than rejected.
    parsed_limit = min(limit or settings.audit_logs_default_limit, settings.audit_logs_max_limit)
    success_filter = None if success is None else success == "true"

    try:
        logs = await audit_repo.list_audit_logs(
            db,
            user_id=userId,
            action=action,
            success=success_filter,
            since=since,
            limit=parsed_limit,
        )
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to retrieve audit logs: {exc}") from exc

    logger.info("audit_logs_listed user_id=%s count=%s", auth.user_id, len(logs))
    return success_response(
        {
            "logs": [_log_payload(log) for log in logs],
            "count": len(logs),
            "filters": {
                "limit": parsed_limit,
                "userId": userId or None,
                "action": action or None,
                "success": success_filter,
                "since": since,
            },
        },
        "Audit logs retrieved successfully",
    )
