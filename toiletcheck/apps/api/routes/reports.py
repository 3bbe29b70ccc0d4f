from __future__ import annotations

from datetime import date
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.apps.api.deps import get_db, require_level
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import success_response
from toiletcheck.persistence.repos import inspections as inspections_repo
from toiletcheck.services.auth.guard import AuthContext
from toiletcheck.services.reports import (
    build_analytics,
    build_inspections_csv,
    group_by_date,
    parse_month,
    previous_month,
    serialize_inspection_detail,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"], responses=DEFAULT_ERROR_RESPONSES)
_EXPORT_FORMATS = {"csv"}


def _target_user(auth: AuthContext, requested_user_id: str | None) -> str | None:
    # Non-admins are always scoped to themselves; admins see everyone unless they filter.
    if not auth.is_admin:
        if requested_user_id and requested_user_id != auth.user_id:
            raise HTTPException(status_code=403, detail="Access denied - you can only view your own data")
        return auth.user_id
    return requested_user_id or None


def _csv_response(details: list[dict], filename: str) -> Response:
    return Response(
        content=build_inspections_csv(details),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _month_range(month: str | None) -> tuple[date, date]:
    try:
        return parse_month(month)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("")
async def get_reports(
    month: str | None = None,
    report_date: date | None = Query(default=None, alias="date"),
    userId: str | None = None,
    analytics: str | None = None,
    export_format: str | None = Query(default=None, alias="format"),
    auth: AuthContext = Depends(require_level(0, "Authentication required")),
    db: AsyncSession = Depends(get_db),
):
    """Monthly calendar, single-day list or monthly analytics of inspections.

    With ``format=csv`` the month or day listing is returned as a CSV attachment.
    """
    if export_format is not None and export_format not in _EXPORT_FORMATS:
        raise HTTPException(status_code=400, detail="Unsupported export format")
    target_user_id = _target_user(auth, userId)
    logger.info(
        "reports_request user_id=%s level=%s target=%s month=%s date=%s analytics=%s format=%s",
        auth.user_id,
        auth.role.level,
        target_user_id or "all",
        month,
        report_date,
        analytics,
        export_format or "json",
    )

    try:
        if analytics == "true":
            start, end = _month_range(month)
            previous_start, previous_end = previous_month(start)
            details = await inspections_repo.list_inspection_details(
                db, user_id=target_user_id, date_from=start, date_to=end
            )
            previous_details = await inspections_repo.list_inspection_details(
                db, user_id=target_user_id, date_from=previous_start, date_to=previous_end
            )
            return success_response(
                build_analytics(details, previous_details), "Analytics retrieved successfully"
            )

        if month:
            start, end = _month_range(month)
            details = await inspections_repo.list_inspection_details(
                db, user_id=target_user_id, date_from=start, date_to=end
            )
            if export_format == "csv":
                return _csv_response(details, f"inspections_{month}.csv")
            inspections = [serialize_inspection_detail(detail) for detail in details]
            return success_response(group_by_date(inspections), "Monthly inspections retrieved")

        if report_date is not None:
            details = await inspections_repo.list_inspection_details(
                db, user_id=target_user_id, inspection_date=report_date
            )
            if export_format == "csv":
                return _csv_response(details, f"inspections_{report_date.isoformat()}.csv")
            inspections = [serialize_inspection_detail(detail) for detail in details]
            return success_response(inspections, "Date inspections retrieved")
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to retrieve reports: {exc}") from exc

    raise HTTPException(status_code=400, detail="Missing required parameter: month or date")
