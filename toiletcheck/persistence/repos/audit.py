from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import bindparam, delete, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.domain.models import AuditLog, JsonType


async def call_audit_function(
    session: AsyncSession,
    *,
    function_name: str,
    params: dict[str, Any],
) -> None:
    # Function name comes from settings, never from request input.
    stmt = text(
        f"SELECT {function_name}(:p_user_id, :p_action, :p_resource_type, :p_resource_id, "
        ":p_details, :p_success, :p_error_message)"
    ).bindparams(bindparam("p_details", type_=JsonType))
    await session.execute(stmt, params)


async def insert_audit_log(session: AsyncSession, **values: Any) -> AuditLog:
    log = AuditLog(**values)
    session.add(log)
    await session.flush()
    return log


async def list_audit_logs(
    session: AsyncSession,
    *,
    user_id: str | None = None,
    action: str | None = None,
    success: bool | None = None,
    since: datetime | None = None,
    limit: int = 50,
) -> list[AuditLog]:
    stmt = select(AuditLog)
    if user_id:
        stmt = stmt.where(AuditLog.user_id == user_id)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    if success is not None:
        stmt = stmt.where(AuditLog.success.is_(success))
    if since is not None:
        stmt = stmt.where(AuditLog.created_at >= since)
    stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def prune_audit_logs(session: AsyncSession, *, retention_days: int) -> int:
    cutoff = datetime.now(timezone.utc) - timedelta(days=retention_days)
    result = await session.execute(delete(AuditLog).where(AuditLog.created_at < cutoff))
    return int(result.rowcount or 0)
