from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from toiletcheck.core.config import get_settings
from toiletcheck.persistence.db import SessionLocal
from toiletcheck.persistence.repos import audit as audit_repo


logger = logging.getLogger(__name__)

_SENSITIVE_KEY_PATTERNS = ["password", "token", "secret", "authorization"]
_REDACTED_VALUE = "[REDACTED]"
_UNDEFINED_FUNCTION_SQLSTATE = "42883"
_MISSING_FUNCTION_MARKERS = ("no such function", "does not exist", "could not find")


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(pattern in lowered for pattern in _SENSITIVE_KEY_PATTERNS)


def sanitize_details(value: Any) -> Any:
    # Recursively scrub credential-like keys while keeping the rest of the structure.
    if isinstance(value, dict):
        sanitized: dict[str, Any] = {}
        for raw_key, raw_value in value.items():
            key = str(raw_key)
            if _is_sensitive_key(key):
                sanitized[key] = _REDACTED_VALUE
            else:
                sanitized[key] = sanitize_details(raw_value)
        return sanitized
    if isinstance(value, list):
        return [sanitize_details(item) for item in value]
    return value


def is_missing_function_error(exc: BaseException) -> bool:
    """Return True when the audit SQL function is not installed in the database."""
    if isinstance(exc, DBAPIError):
        orig = exc.orig
        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if sqlstate == _UNDEFINED_FUNCTION_SQLSTATE:
            return True
    message = str(exc).lower()
    return any(marker in message for marker in _MISSING_FUNCTION_MARKERS)


async def _write_via_function(function_name: str, values: dict[str, Any]) -> None:
    async with SessionLocal() as session:
        try:
            await audit_repo.call_audit_function(
                session,
                function_name=function_name,
                params={f"p_{key}": value for key, value in values.items()},
            )
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def _write_direct(values: dict[str, Any]) -> None:
    async with SessionLocal() as session:
        try:
            await audit_repo.insert_audit_log(session, **values)
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def create_audit_log(
    user_id: str | None,
    action: str,
    resource_type: str,
    resource_id: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
    error_message: str | None = None,
) -> None:
    """Record an admin action without ever failing the request that triggered it.

    The database function is tried first; when it is not installed the row is
    inserted directly. Audit writes use their own session so a rollback here
    cannot touch the caller's transaction.
    """
    settings = get_settings()
    if not settings.audit_enabled:
        logger.debug("audit_log_skipped action=%s resource_type=%s", action, resource_type)
        return

    values: dict[str, Any] = {
        "user_id": user_id,
        "action": action,
        "resource_type": resource_type,
        "resource_id": resource_id,
        "details": sanitize_details(details or {}),
        "success": success,
        "error_message": error_message,
    }
    try:
        if settings.audit_rpc_enabled:
            try:
                await _write_via_function(settings.audit_rpc_function, values)
                return
            except SQLAlchemyError as exc:
                if not is_missing_function_error(exc):
                    raise
                logger.info(
                    "audit_log_function_missing function=%s action=%s",
                    settings.audit_rpc_function,
                    action,
                )
        await _write_direct(values)
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "audit_log_write_failed action=%s resource_type=%s resource_id=%s",
            action,
            resource_type,
            resource_id,
            exc_info=exc,
        )
