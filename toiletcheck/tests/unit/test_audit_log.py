from __future__ import annotations

import logging

import pytest
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, OperationalError

from toiletcheck.core.config import get_settings
from toiletcheck.domain.models import AuditLog
from toiletcheck.persistence.db import SessionLocal
from toiletcheck.services import audit as audit_service
from toiletcheck.services.audit import create_audit_log, is_missing_function_error, sanitize_details


async def _logs() -> list[AuditLog]:
    async with SessionLocal() as session:
        result = await session.execute(select(AuditLog).order_by(AuditLog.id))
        return list(result.scalars().all())


def test_audit_redacts_credentials_recursively() -> None:
    payload = {
        "password": "hunter2",
        "access_token": "abc",
        "nested": {"Authorization": "Bearer abc", "items": [{"client_secret": "x", "ok": 1}]},
        "safe": "value",
    }
    sanitized = sanitize_details(payload)
    assert sanitized["password"] == "[REDACTED]"
    assert sanitized["access_token"] == "[REDACTED]"
    assert sanitized["nested"]["Authorization"] == "[REDACTED]"
    assert sanitized["nested"]["items"][0] == {"client_secret": "[REDACTED]", "ok": 1}
    assert sanitized["safe"] == "value"


class _PgError(Exception):
    sqlstate = "42883"


def test_missing_function_detection() -> None:
    assert is_missing_function_error(DBAPIError("SELECT f()", {}, _PgError("boom")))
    assert is_missing_function_error(OperationalError("SELECT f()", {}, Exception("no such function: f")))
    assert not is_missing_function_error(OperationalError("SELECT f()", {}, Exception("disk I/O error")))


async def test_falls_back_to_direct_insert_when_function_missing(caplog) -> None:
    # SQLite has no create_audit_log function, so the direct insert path must write the row.
    caplog.set_level(logging.INFO)
    await create_audit_log("admin-1", "ASSIGN_ROLE", "user_role", "user-9", {"token": "t", "roleName": "admin"})
    logs = await _logs()
    assert len(logs) == 1
    log = logs[0]
    assert log.action == "ASSIGN_ROLE"
    assert log.resource_id == "user-9"
    assert log.success is True
    assert log.details == {"token": "[REDACTED]", "roleName": "admin"}
    assert "audit_log_function_missing" in caplog.text


async def test_records_failures_with_error_message() -> None:
    await create_audit_log("admin-1", "TOGGLE_USER_STATUS", "user", "u-2", success=False, error_message="boom")
    (log,) = await _logs()
    assert log.success is False
    assert log.error_message == "boom"
    assert log.details == {}


async def test_write_failure_is_swallowed(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    async def _broken(values):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(get_settings(), "audit_rpc_enabled", False)
    monkeypatch.setattr(audit_service, "_write_direct", _broken)
    caplog.set_level(logging.WARNING)
    await create_audit_log("admin-1", "LIST_USERS", "user")
    assert "audit_log_write_failed" in caplog.text


async def test_other_function_errors_do_not_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict] = []

    async def _failing_function(function_name, values):
        raise OperationalError("SELECT create_audit_log()", {}, Exception("disk I/O error"))

    async def _record_direct(values):
        calls.append(values)

    monkeypatch.setattr(audit_service, "_write_via_function", _failing_function)
    monkeypatch.setattr(audit_service, "_write_direct", _record_direct)
    await create_audit_log("admin-1", "LIST_USERS", "user")
    assert calls == []


async def test_disabled_audit_writes_nothing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(get_settings(), "audit_enabled", False)
    await create_audit_log("admin-1", "LIST_USERS", "user")
    assert await _logs() == []
