from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from scripts import prune_audit as prune_audit_script
from scripts import seed_roles as seed_roles_script
from toiletcheck.domain.models import AuditLog, Role
from toiletcheck.persistence.db import SessionLocal
from toiletcheck.services.auth.roles import ROLE_LEVELS
from toiletcheck.tests.utils.auth import ensure_role


async def test_seed_roles_is_idempotent_and_fixes_levels() -> None:
    await ensure_role("manager", level=42)
    await seed_roles_script.seed()
    await seed_roles_script.seed()
    async with SessionLocal() as session:
        roles = (await session.execute(select(Role))).scalars().all()
    assert {role.name: role.level for role in roles} == ROLE_LEVELS


async def test_prune_audit_removes_only_expired_rows() -> None:
    old = datetime.now(timezone.utc) - timedelta(days=400)
    async with SessionLocal() as session:
        session.add(AuditLog(action="LIST_USERS", resource_type="user", created_at=old))
        session.add(AuditLog(action="LIST_USERS", resource_type="user"))
        await session.commit()
    await prune_audit_script.prune()
    async with SessionLocal() as session:
        remaining = (await session.execute(select(AuditLog))).scalars().all()
    assert len(remaining) == 1
    assert remaining[0].created_at.replace(tzinfo=None) > old.replace(tzinfo=None)
