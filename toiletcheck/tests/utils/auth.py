from __future__ import annotations

from datetime import datetime, timedelta, timezone
import time
from uuid import uuid4

import jwt
from sqlalchemy import select, update

from toiletcheck.core.config import get_settings
from toiletcheck.domain.models import Role, User, UserRole
from toiletcheck.persistence.db import SessionLocal
from toiletcheck.services.auth.roles import ROLE_LEVELS


def _utc_now() -> datetime:
    # Keep timestamps consistent for test-generated auth records.
    return datetime.now(timezone.utc)


def mint_token(user_id: str, *, expires_in: int = 3600, secret: str | None = None) -> str:
    # Sign like the hosted auth provider would, with the configured shared secret.
    payload = {"sub": user_id, "exp": int(time.time()) + expires_in}
    return jwt.encode(payload, secret or get_settings().auth_jwt_secret or "test-secret", algorithm="HS256")


def bearer(user_id: str, **kwargs) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(user_id, **kwargs)}"}


async def ensure_role(name: str, *, level: int | None = None, is_active: bool = True) -> Role:
    async with SessionLocal() as session:
        result = await session.execute(select(Role).where(Role.name == name))
        role = result.scalar_one_or_none()
        if role is None:
            role = Role(
                id=uuid4().hex,
                name=name,
                level=ROLE_LEVELS[name] if level is None else level,
                description=f"{name} role",
                is_active=is_active,
            )
            session.add(role)
            await session.commit()
        return role


async def create_test_user(
    *,
    role: str | None = "user",
    full_name: str = "Test User",
    is_active: bool | None = True,
    last_login_at: datetime | None = None,
) -> tuple[str, dict[str, str]]:
    """Provision a user (optionally with a role) and return its id and auth headers."""
    role_row = await ensure_role(role) if role is not None else None
    user_id = str(uuid4())
    async with SessionLocal() as session:
        session.add(
            User(
                id=user_id,
                email=f"{user_id[:8]}@example.test",
                full_name=full_name,
                is_active=is_active,
                last_login_at=last_login_at,
            )
        )
        # Flush the user before the assignment to satisfy FK constraints.
        await session.flush()
        if is_active is None:
            # The column default replaces an explicit None on insert.
            await session.execute(update(User).where(User.id == user_id).values(is_active=None))
        if role_row is not None:
            session.add(UserRole(user_id=user_id, role_id=role_row.id, assigned_by="test-suite"))
        await session.commit()
    return user_id, bearer(user_id)


def recently(minutes: int = 5) -> datetime:
    return _utc_now() - timedelta(minutes=minutes)
