from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.domain.models import Role, UserRole


async def get_role(session: AsyncSession, role_id: str) -> Role | None:
    result = await session.execute(select(Role).where(Role.id == role_id))
    return result.scalar_one_or_none()


async def get_role_by_name(session: AsyncSession, name: str) -> Role | None:
    result = await session.execute(select(Role).where(Role.name == name))
    return result.scalar_one_or_none()


async def list_active_roles(session: AsyncSession) -> list[Role]:
    # Most privileged first to match the role picker in the admin screen.
    result = await session.execute(
        select(Role).where(Role.is_active.is_(True)).order_by(Role.level.desc(), Role.name)
    )
    return list(result.scalars().all())


async def get_user_role_row(session: AsyncSession, user_id: str) -> UserRole | None:
    result = await session.execute(select(UserRole).where(UserRole.user_id == user_id))
    return result.scalar_one_or_none()


async def get_role_for_user(session: AsyncSession, user_id: str) -> Role | None:
    # At most one assignment exists per user (unique user_roles.user_id).
    result = await session.execute(
        select(Role)
        .join(UserRole, UserRole.role_id == Role.id)
        .where(UserRole.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def list_role_assignments(session: AsyncSession) -> dict[str, Role]:
    result = await session.execute(
        select(UserRole.user_id, Role).join(Role, UserRole.role_id == Role.id)
    )
    return {user_id: role for user_id, role in result.all()}


async def upsert_user_role(
    session: AsyncSession,
    *,
    user_id: str,
    role_id: str,
    assigned_by: str,
) -> str:
    # Return "updated" when an assignment already existed, otherwise "assigned".
    existing = await get_user_role_row(session, user_id)
    if existing is not None:
        existing.role_id = role_id
        existing.assigned_by = assigned_by
        existing.updated_at = datetime.now(timezone.utc)
        await session.flush()
        return "updated"
    session.add(UserRole(user_id=user_id, role_id=role_id, assigned_by=assigned_by))
    await session.flush()
    return "assigned"
