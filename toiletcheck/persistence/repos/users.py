from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.domain.models import User


async def get_user(session: AsyncSession, user_id: str) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def list_users(session: AsyncSession) -> list[User]:
    # Newest accounts first; id breaks ties for rows created in the same instant.
    result = await session.execute(select(User).order_by(User.created_at.desc(), User.id))
    return list(result.scalars().all())


async def set_active(session: AsyncSession, user: User, *, is_active: bool) -> User:
    user.is_active = is_active
    user.updated_at = datetime.now(timezone.utc)
    await session.flush()
    return user


async def update_profile(
    session: AsyncSession,
    user: User,
    *,
    full_name: str,
    phone: str | None,
    occupation_id: str | None,
) -> User:
    user.full_name = full_name
    user.phone = phone
    user.occupation_id = occupation_id
    user.updated_at = datetime.now(timezone.utc)
    await session.flush()
    return user


async def count_active_users(session: AsyncSession, *, logged_in_since: datetime | None = None) -> int:
    stmt = select(func.count()).select_from(User).where(User.is_active.is_(True))
    if logged_in_since is not None:
        stmt = stmt.where(User.last_login_at >= logged_in_since)
    result = await session.execute(stmt)
    return int(result.scalar_one())
