from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.persistence.repos import roles as roles_repo


SYSTEM_ADMIN_LEVEL = 100
SUPER_ADMIN_LEVEL = 90
ADMIN_LEVEL = 80

ROLE_LEVELS: dict[str, int] = {
    "system_admin": SYSTEM_ADMIN_LEVEL,
    "super_admin": SUPER_ADMIN_LEVEL,
    "admin": ADMIN_LEVEL,
    "manager": 50,
    "inspector": 10,
    "user": 0,
}

DEFAULT_ROLE_NAME = "user"


@dataclass(frozen=True)
class ResolvedRole:
    id: str
    name: str
    level: int

    def as_dict(self) -> dict[str, object]:
        return {"id": self.id, "name": self.name, "level": self.level}


DEFAULT_ROLE = ResolvedRole(id="", name=DEFAULT_ROLE_NAME, level=0)


def role_allows(level: int, minimum_level: int) -> bool:
    # Higher levels include every lower level.
    return level >= minimum_level


async def resolve_role(session: AsyncSession, user_id: str) -> ResolvedRole:
    # Users without an assignment act as the zero-level "user" role.
    role = await roles_repo.get_role_for_user(session, user_id)
    if role is None:
        return DEFAULT_ROLE
    return ResolvedRole(
        id=role.id or "",
        name=role.name or DEFAULT_ROLE_NAME,
        level=role.level or 0,
    )
