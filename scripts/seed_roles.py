from __future__ import annotations

import asyncio

from toiletcheck.domain.models import Role
from toiletcheck.persistence.db import SessionLocal
from toiletcheck.persistence.repos import roles as roles_repo
from toiletcheck.services.auth.roles import ROLE_LEVELS


ROLE_DESCRIPTIONS = {
    "system_admin": "Full control, including role assignment",
    "super_admin": "Manages users across organizations",
    "admin": "Manages locations and reviews inspections",
    "manager": "Reviews reports for assigned sites",
    "inspector": "Submits inspections",
    "user": "Default access",
}


async def seed() -> None:
    # Idempotent: existing roles keep their id and get their level corrected.
    created = updated = 0
    async with SessionLocal() as session:
        for name, level in ROLE_LEVELS.items():
            role = await roles_repo.get_role_by_name(session, name)
            if role is None:
                session.add(Role(name=name, level=level, description=ROLE_DESCRIPTIONS.get(name), is_active=True))
                created += 1
            elif role.level != level:
                role.level = level
                updated += 1
        await session.commit()
    print(f"seeded_roles created={created} updated={updated}")


if __name__ == "__main__":
    asyncio.run(seed())
