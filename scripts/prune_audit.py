from __future__ import annotations

import asyncio

from toiletcheck.core.config import get_settings
from toiletcheck.persistence.db import SessionLocal
from toiletcheck.persistence.repos import audit as audit_repo


async def prune() -> None:
    retention_days = get_settings().audit_retention_days
    async with SessionLocal() as session:
        deleted = await audit_repo.prune_audit_logs(session, retention_days=retention_days)
        await session.commit()
        print(f"pruned_audit_logs={deleted} retention_days={retention_days}")


if __name__ == "__main__":
    asyncio.run(prune())
