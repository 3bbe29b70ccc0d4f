from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from toiletcheck.core.config import get_settings


def engine_options(database_url: str, *, pool_size: int, max_overflow: int) -> dict[str, Any]:
    options: dict[str, Any] = {"pool_pre_ping": True}
    # Pool sizing applies to server databases only.
    if not database_url.startswith("sqlite"):
        options["pool_size"] = max(1, int(pool_size))
        options["max_overflow"] = max(0, int(max_overflow))
    return options


settings = get_settings()
engine = create_async_engine(
    settings.database_url,
    **engine_options(
        settings.database_url,
        pool_size=settings.api_db_pool_size,
        max_overflow=settings.api_db_max_overflow,
    ),
)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    async with SessionLocal() as session:
        yield session
