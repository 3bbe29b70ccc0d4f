from __future__ import annotations

import os
import tempfile


# Point settings at a throwaway SQLite file before any toiletcheck module builds the engine.
_DB_DIR = tempfile.mkdtemp(prefix="toiletcheck-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")
os.environ.setdefault("AUDIT_RPC_ENABLED", "true")
os.environ.setdefault("APP_BASE_URL", "https://toiletcheck.test")

import pytest  # noqa: E402

from toiletcheck.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from toiletcheck.domain.models import Base  # noqa: E402
from toiletcheck.persistence.db import engine  # noqa: E402


@pytest.fixture(autouse=True)
async def reset_schema_between_tests() -> None:
    # Rebuild every table so each test starts from an empty database.
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Dispose the async engine to prevent cross-loop connection reuse between tests.
    await engine.dispose()
