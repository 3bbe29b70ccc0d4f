from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.persistence.repos import inspections as inspections_repo
from toiletcheck.persistence.repos import resources as resources_repo
from toiletcheck.persistence.repos import users as users_repo
from toiletcheck.services.scoring import average_score, calculate_score, round_half_up


ACTIVE_USER_WINDOW = timedelta(days=7)
SCORE_SAMPLE_SIZE = 100


async def collect_admin_stats(session: AsyncSession, *, today: date | None = None) -> dict[str, Any]:
    """Counts shown on the admin dashboard.

    ``inspectionGrowth`` compares today with yesterday; ``userGrowth`` stays 0
    until user history is tracked.
    """
    now = datetime.now(timezone.utc)
    today = today or now.date()
    yesterday = today - timedelta(days=1)

    total_users = await users_repo.count_active_users(session)
    total_locations = await resources_repo.count_active_locations(session)
    total_inspections = await inspections_repo.count_inspections(session)
    today_count = await inspections_repo.count_inspections(session, inspection_date=today)
    yesterday_count = await inspections_repo.count_inspections(session, inspection_date=yesterday)
    active_users = await users_repo.count_active_users(session, logged_in_since=now - ACTIVE_USER_WINDOW)
    responses = await inspections_repo.recent_responses(session, limit=SCORE_SAMPLE_SIZE)

    inspection_growth = (
        round_half_up((today_count - yesterday_count) / yesterday_count * 100) if yesterday_count > 0 else 0
    )
    return {
        "totalUsers": total_users,
        "totalLocations": total_locations,
        "totalInspections": total_inspections,
        "todayInspections": today_count,
        "activeUsers": active_users,
        "avgScore": average_score([calculate_score(item) for item in responses]),
        "userGrowth": 0,
        "inspectionGrowth": inspection_growth,
    }
