from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.domain.models import InspectionTemplate


DEFAULT_TEMPLATE_NAME = "Comprehensive Inspection"


async def get_active_template(session: AsyncSession, template_id: str) -> InspectionTemplate | None:
    result = await session.execute(
        select(InspectionTemplate).where(
            InspectionTemplate.id == template_id,
            InspectionTemplate.is_active.is_(True),
        )
    )
    return result.scalar_one_or_none()


async def get_default_template(session: AsyncSession) -> InspectionTemplate | None:
    # Tolerate more than one default flag by taking the newest.
    result = await session.execute(
        select(InspectionTemplate)
        .where(InspectionTemplate.is_default.is_(True), InspectionTemplate.is_active.is_(True))
        .order_by(InspectionTemplate.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create_default_template(session: AsyncSession, *, created_by: str) -> InspectionTemplate:
    template = InspectionTemplate(
        name=DEFAULT_TEMPLATE_NAME,
        description="Default comprehensive inspection template",
        fields={
            "components": [],
            "requiredPhotos": 0,
            "maxPhotos": 10,
            "allowNotes": True,
        },
        estimated_time=300,
        is_active=True,
        is_default=True,
        created_by=created_by,
    )
    session.add(template)
    await session.flush()
    return template
