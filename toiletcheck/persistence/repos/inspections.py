from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.core.errors import InspectionWriteError
from toiletcheck.domain.models import (
    Building,
    InspectionComponent,
    InspectionRecord,
    Location,
    Organization,
    User,
)


def _detail_query():
    # Join location, building, organization and inspector so list views need no follow-up queries.
    return (
        select(
            InspectionRecord,
            Location.name,
            Location.floor,
            Location.area,
            Location.section,
            Building.name,
            Organization.name,
            User.full_name,
            User.email,
            User.phone,
            User.occupation_id,
        )
        .join(Location, Location.id == InspectionRecord.location_id)
        .outerjoin(Building, Building.id == Location.building_id)
        .outerjoin(Organization, Organization.id == Location.organization_id)
        .outerjoin(User, User.id == InspectionRecord.user_id)
    )


def _detail_row(row) -> dict[str, Any]:
    (
        record,
        location_name,
        floor,
        area,
        section,
        building_name,
        organization_name,
        full_name,
        email,
        phone,
        occupation_id,
    ) = row
    return {
        "record": record,
        "location": {
            "id": record.location_id,
            "name": location_name,
            "floor": floor,
            "area": area,
            "section": section,
            "building": building_name,
            "organization": organization_name,
        },
        "user": {
            "id": record.user_id,
            "full_name": full_name,
            "email": email,
            "phone": phone,
            "occupation_id": occupation_id,
        },
    }


async def get_inspection(session: AsyncSession, inspection_id: str) -> InspectionRecord | None:
    result = await session.execute(select(InspectionRecord).where(InspectionRecord.id == inspection_id))
    return result.scalar_one_or_none()


async def get_inspection_detail(
    session: AsyncSession,
    inspection_id: str,
    *,
    user_id: str | None = None,
) -> dict[str, Any] | None:
    stmt = _detail_query().where(InspectionRecord.id == inspection_id)
    if user_id is not None:
        stmt = stmt.where(InspectionRecord.user_id == user_id)
    result = await session.execute(stmt)
    row = result.first()
    return _detail_row(row) if row is not None else None


async def list_inspection_details(
    session: AsyncSession,
    *,
    user_id: str | None = None,
    location_id: str | None = None,
    inspection_date: date | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    stmt = _detail_query()
    if user_id:
        stmt = stmt.where(InspectionRecord.user_id == user_id)
    if location_id:
        stmt = stmt.where(InspectionRecord.location_id == location_id)
    if inspection_date is not None:
        stmt = stmt.where(InspectionRecord.inspection_date == inspection_date)
    if date_from is not None:
        stmt = stmt.where(InspectionRecord.inspection_date >= date_from)
    if date_to is not None:
        stmt = stmt.where(InspectionRecord.inspection_date <= date_to)
    stmt = stmt.order_by(
        InspectionRecord.inspection_date.desc(),
        InspectionRecord.inspection_time.desc(),
        InspectionRecord.id,
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return [_detail_row(row) for row in result.all()]


async def create_inspection(
    session: AsyncSession,
    record: InspectionRecord,
    components: Iterable[dict[str, Any]] = (),
) -> InspectionRecord:
    """Insert an inspection and its component ratings in one transaction.

    The parent is flushed first so components can reference its id; any
    failure rolls back both, so a half-written inspection is never visible.
    """
    try:
        session.add(record)
        await session.flush()
        for component in components:
            session.add(
                InspectionComponent(
                    inspection_id=record.id,
                    component_name=component["component_name"],
                    rating=component["rating"],
                    notes=component.get("notes"),
                )
            )
        await session.commit()
    except (SQLAlchemyError, KeyError) as exc:
        await session.rollback()
        raise InspectionWriteError(f"Failed to create inspection: {exc}") from exc
    return record


async def list_components(session: AsyncSession, inspection_id: str) -> list[InspectionComponent]:
    result = await session.execute(
        select(InspectionComponent)
        .where(InspectionComponent.inspection_id == inspection_id)
        .order_by(InspectionComponent.created_at, InspectionComponent.id)
    )
    return list(result.scalars().all())


async def update_inspection(
    session: AsyncSession,
    record: InspectionRecord,
    values: dict[str, Any],
) -> InspectionRecord:
    for field, value in values.items():
        setattr(record, field, value)
    record.updated_at = datetime.now(timezone.utc)
    await session.flush()
    return record


async def delete_inspection(session: AsyncSession, record: InspectionRecord) -> None:
    # Components go first; SQLite test databases do not enforce ON DELETE CASCADE.
    await session.execute(
        delete(InspectionComponent).where(InspectionComponent.inspection_id == record.id)
    )
    await session.delete(record)
    await session.flush()


async def count_inspections(session: AsyncSession, *, inspection_date: date | None = None) -> int:
    stmt = select(func.count()).select_from(InspectionRecord)
    if inspection_date is not None:
        stmt = stmt.where(InspectionRecord.inspection_date == inspection_date)
    result = await session.execute(stmt)
    return int(result.scalar_one())


async def recent_responses(session: AsyncSession, *, limit: int = 100) -> list[dict[str, Any]]:
    result = await session.execute(
        select(InspectionRecord.responses)
        .order_by(InspectionRecord.submitted_at.desc(), InspectionRecord.id)
        .limit(limit)
    )
    return [responses or {} for responses in result.scalars().all()]
