from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.domain.models import Base, Building, Location, Organization


RESOURCE_MODELS: dict[str, type[Base]] = {
    "organizations": Organization,
    "buildings": Building,
    "locations": Location,
}


async def get_resource(session: AsyncSession, resource_type: str, resource_id: str):
    model = RESOURCE_MODELS[resource_type]
    result = await session.execute(select(model).where(model.id == resource_id))
    return result.scalar_one_or_none()


async def list_resources(
    session: AsyncSession,
    resource_type: str,
    *,
    organization_id: str | None = None,
    building_id: str | None = None,
) -> list[Any]:
    model = RESOURCE_MODELS[resource_type]
    stmt = select(model)
    # Organizations have no parent filter; buildings filter by organization only.
    if organization_id and model is not Organization:
        stmt = stmt.where(model.organization_id == organization_id)
    if building_id and model is Location:
        stmt = stmt.where(Location.building_id == building_id)
    stmt = stmt.order_by(model.created_at.desc(), model.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def organization_names(session: AsyncSession, organization_ids: Iterable[str]) -> dict[str, str]:
    ids = {org_id for org_id in organization_ids if org_id}
    if not ids:
        return {}
    result = await session.execute(
        select(Organization.id, Organization.name).where(Organization.id.in_(ids))
    )
    return {org_id: name for org_id, name in result.all()}


async def building_names(session: AsyncSession, building_ids: Iterable[str]) -> dict[str, str]:
    ids = {building_id for building_id in building_ids if building_id}
    if not ids:
        return {}
    result = await session.execute(select(Building.id, Building.name).where(Building.id.in_(ids)))
    return {building_id: name for building_id, name in result.all()}


async def create_resource(session: AsyncSession, resource_type: str, values: dict[str, Any]):
    model = RESOURCE_MODELS[resource_type]
    row = model(**values)
    session.add(row)
    await session.flush()
    return row


async def update_resource(session: AsyncSession, row: Any, values: dict[str, Any]) -> Any:
    for field, value in values.items():
        setattr(row, field, value)
    row.updated_at = datetime.now(timezone.utc)
    await session.flush()
    return row


async def soft_delete_resource(session: AsyncSession, row: Any) -> Any:
    # Deactivate instead of deleting so inspection history keeps its references.
    return await update_resource(session, row, {"is_active": False})


async def get_active_location(session: AsyncSession, location_id: str) -> tuple[Location, str | None] | None:
    result = await session.execute(
        select(Location, Building.name)
        .outerjoin(Building, Building.id == Location.building_id)
        .where(Location.id == location_id, Location.is_active.is_(True))
    )
    row = result.first()
    if row is None:
        return None
    location, building_name = row
    return location, building_name


async def list_location_codes(session: AsyncSession, building_id: str) -> list[str]:
    result = await session.execute(
        select(Location.code).where(Location.building_id == building_id, Location.code.is_not(None))
    )
    return [code for code in result.scalars().all() if code]


async def count_active_locations(session: AsyncSession) -> int:
    result = await session.execute(
        select(func.count()).select_from(Location).where(Location.is_active.is_(True))
    )
    return int(result.scalar_one())
