from __future__ import annotations

from datetime import date, time
from uuid import uuid4

from toiletcheck.domain.models import Building, InspectionRecord, Location, Organization
from toiletcheck.persistence.db import SessionLocal


async def create_site(
    *,
    org_code: str = "ORG",
    building_code: str = "BLD",
    location_name: str = "Lobby Toilet",
    location_active: bool = True,
) -> tuple[str, str, str]:
    """Create one organization, building and location; return their ids."""
    org_id, building_id, location_id = str(uuid4()), str(uuid4()), str(uuid4())
    async with SessionLocal() as session:
        session.add(Organization(id=org_id, name=f"{org_code} Org", short_code=org_code))
        await session.flush()
        session.add(
            Building(id=building_id, organization_id=org_id, name=f"{building_code} Tower", short_code=building_code)
        )
        await session.flush()
        session.add(
            Location(
                id=location_id,
                organization_id=org_id,
                building_id=building_id,
                name=location_name,
                floor="1",
                is_active=location_active,
            )
        )
        await session.commit()
    return org_id, building_id, location_id


async def create_inspection_row(
    *,
    user_id: str,
    location_id: str,
    inspection_date: date,
    responses: dict | None = None,
    inspection_time: time = time(9, 0),
) -> str:
    inspection_id = str(uuid4())
    async with SessionLocal() as session:
        session.add(
            InspectionRecord(
                id=inspection_id,
                user_id=user_id,
                location_id=location_id,
                inspection_date=inspection_date,
                inspection_time=inspection_time,
                responses=responses if responses is not None else {"score": 80},
            )
        )
        await session.commit()
    return inspection_id
