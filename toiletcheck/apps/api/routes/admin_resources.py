from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, StrictBool, StrictStr
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.apps.api.deps import get_db, parse_body, read_json_object, require_level
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import success_response
from toiletcheck.core.config import get_settings
from toiletcheck.domain.models import Building, Location
from toiletcheck.persistence.repos import resources as resources_repo
from toiletcheck.services.audit import create_audit_log
from toiletcheck.services.auth.guard import AuthContext
from toiletcheck.services.auth.roles import ADMIN_LEVEL
from toiletcheck.services.qr import build_location_qr_payload, generate_bulk_location_codes


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/resources", tags=["admin"], responses=DEFAULT_ERROR_RESPONSES)

_require_admin = require_level(ADMIN_LEVEL, "Access denied - Admin privileges required")

_INVALID_TYPE_MESSAGE = "Invalid or missing resource type. Must be: organizations, buildings, or locations"


class OrganizationCreate(BaseModel):
    name: StrictStr = Field(min_length=1)
    short_code: StrictStr = Field(min_length=1)
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    logo_url: str | None = None


class BuildingCreate(BaseModel):
    organization_id: StrictStr = Field(min_length=1)
    name: StrictStr = Field(min_length=1)
    short_code: StrictStr = Field(min_length=1)
    address: str | None = None
    total_floors: int | None = None
    type: str | None = None


class LocationCreate(BaseModel):
    building_id: StrictStr = Field(min_length=1)
    name: StrictStr = Field(min_length=1)
    organization_id: str | None = None
    code: str | None = None
    description: str | None = None
    floor: str | None = None
    section: str | None = None
    area: str | None = None
    coordinates: dict[str, Any] | None = None
    photo_url: str | None = None


class OrganizationUpdate(BaseModel):
    name: StrictStr | None = None
    short_code: StrictStr | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    logo_url: str | None = None
    is_active: StrictBool | None = None


class BuildingUpdate(BaseModel):
    name: StrictStr | None = None
    short_code: StrictStr | None = None
    address: str | None = None
    total_floors: int | None = None
    type: str | None = None
    is_active: StrictBool | None = None


class LocationUpdate(BaseModel):
    name: StrictStr | None = None
    building_id: StrictStr | None = None
    organization_id: str | None = None
    code: str | None = None
    description: str | None = None
    floor: str | None = None
    section: str | None = None
    area: str | None = None
    coordinates: dict[str, Any] | None = None
    photo_url: str | None = None
    is_active: StrictBool | None = None


_CREATE_MODELS: dict[str, tuple[type[BaseModel], str]] = {
    "organizations": (OrganizationCreate, "Missing required fields: name, short_code"),
    "buildings": (BuildingCreate, "Missing required fields: name, short_code, organization_id"),
    "locations": (LocationCreate, "Missing required fields: name, building_id"),
}
_UPDATE_MODELS: dict[str, type[BaseModel]] = {
    "organizations": OrganizationUpdate,
    "buildings": BuildingUpdate,
    "locations": LocationUpdate,
}
# Columns that may be changed but never cleared.
_NON_NULLABLE = {"name", "short_code", "building_id", "is_active"}


def _singular(resource_type: str) -> str:
    return resource_type[:-1]


def _row_payload(row: Any) -> dict[str, Any]:
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


def _resource_type(type_: str | None) -> str:
    if not type_ or type_ not in resources_repo.RESOURCE_MODELS:
        raise HTTPException(status_code=400, detail=_INVALID_TYPE_MESSAGE)
    return type_


async def _with_relations(db: AsyncSession, resource_type: str, rows: list[Any]) -> list[dict[str, Any]]:
    # Attach parent names the admin tables display next to each row.
    payloads = [_row_payload(row) for row in rows]
    if resource_type == "organizations":
        return payloads
    org_names = await resources_repo.organization_names(db, (row.organization_id for row in rows))
    building_names: dict[str, str] = {}
    if resource_type == "locations":
        building_names = await resources_repo.building_names(db, (row.building_id for row in rows))
    for row, payload in zip(rows, payloads):
        payload["organization"] = (
            {"name": org_names[row.organization_id]} if row.organization_id in org_names else None
        )
        if resource_type == "locations":
            payload["building"] = (
                {"name": building_names[row.building_id], "organization_id": row.organization_id}
                if row.building_id in building_names
                else None
            )
    return payloads


async def _resolve_building(
    db: AsyncSession,
    building_id: str,
    organization_id: str | None,
) -> Building:
    building = await resources_repo.get_resource(db, "buildings", building_id)
    if building is None:
        raise HTTPException(status_code=404, detail="Building not found")
    if organization_id and organization_id != building.organization_id:
        raise HTTPException(status_code=400, detail="Building does not belong to the given organization")
    return building


@router.get("")
async def get_resources(
    type: str | None = None,
    id: str | None = None,
    organization_id: str | None = None,
    building_id: str | None = None,
    auth: AuthContext = Depends(_require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    resource_type = _resource_type(type)
    try:
        if id:
            row = await resources_repo.get_resource(db, resource_type, id)
            if row is None:
                raise HTTPException(status_code=404, detail=f"{_singular(resource_type).capitalize()} not found")
            payload = (await _with_relations(db, resource_type, [row]))[0]
            return success_response(payload, f"{_singular(resource_type)} retrieved")
        rows = await resources_repo.list_resources(
            db,
            resource_type,
            organization_id=organization_id,
            building_id=building_id,
        )
        payloads = await _with_relations(db, resource_type, rows)
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc
    return success_response(payloads, f"{resource_type} retrieved")


async def _create_values(
    db: AsyncSession,
    resource_type: str,
    values: dict[str, Any],
) -> dict[str, Any]:
    if resource_type == "buildings":
        organization = await resources_repo.get_resource(db, "organizations", values["organization_id"])
        if organization is None:
            raise HTTPException(status_code=404, detail="Organization not found")
    if resource_type == "locations":
        building = await _resolve_building(db, values["building_id"], values.get("organization_id"))
        values["organization_id"] = building.organization_id
        if not values.get("code"):
            organization = await resources_repo.get_resource(db, "organizations", building.organization_id)
            existing = await resources_repo.list_location_codes(db, building.id)
            org_code = organization.short_code if organization is not None else "ORG"
            values["code"] = generate_bulk_location_codes(
                1, org_code, building.short_code, existing_codes=existing
            )[0]
    return values


@router.post("")
async def create_resource(
    request: Request,
    type: str | None = None,
    auth: AuthContext = Depends(_require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    resource_type = _resource_type(type)
    model, missing_message = _CREATE_MODELS[resource_type]
    body = parse_body(model, await read_json_object(request), missing_message)
    try:
        values = await _create_values(db, resource_type, body.model_dump(exclude_none=True))
        values.update(created_by=auth.user_id, is_active=True)
        row = await resources_repo.create_resource(db, resource_type, values)
        if isinstance(row, Location):
            row.qr_code = build_location_qr_payload(row.id, get_settings().app_base_url)
            await db.flush()
        await db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("resource_create_failed type=%s", resource_type, exc_info=exc)
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc

    singular = _singular(resource_type)
    await create_audit_log(
        auth.user_id,
        f"CREATE_{singular.upper()}",
        singular,
        row.id,
        {"resourceId": row.id, "name": row.name},
    )
    return success_response(_row_payload(row), f"{singular} created")


@router.patch("")
async def update_resource(
    request: Request,
    type: str | None = None,
    id: str | None = None,
    auth: AuthContext = Depends(_require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    resource_type = _resource_type(type)
    if not id:
        raise HTTPException(status_code=400, detail="Resource ID required")
    body = parse_body(_UPDATE_MODELS[resource_type], await read_json_object(request), "Invalid update fields")
    updates = body.model_dump(exclude_unset=True)
    cleared = sorted(field for field in _NON_NULLABLE if field in updates and updates[field] is None)
    if cleared:
        raise HTTPException(status_code=400, detail=f"Fields cannot be null: {', '.join(cleared)}")

    try:
        row = await resources_repo.get_resource(db, resource_type, id)
        if row is None:
            raise HTTPException(status_code=404, detail=f"{_singular(resource_type).capitalize()} not found")
        if isinstance(row, Location) and ("building_id" in updates or "organization_id" in updates):
            building = await _resolve_building(
                db,
                updates.get("building_id") or row.building_id,
                updates.get("organization_id"),
            )
            updates["organization_id"] = building.organization_id
        row = await resources_repo.update_resource(db, row, updates)
        await db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("resource_update_failed type=%s id=%s", resource_type, id, exc_info=exc)
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc

    singular = _singular(resource_type)
    await create_audit_log(
        auth.user_id,
        f"UPDATE_{singular.upper()}",
        singular,
        id,
        {"resourceId": id, "updates": updates},
    )
    return success_response(_row_payload(row), f"{singular} updated")


@router.delete("")
async def delete_resource(
    type: str | None = None,
    id: str | None = None,
    auth: AuthContext = Depends(_require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    resource_type = _resource_type(type)
    if not id:
        raise HTTPException(status_code=400, detail="Resource ID required")
    try:
        row = await resources_repo.get_resource(db, resource_type, id)
        if row is None:
            raise HTTPException(status_code=404, detail=f"{_singular(resource_type).capitalize()} not found")
        row = await resources_repo.soft_delete_resource(db, row)
        await db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("resource_delete_failed type=%s id=%s", resource_type, id, exc_info=exc)
        raise HTTPException(status_code=500, detail=f"Operation failed: {exc}") from exc

    singular = _singular(resource_type)
    await create_audit_log(auth.user_id, f"DELETE_{singular.upper()}", singular, id, {"resourceId": id})
    return success_response(_row_payload(row), f"{singular} deleted")
