from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, StrictBool, StrictStr
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.apps.api.deps import authorize, get_db, parse_body, read_json_object
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import success_response
from toiletcheck.domain.models import Role, User
from toiletcheck.persistence.repos import roles as roles_repo
from toiletcheck.persistence.repos import users as users_repo
from toiletcheck.services.audit import create_audit_log
from toiletcheck.services.auth.roles import ADMIN_LEVEL, SUPER_ADMIN_LEVEL, SYSTEM_ADMIN_LEVEL, resolve_role


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["admin"], responses=DEFAULT_ERROR_RESPONSES)


class AssignRoleRequest(BaseModel):
    userId: StrictStr | None = None
    roleId: StrictStr | None = None


class ToggleStatusRequest(BaseModel):
    userId: StrictStr = Field(min_length=1)
    isActive: StrictBool


def _role_summary(role: Role | None) -> dict[str, Any] | None:
    if role is None:
        return None
    return {"id": role.id, "name": role.name, "level": role.level}


def _role_payload(role: Role) -> dict[str, Any]:
    return {
        "id": role.id,
        "name": role.name,
        "level": role.level,
        "description": role.description,
        "is_active": role.is_active,
        "created_at": role.created_at,
        "updated_at": role.updated_at,
    }


def _user_payload(user: User, role: Role | None) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "phone": user.phone,
        "is_active": user.is_active,
        "created_at": user.created_at,
        "last_login_at": user.last_login_at,
        "role": _role_summary(role),
    }


@router.get("")
async def get_users(
    request: Request,
    roles: str | None = None,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """List roles (``?roles=true``, admin+) or users with their roles (super admin+)."""
    if roles == "true":
        auth = await authorize(request, db, ADMIN_LEVEL, "Access denied - Admin privileges required")
        logger.info("admin_list_roles user_id=%s level=%s", auth.user_id, auth.role.level)
        try:
            role_rows = await roles_repo.list_active_roles(db)
        except SQLAlchemyError as exc:
            raise HTTPException(status_code=500, detail=f"Failed to retrieve roles: {exc}") from exc
        return success_response([_role_payload(role) for role in role_rows], "Roles retrieved successfully")

    auth = await authorize(request, db, SUPER_ADMIN_LEVEL, "Access denied - Superadmin privileges required")
    logger.info("admin_list_users user_id=%s level=%s", auth.user_id, auth.role.level)
    try:
        users = await users_repo.list_users(db)
        assignments = await roles_repo.list_role_assignments(db)
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to retrieve users: {exc}") from exc

    combined = [_user_payload(user, assignments.get(user.id)) for user in users]
    await create_audit_log(auth.user_id, "LIST_USERS", "user", None, {"userCount": len(combined)})
    return success_response(combined, "Users retrieved successfully")


@router.post("")
async def post_users(
    request: Request,
    action: str | None = None,
    db: AsyncSession = Depends(get_db),
) -> dict:
    if action == "assign-role":
        return await _assign_role(request, db)
    if action == "toggle-status":
        return await _toggle_status(request, db)
    raise HTTPException(status_code=405, detail="Method not allowed")


async def _assign_role(request: Request, db: AsyncSession) -> dict:
    auth = await authorize(request, db, SYSTEM_ADMIN_LEVEL, "Forbidden: Only superadmin can assign roles")
    missing_message = "Missing required fields: userId and roleId"
    body = parse_body(AssignRoleRequest, await read_json_object(request), missing_message)
    if not body.userId or not body.roleId:
        raise HTTPException(status_code=400, detail=missing_message)
    user_id, role_id = body.userId, body.roleId

    try:
        target_role = await roles_repo.get_role(db, role_id)
        if target_role is None:
            raise HTTPException(status_code=404, detail="Role not found")
        if not target_role.is_active:
            raise HTTPException(status_code=400, detail="Cannot assign inactive role")
        if target_role.level > auth.role.level:
            raise HTTPException(
                status_code=403,
                detail=f"Cannot assign role with level {target_role.level} (your level: {auth.role.level})",
            )
        target_user = await users_repo.get_user(db, user_id)
        if target_user is None:
            raise HTTPException(status_code=404, detail="User not found")
        if user_id == auth.user_id:
            raise HTTPException(status_code=400, detail="Cannot modify your own role")

        operation = await roles_repo.upsert_user_role(
            db, user_id=user_id, role_id=role_id, assigned_by=auth.user_id
        )
        await db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("assign_role_failed user_id=%s role_id=%s", user_id, role_id, exc_info=exc)
        await create_audit_log(
            auth.user_id,
            "ASSIGN_ROLE",
            "user_role",
            user_id,
            {"roleId": role_id},
            success=False,
            error_message=str(exc),
        )
        raise HTTPException(status_code=500, detail=f"Internal server error: {exc}") from exc

    await create_audit_log(
        auth.user_id,
        "ASSIGN_ROLE",
        "user_role",
        user_id,
        {
            "targetUserEmail": target_user.email,
            "targetUserName": target_user.full_name,
            "roleId": target_role.id,
            "roleName": target_role.name,
            "roleLevel": target_role.level,
            "operation": operation,
        },
    )
    logger.info("role_%s user_id=%s role=%s by=%s", operation, user_id, target_role.name, auth.user_id)
    return success_response(
        {"userId": user_id, "roleId": role_id, "roleName": target_role.name, "operation": operation},
        f'Role "{target_role.name}" {operation} successfully for {target_user.full_name}',
    )


async def _toggle_status(request: Request, db: AsyncSession) -> dict:
    auth = await authorize(request, db, ADMIN_LEVEL, "Forbidden: Admin access required")
    body = parse_body(
        ToggleStatusRequest,
        await read_json_object(request),
        "Missing or invalid fields: userId (string) and isActive (boolean) required",
    )
    user_id, is_active = body.userId, body.isActive
    if user_id == auth.user_id:
        raise HTTPException(status_code=400, detail="Cannot modify your own status")

    try:
        target_user = await users_repo.get_user(db, user_id)
        if target_user is None:
            raise HTTPException(status_code=404, detail="User not found")
        target_role = await resolve_role(db, user_id)
        if target_role.level >= auth.role.level:
            raise HTTPException(
                status_code=403,
                detail=(
                    "Cannot modify user with equal or higher role level "
                    f"(target: {target_role.level}, yours: {auth.role.level})"
                ),
            )
        previous_status = target_user.is_active
        if previous_status is is_active:
            return success_response(
                {"userId": user_id, "isActive": is_active, "unchanged": True},
                f"User is already {'active' if is_active else 'inactive'}",
            )
        await users_repo.set_active(db, target_user, is_active=is_active)
        await db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("toggle_status_failed user_id=%s", user_id, exc_info=exc)
        await create_audit_log(
            auth.user_id,
            "TOGGLE_USER_STATUS",
            "user",
            user_id,
            {"newStatus": is_active},
            success=False,
            error_message=str(exc),
        )
        raise HTTPException(status_code=500, detail=f"Internal server error: {exc}") from exc

    await create_audit_log(
        auth.user_id,
        "TOGGLE_USER_STATUS",
        "user",
        user_id,
        {
            "targetUserEmail": target_user.email,
            "targetUserName": target_user.full_name,
            "targetRole": target_role.name,
            "previousStatus": previous_status,
            "newStatus": is_active,
        },
    )
    verb = "activated" if is_active else "deactivated"
    return success_response(
        {"userId": user_id, "isActive": is_active, "userName": target_user.full_name},
        f'User "{target_user.full_name}" {verb} successfully',
    )
