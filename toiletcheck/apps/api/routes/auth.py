from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from toiletcheck.apps.api.deps import require_level
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import SuccessEnvelope, success_response
from toiletcheck.services.auth.guard import AuthContext, RoleInfo


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"], responses=DEFAULT_ERROR_RESPONSES)


class VerifyRoleResponse(BaseModel):
    userId: str
    role: RoleInfo
    isAdmin: bool
    isSuperAdmin: bool


@router.get("/verify-role", response_model=SuccessEnvelope[VerifyRoleResponse])
async def verify_role(auth: AuthContext = Depends(require_level(0, "Unauthorized"))) -> dict:
    """Return the caller's server-resolved role so clients cannot spoof it."""
    logger.info("verify_role user_id=%s role=%s level=%s", auth.user_id, auth.role.name, auth.role.level)
    payload = VerifyRoleResponse(
        userId=auth.user_id,
        role=auth.role,
        isAdmin=auth.is_admin,
        isSuperAdmin=auth.is_super_admin,
    )
    return success_response(payload)
