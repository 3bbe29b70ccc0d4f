from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, StrictStr
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.apps.api.deps import get_db, parse_body, read_json_object, require_level
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import success_response
from toiletcheck.domain.models import User
from toiletcheck.persistence.repos import users as users_repo
from toiletcheck.services.auth.guard import AuthContext


router = APIRouter(prefix="/profile", tags=["profile"], responses=DEFAULT_ERROR_RESPONSES)

_require_user = require_level(0, "Unauthorized")
_NAME_MESSAGE = "Full name must be at least 2 characters"


class ProfileUpdate(BaseModel):
    full_name: StrictStr
    phone: str | None = None
    occupation_id: str | None = None


def _profile_payload(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "phone": user.phone,
        "occupation_id": user.occupation_id,
        "profile_photo_url": user.profile_photo_url,
        "created_at": user.created_at,
        "last_login_at": user.last_login_at,
    }


async def _current_user(db: AsyncSession, user_id: str) -> User:
    user = await users_repo.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("")
async def get_profile(
    auth: AuthContext = Depends(_require_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        user = await _current_user(db, auth.user_id)
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Internal server error: {exc}") from exc
    return success_response(_profile_payload(user), "Profile retrieved")


@router.put("")
async def update_profile(
    request: Request,
    auth: AuthContext = Depends(_require_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    body = parse_body(ProfileUpdate, await read_json_object(request), _NAME_MESSAGE)
    full_name = body.full_name.strip()
    if len(full_name) < 2:
        raise HTTPException(status_code=400, detail=_NAME_MESSAGE)
    phone = body.phone.strip() if body.phone else None
    try:
        user = await _current_user(db, auth.user_id)
        user = await users_repo.update_profile(
            db,
            user,
            full_name=full_name,
            phone=phone or None,
            occupation_id=body.occupation_id or None,
        )
        await db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        raise HTTPException(status_code=500, detail=f"Internal server error: {exc}") from exc
    return success_response(_profile_payload(user), "Profile updated")
