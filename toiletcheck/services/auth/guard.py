from __future__ import annotations

import logging

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from toiletcheck.core.config import get_settings
from toiletcheck.core.errors import TokenError
from toiletcheck.persistence.repos import users as users_repo
from toiletcheck.services.auth.roles import ADMIN_LEVEL, SUPER_ADMIN_LEVEL, resolve_role, role_allows
from toiletcheck.services.auth.tokens import decode_bearer_token, parse_authorization_header


logger = logging.getLogger(__name__)


class RoleInfo(BaseModel):
    id: str
    name: str
    level: int


class AuthContext(BaseModel):
    # Identity and role resolved server-side for one request.
    user_id: str
    role: RoleInfo

    @property
    def is_admin(self) -> bool:
        return self.role.level >= ADMIN_LEVEL

    @property
    def is_super_admin(self) -> bool:
        return self.role.level >= SUPER_ADMIN_LEVEL


async def validate_auth(
    request: Request,
    session: AsyncSession,
    min_level: int = 0,
) -> AuthContext | None:
    """Authenticate the bearer token and check the caller's role level.

    Returns None on every failure: missing header, undecodable or expired
    token, unknown or inactive user, insufficient level, or a database error.
    Each failure is logged at WARNING with its reason.
    """
    settings = get_settings()
    token = parse_authorization_header(request.headers.get(settings.auth_header))
    if token is None:
        logger.warning("auth_denied reason=missing_bearer path=%s", request.url.path)
        return None

    try:
        claims = decode_bearer_token(token)
    except TokenError as exc:
        logger.warning("auth_denied reason=invalid_token path=%s detail=%s", request.url.path, exc)
        return None

    try:
        user = await users_repo.get_user(session, claims.sub)
        if user is None:
            logger.warning("auth_denied reason=user_not_found user_id=%s", claims.sub)
            return None
        # Null is_active counts as inactive.
        if not user.is_active:
            logger.warning("auth_denied reason=user_inactive user_id=%s", claims.sub)
            return None
        role = await resolve_role(session, user.id)
    except SQLAlchemyError as exc:
        logger.warning("auth_denied reason=database_error user_id=%s", claims.sub, exc_info=exc)
        return None

    if not role_allows(role.level, min_level):
        logger.warning(
            "auth_denied reason=insufficient_level user_id=%s required=%s actual=%s",
            user.id,
            min_level,
            role.level,
        )
        return None

    logger.debug("auth_granted user_id=%s role=%s level=%s", user.id, role.name, role.level)
    return AuthContext(user_id=user.id, role=RoleInfo(**role.as_dict()))
