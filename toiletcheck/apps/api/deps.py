from __future__ import annotations

from typing import Any, AsyncGenerator, TypeVar

from fastapi import Depends, HTTPException, Request, status
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.persistence.db import get_session
from toiletcheck.services.auth.guard import AuthContext, validate_auth


ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_DENIED_MESSAGE = "Access denied"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    # One AsyncSession per request; context manager ensures close on success/error.
    async with get_session() as session:
        yield session


def _forbidden(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)


async def authorize(
    request: Request,
    db: AsyncSession,
    min_level: int,
    message: str = DEFAULT_DENIED_MESSAGE,
) -> AuthContext:
    """Run the access guard inside a handler whose level depends on the query."""
    auth = await validate_auth(request, db, min_level)
    if auth is None:
        raise _forbidden(message)
    return auth


def require_level(min_level: int = 0, message: str = DEFAULT_DENIED_MESSAGE):
    # Dependency factory to enforce role levels at the route level.
    async def _dependency(request: Request, db: AsyncSession = Depends(get_db)) -> AuthContext:
        return await authorize(request, db, min_level, message)

    return _dependency


async def read_json_object(request: Request) -> dict[str, Any]:
    # Bodies are parsed after the guard so unauthenticated callers never see validation details.
    try:
        payload = await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid JSON body") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return payload


def parse_body(model: type[ModelT], payload: dict[str, Any], message: str) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=message) from exc

