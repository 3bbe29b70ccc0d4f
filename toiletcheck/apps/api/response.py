from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


T = TypeVar("T")


class SuccessEnvelope(BaseModel, Generic[T]):
    # Every 200 response uses this shape.
    success: bool = True
    data: T
    message: str | None = None
    timestamp: str


class ErrorEnvelope(BaseModel):
    error: str
    timestamp: str


def utc_timestamp() -> str:
    # Millisecond ISO-8601 with a Z suffix, as browser clients emit it.
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def success_response(data: Any, message: str | None = None) -> dict[str, Any]:
    return {
        "success": True,
        "data": jsonable_encoder(data),
        "message": message,
        "timestamp": utc_timestamp(),
    }


def error_response(message: str) -> dict[str, Any]:
    return ErrorEnvelope(error=message, timestamp=utc_timestamp()).model_dump()


def error_json(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(content=error_response(message), status_code=status_code, headers=headers)
