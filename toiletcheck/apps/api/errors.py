from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from toiletcheck.apps.api.response import error_json


logger = logging.getLogger(__name__)

_DEFAULT_MESSAGES: dict[int, str] = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Access denied",
    404: "Not found",
    405: "Method not allowed",
    500: "Internal server error",
}


def _message(detail: Any, status_code: int) -> str:
    # Handlers raise HTTPException with a plain string; dicts carry a "message" key.
    if isinstance(detail, str) and detail:
        if status_code == 405 and detail == "Method Not Allowed":
            return _DEFAULT_MESSAGES[405]
        if status_code == 404 and detail == "Not Found":
            return _DEFAULT_MESSAGES[404]
        return detail
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    return _DEFAULT_MESSAGES.get(status_code, "Request failed")


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return error_json(exc.status_code, _message(exc.detail, exc.status_code), headers=exc.headers)


async def starlette_http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    # Router-level 404/405 arrive here rather than through HTTPException.
    return error_json(exc.status_code, _message(exc.detail, exc.status_code), headers=exc.headers)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in {"body", "query"})
    message = first.get("msg", "Invalid value")
    return f"Invalid request: {location} {message}".strip() if location else f"Invalid request: {message}"


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Clients treat every malformed input as 400.
    return error_json(400, _validation_message(exc))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception method=%s path=%s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return error_json(500, f"Internal server error: {exc}")
