from __future__ import annotations

from typing import Any

from toiletcheck.apps.api.response import ErrorEnvelope


_EXAMPLE_TIMESTAMP = "2024-11-05T08:30:00.000Z"


def _error_example(message: str) -> dict[str, Any]:
    return {"error": message, "timestamp": _EXAMPLE_TIMESTAMP}


def _error_response(description: str, message: str) -> dict[str, Any]:
    return {
        "model": ErrorEnvelope,
        "description": description,
        "content": {"application/json": {"example": _error_example(message)}},
    }


DEFAULT_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: _error_response("Bad request", "Missing required fields: userId, roleId"),
    403: _error_response("Forbidden", "Access denied - Admin privileges required"),
    404: _error_response("Not found", "User not found"),
    405: _error_response("Method not allowed", "Method not allowed"),
    500: _error_response("Internal error", "Internal server error: connection refused"),
}
