from __future__ import annotations

import logging
import time
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from starlette.exceptions import HTTPException as StarletteHTTPException

from toiletcheck.apps.api.errors import (
    http_exception_handler,
    starlette_http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from toiletcheck.apps.api.routes.admin_audit_logs import router as admin_audit_logs_router
from toiletcheck.apps.api.routes.admin_inspections import router as admin_inspections_router
from toiletcheck.apps.api.routes.admin_resources import router as admin_resources_router
from toiletcheck.apps.api.routes.admin_stats import router as admin_stats_router
from toiletcheck.apps.api.routes.admin_users import router as admin_users_router
from toiletcheck.apps.api.routes.auth import router as auth_router
from toiletcheck.apps.api.routes.health import router as health_router
from toiletcheck.apps.api.routes.inspections import router as inspections_router
from toiletcheck.apps.api.routes.locations import router as locations_router
from toiletcheck.apps.api.routes.photos import router as photos_router
from toiletcheck.apps.api.routes.profile import router as profile_router
from toiletcheck.apps.api.routes.reports import router as reports_router
from toiletcheck.apps.api.routes.templates import router as templates_router
from toiletcheck.core.config import get_settings
from toiletcheck.core.logging import configure_logging


API_PREFIX = "/api"

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(title="ToiletCheck API")

    origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):  # type: ignore[override]
        # Preserve incoming request IDs or assign a new one for traceability.
        request_id = request.headers.get("X-Request-Id") or str(uuid4())
        request.state.request_id = request_id
        start = time.monotonic()
        response = await call_next(request)
        latency_ms = (time.monotonic() - start) * 1000.0
        logger.info(
            "request method=%s path=%s status=%s latency_ms=%.1f request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            latency_ms,
            request_id,
        )
        response.headers.setdefault("X-Request-Id", request_id)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
        return await starlette_http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        return await unhandled_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        return await validation_exception_handler(request, exc)

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException):
        return await http_exception_handler(request, exc)

    app.include_router(health_router)
    app.include_router(auth_router, prefix=API_PREFIX)
    # Admin screens: level checks live in each handler's dependency.
    app.include_router(admin_users_router, prefix=API_PREFIX)
    app.include_router(admin_resources_router, prefix=API_PREFIX)
    app.include_router(admin_inspections_router, prefix=API_PREFIX)
    app.include_router(admin_audit_logs_router, prefix=API_PREFIX)
    app.include_router(admin_stats_router, prefix=API_PREFIX)
    # Inspector-facing endpoints.
    app.include_router(inspections_router, prefix=API_PREFIX)
    app.include_router(locations_router, prefix=API_PREFIX)
    app.include_router(templates_router, prefix=API_PREFIX)
    app.include_router(profile_router, prefix=API_PREFIX)
    app.include_router(reports_router, prefix=API_PREFIX)
    app.include_router(photos_router, prefix=API_PREFIX)

    def custom_openapi() -> dict:
        # Inject bearer auth into the OpenAPI schema for every non-health path.
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(title="ToiletCheck API", version="1.0.0", routes=app.routes)
        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes["BearerAuth"] = {"type": "http", "scheme": "bearer"}
        for path, operations in schema.get("paths", {}).items():
            if path == "/health":
                continue
            for operation in operations.values():
                operation.setdefault("security", [{"BearerAuth": []}])
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app


app = create_app()
