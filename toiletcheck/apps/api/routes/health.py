from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import SuccessEnvelope, success_response

router = APIRouter(tags=["health"], responses=DEFAULT_ERROR_RESPONSES)


class HealthResponse(BaseModel):
    status: str


@router.get("/health", response_model=SuccessEnvelope[HealthResponse])
async def health() -> dict:
    # Liveness only; does not touch the database.
    return success_response(HealthResponse(status="ok"))
