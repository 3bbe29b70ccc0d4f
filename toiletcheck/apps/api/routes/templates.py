from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toiletcheck.apps.api.deps import get_db, require_level
from toiletcheck.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from toiletcheck.apps.api.response import success_response
from toiletcheck.domain.models import InspectionTemplate
from toiletcheck.persistence.repos import templates as templates_repo
from toiletcheck.services.auth.guard import AuthContext


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"], responses=DEFAULT_ERROR_RESPONSES)


def _template_payload(template: InspectionTemplate) -> dict[str, Any]:
    return {column.key: getattr(template, column.key) for column in template.__table__.columns}


@router.get("")
async def get_template(
    id: str | None = None,
    auth: AuthContext = Depends(require_level(0, "Authentication required")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Return a template by id, or the default one, creating it on first use."""
    try:
        if id:
            template = await templates_repo.get_active_template(db, id)
            if template is None:
                raise HTTPException(status_code=404, detail="Template not found or inactive")
            return success_response(_template_payload(template), "Template retrieved")

        template = await templates_repo.get_default_template(db)
        if template is not None:
            return success_response(_template_payload(template), "Default template retrieved")

        logger.warning("default_template_missing creating user_id=%s", auth.user_id)
        template = await templates_repo.create_default_template(db, created_by=auth.user_id)
        await db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to retrieve template: {exc}") from exc
    return success_response(_template_payload(template), "Default template created")
