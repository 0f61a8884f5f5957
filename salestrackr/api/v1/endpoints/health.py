"""
Health endpoint: liveness plus a database round-trip. No auth.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from salestrackr.api.v1.deps import get_db
from salestrackr.core.config import settings
from salestrackr.schemas.common import HealthResponse

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    database = "connected"
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unreachable: %s", e)
        database = "disconnected"
    return HealthResponse(
        status="OK",
        message=f"{settings.PROJECT_NAME} API is running!",
        database=database,
        timestamp=datetime.now(timezone.utc),
    )
