"""
Training log: coaching sessions recorded against an agent.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrackr.api.v1.deps import get_db, require_auth
from salestrackr.core.exceptions import NotFoundError
from salestrackr.models.field_reports import TrainingLog
from salestrackr.models.user import User
from salestrackr.schemas.common import MessageResponse
from salestrackr.schemas.field_reports import (TrainingLogCreate,
                                               TrainingLogListResponse,
                                               TrainingLogRead,
                                               TrainingLogResponse)
from salestrackr.services.auth import Identity
from salestrackr.services.lookups import agent_refs

router = APIRouter(prefix="/training-logs", tags=["training-logs"])
logger = logging.getLogger(__name__)


async def _project(db: AsyncSession, logs: list[TrainingLog]) -> list[TrainingLogRead]:
    agents = await agent_refs(db, (t.agent_id for t in logs))
    return [
        TrainingLogRead(
            id=t.id,
            agent_id=t.agent_id,
            description=t.description,
            date=t.date,
            agent=agents.get(t.agent_id),
            created_at=t.created_at,
        )
        for t in logs
    ]


async def _get_log_or_404(db: AsyncSession, log_id: int) -> TrainingLog:
    log = await db.get(TrainingLog, log_id)
    if log is None:
        raise NotFoundError("Training log not found")
    return log


@router.get("", response_model=TrainingLogListResponse)
async def list_training_logs(
    agent_id: int | None = Query(default=None, alias="agentId"),
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> TrainingLogListResponse:
    query = select(TrainingLog).order_by(TrainingLog.date.desc(), TrainingLog.id.desc())
    if agent_id is not None:
        query = query.where(TrainingLog.agent_id == agent_id)
    result = await db.execute(query)
    return TrainingLogListResponse(training_logs=await _project(db, list(result.scalars().all())))


@router.get("/{log_id}", response_model=TrainingLogResponse)
async def get_training_log(
    log_id: int,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> TrainingLogResponse:
    log = await _get_log_or_404(db, log_id)
    return TrainingLogResponse(training_log=(await _project(db, [log]))[0])


@router.post("", response_model=TrainingLogResponse, status_code=201)
async def create_training_log(
    body: TrainingLogCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_auth),
) -> TrainingLogResponse:
    if await db.get(User, body.agent_id) is None:
        raise NotFoundError("Agent not found")

    log = TrainingLog(
        agent_id=body.agent_id,
        description=body.description,
        date=body.date or datetime.now(timezone.utc),
    )
    db.add(log)
    await db.commit()
    await db.refresh(log)
    logger.info("User %d logged training %d for agent %d", identity.user_id, log.id, log.agent_id)
    return TrainingLogResponse(
        training_log=(await _project(db, [log]))[0],
        message="Training log created successfully",
    )


@router.delete("/{log_id}", response_model=MessageResponse)
async def delete_training_log(
    log_id: int,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> MessageResponse:
    log = await _get_log_or_404(db, log_id)
    await db.delete(log)
    await db.commit()
    logger.info("Deleted training log %d", log_id)
    return MessageResponse(message="Training log deleted successfully")
