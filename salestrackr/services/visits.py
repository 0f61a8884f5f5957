"""
Visit ledger: check-in / check-out lifecycle for agent visits.

Invariant: an agent has at most one visit with ``check_out_time IS NULL``.
Check-in serialises on the agent's user row (``SELECT ... FOR UPDATE`` on
PostgreSQL) and the partial unique index ``uq_visits_one_open_per_agent``
backs it up on every backend, so two simultaneous check-ins by the same
agent can never both commit. Check-out is a single conditional ``UPDATE``
on the still-open row, so only one of two simultaneous check-outs wins.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from salestrackr.core.clock import ensure_utc, utcnow
from salestrackr.core.exceptions import (ConflictError, ForbiddenError,
                                         NotFoundError)
from salestrackr.models.client import Client
from salestrackr.models.user import User
from salestrackr.models.visit import Visit
from salestrackr.schemas.visit import VisitRead
from salestrackr.services.lookups import agent_refs, client_refs

logger = logging.getLogger(__name__)

ACTIVE_VISIT_EXISTS = "You have an active visit. Please check out first."
ALREADY_CHECKED_OUT = "Visit already checked out"
CLIENT_NOT_FOUND = "Client not found"
VISIT_NOT_FOUND = "Visit not found"


def visit_duration_minutes(visit: Visit, now: datetime | None = None) -> float:
    """Minutes between check-in and check-out (or *now* while still open)."""
    start = ensure_utc(visit.check_in_time)
    if visit.check_out_time is not None:
        end = ensure_utc(visit.check_out_time)
    else:
        end = now or utcnow()
    return round(max((end - start).total_seconds(), 0.0) / 60, 2)


class VisitLedger:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ── Writes ──────────────────────────────────────────────────────
    async def check_in(self, agent_id: int, client_id: int) -> VisitRead:
        if not await self._client_exists(client_id):
            raise NotFoundError(CLIENT_NOT_FOUND)

        # Lock the agent row so concurrent check-ins by one agent queue up
        await self.db.execute(select(User.id).where(User.id == agent_id).with_for_update())

        if await self._open_visit(agent_id) is not None:
            await self.db.rollback()
            raise ConflictError(ACTIVE_VISIT_EXISTS)

        visit = Visit(client_id=client_id, agent_id=agent_id, check_in_time=utcnow())
        self.db.add(visit)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            # The client may have been deleted since the lookup above
            if not await self._client_exists(client_id):
                raise NotFoundError(CLIENT_NOT_FOUND) from None
            logger.info("Concurrent check-in rejected for agent %d", agent_id)
            raise ConflictError(ACTIVE_VISIT_EXISTS) from None

        logger.info("Agent %d checked in at client %d (visit %d)", agent_id, client_id, visit.id)
        return (await self._project([visit]))[0]

    async def check_out(self, agent_id: int, visit_id: int) -> VisitRead:
        result = await self.db.execute(
            update(Visit)
            .where(
                Visit.id == visit_id,
                Visit.agent_id == agent_id,
                Visit.check_out_time.is_(None),
            )
            .values(check_out_time=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            visit = await self.db.get(Visit, visit_id, populate_existing=True)
            if visit is None:
                raise NotFoundError(VISIT_NOT_FOUND)
            if visit.agent_id != agent_id:
                raise ForbiddenError("You can only check out your own visits")
            raise ConflictError(ALREADY_CHECKED_OUT)

        await self.db.commit()
        visit = await self.db.get(Visit, visit_id, populate_existing=True)
        logger.info("Agent %d checked out of visit %d", agent_id, visit_id)
        return (await self._project([visit]))[0]

    # ── Reads ───────────────────────────────────────────────────────
    async def active_visit(self, agent_id: int) -> VisitRead | None:
        visit = await self._open_visit(agent_id)
        if visit is None:
            return None
        return (await self._project([visit]))[0]

    async def get_visit(self, visit_id: int) -> VisitRead:
        visit = await self.db.get(Visit, visit_id)
        if visit is None:
            raise NotFoundError(VISIT_NOT_FOUND)
        return (await self._project([visit]))[0]

    async def list_visits(
        self,
        agent_id: int | None = None,
        client_id: int | None = None,
        active_only: bool = False,
    ) -> list[VisitRead]:
        """Visits matching every supplied filter, most recent check-in first."""
        query = select(Visit).order_by(Visit.check_in_time.desc(), Visit.id.desc())
        if agent_id is not None:
            query = query.where(Visit.agent_id == agent_id)
        if client_id is not None:
            query = query.where(Visit.client_id == client_id)
        if active_only:
            query = query.where(Visit.check_out_time.is_(None))
        result = await self.db.execute(query)
        return await self._project(list(result.scalars().all()))

    # ── Helpers ─────────────────────────────────────────────────────
    async def _client_exists(self, client_id: int) -> bool:
        found = await self.db.scalar(select(Client.id).where(Client.id == client_id))
        return found is not None

    async def _open_visit(self, agent_id: int) -> Visit | None:
        result = await self.db.execute(
            select(Visit).where(Visit.agent_id == agent_id, Visit.check_out_time.is_(None))
        )
        return result.scalar_one_or_none()

    async def _project(self, visits: list[Visit]) -> list[VisitRead]:
        clients = await client_refs(self.db, (v.client_id for v in visits))
        agents = await agent_refs(self.db, (v.agent_id for v in visits))
        now = utcnow()
        return [
            VisitRead(
                id=v.id,
                client_id=v.client_id,
                agent_id=v.agent_id,
                check_in_time=ensure_utc(v.check_in_time),
                check_out_time=ensure_utc(v.check_out_time) if v.check_out_time else None,
                duration_minutes=visit_duration_minutes(v, now),
                client=clients.get(v.client_id),
                agent=agents.get(v.agent_id),
            )
            for v in visits
        ]
