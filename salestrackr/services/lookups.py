"""
Read-side joins: resolve client and agent ids to display projections.

Each helper issues one ``IN`` query for the whole batch of ids.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrackr.models.client import Client
from salestrackr.models.user import User
from salestrackr.schemas.visit import AgentRef, ClientRef


async def client_refs(db: AsyncSession, ids: Iterable[int]) -> dict[int, ClientRef]:
    wanted = set(ids)
    if not wanted:
        return {}
    result = await db.execute(
        select(Client.id, Client.name, Client.address).where(Client.id.in_(wanted))
    )
    return {
        row.id: ClientRef(id=row.id, name=row.name, address=row.address)
        for row in result.all()
    }


async def agent_refs(db: AsyncSession, ids: Iterable[int]) -> dict[int, AgentRef]:
    wanted = set(ids)
    if not wanted:
        return {}
    result = await db.execute(
        select(User.id, User.name, User.email).where(User.id.in_(wanted))
    )
    return {
        row.id: AgentRef(id=row.id, name=row.name, email=row.email)
        for row in result.all()
    }
