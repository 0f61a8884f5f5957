"""Pydantic schemas for the visit ledger."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from salestrackr.schemas.common import CamelModel


class CheckInRequest(CamelModel):
    client_id: int = Field(gt=0)


class CheckOutRequest(CamelModel):
    visit_id: int = Field(gt=0)


class ClientRef(CamelModel):
    id: int
    name: str
    address: str


class AgentRef(CamelModel):
    id: int
    name: str
    email: str


class VisitRead(CamelModel):
    id: int
    client_id: int
    agent_id: int
    check_in_time: datetime
    check_out_time: datetime | None = None
    duration_minutes: float
    client: ClientRef | None = None
    agent: AgentRef | None = None


class VisitResponse(CamelModel):
    visit: VisitRead
    message: str | None = None


class ActiveVisitResponse(CamelModel):
    visit: VisitRead | None


class VisitListResponse(CamelModel):
    visits: list[VisitRead]
