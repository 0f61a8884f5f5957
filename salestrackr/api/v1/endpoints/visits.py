"""
Visit endpoints: check-in, check-out and visit history.

The caller's identity comes from ``require_auth``; an agent can only open
or close visits as themselves.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from salestrackr.api.v1.deps import get_visit_ledger, require_auth
from salestrackr.schemas.visit import (ActiveVisitResponse, CheckInRequest,
                                       CheckOutRequest, VisitListResponse,
                                       VisitResponse)
from salestrackr.services.auth import Identity
from salestrackr.services.visits import VisitLedger

router = APIRouter(prefix="/visits", tags=["visits"])


@router.get("", response_model=VisitListResponse)
async def list_visits(
    agent_id: int | None = Query(default=None, alias="agentId"),
    client_id: int | None = Query(default=None, alias="clientId"),
    active: bool = False,
    ledger: VisitLedger = Depends(get_visit_ledger),
    _identity: Identity = Depends(require_auth),
) -> VisitListResponse:
    visits = await ledger.list_visits(agent_id=agent_id, client_id=client_id, active_only=active)
    return VisitListResponse(visits=visits)


# Declared before "/{visit_id}" so "active" is not parsed as an id
@router.get("/active", response_model=ActiveVisitResponse)
async def get_active_visit(
    ledger: VisitLedger = Depends(get_visit_ledger),
    identity: Identity = Depends(require_auth),
) -> ActiveVisitResponse:
    """The caller's open visit, or ``null``."""
    return ActiveVisitResponse(visit=await ledger.active_visit(identity.user_id))


@router.get("/{visit_id}", response_model=VisitResponse)
async def get_visit(
    visit_id: int,
    ledger: VisitLedger = Depends(get_visit_ledger),
    _identity: Identity = Depends(require_auth),
) -> VisitResponse:
    return VisitResponse(visit=await ledger.get_visit(visit_id))


@router.post("/check-in", response_model=VisitResponse, status_code=201)
async def check_in(
    body: CheckInRequest,
    ledger: VisitLedger = Depends(get_visit_ledger),
    identity: Identity = Depends(require_auth),
) -> VisitResponse:
    """Open a visit at a client. 409 if the caller already has one open.

    Do not blindly retry on failure: read ``/visits/active`` first.
    """
    visit = await ledger.check_in(identity.user_id, body.client_id)
    return VisitResponse(visit=visit, message="Checked in successfully")


@router.post("/check-out", response_model=VisitResponse)
async def check_out(
    body: CheckOutRequest,
    ledger: VisitLedger = Depends(get_visit_ledger),
    identity: Identity = Depends(require_auth),
) -> VisitResponse:
    """Close one of the caller's own open visits."""
    visit = await ledger.check_out(identity.user_id, body.visit_id)
    return VisitResponse(visit=visit, message="Checked out successfully")
