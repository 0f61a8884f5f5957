"""
Client directory CRUD. Every route requires an authenticated user.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrackr.api.v1.deps import get_db, require_auth
from salestrackr.core.exceptions import ConflictError, NotFoundError
from salestrackr.models.client import Client
from salestrackr.models.field_reports import MissedOrder, ProductComplaint
from salestrackr.models.visit import Visit
from salestrackr.schemas.client import (ClientCreate, ClientListResponse,
                                        ClientRead, ClientResponse,
                                        ClientUpdate)
from salestrackr.schemas.common import MessageResponse
from salestrackr.services.auth import Identity

router = APIRouter(prefix="/clients", tags=["clients"])
logger = logging.getLogger(__name__)


async def _get_client_or_404(db: AsyncSession, client_id: int) -> Client:
    client = await db.get(Client, client_id)
    if client is None:
        raise NotFoundError("Client not found")
    return client


@router.get("", response_model=ClientListResponse)
async def list_clients(
    region: str | None = None,
    has_complaint: bool | None = Query(default=None, alias="hasComplaint"),
    requested_visit: bool | None = Query(default=None, alias="requestedVisit"),
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> ClientListResponse:
    query = select(Client).order_by(Client.name, Client.id)
    if region:
        query = query.where(Client.region == region)
    if has_complaint is not None:
        query = query.where(Client.has_complaint.is_(has_complaint))
    if requested_visit is not None:
        query = query.where(Client.requested_visit.is_(requested_visit))
    result = await db.execute(query)
    return ClientListResponse(
        clients=[ClientRead.model_validate(c) for c in result.scalars().all()]
    )


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> ClientResponse:
    client = await _get_client_or_404(db, client_id)
    return ClientResponse(client=ClientRead.model_validate(client))


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    body: ClientCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_auth),
) -> ClientResponse:
    client = Client(**body.model_dump())
    db.add(client)
    await db.commit()
    await db.refresh(client)
    logger.info("User %d created client %d (%s)", identity.user_id, client.id, client.name)
    return ClientResponse(
        client=ClientRead.model_validate(client),
        message="Client created successfully",
    )


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    body: ClientUpdate,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> ClientResponse:
    client = await _get_client_or_404(db, client_id)

    for field, value in body.model_dump(exclude_unset=True).items():
        # Only the complaint note may be cleared
        if value is None and field != "complaint_note":
            continue
        setattr(client, field, value)

    await db.commit()
    await db.refresh(client)
    logger.info("Updated client %d", client_id)
    return ClientResponse(
        client=ClientRead.model_validate(client),
        message="Client updated successfully",
    )


@router.delete("/{client_id}", response_model=MessageResponse)
async def delete_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> MessageResponse:
    """Delete a client. Refused while visits or field reports reference it."""
    client = await _get_client_or_404(db, client_id)

    referenced = await db.scalar(
        select(
            or_(
                exists().where(Visit.client_id == client_id),
                exists().where(MissedOrder.client_id == client_id),
                exists().where(ProductComplaint.client_id == client_id),
            )
        )
    )
    if referenced:
        raise ConflictError("Client has recorded visits or reports and cannot be deleted")

    await db.delete(client)
    await db.commit()
    logger.info("Deleted client %d (%s)", client_id, client.name)
    return MessageResponse(message="Client deleted successfully")
