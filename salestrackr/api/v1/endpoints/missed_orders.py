"""
Missed-order log: products a client wanted but could not get.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrackr.api.v1.deps import get_db, require_auth
from salestrackr.core.exceptions import NotFoundError
from salestrackr.models.client import Client
from salestrackr.models.field_reports import MissedOrder
from salestrackr.schemas.common import MessageResponse
from salestrackr.schemas.field_reports import (MissedOrderCreate,
                                               MissedOrderListResponse,
                                               MissedOrderRead,
                                               MissedOrderResponse)
from salestrackr.services.auth import Identity
from salestrackr.services.lookups import client_refs

router = APIRouter(prefix="/missed-orders", tags=["missed-orders"])
logger = logging.getLogger(__name__)


async def _project(db: AsyncSession, orders: list[MissedOrder]) -> list[MissedOrderRead]:
    clients = await client_refs(db, (o.client_id for o in orders))
    return [
        MissedOrderRead(
            id=o.id,
            client_id=o.client_id,
            product=o.product,
            reason=o.reason,
            date=o.date,
            client=clients.get(o.client_id),
            created_at=o.created_at,
        )
        for o in orders
    ]


async def _get_order_or_404(db: AsyncSession, order_id: int) -> MissedOrder:
    order = await db.get(MissedOrder, order_id)
    if order is None:
        raise NotFoundError("Missed order not found")
    return order


@router.get("", response_model=MissedOrderListResponse)
async def list_missed_orders(
    client_id: int | None = Query(default=None, alias="clientId"),
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> MissedOrderListResponse:
    query = select(MissedOrder).order_by(MissedOrder.date.desc(), MissedOrder.id.desc())
    if client_id is not None:
        query = query.where(MissedOrder.client_id == client_id)
    result = await db.execute(query)
    return MissedOrderListResponse(missed_orders=await _project(db, list(result.scalars().all())))


@router.get("/{order_id}", response_model=MissedOrderResponse)
async def get_missed_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> MissedOrderResponse:
    order = await _get_order_or_404(db, order_id)
    return MissedOrderResponse(missed_order=(await _project(db, [order]))[0])


@router.post("", response_model=MissedOrderResponse, status_code=201)
async def create_missed_order(
    body: MissedOrderCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_auth),
) -> MissedOrderResponse:
    if await db.get(Client, body.client_id) is None:
        raise NotFoundError("Client not found")

    order = MissedOrder(
        client_id=body.client_id,
        product=body.product,
        reason=body.reason,
        date=body.date or datetime.now(timezone.utc),
    )
    db.add(order)
    await db.commit()
    await db.refresh(order)
    logger.info("User %d logged missed order %d for client %d", identity.user_id, order.id, order.client_id)
    return MissedOrderResponse(
        missed_order=(await _project(db, [order]))[0],
        message="Missed order created successfully",
    )


@router.delete("/{order_id}", response_model=MessageResponse)
async def delete_missed_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> MessageResponse:
    order = await _get_order_or_404(db, order_id)
    await db.delete(order)
    await db.commit()
    logger.info("Deleted missed order %d", order_id)
    return MessageResponse(message="Missed order deleted successfully")
