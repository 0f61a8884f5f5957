"""
Product complaints raised by clients during visits.
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
from salestrackr.models.field_reports import ProductComplaint
from salestrackr.schemas.common import MessageResponse
from salestrackr.schemas.field_reports import (ProductComplaintCreate,
                                               ProductComplaintListResponse,
                                               ProductComplaintRead,
                                               ProductComplaintResponse,
                                               ProductComplaintUpdate)
from salestrackr.services.auth import Identity
from salestrackr.services.lookups import client_refs

router = APIRouter(prefix="/product-complaints", tags=["product-complaints"])
logger = logging.getLogger(__name__)


async def _project(
    db: AsyncSession, complaints: list[ProductComplaint]
) -> list[ProductComplaintRead]:
    clients = await client_refs(db, (c.client_id for c in complaints))
    return [
        ProductComplaintRead(
            id=c.id,
            client_id=c.client_id,
            product=c.product,
            comment=c.comment,
            date=c.date,
            client=clients.get(c.client_id),
            created_at=c.created_at,
        )
        for c in complaints
    ]


async def _get_complaint_or_404(db: AsyncSession, complaint_id: int) -> ProductComplaint:
    complaint = await db.get(ProductComplaint, complaint_id)
    if complaint is None:
        raise NotFoundError("Product complaint not found")
    return complaint


@router.get("", response_model=ProductComplaintListResponse)
async def list_product_complaints(
    client_id: int | None = Query(default=None, alias="clientId"),
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> ProductComplaintListResponse:
    query = select(ProductComplaint).order_by(
        ProductComplaint.date.desc(), ProductComplaint.id.desc()
    )
    if client_id is not None:
        query = query.where(ProductComplaint.client_id == client_id)
    result = await db.execute(query)
    return ProductComplaintListResponse(
        product_complaints=await _project(db, list(result.scalars().all()))
    )


@router.get("/{complaint_id}", response_model=ProductComplaintResponse)
async def get_product_complaint(
    complaint_id: int,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> ProductComplaintResponse:
    complaint = await _get_complaint_or_404(db, complaint_id)
    return ProductComplaintResponse(product_complaint=(await _project(db, [complaint]))[0])


@router.post("", response_model=ProductComplaintResponse, status_code=201)
async def create_product_complaint(
    body: ProductComplaintCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_auth),
) -> ProductComplaintResponse:
    if await db.get(Client, body.client_id) is None:
        raise NotFoundError("Client not found")

    complaint = ProductComplaint(
        client_id=body.client_id,
        product=body.product,
        comment=body.comment,
        date=body.date or datetime.now(timezone.utc),
    )
    db.add(complaint)
    await db.commit()
    await db.refresh(complaint)
    logger.info(
        "User %d logged complaint %d for client %d",
        identity.user_id,
        complaint.id,
        complaint.client_id,
    )
    return ProductComplaintResponse(
        product_complaint=(await _project(db, [complaint]))[0],
        message="Product complaint created successfully",
    )


@router.patch("/{complaint_id}", response_model=ProductComplaintResponse)
async def update_product_complaint(
    complaint_id: int,
    body: ProductComplaintUpdate,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> ProductComplaintResponse:
    complaint = await _get_complaint_or_404(db, complaint_id)

    for field, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(complaint, field, value)

    await db.commit()
    await db.refresh(complaint)
    logger.info("Updated product complaint %d", complaint_id)
    return ProductComplaintResponse(
        product_complaint=(await _project(db, [complaint]))[0],
        message="Product complaint updated successfully",
    )


@router.delete("/{complaint_id}", response_model=MessageResponse)
async def delete_product_complaint(
    complaint_id: int,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> MessageResponse:
    complaint = await _get_complaint_or_404(db, complaint_id)
    await db.delete(complaint)
    await db.commit()
    logger.info("Deleted product complaint %d", complaint_id)
    return MessageResponse(message="Product complaint deleted successfully")
