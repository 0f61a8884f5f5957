"""
Depot CRUD with the nested inspection checklist.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrackr.api.v1.deps import get_db, require_auth
from salestrackr.core.exceptions import NotFoundError
from salestrackr.models.field_reports import Depot
from salestrackr.schemas.common import MessageResponse
from salestrackr.schemas.field_reports import (DepotCreate, DepotInspection,
                                               DepotListResponse, DepotRead,
                                               DepotResponse, DepotUpdate)
from salestrackr.services.auth import Identity

router = APIRouter(prefix="/depots", tags=["depots"])
logger = logging.getLogger(__name__)

# API inspection field -> Depot column
_INSPECTION_COLUMNS = {
    "done": "inspection_done",
    "hs_file": "hs_file",
    "housekeeping": "housekeeping",
    "haz_license": "haz_license",
    "stock_counted": "stock_counted",
    "notes": "inspection_notes",
}


def _to_read(depot: Depot) -> DepotRead:
    inspection = DepotInspection(
        **{api: getattr(depot, col) for api, col in _INSPECTION_COLUMNS.items()}
    )
    return DepotRead(
        id=depot.id,
        name=depot.name,
        lat=depot.lat,
        lng=depot.lng,
        inspection=inspection,
        created_at=depot.created_at,
        updated_at=depot.updated_at,
    )


def _apply_inspection(depot: Depot, values: dict) -> None:
    for api, value in values.items():
        if value is None and api != "notes":
            continue
        setattr(depot, _INSPECTION_COLUMNS[api], value)


async def _get_depot_or_404(db: AsyncSession, depot_id: int) -> Depot:
    depot = await db.get(Depot, depot_id)
    if depot is None:
        raise NotFoundError("Depot not found")
    return depot


@router.get("", response_model=DepotListResponse)
async def list_depots(
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> DepotListResponse:
    result = await db.execute(select(Depot).order_by(Depot.name, Depot.id))
    return DepotListResponse(depots=[_to_read(d) for d in result.scalars().all()])


@router.get("/{depot_id}", response_model=DepotResponse)
async def get_depot(
    depot_id: int,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> DepotResponse:
    return DepotResponse(depot=_to_read(await _get_depot_or_404(db, depot_id)))


@router.post("", response_model=DepotResponse, status_code=201)
async def create_depot(
    body: DepotCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_auth),
) -> DepotResponse:
    depot = Depot(name=body.name, lat=body.lat, lng=body.lng)
    _apply_inspection(depot, (body.inspection or DepotInspection()).model_dump())
    db.add(depot)
    await db.commit()
    await db.refresh(depot)
    logger.info("User %d created depot %d (%s)", identity.user_id, depot.id, depot.name)
    return DepotResponse(depot=_to_read(depot), message="Depot created successfully")


@router.patch("/{depot_id}", response_model=DepotResponse)
async def update_depot(
    depot_id: int,
    body: DepotUpdate,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> DepotResponse:
    depot = await _get_depot_or_404(db, depot_id)

    changes = body.model_dump(exclude_unset=True)
    inspection = changes.pop("inspection", None)
    for field, value in changes.items():
        if value is not None:
            setattr(depot, field, value)
    if inspection:
        _apply_inspection(depot, inspection)

    await db.commit()
    await db.refresh(depot)
    logger.info("Updated depot %d", depot_id)
    return DepotResponse(depot=_to_read(depot), message="Depot updated successfully")


@router.delete("/{depot_id}", response_model=MessageResponse)
async def delete_depot(
    depot_id: int,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require_auth),
) -> MessageResponse:
    depot = await _get_depot_or_404(db, depot_id)
    await db.delete(depot)
    await db.commit()
    logger.info("Deleted depot %d (%s)", depot_id, depot.name)
    return MessageResponse(message="Depot deleted successfully")
