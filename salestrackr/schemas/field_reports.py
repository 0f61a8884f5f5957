"""Pydantic schemas for depots, missed orders, training logs and complaints."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from salestrackr.schemas.common import CamelModel
from salestrackr.schemas.visit import AgentRef, ClientRef


def _strip_required(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Must not be empty")
    return v


# ── Depots ──────────────────────────────────────────────────────────
class DepotInspection(CamelModel):
    done: bool = False
    hs_file: bool = False
    housekeeping: int = Field(default=3, ge=1, le=5)
    haz_license: bool = False
    stock_counted: bool = False
    notes: str | None = Field(default=None, max_length=1000)


class DepotInspectionUpdate(CamelModel):
    done: bool | None = None
    hs_file: bool | None = None
    housekeeping: int | None = Field(default=None, ge=1, le=5)
    haz_license: bool | None = None
    stock_counted: bool | None = None
    notes: str | None = Field(default=None, max_length=1000)


class DepotCreate(CamelModel):
    name: str = Field(max_length=200)
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    inspection: DepotInspection | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _strip_required(v)  # type: ignore[return-value]


class DepotUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=200)
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    inspection: DepotInspectionUpdate | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return _strip_required(v)


class DepotRead(CamelModel):
    id: int
    name: str
    lat: float
    lng: float
    inspection: DepotInspection
    created_at: datetime | None
    updated_at: datetime | None


class DepotResponse(CamelModel):
    depot: DepotRead
    message: str | None = None


class DepotListResponse(CamelModel):
    depots: list[DepotRead]


# ── Missed orders ───────────────────────────────────────────────────
class MissedOrderCreate(CamelModel):
    client_id: int = Field(gt=0)
    product: str = Field(max_length=200)
    reason: str = Field(max_length=1000)
    date: datetime | None = None

    @field_validator("product", "reason")
    @classmethod
    def _text(cls, v: str) -> str:
        return _strip_required(v)  # type: ignore[return-value]


class MissedOrderRead(CamelModel):
    id: int
    client_id: int
    product: str
    reason: str
    date: datetime
    client: ClientRef | None = None
    created_at: datetime | None = None


class MissedOrderResponse(CamelModel):
    missed_order: MissedOrderRead
    message: str | None = None


class MissedOrderListResponse(CamelModel):
    missed_orders: list[MissedOrderRead]


# ── Training logs ───────────────────────────────────────────────────
class TrainingLogCreate(CamelModel):
    agent_id: int = Field(gt=0)
    description: str = Field(max_length=2000)
    date: datetime | None = None

    @field_validator("description")
    @classmethod
    def _text(cls, v: str) -> str:
        return _strip_required(v)  # type: ignore[return-value]


class TrainingLogRead(CamelModel):
    id: int
    agent_id: int
    description: str
    date: datetime
    agent: AgentRef | None = None
    created_at: datetime | None = None


class TrainingLogResponse(CamelModel):
    training_log: TrainingLogRead
    message: str | None = None


class TrainingLogListResponse(CamelModel):
    training_logs: list[TrainingLogRead]


# ── Product complaints ──────────────────────────────────────────────
class ProductComplaintCreate(CamelModel):
    client_id: int = Field(gt=0)
    product: str = Field(max_length=200)
    comment: str = Field(max_length=2000)
    date: datetime | None = None

    @field_validator("product", "comment")
    @classmethod
    def _text(cls, v: str) -> str:
        return _strip_required(v)  # type: ignore[return-value]


class ProductComplaintUpdate(CamelModel):
    product: str | None = Field(default=None, max_length=200)
    comment: str | None = Field(default=None, max_length=2000)

    @field_validator("product", "comment")
    @classmethod
    def _text(cls, v: str | None) -> str | None:
        return _strip_required(v)


class ProductComplaintRead(CamelModel):
    id: int
    client_id: int
    product: str
    comment: str
    date: datetime
    client: ClientRef | None = None
    created_at: datetime | None = None


class ProductComplaintResponse(CamelModel):
    product_complaint: ProductComplaintRead
    message: str | None = None


class ProductComplaintListResponse(CamelModel):
    product_complaints: list[ProductComplaintRead]
