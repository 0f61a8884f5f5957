"""Pydantic schemas for the client directory."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from salestrackr.schemas.common import CamelModel


class ClientCreate(CamelModel):
    name: str = Field(max_length=200)
    address: str = Field(max_length=500)
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    region: str = Field(max_length=100)
    has_complaint: bool = False
    complaint_note: str | None = Field(default=None, max_length=1000)
    requested_visit: bool = False

    @field_validator("name", "address", "region")
    @classmethod
    def _required_text(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Must not be empty")
        return v


class ClientUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=200)
    address: str | None = Field(default=None, max_length=500)
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    region: str | None = Field(default=None, max_length=100)
    has_complaint: bool | None = None
    complaint_note: str | None = Field(default=None, max_length=1000)
    requested_visit: bool | None = None

    @field_validator("name", "address", "region")
    @classmethod
    def _required_text(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Must not be empty")
        return v


class ClientRead(CamelModel):
    id: int
    name: str
    address: str
    lat: float
    lng: float
    region: str
    has_complaint: bool
    complaint_note: str | None
    requested_visit: bool
    created_at: datetime | None
    updated_at: datetime | None


class ClientResponse(CamelModel):
    client: ClientRead
    message: str | None = None


class ClientListResponse(CamelModel):
    clients: list[ClientRead]
