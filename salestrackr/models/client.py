"""
Client model: the directory of outlets agents visit.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String

from salestrackr.db.base import Base


class Client(Base):
    __tablename__ = "clients"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False, index=True)  # type: ignore[assignment]
    address: str = Column(String(500), nullable=False)  # type: ignore[assignment]
    lat: float = Column(Float, nullable=False)  # type: ignore[assignment]
    lng: float = Column(Float, nullable=False)  # type: ignore[assignment]
    region: str = Column(String(100), nullable=False, index=True)  # type: ignore[assignment]
    has_complaint: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]
    complaint_note: str | None = Column(String(1000), nullable=True)  # type: ignore[assignment]
    requested_visit: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
