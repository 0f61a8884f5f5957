"""
Field report models: depots, missed orders, training logs and
product complaints recorded by agents.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (Boolean, Column, DateTime, Float, ForeignKey, Integer,
                        String)

from salestrackr.core.clock import utcnow
from salestrackr.db.base import Base


class Depot(Base):
    __tablename__ = "depots"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    lat: float = Column(Float, nullable=False)  # type: ignore[assignment]
    lng: float = Column(Float, nullable=False)  # type: ignore[assignment]
    # Inspection checklist, flattened; the API nests these under "inspection"
    inspection_done: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]
    hs_file: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]
    housekeeping: int = Column(Integer, default=3, server_default="3")  # type: ignore[assignment]  # 1-5
    haz_license: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]
    stock_counted: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]
    inspection_notes: str | None = Column(String(1000), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)  # type: ignore[assignment]


class MissedOrder(Base):
    __tablename__ = "missed_orders"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    client_id: int = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)  # type: ignore[assignment]
    product: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    reason: str = Column(String(1000), nullable=False)  # type: ignore[assignment]
    date: datetime = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)  # type: ignore[assignment]


class TrainingLog(Base):
    __tablename__ = "training_logs"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    agent_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    description: str = Column(String(2000), nullable=False)  # type: ignore[assignment]
    date: datetime = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)  # type: ignore[assignment]


class ProductComplaint(Base):
    __tablename__ = "product_complaints"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    client_id: int = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)  # type: ignore[assignment]
    product: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    comment: str = Column(String(2000), nullable=False)  # type: ignore[assignment]
    date: datetime = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)  # type: ignore[assignment]
