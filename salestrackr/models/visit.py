"""
Visit model: one agent's check-in/check-out at a client.

The partial unique index allows at most one open visit
(``check_out_time IS NULL``) per agent.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, text

from salestrackr.db.base import Base


class Visit(Base):
    __tablename__ = "visits"
    __table_args__ = (
        Index(
            "uq_visits_one_open_per_agent",
            "agent_id",
            unique=True,
            postgresql_where=text("check_out_time IS NULL"),
            sqlite_where=text("check_out_time IS NULL"),
        ),
        Index("ix_visits_agent_check_in", "agent_id", "check_in_time"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    client_id: int = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)  # type: ignore[assignment]
    agent_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    check_in_time: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    check_out_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
