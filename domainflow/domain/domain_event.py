"""SQLAlchemy ORM model for the domain audit trail."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, Integer, JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column

from domainflow.db.base import Base


class DomainEvent(Base):
    __tablename__ = "domain_events"

    # Monotonic id breaks ties between events written in the same instant
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Plain reference, no FK: events outlive the domain row they describe
    domain_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    performed_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # No updated_at: events are never updated or deleted
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
