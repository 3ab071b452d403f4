"""SQLAlchemy ORM model for custom domains attached to a brand.

One row per hostname. The row is the single source of truth for where a
domain is in its lifecycle; it is mutated only through
:class:`domainflow.services.domain_store.DomainStore`.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, DateTime, Index, JSON, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from domainflow.db.base import Base
from domainflow.domain.lifecycle import DomainStatus
from domainflow.domain.mixins import BrandMixin, TimestampMixin


class Domain(Base, BrandMixin, TimestampMixin):
    __tablename__ = "domains"
    __table_args__ = (
        # At most one primary domain per brand
        Index(
            "uq_domains_brand_primary",
            "brand_id",
            unique=True,
            sqlite_where=text("is_primary = 1"),
            postgresql_where=text("is_primary"),
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Normalized: lowercased, trimmed, no trailing dot
    hostname: Mapped[str] = mapped_column(String(253), nullable=False, unique=True, index=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # "pending" | "verifying" | "verified" | "provisioning_ssl" | "active" | "failed"
    status: Mapped[str] = mapped_column(
        String(32), default=DomainStatus.PENDING.value, nullable=False, index=True
    )
    verification_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Provider-reported certificate state, e.g. "pending", "issued", "failed"
    ssl_status: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    provider_domain_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Last DNS records returned by the provider; display only
    dns_records: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
