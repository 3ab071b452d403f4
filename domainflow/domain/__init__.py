"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  custom_domain.py  — Domain rows (one per hostname attached to a brand)
  domain_event.py   — Append-only audit trail of lifecycle transitions
  lifecycle.py      — Status / event enums and the transition table
  mixins.py         — Shared TimestampMixin, BrandMixin
"""

from domainflow.domain.custom_domain import Domain
from domainflow.domain.domain_event import DomainEvent
from domainflow.domain.lifecycle import DomainEventType, DomainStatus

__all__ = [
    "Domain",
    "DomainEvent",
    "DomainEventType",
    "DomainStatus",
]
