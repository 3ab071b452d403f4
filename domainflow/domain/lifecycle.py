"""Custom-domain lifecycle: statuses, event types, and the single transition table.

Every status change in the system goes through :func:`transition`. Handlers
never write status strings directly; they name the event that happened and
the table decides the resulting status. Because each persisted
``DomainEvent`` carries one of these event types, replaying a domain's
events through :func:`replay` reconstructs its stored status.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable

from domainflow.core.exceptions import InvalidTransitionError


class DomainStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    PROVISIONING_SSL = "provisioning_ssl"
    ACTIVE = "active"
    FAILED = "failed"


class DomainEventType(str, enum.Enum):
    CREATED = "created"
    VERIFICATION_STARTED = "verification_started"
    DNS_VERIFIED = "dns_verified"
    VERIFICATION_FAILED = "verification_failed"
    NETLIFY_ADDED = "netlify_added"
    SSL_PROVISIONING = "ssl_provisioning"
    ACTIVATED = "activated"
    ERROR = "error"
    REMOVED = "removed"


S = DomainStatus
E = DomainEventType

# (current status, event) -> next status. None as a key means "no row yet";
# None as a value means the row is deleted.
TRANSITIONS: dict[tuple[DomainStatus | None, DomainEventType], DomainStatus | None] = {
    (None, E.CREATED): S.PENDING,
    # DNS ownership verification
    (S.PENDING, E.VERIFICATION_STARTED): S.VERIFYING,
    (S.VERIFYING, E.VERIFICATION_STARTED): S.VERIFYING,
    (S.FAILED, E.VERIFICATION_STARTED): S.VERIFYING,
    (S.VERIFYING, E.DNS_VERIFIED): S.VERIFIED,
    (S.VERIFYING, E.VERIFICATION_FAILED): S.PENDING,
    # Hosting provider registration
    (S.PENDING, E.NETLIFY_ADDED): S.VERIFYING,
    (S.VERIFYING, E.NETLIFY_ADDED): S.VERIFYING,
    (S.FAILED, E.NETLIFY_ADDED): S.VERIFYING,
    (S.VERIFIED, E.NETLIFY_ADDED): S.VERIFIED,
    (S.PROVISIONING_SSL, E.NETLIFY_ADDED): S.PROVISIONING_SSL,
    # Certificate issuance
    (S.VERIFIED, E.SSL_PROVISIONING): S.PROVISIONING_SSL,
    (S.FAILED, E.SSL_PROVISIONING): S.PROVISIONING_SSL,
    (S.PROVISIONING_SSL, E.SSL_PROVISIONING): S.PROVISIONING_SSL,
    (S.PROVISIONING_SSL, E.ACTIVATED): S.ACTIVE,
    # Provider / certificate failures
    (S.PENDING, E.ERROR): S.FAILED,
    (S.VERIFYING, E.ERROR): S.FAILED,
    (S.VERIFIED, E.ERROR): S.FAILED,
    (S.PROVISIONING_SSL, E.ERROR): S.FAILED,
    (S.FAILED, E.ERROR): S.FAILED,
}

# Removal is legal from every state, including a half-finished one
for _status in DomainStatus:
    TRANSITIONS[(_status, E.REMOVED)] = None

STABLE_STATUSES = frozenset({S.PENDING, S.VERIFIED, S.ACTIVE, S.FAILED})
OWNERSHIP_PROVEN_STATUSES = frozenset({S.VERIFIED, S.PROVISIONING_SSL, S.ACTIVE})


def _coerce_status(value: DomainStatus | str | None) -> DomainStatus | None:
    if value is None or isinstance(value, DomainStatus):
        return value
    return DomainStatus(value)


def transition(
    current: DomainStatus | str | None, event: DomainEventType | str
) -> DomainStatus | None:
    """Return the status that *event* moves a domain in *current* status to.

    Raises :class:`InvalidTransitionError` when the pair is not in the table.
    """
    status = _coerce_status(current)
    event_type = DomainEventType(event)
    key = (status, event_type)
    if key not in TRANSITIONS:
        raise InvalidTransitionError(
            status.value if status else None, event_type.value
        )
    return TRANSITIONS[key]


def can_apply(current: DomainStatus | str | None, event: DomainEventType | str) -> bool:
    return (_coerce_status(current), DomainEventType(event)) in TRANSITIONS


def replay(events: Iterable[DomainEventType | str]) -> DomainStatus | None:
    """Fold an ordered sequence of event types into the resulting status."""
    status: DomainStatus | None = None
    for event in events:
        status = transition(status, event)
    return status
