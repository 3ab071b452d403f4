"""Ownership Verifier — proves control of a hostname through a DNS TXT record.

The owner publishes the domain's verification token at
``<prefix>.<hostname>``. A lookup through the DNS-over-HTTPS resolver
succeeds when any TXT value contains the token. Every path through
:meth:`OwnershipVerifier.verify` ends on ``verified`` or ``pending``; a
lookup failure is reported like a mismatch, with its own message. A pending
domain that fails again with the same message is left untouched, so polling
does not grow the audit trail.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from domainflow.core.config import Settings, settings
from domainflow.core.exceptions import PreconditionError, ProviderError, StaleTransitionError
from domainflow.domain.custom_domain import Domain
from domainflow.domain.lifecycle import (
    OWNERSHIP_PROVEN_STATUSES,
    DomainEventType,
    DomainStatus,
)
from domainflow.schemas.domain import VerificationResult
from domainflow.services.dns_lookup import DohResolver
from domainflow.services.domain_store import DomainStore

logger = logging.getLogger(__name__)

VERIFIED_MESSAGE = "Domain ownership verified successfully"
ALREADY_VERIFIED_MESSAGE = "Domain ownership already verified"
MISMATCH_MESSAGE = (
    "TXT record not found or token mismatch. "
    "Please ensure the DNS record is properly configured."
)


def txt_lookup_name(hostname: str, prefix: str) -> str:
    return f"{prefix}.{hostname}"


def token_matches(token: str, values: list[str]) -> bool:
    return any(token in value for value in values)


class OwnershipVerifier:
    def __init__(
        self,
        store: DomainStore,
        resolver: DohResolver,
        config: Settings = settings,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._config = config

    async def verify(self, domain: Domain, *, actor: str | None = None) -> VerificationResult:
        if DomainStatus(domain.status) in OWNERSHIP_PROVEN_STATUSES:
            return self._result(domain, ALREADY_VERIFIED_MESSAGE)
        if not domain.verification_token:
            raise PreconditionError("Domain has no verification token")

        expected = domain.verification_token
        record_name = txt_lookup_name(domain.hostname, self._config.verification_prefix)
        lookup_error: ProviderError | None = None
        try:
            found = await self._resolver.lookup_txt(record_name)
        except ProviderError as exc:
            logger.warning("TXT lookup for %s failed: %s", record_name, exc.message)
            found, lookup_error = [], exc

        if lookup_error is not None:
            message = f"DNS lookup failed: {lookup_error.message}"
        elif not token_matches(expected, found):
            logger.info("Token for %s not found at %s (found %s)", domain.hostname, record_name, found)
            message = MISMATCH_MESSAGE
        else:
            message = None

        # Polling a pending domain that fails the same way again writes nothing
        if (
            message is not None
            and domain.status == DomainStatus.PENDING.value
            and domain.error_message == message
        ):
            return self._result(domain, message, expected=expected, found=found)

        try:
            domain = await self._store.apply(
                domain,
                DomainEventType.VERIFICATION_STARTED,
                details={"record": record_name},
                actor=actor,
            )
        except StaleTransitionError:
            return await self._current(domain)

        if message is not None:
            return await self._reject(
                domain, expected, found, message, actor=actor, lookup_error=lookup_error
            )

        try:
            domain = await self._store.apply(
                domain,
                DomainEventType.DNS_VERIFIED,
                details={"record": record_name, "found": found},
                actor=actor,
                verified_at=domain.verified_at or datetime.now(timezone.utc),
                error_message=None,
            )
        except StaleTransitionError:
            return await self._current(domain)
        return self._result(domain, VERIFIED_MESSAGE, expected=expected, found=found)

    async def _reject(
        self,
        domain: Domain,
        expected: str,
        found: list[str],
        message: str,
        *,
        actor: str | None,
        lookup_error: ProviderError | None = None,
    ) -> VerificationResult:
        details = {"expected": expected, "found": found, "message": message}
        if lookup_error is not None:
            details["provider_error"] = lookup_error.payload
        try:
            domain = await self._store.apply(
                domain,
                DomainEventType.VERIFICATION_FAILED,
                details=details,
                actor=actor,
                error_message=message,
            )
        except StaleTransitionError:
            return await self._current(domain)
        return self._result(domain, message, expected=expected, found=found)

    async def _current(self, domain: Domain) -> VerificationResult:
        """Report whatever the caller that won the race left behind."""
        domain = await self._store.reload(domain)
        verified = DomainStatus(domain.status) in OWNERSHIP_PROVEN_STATUSES
        message = VERIFIED_MESSAGE if verified else (domain.error_message or "Verification in progress")
        return self._result(domain, message)

    @staticmethod
    def _result(
        domain: Domain,
        message: str,
        *,
        expected: str | None = None,
        found: list[str] | None = None,
    ) -> VerificationResult:
        return VerificationResult(
            domain_id=domain.id,
            status=domain.status,
            verified=DomainStatus(domain.status) in OWNERSHIP_PROVEN_STATUSES,
            message=message,
            expected=expected,
            found=found,
        )
