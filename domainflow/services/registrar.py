"""Host Registrar — attaches hostnames to the hosting provider's site.

Without provider credentials, registration is simulated: the domain gets a
synthetic ``simulated_<ms>`` provider id and the fallback DNS records, and
the result is flagged ``simulated``.
"""

from __future__ import annotations

import logging
import time

from domainflow.core.config import Settings, settings
from domainflow.core.exceptions import (
    HostRegistrationError,
    NotFoundError,
    PreconditionError,
    ProviderError,
    StaleTransitionError,
)
from domainflow.domain.custom_domain import Domain
from domainflow.domain.lifecycle import DomainEventType, can_apply
from domainflow.schemas.domain import RegistrationResult
from domainflow.services.dns_requirements import build_dns_records
from domainflow.services.domain_store import DomainStore
from domainflow.services.netlify import NetlifyClient

logger = logging.getLogger(__name__)

PERSIST_ATTEMPTS = 3


def simulated_provider_id() -> str:
    return f"simulated_{int(time.time() * 1000)}"


class HostRegistrar:
    def __init__(
        self,
        store: DomainStore,
        client: NetlifyClient,
        config: Settings = settings,
    ) -> None:
        self._store = store
        self._client = client
        self._config = config

    def _fallback_records(self, domain: Domain) -> list[dict]:
        return build_dns_records(
            domain.hostname,
            domain.verification_token,
            site_hostname=self._config.fallback_site_hostname,
            load_balancer_ip=self._config.fallback_load_balancer_ip,
            verification_prefix=self._config.verification_prefix,
        ).as_list()

    async def register(self, domain: Domain, *, actor: str | None = None) -> RegistrationResult:
        """Register *domain* with the provider.

        Raises :class:`HostRegistrationError` after recording the failure.
        """
        if domain.provider_domain_id:
            return self._result(domain, simulated=domain.provider_domain_id.startswith("simulated_"))
        if not can_apply(domain.status, DomainEventType.NETLIFY_ADDED):
            raise PreconditionError(
                f"Domain in status '{domain.status}' cannot be registered with the host"
            )

        if not self._client.configured:
            logger.warning(
                "Hosting provider not configured; simulating registration of %s",
                domain.hostname,
            )
            provider_domain_id = simulated_provider_id()
            records = self._fallback_records(domain)
            details = {"provider_domain_id": provider_domain_id, "simulated": True}
            simulated = True
        else:
            try:
                registered = await self._client.add_domain(domain.hostname)
            except ProviderError as exc:
                await self._record_failure(domain, exc, actor)
                raise HostRegistrationError(
                    exc.message, payload=exc.payload, status=exc.status
                ) from exc
            provider_domain_id = registered.id
            records = registered.dns_records or self._fallback_records(domain)
            details = {
                "provider_domain_id": provider_domain_id,
                "response": registered.model_dump(mode="json"),
            }
            simulated = False

        domain = await self._persist(domain, provider_domain_id, records, details, actor)
        return self._result(domain, simulated=simulated)

    async def _persist(
        self,
        domain: Domain,
        provider_domain_id: str,
        records: list[dict],
        details: dict,
        actor: str | None,
    ) -> Domain:
        """Store the provider's answer, retrying the write when the status moved underneath.

        The hostname is already attached at the provider at this point, so a
        lost compare-and-set must not drop the provider id.
        """
        for attempt in range(1, PERSIST_ATTEMPTS + 1):
            try:
                return await self._store.apply(
                    domain,
                    DomainEventType.NETLIFY_ADDED,
                    details=details,
                    actor=actor,
                    provider_domain_id=provider_domain_id,
                    dns_records=records,
                    error_message=None,
                )
            except StaleTransitionError:
                try:
                    domain = await self._store.reload(domain)
                except NotFoundError:
                    # Removed while the provider call was in flight
                    await self.deregister(domain)
                    raise
                if domain.provider_domain_id:
                    return domain
                if not can_apply(domain.status, DomainEventType.NETLIFY_ADDED):
                    break
                logger.info(
                    "Status of %s moved to %s during registration; retrying write (%d/%d)",
                    domain.hostname, domain.status, attempt, PERSIST_ATTEMPTS,
                )
        logger.error(
            "Could not store provider id %s for %s (status %s)",
            provider_domain_id, domain.hostname, domain.status,
        )
        raise StaleTransitionError(domain.id, domain.status)

    async def _record_failure(
        self, domain: Domain, exc: ProviderError, actor: str | None
    ) -> None:
        logger.error(
            "Registering %s with the host failed: %s (payload=%s)",
            domain.hostname, exc.message, exc.payload,
        )
        try:
            await self._store.apply(
                domain,
                DomainEventType.ERROR,
                details={
                    "stage": "registration",
                    "message": exc.message,
                    "provider_status": exc.status,
                    "provider_error": exc.payload,
                },
                actor=actor,
                error_message=exc.message,
            )
        except StaleTransitionError:
            # Another caller moved the domain; its outcome stands
            await self._store.reload(domain)

    async def deregister(self, domain: Domain) -> tuple[bool, str | None]:
        """Best-effort removal from the provider. Returns (removed, error message)."""
        try:
            await self._client.remove_domain(domain.hostname)
        except ProviderError as exc:
            logger.warning(
                "Could not remove %s from the host: %s", domain.hostname, exc.message
            )
            return False, exc.message
        logger.info("Removed %s from the host", domain.hostname)
        return True, None

    @staticmethod
    def _result(domain: Domain, *, simulated: bool) -> RegistrationResult:
        return RegistrationResult(
            domain_id=domain.id,
            status=domain.status,
            provider_domain_id=domain.provider_domain_id,
            dns_records=domain.dns_records or [],
            simulated=simulated,
        )
