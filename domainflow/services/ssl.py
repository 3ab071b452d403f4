"""SSL/Activation Reconciler — drives certificate issuance to an active domain.

Each call reads the provider's certificate state for the hostname and folds
it into the local status:

    issued, active              -> active, ssl_status "issued"
    failed, error               -> failed, ssl_status "failed"
    anything else (pending ...) -> provisioning_ssl, ssl_status mirrors provider

A poll that changes neither status nor ssl_status writes nothing. Without
provider credentials the domain is promoted straight to active and the
result is flagged ``simulated``.
"""

from __future__ import annotations

import logging
from typing import Any

from domainflow.core.exceptions import (
    HostRegistrationError,
    PreconditionError,
    ProviderError,
    StaleTransitionError,
)
from domainflow.domain.custom_domain import Domain
from domainflow.domain.lifecycle import DomainEventType, DomainStatus
from domainflow.schemas.domain import SSLResult
from domainflow.services.domain_store import DomainStore
from domainflow.services.netlify import NetlifyClient
from domainflow.services.registrar import HostRegistrar, simulated_provider_id

logger = logging.getLogger(__name__)

SSL_PENDING = "pending"
SSL_ISSUED = "issued"
SSL_FAILED = "failed"

ISSUED_STATES = frozenset({"issued", "active"})
FAILED_STATES = frozenset({"failed", "error"})


class SSLReconciler:
    def __init__(
        self,
        store: DomainStore,
        client: NetlifyClient,
        registrar: HostRegistrar,
    ) -> None:
        self._store = store
        self._client = client
        self._registrar = registrar

    async def reconcile(self, domain: Domain, *, actor: str | None = None) -> SSLResult:
        status = DomainStatus(domain.status)
        if status is DomainStatus.ACTIVE:
            return self._result(domain)
        retryable_failure = status is DomainStatus.FAILED and domain.verified_at is not None
        if status not in (DomainStatus.VERIFIED, DomainStatus.PROVISIONING_SSL) and not retryable_failure:
            raise PreconditionError("Domain must be verified before SSL provisioning")

        try:
            if status is not DomainStatus.PROVISIONING_SSL:
                domain = await self._store.apply(
                    domain,
                    DomainEventType.SSL_PROVISIONING,
                    details={"ssl_state": SSL_PENDING},
                    actor=actor,
                    ssl_status=SSL_PENDING,
                    error_message=None,
                )

            if not self._client.configured:
                return await self._simulate(domain, actor)

            try:
                if not domain.provider_domain_id:
                    await self._registrar.register(domain, actor=actor)
                state = await self._client.get_certificate_state(domain.hostname)
                if state is None:
                    logger.info("No certificate yet for %s; requesting one", domain.hostname)
                    await self._client.provision_certificate()
                    state = SSL_PENDING
            except HostRegistrationError as exc:
                domain = await self._store.reload(domain)
                return self._result(domain, error=exc.message)
            except ProviderError as exc:
                return await self._record_failure(domain, exc, actor)

            return await self._apply_state(domain, state.lower(), actor)
        except StaleTransitionError:
            domain = await self._store.reload(domain)
            return self._result(domain)

    async def _simulate(self, domain: Domain, actor: str | None) -> SSLResult:
        logger.warning(
            "Hosting provider not configured; simulating SSL activation for %s",
            domain.hostname,
        )
        changes: dict[str, Any] = {"ssl_status": SSL_ISSUED, "error_message": None}
        if not domain.provider_domain_id:
            changes["provider_domain_id"] = simulated_provider_id()
        domain = await self._store.apply(
            domain,
            DomainEventType.ACTIVATED,
            details={"ssl_state": SSL_ISSUED, "simulated": True},
            actor=actor,
            **changes,
        )
        return self._result(domain, simulated=True)

    async def _apply_state(self, domain: Domain, state: str, actor: str | None) -> SSLResult:
        if state in ISSUED_STATES:
            domain = await self._store.apply(
                domain,
                DomainEventType.ACTIVATED,
                details={"ssl_state": state},
                actor=actor,
                ssl_status=SSL_ISSUED,
                error_message=None,
            )
            logger.info("SSL issued for %s; domain is active", domain.hostname)
        elif state in FAILED_STATES:
            message = f"SSL certificate provisioning failed (provider state: {state})"
            domain = await self._store.apply(
                domain,
                DomainEventType.ERROR,
                details={"stage": "ssl", "ssl_state": state, "message": message},
                actor=actor,
                ssl_status=SSL_FAILED,
                error_message=message,
            )
            return self._result(domain, error=message)
        elif domain.ssl_status != state:
            domain = await self._store.apply(
                domain,
                DomainEventType.SSL_PROVISIONING,
                details={"ssl_state": state},
                actor=actor,
                ssl_status=state,
            )
        return self._result(domain)

    async def _record_failure(
        self, domain: Domain, exc: ProviderError, actor: str | None
    ) -> SSLResult:
        logger.error(
            "SSL reconciliation for %s failed: %s (payload=%s)",
            domain.hostname, exc.message, exc.payload,
        )
        domain = await self._store.apply(
            domain,
            DomainEventType.ERROR,
            details={
                "stage": "ssl",
                "message": exc.message,
                "provider_status": exc.status,
                "provider_error": exc.payload,
            },
            actor=actor,
            ssl_status=SSL_FAILED,
            error_message=exc.message,
        )
        return self._result(domain, error=exc.message)

    @staticmethod
    def _result(domain: Domain, *, error: str | None = None, simulated: bool = False) -> SSLResult:
        return SSLResult(
            domain_id=domain.id,
            status=domain.status,
            ssl_active=domain.status == DomainStatus.ACTIVE.value,
            ssl_state=domain.ssl_status,
            error=error or (domain.error_message if domain.status == DomainStatus.FAILED.value else None),
            simulated=simulated,
        )
