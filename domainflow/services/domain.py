"""Domain service — custom-domain CRUD and lifecycle entry points.

Routers call this service only. It resolves the domain a request targets
(directly by id, or through a brand's primary domain) and hands it to the
component that owns the operation. Every status write goes through
:class:`DomainStore`.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from domainflow.core.config import Settings, settings
from domainflow.core.exceptions import ConflictError, NotFoundError, PreconditionError
from domainflow.core.pagination import PaginationParams
from domainflow.domain.custom_domain import Domain
from domainflow.domain.domain_event import DomainEvent
from domainflow.schemas.domain import (
    DnsRequirements,
    DomainCreate,
    DomainTarget,
    HostnameResolution,
    ProviderHealth,
    RegistrationResult,
    RemovalResult,
    SSLResult,
    VerificationResult,
)
from domainflow.services.dns_lookup import DohResolver
from domainflow.services.dns_requirements import resolve_dns_requirements
from domainflow.services.domain_store import DomainStore
from domainflow.services.hostnames import (
    generate_verification_token,
    normalize_hostname,
    validate_hostname,
)
from domainflow.services.netlify import NetlifyClient
from domainflow.services.ownership import OwnershipVerifier
from domainflow.services.registrar import HostRegistrar
from domainflow.services.ssl import SSLReconciler


class DomainService:
    def __init__(
        self,
        session: AsyncSession,
        client: NetlifyClient,
        resolver: DohResolver,
        config: Settings = settings,
    ):
        self._config = config
        self._client = client
        self._store = DomainStore(session)
        self._verifier = OwnershipVerifier(self._store, resolver, config)
        self._registrar = HostRegistrar(self._store, client, config)
        self._ssl = SSLReconciler(self._store, client, self._registrar)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create_domain(self, data: DomainCreate, actor: str | None = None) -> Domain:
        hostname = validate_hostname(data.hostname, self._config.reserved_hostname_list)
        if await self._store.domains.get_by_hostname(hostname):
            raise ConflictError(f"Domain '{hostname}' is already in use")

        existing = await self._store.domains.list_for_brand(data.brand_id)
        is_primary = data.is_primary if data.is_primary is not None else not existing
        return await self._store.create(
            brand_id=data.brand_id,
            hostname=hostname,
            verification_token=generate_verification_token(),
            is_primary=is_primary,
            actor=actor,
        )

    async def list_domains(
        self,
        pagination: PaginationParams,
        brand_id: str | None = None,
        status: str | None = None,
    ) -> tuple[list[Domain], int]:
        return await self._store.domains.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order=pagination.order,
            filters={"brand_id": brand_id, "status": status},
        )

    async def get_domain(self, domain_id: str) -> Domain:
        return await self._store.get(domain_id)

    async def list_events(
        self, domain_id: str, pagination: PaginationParams
    ) -> tuple[list[DomainEvent], int]:
        # Events outlive their domain, so a missing row is not an error here
        return await self._store.events.list_for_domain(
            domain_id, offset=pagination.offset, limit=pagination.limit
        )

    async def set_primary(self, domain_id: str) -> Domain:
        domain = await self._store.get(domain_id)
        if domain.is_primary:
            return domain
        return await self._store.set_primary(domain)

    # ------------------------------------------------------------------
    # Targeting
    # ------------------------------------------------------------------

    async def resolve_target(self, target: DomainTarget) -> Domain:
        """The domain named by id, else the brand's primary (or only) domain."""
        if target.domain_id:
            return await self._store.get(target.domain_id)

        primary = await self._store.domains.get_primary_for_brand(target.brand_id)
        if primary:
            return primary
        domains = await self._store.domains.list_for_brand(target.brand_id)
        if not domains:
            raise NotFoundError("Domain for brand", target.brand_id)
        if len(domains) > 1:
            raise PreconditionError(
                "Brand has several domains and none is primary; pass domain_id"
            )
        return domains[0]

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    async def dns_requirements(
        self, hostname: str, verification_token: str | None = None
    ) -> DnsRequirements:
        hostname = validate_hostname(hostname)
        return await resolve_dns_requirements(
            hostname, verification_token, client=self._client, config=self._config
        )

    async def register(self, target: DomainTarget, actor: str | None = None) -> RegistrationResult:
        domain = await self.resolve_target(target)
        return await self._registrar.register(domain, actor=actor)

    async def verify(self, target: DomainTarget, actor: str | None = None) -> VerificationResult:
        domain = await self.resolve_target(target)
        return await self._verifier.verify(domain, actor=actor)

    async def reconcile_ssl(self, target: DomainTarget, actor: str | None = None) -> SSLResult:
        domain = await self.resolve_target(target)
        return await self._ssl.reconcile(domain, actor=actor)

    async def remove(self, target: DomainTarget, actor: str | None = None) -> RemovalResult:
        domain = await self.resolve_target(target)
        domain_id, hostname = domain.id, domain.hostname

        removed, error = await self._registrar.deregister(domain)
        await self._store.remove(
            domain,
            details={"provider_removed": removed, "provider_error": error},
            actor=actor,
        )
        return RemovalResult(
            domain_id=domain_id,
            hostname=hostname,
            provider_removed=removed,
            provider_error=error,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def resolve_hostname(self, hostname: str) -> HostnameResolution:
        normalized = normalize_hostname(hostname)
        domain = await self._store.domains.get_active_by_hostname(normalized)
        if not domain:
            raise NotFoundError("Active domain", normalized)
        return HostnameResolution(
            hostname=domain.hostname,
            brand_id=domain.brand_id,
            domain_id=domain.id,
            is_primary=domain.is_primary,
        )

    async def provider_health(self) -> ProviderHealth:
        return ProviderHealth(**await self._client.health())