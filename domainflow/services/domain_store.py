"""Domain State Store — the only writer of domain status.

Each call to :meth:`DomainStore.apply`:

  1. asks the transition table for the next status (rejecting illegal events),
  2. writes the new fields with a compare-and-set on the status that was read,
  3. appends the matching ``DomainEvent``,
  4. commits 2 and 3 together.

If another caller moved the domain first, step 2 matches no row and
:class:`StaleTransitionError` is raised with nothing written. Services treat
that as a benign no-op and report the freshly read state.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from domainflow.core.exceptions import ConflictError, NotFoundError, StaleTransitionError
from domainflow.domain.custom_domain import Domain
from domainflow.domain.domain_event import DomainEvent
from domainflow.domain.lifecycle import DomainEventType, transition
from domainflow.repositories.domain import DomainRepository
from domainflow.repositories.domain_event import DomainEventRepository

logger = logging.getLogger(__name__)


class DomainStore:
    def __init__(self, session: AsyncSession):
        self._session = session
        self.domains = DomainRepository(session)
        self.events = DomainEventRepository(session)

    async def get(self, domain_id: str) -> Domain:
        domain = await self.domains.get_by_id(domain_id)
        if not domain:
            raise NotFoundError("Domain", domain_id)
        return domain

    async def reload(self, domain: Domain) -> Domain:
        """Re-read *domain* from the database.

        Raises :class:`NotFoundError` when the row was removed in the meantime.
        """
        result = await self._session.execute(
            select(Domain)
            .where(Domain.id == domain.id)
            .execution_options(populate_existing=True)
        )
        fresh = result.scalars().first()
        if fresh is None:
            raise NotFoundError("Domain", domain.id)
        return fresh

    async def create(
        self,
        *,
        brand_id: str,
        hostname: str,
        verification_token: str,
        is_primary: bool,
        actor: str | None = None,
    ) -> Domain:
        status = transition(None, DomainEventType.CREATED)
        try:
            if is_primary:
                await self.domains.clear_primary(brand_id)
            domain = await self.domains.create(
                brand_id=brand_id,
                hostname=hostname,
                status=status.value,
                verification_token=verification_token,
                is_primary=is_primary,
                dns_records=[],
            )
            await self.events.append(
                domain.id,
                DomainEventType.CREATED.value,
                {"hostname": hostname, "brand_id": brand_id, "to_status": status.value},
                performed_by=actor,
            )
            await self._session.commit()
        except IntegrityError as exc:
            # A concurrent create took the hostname or the brand's primary slot
            await self._session.rollback()
            logger.warning("Creating %s for brand %s conflicted: %s", hostname, brand_id, exc.orig)
            raise ConflictError(
                f"Domain '{hostname}' conflicts with a concurrent change for brand '{brand_id}'"
            ) from exc
        logger.info("Domain %s created for brand %s", hostname, brand_id)
        return await self.reload(domain)

    async def apply(
        self,
        domain: Domain,
        event: DomainEventType,
        *,
        details: dict[str, Any] | None = None,
        actor: str | None = None,
        **changes: Any,
    ) -> Domain:
        """Move *domain* through *event*, persisting *changes* alongside the new status."""
        current = domain.status
        new_status = transition(current, event)
        if new_status is None:
            raise ValueError("Deletions go through DomainStore.remove()")

        written = await self.domains.update_if_status(
            domain.id, current, status=new_status.value, **changes
        )
        if not written:
            logger.info(
                "Stale %s on domain %s (expected %s); skipping",
                event.value, domain.id, current,
            )
            raise StaleTransitionError(domain.id, current)

        await self.events.append(
            domain.id,
            event.value,
            {"from_status": current, "to_status": new_status.value, **(details or {})},
            performed_by=actor,
        )
        await self._session.commit()
        logger.info(
            "Domain %s: %s -> %s (%s)",
            domain.hostname, current, new_status.value, event.value,
        )
        return await self.reload(domain)

    async def remove(
        self,
        domain: Domain,
        *,
        details: dict[str, Any] | None = None,
        actor: str | None = None,
    ) -> None:
        transition(domain.status, DomainEventType.REMOVED)
        await self.events.append(
            domain.id,
            DomainEventType.REMOVED.value,
            {"from_status": domain.status, "hostname": domain.hostname, **(details or {})},
            performed_by=actor,
        )
        await self.domains.delete(domain.id)
        await self._session.commit()
        logger.info("Domain %s removed", domain.hostname)

    async def set_primary(self, domain: Domain) -> Domain:
        await self.domains.clear_primary(domain.brand_id, except_id=domain.id)
        await self.domains.update(domain.id, is_primary=True)
        await self._session.commit()
        logger.info("Domain %s is now primary for brand %s", domain.hostname, domain.brand_id)
        return await self.reload(domain)

    async def history(self, domain_id: str) -> list[DomainEvent]:
        events, _ = await self.events.list_for_domain(domain_id)
        return events

