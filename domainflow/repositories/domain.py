"""Domain repository — lookups plus the compare-and-set status update."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update

from domainflow.domain.custom_domain import Domain
from domainflow.repositories.base import BaseRepository


class DomainRepository(BaseRepository[Domain]):
    model = Domain

    async def get_by_hostname(self, hostname: str) -> Domain | None:
        result = await self._session.execute(
            select(Domain).where(Domain.hostname == hostname)
        )
        return result.scalars().first()

    async def list_for_brand(self, brand_id: str) -> list[Domain]:
        result = await self._session.execute(
            select(Domain)
            .where(Domain.brand_id == brand_id)
            .order_by(Domain.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_primary_for_brand(self, brand_id: str) -> Domain | None:
        result = await self._session.execute(
            select(Domain)
            .where(Domain.brand_id == brand_id)
            .where(Domain.is_primary.is_(True))
        )
        return result.scalars().first()

    async def get_active_by_hostname(self, hostname: str) -> Domain | None:
        result = await self._session.execute(
            select(Domain)
            .where(Domain.hostname == hostname)
            .where(Domain.status == "active")
        )
        return result.scalars().first()

    async def clear_primary(self, brand_id: str, *, except_id: str | None = None) -> None:
        stmt = (
            update(Domain)
            .where(Domain.brand_id == brand_id)
            .where(Domain.is_primary.is_(True))
        )
        if except_id is not None:
            stmt = stmt.where(Domain.id != except_id)
        await self._session.execute(
            stmt.values(is_primary=False).execution_options(synchronize_session=False)
        )
        await self._session.flush()

    async def update_if_status(
        self, domain_id: str, expected_status: str, **values: Any
    ) -> bool:
        """Write *values* only if the row still has *expected_status*.

        Returns False when another caller changed the status first.
        """
        values.setdefault("updated_at", datetime.now(timezone.utc))
        result = await self._session.execute(
            update(Domain)
            .where(Domain.id == domain_id)
            .where(Domain.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return result.rowcount == 1
