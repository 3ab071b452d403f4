"""Domain event repository. Append and read only; events are immutable."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domainflow.domain.domain_event import DomainEvent


class DomainEventRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def append(
        self,
        domain_id: str,
        event_type: str,
        details: dict[str, Any] | None = None,
        performed_by: str | None = None,
    ) -> DomainEvent:
        event = DomainEvent(
            domain_id=domain_id,
            event_type=event_type,
            details=details or {},
            performed_by=performed_by,
        )
        self._session.add(event)
        await self._session.flush()
        return event

    async def list_for_domain(
        self, domain_id: str, *, offset: int = 0, limit: int | None = None
    ) -> tuple[list[DomainEvent], int]:
        """Events in the order they were written (oldest first)."""
        base = select(DomainEvent).where(DomainEvent.domain_id == domain_id)
        total = (
            await self._session.execute(
                select(func.count()).select_from(base.subquery())
            )
        ).scalar_one()

        q = base.order_by(DomainEvent.created_at.asc(), DomainEvent.id.asc()).offset(offset)
        if limit is not None:
            q = q.limit(limit)
        items = (await self._session.execute(q)).scalars().all()
        return list(items), total
