"""Shared FastAPI dependencies for v1 routers.

Provider clients are built per request from the global settings; tests
override ``get_netlify_client`` / ``get_dns_resolver`` with clients that
use an ``httpx.MockTransport``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from domainflow.core.config import settings
from domainflow.db.base import get_db
from domainflow.services.dns_lookup import DohResolver
from domainflow.services.domain import DomainService
from domainflow.services.netlify import NetlifyClient


def get_netlify_client() -> NetlifyClient:
    return NetlifyClient(settings)


def get_dns_resolver() -> DohResolver:
    return DohResolver(settings)


def get_actor(
    x_actor_id: Optional[str] = Header(default=None, max_length=100),
) -> Optional[str]:
    """Who triggered the request, recorded as ``performed_by`` on events."""
    return x_actor_id or None


def get_domain_service(
    session: AsyncSession = Depends(get_db),
    client: NetlifyClient = Depends(get_netlify_client),
    resolver: DohResolver = Depends(get_dns_resolver),
) -> DomainService:
    return DomainService(session, client, resolver, settings)
