"""DNS guidance, provider health and hostname resolution.

None of these endpoints write anything.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from domainflow.routers.deps import get_domain_service
from domainflow.schemas.domain import (
    DnsRequirements,
    DnsRequirementsRequest,
    HostnameResolution,
    ProviderHealth,
)
from domainflow.services.domain import DomainService

router = APIRouter(tags=["DNS"])


@router.post("/dns-requirements", response_model=DnsRequirements)
async def dns_requirements(
    body: DnsRequirementsRequest,
    svc: DomainService = Depends(get_domain_service),
):
    """Records the owner must publish. Falls back to static targets if the host is unreachable."""
    return await svc.dns_requirements(body.hostname, body.verification_token)


@router.get("/provider/health", response_model=ProviderHealth)
async def provider_health(svc: DomainService = Depends(get_domain_service)):
    return await svc.provider_health()


@router.get("/resolve", response_model=HostnameResolution)
async def resolve_hostname(
    hostname: str = Query(min_length=1, description="Incoming request hostname"),
    svc: DomainService = Depends(get_domain_service),
):
    """Brand serving an active custom hostname; 404 when none does."""
    return await svc.resolve_hostname(hostname)
