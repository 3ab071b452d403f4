"""Custom domain router — CRUD plus the lifecycle operations.

Lifecycle operations (register / verify / ssl / remove) accept either a
``domain_id`` or a ``brand_id`` and return their result un-enveloped.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from domainflow.core.pagination import PaginationParams
from domainflow.core.response import DataResponse, ListResponse, paginated
from domainflow.domain.lifecycle import DomainStatus
from domainflow.routers.deps import get_actor, get_domain_service
from domainflow.schemas.domain import (
    DomainCreate,
    DomainEventOut,
    DomainOut,
    DomainTarget,
    RegistrationResult,
    RemovalResult,
    SSLResult,
    VerificationResult,
)
from domainflow.services.domain import DomainService

router = APIRouter(prefix="/domains", tags=["Domains"])

_STATUS_PATTERN = "^(" + "|".join(s.value for s in DomainStatus) + ")$"


# ------------------------------------------------------------------
# CRUD
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[DomainOut])
async def list_domains(
    brand_id: Optional[str] = Query(default=None, description="Filter by owning brand"),
    filter_status: Optional[str] = Query(
        default=None, alias="status", pattern=_STATUS_PATTERN, description="Filter by status"
    ),
    pagination: PaginationParams = Depends(),
    svc: DomainService = Depends(get_domain_service),
):
    """List custom domains (paginated). Filter by ?brand_id= and ?status=."""
    items, total = await svc.list_domains(pagination, brand_id=brand_id, status=filter_status)
    return paginated(
        [DomainOut.model_validate(d) for d in items],
        total, pagination.page, pagination.limit,
    )


@router.post("", response_model=DataResponse[DomainOut], status_code=status.HTTP_201_CREATED)
async def create_domain(
    body: DomainCreate,
    actor: Optional[str] = Depends(get_actor),
    svc: DomainService = Depends(get_domain_service),
):
    """Attach a hostname to a brand. The domain starts out pending with a fresh token."""
    domain = await svc.create_domain(body, actor=actor)
    return {"data": DomainOut.model_validate(domain)}


# Static paths are declared before /{domain_id} so they are not captured by it.

@router.post("/register", response_model=RegistrationResult)
async def register_domain(
    body: DomainTarget,
    actor: Optional[str] = Depends(get_actor),
    svc: DomainService = Depends(get_domain_service),
):
    """Register the domain with the hosting provider."""
    return await svc.register(body, actor=actor)


@router.post("/verify", response_model=VerificationResult)
async def verify_domain(
    body: DomainTarget,
    actor: Optional[str] = Depends(get_actor),
    svc: DomainService = Depends(get_domain_service),
):
    """Check the TXT record that proves ownership. Safe to poll."""
    return await svc.verify(body, actor=actor)


@router.post("/ssl", response_model=SSLResult)
async def reconcile_ssl(
    body: DomainTarget,
    actor: Optional[str] = Depends(get_actor),
    svc: DomainService = Depends(get_domain_service),
):
    """Request or poll the certificate. Safe to poll."""
    return await svc.reconcile_ssl(body, actor=actor)


@router.post("/remove", response_model=RemovalResult)
async def remove_domain(
    body: DomainTarget,
    actor: Optional[str] = Depends(get_actor),
    svc: DomainService = Depends(get_domain_service),
):
    """Delete the domain locally and, best effort, from the hosting provider."""
    return await svc.remove(body, actor=actor)


@router.get("/{domain_id}", response_model=DataResponse[DomainOut])
async def get_domain(
    domain_id: str,
    svc: DomainService = Depends(get_domain_service),
):
    domain = await svc.get_domain(domain_id)
    return {"data": DomainOut.model_validate(domain)}


@router.get("/{domain_id}/events", response_model=ListResponse[DomainEventOut])
async def list_domain_events(
    domain_id: str,
    pagination: PaginationParams = Depends(),
    svc: DomainService = Depends(get_domain_service),
):
    """Audit trail of a domain, oldest first. Still available after removal."""
    items, total = await svc.list_events(domain_id, pagination)
    return paginated(
        [DomainEventOut.model_validate(e) for e in items],
        total, pagination.page, pagination.limit,
    )


@router.post("/{domain_id}/primary", response_model=DataResponse[DomainOut])
async def make_primary(
    domain_id: str,
    svc: DomainService = Depends(get_domain_service),
):
    domain = await svc.set_primary(domain_id)
    return {"data": DomainOut.model_validate(domain)}


@router.delete("/{domain_id}", response_model=RemovalResult)
async def delete_domain(
    domain_id: str,
    actor: Optional[str] = Depends(get_actor),
    svc: DomainService = Depends(get_domain_service),
):
    return await svc.remove(DomainTarget(domain_id=domain_id), actor=actor)
