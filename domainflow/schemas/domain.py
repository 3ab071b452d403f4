"""Domain Pydantic schemas (request DTOs and response models)."""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field, model_validator

from domainflow.schemas.common import ApiModel


# ---------------------------------------------------------------------------
# DNS requirements
# ---------------------------------------------------------------------------

class DnsRecord(ApiModel):
    type: Literal["A", "CNAME", "TXT"]
    name: str
    value: str
    description: str | None = None


class DnsRecordSet(ApiModel):
    routing: DnsRecord
    verification: DnsRecord | None = None

    def as_list(self) -> list[dict[str, Any]]:
        records = [self.routing] + ([self.verification] if self.verification else [])
        return [r.model_dump() for r in records]


class DnsRequirementsRequest(ApiModel):
    hostname: str = Field(min_length=1)
    verification_token: str | None = None


class DnsRequirements(ApiModel):
    hostname: str
    is_apex: bool
    site_hostname: str
    load_balancer_ip: str
    records: DnsRecordSet
    source: Literal["live", "fallback"]


# ---------------------------------------------------------------------------
# Domain resources
# ---------------------------------------------------------------------------

class DomainCreate(ApiModel):
    brand_id: str = Field(min_length=1, max_length=100)
    hostname: str = Field(min_length=1, max_length=300)
    is_primary: bool | None = None


class DomainOut(ApiModel):
    id: str
    brand_id: str
    hostname: str
    is_primary: bool
    status: str
    verification_token: str | None = None
    verified_at: datetime | None = None
    ssl_status: str | None = None
    provider_domain_id: str | None = None
    dns_records: list[dict[str, Any]] = []
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime


class DomainEventOut(ApiModel):
    id: int
    domain_id: str
    event_type: str
    details: dict[str, Any] = {}
    performed_by: str | None = None
    created_at: datetime


class DomainTarget(ApiModel):
    """Address a domain directly, or through its brand's primary domain."""

    domain_id: str | None = None
    brand_id: str | None = None

    @model_validator(mode="after")
    def _one_of(self) -> "DomainTarget":
        if not self.domain_id and not self.brand_id:
            raise ValueError("domain_id or brand_id is required")
        return self


# ---------------------------------------------------------------------------
# Lifecycle operation results
# ---------------------------------------------------------------------------

class RegistrationResult(ApiModel):
    domain_id: str
    status: str
    provider_domain_id: str | None = None
    dns_records: list[dict[str, Any]] = []
    simulated: bool = False


class VerificationResult(ApiModel):
    domain_id: str
    status: str
    verified: bool
    message: str
    expected: str | None = None
    found: list[str] | None = None


class SSLResult(ApiModel):
    domain_id: str
    status: str
    ssl_active: bool
    ssl_state: str | None = None
    error: str | None = None
    simulated: bool = False


class RemovalResult(ApiModel):
    success: bool = True
    domain_id: str
    hostname: str
    provider_removed: bool
    provider_error: str | None = None


class ProviderHealth(ApiModel):
    connected: bool
    reason: str | None = None
    site_name: str | None = None


class HostnameResolution(ApiModel):
    hostname: str
    brand_id: str
    domain_id: str
    is_primary: bool
