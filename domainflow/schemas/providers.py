"""Pydantic models for payloads received from external providers.

Provider JSON is validated here, at the boundary. Anything that fails
validation is reported as a provider error by the client that received it.
Unknown fields are kept (``extra="allow"``) so the raw payload can be
stored in the audit trail.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ProviderModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# ---------------------------------------------------------------------------
# Netlify
# ---------------------------------------------------------------------------

class NetlifySite(_ProviderModel):
    name: str
    default_domain: Optional[str] = None
    ssl_url: Optional[str] = None

    @property
    def canonical_hostname(self) -> str:
        return self.default_domain or f"{self.name}.netlify.app"


class NetlifySSLInfo(_ProviderModel):
    state: Optional[str] = None


class NetlifyDomain(_ProviderModel):
    id: str
    hostname: Optional[str] = None
    ssl: Optional[NetlifySSLInfo] = None
    dns_records: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class NetlifyCertificateDomain(_ProviderModel):
    domain: str
    state: Optional[str] = None


class NetlifyCertificate(_ProviderModel):
    state: Optional[str] = None
    domains: list[NetlifyCertificateDomain] = Field(default_factory=list)

    def state_for(self, hostname: str) -> Optional[str]:
        for entry in self.domains:
            if entry.domain.lower() == hostname:
                return entry.state or self.state
        return None


# ---------------------------------------------------------------------------
# DNS-over-HTTPS (application/dns-json)
# ---------------------------------------------------------------------------

TXT_RECORD_TYPE = 16


class DnsAnswer(_ProviderModel):
    name: Optional[str] = None
    type: int
    data: str


class DnsJsonResponse(_ProviderModel):
    status: int = Field(default=0, alias="Status")
    answer: Optional[list[DnsAnswer]] = Field(default=None, alias="Answer")

    def txt_values(self) -> list[str]:
        """TXT answers with one layer of surrounding quotes removed."""
        values: list[str] = []
        for entry in self.answer or []:
            if entry.type != TXT_RECORD_TYPE:
                continue
            value = entry.data
            if value.startswith('"'):
                value = value[1:]
            if value.endswith('"'):
                value = value[:-1]
            values.append(value)
        return values
