"""DNS records a domain owner must publish, adapted to apex vs subdomain.

The record set is a pure function of the hostname, the verification token
and the provider's canonical site hostname. Only the site hostname needs a
live provider call, and that call is allowed to fail: the resolver then
uses the configured fallback values and reports ``source="fallback"``.
"""

from __future__ import annotations

import logging

from domainflow.core.config import Settings, settings
from domainflow.core.exceptions import ProviderError
from domainflow.schemas.domain import DnsRecord, DnsRecordSet, DnsRequirements
from domainflow.services.hostnames import is_apex, split_hostname, subdomain_label
from domainflow.services.netlify import NetlifyClient

logger = logging.getLogger(__name__)

SOURCE_LIVE = "live"
SOURCE_FALLBACK = "fallback"


def verification_record_name(hostname: str, prefix: str) -> str:
    """Record name relative to the registrable domain's zone."""
    sub, _ = split_hostname(hostname)
    return f"{prefix}.{sub}" if sub else prefix


def build_dns_records(
    hostname: str,
    verification_token: str | None,
    *,
    site_hostname: str,
    load_balancer_ip: str,
    verification_prefix: str,
) -> DnsRecordSet:
    if is_apex(hostname):
        routing = DnsRecord(
            type="A",
            name="@",
            value=load_balancer_ip,
            description="Points your domain to the hosting load balancer",
        )
    else:
        routing = DnsRecord(
            type="CNAME",
            name=subdomain_label(hostname),
            value=site_hostname,
            description=f"Points your subdomain to {site_hostname}",
        )

    verification = None
    if verification_token:
        verification = DnsRecord(
            type="TXT",
            name=verification_record_name(hostname, verification_prefix),
            value=verification_token,
            description="Proves ownership of the domain",
        )
    return DnsRecordSet(routing=routing, verification=verification)


async def resolve_dns_requirements(
    hostname: str,
    verification_token: str | None = None,
    *,
    client: NetlifyClient | None = None,
    config: Settings = settings,
) -> DnsRequirements:
    """Never raises for provider trouble; degrades to the fallback site instead."""
    client = client or NetlifyClient(config)

    source = SOURCE_FALLBACK
    site_hostname = config.fallback_site_hostname
    try:
        site = await client.get_site()
        site_hostname = site.canonical_hostname
        source = SOURCE_LIVE
    except ProviderError as exc:
        logger.info("Using fallback DNS target for %s: %s", hostname, exc.message)

    records = build_dns_records(
        hostname,
        verification_token,
        site_hostname=site_hostname,
        load_balancer_ip=config.fallback_load_balancer_ip,
        verification_prefix=config.verification_prefix,
    )
    return DnsRequirements(
        hostname=hostname,
        is_apex=is_apex(hostname),
        site_hostname=site_hostname,
        load_balancer_ip=config.fallback_load_balancer_ip,
        records=records,
        source=source,
    )
