"""DNS requirement resolution, live and degraded."""

import httpx

from domainflow.services.dns_requirements import build_dns_records, resolve_dns_requirements
from domainflow.services.netlify import NetlifyClient


def _records(hostname, token=None):
    return build_dns_records(
        hostname,
        token,
        site_hostname="brandhub.netlify.app",
        load_balancer_ip="75.2.60.5",
        verification_prefix="_verify",
    )


def test_apex_gets_a_record_at_root():
    records = _records("example.com")
    assert records.routing.type == "A"
    assert records.routing.name == "@"
    assert records.routing.value == "75.2.60.5"
    assert records.verification is None


def test_subdomain_gets_cname_to_site():
    records = _records("app.example.com", "dfv_token")
    assert (records.routing.type, records.routing.name, records.routing.value) == (
        "CNAME", "app", "brandhub.netlify.app",
    )
    assert records.verification.type == "TXT"
    assert records.verification.name == "_verify.app"
    assert records.verification.value == "dfv_token"


def test_multi_level_suffix_apex_and_subdomain():
    assert _records("example.co.uk").routing.type == "A"
    shop = _records("shop.example.co.uk", "t")
    assert shop.routing.type == "CNAME"
    assert shop.routing.name == "shop"
    assert _records("example.co.uk", "t").verification.name == "_verify"


def test_as_list_orders_routing_first():
    listed = _records("app.example.com", "t").as_list()
    assert [r["type"] for r in listed] == ["CNAME", "TXT"]


async def test_live_site_hostname_is_used(netlify_client, configured_settings):
    result = await resolve_dns_requirements(
        "app.example.com", client=netlify_client, config=configured_settings
    )
    assert result.source == "live"
    assert result.records.routing.value == "brandhub.netlify.app"


async def test_missing_credentials_fall_back(offline_client, netlify, test_settings):
    config = test_settings
    result = await resolve_dns_requirements("app.example.com", "t", client=offline_client, config=config)
    assert result.source == "fallback"
    assert result.site_hostname == config.fallback_site_hostname
    assert result.records.routing.value == config.fallback_site_hostname
    assert netlify.requests == []


async def test_unreachable_provider_falls_back(netlify_client, netlify, configured_settings):
    netlify.down = True
    config = configured_settings
    result = await resolve_dns_requirements("example.com", client=netlify_client, config=config)
    assert result.source == "fallback"
    assert result.is_apex is True
    assert result.records.routing.value == config.fallback_load_balancer_ip


async def test_provider_error_status_falls_back(netlify_client, netlify, configured_settings):
    netlify.site_status = 500
    result = await resolve_dns_requirements(
        "www.example.com", client=netlify_client, config=configured_settings
    )
    assert result.source == "fallback"


async def test_unexpected_site_payload_falls_back(configured_settings):
    client = NetlifyClient(
        configured_settings,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=["not", "a", "site"])),
    )
    result = await resolve_dns_requirements("www.example.com", client=client, config=configured_settings)
    assert result.source == "fallback"
