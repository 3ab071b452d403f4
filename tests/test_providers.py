"""Hosting provider client and DNS-over-HTTPS resolver."""

import httpx
import pytest

from domainflow.core.exceptions import DnsLookupError, ProviderError, ProviderNotConfiguredError
from domainflow.services.dns_lookup import DohResolver
from domainflow.services.netlify import NetlifyClient


class TestNetlifyClient:
    async def test_add_domain_returns_string_id(self, netlify_client, netlify):
        registered = await netlify_client.add_domain("app.example.com")
        assert registered.id == "1001"
        assert registered.dns_records[0]["type"] == "CNAME"
        assert ("POST", "/sites/site-123/domains") in netlify.requests

    async def test_error_message_and_payload_are_kept(self, netlify_client, netlify):
        netlify.add_error = (422, {"code": 422, "message": "Hostname already in use"})
        with pytest.raises(ProviderError) as exc_info:
            await netlify_client.add_domain("app.example.com")
        assert exc_info.value.message == "Hostname already in use"
        assert exc_info.value.status == 422
        assert exc_info.value.payload["code"] == 422

    async def test_http_errors_are_not_retried(self, netlify_client, netlify):
        netlify.add_error = (500, {"message": "boom"})
        with pytest.raises(ProviderError):
            await netlify_client.add_domain("app.example.com")
        assert len(netlify.calls("POST")) == 1

    async def test_transport_errors_are_retried(self, netlify_client, netlify):
        netlify.down = True
        with pytest.raises(ProviderError, match="unreachable"):
            await netlify_client.get_site()
        assert len(netlify.calls("GET")) == 3

    async def test_remove_treats_not_found_as_success(self, netlify_client, netlify):
        await netlify_client.remove_domain("never-added.example.com")
        assert netlify.calls("DELETE") == ["/sites/site-123/domains/never-added.example.com"]

    async def test_certificate_state_for_hostname(self, netlify_client, netlify):
        assert await netlify_client.get_certificate_state("app.example.com") is None
        netlify.cert_states["app.example.com"] = "issued"
        assert await netlify_client.get_certificate_state("app.example.com") == "issued"
        assert await netlify_client.get_certificate_state("other.example.com") is None

    async def test_unconfigured_client_makes_no_calls(self, offline_client, netlify):
        with pytest.raises(ProviderNotConfiguredError):
            await offline_client.add_domain("app.example.com")
        assert netlify.requests == []


class TestProviderHealth:
    async def test_connected(self, netlify_client):
        assert await netlify_client.health() == {"connected": True, "site_name": "brandhub"}

    async def test_missing_token(self, offline_client):
        assert (await offline_client.health())["reason"] == "missing_token"

    async def test_missing_site_id(self, netlify, test_settings):
        config = test_settings.model_copy(update={"provider_token": "tok"})
        client = NetlifyClient(config, transport=httpx.MockTransport(netlify.handler))
        assert (await client.health())["reason"] == "missing_site_id"

    async def test_invalid_credentials(self, netlify_client, netlify):
        netlify.site_status = 401
        assert (await netlify_client.health())["reason"] == "invalid_credentials"

    async def test_api_error(self, netlify_client, netlify):
        netlify.site_status = 503
        assert (await netlify_client.health()) == {"connected": False, "reason": "api_error"}


class TestDohResolver:
    async def test_strips_quotes_and_filters_non_txt(self, test_settings):
        def handler(request):
            return httpx.Response(200, json={
                "Status": 0,
                "Answer": [
                    {"name": "_verify.example.com", "type": 5, "data": "target.example.net."},
                    {"name": "_verify.example.com", "type": 16, "data": '"dfv_abc"'},
                    {"name": "_verify.example.com", "type": 16, "data": "v=spf1 -all"},
                ],
            })

        resolver = DohResolver(test_settings, transport=httpx.MockTransport(handler))
        assert await resolver.lookup_txt("_verify.example.com") == ["dfv_abc", "v=spf1 -all"]

    async def test_sends_json_accept_header(self, test_settings):
        seen = {}

        def handler(request):
            seen["accept"] = request.headers["accept"]
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"Status": 3})

        resolver = DohResolver(test_settings, transport=httpx.MockTransport(handler))
        assert await resolver.lookup_txt("_verify.example.com") == []
        assert seen["accept"] == "application/dns-json"
        assert seen["params"] == {"name": "_verify.example.com", "type": "TXT"}

    async def test_malformed_response_raises_after_retries(self, resolver, dns):
        dns.malformed = True
        with pytest.raises(DnsLookupError, match="malformed"):
            await resolver.lookup_txt("_verify.example.com")
        assert len(dns.queries) == 3

    async def test_unreachable_resolver(self, resolver, dns):
        dns.down = True
        with pytest.raises(DnsLookupError):
            await resolver.lookup_txt("_verify.example.com")
