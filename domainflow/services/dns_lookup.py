"""TXT record lookups through a public DNS-over-HTTPS resolver (JSON API)."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from domainflow.core.config import Settings, settings
from domainflow.core.exceptions import DnsLookupError
from domainflow.schemas.providers import DnsJsonResponse

logger = logging.getLogger(__name__)

DEFAULT_RESOLVER_ENDPOINT = "https://cloudflare-dns.com/dns-query"


class DohResolver:
    def __init__(
        self,
        config: Settings = settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self.endpoint = config.dns_resolver_endpoint or DEFAULT_RESOLVER_ENDPOINT

    async def _query(self, name: str, record_type: str) -> DnsJsonResponse:
        async with httpx.AsyncClient(
            timeout=self._config.dns_timeout, transport=self._transport
        ) as client:
            response = await client.get(
                self.endpoint,
                params={"name": name, "type": record_type},
                headers={"Accept": "application/dns-json"},
            )
        if not response.is_success:
            raise DnsLookupError(
                f"DNS query failed: HTTP {response.status_code}",
                payload=response.text,
            )
        try:
            return DnsJsonResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise DnsLookupError(
                "DNS query failed: malformed resolver response",
                payload=response.text,
            ) from exc

    async def lookup_txt(self, name: str) -> list[str]:
        """Return TXT values published at *name* (empty list when none exist).

        Raises :class:`DnsLookupError` once every attempt has failed.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._config.dns_max_attempts),
            wait=wait_exponential(multiplier=self._config.retry_backoff_seconds, max=10),
            retry=retry_if_exception_type((httpx.TransportError, DnsLookupError)),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    result = await self._query(name, "TXT")
        except httpx.TimeoutException as exc:
            logger.warning("DNS query for %s timed out", name)
            raise DnsLookupError("DNS query timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("DNS query for %s failed: %s", name, exc)
            raise DnsLookupError(f"DNS query failed: {exc}") from exc

        values = result.txt_values()
        logger.debug("TXT %s -> %s", name, values)
        return values
