"""Netlify hosting API client — domain aliases and certificates for one site.

Thin async wrapper over ``httpx``. Transport-level failures (connection
errors, timeouts) are retried with exponential backoff; HTTP error statuses
are not retried. Every failure surfaces as :class:`ProviderError` carrying
the provider payload, and every successful response is validated against
the models in :mod:`domainflow.schemas.providers`.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from domainflow.core.config import Settings, settings
from domainflow.core.exceptions import ProviderError, ProviderNotConfiguredError
from domainflow.schemas.providers import NetlifyCertificate, NetlifyDomain, NetlifySite

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class NetlifyClient:
    """Client for the site configured by ``NETLIFY_SITE_ID``."""

    def __init__(
        self,
        config: Settings = settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    @property
    def configured(self) -> bool:
        return self._config.provider_configured

    @property
    def site_id(self) -> str | None:
        return self._config.provider_site_id

    # ── Core request ──────────────────────────────────────────────────────

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.provider_api_url,
            headers={
                "Authorization": f"Bearer {self._config.provider_token}",
                "Content-Type": "application/json",
            },
            timeout=self._config.provider_timeout,
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        attempts: int | None = None,
    ) -> httpx.Response:
        if not self.configured:
            raise ProviderNotConfiguredError()

        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts or self._config.provider_max_attempts),
            wait=wait_exponential(multiplier=self._config.retry_backoff_seconds, max=10),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    async with self._http() as client:
                        response = await client.request(method, path, json=json)
        except httpx.TimeoutException as exc:
            logger.error("Netlify %s %s timed out: %s", method, path, exc)
            raise ProviderError("Hosting provider request timed out") from exc
        except httpx.HTTPError as exc:
            logger.error("Netlify %s %s failed: %s", method, path, exc)
            raise ProviderError(f"Hosting provider unreachable: {exc}") from exc
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        payload = _payload(response)
        message = None
        if isinstance(payload, dict):
            message = payload.get("message") or payload.get("error")
        raise ProviderError(
            message or f"Hosting provider returned HTTP {response.status_code}",
            payload=payload,
            status=response.status_code,
        )

    @staticmethod
    def _parse(model: type[ModelT], response: httpx.Response) -> ModelT:
        payload = _payload(response)
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            logger.error("Unexpected Netlify payload for %s: %s", model.__name__, payload)
            raise ProviderError(
                "Unexpected response from hosting provider", payload=payload
            ) from exc

    # ── Public methods ────────────────────────────────────────────────────

    async def get_site(self) -> NetlifySite:
        response = await self._request("GET", f"/sites/{self.site_id}")
        self._raise_for_status(response)
        return self._parse(NetlifySite, response)

    async def add_domain(self, hostname: str) -> NetlifyDomain:
        logger.info("Adding %s to Netlify site %s", hostname, self.site_id)
        response = await self._request(
            "POST", f"/sites/{self.site_id}/domains", json={"hostname": hostname}
        )
        self._raise_for_status(response)
        return self._parse(NetlifyDomain, response)

    async def remove_domain(self, hostname: str) -> None:
        """Delete *hostname* from the site. A 404 means it is already gone."""
        response = await self._request(
            "DELETE", f"/sites/{self.site_id}/domains/{hostname}", attempts=2
        )
        if response.status_code == 404:
            logger.info("Domain %s was not registered with Netlify", hostname)
            return
        self._raise_for_status(response)

    async def get_certificate_state(self, hostname: str) -> str | None:
        """Certificate state for *hostname*, or None if the site has none for it."""
        response = await self._request("GET", f"/sites/{self.site_id}/ssl")
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return self._parse(NetlifyCertificate, response).state_for(hostname)

    async def provision_certificate(self) -> None:
        response = await self._request("POST", f"/sites/{self.site_id}/ssl")
        self._raise_for_status(response)

    async def health(self) -> dict[str, Any]:
        if not self._config.provider_token:
            return {"connected": False, "reason": "missing_token"}
        if not self._config.provider_site_id:
            return {"connected": False, "reason": "missing_site_id"}
        try:
            response = await self._request("GET", f"/sites/{self.site_id}", attempts=1)
        except ProviderError as exc:
            logger.warning("Netlify health check failed: %s", exc.message)
            return {"connected": False, "reason": "api_error"}
        if response.status_code in (401, 403):
            return {"connected": False, "reason": "invalid_credentials"}
        if not response.is_success:
            return {"connected": False, "reason": "api_error"}
        try:
            site = self._parse(NetlifySite, response)
        except ProviderError:
            return {"connected": False, "reason": "api_error"}
        return {"connected": True, "site_name": site.name}
