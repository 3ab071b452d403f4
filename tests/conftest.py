"""Pytest configuration and fixtures.

Each test gets:
  - a fresh in-memory SQLite database (create_all)
  - fake hosting provider / DNS resolver served through httpx.MockTransport
  - an ASGI client with get_db and the provider clients overridden
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import domainflow.domain  # noqa: F401  (register all tables on Base.metadata)
from domainflow.core.config import Settings
from domainflow.db.base import Base, get_db
from domainflow.routers.deps import get_dns_resolver, get_netlify_client
from domainflow.services.dns_lookup import DohResolver
from domainflow.services.domain import DomainService
from domainflow.services.domain_store import DomainStore
from domainflow.services.netlify import NetlifyClient

API_URL = "https://api.netlify.test/api/v1"
DOH_URL = "https://dns.test/dns-query"
SITE_ID = "site-123"


def make_settings(**overrides) -> Settings:
    values = {
        "provider_token": None,
        "provider_site_id": None,
        "provider_api_url": API_URL,
        "dns_resolver_endpoint": DOH_URL,
        "retry_backoff_seconds": 0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# ---------------------------------------------------------------------------
# Fake providers
# ---------------------------------------------------------------------------

class FakeNetlify:
    """In-memory stand-in for the hosting provider API of one site."""

    def __init__(self) -> None:
        self.site = {"name": "brandhub", "default_domain": "brandhub.netlify.app"}
        self.domains: dict[str, dict] = {}
        self.cert_states: dict[str, str] = {}
        self.requests: list[tuple[str, str]] = []
        self.down = False
        self.site_status = 200
        self.add_error: tuple[int, dict] | None = None
        self.ssl_error: tuple[int, dict] | None = None
        self.delete_error: tuple[int, dict] | None = None
        self._next_id = 1000

    def calls(self, method: str) -> list[str]:
        return [path for m, path in self.requests if m == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api/v1")
        self.requests.append((request.method, path))
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)

        site = f"/sites/{SITE_ID}"
        if request.method == "GET" and path == site:
            if self.site_status != 200:
                return httpx.Response(self.site_status, json={"message": "Access Denied"})
            return httpx.Response(200, json=self.site)

        if request.method == "POST" and path == f"{site}/domains":
            if self.add_error:
                status, payload = self.add_error
                return httpx.Response(status, json=payload)
            hostname = json.loads(request.content)["hostname"]
            self._next_id += 1
            record = {
                "id": self._next_id,
                "hostname": hostname,
                "dns_records": [
                    {"type": "CNAME", "name": hostname.split(".")[0], "value": "brandhub.netlify.app"}
                ],
            }
            self.domains[hostname] = record
            return httpx.Response(201, json=record)

        if request.method == "DELETE" and path.startswith(f"{site}/domains/"):
            if self.delete_error:
                status, payload = self.delete_error
                return httpx.Response(status, json=payload)
            hostname = path.rsplit("/", 1)[-1]
            if self.domains.pop(hostname, None) is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(204)

        if request.method == "GET" and path == f"{site}/ssl":
            if self.ssl_error:
                status, payload = self.ssl_error
                return httpx.Response(status, json=payload)
            if not self.cert_states:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(
                200,
                json={
                    "state": "custom",
                    "domains": [
                        {"domain": host, "state": state}
                        for host, state in self.cert_states.items()
                    ],
                },
            )

        if request.method == "POST" and path == f"{site}/ssl":
            for hostname in self.domains:
                self.cert_states.setdefault(hostname, "pending")
            return httpx.Response(200, json={"state": "pending"})

        return httpx.Response(404, json={"message": "Not Found"})


class FakeDns:
    """DNS-over-HTTPS JSON resolver answering TXT queries from a dict."""

    def __init__(self) -> None:
        self.records: dict[str, list[str]] = {}
        self.queries: list[str] = []
        self.down = False
        self.status = 200
        self.malformed = False

    def publish(self, name: str, value: str) -> None:
        self.records.setdefault(name, []).append(value)

    def handler(self, request: httpx.Request) -> httpx.Response:
        name = request.url.params["name"]
        self.queries.append(name)
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)
        if self.status != 200:
            return httpx.Response(self.status, text="resolver unavailable")
        if self.malformed:
            return httpx.Response(200, text="<html>not json</html>")

        answers = [
            {"name": name, "type": 16, "TTL": 300, "data": f'"{value}"'}
            for value in self.records.get(name, [])
        ]
        if not answers:
            return httpx.Response(200, json={"Status": 3})
        return httpx.Response(200, json={"Status": 0, "Answer": answers})


# ---------------------------------------------------------------------------
# Providers and settings
# ---------------------------------------------------------------------------

@pytest.fixture
def netlify() -> FakeNetlify:
    return FakeNetlify()


@pytest.fixture
def dns() -> FakeDns:
    return FakeDns()


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def configured_settings() -> Settings:
    return make_settings(provider_token="test-token", provider_site_id=SITE_ID)


@pytest.fixture
def netlify_client(configured_settings, netlify) -> NetlifyClient:
    return NetlifyClient(configured_settings, transport=httpx.MockTransport(netlify.handler))


@pytest.fixture
def offline_client(test_settings, netlify) -> NetlifyClient:
    """No credentials: fallback and simulation paths."""
    return NetlifyClient(test_settings, transport=httpx.MockTransport(netlify.handler))


@pytest.fixture
def resolver(test_settings, dns) -> DohResolver:
    return DohResolver(test_settings, transport=httpx.MockTransport(dns.handler))


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session) -> DomainStore:
    return DomainStore(session)


@pytest.fixture
def service(session, offline_client, resolver, test_settings) -> DomainService:
    return DomainService(session, offline_client, resolver, test_settings)


@pytest.fixture
def live_service(session, netlify_client, resolver, configured_settings) -> DomainService:
    return DomainService(session, netlify_client, resolver, configured_settings)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture
def app(session_factory, offline_client, resolver):
    """The FastAPI app wired to the test database; hosting provider unconfigured."""
    from domainflow.main import app as fastapi_app

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    fastapi_app.dependency_overrides[get_netlify_client] = lambda: offline_client
    fastapi_app.dependency_overrides[get_dns_resolver] = lambda: resolver
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def use_provider(app):
    """Swap in a hosting provider client for the rest of the test."""

    def _use(client: NetlifyClient) -> None:
        app.dependency_overrides[get_netlify_client] = lambda: client

    return _use


@pytest.fixture
async def api(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
