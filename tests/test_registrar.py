"""Host registration and deregistration."""

import pytest

from domainflow.core.exceptions import HostRegistrationError, NotFoundError, PreconditionError
from domainflow.core.pagination import PaginationParams
from domainflow.domain.lifecycle import DomainEventType
from domainflow.schemas.domain import DomainCreate, DomainTarget
from domainflow.services.domain_store import DomainStore
from domainflow.services.registrar import HostRegistrar

PAGE = PaginationParams(page=1, limit=100, order="asc")


async def _create(svc, hostname="app.example.com"):
    return await svc.create_domain(DomainCreate(brand_id="brand-1", hostname=hostname))


@pytest.mark.asyncio
class TestRegistration:
    async def test_registers_with_provider(self, live_service, netlify):
        domain = await _create(live_service)
        result = await live_service.register(DomainTarget(domain_id=domain.id))

        assert result.simulated is False
        assert result.status == "verifying"
        assert result.provider_domain_id == "1001"
        assert result.dns_records[0]["type"] == "CNAME"
        # The attachment made before the write is undone
        assert "app.example.com" not in netlify.domains
        assert len(netlify.calls("DELETE")) == 1

        events, _ = await live_service.list_events(domain.id, PAGE)
        assert events[-1].event_type == "netlify_added"
        assert events[-1].details["provider_domain_id"] == "1001"

    async def test_brand_id_targets_the_primary_domain(self, live_service):
        domain = await _create(live_service)
        result = await live_service.register(DomainTarget(brand_id="brand-1"))
        assert result.domain_id == domain.id

    async def test_second_call_does_not_register_again(self, live_service, netlify):
        domain = await _create(live_service)
        await live_service.register(DomainTarget(domain_id=domain.id))
        again = await live_service.register(DomainTarget(domain_id=domain.id))
        assert again.provider_domain_id == "1001"
        assert len(netlify.calls("POST")) == 1

    async def test_provider_rejection_fails_the_domain(self, live_service, netlify):
        netlify.add_error = (422, {"code": 422, "message": "Domain is already taken by another site"})
        domain = await _create(live_service)

        with pytest.raises(HostRegistrationError) as exc_info:
            await live_service.register(DomainTarget(domain_id=domain.id))
        assert exc_info.value.status_code == 502

        refreshed = await live_service.get_domain(domain.id)
        assert refreshed.status == "failed"
        assert refreshed.error_message == "Domain is already taken by another site"
        assert refreshed.provider_domain_id is None

        events, _ = await live_service.list_events(domain.id, PAGE)
        error = events[-1]
        assert error.event_type == "error"
        assert error.details["stage"] == "registration"
        assert error.details["provider_error"] == {"code": 422, "message": "Domain is already taken by another site"}

    async def test_failed_registration_can_be_retried(self, live_service, netlify):
        netlify.add_error = (500, {"message": "temporarily unavailable"})
        domain = await _create(live_service)
        with pytest.raises(HostRegistrationError):
            await live_service.register(DomainTarget(domain_id=domain.id))

        netlify.add_error = None
        result = await live_service.register(DomainTarget(domain_id=domain.id))
        assert result.status == "verifying"
        assert (await live_service.get_domain(domain.id)).error_message is None

    async def test_simulated_without_credentials(self, service, netlify):
        domain = await _create(service)
        result = await service.register(DomainTarget(domain_id=domain.id))

        assert result.simulated is True
        assert result.provider_domain_id.startswith("simulated_")
        assert [r["type"] for r in result.dns_records] == ["CNAME", "TXT"]
        assert netlify.requests == []

    async def test_active_domain_cannot_be_registered(self, service, store):
        domain = await _create(service)
        for event in (
            DomainEventType.VERIFICATION_STARTED,
            DomainEventType.DNS_VERIFIED,
            DomainEventType.SSL_PROVISIONING,
            DomainEventType.ACTIVATED,
        ):
            domain = await store.apply(domain, event)
        with pytest.raises(PreconditionError):
            await service.register(DomainTarget(domain_id=domain.id))

    async def test_status_change_during_registration_keeps_provider_id(
        self, live_service, store, session, netlify
    ):
        domain = await _create(live_service)
        # A verify poll moves the row while the provider call is in flight
        assert await store.domains.update_if_status(domain.id, "pending", status="verifying")
        await session.commit()

        result = await live_service.register(DomainTarget(domain_id=domain.id))
        assert result.provider_domain_id == "1001"
        assert result.status == "verifying"

        stored = await store.reload(domain)
        assert stored.provider_domain_id == "1001"
        assert stored.dns_records[0]["type"] == "CNAME"
        assert len(netlify.calls("POST")) == 1
        events, _ = await live_service.list_events(domain.id, PAGE)
        assert events[-1].event_type == "netlify_added"
        assert events[-1].details["from_status"] == "verifying"

        again = await live_service.register(DomainTarget(domain_id=domain.id))
        assert again.provider_domain_id == "1001"
        assert len(netlify.calls("POST")) == 1

    async def test_domain_removed_during_registration_is_not_found(
        self, store, netlify_client, configured_settings, session_factory, netlify
    ):
        domain = await store.create(
            brand_id="brand-1",
            hostname="app.example.com",
            verification_token="dfv_token",
            is_primary=True,
        )
        async with session_factory() as other:
            other_store = DomainStore(other)
            await other_store.remove(await other_store.get(domain.id))

        registrar = HostRegistrar(store, netlify_client, configured_settings)
        with pytest.raises(NotFoundError):
            await registrar.register(domain)
        # The attachment made before the write is undone
        assert "app.example.com" not in netlify.domains
        assert len(netlify.calls("DELETE")) == 1


@pytest.mark.asyncio
class TestRemoval:
    async def test_removes_from_provider_and_locally(self, live_service, netlify):
        domain = await _create(live_service)
        await live_service.register(DomainTarget(domain_id=domain.id))

        result = await live_service.remove(DomainTarget(domain_id=domain.id))
        assert result.success is True
        assert result.provider_removed is True
        assert "app.example.com" not in netlify.domains
        assert (await live_service.list_domains(PAGE))[1] == 0

    async def test_never_registered_counts_as_removed(self, live_service):
        domain = await _create(live_service)
        result = await live_service.remove(DomainTarget(domain_id=domain.id))
        assert result.provider_removed is True
        assert result.provider_error is None

    async def test_provider_failure_does_not_block_local_removal(self, live_service, netlify):
        netlify.delete_error = (500, {"message": "internal error"})
        domain = await _create(live_service)

        result = await live_service.remove(DomainTarget(domain_id=domain.id))
        assert result.success is True
        assert result.provider_removed is False
        assert result.provider_error == "internal error"
        assert len(netlify.calls("DELETE")) == 1

        events, _ = await live_service.list_events(domain.id, PAGE)
        assert events[-1].event_type == "removed"
        assert events[-1].details["provider_error"] == "internal error"
