import asyncio
import json
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from config import ApplicationConfig
from src.app.services.identity_provider import IdentityProviderError, IdentitySession
from src.app.services.session_store import SessionStore
from src.domain.entities import (
    AccessState,
    MembershipRole,
    MembershipStatus,
    PortalContext,
    ProfileStatus,
    TenantMembership,
    UserProfile,
)


@pytest.fixture
def provider():
    provider = MagicMock()
    provider.get_session = AsyncMock(return_value=None)
    provider.on_auth_state_change = MagicMock(return_value=MagicMock())
    provider.sign_in_with_otp = AsyncMock()
    provider.verify_otp = AsyncMock()
    provider.sign_out = AsyncMock()
    return provider


@pytest.fixture
def audit_logger():
    audit_logger = MagicMock()
    audit_logger.emit = AsyncMock(return_value=True)
    return audit_logger


@pytest.fixture
def store(provider, uow_factory, local_store, audit_logger):
    return SessionStore(provider, uow_factory, local_store, audit_logger=audit_logger)


def make_profile(user_id, **kwargs) -> UserProfile:
    return UserProfile(id=user_id, email=f"{user_id.hex[:8]}@example.com", status=ProfileStatus.active, **kwargs)


def make_membership(user_id, contexts, default_context=None, status=MembershipStatus.active):
    return TenantMembership(
        user_id=user_id,
        tenant_id=uuid4(),
        role=MembershipRole.tenant_user,
        status=status,
        allowed_contexts=list(contexts),
        default_context=default_context,
    )


def session_for(user_id) -> IdentitySession:
    return IdentitySession(user_id=user_id, email="user@example.com", access_token="token")


@pytest.mark.asyncio
async def test_initialize_without_session(store):
    assert store.access_state == AccessState.loading

    await store.initialize()

    assert store.access_state == AccessState.unauthenticated
    assert store.loading is False


@pytest.mark.asyncio
async def test_initialize_loads_identity_and_selection(store, provider, mock_uow, local_store):
    user_id = uuid4()
    tenant_a = make_membership(user_id, ["licensing"])
    tenant_b = make_membership(user_id, ["licensing", "publishing"], PortalContext.publishing)
    invited = make_membership(user_id, ["licensing"], status=MembershipStatus.invited)
    provider.get_session.return_value = session_for(user_id)
    mock_uow.profiles.get_by_id.return_value = make_profile(user_id)
    mock_uow.memberships.get_by_user_id.return_value = [tenant_a, tenant_b, invited]
    local_store.set(ApplicationConfig.ACTIVE_TENANT_KEY, str(tenant_b.tenant_id))

    await store.initialize()

    assert store.access_state == AccessState.active
    assert [m.tenant_id for m in store.tenant_memberships] == [tenant_a.tenant_id, tenant_b.tenant_id]
    assert len(store.all_memberships) == 3
    assert store.active_tenant.tenant_id == tenant_b.tenant_id
    assert store.active_context == PortalContext.publishing
    provider.on_auth_state_change.assert_called_once()


@pytest.mark.asyncio
async def test_failed_profile_fetch_yields_no_profile(store, provider, mock_uow):
    user_id = uuid4()
    provider.get_session.return_value = session_for(user_id)
    mock_uow.profiles.get_by_id.side_effect = RuntimeError("database unavailable")
    mock_uow.memberships.get_by_user_id.return_value = []

    await store.initialize()

    assert store.access_state == AccessState.no_profile


@pytest.mark.asyncio
async def test_load_finishing_after_sign_out_is_discarded(store, mock_uow):
    user_id = uuid4()
    gate = asyncio.Event()

    async def slow_profile(_):
        await gate.wait()
        return make_profile(user_id)

    mock_uow.profiles.get_by_id.side_effect = slow_profile
    mock_uow.memberships.get_by_user_id.return_value = [make_membership(user_id, ["licensing"])]

    store.user_id = user_id
    load = asyncio.create_task(store.load_identity(user_id))
    await asyncio.sleep(0)
    await store.sign_out()
    gate.set()

    assert await load is False
    assert store.profile is None
    assert store.tenant_memberships == []
    assert store.access_state == AccessState.unauthenticated


@pytest.mark.asyncio
async def test_newer_load_supersedes_older_one(store, mock_uow):
    first_user, second_user = uuid4(), uuid4()
    gate = asyncio.Event()

    async def profile_for(user_id):
        if user_id == first_user:
            await gate.wait()
        return make_profile(user_id)

    mock_uow.profiles.get_by_id.side_effect = profile_for
    mock_uow.memberships.get_by_user_id.return_value = []

    store.user_id = first_user
    first_load = asyncio.create_task(store.load_identity(first_user))
    await asyncio.sleep(0)

    store.user_id = second_user
    assert await store.load_identity(second_user) is True
    gate.set()

    assert await first_load is False
    assert store.profile.id == second_user


@pytest.mark.asyncio
async def test_sign_out_clears_local_state_even_when_provider_fails(store, provider, mock_uow, local_store):
    user_id = uuid4()
    tenant = make_membership(user_id, ["licensing", "publishing"])
    provider.get_session.return_value = session_for(user_id)
    provider.sign_out.side_effect = IdentityProviderError("network down")
    mock_uow.profiles.get_by_id.return_value = make_profile(user_id)
    mock_uow.memberships.get_by_user_id.return_value = [tenant]
    await store.initialize()

    await store.sign_out()

    assert store.session is None
    assert store.user_id is None
    assert store.active_tenant is None
    assert store.access_state == AccessState.unauthenticated
    assert local_store.get(ApplicationConfig.ACTIVE_TENANT_KEY) is None
    preferences = json.loads(local_store.get(ApplicationConfig.CONTEXT_BY_TENANT_KEY))
    assert preferences == {str(tenant.tenant_id): "licensing"}


@pytest.mark.asyncio
async def test_switch_tenant_resolves_context_and_audits(store, provider, mock_uow, local_store, audit_logger):
    user_id = uuid4()
    tenant_a = make_membership(user_id, ["licensing"])
    tenant_b = make_membership(user_id, ["licensing", "publishing"], PortalContext.publishing)
    provider.get_session.return_value = session_for(user_id)
    mock_uow.profiles.get_by_id.return_value = make_profile(user_id)
    mock_uow.memberships.get_by_user_id.return_value = [tenant_a, tenant_b]
    await store.initialize()
    assert store.active_tenant.tenant_id == tenant_a.tenant_id
    assert store.active_context == PortalContext.licensing

    assert await store.switch_tenant(tenant_b.tenant_id)

    assert store.active_tenant.tenant_id == tenant_b.tenant_id
    assert store.active_context == PortalContext.publishing
    assert local_store.get(ApplicationConfig.ACTIVE_TENANT_KEY) == str(tenant_b.tenant_id)
    audit_logger.emit.assert_awaited_once()
    assert audit_logger.emit.await_args.args[0] == "tenant_switched"

    assert await store.switch_tenant(uuid4()) is False
    assert store.active_tenant.tenant_id == tenant_b.tenant_id


@pytest.mark.asyncio
async def test_set_active_context_only_within_allowed(store, provider, mock_uow, local_store):
    user_id = uuid4()
    tenant = make_membership(user_id, ["licensing"])
    provider.get_session.return_value = session_for(user_id)
    mock_uow.profiles.get_by_id.return_value = make_profile(user_id)
    mock_uow.memberships.get_by_user_id.return_value = [tenant]
    await store.initialize()

    assert store.set_active_context(PortalContext.publishing) is False
    assert store.set_active_context("archive") is False
    assert store.set_active_context(PortalContext.licensing) is True


@pytest.mark.asyncio
async def test_sign_in_errors_are_generic(store, provider):
    provider.sign_in_with_otp.side_effect = IdentityProviderError("smtp relay refused")
    provider.verify_otp.side_effect = IdentityProviderError("nonce reused")

    started = await store.sign_in_with_magic_link("user@example.com")
    completed = await store.complete_sign_in("token")

    assert started.error.code == "AUTH_FAILED"
    assert completed.error.code == "AUTH_FAILED"
    assert "smtp" not in started.error.message
