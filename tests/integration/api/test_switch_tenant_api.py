from uuid import UUID

import pytest
import pytest_asyncio
from sqlmodel import select

from src.domain.entities import AuditEvent
from tests.utils.auth_flow import add_membership, add_tenant, bearer, sign_in


@pytest_asyncio.fixture
async def two_tenant_user(client, outbox, db_session, test_data):
    body = await sign_in(client, outbox, "ana@tribes.example")
    tenants = test_data.get_copy("tenants")
    memberships = test_data.get_copy("memberships")
    acme = await add_tenant(db_session, tenants["acme"])
    beta = await add_tenant(db_session, tenants["beta"])
    await add_membership(db_session, body["user_id"], acme, memberships["licensing_user"], order=0)
    await add_membership(db_session, body["user_id"], beta, memberships["dual_context_admin"], order=1)
    return {"headers": bearer(body["access_token"]), "user_id": body["user_id"], "acme": acme, "beta": beta}


@pytest.mark.asyncio
async def test_switch_uses_target_default_context(client, two_tenant_user, db_session):
    response = await client.post(
        "/tenants/switch",
        json={"tenant_id": two_tenant_user["beta"], "current_context": "licensing"},
        headers=two_tenant_user["headers"],
    )

    assert response.status_code == 200
    assert response.json() == {
        "tenant_id": two_tenant_user["beta"],
        "tenant_name": "Beta Licensing Group",
        "role": "tenant_admin",
        "allowed_contexts": ["licensing", "publishing"],
        "active_context": "publishing",
    }

    result = await db_session.exec(
        select(AuditEvent).where(AuditEvent.action == "tenant_switched")
    )
    event = result.one()
    assert event.tenant_id == UUID(two_tenant_user["beta"])
    assert event.event_metadata == {"context": "publishing"}


@pytest.mark.asyncio
async def test_switch_prefers_stored_context(client, two_tenant_user):
    response = await client.post(
        "/tenants/switch",
        json={"tenant_id": two_tenant_user["beta"], "stored_context": "licensing"},
        headers=two_tenant_user["headers"],
    )

    assert response.json()["active_context"] == "licensing"


@pytest.mark.asyncio
async def test_switch_becomes_next_default(client, two_tenant_user):
    headers = two_tenant_user["headers"]
    await client.post("/tenants/switch", json={"tenant_id": two_tenant_user["beta"]}, headers=headers)

    me = (await client.get("/me", headers=headers)).json()
    assert me["active_tenant_id"] == two_tenant_user["beta"]
    assert me["active_context"] == "publishing"

    await client.post("/tenants/switch", json={"tenant_id": two_tenant_user["acme"]}, headers=headers)

    me = (await client.get("/me", headers=headers)).json()
    assert me["active_tenant_id"] == two_tenant_user["acme"]
    assert me["active_context"] == "licensing"


@pytest.mark.asyncio
async def test_switch_requires_active_membership(client, two_tenant_user, db_session, test_data):
    gamma = await add_tenant(db_session, {"legal_name": "Gamma Rights", "slug": "gamma"})
    await add_membership(
        db_session, two_tenant_user["user_id"], gamma, test_data.item("memberships", "invited"), order=2
    )

    invited = await client.post(
        "/tenants/switch", json={"tenant_id": gamma}, headers=two_tenant_user["headers"]
    )
    unknown = await client.post(
        "/tenants/switch",
        json={"tenant_id": "00000000-0000-0000-0000-000000000000"},
        headers=two_tenant_user["headers"],
    )

    assert invited.status_code == 403
    assert invited.json()["error"]["code"] == "NOT_A_MEMBER"
    assert unknown.status_code == 403


@pytest.mark.asyncio
async def test_switch_rejects_malformed_tenant_id(client, two_tenant_user):
    response = await client.post(
        "/tenants/switch", json={"tenant_id": "beta"}, headers=two_tenant_user["headers"]
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TENANT_ID"
