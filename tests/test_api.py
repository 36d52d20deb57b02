import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from app import app
from core.get_db import get_db_async
from core.validators import create_access_token
from models.enums import UserRole


@pytest.fixture
async def client(db):
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db_async] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


def auth(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_anonymous_submit_gets_login_message(client, make_user, make_property):
    owner = await make_user(role=UserRole.OWNER)
    prop = await make_property(owner)

    response = await client.post(
        "/v1/applications/submit", json={"property_id": str(prop.id)}
    )

    assert response.status_code == 403
    body = response.json()
    assert body["code"] == "VERIFICATION_REQUIRED"
    assert body["error"] == "Please login to apply for properties"


async def test_blocked_delete_returns_conflict(
    client, make_user, make_property, make_bill
):
    owner = await make_user(role=UserRole.OWNER)
    renter = await make_user()
    prop = await make_property(owner, title="Dock House")
    await make_bill(prop, renter)

    response = await client.delete(
        f"/v1/properties/{prop.id}/delete", headers=auth(owner)
    )

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "PROPERTY_DELETE_BLOCKED"
    assert body["details"]["bills_count"] == 1
    assert "Bills: 1" in body["error"]


async def test_deactivated_account_is_rejected(client, make_user):
    user = await make_user(inactive=1)

    response = await client.get("/v1/accounts/me", headers=auth(user))

    assert response.status_code == 403
    assert response.json()["detail"] == "This account has been deactivated."


async def test_missing_token_is_unauthorized(client):
    response = await client.get("/v1/bills/")
    assert response.status_code == 401


async def test_unknown_user_token(client):
    response = await client.get(
        "/v1/accounts/me",
        headers={"Authorization": f"Bearer {create_access_token(uuid.uuid4())}"},
    )
    assert response.status_code == 404
