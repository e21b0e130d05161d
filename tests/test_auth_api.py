import pytest

from tests.conftest import ADMIN_EMAIL, PASSWORD, auth_headers, default_options
from waitlist_service.core.security import create_refresh_token

AUTH_URL = "/api/v1/auth"
ADMIN_URL = "/api/v1/admin/waitlist"


@pytest.mark.asyncio
async def test_register_login_and_me(client):
    r = await client.post(
        f"{AUTH_URL}/register",
        json={"email": "New.User@test.com", "password": PASSWORD, "full_name": "New User"},
    )
    assert r.status_code == 201
    assert r.json()["email"] == "new.user@test.com"
    assert r.json()["role"] == "user"

    login = await client.post(f"{AUTH_URL}/login", json={"email": "new.user@test.com", "password": PASSWORD})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = await client.get(f"{AUTH_URL}/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "new.user@test.com"


@pytest.mark.asyncio
async def test_register_duplicate_email(client, regular_user):
    r = await client.post(f"{AUTH_URL}/register", json={"email": regular_user.email, "password": PASSWORD})
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_login_with_wrong_password(client, regular_user):
    r = await client.post(f"{AUTH_URL}/login", json={"email": regular_user.email, "password": "wrong-password"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_token(client):
    r = await client.get(f"{AUTH_URL}/me")
    assert r.status_code == 401
    assert r.json()["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_refresh_token_is_not_an_access_token(client, regular_user):
    refresh = create_refresh_token(regular_user.email, regular_user.role.value)
    r = await client.get(f"{AUTH_URL}/me", headers={"Authorization": f"Bearer {refresh}"})
    assert r.status_code == 401

    renewed = await client.post(f"{AUTH_URL}/refresh", json={"refresh_token": refresh})
    assert renewed.status_code == 200
    assert renewed.json()["access_token"]


@pytest.mark.asyncio
async def test_admin_token_manages_waitlist(client, admin_user):
    login = await client.post(f"{AUTH_URL}/login", json={"email": ADMIN_EMAIL, "password": PASSWORD})
    token = login.json()["access_token"]
    r = await client.get(ADMIN_URL, headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200


# ── sign-in / sign-up gated by the waitlist ───────────────────────────────────

@pytest.fixture()
def gated_client(make_client):
    return make_client(default_options(disable_sign_in_and_sign_up=True))


@pytest.mark.asyncio
async def test_gated_register_requires_approved_entry(gated_client, admin_user):
    body = {"email": "gated@test.com", "password": PASSWORD}
    r = await gated_client.post(f"{AUTH_URL}/register", json=body)
    assert r.status_code == 403
    assert r.json()["code"] == "WAITLIST_APPROVAL_REQUIRED"

    joined = await gated_client.post("/api/v1/waitlist", json={"email": "gated@test.com", "name": "Gated"})
    entry_id = joined.json()["id"]

    still_pending = await gated_client.post(f"{AUTH_URL}/register", json=body)
    assert still_pending.status_code == 403

    await gated_client.patch(f"{ADMIN_URL}/{entry_id}/approve", headers=auth_headers(admin_user))
    approved = await gated_client.post(f"{AUTH_URL}/register", json=body)
    assert approved.status_code == 201


@pytest.mark.asyncio
async def test_gated_login(gated_client, admin_user, regular_user):
    admin_login = await gated_client.post(f"{AUTH_URL}/login", json={"email": ADMIN_EMAIL, "password": PASSWORD})
    assert admin_login.status_code == 200

    member_login = await gated_client.post(
        f"{AUTH_URL}/login", json={"email": regular_user.email, "password": PASSWORD},
    )
    assert member_login.status_code == 403
    assert member_login.json()["code"] == "WAITLIST_APPROVAL_REQUIRED"


@pytest.mark.asyncio
async def test_sign_in_not_gated_when_waitlist_disabled(make_client, regular_user):
    client = make_client(default_options(enabled=False, disable_sign_in_and_sign_up=True))
    r = await client.post(f"{AUTH_URL}/login", json={"email": regular_user.email, "password": PASSWORD})
    assert r.status_code == 200
