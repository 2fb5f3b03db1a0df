import pytest

from blade.config import settings


pytestmark = pytest.mark.asyncio


async def sign_in(client, assertion: str):
    return await client.post("/api/v1/auth/signin", json={"assertion": assertion})


async def test_sign_in_creates_user_and_sets_cookie(client, make_assertion):
    resp = await sign_in(client, make_assertion("Writer@Example.com", name="Writer", picture="https://img/w.png"))
    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "writer@example.com"
    assert body["data"]["user"]["image"] == "https://img/w.png"
    assert "sessionToken" in body["data"]
    assert settings.session_cookie_name in resp.cookies

    # Cookie set by sign-in authenticates the next call
    me_resp = await client.get("/api/v1/auth/me")
    assert me_resp.status_code == 200
    assert me_resp.json()["data"]["id"] == body["data"]["user"]["id"]


async def test_second_sign_in_reuses_user(client, make_assertion):
    first = await sign_in(client, make_assertion("same@example.com", name="Before"))
    second = await sign_in(client, make_assertion("same@example.com", name="After"))
    assert first.json()["data"]["user"]["id"] == second.json()["data"]["user"]["id"]
    assert second.json()["data"]["user"]["name"] == "After"


async def test_sign_in_rejects_bad_assertion(client, make_assertion):
    forged = await sign_in(client, make_assertion("x@example.com", secret="not-the-idp"))
    assert forged.status_code == 401
    assert forged.json()["detail"]["code"] == "AUTH_INVALID_ASSERTION"

    no_email = await sign_in(client, make_assertion(None, name="Anon"))
    assert no_email.status_code == 401


async def test_me_with_header_and_logout(client, create_user, session_headers):
    user = await create_user(email="hdr@example.com")
    me_resp = await client.get("/api/v1/auth/me", headers=session_headers(user))
    assert me_resp.status_code == 200
    assert me_resp.json()["data"]["email"] == "hdr@example.com"

    logout_resp = await client.post("/api/v1/auth/logout")
    assert logout_resp.status_code == 200
    assert logout_resp.json()["success"] is True


async def test_auth_requires_session(client):
    unauth_me = await client.get("/api/v1/auth/me")
    assert unauth_me.status_code == 401
    assert unauth_me.json()["detail"]["code"] == "AUTH_REQUIRED"

    bad_session = await client.get("/api/v1/auth/me", headers={"X-Session-Token": "nope"})
    assert bad_session.status_code == 401


async def test_account_role_update(client, create_user, session_headers):
    user = await create_user()
    headers = session_headers(user)

    set_resp = await client.patch("/api/v1/account/role", json={"role": "developer"}, headers=headers)
    assert set_resp.status_code == 200
    assert set_resp.json()["data"]["role"] == "developer"

    bad_resp = await client.patch("/api/v1/account/role", json={"role": "admin"}, headers=headers)
    assert bad_resp.status_code == 400
    assert bad_resp.json()["detail"]["code"] == "INVALID_ROLE"

    clear_resp = await client.patch("/api/v1/account/role", json={"role": ""}, headers=headers)
    assert clear_resp.status_code == 200
    assert clear_resp.json()["data"]["role"] is None


async def test_healthz(client):
    resp = await client.get("/healthz")
    assert resp.json() == {"ok": True}
