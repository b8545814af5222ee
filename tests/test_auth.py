import pytest
from jose import JWTError

from gina.core.auth import (
    create_access_token,
    get_current_user,
    hash_password,
    verify_password,
    verify_token,
)


def test_password_hash_round_trip():
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("secret123", "not-a-hash")


def test_token_carries_user_id_and_email():
    token = create_access_token("user-1", "sam@example.com")

    user = verify_token(token)

    assert user.user_id == "user-1"
    assert user.email == "sam@example.com"


def test_tampered_token_is_rejected():
    token = create_access_token("user-1", "sam@example.com")

    with pytest.raises(JWTError):
        verify_token(token.rsplit(".", 1)[0] + ".bm90LWEtc2lnbmF0dXJl")


@pytest.mark.asyncio
async def test_bad_headers_resolve_to_anonymous():
    assert await get_current_user("") is None
    assert await get_current_user("Basic abc") is None
    assert await get_current_user("Bearer garbage") is None


@pytest.mark.asyncio
async def test_bearer_header_resolves_user():
    token = create_access_token("user-1", "sam@example.com")

    user = await get_current_user(f"Bearer {token}")

    assert user.user_id == "user-1"


@pytest.mark.asyncio
async def test_register_login_and_me(client):
    resp = await client.post("/auth/register", json={"email": "Sam@Example.com", "password": "secret123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "sam@example.com"

    resp = await client.post("/auth/login", json={"email": "sam@example.com", "password": "secret123"})
    assert resp.status_code == 200
    token = resp.json()["token"]

    resp = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "sam@example.com"


@pytest.mark.asyncio
async def test_register_validation(client):
    resp = await client.post("/auth/register", json={"email": "sam@example.com"})
    assert resp.status_code == 400

    await client.post("/auth/register", json={"email": "sam@example.com", "password": "secret123"})
    resp = await client.post("/auth/register", json={"email": "sam@example.com", "password": "other123"})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_login_with_wrong_password(client):
    await client.post("/auth/register", json={"email": "sam@example.com", "password": "secret123"})

    resp = await client.post("/auth/login", json={"email": "sam@example.com", "password": "nope"})

    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_token(client):
    resp = await client.get("/auth/me")

    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_update_username_and_password(client, auth_headers):
    resp = await client.put("/auth/username", json={"username": "S"}, headers=auth_headers)
    assert resp.status_code == 400

    resp = await client.put("/auth/username", json={"username": "Sammy"}, headers=auth_headers)
    assert resp.json()["user"]["username"] == "Sammy"

    resp = await client.put(
        "/auth/password",
        json={"currentPassword": "wrong", "newPassword": "newsecret"},
        headers=auth_headers,
    )
    assert resp.status_code == 401

    resp = await client.put(
        "/auth/password",
        json={"currentPassword": "secret123", "newPassword": "newsecret"},
        headers=auth_headers,
    )
    assert resp.status_code == 200

    resp = await client.post("/auth/login", json={"email": "sam@example.com", "password": "newsecret"})
    assert resp.status_code == 200
