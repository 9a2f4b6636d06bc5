"""
Tests for authentication endpoints: signup, login, token refresh, logout
and bearer-token checks.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.core.security import create_access_token, create_refresh_token
from conftest import TEST_PASSWORD


def signup_payload(**overrides) -> dict:
    data = {
        "first_name": "Nina",
        "last_name": "Novak",
        "email": "New@Example.com",
        "password": "securepassword123",
        "phone": "+1-555-0199",
        "date_of_birth": "1993-04-12",
        "gender": "female",
        "address": {
            "street": "9 Harbour Road",
            "city": "Vancouver",
            "state": "BC",
            "country": "Canada",
            "zip_code": "V6B 1A1",
        },
    }
    data.update(overrides)
    return data


async def login(client: AsyncClient, email: str = "test@example.com", password: str = TEST_PASSWORD):
    return await client.post("/api/v1/auth/login", json={"email": email, "password": password})


@pytest.mark.asyncio
async def test_signup(client: AsyncClient):
    """Successful signup returns the user and a token pair."""
    response = await client.post("/api/v1/auth/signup", json=signup_payload())
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "User registered successfully"
    assert data["user"]["email"] == "new@example.com"
    assert data["user"]["address"]["city"] == "Vancouver"
    assert "hashed_password" not in data["user"]  # Never expose password hash
    assert data["tokens"]["token_type"] == "bearer"
    assert data["tokens"]["expires_in"] == 15 * 60


@pytest.mark.asyncio
async def test_signup_duplicate_email(client: AsyncClient, test_user):
    """Duplicate email returns 409, regardless of case."""
    response = await client.post("/api/v1/auth/signup", json=signup_payload(email="TEST@example.com"))
    assert response.status_code == 409
    assert response.json()["detail"] == "User with this email already exists"


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [
    {"password": "short"},
    {"email": "not-an-email"},
    {"date_of_birth": "2999-01-01"},
    {"gender": "robot"},
    {"phone": "call me"},
    {"first_name": "N"},
])
async def test_signup_validation(client: AsyncClient, overrides: dict):
    response = await client.post("/api/v1/auth/signup", json=signup_payload(**overrides))
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, test_user):
    """Valid credentials return a JWT pair."""
    response = await login(client)
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["user"]["id"] == test_user.id
    assert data["tokens"]["access_token"]
    assert data["tokens"]["refresh_token"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    response = await login(client, password="wrongpassword")
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_nonexistent_email(client: AsyncClient):
    response = await login(client, email="nobody@example.com")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_deactivated_account(client: AsyncClient, test_user, db_session):
    test_user.is_active = False
    await db_session.commit()

    response = await login(client)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_access_token_works_on_protected_route(client: AsyncClient, test_user):
    tokens = (await login(client)).json()["tokens"]
    response = await client.get(
        "/api/v1/user/profile", headers={"Authorization": f"Bearer {tokens['access_token']}"}
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_refresh_rotates_tokens(client: AsyncClient, test_user):
    old = (await login(client)).json()["tokens"]

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": old["refresh_token"]})
    assert response.status_code == 200
    new = response.json()["tokens"]
    assert new["refresh_token"] != old["refresh_token"]

    # The superseded refresh token is no longer accepted
    replay = await client.post("/api/v1/auth/refresh", json={"refresh_token": old["refresh_token"]})
    assert replay.status_code == 401


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client: AsyncClient, test_user):
    tokens = (await login(client)).json()["tokens"]
    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid refresh token"


@pytest.mark.asyncio
async def test_refresh_rejects_expired_token(client: AsyncClient, test_user):
    expired = create_refresh_token({"sub": str(test_user.id)}, expires_delta=timedelta(seconds=-10))
    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": expired})
    assert response.status_code == 401
    assert response.json()["detail"] == "Refresh token has expired"


@pytest.mark.asyncio
async def test_logout_invalidates_refresh_token(client: AsyncClient, test_user):
    tokens = (await login(client)).json()["tokens"]

    response = await client.post("/api/v1/auth/logout", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}

    again = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert again.status_code == 401


@pytest.mark.asyncio
async def test_missing_token(client: AsyncClient):
    response = await client.get("/api/v1/user/profile")
    assert response.status_code == 401
    assert response.json()["detail"] == "Access token is required"
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_expired_access_token(client: AsyncClient, test_user):
    token = create_access_token({"sub": str(test_user.id)}, expires_delta=timedelta(seconds=-10))
    response = await client.get("/api/v1/user/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Access token has expired"


@pytest.mark.asyncio
async def test_refresh_token_rejected_as_access_token(client: AsyncClient, test_user):
    token = create_refresh_token({"sub": str(test_user.id)})
    response = await client.get("/api/v1/user/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid access token"


@pytest.mark.asyncio
async def test_token_for_deleted_user(client: AsyncClient):
    token = create_access_token({"sub": "4242"})
    response = await client.get("/api/v1/user/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token - user not found"
