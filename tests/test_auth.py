import pytest
from httpx import AsyncClient

from cafeshift.core.config import settings
from tests.conftest import PASSWORD, make_user, login_as


@pytest.mark.asyncio
async def test_login_sets_session_cookie(client: AsyncClient, employee):
    """Test user login."""
    response = await login_as(client, employee)

    assert settings.SESSION_COOKIE_NAME in response.cookies
    user = response.json()["user"]
    assert user["username"] == employee.username
    assert "password_hash" not in user
    assert "password" not in user


@pytest.mark.asyncio
async def test_login_with_wrong_password(client: AsyncClient, employee):
    response = await client.post(
        "/api/auth/login",
        json={"username": employee.username, "password": "wrong"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_inactive_user_cannot_login(client: AsyncClient, db, branch):
    user = await make_user(db, branch, "ivy", is_active=False)
    response = await client.post(
        "/api/auth/login",
        json={"username": user.username, "password": PASSWORD},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_session(client: AsyncClient):
    response = await client.get("/api/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_returns_current_user(client: AsyncClient, manager):
    await login_as(client, manager)
    response = await client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "manager"


@pytest.mark.asyncio
async def test_logout_revokes_session(client: AsyncClient, employee):
    response = await login_as(client, employee)
    token = response.cookies[settings.SESSION_COOKIE_NAME]

    logout = await client.post("/api/auth/logout")
    assert logout.status_code == 200

    client.cookies.set(settings.SESSION_COOKIE_NAME, token)
    reused = await client.get("/api/auth/me")
    assert reused.status_code == 401


@pytest.mark.asyncio
async def test_tampered_cookie_is_rejected(client: AsyncClient):
    client.cookies.set(settings.SESSION_COOKIE_NAME, "not-a-jwt")
    response = await client.get("/api/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_validation_errors_are_bad_request(client: AsyncClient):
    response = await client.post("/api/auth/login", json={"username": "someone"})
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Validation error"
    assert any(error["field"] == "password" for error in body["errors"])


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    for path in ("/health", "/api/health"):
        response = await client.get(path)
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
