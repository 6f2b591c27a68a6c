"""
Integration tests for authentication endpoints.
"""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

REGISTER_URL = "/api/v1/auth/register"
LOGIN_URL = "/api/v1/auth/login"


class TestRegister:
    """Tests for account registration."""

    async def test_register_returns_tokens(self, async_client: AsyncClient):
        response = await async_client.post(
            REGISTER_URL,
            json={"email": "New@Example.com", "password": "Sup3rSecret", "name": "Newbie"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["token_type"] == "bearer"
        assert data["expires_in"] > 0

        me = await async_client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["email"] == "new@example.com"
        assert me.json()["is_creator"] is False

    async def test_register_creator_with_price(self, async_client: AsyncClient):
        response = await async_client.post(
            REGISTER_URL,
            json={
                "email": "artist@example.com",
                "password": "Sup3rSecret",
                "is_creator": True,
                "subscription_price": "12.50",
            },
        )
        assert response.status_code == 201

        token = response.json()["access_token"]
        me = await async_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["is_creator"] is True
        assert me.json()["subscription_price"] == 12.5

    async def test_duplicate_email_conflicts(self, async_client: AsyncClient, creator_user):
        response = await async_client.post(
            REGISTER_URL,
            json={"email": "CREATOR@example.com", "password": "Sup3rSecret"},
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "Email already registered"

    @pytest.mark.parametrize("password", ["short1A", "alllowercase1", "ALLUPPER123", "NoDigitsHere"])
    async def test_weak_password_rejected(self, async_client: AsyncClient, password):
        response = await async_client.post(
            REGISTER_URL, json={"email": "weak@example.com", "password": password}
        )
        assert response.status_code == 422

    async def test_invalid_email_rejected(self, async_client: AsyncClient):
        response = await async_client.post(
            REGISTER_URL, json={"email": "not-an-email", "password": "Sup3rSecret"}
        )
        assert response.status_code == 422


class TestLogin:
    """Tests for login and token refresh."""

    async def test_login_success(self, async_client: AsyncClient, subscriber_user, account_password):
        response = await async_client.post(
            LOGIN_URL, json={"email": "fan@example.com", "password": account_password}
        )

        assert response.status_code == 200
        assert response.json()["access_token"]

    async def test_login_wrong_password(self, async_client: AsyncClient, subscriber_user):
        response = await async_client.post(
            LOGIN_URL, json={"email": "fan@example.com", "password": "WrongPass999"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    async def test_login_unknown_email(self, async_client: AsyncClient):
        response = await async_client.post(
            LOGIN_URL, json={"email": "ghost@example.com", "password": "Whatever123"}
        )
        assert response.status_code == 401

    async def test_login_inactive_account(self, async_client: AsyncClient, user_factory, account_password):
        await user_factory("sleeping@example.com", is_active=False)
        response = await async_client.post(
            LOGIN_URL, json={"email": "sleeping@example.com", "password": account_password}
        )
        assert response.status_code == 403

    async def test_refresh_issues_new_pair(
        self, async_client: AsyncClient, subscriber_user, account_password
    ):
        login = await async_client.post(
            LOGIN_URL, json={"email": "fan@example.com", "password": account_password}
        )
        refresh_token = login.json()["refresh_token"]

        response = await async_client.post(
            "/api/v1/auth/refresh", json={"refresh_token": refresh_token}
        )

        assert response.status_code == 200
        assert response.json()["access_token"]

    async def test_refresh_rejects_access_token(self, async_client: AsyncClient, subscriber_headers):
        access_token = subscriber_headers["Authorization"].split(" ", 1)[1]
        response = await async_client.post(
            "/api/v1/auth/refresh", json={"refresh_token": access_token}
        )
        assert response.status_code == 401


class TestCurrentUser:
    """Tests for bearer authentication."""

    async def test_me_requires_token(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/auth/me")
        assert response.status_code == 401

    async def test_me_rejects_garbage_token(self, async_client: AsyncClient):
        response = await async_client.get(
            "/api/v1/auth/me", headers={"Authorization": "Bearer not.a.token"}
        )
        assert response.status_code == 401

    async def test_me_rejects_inactive_account(
        self, async_client: AsyncClient, user_factory, auth_headers_for
    ):
        user = await user_factory("gone@example.com", is_active=False)
        response = await async_client.get("/api/v1/auth/me", headers=auth_headers_for(user))
        assert response.status_code == 403

    async def test_me_returns_profile(self, async_client: AsyncClient, creator_headers, creator_user):
        response = await async_client.get("/api/v1/auth/me", headers=creator_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == creator_user.id
        assert data["name"] == "Creator One"
        assert data["subscription_price"] == 9.99
        assert "password_hash" not in data
