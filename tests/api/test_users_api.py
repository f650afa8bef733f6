"""Tests for registration, login and health endpoints."""

import pytest

from tests.utils import TEST_PASSWORD, create_test_user


@pytest.mark.api
class TestUserEndpoints:

    @pytest.mark.asyncio
    async def test_register(self, client):
        response = await client.post(
            "/user",
            json={"email": "new@example.com", "password": "hunter22", "name": "New"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "new@example.com"
        assert body["name"] == "New"
        assert "password" not in body
        assert "password_hash" not in body

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client):
        payload = {"email": "twice@example.com", "password": "hunter22"}
        assert (await client.post("/user", json=payload)).status_code == 201

        response = await client.post("/user", json=payload)

        assert response.status_code == 409
        assert response.json()["detail"] == "E-mail já está sendo usado"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"email": "not-an-email", "password": "hunter22"},
        {"email": "short@example.com", "password": "12345"},
        {"email": "long@example.com", "password": "x" * 51},
        {"email": "a" * 140 + "@example.com", "password": "hunter22"},
        {"email": "name@example.com", "password": "hunter22", "name": "n" * 101},
    ])
    async def test_register_validation(self, client, payload):
        response = await client.post("/user", json=payload)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_login_and_use_token(self, client, test_db):
        await create_test_user(test_db, email="login@example.com")
        await test_db.commit()

        response = await client.post(
            "/auth/login", json={"email": "login@example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        token = response.json()
        assert token["token_type"] == "bearer"
        assert token["expires_at"]

        listing = await client.get(
            "/link", headers={"Authorization": f"Bearer {token['access_token']}"}
        )
        assert listing.status_code == 200
        assert listing.json() == []

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client, test_db):
        await create_test_user(test_db, email="login@example.com")
        await test_db.commit()

        response = await client.post(
            "/auth/login", json={"email": "login@example.com", "password": "wrong-one"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Credenciais inválidas."

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, client):
        response = await client.post(
            "/auth/login", json={"email": "ghost@example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 401


@pytest.mark.api
class TestHealthEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["components"]["database"]["status"] == "healthy"
        assert body["components"]["redis"]["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_ready(self, client):
        response = await client.get("/health/ready")

        assert response.json() == {
            "ready": True,
            "components": {"api": True, "database": True, "redis": True},
        }

    @pytest.mark.asyncio
    async def test_live(self, client):
        response = await client.get("/health/live")

        assert response.json() == {"alive": True}
