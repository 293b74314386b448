"""
Test suite for the admin login endpoints.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from storefront.main import app

CREDENTIALS = {"username": "admin", "password": "correct-horse-battery"}
WRONG = {"username": "admin", "password": "wrong"}


class TestAdminLogin:
    """Tests for POST /api/admin/login."""

    @pytest.mark.asyncio
    async def test_login_success(self, async_client):
        response = await async_client.post("/api/admin/login", json=CREDENTIALS)

        assert response.status_code == 200
        data = response.json()
        assert data["tokenType"] == "bearer"
        assert data["expiresIn"] > 0

        orders = await async_client.get(
            "/api/orders", headers={"Authorization": f"Bearer {data['accessToken']}"}
        )
        assert orders.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "credentials",
        [WRONG, {"username": "root", "password": "correct-horse-battery"}],
    )
    async def test_invalid_credentials(self, async_client, credentials):
        response = await async_client.post("/api/admin/login", json=credentials)

        assert response.status_code == 401
        assert response.json()["detail"] == {
            "message": "Invalid credentials",
            "code": "INVALID_CREDENTIALS",
        }

    @pytest.mark.asyncio
    async def test_missing_fields(self, async_client):
        response = await async_client.post("/api/admin/login", json={"username": "admin"})

        assert response.status_code == 400
        assert "password" in response.json()["detail"]["errors"]["fieldErrors"]

    @pytest.mark.asyncio
    async def test_blocked_after_five_failures(self, async_client):
        for _ in range(5):
            response = await async_client.post("/api/admin/login", json=WRONG)
            assert response.status_code == 401

        response = await async_client.post("/api/admin/login", json=CREDENTIALS)

        assert response.status_code == 429
        assert response.json()["detail"]["code"] == "RATE_LIMITED"
        assert int(response.headers["Retry-After"]) > 0

    @pytest.mark.asyncio
    async def test_block_is_per_caller(self, async_client):
        """A caller connecting from another address is not affected."""
        for _ in range(5):
            await async_client.post("/api/admin/login", json=WRONG)

        transport = ASGITransport(app=app, client=("203.0.113.8", 40000))
        async with AsyncClient(transport=transport, base_url="http://test") as other:
            response = await other.post("/api/admin/login", json=CREDENTIALS)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_forwarded_header_does_not_reset_throttle(self, async_client):
        """Rotating X-Forwarded-For values still counts against one caller."""
        statuses = []
        for i in range(8):
            response = await async_client.post(
                "/api/admin/login",
                json=WRONG,
                headers={"X-Forwarded-For": f"10.0.0.{i}"},
            )
            statuses.append(response.status_code)

        assert statuses[:5] == [401] * 5
        assert statuses[5:] == [429] * 3

    @pytest.mark.asyncio
    async def test_success_resets_failures(self, async_client):
        for _ in range(4):
            await async_client.post("/api/admin/login", json=WRONG)
        assert (await async_client.post("/api/admin/login", json=CREDENTIALS)).status_code == 200

        for _ in range(4):
            await async_client.post("/api/admin/login", json=WRONG)
        response = await async_client.post("/api/admin/login", json=CREDENTIALS)

        assert response.status_code == 200


class TestAdminSession:
    """Tests for GET /api/admin/session and POST /api/admin/logout."""

    @pytest.mark.asyncio
    async def test_anonymous(self, async_client):
        response = await async_client.get("/api/admin/session")

        assert response.json() == {"isAdmin": False}

    @pytest.mark.asyncio
    async def test_admin(self, async_client, admin_headers):
        response = await async_client.get("/api/admin/session", headers=admin_headers)

        assert response.json() == {"isAdmin": True}

    @pytest.mark.asyncio
    async def test_garbage_token_is_anonymous(self, async_client):
        response = await async_client.get(
            "/api/admin/session", headers={"Authorization": "Bearer garbage"}
        )

        assert response.json() == {"isAdmin": False}

    @pytest.mark.asyncio
    async def test_logout(self, async_client):
        response = await async_client.post("/api/admin/logout")

        assert response.status_code == 204
