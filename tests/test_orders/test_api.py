"""
Test suite for the order and tracking API endpoints.
"""

import pytest


# ============================================================================
# Create Order Endpoint Tests
# ============================================================================


class TestCreateOrderEndpoint:
    """Tests for POST /api/orders."""

    @pytest.mark.asyncio
    async def test_create_order_success(self, async_client, order_draft):
        response = await async_client.post("/api/orders", json=order_draft)

        assert response.status_code == 201
        data = response.json()
        assert data["orderNumber"].startswith("NVZ-")
        assert data["status"] == "pending"
        assert data["total"] == "63.99"
        assert data["subtotal"] == "50.00"
        assert data["customerEmail"] == "ada@example.com"
        assert data["createdAt"]

    @pytest.mark.asyncio
    async def test_status_is_forced_to_pending(self, async_client, order_draft):
        """An anonymous customer cannot create a delivered order."""
        order_draft["status"] = "delivered"

        response = await async_client.post("/api/orders", json=order_draft)

        assert response.status_code == 201
        assert response.json()["status"] == "pending"

    @pytest.mark.asyncio
    async def test_validation_errors_are_flattened(self, async_client, order_draft):
        del order_draft["customerEmail"]
        order_draft["items"] = []

        response = await async_client.post("/api/orders", json=order_draft)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["code"] == "VALIDATION_ERROR"
        assert "customerEmail" in detail["errors"]["fieldErrors"]
        assert "items" in detail["errors"]["fieldErrors"]
        assert detail["errors"]["formErrors"] == []


# ============================================================================
# Admin Order Endpoint Tests
# ============================================================================


class TestAdminOrderEndpoints:
    """Tests for the admin-only order endpoints."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,path",
        [("get", "/api/orders"), ("delete", "/api/orders"), ("patch", "/api/orders/1")],
    )
    async def test_requires_admin(self, async_client, method, path):
        kwargs = {"json": {"status": "paid"}} if method == "patch" else {}

        response = await getattr(async_client, method)(path, **kwargs)

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_invalid_token_rejected(self, async_client):
        response = await async_client.get(
            "/api/orders", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_list_orders(self, async_client, admin_headers, order_draft):
        await async_client.post("/api/orders", json=order_draft)
        await async_client.post("/api/orders", json=order_draft)

        response = await async_client.get("/api/orders", headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()) == 2

    @pytest.mark.asyncio
    async def test_patch_order(self, async_client, admin_headers, order_draft):
        created = (await async_client.post("/api/orders", json=order_draft)).json()

        response = await async_client.patch(
            f"/api/orders/{created['id']}",
            json={"status": "shipped", "trackingNumber": "1Z999"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "shipped"
        assert data["trackingNumber"] == "1Z999"
        assert data["orderNumber"] == created["orderNumber"]

    @pytest.mark.asyncio
    async def test_patch_missing_order(self, async_client, admin_headers):
        response = await async_client.patch(
            "/api/orders/999", json={"status": "paid"}, headers=admin_headers
        )

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_patch_unknown_status(self, async_client, admin_headers, order_draft):
        created = (await async_client.post("/api/orders", json=order_draft)).json()

        response = await async_client.patch(
            f"/api/orders/{created['id']}", json={"status": "lost"}, headers=admin_headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_clear_orders(self, async_client, admin_headers, order_draft):
        await async_client.post("/api/orders", json=order_draft)

        response = await async_client.delete("/api/orders", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"deleted": 1}
        listed = await async_client.get("/api/orders", headers=admin_headers)
        assert listed.json() == []


# ============================================================================
# Tracking Endpoint Tests
# ============================================================================


class TestTrackingEndpoint:
    """Tests for GET /api/track/{orderNumber}."""

    @pytest.mark.asyncio
    async def test_tracking_hides_customer_details(self, async_client, order_draft):
        created = (await async_client.post("/api/orders", json=order_draft)).json()

        response = await async_client.get(f"/api/track/{created['orderNumber']}")

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {
            "orderNumber",
            "status",
            "items",
            "total",
            "trackingNumber",
            "createdAt",
        }
        assert data["total"] == "63.99"
        assert "Ada" not in response.text
        assert "ada@example.com" not in response.text

    @pytest.mark.asyncio
    async def test_unknown_order(self, async_client):
        response = await async_client.get("/api/track/NVZ-NOPE-0000")

        assert response.status_code == 404
