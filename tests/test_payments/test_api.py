"""
Test suite for the checkout, PayPal, Stripe and provider-neutral payment
endpoints.
"""

import httpx
import pytest

from storefront.api.deps import get_paypal_client
from storefront.services.payments.paypal_client import PayPalClient


# ============================================================================
# Test Fixtures
# ============================================================================


class PayPalStub:
    """Minimal PayPal API answering token, create and capture."""

    def __init__(self, capture_status: str = "COMPLETED", reject_token: bool = False):
        self.capture_status = capture_status
        self.reject_token = reject_token
        self.calls: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request.url.path)
        if request.url.path == "/v1/oauth2/token":
            if self.reject_token:
                return httpx.Response(401, json={"error": "invalid_client", "secret": "leak"})
            return httpx.Response(200, json={"access_token": "A21-token"})
        if request.url.path == "/v2/checkout/orders":
            return httpx.Response(
                201,
                json={
                    "id": "PAYPAL-ORDER-1",
                    "status": "CREATED",
                    "links": [{"rel": "approve", "href": "https://paypal.test/approve"}],
                },
            )
        return httpx.Response(
            201, json={"id": "PAYPAL-ORDER-1", "status": self.capture_status}
        )


@pytest.fixture
def paypal_stub(override_dependency) -> PayPalStub:
    stub = PayPalStub()
    client = PayPalClient(timeout=5, max_retries=0, transport=httpx.MockTransport(stub.handler))
    override_dependency(get_paypal_client, lambda: client)
    return stub


@pytest.fixture
def configure(async_client, admin_headers):
    async def _configure(**values: str) -> None:
        response = await async_client.patch("/api/settings", json=values, headers=admin_headers)
        assert response.status_code == 200

    return _configure


@pytest.fixture
async def paypal_enabled(configure):
    await configure(
        paypalEnabled="true",
        paypalClientId="client-id",
        paypalClientSecret="client-secret",
    )


# ============================================================================
# Checkout
# ============================================================================


class TestCheckoutQuote:
    """Tests for POST /api/checkout/quote."""

    @pytest.mark.asyncio
    async def test_quote_below_threshold(self, async_client):
        response = await async_client.post(
            "/api/checkout/quote",
            json={"items": [{"unitPrice": "25.00", "quantity": 2}]},
        )

        assert response.status_code == 200
        assert response.json() == {
            "subtotal": "50.00",
            "shipping": "9.99",
            "tax": "4.00",
            "total": "63.99",
            "freeShipping": False,
            "freeShippingThreshold": "75.00",
            "taxRate": "0.08",
        }

    @pytest.mark.asyncio
    async def test_quote_uses_store_settings(self, async_client, configure):
        await configure(taxRate="0.1", freeShippingThreshold="40", shippingFlatRate="5")

        response = await async_client.post(
            "/api/checkout/quote",
            json={"items": [{"unitPrice": "20.00", "quantity": 2}]},
        )

        data = response.json()
        assert data["shipping"] == "0.00"
        assert data["freeShipping"] is True
        assert data["tax"] == "4.00"
        assert data["total"] == "44.00"

    @pytest.mark.asyncio
    async def test_quote_rejects_bad_quantity(self, async_client):
        response = await async_client.post(
            "/api/checkout/quote",
            json={"items": [{"unitPrice": "1.00", "quantity": 0}]},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"


class TestPaymentMethods:
    """Tests for GET /api/checkout/payment-methods."""

    @pytest.mark.asyncio
    async def test_fallback_when_nothing_enabled(self, async_client):
        response = await async_client.get("/api/checkout/payment-methods")

        assert response.status_code == 200
        data = response.json()
        assert [m["provider"] for m in data["methods"]] == ["stripe", "paypal"]
        assert data["default"] == "stripe"

    @pytest.mark.asyncio
    async def test_only_enabled_methods(self, async_client, configure):
        await configure(codEnabled="true")

        data = (await async_client.get("/api/checkout/payment-methods")).json()

        assert data["methods"] == [{"provider": "cod", "name": "Cash on Delivery"}]
        assert data["default"] == "cod"


# ============================================================================
# PayPal relay
# ============================================================================


class TestPayPalConfigEndpoint:
    @pytest.mark.asyncio
    async def test_defaults(self, async_client):
        response = await async_client.get("/api/paypal/config")

        assert response.status_code == 200
        assert response.json() == {"enabled": False, "clientId": None, "mode": "sandbox"}

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("paypal_enabled")
    async def test_secret_never_exposed(self, async_client):
        response = await async_client.get("/api/paypal/config")

        assert response.json() == {"enabled": True, "clientId": "client-id", "mode": "sandbox"}
        assert "client-secret" not in response.text


class TestPayPalCreateOrderEndpoint:
    """Tests for POST /api/paypal/create-order."""

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("paypal_enabled")
    async def test_invalid_amount(self, async_client, paypal_stub):
        response = await async_client.post("/api/paypal/create-order", json={"amount": "0"})

        assert response.status_code == 400
        assert response.json()["detail"] == {"message": "Invalid amount", "code": "INVALID_AMOUNT"}
        assert paypal_stub.calls == []

    @pytest.mark.asyncio
    async def test_disabled(self, async_client, paypal_stub):
        response = await async_client.post("/api/paypal/create-order", json={"amount": "10"})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "PROVIDER_DISABLED"

    @pytest.mark.asyncio
    async def test_not_configured(self, async_client, paypal_stub, configure):
        await configure(paypalEnabled="true")

        response = await async_client.post("/api/paypal/create-order", json={"amount": "10"})

        assert response.status_code == 500
        detail = response.json()["detail"]
        assert detail["code"] == "NOT_CONFIGURED"
        assert detail["message"] == "Payment provider is not configured"

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("paypal_enabled")
    async def test_upstream_body_is_not_leaked(self, async_client, paypal_stub):
        paypal_stub.reject_token = True

        response = await async_client.post("/api/paypal/create-order", json={"amount": "10"})

        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "UPSTREAM_AUTH_ERROR"
        assert "leak" not in response.text

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("paypal_enabled")
    async def test_success(self, async_client, paypal_stub):
        response = await async_client.post(
            "/api/paypal/create-order", json={"amount": 42.5, "currency": "usd"}
        )

        assert response.status_code == 200
        assert response.json()["id"] == "PAYPAL-ORDER-1"
        assert paypal_stub.calls == ["/v1/oauth2/token", "/v2/checkout/orders"]


class TestPayPalCaptureOrderEndpoint:
    """Tests for POST /api/paypal/capture-order."""

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("paypal_enabled")
    async def test_missing_order_id(self, async_client, paypal_stub):
        response = await async_client.post("/api/paypal/capture-order", json={})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_REQUEST"
        assert paypal_stub.calls == []

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("paypal_enabled")
    async def test_capture_marks_order_paid(
        self, async_client, admin_headers, paypal_stub, order_draft
    ):
        created = (await async_client.post("/api/orders", json=order_draft)).json()

        response = await async_client.post(
            "/api/paypal/capture-order",
            json={"orderID": "PAYPAL-ORDER-1", "orderNumber": created["orderNumber"]},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "COMPLETED"
        tracking = await async_client.get(f"/api/track/{created['orderNumber']}")
        assert tracking.json()["status"] == "paid"

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("paypal_enabled")
    async def test_unknown_order_does_not_fail_capture(self, async_client, paypal_stub):
        response = await async_client.post(
            "/api/paypal/capture-order",
            json={"orderId": "PAYPAL-ORDER-1", "orderNumber": "NVZ-NOPE-0000"},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("paypal_enabled")
    async def test_incomplete_capture_leaves_order_pending(
        self, async_client, paypal_stub, order_draft
    ):
        paypal_stub.capture_status = "PENDING"
        created = (await async_client.post("/api/orders", json=order_draft)).json()

        await async_client.post(
            "/api/paypal/capture-order",
            json={"orderID": "PAYPAL-ORDER-1", "orderNumber": created["orderNumber"]},
        )

        tracking = await async_client.get(f"/api/track/{created['orderNumber']}")
        assert tracking.json()["status"] == "pending"


# ============================================================================
# Stripe and provider-neutral endpoints
# ============================================================================


class TestStripeConfigEndpoint:
    @pytest.mark.asyncio
    async def test_publishable_key_only(self, async_client, configure):
        await configure(
            stripeEnabled="true",
            stripePublicKey="pk_test_123",
            stripeSecretKey="sk_test_123",
        )

        response = await async_client.get("/api/stripe/config")

        assert response.json() == {"enabled": True, "publishableKey": "pk_test_123"}
        assert "sk_test_123" not in response.text


class TestPaymentEndpoints:
    """Tests for /api/payments/{provider}/intents and captures."""

    @pytest.mark.asyncio
    async def test_cash_on_delivery_flow(self, async_client, configure, order_draft):
        await configure(codEnabled="true")
        created = (await async_client.post("/api/orders", json=order_draft)).json()

        intent = await async_client.post(
            "/api/payments/cod/intents", json={"amount": created["total"]}
        )
        assert intent.status_code == 201
        intent_data = intent.json()
        assert intent_data["provider"] == "cod"
        assert intent_data["amount"] == "63.99"
        assert intent_data["currency"] == "USD"

        capture = await async_client.post(
            "/api/payments/cod/captures",
            json={
                "reference": intent_data["reference"],
                "orderNumber": created["orderNumber"],
            },
        )
        assert capture.status_code == 200
        assert capture.json()["completed"] is True
        assert capture.json()["orderNumber"] == created["orderNumber"]

        tracking = await async_client.get(f"/api/track/{created['orderNumber']}")
        assert tracking.json()["status"] == "paid"

    @pytest.mark.asyncio
    async def test_unknown_provider(self, async_client):
        response = await async_client.post("/api/payments/bitcoin/intents", json={"amount": "1"})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_REQUEST"

    @pytest.mark.asyncio
    async def test_disabled_provider(self, async_client):
        response = await async_client.post("/api/payments/cod/intents", json={"amount": "1"})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "PROVIDER_DISABLED"

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("paypal_enabled")
    async def test_paypal_intent_has_approval_url(self, async_client, paypal_stub):
        response = await async_client.post(
            "/api/payments/paypal/intents", json={"amount": "12.00"}
        )

        assert response.status_code == 201
        assert response.json()["approvalUrl"] == "https://paypal.test/approve"
        assert response.json()["reference"] == "PAYPAL-ORDER-1"
