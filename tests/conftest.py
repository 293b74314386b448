"""
Pytest configuration and shared test fixtures.

Application settings are read once and cached, so the test environment is
set before anything from ``storefront`` is imported. Every test gets its own
in-memory SQLite database; the API client talks to the app in-process over
``ASGITransport`` with ``get_db`` pointed at that database.
"""

import os

os.environ["APP_ENVIRONMENT"] = "test"
os.environ["APP_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["APP_SECRET_KEY"] = "test-secret-key-with-at-least-32-characters"
os.environ["APP_RATE_LIMIT_ENABLED"] = "false"
os.environ["APP_LOGIN_ATTEMPT_BACKEND"] = "memory"
os.environ["APP_LOG_LEVEL"] = "WARNING"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "correct-horse-battery"

from typing import AsyncGenerator, Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import storefront.database.models  # noqa: E402,F401
from storefront.core.security import create_admin_token  # noqa: E402
from storefront.database.base import Base  # noqa: E402
from storefront.database.connection import get_db  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.services.auth.login_attempts import reset_login_tracker  # noqa: E402

PAYMENT_ENV_VARS = (
    "PAYPAL_CLIENT_ID",
    "PAYPAL_CLIENT_SECRET",
    "PAYPAL_MODE",
    "STRIPE_SECRET_KEY",
    "STRIPE_PUBLISHABLE_KEY",
)


# ============================================================================
# Environment
# ============================================================================


@pytest.fixture(autouse=True)
def clear_payment_env(monkeypatch):
    """Start every test without deployment payment credentials."""
    for name in PAYMENT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def fresh_login_tracker():
    """Give every test an empty login attempt tracker."""
    reset_login_tracker()
    yield
    reset_login_tracker()


# ============================================================================
# Database
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Database session for service-level tests."""
    async with session_factory() as session:
        yield session


# ============================================================================
# API client
# ============================================================================


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Asynchronous test client bound to the per-test database.

    Example:
        async def test_health(async_client):
            response = await async_client.get("/health")
            assert response.status_code == 200
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Authorization header carrying a valid admin token."""
    return {"Authorization": f"Bearer {create_admin_token('admin')}"}


@pytest.fixture
def override_dependency() -> Callable:
    """Register a dependency override for the duration of one test."""

    def _override(dependency, replacement) -> None:
        app.dependency_overrides[dependency] = replacement

    return _override


# ============================================================================
# Sample data
# ============================================================================


@pytest.fixture
def order_draft() -> dict:
    """Checkout draft for a 50.00 cart below the free-shipping threshold."""
    return {
        "customerName": "Ada Lovelace",
        "customerEmail": "ada@example.com",
        "shippingAddress": "12 Analytical Row, London",
        "items": [
            {
                "productId": 1,
                "name": "Ceramic Mug",
                "price": "25.00",
                "quantity": 2,
                "image": "https://cdn.example.com/mug.jpg",
            }
        ],
        "subtotal": "50.00",
        "shipping": "9.99",
        "tax": "4.00",
        "total": "63.99",
        "paymentProvider": "cod",
    }
