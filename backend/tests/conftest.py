"""
Shared test fixtures.

The environment is set before the application is imported so Settings and
the module-level engine pick up the test configuration.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-storefront-tests-0123456789"
os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.core.database import Base, get_db_session
from storefront.core.security import create_access_token
from storefront.main import app
from storefront.models import Product, PromoCode

CUSTOMER_ID = "customer-1"
OTHER_CUSTOMER_ID = "customer-2"
ADMIN_ID = "admin-1"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding data and inspecting results directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async client running the app against the test database."""

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def client() -> TestClient:
    """Synchronous client for endpoints that don't touch the database."""
    return TestClient(app)


def make_token(user_id: str, role: str = "user") -> str:
    return create_access_token({"sub": user_id, "role": role})


@pytest.fixture
def customer_token() -> str:
    return make_token(CUSTOMER_ID)


@pytest.fixture
def admin_token() -> str:
    return make_token(ADMIN_ID, role="admin")


@pytest.fixture
def auth_headers(customer_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {customer_token}"}


@pytest.fixture
def other_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(OTHER_CUSTOMER_ID)}"}


@pytest.fixture
def admin_headers(admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def make_product(db_session: AsyncSession) -> Callable[..., Awaitable[Product]]:
    """Factory that inserts a committed product."""

    async def _make(**overrides: Any) -> Product:
        data: dict[str, Any] = {
            "name": "Test Hoodie",
            "description": "Warm hoodie",
            "category": "hoodies",
            "image": "https://cdn.example.com/hoodie.jpg",
            "price": Decimal("500"),
            "stock": 10,
            "is_active": True,
        }
        data.update(overrides)
        product = Product(**data)
        db_session.add(product)
        await db_session.commit()
        await db_session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_promo(db_session: AsyncSession) -> Callable[..., Awaitable[PromoCode]]:
    """Factory that inserts a committed promo code, valid around now."""

    async def _make(**overrides: Any) -> PromoCode:
        now = datetime.now(timezone.utc)
        data: dict[str, Any] = {
            "code": "SAVE20",
            "description": "Twenty percent off",
            "discount_percentage": 20,
            "max_discount": Decimal("1000"),
            "min_purchase": None,
            "valid_from": now - timedelta(days=1),
            "valid_to": now + timedelta(days=30),
            "is_active": True,
            "applicable_categories": None,
            "usage_limit": None,
            "usage_count": 0,
        }
        data.update(overrides)
        promo = PromoCode(**data)
        db_session.add(promo)
        await db_session.commit()
        await db_session.refresh(promo)
        return promo

    return _make


def build_order_payload(product_id: str, quantity: int = 1, **overrides: Any) -> dict[str, Any]:
    """Checkout body in the client's camelCase shape."""
    payload: dict[str, Any] = {
        "items": [{"productId": product_id, "quantity": quantity}],
        "shippingAddress": {
            "phoneNumber": "9800000000",
            "locality": "Thamel",
            "wardNo": "26",
            "district": "Kathmandu",
            "province": "Bagmati",
            "postalCode": "44600",
        },
        "paymentMethod": "esewa",
        "transactionRef": "TXN-0001",
        "paymentProofImage": "https://cdn.example.com/proof.jpg",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def order_payload() -> Callable[..., dict[str, Any]]:
    return build_order_payload
