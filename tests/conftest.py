"""Pytest fixtures for the storefront order tests."""
import asyncio
import os

# Must be set before any shared.* module reads its configuration
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["OTEL_TRACING_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["INTERNAL_API_KEY"] = "test-admin-key"
os.environ["ONLINE_PAYMENT_DELAY_SECONDS"] = "0"

from decimal import Decimal

import pytest

from services.catalog_service.models import Product, ProductStatus
from services.catalog_service.repository import ProductRepository
from services.checkout_service.payment_gateway import SimulatedPaymentGateway
from services.checkout_service.schemas import DeliveryDetailsIn
from services.checkout_service.service import CheckoutService
from services.wallet_service.service import WalletService
from shared.storage import InMemoryKeyValueStore

ADMIN_HEADERS = {"X-Internal-API-Key": "test-admin-key"}


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def gateway():
    return SimulatedPaymentGateway(delay=0)


@pytest.fixture
def product(store):
    """A ₹999 product that is live in the catalog."""
    product = Product(id="product-shoes", title="Trail Running Shoes", price=Decimal("999"))
    run(ProductRepository.create_product(store, product))
    return product


@pytest.fixture
def held_product(store):
    product = Product(
        id="product-watch", title="Field Watch", price=Decimal("2499"), status=ProductStatus.HOLD
    )
    run(ProductRepository.create_product(store, product))
    return product


@pytest.fixture
def delivery():
    return DeliveryDetailsIn(
        name="Asha Rao",
        phone="9876543210",
        address="12 MG Road",
        city="Bengaluru",
        pincode="560001",
        landmark="Near the metro station",
    )


@pytest.fixture
def fund(store):
    def _fund(user_id: str, amount) -> None:
        run(WalletService.credit(store, user_id, Decimal(str(amount))))

    return _fund


@pytest.fixture
def checkout(store, gateway, product, delivery):
    """Place an order for ``product`` with sensible defaults."""

    def _checkout(payment_method="cash_on_delivery", quantity=1, user_id="user-1", **kwargs):
        kwargs.setdefault("product", product)
        kwargs.setdefault("delivery_details", delivery)
        kwargs.setdefault("gateway", gateway)
        kwargs.setdefault("timeout", 5.0)
        return run(
            CheckoutService.place_order(
                store,
                kwargs.pop("gateway"),
                user_id=user_id,
                quantity=quantity,
                payment_method=payment_method,
                **kwargs,
            )
        )

    return _checkout


@pytest.fixture
def client(store, gateway):
    from fastapi.testclient import TestClient

    from main import app
    from services.checkout_service.payment_gateway import get_payment_gateway
    from shared.storage import get_store

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()
