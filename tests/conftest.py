import os
from typing import AsyncGenerator
from unittest.mock import MagicMock

# Must be set before the settings singleton is created
os.environ["ENVIRONMENT"] = "testing"
os.environ["CART_STORAGE"] = "memory"

import pytest
from httpx import ASGITransport, AsyncClient

from storefront.core.deps import get_analytics, get_storage
from storefront.crud.cart import CartCRUD
from storefront.main import app
from storefront.services.analytics.analytics_service import AnalyticsEmitter
from storefront.services.analytics.datalayer import DataLayer
from storefront.services.cart_actions import CartActions
from storefront.services.cart_store import CartStore
from storefront.storage.memory_storage import MemoryStorage


# PYTEST CORE FIXTURES
@pytest.fixture(scope="session")
def test_app():
    app.debug = True
    return app


# STORAGE
@pytest.fixture
def memory_storage():
    storage = MemoryStorage()
    yield storage
    storage.clear()


@pytest.fixture
def mock_redis():
    redis = MagicMock()
    _storage = {}

    def set_val(key, val, ex=None):
        _storage[key] = val

    def get_val(key):
        return _storage.get(key)

    def delete_val(key):
        _storage.pop(key, None)

    redis.set = MagicMock(side_effect=set_val)
    redis.get = MagicMock(side_effect=get_val)
    redis.delete = MagicMock(side_effect=delete_val)
    redis.ping = MagicMock(return_value=True)
    redis.store = _storage
    return redis


# ANALYTICS
@pytest.fixture
def datalayer():
    layer = DataLayer()
    yield layer
    layer.clear()


@pytest.fixture
def analytics(datalayer):
    return AnalyticsEmitter([datalayer])


# CART
@pytest.fixture
def cart_crud(memory_storage):
    return CartCRUD(memory_storage, "test-session", namespace="cart", ttl=60)


@pytest.fixture
def store(cart_crud):
    return CartStore(cart_crud)


@pytest.fixture
def actions(store, analytics):
    return CartActions(store, analytics)


@pytest.fixture
def robot():
    return {"id": "A", "name": "Robot", "unitPrice": 10}


# DEPENDENCY OVERRIDES
@pytest.fixture(autouse=True)
def override_dependencies(test_app, memory_storage, analytics):
    test_app.dependency_overrides[get_storage] = lambda: memory_storage
    test_app.dependency_overrides[get_analytics] = lambda: analytics

    yield

    test_app.dependency_overrides.clear()


# HTTP CLIENT
@pytest.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://localhost",
    ) as ac:
        yield ac
