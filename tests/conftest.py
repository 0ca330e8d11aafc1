"""Pytest configuration and fixtures"""
import os
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock

# Keep tests off any real Redis
os.environ.pop("UPSTASH_REDIS_REST_URL", None)
os.environ.pop("UPSTASH_REDIS_REST_TOKEN", None)
os.environ.setdefault("CART_STORAGE_KEY", "cart:test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from cartstore.cart import CartStore, ProductRef
from cartstore.db import MemoryStore


@pytest.fixture
def memory_store():
    """Empty in-memory key-value store"""
    return MemoryStore()


@pytest.fixture
def cart_store(memory_store):
    """CartStore over the in-memory store (not yet loaded)"""
    return CartStore(memory_store, key="cart:test")


@pytest.fixture
def mock_storage():
    """AsyncMock key-value store; get() returns nothing by default"""
    storage = AsyncMock()
    storage.get.return_value = None
    storage.set.return_value = None
    return storage


@pytest.fixture
def sample_product():
    """Sample product reference"""
    return ProductRef(
        id="a",
        title="T",
        image_url="u",
        unit_price=Decimal("10"),
    )


@pytest.fixture
def sample_product_payload():
    """Product payload as a JS client sends it"""
    return {
        "id": "prod-123",
        "title": "Coffee Mug",
        "imageUrl": "https://cdn.example.com/mug.png",
        "price": 19.99,
    }
