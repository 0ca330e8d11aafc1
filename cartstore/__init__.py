"""
cartstore - client-side shopping cart state

- cart: CartStore, LineItem, ProductRef, snapshot (de)serialization
- db: key-value backends (Upstash Redis, in-memory)
- errors: exception hierarchy
"""

from cartstore.cart import CartState, CartStore, LineItem, ProductRef
from cartstore.db import KeyValueStore, MemoryStore, RedisStore, create_store
from cartstore.errors import (
    CartError,
    CartNotReady,
    CorruptPersistedState,
    ItemNotFound,
    PersistenceReadFailure,
    PersistenceWriteFailure,
)

__version__ = "0.1.0"

__all__ = [
    "CartState",
    "CartStore",
    "LineItem",
    "ProductRef",
    "KeyValueStore",
    "MemoryStore",
    "RedisStore",
    "create_store",
    "CartError",
    "CartNotReady",
    "CorruptPersistedState",
    "ItemNotFound",
    "PersistenceReadFailure",
    "PersistenceWriteFailure",
]
