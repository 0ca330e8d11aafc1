"""
Cart Errors

Message constants (kept in one place to avoid string duplication) and the
exception hierarchy raised by the cart store.
"""

from typing import Any

# Cart errors
ERROR_ITEM_NOT_FOUND = "Product not in cart"
ERROR_CART_NOT_READY = "Cart has not been loaded yet"

# Persistence errors
ERROR_CORRUPT_STATE = "Persisted cart could not be decoded"
ERROR_WRITE_FAILED = "Failed to persist cart"
ERROR_READ_FAILED = "Failed to read persisted cart"


class CartError(Exception):
    """Base error for cart operations."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable


class ItemNotFound(CartError, KeyError):
    """increment/decrement/remove called with an id that is not in the cart."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"{ERROR_ITEM_NOT_FOUND}: {item_id}", code="ITEM_NOT_FOUND")
        self.item_id = item_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class CartNotReady(CartError):
    """Mutation attempted before load() completed."""

    def __init__(self, message: str = ERROR_CART_NOT_READY) -> None:
        super().__init__(message, code="CART_NOT_READY")


class CorruptPersistedState(CartError):
    """Stored bytes could not be deserialized into a cart."""

    def __init__(self, message: str = ERROR_CORRUPT_STATE, raw_error: Any = None) -> None:
        super().__init__(message, code="CORRUPT_STATE")
        self.raw_error = raw_error


class PersistenceWriteFailure(CartError):
    """The key-value store rejected or failed a write-back."""

    def __init__(self, message: str = ERROR_WRITE_FAILED, raw_error: Any = None) -> None:
        super().__init__(message, code="WRITE_FAILED", retryable=True)
        self.raw_error = raw_error


class PersistenceReadFailure(CartError):
    """The key-value store failed while reading the cart at load time."""

    def __init__(self, message: str = ERROR_READ_FAILED, raw_error: Any = None) -> None:
        super().__init__(message, code="READ_FAILED", retryable=True)
        self.raw_error = raw_error
