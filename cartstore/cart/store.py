"""Cart store: in-memory cart with ordered write-back to a key-value store."""
import asyncio
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from cartstore.config import get_settings
from cartstore.db import KeyValueStore
from cartstore.errors import (
    CartNotReady,
    CorruptPersistedState,
    ItemNotFound,
    PersistenceReadFailure,
    PersistenceWriteFailure,
    ERROR_READ_FAILED,
    ERROR_WRITE_FAILED,
)
from cartstore.logging import get_logger, log_safe
from .models import LineItem, ProductRef, dump_cart, load_cart, total_quantity

logger = get_logger(__name__)

WriteFailureHandler = Callable[[PersistenceWriteFailure], Any]


class CartState(str, Enum):
    """Store lifecycle."""
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class CartStore:
    """
    Owns the cart for the lifetime of the process.

    Mutations are synchronous: the new cart is visible as soon as the call
    returns. Each one then enqueues a snapshot of the whole cart; a single
    writer task applies snapshots to the store one at a time, in order.

    Usage:
        store = CartStore(RedisStore())
        await store.load()
        store.add_to_cart({"id": "p1", "title": "Mug", "image_url": "...", "price": 10})
        store.decrement("p1")
        await store.flush()
    """

    def __init__(
        self,
        storage: KeyValueStore,
        key: Optional[str] = None,
        on_write_failure: Optional[WriteFailureHandler] = None,
    ):
        self._storage = storage
        self.key = key or get_settings().cart_key
        self._on_write_failure = on_write_failure

        self._items: tuple[LineItem, ...] = ()
        self._state = CartState.UNINITIALIZED
        self._load_lock = asyncio.Lock()

        self._queue: asyncio.Queue[bytes] = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None
        self.last_write_error: Optional[PersistenceWriteFailure] = None

    # ==================== STATE ====================

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is CartState.READY

    @property
    def total_quantity(self) -> int:
        return total_quantity(self._items)

    def get_cart(self) -> tuple[LineItem, ...]:
        """Read-only snapshot of the cart, in insertion order."""
        return self._items

    # ==================== LOAD ====================

    async def load(self) -> tuple[LineItem, ...]:
        """
        Load the persisted cart once.

        Only a missing key counts as "no cart"; an empty stored value is
        reported as corrupt rather than overwritten.

        Returns:
            The cart after loading

        Raises:
            CorruptPersistedState: stored value could not be decoded; the
                store stays uninitialized until reset() is called
            PersistenceReadFailure: the backend failed the read
        """
        async with self._load_lock:
            if self.is_ready:
                return self._items

            try:
                raw = await self._storage.get(self.key)
            except Exception as e:
                logger.error(f"Failed to read cart from storage: {e}")
                raise PersistenceReadFailure(f"{ERROR_READ_FAILED}: {e}", raw_error=e) from e

            if raw is None:
                self._state = CartState.READY
                logger.info("No persisted cart at %s, starting empty", log_safe(self.key))
                self.persist()
                return self._items

            try:
                items = load_cart(raw)
            except CorruptPersistedState as e:
                logger.warning(f"Corrupted cart data at {log_safe(self.key)}: {e}")
                raise

            self._items = items
            self._state = CartState.READY
            logger.info("Loaded cart with %d line(s)", len(items))
            return self._items

    async def reset(self) -> None:
        """Start over with an empty cart and overwrite whatever is stored."""
        async with self._load_lock:
            self._items = ()
            self._state = CartState.READY
            self.persist()
        logger.info("Cart reset at %s", log_safe(self.key))

    # ==================== MUTATIONS ====================

    def add_to_cart(self, product: ProductRef | Mapping[str, Any]) -> tuple[LineItem, ...]:
        """
        Add one unit of a product.

        A product already in the cart is incremented; a new one is appended
        with quantity 1.

        Raises:
            CartNotReady: load() has not completed
            pydantic.ValidationError: product mapping is invalid
        """
        self._require_ready()
        if not isinstance(product, ProductRef):
            product = ProductRef.model_validate(product)

        if self._find(product.id) is not None:
            return self.increment(product.id)

        logger.debug("Adding %s to cart", log_safe(product.id))
        self._commit(self._items + (LineItem.from_product(product),))
        return self._items

    def increment(self, item_id: str) -> tuple[LineItem, ...]:
        """Increase quantity by one. Raises ItemNotFound if absent."""
        self._require_ready()
        index = self._index_of(item_id)
        item = self._items[index]

        logger.debug("Incrementing %s to %d", log_safe(item_id), item.quantity + 1)
        self._commit(self._replace_at(index, item.with_quantity(item.quantity + 1)))
        return self._items

    def decrement(self, item_id: str) -> tuple[LineItem, ...]:
        """Decrease quantity by one, dropping the line when it reaches zero."""
        self._require_ready()
        index = self._index_of(item_id)
        item = self._items[index]

        if item.quantity - 1 <= 0:
            logger.debug("Removing %s from cart", log_safe(item_id))
            self._commit(self._replace_at(index, None))
        else:
            self._commit(self._replace_at(index, item.with_quantity(item.quantity - 1)))
        return self._items

    def remove(self, item_id: str) -> tuple[LineItem, ...]:
        """Drop a line regardless of its quantity."""
        self._require_ready()
        index = self._index_of(item_id)
        self._commit(self._replace_at(index, None))
        return self._items

    def clear(self) -> tuple[LineItem, ...]:
        """Empty the cart."""
        self._require_ready()
        self._commit(())
        return self._items

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise CartNotReady()

    def _find(self, item_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None

    def _index_of(self, item_id: str) -> int:
        index = self._find(item_id)
        if index is None:
            raise ItemNotFound(item_id)
        return index

    def _replace_at(self, index: int, item: Optional[LineItem]) -> tuple[LineItem, ...]:
        head, tail = self._items[:index], self._items[index + 1:]
        return head + tail if item is None else head + (item,) + tail

    def _commit(self, items: tuple[LineItem, ...]) -> None:
        self._items = items
        self.persist()

    # ==================== WRITE-BACK ====================

    def persist(self) -> None:
        """
        Schedule a write of the current cart.

        The snapshot is taken now; the write happens on the writer task.
        Must be called from a running event loop.
        """
        self._queue.put_nowait(dump_cart(self._items))
        if self._writer is None or self._writer.done():
            self._writer = asyncio.get_running_loop().create_task(self._drain())

    async def flush(self) -> None:
        """Wait until every scheduled write has been applied (or has failed)."""
        await self._queue.join()

    async def close(self) -> None:
        """Flush pending writes and stop the writer task."""
        await self.flush()
        if self._writer is not None:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass
            self._writer = None

    async def _drain(self) -> None:
        while True:
            payload = await self._queue.get()
            try:
                await self._write(payload)
            finally:
                self._queue.task_done()

    async def _write(self, payload: bytes) -> None:
        try:
            await self._storage.set(self.key, payload)
        except Exception as e:
            failure = PersistenceWriteFailure(f"{ERROR_WRITE_FAILED}: {e}", raw_error=e)
            self.last_write_error = failure
            logger.error(f"Failed to persist cart to {log_safe(self.key)}: {e}")
            self._report(failure)
            return

        self.last_write_error = None

    def _report(self, failure: PersistenceWriteFailure) -> None:
        if self._on_write_failure is None:
            return
        try:
            self._on_write_failure(failure)
        except Exception:
            logger.exception("on_write_failure handler raised")
