"""
Print the persisted cart, or reset it when the stored value is corrupt.
Usage: python scripts/inspect_cart.py [--key KEY] [--reset]
"""
import argparse
import asyncio
import sys

from cartstore.cart import CartStore
from cartstore.db import create_store
from cartstore.errors import CorruptPersistedState, PersistenceReadFailure


async def inspect_cart(key: str | None, reset: bool) -> int:
    store = CartStore(create_store(), key=key)
    print(f"📦 Cart key: {store.key}")

    try:
        items = await store.load()
    except CorruptPersistedState as e:
        print(f"❌ {e}")
        if not reset:
            print("   Re-run with --reset to overwrite it with an empty cart")
            return 1
        await store.reset()
        await store.close()
        if store.last_write_error:
            print(f"❌ {store.last_write_error}")
            return 1
        print("✅ Cart reset")
        return 0
    except PersistenceReadFailure as e:
        print(f"❌ {e}")
        return 1

    if not items:
        print("   (empty)")
    for item in items:
        print(f"   {item.quantity:3d} x {item.title} [{item.id}] @ {item.unit_price}")
    print(f"   total units: {store.total_quantity}")

    await store.close()
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--key", help="storage key (default: CART_STORAGE_KEY)")
    parser.add_argument("--reset", action="store_true", help="overwrite a corrupt cart")
    args = parser.parse_args()
    return asyncio.run(inspect_cart(args.key, args.reset))


if __name__ == "__main__":
    sys.exit(main())
