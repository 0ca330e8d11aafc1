"""Cart package: models, serialization, and the cart store."""
from .models import LineItem, ProductRef, dump_cart, load_cart, total_quantity
from .store import CartState, CartStore

__all__ = [
    "LineItem",
    "ProductRef",
    "dump_cart",
    "load_cart",
    "total_quantity",
    "CartState",
    "CartStore",
]
