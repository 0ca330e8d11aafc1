"""Cart models and the persisted JSON format."""
import json
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Sequence

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from cartstore.errors import CorruptPersistedState, ERROR_CORRUPT_STATE

# Prices are stored as JSON numbers; 15 significant digits survive a double
MAX_PRICE_DIGITS = 15


class ProductRef(BaseModel):
    """Product passed to add_to_cart. Accepts camelCase keys from JS clients."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    title: str
    image_url: str = Field(validation_alias=AliasChoices("image_url", "imageUrl"))
    unit_price: Decimal = Field(
        ge=0,
        max_digits=MAX_PRICE_DIGITS,
        validation_alias=AliasChoices("unit_price", "unitPrice", "price"),
    )


@dataclass(frozen=True)
class LineItem:
    """Single product entry in the cart."""
    id: str
    title: str
    image_url: str
    unit_price: Decimal
    quantity: int = 1

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")

    @classmethod
    def from_product(cls, product: ProductRef) -> "LineItem":
        """New line for a product, quantity 1."""
        return cls(
            id=product.id,
            title=product.title,
            image_url=product.image_url,
            unit_price=product.unit_price,
        )

    def with_quantity(self, quantity: int) -> "LineItem":
        return replace(self, quantity=quantity)

    def to_dict(self) -> dict:
        """Convert to the persisted dictionary shape."""
        return {
            "id": self.id,
            "title": self.title,
            "image_url": self.image_url,
            "price": _price_to_json(self.unit_price),
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """Create from the persisted dictionary shape."""
        record = StoredLineItem.model_validate(data)
        return record.to_line_item()


class StoredLineItem(BaseModel):
    """Validation schema for one persisted cart entry."""
    id: str = Field(min_length=1)
    title: str
    image_url: str
    price: Decimal = Field(max_digits=MAX_PRICE_DIGITS)
    quantity: int = Field(ge=1)

    def to_line_item(self) -> LineItem:
        return LineItem(
            id=self.id,
            title=self.title,
            image_url=self.image_url,
            unit_price=self.price,
            quantity=self.quantity,
        )


_CART_ADAPTER = TypeAdapter(list[StoredLineItem])


def _price_to_json(value: Decimal) -> int | float:
    # JSON number; integral prices stay ints, the rest fit in MAX_PRICE_DIGITS
    if value == value.to_integral_value():
        return int(value)
    number = float(value)
    if Decimal(repr(number)) != value:
        raise ValueError(f"price {value} has more than {MAX_PRICE_DIGITS} significant digits")
    return number


def dump_cart(items: Iterable[LineItem]) -> bytes:
    """Serialize the cart to UTF-8 JSON (ordered list of line objects)."""
    return json.dumps(
        [item.to_dict() for item in items],
        ensure_ascii=False,
        separators=(",", ":"),
    ).encode("utf-8")


def load_cart(raw: bytes | str) -> tuple[LineItem, ...]:
    """
    Deserialize a persisted cart.

    Numbers are parsed straight to Decimal, so prices come back exactly as
    written.

    Raises:
        CorruptPersistedState: empty or malformed JSON, bad field types,
            over-precise prices, non-positive quantities or duplicate ids
    """
    try:
        records = _CART_ADAPTER.validate_python(json.loads(raw, parse_float=Decimal))
    except ValidationError as e:
        raise CorruptPersistedState(
            f"{ERROR_CORRUPT_STATE}: {e.error_count()} validation error(s)",
            raw_error=e,
        ) from e
    except ValueError as e:
        # JSONDecodeError / UnicodeDecodeError
        raise CorruptPersistedState(f"{ERROR_CORRUPT_STATE}: {e}", raw_error=e) from e

    items = tuple(record.to_line_item() for record in records)

    seen: set[str] = set()
    for item in items:
        if item.id in seen:
            raise CorruptPersistedState(f"{ERROR_CORRUPT_STATE}: duplicate id {item.id!r}")
        seen.add(item.id)

    return items


def total_quantity(items: Sequence[LineItem]) -> int:
    """Total number of units in the cart."""
    return sum(item.quantity for item in items)
