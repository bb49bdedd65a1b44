"""Client-side shopping cart.

Holds the line items a shopper has picked but not yet ordered. Every change
is written through to a ``CartStorage`` under the ``shopping-cart`` key, and
the cart is rebuilt from that record when it is created. A missing or
unreadable record gives an empty cart.

The total is derived on demand with ``Decimal`` arithmetic and never stored.
"""

import threading
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from decimal import Decimal

import structlog

from shared.config import settings
from shared.money import parse_amount
from storefront.errors import ValidationError
from storefront.storage import CartStorage, MemoryCartStorage

logger = structlog.get_logger(__name__)

CART_KEY = "shopping-cart"


@dataclass(frozen=True)
class CartItem:
    product_id: str
    unit_price: Decimal
    quantity: int
    name: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_record(self) -> dict:
        record = asdict(self)
        record["unit_price"] = str(self.unit_price)
        return record

    @classmethod
    def from_record(cls, record: Mapping) -> "CartItem":
        quantity = record["quantity"]
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValueError(f"Invalid quantity {quantity!r}")
        unit_price = parse_amount(record["unit_price"], settings.CURRENCY)
        return cls(
            product_id=str(record["product_id"]),
            unit_price=unit_price,
            quantity=quantity,
            name=record.get("name"),
        )


def _product_fields(product) -> tuple[str, Decimal, str | None]:
    """Pull id, price and name out of an API product dict or a product-like object."""
    if isinstance(product, CartItem):
        return product.product_id, product.unit_price, product.name
    if isinstance(product, Mapping):
        product_id = product.get("product_id") or product.get("id")
        price = product.get("unit_price", product.get("price"))
        name = product.get("name")
    else:
        product_id = getattr(product, "product_id", None) or getattr(product, "id", None)
        price = getattr(product, "unit_price", getattr(product, "price", None))
        name = getattr(product, "name", None)

    if not product_id:
        raise ValidationError({"product_id": ["Product id is required"]})
    try:
        unit_price = parse_amount(price, settings.CURRENCY)
    except ValueError as exc:
        raise ValidationError({"price": [f"Price {exc}"]}) from exc
    return str(product_id), unit_price, name


class CartStore:
    """Pending line items, one per product, persisted across restarts."""

    def __init__(self, storage: CartStorage | None = None) -> None:
        self._storage = storage if storage is not None else MemoryCartStorage()
        self._lock = threading.RLock()
        self._items: list[CartItem] = self._restore()

    def _restore(self) -> list[CartItem]:
        try:
            record = self._storage.load(CART_KEY)
            if record is None:
                return []
            items = [CartItem.from_record(entry) for entry in record["items"]]
        except (KeyError, TypeError, ValueError, OSError) as exc:
            logger.warning("cart_restore_failed", key=CART_KEY, error=str(exc))
            return []

        merged: dict[str, CartItem] = {}
        for item in items:
            if item.product_id in merged:
                existing = merged[item.product_id]
                item = CartItem(
                    product_id=existing.product_id,
                    unit_price=existing.unit_price,
                    quantity=existing.quantity + item.quantity,
                    name=existing.name,
                )
            merged[item.product_id] = item
        return list(merged.values())

    def _persist(self) -> None:
        self._storage.save(CART_KEY, {"items": [item.to_record() for item in self._items]})

    @property
    def items(self) -> tuple[CartItem, ...]:
        with self._lock:
            return tuple(self._items)

    def snapshot(self) -> tuple[CartItem, ...]:
        """Immutable copy of the cart as it is now."""
        return self.items

    def add_item(self, product, quantity: int = 1) -> CartItem:
        """Add ``quantity`` of ``product``, merging with an existing line for the same product."""
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be a whole number of at least 1"]})
        product_id, unit_price, name = _product_fields(product)

        with self._lock:
            for index, item in enumerate(self._items):
                if item.product_id == product_id:
                    updated = CartItem(
                        product_id=item.product_id,
                        unit_price=item.unit_price,
                        quantity=item.quantity + quantity,
                        name=item.name,
                    )
                    self._items[index] = updated
                    break
            else:
                updated = CartItem(product_id=product_id, unit_price=unit_price, quantity=quantity, name=name)
                self._items.append(updated)
            self._persist()
            return updated

    def remove_item(self, product_id: str) -> None:
        with self._lock:
            remaining = [item for item in self._items if item.product_id != str(product_id)]
            if len(remaining) == len(self._items):
                return
            self._items = remaining
            self._persist()

    def clear(self) -> None:
        with self._lock:
            self._items = []
            self._persist()

    def total(self) -> Decimal:
        with self._lock:
            return sum((item.line_total for item in self._items), Decimal("0"))

    def count(self) -> int:
        with self._lock:
            return sum(item.quantity for item in self._items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)
