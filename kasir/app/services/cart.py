"""Per-user shopping carts held in process memory.

A cart never touches the database. Stock limits are checked against the
product snapshot taken when the item was added, so two sessions can both pass
the check for the last unit; the sale's stock movement is what finally
decrements inventory.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from decimal import Decimal
from uuid import UUID

from kasir.app.services.pricing import (
    CartTotals,
    LinePricing,
    ZERO,
    calculate_line_pricing,
    clamp_discount,
    summarize,
)

NOT_ENOUGH_STOCK = "Not enough stock"


class StockLimitError(ValueError):
    """A cart mutation would exceed the product's available stock."""

    def __init__(self, product_name: str, available: int) -> None:
        self.product_name = product_name
        self.available = available
        super().__init__(NOT_ENOUGH_STOCK)


@dataclass(frozen=True)
class CartProduct:
    """Snapshot of the catalog row a cart line refers to."""

    id: UUID
    name: str
    sku: str
    price: Decimal
    stock_quantity: int


@dataclass
class CartLine:
    product: CartProduct
    quantity: int = 1
    discount: Decimal = ZERO

    @property
    def pricing(self) -> LinePricing:
        return calculate_line_pricing(self.product.price, self.quantity, self.discount)


@dataclass
class Cart:
    lines: list[CartLine] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find(self, product_id: UUID) -> CartLine | None:
        for line in self.lines:
            if line.product.id == product_id:
                return line
        return None

    def add_item(self, product: CartProduct) -> CartLine:
        """Add one unit of *product*.

        A new line starts at quantity 1 with no discount. An existing line is
        incremented only while below the stock ceiling; otherwise
        :class:`StockLimitError` is raised and the cart is left untouched.
        """
        existing = self.find(product.id)
        if existing is None:
            line = CartLine(product=product)
            self.lines.append(line)
            return line
        if existing.quantity >= product.stock_quantity:
            raise StockLimitError(product.name, product.stock_quantity)
        existing.product = product
        existing.quantity += 1
        return existing

    def set_quantity(self, product_id: UUID, quantity: int) -> CartLine | None:
        """Replace a line's quantity; ``quantity <= 0`` removes the line.

        Returns the updated line, or ``None`` when it was removed or absent.
        """
        if quantity <= 0:
            self.remove(product_id)
            return None
        line = self.find(product_id)
        if line is None:
            return None
        if quantity > line.product.stock_quantity:
            raise StockLimitError(line.product.name, line.product.stock_quantity)
        line.quantity = quantity
        return line

    def set_discount(self, product_id: UUID, discount: Decimal | int | float) -> CartLine | None:
        line = self.find(product_id)
        if line is None:
            return None
        line.discount = clamp_discount(discount)
        return line

    def remove(self, product_id: UUID) -> None:
        self.lines = [line for line in self.lines if line.product.id != product_id]

    def clear(self) -> None:
        self.lines = []

    def totals(self) -> CartTotals:
        return summarize(line.pricing for line in self.lines)

    def snapshot(self) -> Cart:
        """Deep-enough copy for a checkout to work on without racing edits."""
        return Cart(lines=[replace(line) for line in self.lines])


class CartStore:
    """Carts keyed by the owning user. For multi-replica, use Redis."""

    def __init__(self) -> None:
        self._carts: dict[UUID, Cart] = {}
        self._lock = threading.Lock()

    def get(self, user_id: UUID) -> Cart:
        with self._lock:
            cart = self._carts.get(user_id)
            if cart is None:
                cart = self._carts[user_id] = Cart()
            return cart

    def discard(self, user_id: UUID) -> None:
        with self._lock:
            self._carts.pop(user_id, None)

    def clear_all(self) -> None:
        with self._lock:
            self._carts.clear()


cart_store = CartStore()
