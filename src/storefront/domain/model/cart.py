"""Cart and Wishlist aggregates, one of each per user.

Line identity is the ``LineKey`` triple (product, size, color). The cart
never talks to inventory itself: the cart service reserves or releases stock
first and only then applies the matching mutation here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from storefront.domain.exceptions import (
    EntityNotFoundError,
    MaximumQuantityReached,
    MinimumQuantityReached,
)
from storefront.domain.model.value_objects import LineKey, Money, Quantity

MIN_LINE_QUANTITY = 1
DEFAULT_MAX_LINE_QUANTITY = 10


@dataclass
class CartLineItem:
    """A product/variant in the cart with the name, image and price seen
    at the time it was added."""

    product_id: str
    name: str
    image: str
    price: Money
    quantity: int
    size: str = ""
    color: str = ""

    @property
    def key(self) -> LineKey:
        return LineKey(self.product_id, self.size, self.color)

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity


@dataclass
class Cart:
    """Aggregate root for a user's cart.

    Invariants:
    - at most one line per ``LineKey``
    - every line quantity is >= 1
    """

    user_id: str
    items: list[CartLineItem] = field(default_factory=list)
    version: int = 0

    def find(self, key: LineKey) -> CartLineItem | None:
        for item in self.items:
            if item.key == key:
                return item
        return None

    def get(self, key: LineKey) -> CartLineItem:
        item = self.find(key)
        if item is None:
            raise EntityNotFoundError(f"Item {key} is not in the cart")
        return item

    # --- Rule checks (run before any stock change) ----------------------------

    def check_can_increase(self, key: LineKey, max_quantity: int) -> CartLineItem:
        item = self.get(key)
        if item.quantity >= max_quantity:
            raise MaximumQuantityReached(
                f"Maximum quantity of {max_quantity} reached for {item.name}"
            )
        return item

    def check_can_decrease(self, key: LineKey) -> CartLineItem:
        item = self.get(key)
        if item.quantity <= MIN_LINE_QUANTITY:
            raise MinimumQuantityReached(f"Minimum quantity is {MIN_LINE_QUANTITY}")
        return item

    # --- Mutations (stock already reserved or released) -----------------------

    def add(self, line: CartLineItem) -> CartLineItem:
        """Insert ``line``, or merge it into the line with the same key."""
        Quantity(line.quantity)
        existing = self.find(line.key)
        if existing is None:
            self.items.append(line)
            return line
        existing.quantity += line.quantity
        return existing

    def increase(self, key: LineKey) -> None:
        self.get(key).quantity += 1

    def decrease(self, key: LineKey) -> None:
        self.get(key).quantity -= 1

    def remove(self, key: LineKey) -> CartLineItem:
        item = self.get(key)
        self.items.remove(item)
        return item

    def clear(self) -> list[CartLineItem]:
        removed, self.items = self.items, []
        return removed

    @property
    def total(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        return result


@dataclass
class WishlistItem:
    product_id: str
    name: str
    image: str
    price: Money
    size: str = ""
    color: str = ""
    added_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self) -> LineKey:
        return LineKey(self.product_id, self.size, self.color)

    def to_cart_line(self, quantity: int = 1) -> CartLineItem:
        return CartLineItem(
            product_id=self.product_id,
            name=self.name,
            image=self.image,
            price=self.price,
            quantity=quantity,
            size=self.size,
            color=self.color,
        )


@dataclass
class Wishlist:
    user_id: str
    items: list[WishlistItem] = field(default_factory=list)
    version: int = 0

    def find(self, key: LineKey) -> WishlistItem | None:
        for item in self.items:
            if item.key == key:
                return item
        return None

    def add(self, item: WishlistItem) -> bool:
        """Add ``item`` unless its key is already present. Returns True if added."""
        if self.find(item.key) is not None:
            return False
        self.items.append(item)
        return True

    def matching(self, product_id: str, size: str = "", color: str = "") -> list[WishlistItem]:
        """Items of ``product_id``; an empty size or color matches any."""
        return [
            item
            for item in self.items
            if item.product_id == product_id
            and (not size or item.size == size)
            and (not color or item.color == color)
        ]

    def remove(self, key: LineKey) -> WishlistItem | None:
        item = self.find(key)
        if item is not None:
            self.items.remove(item)
        return item

    def remove_matching(self, product_id: str, size: str = "", color: str = "") -> int:
        doomed = self.matching(product_id, size, color)
        self.items = [item for item in self.items if item not in doomed]
        return len(doomed)
