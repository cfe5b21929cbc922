"""Order aggregate: an immutable snapshot of what was bought.

Only the status moves, and only forward:
processing -> shipped -> delivered, or processing -> cancelled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import LineKey, Money, Quantity


class OrderStatus(Enum):
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    COD = "COD"
    ONLINE = "ONLINE"


_NEXT_STATUS = {
    OrderStatus.PROCESSING: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.DELIVERED,
}

_ALLOWED = {
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

MAX_LINE_ITEMS = 50


@dataclass(frozen=True)
class ShippingInfo:
    address: str
    city: str
    country: str
    phone: str = ""


@dataclass(frozen=True)
class PaymentInfo:
    method: PaymentMethod = PaymentMethod.COD
    reference: str | None = None


@dataclass(frozen=True)
class OrderLineItem:
    product_id: str
    name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    image: str = ""
    size: str = ""
    color: str = ""

    @property
    def key(self) -> LineKey:
        return LineKey(self.product_id, self.size, self.color)

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass
class Order:
    """Aggregate root for placed orders.

    Use ``Order.create()`` for new orders. ``__init__`` does not validate
    so the repository can reconstitute persisted orders as they are.
    """

    id: int | None
    user_id: str
    items: list[OrderLineItem]
    shipping: ShippingInfo
    payment: PaymentInfo = field(default_factory=PaymentInfo)
    tax: Money = field(default_factory=Money.zero)
    shipping_charges: Money = field(default_factory=Money.zero)
    status: OrderStatus = OrderStatus.PROCESSING
    notes: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    paid_at: datetime | None = None
    delivered_at: datetime | None = None
    version: int = 0

    @staticmethod
    def create(
        user_id: str,
        items: list[OrderLineItem],
        shipping: ShippingInfo,
        payment: PaymentInfo,
        tax: Money | None = None,
        shipping_charges: Money | None = None,
        notes: str = "",
    ) -> Order:
        if not user_id:
            raise ValidationError("User is required")
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")
        if not (shipping.address and shipping.city and shipping.country):
            raise ValidationError("Address, city and country are required")

        order = Order(
            id=None,
            user_id=user_id,
            items=list(items),
            shipping=shipping,
            payment=payment,
            tax=tax or Money.zero(),
            shipping_charges=shipping_charges or Money.zero(),
            notes=notes,
        )
        if payment.method == PaymentMethod.ONLINE and payment.reference:
            order.paid_at = order.created_at
        return order

    # --- State transitions ----------------------------------------------------

    def advance(self) -> OrderStatus:
        """Move to the next step: processing -> shipped -> delivered."""
        nxt = _NEXT_STATUS.get(self.status)
        if nxt is None:
            raise ValidationError(f"Order already {self.status.value}")
        self.move_to(nxt)
        return nxt

    def move_to(self, status: OrderStatus) -> None:
        if status not in _ALLOWED[self.status]:
            raise ValidationError(
                f"Cannot move order from {self.status.value} to {status.value}"
            )
        self.status = status
        if status == OrderStatus.DELIVERED:
            self.delivered_at = datetime.now(timezone.utc)

    def cancel(self) -> None:
        """Only orders that have not shipped can be cancelled.

        Releasing the reserved stock is up to the caller.
        """
        if self.status == OrderStatus.CANCELLED:
            raise ValidationError("Order is already cancelled")
        self.move_to(OrderStatus.CANCELLED)

    # --- Computed properties --------------------------------------------------

    @property
    def items_total(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def total(self) -> Money:
        return self.items_total + self.tax + self.shipping_charges
