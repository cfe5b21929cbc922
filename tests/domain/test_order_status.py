"""Unit tests for the Order aggregate's creation rules and status moves."""

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import (
    MAX_LINE_ITEMS,
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentInfo,
    PaymentMethod,
    ShippingInfo,
)
from storefront.domain.model.value_objects import Money, Quantity

SHIPPING = ShippingInfo(address="12 MG Road", city="Pune", country="India")


def _line(qty: int = 2, price: str = "100") -> OrderLineItem:
    return OrderLineItem(product_id="p1", name="Mug", quantity=Quantity(qty),
                         unit_price=Money.of(price))


def _order(**kwargs) -> Order:
    return Order.create(user_id="u1", items=[_line()], shipping=SHIPPING,
                        payment=PaymentInfo(), **kwargs)


class TestCreate:

    def test_totals_include_tax_and_shipping(self):
        order = _order(tax=Money.of("18"), shipping_charges=Money.of("50"))
        assert order.items_total == Money.of("200")
        assert order.total == Money.of("268")
        assert order.status == OrderStatus.PROCESSING

    def test_empty_order_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create(user_id="u1", items=[], shipping=SHIPPING, payment=PaymentInfo())

    def test_too_many_lines_rejected(self):
        with pytest.raises(ValidationError, match=f"Maximum {MAX_LINE_ITEMS}"):
            Order.create(user_id="u1", items=[_line()] * (MAX_LINE_ITEMS + 1),
                         shipping=SHIPPING, payment=PaymentInfo())

    def test_address_required(self):
        with pytest.raises(ValidationError, match="Address, city and country"):
            Order.create(user_id="u1", items=[_line()],
                         shipping=ShippingInfo(address="", city="Pune", country="India"),
                         payment=PaymentInfo())

    def test_online_payment_with_reference_is_paid(self):
        order = Order.create(user_id="u1", items=[_line()], shipping=SHIPPING,
                             payment=PaymentInfo(PaymentMethod.ONLINE, "pay_123"))
        assert order.paid_at == order.created_at

    def test_cod_is_not_paid(self):
        assert _order().paid_at is None


class TestTransitions:

    def test_advance_walks_forward(self):
        order = _order()
        assert order.advance() == OrderStatus.SHIPPED
        assert order.advance() == OrderStatus.DELIVERED
        assert order.delivered_at is not None

    def test_advance_past_delivered_rejected(self):
        order = _order()
        order.move_to(OrderStatus.DELIVERED)
        with pytest.raises(ValidationError, match="already delivered"):
            order.advance()

    def test_cannot_move_backwards(self):
        order = _order()
        order.advance()
        with pytest.raises(ValidationError, match="from shipped to processing"):
            order.move_to(OrderStatus.PROCESSING)

    def test_cancel_processing(self):
        order = _order()
        order.cancel()
        assert order.status == OrderStatus.CANCELLED

    def test_cannot_cancel_shipped(self):
        order = _order()
        order.advance()
        with pytest.raises(ValidationError, match="Cannot move order from shipped"):
            order.cancel()

    def test_cannot_cancel_twice(self):
        order = _order()
        order.cancel()
        with pytest.raises(ValidationError, match="already cancelled"):
            order.cancel()
