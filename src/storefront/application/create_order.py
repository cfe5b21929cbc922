"""Application service: Create Order use case.

Orchestrates the flow between repositories, the ledger and the domain
model. Every line is reserved as one batch before the order exists; if the
order cannot be persisted the batch is released again.
"""

from __future__ import annotations

import logging

from storefront.application.dto import OrderDTO, OrderItemSpec, to_order_dto
from storefront.domain.exceptions import DomainException, EntityNotFoundError
from storefront.domain.model.order import (
    Order,
    OrderLineItem,
    PaymentInfo,
    ShippingInfo,
)
from storefront.domain.model.value_objects import LineKey, Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.concurrency import run_with_retry
from storefront.domain.service.image_resolver import ImageResolver
from storefront.domain.service.inventory_ledger import InventoryLedger, StockRequest
from storefront.domain.service.variant_scope import VariantScope

logger = logging.getLogger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        ledger: InventoryLedger,
        scope: VariantScope,
        resolver: ImageResolver,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._ledger = ledger
        self._scope = scope
        self._resolver = resolver

    def handle(
        self,
        user_id: str,
        item_specs: list[OrderItemSpec],
        shipping: ShippingInfo,
        payment: PaymentInfo | None = None,
        tax: str = "0",
        shipping_charges: str = "0",
        notes: str = "",
    ) -> OrderDTO:
        """Place an order.

        Steps:
        1. Snapshot every line from the current product (name, image, price).
        2. Let the Order aggregate validate all business rules.
        3. Reserve stock for all lines, or for none.
        4. Persist; on failure release what was reserved.
        """
        line_items: list[OrderLineItem] = []
        requests: list[StockRequest] = []

        for spec in item_specs:
            product = self._product_repo.get_by_id(spec.product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{spec.product_id}' not found")

            line_items.append(
                OrderLineItem(
                    product_id=product.id,
                    name=product.name,
                    quantity=Quantity(spec.quantity),
                    unit_price=product.unit_price(spec.size, spec.color),  # <-- price snapshot
                    image=self._resolver.first_url(product, spec.color),
                    size=spec.size,
                    color=spec.color,
                )
            )
            size, color = self._scope.ledger_variant(
                LineKey(product.id, spec.size, spec.color)
            )
            requests.append(StockRequest(product.id, spec.quantity, size, color))

        order = Order.create(
            user_id=user_id,
            items=line_items,
            shipping=shipping,
            payment=payment or PaymentInfo(),
            tax=Money.of(tax),
            shipping_charges=Money.of(shipping_charges),
            notes=notes,
        )

        self._ledger.reserve_all(requests)
        try:
            run_with_retry(lambda: self._insert(order))
        except DomainException:
            logger.error("Could not save order for %s, releasing stock", user_id)
            self._ledger.release_all(requests)
            raise

        logger.info("Order #%s placed by %s (%s)", order.id, user_id, order.total)
        return to_order_dto(order)

    def _insert(self, order: Order) -> None:
        # a lost race on the id counter hands out a fresh id on retry
        order.id = None
        order.version = 0
        self._order_repo.save(order)
