"""Application service: Cancel Order use case.

Only orders that are still processing can be cancelled. The cancelled
status is saved first; every line's stock is released afterwards, so a
lost race never returns stock twice.
"""

from __future__ import annotations

import logging

from storefront.application.dto import OrderDTO, to_order_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import Order
from storefront.domain.model.value_objects import LineKey
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.concurrency import run_with_retry
from storefront.domain.service.inventory_ledger import InventoryLedger, StockRequest
from storefront.domain.service.variant_scope import VariantScope

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        ledger: InventoryLedger,
        scope: VariantScope,
    ) -> None:
        self._order_repo = order_repo
        self._ledger = ledger
        self._scope = scope

    def handle(self, order_id: int) -> OrderDTO:
        def attempt() -> Order:
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            order.cancel()
            self._order_repo.save(order)
            return order

        order = run_with_retry(attempt)

        requests = []
        for item in order.items:
            size, color = self._scope.ledger_variant(
                LineKey(item.product_id, item.size, item.color)
            )
            requests.append(StockRequest(item.product_id, item.quantity.value, size, color))
        unreturned = self._ledger.release_all(requests)
        if unreturned:
            logger.error("Order #%s cancelled but %d of %d line(s) were not restocked: %s",
                         order_id, len(unreturned), len(requests),
                         ", ".join(f"{r.quantity} x {r.product_id}" for r in unreturned))
        logger.info("Order #%s cancelled, %d line(s) restocked",
                    order_id, len(requests) - len(unreturned))
        return to_order_dto(order)
