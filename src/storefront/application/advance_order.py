"""Application service: Advance Order use case.

Moves an order one step along processing -> shipped -> delivered.
"""

from __future__ import annotations

import logging

from storefront.application.dto import OrderDTO, to_order_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import Order
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.concurrency import run_with_retry

logger = logging.getLogger(__name__)


class AdvanceOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int) -> OrderDTO:
        def attempt() -> Order:
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            order.advance()
            self._order_repo.save(order)
            return order

        order = run_with_retry(attempt)
        logger.info("Order #%s is now %s", order_id, order.status.value)
        return to_order_dto(order)
