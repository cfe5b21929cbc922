"""Application service: Update Order Status use case.

Sets an explicit status. Only forward moves are accepted, and cancelling
goes through CancelOrderHandler so stock is returned.
"""

from __future__ import annotations

import logging

from storefront.application.dto import OrderDTO, to_order_dto
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.order import Order, OrderStatus
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.concurrency import run_with_retry

logger = logging.getLogger(__name__)


class UpdateOrderStatusHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int, status: str) -> OrderDTO:
        try:
            target = OrderStatus(status.lower())
        except ValueError:
            raise ValidationError(f"Unknown order status '{status}'")
        if target == OrderStatus.CANCELLED:
            raise ValidationError("Use order cancellation to cancel an order")

        def attempt() -> Order:
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            order.move_to(target)
            self._order_repo.save(order)
            return order

        order = run_with_retry(attempt)
        logger.info("Order #%s set to %s", order_id, target.value)
        return to_order_dto(order)
