"""Application service: Remove Cart Item use case.

Drops a line and returns its full quantity to stock.
"""

from __future__ import annotations

from storefront.application.dto import CartDTO, to_cart_dto
from storefront.domain.model.value_objects import LineKey
from storefront.domain.service.cart_service import CartService


class RemoveCartItemHandler:

    def __init__(self, cart_service: CartService) -> None:
        self._cart_service = cart_service

    def handle(self, user_id: str, product_id: str, size: str = "", color: str = "") -> CartDTO:
        cart = self._cart_service.remove(user_id, LineKey(product_id, size, color))
        return to_cart_dto(cart, user_id)
