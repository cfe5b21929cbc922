"""Application service: Clear Cart use case."""

from __future__ import annotations

from storefront.application.dto import CartDTO, to_cart_dto
from storefront.domain.service.cart_service import CartService


class ClearCartHandler:

    def __init__(self, cart_service: CartService) -> None:
        self._cart_service = cart_service

    def handle(self, user_id: str) -> CartDTO:
        """Empty the cart, returning every reserved unit to stock."""
        cart = self._cart_service.clear(user_id)
        return to_cart_dto(cart, user_id)
