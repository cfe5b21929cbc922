"""Application service: Move Wishlist Item to Cart use case.

The cart add, including its stock reservation, runs first. The item leaves
the wishlist only after that succeeded, so a failed add (no stock, unknown
product) never loses the wishlist entry.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.application.dto import CartDTO, LineDTO, to_cart_dto, to_wishlist_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.cart import Wishlist
from storefront.domain.repository.cart_repository import WishlistRepository
from storefront.domain.service.cart_service import CartService
from storefront.domain.service.concurrency import run_with_retry


@dataclass(frozen=True)
class MoveToCartResult:
    cart: CartDTO
    wishlist: list[LineDTO]


class MoveToCartHandler:

    def __init__(self, wishlist_repo: WishlistRepository, cart_service: CartService) -> None:
        self._wishlist_repo = wishlist_repo
        self._cart_service = cart_service

    def handle(self, user_id: str, product_id: str, size: str = "", color: str = "") -> MoveToCartResult:
        wishlist = self._wishlist_repo.get_for_user(user_id)
        if wishlist is None:
            raise EntityNotFoundError(f"No wishlist for user '{user_id}'")
        candidates = wishlist.matching(product_id, size, color)
        if not candidates:
            raise EntityNotFoundError(f"Product '{product_id}' is not in the wishlist")
        item = candidates[0]

        cart = self._cart_service.add(user_id, item.to_cart_line(quantity=1))

        def remove() -> Wishlist:
            fresh = self._wishlist_repo.get_for_user(user_id) or Wishlist(user_id=user_id)
            if fresh.remove(item.key) is not None:
                self._wishlist_repo.save(fresh)
            return fresh

        return MoveToCartResult(
            cart=to_cart_dto(cart, user_id),
            wishlist=to_wishlist_dto(run_with_retry(remove)),
        )
