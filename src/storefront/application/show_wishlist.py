"""Application service: Show Wishlist use case (query)."""

from __future__ import annotations

from storefront.application.dto import LineDTO, to_wishlist_dto
from storefront.domain.repository.cart_repository import WishlistRepository


class ShowWishlistHandler:

    def __init__(self, wishlist_repo: WishlistRepository) -> None:
        self._wishlist_repo = wishlist_repo

    def handle(self, user_id: str) -> list[LineDTO]:
        return to_wishlist_dto(self._wishlist_repo.get_for_user(user_id))
