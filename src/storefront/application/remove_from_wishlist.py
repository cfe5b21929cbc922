"""Application service: Remove from Wishlist use case.

An empty size or color removes every variant of the product that matches
the rest.
"""

from __future__ import annotations

import logging

from storefront.application.dto import LineDTO, to_wishlist_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.cart import Wishlist
from storefront.domain.repository.cart_repository import WishlistRepository
from storefront.domain.service.concurrency import run_with_retry

logger = logging.getLogger(__name__)


class RemoveFromWishlistHandler:

    def __init__(self, wishlist_repo: WishlistRepository) -> None:
        self._wishlist_repo = wishlist_repo

    def handle(self, user_id: str, product_id: str, size: str = "", color: str = "") -> list[LineDTO]:
        def attempt() -> Wishlist:
            wishlist = self._wishlist_repo.get_for_user(user_id)
            if wishlist is None:
                raise EntityNotFoundError(f"No wishlist for user '{user_id}'")
            removed = wishlist.remove_matching(product_id, size, color)
            if removed:
                self._wishlist_repo.save(wishlist)
            logger.info("Removed %d item(s) from wishlist of %s", removed, user_id)
            return wishlist

        return to_wishlist_dto(run_with_retry(attempt))
