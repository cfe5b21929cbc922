"""Application service: Add to Wishlist use case.

Wishlists never touch stock. Adding a line that is already there is a no-op.
"""

from __future__ import annotations

import logging

from storefront.application.dto import LineDTO, to_wishlist_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.cart import Wishlist, WishlistItem
from storefront.domain.repository.cart_repository import WishlistRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.concurrency import run_with_retry
from storefront.domain.service.image_resolver import ImageResolver

logger = logging.getLogger(__name__)


class AddToWishlistHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        wishlist_repo: WishlistRepository,
        resolver: ImageResolver,
    ) -> None:
        self._product_repo = product_repo
        self._wishlist_repo = wishlist_repo
        self._resolver = resolver

    def handle(self, user_id: str, product_id: str, size: str = "", color: str = "") -> list[LineDTO]:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        def attempt() -> Wishlist:
            wishlist = self._wishlist_repo.get_for_user(user_id) or Wishlist(user_id=user_id)
            added = wishlist.add(
                WishlistItem(
                    product_id=product.id,
                    name=product.name,
                    image=self._resolver.first_url(product, color),
                    price=product.unit_price(size, color),
                    size=size,
                    color=color,
                )
            )
            if added:
                self._wishlist_repo.save(wishlist)
            else:
                logger.debug("Item %s already in wishlist of %s", product_id, user_id)
            return wishlist

        return to_wishlist_dto(run_with_retry(attempt))
