"""Application service: Add to Cart use case.

Builds the line snapshot (name, image, price) from the current product and
lets the cart service reserve stock and merge the line.
"""

from __future__ import annotations

from storefront.application.dto import CartDTO, to_cart_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.cart import CartLineItem
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.cart_service import CartService
from storefront.domain.service.image_resolver import ImageResolver


class AddToCartHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        cart_service: CartService,
        resolver: ImageResolver,
    ) -> None:
        self._product_repo = product_repo
        self._cart_service = cart_service
        self._resolver = resolver

    def handle(
        self,
        user_id: str,
        product_id: str,
        quantity: int,
        size: str = "",
        color: str = "",
    ) -> CartDTO:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        line = CartLineItem(
            product_id=product.id,
            name=product.name,
            image=self._resolver.first_url(product, color),
            price=product.unit_price(size, color),  # <-- price snapshot
            quantity=quantity,
            size=size,
            color=color,
        )
        cart = self._cart_service.add(user_id, line)
        return to_cart_dto(cart, user_id)
