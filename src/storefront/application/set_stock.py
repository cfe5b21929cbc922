"""Application service: Set Stock use case.

Administrative override of a product's or a variant's stock. On a
size-tracked product the product total is recounted from its sizes, and
setting product stock directly is refused.
"""

from __future__ import annotations

import logging

from storefront.application.dto import StockDTO, to_stock_dto
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.product import Product
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.concurrency import run_with_retry
from storefront.domain.service.variant_scope import VariantScope

logger = logging.getLogger(__name__)


class SetStockHandler:

    def __init__(self, product_repo: ProductRepository, scope: VariantScope) -> None:
        self._product_repo = product_repo
        self._scope = scope

    def handle(self, product_id: str, quantity: int, size: str = "", color: str = "") -> StockDTO:
        if bool(size) != bool(color):
            raise ValidationError("Size and color must be given together")

        def attempt() -> tuple[Product, bool]:
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
            size_tracked = self._scope.tracks_sizes(product)
            if size:
                product.set_variant_stock(size, color, quantity)
                if size_tracked:
                    product.recount_stock()
            elif size_tracked:
                raise ValidationError(
                    f"Stock of {product.name} is the sum of its sizes; set a size instead"
                )
            else:
                product.set_stock(quantity)
            self._product_repo.save(product)
            return product, size_tracked

        product, size_tracked = run_with_retry(attempt)
        logger.info("Stock of %s (%s/%s) set to %d, product total %d",
                    product_id, color or "-", size or "-", quantity, product.stock)
        return to_stock_dto(product, size_tracked)
