"""Domain service: decides whether size-level stock applies to a line.

Only products in categories that track size variants keep per-size stock.
For everything else the ledger is called with product-level stock only.
"""

from __future__ import annotations

import logging

from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import LineKey
from storefront.domain.repository.category_repository import CategoryRepository
from storefront.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class VariantScope:

    def __init__(
        self,
        product_repo: ProductRepository,
        category_repo: CategoryRepository,
    ) -> None:
        self._product_repo = product_repo
        self._category_repo = category_repo

    def tracks_sizes(self, product: Product) -> bool:
        if product.category_id is None:
            return False
        category = self._category_repo.get_by_id(product.category_id)
        if category is None:
            logger.warning(
                "Category %s of product %s not found, using product-level stock",
                product.category_id, product.id,
            )
            return False
        return category.tracks_size_variants

    def ledger_variant(self, key: LineKey) -> tuple[str, str]:
        """Return the (size, color) to hand to the ledger for ``key``."""
        if not key.names_variant:
            return "", ""
        product = self._product_repo.get_by_id(key.product_id)
        # a missing product is reported by the ledger itself
        if product is None or self.tracks_sizes(product):
            return key.size, key.color
        return "", ""
