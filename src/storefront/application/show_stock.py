"""Application service: Show Stock use case (query)."""

from __future__ import annotations

from storefront.application.dto import StockDTO, to_stock_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.variant_scope import VariantScope


class ShowStockHandler:

    def __init__(self, product_repo: ProductRepository, scope: VariantScope) -> None:
        self._product_repo = product_repo
        self._scope = scope

    def handle(self, product_id: str | None = None) -> list[StockDTO]:
        """Show one product, or every product when no ID is given."""
        if product_id is None:
            products = self._product_repo.list_all()
        else:
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
            products = [product]
        return [to_stock_dto(p, self._scope.tracks_sizes(p)) for p in products]
