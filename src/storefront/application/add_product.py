"""Application service: Add Product use case."""

from __future__ import annotations

import logging
import uuid

from storefront.application.dto import ColorSpec, StockDTO, to_stock_dto
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.product import Color, Product, Size
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.category_repository import CategoryRepository
from storefront.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class AddProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        category_repo: CategoryRepository,
    ) -> None:
        self._product_repo = product_repo
        self._category_repo = category_repo

    def handle(
        self,
        name: str,
        price: str,
        stock: int = 0,
        category_id: str | None = None,
        colors: list[ColorSpec] | None = None,
    ) -> StockDTO:
        """Add a new product to the catalog.

        For a category that tracks sizes, product stock is the sum of the
        size stock given and ``stock`` is ignored.
        """
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if stock < 0:
            raise ValidationError("Stock cannot be negative")

        size_tracked = False
        if category_id is not None:
            category = self._category_repo.get_by_id(category_id)
            if category is None:
                raise EntityNotFoundError(f"Category with ID '{category_id}' not found")
            size_tracked = category.tracks_size_variants

        product = Product(
            id=self._next_id(),
            name=name.strip(),
            price=Money.of(price),
            stock=stock,
            category_id=category_id,
            colors=[self._build_color(spec) for spec in colors or []],
        )
        if size_tracked:
            product.recount_stock()

        self._product_repo.save(product)
        logger.info("Added product %s (%s) with stock %d", product.id, product.name, product.stock)
        return to_stock_dto(product, size_tracked)

    def _next_id(self) -> str:
        # Auto-assign ID based on existing numeric IDs
        numeric = [int(p.id) for p in self._product_repo.list_all() if p.id.isdigit()]
        return str(max(numeric) + 1) if numeric else "1"

    @staticmethod
    def _build_color(spec: ColorSpec) -> Color:
        if not spec.color_name:
            raise ValidationError("Color name is required")
        return Color(
            color_id=uuid.uuid4().hex[:12],
            color_name=spec.color_name,
            color_code=spec.color_code,
            sizes=[
                Size(size=s.size, price=Money.of(s.price), stock=s.stock)
                for s in spec.sizes
            ],
        )
