"""Application service: Show Product Images use case (query).

Reports, per image, the URL a consumer gets right now together with where
the bytes live and how far replication has got.
"""

from __future__ import annotations

from storefront.application.dto import ImageDTO
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.image import LegacyImage, ProductImage
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.image_resolver import ImageResolver


class ShowProductImagesHandler:

    def __init__(self, product_repo: ProductRepository, resolver: ImageResolver) -> None:
        self._product_repo = product_repo
        self._resolver = resolver

    def handle(self, product_id: str) -> list[ImageDTO]:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        result = [self._to_dto(image) for image in product.images]
        for color in product.colors:
            result.extend(self._to_dto(image, color.color_name) for image in color.images)
        return result

    def _to_dto(self, image: ProductImage, color: str = "") -> ImageDTO:
        availability = self._resolver.availability(image)
        if isinstance(image, LegacyImage):
            return ImageDTO(
                filename=None,
                display_url=availability.best_url,
                storage_mode="legacy",
                migration_status="-",
                fallback_urls=availability.fallback_urls,
                color=color,
            )
        return ImageDTO(
            filename=image.filename,
            display_url=availability.best_url,
            storage_mode=image.storage_mode.value,
            migration_status=image.migration_status.value,
            fallback_urls=availability.fallback_urls,
            color=color,
        )
