"""Application service: Delete Product Image use case.

The record leaves the product with a conditional save first; only then are
its bytes removed from local and remote storage. A replication still in
flight for the record finds it gone and cleans up its own remote copy.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.image import ProductImage
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.concurrency import run_with_retry
from storefront.domain.service.hybrid_upload_orchestrator import HybridUploadOrchestrator

logger = logging.getLogger(__name__)


class DeleteProductImageHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        orchestrator: HybridUploadOrchestrator,
    ) -> None:
        self._product_repo = product_repo
        self._orchestrator = orchestrator

    def handle(self, product_id: str, image_ref: str, color: str = "") -> int:
        """Remove one image and return how many images are left in its list."""

        def attempt() -> tuple[ProductImage, int]:
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
            removed = product.remove_image(image_ref, color)
            self._product_repo.save(product)
            return removed, len(product.image_list(color))

        removed, remaining = run_with_retry(attempt)
        self._orchestrator.discard(removed)
        logger.info("Deleted image %s from product %s%s", image_ref, product_id,
                    f" ({color})" if color else "")
        return remaining
