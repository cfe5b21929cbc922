"""Application service: Delete Product use case.

Image bytes are removed from local and remote storage before the product
document goes. Storage failures are logged by the orchestrator and do not
stop the delete.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.hybrid_upload_orchestrator import HybridUploadOrchestrator

logger = logging.getLogger(__name__)


class DeleteProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        orchestrator: HybridUploadOrchestrator,
    ) -> None:
        self._product_repo = product_repo
        self._orchestrator = orchestrator

    def handle(self, product_id: str) -> int:
        """Delete the product and return how many images were discarded."""
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        images = product.all_images()
        for image in images:
            self._orchestrator.discard(image)
        self._product_repo.delete(product_id)
        logger.info("Deleted product %s and %d image(s)", product_id, len(images))
        return len(images)
