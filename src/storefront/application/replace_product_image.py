"""Application service: Replace Product Image use case.

The new file takes the old image's place in the same list, so display
order is kept. The old image's bytes are discarded from both stores once
the product holding the new record has been saved.
"""

from __future__ import annotations

import logging

from storefront.application.image_folders import product_folder
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.image import ImageRecord, MigrationStatus, ProductImage
from storefront.domain.model.product import Product
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.concurrency import run_with_retry
from storefront.domain.service.hybrid_upload_orchestrator import (
    HybridUploadOrchestrator,
    IncomingFile,
    UploadTicket,
)

logger = logging.getLogger(__name__)


class ReplaceProductImageHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        orchestrator: HybridUploadOrchestrator,
        folder_root: str,
        replicate: bool = True,
    ) -> None:
        self._product_repo = product_repo
        self._orchestrator = orchestrator
        self._folder_root = folder_root
        self._replicate = replicate

    def handle(
        self, product_id: str, image_ref: str, file: IncomingFile, color: str = ""
    ) -> UploadTicket:
        product = self._load(product_id)
        product.locate_image(image_ref, color)  # unknown image fails before any file is written

        replaced: list[ProductImage] = []

        def persist(records: list[ImageRecord]) -> None:
            def attempt() -> None:
                fresh = self._load(product_id)
                old = fresh.swap_image(image_ref, records[0], color)
                self._product_repo.save(fresh)
                replaced[:] = [old]

            run_with_retry(attempt)

        status = MigrationStatus.PENDING if self._replicate else MigrationStatus.NOT_REQUIRED
        ticket = self._orchestrator.accept(
            file.data,
            file.original_name,
            product_folder(self._folder_root, product, color),
            migration_status=status,
            persist=persist,
            content_type=file.content_type,
        )
        self._orchestrator.discard(replaced[0])
        logger.info("Replaced image %s of product %s with %s",
                    image_ref, product_id, ticket.record.filename)
        return ticket

    def _load(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return product
