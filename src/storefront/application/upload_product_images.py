"""Application service: Upload Product Images use case.

Files are written locally and attached to the product before the request
returns; the copy to the remote store happens in the background. With no
remote store configured the records are stored as ``not_required``.
"""

from __future__ import annotations

import logging

from storefront.application.image_folders import product_folder
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.image import ImageRecord, MigrationStatus
from storefront.domain.model.product import Product
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.concurrency import run_with_retry
from storefront.domain.service.hybrid_upload_orchestrator import (
    HybridUploadOrchestrator,
    IncomingFile,
    UploadTicket,
)

logger = logging.getLogger(__name__)

MAX_FILES_PER_UPLOAD = 5


class UploadProductImagesHandler:

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

    def handle(self, product_id: str, files: list[IncomingFile], color: str = "") -> list[UploadTicket]:
        if not files:
            raise ValidationError("At least one image is required")
        if len(files) > MAX_FILES_PER_UPLOAD:
            raise ValidationError(f"At most {MAX_FILES_PER_UPLOAD} images per upload")

        product = self._load(product_id)
        product.image_list(color)  # unknown color fails before any file is written

        def persist(records: list[ImageRecord]) -> None:
            def attempt() -> None:
                fresh = self._load(product_id)
                fresh.image_list(color).extend(records)
                self._product_repo.save(fresh)

            run_with_retry(attempt)

        status = MigrationStatus.PENDING if self._replicate else MigrationStatus.NOT_REQUIRED
        tickets = self._orchestrator.accept_all(
            files,
            product_folder(self._folder_root, product, color),
            migration_status=status,
            persist=persist,
        )
        logger.info("Attached %d image(s) to product %s%s",
                    len(tickets), product_id, f" ({color})" if color else "")
        return tickets

    def _load(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return product
