"""Application service: Migrate Legacy Images use case.

Queues remote replication for images that only exist on local storage:

* bare legacy URLs under the local upload prefix whose file still exists
  are first converted to pending records (``storage_mode=legacy``);
* pending records that never got replicated are queued as they are.

Images already on the remote host, final records and URLs whose local file
is gone are skipped. ``dry_run`` reports what would be queued without
changing anything.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from storefront.application.image_folders import product_folder
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.image import (
    ImageRecord,
    LegacyImage,
    MigrationStatus,
    ProductImage,
    StorageMode,
)
from storefront.domain.model.product import Product
from storefront.domain.repository.image_store import LocalImageStore
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.concurrency import run_with_retry
from storefront.domain.service.hybrid_upload_orchestrator import HybridUploadOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class MigrationReport:
    products: int = 0
    queued: int = 0
    skipped: int = 0
    dry_run: bool = False
    futures: list[Future] = field(default_factory=list)


class MigrateLegacyImagesHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        local_store: LocalImageStore,
        orchestrator: HybridUploadOrchestrator,
        folder_root: str,
        upload_url_prefix: str,
        remote_configured: bool,
    ) -> None:
        self._product_repo = product_repo
        self._local_store = local_store
        self._orchestrator = orchestrator
        self._folder_root = folder_root
        self._prefix = upload_url_prefix.rstrip("/") + "/"
        self._remote_configured = remote_configured

    def handle(self, product_id: str | None = None, dry_run: bool = False) -> MigrationReport:
        if not self._remote_configured:
            raise ValidationError("Remote image storage is not configured")

        if product_id is None:
            products = self._product_repo.list_all()
        else:
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
            products = [product]

        report = MigrationReport(products=len(products), dry_run=dry_run)
        for product in products:
            self._migrate_product(product, report)
        logger.info("Image migration %s: %d queued, %d skipped across %d product(s)",
                    "dry run" if dry_run else "run", report.queued, report.skipped,
                    report.products)
        return report

    def _migrate_product(self, product: Product, report: MigrationReport) -> None:
        candidates = sum(
            1 for _, image in self._images_with_color(product)
            if self._candidate(image) is not None
        )
        report.skipped += len(product.all_images()) - candidates
        if report.dry_run:
            report.queued += candidates
            return
        if not candidates:
            return

        def attempt() -> list[tuple[str, ImageRecord]]:
            fresh = self._product_repo.get_by_id(product.id)
            if fresh is None:
                return []
            ready: list[tuple[str, ImageRecord]] = []
            converted = False
            for color, image in self._images_with_color(fresh):
                record = self._candidate(image)
                if record is None:
                    continue
                if isinstance(image, LegacyImage):
                    fresh.replace_image(image, record)
                    converted = True
                ready.append((color, record))
            if converted:
                self._product_repo.save(fresh)
            return ready

        for color, record in run_with_retry(attempt):
            folder = product_folder(self._folder_root, product, color)
            report.futures.append(self._orchestrator.replicate_existing(record, folder))
            report.queued += 1

    def _candidate(self, image: ProductImage) -> ImageRecord | None:
        """The pending record to replicate for ``image``, or None to skip it."""
        if isinstance(image, LegacyImage):
            if not image.url.startswith(self._prefix) or not self._exists(image.url):
                return None
            return ImageRecord(
                filename=PurePosixPath(image.url).name,
                original_name=PurePosixPath(image.url).name,
                local_path=image.url,
                url=image.url,
                migration_status=MigrationStatus.PENDING,
                storage_mode=StorageMode.LEGACY,
            )
        if (
            image.migration_status == MigrationStatus.PENDING
            and not image.remote_url
            and image.local_path
            and self._exists(image.local_path)
        ):
            return image
        return None

    def _exists(self, public_path: str) -> bool:
        try:
            return self._local_store.exists(public_path)
        except OSError:
            logger.warning("Could not check local file %s", public_path, exc_info=True)
            return False

    @staticmethod
    def _images_with_color(product: Product) -> list[tuple[str, ProductImage]]:
        pairs: list[tuple[str, ProductImage]] = [("", image) for image in product.images]
        for color in product.colors:
            pairs.extend((color.color_name, image) for image in color.images)
        return pairs
