"""Integration tests for the product image use cases."""

import pytest

from storefront.application.delete_product_image import DeleteProductImageHandler
from storefront.application.migrate_legacy_images import MigrateLegacyImagesHandler
from storefront.application.replace_product_image import ReplaceProductImageHandler
from storefront.application.show_product_images import ShowProductImagesHandler
from storefront.application.upload_product_images import UploadProductImagesHandler
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.image import ImageRecord, LegacyImage, MigrationStatus, StorageMode
from storefront.domain.model.product import Color, Product
from storefront.domain.model.value_objects import Money
from storefront.domain.service.hybrid_upload_orchestrator import (
    HybridUploadOrchestrator,
    IncomingFile,
)
from storefront.domain.service.image_resolver import ImageResolver
from tests.fakes import FakeLocalImageStore, FakeProductRepository, FakeRemoteStore

ROOT = "ecommerce/products"


@pytest.fixture
def env():
    products = FakeProductRepository([
        Product(id="p1", name="Mug", price=Money.of("250"), stock=3, category_id="kitchen",
                colors=[Color(color_id="c1", color_name="Sky Blue", color_code="#8cf")]),
    ])
    local, remote = FakeLocalImageStore(), FakeRemoteStore()
    orchestrator = HybridUploadOrchestrator(local, remote, products, backoff_base=0)
    yield products, local, remote, orchestrator
    orchestrator.shutdown(drain=False)


class TestUpload:

    def test_upload_attaches_and_replicates(self, env):
        products, local, remote, orchestrator = env
        handler = UploadProductImagesHandler(products, orchestrator, ROOT)

        tickets = handler.handle("p1", [IncomingFile(b"a", "a.jpg"), IncomingFile(b"b", "b.jpg")])
        for ticket in tickets:
            ticket.future.result(timeout=5)

        images = products.get_by_id("p1").images
        assert len(images) == 2
        assert all(img.migration_status == MigrationStatus.COMPLETED for img in images)
        assert all(key.startswith("ecommerce/products/kitchen/p1/") for key in remote.objects)

    def test_color_upload_goes_to_color_folder(self, env):
        products, _, remote, orchestrator = env
        handler = UploadProductImagesHandler(products, orchestrator, ROOT)

        [ticket] = handler.handle("p1", [IncomingFile(b"a", "a.jpg")], color="Sky Blue")
        ticket.future.result(timeout=5)

        product = products.get_by_id("p1")
        assert product.images == []
        assert len(product.find_color("Sky Blue").images) == 1
        assert all(key.startswith("ecommerce/products/kitchen/p1/sky-blue/")
                   for key in remote.objects)

    def test_without_remote_store_records_are_not_required(self, env):
        products, _, remote, orchestrator = env
        handler = UploadProductImagesHandler(products, orchestrator, ROOT, replicate=False)

        [ticket] = handler.handle("p1", [IncomingFile(b"a", "a.jpg")])

        assert ticket.future is None
        assert products.get_by_id("p1").images[0].migration_status == MigrationStatus.NOT_REQUIRED

    def test_unknown_color_writes_nothing(self, env):
        products, local, _, orchestrator = env
        handler = UploadProductImagesHandler(products, orchestrator, ROOT)
        with pytest.raises(EntityNotFoundError, match="no color"):
            handler.handle("p1", [IncomingFile(b"a", "a.jpg")], color="Green")
        assert local.files == {}

    def test_file_count_limits(self, env):
        products, _, _, orchestrator = env
        handler = UploadProductImagesHandler(products, orchestrator, ROOT)
        with pytest.raises(ValidationError, match="At least one"):
            handler.handle("p1", [])
        with pytest.raises(ValidationError, match="At most"):
            handler.handle("p1", [IncomingFile(b"x", f"{i}.jpg") for i in range(6)])

    def test_color_removed_during_upload(self):
        products = FakeProductRepository([
            Product(id="p1", name="Mug", price=Money.of("250"), stock=3,
                    colors=[Color(color_id="c1", color_name="Sky Blue", color_code="#8cf")]),
        ])
        local = _ColorDroppingLocalStore(products)
        orchestrator = HybridUploadOrchestrator(local, FakeRemoteStore(), products, backoff_base=0)
        handler = UploadProductImagesHandler(products, orchestrator, ROOT)

        with pytest.raises(EntityNotFoundError, match="no color"):
            handler.handle("p1", [IncomingFile(b"a", "a.jpg")], color="Sky Blue")
        orchestrator.shutdown()

        assert local.files == {}
        assert products.get_by_id("p1").all_images() == []


class _ColorDroppingLocalStore(FakeLocalImageStore):
    """Another admin removes every color while the file is being written."""

    def __init__(self, products: FakeProductRepository) -> None:
        super().__init__()
        self._products = products

    def write(self, data: bytes, original_name: str):
        product = self._products.get_by_id("p1")
        product.colors = []
        self._products.save(product)
        return super().write(data, original_name)


class TestShowImages:

    def test_reports_display_url_and_state(self, env):
        products, local, _, orchestrator = env
        UploadProductImagesHandler(products, orchestrator, ROOT, replicate=False).handle(
            "p1", [IncomingFile(b"a", "a.jpg")])
        product = products.get_by_id("p1")
        product.find_color("Sky Blue").images.append(LegacyImage("https://old.example.com/x.jpg"))
        products.save(product)

        images = ShowProductImagesHandler(products, ImageResolver(local)).handle("p1")

        assert images[0].storage_mode == "local"
        assert images[0].display_url == images[0].fallback_urls[0]
        assert images[1].color == "Sky Blue"
        assert images[1].storage_mode == "legacy"
        assert images[1].display_url == "https://old.example.com/x.jpg"


class TestReplaceAndDeleteImages:

    def _upload(self, products, orchestrator, *names):
        handler = UploadProductImagesHandler(products, orchestrator, ROOT)
        tickets = handler.handle("p1", [IncomingFile(b"x", name) for name in names])
        for ticket in tickets:
            ticket.future.result(timeout=5)
        return products.get_by_id("p1").images

    def test_replace_keeps_position_and_discards_old_copies(self, env):
        products, local, remote, orchestrator = env
        old, other = self._upload(products, orchestrator, "a.jpg", "b.jpg")

        ticket = ReplaceProductImageHandler(products, orchestrator, ROOT).handle(
            "p1", old.remote_url, IncomingFile(b"new", "c.jpg"))
        ticket.future.result(timeout=5)

        images = products.get_by_id("p1").images
        assert [img.filename for img in images] == [ticket.record.filename, other.filename]
        assert images[0].migration_status == MigrationStatus.COMPLETED
        assert old.local_path not in local.files
        assert remote.deleted == [old.remote_id]

    def test_replace_unknown_image_writes_nothing(self, env):
        products, local, _, orchestrator = env
        handler = ReplaceProductImageHandler(products, orchestrator, ROOT)
        with pytest.raises(EntityNotFoundError, match="not found"):
            handler.handle("p1", "nope.jpg", IncomingFile(b"new", "c.jpg"))
        assert local.files == {}

    def test_delete_record_removes_both_copies(self, env):
        products, local, remote, orchestrator = env
        first, second = self._upload(products, orchestrator, "a.jpg", "b.jpg")

        remaining = DeleteProductImageHandler(products, orchestrator).handle("p1", first.filename)

        assert remaining == 1
        assert products.get_by_id("p1").images[0].filename == second.filename
        assert first.local_path not in local.files
        assert remote.deleted == [first.remote_id]

    def test_delete_legacy_color_image(self, env):
        products, local, _, orchestrator = env
        local.add("/uploads/products/old.jpg")
        product = products.get_by_id("p1")
        product.find_color("Sky Blue").images.append(LegacyImage("/uploads/products/old.jpg"))
        products.save(product)

        handler = DeleteProductImageHandler(products, orchestrator)
        with pytest.raises(EntityNotFoundError):
            handler.handle("p1", "/uploads/products/old.jpg")
        assert handler.handle("p1", "/uploads/products/old.jpg", color="Sky Blue") == 0
        assert local.files == {}


class TestMigrateLegacyImages:

    def _seed(self, products, local):
        local.add("/uploads/products/old.jpg")
        product = products.get_by_id("p1")
        product.images = [
            LegacyImage("/uploads/products/old.jpg"),
            LegacyImage("/uploads/products/missing.jpg"),
            LegacyImage("https://cdn.example.com/already.jpg"),
        ]
        products.save(product)

    def _handler(self, products, local, orchestrator, configured=True):
        return MigrateLegacyImagesHandler(products, local, orchestrator, ROOT,
                                          "/uploads/products", remote_configured=configured)

    def test_dry_run_changes_nothing(self, env):
        products, local, remote, orchestrator = env
        self._seed(products, local)

        report = self._handler(products, local, orchestrator).handle(dry_run=True)

        assert (report.queued, report.skipped) == (1, 2)
        assert isinstance(products.get_by_id("p1").images[0], LegacyImage)
        assert remote.objects == {}

    def test_converts_and_replicates_local_legacy_images(self, env):
        products, local, remote, orchestrator = env
        self._seed(products, local)

        report = self._handler(products, local, orchestrator).handle("p1")
        for future in report.futures:
            future.result(timeout=5)

        images = products.get_by_id("p1").images
        assert report.queued == 1
        assert isinstance(images[0], ImageRecord)
        assert images[0].migration_status == MigrationStatus.COMPLETED
        assert images[0].storage_mode == StorageMode.HYBRID
        assert images[0].url == "/uploads/products/old.jpg"
        assert isinstance(images[1], LegacyImage)
        assert isinstance(images[2], LegacyImage)

    def test_requires_remote_store(self, env):
        products, local, _, orchestrator = env
        with pytest.raises(ValidationError, match="not configured"):
            self._handler(products, local, orchestrator, configured=False).handle()
