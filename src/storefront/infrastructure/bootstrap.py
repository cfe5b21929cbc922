"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from storefront.domain.repository.image_store import RemoteObjectStore
from storefront.domain.service.cart_service import CartService
from storefront.domain.service.hybrid_upload_orchestrator import HybridUploadOrchestrator
from storefront.domain.service.image_resolver import ImageResolver
from storefront.domain.service.inventory_ledger import InventoryLedger
from storefront.domain.service.variant_scope import VariantScope
from storefront.infrastructure.config import Settings
from storefront.infrastructure.images.filesystem_image_store import FilesystemImageStore
from storefront.infrastructure.images.s3_object_store import S3ObjectStore
from storefront.infrastructure.images.unconfigured_object_store import (
    UnconfiguredObjectStore,
)
from storefront.infrastructure.persistence.json_cart_repository import (
    JsonCartRepository,
    JsonWishlistRepository,
)
from storefront.infrastructure.persistence.json_category_repository import (
    JsonCategoryRepository,
)
from storefront.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from storefront.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)


@lru_cache(maxsize=1)
def settings() -> Settings:
    return Settings()


# --- Repositories -------------------------------------------------------------

def product_repository() -> JsonProductRepository:
    return JsonProductRepository(settings().data_dir / "products.json")


def category_repository() -> JsonCategoryRepository:
    return JsonCategoryRepository(settings().data_dir / "categories.json")


def cart_repository() -> JsonCartRepository:
    return JsonCartRepository(settings().data_dir / "carts.json")


def wishlist_repository() -> JsonWishlistRepository:
    return JsonWishlistRepository(settings().data_dir / "wishlists.json")


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(settings().data_dir / "orders.json")


# --- Domain services ----------------------------------------------------------

def inventory_ledger() -> InventoryLedger:
    cfg = settings()
    return InventoryLedger(
        product_repository(),
        max_attempts=cfg.conflict_retry_attempts,
        backoff_base=cfg.conflict_backoff_seconds,
    )


def variant_scope() -> VariantScope:
    return VariantScope(product_repository(), category_repository())


def cart_service() -> CartService:
    cfg = settings()
    return CartService(
        cart_repository(),
        inventory_ledger(),
        variant_scope(),
        max_quantity=cfg.cart_max_quantity,
        max_attempts=cfg.conflict_retry_attempts,
        backoff_base=cfg.conflict_backoff_seconds,
    )


# --- Images -------------------------------------------------------------------

def local_image_store() -> FilesystemImageStore:
    cfg = settings()
    return FilesystemImageStore(cfg.upload_dir, url_prefix=cfg.upload_url_prefix)


def remote_configured() -> bool:
    return bool(settings().s3_bucket)


def remote_object_store() -> RemoteObjectStore:
    cfg = settings()
    if not cfg.s3_bucket:
        return UnconfiguredObjectStore()
    return S3ObjectStore(
        bucket=cfg.s3_bucket,
        region=cfg.s3_region,
        endpoint_url=cfg.s3_endpoint_url,
        public_base_url=cfg.s3_public_base_url,
    )


def image_resolver() -> ImageResolver:
    cfg = settings()
    return ImageResolver(
        local_image_store(),
        remote_host=cfg.remote_host,
        placeholder_url=cfg.placeholder_url,
        base_url=cfg.base_url,
    )


def upload_orchestrator() -> HybridUploadOrchestrator:
    """A fresh orchestrator; the caller owns it and must ``shutdown()`` it."""
    cfg = settings()
    return HybridUploadOrchestrator(
        local_image_store(),
        remote_object_store(),
        product_repository(),
        workers=cfg.upload_workers,
        max_attempts=cfg.conflict_retry_attempts,
        backoff_base=cfg.conflict_backoff_seconds,
    )
