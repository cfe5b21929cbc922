"""Domain service: picks the one URL a consumer should get for an image.

Resolution is read-only: it looks at record fields plus one local existence
check, so every read path can call it without coordinating with background
replication. Priority, first match wins:

1. ``remote_url`` on the configured remote host
2. ``alternate_url`` on the configured remote host
3. ``local_path``, only if the file is still on local storage
4. the legacy ``url`` field
5. the placeholder
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import urlparse

from storefront.domain.model.image import ImageRecord, LegacyImage, ProductImage
from storefront.domain.model.product import Product
from storefront.domain.repository.image_store import LocalImageStore

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER = "/placeholder-image.png"


@dataclass(frozen=True)
class ImageAvailability:
    has_remote: bool = False
    has_local: bool = False
    local_exists: bool = False
    best_url: str = DEFAULT_PLACEHOLDER
    fallback_urls: tuple[str, ...] = ()


@dataclass
class ProductImageUrls:
    general: list[str] = field(default_factory=list)
    by_color: dict[str, list[str]] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.general) + sum(len(urls) for urls in self.by_color.values())


class ImageResolver:

    def __init__(
        self,
        local_store: LocalImageStore,
        remote_host: str | None = None,
        placeholder_url: str = DEFAULT_PLACEHOLDER,
        base_url: str = "",
    ) -> None:
        self._local_store = local_store
        self._remote_host = (remote_host or "").lower()
        self._placeholder_url = placeholder_url
        self._base_url = base_url.rstrip("/")

    @property
    def placeholder_url(self) -> str:
        return self._placeholder_url

    def is_remote_url(self, url: str | None) -> bool:
        if not url:
            return False
        if not self._remote_host:
            return True
        host = (urlparse(url).hostname or "").lower()
        return host == self._remote_host or host.endswith("." + self._remote_host)

    def resolve(self, image: ProductImage | None) -> str:
        """Return the best URL for ``image``. Never raises, never returns None."""
        if image is None:
            return self._placeholder_url
        if isinstance(image, LegacyImage):
            return image.url or self._placeholder_url

        if not image.is_valid and not image.alternate_url and not image.url:
            logger.warning("Image record %r has no local or remote pointer", image.filename)
            return self._placeholder_url

        if self.is_remote_url(image.remote_url):
            return image.remote_url  # type: ignore[return-value]
        if self.is_remote_url(image.alternate_url):
            return image.alternate_url  # type: ignore[return-value]
        if self._local_exists(image):
            return self._base_url + image.local_path  # type: ignore[operator]
        if image.url:
            return image.url
        return self._placeholder_url

    def resolve_all(self, images: list[ProductImage]) -> list[str]:
        return [self.resolve(image) for image in images]

    def availability(self, image: ProductImage | None) -> ImageAvailability:
        """Describe every place ``image`` can be served from, best first."""
        if image is None:
            return ImageAvailability(best_url=self._placeholder_url)
        if isinstance(image, LegacyImage):
            return ImageAvailability(
                has_remote=self.is_remote_url(image.url),
                best_url=self.resolve(image),
                fallback_urls=(image.url,) if image.url else (),
            )

        fallbacks: list[str] = []
        has_remote = False
        for remote in (image.remote_url, image.alternate_url):
            if self.is_remote_url(remote):
                has_remote = True
                fallbacks.append(remote)  # type: ignore[arg-type]
        local_exists = self._local_exists(image)
        if local_exists:
            fallbacks.append(self._base_url + image.local_path)  # type: ignore[operator]
        if image.url and image.url not in fallbacks:
            fallbacks.append(image.url)
        return ImageAvailability(
            has_remote=has_remote,
            has_local=bool(image.local_path),
            local_exists=local_exists,
            best_url=self.resolve(image),
            fallback_urls=tuple(fallbacks),
        )

    def product_urls(self, product: Product) -> ProductImageUrls:
        result = ProductImageUrls(general=self.resolve_all(product.images))
        for color in product.colors:
            result.by_color[color.color_id] = self.resolve_all(color.images)
        return result

    def first_url(self, product: Product, color: str = "") -> str:
        """URL for a cart/wishlist snapshot: the color's first image, else the product's."""
        color_obj = product.find_color(color) if color else None
        if color_obj is not None and color_obj.images:
            return self.resolve(color_obj.images[0])
        if product.images:
            return self.resolve(product.images[0])
        for other in product.colors:
            if other.images:
                return self.resolve(other.images[0])
        return self._placeholder_url

    def _local_exists(self, image: ImageRecord) -> bool:
        if not image.local_path:
            return False
        try:
            return self._local_store.exists(image.local_path)
        except OSError:
            logger.warning("Could not check local file %s", image.local_path, exc_info=True)
            return False
