"""Product aggregate.

A product owns its colors, each color owns its sizes, and every level that
sells separately carries its own stock count. Stock is only ever changed
through ``reserve()`` and ``release()`` (the Inventory Ledger calls them) or
through the explicit administrative setters below.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from storefront.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from storefront.domain.model.image import ImageRecord, LegacyImage, ProductImage
from storefront.domain.model.value_objects import Money, Quantity


@dataclass
class Size:
    size: str
    price: Money
    stock: int = 0
    discount_percent: str = "0"
    discount_price: Money = field(default_factory=Money.zero)

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValidationError(f"Stock for size {self.size} cannot be negative")


@dataclass
class Color:
    color_id: str
    color_name: str
    color_code: str
    images: list[ProductImage] = field(default_factory=list)
    sizes: list[Size] = field(default_factory=list)

    def find_size(self, label: str) -> Size | None:
        for size in self.sizes:
            if size.size == label:
                return size
        return None


@dataclass
class Product:
    """Aggregate root for the catalog and its stock.

    Invariants:
    - ``stock`` and every ``Size.stock`` are always >= 0
    - for size-tracked categories ``stock`` equals the sum of size stock
      (restored by ``recount_stock()`` after administrative changes)

    ``version`` is the optimistic-concurrency token; repositories bump it on
    every successful save and reject saves made from a stale copy.
    """

    id: str
    name: str
    price: Money
    stock: int
    category_id: str | None = None
    colors: list[Color] = field(default_factory=list)
    images: list[ProductImage] = field(default_factory=list)
    version: int = 0

    # --- Variant lookup -------------------------------------------------------

    def find_color(self, color_name: str) -> Color | None:
        for color in self.colors:
            if color.color_name == color_name:
                return color
        return None

    def find_variant(self, size: str, color: str) -> Size | None:
        """Return the size entry for (color, size), or None if either is unknown."""
        if not (size and color):
            return None
        color_obj = self.find_color(color)
        if color_obj is None:
            return None
        return color_obj.find_size(size)

    def unit_price(self, size: str = "", color: str = "") -> Money:
        variant = self.find_variant(size, color)
        if variant is not None and not variant.price.is_zero:
            return variant.price
        return self.price

    # --- Stock ----------------------------------------------------------------

    def reserve(self, quantity: int, size: str = "", color: str = "") -> None:
        """Take ``quantity`` units out of stock.

        When (size, color) names a known variant its stock is checked and
        decremented too. An unknown variant only touches product stock, so
        carts built from older variant data keep working.
        """
        qty = Quantity(quantity).value
        if self.stock < qty:
            raise InsufficientStockError(
                f"Not enough stock for {self.name} (need {qty}, have {self.stock})"
            )
        variant = self.find_variant(size, color)
        if variant is not None and variant.stock < qty:
            raise InsufficientStockError(
                f"Not enough stock for {self.name} size {size} in {color} "
                f"(need {qty}, have {variant.stock})"
            )
        if variant is not None:
            variant.stock -= qty
        self.stock -= qty

    def release(self, quantity: int, size: str = "", color: str = "") -> None:
        """Put ``quantity`` units back. There is no upper bound."""
        qty = Quantity(quantity).value
        variant = self.find_variant(size, color)
        if variant is not None:
            variant.stock += qty
        self.stock += qty

    def set_stock(self, quantity: int) -> None:
        if quantity < 0:
            raise ValidationError("Stock cannot be negative")
        self.stock = quantity

    def set_variant_stock(self, size: str, color: str, quantity: int) -> None:
        if quantity < 0:
            raise ValidationError("Stock cannot be negative")
        variant = self.find_variant(size, color)
        if variant is None:
            raise EntityNotFoundError(
                f"Product {self.name} has no size {size!r} in color {color!r}"
            )
        variant.stock = quantity

    def recount_stock(self) -> None:
        self.stock = sum(s.stock for c in self.colors for s in c.sizes)

    # --- Images ---------------------------------------------------------------

    def all_images(self) -> list[ProductImage]:
        images = list(self.images)
        for color in self.colors:
            images.extend(color.images)
        return images

    def find_image(self, filename: str) -> ImageRecord | None:
        for image in self.all_images():
            if isinstance(image, ImageRecord) and image.filename == filename:
                return image
        return None

    def legacy_images(self) -> list[LegacyImage]:
        return [img for img in self.all_images() if isinstance(img, LegacyImage)]

    def replace_image(self, old: ProductImage, new: ProductImage) -> None:
        for images in [self.images] + [c.images for c in self.colors]:
            for i, image in enumerate(images):
                if image is old or image == old:
                    images[i] = new
                    return
        raise EntityNotFoundError(f"Image not found on product {self.name}")

    def image_list(self, color: str = "") -> list[ProductImage]:
        """The general images, or the images of ``color``."""
        if not color:
            return self.images
        found = self.find_color(color)
        if found is None:
            raise EntityNotFoundError(f"Product {self.name} has no color '{color}'")
        return found.images

    def locate_image(self, ref: str, color: str = "") -> ProductImage:
        images = self.image_list(color)
        return images[self._image_index(images, ref)]

    def remove_image(self, ref: str, color: str = "") -> ProductImage:
        images = self.image_list(color)
        return images.pop(self._image_index(images, ref))

    def swap_image(self, ref: str, new: ProductImage, color: str = "") -> ProductImage:
        """Put ``new`` in the place of the image ``ref`` names and return the old one."""
        images = self.image_list(color)
        index = self._image_index(images, ref)
        old, images[index] = images[index], new
        return old

    def _image_index(self, images: list[ProductImage], ref: str) -> int:
        for i, image in enumerate(images):
            if _refers_to(image, ref):
                return i
        raise EntityNotFoundError(f"Image '{ref}' not found on product {self.name}")


def _refers_to(image: ProductImage, ref: str) -> bool:
    """An image is named by its filename or by any URL or path it is served from."""
    if isinstance(image, LegacyImage):
        return image.url == ref
    return ref in (image.filename, image.local_path, image.remote_url,
                   image.alternate_url, image.url)
