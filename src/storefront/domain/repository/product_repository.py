"""Abstract repository for the Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. ``save`` is conditional: it only succeeds when the stored
document still has the version the product was loaded with.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def find_by_image_filename(self, filename: str) -> Product | None:
        """Return the product owning the image stored as ``filename``."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Insert or update ``product`` and bump its version.

        Raises ConcurrentUpdateConflict if the stored version differs from
        ``product.version``.
        """

    @abstractmethod
    def delete(self, product_id: str) -> None:
        """Remove a product. Missing products are ignored."""
