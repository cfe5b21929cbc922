"""Domain service: Inventory Ledger.

The single source of truth for how many units of a product, or of one
(color, size) variant, can still be sold. Carts and orders only ever
change stock through ``reserve`` and ``release``.

Each call is atomic per product document: the product is re-read, changed
in memory and saved conditionally on its version, and a lost race is
retried against fresh state. Stock and not-found errors are never retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from storefront.domain.exceptions import (
    ConcurrentUpdateConflict,
    DomainException,
    EntityNotFoundError,
)
from storefront.domain.model.product import Product
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.concurrency import (
    DEFAULT_ATTEMPTS,
    DEFAULT_BACKOFF,
    run_with_retry,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockRequest:
    """One line of a batch reservation."""

    product_id: str
    quantity: int
    size: str = ""
    color: str = ""


class InventoryLedger:

    def __init__(
        self,
        product_repo: ProductRepository,
        max_attempts: int = DEFAULT_ATTEMPTS,
        backoff_base: float = DEFAULT_BACKOFF,
    ) -> None:
        self._product_repo = product_repo
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base

    def reserve(self, product_id: str, quantity: int, size: str = "", color: str = "") -> Product:
        """Take stock out of the product and, if it exists, the (color, size) variant.

        Raises EntityNotFoundError, InsufficientStockError, or
        ConcurrentUpdateConflict once retries are used up.
        """

        def attempt() -> Product:
            product = self._load(product_id)
            if size and color and product.find_variant(size, color) is None:
                logger.debug(
                    "No variant %s/%s on product %s, reserving product stock only",
                    color, size, product_id,
                )
            product.reserve(quantity, size=size, color=color)
            self._product_repo.save(product)
            return product

        product = self._run(attempt)
        logger.info("Reserved %d of %s (%s/%s), stock now %d",
                    quantity, product_id, color or "-", size or "-", product.stock)
        return product

    def release(self, product_id: str, quantity: int, size: str = "", color: str = "") -> Product:
        """Put stock back. Never fails for stock reasons."""

        def attempt() -> Product:
            product = self._load(product_id)
            product.release(quantity, size=size, color=color)
            self._product_repo.save(product)
            return product

        product = self._run(attempt)
        logger.info("Released %d of %s (%s/%s), stock now %d",
                    quantity, product_id, color or "-", size or "-", product.stock)
        return product

    def reserve_all(self, requests: list[StockRequest]) -> None:
        """Reserve every request or none of them.

        Reservations already applied are released again if a later one
        fails, then the original error propagates.
        """
        done: list[StockRequest] = []
        try:
            for req in requests:
                self.reserve(req.product_id, req.quantity, req.size, req.color)
                done.append(req)
        except DomainException:
            self.release_all(list(reversed(done)))
            raise

    def release_all(self, requests: list[StockRequest]) -> list[StockRequest]:
        """Release every request and return the ones that could not be released.

        A missing product or a release that keeps losing its race is logged
        and skipped; the remaining requests are still released.
        """
        unreturned: list[StockRequest] = []
        for req in requests:
            try:
                self.release(req.product_id, req.quantity, req.size, req.color)
            except EntityNotFoundError:
                logger.warning("Product %s is gone, %d units not returned",
                               req.product_id, req.quantity)
                unreturned.append(req)
            except ConcurrentUpdateConflict:
                logger.error("Could not return %d units of %s (%s/%s) after retries",
                             req.quantity, req.product_id, req.color or "-", req.size or "-")
                unreturned.append(req)
        return unreturned

    # --- Internal helpers -----------------------------------------------------

    def _load(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return product

    def _run(self, attempt):
        return run_with_retry(
            attempt, attempts=self._max_attempts, backoff_base=self._backoff_base
        )
