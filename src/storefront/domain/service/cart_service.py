"""Domain service: keeps a user's cart and the inventory ledger in step.

Every cart mutation follows the same order: check the cart rules, change
stock through the ledger, apply the change to the cart, then save the cart
conditionally.

Taking stock (add, increase) is undone when the cart save loses a race, and
the whole action is retried against the fresh cart.

Returning stock (decrease, remove, clear) is never undone, since the units
may already be in someone else's cart. Only the cart change is retried
against the fresh cart. Units the fresh cart no longer holds are reserved
again, and units it dropped beyond those already returned are released
after the save.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable

from storefront.domain.exceptions import (
    ConcurrentUpdateConflict,
    DomainException,
    EntityNotFoundError,
    InsufficientStockError,
)
from storefront.domain.model.cart import (
    DEFAULT_MAX_LINE_QUANTITY,
    MIN_LINE_QUANTITY,
    Cart,
    CartLineItem,
)
from storefront.domain.model.value_objects import LineKey, Quantity
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.service.concurrency import (
    DEFAULT_ATTEMPTS,
    DEFAULT_BACKOFF,
    run_with_retry,
)
from storefront.domain.service.inventory_ledger import InventoryLedger
from storefront.domain.service.variant_scope import VariantScope

logger = logging.getLogger(__name__)

# Units dropped from a cart, per line.
Dropped = dict[LineKey, int]


class CartService:

    def __init__(
        self,
        cart_repo: CartRepository,
        ledger: InventoryLedger,
        scope: VariantScope,
        max_quantity: int = DEFAULT_MAX_LINE_QUANTITY,
        max_attempts: int = DEFAULT_ATTEMPTS,
        backoff_base: float = DEFAULT_BACKOFF,
    ) -> None:
        self._cart_repo = cart_repo
        self._ledger = ledger
        self._scope = scope
        self._max_quantity = max_quantity
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base

    # --- Transitions ----------------------------------------------------------

    def add(self, user_id: str, line: CartLineItem) -> Cart:
        """Reserve ``line.quantity`` and insert or merge the line.

        The cart is created on first use.
        """
        qty = Quantity(line.quantity).value

        def attempt() -> Cart:
            cart = self._cart_repo.get_for_user(user_id) or Cart(user_id=user_id)
            self._reserve(line.key, qty)
            cart.add(dataclasses.replace(line))
            self._save_or_undo(cart, lambda: self._release(line.key, qty))
            return cart

        return self._run(attempt)

    def increase(self, user_id: str, key: LineKey) -> Cart:
        def attempt() -> Cart:
            cart = self._load(user_id)
            cart.check_can_increase(key, self._max_quantity)
            self._reserve(key, 1)
            cart.increase(key)
            self._save_or_undo(cart, lambda: self._release(key, 1))
            return cart

        return self._run(attempt)

    def decrease(self, user_id: str, key: LineKey) -> Cart:
        self._load(user_id).check_can_decrease(key)
        self._release(key, 1)

        def shrink(cart: Cart) -> Dropped:
            item = cart.find(key)
            if item is None or item.quantity <= MIN_LINE_QUANTITY:
                return {}
            cart.decrease(key)
            return {key: 1}

        return self._settle_returned(user_id, {key: 1}, shrink)

    def remove(self, user_id: str, key: LineKey) -> Cart:
        """Return the line's full quantity to stock and drop the line.

        Removing a line that is not in the cart is a no-op.
        """
        cart = self._load(user_id)
        item = cart.find(key)
        if item is None:
            return cart
        self._release_if_present(key, item.quantity)

        def shrink(cart: Cart) -> Dropped:
            if cart.find(key) is None:
                return {}
            return {key: cart.remove(key).quantity}

        return self._settle_returned(user_id, {key: item.quantity}, shrink)

    def clear(self, user_id: str) -> Cart | None:
        """Return every line to stock and empty the cart."""
        cart = self._cart_repo.get_for_user(user_id)
        if cart is None or not cart.items:
            return cart
        returned: Dropped = {}
        try:
            for item in cart.items:
                self._release_if_present(item.key, item.quantity)
                returned[item.key] = item.quantity
        except DomainException:
            self._reclaim(user_id, returned)
            raise

        def shrink(fresh: Cart) -> Dropped:
            return {item.key: item.quantity for item in fresh.clear()}

        return self._settle_returned(user_id, returned, shrink)

    # --- Internal helpers -----------------------------------------------------

    def _load(self, user_id: str) -> Cart:
        cart = self._cart_repo.get_for_user(user_id)
        if cart is None:
            raise EntityNotFoundError(f"No cart for user '{user_id}'")
        return cart

    def _reserve(self, key: LineKey, quantity: int) -> None:
        size, color = self._scope.ledger_variant(key)
        self._ledger.reserve(key.product_id, quantity, size=size, color=color)

    def _release(self, key: LineKey, quantity: int) -> None:
        size, color = self._scope.ledger_variant(key)
        self._ledger.release(key.product_id, quantity, size=size, color=color)

    def _release_if_present(self, key: LineKey, quantity: int) -> bool:
        try:
            self._release(key, quantity)
        except EntityNotFoundError:
            logger.warning("Product %s no longer exists, dropping line without restock",
                           key.product_id)
            return False
        return True

    def _settle_returned(
        self, user_id: str, returned: Dropped, shrink: Callable[[Cart], Dropped]
    ) -> Cart:
        """Apply ``shrink`` to the fresh cart for stock the ledger already took back."""

        def attempt() -> Cart:
            cart = self._load(user_id)
            dropped = shrink(cart)
            reclaimed: Dropped = {}
            for key, quantity in returned.items():
                short = quantity - dropped.get(key, 0)
                if short > 0 and self._reserve_back(cart, key, short):
                    reclaimed[key] = short
            try:
                self._cart_repo.save(cart)
            except ConcurrentUpdateConflict:
                logger.debug("Cart of %s changed concurrently, reapplying", user_id)
                for key, quantity in reclaimed.items():
                    self._release_if_present(key, quantity)
                raise
            for key, quantity in dropped.items():
                extra = quantity - returned.get(key, 0)
                if extra > 0:
                    self._release_if_present(key, extra)
            return cart

        try:
            return self._run(attempt)
        except ConcurrentUpdateConflict:
            self._reclaim(user_id, returned)
            raise

    def _reserve_back(self, cart: Cart, key: LineKey, quantity: int) -> bool:
        """Take back units the cart still holds. Returns True if stock changed.

        If they are gone the cart gives them up instead.
        """
        try:
            self._reserve(key, quantity)
        except EntityNotFoundError:
            return False
        except InsufficientStockError:
            item = cart.find(key)
            if item is None:
                logger.error("%d unit(s) of %s were returned twice and sold", quantity, key)
                return False
            logger.warning("%d unit(s) of %s were sold meanwhile, dropping them from the cart",
                           quantity, key)
            if item.quantity <= quantity:
                cart.remove(key)
            else:
                item.quantity -= quantity
            return False
        return True

    def _reclaim(self, user_id: str, returned: Dropped) -> None:
        for key, quantity in returned.items():
            try:
                self._reserve(key, quantity)
            except EntityNotFoundError:
                continue
            except InsufficientStockError:
                logger.error("Cart of %s still lists %d unit(s) of %s already back in stock",
                             user_id, quantity, key)

    def _save_or_undo(self, cart: Cart, undo: Callable[[], object]) -> None:
        try:
            self._cart_repo.save(cart)
        except ConcurrentUpdateConflict:
            logger.debug("Cart of %s changed concurrently, undoing stock change", cart.user_id)
            undo()
            raise

    def _run(self, attempt):
        return run_with_retry(
            attempt, attempts=self._max_attempts, backoff_base=self._backoff_base
        )
