"""Abstract repositories for the per-user Cart and Wishlist aggregates.

Both are keyed by user; ``save`` follows the same versioned rule as
ProductRepository.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import Cart, Wishlist


class CartRepository(ABC):

    @abstractmethod
    def get_for_user(self, user_id: str) -> Cart | None:
        """Return the user's cart, or None if they never added anything."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Insert or update a cart. Raises ConcurrentUpdateConflict on a stale version."""


class WishlistRepository(ABC):

    @abstractmethod
    def get_for_user(self, user_id: str) -> Wishlist | None:
        """Return the user's wishlist, or None."""

    @abstractmethod
    def save(self, wishlist: Wishlist) -> None:
        """Insert or update a wishlist. Raises ConcurrentUpdateConflict on a stale version."""
