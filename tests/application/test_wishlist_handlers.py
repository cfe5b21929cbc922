"""Integration tests for the wishlist use cases, including move-to-cart."""

import pytest

from storefront.application.add_to_wishlist import AddToWishlistHandler
from storefront.application.move_to_cart import MoveToCartHandler
from storefront.application.remove_from_wishlist import RemoveFromWishlistHandler
from storefront.application.show_wishlist import ShowWishlistHandler
from storefront.domain.exceptions import EntityNotFoundError, InsufficientStockError
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.service.cart_service import CartService
from storefront.domain.service.image_resolver import ImageResolver
from storefront.domain.service.inventory_ledger import InventoryLedger
from storefront.domain.service.variant_scope import VariantScope
from tests.fakes import (
    FakeCartRepository,
    FakeCategoryRepository,
    FakeLocalImageStore,
    FakeProductRepository,
    FakeWishlistRepository,
)


def _setup(stock: int = 3):
    products = FakeProductRepository([
        Product(id="vase", name="Vase", price=Money.of("800"), stock=stock),
    ])
    wishlists = FakeWishlistRepository()
    carts = FakeCartRepository()
    service = CartService(
        carts,
        InventoryLedger(products, backoff_base=0),
        VariantScope(products, FakeCategoryRepository()),
        backoff_base=0,
    )
    resolver = ImageResolver(FakeLocalImageStore())
    handlers = {
        "add": AddToWishlistHandler(products, wishlists, resolver),
        "remove": RemoveFromWishlistHandler(wishlists),
        "show": ShowWishlistHandler(wishlists),
        "move": MoveToCartHandler(wishlists, service),
    }
    return handlers, products, wishlists, carts


class TestAddRemove:

    def test_add_does_not_touch_stock(self):
        h, products, _, _ = _setup()
        items = h["add"].handle("u1", "vase")
        assert [i.name for i in items] == ["Vase"]
        assert items[0].image == "/placeholder-image.png"
        assert products.get_by_id("vase").stock == 3

    def test_add_twice_is_noop(self):
        h, _, _, _ = _setup()
        h["add"].handle("u1", "vase")
        assert len(h["add"].handle("u1", "vase")) == 1

    def test_remove(self):
        h, _, _, _ = _setup()
        h["add"].handle("u1", "vase", size="S", color="Blue")
        assert h["remove"].handle("u1", "vase") == []

    def test_remove_without_wishlist(self):
        h, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="No wishlist"):
            h["remove"].handle("u1", "vase")


class TestMoveToCart:

    def test_move_reserves_and_removes(self):
        h, products, _, carts = _setup()
        h["add"].handle("u1", "vase")
        result = h["move"].handle("u1", "vase")
        assert result.wishlist == []
        assert result.cart.items[0].quantity == 1
        assert products.get_by_id("vase").stock == 2

    def test_failed_reservation_keeps_wishlist_entry(self):
        h, products, _, carts = _setup(stock=0)
        h["add"].handle("u1", "vase")
        with pytest.raises(InsufficientStockError):
            h["move"].handle("u1", "vase")
        assert len(h["show"].handle("u1")) == 1
        assert carts.get_for_user("u1") is None

    def test_deleted_product_keeps_wishlist_entry(self):
        h, products, _, _ = _setup()
        h["add"].handle("u1", "vase")
        products.delete("vase")
        with pytest.raises(EntityNotFoundError):
            h["move"].handle("u1", "vase")
        assert len(h["show"].handle("u1")) == 1

    def test_item_not_in_wishlist(self):
        h, _, _, _ = _setup()
        h["add"].handle("u1", "vase", size="S", color="Blue")
        with pytest.raises(EntityNotFoundError, match="not in the wishlist"):
            h["move"].handle("u1", "vase", size="L", color="Blue")
