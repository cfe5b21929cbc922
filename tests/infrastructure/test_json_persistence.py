"""Tests for the JSON-file repositories, using pytest's tmp_path."""

import json
from decimal import Decimal

import pytest

from storefront.domain.exceptions import ConcurrentUpdateConflict
from storefront.domain.model.cart import Cart, CartLineItem, Wishlist, WishlistItem
from storefront.domain.model.image import ImageRecord, LegacyImage, MigrationStatus
from storefront.domain.model.order import Order, OrderLineItem, PaymentInfo, ShippingInfo
from storefront.domain.model.product import Color, Product, Size
from storefront.domain.model.value_objects import Money, Quantity
from storefront.infrastructure.persistence.json_cart_repository import (
    JsonCartRepository,
    JsonWishlistRepository,
)
from storefront.infrastructure.persistence.json_category_repository import (
    JsonCategoryRepository,
)
from storefront.infrastructure.persistence.json_collection import JsonCollection
from storefront.infrastructure.persistence.json_order_repository import JsonOrderRepository
from storefront.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)


class TestJsonCollection:

    def test_creates_missing_file(self, tmp_path):
        JsonCollection(tmp_path / "nested" / "things.json", key_field="id")
        assert json.loads((tmp_path / "nested" / "things.json").read_text()) == []

    def test_replace_bumps_version(self, tmp_path):
        coll = JsonCollection(tmp_path / "things.json", key_field="id")
        assert coll.replace({"id": "a", "n": 1}, 0) == 1
        assert coll.replace({"id": "a", "n": 2}, 1) == 2
        assert coll.find("a") == {"id": "a", "n": 2, "version": 2}

    def test_stale_version_conflicts(self, tmp_path):
        coll = JsonCollection(tmp_path / "things.json", key_field="id")
        coll.replace({"id": "a"}, 0)
        with pytest.raises(ConcurrentUpdateConflict, match="expected version 0, found 1"):
            coll.replace({"id": "a"}, 0)

    def test_next_int_key(self, tmp_path):
        coll = JsonCollection(tmp_path / "orders.json", key_field="id")
        assert coll.next_int_key() == 1
        coll.replace({"id": 7}, 0)
        assert coll.next_int_key() == 8

    def test_delete(self, tmp_path):
        coll = JsonCollection(tmp_path / "things.json", key_field="id")
        coll.replace({"id": "a"}, 0)
        coll.delete("a")
        assert coll.all() == []


class TestJsonProductRepository:

    def _product(self) -> Product:
        return Product(
            id="p1", name="T-Shirt", price=Money.of("499"), stock=5, category_id="apparel",
            images=[
                LegacyImage("/uploads/products/old.jpg"),
                ImageRecord(filename="a.jpg", local_path="/uploads/products/a.jpg",
                            migration_status=MigrationStatus.PENDING),
            ],
            colors=[Color(color_id="c1", color_name="Red", color_code="#f00",
                          sizes=[Size(size="M", price=Money.of("549"), stock=5)])],
        )

    def test_round_trip(self, tmp_path):
        repo = JsonProductRepository(tmp_path / "products.json")
        repo.save(self._product())
        loaded = repo.get_by_id("p1")
        assert loaded.version == 1
        assert loaded.price == Money.of("499")
        assert loaded.find_variant("M", "Red").stock == 5
        assert loaded.images[0] == LegacyImage("/uploads/products/old.jpg")
        assert loaded.images[1].migration_status == MigrationStatus.PENDING

    def test_find_by_image_filename(self, tmp_path):
        repo = JsonProductRepository(tmp_path / "products.json")
        repo.save(self._product())
        assert repo.find_by_image_filename("a.jpg").id == "p1"
        assert repo.find_by_image_filename("zzz.jpg") is None

    def test_concurrent_copies_conflict(self, tmp_path):
        repo = JsonProductRepository(tmp_path / "products.json")
        repo.save(self._product())
        first, second = repo.get_by_id("p1"), repo.get_by_id("p1")
        first.reserve(1)
        repo.save(first)
        second.reserve(1)
        with pytest.raises(ConcurrentUpdateConflict):
            repo.save(second)
        assert repo.get_by_id("p1").stock == 4

    def test_reads_older_document_shapes(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text(json.dumps([{
            "id": "old", "name": "Vase", "price": 800, "stock": 2,
            "images": [
                "/uploads/products/v.jpg",
                {"local_path": "/uploads/products/w.jpg",
                 "secure_url": "https://res.example.com/w.jpg"},
            ],
        }]))
        product = JsonProductRepository(path).get_by_id("old")
        assert product.price.amount == Decimal("800")
        assert product.version == 0
        assert isinstance(product.images[0], LegacyImage)
        assert product.images[1].alternate_url == "https://res.example.com/w.jpg"

    def test_delete(self, tmp_path):
        repo = JsonProductRepository(tmp_path / "products.json")
        repo.save(self._product())
        repo.delete("p1")
        assert repo.list_all() == []


class TestOtherRepositories:

    def test_cart_round_trip(self, tmp_path):
        repo = JsonCartRepository(tmp_path / "carts.json")
        cart = Cart(user_id="u1")
        cart.add(CartLineItem("p1", "Mug", "/m.jpg", Money.of("250"), 2, "M", "Red"))
        repo.save(cart)
        loaded = repo.get_for_user("u1")
        assert loaded.items[0].quantity == 2
        assert loaded.items[0].key == cart.items[0].key
        assert loaded.version == 1

    def test_wishlist_round_trip(self, tmp_path):
        repo = JsonWishlistRepository(tmp_path / "wishlists.json")
        wishlist = Wishlist(user_id="u1")
        wishlist.add(WishlistItem("p1", "Mug", "", Money.of("250")))
        repo.save(wishlist)
        loaded = repo.get_for_user("u1")
        assert loaded.items[0].product_id == "p1"
        assert loaded.items[0].added_at == wishlist.items[0].added_at

    def test_order_ids_are_sequential(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        shipping = ShippingInfo("12 MG Road", "Pune", "India")
        line = OrderLineItem("p1", "Mug", Quantity(1), Money.of("250"))
        first = Order.create("u1", [line], shipping, payment=PaymentInfo())
        second = Order.create("u2", [line], shipping, payment=first.payment)
        repo.save(first)
        repo.save(second)
        assert (first.id, second.id) == (1, 2)
        assert repo.get_by_id(2).user_id == "u2"
        assert repo.get_by_id(1).total == Money.of("250")

    def test_categories_are_read_only_lookups(self, tmp_path):
        path = tmp_path / "categories.json"
        path.write_text(json.dumps([
            {"id": "apparel", "name": "Apparel", "tracks_size_variants": True},
        ]))
        repo = JsonCategoryRepository(path)
        assert repo.get_by_id("apparel").tracks_size_variants
        assert repo.get_by_id("toys") is None
