"""Unit tests for stock handling on the Product aggregate."""

import pytest

from storefront.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from storefront.domain.model.image import ImageRecord, LegacyImage
from storefront.domain.model.product import Color, Product, Size
from storefront.domain.model.value_objects import Money


def _tshirt(product_stock: int = 5, size_m: int = 2, size_l: int = 3) -> Product:
    return Product(
        id="p1",
        name="T-Shirt",
        price=Money.of("499"),
        stock=product_stock,
        category_id="apparel",
        colors=[
            Color(
                color_id="c1",
                color_name="Red",
                color_code="#ff0000",
                sizes=[
                    Size(size="M", price=Money.of("549"), stock=size_m),
                    Size(size="L", price=Money.zero(), stock=size_l),
                ],
            )
        ],
    )


class TestReserve:

    def test_reserve_product_level(self):
        product = _tshirt()
        product.reserve(2)
        assert product.stock == 3

    def test_reserve_variant_decrements_both(self):
        product = _tshirt()
        product.reserve(2, size="M", color="Red")
        assert product.stock == 3
        assert product.find_variant("M", "Red").stock == 0

    def test_reserve_more_than_product_stock_rejected(self):
        product = _tshirt(product_stock=1)
        with pytest.raises(InsufficientStockError, match="Not enough stock"):
            product.reserve(2)
        assert product.stock == 1

    def test_reserve_more_than_size_stock_rejected_without_side_effects(self):
        product = _tshirt()
        with pytest.raises(InsufficientStockError, match="size M in Red"):
            product.reserve(3, size="M", color="Red")
        assert product.stock == 5
        assert product.find_variant("M", "Red").stock == 2

    def test_unknown_variant_touches_product_stock_only(self):
        product = _tshirt()
        product.reserve(1, size="XL", color="Red")
        assert product.stock == 4
        assert product.find_variant("M", "Red").stock == 2

    def test_size_without_color_is_product_level(self):
        product = _tshirt()
        product.reserve(1, size="M")
        assert product.find_variant("M", "Red").stock == 2
        assert product.stock == 4

    def test_non_positive_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _tshirt().reserve(0)


class TestRelease:

    def test_release_has_no_upper_bound(self):
        product = _tshirt()
        product.release(10)
        assert product.stock == 15

    def test_release_variant_increments_both(self):
        product = _tshirt()
        product.release(1, size="L", color="Red")
        assert product.stock == 6
        assert product.find_variant("L", "Red").stock == 4

    def test_reserve_then_release_restores_state(self):
        product = _tshirt()
        product.reserve(2, size="M", color="Red")
        product.release(2, size="M", color="Red")
        assert product.stock == 5
        assert product.find_variant("M", "Red").stock == 2


class TestAdministration:

    def test_negative_size_stock_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Size(size="S", price=Money.zero(), stock=-1)

    def test_set_variant_stock_unknown_variant(self):
        with pytest.raises(EntityNotFoundError, match="has no size"):
            _tshirt().set_variant_stock("XS", "Red", 4)

    def test_recount_stock_sums_sizes(self):
        product = _tshirt(product_stock=99)
        product.set_variant_stock("M", "Red", 7)
        product.recount_stock()
        assert product.stock == 10

    def test_unit_price_prefers_variant_price(self):
        product = _tshirt()
        assert product.unit_price("M", "Red") == Money.of("549")

    def test_unit_price_falls_back_on_zero_variant_price(self):
        product = _tshirt()
        assert product.unit_price("L", "Red") == Money.of("499")
        assert product.unit_price() == Money.of("499")


class TestImages:

    def test_find_image_searches_colors(self):
        product = _tshirt()
        record = ImageRecord(filename="a.jpg", local_path="/uploads/products/a.jpg")
        product.colors[0].images.append(record)
        assert product.find_image("a.jpg") is record

    def test_replace_legacy_image(self):
        product = _tshirt()
        product.images.append(LegacyImage("/uploads/products/old.jpg"))
        record = ImageRecord(filename="old.jpg", local_path="/uploads/products/old.jpg")
        product.replace_image(LegacyImage("/uploads/products/old.jpg"), record)
        assert product.images == [record]
        assert product.legacy_images() == []

    def test_replace_missing_image(self):
        with pytest.raises(EntityNotFoundError):
            _tshirt().replace_image(LegacyImage("/x.jpg"), LegacyImage("/y.jpg"))
