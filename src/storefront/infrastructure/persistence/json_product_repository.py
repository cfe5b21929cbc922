"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from pathlib import Path

from storefront.domain.model.product import Color, Product, Size
from storefront.domain.repository.product_repository import ProductRepository
from storefront.infrastructure.persistence.codecs import (
    image_from_raw,
    image_to_raw,
    money_from_raw,
    money_to_raw,
)
from storefront.infrastructure.persistence.json_collection import JsonCollection


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._collection = JsonCollection(file_path, key_field="id")

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        raw = self._collection.find(product_id)
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._collection.all()]

    def find_by_image_filename(self, filename: str) -> Product | None:
        for product in self.list_all():
            if product.find_image(filename) is not None:
                return product
        return None

    def save(self, product: Product) -> None:
        product.version = self._collection.replace(self._to_raw(product), product.version)

    def delete(self, product_id: str) -> None:
        self._collection.delete(product_id)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": money_to_raw(product.price),
            "stock": product.stock,
            "category_id": product.category_id,
            "images": [image_to_raw(img) for img in product.images],
            "colors": [
                {
                    "color_id": c.color_id,
                    "color_name": c.color_name,
                    "color_code": c.color_code,
                    "images": [image_to_raw(img) for img in c.images],
                    "sizes": [
                        {
                            "size": s.size,
                            "price": money_to_raw(s.price),
                            "stock": s.stock,
                            "discount_percent": s.discount_percent,
                            "discount_price": money_to_raw(s.discount_price),
                        }
                        for s in c.sizes
                    ],
                }
                for c in product.colors
            ],
            "version": product.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        colors = [
            Color(
                color_id=c["color_id"],
                color_name=c["color_name"],
                color_code=c.get("color_code", ""),
                images=[image_from_raw(img) for img in c.get("images", [])],
                sizes=[
                    Size(
                        size=s["size"],
                        price=money_from_raw(s.get("price", 0)),
                        stock=s.get("stock", 0),
                        discount_percent=str(s.get("discount_percent", "0")),
                        discount_price=money_from_raw(s.get("discount_price", 0)),
                    )
                    for s in c.get("sizes", [])
                ],
            )
            for c in raw.get("colors", [])
        ]
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=money_from_raw(raw["price"]),
            stock=raw["stock"],
            category_id=raw.get("category_id"),
            colors=colors,
            images=[image_from_raw(img) for img in raw.get("images", [])],
            version=raw.get("version", 0),
        )
