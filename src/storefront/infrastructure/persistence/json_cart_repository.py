"""JSON-file-backed implementations of CartRepository and WishlistRepository."""

from __future__ import annotations

from pathlib import Path

from storefront.domain.model.cart import Cart, CartLineItem, Wishlist, WishlistItem
from storefront.domain.repository.cart_repository import CartRepository, WishlistRepository
from storefront.infrastructure.persistence.codecs import (
    dt_from_raw,
    dt_to_raw,
    money_from_raw,
    money_to_raw,
)
from storefront.infrastructure.persistence.json_collection import JsonCollection


class JsonCartRepository(CartRepository):

    def __init__(self, file_path: Path) -> None:
        self._collection = JsonCollection(file_path, key_field="user_id")

    def get_for_user(self, user_id: str) -> Cart | None:
        raw = self._collection.find(user_id)
        if raw is None:
            return None
        return Cart(
            user_id=raw["user_id"],
            items=[
                CartLineItem(
                    product_id=i["product_id"],
                    name=i["name"],
                    image=i.get("image", ""),
                    price=money_from_raw(i["price"]),
                    quantity=i["quantity"],
                    size=i.get("size", ""),
                    color=i.get("color", ""),
                )
                for i in raw["items"]
            ],
            version=raw.get("version", 0),
        )

    def save(self, cart: Cart) -> None:
        raw = {
            "user_id": cart.user_id,
            "items": [
                {
                    "product_id": i.product_id,
                    "name": i.name,
                    "image": i.image,
                    "price": money_to_raw(i.price),
                    "quantity": i.quantity,
                    "size": i.size,
                    "color": i.color,
                }
                for i in cart.items
            ],
        }
        cart.version = self._collection.replace(raw, cart.version)


class JsonWishlistRepository(WishlistRepository):

    def __init__(self, file_path: Path) -> None:
        self._collection = JsonCollection(file_path, key_field="user_id")

    def get_for_user(self, user_id: str) -> Wishlist | None:
        raw = self._collection.find(user_id)
        if raw is None:
            return None
        wishlist = Wishlist(user_id=raw["user_id"], version=raw.get("version", 0))
        for i in raw["items"]:
            item = WishlistItem(
                product_id=i["product_id"],
                name=i["name"],
                image=i.get("image", ""),
                price=money_from_raw(i["price"]),
                size=i.get("size", ""),
                color=i.get("color", ""),
            )
            added_at = dt_from_raw(i.get("added_at"))
            if added_at is not None:
                item.added_at = added_at
            wishlist.items.append(item)
        return wishlist

    def save(self, wishlist: Wishlist) -> None:
        raw = {
            "user_id": wishlist.user_id,
            "items": [
                {
                    "product_id": i.product_id,
                    "name": i.name,
                    "image": i.image,
                    "price": money_to_raw(i.price),
                    "size": i.size,
                    "color": i.color,
                    "added_at": dt_to_raw(i.added_at),
                }
                for i in wishlist.items
            ],
        }
        wishlist.version = self._collection.replace(raw, wishlist.version)
