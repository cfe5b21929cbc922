"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.model.cart import Cart, Wishlist
from storefront.domain.model.order import Order
from storefront.domain.model.product import Product


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one requested order line."""

    product_id: str
    quantity: int
    size: str = ""
    color: str = ""


@dataclass(frozen=True)
class LineDTO:
    """Output: a cart, wishlist or order line as displayed to the user."""

    product_id: str
    name: str
    image: str
    size: str
    color: str
    quantity: int
    unit_price: str  # formatted, e.g. "499.00 INR"
    line_total: str


@dataclass(frozen=True)
class CartDTO:
    user_id: str
    items: list[LineDTO]
    total: str


@dataclass(frozen=True)
class OrderDTO:
    id: int
    user_id: str
    status: str
    items: list[LineDTO]
    items_total: str
    total: str
    created_at: str
    delivered_at: str | None


@dataclass(frozen=True)
class StockLineDTO:
    color: str
    size: str
    stock: int


@dataclass(frozen=True)
class StockDTO:
    product_id: str
    name: str
    stock: int
    size_tracked: bool
    variants: list[StockLineDTO]


@dataclass(frozen=True)
class ImageDTO:
    filename: str | None
    display_url: str
    storage_mode: str
    migration_status: str
    fallback_urls: tuple[str, ...]
    color: str = ""


def to_cart_dto(cart: Cart | None, user_id: str) -> CartDTO:
    if cart is None:
        return CartDTO(user_id=user_id, items=[], total="0.00 INR")
    return CartDTO(
        user_id=cart.user_id,
        items=[
            LineDTO(
                product_id=item.product_id,
                name=item.name,
                image=item.image,
                size=item.size,
                color=item.color,
                quantity=item.quantity,
                unit_price=str(item.price),
                line_total=str(item.line_total),
            )
            for item in cart.items
        ],
        total=str(cart.total),
    )


def to_wishlist_dto(wishlist: Wishlist | None) -> list[LineDTO]:
    if wishlist is None:
        return []
    return [
        LineDTO(
            product_id=item.product_id,
            name=item.name,
            image=item.image,
            size=item.size,
            color=item.color,
            quantity=1,
            unit_price=str(item.price),
            line_total=str(item.price),
        )
        for item in wishlist.items
    ]


def to_order_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        user_id=order.user_id,
        status=order.status.value,
        items=[
            LineDTO(
                product_id=item.product_id,
                name=item.name,
                image=item.image,
                size=item.size,
                color=item.color,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        items_total=str(order.items_total),
        total=str(order.total),
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        delivered_at=(
            order.delivered_at.strftime("%Y-%m-%d %H:%M UTC") if order.delivered_at else None
        ),
    )


@dataclass(frozen=True)
class SizeSpec:
    """Input: one size of a new color variant."""

    size: str
    price: str
    stock: int = 0


@dataclass(frozen=True)
class ColorSpec:
    """Input: one color of a new product."""

    color_name: str
    color_code: str = ""
    sizes: tuple[SizeSpec, ...] = ()


def to_stock_dto(product: Product, size_tracked: bool) -> StockDTO:
    return StockDTO(
        product_id=product.id,
        name=product.name,
        stock=product.stock,
        size_tracked=size_tracked,
        variants=[
            StockLineDTO(color=color.color_name, size=size.size, stock=size.stock)
            for color in product.colors
            for size in color.sizes
        ],
    )
