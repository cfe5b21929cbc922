"""CLI commands for the Wishlist aggregate."""

from __future__ import annotations

import click

from storefront.application.add_to_wishlist import AddToWishlistHandler
from storefront.application.dto import LineDTO
from storefront.application.move_to_cart import MoveToCartHandler
from storefront.application.remove_from_wishlist import RemoveFromWishlistHandler
from storefront.application.show_wishlist import ShowWishlistHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import (
    cart_service,
    image_resolver,
    product_repository,
    wishlist_repository,
)
from storefront.infrastructure.cli.cart_commands import (
    color_option,
    product_option,
    size_option,
    user_option,
)
from storefront.infrastructure.cli.display import echo_cart


def _echo_wishlist(user_id: str, items: list[LineDTO]) -> None:
    if not items:
        click.echo(f"Wishlist of {user_id} is empty.")
        return
    click.echo(f"Wishlist of {user_id}")
    click.echo(f"  {'Product':<20} {'Variant':<14} {'Price':>14}")
    click.echo(f"  {'-'*50}")
    for item in items:
        variant = "/".join(part for part in (item.color, item.size) if part) or "-"
        click.echo(f"  {item.name:<20} {variant:<14} {item.unit_price:>14}")


@click.command("add")
@user_option
@product_option
@size_option
@color_option
def wishlist_add(user_id: str, product_id: str, size: str, color: str) -> None:
    """Add a product to the wishlist."""
    handler = AddToWishlistHandler(
        product_repo=product_repository(),
        wishlist_repo=wishlist_repository(),
        resolver=image_resolver(),
    )

    try:
        items = handler.handle(user_id, product_id, size=size, color=color)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_wishlist(user_id, items)


@click.command("remove")
@user_option
@product_option
@size_option
@color_option
def wishlist_remove(user_id: str, product_id: str, size: str, color: str) -> None:
    """Remove a product (or all its matching variants) from the wishlist."""
    handler = RemoveFromWishlistHandler(wishlist_repo=wishlist_repository())

    try:
        items = handler.handle(user_id, product_id, size=size, color=color)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_wishlist(user_id, items)


@click.command("move")
@user_option
@product_option
@size_option
@color_option
def wishlist_move(user_id: str, product_id: str, size: str, color: str) -> None:
    """Move a wishlist item into the cart (reserves one unit)."""
    handler = MoveToCartHandler(
        wishlist_repo=wishlist_repository(),
        cart_service=cart_service(),
    )

    try:
        result = handler.handle(user_id, product_id, size=size, color=color)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_cart(result.cart)
    _echo_wishlist(user_id, result.wishlist)


@click.command("show")
@user_option
def wishlist_show(user_id: str) -> None:
    """Show a user's wishlist."""
    handler = ShowWishlistHandler(wishlist_repo=wishlist_repository())
    _echo_wishlist(user_id, handler.handle(user_id))
