"""CLI commands for the Cart aggregate."""

from __future__ import annotations

import click

from storefront.application.add_to_cart import AddToCartHandler
from storefront.application.clear_cart import ClearCartHandler
from storefront.application.decrease_cart_item import DecreaseCartItemHandler
from storefront.application.increase_cart_item import IncreaseCartItemHandler
from storefront.application.remove_cart_item import RemoveCartItemHandler
from storefront.application.show_cart import ShowCartHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import (
    cart_repository,
    cart_service,
    image_resolver,
    product_repository,
)
from storefront.infrastructure.cli.display import echo_cart

user_option = click.option("--user", "user_id", required=True, help="User ID.")
product_option = click.option("--product", "product_id", required=True, help="Product ID.")
size_option = click.option("--size", default="", help="Size label, if the product has sizes.")
color_option = click.option("--color", default="", help="Color name, if the product has colors.")


@click.command("add")
@user_option
@product_option
@click.option("--quantity", default=1, show_default=True, type=int, help="Units to add.")
@size_option
@color_option
def cart_add(user_id: str, product_id: str, quantity: int, size: str, color: str) -> None:
    """Add a product to the cart (reserves stock)."""
    handler = AddToCartHandler(
        product_repo=product_repository(),
        cart_service=cart_service(),
        resolver=image_resolver(),
    )

    try:
        dto = handler.handle(user_id, product_id, quantity, size=size, color=color)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_cart(dto)


@click.command("increase")
@user_option
@product_option
@size_option
@color_option
def cart_increase(user_id: str, product_id: str, size: str, color: str) -> None:
    """Add one unit to a cart line."""
    handler = IncreaseCartItemHandler(cart_service=cart_service())

    try:
        dto = handler.handle(user_id, product_id, size=size, color=color)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_cart(dto)


@click.command("decrease")
@user_option
@product_option
@size_option
@color_option
def cart_decrease(user_id: str, product_id: str, size: str, color: str) -> None:
    """Take one unit off a cart line."""
    handler = DecreaseCartItemHandler(cart_service=cart_service())

    try:
        dto = handler.handle(user_id, product_id, size=size, color=color)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_cart(dto)


@click.command("remove")
@user_option
@product_option
@size_option
@color_option
def cart_remove(user_id: str, product_id: str, size: str, color: str) -> None:
    """Remove a line from the cart (returns its stock)."""
    handler = RemoveCartItemHandler(cart_service=cart_service())

    try:
        dto = handler.handle(user_id, product_id, size=size, color=color)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_cart(dto)


@click.command("clear")
@user_option
def cart_clear(user_id: str) -> None:
    """Empty the cart (returns all stock)."""
    handler = ClearCartHandler(cart_service=cart_service())

    try:
        handler.handle(user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Cart of {user_id} cleared.")


@click.command("show")
@user_option
def cart_show(user_id: str) -> None:
    """Show a user's cart."""
    handler = ShowCartHandler(cart_repo=cart_repository())
    echo_cart(handler.handle(user_id))
