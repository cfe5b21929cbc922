import click

from storefront.infrastructure.bootstrap import settings
from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_decrease,
    cart_increase,
    cart_remove,
    cart_show,
)
from storefront.infrastructure.cli.image_commands import (
    image_delete,
    image_migrate,
    image_replace,
    image_show,
    image_upload,
)
from storefront.infrastructure.cli.order_commands import (
    order_advance,
    order_cancel,
    order_create,
    order_show,
    order_status,
)
from storefront.infrastructure.cli.product_commands import (
    product_add,
    product_delete,
    product_set_stock,
    product_stock,
)
from storefront.infrastructure.cli.wishlist_commands import (
    wishlist_add,
    wishlist_move,
    wishlist_remove,
    wishlist_show,
)
from storefront.infrastructure.logging_config import configure_logging


@click.group()
@click.option("--log-level", default=None, help="Override STOREFRONT_LOG_LEVEL (e.g. DEBUG).")
def cli(log_level: str | None) -> None:
    """Storefront: inventory, carts, orders and product images"""
    configure_logging(log_level or settings().log_level)


@cli.group()
def product() -> None:
    """Manage products and stock."""


@cli.group()
def cart() -> None:
    """Manage a user's cart."""


@cli.group()
def wishlist() -> None:
    """Manage a user's wishlist."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def image() -> None:
    """Manage product images."""


# Register subcommands
product.add_command(product_add)
product.add_command(product_delete)
product.add_command(product_set_stock)
product.add_command(product_stock)
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_decrease)
cart.add_command(cart_increase)
cart.add_command(cart_remove)
cart.add_command(cart_show)
wishlist.add_command(wishlist_add)
wishlist.add_command(wishlist_move)
wishlist.add_command(wishlist_remove)
wishlist.add_command(wishlist_show)
order.add_command(order_advance)
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_show)
order.add_command(order_status)
image.add_command(image_delete)
image.add_command(image_migrate)
image.add_command(image_replace)
image.add_command(image_show)
image.add_command(image_upload)
