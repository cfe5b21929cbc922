"""CLI commands for products and their stock."""

from __future__ import annotations

import click

from storefront.application.add_product import AddProductHandler
from storefront.application.delete_product import DeleteProductHandler
from storefront.application.dto import ColorSpec, SizeSpec, StockDTO
from storefront.application.set_stock import SetStockHandler
from storefront.application.show_stock import ShowStockHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import (
    category_repository,
    product_repository,
    upload_orchestrator,
    variant_scope,
)


def _parse_colors(colors: tuple[str, ...], sizes: tuple[str, ...]) -> list[ColorSpec]:
    """Build color specs from 'Red:#ff0000' and 'Red:M:499:5' options."""
    codes: dict[str, str] = {}
    for raw in colors:
        name, _, code = raw.partition(":")
        codes[name.strip()] = code.strip()

    by_color: dict[str, list[SizeSpec]] = {name: [] for name in codes}
    for raw in sizes:
        parts = [p.strip() for p in raw.split(":")]
        if len(parts) != 4:
            raise click.BadParameter(
                f"Invalid size format '{raw}'. Expected 'Color:Size:Price:Stock'."
            )
        color, size, price, stock = parts
        try:
            qty = int(stock)
        except ValueError:
            raise click.BadParameter(f"Invalid stock '{stock}' for size '{size}'.")
        by_color.setdefault(color, []).append(SizeSpec(size=size, price=price, stock=qty))

    return [
        ColorSpec(color_name=name, color_code=codes.get(name, ""), sizes=tuple(specs))
        for name, specs in by_color.items()
    ]


def _echo_stock(dto: StockDTO) -> None:
    mode = "sizes" if dto.size_tracked else "product"
    click.echo(f"#{dto.product_id} {dto.name}: {dto.stock} in stock (tracked by {mode})")
    for line in dto.variants:
        click.echo(f"    {line.color:<12} {line.size:<6} {line.stock:>6}")


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 499.00).")
@click.option("--stock", default=0, show_default=True, type=int, help="Product-level stock.")
@click.option("--category", "category_id", default=None, help="Category ID.")
@click.option("--color", "colors", multiple=True, help="Color as 'Name:#code'. Repeatable.")
@click.option("--size", "sizes", multiple=True, help="Size as 'Color:Size:Price:Stock'. Repeatable.")
def product_add(
    name: str,
    price: str,
    stock: int,
    category_id: str | None,
    colors: tuple[str, ...],
    sizes: tuple[str, ...],
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(
        product_repo=product_repository(),
        category_repo=category_repository(),
    )

    try:
        dto = handler.handle(
            name=name,
            price=price,
            stock=stock,
            category_id=category_id,
            colors=_parse_colors(colors, sizes),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_stock(dto)


@click.command("stock")
@click.option("--id", "product_id", default=None, help="Product ID (all products if omitted).")
def product_stock(product_id: str | None) -> None:
    """Show stock per product and variant."""
    handler = ShowStockHandler(product_repo=product_repository(), scope=variant_scope())

    try:
        lines = handler.handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No products found.")
        return
    for dto in lines:
        _echo_stock(dto)


@click.command("set-stock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="New stock level.")
@click.option("--size", default="", help="Size label (with --color).")
@click.option("--color", default="", help="Color name (with --size).")
def product_set_stock(product_id: str, quantity: int, size: str, color: str) -> None:
    """Set stock for a product or one of its sizes."""
    handler = SetStockHandler(product_repo=product_repository(), scope=variant_scope())

    try:
        dto = handler.handle(product_id, quantity, size=size, color=color)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_stock(dto)


@click.command("delete")
@click.option("--id", "product_id", required=True, help="Product ID.")
def product_delete(product_id: str) -> None:
    """Delete a product together with its stored images."""
    orchestrator = upload_orchestrator()
    handler = DeleteProductHandler(
        product_repo=product_repository(),
        orchestrator=orchestrator,
    )

    try:
        removed = handler.handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    finally:
        orchestrator.shutdown()

    click.echo(f"Product #{product_id} deleted ({removed} image(s) removed).")
