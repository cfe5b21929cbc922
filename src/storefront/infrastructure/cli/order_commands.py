"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from storefront.application.advance_order import AdvanceOrderHandler
from storefront.application.cancel_order import CancelOrderHandler
from storefront.application.create_order import CreateOrderHandler
from storefront.application.dto import OrderDTO, OrderItemSpec
from storefront.application.show_order import ShowOrderHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.order import PaymentInfo, PaymentMethod, ShippingInfo
from storefront.infrastructure.bootstrap import (
    image_resolver,
    inventory_ledger,
    order_repository,
    product_repository,
    variant_scope,
)
from storefront.infrastructure.cli.display import echo_lines


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '12:3,7:1:M:Red' (product:qty[:size:color]) into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for entry in raw.split(","):
        parts = [p.strip() for p in entry.strip().split(":")]
        if len(parts) not in (2, 4):
            raise click.BadParameter(
                f"Invalid item format '{entry}'. Expected 'ProductID:Qty[:Size:Color]'."
            )
        try:
            qty = int(parts[1])
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{parts[1]}' for product '{parts[0]}'."
            )
        size, color = (parts[2], parts[3]) if len(parts) == 4 else ("", "")
        specs.append(OrderItemSpec(product_id=parts[0], quantity=qty, size=size, color=color))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"User:     {dto.user_id}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.delivered_at:
        click.echo(f"Delivered: {dto.delivered_at}")
    click.echo()
    echo_lines(dto.items)
    click.echo(f"  {'Items Total':<41} {dto.items_total:>30}")
    click.echo(f"  {'Order Total':<41} {dto.total:>30}")


@click.command("create")
@click.option("--user", "user_id", required=True, help="User ID.")
@click.option("--items", required=True, help="Items as 'ProductID:Qty[:Size:Color],...'.")
@click.option("--address", required=True, help="Shipping address.")
@click.option("--city", required=True, help="Shipping city.")
@click.option("--country", required=True, help="Shipping country.")
@click.option("--phone", default="", help="Contact phone.")
@click.option(
    "--payment",
    type=click.Choice([m.value for m in PaymentMethod]),
    default=PaymentMethod.COD.value,
    show_default=True,
)
@click.option("--reference", default=None, help="Payment reference for online payments.")
@click.option("--tax", default="0", help="Tax amount.")
@click.option("--shipping-charges", default="0", help="Shipping charges.")
def order_create(
    user_id: str,
    items: str,
    address: str,
    city: str,
    country: str,
    phone: str,
    payment: str,
    reference: str | None,
    tax: str,
    shipping_charges: str,
) -> None:
    """Place an order (reserves stock for every line)."""
    specs = _parse_items(items)

    handler = CreateOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        ledger=inventory_ledger(),
        scope=variant_scope(),
        resolver=image_resolver(),
    )

    try:
        dto = handler.handle(
            user_id=user_id,
            item_specs=specs,
            shipping=ShippingInfo(address=address, city=city, country=country, phone=phone),
            payment=PaymentInfo(method=PaymentMethod(payment), reference=reference),
            tax=tax,
            shipping_charges=shipping_charges,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("advance")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to advance.")
def order_advance(order_id: int) -> None:
    """Move an order to its next status (processing -> shipped -> delivered)."""
    handler = AdvanceOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {dto.status}.")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--to", "status", required=True, help="shipped or delivered.")
def order_status(order_id: int, status: str) -> None:
    """Set an order's status explicitly."""
    handler = UpdateOrderStatusHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id, status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {dto.status}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
def order_cancel(order_id: int) -> None:
    """Cancel a processing order (returns its stock)."""
    handler = CancelOrderHandler(
        order_repo=order_repository(),
        ledger=inventory_ledger(),
        scope=variant_scope(),
    )

    try:
        handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled, stock returned.")
