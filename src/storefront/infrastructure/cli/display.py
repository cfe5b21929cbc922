"""Shared table formatting for line-based output."""

from __future__ import annotations

import click

from storefront.application.dto import CartDTO, LineDTO


def echo_lines(lines: list[LineDTO]) -> None:
    click.echo(f"  {'Product':<20} {'Variant':<14} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*71}")
    for line in lines:
        variant = "/".join(part for part in (line.color, line.size) if part) or "-"
        click.echo(
            f"  {line.name:<20} {variant:<14} {line.quantity:>5} "
            f"{line.unit_price:>14} {line.line_total:>14}"
        )
    click.echo(f"  {'-'*71}")


def echo_cart(dto: CartDTO) -> None:
    if not dto.items:
        click.echo(f"Cart of {dto.user_id} is empty.")
        return
    click.echo(f"Cart of {dto.user_id}")
    echo_lines(dto.items)
    click.echo(f"  {'Cart Total':<41} {dto.total:>30}")
