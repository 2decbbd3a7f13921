"""CLI commands for catalog stock."""

from __future__ import annotations

import asyncio

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import show_stock_handler


@click.command("show")
@click.option("--product", "product_id", required=True, help="Product ID.")
def stock_show(product_id: str) -> None:
    """Show stock of a product by size and store location."""
    handler = show_stock_handler()

    try:
        dto = asyncio.run(handler.handle(product_id))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{dto.title}  (id={dto.product_id})")
    click.echo(f"Total available: {dto.total}   In your cart: {dto.in_cart}")
    if not dto.sizes:
        return

    click.echo()
    click.echo(f"  {'Size':<6} {'Total':>6}  Locations")
    click.echo(f"  {'-'*40}")
    for size in dto.sizes:
        locations = ", ".join(f"{loc}: {n}" for loc, n in size.locations.items()) or "-"
        click.echo(f"  {size.size:<6} {size.total:>6}  {locations}")
