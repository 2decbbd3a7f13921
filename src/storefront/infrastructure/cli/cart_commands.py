"""CLI commands for the shopper's cart."""

from __future__ import annotations

import asyncio

import click

from storefront.application.dto import CartResult
from storefront.infrastructure.bootstrap import reservation_store

_product_option = click.option("--product", "product_id", required=True, help="Product ID.")
_size_option = click.option("--size", default=None, help="Size label, for products sold by size.")


def _report(result: CartResult, success_message: str) -> None:
    if not result.success:
        raise click.ClickException(result.message)
    click.echo(success_message)


@click.command("add")
@_product_option
@_size_option
@click.option("--quantity", default=1, show_default=True, type=int, help="Units to add.")
def cart_add(product_id: str, size: str | None, quantity: int) -> None:
    """Reserve units of a product (checked against current stock)."""
    store = reservation_store()
    result = asyncio.run(store.reserve({"id": product_id}, quantity, size))
    _report(result, f"Added {quantity} x {product_id} to the cart ({store.total_quantity()} items)")


@click.command("inc")
@_product_option
@_size_option
def cart_inc(product_id: str, size: str | None) -> None:
    """Add one unit to a cart line (checked against current stock)."""
    store = reservation_store()
    result = asyncio.run(store.increment(product_id, size))
    _report(result, f"{product_id}: {store.reserved(product_id, size)} in cart")


@click.command("dec")
@_product_option
@_size_option
def cart_dec(product_id: str, size: str | None) -> None:
    """Take one unit off a cart line; the line is removed at zero."""
    store = reservation_store()
    result = store.decrement(product_id, size)
    _report(result, f"{product_id}: {store.reserved(product_id, size)} in cart")


@click.command("set")
@_product_option
@_size_option
@click.option("--quantity", required=True, type=int, help="New quantity; 0 removes the line.")
def cart_set(product_id: str, size: str | None, quantity: int) -> None:
    """Set the quantity of a cart line (checked against current stock)."""
    store = reservation_store()
    result = asyncio.run(store.set_quantity(product_id, quantity, size))
    _report(result, f"{product_id}: {store.reserved(product_id, size)} in cart")


@click.command("remove")
@_product_option
@_size_option
def cart_remove(product_id: str, size: str | None) -> None:
    """Remove a line from the cart."""
    reservation_store().remove(product_id, size)
    click.echo(f"Removed {product_id} from the cart")


@click.command("clear")
def cart_clear() -> None:
    """Empty the cart."""
    reservation_store().clear()
    click.echo("Cart emptied.")


@click.command("show")
def cart_show() -> None:
    """Show the cart contents."""
    summary = reservation_store().summary()

    if not summary.lines:
        click.echo("Your cart is empty.")
        return

    click.echo(f"  {'Product':<24} {'Size':>5} {'Qty':>5} {'Price':>10} {'Total':>11}")
    click.echo(f"  {'-'*59}")
    for line in summary.lines:
        click.echo(
            f"  {line.title:<24} {line.size or '-':>5} {line.quantity:>5} "
            f"{line.unit_price:>10} {line.line_total:>11}"
        )
    click.echo(f"  {'-'*59}")
    click.echo(f"  {'Items':<24} {summary.total_quantity:>11}")
    click.echo(f"  {'Subtotal':<24} {summary.total_price:>35}")
