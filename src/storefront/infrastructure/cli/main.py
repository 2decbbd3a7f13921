import logging

import click

from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_dec,
    cart_inc,
    cart_remove,
    cart_set,
    cart_show,
)
from storefront.infrastructure.cli.checkout_commands import checkout, delivery_quote
from storefront.infrastructure.cli.stock_commands import stock_show
from storefront.infrastructure.logging_config import setup_logging


@click.group()
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug).")
def cli(verbose: int) -> None:
    """Storefront — cart, stock and checkout"""
    levels = {0: logging.WARNING, 1: logging.INFO}
    setup_logging(levels.get(verbose, logging.DEBUG))


@cli.group()
def cart() -> None:
    """Manage the shopping cart."""


@cli.group()
def stock() -> None:
    """Inspect catalog stock."""


@cli.group()
def delivery() -> None:
    """Delivery options and costs."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_dec)
cart.add_command(cart_inc)
cart.add_command(cart_remove)
cart.add_command(cart_set)
cart.add_command(cart_show)
stock.add_command(stock_show)
delivery.add_command(delivery_quote)
cli.add_command(checkout)
