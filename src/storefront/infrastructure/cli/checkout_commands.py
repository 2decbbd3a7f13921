"""CLI commands for delivery quotes and checkout."""

from __future__ import annotations

import asyncio

import click

from storefront.application.dto import BuyerSpec
from storefront.domain.model.delivery import (
    DOMESTIC_DESTINATIONS,
    INTERNATIONAL_DESTINATIONS,
    DeliveryOptions,
    DeliveryType,
)
from storefront.infrastructure.bootstrap import checkout_handler, quote_delivery_handler

_DELIVERY_TYPES = [t.value for t in DeliveryType]


def _delivery_options(delivery: str, destination: str | None, bag: bool) -> DeliveryOptions:
    delivery_type = DeliveryType(delivery)
    if delivery_type is DeliveryType.DOMESTIC and destination not in DOMESTIC_DESTINATIONS:
        raise click.BadParameter(
            f"Unknown department {destination!r}. Choose one of: {', '.join(DOMESTIC_DESTINATIONS)}",
            param_hint="--destination",
        )
    if delivery_type is DeliveryType.INTERNATIONAL and destination not in INTERNATIONAL_DESTINATIONS:
        raise click.BadParameter(
            f"Unknown country {destination!r}. Choose one of: {', '.join(INTERNATIONAL_DESTINATIONS)}",
            param_hint="--destination",
        )
    return DeliveryOptions(type=delivery_type, destination=destination, packaging=bag)


def _delivery_flags(func):
    func = click.option("--bag", is_flag=True, default=False, help="Add a gift bag.")(func)
    func = click.option("--destination", default=None, help="Department or country.")(func)
    func = click.option(
        "--delivery",
        type=click.Choice(_DELIVERY_TYPES),
        default=DeliveryType.PICKUP.value,
        show_default=True,
        help="Store pickup, domestic or international shipping.",
    )(func)
    return func


@click.command("quote")
@_delivery_flags
def delivery_quote(delivery: str, destination: str | None, bag: bool) -> None:
    """Price the cart with the chosen delivery options."""
    options = _delivery_options(delivery, destination, bag)
    q = quote_delivery_handler().handle(options)

    click.echo(f"  {'Subtotal':<12} {str(q.subtotal):>12}")
    shipping = "FREE" if q.shipping.amount == 0 else str(q.shipping)
    click.echo(f"  {'Shipping':<12} {shipping:>12}")
    click.echo(f"  {'Packaging':<12} {str(q.packaging):>12}")
    click.echo(f"  {'-'*25}")
    click.echo(f"  {'Total':<12} {str(q.total):>12}")
    if q.free_shipping and options.type is DeliveryType.DOMESTIC:
        click.echo("Free domestic shipping on orders of $4000 or more!")


@click.command("checkout")
@click.option("--name", required=True, help="Buyer full name.")
@click.option("--phone", required=True, help="Buyer phone number.")
@click.option("--email", required=True, help="Buyer e-mail.")
@click.option("--confirm-email", default=None, help="Repeat the e-mail to confirm it.")
@_delivery_flags
def checkout(
    name: str,
    phone: str,
    email: str,
    confirm_email: str | None,
    delivery: str,
    destination: str | None,
    bag: bool,
) -> None:
    """Place an order for everything in the cart."""
    options = _delivery_options(delivery, destination, bag)
    handler = checkout_handler()

    result = asyncio.run(
        handler.handle(BuyerSpec(name, phone, email, confirm_email), delivery=options)
    )
    if not result.success:
        if result.order_id:
            raise click.ClickException(
                f"{result.message} (order {result.order_id} was recorded; please contact the store)"
            )
        raise click.ClickException(result.message)

    click.echo(result.message)
    click.echo(f"Total charged: {result.total}")
