"""Helpers shared by the CLI command modules."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import click

from salesledger.application.dto import OrderItemSpec
from salesledger.domain.exceptions import DomainException

DEFAULT_ACTOR = "cli"


def domain_error(exc: DomainException) -> click.ClickException:
    return click.ClickException(f"[{exc.code}] {exc.message}")


def parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'Widget:3,Gadget:5@12.50' into OrderItemSpec list.

    The product may be given by id or name; ``@price`` overrides the
    catalog price.
    """
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'Product:Quantity'."
            )
        name, rest = pair.rsplit(":", 1)
        qty_str, _, price_str = rest.partition("@")
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{name}'."
            )
        unit_price = None
        if price_str:
            try:
                unit_price = Decimal(price_str)
            except InvalidOperation:
                raise click.BadParameter(
                    f"Invalid price '{price_str}' for product '{name}'."
                )
        specs.append(OrderItemSpec(product_ref=name.strip(), quantity=qty, unit_price=unit_price))
    return specs
