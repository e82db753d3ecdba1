"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from salesledger.application.add_product import AddProductHandler
from salesledger.domain.exceptions import DomainException
from salesledger.infrastructure.bootstrap import settings, unit_of_work
from salesledger.infrastructure.cli.common import domain_error


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--sku", default="", help="Stock keeping unit.")
@click.option("--quantity", default=0, type=int, help="Opening stock.")
@click.option("--low-stock-threshold", type=int, default=None, help="LOW_STOCK threshold.")
@click.option("--untracked", is_flag=True, default=False, help="Do not track inventory.")
@click.option("--allow-backorder", is_flag=True, default=False, help="Allow reserving beyond stock.")
def product_add(
    name: str,
    price: str,
    sku: str,
    quantity: int,
    low_stock_threshold: int | None,
    untracked: bool,
    allow_backorder: bool,
) -> None:
    """Add a new product to the catalog."""
    config = settings()
    handler = AddProductHandler(
        uow=unit_of_work(config),
        default_low_stock_threshold=config.default_low_stock_threshold,
    )

    try:
        product = handler.handle(
            name=name,
            price=price,
            sku=sku,
            quantity=quantity,
            low_stock_threshold=low_stock_threshold,
            track_inventory=not untracked,
            allow_backorder=allow_backorder,
        )
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    with unit_of_work() as uow:
        products = uow.products.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'SKU':<10} {'Price':>10} {'Sold':>6}")
    click.echo("-" * 56)
    for p in products:
        click.echo(f"{p.id:<6} {p.name:<20} {p.sku:<10} {str(p.price):>10} {p.sales_count:>6}")
