"""CLI commands for inventory management."""

from __future__ import annotations

import click

from salesledger.application.adjust_inventory import (
    AdjustInventoryHandler,
    BulkAdjustInventoryHandler,
)
from salesledger.application.dto import InventoryAdjustment
from salesledger.application.show_inventory import ShowInventoryHandler
from salesledger.domain.exceptions import DomainException
from salesledger.infrastructure.bootstrap import retry_policy, unit_of_work
from salesledger.infrastructure.cli.common import DEFAULT_ACTOR, domain_error

OPERATIONS = click.Choice(["add", "subtract"], case_sensitive=False)


@click.command("show")
def inventory_show() -> None:
    """Show current inventory levels."""
    handler = ShowInventoryHandler(uow=unit_of_work())
    lines = handler.handle()

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(
        f"{'ID':<6} {'Product':<20} {'Total':>8} {'Reserved':>10} {'Available':>10} {'Status':>14}"
    )
    click.echo("-" * 73)
    for line in lines:
        click.echo(
            f"{line.product_id:<6} {line.product_name:<20} {line.quantity:>8} "
            f"{line.reserved:>10} {line.available:>10} {line.stock_status:>14}"
        )


@click.command("adjust")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units to add or subtract.")
@click.option("--operation", required=True, type=OPERATIONS, help="add or subtract.")
@click.option("--reason", default="", help="Why the stock changed.")
@click.option("--actor", default=DEFAULT_ACTOR, help="Who made the change.")
def inventory_adjust(product_id: str, quantity: int, operation: str, reason: str, actor: str) -> None:
    """Restock or correct a product's stock."""
    handler = AdjustInventoryHandler(uow=unit_of_work(), retry_policy=retry_policy())

    try:
        change = handler.handle(product_id, quantity, operation, reason, actor)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(
        f"Product #{change.product_id} '{change.product_name}': available "
        f"{change.previous_available} -> {change.new_available} ({change.change:+d})"
    )


def _parse_adjustments(raw: str, reason: str) -> list[InventoryAdjustment]:
    """Parse '1:add:10,2:subtract:3' into InventoryAdjustment list."""
    adjustments: list[InventoryAdjustment] = []
    for entry in raw.split(","):
        parts = [p.strip() for p in entry.split(":")]
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid adjustment '{entry.strip()}'. Expected 'ProductId:add|subtract:Qty'."
            )
        product_id, operation, qty_str = parts
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(f"Invalid quantity '{qty_str}' for product '{product_id}'.")
        adjustments.append(InventoryAdjustment(product_id, qty, operation, reason))
    return adjustments


@click.command("bulk-adjust")
@click.option("--items", required=True, help="Adjustments as 'Id:add|subtract:Qty,...'.")
@click.option("--reason", default="", help="Why the stock changed.")
@click.option("--actor", default=DEFAULT_ACTOR, help="Who made the change.")
def inventory_bulk_adjust(items: str, reason: str, actor: str) -> None:
    """Apply several stock adjustments; each succeeds or fails on its own."""
    adjustments = _parse_adjustments(items, reason)
    handler = BulkAdjustInventoryHandler(uow=unit_of_work(), retry_policy=retry_policy())
    results = handler.handle(adjustments, actor)

    for result in results:
        if result.success:
            click.echo(
                f"  OK    #{result.product_id}: available "
                f"{result.change.previous_available} -> {result.change.new_available}"
            )
        else:
            click.echo(f"  FAIL  #{result.product_id}: [{result.error_code}] {result.error}")

    failed = sum(1 for r in results if not r.success)
    click.echo(f"{len(results) - failed} applied, {failed} failed.")
