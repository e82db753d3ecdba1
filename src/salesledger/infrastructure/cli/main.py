import click

from salesledger.infrastructure.cli.customer_commands import customer_add, customer_show
from salesledger.infrastructure.cli.inventory_commands import (
    inventory_adjust,
    inventory_bulk_adjust,
    inventory_show,
)
from salesledger.infrastructure.cli.order_commands import (
    order_create,
    order_expire_stale,
    order_offline,
    order_pay,
    order_show,
    order_status,
)
from salesledger.infrastructure.cli.product_commands import product_add, product_list
from salesledger.infrastructure.logging import add_context, configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Sales Ledger — inventory reservations and order lifecycle"""
    configure_logging()
    add_context(command=ctx.invoked_subcommand)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def inventory() -> None:
    """Manage inventory."""


@cli.group()
def customer() -> None:
    """Manage customers."""


# Register subcommands
order.add_command(order_create)
order.add_command(order_expire_stale)
order.add_command(order_offline)
order.add_command(order_pay)
order.add_command(order_show)
order.add_command(order_status)
product.add_command(product_add)
product.add_command(product_list)
inventory.add_command(inventory_adjust)
inventory.add_command(inventory_bulk_adjust)
inventory.add_command(inventory_show)
customer.add_command(customer_add)
customer.add_command(customer_show)
