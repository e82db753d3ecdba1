"""CLI commands for the Customer aggregate."""

from __future__ import annotations

import click

from salesledger.application.add_customer import AddCustomerHandler
from salesledger.application.show_customer import ShowCustomerHandler
from salesledger.domain.exceptions import DomainException
from salesledger.infrastructure.bootstrap import unit_of_work
from salesledger.infrastructure.cli.common import domain_error

STATUSES = click.Choice(["active", "inactive", "blocked", "vip"], case_sensitive=False)


@click.command("add")
@click.option("--first-name", required=True, help="First name.")
@click.option("--last-name", default="", help="Last name.")
@click.option("--email", default="", help="Email address.")
@click.option("--phone", default="", help="Phone number.")
@click.option("--status", default="active", type=STATUSES, help="Account status.")
def customer_add(first_name: str, last_name: str, email: str, phone: str, status: str) -> None:
    """Register a customer."""
    handler = AddCustomerHandler(uow=unit_of_work())

    try:
        dto = handler.handle(first_name, last_name, email, phone, status)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Customer {dto.id} '{dto.name}' added (status={dto.status})")


@click.command("show")
@click.option("--id", "customer_id", required=True, help="Customer ID.")
def customer_show(customer_id: str) -> None:
    """Show a customer's loyalty standing and order metrics."""
    handler = ShowCustomerHandler(uow=unit_of_work())

    try:
        dto = handler.handle(customer_id)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Customer {dto.id}: {dto.name}  (status={dto.status})")
    if dto.email or dto.phone:
        click.echo(f"Contact:  {dto.email or '-'} / {dto.phone or '-'}")
    if dto.is_guest:
        click.echo("Guest account")
    click.echo(f"Segment:  {dto.segment}")
    click.echo(f"Loyalty:  {dto.loyalty_points} points ({dto.loyalty_tier or 'not enrolled'})")
    click.echo(
        f"Orders:   {dto.total_orders} total, {dto.cancelled_orders} cancelled, "
        f"{dto.returned_orders} refunded"
    )
    click.echo(f"Spent:    {dto.total_spent}  (avg {dto.average_order_value})")
