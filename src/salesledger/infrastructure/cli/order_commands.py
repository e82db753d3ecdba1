"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from salesledger.application.create_order import CreateOrderHandler
from salesledger.application.dto import CustomerRef, OrderDTO
from salesledger.application.expire_stale_reservations import (
    ExpireStaleReservationsHandler,
)
from salesledger.application.record_offline_sale import RecordOfflineSaleHandler
from salesledger.application.record_payment import RecordPaymentHandler
from salesledger.application.show_order import ShowOrderHandler
from salesledger.application.update_order_status import UpdateOrderStatusHandler
from salesledger.domain.exceptions import DomainException
from salesledger.domain.model.order import (
    OrderStatus,
    OrderType,
    PaymentMethod,
    ShippingAddress,
)
from salesledger.infrastructure.bootstrap import (
    notifier,
    retry_policy,
    settings,
    unit_of_work,
)
from salesledger.infrastructure.cli.common import (
    DEFAULT_ACTOR,
    domain_error,
    parse_items,
)

PAYMENT_METHODS = click.Choice([m.value for m in PaymentMethod], case_sensitive=False)
ONLINE_TYPES = click.Choice(
    [t.value for t in OrderType if t is not OrderType.OFFLINE], case_sensitive=False
)
STATUSES = click.Choice([s.value for s in OrderStatus], case_sensitive=False)


def _display_order(dto: OrderDTO, show_timeline: bool = False) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id} {dto.order_number}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"Customer: {dto.customer_name} ({dto.customer_id})")
    click.echo(f"Type:     {dto.type}, paid by {dto.payment_method}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.ship_to:
        click.echo(f"Ship to:  {dto.ship_to}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>20}")
    click.echo(f"  {'Tax':<27} {dto.tax:>20}")
    click.echo(f"  {'Shipping':<27} {dto.shipping:>20}")
    click.echo(f"  {'Discount':<27} {dto.discount:>20}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")

    if show_timeline:
        click.echo()
        click.echo("Timeline:")
        for entry in dto.timeline:
            note = f"  {entry.note}" if entry.note else ""
            click.echo(f"  {entry.timestamp}  {entry.status:<10} by {entry.actor}{note}")


def _shipping_address(
    recipient: str,
    line1: str | None,
    city: str | None,
    country: str | None,
    postal_code: str,
    phone: str,
) -> ShippingAddress | None:
    """Build the address from the --ship-* options; None when none were given."""
    if not (line1 or city or country):
        return None
    if not (line1 and city and country):
        raise click.UsageError(
            "--ship-address, --ship-city and --ship-country must be given together."
        )
    first_name, _, last_name = recipient.strip().partition(" ")
    return ShippingAddress(
        first_name=first_name,
        last_name=last_name.strip(),
        address_line1=line1,
        city=city,
        country=country,
        postal_code=postal_code,
        phone=phone,
    )


@click.command("create")
@click.option("--customer", "customer_id", required=True, help="Customer ID.")
@click.option("--items", required=True, help="Items as 'Product:Qty,Product:Qty'.")
@click.option("--payment-method", default="CASH", type=PAYMENT_METHODS, help="How the order is paid.")
@click.option("--type", "order_type", default="ONLINE", type=ONLINE_TYPES, help="Sales channel.")
@click.option("--discount", default=None, help="Order-level discount.")
@click.option("--tax", default=None, help="Order-level tax amount.")
@click.option("--shipping", default=None, help="Shipping cost.")
@click.option("--ship-name", default="", help="Recipient name.")
@click.option("--ship-address", default=None, help="Street address.")
@click.option("--ship-city", default=None, help="City.")
@click.option("--ship-postal-code", default="", help="Postal code.")
@click.option("--ship-country", default=None, help="Country.")
@click.option("--ship-phone", default="", help="Recipient phone.")
@click.option("--actor", default=DEFAULT_ACTOR, help="Who placed the order.")
def order_create(
    customer_id: str,
    items: str,
    payment_method: str,
    order_type: str,
    discount: str | None,
    tax: str | None,
    shipping: str | None,
    ship_name: str,
    ship_address: str | None,
    ship_city: str | None,
    ship_postal_code: str,
    ship_country: str | None,
    ship_phone: str,
    actor: str,
) -> None:
    """Create a new order (reserves inventory)."""
    specs = parse_items(items)
    address = _shipping_address(
        ship_name, ship_address, ship_city, ship_country, ship_postal_code, ship_phone
    )
    config = settings()

    handler = CreateOrderHandler(
        uow=unit_of_work(config),
        retry_policy=retry_policy(config),
        notifier=notifier(),
        reservation_ttl=config.reservation_ttl,
    )

    try:
        dto = handler.handle(
            customer_id=customer_id,
            item_specs=specs,
            actor=actor,
            payment_method=PaymentMethod(payment_method.upper()),
            shipping_address=address,
            discount=discount,
            tax_amount=tax,
            shipping_cost=shipping,
            order_type=OrderType(order_type.upper()),
        )
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Order #{dto.id} created  (status={dto.status})")
    _display_order(dto)


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--to", "new_status", required=True, type=STATUSES, help="Target status.")
@click.option("--note", default="", help="Timeline note.")
@click.option("--actor", default=DEFAULT_ACTOR, help="Who made the change.")
def order_status(order_id: int, new_status: str, note: str, actor: str) -> None:
    """Move an order to a new status."""
    config = settings()
    handler = UpdateOrderStatusHandler(
        uow=unit_of_work(config),
        retry_policy=retry_policy(config),
        notifier=notifier(),
    )

    try:
        dto = handler.handle(order_id, new_status, actor, note)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Order #{dto.id} is now {dto.status}.")


@click.command("pay")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--actor", default=DEFAULT_ACTOR, help="Who recorded the payment.")
def order_pay(order_id: int, actor: str) -> None:
    """Record that an order has been paid."""
    config = settings()
    handler = RecordPaymentHandler(uow=unit_of_work(config), retry_policy=retry_policy(config))

    try:
        dto = handler.handle(order_id, actor)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Order #{dto.id} payment recorded (payment={dto.payment_status}).")


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(uow=unit_of_work())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise domain_error(exc)

    _display_order(dto, show_timeline=True)


@click.command("offline")
@click.option("--customer", "customer_id", default=None, help="Existing customer ID.")
@click.option("--first-name", default="", help="Walk-in customer's first name.")
@click.option("--last-name", default="", help="Walk-in customer's last name.")
@click.option("--email", default="", help="Walk-in customer's email.")
@click.option("--phone", default="", help="Walk-in customer's phone.")
@click.option("--items", required=True, help="Items as 'Product:Qty[@price],...'.")
@click.option("--payment-method", default="CASH", type=PAYMENT_METHODS, help="How the sale was paid.")
@click.option("--actor", default=DEFAULT_ACTOR, help="Who recorded the sale.")
def order_offline(
    customer_id: str | None,
    first_name: str,
    last_name: str,
    email: str,
    phone: str,
    items: str,
    payment_method: str,
    actor: str,
) -> None:
    """Record a completed walk-in sale (decrements stock immediately)."""
    specs = parse_items(items)
    config = settings()
    handler = RecordOfflineSaleHandler(
        uow=unit_of_work(config),
        retry_policy=retry_policy(config),
        notifier=notifier(),
    )
    ref = CustomerRef(
        customer_id=customer_id,
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
    )

    try:
        dto = handler.handle(ref, specs, PaymentMethod(payment_method.upper()), actor)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Offline sale recorded as order #{dto.id}")
    _display_order(dto)


@click.command("expire-stale")
def order_expire_stale() -> None:
    """Cancel PENDING orders whose reservations have expired."""
    config = settings()
    handler = ExpireStaleReservationsHandler(
        uow=unit_of_work(config),
        retry_policy=retry_policy(config),
        notifier=notifier(),
    )
    result = handler.handle()

    for order_id in result.cancelled:
        click.echo(f"  Order #{order_id} cancelled (reservation expired)")
    for order_id, error in result.failures.items():
        click.echo(f"  Order #{order_id} not expired: {error}")
    click.echo(
        f"{len(result.cancelled)} cancelled, {len(result.skipped)} skipped, "
        f"{len(result.failures)} failed."
    )
