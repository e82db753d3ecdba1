"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from salesledger.domain.model.customer import Customer
from salesledger.domain.model.order import Order
from salesledger.domain.model.product import Product

# --- Inputs -------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: a product (id or name) and how many units of it.

    ``unit_price`` overrides the catalog price; offline sales use it for
    negotiated prices.  Omitted, the current catalog price is snapshotted.
    """

    product_ref: str
    quantity: int
    unit_price: Decimal | None = None
    discount: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")


@dataclass(frozen=True)
class CustomerRef:
    """Input: an existing customer id, or walk-in contact details."""

    customer_id: str | None = None
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""


@dataclass(frozen=True)
class InventoryAdjustment:
    """Input: one manual stock correction."""

    product_id: str
    quantity: int
    operation: str  # "ADD" or "SUBTRACT"
    reason: str = ""


# --- Outputs ------------------------------------------------------------------


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str


@dataclass(frozen=True)
class TimelineEntryDTO:
    status: str
    timestamp: str
    actor: str
    note: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_number: str
    customer_id: str
    customer_name: str
    type: str
    status: str
    payment_status: str
    payment_method: str
    items: list[OrderLineItemDTO]
    subtotal: str
    tax: str
    shipping: str
    discount: str
    total: str
    created_at: str
    timeline: list[TimelineEntryDTO] = field(default_factory=list)
    ship_to: str = ""


@dataclass(frozen=True)
class InventoryChange:
    """Output: the audit record of one stock adjustment."""

    product_id: str
    product_name: str
    previous_available: int
    new_available: int
    change: int
    operation: str
    reason: str
    actor: str
    timestamp: datetime


@dataclass(frozen=True)
class BulkAdjustResult:
    """Output: the outcome of one item of a bulk adjustment."""

    product_id: str
    success: bool
    change: InventoryChange | None = None
    error_code: str = ""
    error: str = ""


@dataclass(frozen=True)
class InventoryLineDTO:
    product_id: str
    product_name: str
    quantity: int
    reserved: int
    available: int
    stock_status: str
    sales_count: int


@dataclass(frozen=True)
class CustomerDTO:
    id: str
    name: str
    email: str
    phone: str
    status: str
    is_guest: bool
    segment: str
    loyalty_points: int
    loyalty_tier: str
    total_orders: int
    total_spent: str
    average_order_value: str
    cancelled_orders: int
    returned_orders: int


# --- Mapping ------------------------------------------------------------------


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        customer_id=order.customer_id,
        customer_name=order.customer_name,
        type=order.type.value,
        status=order.status.value,
        payment_status=order.payment_status.value,
        payment_method=order.payment_method.value,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        subtotal=str(order.subtotal),
        tax=str(order.tax),
        shipping=str(order.shipping_cost),
        discount=str(order.discount),
        total=str(order.total_amount),
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        timeline=[
            TimelineEntryDTO(
                status=entry.status.value,
                timestamp=entry.timestamp.strftime("%Y-%m-%d %H:%M UTC"),
                actor=entry.actor,
                note=entry.note,
            )
            for entry in order.timeline
        ],
        ship_to=_ship_to(order),
    )


def _ship_to(order: Order) -> str:
    address = order.shipping_address
    if address is None:
        return ""
    name = f"{address.first_name} {address.last_name}".strip()
    parts = [name, address.address_line1, address.address_line2, address.city,
             address.state, address.postal_code, address.country]
    return ", ".join(p for p in parts if p)


def inventory_line(product: Product) -> InventoryLineDTO:
    return InventoryLineDTO(
        product_id=product.id,
        product_name=product.name,
        quantity=product.quantity,
        reserved=product.reserved_quantity,
        available=product.available_quantity,
        stock_status=product.stock_status.value,
        sales_count=product.sales_count,
    )


def customer_to_dto(customer: Customer) -> CustomerDTO:
    loyalty = customer.loyalty
    metrics = customer.metrics
    return CustomerDTO(
        id=customer.id,
        name=customer.full_name,
        email=customer.email,
        phone=customer.phone,
        status=customer.status.value,
        is_guest=customer.is_guest,
        segment=customer.segment,
        loyalty_points=loyalty.points if loyalty else 0,
        loyalty_tier=loyalty.tier.value if loyalty else "",
        total_orders=metrics.total_orders,
        total_spent=str(metrics.total_spent),
        average_order_value=str(metrics.average_order_value),
        cancelled_orders=metrics.cancelled_orders,
        returned_orders=metrics.returned_orders,
    )
