"""Order aggregate — line items, pricing, lifecycle and audit timeline.

The Order references products by id and never touches their stock.  The
ledger side effect of each transition is decided here (``ledger_effect``)
but applied by the application layer, which owns the unit of work.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from salesledger.domain.exceptions import InvalidTransitionError, ValidationError
from salesledger.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"
    FAILED = "FAILED"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"


class PaymentMethod(Enum):
    CASH = "CASH"
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    MOBILE_MONEY = "MOBILE_MONEY"
    PAYPAL = "PAYPAL"
    OTHER = "OTHER"


class OrderType(Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"
    PHONE = "PHONE"
    IN_STORE = "IN_STORE"


class LedgerEffect(Enum):
    """What a transition does to the stock of every line item."""

    NONE = "NONE"
    RELEASE = "RELEASE"
    CONVERT = "CONVERT"


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.CONFIRMED, OrderStatus.CANCELLED, OrderStatus.FAILED}
    ),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
    OrderStatus.FAILED: frozenset(),
}

# Statuses during which the order holds a reservation on its products.
RESERVING_STATUSES = frozenset(
    {
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
    }
)

MAX_LINE_ITEMS = 50
LOYALTY_UNIT = 10  # one point per 10 currency units


def ledger_effect(target: OrderStatus) -> LedgerEffect:
    if target in (OrderStatus.CANCELLED, OrderStatus.REFUNDED, OrderStatus.FAILED):
        return LedgerEffect.RELEASE
    if target is OrderStatus.DELIVERED:
        return LedgerEffect.CONVERT
    return LedgerEffect.NONE


@dataclass
class OrderLineItem:
    """Captures the product snapshot and price at order-creation time."""

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    sku: str = ""
    discount: Money = field(default_factory=Money.zero)
    tax: Money = field(default_factory=Money.zero)

    @property
    def net_amount(self) -> Money:
        """Price times quantity, less the line discount."""
        return self.unit_price * self.quantity.value - self.discount

    @property
    def line_total(self) -> Money:
        return self.net_amount + self.tax


@dataclass(frozen=True)
class ShippingAddress:
    first_name: str
    last_name: str
    address_line1: str
    city: str
    country: str
    email: str = ""
    phone: str = ""
    address_line2: str = ""
    state: str = ""
    postal_code: str = ""

    @staticmethod
    def walk_in(first_name: str, last_name: str, email: str = "", phone: str = "") -> ShippingAddress:
        return ShippingAddress(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone or "N/A",
            address_line1="Walk-in Purchase",
            city="N/A",
            country="N/A",
        )


@dataclass(frozen=True)
class TimelineEntry:
    status: OrderStatus
    timestamp: datetime
    actor: str
    note: str = ""


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use ``Order.create()`` for online orders and ``Order.record_delivered()``
    for offline sales.  ``__init__`` stays permissive so repositories can
    reconstitute stored orders without re-validating.
    """

    id: int | None
    customer_id: str
    customer_name: str
    items: list[OrderLineItem]
    order_number: str = ""
    type: OrderType = OrderType.ONLINE
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CASH
    shipping_address: ShippingAddress | None = None
    discount: Money = field(default_factory=Money.zero)
    tax_amount: Money = field(default_factory=Money.zero)
    shipping_cost: Money = field(default_factory=Money.zero)
    timeline: list[TimelineEntry] = field(default_factory=list)
    sales_counted: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    confirmed_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    paid_at: datetime | None = None
    version: int = 0

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def create(
        customer_id: str,
        customer_name: str,
        items: list[OrderLineItem],
        actor: str,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        shipping_address: ShippingAddress | None = None,
        discount: Money | None = None,
        tax_amount: Money | None = None,
        shipping_cost: Money | None = None,
        order_type: OrderType = OrderType.ONLINE,
        at: datetime | None = None,
    ) -> Order:
        """Create a new PENDING order with its initial timeline entry."""
        at = at or datetime.now(timezone.utc)
        order = Order._build(
            customer_id, customer_name, items, payment_method, shipping_address,
            discount, tax_amount, shipping_cost, order_type, at,
        )
        order.timeline.append(TimelineEntry(OrderStatus.PENDING, at, actor, "Order created"))
        return order

    @staticmethod
    def record_delivered(
        customer_id: str,
        customer_name: str,
        items: list[OrderLineItem],
        actor: str,
        payment_method: PaymentMethod,
        shipping_address: ShippingAddress | None = None,
        at: datetime | None = None,
    ) -> Order:
        """Create an order that is already delivered and paid (offline sale)."""
        at = at or datetime.now(timezone.utc)
        order = Order._build(
            customer_id, customer_name, items, payment_method, shipping_address,
            None, None, None, OrderType.OFFLINE, at,
        )
        order.status = OrderStatus.DELIVERED
        order.payment_status = PaymentStatus.PAID
        order.paid_at = at
        order.delivered_at = at
        order.sales_counted = True
        order.timeline.append(
            TimelineEntry(OrderStatus.DELIVERED, at, actor, "Offline sale recorded directly")
        )
        return order

    @staticmethod
    def _build(
        customer_id, customer_name, items, payment_method, shipping_address,
        discount, tax_amount, shipping_cost, order_type, at,
    ) -> Order:
        if not customer_id:
            raise ValidationError("Customer is required")
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        order = Order(
            id=None,
            customer_id=customer_id,
            customer_name=customer_name,
            items=list(items),
            type=order_type,
            payment_method=payment_method,
            shipping_address=shipping_address,
            discount=discount or Money.zero(),
            tax_amount=tax_amount or Money.zero(),
            shipping_cost=shipping_cost or Money.zero(),
            created_at=at,
        )
        if order.discount > order.subtotal + order.tax + order.shipping_cost:
            raise ValidationError(
                f"Discount {order.discount} exceeds order value"
            )
        return order

    # --- State machine --------------------------------------------------------

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def can_be_cancelled(self) -> bool:
        return self.status not in (
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
            OrderStatus.REFUNDED,
        )

    def can_be_refunded(self) -> bool:
        return (
            self.payment_status is PaymentStatus.PAID
            and self.status is not OrderStatus.REFUNDED
        )

    def transition_to(
        self,
        target: OrderStatus,
        actor: str,
        note: str = "",
        at: datetime | None = None,
    ) -> LedgerEffect:
        """Move to ``target``, append a timeline entry, return the ledger effect.

        Raises InvalidTransitionError when the state machine forbids the move.
        """
        if not self.can_transition_to(target):
            raise InvalidTransitionError(self.status.value, target.value)
        if target is OrderStatus.REFUNDED and not self.can_be_refunded():
            raise InvalidTransitionError(
                self.status.value, target.value,
                f"payment status is {self.payment_status.value}",
            )

        at = at or datetime.now(timezone.utc)
        self.status = target
        self.timeline.append(TimelineEntry(target, at, actor, note))

        if target is OrderStatus.CONFIRMED:
            self.confirmed_at = at
        elif target is OrderStatus.SHIPPED:
            self.shipped_at = at
        elif target is OrderStatus.DELIVERED:
            self.delivered_at = at
        elif target is OrderStatus.CANCELLED:
            self.cancelled_at = at
        elif target is OrderStatus.REFUNDED:
            self.payment_status = PaymentStatus.REFUNDED

        return ledger_effect(target)

    def mark_paid(self, at: datetime | None = None) -> None:
        if self.payment_status not in (PaymentStatus.PENDING, PaymentStatus.FAILED):
            raise ValidationError(
                f"Cannot record payment: payment status is {self.payment_status.value}"
            )
        if self.status in (OrderStatus.CANCELLED, OrderStatus.FAILED):
            raise ValidationError(
                f"Cannot record payment for a {self.status.value} order"
            )
        self.payment_status = PaymentStatus.PAID
        self.paid_at = at or datetime.now(timezone.utc)

    # --- Computed properties --------------------------------------------------

    @property
    def holds_reservation(self) -> bool:
        return self.type is not OrderType.OFFLINE and self.status in RESERVING_STATUSES

    @property
    def subtotal(self) -> Money:
        return Money.total(item.net_amount for item in self.items)

    @property
    def tax(self) -> Money:
        return self.tax_amount + Money.total(item.tax for item in self.items)

    @property
    def total_amount(self) -> Money:
        return self.subtotal + self.tax + self.shipping_cost - self.discount

    @property
    def loyalty_points(self) -> int:
        return self.total_amount.whole_units(LOYALTY_UNIT)

    @property
    def quantities_by_product(self) -> dict[str, int]:
        """Total ordered quantity per product, in line-item order."""
        result: dict[str, int] = {}
        for item in self.items:
            result[item.product_id] = result.get(item.product_id, 0) + item.quantity.value
        return result

    def total_items(self) -> int:
        return sum(item.quantity.value for item in self.items)


def order_number_for(day: datetime, sequence: int) -> str:
    return f"ORD-{day:%Y%m%d}-{sequence:04d}"
