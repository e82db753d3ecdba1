"""Application service: Create Order use case.

Orchestrates the flow between repositories and the domain model.  The
customer check, the order insert and every stock reservation share one
unit of work: if any item cannot be reserved nothing is written.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import structlog

from salesledger.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from salesledger.application.line_items import build_line_items
from salesledger.application.notifications import Notifier, notify_safely
from salesledger.application.refresh_customer_metrics import (
    RefreshCustomerMetricsHandler,
)
from salesledger.application.retry import RetryPolicy, run_with_retry
from salesledger.domain.exceptions import (
    CustomerIneligibleError,
    CustomerNotFoundError,
    ValidationError,
)
from salesledger.domain.model.order import (
    Order,
    OrderType,
    PaymentMethod,
    ShippingAddress,
)
from salesledger.domain.model.value_objects import Money
from salesledger.domain.repository.unit_of_work import UnitOfWork
from salesledger.domain.service.stock_ledger_service import StockLedgerService

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        retry_policy: RetryPolicy | None = None,
        notifier: Notifier | None = None,
        reservation_ttl: timedelta | None = None,
    ) -> None:
        self._uow = uow
        self._retry_policy = retry_policy or RetryPolicy()
        self._notifier = notifier
        self._reservation_ttl = reservation_ttl
        self._metrics = RefreshCustomerMetricsHandler(uow, self._retry_policy)

    def handle(
        self,
        customer_id: str,
        item_specs: list[OrderItemSpec],
        actor: str,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        shipping_address: ShippingAddress | None = None,
        discount: Decimal | str | None = None,
        tax_amount: Decimal | str | None = None,
        shipping_cost: Decimal | str | None = None,
        order_type: OrderType = OrderType.ONLINE,
        at: datetime | None = None,
    ) -> OrderDTO:
        """Create a new PENDING order and reserve stock for all of it.

        Steps:
        1. Check that the customer exists and may purchase.
        2. Build OrderLineItems with *current* prices (snapshot).
        3. Let the Order aggregate validate all business rules.
        4. Reserve every tracked product; any failure aborts everything.
        5. Commit, then notify and refresh the customer's metrics.
        """
        if order_type is OrderType.OFFLINE:
            raise ValidationError("Offline sales are recorded with RecordOfflineSale")
        at = at or datetime.now(timezone.utc)

        def place() -> Order:
            with self._uow as uow:
                customer = uow.customers.get_by_id(customer_id)
                if customer is None:
                    raise CustomerNotFoundError(customer_id)
                if not customer.can_purchase():
                    logger.warning(
                        "Order rejected for ineligible customer",
                        customer_id=customer_id,
                        status=customer.status.value,
                    )
                    raise CustomerIneligibleError(customer_id, customer.status.value)

                order = Order.create(
                    customer_id=customer.id,
                    customer_name=customer.full_name,
                    items=build_line_items(uow, item_specs),
                    actor=actor,
                    payment_method=payment_method,
                    shipping_address=shipping_address,
                    discount=_money(discount),
                    tax_amount=_money(tax_amount),
                    shipping_cost=_money(shipping_cost),
                    order_type=order_type,
                    at=at,
                )
                uow.orders.save(order)
                StockLedgerService(uow).reserve_for_order(order, self._expiry(at), at)
                uow.commit()
                return order

        order = run_with_retry(place, self._retry_policy)

        logger.info(
            "Order created",
            order_id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            items=order.total_items(),
            total=str(order.total_amount.amount),
        )
        if self._notifier is not None:
            notify_safely(
                self._notifier.order_placed, order.id, order.order_number, order.customer_id
            )
        self._metrics.refresh_quietly(order.customer_id)
        return order_to_dto(order)

    def _expiry(self, at: datetime) -> datetime | None:
        if not self._reservation_ttl:
            return None
        return at + self._reservation_ttl


def _money(amount: Decimal | str | None) -> Money | None:
    return Money.of(amount) if amount is not None else None
