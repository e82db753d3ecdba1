"""Application service: Update Order Status use case.

Applies one state-machine transition together with its ledger effect
(release, convert-to-sold, or none) in a single unit of work.  If any
product's ledger call fails, the status change, the timeline entry and
every ledger call are discarded together.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from salesledger.application.dto import OrderDTO, order_to_dto
from salesledger.application.notifications import Notifier, notify_safely
from salesledger.application.refresh_customer_metrics import (
    RefreshCustomerMetricsHandler,
)
from salesledger.application.retry import RetryPolicy, is_conflict, run_with_retry
from salesledger.domain.exceptions import (
    InvalidTransitionError,
    OrderNotFoundError,
    ValidationError,
)
from salesledger.domain.model.order import LedgerEffect, Order, OrderStatus
from salesledger.domain.repository.unit_of_work import UnitOfWork
from salesledger.domain.service.stock_ledger_service import StockLedgerService

logger = structlog.get_logger(__name__)

# Transitions after which the customer's metrics are rebuilt.
METRIC_STATUSES = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED}
)


def _retryable(exc: BaseException) -> bool:
    # A conflict on the order itself means a concurrent transition won.
    return is_conflict(exc) and getattr(exc, "collection", None) != "orders"


class UpdateOrderStatusHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        retry_policy: RetryPolicy | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._uow = uow
        self._retry_policy = retry_policy or RetryPolicy()
        self._notifier = notifier
        self._metrics = RefreshCustomerMetricsHandler(uow, self._retry_policy)

    def handle(
        self,
        order_id: int,
        new_status: OrderStatus | str,
        actor: str,
        note: str = "",
        at: datetime | None = None,
    ) -> OrderDTO:
        target = parse_status(new_status)
        at = at or datetime.now(timezone.utc)

        def apply() -> tuple[Order, int, str]:
            with self._uow as uow:
                order = uow.orders.get_by_id(order_id)
                if order is None:
                    raise OrderNotFoundError(order_id)
                previous = order.status
                try:
                    effect = order.transition_to(target, actor, note, at)
                except InvalidTransitionError:
                    logger.warning(
                        "Order transition rejected",
                        order_id=order_id,
                        status=previous.value,
                        target=target.value,
                    )
                    raise

                ledger = StockLedgerService(uow)
                points, tier = 0, ""
                if effect is LedgerEffect.RELEASE:
                    ledger.release_for_order(order, at)
                    if target is OrderStatus.CANCELLED:
                        ledger.uncount_sales_for_order(order)
                elif effect is LedgerEffect.CONVERT:
                    ledger.convert_for_order(order, at)
                    points, tier = self._accrue_loyalty(uow, order)
                elif target is OrderStatus.CONFIRMED:
                    ledger.pin_reservations(order)

                uow.orders.save(order)
                uow.commit()
                return order, points, tier

        order, points, tier = run_with_retry(apply, self._retry_policy, _retryable)

        logger.info(
            "Order status updated",
            order_id=order.id,
            status=order.status.value,
            actor=actor,
        )
        if self._notifier is not None:
            notify_safely(
                self._notifier.order_status_changed,
                order.id,
                order.order_number,
                order.status.value,
            )
            if points:
                notify_safely(
                    self._notifier.loyalty_points_earned,
                    order.customer_id,
                    points,
                    tier,
                )
        if target in METRIC_STATUSES:
            self._metrics.refresh_quietly(order.customer_id)
        return order_to_dto(order)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _accrue_loyalty(uow: UnitOfWork, order: Order) -> tuple[int, str]:
        """Credit 1 point per 10 currency units of the order total."""
        points = order.loyalty_points
        customer = uow.customers.get_by_id(order.customer_id)
        if customer is None or points <= 0:
            return 0, ""
        customer.add_loyalty_points(points)
        uow.customers.save(customer)
        logger.debug(
            "Loyalty points credited",
            customer_id=customer.id,
            points=points,
            tier=customer.loyalty.tier.value,
        )
        return points, customer.loyalty.tier.value


def parse_status(value: OrderStatus | str) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value.strip().upper())
    except ValueError as exc:
        raise ValidationError(f"Unknown order status: {value!r}") from exc
