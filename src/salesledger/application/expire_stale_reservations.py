"""Application service: Expire Stale Reservations use case.

A scheduled sweep.  Every ACTIVE claim past its expiry belongs to some
order; each such order still PENDING is cancelled through the normal
transition path and its claims are marked EXPIRED.  Orders are processed
one unit of work at a time and a failure on one is reported without
stopping the sweep.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog

from salesledger.application.notifications import Notifier, notify_safely
from salesledger.application.refresh_customer_metrics import (
    RefreshCustomerMetricsHandler,
)
from salesledger.application.retry import RetryPolicy, run_with_retry
from salesledger.domain.exceptions import DomainException, OrderNotFoundError
from salesledger.domain.model.order import Order, OrderStatus
from salesledger.domain.repository.unit_of_work import UnitOfWork
from salesledger.domain.service.stock_ledger_service import StockLedgerService

logger = structlog.get_logger(__name__)

SYSTEM_ACTOR = "system"
EXPIRY_NOTE = "Reservation expired"


@dataclass
class ExpirySweepResult:
    cancelled: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failures: dict[int, str] = field(default_factory=dict)


class ExpireStaleReservationsHandler:

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

    def handle(self, as_of: datetime | None = None) -> ExpirySweepResult:
        as_of = as_of or datetime.now(timezone.utc)
        with self._uow as uow:
            stale = [c for c in uow.reservations.list_active() if c.is_expired(as_of)]
        order_ids = sorted({claim.order_id for claim in stale})

        result = ExpirySweepResult()
        for order_id in order_ids:
            try:
                order = run_with_retry(
                    functools.partial(self._expire, order_id, as_of), self._retry_policy
                )
            except DomainException as exc:
                logger.warning(
                    "Reservation expiry failed",
                    order_id=order_id,
                    code=exc.code,
                    error=exc.message,
                )
                result.failures[order_id] = f"[{exc.code}] {exc.message}"
                continue

            if order is None:
                result.skipped.append(order_id)
                continue
            result.cancelled.append(order_id)
            if self._notifier is not None:
                notify_safely(
                    self._notifier.order_status_changed,
                    order.id,
                    order.order_number,
                    order.status.value,
                )
            self._metrics.refresh_quietly(order.customer_id)

        logger.info(
            "Reservation sweep finished",
            as_of=as_of.isoformat(),
            stale_claims=len(stale),
            cancelled=len(result.cancelled),
            skipped=len(result.skipped),
            failed=len(result.failures),
        )
        return result

    def _expire(self, order_id: int, as_of: datetime) -> Order | None:
        """Cancel one PENDING order whose claims went stale; None if skipped."""
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            if order.status is not OrderStatus.PENDING:
                return None
            order.transition_to(OrderStatus.CANCELLED, SYSTEM_ACTOR, EXPIRY_NOTE, as_of)
            ledger = StockLedgerService(uow)
            ledger.expire_for_order(order, as_of)
            ledger.uncount_sales_for_order(order)
            uow.orders.save(order)
            uow.commit()
        return order
