"""Application service: Record Payment use case."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from salesledger.application.dto import OrderDTO, order_to_dto
from salesledger.application.retry import RetryPolicy, run_with_retry
from salesledger.domain.exceptions import OrderNotFoundError
from salesledger.domain.model.order import Order
from salesledger.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class RecordPaymentHandler:

    def __init__(self, uow: UnitOfWork, retry_policy: RetryPolicy | None = None) -> None:
        self._uow = uow
        self._retry_policy = retry_policy or RetryPolicy()

    def handle(self, order_id: int, actor: str, at: datetime | None = None) -> OrderDTO:
        """Mark an order's payment as received.

        Required before a delivered online order can be refunded.
        """
        at = at or datetime.now(timezone.utc)

        def pay() -> Order:
            with self._uow as uow:
                order = uow.orders.get_by_id(order_id)
                if order is None:
                    raise OrderNotFoundError(order_id)
                order.mark_paid(at)
                uow.orders.save(order)
                uow.commit()
                return order

        order = run_with_retry(pay, self._retry_policy)
        logger.info("Payment recorded", order_id=order.id, actor=actor)
        return order_to_dto(order)
