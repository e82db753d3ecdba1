"""Application service: Refresh Customer Metrics use case.

Replays the customer's order history and overwrites the stored
aggregate.  Callers run it after their own commit; a failure here is
logged and never undoes the order change that triggered it.
"""

from __future__ import annotations

import structlog

from salesledger.application.dto import CustomerDTO, customer_to_dto
from salesledger.application.retry import RetryPolicy, run_with_retry
from salesledger.domain.exceptions import CustomerNotFoundError, DomainException
from salesledger.domain.repository.unit_of_work import UnitOfWork
from salesledger.domain.service.customer_metrics import CustomerMetricsCalculator

logger = structlog.get_logger(__name__)


class RefreshCustomerMetricsHandler:

    def __init__(self, uow: UnitOfWork, retry_policy: RetryPolicy | None = None) -> None:
        self._uow = uow
        self._retry_policy = retry_policy or RetryPolicy()
        self._calculator = CustomerMetricsCalculator()

    def handle(self, customer_id: str) -> CustomerDTO:
        return run_with_retry(lambda: self._refresh(customer_id), self._retry_policy)

    def refresh_quietly(self, customer_id: str) -> None:
        """Refresh, logging instead of raising on failure."""
        try:
            self.handle(customer_id)
        except DomainException as exc:
            logger.warning(
                "Customer metrics refresh failed",
                customer_id=customer_id,
                code=exc.code,
                error=exc.message,
            )

    def _refresh(self, customer_id: str) -> CustomerDTO:
        with self._uow as uow:
            customer = uow.customers.get_by_id(customer_id)
            if customer is None:
                raise CustomerNotFoundError(customer_id)
            metrics = self._calculator.calculate(uow.orders.list_for_customer(customer_id))
            customer.apply_metrics(metrics)
            uow.customers.save(customer)
            uow.commit()

        logger.debug(
            "Customer metrics refreshed",
            customer_id=customer_id,
            total_orders=metrics.total_orders,
            total_spent=str(metrics.total_spent.amount),
            segment=customer.segment,
        )
        return customer_to_dto(customer)
