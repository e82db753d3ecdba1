"""Application service: Record Offline Sale use case.

A walk-in sale skips the reservation phase: stock is decremented and the
sale counted immediately, and the order is stored already DELIVERED and
PAID.  Customer resolution, stock decrements and the order insert share
one unit of work.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from salesledger.application.dto import (
    CustomerRef,
    OrderDTO,
    OrderItemSpec,
    order_to_dto,
)
from salesledger.application.line_items import build_line_items
from salesledger.application.notifications import Notifier, notify_safely
from salesledger.application.refresh_customer_metrics import (
    RefreshCustomerMetricsHandler,
)
from salesledger.application.retry import RetryPolicy, run_with_retry
from salesledger.domain.exceptions import CustomerNotFoundError
from salesledger.domain.model.customer import Customer
from salesledger.domain.model.order import Order, PaymentMethod, ShippingAddress
from salesledger.domain.repository.unit_of_work import UnitOfWork
from salesledger.domain.service.stock_ledger_service import StockLedgerService

logger = structlog.get_logger(__name__)

OFFLINE_SOURCE = "offline_sale"


class RecordOfflineSaleHandler:

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
        customer_ref: CustomerRef,
        item_specs: list[OrderItemSpec],
        payment_method: PaymentMethod,
        actor: str,
        at: datetime | None = None,
    ) -> OrderDTO:
        at = at or datetime.now(timezone.utc)

        def record() -> tuple[Order, bool]:
            with self._uow as uow:
                customer = self._resolve_customer(uow, customer_ref)
                order = Order.record_delivered(
                    customer_id=customer.id,
                    customer_name=customer.full_name,
                    items=build_line_items(uow, item_specs),
                    actor=actor,
                    payment_method=payment_method,
                    shipping_address=ShippingAddress.walk_in(
                        customer.first_name,
                        customer.last_name,
                        customer.email,
                        customer.phone,
                    ),
                    at=at,
                )
                StockLedgerService(uow).sell_immediately(order.quantities_by_product, at)
                uow.orders.save(order)
                uow.commit()
                return order, customer.is_guest

        order, is_guest = run_with_retry(record, self._retry_policy)

        logger.info(
            "Offline sale recorded",
            order_id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            items=order.total_items(),
            total=str(order.total_amount.amount),
            actor=actor,
        )
        if self._notifier is not None:
            notify_safely(
                self._notifier.order_placed, order.id, order.order_number, order.customer_id
            )
        if not is_guest:
            self._metrics.refresh_quietly(order.customer_id)
        return order_to_dto(order)

    @staticmethod
    def _resolve_customer(uow: UnitOfWork, ref: CustomerRef) -> Customer:
        """Find the customer by id, email or phone, or register a new one.

        A walk-in without an email is registered as a guest.
        """
        if ref.customer_id:
            customer = uow.customers.get_by_id(ref.customer_id)
            if customer is None:
                raise CustomerNotFoundError(ref.customer_id)
            return customer

        customer = None
        if ref.email:
            customer = uow.customers.find_by_email(ref.email)
        if customer is None and ref.phone:
            customer = uow.customers.find_by_phone(ref.phone)
        if customer is not None:
            return customer

        customer = Customer(
            id=uow.customers.next_id(),
            first_name=ref.first_name.strip() or "Walk-in",
            last_name=ref.last_name.strip() or "Customer",
            email=ref.email.strip().lower(),
            phone=ref.phone.strip(),
            is_guest=not ref.email,
            source=OFFLINE_SOURCE,
        )
        uow.customers.save(customer)
        logger.debug(
            "Customer registered from offline sale",
            customer_id=customer.id,
            is_guest=customer.is_guest,
        )
        return customer
