"""Application service: Add Customer use case."""

from __future__ import annotations

import structlog

from salesledger.application.dto import CustomerDTO, customer_to_dto
from salesledger.domain.exceptions import ValidationError
from salesledger.domain.model.customer import Customer, CustomerStatus
from salesledger.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class AddCustomerHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        first_name: str,
        last_name: str,
        email: str = "",
        phone: str = "",
        status: str = CustomerStatus.ACTIVE.value,
    ) -> CustomerDTO:
        if not first_name or not first_name.strip():
            raise ValidationError("First name is required")
        try:
            customer_status = CustomerStatus(status.strip().upper())
        except ValueError as exc:
            raise ValidationError(f"Unknown customer status: {status!r}") from exc

        with self._uow as uow:
            if email and uow.customers.find_by_email(email) is not None:
                raise ValidationError(f"A customer with email '{email}' already exists")
            customer = Customer(
                id=uow.customers.next_id(),
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                email=email.strip().lower(),
                phone=phone.strip(),
                status=customer_status,
            )
            uow.customers.save(customer)
            uow.commit()

        logger.info("Customer added", customer_id=customer.id, status=customer.status.value)
        return customer_to_dto(customer)
