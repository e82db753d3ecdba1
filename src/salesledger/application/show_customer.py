"""Application service: Show Customer use case (query)."""

from __future__ import annotations

from salesledger.application.dto import CustomerDTO, customer_to_dto
from salesledger.domain.exceptions import CustomerNotFoundError
from salesledger.domain.repository.unit_of_work import UnitOfWork


class ShowCustomerHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, customer_id: str) -> CustomerDTO:
        with self._uow as uow:
            customer = uow.customers.get_by_id(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer_to_dto(customer)
