"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from salesledger.application.dto import InventoryLineDTO, inventory_line
from salesledger.domain.repository.unit_of_work import UnitOfWork


class ShowInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[InventoryLineDTO]:
        with self._uow as uow:
            products = uow.products.list_all()
        return [inventory_line(p) for p in products]
