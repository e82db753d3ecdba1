"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from salesledger.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_for_customer(self, customer_id: str) -> list[Order]:
        """Return every order placed by a customer, oldest first."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Stage a new or updated order.

        New orders (``id is None``) are assigned an ID and order number
        immediately, before the commit.
        """
