"""Unit of Work — the atomic boundary around every multi-aggregate change.

A use case opens the unit of work, reads and mutates aggregates through
its repositories, and calls ``commit()``.  The commit writes every staged
aggregate or none of them; any record modified by someone else since it
was read aborts the commit with ``ConcurrencyConflictError``.  Leaving the
``with`` block without committing discards everything.

Ledger operations take a unit of work as a required argument, so stock
can never be mutated outside one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from salesledger.domain.repository.customer_repository import CustomerRepository
from salesledger.domain.repository.order_repository import OrderRepository
from salesledger.domain.repository.product_repository import ProductRepository
from salesledger.domain.repository.reservation_repository import (
    ReservationRepository,
)


class UnitOfWork(ABC):

    products: ProductRepository
    orders: OrderRepository
    customers: CustomerRepository
    reservations: ReservationRepository

    def __enter__(self) -> UnitOfWork:
        self._begin()
        return self

    def __exit__(self, *args) -> None:
        self.rollback()

    @abstractmethod
    def _begin(self) -> None:
        """Start a fresh session: empty identity map, nothing staged."""

    @abstractmethod
    def commit(self) -> None:
        """Atomically write every staged aggregate."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard everything staged since the last commit."""
