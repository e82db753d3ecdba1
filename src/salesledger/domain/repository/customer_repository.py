"""Abstract repository for Customer aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from salesledger.domain.model.customer import Customer


class CustomerRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate the next unique customer ID."""

    @abstractmethod
    def get_by_id(self, customer_id: str) -> Customer | None:
        """Return a customer by ID, or None."""

    @abstractmethod
    def find_by_email(self, email: str) -> Customer | None:
        """Return the customer with this email (case-insensitive), or None."""

    @abstractmethod
    def find_by_phone(self, phone: str) -> Customer | None:
        """Return the customer with this phone number, or None."""

    @abstractmethod
    def save(self, customer: Customer) -> None:
        """Stage a new or updated customer."""
