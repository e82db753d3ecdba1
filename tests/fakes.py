"""Test doubles and seeding helpers.

Tests run against the real unit of work over ``InMemoryDocumentStore``:
no file I/O, and the same version checks as production.
"""

from __future__ import annotations

from datetime import datetime, timezone

from salesledger.application.notifications import Notifier
from salesledger.application.retry import RetryPolicy
from salesledger.domain.exceptions import ConcurrencyConflictError
from salesledger.domain.model.customer import Customer, CustomerStatus
from salesledger.domain.model.product import Product
from salesledger.domain.model.value_objects import Money
from salesledger.infrastructure.persistence.document_store import (
    InMemoryDocumentStore,
    StagedWrite,
)
from salesledger.infrastructure.persistence.unit_of_work import DocumentUnitOfWork

NOW = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)

# No sleeping between attempts.
FAST_RETRY = RetryPolicy(max_attempts=5, backoff_initial=0, backoff_max=0)


def new_uow(store: InMemoryDocumentStore | None = None) -> DocumentUnitOfWork:
    return DocumentUnitOfWork(store or InMemoryDocumentStore())


def seed_product(
    uow: DocumentUnitOfWork,
    name: str = "Widget",
    price: str = "15.00",
    quantity: int = 10,
    **fields,
) -> Product:
    with uow:
        product = Product(
            id=uow.products.next_id(),
            name=name,
            price=Money.of(price),
            quantity=quantity,
            **fields,
        )
        uow.products.save(product)
        uow.commit()
    return product


def seed_customer(
    uow: DocumentUnitOfWork,
    first_name: str = "Alice",
    last_name: str = "Smith",
    email: str = "alice@example.com",
    status: CustomerStatus = CustomerStatus.ACTIVE,
    **fields,
) -> Customer:
    with uow:
        customer = Customer(
            id=uow.customers.next_id(),
            first_name=first_name,
            last_name=last_name,
            email=email,
            status=status,
            **fields,
        )
        uow.customers.save(customer)
        uow.commit()
    return customer


def load_product(uow: DocumentUnitOfWork, product_id: str) -> Product:
    with uow:
        return uow.products.get_by_id(product_id)


def load_customer(uow: DocumentUnitOfWork, customer_id: str) -> Customer:
    with uow:
        return uow.customers.get_by_id(customer_id)


def load_order(uow: DocumentUnitOfWork, order_id: int):
    with uow:
        return uow.orders.get_by_id(order_id)


def load_claims(uow: DocumentUnitOfWork, order_id: int):
    with uow:
        return uow.reservations.list_for_order(order_id)


class ConflictingStore(InMemoryDocumentStore):
    """Rejects the first ``conflicts`` commits as if another writer won."""

    def __init__(self, conflicts: int = 1, collection: str = "products") -> None:
        super().__init__()
        self.remaining = conflicts
        self.collection = collection
        self.commits = 0

    def commit(self, writes: list[StagedWrite]) -> None:
        self.commits += 1
        if self.remaining > 0 and any(w.collection == self.collection for w in writes):
            self.remaining -= 1
            key = next(w.key for w in writes if w.collection == self.collection)
            raise ConcurrencyConflictError(self.collection, key)
        super().commit(writes)


class RecordingNotifier(Notifier):

    def __init__(self) -> None:
        self.events: list[tuple] = []

    def order_placed(self, order_id, order_number, customer_id) -> None:
        self.events.append(("order_placed", order_id, customer_id))

    def order_status_changed(self, order_id, order_number, status) -> None:
        self.events.append(("order_status_changed", order_id, status))

    def loyalty_points_earned(self, customer_id, points, tier) -> None:
        self.events.append(("loyalty_points_earned", customer_id, points, tier))


class FailingNotifier(Notifier):

    def order_placed(self, order_id, order_number, customer_id) -> None:
        raise RuntimeError("mail server down")

    def order_status_changed(self, order_id, order_number, status) -> None:
        raise RuntimeError("mail server down")

    def loyalty_points_earned(self, customer_id, points, tier) -> None:
        raise RuntimeError("mail server down")


class EditableStore(InMemoryDocumentStore):
    """In-memory store whose records a test can delete behind the app's back."""

    def remove(self, collection: str, key: str) -> None:
        with self._locked():
            data = self._load()
            del data[collection][key]
            self._dump(data)
