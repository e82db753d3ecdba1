"""Document-store implementation of CustomerRepository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from salesledger.domain.model.customer import (
    Customer,
    CustomerMetrics,
    CustomerStatus,
    LoyaltyProgram,
    LoyaltyTier,
)
from salesledger.domain.repository.customer_repository import CustomerRepository
from salesledger.infrastructure.persistence._codec import (
    dump_dt,
    dump_money,
    load_dt,
    load_money,
)

if TYPE_CHECKING:
    from salesledger.infrastructure.persistence.unit_of_work import Session

COLLECTION = "customers"


class DocumentCustomerRepository(CustomerRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def next_id(self) -> str:
        return f"C{self._session.next_sequence(COLLECTION):04d}"

    def get_by_id(self, customer_id: str) -> Customer | None:
        return self._session.load(COLLECTION, customer_id, self._to_domain)

    def find_by_email(self, email: str) -> Customer | None:
        wanted = email.strip().lower()
        for customer in self._all():
            if customer.email and customer.email.lower() == wanted:
                return customer
        return None

    def find_by_phone(self, phone: str) -> Customer | None:
        wanted = phone.strip()
        for customer in self._all():
            if customer.phone and customer.phone == wanted:
                return customer
        return None

    def save(self, customer: Customer) -> None:
        self._session.stage(COLLECTION, customer.id, customer, self._to_raw)

    def _all(self) -> list[Customer]:
        return self._session.load_all(COLLECTION, lambda raw: raw["id"], self._to_domain)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(customer: Customer) -> dict:
        loyalty = customer.loyalty
        metrics = customer.metrics
        return {
            "id": customer.id,
            "first_name": customer.first_name,
            "last_name": customer.last_name,
            "email": customer.email,
            "phone": customer.phone,
            "status": customer.status.value,
            "is_guest": customer.is_guest,
            "source": customer.source,
            "segment": customer.segment,
            "loyalty": (
                {
                    "points": loyalty.points,
                    "tier": loyalty.tier.value,
                    "joined_at": loyalty.joined_at.isoformat(),
                }
                if loyalty is not None
                else None
            ),
            "metrics": {
                "total_orders": metrics.total_orders,
                "total_spent": dump_money(metrics.total_spent),
                "average_order_value": dump_money(metrics.average_order_value),
                "cancelled_orders": metrics.cancelled_orders,
                "returned_orders": metrics.returned_orders,
                "first_order_date": dump_dt(metrics.first_order_date),
                "last_order_date": dump_dt(metrics.last_order_date),
            },
        }

    @staticmethod
    def _to_domain(raw: dict) -> Customer:
        loyalty_raw = raw.get("loyalty")
        loyalty = None
        if loyalty_raw is not None:
            loyalty = LoyaltyProgram(
                points=loyalty_raw["points"],
                tier=LoyaltyTier(loyalty_raw["tier"]),
                joined_at=load_dt(loyalty_raw["joined_at"]),
            )
        m = raw.get("metrics", {})
        return Customer(
            id=raw["id"],
            first_name=raw["first_name"],
            last_name=raw.get("last_name", ""),
            email=raw.get("email", ""),
            phone=raw.get("phone", ""),
            status=CustomerStatus(raw.get("status", CustomerStatus.ACTIVE.value)),
            is_guest=raw.get("is_guest", False),
            source=raw.get("source", ""),
            segment=raw.get("segment", "standard"),
            loyalty=loyalty,
            metrics=CustomerMetrics(
                total_orders=m.get("total_orders", 0),
                total_spent=load_money(m.get("total_spent")),
                average_order_value=load_money(m.get("average_order_value")),
                cancelled_orders=m.get("cancelled_orders", 0),
                returned_orders=m.get("returned_orders", 0),
                first_order_date=load_dt(m.get("first_order_date")),
                last_order_date=load_dt(m.get("last_order_date")),
            ),
        )
