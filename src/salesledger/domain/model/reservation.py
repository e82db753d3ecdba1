"""Reservation — an addressable claim an order holds on a product's stock.

The product only keeps the aggregate ``reserved_quantity``; the claim
records which order reserved how much, so releases and conversions act on
a specific claim and a second retirement of the same claim is caught.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from salesledger.domain.exceptions import ReservationStateError


class ReservationStatus(Enum):
    ACTIVE = "ACTIVE"
    RELEASED = "RELEASED"
    CONVERTED = "CONVERTED"
    EXPIRED = "EXPIRED"


@dataclass
class Reservation:
    id: str
    order_id: int
    product_id: str
    quantity: int
    status: ReservationStatus = ReservationStatus.ACTIVE
    created_at: datetime | None = None
    expires_at: datetime | None = None
    retired_at: datetime | None = None
    version: int = 0

    @property
    def is_active(self) -> bool:
        return self.status is ReservationStatus.ACTIVE

    def is_expired(self, as_of: datetime) -> bool:
        return self.is_active and self.expires_at is not None and self.expires_at <= as_of

    def release(self, at: datetime | None = None) -> None:
        self._retire(ReservationStatus.RELEASED, at)

    def convert(self, at: datetime | None = None) -> None:
        self._retire(ReservationStatus.CONVERTED, at)

    def expire(self, at: datetime | None = None) -> None:
        self._retire(ReservationStatus.EXPIRED, at)

    def _retire(self, status: ReservationStatus, at: datetime | None) -> None:
        if not self.is_active:
            raise ReservationStateError(
                f"Reservation {self.id} for order #{self.order_id} is already "
                f"{self.status.value}"
            )
        self.status = status
        self.retired_at = at or datetime.now(timezone.utc)


def reservation_id_for(order_id: int, product_id: str) -> str:
    return f"{order_id}:{product_id}"
