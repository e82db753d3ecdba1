"""Document-store implementation of ReservationRepository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from salesledger.domain.model.reservation import Reservation, ReservationStatus
from salesledger.domain.repository.reservation_repository import (
    ReservationRepository,
)
from salesledger.infrastructure.persistence._codec import dump_dt, load_dt

if TYPE_CHECKING:
    from salesledger.infrastructure.persistence.unit_of_work import Session

COLLECTION = "reservations"


class DocumentReservationRepository(ReservationRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_for_order(self, order_id: int) -> list[Reservation]:
        return [r for r in self._all() if r.order_id == order_id]

    def list_active(self) -> list[Reservation]:
        return [r for r in self._all() if r.is_active]

    def save(self, reservation: Reservation) -> None:
        self._session.stage(COLLECTION, reservation.id, reservation, self._to_raw)

    def _all(self) -> list[Reservation]:
        claims = self._session.load_all(COLLECTION, lambda raw: raw["id"], self._to_domain)
        return sorted(claims, key=lambda r: (r.order_id, r.product_id))

    @staticmethod
    def _to_raw(reservation: Reservation) -> dict:
        return {
            "id": reservation.id,
            "order_id": reservation.order_id,
            "product_id": reservation.product_id,
            "quantity": reservation.quantity,
            "status": reservation.status.value,
            "created_at": dump_dt(reservation.created_at),
            "expires_at": dump_dt(reservation.expires_at),
            "retired_at": dump_dt(reservation.retired_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Reservation:
        return Reservation(
            id=raw["id"],
            order_id=raw["order_id"],
            product_id=raw["product_id"],
            quantity=raw["quantity"],
            status=ReservationStatus(raw["status"]),
            created_at=load_dt(raw.get("created_at")),
            expires_at=load_dt(raw.get("expires_at")),
            retired_at=load_dt(raw.get("retired_at")),
        )
