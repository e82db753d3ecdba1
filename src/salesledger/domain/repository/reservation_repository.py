"""Abstract repository for Reservation claims."""

from __future__ import annotations

from abc import ABC, abstractmethod

from salesledger.domain.model.reservation import Reservation


class ReservationRepository(ABC):

    @abstractmethod
    def list_for_order(self, order_id: int) -> list[Reservation]:
        """Return every claim (any status) held by an order."""

    @abstractmethod
    def list_active(self) -> list[Reservation]:
        """Return every claim still in ACTIVE status."""

    @abstractmethod
    def save(self, reservation: Reservation) -> None:
        """Stage a new or updated claim."""
