"""Notifier contract for order events.

Notifications are fire-and-forget: they are sent after the commit and a
failing notifier never undoes the change that triggered it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

logger = structlog.get_logger(__name__)


class Notifier(ABC):

    @abstractmethod
    def order_placed(self, order_id: int, order_number: str, customer_id: str) -> None:
        """An order was created (online or offline)."""

    @abstractmethod
    def order_status_changed(self, order_id: int, order_number: str, status: str) -> None:
        """An order moved to a new status."""

    @abstractmethod
    def loyalty_points_earned(self, customer_id: str, points: int, tier: str) -> None:
        """A customer was credited loyalty points."""


def notify_safely(send, *args) -> None:
    """Invoke a notifier method, logging instead of raising on failure."""
    try:
        send(*args)
    except Exception:
        logger.exception("Notification failed", notification=getattr(send, "__name__", "?"))
