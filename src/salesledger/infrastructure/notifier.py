"""Notifier that writes order events to the log.

Email and campaign delivery live outside this package; this adapter is
what the CLI wires in.
"""

from __future__ import annotations

import structlog

from salesledger.application.notifications import Notifier

logger = structlog.get_logger(__name__)


class LoggingNotifier(Notifier):

    def order_placed(self, order_id: int, order_number: str, customer_id: str) -> None:
        logger.info(
            "notify.order_placed",
            order_id=order_id,
            order_number=order_number,
            customer_id=customer_id,
        )

    def order_status_changed(self, order_id: int, order_number: str, status: str) -> None:
        logger.info(
            "notify.order_status_changed",
            order_id=order_id,
            order_number=order_number,
            status=status,
        )

    def loyalty_points_earned(self, customer_id: str, points: int, tier: str) -> None:
        logger.info(
            "notify.loyalty_points_earned",
            customer_id=customer_id,
            points=points,
            tier=tier,
        )
