"""Customer aggregate.

Only the parts the order engine depends on: purchase eligibility, the
loyalty program, and the denormalized order metrics.  Metrics are never a
source of truth — ``CustomerMetricsCalculator`` rebuilds them from the
customer's orders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from salesledger.domain.exceptions import ValidationError
from salesledger.domain.model.value_objects import Money


class CustomerStatus(Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    BLOCKED = "BLOCKED"
    VIP = "VIP"


class LoyaltyTier(Enum):
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"


# Highest threshold first.
TIER_THRESHOLDS = (
    (10000, LoyaltyTier.PLATINUM),
    (5000, LoyaltyTier.GOLD),
    (2000, LoyaltyTier.SILVER),
)

SEGMENT_THRESHOLDS = (
    (Decimal("10000"), "high-value"),
    (Decimal("5000"), "medium-value"),
)


@dataclass
class LoyaltyProgram:
    points: int = 0
    tier: LoyaltyTier = LoyaltyTier.BRONZE
    joined_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def add_points(self, points: int) -> None:
        if points < 0:
            raise ValidationError("Loyalty points cannot be negative")
        self.points += points
        self.tier = tier_for(self.points)


@dataclass
class CustomerMetrics:
    total_orders: int = 0
    total_spent: Money = field(default_factory=Money.zero)
    average_order_value: Money = field(default_factory=Money.zero)
    cancelled_orders: int = 0
    returned_orders: int = 0
    first_order_date: datetime | None = None
    last_order_date: datetime | None = None


@dataclass
class Customer:
    id: str
    first_name: str
    last_name: str
    email: str = ""
    phone: str = ""
    status: CustomerStatus = CustomerStatus.ACTIVE
    is_guest: bool = False
    source: str = ""
    loyalty: LoyaltyProgram | None = None
    metrics: CustomerMetrics = field(default_factory=CustomerMetrics)
    segment: str = "standard"
    version: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def can_purchase(self) -> bool:
        return self.status in (CustomerStatus.ACTIVE, CustomerStatus.VIP)

    def add_loyalty_points(self, points: int) -> None:
        """Credit points, enrolling the customer on first use."""
        if self.loyalty is None:
            self.loyalty = LoyaltyProgram()
        self.loyalty.add_points(points)

    def apply_metrics(self, metrics: CustomerMetrics) -> None:
        """Overwrite the stored aggregate and re-derive the spend segment."""
        self.metrics = metrics
        self.segment = "standard"
        for threshold, segment in SEGMENT_THRESHOLDS:
            if metrics.total_spent.amount >= threshold:
                self.segment = segment
                break


def tier_for(points: int) -> LoyaltyTier:
    for threshold, tier in TIER_THRESHOLDS:
        if points >= threshold:
            return tier
    return LoyaltyTier.BRONZE
