"""Product aggregate and its stock ledger.

The product owns two counters: ``quantity`` (units physically owned) and
``reserved_quantity`` (units promised to open orders).  Everything else
about stock is derived from them on read, so no mutation path can leave
``available_quantity`` or ``stock_status`` stale.

The ledger knows nothing about orders.  Callers that act on behalf of an
order go through ``StockLedgerService``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from salesledger.domain.exceptions import InsufficientStockError, ValidationError
from salesledger.domain.model.value_objects import Money


class StockStatus(Enum):
    IN_STOCK = "IN_STOCK"
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    PRE_ORDER = "PRE_ORDER"  # accepted on stored records, never derived


class StockOperation(Enum):
    ADD = "ADD"
    SUBTRACT = "SUBTRACT"


@dataclass
class Product:
    """A product in the catalog together with its inventory counters.

    Invariants:
    - ``quantity >= reserved_quantity >= 0`` for tracked products
    - ``sales_count >= 0``
    """

    id: str
    name: str
    price: Money
    sku: str = ""
    quantity: int = 0
    reserved_quantity: int = 0
    low_stock_threshold: int = 5
    track_inventory: bool = True
    allow_backorder: bool = False
    sales_count: int = 0
    last_restocked: datetime | None = None
    version: int = 0

    # --- Derived --------------------------------------------------------------

    @property
    def available_quantity(self) -> int:
        return self.quantity - self.reserved_quantity

    @property
    def stock_status(self) -> StockStatus:
        if not self.track_inventory:
            return StockStatus.IN_STOCK
        available = self.available_quantity
        if available <= 0:
            return StockStatus.OUT_OF_STOCK
        if available <= self.low_stock_threshold:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK

    # --- Ledger mutators ------------------------------------------------------

    def reserve(self, qty: int) -> None:
        """Claim ``qty`` units for a pending order.

        Raises InsufficientStockError unless the stock is available or the
        product allows backorders.
        """
        _require_positive(qty, "Reservation")
        if self.available_quantity < qty and not self.allow_backorder:
            raise InsufficientStockError(self.name, qty, self.available_quantity)
        self.reserved_quantity += qty

    def release_reserved(self, qty: int) -> None:
        """Give back reserved units.  Clamps at zero instead of failing."""
        _require_positive(qty, "Release")
        self.reserved_quantity = max(0, self.reserved_quantity - qty)

    def convert_reserved_to_sold(self, qty: int) -> None:
        """Retire a reservation on fulfilment.

        ``quantity`` is left alone: the physical unit is considered
        consumed when the order ships.
        """
        _require_positive(qty, "Conversion")
        self.reserved_quantity = max(0, self.reserved_quantity - qty)

    def adjust_stock(
        self,
        qty: int,
        operation: StockOperation,
        at: datetime | None = None,
    ) -> None:
        """Restock or correct ``quantity`` directly, ignoring reservations.

        A subtraction on a tracked product may not eat into reserved units.
        Untracked products clamp at zero.
        """
        _require_positive(qty, "Adjustment")
        if operation is StockOperation.ADD:
            self.quantity += qty
            self.last_restocked = at or datetime.now(timezone.utc)
            return
        if self.track_inventory and qty > self.available_quantity:
            raise InsufficientStockError(self.name, qty, self.available_quantity)
        self.quantity = max(0, self.quantity - qty)

    def increment_sales_count(self, qty: int) -> None:
        _require_positive(qty, "Sales count increment")
        self.sales_count += qty

    def decrement_sales_count(self, qty: int) -> None:
        _require_positive(qty, "Sales count decrement")
        self.sales_count = max(0, self.sales_count - qty)


def _require_positive(qty: int, what: str) -> None:
    if isinstance(qty, bool) or not isinstance(qty, int):
        raise ValidationError(f"{what} quantity must be an integer")
    if qty <= 0:
        raise ValidationError(f"{what} quantity must be positive")
