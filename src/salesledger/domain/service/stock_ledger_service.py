"""Domain service: Stock Ledger.

The only component allowed to mutate a product's stock counters on behalf
of an order.  It always works inside a unit of work: the mutations below
are staged on the loaded aggregates and reach the store only when the
caller commits, so a concurrent change to any touched product aborts the
whole commit.

Multi-item operations are all-or-nothing.  If item N fails, the effects
already applied to items 1..N-1 are reversed before the error propagates,
so the staged state is clean even if the caller kept using the unit of
work.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from salesledger.domain.exceptions import ProductNotFoundError, ValidationError
from salesledger.domain.model.order import Order
from salesledger.domain.model.product import Product, StockOperation
from salesledger.domain.model.reservation import (
    Reservation,
    ReservationStatus,
    reservation_id_for,
)
from salesledger.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class StockLedgerService:

    def __init__(self, uow: UnitOfWork) -> None:
        if uow is None:
            raise ValidationError("Stock ledger requires a unit of work")
        self._uow = uow

    # --- Single-product operations --------------------------------------------

    def reserve_stock(self, product_id: str, qty: int) -> Product:
        product = self.get_product(product_id)
        product.reserve(qty)
        self._staged(product, "reserve", qty)
        return product

    def release_reserved_stock(self, product_id: str, qty: int) -> Product:
        product = self.get_product(product_id)
        product.release_reserved(qty)
        self._staged(product, "release", qty)
        return product

    def convert_reserved_to_sold(self, product_id: str, qty: int) -> Product:
        product = self.get_product(product_id)
        product.convert_reserved_to_sold(qty)
        self._staged(product, "convert", qty)
        return product

    def adjust_stock(
        self,
        product_id: str,
        qty: int,
        operation: StockOperation,
        at: datetime | None = None,
    ) -> Product:
        product = self.get_product(product_id)
        product.adjust_stock(qty, operation, at)
        self._staged(product, f"adjust_{operation.value.lower()}", qty)
        return product

    def increment_sales_count(self, product_id: str, qty: int) -> Product:
        product = self.get_product(product_id)
        product.increment_sales_count(qty)
        self._uow.products.save(product)
        return product

    def decrement_sales_count(self, product_id: str, qty: int) -> Product:
        product = self.get_product(product_id)
        product.decrement_sales_count(qty)
        self._uow.products.save(product)
        return product

    # --- Order-level operations -----------------------------------------------

    def reserve_for_order(
        self,
        order: Order,
        expires_at: datetime | None = None,
        at: datetime | None = None,
    ) -> list[Reservation]:
        """Reserve every line of a saved order and record one claim per product.

        Untracked products are not reserved.  On any failure the
        reservations already made for this order are released and the
        error is re-raised.
        """
        if order.id is None:
            raise ValidationError("Order must be saved before reserving stock")
        at = at or datetime.now(timezone.utc)

        done: list[tuple[str, int]] = []
        try:
            for product_id, qty in order.quantities_by_product.items():
                product = self.get_product(product_id)
                if not product.track_inventory:
                    continue
                self.reserve_stock(product_id, qty)
                done.append((product_id, qty))
        except Exception:
            for product_id, qty in reversed(done):
                self.release_reserved_stock(product_id, qty)
            logger.warning(
                "Order reservation rolled back",
                order_id=order.id,
                released=len(done),
            )
            raise

        claims = []
        for product_id, qty in done:
            claim = Reservation(
                id=reservation_id_for(order.id, product_id),
                order_id=order.id,
                product_id=product_id,
                quantity=qty,
                created_at=at,
                expires_at=expires_at,
            )
            self._uow.reservations.save(claim)
            claims.append(claim)
        return claims

    def release_for_order(self, order: Order, at: datetime | None = None) -> int:
        """Release every active claim of the order.  Returns units released."""
        return self._retire_claims(order, ReservationStatus.RELEASED, at)

    def expire_for_order(self, order: Order, at: datetime | None = None) -> int:
        """Release every active claim of the order, marking them expired."""
        return self._retire_claims(order, ReservationStatus.EXPIRED, at)

    def convert_for_order(self, order: Order, at: datetime | None = None) -> int:
        """Retire every active claim as sold and count the sale."""
        converted = self._retire_claims(order, ReservationStatus.CONVERTED, at)
        if not order.sales_counted:
            for product_id, qty in order.quantities_by_product.items():
                self.increment_sales_count(product_id, qty)
            order.sales_counted = True
        return converted

    def uncount_sales_for_order(self, order: Order) -> None:
        """Take back a sale that was counted for this order (floored at 0)."""
        if not order.sales_counted:
            return
        for product_id, qty in order.quantities_by_product.items():
            self.decrement_sales_count(product_id, qty)
        order.sales_counted = False

    def pin_reservations(self, order: Order) -> None:
        """Clear the expiry of the order's active claims."""
        for claim in self._uow.reservations.list_for_order(order.id):
            if claim.is_active and claim.expires_at is not None:
                claim.expires_at = None
                self._uow.reservations.save(claim)

    def sell_immediately(
        self,
        quantities: dict[str, int],
        at: datetime | None = None,
    ) -> None:
        """Decrement stock and count the sale right away (offline path).

        No reservation is made.  On any failure the decrements and sales
        counts already applied are reversed and the error is re-raised.
        """
        done: list[tuple[Product, int, int]] = []
        try:
            for product_id, qty in quantities.items():
                before = self.get_product(product_id).quantity
                product = self.adjust_stock(product_id, qty, StockOperation.SUBTRACT, at)
                product.increment_sales_count(qty)
                done.append((product, qty, before))
        except Exception:
            for product, qty, before in reversed(done):
                product.quantity = before
                product.decrement_sales_count(qty)
            logger.warning("Immediate sale rolled back", reversed_items=len(done))
            raise

    # --- Lookups and helpers --------------------------------------------------

    def _retire_claims(
        self,
        order: Order,
        outcome: ReservationStatus,
        at: datetime | None,
    ) -> int:
        total = 0
        for claim in self._uow.reservations.list_for_order(order.id):
            if not claim.is_active:
                continue
            if outcome is ReservationStatus.CONVERTED:
                self.convert_reserved_to_sold(claim.product_id, claim.quantity)
                claim.convert(at)
            elif outcome is ReservationStatus.EXPIRED:
                self.release_reserved_stock(claim.product_id, claim.quantity)
                claim.expire(at)
            else:
                self.release_reserved_stock(claim.product_id, claim.quantity)
                claim.release(at)
            self._uow.reservations.save(claim)
            total += claim.quantity
        return total

    def get_product(self, product_id: str) -> Product:
        product = self._uow.products.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def _staged(self, product: Product, action: str, qty: int) -> None:
        self._uow.products.save(product)
        logger.debug(
            "Stock ledger updated",
            action=action,
            product_id=product.id,
            qty=qty,
            quantity=product.quantity,
            reserved=product.reserved_quantity,
            available=product.available_quantity,
            stock_status=product.stock_status.value,
        )
