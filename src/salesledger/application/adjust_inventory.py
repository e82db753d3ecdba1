"""Application services: Adjust Inventory and Bulk Adjust Inventory.

Manual stock corrections (restocking, shrinkage).  They touch
``quantity`` only; reservations are left alone.  Each adjustment is its
own unit of work, so in a bulk run one failing item never affects the
others.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from salesledger.application.dto import (
    BulkAdjustResult,
    InventoryAdjustment,
    InventoryChange,
)
from salesledger.application.retry import RetryPolicy, run_with_retry
from salesledger.domain.exceptions import DomainException, ValidationError
from salesledger.domain.model.product import StockOperation
from salesledger.domain.repository.unit_of_work import UnitOfWork
from salesledger.domain.service.stock_ledger_service import StockLedgerService

logger = structlog.get_logger(__name__)


class AdjustInventoryHandler:

    def __init__(self, uow: UnitOfWork, retry_policy: RetryPolicy | None = None) -> None:
        self._uow = uow
        self._retry_policy = retry_policy or RetryPolicy()

    def handle(
        self,
        product_id: str,
        quantity: int,
        operation: StockOperation | str,
        reason: str = "",
        actor: str = "system",
        at: datetime | None = None,
    ) -> InventoryChange:
        op = parse_operation(operation)
        at = at or datetime.now(timezone.utc)

        def adjust() -> InventoryChange:
            with self._uow as uow:
                ledger = StockLedgerService(uow)
                before = ledger.get_product(product_id).available_quantity
                product = ledger.adjust_stock(product_id, quantity, op, at)
                uow.commit()
            return InventoryChange(
                product_id=product.id,
                product_name=product.name,
                previous_available=before,
                new_available=product.available_quantity,
                change=product.available_quantity - before,
                operation=op.value,
                reason=reason,
                actor=actor,
                timestamp=at,
            )

        change = run_with_retry(adjust, self._retry_policy)
        logger.info(
            "Inventory adjusted",
            product_id=change.product_id,
            operation=change.operation,
            qty=quantity,
            previous_available=change.previous_available,
            new_available=change.new_available,
            reason=reason,
            actor=actor,
        )
        return change


class BulkAdjustInventoryHandler:

    def __init__(self, uow: UnitOfWork, retry_policy: RetryPolicy | None = None) -> None:
        self._single = AdjustInventoryHandler(uow, retry_policy)

    def handle(
        self,
        adjustments: list[InventoryAdjustment],
        actor: str = "system",
        at: datetime | None = None,
    ) -> list[BulkAdjustResult]:
        """Apply each adjustment independently; failures are reported, not raised."""
        results: list[BulkAdjustResult] = []
        for adjustment in adjustments:
            try:
                change = self._single.handle(
                    adjustment.product_id,
                    adjustment.quantity,
                    adjustment.operation,
                    adjustment.reason,
                    actor,
                    at,
                )
            except DomainException as exc:
                logger.warning(
                    "Bulk adjustment item failed",
                    product_id=adjustment.product_id,
                    code=exc.code,
                    error=exc.message,
                )
                results.append(
                    BulkAdjustResult(
                        product_id=adjustment.product_id,
                        success=False,
                        error_code=exc.code,
                        error=exc.message,
                    )
                )
                continue
            results.append(
                BulkAdjustResult(product_id=adjustment.product_id, success=True, change=change)
            )

        failed = sum(1 for r in results if not r.success)
        logger.info("Bulk adjustment finished", total=len(results), failed=failed)
        return results


def parse_operation(value: StockOperation | str) -> StockOperation:
    if isinstance(value, StockOperation):
        return value
    try:
        return StockOperation(value.strip().upper())
    except ValueError as exc:
        raise ValidationError(f"Unknown stock operation: {value!r}") from exc
