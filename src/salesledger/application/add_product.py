"""Application service: Add Product use case."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from salesledger.domain.exceptions import ValidationError
from salesledger.domain.model.product import Product
from salesledger.domain.model.value_objects import Money
from salesledger.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class AddProductHandler:

    def __init__(self, uow: UnitOfWork, default_low_stock_threshold: int = 5) -> None:
        self._uow = uow
        self._default_threshold = default_low_stock_threshold

    def handle(
        self,
        name: str,
        price: str,
        sku: str = "",
        quantity: int = 0,
        low_stock_threshold: int | None = None,
        track_inventory: bool = True,
        allow_backorder: bool = False,
    ) -> Product:
        """Add a new product to the catalog with its opening stock."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        money = Money.of(price)
        if money.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        if quantity < 0:
            raise ValidationError("Opening quantity cannot be negative")
        threshold = self._default_threshold if low_stock_threshold is None else low_stock_threshold
        if threshold < 0:
            raise ValidationError("Low-stock threshold cannot be negative")

        with self._uow as uow:
            if uow.products.get_by_name(name.strip()) is not None:
                raise ValidationError(f"Product '{name}' already exists")
            product = Product(
                id=uow.products.next_id(),
                name=name.strip(),
                price=money,
                sku=sku.strip(),
                quantity=quantity,
                low_stock_threshold=threshold,
                track_inventory=track_inventory,
                allow_backorder=allow_backorder,
                last_restocked=datetime.now(timezone.utc) if quantity else None,
            )
            uow.products.save(product)
            uow.commit()

        logger.info("Product added", product_id=product.id, name=product.name, qty=quantity)
        return product
