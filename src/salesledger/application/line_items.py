"""Resolves requested items against the catalog into priced line items."""

from __future__ import annotations

from salesledger.application.dto import OrderItemSpec
from salesledger.domain.exceptions import ProductNotFoundError
from salesledger.domain.model.order import OrderLineItem
from salesledger.domain.model.product import Product
from salesledger.domain.model.value_objects import Money, Quantity
from salesledger.domain.repository.unit_of_work import UnitOfWork


def find_product(uow: UnitOfWork, ref: str) -> Product:
    """Look a product up by id, falling back to its name."""
    product = uow.products.get_by_id(ref) or uow.products.get_by_name(ref)
    if product is None:
        raise ProductNotFoundError(ref)
    return product


def build_line_items(uow: UnitOfWork, specs: list[OrderItemSpec]) -> list[OrderLineItem]:
    line_items: list[OrderLineItem] = []
    for spec in specs:
        product = find_product(uow, spec.product_ref)
        unit_price = product.price
        if spec.unit_price is not None:
            unit_price = Money.of(spec.unit_price, product.price.currency)
        line_items.append(
            OrderLineItem(
                product_id=product.id,
                product_name=product.name,
                sku=product.sku,
                quantity=Quantity(spec.quantity),
                unit_price=unit_price,  # <-- price snapshot
                discount=Money.of(spec.discount, unit_price.currency),
                tax=Money.of(spec.tax, unit_price.currency),
            )
        )
    return line_items
