"""Document-store implementation of ProductRepository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from salesledger.domain.model.product import Product
from salesledger.domain.repository.product_repository import ProductRepository
from salesledger.infrastructure.persistence._codec import (
    dump_dt,
    dump_money,
    load_dt,
    load_money,
)

if TYPE_CHECKING:
    from salesledger.infrastructure.persistence.unit_of_work import Session

COLLECTION = "products"


class DocumentProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ProductRepository interface ------------------------------------------

    def next_id(self) -> str:
        return str(self._session.next_sequence(COLLECTION))

    def get_by_id(self, product_id: str) -> Product | None:
        return self._session.load(COLLECTION, product_id, self._to_domain)

    def get_by_name(self, name: str) -> Product | None:
        for product in self.list_all():
            if product.name.lower() == name.lower():
                return product
        return None

    def list_all(self) -> list[Product]:
        products = self._session.load_all(COLLECTION, lambda raw: raw["id"], self._to_domain)
        return sorted(products, key=lambda p: (len(p.id), p.id))

    def save(self, product: Product) -> None:
        self._session.stage(COLLECTION, product.id, product, self._to_raw)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "sku": product.sku,
            "price": dump_money(product.price),
            "inventory": {
                "quantity": product.quantity,
                "reserved_quantity": product.reserved_quantity,
                # Derived values are stored for readers of the raw file only.
                "available_quantity": product.available_quantity,
                "stock_status": product.stock_status.value,
                "low_stock_threshold": product.low_stock_threshold,
                "track_inventory": product.track_inventory,
                "allow_backorder": product.allow_backorder,
                "last_restocked": dump_dt(product.last_restocked),
            },
            "sales_count": product.sales_count,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        inventory = raw.get("inventory", {})
        return Product(
            id=raw["id"],
            name=raw["name"],
            sku=raw.get("sku", ""),
            price=load_money(raw["price"]),
            quantity=inventory.get("quantity", 0),
            reserved_quantity=inventory.get("reserved_quantity", 0),
            low_stock_threshold=inventory.get("low_stock_threshold", 5),
            track_inventory=inventory.get("track_inventory", True),
            allow_backorder=inventory.get("allow_backorder", False),
            last_restocked=load_dt(inventory.get("last_restocked")),
            sales_count=raw.get("sales_count", 0),
        )
