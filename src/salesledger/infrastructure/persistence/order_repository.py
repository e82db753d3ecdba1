"""Document-store implementation of OrderRepository."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import TYPE_CHECKING

from salesledger.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    OrderType,
    PaymentMethod,
    PaymentStatus,
    ShippingAddress,
    TimelineEntry,
    order_number_for,
)
from salesledger.domain.model.value_objects import Quantity
from salesledger.domain.repository.order_repository import OrderRepository
from salesledger.infrastructure.persistence._codec import (
    dump_dt,
    dump_money,
    load_dt,
    load_money,
)

if TYPE_CHECKING:
    from salesledger.infrastructure.persistence.unit_of_work import Session

COLLECTION = "orders"


class DocumentOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        return self._session.load(COLLECTION, str(order_id), self._to_domain)

    def list_for_customer(self, customer_id: str) -> list[Order]:
        orders = self._session.load_all(
            COLLECTION, lambda raw: str(raw["id"]), self._to_domain
        )
        mine = [o for o in orders if o.customer_id == customer_id]
        return sorted(mine, key=lambda o: (o.created_at, o.id))

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self._session.next_sequence(COLLECTION)
            day = order.created_at.strftime("%Y%m%d")
            order.order_number = order_number_for(
                order.created_at, self._session.next_sequence(f"{COLLECTION}:{day}")
            )
        self._session.stage(COLLECTION, str(order.id), order, self._to_raw)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "customer_id": order.customer_id,
            "customer_name": order.customer_name,
            "type": order.type.value,
            "status": order.status.value,
            "payment_status": order.payment_status.value,
            "payment_method": order.payment_method.value,
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "sku": item.sku,
                    "quantity": item.quantity.value,
                    "unit_price": dump_money(item.unit_price),
                    "discount": dump_money(item.discount),
                    "tax": dump_money(item.tax),
                }
                for item in order.items
            ],
            "shipping_address": (
                asdict(order.shipping_address) if order.shipping_address else None
            ),
            "discount": dump_money(order.discount),
            "tax_amount": dump_money(order.tax_amount),
            "shipping_cost": dump_money(order.shipping_cost),
            "total_amount": dump_money(order.total_amount),
            "timeline": [
                {
                    "status": entry.status.value,
                    "timestamp": entry.timestamp.isoformat(),
                    "actor": entry.actor,
                    "note": entry.note,
                }
                for entry in order.timeline
            ],
            "sales_counted": order.sales_counted,
            "created_at": order.created_at.isoformat(),
            "confirmed_at": dump_dt(order.confirmed_at),
            "shipped_at": dump_dt(order.shipped_at),
            "delivered_at": dump_dt(order.delivered_at),
            "cancelled_at": dump_dt(order.cancelled_at),
            "paid_at": dump_dt(order.paid_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderLineItem(
                product_id=i["product_id"],
                product_name=i["product_name"],
                sku=i.get("sku", ""),
                quantity=Quantity(i["quantity"]),
                unit_price=load_money(i["unit_price"]),
                discount=load_money(i.get("discount")),
                tax=load_money(i.get("tax")),
            )
            for i in raw["items"]
        ]
        address = raw.get("shipping_address")
        return Order(
            id=raw["id"],
            order_number=raw.get("order_number", ""),
            customer_id=raw["customer_id"],
            customer_name=raw.get("customer_name", ""),
            items=items,
            type=OrderType(raw.get("type", OrderType.ONLINE.value)),
            status=OrderStatus(raw["status"]),
            payment_status=PaymentStatus(raw["payment_status"]),
            payment_method=PaymentMethod(raw["payment_method"]),
            shipping_address=ShippingAddress(**address) if address else None,
            discount=load_money(raw.get("discount")),
            tax_amount=load_money(raw.get("tax_amount")),
            shipping_cost=load_money(raw.get("shipping_cost")),
            timeline=[
                TimelineEntry(
                    status=OrderStatus(e["status"]),
                    timestamp=datetime.fromisoformat(e["timestamp"]),
                    actor=e["actor"],
                    note=e.get("note", ""),
                )
                for e in raw.get("timeline", [])
            ],
            sales_counted=raw.get("sales_counted", False),
            created_at=datetime.fromisoformat(raw["created_at"]),
            confirmed_at=load_dt(raw.get("confirmed_at")),
            shipped_at=load_dt(raw.get("shipped_at")),
            delivered_at=load_dt(raw.get("delivered_at")),
            cancelled_at=load_dt(raw.get("cancelled_at")),
            paid_at=load_dt(raw.get("paid_at")),
        )
