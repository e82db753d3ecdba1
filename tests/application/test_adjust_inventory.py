"""Integration tests for the AdjustInventory and BulkAdjustInventory use cases."""

import pytest

from salesledger.application.adjust_inventory import (
    AdjustInventoryHandler,
    BulkAdjustInventoryHandler,
)
from salesledger.application.create_order import CreateOrderHandler
from salesledger.application.dto import InventoryAdjustment, OrderItemSpec
from salesledger.domain.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from salesledger.domain.model.product import StockOperation
from tests.fakes import FAST_RETRY, NOW, load_product, new_uow, seed_customer, seed_product


def _setup():
    uow = new_uow()
    seed_product(uow, "Widget", quantity=10)
    seed_product(uow, "Gadget", quantity=2)
    return uow


class TestAdjustInventory:

    def test_add_returns_change_record(self):
        uow = _setup()
        change = AdjustInventoryHandler(uow, FAST_RETRY).handle(
            "1", 5, StockOperation.ADD, "Delivery from supplier", "alice", NOW
        )
        assert change.previous_available == 10
        assert change.new_available == 15
        assert change.change == 5
        assert change.operation == "ADD"
        assert change.actor == "alice"
        assert change.timestamp == NOW
        assert load_product(uow, "1").last_restocked == NOW

    def test_subtract_accepts_operation_name(self):
        uow = _setup()
        change = AdjustInventoryHandler(uow, FAST_RETRY).handle("1", 4, "subtract", "Damaged")
        assert change.change == -4
        assert load_product(uow, "1").quantity == 6

    def test_subtract_cannot_touch_reserved_units(self):
        uow = _setup()
        seed_customer(uow)
        CreateOrderHandler(uow, FAST_RETRY).handle("C0001", [OrderItemSpec("1", 8)], "admin")

        with pytest.raises(InsufficientStockError, match="have 2 available"):
            AdjustInventoryHandler(uow, FAST_RETRY).handle("1", 3, "SUBTRACT")

        p = load_product(uow, "1")
        assert (p.quantity, p.reserved_quantity) == (10, 8)

    def test_adjust_leaves_reservations_alone(self):
        uow = _setup()
        seed_customer(uow)
        CreateOrderHandler(uow, FAST_RETRY).handle("C0001", [OrderItemSpec("1", 8)], "admin")
        AdjustInventoryHandler(uow, FAST_RETRY).handle("1", 5, "ADD")
        p = load_product(uow, "1")
        assert (p.quantity, p.reserved_quantity, p.available_quantity) == (15, 8, 7)

    def test_unknown_operation(self):
        with pytest.raises(ValidationError, match="Unknown stock operation"):
            AdjustInventoryHandler(_setup()).handle("1", 1, "MULTIPLY")

    def test_unknown_product(self):
        with pytest.raises(ProductNotFoundError):
            AdjustInventoryHandler(_setup()).handle("99", 1, "ADD")


class TestBulkAdjustInventory:

    def test_partial_success(self):
        uow = _setup()
        results = BulkAdjustInventoryHandler(uow, FAST_RETRY).handle(
            [
                InventoryAdjustment("1", 5, "ADD", "Restock"),
                InventoryAdjustment("2", 9, "SUBTRACT", "Audit"),
                InventoryAdjustment("77", 1, "ADD"),
                InventoryAdjustment("2", 1, "SUBTRACT", "Audit"),
            ],
            actor="auditor",
        )

        assert [r.success for r in results] == [True, False, False, True]
        assert results[1].error_code == "INSUFFICIENT_STOCK"
        assert results[2].error_code == "PRODUCT_NOT_FOUND"
        assert results[3].change.new_available == 1
        assert load_product(uow, "1").quantity == 15
        assert load_product(uow, "2").quantity == 1

    def test_empty_batch(self):
        assert BulkAdjustInventoryHandler(_setup()).handle([]) == []
