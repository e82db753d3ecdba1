"""Integration tests for the RecordOfflineSale use case."""

from decimal import Decimal

import pytest

from salesledger.application.dto import CustomerRef, OrderItemSpec
from salesledger.application.record_offline_sale import RecordOfflineSaleHandler
from salesledger.domain.exceptions import (
    CustomerNotFoundError,
    InsufficientStockError,
)
from salesledger.domain.model.customer import CustomerStatus
from salesledger.domain.model.order import OrderType, PaymentMethod
from salesledger.domain.model.product import StockStatus
from tests.fakes import (
    FAST_RETRY,
    NOW,
    RecordingNotifier,
    load_claims,
    load_customer,
    load_order,
    load_product,
    new_uow,
    seed_customer,
    seed_product,
)


def _setup(quantity: int = 5):
    uow = new_uow()
    seed_product(uow, "Widget", "20.00", quantity=quantity)
    seed_customer(uow, phone="555-0100")
    notifier = RecordingNotifier()
    return RecordOfflineSaleHandler(uow, FAST_RETRY, notifier), uow, notifier


def _sell(handler, qty: int, ref: CustomerRef | None = None, **spec):
    return handler.handle(
        ref or CustomerRef(customer_id="C0001"),
        [OrderItemSpec("1", qty, **spec)],
        PaymentMethod.CASH,
        "clerk",
        at=NOW,
    )


class TestOfflineSale:

    def test_sell_out_scenario(self):
        handler, uow, _ = _setup(quantity=5)
        _sell(handler, 5)

        widget = load_product(uow, "1")
        assert widget.quantity == 0
        assert widget.reserved_quantity == 0
        assert widget.stock_status == StockStatus.OUT_OF_STOCK
        assert widget.sales_count == 5

        with pytest.raises(InsufficientStockError):
            _sell(handler, 1)
        assert load_product(uow, "1").sales_count == 5

    def test_order_is_delivered_and_paid(self):
        handler, uow, notifier = _setup()
        dto = _sell(handler, 2)
        assert dto.status == "DELIVERED"
        assert dto.payment_status == "PAID"
        assert dto.type == OrderType.OFFLINE.value
        assert [e.note for e in dto.timeline] == ["Offline sale recorded directly"]
        assert notifier.events == [("order_placed", dto.id, "C0001")]

    def test_no_reservation_claims(self):
        handler, uow, _ = _setup()
        dto = _sell(handler, 2)
        assert load_claims(uow, dto.id) == []

    def test_walk_in_address(self):
        handler, uow, _ = _setup()
        dto = _sell(handler, 1)
        address = load_order(uow, dto.id).shipping_address
        assert address.address_line1 == "Walk-in Purchase"
        assert address.first_name == "Alice"

    def test_negotiated_price(self):
        handler, _, _ = _setup()
        dto = _sell(handler, 2, unit_price=Decimal("17.50"))
        assert dto.total == "$35.00"

    def test_refreshes_metrics(self):
        handler, uow, _ = _setup()
        _sell(handler, 2)
        assert load_customer(uow, "C0001").metrics.total_orders == 1

    def test_failed_item_reverses_earlier_decrements(self):
        handler, uow, _ = _setup(quantity=5)
        seed_product(uow, "Gadget", "5.00", quantity=1)

        with pytest.raises(InsufficientStockError, match="Gadget"):
            handler.handle(
                CustomerRef(customer_id="C0001"),
                [OrderItemSpec("1", 3), OrderItemSpec("2", 2)],
                PaymentMethod.CARD,
                "clerk",
            )

        widget = load_product(uow, "1")
        assert (widget.quantity, widget.sales_count) == (5, 0)
        with uow:
            assert uow.orders.list_for_customer("C0001") == []


class TestOfflineCustomerResolution:

    def test_matches_existing_customer_by_email(self):
        handler, _, _ = _setup()
        dto = _sell(handler, 1, CustomerRef(email="ALICE@example.com"))
        assert dto.customer_id == "C0001"

    def test_matches_existing_customer_by_phone(self):
        handler, _, _ = _setup()
        dto = _sell(handler, 1, CustomerRef(phone="555-0100"))
        assert dto.customer_id == "C0001"

    def test_registers_new_customer_with_email(self):
        handler, uow, _ = _setup()
        dto = _sell(handler, 1, CustomerRef(first_name="Dan", last_name="Ng", email="dan@example.com"))
        customer = load_customer(uow, dto.customer_id)
        assert customer.full_name == "Dan Ng"
        assert customer.source == "offline_sale"
        assert not customer.is_guest
        assert customer.metrics.total_orders == 1

    def test_walk_in_without_email_is_guest(self):
        handler, uow, _ = _setup()
        dto = _sell(handler, 1, CustomerRef(first_name="Eve"))
        customer = load_customer(uow, dto.customer_id)
        assert customer.is_guest
        assert customer.metrics.total_orders == 0  # guests are not tracked

    def test_new_customer_discarded_when_sale_fails(self):
        handler, uow, _ = _setup(quantity=1)
        with pytest.raises(InsufficientStockError):
            _sell(handler, 5, CustomerRef(first_name="Eve", email="eve@example.com"))
        with uow:
            assert uow.customers.find_by_email("eve@example.com") is None

    def test_unknown_customer_id(self):
        handler, _, _ = _setup()
        with pytest.raises(CustomerNotFoundError):
            _sell(handler, 1, CustomerRef(customer_id="C0404"))

    def test_inactive_customer_can_still_buy_in_store(self):
        handler, uow, _ = _setup()
        seed_customer(uow, "Bob", "Jones", "bob@example.com", CustomerStatus.INACTIVE)

        dto = _sell(handler, 1, CustomerRef(email="bob@example.com"))

        assert dto.customer_id == "C0002"
        assert dto.status == "DELIVERED"
        assert load_product(uow, "1").quantity == 4
