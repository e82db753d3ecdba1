"""Integration tests for the ExpireStaleReservations sweep."""

from datetime import timedelta

from salesledger.application.create_order import CreateOrderHandler
from salesledger.application.dto import OrderItemSpec
from salesledger.application.expire_stale_reservations import (
    ExpireStaleReservationsHandler,
)
from salesledger.application.update_order_status import UpdateOrderStatusHandler
from salesledger.domain.model.order import OrderStatus
from salesledger.domain.model.reservation import ReservationStatus
from tests.fakes import (
    FAST_RETRY,
    NOW,
    EditableStore,
    RecordingNotifier,
    load_claims,
    load_customer,
    load_order,
    load_product,
    new_uow,
    seed_customer,
    seed_product,
)

TTL = timedelta(hours=72)


def _setup(ttl=TTL):
    store = EditableStore()
    uow = new_uow(store)
    seed_product(uow, "Widget", quantity=10)
    seed_product(uow, "Gadget", quantity=10)
    seed_customer(uow)
    create = CreateOrderHandler(uow, FAST_RETRY, reservation_ttl=ttl)
    notifier = RecordingNotifier()
    sweep = ExpireStaleReservationsHandler(uow, FAST_RETRY, notifier)
    return store, uow, create, sweep, notifier


class TestExpireStaleReservations:

    def test_cancels_expired_pending_order(self):
        _, uow, create, sweep, notifier = _setup()
        dto = create.handle("C0001", [OrderItemSpec("1", 4)], "admin", at=NOW)

        result = sweep.handle(NOW + TTL + timedelta(minutes=1))

        assert result.cancelled == [dto.id]
        order = load_order(uow, dto.id)
        assert order.status == OrderStatus.CANCELLED
        assert order.timeline[-1].actor == "system"
        assert order.timeline[-1].note == "Reservation expired"
        assert load_product(uow, "1").reserved_quantity == 0
        assert load_claims(uow, dto.id)[0].status == ReservationStatus.EXPIRED
        assert ("order_status_changed", dto.id, "CANCELLED") in notifier.events
        assert load_customer(uow, "C0001").metrics.cancelled_orders == 1

    def test_leaves_fresh_reservations_alone(self):
        _, uow, create, sweep, _ = _setup()
        dto = create.handle("C0001", [OrderItemSpec("1", 4)], "admin", at=NOW)

        result = sweep.handle(NOW + TTL - timedelta(minutes=1))

        assert result.cancelled == []
        assert load_order(uow, dto.id).status == OrderStatus.PENDING
        assert load_product(uow, "1").reserved_quantity == 4

    def test_confirmed_orders_never_expire(self):
        _, uow, create, sweep, _ = _setup()
        dto = create.handle("C0001", [OrderItemSpec("1", 4)], "admin", at=NOW)
        UpdateOrderStatusHandler(uow, FAST_RETRY).handle(dto.id, "CONFIRMED", "admin")

        result = sweep.handle(NOW + TTL * 10)

        assert result.cancelled == []
        assert load_product(uow, "1").reserved_quantity == 4

    def test_disabled_ttl_never_expires(self):
        _, uow, create, sweep, _ = _setup(ttl=None)
        create.handle("C0001", [OrderItemSpec("1", 4)], "admin", at=NOW)
        assert sweep.handle(NOW + timedelta(days=365)).cancelled == []

    def test_one_failure_does_not_stop_the_sweep(self):
        store, uow, create, sweep, _ = _setup()
        broken = create.handle("C0001", [OrderItemSpec("1", 2), OrderItemSpec("2", 2)], "admin", at=NOW)
        healthy = create.handle("C0001", [OrderItemSpec("1", 3)], "admin", at=NOW)
        store.remove("products", "2")

        result = sweep.handle(NOW + TTL)

        assert result.cancelled == [healthy.id]
        assert "PRODUCT_NOT_FOUND" in result.failures[broken.id]
        assert load_order(uow, broken.id).status == OrderStatus.PENDING
        assert load_product(uow, "1").reserved_quantity == 2

    def test_sweep_is_repeatable(self):
        _, _, create, sweep, _ = _setup()
        create.handle("C0001", [OrderItemSpec("1", 4)], "admin", at=NOW)
        sweep.handle(NOW + TTL)
        assert sweep.handle(NOW + TTL).cancelled == []
