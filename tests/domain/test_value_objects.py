"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from salesledger.domain.exceptions import ValidationError
from salesledger.domain.model.value_objects import Money, Quantity


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "USD"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("ten")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_float_amount_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            Money(10.5)

    def test_addition(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")

    def test_subtraction_going_negative_rejected(self):
        with pytest.raises(ValidationError, match="negative amount"):
            Money.of("5") - Money.of("10")

    def test_multiplication_by_int(self):
        assert Money.of("7.50") * 3 == Money.of("22.50")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "USD") + Money(Decimal("5"), "EUR")

    def test_str_formatting(self):
        assert str(Money.of("15")) == "$15.00"
        assert str(Money.of("9.5")) == "$9.50"

    def test_zero(self):
        assert Money.zero() == Money.of("0.00")


class TestAggregation:

    def test_total_of_nothing_is_zero(self):
        assert Money.total([]) == Money.zero()

    def test_total(self):
        assert Money.total([Money.of("1.10"), Money.of("2.20")]) == Money.of("3.30")

    def test_rounded_half_up(self):
        assert Money.of("10.005").rounded().amount == Decimal("10.01")
        assert Money.of("10.004").rounded().amount == Decimal("10.00")

    def test_ordering(self):
        assert Money.of("5") < Money.of("10") <= Money.of("10.00")
        assert max(Money.of("3"), Money.of("7")) == Money.of("7")

    def test_bool_factor_rejected(self):
        with pytest.raises(TypeError):
            Money.of("1") * True


class TestWholeUnits:

    def test_floors_partial_units(self):
        assert Money.of("259.99").whole_units(10) == 25

    def test_below_one_unit_is_zero(self):
        assert Money.of("9.99").whole_units(10) == 0

    def test_exact_multiple(self):
        assert Money.of("100").whole_units(10) == 10


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid_quantity(self):
        assert Quantity(5).value == 5

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(0)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(-3)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(True)
