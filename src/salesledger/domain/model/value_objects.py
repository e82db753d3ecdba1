"""Value objects: amounts of money and line quantities.

Both are frozen dataclasses that validate on construction, so a Money or a
Quantity that exists is always a legal one.
"""

from __future__ import annotations

import functools
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation

from salesledger.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "USD"
CENT = Decimal("0.01")


@functools.total_ordering
@dataclass(frozen=True)
class Money:
    """Non-negative Decimal amount tagged with a currency code.

    Arithmetic and ordering only work between amounts of the same
    currency; subtraction below zero is a ValidationError, not a negative
    Money.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")

    @staticmethod
    def of(amount: str | int | float | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Build from user input; floats go through ``str`` first."""
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc
        return Money(value, currency)

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0.00"), currency)

    @staticmethod
    def total(amounts: Iterable[Money], currency: str = DEFAULT_CURRENCY) -> Money:
        return sum(amounts, Money.zero(currency))

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + self._same_currency(other).amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        difference = self.amount - self._same_currency(other).amount
        if difference < 0:
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(difference, self.currency)

    def __mul__(self, factor: int) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        return self.amount < self._same_currency(other).amount

    def rounded(self) -> Money:
        """Half-up to the cent."""
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP), self.currency)

    def whole_units(self, per: int = 1) -> int:
        """How many complete blocks of ``per`` fit in the amount."""
        return int((self.amount / per).to_integral_value(rounding=ROUND_FLOOR))

    def __str__(self) -> str:
        return f"${self.amount:.2f}"

    def _same_currency(self, other: Money) -> Money:
        if self.currency != other.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")
        return other


@dataclass(frozen=True)
class Quantity:
    """Units on an order line; always a positive int."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)
