"""Small helpers shared by the record serializers."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from salesledger.domain.model.value_objects import Money


def dump_money(money: Money) -> dict:
    return {"amount": str(money.amount), "currency": money.currency}


def load_money(raw: dict | None) -> Money:
    if raw is None:
        return Money.zero()
    return Money(Decimal(raw["amount"]), raw.get("currency", "USD"))


def dump_dt(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def load_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
