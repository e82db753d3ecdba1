"""Runtime settings read from the environment.

Defaults suit a local checkout: data lives under ``<repo>/data`` unless
``SALESLEDGER_DATA_DIR`` says otherwise.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from salesledger.domain.exceptions import ConfigurationError

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = _DEFAULT_DATA_DIR
    reservation_ttl: timedelta | None = timedelta(hours=72)
    max_attempts: int = 5
    backoff_initial: float = 0.01
    backoff_max: float = 0.5
    default_low_stock_threshold: int = 5

    @staticmethod
    def from_env(environ: dict[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        ttl_hours = _number(env, "SALESLEDGER_RESERVATION_TTL_HOURS", 72.0, float)
        settings = Settings(
            data_dir=Path(env.get("SALESLEDGER_DATA_DIR", _DEFAULT_DATA_DIR)),
            reservation_ttl=timedelta(hours=ttl_hours) if ttl_hours > 0 else None,
            max_attempts=_number(env, "SALESLEDGER_MAX_ATTEMPTS", 5, int),
            backoff_initial=_number(env, "SALESLEDGER_BACKOFF_SECONDS", 0.01, float),
            backoff_max=_number(env, "SALESLEDGER_BACKOFF_MAX_SECONDS", 0.5, float),
            default_low_stock_threshold=_number(
                env, "SALESLEDGER_LOW_STOCK_THRESHOLD", 5, int
            ),
        )
        if settings.max_attempts < 1:
            raise ConfigurationError("SALESLEDGER_MAX_ATTEMPTS must be at least 1")
        if ttl_hours < 0 or settings.backoff_initial < 0 or settings.backoff_max < 0:
            raise ConfigurationError("Durations cannot be negative")
        if settings.default_low_stock_threshold < 0:
            raise ConfigurationError("SALESLEDGER_LOW_STOCK_THRESHOLD cannot be negative")
        return settings


def _number(env, name: str, default, kind):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
