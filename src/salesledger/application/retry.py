"""Bounded retry for optimistic-concurrency conflicts.

Only ``ConcurrencyConflictError`` is retried; every business error
propagates on the first attempt.  Each attempt must open its own unit of
work so the retried body re-reads fresh records.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from salesledger.domain.exceptions import ConcurrencyConflictError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    backoff_initial: float = 0.01
    backoff_max: float = 0.5


def is_conflict(exc: BaseException) -> bool:
    return isinstance(exc, ConcurrencyConflictError)


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.info(
        "Retrying after concurrency conflict",
        attempt=state.attempt_number,
        collection=getattr(exc, "collection", None),
        key=getattr(exc, "key", None),
    )


def run_with_retry(
    fn: Callable[[], T],
    policy: RetryPolicy,
    retry_if: Callable[[BaseException], bool] = is_conflict,
) -> T:
    """Call ``fn`` until it succeeds or the policy gives up.

    After the last attempt the original exception is re-raised.
    """
    retrying = Retrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(
            multiplier=policy.backoff_initial,
            min=policy.backoff_initial,
            max=policy.backoff_max,
        ),
        retry=retry_if_exception(retry_if),
        before_sleep=_log_retry,
        reraise=True,
    )
    return retrying(fn)
