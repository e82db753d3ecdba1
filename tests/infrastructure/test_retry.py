"""Tests for the bounded conflict retry."""

import pytest

from salesledger.application.retry import RetryPolicy, run_with_retry
from salesledger.domain.exceptions import ConcurrencyConflictError, ValidationError

POLICY = RetryPolicy(max_attempts=3, backoff_initial=0, backoff_max=0)


class _Flaky:

    def __init__(self, failures, exc=None):
        self.failures = failures
        self.calls = 0
        self.exc = exc or ConcurrencyConflictError("products", "1")

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return "done"


class TestRunWithRetry:

    def test_retries_conflicts_until_success(self):
        fn = _Flaky(failures=2)
        assert run_with_retry(fn, POLICY) == "done"
        assert fn.calls == 3

    def test_gives_up_with_the_original_conflict(self):
        fn = _Flaky(failures=5)
        with pytest.raises(ConcurrencyConflictError):
            run_with_retry(fn, POLICY)
        assert fn.calls == 3

    def test_business_errors_are_not_retried(self):
        fn = _Flaky(failures=5, exc=ValidationError("bad"))
        with pytest.raises(ValidationError):
            run_with_retry(fn, POLICY)
        assert fn.calls == 1

    def test_custom_predicate(self):
        fn = _Flaky(failures=5, exc=ConcurrencyConflictError("orders", "1"))
        with pytest.raises(ConcurrencyConflictError):
            run_with_retry(fn, POLICY, retry_if=lambda exc: exc.collection != "orders")
        assert fn.calls == 1
