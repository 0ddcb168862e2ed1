# tests/test_retry.py

from __future__ import annotations

import pytest

from taskhub.core.retry import RetryError, RetryPolicy


def test_retry_succeeds_after_transient_failures(retry_policy: RetryPolicy, sleeps: list) -> None:
    attempts = {"n": 0}

    def flaky() -> str:
        attempts["n"] += 1
        if attempts["n"] < 3:
            raise ConnectionError("temporary")
        return "ok"

    assert retry_policy.call(flaky, description="flaky") == "ok"
    assert attempts["n"] == 3
    assert sleeps == [1.0, 2.0]


def test_retry_exhaustion_carries_last_error(retry_policy: RetryPolicy, sleeps: list) -> None:
    errors = iter([ValueError("first"), ValueError("second"), ValueError("third")])

    def always_fails() -> None:
        raise next(errors)

    with pytest.raises(RetryError) as exc_info:
        retry_policy.call(always_fails)

    assert exc_info.value.attempts == 3
    assert str(exc_info.value.last_error) == "third"
    # no sleep after the final attempt
    assert sleeps == [1.0, 2.0]


def test_non_retryable_error_propagates_immediately(sleeps: list) -> None:
    policy = RetryPolicy(attempts=3, delay=1.0, retry_on=lambda e: not isinstance(e, KeyError), sleep=sleeps.append)
    calls = {"n": 0}

    def fails() -> None:
        calls["n"] += 1
        raise KeyError("missing")

    with pytest.raises(KeyError):
        policy.call(fails)
    assert calls["n"] == 1
    assert sleeps == []


def test_delay_schedule_is_linear() -> None:
    policy = RetryPolicy(delay=0.5)
    assert [policy.delay_for(n) for n in (1, 2, 3)] == [0.5, 1.0, 1.5]
