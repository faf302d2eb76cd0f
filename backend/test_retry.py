"""
Bounded retry helper
"""

import pytest

from labelcheck.core.retry import call_with_retry


class Flaky:

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def transient(error):
    return isinstance(error, ConnectionError)


def test_retries_transient_errors_with_exponential_backoff():
    sleeps = []
    func = Flaky(ConnectionError("reset"), ConnectionError("refused"), "ok")

    result = call_with_retry(func, is_retryable=transient, sleep=sleeps.append)

    assert result == "ok"
    assert func.calls == 3
    assert sleeps == [1.0, 2.0]


def test_non_retryable_error_propagates_immediately():
    sleeps = []
    func = Flaky(ValueError("bad payload"), "never reached")

    with pytest.raises(ValueError):
        call_with_retry(func, is_retryable=transient, sleep=sleeps.append)

    assert func.calls == 1
    assert sleeps == []


def test_last_transient_error_propagates_when_attempts_run_out():
    sleeps = []
    func = Flaky(ConnectionError("1"), ConnectionError("2"), ConnectionError("3"))

    with pytest.raises(ConnectionError, match="3"):
        call_with_retry(func, is_retryable=transient, max_attempts=3, base_delay=0.5, sleep=sleeps.append)

    assert func.calls == 3
    # No sleep after the final attempt
    assert sleeps == [0.5, 1.0]


def test_rejects_zero_attempts():
    with pytest.raises(ValueError):
        call_with_retry(lambda: None, is_retryable=transient, max_attempts=0)
