import pytest

from mc_core.common.retry import backoff_delay, retry_with_backoff


def test_backoff_is_exponential_without_jitter():
    assert [backoff_delay(i, 1.0, jitter=0) for i in range(3)] == [1.0, 2.0, 4.0]


def test_retries_until_success():
    sleeps = []
    calls = {"n": 0}

    def flaky():
        calls["n"] += 1
        if calls["n"] < 3:
            raise OSError("temporary")
        return "ok"

    assert retry_with_backoff(flaky, max_attempts=3, base_delay=0.5, sleep=sleeps.append) == "ok"
    assert calls["n"] == 3
    assert len(sleeps) == 2
    assert 0.5 <= sleeps[0] < 1.0
    assert 1.0 <= sleeps[1] < 1.5


def test_reraises_last_error_when_budget_exhausted():
    sleeps = []

    def always_down():
        raise OSError("down")

    with pytest.raises(OSError, match="down"):
        retry_with_backoff(always_down, max_attempts=3, base_delay=0, sleep=sleeps.append)
    assert len(sleeps) == 2


def test_non_retryable_error_propagates_immediately():
    calls = {"n": 0}

    def broken():
        calls["n"] += 1
        raise ValueError("bad input")

    with pytest.raises(ValueError):
        retry_with_backoff(broken, max_attempts=3, base_delay=0, sleep=lambda _: None)
    assert calls["n"] == 1
