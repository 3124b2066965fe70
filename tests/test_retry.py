"""Retry driver attempt counting, backoff schedule and error identity."""

import pytest

from simpay.common.errors import PaymentError, PaymentErrorCode
from simpay.services.processor.retry import backoff_seconds, with_retry
from simpay.services.processor.schemas import RetryPolicy


@pytest.mark.asyncio
async def test_permanent_failure_attempts_max_retries_and_raises_last(backoff_sleep):
    policy = RetryPolicy(max_retries=4, backoff_ms=100)
    raised = []

    async def operation():
        error = PaymentError(f"network error #{len(raised)}", PaymentErrorCode.NETWORK_ERROR)
        raised.append(error)
        raise error

    with pytest.raises(PaymentError) as exc_info:
        await with_retry(operation, policy, "create_payment", backoff_sleep)

    assert len(raised) == 4
    assert exc_info.value is raised[-1]
    assert backoff_sleep.calls == [0.1, 0.2, 0.4]
    assert sum(backoff_sleep.calls) >= 0.1 * (2**0 + 2**1 + 2**2) - 1e-9


@pytest.mark.asyncio
async def test_success_after_transient_failures(backoff_sleep):
    calls = {"n": 0}

    async def operation():
        calls["n"] += 1
        if calls["n"] < 3:
            raise PaymentError("Card declined", PaymentErrorCode.CARD_DECLINED)
        return "ok"

    result = await with_retry(operation, RetryPolicy(max_retries=3, backoff_ms=50), sleep=backoff_sleep)

    assert result == "ok"
    assert calls["n"] == 3
    assert backoff_sleep.calls == [0.05, 0.1]


@pytest.mark.asyncio
async def test_single_attempt_never_sleeps(backoff_sleep):
    async def operation():
        raise PaymentError("Card expired", PaymentErrorCode.EXPIRED_CARD)

    with pytest.raises(PaymentError) as exc_info:
        await with_retry(operation, RetryPolicy(max_retries=1, backoff_ms=1000), sleep=backoff_sleep)

    assert exc_info.value.code == PaymentErrorCode.EXPIRED_CARD
    assert backoff_sleep.calls == []


@pytest.mark.asyncio
async def test_non_retryable_error_is_raised_immediately(backoff_sleep):
    calls = {"n": 0}

    async def operation():
        calls["n"] += 1
        raise PaymentError("Invalid currency", PaymentErrorCode.INVALID_CURRENCY, retryable=False)

    with pytest.raises(PaymentError):
        await with_retry(operation, RetryPolicy(max_retries=5, backoff_ms=10), sleep=backoff_sleep)

    assert calls["n"] == 1
    assert backoff_sleep.calls == []


@pytest.mark.asyncio
async def test_unexpected_exceptions_are_retried_and_preserved(backoff_sleep):
    async def operation():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        await with_retry(operation, RetryPolicy(max_retries=2, backoff_ms=10), sleep=backoff_sleep)
    assert backoff_sleep.calls == [0.01]


def test_backoff_doubles_per_attempt():
    policy = RetryPolicy(max_retries=5, backoff_ms=1000)
    assert [backoff_seconds(policy, i) for i in range(4)] == [1.0, 2.0, 4.0, 8.0]
