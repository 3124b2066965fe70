"""Client configuration lifecycle and environment settings."""

import logging

import pytest
from pydantic import ValidationError

from simpay.common.config import CommonSettings
from simpay.common.errors import PaymentError, PaymentErrorCode
from simpay.services.processor.client import TEST_API_KEY, PaymentClient
from simpay.services.processor.schemas import ClientConfig, RateLimitPolicy, RetryPolicy
from simpay.services.processor.simulator import FailureInjector


def test_empty_api_key_is_rejected():
    with pytest.raises(PaymentError) as exc_info:
        PaymentClient(ClientConfig(api_key="", mode="live"))
    assert exc_info.value.code == PaymentErrorCode.INVALID_API_KEY


def test_test_mode_requires_sentinel_key():
    with pytest.raises(PaymentError) as exc_info:
        PaymentClient(ClientConfig(api_key="sk_live_whatever", mode="test"))
    assert exc_info.value.code == PaymentErrorCode.INVALID_API_KEY

    PaymentClient(ClientConfig(api_key=TEST_API_KEY, mode="test"))


def test_defaults_are_filled():
    config = PaymentClient(ClientConfig(api_key="k", mode="live")).get_config()
    assert config.environment == "sandbox"
    assert config.debug is False
    assert config.retry == RetryPolicy(max_retries=3, backoff_ms=1000)
    assert config.rate_limit == RateLimitPolicy(max_attempts=100, window_ms=900_000)


def test_partial_policies_keep_remaining_defaults():
    config = ClientConfig(api_key="k", mode="live", retry={"backoff_ms": 5}, rate_limit={"max_attempts": 7})
    assert config.retry.max_retries == 3
    assert config.retry.backoff_ms == 5
    assert config.rate_limit.window_ms == 900_000


@pytest.mark.parametrize(
    "overrides",
    [
        {"retry": {"max_retries": 0}},
        {"retry": {"backoff_ms": -1}},
        {"rate_limit": {"max_attempts": 0}},
        {"mode": "staging"},
        {"environment": "qa"},
    ],
)
def test_out_of_range_values_fail_schema_validation(overrides):
    with pytest.raises(ValidationError):
        ClientConfig(**({"api_key": "k", "mode": "live"} | overrides))


def test_get_config_returns_a_copy():
    client = PaymentClient(ClientConfig(api_key="k", mode="live"))
    snapshot = client.get_config()
    snapshot.api_key = "mutated"
    snapshot.retry.max_retries = 99
    assert client.get_config().api_key == "k"
    assert client.get_config().retry.max_retries == 3


def test_reinit_overwrites_whole_snapshot():
    client = PaymentClient(
        ClientConfig(api_key="k", mode="live", debug=True, retry=RetryPolicy(max_retries=5))
    )
    client.init(ClientConfig(api_key=TEST_API_KEY, mode="test"))

    config = client.get_config()
    assert config.mode == "test"
    assert config.debug is False
    assert config.retry.max_retries == 3
    assert isinstance(client.failure_injector, FailureInjector)
    assert client.failure_injector.probability == pytest.approx(0.10)


def test_reinit_updates_rate_limit_policy():
    client = PaymentClient(ClientConfig(api_key="k", mode="live"))
    client.init(ClientConfig(api_key="k", mode="live", rate_limit=RateLimitPolicy(max_attempts=1)))
    assert client.rate_limiter.policy.max_attempts == 1


def test_debug_init_logs_redacted_key(caplog):
    with caplog.at_level(logging.INFO, logger="simpay"):
        PaymentClient(ClientConfig(api_key="sk_live_abcdef1234", mode="live", debug=True))
    messages = " ".join(record.getMessage() for record in caplog.records)
    assert "payment client initialized" in messages
    assert "sk_live_abcdef1234" not in messages
    assert "1234" in messages


def test_client_config_from_settings():
    settings = CommonSettings(
        _env_file=None,
        payments_api_key="k",
        payments_mode="live",
        payments_environment="production",
        payments_backoff_ms=250,
        payments_rate_limit_window_ms=1000,
    )
    config = ClientConfig.from_settings(settings)
    assert config.environment == "production"
    assert config.retry == RetryPolicy(max_retries=3, backoff_ms=250)
    assert config.rate_limit == RateLimitPolicy(max_attempts=100, window_ms=1000)
