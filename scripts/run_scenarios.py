"""Run the standard payment scenarios against a test-mode client.

Covers validation outcomes, a rate-limit burst and a retry sweep, and prints
the results as JSON.
"""

import argparse
import asyncio
import json
from decimal import Decimal
from typing import Any

from simpay.common.errors import PaymentError
from simpay.common.logging import configure_logging
from simpay.services.processor.client import TEST_API_KEY, PaymentClient
from simpay.services.processor.schemas import (
    ClientConfig,
    Customer,
    PaymentRequest,
    RateLimitPolicy,
    RetryPolicy,
)


def test_mode_config(debug: bool = False) -> ClientConfig:
    """Small retry/backoff and a 10-per-second window for quick local runs."""

    return ClientConfig(
        api_key=TEST_API_KEY,
        mode="test",
        environment="sandbox",
        debug=debug,
        retry=RetryPolicy(max_retries=2, backoff_ms=100),
        rate_limit=RateLimitPolicy(max_attempts=10, window_ms=1000),
    )


def sample_request(**overrides: Any) -> PaymentRequest:
    payload: dict[str, Any] = {
        "amount": Decimal("99.99"),
        "currency": "USD",
        "description": "Test payment",
        "customer": Customer(email="test@example.com", name="Test User"),
        "metadata": {"test": True, "orderId": "test_123"},
    }
    payload.update(overrides)
    return PaymentRequest(**payload)


SCENARIOS: list[tuple[str, dict[str, Any], str | None]] = [
    ("Successful payment", {}, None),
    ("Invalid amount", {"amount": Decimal("-10")}, "INVALID_AMOUNT"),
    ("Invalid currency", {"currency": "XXX"}, "INVALID_CURRENCY"),
    ("Amount too large", {"amount": Decimal("100000")}, "AMOUNT_TOO_LARGE"),
    (
        "Invalid email",
        {"customer": Customer(email="invalid-email", name="Test User")},
        "INVALID_CARD",
    ),
]


async def attempt(client: PaymentClient, request: PaymentRequest) -> dict[str, Any]:
    """Create one payment and summarize the outcome."""

    try:
        response = await client.create_payment(request)
    except PaymentError as exc:
        return {"success": False, "error": exc.code.value}
    return {"success": True, "id": response.id, "status": response.status}


async def run_scenarios(client: PaymentClient) -> list[dict[str, Any]]:
    results = []
    for name, overrides, expected in SCENARIOS:
        outcome = await attempt(client, sample_request(**overrides))
        outcome["scenario"] = name
        outcome["expected_error"] = expected
        results.append(outcome)
    return results


async def run_rate_limit_burst(client: PaymentClient, count: int = 15) -> list[dict[str, Any]]:
    return [await attempt(client, sample_request()) for _ in range(count)]


async def run_retry_sweep(client: PaymentClient, count: int = 5) -> list[dict[str, Any]]:
    results = []
    for i in range(count):
        outcome = await attempt(client, sample_request())
        outcome["attempt"] = i + 1
        results.append(outcome)
    return results


async def main() -> None:
    """CLI entrypoint for local scenario smoke runs."""

    parser = argparse.ArgumentParser(description="Run payment client scenarios in test mode.")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--burst", type=int, default=15)
    parser.add_argument("--sweep", type=int, default=5)
    args = parser.parse_args()

    configure_logging()
    client = PaymentClient(test_mode_config(args.debug))

    report = {"scenarios": await run_scenarios(client)}
    client.reset_rate_limits()
    report["rate_limit"] = await run_rate_limit_burst(client, args.burst)
    client.reset_rate_limits()
    report["retry"] = await run_retry_sweep(client, args.sweep)
    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    asyncio.run(main())
