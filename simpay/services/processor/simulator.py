"""Simulated remote processor: latency, failure injection, response synthesis."""

import asyncio
import copy
import random
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable

from simpay.common.errors import PaymentError, PaymentErrorCode
from simpay.services.processor.schemas import (
    PaymentRequest,
    PaymentResponse,
    PaymentStatus,
    RedactedPaymentMethod,
    SettledCustomer,
)

PAYMENT_ID_PREFIX = "pay_"
BASE36_ALPHABET = string.digits + string.ascii_lowercase
TEST_MODE_FAILURE_RATE = 0.10
SIMULATED_LAST4 = "4242"
SIMULATED_BRAND = "visa"
STATUS_CHOICES: tuple[PaymentStatus, ...] = ("succeeded", "processing", "pending")

SIMULATED_FAILURES: tuple[tuple[PaymentErrorCode, str], ...] = (
    (PaymentErrorCode.NETWORK_ERROR, "Network error"),
    (PaymentErrorCode.CARD_DECLINED, "Card declined"),
    (PaymentErrorCode.INSUFFICIENT_FUNDS, "Insufficient funds"),
    (PaymentErrorCode.INVALID_CARD, "Invalid card"),
    (PaymentErrorCode.EXPIRED_CARD, "Card expired"),
)


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_payment_id(now_ms: int | None = None) -> str:
    """`pay_<base36 ms timestamp><9 base36 chars from the OS CSPRNG>`."""

    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(9))
    return f"{PAYMENT_ID_PREFIX}{to_base36(now_ms)}{suffix}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FailureInjector:
    """Decides whether a simulated attempt fails, and with which error."""

    def __init__(
        self,
        probability: float,
        failures: tuple[tuple[PaymentErrorCode, str], ...] = SIMULATED_FAILURES,
        rng: random.Random | None = None,
    ) -> None:
        if not 0.0 <= probability <= 1.0:
            raise ValueError("probability must be within [0, 1]")
        if probability > 0 and not failures:
            raise ValueError("failures must not be empty")
        self.probability = probability
        self.failures = failures
        self.rng = rng or random.Random()

    @classmethod
    def for_mode(cls, mode: str, rng: random.Random | None = None) -> "FailureInjector":
        """Test mode fails 10% of attempts; live mode never injects failures."""

        return cls(TEST_MODE_FAILURE_RATE if mode == "test" else 0.0, rng=rng)

    def __call__(self) -> PaymentError | None:
        if self.probability <= 0 or self.rng.random() >= self.probability:
            return None
        code, message = self.rng.choice(self.failures)
        return PaymentError(message, code)


class LatencySimulator:
    """Cooperative delay drawn uniformly from [min_ms, max_ms)."""

    def __init__(
        self,
        min_ms: int = 500,
        max_ms: int = 1500,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if min_ms < 0 or max_ms < min_ms:
            raise ValueError("latency range must satisfy 0 <= min_ms <= max_ms")
        self.min_ms = min_ms
        self.max_ms = max_ms
        self.rng = rng or random.Random()
        self.sleep = sleep

    def draw_ms(self) -> float:
        return self.min_ms + self.rng.random() * (self.max_ms - self.min_ms)

    async def wait(self) -> float:
        delay_ms = self.draw_ms()
        await self.sleep(delay_ms / 1000.0)
        return delay_ms


def synthesize_payment(request: PaymentRequest, payment_id: str, now: datetime) -> PaymentResponse:
    """Successful settlement echoing the request; card details are redacted.

    Echoed customer and metadata are copied so later changes to the request do
    not reach the settled response.
    """

    customer = None
    if request.customer is not None:
        customer = SettledCustomer.model_validate(request.customer.model_dump())
    payment_method = None
    if request.payment_method is not None:
        payment_method = RedactedPaymentMethod(
            type=request.payment_method.type,
            last4=SIMULATED_LAST4,
            brand=SIMULATED_BRAND,
        )
    return PaymentResponse(
        id=payment_id,
        status="succeeded",
        amount=request.amount,
        currency=request.currency,
        description=request.description,
        created_at=now,
        updated_at=now,
        metadata=copy.deepcopy(request.metadata),
        customer=customer,
        payment_method=payment_method,
    )


def synthesize_status(payment_id: str, status: PaymentStatus, now: datetime) -> PaymentResponse:
    """Status lookup result; the simulator keeps no record of created payments."""

    return PaymentResponse(
        id=payment_id,
        status=status,
        amount=0,
        currency="USD",
        created_at=now,
        updated_at=now,
    )
