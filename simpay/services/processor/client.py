"""Simulated payment-processing client.

One `PaymentClient` owns the configuration snapshot and the rate-limit window
state. Build it once at startup, share it between callers, and call
`reset_rate_limits` only from tests or ops tooling. Re-initializing while
operations are in flight is the caller's responsibility to avoid.
"""

import asyncio
import random
import time
from datetime import datetime
from typing import Awaitable, Callable

from simpay.common.errors import PaymentError, PaymentErrorCode
from simpay.common.logging import logger, operation_ctx, payment_id_ctx
from simpay.common.metrics import (
    payment_failure_total,
    payment_latency_seconds,
    payment_requests_total,
    payment_success_total,
    rate_limited_total,
)
from simpay.common.startup import redact
from simpay.services.processor.rate_limiter import SlidingWindowRateLimiter
from simpay.services.processor.retry import with_retry
from simpay.services.processor.schemas import ClientConfig, PaymentRequest, PaymentResponse, RateLimitPolicy
from simpay.services.processor.simulator import (
    PAYMENT_ID_PREFIX,
    STATUS_CHOICES,
    FailureInjector,
    LatencySimulator,
    generate_payment_id,
    synthesize_payment,
    synthesize_status,
    utc_now,
)
from simpay.services.processor.validator import validate_payment

TEST_API_KEY = "test_key_123"
CREATE_PAYMENT = "create_payment"
GET_STATUS = "get_status"


class PaymentClient:
    """Admission, validation and retried simulated processing for payments."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        failure_injector: Callable[[], PaymentError | None] | None = None,
        latency: LatencySimulator | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.now = now
        self.latency = latency or LatencySimulator(rng=self.rng, sleep=sleep)
        self._failure_injector_override = failure_injector
        self.failure_injector: Callable[[], PaymentError | None] = failure_injector or FailureInjector(0.0)
        self.rate_limiter = SlidingWindowRateLimiter(RateLimitPolicy(), clock=clock)
        self._config: ClientConfig | None = None
        if config is not None:
            self.init(config)

    def init(self, config: ClientConfig) -> None:
        """Install `config` as the snapshot, replacing any previous one."""

        if not config.api_key:
            raise PaymentError("API key is required", PaymentErrorCode.INVALID_API_KEY, retryable=False)
        if config.mode == "test" and config.api_key != TEST_API_KEY:
            raise PaymentError("Invalid test API key", PaymentErrorCode.INVALID_API_KEY, retryable=False)

        self._config = config.model_copy(deep=True)
        self.rate_limiter.policy = self._config.rate_limit
        if self._failure_injector_override is None:
            self.failure_injector = FailureInjector.for_mode(self._config.mode, rng=self.rng)

        if self._config.debug:
            logger.info(
                "payment client initialized config=%s",
                self._config.model_dump(mode="json") | {"api_key": redact(self._config.api_key)},
            )

    def get_config(self) -> ClientConfig:
        """Return a copy of the snapshot; mutating it does not affect the client."""

        return self._require_config().model_copy(deep=True)

    def reset_rate_limits(self) -> None:
        self.rate_limiter.reset()

    def _require_config(self) -> ClientConfig:
        if self._config is None:
            raise PaymentError("Client not initialized", PaymentErrorCode.INVALID_API_KEY, retryable=False)
        return self._config

    def _admit(self, operation: str) -> None:
        if not self.rate_limiter.check_and_record(operation):
            rate_limited_total.labels(operation=operation).inc()
            logger.warning(
                "admission denied operation=%s in_window=%s max_attempts=%s",
                operation,
                self.rate_limiter.in_window(operation),
                self.rate_limiter.policy.max_attempts,
            )
            raise PaymentError("Too many requests", PaymentErrorCode.RATE_LIMITED, retryable=False)

    def _debug(self, message: str, *args) -> None:
        if self._config is not None and self._config.debug:
            logger.info(message, *args)

    async def _simulate_network(self) -> None:
        delay_ms = await self.latency.wait()
        self._debug("simulated network delay_ms=%.1f", delay_ms)

    async def create_payment(self, request: PaymentRequest) -> PaymentResponse:
        """Admit, validate and settle one payment.

        Validation failures are raised before any simulated delay and are not
        retried. Injected processor failures are retried with backoff and the
        last one is raised unchanged.
        """

        config = self._require_config()
        token = operation_ctx.set(CREATE_PAYMENT)
        payment_requests_total.labels(operation=CREATE_PAYMENT).inc()

        async def attempt() -> PaymentResponse:
            await self._simulate_network()
            failure = self.failure_injector()
            if failure is not None:
                logger.info("simulated processor failure code=%s", failure.code.value)
                raise failure
            return synthesize_payment(request, generate_payment_id(), self.now())

        try:
            with payment_latency_seconds.labels(operation=CREATE_PAYMENT).time():
                self._admit(CREATE_PAYMENT)
                validate_payment(request)
                response = await with_retry(attempt, config.retry, CREATE_PAYMENT, self.sleep)
        except PaymentError as exc:
            payment_failure_total.labels(operation=CREATE_PAYMENT, code=exc.code.value).inc()
            logger.warning("payment failed code=%s message=%s", exc.code.value, exc.message)
            raise
        finally:
            operation_ctx.reset(token)

        payment_success_total.labels(operation=CREATE_PAYMENT).inc()
        id_token = payment_id_ctx.set(response.id)
        try:
            logger.info(
                "payment settled payment_id=%s amount=%s currency=%s",
                response.id,
                response.amount,
                response.currency,
            )
        finally:
            payment_id_ctx.reset(id_token)
        return response

    async def get_payment_status(self, payment_id: str) -> PaymentResponse:
        """Look up a payment's status; the simulator has no memory of created payments."""

        config = self._require_config()
        token = operation_ctx.set(GET_STATUS)
        id_token = payment_id_ctx.set(payment_id)
        payment_requests_total.labels(operation=GET_STATUS).inc()

        async def attempt() -> PaymentResponse:
            await self._simulate_network()
            if not payment_id.startswith(PAYMENT_ID_PREFIX):
                raise PaymentError("Invalid payment ID", PaymentErrorCode.PROCESSING_ERROR)
            return synthesize_status(payment_id, self.rng.choice(STATUS_CHOICES), self.now())

        try:
            with payment_latency_seconds.labels(operation=GET_STATUS).time():
                self._admit(GET_STATUS)
                response = await with_retry(attempt, config.retry, GET_STATUS, self.sleep)
        except PaymentError as exc:
            payment_failure_total.labels(operation=GET_STATUS, code=exc.code.value).inc()
            logger.warning("status lookup failed code=%s message=%s", exc.code.value, exc.message)
            raise
        finally:
            operation_ctx.reset(token)
            payment_id_ctx.reset(id_token)

        payment_success_total.labels(operation=GET_STATUS).inc()
        return response
