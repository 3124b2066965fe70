"""Request/response and configuration schemas for the payment client."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from simpay.common.config import CommonSettings

PaymentStatus = Literal["succeeded", "failed", "pending", "processing"]
PaymentMethodType = Literal["card", "bank_transfer", "crypto"]


class RetryPolicy(BaseModel):
    """Bounded exponential backoff settings."""

    max_retries: int = Field(default=3, ge=1)
    backoff_ms: int = Field(default=1000, ge=0)


class RateLimitPolicy(BaseModel):
    """Sliding-window admission settings shared by every operation key."""

    max_attempts: int = Field(default=100, ge=1)
    window_ms: int = Field(default=15 * 60 * 1000, ge=0)


class ClientConfig(BaseModel):
    """Snapshot handed to `PaymentClient.init`; read-only once installed."""

    api_key: str
    mode: Literal["test", "live"]
    environment: Literal["sandbox", "production"] = "sandbox"
    debug: bool = False
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    rate_limit: RateLimitPolicy = Field(default_factory=RateLimitPolicy)

    @classmethod
    def from_settings(cls, settings: CommonSettings) -> "ClientConfig":
        """Build a client config from `PAYMENTS_*` environment settings.

        Unset retry/rate-limit values fall back to the policy defaults.
        """

        retry = {
            "max_retries": settings.payments_max_retries,
            "backoff_ms": settings.payments_backoff_ms,
        }
        rate_limit = {
            "max_attempts": settings.payments_rate_limit_max_attempts,
            "window_ms": settings.payments_rate_limit_window_ms,
        }
        return cls(
            api_key=settings.payments_api_key,
            mode=settings.payments_mode,
            environment=settings.payments_environment,
            debug=settings.payments_debug,
            retry=RetryPolicy(**{k: v for k, v in retry.items() if v is not None}),
            rate_limit=RateLimitPolicy(**{k: v for k, v in rate_limit.items() if v is not None}),
        )


class Address(BaseModel):
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class Customer(BaseModel):
    email: str | None = None
    name: str | None = None
    id: str | None = None
    phone: str | None = None
    address: Address | None = None


class SettledAddress(Address):
    model_config = ConfigDict(frozen=True)


class SettledCustomer(Customer):
    """Frozen copy of the caller's customer echoed on a response."""

    model_config = ConfigDict(frozen=True)

    address: SettledAddress | None = None


class PaymentMethod(BaseModel):
    """Caller-supplied instrument; `data` is never echoed back."""

    type: PaymentMethodType
    data: dict[str, Any] | None = None


class PaymentRequest(BaseModel):
    """Payment to create.

    Amount and currency are left unconstrained here so the validator can report
    them with payment error codes instead of schema errors.
    """

    amount: Decimal | None = None
    currency: str | None = None
    description: str | None = None
    metadata: dict[str, Any] | None = None
    customer: Customer | None = None
    payment_method: PaymentMethod | None = None


class RedactedPaymentMethod(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: PaymentMethodType
    last4: str | None = None
    brand: str | None = None


class ErrorDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    message: str


class PaymentResponse(BaseModel):
    """Settled (or status-checked) payment returned by the client."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: PaymentStatus
    amount: Decimal
    currency: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime
    metadata: dict[str, Any] | None = None
    customer: SettledCustomer | None = None
    payment_method: RedactedPaymentMethod | None = None
    error: ErrorDetail | None = None
