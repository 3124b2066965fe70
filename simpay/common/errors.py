"""Flat error taxonomy raised by the payment client."""

from enum import Enum


class PaymentErrorCode(str, Enum):
    """One code per failure cause."""

    INVALID_API_KEY = "INVALID_API_KEY"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_CURRENCY = "INVALID_CURRENCY"
    AMOUNT_TOO_LARGE = "AMOUNT_TOO_LARGE"
    INVALID_CARD = "INVALID_CARD"
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_ERROR = "NETWORK_ERROR"
    CARD_DECLINED = "CARD_DECLINED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    EXPIRED_CARD = "EXPIRED_CARD"
    PROCESSING_ERROR = "PROCESSING_ERROR"


class PaymentError(Exception):
    """Raised instead of a response on every failure path.

    `retryable` is False for configuration, admission and validation errors so
    the retry driver surfaces them on the first occurrence.
    """

    def __init__(self, message: str, code: PaymentErrorCode, retryable: bool = True) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code.value, "message": self.message}

    def __repr__(self) -> str:
        return f"PaymentError(code={self.code.value!r}, message={self.message!r})"
