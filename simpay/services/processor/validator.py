"""Request validation run before any simulated processor I/O."""

import re
from decimal import Decimal

from simpay.common.errors import PaymentError, PaymentErrorCode
from simpay.services.processor.schemas import PaymentRequest

SUPPORTED_CURRENCIES = frozenset({"USD", "EUR", "GBP"})
MAX_AMOUNT = Decimal("99999.99")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.match(email) is not None


def validate_payment(request: PaymentRequest) -> None:
    """Raise the first violated rule: amount, currency, size, then email."""

    if request.amount is None or request.amount <= 0:
        raise PaymentError("Invalid amount", PaymentErrorCode.INVALID_AMOUNT, retryable=False)
    if request.currency not in SUPPORTED_CURRENCIES:
        raise PaymentError("Invalid currency", PaymentErrorCode.INVALID_CURRENCY, retryable=False)
    if request.amount > MAX_AMOUNT:
        raise PaymentError("Amount exceeds maximum limit", PaymentErrorCode.AMOUNT_TOO_LARGE, retryable=False)
    email = request.customer.email if request.customer else None
    # Malformed emails share the card error code with the processor.
    if email and not is_valid_email(email):
        raise PaymentError("Invalid email address", PaymentErrorCode.INVALID_CARD, retryable=False)
