"""Storage-record shape handed to whoever persists settled payments."""

from typing import Any

from simpay.services.processor.schemas import PaymentResponse


def build_payment_record(response: PaymentResponse) -> dict[str, Any]:
    """Flatten a response into the persisted record columns.

    The client never writes this anywhere; persistence belongs to the caller.
    """

    customer = response.customer
    return {
        "id": response.id,
        "amount": response.amount,
        "currency": response.currency,
        "status": response.status,
        "customer_email": customer.email if customer else None,
        "customer_name": customer.name if customer else None,
        "description": response.description,
        "metadata": response.metadata,
    }
