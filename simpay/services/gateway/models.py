"""Gateway persistence model for settled payments."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, DateTime, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from simpay.common.db import Base


class PaymentRecord(Base):
    """One stored payment, keyed by the processor-generated id."""

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    currency: Mapped[str] = mapped_column(String(3))
    status: Mapped[str] = mapped_column(String)
    customer_email: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    customer_name: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    # `metadata` is reserved on declarative classes.
    payment_metadata: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "amount": str(self.amount),
            "currency": self.currency,
            "status": self.status,
            "customer_email": self.customer_email,
            "customer_name": self.customer_name,
            "description": self.description,
            "metadata": self.payment_metadata,
        }
