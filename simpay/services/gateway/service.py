"""Gateway-side payment record store backed by SQLAlchemy."""

from datetime import datetime
from typing import Any

from sqlalchemy import select

from simpay.common.logging import logger
from simpay.services.gateway.models import PaymentRecord


class PaymentRecordStore:
    """Persists settled payments and answers record lookups."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    def create(self, record: dict[str, Any], created_at: datetime | None = None) -> PaymentRecord:
        """Insert one record built by `build_payment_record`.

        `created_at` should be the response timestamp; without it the database
        default applies.
        """

        values = dict(record)
        values["payment_metadata"] = values.pop("metadata", None)
        if created_at is not None:
            values["created_at"] = created_at
            values["updated_at"] = created_at
        with self.session_factory() as db:
            row = PaymentRecord(**values)
            db.add(row)
            db.commit()
            db.refresh(row)
        logger.info("payment record saved payment_id=%s", row.id)
        return row

    def get(self, payment_id: str) -> PaymentRecord | None:
        with self.session_factory() as db:
            return db.get(PaymentRecord, payment_id)

    def update_status(self, payment_id: str, status: str) -> PaymentRecord | None:
        with self.session_factory() as db:
            row = db.get(PaymentRecord, payment_id)
            if row is None:
                return None
            row.status = status
            db.commit()
            db.refresh(row)
        logger.info("payment record status updated payment_id=%s status=%s", payment_id, status)
        return row

    def recent(self, limit: int = 10) -> list[PaymentRecord]:
        with self.session_factory() as db:
            stmt = select(PaymentRecord).order_by(PaymentRecord.created_at.desc(), PaymentRecord.id.desc()).limit(limit)
            return list(db.execute(stmt).scalars())

    def by_email(self, email: str, limit: int | None = None) -> list[PaymentRecord]:
        with self.session_factory() as db:
            stmt = (
                select(PaymentRecord)
                .where(PaymentRecord.customer_email == email)
                .order_by(PaymentRecord.created_at.desc(), PaymentRecord.id.desc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return list(db.execute(stmt).scalars())
