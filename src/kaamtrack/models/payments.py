"""Payment model. Append-only: rows are never updated or deleted."""

from __future__ import annotations

import datetime as dt
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, CheckConstraint, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from kaamtrack.calculators.money import from_minor
from kaamtrack.calculators.types import PaymentRecord, PaymentType
from kaamtrack.models.base import Base, TimestampMixin


class PaymentRow(Base, TimestampMixin):
    """Money given to a worker (advance, settlement, bonus) or withheld (deduction)."""

    __tablename__ = "payment"

    payment_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    worker_id: Mapped[UUID] = mapped_column(
        ForeignKey("worker.worker_id", ondelete="RESTRICT"),
        nullable=False,
    )
    amount_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    payment_type: Mapped[str] = mapped_column(String(10), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    note: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        CheckConstraint("amount_minor > 0", name="payment_amount_ck"),
        CheckConstraint(
            "payment_type IN ('advance', 'payment', 'bonus', 'deduction')",
            name="payment_type_ck",
        ),
        Index("ix_payment_worker_date", "worker_id", "date"),
    )

    def to_domain(self) -> PaymentRecord:
        return PaymentRecord(
            worker_id=self.worker_id,
            amount=from_minor(self.amount_minor),
            payment_type=PaymentType(self.payment_type),
            date=self.date,
            note=self.note,
            created_at=self.created_at,
            payment_id=self.payment_id,
        )
