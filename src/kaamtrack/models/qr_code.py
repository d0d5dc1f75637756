"""Owner QR code slot: exactly one current daily code per owner."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, String
from sqlalchemy.orm import Mapped, mapped_column

from kaamtrack.calculators.types import DailyQRCode
from kaamtrack.models.base import Base


class OwnerQRCodeRow(Base):
    """Current daily code for an owner. Replaced wholesale on generate."""

    __tablename__ = "owner_qr_code"

    owner_id: Mapped[UUID] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    valid_from: Mapped[dt.datetime] = mapped_column(nullable=False)
    valid_until: Mapped[dt.datetime] = mapped_column(nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(nullable=False)

    __table_args__ = (
        CheckConstraint("valid_until > valid_from", name="owner_qr_code_window_ck"),
    )

    def to_domain(self) -> DailyQRCode:
        return DailyQRCode(
            owner_id=self.owner_id,
            code=self.code,
            date=self.date,
            valid_from=self.valid_from,
            valid_until=self.valid_until,
            created_at=self.created_at,
        )
