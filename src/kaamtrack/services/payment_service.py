"""Append-only payment recording."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, tzinfo
from uuid import UUID
from zoneinfo import ZoneInfo

from kaamtrack.calculators.normalize import (
    local_date,
    normalize_amount,
    normalize_date,
    normalize_note,
    normalize_payment_type,
)
from kaamtrack.calculators.types import PaymentRecord
from kaamtrack.config import DEFAULT_TIMEZONE
from kaamtrack.errors import Failure, ValidationError
from kaamtrack.services.clock import Clock
from kaamtrack.services.worker_service import resolve_owned_worker, worker_not_found
from kaamtrack.stores.base import PaymentStore, WorkerDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentResult:
    """Result of recording a payment."""

    payment: PaymentRecord | None
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class PaymentService:
    """Records advances and settlements.

    Payments are never edited or merged. A mistake is corrected by
    recording another payment.
    """

    def __init__(
        self,
        directory: WorkerDirectory,
        payments: PaymentStore,
        clock: Clock,
        tz: tzinfo = ZoneInfo(DEFAULT_TIMEZONE),
    ):
        self.directory = directory
        self.payments = payments
        self.clock = clock
        self.tz = tz

    async def record_payment(
        self,
        *,
        owner_id: UUID,
        worker_id: UUID,
        amount: object,
        payment_type: object,
        on_date: object = None,
        note: object = None,
    ) -> PaymentResult:
        """Append a payment for one of the owner's workers.

        Inactive workers can still be paid so their balance can be settled.
        """
        now = self.clock.now()
        try:
            clean_amount = normalize_amount(amount)
            clean_type = normalize_payment_type(payment_type)
            day = local_date(now, self.tz) if on_date is None else normalize_date(on_date)
            clean_note = normalize_note(note)
        except ValidationError as exc:
            return PaymentResult(payment=None, failure=exc.to_failure())

        worker = await resolve_owned_worker(self.directory, owner_id, worker_id)
        if worker is None:
            return PaymentResult(payment=None, failure=worker_not_found(worker_id))

        stored = await self.payments.append_payment(
            PaymentRecord(
                worker_id=worker.worker_id,
                amount=clean_amount,
                payment_type=clean_type,
                date=day,
                note=clean_note,
                created_at=now,
            )
        )
        logger.info(
            "Recorded %s of %s for worker %s on %s",
            clean_type.value,
            clean_amount,
            worker_id,
            day,
        )
        return PaymentResult(payment=stored)

    async def list_payments(
        self,
        *,
        worker_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PaymentRecord]:
        return await self.payments.list_payments(worker_id, start, end)
