"""Attendance reconciliation: manual marking and QR check-in.

Every write goes through the store's atomic upsert on (worker_id, date),
so repeated or concurrent marks for the same key leave exactly one record
holding the last status written.

QR check-in binding: the scanned payload is the worker's permanent qr_id.
The owner's current daily code must be active at the moment of the scan.
A repeat scan is folded into the stored record inside that same atomic
upsert, so of several simultaneous scans exactly one reports a fresh check-in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, tzinfo
from uuid import UUID
from zoneinfo import ZoneInfo

from kaamtrack.calculators.normalize import (
    local_date,
    normalize_date,
    normalize_marked_via,
    normalize_note,
    normalize_status,
    require_aware,
)
from kaamtrack.calculators.types import (
    AttendanceRecord,
    AttendanceStatus,
    MarkedVia,
    Worker,
)
from kaamtrack.config import DEFAULT_TIMEZONE
from kaamtrack.errors import DuplicateKeyRaceError, ErrorKind, Failure, ValidationError
from kaamtrack.services.clock import Clock
from kaamtrack.services.qr_service import QRCodeService
from kaamtrack.services.worker_service import resolve_owned_worker, worker_not_found
from kaamtrack.stores.base import AttendanceStore, WorkerDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceResult:
    """Result of a manual mark.

    `is_new` is False when an existing record for the same day was overwritten.
    """

    record: AttendanceRecord | None
    is_new: bool = False
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class CheckInResult:
    """Result of a QR check-in.

    IMPORTANT: a repeat scan is a success with `already_marked=True`; it
    never creates a second record.
    """

    record: AttendanceRecord | None
    worker: Worker | None = None
    already_marked: bool = False
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def message(self) -> str:
        if self.failure is not None:
            return self.failure.message
        if self.already_marked:
            return "Attendance already marked"
        return "Attendance marked"


def _race_failure(exc: DuplicateKeyRaceError) -> Failure:
    return Failure(ErrorKind.DUPLICATE_KEY_RACE, str(exc))


def merge_check_in(previous: AttendanceRecord, scan: AttendanceRecord) -> AttendanceRecord:
    """Fold a QR scan into the record already stored for that day.

    A worker already present keeps their first check-in and any check-out;
    the scan only refreshes `marked_at`. Any other status is replaced by the
    scan. The note is always kept.
    """
    if previous.status == AttendanceStatus.PRESENT:
        return replace(
            scan,
            check_in_at=previous.check_in_at or scan.check_in_at,
            check_out_at=previous.check_out_at,
            note=previous.note,
        )
    return replace(scan, note=previous.note)


class AttendanceService:
    """Writes attendance records for an owner's workers."""

    def __init__(
        self,
        directory: WorkerDirectory,
        attendance: AttendanceStore,
        qr_codes: QRCodeService,
        clock: Clock,
        tz: tzinfo = ZoneInfo(DEFAULT_TIMEZONE),
    ):
        self.directory = directory
        self.attendance = attendance
        self.qr_codes = qr_codes
        self.clock = clock
        self.tz = tz

    async def mark_attendance(
        self,
        *,
        owner_id: UUID,
        worker_id: UUID,
        status: object,
        on_date: object = None,
        via: object = MarkedVia.MANUAL,
        check_in_at: datetime | None = None,
        check_out_at: datetime | None = None,
        note: object = None,
    ) -> AttendanceResult:
        """Upsert the (worker, date) record with no QR window check.

        Deactivated workers can still be marked so past days can be corrected.
        """
        now = self.clock.now()
        try:
            clean_status = normalize_status(status)
            clean_via = normalize_marked_via(via)
            day = local_date(now, self.tz) if on_date is None else normalize_date(on_date)
            clean_note = normalize_note(note)
            if check_in_at is not None:
                require_aware(check_in_at)
            if check_out_at is not None:
                require_aware(check_out_at)
            if check_in_at and check_out_at and check_out_at < check_in_at:
                raise ValidationError(
                    ErrorKind.INVALID_INPUT, "Check-out cannot be before check-in"
                )
        except ValidationError as exc:
            return AttendanceResult(record=None, failure=exc.to_failure())

        worker = await resolve_owned_worker(self.directory, owner_id, worker_id)
        if worker is None:
            return AttendanceResult(record=None, failure=worker_not_found(worker_id))

        try:
            result = await self.attendance.upsert_attendance(
                AttendanceRecord(
                    worker_id=worker.worker_id,
                    date=day,
                    status=clean_status,
                    marked_via=clean_via,
                    marked_at=now,
                    check_in_at=check_in_at,
                    check_out_at=check_out_at,
                    note=clean_note,
                    created_at=now,
                )
            )
        except DuplicateKeyRaceError as exc:
            return AttendanceResult(record=None, failure=_race_failure(exc))

        logger.info(
            "Marked worker %s %s on %s via %s",
            worker_id,
            clean_status.value,
            day,
            clean_via.value,
        )
        return AttendanceResult(record=result.record, is_new=result.is_new)

    async def check_in(self, *, owner_id: UUID, scanned_token: str) -> CheckInResult:
        """Mark the scanned worker present for today.

        Fails with WORKER_NOT_FOUND for unknown or inactive qr ids, and with
        CODE_NOT_FOUND / CODE_EXPIRED when the owner has no active daily
        code. Failures are terminal for the attempt; nothing is retried.
        """
        now = self.clock.now()
        token = (scanned_token or "").strip()

        worker = await self.directory.find_worker_by_qr_id(owner_id, token) if token else None
        if worker is None or not worker.is_active:
            logger.warning("Rejected check-in for owner %s: unknown token", owner_id)
            return CheckInResult(
                record=None,
                failure=Failure(ErrorKind.WORKER_NOT_FOUND, "Worker not found for scanned code"),
            )

        validation = await self.qr_codes.validate_at(owner_id, now)
        if validation.failure is not None:
            logger.warning(
                "Rejected check-in for worker %s: %s",
                worker.worker_id,
                validation.failure.kind.value,
            )
            return CheckInResult(record=None, worker=worker, failure=validation.failure)

        day = self.qr_codes.machine.today(now)
        try:
            result = await self.attendance.upsert_attendance(
                AttendanceRecord(
                    worker_id=worker.worker_id,
                    date=day,
                    status=AttendanceStatus.PRESENT,
                    marked_via=MarkedVia.QR,
                    marked_at=now,
                    check_in_at=now,
                    created_at=now,
                ),
                merge=merge_check_in,
            )
        except DuplicateKeyRaceError as exc:
            return CheckInResult(record=None, worker=worker, failure=_race_failure(exc))

        already_present = (
            result.previous is not None and result.previous.status == AttendanceStatus.PRESENT
        )
        if already_present:
            logger.info("Repeat check-in for worker %s on %s", worker.worker_id, day)
        else:
            logger.info("Checked in worker %s on %s", worker.worker_id, day)
        return CheckInResult(record=result.record, worker=worker, already_marked=already_present)

    async def list_attendance(
        self,
        *,
        worker_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AttendanceRecord]:
        return await self.attendance.list_attendance(worker_id, start, end)

    async def list_for_date(self, owner_id: UUID, on_date: date) -> list[AttendanceRecord]:
        return await self.attendance.list_attendance_for_date(owner_id, on_date)

    def today(self) -> date:
        return local_date(self.clock.now(), self.tz)
