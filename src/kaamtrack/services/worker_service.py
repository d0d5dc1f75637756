"""Worker registration, updates and soft deletion."""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID, uuid4

from kaamtrack.calculators.normalize import (
    normalize_daily_rate,
    normalize_name,
    normalize_phone,
    normalize_work_type,
)
from kaamtrack.calculators.types import Worker, WorkType
from kaamtrack.errors import ErrorKind, Failure, QRIdTakenError, ValidationError
from kaamtrack.services.clock import Clock
from kaamtrack.stores.base import WorkerDirectory

logger = logging.getLogger(__name__)

QR_ID_PREFIX = "WKR"
QR_ID_ALPHABET = string.ascii_uppercase + string.digits
QR_ID_LENGTH = 6
QR_ID_ATTEMPTS = 10


@dataclass(frozen=True)
class WorkerResult:
    """Result of a worker operation."""

    worker: Worker | None
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def worker_not_found(worker_id: object) -> Failure:
    return Failure(ErrorKind.WORKER_NOT_FOUND, f"Worker {worker_id} not found")


async def resolve_owned_worker(
    directory: WorkerDirectory, owner_id: UUID, worker_id: UUID
) -> Worker | None:
    """Look up a worker, treating other owners' workers as unknown."""
    worker = await directory.get_worker(worker_id)
    if worker is None or worker.owner_id != owner_id:
        return None
    return worker


def generate_qr_id() -> str:
    suffix = "".join(secrets.choice(QR_ID_ALPHABET) for _ in range(QR_ID_LENGTH))
    return f"{QR_ID_PREFIX}-{suffix}"


class WorkerService:
    """Owner-side worker management.

    A worker's qr_id is issued once at registration and never changes.
    Deactivation only flips `is_active`; attendance and payments stay.
    """

    def __init__(
        self,
        directory: WorkerDirectory,
        clock: Clock,
        default_daily_rate: Decimal = Decimal("500"),
    ):
        self.directory = directory
        self.clock = clock
        self.default_daily_rate = default_daily_rate

    async def _add_with_fresh_qr_id(self, worker: Worker) -> Worker | None:
        """Store `worker` under a newly drawn qr_id; None if every draw collided."""
        for _ in range(QR_ID_ATTEMPTS):
            candidate = generate_qr_id()
            if await self.directory.qr_id_exists(candidate):
                continue
            try:
                return await self.directory.add_worker(worker.with_changes(qr_id=candidate))
            except QRIdTakenError:
                logger.info("QR id %s was taken concurrently; drawing another", candidate)
        return None

    async def create_worker(
        self,
        *,
        owner_id: UUID,
        name: object,
        work_type: object = WorkType.OTHER,
        daily_rate: object = None,
        phone: object = None,
    ) -> WorkerResult:
        """Register a worker under `owner_id` and issue its permanent QR id."""
        now = self.clock.now()
        try:
            clean_name = normalize_name(name)
            clean_type = normalize_work_type(work_type)
            rate = normalize_daily_rate(
                self.default_daily_rate if daily_rate is None else daily_rate
            )
            clean_phone = normalize_phone(phone)
        except ValidationError as exc:
            return WorkerResult(worker=None, failure=exc.to_failure())

        worker = Worker(
            worker_id=uuid4(),
            owner_id=owner_id,
            name=clean_name,
            work_type=clean_type,
            daily_rate=rate,
            qr_id="",
            created_at=now,
            phone=clean_phone,
        )
        saved = await self._add_with_fresh_qr_id(worker)
        if saved is None:
            logger.warning("Gave up issuing a QR id for owner %s", owner_id)
            return WorkerResult(
                worker=None,
                failure=Failure(
                    ErrorKind.DUPLICATE_KEY_RACE, "Could not issue a unique worker QR id"
                ),
            )
        logger.info(
            "Registered worker %s (%s) for owner %s", saved.worker_id, saved.qr_id, owner_id
        )
        return WorkerResult(worker=saved)

    async def update_worker(
        self,
        *,
        owner_id: UUID,
        worker_id: UUID,
        name: object = None,
        work_type: object = None,
        daily_rate: object = None,
        phone: object = None,
        is_active: bool | None = None,
    ) -> WorkerResult:
        """Apply the given changes; None leaves a field as is, "" clears the phone."""
        worker = await resolve_owned_worker(self.directory, owner_id, worker_id)
        if worker is None:
            return WorkerResult(worker=None, failure=worker_not_found(worker_id))

        changes: dict[str, object] = {}
        try:
            if name is not None:
                changes["name"] = normalize_name(name)
            if work_type is not None:
                changes["work_type"] = normalize_work_type(work_type)
            if daily_rate is not None:
                changes["daily_rate"] = normalize_daily_rate(daily_rate)
            if phone is not None:
                changes["phone"] = normalize_phone(phone)
        except ValidationError as exc:
            return WorkerResult(worker=None, failure=exc.to_failure())
        if is_active is not None:
            changes["is_active"] = is_active

        if not changes:
            return WorkerResult(worker=worker)
        saved = await self.directory.save_worker(worker.with_changes(**changes))
        logger.info("Updated worker %s: %s", worker_id, ", ".join(sorted(changes)))
        return WorkerResult(worker=saved)

    async def deactivate_worker(self, *, owner_id: UUID, worker_id: UUID) -> WorkerResult:
        """Soft delete. Idempotent; history is left untouched."""
        worker = await resolve_owned_worker(self.directory, owner_id, worker_id)
        if worker is None:
            return WorkerResult(worker=None, failure=worker_not_found(worker_id))
        if not worker.is_active:
            return WorkerResult(worker=worker)
        saved = await self.directory.save_worker(worker.with_changes(is_active=False))
        logger.info("Deactivated worker %s for owner %s", worker_id, owner_id)
        return WorkerResult(worker=saved)

    async def get_worker(self, *, owner_id: UUID, worker_id: UUID) -> WorkerResult:
        worker = await resolve_owned_worker(self.directory, owner_id, worker_id)
        if worker is None:
            return WorkerResult(worker=None, failure=worker_not_found(worker_id))
        return WorkerResult(worker=worker)

    async def list_active_workers(self, owner_id: UUID) -> list[Worker]:
        return await self.directory.list_active_workers(owner_id)

    async def list_workers(self, owner_id: UUID, *, include_inactive: bool = False) -> list[Worker]:
        if include_inactive:
            return await self.directory.list_workers(owner_id)
        return await self.directory.list_active_workers(owner_id)
