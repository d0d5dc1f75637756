"""Error kinds and typed failure outcomes shared across the core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Recoverable error kinds surfaced by core operations."""

    WORKER_NOT_FOUND = "WORKER_NOT_FOUND"
    CODE_NOT_FOUND = "CODE_NOT_FOUND"
    CODE_EXPIRED = "CODE_EXPIRED"
    CODE_INVALID = "CODE_INVALID"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_STATUS = "INVALID_STATUS"
    INVALID_INPUT = "INVALID_INPUT"
    DUPLICATE_KEY_RACE = "DUPLICATE_KEY_RACE"


@dataclass(frozen=True)
class Failure:
    """A rejected operation: what went wrong and a message fit for a user."""

    kind: ErrorKind
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"code": self.kind.value, "detail": self.message}


class ValidationError(Exception):
    """Raised by normalization helpers when an input cannot be accepted.

    Services catch this and return it as a Failure; it never crosses
    the service boundary.
    """

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)

    def to_failure(self) -> Failure:
        return Failure(kind=self.kind, message=self.message)


class DuplicateKeyRaceError(Exception):
    """Raised by a store that cannot upsert atomically and lost an insert race."""

    def __init__(self, worker_id: object, on_date: object):
        self.worker_id = worker_id
        self.on_date = on_date
        super().__init__(
            f"Concurrent attendance write for worker {worker_id} on {on_date}"
        )


class QRIdTakenError(Exception):
    """Raised by a store when a new worker's qr_id is already in use."""

    def __init__(self, qr_id: str):
        self.qr_id = qr_id
        super().__init__(f"Worker QR id {qr_id} is already issued")
