"""Storage backends for workers, attendance, payments and QR code slots."""

from kaamtrack.stores.base import (
    AttendanceStore,
    PaymentStore,
    QRCodeSlotStore,
    UpsertResult,
    WorkerDirectory,
)
from kaamtrack.stores.memory import InMemoryStore
from kaamtrack.stores.sql import SqlStore

__all__ = [
    "AttendanceStore",
    "InMemoryStore",
    "PaymentStore",
    "QRCodeSlotStore",
    "SqlStore",
    "UpsertResult",
    "WorkerDirectory",
]
