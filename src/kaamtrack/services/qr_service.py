"""Owner daily QR code issuance and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from kaamtrack.calculators.types import DailyQRCode
from kaamtrack.services.clock import Clock
from kaamtrack.services.state_machine import (
    DailyQRCodeStateMachine,
    QRCodeState,
    QRValidation,
)
from kaamtrack.stores.base import QRCodeSlotStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QRCodeStatus:
    """The owner's current code and its state at the time of asking."""

    code: DailyQRCode | None
    state: QRCodeState

    @property
    def is_active(self) -> bool:
        return self.state == QRCodeState.CODE_ACTIVE


class QRCodeService:
    """Keeps one current code per owner in the slot store."""

    def __init__(
        self,
        slots: QRCodeSlotStore,
        machine: DailyQRCodeStateMachine,
        clock: Clock,
    ):
        self.slots = slots
        self.machine = machine
        self.clock = clock

    async def generate(self, owner_id: UUID) -> QRCodeStatus:
        """Issue today's code, replacing whatever the owner had before.

        The returned state is judged at the same instant the code was issued.
        """
        now = self.clock.now()
        code = self.machine.generate(owner_id, now)
        stored = await self.slots.replace_current_code(code)
        logger.info(
            "Generated QR code for owner %s valid %s..%s",
            owner_id,
            stored.valid_from.isoformat(),
            stored.valid_until.isoformat(),
        )
        return QRCodeStatus(code=stored, state=self.machine.state_of(stored, now))

    async def current(self, owner_id: UUID) -> QRCodeStatus:
        now = self.clock.now()
        code = await self.slots.get_current_code(owner_id)
        return QRCodeStatus(code=code, state=self.machine.state_of(code, now))

    async def validate(self, owner_id: UUID, scanned_code: str | None = None) -> QRValidation:
        return await self.validate_at(owner_id, self.clock.now(), scanned_code)

    async def validate_at(
        self,
        owner_id: UUID,
        now: datetime,
        scanned_code: str | None = None,
    ) -> QRValidation:
        """Validate against the owner's slot at a caller-supplied instant."""
        code = await self.slots.get_current_code(owner_id)
        return self.machine.validate(code, now, scanned_code)
