"""Daily QR code state machine.

One current code per owner. The code value lives in the owner's slot and is
passed in explicitly; the machine itself holds only the window policy.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable
from uuid import UUID

from kaamtrack.calculators.normalize import local_date, require_aware
from kaamtrack.calculators.types import DailyQRCode
from kaamtrack.config import QRWindowPolicy
from kaamtrack.errors import ErrorKind, Failure

CODE_PREFIX = "KAAM"


class QRCodeState(str, Enum):
    """Daily QR code states for one owner."""

    NO_CODE = "no_code"
    CODE_ACTIVE = "code_active"
    CODE_EXPIRED = "code_expired"


@dataclass(frozen=True)
class QRValidation:
    """Result of checking a code against the owner's current code."""

    code: DailyQRCode | None
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def default_token() -> str:
    return secrets.token_urlsafe(12)


class DailyQRCodeStateMachine:
    """State machine for the owner's daily check-in code.

    States:
    - no_code: nothing generated, or the stored code belongs to an earlier day
    - code_active: generated for today and now is inside [valid_from, valid_until]
    - code_expired: generated for today but now is outside the window

    Transitions:
    - generate(): any state -> code_active (replaces the previous code)
    - date rollover: any state -> no_code
    """

    def __init__(
        self,
        policy: QRWindowPolicy,
        token_factory: Callable[[], str] = default_token,
    ):
        self.policy = policy
        self._token_factory = token_factory

    def today(self, now: datetime) -> date:
        return local_date(now, self.policy.tz)

    def state_of(self, current: DailyQRCode | None, now: datetime) -> QRCodeState:
        """Classify the owner's current code at instant `now`."""
        if current is None or current.date != self.today(now):
            return QRCodeState.NO_CODE
        if current.valid_from <= now <= current.valid_until:
            return QRCodeState.CODE_ACTIVE
        return QRCodeState.CODE_EXPIRED

    def generate(self, owner_id: UUID, now: datetime) -> DailyQRCode:
        """Create a fresh code for today. The caller stores it, replacing any prior code."""
        require_aware(now)
        today = self.today(now)
        valid_from, valid_until = self.policy.window_for(now)
        return DailyQRCode(
            owner_id=owner_id,
            code=f"{CODE_PREFIX}-{today.isoformat()}-{self._token_factory()}",
            date=today,
            valid_from=valid_from,
            valid_until=valid_until,
            created_at=now,
        )

    def validate(
        self,
        current: DailyQRCode | None,
        now: datetime,
        scanned_code: str | None = None,
    ) -> QRValidation:
        """Check a code without mutating anything.

        When `scanned_code` is given it must equal the current code string.
        When omitted, only the current code's validity window is checked.
        """
        if current is None:
            return QRValidation(
                code=None,
                failure=Failure(ErrorKind.CODE_NOT_FOUND, "No QR code has been generated"),
            )
        if scanned_code is not None and not secrets.compare_digest(
            scanned_code.strip().encode(), current.code.encode()
        ):
            return QRValidation(
                code=None,
                failure=Failure(ErrorKind.CODE_INVALID, "QR code does not match today's code"),
            )

        state = self.state_of(current, now)
        if state == QRCodeState.NO_CODE:
            return QRValidation(
                code=current,
                failure=Failure(
                    ErrorKind.CODE_EXPIRED,
                    f"QR code was generated for {current.date.isoformat()}; generate today's code",
                ),
            )
        if state == QRCodeState.CODE_EXPIRED:
            if now < current.valid_from:
                message = f"QR check-in opens at {self._local_time(current.valid_from)}"
            else:
                message = f"QR code expired at {self._local_time(current.valid_until)}"
            return QRValidation(
                code=current,
                failure=Failure(ErrorKind.CODE_EXPIRED, message),
            )
        return QRValidation(code=current)

    def _local_time(self, instant: datetime) -> str:
        return instant.astimezone(self.policy.tz).strftime("%H:%M")
