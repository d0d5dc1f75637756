"""Tests for the daily QR code state machine."""

from datetime import datetime, time, timedelta, timezone
from uuid import uuid4

import pytest

from kaamtrack.config import QRWindowPolicy, WindowMode
from kaamtrack.errors import ErrorKind, ValidationError
from kaamtrack.services import QRCodeService
from kaamtrack.services.state_machine import DailyQRCodeStateMachine, QRCodeState
from kaamtrack.stores import InMemoryStore

from tests.conftest import OWNER_ID, TODAY, TickingClock


def at(hour: int, minute: int = 0, second: int = 0, day_offset: int = 0) -> datetime:
    return datetime(2024, 6, 10, hour, minute, second, tzinfo=timezone.utc) + timedelta(
        days=day_offset
    )


class TestDailyQRCodeStateMachine:
    """Window, rollover and replacement behaviour."""

    def test_generate_uses_fixed_morning_window(self, machine: DailyQRCodeStateMachine):
        code = machine.generate(OWNER_ID, at(6, 30))

        assert code.date == TODAY
        assert code.valid_from == at(7)
        assert code.valid_until == at(11)
        assert code.code.startswith("KAAM-2024-06-10-")
        assert code.owner_id == OWNER_ID

    def test_validate_inside_and_after_window(self, machine: DailyQRCodeStateMachine):
        """Generated on D: 08:00 validates, 12:00 has expired."""
        code = machine.generate(OWNER_ID, at(7, 30))

        assert machine.validate(code, at(8)).ok

        late = machine.validate(code, at(12))
        assert not late.ok
        assert late.failure.kind == ErrorKind.CODE_EXPIRED
        assert "expired at 11:00" in late.failure.message

    def test_window_edges_are_inclusive(self, machine: DailyQRCodeStateMachine):
        code = machine.generate(OWNER_ID, at(9))

        assert machine.validate(code, at(7)).ok
        assert machine.validate(code, at(11)).ok
        assert not machine.validate(code, at(11) + timedelta(microseconds=1)).ok

    def test_before_window_opens(self, machine: DailyQRCodeStateMachine):
        code = machine.generate(OWNER_ID, at(6))

        result = machine.validate(code, at(6, 30))

        assert result.failure.kind == ErrorKind.CODE_EXPIRED
        assert "opens at 07:00" in result.failure.message
        assert machine.state_of(code, at(6, 30)) == QRCodeState.CODE_EXPIRED

    def test_no_code_is_not_found(self, machine: DailyQRCodeStateMachine):
        result = machine.validate(None, at(8))

        assert result.failure.kind == ErrorKind.CODE_NOT_FOUND
        assert machine.state_of(None, at(8)) == QRCodeState.NO_CODE

    def test_date_rollover_resets_to_no_code(self, machine: DailyQRCodeStateMachine):
        code = machine.generate(OWNER_ID, at(8))

        next_morning = at(8, day_offset=1)

        assert machine.state_of(code, next_morning) == QRCodeState.NO_CODE
        result = machine.validate(code, next_morning)
        assert result.failure.kind == ErrorKind.CODE_EXPIRED

    def test_regenerate_replaces_previous_code(self, machine: DailyQRCodeStateMachine):
        first = machine.generate(OWNER_ID, at(8))
        second = machine.generate(OWNER_ID, at(9))

        assert first.code != second.code
        # The slot now holds `second`; the old string no longer matches it.
        stale = machine.validate(second, at(9, 30), scanned_code=first.code)
        assert stale.failure.kind == ErrorKind.CODE_INVALID
        assert machine.validate(second, at(9, 30), scanned_code=second.code).ok

    def test_validate_does_not_mutate(self, machine: DailyQRCodeStateMachine):
        code = machine.generate(OWNER_ID, at(8))

        machine.validate(code, at(12))

        assert machine.validate(code, at(8, 30)).ok

    def test_default_tokens_are_unguessable(self, policy: QRWindowPolicy):
        machine = DailyQRCodeStateMachine(policy)
        codes = {machine.generate(uuid4(), at(8)).code for _ in range(50)}

        assert len(codes) == 50

    def test_naive_instant_rejected(self, machine: DailyQRCodeStateMachine):
        with pytest.raises(ValidationError):
            machine.generate(OWNER_ID, datetime(2024, 6, 10, 8, 0))


class TestWindowPolicies:
    def test_rolling_window_starts_at_generation(self):
        machine = DailyQRCodeStateMachine(
            QRWindowPolicy(mode=WindowMode.ROLLING, duration_minutes=30, timezone="UTC")
        )
        code = machine.generate(OWNER_ID, at(14))

        assert code.valid_from == at(14)
        assert code.valid_until == at(14, 30)
        assert machine.validate(code, at(14, 15)).ok
        assert not machine.validate(code, at(14, 31)).ok

    def test_window_follows_business_timezone(self):
        """07:00 in Kolkata is 01:30 UTC."""
        machine = DailyQRCodeStateMachine(QRWindowPolicy(timezone="Asia/Kolkata"))
        code = machine.generate(OWNER_ID, at(2))

        assert code.valid_from == at(1, 30)
        assert code.valid_until == at(5, 30)

    def test_custom_start_time(self):
        machine = DailyQRCodeStateMachine(
            QRWindowPolicy(window_start=time(6, 0), duration_minutes=60, timezone="UTC")
        )
        code = machine.generate(OWNER_ID, at(6, 10))

        assert (code.valid_from, code.valid_until) == (at(6), at(7))

    @pytest.mark.parametrize("minutes", [0, -5, 1441])
    def test_invalid_duration_rejected(self, minutes):
        with pytest.raises(ValueError):
            QRWindowPolicy(duration_minutes=minutes)


class TestQRCodeService:
    async def test_generate_reports_state_at_issue_time(
        self, store: InMemoryStore, machine: DailyQRCodeStateMachine
    ):
        """A code issued just before the window closes is reported active."""
        service = QRCodeService(store, machine, TickingClock(at(10, 59, 30)))

        issued = await service.generate(OWNER_ID)

        assert issued.state == QRCodeState.CODE_ACTIVE
        assert issued.code == await store.get_current_code(OWNER_ID)
        assert issued.code.valid_until == at(11)
