"""Property-based tests over random attendance and payment streams.

These use hypothesis to generate random histories and check the ledger
and attendance invariants that must hold for every one of them.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from hypothesis import given, settings, strategies as st

from kaamtrack.calculators.ledger import LedgerEngine
from kaamtrack.calculators.types import (
    AttendanceRecord,
    AttendanceStatus,
    MarkedVia,
    PaymentRecord,
    PaymentType,
)
from kaamtrack.config import QRWindowPolicy
from kaamtrack.services import (
    AttendanceService,
    DailyQRCodeStateMachine,
    FixedClock,
    QRCodeService,
    WorkerService,
)
from kaamtrack.stores import InMemoryStore

from tests.conftest import MORNING, OWNER_ID, TODAY, make_worker

amounts = st.decimals(
    min_value=Decimal("0.01"), max_value=Decimal("100000"), places=2, allow_nan=False
)
rates = st.decimals(min_value=Decimal("0"), max_value=Decimal("5000"), places=2, allow_nan=False)
statuses = st.sampled_from(list(AttendanceStatus))
payment_types = st.sampled_from(list(PaymentType))


@settings(max_examples=200, deadline=None)
@given(
    rate=rates,
    day_statuses=st.lists(statuses, max_size=40),
    payments=st.lists(st.tuples(amounts, payment_types), max_size=40),
)
def test_balance_law_holds_exactly(rate, day_statuses, payments):
    worker = make_worker(daily_rate=str(rate))
    attendance = [
        AttendanceRecord(
            worker_id=worker.worker_id,
            date=TODAY + timedelta(days=i),
            status=status,
            marked_via=MarkedVia.MANUAL,
            marked_at=MORNING,
        )
        for i, status in enumerate(day_statuses)
    ]
    payment_records = [
        PaymentRecord(worker.worker_id, amount, payment_type, TODAY)
        for amount, payment_type in payments
    ]

    stats = LedgerEngine.compute_worker_stats(worker, attendance, payment_records)

    assert stats is not None
    assert stats.balance == stats.total_earnings - stats.total_advances - stats.total_paid
    assert stats.present_days + stats.half_days + stats.absent_days == len(day_statuses)
    expected_advances = sum(
        (a for a, t in payments if t == PaymentType.ADVANCE), Decimal("0")
    )
    assert stats.total_advances == expected_advances
    assert stats.total_earnings == rate * stats.present_days + rate * stats.half_days / 2
    if rate == 0:
        assert stats.total_earnings == 0
    # Earnings are exact to half a paisa.
    assert (stats.total_earnings * 200) == int(stats.total_earnings * 200)


operations = st.lists(
    st.tuples(
        st.integers(min_value=0, max_value=2),  # worker
        st.integers(min_value=0, max_value=3),  # day offset
        st.sampled_from(["present", "absent", "half-day", "checkin"]),
    ),
    min_size=1,
    max_size=30,
)


@settings(max_examples=75, deadline=None)
@given(ops=operations)
def test_at_most_one_record_and_last_write_wins(ops):
    """Any mix of marks and check-ins leaves one record per (worker, day)."""

    async def scenario():
        store = InMemoryStore()
        clock = FixedClock(datetime(2024, 6, 10, 8, 0, tzinfo=timezone.utc))
        policy = QRWindowPolicy(timezone="UTC")
        workers = WorkerService(store, clock)
        qr_codes = QRCodeService(store, DailyQRCodeStateMachine(policy), clock)
        attendance = AttendanceService(store, store, qr_codes, clock, tz=policy.tz)

        registered = [
            (await workers.create_worker(owner_id=OWNER_ID, name=f"W{i}")).worker
            for i in range(3)
        ]
        await qr_codes.generate(OWNER_ID)

        expected = {}
        for worker_index, offset, action in ops:
            worker = registered[worker_index]
            day = TODAY + timedelta(days=offset)
            if action == "checkin":
                # Check-in always lands on today's date.
                result = await attendance.check_in(owner_id=OWNER_ID, scanned_token=worker.qr_id)
                assert result.ok
                expected[(worker.worker_id, TODAY)] = AttendanceStatus.PRESENT
            else:
                result = await attendance.mark_attendance(
                    owner_id=OWNER_ID, worker_id=worker.worker_id, status=action, on_date=day
                )
                assert result.ok
                expected[(worker.worker_id, day)] = AttendanceStatus(action)

        assert set(store.attendance) == set(expected)
        for key, status in expected.items():
            assert store.attendance[key].status == status

    asyncio.run(scenario())
