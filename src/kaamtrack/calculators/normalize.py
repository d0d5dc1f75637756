"""Normalization helpers for values entering the core.

Each helper accepts the loose shapes callers tend to send (strings, ints,
enum members) and returns the canonical value or raises ValidationError.
"""

from __future__ import annotations

import re
from datetime import date, datetime, tzinfo
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import TypeVar

from kaamtrack.calculators.money import CENT
from kaamtrack.calculators.types import (
    AttendanceStatus,
    MarkedVia,
    PaymentType,
    WorkType,
)
from kaamtrack.errors import ErrorKind, ValidationError

E = TypeVar("E", bound=Enum)

MAX_NAME_LENGTH = 120
MAX_NOTE_LENGTH = 500
_PHONE_RE = re.compile(r"^\+?\d{7,15}$")

_STATUS_ALIASES = {
    "half_day": AttendanceStatus.HALF_DAY,
    "halfday": AttendanceStatus.HALF_DAY,
    "half": AttendanceStatus.HALF_DAY,
}


def _coerce_enum(enum_cls: type[E], value: object, kind: ErrorKind, label: str) -> E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(str(m.value) for m in enum_cls)
    raise ValidationError(kind, f"Invalid {label} {value!r}; expected one of: {allowed}")


def normalize_status(value: object) -> AttendanceStatus:
    if isinstance(value, str) and value.strip().lower() in _STATUS_ALIASES:
        return _STATUS_ALIASES[value.strip().lower()]
    return _coerce_enum(AttendanceStatus, value, ErrorKind.INVALID_STATUS, "status")


def normalize_marked_via(value: object) -> MarkedVia:
    return _coerce_enum(MarkedVia, value, ErrorKind.INVALID_INPUT, "marked_via")


def normalize_payment_type(value: object) -> PaymentType:
    return _coerce_enum(PaymentType, value, ErrorKind.INVALID_INPUT, "payment type")


def normalize_work_type(value: object) -> WorkType:
    return _coerce_enum(WorkType, value, ErrorKind.INVALID_INPUT, "work type")


def _to_decimal(value: object) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(ErrorKind.INVALID_AMOUNT, f"Invalid amount {value!r}")
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(value)  # type: ignore[arg-type]
        if not amount.is_finite():
            raise InvalidOperation
        quantized = amount.quantize(CENT)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(ErrorKind.INVALID_AMOUNT, f"Invalid amount {value!r}")
    if amount != quantized:
        raise ValidationError(
            ErrorKind.INVALID_AMOUNT, f"Amount {value} has more than 2 decimal places"
        )
    return quantized


def normalize_amount(value: object) -> Decimal:
    """Payment amount: strictly positive, at most 2 decimal places."""
    amount = _to_decimal(value)
    if amount <= 0:
        raise ValidationError(ErrorKind.INVALID_AMOUNT, "Amount must be greater than zero")
    return amount


def normalize_daily_rate(value: object) -> Decimal:
    """Daily rate: zero or positive, at most 2 decimal places."""
    rate = _to_decimal(value)
    if rate < 0:
        raise ValidationError(ErrorKind.INVALID_AMOUNT, "Daily rate cannot be negative")
    return rate


def normalize_date(value: object) -> date:
    """Accept a date or an ISO `YYYY-MM-DD` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError(ErrorKind.INVALID_INPUT, f"Invalid date {value!r}; expected YYYY-MM-DD")


def normalize_name(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(ErrorKind.INVALID_INPUT, "Worker name is required")
    name = " ".join(value.split())
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            ErrorKind.INVALID_INPUT, f"Worker name exceeds {MAX_NAME_LENGTH} characters"
        )
    return name


def normalize_phone(value: object) -> str | None:
    """Strip separators; empty means no phone."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(ErrorKind.INVALID_INPUT, f"Invalid phone {value!r}")
    phone = re.sub(r"[\s\-().]", "", value)
    if not phone:
        return None
    if not _PHONE_RE.match(phone):
        raise ValidationError(ErrorKind.INVALID_INPUT, f"Invalid phone {value!r}")
    return phone


def normalize_note(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(ErrorKind.INVALID_INPUT, "Note must be text")
    note = value.strip()
    if len(note) > MAX_NOTE_LENGTH:
        raise ValidationError(
            ErrorKind.INVALID_INPUT, f"Note exceeds {MAX_NOTE_LENGTH} characters"
        )
    return note or None


def require_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValidationError(ErrorKind.INVALID_INPUT, "Timestamp must be timezone-aware")
    return instant


def local_date(instant: datetime, tz: tzinfo) -> date:
    """Calendar date of an aware instant in the business timezone."""
    return require_aware(instant).astimezone(tz).date()
