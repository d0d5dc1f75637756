"""Fixed-point money helpers.

Amounts travel as major-unit Decimals (rupees) at the boundary and are
summed as integer minor units (paise) inside the ledger, so repeated
summation never drifts. Half-day wages can land on half a paisa, which is
why earnings are accumulated in half-minor units.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

MINOR_PER_MAJOR = 100
CENT = Decimal("0.01")


def to_minor(amount: Decimal) -> int:
    """Convert a major-unit amount to integer minor units.

    Raises ValueError if the amount carries precision below one minor unit.
    """
    try:
        scaled = Decimal(amount) * MINOR_PER_MAJOR
        integral = scaled.to_integral_value()
    except InvalidOperation as exc:
        raise ValueError(f"Not a finite amount: {amount!r}") from exc
    if scaled != integral:
        raise ValueError(f"Amount {amount} has more than 2 decimal places")
    return int(integral)


def from_minor(minor: int) -> Decimal:
    """Convert integer minor units back to a 2dp major-unit Decimal."""
    return (Decimal(minor) / MINOR_PER_MAJOR).quantize(CENT)


def from_half_minor(half_minor: int) -> Decimal:
    """Convert half-minor units to a major-unit Decimal without rounding.

    Whole-paisa values come back at 2dp; half-paisa values keep the
    extra digit rather than being rounded away.
    """
    value = Decimal(half_minor) / (2 * MINOR_PER_MAJOR)
    quantized = value.quantize(CENT)
    return quantized if quantized == value else value


def sum_minor(amounts: list[Decimal]) -> int:
    return sum((to_minor(a) for a in amounts), 0)
