"""Flat-rate, time-bucketed parking billing.

A stay is billed in whole 15-minute increments, rounded up, at a fixed price
per increment. Elapsed time below one microsecond is treated as no stay at all.
"""
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Tuple

INCREMENT_MINUTES = 15.0
RATE_PER_INCREMENT = Decimal("2.50")
CENTS = Decimal("0.01")

# 1 microsecond, in minutes
ZERO_CHARGE_THRESHOLD_MINUTES = 1.0e-6 / 60.0
# 1 millisecond, in minutes. Absorbs clock jitter so that a stay of exactly
# N * 15 minutes is billed N increments and not N + 1.
BOUNDARY_EPSILON_MINUTES = 0.001 / 60.0

ZERO_CHARGE = Decimal("0.00")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_minutes(entry_time: datetime, now: datetime) -> float:
    return (_as_utc(now) - _as_utc(entry_time)).total_seconds() / 60.0


def reported_minutes(total_minutes: float) -> int:
    """Nearest whole minute, halves rounded up. Negative durations report 0."""
    if total_minutes <= 0:
        return 0
    return math.floor(total_minutes + 0.5)


def billable_increments(total_minutes: float) -> int:
    if total_minutes < ZERO_CHARGE_THRESHOLD_MINUTES:
        return 0

    adjusted_minutes = max(total_minutes - BOUNDARY_EPSILON_MINUTES, 0.0)
    increments = math.ceil(adjusted_minutes / INCREMENT_MINUTES)

    # Any positive, non-negligible stay pays at least one increment
    if increments == 0:
        increments = 1
    return increments


def calculate_charge(entry_time: datetime, now: datetime) -> Tuple[int, Decimal]:
    """Return ``(parked_minutes, charge)`` for a stay from entry_time to now.

    ``parked_minutes`` is the raw elapsed time rounded to the nearest minute and
    is informational only. The charge is based on the rounded-up increments.
    """
    total_minutes = elapsed_minutes(entry_time, now)
    increments = billable_increments(total_minutes)
    if increments == 0:
        return 0, ZERO_CHARGE

    charge = (RATE_PER_INCREMENT * increments).quantize(CENTS)
    return reported_minutes(total_minutes), charge
