"""
Cash Flow Schedule Construction

Turns a payback horizon (in days) and a daily cash flow into a schedule of
dated inflows, sampled daily, weekly or biweekly.
"""

import logging
import math
from typing import Callable, Dict, List
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DAILY = "daily"
WEEKLY = "weekly"
BIWEEKLY = "biweekly"

FREQUENCIES = (DAILY, WEEKLY, BIWEEKLY)
DEFAULT_FREQUENCY = DAILY

# Ten years; longer horizons are not sampled into a schedule
MAX_HORIZON_DAYS = 3650


@dataclass(frozen=True)
class CashFlowEntry:
    """A single inflow received offset_days after time zero."""

    offset_days: int
    amount: float


def _can_build(horizon_days: int, daily_amount: float) -> bool:
    if horizon_days <= 0 or not math.isfinite(daily_amount) or daily_amount <= 0:
        return False
    if horizon_days > MAX_HORIZON_DAYS:
        logger.warning(
            f"Horizon of {horizon_days} days exceeds {MAX_HORIZON_DAYS}, no schedule built"
        )
        return False
    return True


def build_daily(horizon_days: int, daily_amount: float) -> List[CashFlowEntry]:
    """
    One entry per day over the horizon.

    Args:
        horizon_days: Payback horizon in days
        daily_amount: Cash received each day

    Returns:
        Entries at offsets 1..horizon_days, or an empty list if either
        argument is not strictly positive or the horizon exceeds
        MAX_HORIZON_DAYS
    """
    if not _can_build(horizon_days, daily_amount):
        return []

    return [
        CashFlowEntry(offset_days=day, amount=daily_amount)
        for day in range(1, int(horizon_days) + 1)
    ]


def _build_bucketed(
    horizon_days: int, daily_amount: float, period_days: int
) -> List[CashFlowEntry]:
    """Aggregate daily cash into buckets of period_days, plus a partial tail."""
    if not _can_build(horizon_days, daily_amount):
        return []

    horizon_days = int(horizon_days)
    full_periods, remainder = divmod(horizon_days, period_days)

    schedule = [
        CashFlowEntry(offset_days=period_days * n, amount=daily_amount * period_days)
        for n in range(1, full_periods + 1)
    ]

    if remainder:
        schedule.append(
            CashFlowEntry(offset_days=horizon_days, amount=daily_amount * remainder)
        )

    return schedule


def build_weekly(horizon_days: int, daily_amount: float) -> List[CashFlowEntry]:
    """Weekly buckets of 7 days' cash, with a trailing partial week."""
    return _build_bucketed(horizon_days, daily_amount, 7)


def build_biweekly(horizon_days: int, daily_amount: float) -> List[CashFlowEntry]:
    """Biweekly buckets of 14 days' cash, with a trailing partial period."""
    return _build_bucketed(horizon_days, daily_amount, 14)


_BUILDERS: Dict[str, Callable[[int, float], List[CashFlowEntry]]] = {
    DAILY: build_daily,
    WEEKLY: build_weekly,
    BIWEEKLY: build_biweekly,
}


def build_schedule(
    frequency: str, horizon_days: int, daily_amount: float
) -> List[CashFlowEntry]:
    """
    Build a schedule at the requested sampling frequency.

    Unknown frequencies fall back to daily sampling.
    """
    builder = _BUILDERS.get(frequency)
    if builder is None:
        logger.warning(
            f"Unknown cash flow frequency {frequency!r}, using {DEFAULT_FREQUENCY}"
        )
        builder = _BUILDERS[DEFAULT_FREQUENCY]
    return builder(horizon_days, daily_amount)


def schedule_total(schedule: List[CashFlowEntry]) -> float:
    """Sum of all amounts in a schedule."""
    return sum(entry.amount for entry in schedule)


def schedule_to_rows(schedule: List[CashFlowEntry]) -> List[Dict]:
    """
    Convert a schedule into table/chart rows with a running total.
    """
    rows = []
    cumulative = 0.0

    for period, entry in enumerate(schedule, start=1):
        cumulative += entry.amount
        rows.append(
            {
                "period": period,
                "offset_days": entry.offset_days,
                "amount": round(entry.amount, 2),
                "cumulative_amount": round(cumulative, 2),
            }
        )

    return rows
