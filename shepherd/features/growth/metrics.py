"""
Growth metrics aggregation.

All functions here are pure: given the same inputs and the same ``now`` they
return the same metrics.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone

SECONDS_PER_DAY = 86400
DAYS_PER_WEEK = 7
MAX_ATTENDANCE_RATE = 100.0


@dataclass(frozen=True)
class ActivityCounters:
    """Raw counters fetched from storage for one member."""
    present_count: int = 0
    ministry_activity_count: int = 0


@dataclass(frozen=True)
class GrowthMetrics:
    tenure_days: int
    attendance_rate: float
    ministry_activity_count: int


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def tenure_days(joined_at: datetime | None, now: datetime) -> int:
    """Whole days since joining; 0 when the join date is unknown or in the future."""
    if joined_at is None:
        return 0
    elapsed = (_as_utc(now) - _as_utc(joined_at)).total_seconds()
    return max(0, math.floor(elapsed / SECONDS_PER_DAY))


def attendance_rate(present_count: int, tenure: int) -> float:
    """
    Attendance normalized against one expected attendance per week.

    ``max(1, weeks)`` keeps brand-new members from dividing by zero; the result
    is clamped to [0, 100].
    """
    expected = max(1.0, tenure / DAYS_PER_WEEK)
    rate = (max(0, present_count) / expected) * 100
    return min(MAX_ATTENDANCE_RATE, max(0.0, rate))


def metrics_for(joined_at: datetime | None, counters: ActivityCounters, now: datetime) -> GrowthMetrics:
    tenure = tenure_days(joined_at, now)
    return GrowthMetrics(
        tenure_days=tenure,
        attendance_rate=attendance_rate(counters.present_count, tenure),
        ministry_activity_count=counters.ministry_activity_count,
    )
