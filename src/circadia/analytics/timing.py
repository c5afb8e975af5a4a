"""Sleep timing regularity across a history of sessions."""

from __future__ import annotations

from typing import Sequence

from circadia.models import SleepSession, SleepTimingAnalysis
from circadia.analytics.circular import (
    circular_mean,
    circular_std,
    hour_of_day,
    is_weekend,
    wrap_hours,
)

# Combined bedtime + wake-time variation (hours) at which consistency hits 0
CONSISTENCY_SPAN_HOURS = 4.0


def timing_consistency(bedtime_variation: float, wake_time_variation: float) -> float:
    """``1 - (bv + wv) / 4`` clamped to [0, 1]."""
    c = 1.0 - (bedtime_variation + wake_time_variation) / CONSISTENCY_SPAN_HOURS
    return max(0.0, min(1.0, c))


def weekday_weekend_shift(
    sessions: Sequence[SleepSession],
    utc_offset_hours: float = 0.0,
) -> float:
    """Weekend minus weekday mean bedtime, in (-12, 12] hours.

    Sessions are split by the calendar weekday of their start.  Returns 0.0
    unless both groups are non-empty.
    """
    weekday: list[float] = []
    weekend: list[float] = []
    for s in sessions:
        bed = hour_of_day(s.start_time, utc_offset_hours)
        if is_weekend(s.start_time, utc_offset_hours):
            weekend.append(bed)
        else:
            weekday.append(bed)

    if not weekday or not weekend:
        return 0.0
    return wrap_hours(circular_mean(weekend) - circular_mean(weekday))


def analyze_sleep_timing(
    history: Sequence[SleepSession],
    utc_offset_hours: float = 0.0,
) -> SleepTimingAnalysis:
    """Circular bedtime / wake-time statistics over completed sessions."""
    sessions = [s for s in history if s.end_time is not None]
    if not sessions:
        return SleepTimingAnalysis()

    bedtimes = [hour_of_day(s.start_time, utc_offset_hours) for s in sessions]
    wake_times = [hour_of_day(s.end_time, utc_offset_hours) for s in sessions]

    bv = circular_std(bedtimes)
    wv = circular_std(wake_times)

    return SleepTimingAnalysis(
        average_bedtime=circular_mean(bedtimes),
        average_wake_time=circular_mean(wake_times),
        bedtime_variation=bv,
        wake_time_variation=wv,
        consistency=timing_consistency(bv, wv),
        weekday_weekend_shift=weekday_weekend_shift(sessions, utc_offset_hours),
        session_count=len(sessions),
    )
