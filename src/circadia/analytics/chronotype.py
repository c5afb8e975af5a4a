"""Chronotype classification and the schedule it implies.

The chronotype is read off the habitual mid-sleep time: the circular mean
of past sessions' midpoints, expressed relative to midnight so that a
23:30 midpoint counts as -0.5 h.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from circadia.models import Chronotype, SleepSession
from circadia.analytics.circular import (
    HOURS_PER_DAY,
    circular_mean,
    hour_of_day,
    normalize_hour,
)

# Sessions needed before departing from NEUTRAL
MIN_SESSIONS = 3

# Mid-sleep boundaries (hours after midnight)
EARLY_MIDSLEEP = 2.0
LATE_MIDSLEEP = 4.5

# Neutral schedule
BASELINE_BEDTIME = 22.5
BASELINE_SLEEP_HOURS = 8.0


@dataclass(frozen=True)
class ChronotypeAdjustment:
    """Fixed offsets applied to the neutral schedule."""

    schedule_shift_hours: float
    extra_sleep_minutes: float


ADJUSTMENTS = {
    Chronotype.EARLY_BIRD: ChronotypeAdjustment(-1.5, 15.0),
    Chronotype.NEUTRAL: ChronotypeAdjustment(0.0, 0.0),
    Chronotype.NIGHT_OWL: ChronotypeAdjustment(2.0, 30.0),
}


def mid_sleep_hour(history: Sequence[SleepSession], utc_offset_hours: float = 0.0) -> float | None:
    """Habitual mid-sleep in (-12, 12] hours around midnight, or None."""
    midpoints = [
        hour_of_day(s.midpoint, utc_offset_hours)
        for s in history
        if s.midpoint is not None
    ]
    if not midpoints:
        return None
    mid = circular_mean(midpoints)
    return mid - HOURS_PER_DAY if mid > HOURS_PER_DAY / 2.0 else mid


def classify_chronotype(
    history: Sequence[SleepSession],
    utc_offset_hours: float = 0.0,
) -> Chronotype:
    """EARLY_BIRD / NEUTRAL / NIGHT_OWL from habitual mid-sleep."""
    completed = [s for s in history if s.end_time is not None]
    if len(completed) < MIN_SESSIONS:
        return Chronotype.NEUTRAL

    mid = mid_sleep_hour(completed, utc_offset_hours)
    if mid is None:
        return Chronotype.NEUTRAL
    if mid < EARLY_MIDSLEEP:
        return Chronotype.EARLY_BIRD
    if mid > LATE_MIDSLEEP:
        return Chronotype.NIGHT_OWL
    return Chronotype.NEUTRAL


def chronotype_adjustment(chronotype: Chronotype) -> ChronotypeAdjustment:
    return ADJUSTMENTS[chronotype]


def optimal_schedule(
    chronotype: Chronotype,
    baseline_bedtime: float = BASELINE_BEDTIME,
    sleep_hours: float = BASELINE_SLEEP_HOURS,
) -> tuple[float, float]:
    """``(bedtime, wake_time)`` as hours of day for a chronotype.

    Bedtime and wake time both move by the chronotype's schedule shift;
    the extra sleep need is reported by :func:`target_sleep_hours`.
    """
    shift = chronotype_adjustment(chronotype).schedule_shift_hours
    bedtime = normalize_hour(baseline_bedtime + shift)
    return bedtime, normalize_hour(baseline_bedtime + sleep_hours + shift)


def target_sleep_hours(chronotype: Chronotype, sleep_hours: float = BASELINE_SLEEP_HOURS) -> float:
    """Nightly sleep-duration target including the chronotype's extra need."""
    return sleep_hours + chronotype_adjustment(chronotype).extra_sleep_minutes / 60.0
