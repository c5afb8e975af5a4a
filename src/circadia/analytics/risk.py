"""Circadian disruption risk scoring.

Independent triggers each add a fixed weight to the score, which is
clamped to [0, 1] and bucketed into a level.  Every trigger that fires
contributes a factor description and a matching mitigation from a fixed
lookup table.
"""

from __future__ import annotations

from typing import Sequence

from circadia.models import (
    Chronotype,
    DisruptionRisk,
    LightExposureProfile,
    RiskLevel,
    SleepTimingAnalysis,
)
from circadia.analytics.chronotype import BASELINE_BEDTIME, optimal_schedule
from circadia.analytics.circular import circular_distance

# ---------------------------------------------------------------------------
# Trigger thresholds
# ---------------------------------------------------------------------------

CONSISTENCY_MIN = 0.7
WEEKEND_SHIFT_MAX = 1.0  # hours
LATE_NIGHT_LIGHT_MAX = 0.3
MORNING_LIGHT_MIN = 0.4
MISMATCH_MAX = 0.5
BLUE_LIGHT_MAX = 0.4

# Bedtime offset (hours) from the chronotype's ideal that counts as full mismatch
MISMATCH_SPAN_HOURS = 3.0

# Trigger name -> weight
WEIGHTS = {
    "inconsistent_timing": 0.30,
    "social_jet_lag": 0.20,
    "late_night_light": 0.25,
    "low_morning_light": 0.20,
    "chronotype_mismatch": 0.30,
    "blue_light": 0.15,
}

# Trigger name -> (factor, mitigation)
MESSAGES = {
    "inconsistent_timing": (
        "Inconsistent sleep timing",
        "Keep bedtime and wake time within 30 minutes every day, including weekends.",
    ),
    "social_jet_lag": (
        "Weekday/weekend schedule shift",
        "Limit weekend sleep-ins and late nights to under an hour of your weekday schedule.",
    ),
    "late_night_light": (
        "Bright light exposure late at night",
        "Dim household lights and avoid bright screens in the two hours before bed.",
    ),
    "low_morning_light": (
        "Insufficient morning light",
        "Get 15-30 minutes of outdoor daylight within an hour of waking.",
    ),
    "chronotype_mismatch": (
        "Sleep schedule conflicts with your chronotype",
        "Move your bedtime gradually toward your natural window, 15 minutes every few days.",
    ),
    "blue_light": (
        "Blue light exposure before bed",
        "Enable night mode on devices or wear blue-light filtering glasses in the evening.",
    ),
}

# Lower bound of each level, checked from the top
LEVEL_THRESHOLDS = (
    (0.8, RiskLevel.SEVERE),
    (0.6, RiskLevel.HIGH),
    (0.3, RiskLevel.MODERATE),
)


def risk_level(score: float) -> RiskLevel:
    for threshold, level in LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.LOW


def schedule_mismatch(
    timing: SleepTimingAnalysis,
    chronotype: Chronotype,
    baseline_bedtime: float = BASELINE_BEDTIME,
) -> float:
    """0-1 distance between habitual and chronotype-ideal bedtime.

    The ideal bedtime is *baseline_bedtime* shifted for the chronotype.
    0.0 when the timing covers no sessions.
    """
    if timing.session_count == 0:
        return 0.0
    ideal_bedtime, _ = optimal_schedule(chronotype, baseline_bedtime=baseline_bedtime)
    offset = circular_distance(timing.average_bedtime, ideal_bedtime)
    return min(1.0, offset / MISMATCH_SPAN_HOURS)


def triggered_conditions(
    timing: SleepTimingAnalysis,
    light: LightExposureProfile,
    chronotype: Chronotype,
    baseline_bedtime: float = BASELINE_BEDTIME,
) -> list[str]:
    """Names of the risk triggers that fire, in table order."""
    fired: list[str] = []
    if timing.consistency < CONSISTENCY_MIN:
        fired.append("inconsistent_timing")
    if abs(timing.weekday_weekend_shift) > WEEKEND_SHIFT_MAX:
        fired.append("social_jet_lag")
    if light.late_night_exposure > LATE_NIGHT_LIGHT_MAX:
        fired.append("late_night_light")
    if light.morning_light_exposure < MORNING_LIGHT_MIN:
        fired.append("low_morning_light")
    if schedule_mismatch(timing, chronotype, baseline_bedtime) > MISMATCH_MAX:
        fired.append("chronotype_mismatch")
    if light.blue_light_exposure > BLUE_LIGHT_MAX:
        fired.append("blue_light")
    return fired


def build_risk(fired: Sequence[str]) -> DisruptionRisk:
    score = min(1.0, sum(WEIGHTS[name] for name in fired))
    return DisruptionRisk(
        level=risk_level(score),
        score=score,
        factors=[MESSAGES[name][0] for name in fired],
        recommendations=[MESSAGES[name][1] for name in fired],
    )


def score_disruption_risk(
    timing: SleepTimingAnalysis,
    light: LightExposureProfile,
    chronotype: Chronotype,
    baseline_bedtime: float = BASELINE_BEDTIME,
) -> DisruptionRisk:
    """Score circadian disruption risk.

    Args:
        timing: Sleep timing statistics over the user's history.
        light: Daily light exposure profile.
        chronotype: The user's chronotype.
        baseline_bedtime: Neutral bedtime the chronotype schedule is built on.

    Returns:
        A :class:`DisruptionRisk` with score in [0, 1] and its level.
    """
    return build_risk(triggered_conditions(timing, light, chronotype, baseline_bedtime))
