"""Session-level sleep metrics from a hypnogram.

Reduces an ordered list of stages into time-in-stage percentages, sleep
efficiency and a composite sleep score, plus a few rule-based insights.
"""

from __future__ import annotations

from typing import Sequence

from circadia.models import (
    InsightType,
    SleepAnalysis,
    SleepInsight,
    SleepStage,
    StageKind,
)

# ---------------------------------------------------------------------------
# Composite sleep score
# ---------------------------------------------------------------------------

# Weights for the composite sleep score
W_DURATION = 0.25
W_EFFICIENCY = 0.30
W_DEEP = 0.25
W_REM = 0.20

TARGET_SLEEP_HOURS = 8.0
TARGET_DEEP_PCT = 0.25
TARGET_REM_PCT = 0.25

# ---------------------------------------------------------------------------
# Insight thresholds
# ---------------------------------------------------------------------------

SHORT_SLEEP_HOURS = 7.0
LOW_EFFICIENCY = 0.85
LOW_DEEP_PCT = 0.20
RESTLESS_AWAKE_PCT = 0.15
REM_BALANCED = (0.20, 0.25)


def sleep_score(
    duration_hours: float,
    efficiency: float,
    deep_pct: float,
    rem_pct: float,
) -> float:
    """Weighted 0-1 sleep score.

    Duration is scored against an 8 h target, deep and REM shares against
    25% each; each component is capped at its target.
    """
    score = (
        W_DURATION * min(duration_hours / TARGET_SLEEP_HOURS, 1.0)
        + W_EFFICIENCY * efficiency
        + W_DEEP * min(deep_pct / TARGET_DEEP_PCT, 1.0)
        + W_REM * min(rem_pct / TARGET_REM_PCT, 1.0)
    )
    return max(0.0, min(1.0, score))


def generate_insights(analysis: SleepAnalysis) -> list[SleepInsight]:
    """Rule-based observations about a night (empty for an empty night)."""
    if analysis.duration <= 0:
        return []

    insights: list[SleepInsight] = []
    if analysis.duration_hours < SHORT_SLEEP_HOURS:
        insights.append(SleepInsight(
            InsightType.DURATION,
            f"You slept {analysis.duration_hours:.1f} h, short of the recommended 7-9 h.",
            0.9,
        ))
    if analysis.efficiency < LOW_EFFICIENCY:
        insights.append(SleepInsight(
            InsightType.EFFICIENCY,
            f"Sleep efficiency was {analysis.efficiency:.0%}; time awake in bed is cutting into rest.",
            0.8,
        ))
    if analysis.deep_sleep_pct < LOW_DEEP_PCT:
        insights.append(SleepInsight(
            InsightType.QUALITY,
            "Deep sleep was below 20% of the night.",
            0.7,
        ))
    if analysis.awake_pct > RESTLESS_AWAKE_PCT:
        insights.append(SleepInsight(
            InsightType.PATTERN,
            "Movement patterns indicate restless sleep - consider environmental factors.",
            0.6,
        ))
    lo, hi = REM_BALANCED
    if lo <= analysis.rem_sleep_pct <= hi:
        insights.append(SleepInsight(
            InsightType.QUALITY,
            "REM sleep was in the healthy 20-25% range.",
            0.7,
        ))
    return insights


def aggregate_metrics(stages: Sequence[SleepStage]) -> SleepAnalysis:
    """Aggregate a hypnogram into a :class:`SleepAnalysis`.

    Args:
        stages: Time-ordered, non-overlapping stages.

    Returns:
        Metrics for the stages.  Empty (or zero-length) input yields a
        zero-duration analysis with every percentage and the efficiency at 0.
    """
    per_kind = {kind: 0.0 for kind in StageKind}
    for st in stages:
        per_kind[st.kind] += st.duration

    total = sum(per_kind.values())
    if total <= 0:
        return SleepAnalysis(stages=list(stages))

    awake = per_kind[StageKind.AWAKE]
    analysis = SleepAnalysis(
        duration=total,
        efficiency=(total - awake) / total,
        deep_sleep_pct=per_kind[StageKind.DEEP] / total,
        rem_sleep_pct=per_kind[StageKind.REM] / total,
        light_sleep_pct=per_kind[StageKind.LIGHT] / total,
        awake_pct=awake / total,
        stages=list(stages),
    )
    analysis.sleep_score = sleep_score(
        analysis.duration_hours,
        analysis.efficiency,
        analysis.deep_sleep_pct,
        analysis.rem_sleep_pct,
    )
    analysis.insights = generate_insights(analysis)
    return analysis
