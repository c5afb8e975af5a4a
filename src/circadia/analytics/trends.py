"""History-level sleep insights: averages, quality trend, recurring issues.

Looks at analyzed sessions that started on or after a cutoff and
summarizes them.  The quality trend compares mean efficiency of the older
half of those sessions against the newer half.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from circadia.models import SleepInsights, SleepSession, TrendDirection
from circadia.analytics.metrics import LOW_DEEP_PCT, LOW_EFFICIENCY, SHORT_SLEEP_HOURS

# Efficiency change between halves that counts as a trend
TREND_BAND = 0.1

# Per-session issue -> check
ISSUES = (
    ("Short sleep duration", lambda a: a.duration_hours < SHORT_SLEEP_HOURS),
    ("Low sleep efficiency", lambda a: a.efficiency < LOW_EFFICIENCY),
    ("Insufficient deep sleep", lambda a: a.deep_sleep_pct < LOW_DEEP_PCT),
)

DURATION_AREA = "Sleep Duration"
EFFICIENCY_AREA = "Sleep Efficiency"
DURATION_ADVICE = "Consider increasing your sleep duration by 30-60 minutes"
EFFICIENCY_ADVICE = "Optimize your sleep environment for better efficiency"


def recent_sessions(
    history: Sequence[SleepSession],
    since: float | None = None,
) -> list[SleepSession]:
    """Analyzed sessions starting at or after *since*, oldest first."""
    recent = [
        s for s in history
        if s.analysis is not None and (since is None or s.start_time >= since)
    ]
    return sorted(recent, key=lambda s: s.start_time)


def quality_trend(sessions: Sequence[SleepSession]) -> TrendDirection:
    """Compare mean efficiency of the older and newer halves.

    With an odd count the middle session belongs to neither half.
    """
    if len(sessions) < 2:
        return TrendDirection.NEUTRAL
    half = len(sessions) // 2
    older = np.mean([s.analysis.efficiency for s in sessions[:half]])
    newer = np.mean([s.analysis.efficiency for s in sessions[-half:]])
    if newer > older + TREND_BAND:
        return TrendDirection.IMPROVING
    if newer < older - TREND_BAND:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def common_issues(sessions: Sequence[SleepSession]) -> list[str]:
    """Issues seen in at least one session, each listed once, in table order."""
    return [
        issue for issue, check in ISSUES
        if any(check(s.analysis) for s in sessions)
    ]


def history_insights(
    history: Sequence[SleepSession],
    since: float | None = None,
) -> SleepInsights:
    """Summarize the analyzed sessions that started at or after *since*.

    Args:
        history: Session history; sessions without an analysis are skipped.
        since: POSIX cutoff; ``None`` uses the whole history.

    Returns:
        A :class:`SleepInsights`.  With no matching sessions every average
        is 0, the trend is NEUTRAL and the lists are empty.
    """
    sessions = recent_sessions(history, since)
    if not sessions:
        return SleepInsights()

    avg_duration = float(np.mean([s.analysis.duration for s in sessions]))
    avg_efficiency = float(np.mean([s.analysis.efficiency for s in sessions]))

    areas: list[str] = []
    advice: list[str] = []
    if avg_duration / 3600.0 < SHORT_SLEEP_HOURS:
        areas.append(DURATION_AREA)
        advice.append(DURATION_ADVICE)
    if avg_efficiency < LOW_EFFICIENCY:
        areas.append(EFFICIENCY_AREA)
        advice.append(EFFICIENCY_ADVICE)

    return SleepInsights(
        average_duration=avg_duration,
        average_efficiency=avg_efficiency,
        quality_trend=quality_trend(sessions),
        common_issues=common_issues(sessions),
        improvement_areas=areas,
        recommendations=advice,
        session_count=len(sessions),
        latest_analysis=sessions[-1].analysis,
    )
