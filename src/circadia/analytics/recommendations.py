"""Rule-table recommendations from a night's analysis and the circadian risk.

Each rule checks one fact and, if it holds, emits a fixed
:class:`Recommendation`.  Output is sorted by priority (highest first);
rules with equal priority keep table order.
"""

from __future__ import annotations

from circadia.models import (
    DisruptionRisk,
    Priority,
    Recommendation,
    RecommendationCategory,
    RecommendationType,
    RiskLevel,
    SleepAnalysis,
    SleepEnvironment,
)
from circadia.analytics.metrics import LOW_DEEP_PCT, LOW_EFFICIENCY, TARGET_SLEEP_HOURS

# Fraction of the target duration below which sleep counts as short
DURATION_DEFICIT_RATIO = 0.9

# Bedroom targets
ROOM_TEMP_MIN_C = 18.0
ROOM_TEMP_MAX_C = 22.0
ROOM_LIGHT_MAX = 0.3
HUMIDITY_RANGE = (0.4, 0.6)
NOISE_MAX = 0.4


def _duration_rules(analysis: SleepAnalysis, target_hours: float) -> list[Recommendation]:
    recs: list[Recommendation] = []
    if analysis.duration_hours < target_hours * DURATION_DEFICIT_RATIO:
        recs.append(Recommendation(
            type=RecommendationType.DURATION,
            title="Increase Sleep Duration",
            description="Your sleep duration is below your target. Try going to bed 30 minutes earlier.",
            priority=Priority.HIGH,
            estimated_impact=0.8,
            category=RecommendationCategory.SCHEDULE,
        ))
    if analysis.efficiency < LOW_EFFICIENCY:
        recs.append(Recommendation(
            type=RecommendationType.EFFICIENCY,
            title="Improve Sleep Efficiency",
            description="Your sleep efficiency could be improved. Consider optimizing your sleep environment.",
            priority=Priority.MEDIUM,
            estimated_impact=0.6,
            category=RecommendationCategory.ENVIRONMENT,
        ))
    if analysis.deep_sleep_pct < LOW_DEEP_PCT:
        recs.append(Recommendation(
            type=RecommendationType.DEEP_SLEEP,
            title="Enhance Deep Sleep",
            description="Your deep sleep percentage is low. Try reducing evening screen time and caffeine.",
            priority=Priority.HIGH,
            estimated_impact=0.7,
            category=RecommendationCategory.LIFESTYLE,
        ))
    return recs


def _environment_rules(environment: SleepEnvironment) -> list[Recommendation]:
    recs: list[Recommendation] = []
    if not ROOM_TEMP_MIN_C <= environment.temperature_c <= ROOM_TEMP_MAX_C:
        recs.append(Recommendation(
            type=RecommendationType.ENVIRONMENT,
            title="Optimize Room Temperature",
            description="Your room temperature may be affecting sleep quality. Aim for 18-22 °C.",
            priority=Priority.MEDIUM,
            estimated_impact=0.5,
            category=RecommendationCategory.ENVIRONMENT,
        ))
    if environment.light_level > ROOM_LIGHT_MAX:
        recs.append(Recommendation(
            type=RecommendationType.ENVIRONMENT,
            title="Reduce Light Exposure",
            description="Your room may be too bright. Consider blackout curtains or an eye mask.",
            priority=Priority.MEDIUM,
            estimated_impact=0.4,
            category=RecommendationCategory.ENVIRONMENT,
        ))
    lo, hi = HUMIDITY_RANGE
    if not lo <= environment.humidity <= hi:
        recs.append(Recommendation(
            type=RecommendationType.ENVIRONMENT,
            title="Adjust Humidity",
            description="Bedroom humidity is outside the 40-60% comfort range. A humidifier or dehumidifier can help.",
            priority=Priority.LOW,
            estimated_impact=0.3,
            category=RecommendationCategory.ENVIRONMENT,
        ))
    if environment.noise_level > NOISE_MAX:
        recs.append(Recommendation(
            type=RecommendationType.ENVIRONMENT,
            title="Reduce Noise",
            description="Your bedroom is noisy. Try earplugs or a white-noise machine.",
            priority=Priority.LOW,
            estimated_impact=0.3,
            category=RecommendationCategory.ENVIRONMENT,
        ))
    return recs


def _schedule_rules(risk: DisruptionRisk) -> list[Recommendation]:
    if risk.level.rank < RiskLevel.MODERATE.rank:
        return []
    priority = Priority.HIGH if risk.level.rank >= RiskLevel.HIGH.rank else Priority.MEDIUM
    detail = "; ".join(risk.factors) if risk.factors else "circadian disruption"
    return [Recommendation(
        type=RecommendationType.SCHEDULE,
        title="Optimize Sleep Schedule",
        description=f"Your circadian rhythm is under strain ({detail}). Keep a fixed bedtime and wake time.",
        priority=priority,
        estimated_impact=0.6,
        category=RecommendationCategory.SCHEDULE,
    )]


def recommend(
    analysis: SleepAnalysis,
    risk: DisruptionRisk,
    environment: SleepEnvironment,
    target_hours: float = TARGET_SLEEP_HOURS,
) -> list[Recommendation]:
    """Build the ranked recommendation list.

    Args:
        analysis: The night's aggregate metrics.
        risk: Current circadian disruption risk.
        environment: Bedroom conditions for the night.
        target_hours: Target sleep duration.

    Returns:
        Recommendations sorted by priority, highest first.
    """
    recs = (
        _duration_rules(analysis, target_hours)
        + _environment_rules(environment)
        + _schedule_rules(risk)
    )
    return sorted(recs, key=lambda r: r.priority, reverse=True)
