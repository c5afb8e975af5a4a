"""Analytics pipeline: wire raw samples and session history into reports.

Two entry points:

  - :func:`analyze_session` runs one night's samples through feature
    extraction, staging and metric aggregation.
  - :func:`analyze_circadian_rhythm` combines the session history with
    live sensor context into a :class:`CircadianRhythmAnalysis`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from circadia.models import (
    CircadianRhythmAnalysis,
    SensorSample,
    SleepAnalysis,
    SleepSession,
)
from circadia.sources import LightExposureSource, NEUTRAL_LIGHT
from circadia.analytics.features import (
    ACTIVITY_WAKE_THRESHOLD,
    EPOCH_SEC,
    extract_session_features,
)
from circadia.analytics.staging import SMOOTHING_WINDOW, classify_stages
from circadia.analytics.metrics import TARGET_SLEEP_HOURS, aggregate_metrics
from circadia.analytics.circadian import (
    BASELINE_PHASE,
    FUSION_WEIGHTS,
    estimate_circadian_phase,
)
from circadia.analytics.timing import analyze_sleep_timing
from circadia.analytics.chronotype import (
    BASELINE_BEDTIME,
    classify_chronotype,
    optimal_schedule,
    target_sleep_hours,
)
from circadia.analytics.risk import score_disruption_risk

logger = logging.getLogger(__name__)


@dataclass
class AnalysisConfig:
    """Tunable constants threaded through the pipeline."""

    epoch_sec: float = EPOCH_SEC
    activity_threshold: float = ACTIVITY_WAKE_THRESHOLD
    smoothing_window: int = SMOOTHING_WINDOW
    baseline_phase: float = BASELINE_PHASE
    fusion_weights: dict[str, float] = field(default_factory=lambda: dict(FUSION_WEIGHTS))
    target_sleep_hours: float = TARGET_SLEEP_HOURS
    baseline_bedtime: float = BASELINE_BEDTIME
    utc_offset_hours: float = 0.0


DEFAULT_CONFIG = AnalysisConfig()


def analyze_session(
    samples: Sequence[SensorSample],
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> SleepAnalysis:
    """Run one night's raw samples through the staging pipeline.

    Args:
        samples: All samples recorded during the session.
        config: Pipeline configuration.

    Returns:
        The session's :class:`SleepAnalysis` (zero-duration if empty).
    """
    windows = extract_session_features(
        samples,
        epoch_sec=config.epoch_sec,
        activity_threshold=config.activity_threshold,
    )
    stages = classify_stages(
        windows,
        epoch_sec=config.epoch_sec,
        smoothing_window=config.smoothing_window,
    )
    analysis = aggregate_metrics(stages)
    logger.debug(
        "Analyzed %d samples -> %d epochs: %r", len(samples), len(windows), analysis,
    )
    return analysis


def analyze_circadian_rhythm(
    history: Sequence[SleepSession],
    live_context: Sequence[SensorSample],
    light_source: LightExposureSource | None = None,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> CircadianRhythmAnalysis:
    """Build a fresh circadian report from history and live context.

    Args:
        history: Past sleep sessions (incomplete ones are ignored).
        live_context: Recent temperature / heart-rate samples.
        light_source: Light exposure collaborator; a neutral profile is
            used when absent.
        config: Pipeline configuration.
    """
    offset = config.utc_offset_hours
    light = light_source.profile() if light_source is not None else NEUTRAL_LIGHT

    timing = analyze_sleep_timing(history, utc_offset_hours=offset)
    phase = estimate_circadian_phase(
        history,
        live_context,
        baseline_phase=config.baseline_phase,
        weights=config.fusion_weights,
        utc_offset_hours=offset,
    )
    chronotype = classify_chronotype(history, utc_offset_hours=offset)
    bedtime, wake_time = optimal_schedule(
        chronotype,
        baseline_bedtime=config.baseline_bedtime,
        sleep_hours=config.target_sleep_hours,
    )
    risk = score_disruption_risk(
        timing, light, chronotype, baseline_bedtime=config.baseline_bedtime,
    )

    return CircadianRhythmAnalysis(
        chronotype=chronotype,
        phase=phase,
        timing=timing,
        optimal_bedtime=bedtime,
        optimal_wake_time=wake_time,
        disruption_risk=risk,
        recommendations=list(risk.recommendations),
        target_sleep_hours=target_sleep_hours(chronotype, config.target_sleep_hours),
    )
