"""Analytics engine for sleep staging and circadian analysis.

Modules:
    features        -- Epoch windowing and feature extraction (HRV, SpO2, accel, temp)
    staging         -- Rule-based sleep staging with temporal smoothing
    metrics         -- Efficiency, stage percentages, sleep score, insights
    circular        -- Circular statistics for times of day
    circadian       -- Circadian phase estimation from fused markers
    timing          -- Bedtime / wake-time regularity across sessions
    chronotype      -- Chronotype classification and optimal schedule
    risk            -- Circadian disruption risk scoring
    recommendations -- Rule-table recommendations
    trends          -- History-level averages, quality trend, recurring issues
    pipeline        -- Session and circadian report assembly
"""

from circadia.analytics.features import (
    epoch_windows,
    extract_features,
    extract_session_features,
    compute_rmssd,
    sdnn,
)
from circadia.analytics.staging import classify_stages, classify_window
from circadia.analytics.metrics import aggregate_metrics, sleep_score
from circadia.analytics.circular import circular_mean, circular_std
from circadia.analytics.circadian import estimate_circadian_phase
from circadia.analytics.timing import analyze_sleep_timing
from circadia.analytics.chronotype import classify_chronotype, optimal_schedule, target_sleep_hours
from circadia.analytics.risk import score_disruption_risk
from circadia.analytics.recommendations import recommend
from circadia.analytics.trends import history_insights
from circadia.analytics.pipeline import (
    AnalysisConfig,
    analyze_session,
    analyze_circadian_rhythm,
)

__all__ = [
    # features
    "epoch_windows",
    "extract_features",
    "extract_session_features",
    "compute_rmssd",
    "sdnn",
    # staging
    "classify_stages",
    "classify_window",
    # metrics
    "aggregate_metrics",
    "sleep_score",
    # circular
    "circular_mean",
    "circular_std",
    # circadian
    "estimate_circadian_phase",
    # timing
    "analyze_sleep_timing",
    # chronotype
    "classify_chronotype",
    "optimal_schedule",
    "target_sleep_hours",
    # risk
    "score_disruption_risk",
    # recommendations
    "recommend",
    # trends
    "history_insights",
    # pipeline
    "AnalysisConfig",
    "analyze_session",
    "analyze_circadian_rhythm",
]
