"""Circadian phase estimation from three independent markers.

Markers (each a time of day, expressed as a fraction of the 24 h cycle):

  - core-temperature minimum: time of the lowest smoothed wrist temperature,
  - heart-rate minimum: time of the lowest smoothed heart rate,
  - sleep midpoint: circular mean of the midpoints of past sessions.

The markers are fused with fixed weights into a single phase.  A marker
that lacks data falls back to a population default for reporting but is
left out of the fusion, and the remaining weights are renormalized.
Confidence reflects how well the three reported marker phases agree,
defaults included, not how much data there is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from circadia.models import (
    CircadianPhaseAnalysis,
    SensorKind,
    SensorSample,
    SleepSession,
)
from circadia.analytics.circular import (
    HOURS_PER_DAY,
    circular_distance,
    circular_mean,
    hour_of_day,
    weighted_circular_mean,
    wrap_hours,
)

logger = logging.getLogger(__name__)

# Minimum samples for a physiological marker
MIN_MARKER_SAMPLES = 10
MARKER_SMOOTHING_WINDOW = 3

# Fallback marker times (hours)
DEFAULT_TEMPERATURE_MIN_HOUR = 5.0
DEFAULT_HEART_RATE_MIN_HOUR = 4.0
DEFAULT_SLEEP_PHASE = 0.25  # 06:00

# Population baseline phase (06:00)
BASELINE_PHASE = 0.25

FUSION_WEIGHTS = {"temperature": 0.4, "heart_rate": 0.3, "sleep": 0.3}

MIN_CONFIDENCE = 0.3


@dataclass(frozen=True)
class PhaseMarker:
    """One marker's phase and whether it came from real data."""

    name: str
    phase: float  # fraction of the day, [0, 1)
    available: bool


def _moving_average(values: np.ndarray, window: int) -> np.ndarray:
    """'valid' moving average; output[i] covers values[i:i+window]."""
    kernel = np.ones(window, dtype=np.float64) / window
    return np.convolve(values, kernel, mode="valid")


def _minimum_marker_hour(
    samples: Sequence[SensorSample],
    kind: SensorKind,
    utc_offset_hours: float = 0.0,
    window: int = MARKER_SMOOTHING_WINDOW,
) -> float | None:
    """Time of day of the smoothed minimum of one channel.

    Returns None when fewer than :data:`MIN_MARKER_SAMPLES` samples of
    *kind* are present.
    """
    channel = sorted((s for s in samples if s.kind == kind), key=lambda s: s.timestamp)
    if len(channel) < MIN_MARKER_SAMPLES:
        return None

    values = np.asarray([s.value for s in channel], dtype=np.float64)
    hours = [hour_of_day(s.timestamp, utc_offset_hours) for s in channel]
    smoothed = _moving_average(values, window)
    # Centre of the smoothing window that produced the minimum
    idx = int(np.argmin(smoothed)) + window // 2
    return hours[idx]


def temperature_marker(
    samples: Sequence[SensorSample],
    utc_offset_hours: float = 0.0,
) -> PhaseMarker:
    """Core-temperature minimum marker (default 05:00)."""
    hour = _minimum_marker_hour(samples, SensorKind.BODY_TEMPERATURE, utc_offset_hours)
    if hour is None:
        logger.debug("Too few temperature samples; using default %.1fh", DEFAULT_TEMPERATURE_MIN_HOUR)
        return PhaseMarker("temperature", DEFAULT_TEMPERATURE_MIN_HOUR / HOURS_PER_DAY, False)
    return PhaseMarker("temperature", hour / HOURS_PER_DAY, True)


def heart_rate_marker(
    samples: Sequence[SensorSample],
    utc_offset_hours: float = 0.0,
) -> PhaseMarker:
    """Heart-rate minimum marker (default 04:00)."""
    hour = _minimum_marker_hour(samples, SensorKind.HEART_RATE, utc_offset_hours)
    if hour is None:
        logger.debug("Too few heart-rate samples; using default %.1fh", DEFAULT_HEART_RATE_MIN_HOUR)
        return PhaseMarker("heart_rate", DEFAULT_HEART_RATE_MIN_HOUR / HOURS_PER_DAY, False)
    return PhaseMarker("heart_rate", hour / HOURS_PER_DAY, True)


def sleep_marker(
    history: Sequence[SleepSession],
    utc_offset_hours: float = 0.0,
) -> PhaseMarker:
    """Sleep-midpoint marker from completed sessions (default 06:00)."""
    midpoints = [
        hour_of_day(s.midpoint, utc_offset_hours)
        for s in history
        if s.midpoint is not None
    ]
    if not midpoints:
        return PhaseMarker("sleep", DEFAULT_SLEEP_PHASE, False)
    return PhaseMarker("sleep", circular_mean(midpoints) / HOURS_PER_DAY, True)


def fuse_markers(
    markers: Sequence[PhaseMarker],
    weights: dict[str, float] = FUSION_WEIGHTS,
) -> float:
    """Weighted circular mean of marker phases, in [0, 1).

    Only available markers take part; their weights are renormalized.  If
    none is available every marker is used.
    """
    used = [m for m in markers if m.available] or list(markers)
    w = np.asarray([weights[m.name] for m in used], dtype=np.float64)
    if w.sum() <= 0:
        w = np.ones(len(used))
    w = w / w.sum()
    hours = [m.phase * HOURS_PER_DAY for m in used]
    return weighted_circular_mean(hours, w) / HOURS_PER_DAY


def marker_confidence(markers: Sequence[PhaseMarker]) -> float:
    """``max(0.3, 1 - 2 * max pairwise difference)`` over all marker phases."""
    if len(markers) < 2:
        return 1.0
    max_diff = max(
        circular_distance(a.phase, b.phase, period=1.0)
        for i, a in enumerate(markers)
        for b in markers[i + 1:]
    )
    return max(MIN_CONFIDENCE, min(1.0, 1.0 - 2.0 * max_diff))


def estimate_circadian_phase(
    history: Sequence[SleepSession],
    live_context: Sequence[SensorSample],
    baseline_phase: float = BASELINE_PHASE,
    weights: dict[str, float] = FUSION_WEIGHTS,
    utc_offset_hours: float = 0.0,
) -> CircadianPhaseAnalysis:
    """Fuse the three markers into a :class:`CircadianPhaseAnalysis`.

    Args:
        history: Past sleep sessions (incomplete ones are ignored).
        live_context: Recent temperature / heart-rate samples.
        baseline_phase: Population baseline phase for the shift.
        weights: Fusion weights keyed by marker name.
        utc_offset_hours: Local clock offset for times of day.
    """
    temp = temperature_marker(live_context, utc_offset_hours)
    hr = heart_rate_marker(live_context, utc_offset_hours)
    sleep = sleep_marker(history, utc_offset_hours)
    markers = [temp, hr, sleep]

    current = fuse_markers(markers, weights)
    shift = wrap_hours((current - baseline_phase) * HOURS_PER_DAY)

    return CircadianPhaseAnalysis(
        current_phase=current,
        phase_shift=shift,
        confidence=marker_confidence(markers),
        temperature_phase=temp.phase,
        heart_rate_phase=hr.phase,
        sleep_phase=sleep.phase,
    )
