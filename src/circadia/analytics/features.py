"""Epoch windowing and feature extraction for sleep sensor data.

This is the shared foundation for the staging classifier.  It provides:
  - Time-series windowing of raw samples into fixed-duration epochs
  - HRV time-domain metrics (RMSSD, SDNN) from heart-rate derived RR intervals
  - Accelerometer activity counts and the sleep/wake movement flag
  - SpO2 and wrist-temperature summaries

None of these functions raise on sparse input: a missing channel simply
yields zeros in the resulting :class:`FeatureWindow`.
"""

from __future__ import annotations

import time
from typing import Sequence

import numpy as np

from circadia.models import FeatureWindow, SensorKind, SensorSample

# Default epoch length (seconds)
EPOCH_SEC = 30.0

# Activity count above which an epoch is flagged as movement / wake
ACTIVITY_WAKE_THRESHOLD = 5.0


# ---------------------------------------------------------------------------
# Basic statistics (zero on empty input)
# ---------------------------------------------------------------------------


def _mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def _std(values: Sequence[float]) -> float:
    """Population standard deviation (ddof=0)."""
    if len(values) == 0:
        return 0.0
    return float(np.std(np.asarray(values, dtype=np.float64), ddof=0))


# ---------------------------------------------------------------------------
# HRV metrics
# ---------------------------------------------------------------------------


def rr_intervals_from_hr(hr_values: Sequence[float]) -> list[float]:
    """RR intervals (seconds) as ``60 / hr``; non-positive rates are skipped."""
    return [60.0 / hr for hr in hr_values if hr > 0]


def compute_rmssd(rr_intervals: Sequence[float]) -> float:
    """Root mean square of successive RR-interval differences.

    Returns 0.0 if fewer than 2 intervals are provided.
    """
    if len(rr_intervals) < 2:
        return 0.0
    arr = np.asarray(rr_intervals, dtype=np.float64)
    diffs = np.diff(arr)
    return float(np.sqrt(np.mean(diffs ** 2)))


def sdnn(rr_intervals: Sequence[float]) -> float:
    """Population standard deviation of RR intervals.

    Returns 0.0 if fewer than 2 intervals.
    """
    if len(rr_intervals) < 2:
        return 0.0
    return _std(rr_intervals)


# ---------------------------------------------------------------------------
# Accelerometer
# ---------------------------------------------------------------------------


def activity_count(samples: Sequence[SensorSample]) -> float:
    """Sum of 3-D acceleration magnitudes; samples without an axis add 0."""
    vectors = [s.axis for s in samples if s.axis is not None]
    if not vectors:
        return 0.0
    arr = np.asarray(vectors, dtype=np.float64)  # shape (N, 3)
    return float(np.sum(np.sqrt(np.sum(arr ** 2, axis=1))))


# ---------------------------------------------------------------------------
# Per-window extraction
# ---------------------------------------------------------------------------


def extract_features(
    samples: Sequence[SensorSample],
    activity_threshold: float = ACTIVITY_WAKE_THRESHOLD,
) -> FeatureWindow:
    """Reduce the samples of one window to a :class:`FeatureWindow`.

    Args:
        samples: Samples of any kind spanning one epoch, in time order.
        activity_threshold: Activity count above which the window is
            flagged as movement (``sleep_wake_flag = 1.0``).

    Returns:
        The window's features.  An empty input gives all-zero features
        stamped with the current time.
    """
    by_kind: dict[SensorKind, list[SensorSample]] = {kind: [] for kind in SensorKind}
    for s in samples:
        by_kind[s.kind].append(s)

    hr_values = [s.value for s in by_kind[SensorKind.HEART_RATE]]
    rr = rr_intervals_from_hr(hr_values)

    spo2_values = [s.value for s in by_kind[SensorKind.OXYGEN_SATURATION]]
    temp_values = [s.value for s in by_kind[SensorKind.BODY_TEMPERATURE]]
    hrv_values = [s.value for s in by_kind[SensorKind.HRV]]

    counts = activity_count(by_kind[SensorKind.ACCELEROMETER])
    gradient = temp_values[-1] - temp_values[0] if temp_values else 0.0

    return FeatureWindow(
        rmssd=compute_rmssd(rr),
        sdnn=sdnn(rr),
        heart_rate_avg=_mean(hr_values),
        heart_rate_std=_std(hr_values),
        spo2_avg=_mean(spo2_values),
        spo2_std=_std(spo2_values),
        activity_count=counts,
        sleep_wake_flag=1.0 if counts > activity_threshold else 0.0,
        wrist_temp_avg=_mean(temp_values),
        wrist_temp_gradient=gradient,
        hrv_avg=_mean(hrv_values),
        timestamp=samples[-1].timestamp if len(samples) > 0 else time.time(),
    )


# ---------------------------------------------------------------------------
# Epoch windowing
# ---------------------------------------------------------------------------


def epoch_windows(
    samples: Sequence[SensorSample],
    epoch_sec: float = EPOCH_SEC,
) -> list[tuple[float, list[SensorSample]]]:
    """Slice a sample stream into fixed-width epochs.

    Args:
        samples: Samples of any kind (need not be sorted).
        epoch_sec: Duration of each epoch window in seconds.

    Returns:
        List of ``(epoch_start_time, [samples_in_epoch])`` tuples in time
        order.  Epochs with no samples are omitted.
    """
    if len(samples) == 0:
        return []
    if epoch_sec <= 0:
        raise ValueError("epoch_sec must be positive")

    ordered = sorted(samples, key=lambda s: s.timestamp)
    ts = np.asarray([s.timestamp for s in ordered], dtype=np.float64)
    t_start = ts[0]

    # Epoch index of every sample, relative to the first sample
    idx = np.floor((ts - t_start) / epoch_sec).astype(np.int64)

    epochs: list[tuple[float, list[SensorSample]]] = []
    for epoch_idx in np.unique(idx):
        members = np.where(idx == epoch_idx)[0]
        epochs.append((
            float(t_start + epoch_idx * epoch_sec),
            [ordered[int(i)] for i in members],
        ))
    return epochs


def extract_session_features(
    samples: Sequence[SensorSample],
    epoch_sec: float = EPOCH_SEC,
    activity_threshold: float = ACTIVITY_WAKE_THRESHOLD,
) -> list[FeatureWindow]:
    """One :class:`FeatureWindow` per non-empty epoch of a session."""
    return [
        extract_features(epoch_samples, activity_threshold=activity_threshold)
        for _, epoch_samples in epoch_windows(samples, epoch_sec)
    ]
