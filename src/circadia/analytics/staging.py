"""Rule-based sleep staging (awake / light / deep / REM).

Each epoch gets a weighted score per candidate stage built from a handful
of physiological cues:

  - heart-rate deviation from the session baseline (deep sleep drops HR,
    wake and REM raise it),
  - HRV level (RMSSD; high in deep sleep, low when awake),
  - the accelerometer movement flag,
  - beat-to-beat HR variability within the epoch (elevated in REM),
  - wrist temperature trend (distal warming accompanies deep sleep).

The highest score wins.  For a whole night, the per-epoch score vectors are
first smoothed with a centred moving average so that a single noisy epoch
cannot flip the hypnogram, and the argmax is taken afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy.ndimage import uniform_filter1d

from circadia.errors import InvalidInput
from circadia.models import FeatureWindow, SleepStage, StageKind
from circadia.analytics.features import EPOCH_SEC

logger = logging.getLogger(__name__)

# Column order of the score matrix
STAGE_ORDER = (StageKind.AWAKE, StageKind.LIGHT, StageKind.DEEP, StageKind.REM)

# Epochs in the smoothing window
SMOOTHING_WINDOW = 3

# ---------------------------------------------------------------------------
# Reference levels
# ---------------------------------------------------------------------------

HR_DEVIATION_SPAN = 0.10  # fractional HR deviation that saturates a cue
REM_HR_ELEVATION = 0.05  # REM sits slightly above baseline HR
HRV_LIGHT_MS = 40.0  # typical RMSSD in light sleep
HRV_DEEP_MS = 60.0  # RMSSD that saturates the deep-sleep cue
HR_STD_REM = 3.0  # within-epoch HR std (bpm) that saturates the REM cue
TEMP_GRADIENT_SPAN = 0.1  # deg C per epoch

# Weights per stage (each row sums to 1)
W_AWAKE = {"movement": 0.45, "hr_up": 0.35, "hrv_low": 0.20}
W_LIGHT = {"still": 0.35, "hr_near": 0.35, "hrv_mid": 0.30}
W_DEEP = {"still": 0.35, "hr_down": 0.30, "hrv_high": 0.25, "temp": 0.10}
W_REM = {"still": 0.30, "hr_rem": 0.30, "hr_var": 0.25, "hrv_not_high": 0.15}


@dataclass(frozen=True)
class StageScore:
    """Classification of one epoch."""

    kind: StageKind
    confidence: float
    scores: dict[StageKind, float]


def _clip01(x: float) -> float:
    return max(0.0, min(1.0, x))


def _hrv_ms(window: FeatureWindow) -> float:
    """RMSSD in ms, falling back to device-reported HRV."""
    if window.rmssd > 0:
        return window.rmssd * 1000.0
    return window.hrv_avg


def baseline_heart_rate(windows: Sequence[FeatureWindow]) -> float:
    """Mean of the non-zero per-window HR averages (0 if none)."""
    hrs = [w.heart_rate_avg for w in windows if w.heart_rate_avg > 0]
    if not hrs:
        return 0.0
    return float(np.mean(hrs))


def stage_scores(window: FeatureWindow, baseline_hr: float) -> np.ndarray:
    """Raw score vector for one window, ordered as :data:`STAGE_ORDER`."""
    if baseline_hr > 0 and window.heart_rate_avg > 0:
        hr_dev = (window.heart_rate_avg - baseline_hr) / baseline_hr
    else:
        hr_dev = 0.0

    moving = 1.0 if window.sleep_wake_flag >= 0.5 else 0.0
    still = 1.0 - moving
    hrv = _hrv_ms(window)

    awake = (
        W_AWAKE["movement"] * moving
        + W_AWAKE["hr_up"] * _clip01(hr_dev / HR_DEVIATION_SPAN)
        + W_AWAKE["hrv_low"] * (1.0 - _clip01(hrv / HRV_LIGHT_MS))
    )
    light = (
        W_LIGHT["still"] * still
        + W_LIGHT["hr_near"] * (1.0 - _clip01(abs(hr_dev) / HR_DEVIATION_SPAN))
        + W_LIGHT["hrv_mid"] * (1.0 - _clip01(abs(hrv - HRV_LIGHT_MS) / HRV_LIGHT_MS))
    )
    deep = (
        W_DEEP["still"] * still
        + W_DEEP["hr_down"] * _clip01(-hr_dev / HR_DEVIATION_SPAN)
        + W_DEEP["hrv_high"] * _clip01(hrv / HRV_DEEP_MS)
        + W_DEEP["temp"] * _clip01(-window.wrist_temp_gradient / TEMP_GRADIENT_SPAN)
    )
    rem = (
        W_REM["still"] * still
        + W_REM["hr_rem"] * (1.0 - _clip01(abs(hr_dev - REM_HR_ELEVATION) / REM_HR_ELEVATION))
        + W_REM["hr_var"] * _clip01(window.heart_rate_std / HR_STD_REM)
        + W_REM["hrv_not_high"] * (1.0 - _clip01(hrv / HRV_DEEP_MS))
    )
    return np.array([awake, light, deep, rem], dtype=np.float64)


def _pick(scores: np.ndarray) -> tuple[StageKind, float]:
    """Argmax stage and its normalized margin over the runner-up."""
    order = np.argsort(scores)[::-1]
    top = float(scores[order[0]])
    second = float(scores[order[1]])
    if top <= 0:
        return STAGE_ORDER[int(order[0])], 0.0
    return STAGE_ORDER[int(order[0])], _clip01((top - second) / top)


def classify_window(window: FeatureWindow, baseline_hr: float | None = None) -> StageScore:
    """Classify a single epoch.

    Args:
        window: Features of the epoch.
        baseline_hr: Session baseline HR; defaults to the window's own HR,
            which makes the HR-deviation cue neutral.
    """
    if baseline_hr is None:
        baseline_hr = window.heart_rate_avg
    scores = stage_scores(window, baseline_hr)
    kind, confidence = _pick(scores)
    return StageScore(
        kind=kind,
        confidence=confidence,
        scores={k: float(v) for k, v in zip(STAGE_ORDER, scores)},
    )


def smooth_scores(scores: np.ndarray, window: int = SMOOTHING_WINDOW) -> np.ndarray:
    """Centred moving average of an ``(n_epochs, n_stages)`` score matrix.

    Edges are padded with the nearest epoch.  Matrices shorter than the
    window are returned unchanged.
    """
    if window <= 1 or scores.shape[0] < window:
        return scores
    return uniform_filter1d(scores, size=window, axis=0, mode="nearest")


def classify_stages(
    windows: Sequence[FeatureWindow],
    baseline_hr: float | None = None,
    epoch_sec: float = EPOCH_SEC,
    smoothing_window: int = SMOOTHING_WINDOW,
) -> list[SleepStage]:
    """Stage a whole night of feature windows.

    Args:
        windows: One feature window per epoch, in time order.
        baseline_hr: Session baseline HR; defaults to the mean of the
            windows' non-zero HR averages.
        epoch_sec: Epoch length; each stage spans ``epoch_sec`` from its
            window's timestamp, truncated at the next window.
        smoothing_window: Epochs in the moving-average smoothing pass.

    Returns:
        Time-ordered, non-overlapping stages (one per window).
    """
    if len(windows) == 0:
        return []

    timestamps = [w.timestamp for w in windows]
    for prev, cur in zip(timestamps, timestamps[1:]):
        if cur < prev:
            raise InvalidInput("feature windows must be in time order")

    if baseline_hr is None:
        baseline_hr = baseline_heart_rate(windows)

    raw = np.vstack([stage_scores(w, baseline_hr) for w in windows])
    if len(windows) < smoothing_window:
        logger.debug(
            "Only %d epochs (< %d); skipping temporal smoothing",
            len(windows), smoothing_window,
        )
    smoothed = smooth_scores(raw, smoothing_window)

    stages: list[SleepStage] = []
    for i, w in enumerate(windows):
        kind, confidence = _pick(smoothed[i])
        start = w.timestamp
        end = start + epoch_sec
        if i + 1 < len(windows):
            end = min(end, timestamps[i + 1])
        stages.append(SleepStage(kind=kind, start=start, end=end, confidence=confidence))

    return stages
