"""Circular statistics for time-of-day quantities.

Bedtimes of 23:30 and 00:30 average to midnight, not noon.  Every
time-of-day value in the engine goes through these helpers: an hour
``t`` in [0, 24) maps to the angle ``t * 2*pi / 24`` and back.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Sequence

import numpy as np

HOURS_PER_DAY = 24.0
RAD_PER_HOUR = 2.0 * math.pi / HOURS_PER_DAY

# Mean resultant lengths at or below this are treated as fully dispersed
R_EPSILON = 1e-12
# Circular std reported for fully dispersed (or degenerate) data, hours
MAX_CIRCULAR_STD = 12.0


def hours_to_angle(hours: Sequence[float] | np.ndarray) -> np.ndarray:
    return np.asarray(hours, dtype=np.float64) * RAD_PER_HOUR


def normalize_hour(hour: float) -> float:
    """Fold an hour value into [0, 24)."""
    h = hour % HOURS_PER_DAY
    # Tiny negative angles land just below 24.0
    if HOURS_PER_DAY - h < 1e-9:
        h = 0.0
    return h


def wrap_hours(delta: float) -> float:
    """Fold a signed hour difference into (-12, 12]."""
    d = delta % HOURS_PER_DAY
    if d > HOURS_PER_DAY / 2.0:
        d -= HOURS_PER_DAY
    return d


def circular_distance(a: float, b: float, period: float = HOURS_PER_DAY) -> float:
    """Shortest distance between two points on a circle of *period*."""
    d = abs(a - b) % period
    return min(d, period - d)


def circular_mean(hours: Sequence[float]) -> float:
    """Circular mean of times of day, in [0, 24).

    Returns 0.0 for empty input.
    """
    if len(hours) == 0:
        return 0.0
    theta = hours_to_angle(hours)
    angle = math.atan2(float(np.sum(np.sin(theta))), float(np.sum(np.cos(theta))))
    return normalize_hour(angle / RAD_PER_HOUR)


def weighted_circular_mean(hours: Sequence[float], weights: Sequence[float]) -> float:
    """Weighted circular mean of times of day, in [0, 24)."""
    if len(hours) == 0:
        return 0.0
    theta = hours_to_angle(hours)
    w = np.asarray(weights, dtype=np.float64)
    angle = math.atan2(float(np.sum(w * np.sin(theta))), float(np.sum(w * np.cos(theta))))
    return normalize_hour(angle / RAD_PER_HOUR)


def resultant_length(hours: Sequence[float]) -> float:
    """Mean resultant length R = mean(cos(theta - theta_mean)), in [0, 1]."""
    if len(hours) == 0:
        return 0.0
    theta = hours_to_angle(hours)
    mean_theta = circular_mean(hours) * RAD_PER_HOUR
    r = float(np.mean(np.cos(theta - mean_theta)))
    return max(0.0, min(1.0, r))


def circular_std(hours: Sequence[float]) -> float:
    """Circular standard deviation of times of day, in hours.

    ``sigma = sqrt(-2 ln R) * 24 / 2pi``.  Empty input gives 0.0; a
    vanishing R (points spread evenly round the clock) gives
    :data:`MAX_CIRCULAR_STD`.  The result never exceeds that cap.
    """
    if len(hours) == 0:
        return 0.0
    r = resultant_length(hours)
    if r <= R_EPSILON:
        return MAX_CIRCULAR_STD
    sigma = math.sqrt(max(0.0, -2.0 * math.log(r))) / RAD_PER_HOUR
    return min(sigma, MAX_CIRCULAR_STD)


# ---------------------------------------------------------------------------
# Clock helpers
# ---------------------------------------------------------------------------


def local_datetime(timestamp: float, utc_offset_hours: float = 0.0) -> datetime:
    tz = timezone(timedelta(hours=utc_offset_hours))
    return datetime.fromtimestamp(timestamp, tz=tz)


def hour_of_day(timestamp: float, utc_offset_hours: float = 0.0) -> float:
    """Fractional local hour of a POSIX timestamp, in [0, 24)."""
    dt = local_datetime(timestamp, utc_offset_hours)
    return dt.hour + dt.minute / 60.0 + (dt.second + dt.microsecond / 1e6) / 3600.0


def is_weekend(timestamp: float, utc_offset_hours: float = 0.0) -> bool:
    """True for Saturday and Sunday (local calendar)."""
    return local_datetime(timestamp, utc_offset_hours).weekday() >= 5
