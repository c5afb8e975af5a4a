"""Loading :class:`AnalysisConfig` overrides from a JSON file."""

from __future__ import annotations

import json
from dataclasses import fields, replace
from pathlib import Path

from circadia.errors import InvalidInput
from circadia.analytics.pipeline import AnalysisConfig, DEFAULT_CONFIG

__all__ = ["AnalysisConfig", "DEFAULT_CONFIG", "load_config"]


def _coerce(path: Path, name: str, value: object, default: object) -> object:
    """Convert one override to the type of its default value."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"{path}: {name} must be a number, got {value!r}")
    if isinstance(default, int):
        if not float(value).is_integer():
            raise InvalidInput(f"{path}: {name} must be an integer, got {value!r}")
        return int(value)
    return float(value)


def load_config(path: str | Path) -> AnalysisConfig:
    """Read a JSON object of overrides on top of the defaults.

    Example file::

        {"epoch_sec": 60, "utc_offset_hours": -5}

    Raises:
        InvalidInput: The file is not a JSON object, names an unknown key,
            gives a value of the wrong type, or gives a non-positive epoch /
            smoothing window.
    """
    path = Path(path)
    try:
        with open(path) as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidInput(f"{path}: invalid JSON ({e})") from e

    if not isinstance(raw, dict):
        raise InvalidInput(f"{path}: expected a JSON object")

    known = {f.name for f in fields(AnalysisConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise InvalidInput(f"{path}: unknown config keys: {', '.join(unknown)}")

    weights = raw.pop("fusion_weights", {})
    if not isinstance(weights, dict):
        raise InvalidInput(f"{path}: fusion_weights must be an object")
    bad_markers = sorted(set(weights) - set(DEFAULT_CONFIG.fusion_weights))
    if bad_markers:
        raise InvalidInput(f"{path}: unknown fusion markers: {', '.join(bad_markers)}")
    weights = {
        name: _coerce(path, f"fusion_weights.{name}", w, 0.0)
        for name, w in weights.items()
    }

    overrides = {
        name: _coerce(path, name, value, getattr(DEFAULT_CONFIG, name))
        for name, value in raw.items()
    }
    config = replace(DEFAULT_CONFIG, **overrides)
    # Markers missing from the override keep their default weight
    config.fusion_weights = {**DEFAULT_CONFIG.fusion_weights, **weights}
    if config.epoch_sec <= 0:
        raise InvalidInput("epoch_sec must be positive")
    if config.smoothing_window < 1:
        raise InvalidInput("smoothing_window must be at least 1")
    return config
