"""Shared fixtures and helpers for the circadia test suite."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from circadia.models import SensorKind, SensorSample, SleepSession

# Monday 2024-01-15 00:00:00 UTC
MONDAY = 1705276800.0
DAY = 86400.0
HOUR = 3600.0


# ---------------------------------------------------------------------------
# Session helpers
# ---------------------------------------------------------------------------


def make_session(day: int, bed_hour: float, sleep_hours: float = 8.0) -> SleepSession:
    """Completed session starting *day* days after MONDAY at *bed_hour* UTC."""
    start = MONDAY + day * DAY + bed_hour * HOUR
    return SleepSession(start_time=start, end_time=start + sleep_hours * HOUR)


def nightly_sessions(bed_hour: float, nights: int = 5, sleep_hours: float = 8.0) -> list[SleepSession]:
    """Same bedtime on consecutive nights starting Monday."""
    return [make_session(d, bed_hour, sleep_hours) for d in range(nights)]


# ---------------------------------------------------------------------------
# Sample helpers
# ---------------------------------------------------------------------------


def hr(ts: float, bpm: float) -> SensorSample:
    return SensorSample(timestamp=ts, value=bpm, kind=SensorKind.HEART_RATE)


def accel(ts: float, x: float, y: float = 0.0, z: float = 0.0) -> SensorSample:
    return SensorSample(timestamp=ts, value=0.0, kind=SensorKind.ACCELEROMETER, axis=(x, y, z))


def temp(ts: float, celsius: float) -> SensorSample:
    return SensorSample(timestamp=ts, value=celsius, kind=SensorKind.BODY_TEMPERATURE)


def night_samples(
    start: float,
    hours: float = 8.0,
    awake_from: float | None = None,
    awake_until: float | None = None,
    step: float = 5.0,
) -> list[SensorSample]:
    """A still night at a constant 60 bpm, every *step* seconds.

    Between ``awake_from`` and ``awake_until`` (hours into the night) an
    accelerometer sample with magnitude 3 g accompanies each HR sample,
    which flags those epochs as movement.
    """
    samples: list[SensorSample] = []
    n = int(hours * HOUR / step)
    for i in range(n):
        ts = start + i * step
        samples.append(hr(ts, 60.0))
        if awake_from is not None and awake_from * HOUR <= i * step < awake_until * HOUR:
            samples.append(accel(ts, 3.0))
    return samples


def v_shaped_channel(
    kind: SensorKind,
    start: float,
    min_index: int,
    count: int = 12,
    base: float = 35.0,
) -> list[SensorSample]:
    """Hourly samples whose value is lowest at *min_index*."""
    return [
        SensorSample(timestamp=start + i * HOUR, value=base + abs(i - min_index), kind=kind)
        for i in range(count)
    ]


# ---------------------------------------------------------------------------
# JSON file helpers
# ---------------------------------------------------------------------------


def write_jsonl(path: Path, entries: list[dict]) -> Path:
    """Write a list of dicts as JSONL to the given path."""
    with open(path, "w") as f:
        for entry in entries:
            f.write(json.dumps(entry) + "\n")
    return path


def sample_entry(sample: SensorSample) -> dict:
    entry = {"timestamp": sample.timestamp, "kind": sample.kind.value, "value": sample.value}
    if sample.axis is not None:
        entry["axis"] = list(sample.axis)
    return entry


@pytest.fixture
def light_night() -> list[SensorSample]:
    """Eight hours of still, steady-HR samples from Monday 22:30 UTC."""
    return night_samples(MONDAY + 22.5 * HOUR)


@pytest.fixture
def samples_file(tmp_path: Path, light_night: list[SensorSample]) -> Path:
    return write_jsonl(tmp_path / "night.jsonl", [sample_entry(s) for s in light_night])


@pytest.fixture
def history_file(tmp_path: Path) -> Path:
    path = tmp_path / "history.json"
    sessions = nightly_sessions(22.5)
    with open(path, "w") as f:
        json.dump(
            [{"id": s.id, "start_time": s.start_time, "end_time": s.end_time} for s in sessions],
            f,
        )
    return path
