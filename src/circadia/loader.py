"""Load recorded samples and session history from disk for offline analysis.

Sample files are JSONL, one sample per line::

    {"timestamp": 1700000000.0, "kind": "heart_rate", "value": 58}
    {"timestamp": 1700000000.5, "kind": "accelerometer", "value": 0, "axis": [0.01, 0.0, 1.0]}

History files are a JSON list of ``{"id"?, "start_time", "end_time"}``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from circadia.errors import InvalidInput
from circadia.models import SensorKind, SensorSample, SleepSession

logger = logging.getLogger(__name__)


def parse_sample(entry: dict) -> SensorSample:
    """Build a :class:`SensorSample` from one decoded JSON record."""
    try:
        kind = SensorKind(entry["kind"])
        axis = entry.get("axis")
        return SensorSample(
            timestamp=float(entry["timestamp"]),
            value=float(entry.get("value", 0.0)),
            kind=kind,
            axis=tuple(float(a) for a in axis) if axis is not None else None,
        )
    except InvalidInput:
        raise
    except KeyError as e:
        raise InvalidInput(f"missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise InvalidInput(str(e)) from e


def load_samples(path: str | Path) -> list[SensorSample]:
    """Read a JSONL sample file.

    Blank lines are skipped.

    Raises:
        InvalidInput: A line is not valid JSON or not a valid sample; the
            message carries the line number.
    """
    path = Path(path)
    samples: list[SensorSample] = []

    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError as e:
                raise InvalidInput(f"{path.name}:{line_num}: invalid JSON") from e
            if not isinstance(entry, dict):
                raise InvalidInput(f"{path.name}:{line_num}: expected a JSON object")
            try:
                samples.append(parse_sample(entry))
            except InvalidInput as e:
                raise InvalidInput(f"{path.name}:{line_num}: {e}") from e

    logger.debug("Loaded %d samples from %s", len(samples), path)
    return samples


def load_sessions(path: str | Path) -> list[SleepSession]:
    """Read a JSON list of past sessions (times only)."""
    path = Path(path)
    with open(path) as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidInput(f"{path.name}: invalid JSON") from e

    if not isinstance(raw, list):
        raise InvalidInput(f"{path.name}: expected a JSON list of sessions")

    sessions: list[SleepSession] = []
    for i, entry in enumerate(raw):
        try:
            end = entry.get("end_time")
            kwargs = {
                "start_time": float(entry["start_time"]),
                "end_time": float(end) if end is not None else None,
            }
            if "id" in entry:
                kwargs["id"] = str(entry["id"])
            sessions.append(SleepSession(**kwargs))
        except InvalidInput as e:
            raise InvalidInput(f"{path.name}[{i}]: {e}") from e
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise InvalidInput(f"{path.name}[{i}]: malformed session ({e})") from e

    logger.debug("Loaded %d sessions from %s", len(sessions), path)
    return sessions
