"""Value types shared by the analytics engine and its callers.

Timestamps are POSIX seconds throughout.  Samples, feature windows and
stages are immutable once built; a ``SleepSession`` is mutated only by the
caller that owns it (normally :class:`circadia.tracker.SleepTracker`).
"""

from __future__ import annotations

import json
import math
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum, IntEnum
from typing import Any

from circadia.errors import InvalidInput


def _require_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise InvalidInput(f"{name} must be finite, got {value!r}")


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {k: _jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonable(v) for v in obj]
    return obj


# ---------------------------------------------------------------------------
# Raw sensor input
# ---------------------------------------------------------------------------


class SensorKind(str, Enum):
    """Which physiological channel a sample came from."""

    HEART_RATE = "heart_rate"
    HRV = "hrv"
    OXYGEN_SATURATION = "oxygen_saturation"
    BODY_TEMPERATURE = "body_temperature"
    ACCELEROMETER = "accelerometer"


@dataclass(frozen=True)
class SensorSample:
    """A single time-stamped reading from the acquisition layer."""

    timestamp: float
    value: float
    kind: SensorKind
    axis: tuple[float, float, float] | None = None  # accelerometer only, in g

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "kind", SensorKind(self.kind))
        except ValueError:
            raise InvalidInput(f"unknown sensor kind {self.kind!r}") from None
        _require_finite("timestamp", self.timestamp)
        _require_finite("value", self.value)
        if self.axis is not None:
            if len(self.axis) != 3:
                raise InvalidInput(f"axis must have 3 components, got {len(self.axis)}")
            for component in self.axis:
                _require_finite("axis component", component)


# Live context handed to the circadian estimator is the same shape.
HealthDataPoint = SensorSample


# ---------------------------------------------------------------------------
# Derived per-epoch features
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeatureWindow:
    """Numeric features for one epoch (30 s by default)."""

    rmssd: float = 0.0  # seconds
    sdnn: float = 0.0  # seconds
    heart_rate_avg: float = 0.0
    heart_rate_std: float = 0.0
    spo2_avg: float = 0.0
    spo2_std: float = 0.0
    activity_count: float = 0.0
    sleep_wake_flag: float = 0.0  # 1.0 = movement above the wake threshold
    wrist_temp_avg: float = 0.0
    wrist_temp_gradient: float = 0.0
    hrv_avg: float = 0.0  # device-reported HRV (ms), 0 if absent
    timestamp: float = 0.0


# ---------------------------------------------------------------------------
# Hypnogram
# ---------------------------------------------------------------------------


class StageKind(str, Enum):
    """Sleep stage label."""

    AWAKE = "awake"
    LIGHT = "light"
    DEEP = "deep"
    REM = "rem"


@dataclass(frozen=True)
class SleepStage:
    """One contiguous stretch of a single stage."""

    kind: StageKind
    start: float
    end: float
    confidence: float = 1.0

    def __post_init__(self) -> None:
        _require_finite("start", self.start)
        _require_finite("end", self.end)
        if self.end < self.start:
            raise InvalidInput(
                f"stage ends before it starts ({self.end} < {self.start})"
            )

    @property
    def duration(self) -> float:
        return self.end - self.start


# ---------------------------------------------------------------------------
# Environment & light collaborators
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SleepEnvironment:
    """Bedroom conditions captured when a session starts."""

    temperature_c: float = 20.0
    humidity: float = 0.5  # relative, 0-1
    light_level: float = 0.0  # 0-1
    noise_level: float = 0.2  # 0-1
    air_quality: float = 0.8  # 0-1, 1 = excellent
    timestamp: float = 0.0


@dataclass(frozen=True)
class LightExposureProfile:
    """Daily light exposure summary, each component normalized to 0-1."""

    morning_light_exposure: float
    late_night_exposure: float
    blue_light_exposure: float
    total_daily_exposure: float

    def __post_init__(self) -> None:
        for name in (
            "morning_light_exposure",
            "late_night_exposure",
            "blue_light_exposure",
            "total_daily_exposure",
        ):
            value = getattr(self, name)
            _require_finite(name, value)
            if not 0.0 <= value <= 1.0:
                raise InvalidInput(f"{name} must be within [0, 1], got {value}")


# ---------------------------------------------------------------------------
# Session analysis
# ---------------------------------------------------------------------------


class InsightType(str, Enum):
    DURATION = "duration"
    EFFICIENCY = "efficiency"
    QUALITY = "quality"
    PATTERN = "pattern"


@dataclass(frozen=True)
class SleepInsight:
    """A short rule-based observation about a night of sleep."""

    type: InsightType
    message: str
    confidence: float


@dataclass
class SleepAnalysis:
    """Aggregate metrics for one session's hypnogram."""

    duration: float = 0.0  # seconds
    efficiency: float = 0.0
    deep_sleep_pct: float = 0.0
    rem_sleep_pct: float = 0.0
    light_sleep_pct: float = 0.0
    awake_pct: float = 0.0
    stages: list[SleepStage] = field(default_factory=list)
    insights: list[SleepInsight] = field(default_factory=list)
    sleep_score: float = 0.0  # 0-1

    @property
    def duration_hours(self) -> float:
        return self.duration / 3600.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly)."""
        return _jsonable(asdict(self))

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"SleepAnalysis(dur={self.duration_hours:.1f}h, "
            f"eff={self.efficiency:.0%}, "
            f"deep={self.deep_sleep_pct:.0%}, "
            f"rem={self.rem_sleep_pct:.0%}, "
            f"score={self.sleep_score:.2f})"
        )


class Priority(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class RecommendationType(str, Enum):
    DURATION = "duration"
    EFFICIENCY = "efficiency"
    DEEP_SLEEP = "deep_sleep"
    ENVIRONMENT = "environment"
    SCHEDULE = "schedule"
    LIFESTYLE = "lifestyle"


class RecommendationCategory(str, Enum):
    SCHEDULE = "schedule"
    ENVIRONMENT = "environment"
    LIFESTYLE = "lifestyle"


@dataclass(frozen=True)
class Recommendation:
    """A single actionable suggestion."""

    type: RecommendationType
    title: str
    description: str
    priority: Priority
    estimated_impact: float  # 0-1
    category: RecommendationCategory


@dataclass
class SleepSession:
    """A tracked night: raw biometrics in, stages and analysis out."""

    start_time: float
    end_time: float | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    stages: list[SleepStage] = field(default_factory=list)
    biometrics: list[SensorSample] = field(default_factory=list)
    environment: SleepEnvironment = field(default_factory=SleepEnvironment)
    analysis: SleepAnalysis | None = None
    recommendations: list[Recommendation] = field(default_factory=list)

    def __post_init__(self) -> None:
        _require_finite("start_time", self.start_time)
        if self.end_time is not None:
            _require_finite("end_time", self.end_time)
            if self.end_time < self.start_time:
                raise InvalidInput(
                    f"session ends before it starts ({self.end_time} < {self.start_time})"
                )

    @property
    def is_complete(self) -> bool:
        return self.end_time is not None

    @property
    def duration(self) -> float:
        """Time in bed (seconds); 0 for a session still being tracked."""
        if self.end_time is None:
            return 0.0
        return self.end_time - self.start_time

    @property
    def midpoint(self) -> float | None:
        if self.end_time is None:
            return None
        return (self.start_time + self.end_time) / 2.0


# ---------------------------------------------------------------------------
# Circadian reports
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SleepTimingAnalysis:
    """Circular statistics of bedtimes and wake times across sessions."""

    average_bedtime: float = 0.0  # hour of day
    average_wake_time: float = 0.0
    bedtime_variation: float = 0.0  # hours (circular std)
    wake_time_variation: float = 0.0
    consistency: float = 1.0
    weekday_weekend_shift: float = 0.0  # hours, weekend minus weekday
    session_count: int = 0


@dataclass(frozen=True)
class CircadianPhaseAnalysis:
    """Fused circadian phase estimate (fractions of a 24 h cycle)."""

    current_phase: float
    phase_shift: float  # hours relative to the population baseline
    confidence: float
    temperature_phase: float
    heart_rate_phase: float
    sleep_phase: float


class Chronotype(str, Enum):
    EARLY_BIRD = "early_bird"
    NEUTRAL = "neutral"
    NIGHT_OWL = "night_owl"


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    SEVERE = "severe"

    @property
    def rank(self) -> int:
        return list(RiskLevel).index(self)


@dataclass(frozen=True)
class DisruptionRisk:
    """Circadian disruption risk with the triggers that produced it."""

    level: RiskLevel
    score: float
    factors: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass
class CircadianRhythmAnalysis:
    """Top-level circadian report, rebuilt from scratch on every call."""

    chronotype: Chronotype
    phase: CircadianPhaseAnalysis
    timing: SleepTimingAnalysis
    optimal_bedtime: float  # hour of day
    optimal_wake_time: float
    disruption_risk: DisruptionRisk
    recommendations: list[str] = field(default_factory=list)
    target_sleep_hours: float = 8.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly)."""
        return _jsonable(asdict(self))

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"CircadianRhythmAnalysis({self.chronotype.value}, "
            f"phase={self.phase.current_phase:.3f}, "
            f"risk={self.disruption_risk.level.value})"
        )


# ---------------------------------------------------------------------------
# History-level insights
# ---------------------------------------------------------------------------


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    NEUTRAL = "neutral"  # too few sessions to tell


class Timeframe(str, Enum):
    """Look-back window for history insights."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"

    @property
    def seconds(self) -> float:
        return {"day": 1, "week": 7, "month": 30, "quarter": 91}[self.value] * 86400.0


@dataclass
class SleepInsights:
    """Averages, trend and recurring issues over the recent history."""

    average_duration: float = 0.0  # seconds
    average_efficiency: float = 0.0
    quality_trend: TrendDirection = TrendDirection.NEUTRAL
    common_issues: list[str] = field(default_factory=list)
    improvement_areas: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    session_count: int = 0
    latest_analysis: SleepAnalysis | None = None

    @property
    def average_duration_hours(self) -> float:
        return self.average_duration / 3600.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly)."""
        return _jsonable(asdict(self))

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"SleepInsights(n={self.session_count}, "
            f"dur={self.average_duration_hours:.1f}h, "
            f"eff={self.average_efficiency:.0%}, "
            f"trend={self.quality_trend.value})"
        )
