"""Collaborator interfaces the engine consumes or feeds.

The analytics core never reads sensors, clocks or networks on its own.
Callers plug in implementations of these interfaces; the static ones
below are deterministic and suit tests and offline replays.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from circadia.models import LightExposureProfile, SleepEnvironment


class EnvironmentSensor(ABC):
    """Reports bedroom conditions (thermostat, hygrometer, light sensor...)."""

    @abstractmethod
    def read(self, timestamp: float) -> SleepEnvironment:
        """Return the conditions at *timestamp*."""
        ...


class LightExposureSource(ABC):
    """Summarizes the user's daily light exposure."""

    @abstractmethod
    def profile(self) -> LightExposureProfile:
        """Return the current light exposure profile."""
        ...


class EventSink(ABC):
    """Receives analytics events (counters, session summaries)."""

    @abstractmethod
    def track(self, name: str, properties: dict[str, Any]) -> None:
        ...


# Light profile that fires no disruption trigger
NEUTRAL_LIGHT = LightExposureProfile(
    morning_light_exposure=0.5,
    late_night_exposure=0.0,
    blue_light_exposure=0.0,
    total_daily_exposure=0.5,
)


class StaticEnvironmentSensor(EnvironmentSensor):
    """Always reports the same conditions, stamped with the read time."""

    def __init__(self, environment: SleepEnvironment | None = None) -> None:
        self.environment = environment or SleepEnvironment()

    def read(self, timestamp: float) -> SleepEnvironment:
        env = self.environment
        return SleepEnvironment(
            temperature_c=env.temperature_c,
            humidity=env.humidity,
            light_level=env.light_level,
            noise_level=env.noise_level,
            air_quality=env.air_quality,
            timestamp=timestamp,
        )


class StaticLightExposure(LightExposureSource):
    """Returns a fixed light exposure profile."""

    def __init__(self, light: LightExposureProfile = NEUTRAL_LIGHT) -> None:
        self.light = light

    def profile(self) -> LightExposureProfile:
        return self.light


class MemoryEventSink(EventSink):
    """Collects events in a list."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def track(self, name: str, properties: dict[str, Any]) -> None:
        self.events.append((name, dict(properties)))

    def count(self, name: str) -> int:
        return sum(1 for n, _ in self.events if n == name)
