"""Session tracking: start a night, feed it samples, end it, get advice.

:class:`SleepTracker` is the caller-side owner of the session history.
It walks each night through ``IDLE -> TRACKING -> ANALYZING -> COMPLETED``
and leaves the numeric work to :mod:`circadia.analytics`.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Iterable, Sequence

from circadia.errors import NoActiveSession, NoAnalysisAvailable
from circadia.models import (
    CircadianRhythmAnalysis,
    Recommendation,
    SensorSample,
    SleepAnalysis,
    SleepInsights,
    SleepSession,
    Timeframe,
)
from circadia.sources import (
    EnvironmentSensor,
    EventSink,
    LightExposureSource,
    StaticEnvironmentSensor,
    StaticLightExposure,
)
from circadia.analytics.features import extract_session_features
from circadia.analytics.staging import classify_stages
from circadia.analytics.metrics import aggregate_metrics
from circadia.analytics.recommendations import recommend
from circadia.analytics.trends import history_insights
from circadia.analytics.pipeline import (
    DEFAULT_CONFIG,
    AnalysisConfig,
    analyze_circadian_rhythm,
)

logger = logging.getLogger(__name__)


class TrackingState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    ANALYZING = "analyzing"
    COMPLETED = "completed"


class SleepTracker:
    """Tracks one session at a time and keeps the completed history.

    Not thread-safe; a tracker has a single owner.

    Args:
        environment: Bedroom conditions source, read at session start.
        light: Daily light exposure source for the circadian report.
        events: Optional analytics event sink.
        config: Pipeline configuration.
        history: Sessions completed before this tracker was created.
    """

    def __init__(
        self,
        environment: EnvironmentSensor | None = None,
        light: LightExposureSource | None = None,
        events: EventSink | None = None,
        config: AnalysisConfig = DEFAULT_CONFIG,
        history: Iterable[SleepSession] = (),
    ) -> None:
        self.environment = environment or StaticEnvironmentSensor()
        self.light = light or StaticLightExposure()
        self.events = events
        self.config = config
        self.history: list[SleepSession] = list(history)
        self.state = TrackingState.IDLE
        self.current: SleepSession | None = None
        self.last_analysis: SleepAnalysis | None = None

    def _track(self, name: str, **properties) -> None:
        if self.events is not None:
            self.events.track(name, properties)

    @property
    def is_tracking(self) -> bool:
        return self.state == TrackingState.TRACKING

    def start_session(self, start_time: float | None = None) -> SleepSession:
        """Open a new session, discarding any session still being tracked."""
        if self.current is not None:
            logger.warning("Discarding unfinished session %s", self.current.id)

        start = time.time() if start_time is None else start_time
        session = SleepSession(start_time=start, environment=self.environment.read(start))
        self.current = session
        self.state = TrackingState.TRACKING
        logger.info("Sleep tracking started (session %s)", session.id)
        self._track("sleep_tracking_started", session_id=session.id)
        return session

    def record(self, samples: Sequence[SensorSample]) -> None:
        """Append raw samples to the active session."""
        if self.current is None or self.state != TrackingState.TRACKING:
            raise NoActiveSession("no session is being tracked")
        self.current.biometrics.extend(samples)

    def end_session(self, end_time: float | None = None) -> SleepAnalysis:
        """Close the active session and analyze it.

        Stages, analysis and recommendations are written onto the session,
        which then joins :attr:`history`.

        Raises:
            NoActiveSession: Nothing is being tracked (including a second
                call for the same night).

        If the analysis raises, the error propagates and the session stays
        tracking so the call can be retried.
        """
        session = self.current
        if session is None or self.state != TrackingState.TRACKING:
            raise NoActiveSession("no session is being tracked")

        end = time.time() if end_time is None else end_time
        # Raises InvalidInput for end < start while still TRACKING
        closed = SleepSession(
            start_time=session.start_time,
            end_time=end,
            id=session.id,
            biometrics=session.biometrics,
            environment=session.environment,
        )
        self.state = TrackingState.ANALYZING
        try:
            analysis = self._analyze(closed)
        except Exception:
            logger.warning("Analysis of session %s failed; still tracking", session.id)
            self.state = TrackingState.TRACKING
            raise

        self.history.append(closed)
        self.current = None
        self.last_analysis = analysis
        self.state = TrackingState.COMPLETED
        logger.info("Sleep tracking completed (session %s): %r", closed.id, analysis)
        self._track(
            "sleep_tracking_completed",
            session_id=closed.id,
            duration=closed.duration,
            efficiency=analysis.efficiency,
            sleep_score=analysis.sleep_score,
        )
        return analysis

    def _analyze(self, closed: SleepSession) -> SleepAnalysis:
        """Stage, score and advise on a closed session without touching state."""
        cfg = self.config
        windows = extract_session_features(
            closed.biometrics,
            epoch_sec=cfg.epoch_sec,
            activity_threshold=cfg.activity_threshold,
        )
        stages = classify_stages(
            windows,
            epoch_sec=cfg.epoch_sec,
            smoothing_window=cfg.smoothing_window,
        )
        analysis = aggregate_metrics(stages)

        report = analyze_circadian_rhythm(
            [*self.history, closed], closed.biometrics, light_source=self.light, config=cfg,
        )
        recommendations = recommend(
            analysis,
            report.disruption_risk,
            closed.environment,
            target_hours=cfg.target_sleep_hours,
        )

        closed.stages = stages
        closed.analysis = analysis
        closed.recommendations = recommendations
        return analysis

    def recommendations(self) -> list[Recommendation]:
        """Recommendations for the most recently completed session.

        Raises:
            NoAnalysisAvailable: No session has been analyzed yet.
        """
        if not self.history or self.history[-1].analysis is None:
            raise NoAnalysisAvailable("no completed session to base recommendations on")
        return list(self.history[-1].recommendations)

    def circadian_report(
        self,
        live_context: Sequence[SensorSample] = (),
    ) -> CircadianRhythmAnalysis:
        """Fresh circadian report over the history."""
        return analyze_circadian_rhythm(
            self.history, live_context, light_source=self.light, config=self.config,
        )

    def insights(
        self,
        timeframe: Timeframe = Timeframe.WEEK,
        now: float | None = None,
    ) -> SleepInsights:
        """Averages, quality trend and recurring issues over *timeframe*."""
        end = time.time() if now is None else now
        return history_insights(self.history, since=end - timeframe.seconds)
