"""Tests for circadia.analytics.circadian -- phase marker fusion."""

import pytest

from circadia.analytics.circadian import (
    DEFAULT_HEART_RATE_MIN_HOUR,
    DEFAULT_TEMPERATURE_MIN_HOUR,
    MIN_CONFIDENCE,
    PhaseMarker,
    estimate_circadian_phase,
    fuse_markers,
    heart_rate_marker,
    marker_confidence,
    sleep_marker,
    temperature_marker,
)
from circadia.analytics.circular import circular_distance
from circadia.models import SensorKind

from tests.conftest import HOUR, MONDAY, make_session, nightly_sessions, v_shaped_channel

# Sunday 22:00 UTC; index 6 of an hourly channel falls on 04:00
EVENING = MONDAY - 2.0 * HOUR


def phase_close(a: float, b: float, tol: float = 1e-6) -> bool:
    return circular_distance(a, b, period=1.0) < tol


class TestMarkers:
    def test_temperature_minimum(self):
        samples = v_shaped_channel(SensorKind.BODY_TEMPERATURE, EVENING, min_index=6)
        marker = temperature_marker(samples)
        assert marker.available
        assert phase_close(marker.phase, 4.0 / 24.0)

    def test_heart_rate_minimum(self):
        samples = v_shaped_channel(SensorKind.HEART_RATE, EVENING, min_index=5, base=50.0)
        marker = heart_rate_marker(samples)
        assert marker.available
        assert phase_close(marker.phase, 3.0 / 24.0)

    def test_too_few_samples_falls_back(self):
        samples = v_shaped_channel(SensorKind.BODY_TEMPERATURE, EVENING, min_index=3, count=9)
        marker = temperature_marker(samples)
        assert not marker.available
        assert marker.phase == pytest.approx(DEFAULT_TEMPERATURE_MIN_HOUR / 24.0)

    def test_ignores_other_channels(self):
        samples = v_shaped_channel(SensorKind.BODY_TEMPERATURE, EVENING, min_index=6)
        marker = heart_rate_marker(samples)
        assert not marker.available
        assert marker.phase == pytest.approx(DEFAULT_HEART_RATE_MIN_HOUR / 24.0)

    def test_sleep_midpoint(self):
        marker = sleep_marker(nightly_sessions(22.5, nights=3))
        assert marker.available
        assert phase_close(marker.phase, 2.5 / 24.0)

    def test_sleep_default(self):
        marker = sleep_marker([])
        assert not marker.available
        assert marker.phase == pytest.approx(0.25)


class TestFusion:
    def test_all_defaults_fused(self):
        markers = [
            PhaseMarker("temperature", 5.0 / 24.0, False),
            PhaseMarker("heart_rate", 4.0 / 24.0, False),
            PhaseMarker("sleep", 6.0 / 24.0, False),
        ]
        # 4 h and 6 h carry equal weight around 5 h
        assert phase_close(fuse_markers(markers), 5.0 / 24.0)

    def test_unavailable_markers_excluded(self):
        markers = [
            PhaseMarker("temperature", 5.0 / 24.0, False),
            PhaseMarker("heart_rate", 4.0 / 24.0, False),
            PhaseMarker("sleep", 3.0 / 24.0, True),
        ]
        assert phase_close(fuse_markers(markers), 3.0 / 24.0)

    def test_fusion_wraps_midnight(self):
        markers = [
            PhaseMarker("temperature", 23.5 / 24.0, True),
            PhaseMarker("heart_rate", 0.5 / 24.0, True),
            PhaseMarker("sleep", 0.0, True),
        ]
        fused = fuse_markers(markers, {"temperature": 0.5, "heart_rate": 0.5, "sleep": 0.0})
        assert phase_close(fused, 0.0)


class TestConfidence:
    def test_agreeing_markers(self):
        markers = [PhaseMarker(n, 0.2, True) for n in ("temperature", "heart_rate", "sleep")]
        assert marker_confidence(markers) == pytest.approx(1.0)

    def test_disagreement_lowers_confidence(self):
        markers = [
            PhaseMarker("temperature", 0.2, True),
            PhaseMarker("heart_rate", 0.3, True),
        ]
        assert marker_confidence(markers) == pytest.approx(0.8)

    def test_floor(self):
        markers = [
            PhaseMarker("temperature", 0.0, True),
            PhaseMarker("heart_rate", 0.5, True),
        ]
        assert marker_confidence(markers) == MIN_CONFIDENCE

    def test_defaults_count_towards_agreement(self):
        # 05:00, 04:00, 06:00: widest gap 2 h = 1/12 of a day
        markers = [
            PhaseMarker("temperature", 5.0 / 24.0, False),
            PhaseMarker("heart_rate", 4.0 / 24.0, False),
            PhaseMarker("sleep", 0.25, True),
        ]
        assert marker_confidence(markers) == pytest.approx(1.0 - 2.0 / 12.0)

    def test_single_marker(self):
        assert marker_confidence([PhaseMarker("sleep", 0.1, True)]) == 1.0


class TestEstimateCircadianPhase:
    def test_no_data(self):
        phase = estimate_circadian_phase([], [])
        assert phase_close(phase.current_phase, 5.0 / 24.0)
        assert phase.phase_shift == pytest.approx(-1.0)
        assert phase.confidence == pytest.approx(1.0 - 2.0 / 12.0)
        assert phase.temperature_phase == pytest.approx(5.0 / 24.0)
        assert phase.heart_rate_phase == pytest.approx(4.0 / 24.0)
        assert phase.sleep_phase == pytest.approx(0.25)

    def test_agreeing_markers(self):
        live = (
            v_shaped_channel(SensorKind.BODY_TEMPERATURE, EVENING, min_index=6)
            + v_shaped_channel(SensorKind.HEART_RATE, EVENING, min_index=6, base=50.0)
        )
        # 00:00-08:00, mid-sleep 04:00
        history = nightly_sessions(0.0, nights=3)
        phase = estimate_circadian_phase(history, live)
        assert phase_close(phase.current_phase, 4.0 / 24.0)
        assert phase.phase_shift == pytest.approx(-2.0)
        assert phase.confidence == pytest.approx(1.0)

    def test_late_sleeper_shifts_positive(self):
        history = [make_session(d, 4.0) for d in range(3)]  # mid-sleep 08:00
        phase = estimate_circadian_phase(history, [])
        assert phase.phase_shift == pytest.approx(2.0)

    def test_history_without_live_context(self):
        # mid-sleep 06:00 with default temperature and heart-rate markers
        history = [make_session(d, 2.0) for d in range(3)]
        phase = estimate_circadian_phase(history, [])
        assert phase.sleep_phase == pytest.approx(0.25)
        assert phase.confidence == pytest.approx(1.0 - 2.0 / 12.0)

    def test_phase_in_unit_range(self):
        history = [make_session(d, 21.0) for d in range(3)]
        phase = estimate_circadian_phase(history, [])
        assert 0.0 <= phase.current_phase < 1.0
        assert -12.0 < phase.phase_shift <= 12.0
