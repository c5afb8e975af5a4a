"""Tests for circadia.analytics.risk -- disruption risk scoring."""

import pytest

from circadia.analytics.risk import (
    MESSAGES,
    WEIGHTS,
    risk_level,
    schedule_mismatch,
    score_disruption_risk,
    triggered_conditions,
)
from circadia.models import (
    Chronotype,
    LightExposureProfile,
    RiskLevel,
    SleepTimingAnalysis,
)
from circadia.sources import NEUTRAL_LIGHT

REGULAR = SleepTimingAnalysis(
    average_bedtime=22.5, average_wake_time=6.5, consistency=0.95, session_count=7,
)

CHAOTIC = SleepTimingAnalysis(
    average_bedtime=3.0,
    average_wake_time=11.0,
    bedtime_variation=3.0,
    wake_time_variation=2.0,
    consistency=0.2,
    weekday_weekend_shift=3.0,
    session_count=7,
)

BAD_LIGHT = LightExposureProfile(
    morning_light_exposure=0.1,
    late_night_exposure=0.8,
    blue_light_exposure=0.9,
    total_daily_exposure=0.3,
)


class TestRiskLevel:
    @pytest.mark.parametrize("score,level", [
        (0.0, RiskLevel.LOW),
        (0.29, RiskLevel.LOW),
        (0.3, RiskLevel.MODERATE),
        (0.6, RiskLevel.HIGH),
        (0.8, RiskLevel.SEVERE),
        (1.0, RiskLevel.SEVERE),
    ])
    def test_buckets(self, score, level):
        assert risk_level(score) == level

    def test_rank_order(self):
        assert RiskLevel.LOW.rank < RiskLevel.MODERATE.rank < RiskLevel.HIGH.rank < RiskLevel.SEVERE.rank


class TestScheduleMismatch:
    def test_on_schedule(self):
        assert schedule_mismatch(REGULAR, Chronotype.NEUTRAL) == pytest.approx(0.0)

    def test_clamped(self):
        assert schedule_mismatch(CHAOTIC, Chronotype.NEUTRAL) == 1.0

    def test_owl_schedule_suits_owl(self):
        owl = SleepTimingAnalysis(average_bedtime=0.5, session_count=5)
        assert schedule_mismatch(owl, Chronotype.NIGHT_OWL) == pytest.approx(0.0)
        assert schedule_mismatch(owl, Chronotype.NEUTRAL) == pytest.approx(2.0 / 3.0)

    def test_custom_baseline_bedtime(self):
        late = SleepTimingAnalysis(average_bedtime=0.5, session_count=5)
        assert schedule_mismatch(late, Chronotype.NEUTRAL, baseline_bedtime=0.5) == pytest.approx(0.0)
        risk = score_disruption_risk(late, NEUTRAL_LIGHT, Chronotype.NEUTRAL, baseline_bedtime=0.5)
        assert risk.factors == []

    def test_no_sessions(self):
        assert schedule_mismatch(SleepTimingAnalysis(average_bedtime=12.0), Chronotype.NEUTRAL) == 0.0


class TestScoreDisruptionRisk:
    def test_no_triggers(self):
        risk = score_disruption_risk(REGULAR, NEUTRAL_LIGHT, Chronotype.NEUTRAL)
        assert risk.score == 0.0
        assert risk.level == RiskLevel.LOW
        assert risk.factors == []
        assert risk.recommendations == []

    def test_default_timing_no_triggers(self):
        risk = score_disruption_risk(SleepTimingAnalysis(), NEUTRAL_LIGHT, Chronotype.NEUTRAL)
        assert risk.level == RiskLevel.LOW

    def test_every_trigger_clamps_to_one(self):
        assert sum(WEIGHTS.values()) > 1.0
        risk = score_disruption_risk(CHAOTIC, BAD_LIGHT, Chronotype.NEUTRAL)
        assert risk.score == 1.0
        assert risk.level == RiskLevel.SEVERE
        assert len(risk.factors) == len(WEIGHTS)
        assert len(risk.recommendations) == len(WEIGHTS)

    def test_factors_pair_with_mitigations(self):
        risk = score_disruption_risk(CHAOTIC, BAD_LIGHT, Chronotype.NEUTRAL)
        for factor, mitigation in zip(risk.factors, risk.recommendations):
            assert (factor, mitigation) in MESSAGES.values()

    def test_moderate(self):
        light = LightExposureProfile(
            morning_light_exposure=0.2,
            late_night_exposure=0.5,
            blue_light_exposure=0.0,
            total_daily_exposure=0.4,
        )
        risk = score_disruption_risk(REGULAR, light, Chronotype.NEUTRAL)
        assert risk.score == pytest.approx(0.45)
        assert risk.level == RiskLevel.MODERATE

    def test_social_jet_lag_sign_ignored(self):
        timing = SleepTimingAnalysis(
            average_bedtime=22.5, consistency=0.9, weekday_weekend_shift=-1.5, session_count=7,
        )
        assert triggered_conditions(timing, NEUTRAL_LIGHT, Chronotype.NEUTRAL) == ["social_jet_lag"]

    def test_score_in_unit_range(self):
        for timing in (REGULAR, CHAOTIC, SleepTimingAnalysis()):
            for light in (NEUTRAL_LIGHT, BAD_LIGHT):
                for chrono in Chronotype:
                    assert 0.0 <= score_disruption_risk(timing, light, chrono).score <= 1.0
