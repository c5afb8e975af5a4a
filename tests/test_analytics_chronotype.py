"""Tests for circadia.analytics.chronotype -- classification and schedule."""

import pytest

from circadia.analytics.chronotype import (
    ADJUSTMENTS,
    chronotype_adjustment,
    classify_chronotype,
    mid_sleep_hour,
    optimal_schedule,
    target_sleep_hours,
)
from circadia.models import Chronotype

from tests.conftest import nightly_sessions


class TestMidSleep:
    def test_after_midnight(self):
        assert mid_sleep_hour(nightly_sessions(22.5, nights=3)) == pytest.approx(2.5)

    def test_before_midnight_is_negative(self):
        assert mid_sleep_hour(nightly_sessions(20.0, nights=3, sleep_hours=7.0)) == pytest.approx(-0.5)

    def test_none_without_sessions(self):
        assert mid_sleep_hour([]) is None


class TestClassifyChronotype:
    def test_neutral_schedule(self):
        assert classify_chronotype(nightly_sessions(22.5)) == Chronotype.NEUTRAL

    def test_early_bird(self):
        # 21:00-05:00, mid-sleep 01:00
        assert classify_chronotype(nightly_sessions(21.0)) == Chronotype.EARLY_BIRD

    def test_night_owl(self):
        # 01:00-09:00, mid-sleep 05:00
        assert classify_chronotype(nightly_sessions(1.0)) == Chronotype.NIGHT_OWL

    def test_too_few_sessions(self):
        assert classify_chronotype(nightly_sessions(1.0, nights=2)) == Chronotype.NEUTRAL

    def test_empty(self):
        assert classify_chronotype([]) == Chronotype.NEUTRAL


class TestAdjustments:
    def test_table(self):
        assert chronotype_adjustment(Chronotype.EARLY_BIRD).schedule_shift_hours == -1.5
        assert chronotype_adjustment(Chronotype.EARLY_BIRD).extra_sleep_minutes == 15.0
        assert chronotype_adjustment(Chronotype.NEUTRAL).schedule_shift_hours == 0.0
        assert chronotype_adjustment(Chronotype.NIGHT_OWL).schedule_shift_hours == 2.0
        assert chronotype_adjustment(Chronotype.NIGHT_OWL).extra_sleep_minutes == 30.0

    def test_every_chronotype_covered(self):
        assert set(ADJUSTMENTS) == set(Chronotype)


class TestOptimalSchedule:
    def test_neutral(self):
        assert optimal_schedule(Chronotype.NEUTRAL) == pytest.approx((22.5, 6.5))

    def test_early_bird(self):
        assert optimal_schedule(Chronotype.EARLY_BIRD) == pytest.approx((21.0, 5.0))

    def test_night_owl_wraps_past_midnight(self):
        assert optimal_schedule(Chronotype.NIGHT_OWL) == pytest.approx((0.5, 8.5))

    def test_custom_baseline(self):
        bed, wake = optimal_schedule(Chronotype.NEUTRAL, baseline_bedtime=23.0, sleep_hours=7.0)
        assert (bed, wake) == pytest.approx((23.0, 6.0))

    def test_wake_moves_with_bedtime(self):
        neutral_bed, neutral_wake = optimal_schedule(Chronotype.NEUTRAL)
        for chronotype in (Chronotype.EARLY_BIRD, Chronotype.NIGHT_OWL):
            bed, wake = optimal_schedule(chronotype)
            assert (wake - bed) % 24.0 == pytest.approx((neutral_wake - neutral_bed) % 24.0)


class TestTargetSleepHours:
    def test_neutral(self):
        assert target_sleep_hours(Chronotype.NEUTRAL) == pytest.approx(8.0)

    def test_early_bird_extra_quarter_hour(self):
        assert target_sleep_hours(Chronotype.EARLY_BIRD) == pytest.approx(8.25)

    def test_night_owl_extra_half_hour(self):
        assert target_sleep_hours(Chronotype.NIGHT_OWL, sleep_hours=7.0) == pytest.approx(7.5)
