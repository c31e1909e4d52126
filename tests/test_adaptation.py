"""Tests for multi-condition deload detection, stimulus efficiency and recovery time."""

import math
from dataclasses import replace

import pytest

from lift_readiness.core.adaptation import (
    calculate_stimulus_efficiency,
    days_to_target,
    detect_stimulus_trend,
    estimate_recovery_time,
    get_deload_recommendation,
    get_stimulus_efficiency,
)
from lift_readiness.core.config import (
    DEFAULT_CONFIG,
    LOCAL_RECOVERY_RATE,
    RECOVERY_TARGET_READINESS,
    STIMULUS_EFFICIENCY_EPSILON,
)
from lift_readiness.core.models import FatigueState, PerformanceErrorEntry, StimulusHistoryEntry


def _stimulus_history(*totals: float) -> list[StimulusHistoryEntry]:
    return [
        StimulusHistoryEntry(date=f"2024-01-{i + 1:02d}", stimulus={"Chest": t}, total=t)
        for i, t in enumerate(totals)
    ]


def _errors(*per_session: tuple[int, ...]) -> list[PerformanceErrorEntry]:
    return [PerformanceErrorEntry(date=f"2024-01-{i + 1:02d}", errors=e) for i, e in enumerate(per_session)]


class TestDeloadRecommendation:
    def test_fresh_state_needs_nothing(self):
        rec = get_deload_recommendation(FatigueState())
        assert rec.needed is False
        assert rec.conditions_met == 0
        assert rec.message == "Recovery is adequate"

    def test_low_systemic_readiness_triggers_basic_check(self):
        rec = get_deload_recommendation(FatigueState(systemic_fatigue=0.5))
        assert rec.needed is True
        assert rec.basic.type == "systemic"
        assert "Low systemic readiness" in rec.conditions

    def test_two_trend_conditions_trigger(self):
        state = FatigueState(
            muscle_soreness={"Chest": 7, "Back": 8, "Quads": 9},
            performance_errors=_errors((-2, 0), (-2, -1)),
        )
        rec = get_deload_recommendation(state)
        assert rec.needed is True
        assert rec.conditions == ["Persistent muscle soreness", "Consistent performance decline"]
        assert rec.message == "Deload recommended: 2 conditions met"

    def test_single_condition_is_not_enough(self):
        state = FatigueState(muscle_soreness={"Chest": 7, "Back": 8, "Quads": 9})
        rec = get_deload_recommendation(state)
        assert rec.needed is False
        assert rec.conditions_met == 1

    def test_two_sore_muscles_do_not_count(self):
        state = FatigueState(muscle_soreness={"Chest": 9, "Back": 9})
        assert get_deload_recommendation(state).conditions_met == 0

    def test_minimum_condition_count_is_configurable(self):
        state = FatigueState(stimulus_history=_stimulus_history(10, 10.5, 9.8))
        rec = get_deload_recommendation(state, replace(DEFAULT_CONFIG, deload_min_conditions=1))
        assert rec.conditions == ["Stimulus plateau despite recovery"]
        assert rec.needed is True

    def test_varied_stimulus_is_no_plateau(self):
        state = FatigueState(stimulus_history=_stimulus_history(6, 12, 9))
        assert get_deload_recommendation(state).conditions_met == 0

    def test_one_good_session_breaks_performance_decline(self):
        state = FatigueState(performance_errors=_errors((-2,), (0, 1)))
        assert get_deload_recommendation(state).conditions_met == 0


class TestStimulusEfficiency:
    def test_ratio_with_epsilon_floor(self):
        eff = calculate_stimulus_efficiency({"Chest": 3, "Back": 2}, {"Chest": 0.5})
        assert eff["Chest"] == pytest.approx(6.0)
        assert eff["Back"] == pytest.approx(2 / STIMULUS_EFFICIENCY_EPSILON)

    @pytest.mark.parametrize(
        "totals, trend",
        [
            ((1, 2, 2, 3), "increasing"),
            ((3, 2, 1, 1), "decreasing"),
            ((1, 3, 2, 4), "stable"),
            ((1, 2, 3), "insufficient_data"),
        ],
    )
    def test_trend(self, totals, trend):
        assert detect_stimulus_trend(_stimulus_history(*totals)) == trend

    def test_latest_session_efficiency(self):
        state = FatigueState(
            local_fatigue={"Chest": 0.25},
            stimulus_history=_stimulus_history(2, 3, 4, 5),
        )
        result = get_stimulus_efficiency(state)
        assert result.efficiency == {"Chest": pytest.approx(20.0)}
        assert result.trend == "increasing"
        assert result.recent_totals == [2, 3, 4, 5]

    def test_no_history(self):
        result = get_stimulus_efficiency(FatigueState())
        assert result.efficiency == {}
        assert result.trend == "insufficient_data"


class TestRecoveryTime:
    """days = ceil(ln(fatigue / -ln(target)) / rate)"""

    def test_formula(self):
        target = -math.log(RECOVERY_TARGET_READINESS)
        expected = math.ceil(math.log(0.5 / target) / LOCAL_RECOVERY_RATE)
        assert days_to_target(0.5, LOCAL_RECOVERY_RATE, RECOVERY_TARGET_READINESS) == expected

    def test_already_recovered(self):
        assert days_to_target(0.0, 0.2, 0.85) == 0
        assert days_to_target(0.1, 0.2, 0.85) == 0

    @pytest.mark.parametrize(
        "fatigue, rate, target",
        [
            (0.5, 0.0, 0.85),  # division by zero
            (0.5, 0.2, 0.0),  # log of zero
            (0.5, 0.2, 1.0),  # zero target fatigue
            (-1.0, 0.2, 0.85),
        ],
    )
    def test_domain_errors_map_to_zero(self, fatigue, rate, target):
        assert days_to_target(fatigue, rate, target) == 0

    def test_estimate_per_muscle_and_systemic(self):
        estimate = estimate_recovery_time({"Chest": 0.6, "Back": 0.05}, 0.3)
        assert estimate.muscle_days["Back"] == 0
        assert estimate.muscle_days["Chest"] > 0
        assert estimate.systemic_days > 0
        assert estimate.max_days == max(estimate.muscle_days["Chest"], estimate.systemic_days)
