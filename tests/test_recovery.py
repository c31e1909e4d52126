"""Tests for rest compliance, rest advice and program cadence checks."""

import pytest

from lift_readiness.core.models import (
    ExerciseDefinition,
    ProgramContext,
    ProgramDay,
    SessionEntry,
    ValidationError,
    WorkoutRecord,
    WorkoutSet,
)
from lift_readiness.core.recovery import (
    calculate_expected_recovery,
    check_rest_compliance,
    get_rest_recommendation,
    suggest_rest_day_placement,
    validate_program_structure,
)

BENCH = ExerciseDefinition(id="bench", name="Bench", type="compound_upper", primary_muscles=("Chest",))
FLY = ExerciseDefinition(id="fly", name="Fly", type="isolation_upper", primary_muscles=("Chest",))
ROW = ExerciseDefinition(id="row", name="Row", type="compound_upper", primary_muscles=("Back",))
SQUAT = ExerciseDefinition(id="squat", name="Squat", type="compound_lower", primary_muscles=("Quads", "Glutes"))
LUNGE = ExerciseDefinition(id="lunge", name="Lunge", type="compound_lower", primary_muscles=("Quads", "Glutes"))


def _trained_on(*days: int) -> list[WorkoutRecord]:
    entry = SessionEntry(exercise=BENCH, sets=[WorkoutSet(100, 5, 2)])
    return [WorkoutRecord.from_entry(entry, f"2024-01-{d:02d}") for d in days]


def _upper_lower() -> list[ProgramDay]:
    return [
        ProgramDay("Upper", exercises=[BENCH, ROW]),
        ProgramDay("Lower", exercises=[SQUAT]),
        ProgramDay("Upper 2", exercises=[FLY, ROW]),
        ProgramDay("Rest", is_rest_day=True),
    ]


class TestRestCompliance:
    def test_no_program_is_compliant(self):
        result = check_rest_compliance(None, _trained_on(1, 2, 3, 4, 5, 6, 7), "2024-01-07")
        assert result.compliant is True
        assert result.warning is False

    def test_program_without_rest_cannot_be_checked(self):
        days = [ProgramDay("A", exercises=[BENCH]), ProgramDay("B", exercises=[ROW])]
        assert check_rest_compliance(days, _trained_on(1, 2, 3), "2024-01-07").compliant is True

    def test_training_every_day_is_overtraining(self):
        # 3 of 4 days train: expect int(7 / 4 * 3) = 5 training days
        result = check_rest_compliance(_upper_lower(), _trained_on(1, 2, 3, 4, 5, 6, 7), "2024-01-07")
        assert result.compliant is False
        assert result.severity == "moderate"
        assert result.actual_rest_days == 0
        assert result.expected_rest_days == 1

    def test_training_rarely_is_undertraining(self):
        result = check_rest_compliance(_upper_lower(), _trained_on(2, 5), "2024-01-07")
        assert result.compliant is False
        assert result.severity == "low"

    def test_matching_frequency(self):
        result = check_rest_compliance(_upper_lower(), _trained_on(1, 2, 3, 5, 6), "2024-01-07")
        assert result.compliant is True
        assert result.compliance == pytest.approx(1.0)

    def test_window_excludes_older_and_future_days(self):
        history = _trained_on(1, 2, 3, 4, 5, 6, 7)
        result = check_rest_compliance(_upper_lower(), history, "2024-01-14", days_to_check=7)
        assert result.actual_rest_days == 7
        assert result.compliant is False


class TestRestRecommendation:
    def test_systemic_fatigue_needs_two_days(self):
        rec = get_rest_recommendation({}, 0.5)
        assert rec.recommend_rest is True
        assert rec.min_rest_days == 2

    def test_average_readiness_without_plan(self):
        assert get_rest_recommendation({"Chest": 0.5, "Back": 0.7}, 0.9).min_rest_days == 1
        assert get_rest_recommendation({"Chest": 0.9}, 0.9).recommend_rest is False

    def test_unrecovered_target_muscle(self):
        rec = get_rest_recommendation({"Chest": 0.55, "Back": 0.95}, 0.9, [BENCH, ROW])
        assert rec.recommend_rest is True
        assert rec.min_rest_days == 1
        assert rec.affected_muscles == {"Chest": 0.55}

    def test_borderline_target_muscle_is_optional(self):
        rec = get_rest_recommendation({"Chest": 0.65}, 0.9, [BENCH])
        assert rec.optional is True
        assert rec.min_rest_days == 0

    def test_untrained_target_muscles_are_ready(self):
        rec = get_rest_recommendation({"Chest": 0.2}, 0.9, [SQUAT])
        assert rec.recommend_rest is False


class TestExpectedRecovery:
    def test_without_program(self):
        result = calculate_expected_recovery(None, "2024-01-01", "2024-01-03")
        assert result.planned_rest_days == 0
        assert result.is_ahead_of_schedule is False

    def test_planned_rest_counts_back_from_today(self):
        # Today is "Upper"; yesterday in the cycle was "Rest"
        program = ProgramContext(days=_upper_lower(), current_day_index=0)
        result = calculate_expected_recovery(program, "2024-01-01", "2024-01-03")
        assert result.actual_recovery_days == 2
        assert result.planned_rest_days == 1
        assert result.expected_recovery_days == 1
        assert result.is_ahead_of_schedule is True
        assert result.is_behind_schedule is False

    def test_on_schedule(self):
        program = ProgramContext(days=_upper_lower(), current_day_index=0)
        result = calculate_expected_recovery(program, "2024-01-02", "2024-01-03")
        assert result.planned_rest_days == 1
        assert result.is_ahead_of_schedule is False

    def test_day_index_must_be_in_cycle(self):
        with pytest.raises(ValidationError):
            ProgramContext(days=_upper_lower(), current_day_index=4)


class TestProgramStructure:
    def test_long_run_without_rest(self):
        days = [ProgramDay(f"Day {i}", exercises=[BENCH] if i % 2 else [SQUAT]) for i in range(5)]
        suggestions = suggest_rest_day_placement(days)
        reasons = [s.reason for s in suggestions]
        assert "No rest days in program" in reasons
        assert "3 consecutive training days" in reasons
        assert suggestions[0].priority == "high"

    def test_back_to_back_overlap(self):
        days = [
            ProgramDay("Legs A", exercises=[SQUAT]),
            ProgramDay("Legs B", exercises=[LUNGE]),
            ProgramDay("Rest", is_rest_day=True),
        ]
        suggestions = suggest_rest_day_placement(days)
        assert len(suggestions) == 1
        assert suggestions[0].reason == "Muscle overlap (Glutes, Quads)"
        assert suggestions[0].priority == "high"
        assert suggestions[0].position == 1

    def test_balanced_program_needs_nothing(self):
        assert suggest_rest_day_placement(_upper_lower()) == []

    def test_empty_program_is_invalid(self):
        result = validate_program_structure([])
        assert result.valid is False
        assert result.errors == ["Program has no days"]

    def test_all_rest_is_invalid(self):
        result = validate_program_structure([ProgramDay("Rest", is_rest_day=True)])
        assert result.valid is False
        assert "Program has no training days" in result.errors

    def test_warnings(self):
        days = [ProgramDay(f"Day {i}", exercises=[BENCH]) for i in range(5)] + [ProgramDay("Empty")]
        result = validate_program_structure(days)
        assert result.valid is True
        assert result.max_consecutive_training == 6
        assert result.rest_days == 0
        assert "Consider adding rest days for better recovery" in result.warnings
        assert 'Training day "Empty" has no exercises' in result.warnings
