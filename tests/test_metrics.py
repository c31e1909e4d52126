"""Tests for volume primitives, performance trends and exercise analytics."""

import pytest

from lift_readiness.core.config import TREND_BAND
from lift_readiness.core.metrics import (
    analyze_performance,
    analyze_progressive_overload,
    average_rir,
    compare_top_sets,
    get_intensity_distribution,
    get_muscle_frequency,
    get_personal_records,
    long_term_trend,
    sort_newest_first,
    top_set,
    workout_volume,
)
from lift_readiness.core.models import ExerciseDefinition, SessionEntry, WorkoutRecord, WorkoutSet

BENCH = ExerciseDefinition(id="bench", name="Bench", type="compound_upper", primary_muscles=("Chest",))
SQUAT = ExerciseDefinition(id="squat", name="Squat", type="compound_lower", primary_muscles=("Quads", "Glutes"))


def _record(date: str, *sets: tuple[float, int, int], ex=BENCH, timestamp: str = "") -> WorkoutRecord:
    entry = SessionEntry(exercise=ex, sets=[WorkoutSet(w, r, rir) for w, r, rir in sets])
    return WorkoutRecord.from_entry(entry, date, timestamp)


class TestPrimitives:
    def test_volume(self):
        assert workout_volume([WorkoutSet(100, 5, 2), WorkoutSet(50, 10, 2)]) == 1000
        assert workout_volume([]) == 0

    def test_top_set_is_largest_volume_not_heaviest(self):
        heavy = WorkoutSet(120, 2, 0)
        bulky = WorkoutSet(80, 10, 2)
        assert top_set([heavy, bulky]) is bulky

    def test_top_set_first_wins_ties(self):
        a = WorkoutSet(100, 6, 2)
        b = WorkoutSet(60, 10, 1)
        assert top_set([a, b]) is a
        assert top_set([]) is None

    def test_average_rir(self):
        assert average_rir([WorkoutSet(100, 5, 1), WorkoutSet(100, 5, 3)]) == 2
        assert average_rir([]) == 0

    def test_newest_first(self):
        records = [_record("2024-01-03", (100, 5, 2)), _record("2024-01-05", (100, 5, 2))]
        assert [r.date for r in sort_newest_first(records)] == ["2024-01-05", "2024-01-03"]


class TestTrends:
    @pytest.mark.parametrize(
        "last, previous, trend",
        [
            ((110, 5, 2), (100, 5, 2), "improved"),
            ((90, 5, 2), (100, 5, 2), "declined"),
            ((102, 5, 2), (100, 5, 2), "stable"),
        ],
    )
    def test_compare_top_sets(self, last, previous, trend):
        assert compare_top_sets([WorkoutSet(*last)], [WorkoutSet(*previous)], TREND_BAND) == trend

    def test_compare_without_previous(self):
        assert compare_top_sets([WorkoutSet(100, 5, 2)], None, TREND_BAND) == "stable"
        assert compare_top_sets([], None, TREND_BAND) == "insufficient_data"

    @pytest.mark.parametrize(
        "volumes, trend",
        [
            ((100, 110, 120), "increasing"),
            ((100, 97, 110), "increasing"),
            ((120, 100, 90), "decreasing"),
            ((100, 130, 80), "stable"),
            ((100,), "insufficient_data"),
        ],
    )
    def test_long_term_trend(self, volumes, trend):
        assert long_term_trend(volumes, TREND_BAND) == trend

    def test_analyze_empty(self):
        result = analyze_performance([])
        assert result.trend == "insufficient_data"
        assert result.top_set is None
        assert result.set_count == 0

    def test_analyze_latest_session(self):
        history = [
            _record("2024-01-04", (100, 8, 1), (100, 7, 0)),
            _record("2024-01-01", (90, 8, 2)),
        ]
        result = analyze_performance(history)
        assert result.trend == "improved"
        assert result.long_term_trend == "stable"
        assert result.average_rir == pytest.approx(0.5)
        assert result.top_set == WorkoutSet(100, 8, 1)
        assert result.set_count == 2


class TestProgressiveOverload:
    def test_needs_two_workouts(self):
        result = analyze_progressive_overload([_record("2024-01-01", (100, 5, 2))])
        assert result.trend == "insufficient_data"
        assert result.workout_count == 1

    def test_increasing(self):
        records = [
            _record("2024-01-07", (120, 5, 2)),
            _record("2024-01-01", (100, 5, 2)),
            _record("2024-01-04", (110, 5, 2)),
        ]
        result = analyze_progressive_overload(records)
        assert result.trend == "increasing"
        assert result.total_change_pct == pytest.approx(20.0)
        assert result.time_span_days == 6
        assert result.message == "Volume increasing by 20.0%"

    def test_decreasing(self):
        records = [
            _record("2024-01-01", (100, 5, 2)),
            _record("2024-01-04", (90, 5, 2)),
            _record("2024-01-07", (80, 5, 2)),
        ]
        result = analyze_progressive_overload(records)
        assert result.trend == "decreasing"
        assert result.message.startswith("Volume declining by 20.0%")

    def test_stable(self):
        records = [_record(f"2024-01-0{d}", (100, 5, 2)) for d in (1, 3, 5)]
        assert analyze_progressive_overload(records).trend == "stable"


class TestAnalytics:
    def test_personal_records(self):
        records = [
            _record("2024-01-01", (100, 5, 2), (60, 15, 3)),
            _record("2024-01-04", (110, 3, 1)),
        ]
        prs = get_personal_records(records)
        assert prs.max_weight.set.weight == 110
        assert prs.max_weight.date == "2024-01-04"
        assert prs.max_volume.set == WorkoutSet(60, 15, 3)
        assert prs.max_reps.set.reps == 15

    def test_personal_records_empty(self):
        assert get_personal_records([]).max_weight is None

    def test_intensity_distribution(self):
        record = _record("2024-01-01", *[(100, 5, rir) for rir in range(6)])
        dist = get_intensity_distribution([record])
        assert dist.total_sets == 6
        assert dist.high == pytest.approx(100 / 3)
        assert dist.moderate == pytest.approx(100 / 3)
        assert dist.low == pytest.approx(100 / 3)

    def test_intensity_distribution_empty(self):
        assert get_intensity_distribution([]).total_sets == 0

    def test_muscle_frequency(self):
        records = [
            _record("2024-01-01", (100, 5, 2)),
            _record("2024-01-05", (100, 5, 2)),
            _record("2024-01-06", (100, 5, 2), ex=SQUAT),
            _record("2024-01-09", (100, 5, 2)),
        ]
        assert get_muscle_frequency(records, "2024-01-07") == {"Chest": 2, "Quads": 1, "Glutes": 1}
