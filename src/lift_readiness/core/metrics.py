"""
Pure metric computation functions.

Volume, top set and RIR primitives shared by the progression advisor, plus
the per-exercise analytics shown by the CLI.  Volume (weight x reps) is a
performance measure only; it never feeds fatigue.
"""

from typing import Sequence

from .config import DEFAULT_CONFIG, ModelConfig
from .dates import days_between
from .models import (
    IntensityDistribution,
    LongTermTrend,
    OverloadAnalysis,
    PerformanceAnalysis,
    PersonalRecords,
    RecordSet,
    Trend,
    WorkoutRecord,
    WorkoutSet,
)


def set_volume(s: WorkoutSet) -> float:
    """Volume of one set (weight x reps)."""
    return s.weight * s.reps


def workout_volume(sets: Sequence[WorkoutSet]) -> float:
    """Total volume across sets; 0 for no sets."""
    return sum(set_volume(s) for s in sets)


def top_set(sets: Sequence[WorkoutSet]) -> WorkoutSet | None:
    """
    The set with the largest weight x reps.

    The first such set wins ties; it need not be the heaviest set.
    """
    best: WorkoutSet | None = None
    for s in sets:
        if best is None or set_volume(s) > set_volume(best):
            best = s
    return best


def top_set_volume(sets: Sequence[WorkoutSet]) -> float:
    best = top_set(sets)
    return set_volume(best) if best is not None else 0.0


def average_rir(sets: Sequence[WorkoutSet]) -> float:
    """Mean RIR of the sets; 0 for no sets."""
    if not sets:
        return 0.0
    return sum(s.rir for s in sets) / len(sets)


def sort_newest_first(records: Sequence[WorkoutRecord]) -> list[WorkoutRecord]:
    """Order records by date (newest first), keeping log order within a day reversed."""
    return sorted(records, key=lambda r: (r.date, r.timestamp), reverse=True)


def compare_top_sets(
    last: Sequence[WorkoutSet],
    previous: Sequence[WorkoutSet] | None,
    band: float,
) -> Trend:
    """
    Compare two sessions by top-set volume.

    improved if last > previous * (1 + band), declined if last <
    previous * (1 - band), otherwise stable.
    """
    if not last:
        return "insufficient_data"
    if not previous:
        return "stable"
    last_vol = top_set_volume(last)
    prev_vol = top_set_volume(previous)
    if last_vol > prev_vol * (1 + band):
        return "improved"
    if last_vol < prev_vol * (1 - band):
        return "declined"
    return "stable"


def long_term_trend(volumes: Sequence[float], band: float) -> LongTermTrend:
    """
    Classify a chronological (oldest first) series of volumes.

    increasing: every step v >= prev * (1 - band)
    decreasing: otherwise, every step v <= prev * (1 + band)
    stable: neither
    """
    if len(volumes) < 2:
        return "insufficient_data"
    pairs = list(zip(volumes, volumes[1:]))
    if all(v >= prev * (1 - band) for prev, v in pairs):
        return "increasing"
    if all(v <= prev * (1 + band) for prev, v in pairs):
        return "decreasing"
    return "stable"


def analyze_performance(
    history: Sequence[WorkoutRecord],
    cfg: ModelConfig | None = None,
) -> PerformanceAnalysis:
    """
    Analyse one exercise's recent sessions.

    Args:
        history: Records of a single exercise, newest first
        cfg: Model configuration

    Returns:
        PerformanceAnalysis of the latest session
    """
    cfg = cfg or DEFAULT_CONFIG
    if not history or not history[0].sets:
        return PerformanceAnalysis(
            trend="insufficient_data",
            long_term_trend="insufficient_data",
            average_rir=0.0,
            top_set=None,
            set_count=0,
        )

    last = history[0].sets
    previous = history[1].sets if len(history) > 1 else None
    trend = compare_top_sets(last, previous, cfg.trend_band)

    lt: LongTermTrend = "stable"
    if len(history) >= cfg.stagnation_window:
        window = history[: cfg.stagnation_window]
        volumes = [top_set_volume(r.sets) for r in reversed(window)]
        lt = long_term_trend(volumes, cfg.trend_band)

    return PerformanceAnalysis(
        trend=trend,
        long_term_trend=lt,
        average_rir=average_rir(last),
        top_set=top_set(last),
        set_count=len(last),
    )


# =============================================================================
# ANALYTICS
# =============================================================================


def analyze_progressive_overload(records: Sequence[WorkoutRecord]) -> OverloadAnalysis:
    """
    Session-volume trend of one exercise.

    Counts steps that rise more than 2% and steps that fall more than 2%.
    More than 60% rising steps is increasing; under 30% rising with more
    falls than rises is decreasing; anything else is stable.

    Args:
        records: Records of a single exercise, any order

    Returns:
        OverloadAnalysis
    """
    valid = sorted((r for r in records if r.sets), key=lambda r: (r.date, r.timestamp))
    if len(valid) < 2:
        return OverloadAnalysis(
            trend="insufficient_data",
            message="Need at least 2 workouts to analyze progression",
            workout_count=len(valid),
        )

    volumes = [workout_volume(r.sets) for r in valid]
    ups = downs = 0
    for prev, cur in zip(volumes, volumes[1:]):
        if cur > prev * 1.02:
            ups += 1
        elif cur < prev * 0.98:
            downs += 1

    increase_rate = ups / (len(volumes) - 1)
    trend: LongTermTrend = "stable"
    if increase_rate > 0.6:
        trend = "increasing"
    elif increase_rate < 0.3 and downs > ups:
        trend = "decreasing"

    first, last = volumes[0], volumes[-1]
    change = (last - first) / first * 100 if first > 0 else 0.0

    if trend == "increasing":
        message = f"Volume increasing by {change:.1f}%"
    elif trend == "decreasing":
        message = f"Volume declining by {abs(change):.1f}% - consider deload or recovery"
    else:
        message = "Volume is stable - ready to push for progression"

    return OverloadAnalysis(
        trend=trend,
        message=message,
        workout_count=len(valid),
        starting_volume=first,
        current_volume=last,
        total_change_pct=change,
        increase_rate_pct=increase_rate * 100,
        time_span_days=days_between(valid[0].date, valid[-1].date),
    )


def get_personal_records(records: Sequence[WorkoutRecord]) -> PersonalRecords:
    """Best weight, volume and reps across every set of the records."""
    prs = PersonalRecords()
    for record in sorted(records, key=lambda r: (r.date, r.timestamp)):
        for s in record.sets:
            if prs.max_weight is None or s.weight > prs.max_weight.set.weight:
                prs.max_weight = RecordSet(s, record.date)
            if prs.max_volume is None or set_volume(s) > set_volume(prs.max_volume.set):
                prs.max_volume = RecordSet(s, record.date)
            if prs.max_reps is None or s.reps > prs.max_reps.set.reps:
                prs.max_reps = RecordSet(s, record.date)
    return prs


def get_intensity_distribution(records: Sequence[WorkoutRecord]) -> IntensityDistribution:
    """Percent of sets at RIR 0-1, 2-3 and 4+."""
    high = moderate = low = 0
    for record in records:
        for s in record.sets:
            if s.rir <= 1:
                high += 1
            elif s.rir <= 3:
                moderate += 1
            else:
                low += 1
    total = high + moderate + low
    if total == 0:
        return IntensityDistribution(high=0.0, moderate=0.0, low=0.0, total_sets=0)
    return IntensityDistribution(
        high=high / total * 100,
        moderate=moderate / total * 100,
        low=low / total * 100,
        total_sets=total,
    )


def get_muscle_frequency(
    records: Sequence[WorkoutRecord],
    as_of: str,
    days: int = 7,
) -> dict[str, int]:
    """Times each primary muscle was trained in the *days* up to *as_of*."""
    frequency: dict[str, int] = {}
    for record in records:
        age = days_between(record.date, as_of)
        if 0 <= age < days:
            for muscle in record.primary_muscles:
                frequency[muscle] = frequency.get(muscle, 0) + 1
    return frequency
