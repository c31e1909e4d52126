"""
Progression advisor.

Turns one exercise's history plus current readiness and weekly stimulus
into advice for the next time the exercise is trained.  Situations are
checked in a fixed priority order and the first match wins:

    first_time -> deload -> (high readiness) stagnation / normal progression
    -> moderate readiness -> low readiness

Every recommendation carries the readiness values it was computed from.
"""

import logging
import math
from typing import Iterable, Mapping, Sequence

from .config import DEFAULT_CONFIG, ModelConfig, weight_increment
from .metrics import analyze_performance, average_rir, sort_newest_first, workout_volume
from .models import (
    DeloadPrescription,
    DeloadProtocol,
    ExerciseDefinition,
    PerformanceAnalysis,
    ProgressionRecommendation,
    ReadinessBand,
    VolumeRecommendation,
    WorkoutRecord,
)

logger = logging.getLogger(__name__)

ExerciseLibrary = Mapping[str, ExerciseDefinition] | Iterable[ExerciseDefinition]

# Conservative first-session loads when nothing similar has been logged
DEFAULT_STARTING_WEIGHTS: dict[str, float] = {
    "compound_upper": 45.0,
    "compound_lower": 95.0,
    "isolation_upper": 15.0,
    "isolation_lower": 20.0,
}

STARTING_WEIGHT_FACTOR = 0.8
WEIGHT_ROUNDING = 2.5

# Deload prescriptions by severity: set cut, load cut, extra RIR, duration
DELOAD_SEVERITY_PROTOCOLS: dict[str, tuple[float, float, int, str]] = {
    "high": (0.5, 0.3, 3, "1-2 weeks"),
    "moderate": (0.4, 0.2, 2, "1 week"),
    "light": (0.3, 0.15, 1, "3-5 days"),
}


def _round_to(value: float, step: float = WEIGHT_ROUNDING) -> float:
    """Round half up to the nearest multiple of *step*."""
    return math.floor(value / step + 0.5) * step


def find_exercise(library: ExerciseLibrary, exercise_id: str) -> ExerciseDefinition | None:
    """Look an exercise up by id in a mapping or a sequence of definitions."""
    if isinstance(library, Mapping):
        return library.get(exercise_id)
    for ex in library:
        if ex.id == exercise_id:
            return ex
    return None


def _min_primary_readiness(exercise: ExerciseDefinition, muscle_readiness: Mapping[str, float]) -> float:
    """Lowest readiness among primary muscles; muscles without data count as 1.0."""
    values = [muscle_readiness.get(m, 1.0) for m in exercise.primary_muscles]
    return min(values) if values else 1.0


def _avg_primary_stimulus(exercise: ExerciseDefinition, weekly_stimulus: Mapping[str, float]) -> float:
    if not exercise.primary_muscles:
        return 0.0
    return sum(weekly_stimulus.get(m, 0.0) for m in exercise.primary_muscles) / len(exercise.primary_muscles)


# =============================================================================
# DELOAD CONDITIONS
# =============================================================================


def _check_deload_conditions(
    exercise: ExerciseDefinition,
    history: Sequence[WorkoutRecord],
    muscle_readiness: float,
    systemic_readiness: float,
    weekly_stimulus: Mapping[str, float],
    cfg: ModelConfig,
) -> tuple[str, DeloadProtocol] | None:
    """
    First deload sub-case that applies, with its message and protocol.

    Args:
        exercise: Exercise being advised
        history: This exercise's records, newest first
        muscle_readiness: Lowest primary-muscle readiness
        systemic_readiness: Systemic readiness
        weekly_stimulus: Per-muscle weekly stimulus
        cfg: Model configuration

    Returns:
        (message, protocol) or None when no deload is called for
    """
    if systemic_readiness < cfg.critical_systemic_readiness:
        return (
            "Take 3-5 days off or do very light activity only",
            DeloadProtocol(reason="Critical systemic fatigue", duration="3-5 days", full_rest=True),
        )

    if systemic_readiness < cfg.deload_threshold:
        return (
            "Reduce all training volume by 40-50%, increase RIR by 2-3, remove or lighten axial loads",
            DeloadProtocol(
                reason="Systemic fatigue is high",
                duration="4-7 days",
                set_reduction=0.5,
                rir_increase=2,
                weight_reduction=cfg.deload_weight_reduction if exercise.is_axial else 0.2,
            ),
        )

    if muscle_readiness < cfg.deload_threshold:
        return (
            "Reduce volume by 30-40% for this exercise, add 1-2 RIR, or take an extra rest day",
            DeloadProtocol(
                reason="Target muscles need recovery",
                duration="1-2 sessions",
                set_reduction=0.35,
                rir_increase=1,
            ),
        )

    if len(history) >= 3 and muscle_readiness > cfg.overtraining_min_readiness:
        newest, middle, oldest = (workout_volume(r.sets) for r in history[:3])
        if newest < middle < oldest:
            return (
                "Take a deload week to resensitize to training stimulus",
                DeloadProtocol(
                    reason="Performance declining despite adequate recovery - possible overtraining",
                    duration="1 week",
                    set_reduction=cfg.deload_set_reduction,
                    rir_increase=cfg.deload_rir_increase,
                    weight_reduction=0.2,
                ),
            )

    if _avg_primary_stimulus(exercise, weekly_stimulus) > cfg.max_weekly_stimulus:
        return (
            "Reduce total sets this week to allow adaptation",
            DeloadProtocol(
                reason="Weekly volume is excessive for target muscles",
                duration="1 week",
                set_reduction=0.3,
                rir_increase=1,
            ),
        )

    return None


def is_volume_flat(history: Sequence[WorkoutRecord], cfg: ModelConfig | None = None) -> bool:
    """
    Whether recent session volume has plateaued.

    Needs at least three sessions.  Looks at up to STAGNATION_WINDOW of the
    newest; flat means every volume lies within +/- STAGNATION_BAND of their
    mean.  A zero mean is not flat.

    Args:
        history: One exercise's records, newest first
        cfg: Model configuration

    Returns:
        True if volume is flat
    """
    cfg = cfg or DEFAULT_CONFIG
    if len(history) < 3:
        return False
    volumes = [workout_volume(r.sets) for r in history[: cfg.stagnation_window]]
    avg = sum(volumes) / len(volumes)
    if avg <= 0:
        return False
    return all(abs(v - avg) < avg * cfg.stagnation_band for v in volumes)


# =============================================================================
# ADVISOR
# =============================================================================


def get_progression(
    exercise_id: str,
    exercise_library: ExerciseLibrary,
    history: Sequence[WorkoutRecord],
    muscle_readiness: Mapping[str, float],
    systemic_readiness: float,
    weekly_stimulus: Mapping[str, float],
    cfg: ModelConfig | None = None,
) -> ProgressionRecommendation:
    """
    Recommend what to do the next time an exercise is trained.

    Args:
        exercise_id: Exercise to advise on
        exercise_library: Known exercises (mapping by id or a sequence)
        history: Workout records of any exercises, any order
        muscle_readiness: Per-muscle readiness
        systemic_readiness: Systemic readiness
        weekly_stimulus: Per-muscle weekly stimulus
        cfg: Model configuration

    Returns:
        ProgressionRecommendation; advice ``not_found`` (with
        ``found=False``) when the id is not in the library
    """
    cfg = cfg or DEFAULT_CONFIG
    exercise = find_exercise(exercise_library, exercise_id)
    if exercise is None:
        logger.debug("Exercise %r not in library", exercise_id)
        return ProgressionRecommendation(
            advice="not_found",
            readiness_band=None,
            message=f"Exercise not found: {exercise_id}",
            muscle_readiness=1.0,
            systemic_readiness=systemic_readiness,
            found=False,
        )

    muscle = _min_primary_readiness(exercise, muscle_readiness)
    # Records without sets say nothing about performance
    ex_history = sort_newest_first([r for r in history if r.exercise_id == exercise_id and r.sets])

    def rec(advice, band, message, **kwargs) -> ProgressionRecommendation:
        return ProgressionRecommendation(
            advice=advice,
            readiness_band=band,
            message=message,
            muscle_readiness=muscle,
            systemic_readiness=systemic_readiness,
            **kwargs,
        )

    if not ex_history:
        return rec(
            "first_time",
            "high",
            "Start conservative - focus on technique and find your working weight",
            recommended_weight=suggest_starting_weight(exercise, history),
        )

    deload = _check_deload_conditions(
        exercise, ex_history, muscle, systemic_readiness, weekly_stimulus, cfg
    )
    if deload is not None:
        message, protocol = deload
        logger.debug("%s: deload (%s)", exercise_id, protocol.reason)
        return rec(
            "deload",
            "deload",
            message,
            rir_delta=protocol.rir_increase or None,
            rationale=protocol.reason,
            deload_protocol=protocol,
        )

    performance = analyze_performance(ex_history, cfg)
    stagnant = is_volume_flat(ex_history, cfg)
    last = ex_history[0]
    return _determine_progression(
        exercise, last, performance, stagnant, muscle, systemic_readiness, weekly_stimulus, cfg, rec
    )


def _band(muscle: float, systemic: float, cfg: ModelConfig) -> ReadinessBand:
    lowest = min(muscle, systemic)
    if lowest >= cfg.progression_threshold:
        return "high"
    if lowest >= cfg.moderate_readiness_threshold:
        return "moderate"
    return "low"


def _determine_progression(
    exercise: ExerciseDefinition,
    last: WorkoutRecord,
    performance: PerformanceAnalysis,
    stagnant: bool,
    muscle: float,
    systemic: float,
    weekly_stimulus: Mapping[str, float],
    cfg: ModelConfig,
    rec,
) -> ProgressionRecommendation:
    """Readiness-band rules once first-time and deload have been ruled out."""
    avg_rir = performance.average_rir
    increment = weight_increment(exercise.type, cfg)
    next_weight = performance.top_set.weight + increment if performance.top_set else None

    if performance.trend == "insufficient_data":
        return rec(
            "maintain",
            _band(muscle, systemic, cfg),
            "Not enough logged sets to judge progress. Repeat your last working weight.",
            rationale="Latest session has no usable sets",
            performance=performance,
        )

    # High readiness: push for more stimulus
    if muscle >= cfg.progression_threshold and systemic >= cfg.progression_threshold:
        if stagnant:
            if _avg_primary_stimulus(exercise, weekly_stimulus) < cfg.optimal_sets_per_week:
                return rec(
                    "add_volume",
                    "high",
                    "Add 1-2 sets to increase stimulus. Your recovery can handle more volume.",
                    recommended_sets=(len(last.sets) or 3) + 1,
                    rationale="Volume has plateaued but you can handle more",
                    performance=performance,
                )
            if avg_rir <= cfg.rir_progression_threshold:
                return rec(
                    "progress",
                    "high",
                    f"Increase weight by {increment:g}. You're consistently close to failure.",
                    recommended_weight=next_weight,
                    rationale="Performance has plateaued at current volume",
                    performance=performance,
                )
            return rec(
                "reduce_rir",
                "high",
                "Push closer to failure (reduce RIR by 1-2) before adding weight",
                rir_delta=-2 if avg_rir > cfg.high_rir_threshold else -1,
                rationale="Performance has plateaued at current volume",
                performance=performance,
            )

        if avg_rir <= cfg.rir_progression_threshold:
            if performance.long_term_trend == "increasing":
                message = f"Excellent progress! Increase weight by {increment:g}."
                rationale = "Consistent performance improvement with low RIR"
            else:
                message = f"Time to progress. Increase weight by {increment:g}."
                rationale = None
            return rec(
                "progress",
                "high",
                message,
                recommended_weight=next_weight,
                rationale=rationale,
                performance=performance,
            )

        if avg_rir >= cfg.high_rir_threshold:
            return rec(
                "push_harder",
                "high",
                "You have room to push harder. Reduce RIR by 1-2 to maximize stimulus.",
                rir_delta=-2,
                performance=performance,
            )

        return rec(
            "maintain",
            "high",
            "Maintain current approach - you're in the optimal stimulus zone.",
            rationale="Good RIR range (2-3) with high readiness",
            performance=performance,
        )

    # Moderate readiness: hold, or back off if performance is slipping
    if muscle >= cfg.moderate_readiness_threshold and systemic >= cfg.moderate_readiness_threshold:
        if performance.trend == "declined" or performance.long_term_trend == "decreasing":
            return rec(
                "reduce",
                "moderate",
                "Performance is declining. Add 1 RIR and maintain weight to prioritize recovery.",
                rir_delta=1,
                rationale="Recent performance decline suggests accumulated fatigue",
                performance=performance,
            )
        return rec(
            "maintain",
            "moderate",
            "Maintain current load and focus on movement quality and technique.",
            rationale="Moderate readiness - prioritize quality over progression",
            performance=performance,
        )

    return rec(
        "reduce",
        "low",
        "Add 1-2 RIR to reduce fatigue accumulation. Maintain technique focus.",
        rir_delta=2 if muscle < cfg.critical_systemic_readiness else 1,
        rationale="Readiness is below optimal - reducing intensity prevents further fatigue accumulation",
        performance=performance,
    )


# =============================================================================
# PRESCRIPTIONS
# =============================================================================


def generate_deload_protocol(
    exercise: ExerciseDefinition,
    last_performance: WorkoutRecord | None,
    readiness: float,
    cfg: ModelConfig | None = None,
) -> DeloadPrescription:
    """
    Concrete deload session for an exercise.

    Severity follows readiness: below CRITICAL_SYSTEMIC_READINESS is high,
    below MODERATE_READINESS_THRESHOLD moderate, otherwise light.  Without
    a previous session a generic light-load prescription is returned.

    Args:
        exercise: Exercise to deload
        last_performance: Most recent record of the exercise, or None
        readiness: Readiness driving the severity
        cfg: Model configuration

    Returns:
        DeloadPrescription
    """
    cfg = cfg or DEFAULT_CONFIG
    if last_performance is None or not last_performance.sets:
        return DeloadPrescription(
            sets=math.ceil(3 * (1 - cfg.deload_set_reduction)),
            reps=8,
            weight=None,
            rir=4,
            duration="1 week",
        )

    sets = last_performance.sets
    avg_weight = sum(s.weight for s in sets) / len(sets)
    avg_reps = sum(s.reps for s in sets) / len(sets)

    if readiness < cfg.critical_systemic_readiness:
        severity = "high"
    elif readiness < cfg.moderate_readiness_threshold:
        severity = "moderate"
    else:
        severity = "light"
    set_cut, load_cut, extra_rir, duration = DELOAD_SEVERITY_PROTOCOLS[severity]

    instructions = [
        f"Use {round((1 - load_cut) * 100)}% of normal working weight",
        f"Reduce sets by {round(set_cut * 100)}%",
        f"Keep {extra_rir + 2}-{extra_rir + 4} RIR on all sets",
        "Focus on movement quality and technique",
    ]
    if exercise.is_axial:
        instructions.append("Consider removing or significantly lightening this axial exercise")

    return DeloadPrescription(
        sets=max(1, math.ceil(len(sets) * (1 - set_cut))),
        reps=math.ceil(avg_reps * 0.9),
        weight=_round_to(avg_weight * (1 - load_cut)),
        rir=min(5, math.floor(average_rir(sets) + 0.5) + extra_rir),
        duration=duration,
        severity=severity,
        instructions=instructions,
    )


def suggest_starting_weight(exercise: ExerciseDefinition, history: Sequence[WorkoutRecord]) -> float:
    """
    Starting load for an exercise.

    Averages the mean set weight of logged records of the same type that
    share a primary muscle, takes 80% and rounds to 2.5.  With nothing
    similar logged, falls back to a per-type default.
    """
    primaries = set(exercise.primary_muscles)
    similar = [
        r
        for r in history
        if r.exercise_type == exercise.type and r.sets and primaries.intersection(r.primary_muscles)
    ]
    if not similar:
        return DEFAULT_STARTING_WEIGHTS.get(exercise.type, 20.0)

    avg = sum(sum(s.weight for s in r.sets) / len(r.sets) for r in similar) / len(similar)
    return _round_to(avg * STARTING_WEIGHT_FACTOR)


def get_volume_recommendation(
    muscle: str,
    weekly_stimulus: Mapping[str, float],
    muscle_readiness: Mapping[str, float],
    cfg: ModelConfig | None = None,
) -> VolumeRecommendation:
    """
    Weekly set-volume status of one muscle against the volume landmarks.

    Args:
        muscle: Muscle name
        weekly_stimulus: Per-muscle weekly stimulus (sets)
        muscle_readiness: Per-muscle readiness (missing counts as 1.0)
        cfg: Model configuration

    Returns:
        VolumeRecommendation
    """
    cfg = cfg or DEFAULT_CONFIG
    current = weekly_stimulus.get(muscle, 0.0)
    readiness = muscle_readiness.get(muscle, 1.0)
    lo, opt, hi = cfg.min_sets_per_week, cfg.optimal_sets_per_week, cfg.max_sets_per_week

    if current < lo:
        return VolumeRecommendation(
            muscle=muscle,
            status="low",
            recommendation="increase",
            message=f"Add {math.ceil(lo - current)} more sets this week",
            current_sets=current,
            target_sets=lo,
        )
    if current > hi:
        return VolumeRecommendation(
            muscle=muscle,
            status="high",
            recommendation="decrease",
            message=f"Reduce volume by {math.ceil(current - hi)} sets",
            current_sets=current,
            target_sets=hi,
        )
    if current <= opt:
        if readiness > 0.9 and current < opt:
            return VolumeRecommendation(
                muscle=muscle,
                status="good_can_add",
                recommendation="increase_optional",
                message=(
                    "Volume is good, but high readiness suggests room for "
                    f"{math.ceil(opt - current)} more sets"
                ),
                current_sets=current,
                target_sets=opt,
            )
        return VolumeRecommendation(
            muscle=muscle,
            status="optimal",
            recommendation="maintain",
            message="Volume is in optimal range",
            current_sets=current,
        )
    return VolumeRecommendation(
        muscle=muscle,
        status="moderate_high",
        recommendation="monitor",
        message="Volume is on the higher end but manageable",
        current_sets=current,
    )
