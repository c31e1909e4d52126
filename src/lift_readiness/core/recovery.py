"""
Rest-day and program cadence utilities.

Compares actual training frequency with a program's planned rest days,
advises rest before the next session, and checks program structure.
"""

import logging
from typing import Mapping, Sequence

from .dates import days_between
from .fatigue import count_planned_rest_days
from .models import (
    ExerciseDefinition,
    ExpectedRecovery,
    ProgramContext,
    ProgramDay,
    ProgramValidation,
    RestCompliance,
    RestDaySuggestion,
    RestRecommendation,
    WorkoutRecord,
)

logger = logging.getLogger(__name__)

OVERTRAINING_RATIO = 1.3  # trained days above expected * ratio
UNDERTRAINING_RATIO = 0.7  # trained days below expected * ratio
REST_SYSTEMIC_THRESHOLD = 0.6
REST_MUSCLE_THRESHOLD = 0.6
REST_CAUTION_THRESHOLD = 0.7
REST_AVERAGE_THRESHOLD = 0.65


def check_rest_compliance(
    program: Sequence[ProgramDay] | None,
    history: Sequence[WorkoutRecord],
    as_of: str,
    days_to_check: int = 7,
) -> RestCompliance:
    """
    Check actual training days against the program's rest cadence.

    Expected training days over the window follow the program's ratio of
    training to total days.  Training on more than 1.3x that many distinct
    days is over-training; fewer than 0.7x is under-training.  Programs
    without rest days cannot be checked and count as compliant.

    Args:
        program: Program cycle days, or None
        history: Workout records (any exercises)
        as_of: Last day of the window (YYYY-MM-DD)
        days_to_check: Window length in days, ending on *as_of*

    Returns:
        RestCompliance
    """
    if not program:
        return RestCompliance(compliant=True, warning=False)

    total = len(program)
    rest = sum(1 for d in program if d.is_rest_day)
    training = total - rest
    if rest == 0:
        return RestCompliance(compliant=True, warning=False)

    trained_days = {
        r.date for r in history if 0 <= days_between(r.date, as_of) < days_to_check
    }
    n_trained = len(trained_days)
    expected_training = int(days_to_check / total * training)
    expected_rest = int(days_to_check / total * rest)
    actual_rest = max(0, days_to_check - n_trained)
    logger.debug(
        "Rest compliance: trained %d/%d days, expected %d",
        n_trained,
        days_to_check,
        expected_training,
    )

    if n_trained > expected_training * OVERTRAINING_RATIO:
        return RestCompliance(
            compliant=False,
            warning=True,
            severity="moderate",
            message=(
                f"Your program includes {rest} rest days per {total}-day cycle, but you've "
                f"trained {n_trained} of the last {days_to_check} days. Consider following "
                "your program's rest schedule for better recovery."
            ),
            recommendation="Take scheduled rest days to optimize recovery and prevent overtraining",
            expected_rest_days=expected_rest,
            actual_rest_days=actual_rest,
        )

    if n_trained < expected_training * UNDERTRAINING_RATIO:
        return RestCompliance(
            compliant=False,
            warning=True,
            severity="low",
            message=(
                f"You're training {n_trained} days in {days_to_check}, but your program "
                f"suggests {expected_training} training days."
            ),
            recommendation="Consider increasing training frequency to match your program",
            expected_rest_days=expected_rest,
            actual_rest_days=actual_rest,
        )

    return RestCompliance(
        compliant=True,
        warning=False,
        message="Training frequency matches your program",
        compliance=expected_training / (n_trained or 1) if expected_training > 0 else 1.0,
        expected_rest_days=expected_rest,
        actual_rest_days=actual_rest,
    )


def get_rest_recommendation(
    muscle_readiness: Mapping[str, float],
    systemic_readiness: float,
    next_day_exercises: Sequence[ExerciseDefinition] | None = None,
) -> RestRecommendation:
    """
    Rest advice before the next session.

    Systemic readiness below 0.6 asks for two rest days.  Otherwise the
    primary muscles of the next session decide: any below 0.6 asks for one
    day, any below 0.7 suggests trimming volume.  Without a planned session
    the average muscle readiness is used instead.

    Args:
        muscle_readiness: Per-muscle readiness
        systemic_readiness: Systemic readiness
        next_day_exercises: Exercises planned for the next session

    Returns:
        RestRecommendation
    """
    if systemic_readiness < REST_SYSTEMIC_THRESHOLD:
        return RestRecommendation(
            recommend_rest=True,
            min_rest_days=2,
            reason="Systemic fatigue is high",
            message="Take at least 2 rest days before your next session",
        )

    if not next_day_exercises:
        values = list(muscle_readiness.values())
        avg = sum(values) / len(values) if values else 1.0
        if avg < REST_AVERAGE_THRESHOLD:
            return RestRecommendation(
                recommend_rest=True,
                min_rest_days=1,
                reason="Overall muscle fatigue is elevated",
                message="Consider an extra rest day",
            )
        return RestRecommendation(
            recommend_rest=False,
            min_rest_days=0,
            reason="Recovery is adequate",
            message="Ready to train",
        )

    targets: dict[str, float] = {}
    for ex in next_day_exercises:
        for m in ex.primary_muscles:
            targets[m] = muscle_readiness.get(m, 1.0)
    if not targets:
        return RestRecommendation(
            recommend_rest=False,
            min_rest_days=0,
            reason="Target muscles are recovered",
            message="Ready to train",
        )

    low = {m: r for m, r in targets.items() if r < REST_CAUTION_THRESHOLD}
    if min(targets.values()) < REST_MUSCLE_THRESHOLD:
        return RestRecommendation(
            recommend_rest=True,
            min_rest_days=1,
            reason=f"Target muscles ({', '.join(low)}) are not recovered",
            message="Add a rest day before training these muscles",
            affected_muscles=low,
        )
    if low:
        return RestRecommendation(
            recommend_rest=True,
            min_rest_days=0,
            reason="Some target muscles have lower readiness",
            message="Consider reducing volume or intensity for affected muscles",
            affected_muscles=low,
            optional=True,
        )
    return RestRecommendation(
        recommend_rest=False,
        min_rest_days=0,
        reason="Target muscles are recovered",
        message="Ready to train",
    )


def calculate_expected_recovery(
    program: ProgramContext | None,
    last_workout_date: str | None,
    current_date: str,
) -> ExpectedRecovery:
    """
    Rest actually taken since the last workout versus rest the program planned.

    Planned rest days are counted walking the cycle backwards from the day
    before the current day, one step per elapsed day (at most one cycle).

    Args:
        program: Active program with today's day index, or None
        last_workout_date: Last training day, or None
        current_date: Today (YYYY-MM-DD)

    Returns:
        ExpectedRecovery
    """
    if program is None or not program.days or last_workout_date is None:
        return ExpectedRecovery(
            expected_recovery_days=0,
            actual_recovery_days=0,
            planned_rest_days=0,
            is_ahead_of_schedule=False,
            is_behind_schedule=False,
        )

    actual = abs(days_between(last_workout_date, current_date))
    planned = count_planned_rest_days(program, actual)
    return ExpectedRecovery(
        expected_recovery_days=max(planned, 1),
        actual_recovery_days=actual,
        planned_rest_days=planned,
        is_ahead_of_schedule=actual > planned,
        is_behind_schedule=0 < planned and actual < planned,
    )


_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def suggest_rest_day_placement(program_days: Sequence[ProgramDay]) -> list[RestDaySuggestion]:
    """
    Suggest where rest days would help a program.

    Flags runs of three or more training days not followed by rest, long
    programs with no rest at all, and back-to-back days sharing primary
    muscles.  Suggestions come back highest priority first.

    Args:
        program_days: Program cycle days

    Returns:
        Suggestions (empty when placement looks fine)
    """
    suggestions: list[RestDaySuggestion] = []

    run = 0
    for i, day in enumerate(program_days):
        if day.is_rest_day:
            run = 0
            continue
        run += 1
        if run >= 3:
            nxt = program_days[i + 1] if i + 1 < len(program_days) else None
            if nxt is None or not nxt.is_rest_day:
                suggestions.append(
                    RestDaySuggestion(
                        position=i + 1,
                        reason=f"{run} consecutive training days",
                        message=f'Consider adding a rest day after "{day.name}"',
                        priority="high" if run >= 4 else "medium",
                    )
                )

    if program_days and len(program_days) > 3 and not any(d.is_rest_day for d in program_days):
        suggestions.append(
            RestDaySuggestion(
                position=len(program_days) // 2,
                reason="No rest days in program",
                message="Add at least one rest day to support recovery",
                priority="high",
            )
        )

    for i, (a, b) in enumerate(zip(program_days, program_days[1:])):
        if a.is_rest_day or b.is_rest_day:
            continue
        overlap = sorted(a.target_muscles & b.target_muscles)
        if overlap:
            joined = ", ".join(overlap)
            suggestions.append(
                RestDaySuggestion(
                    position=i + 1,
                    reason=f"Muscle overlap ({joined})",
                    message=f'"{a.name}" and "{b.name}" both train {joined}',
                    priority="high" if len(overlap) >= 2 else "low",
                )
            )

    return sorted(suggestions, key=lambda s: _PRIORITY_ORDER[s.priority])


def validate_program_structure(program_days: Sequence[ProgramDay]) -> ProgramValidation:
    """
    Structural check of a program.

    Errors: no days, or no training days.  Warnings: no rest in a program
    longer than four days, more than four consecutive training days, and
    training days without exercises.
    """
    if not program_days:
        return ProgramValidation(valid=False, errors=["Program has no days"])

    errors: list[str] = []
    warnings_: list[str] = []
    training = [d for d in program_days if not d.is_rest_day]
    rest = len(program_days) - len(training)

    if not training:
        errors.append("Program has no training days")
    if rest == 0 and len(program_days) > 4:
        warnings_.append("Consider adding rest days for better recovery")

    longest = run = 0
    for day in program_days:
        run = 0 if day.is_rest_day else run + 1
        longest = max(longest, run)
    if longest > 4:
        warnings_.append(f"{longest} consecutive training days may be too much - consider adding rest")

    for day in training:
        if not day.exercises:
            warnings_.append(f'Training day "{day.name}" has no exercises')

    return ProgramValidation(
        valid=not errors,
        errors=errors,
        warnings=warnings_,
        total_days=len(program_days),
        training_days=len(training),
        rest_days=rest,
        max_consecutive_training=longest,
    )
