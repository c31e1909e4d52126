"""
Fatigue engine: set cost, exponential recovery, session ingestion.

The state is caller-owned.  Every function here takes a FatigueState and
returns a new one; nothing is mutated in place and nothing is persisted.

Per-set cost is driven by proximity to failure (RIR) and by the exercise's
compound/axial classification.  Weight and reps only feed volume, which is
tracked for display and trend analysis, never for fatigue.
"""

import logging

from .config import DEFAULT_CONFIG, MUSCLES, ModelConfig
from .dates import days_between, is_calendar_day
from .models import (
    DeloadCheck,
    ExerciseFatigue,
    FatigueState,
    PerformanceErrorEntry,
    ProgramContext,
    Readiness,
    ReadinessHistoryEntry,
    Session,
    SessionEntry,
    SessionUpdate,
    SetFatigue,
    StimulusHistoryEntry,
    ValidationError,
    WorkoutSet,
)

logger = logging.getLogger(__name__)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


# =============================================================================
# SET / EXERCISE COST
# =============================================================================


def intensity_factor(rir: float) -> float:
    """
    Proximity-to-failure factor.

    factor = 1 + (10 - RIR) / 20, so RIR 0 -> 1.5 and RIR 10 -> 1.0.
    """
    return 1 + (10 - rir) / 20


def calculate_set_fatigue(
    workout_set: WorkoutSet,
    exercise_type: str,
    is_axial: bool = False,
    cfg: ModelConfig | None = None,
) -> SetFatigue:
    """
    Fatigue cost of one set.

    local    = BASE_FATIGUE_PER_SET * intensity_factor(RIR)
    systemic = local * SYSTEMIC_SHARE (* AXIAL_LOAD_MULTIPLIER if axial)

    Compound exercises then scale local by COMPOUND_LOCAL_MULTIPLIER and
    systemic by COMPOUND_SYSTEMIC_MULTIPLIER.

    Args:
        workout_set: Logged set
        exercise_type: Exercise type of the owning exercise
        is_axial: Whether the exercise loads the spine
        cfg: Model configuration

    Returns:
        SetFatigue with local and systemic contributions
    """
    cfg = cfg or DEFAULT_CONFIG
    local = cfg.base_fatigue_per_set * intensity_factor(workout_set.rir)
    systemic = local * cfg.systemic_share
    if is_axial:
        systemic *= cfg.axial_load_multiplier
    if "compound" in exercise_type:
        local *= cfg.compound_local_multiplier
        systemic *= cfg.compound_systemic_multiplier
    return SetFatigue(local=local, systemic=systemic)


def calculate_exercise_fatigue(
    entry: SessionEntry,
    cfg: ModelConfig | None = None,
) -> ExerciseFatigue:
    """
    Sum set costs for one exercise and split local fatigue across muscles.

    Primary muscles take the full local total, secondary and tertiary
    muscles a reduced share (role weights from config).  Contributions are
    additive per muscle.

    Args:
        entry: Exercise with its sets
        cfg: Model configuration

    Returns:
        ExerciseFatigue totals, volume, per-muscle split and set count
    """
    cfg = cfg or DEFAULT_CONFIG
    ex = entry.exercise

    total_local = 0.0
    total_systemic = 0.0
    total_volume = 0.0
    for s in entry.sets:
        cost = calculate_set_fatigue(s, ex.type, ex.is_axial, cfg)
        total_local += cost.local
        total_systemic += cost.systemic
        total_volume += s.volume

    muscle_fatigue: dict[str, float] = {}
    for muscles, weight in (
        (ex.primary_muscles, cfg.primary_muscle_multiplier),
        (ex.secondary_muscles, cfg.secondary_muscle_multiplier),
        (ex.tertiary_muscles, cfg.tertiary_muscle_multiplier),
    ):
        for muscle in muscles:
            muscle_fatigue[muscle] = muscle_fatigue.get(muscle, 0.0) + total_local * weight

    return ExerciseFatigue(
        total_local=total_local,
        total_systemic=total_systemic,
        total_volume=total_volume,
        muscle_fatigue=muscle_fatigue,
        set_count=len(entry.sets),
    )


# =============================================================================
# RECOVERY
# =============================================================================


def count_planned_rest_days(program: ProgramContext | None, elapsed_days: int) -> int:
    """
    Planned rest days inside the elapsed window.

    Walks the program cycle backwards from the day before the current day,
    at most one full cycle and at most ``elapsed_days`` steps.

    Args:
        program: Active program, or None
        elapsed_days: Whole days since the reference date

    Returns:
        Number of scheduled rest days in the window
    """
    if program is None or not program.days or elapsed_days <= 0:
        return 0

    n = len(program.days)
    count = 0
    index = program.current_day_index - 1
    for _ in range(min(elapsed_days, n)):
        if index < 0:
            index = n - 1
        if program.days[index].is_rest_day:
            count += 1
        index -= 1
    return count


def calculate_recovery(
    state: FatigueState,
    from_date: str | None,
    to_date: str,
    cfg: ModelConfig | None = None,
    planned_rest_days: int = 0,
) -> FatigueState:
    """
    Exponential recovery over whole elapsed days.

    fatigue' = fatigue * (1 - rate)^days, with the local rate for muscles
    and the systemic rate for systemic fatigue.  Each planned rest day in the
    window applies a further (1 - REST_DAY_RECOVERY_BONUS).

    days = |to_date - from_date| in whole days.  With no from_date, or zero
    elapsed days, the state comes back unchanged.  Only fatigue decays here;
    weekly stimulus runs on its own clock (decay_weekly_stimulus).

    Args:
        state: Fatigue state to recover
        from_date: Reference day (YYYY-MM-DD) or None
        to_date: Target day (YYYY-MM-DD)
        cfg: Model configuration
        planned_rest_days: Scheduled rest days inside the window

    Returns:
        New FatigueState with decayed fatigue
    """
    cfg = cfg or DEFAULT_CONFIG
    if from_date is None:
        return state.copy()

    signed = days_between(from_date, to_date)
    if signed < 0:
        logger.warning("Recovery requested backwards in time (%s -> %s)", from_date, to_date)
    days = abs(signed)
    if days <= 0:
        return state.copy()

    bonus = (1 - cfg.rest_day_recovery_bonus) ** max(0, min(planned_rest_days, days))
    local_factor = (1 - cfg.local_recovery_rate) ** days * bonus
    systemic_factor = (1 - cfg.systemic_recovery_rate) ** days * bonus

    local = {m: max(0.0, f * local_factor) for m, f in state.local_fatigue.items()}
    systemic = max(0.0, state.systemic_fatigue * systemic_factor)
    logger.debug(
        "Recovered %d day(s) (%d planned rest): local x%.4f, systemic x%.4f",
        days,
        planned_rest_days,
        local_factor,
        systemic_factor,
    )
    return state.copy(local_fatigue=local, systemic_fatigue=systemic)


def decay_weekly_stimulus(
    weekly_stimulus: dict[str, float],
    days: int,
    cfg: ModelConfig | None = None,
) -> dict[str, float]:
    """
    Decay the rolling set count: s' = max(0, s * (1 - STIMULUS_DECAY_RATE)^days).

    Args:
        weekly_stimulus: Per-muscle stimulus
        days: Whole elapsed days (<= 0 leaves values unchanged)
        cfg: Model configuration

    Returns:
        New per-muscle stimulus mapping
    """
    cfg = cfg or DEFAULT_CONFIG
    if days <= 0:
        return dict(weekly_stimulus)
    factor = (1 - cfg.stimulus_decay_rate) ** days
    return {m: max(0.0, s * factor) for m, s in weekly_stimulus.items()}


def _elapsed_days(state: FatigueState, date: str) -> int:
    """Forward days from the state's reference date; 0 for a backdated day."""
    ref = state.reference_date
    if ref is None:
        return 0
    days = days_between(ref, date)
    if days < 0:
        logger.warning(
            "Date %s is before the last state update %s; no recovery applied",
            date,
            ref,
        )
        return 0
    return days


def _recover_to(
    state: FatigueState,
    date: str,
    program_context: ProgramContext | None,
    cfg: ModelConfig,
) -> tuple[FatigueState, int, int]:
    """Apply fatigue recovery and stimulus decay from the reference date to *date*."""
    days = _elapsed_days(state, date)
    if days == 0:
        return state.copy(), 0, 0

    planned = count_planned_rest_days(program_context, days)
    recovered = calculate_recovery(state, state.reference_date, date, cfg, planned)
    recovered.weekly_stimulus = decay_weekly_stimulus(state.weekly_stimulus, days, cfg)
    return recovered, days, planned


def _later(a: str | None, b: str) -> str:
    if a is None:
        return b
    return a if a > b else b


def apply_recovery(
    state: FatigueState,
    date: str,
    program_context: ProgramContext | None = None,
    cfg: ModelConfig | None = None,
) -> FatigueState:
    """
    Recovery-only transition up to *date*.

    Decays fatigue and weekly stimulus from ``last_update_date`` (or
    ``last_workout_date``) and moves ``last_update_date``.  The last
    training date is left alone.

    Args:
        state: Current state
        date: Day to bring the state forward to
        program_context: Active program, for the rest-day bonus
        cfg: Model configuration

    Returns:
        Recovered FatigueState
    """
    cfg = cfg or DEFAULT_CONFIG
    recovered, _, _ = _recover_to(state, date, program_context, cfg)
    recovered.last_update_date = _later(state.last_update_date, date)
    return recovered


def _append_bounded(items: list, item, limit: int) -> list:
    return (items + [item])[-limit:] if limit > 0 else []


def update_fatigue_from_session(
    session: Session,
    date: str,
    state: FatigueState | None = None,
    program_context: ProgramContext | None = None,
    cfg: ModelConfig | None = None,
) -> SessionUpdate:
    """
    Ingest one day's training into the fatigue state.

    Steps, in order:
    1. Recover from the reference date to *date* (fatigue and stimulus).
    2. Accrue each exercise's fatigue (all muscle roles) and, separately,
       its set count into weekly stimulus (primary muscles only).
    3. Add (perceived_fatigue - 5) / 50 to systemic fatigue.
    4. Add soreness / 100 to each sore muscle's local fatigue.
    5. Clamp every fatigue value to [0, 1].
    6. Derive readiness.

    A session without sets is a rest day: only step 1 runs, soreness is
    recorded but not accrued, and ``last_workout_date`` keeps its value.

    Args:
        session: Exercises with sets plus observations
        date: Calendar day of the session (YYYY-MM-DD)
        state: Prior state; None means fresh (zero fatigue)
        program_context: Active program, for the rest-day bonus
        cfg: Model configuration

    Returns:
        SessionUpdate with the new state, readiness, the session's per-muscle
        stimulus and the rest-day flag
    """
    cfg = cfg or DEFAULT_CONFIG
    state = state or FatigueState()
    if not is_calendar_day(date):
        raise ValidationError(f"session date must be a YYYY-MM-DD calendar day, got {date!r}")

    new, actual_days, planned = _recover_to(state, date, program_context, cfg)
    is_rest_day = session.is_rest_day
    session_stimulus: dict[str, float] = {}

    if not is_rest_day:
        # Fatigue: every muscle role at its weight
        for entry in session.entries:
            cost = calculate_exercise_fatigue(entry, cfg)
            new.systemic_fatigue += cost.total_systemic
            for muscle, value in cost.muscle_fatigue.items():
                new.local_fatigue[muscle] = new.local_fatigue.get(muscle, 0.0) + value

        # Stimulus: primary muscles only, counted in sets
        for entry in session.entries:
            n_sets = len(entry.sets)
            for muscle in entry.exercise.primary_muscles:
                session_stimulus[muscle] = session_stimulus.get(muscle, 0.0) + n_sets
        for muscle, n_sets in session_stimulus.items():
            new.weekly_stimulus[muscle] = new.weekly_stimulus.get(muscle, 0.0) + n_sets

        new.systemic_fatigue += (
            session.perceived_fatigue - cfg.perceived_fatigue_neutral
        ) / cfg.perceived_fatigue_divisor

        for muscle, soreness in session.muscle_soreness.items():
            if soreness > 0:
                new.local_fatigue[muscle] = new.local_fatigue.get(muscle, 0.0) + soreness / cfg.soreness_divisor

        new.local_fatigue = {m: _clamp01(f) for m, f in new.local_fatigue.items()}
        new.systemic_fatigue = _clamp01(new.systemic_fatigue)
        new.last_workout_date = _later(state.last_workout_date, date)

        total = sum(session_stimulus.values())
        new.stimulus_history = _append_bounded(
            new.stimulus_history,
            StimulusHistoryEntry(date=date, stimulus=dict(session_stimulus), total=total),
            cfg.stimulus_history_length,
        )
        if session.rir_errors:
            new.performance_errors = _append_bounded(
                new.performance_errors,
                PerformanceErrorEntry(date=date, errors=tuple(session.rir_errors)),
                cfg.performance_error_history_length,
            )

    new.muscle_soreness = dict(session.muscle_soreness)
    new.last_update_date = _later(state.last_update_date, date)

    readiness = calculate_readiness(new)
    new.readiness_history = _append_bounded(
        new.readiness_history,
        ReadinessHistoryEntry(
            date=date,
            systemic_readiness=readiness.systemic_readiness,
            average_muscle_readiness=readiness.average_muscle_readiness,
            is_rest_day=is_rest_day,
            actual_rest_days=actual_days if is_rest_day else None,
            planned_rest_days=planned if program_context is not None else None,
        ),
        cfg.readiness_history_length,
    )

    logger.debug(
        "Session %s: rest_day=%s systemic=%.3f stimulus=%s",
        date,
        is_rest_day,
        new.systemic_fatigue,
        session_stimulus,
    )
    return SessionUpdate(
        state=new,
        readiness=readiness,
        session_stimulus=session_stimulus,
        is_rest_day=is_rest_day,
        actual_rest_days=actual_days,
        planned_rest_days=planned,
    )


# =============================================================================
# READINESS
# =============================================================================


def calculate_muscle_readiness(local_fatigue: dict[str, float]) -> dict[str, float]:
    """
    Per-muscle readiness = 1 - clamp(fatigue, 0, 1).

    Covers the whole muscle catalogue plus any extra muscle present in
    *local_fatigue*; untrained muscles are fully ready.
    """
    muscles = list(MUSCLES) + [m for m in local_fatigue if m not in MUSCLES]
    return {m: 1.0 - _clamp01(local_fatigue.get(m, 0.0)) for m in muscles}


def calculate_systemic_readiness(systemic_fatigue: float) -> float:
    """Systemic readiness = 1 - clamp(fatigue, 0, 1)."""
    return 1.0 - _clamp01(systemic_fatigue)


def calculate_readiness(state: FatigueState) -> Readiness:
    """Readiness view of a fatigue state."""
    return Readiness(
        muscle_readiness=calculate_muscle_readiness(state.local_fatigue),
        systemic_readiness=calculate_systemic_readiness(state.systemic_fatigue),
    )


def check_deload_needed(
    muscle_readiness: dict[str, float],
    systemic_readiness: float,
    cfg: ModelConfig | None = None,
) -> DeloadCheck:
    """
    Threshold-only deload check.

    Strictly below DELOAD_THRESHOLD triggers; a value exactly at the
    threshold does not.  Systemic is checked first; otherwise every muscle
    below the threshold is listed and more than three of them make the
    local deload high severity.

    Args:
        muscle_readiness: Per-muscle readiness
        systemic_readiness: Systemic readiness
        cfg: Model configuration

    Returns:
        DeloadCheck
    """
    cfg = cfg or DEFAULT_CONFIG
    threshold = cfg.deload_threshold

    if systemic_readiness < threshold:
        return DeloadCheck(
            needed=True,
            type="systemic",
            severity="high",
            message="Systemic deload needed - reduce overall training volume",
        )

    low = [m for m, r in muscle_readiness.items() if r < threshold]
    if low:
        return DeloadCheck(
            needed=True,
            type="local",
            severity="high" if len(low) > 3 else "moderate",
            message=f"Local deload needed for: {', '.join(low)}",
            affected_muscles=low,
        )

    return DeloadCheck(needed=False)
