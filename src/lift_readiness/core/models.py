"""
Data models for lift-readiness.

Dataclasses for logged training (sets, exercises, sessions, history
records), the caller-owned fatigue state, and the result objects returned
by the engine and the progression advisor.  Boundary validation lives in
``__post_init__``; the math modules assume validated input.
"""

from dataclasses import dataclass, field, replace
from typing import Literal

from .config import EXERCISE_TYPES
from .dates import is_calendar_day

ExerciseType = Literal["compound_upper", "compound_lower", "isolation_upper", "isolation_lower"]
Advice = Literal[
    "first_time",
    "deload",
    "add_volume",
    "progress",
    "reduce_rir",
    "push_harder",
    "maintain",
    "reduce",
    "not_found",
]
ReadinessBand = Literal["high", "moderate", "low", "deload"]
DeloadType = Literal["systemic", "local"]
Severity = Literal["high", "moderate", "low"]
Trend = Literal["improved", "declined", "stable", "insufficient_data"]
LongTermTrend = Literal["increasing", "decreasing", "stable", "insufficient_data"]


class ValidationError(ValueError):
    """Raised when logged data fails boundary validation."""


def _check_day(value: str | None, name: str) -> None:
    if value is not None and not is_calendar_day(value):
        raise ValidationError(f"{name} must be a YYYY-MM-DD calendar day, got {value!r}")


# =============================================================================
# LOGGED TRAINING
# =============================================================================


@dataclass(frozen=True)
class WorkoutSet:
    """
    One logged set.

    RIR (reps in reserve) is the lifter's estimate of how many more reps
    were possible; 0 means failure.
    """

    weight: float
    reps: int
    rir: int

    def __post_init__(self) -> None:
        """Validate set data."""
        for name in ("reps", "rir"):
            value = getattr(self, name)
            try:
                whole = not isinstance(value, bool) and float(value).is_integer()
            except (TypeError, ValueError):
                whole = False
            if not whole:
                raise ValidationError(f"{name} must be a whole number, got {value!r}")
            object.__setattr__(self, name, int(float(value)))
        if self.weight < 0:
            raise ValidationError("weight must be non-negative")
        if self.reps < 1:
            raise ValidationError("reps must be at least 1")
        if not 0 <= self.rir <= 10:
            raise ValidationError("rir must be between 0 and 10")

    @property
    def volume(self) -> float:
        """weight x reps."""
        return self.weight * self.reps


@dataclass(frozen=True)
class ExerciseDefinition:
    """
    An exercise library entry.

    Muscle roles are disjoint: a muscle is primary, secondary or tertiary
    for an exercise, never more than one of them.
    """

    id: str
    name: str
    type: ExerciseType
    is_axial: bool = False
    primary_muscles: tuple[str, ...] = ()
    secondary_muscles: tuple[str, ...] = ()
    tertiary_muscles: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Normalise muscle lists to tuples and validate the entry."""
        for name in ("primary_muscles", "secondary_muscles", "tertiary_muscles"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

        if not self.id:
            raise ValidationError("exercise id must not be empty")
        if self.type not in EXERCISE_TYPES:
            raise ValidationError(
                f"exercise '{self.id}': unknown type {self.type!r} "
                f"(expected one of {', '.join(EXERCISE_TYPES)})"
            )

        seen: dict[str, str] = {}
        for role, muscles in (
            ("primary", self.primary_muscles),
            ("secondary", self.secondary_muscles),
            ("tertiary", self.tertiary_muscles),
        ):
            for muscle in muscles:
                if muscle in seen:
                    raise ValidationError(
                        f"exercise '{self.id}': muscle '{muscle}' is both "
                        f"{seen[muscle]} and {role}"
                    )
                seen[muscle] = role

    @property
    def is_compound(self) -> bool:
        return "compound" in self.type

    @property
    def all_muscles(self) -> tuple[str, ...]:
        return self.primary_muscles + self.secondary_muscles + self.tertiary_muscles


@dataclass
class SessionEntry:
    """One exercise performed within a session, with its sets in order."""

    exercise: ExerciseDefinition
    sets: list[WorkoutSet] = field(default_factory=list)


@dataclass
class Session:
    """
    A day's training: exercises with sets plus subjective observations.

    An empty ``entries`` list is a rest day; observations still apply.
    """

    entries: list[SessionEntry] = field(default_factory=list)
    perceived_fatigue: float = 5.0  # 0-10, 5 is neutral
    muscle_soreness: dict[str, float] = field(default_factory=dict)  # 0-10 per muscle
    rir_errors: list[int] = field(default_factory=list)  # actual - target RIR per set

    def __post_init__(self) -> None:
        """Validate observations."""
        if not 0 <= self.perceived_fatigue <= 10:
            raise ValidationError("perceived_fatigue must be between 0 and 10")
        for muscle, level in self.muscle_soreness.items():
            if not 0 <= level <= 10:
                raise ValidationError(f"soreness for {muscle} must be between 0 and 10")

    @property
    def is_rest_day(self) -> bool:
        return not any(entry.sets for entry in self.entries)


@dataclass
class WorkoutRecord:
    """
    One persisted exercise-within-session.

    Muscle roles, axial flag and exercise type are copied from the library
    at logging time so later library edits do not change how past training
    is attributed.
    """

    exercise_id: str
    date: str  # YYYY-MM-DD
    sets: list[WorkoutSet]
    primary_muscles: tuple[str, ...] = ()
    secondary_muscles: tuple[str, ...] = ()
    tertiary_muscles: tuple[str, ...] = ()
    is_axial: bool = False
    exercise_type: ExerciseType = "isolation_upper"
    timestamp: str = ""

    def __post_init__(self) -> None:
        """Validate record data."""
        _check_day(self.date, "date")
        if self.exercise_type not in EXERCISE_TYPES:
            raise ValidationError(f"unknown exercise type {self.exercise_type!r}")
        self.primary_muscles = tuple(self.primary_muscles)
        self.secondary_muscles = tuple(self.secondary_muscles)
        self.tertiary_muscles = tuple(self.tertiary_muscles)

    @classmethod
    def from_entry(cls, entry: SessionEntry, date: str, timestamp: str = "") -> "WorkoutRecord":
        """Snapshot a session entry and its exercise definition."""
        ex = entry.exercise
        return cls(
            exercise_id=ex.id,
            date=date,
            sets=list(entry.sets),
            primary_muscles=ex.primary_muscles,
            secondary_muscles=ex.secondary_muscles,
            tertiary_muscles=ex.tertiary_muscles,
            is_axial=ex.is_axial,
            exercise_type=ex.type,
            timestamp=timestamp,
        )

    def to_entry(self) -> SessionEntry:
        """Rebuild a session entry from the denormalised snapshot."""
        exercise = ExerciseDefinition(
            id=self.exercise_id,
            name=self.exercise_id,
            type=self.exercise_type,
            is_axial=self.is_axial,
            primary_muscles=self.primary_muscles,
            secondary_muscles=self.secondary_muscles,
            tertiary_muscles=self.tertiary_muscles,
        )
        return SessionEntry(exercise=exercise, sets=list(self.sets))


# =============================================================================
# FATIGUE STATE
# =============================================================================


@dataclass(frozen=True)
class StimulusHistoryEntry:
    """Per-muscle set stimulus of one training session."""

    date: str
    stimulus: dict[str, float]
    total: float


@dataclass(frozen=True)
class ReadinessHistoryEntry:
    """Readiness snapshot taken after each state update."""

    date: str
    systemic_readiness: float
    average_muscle_readiness: float
    is_rest_day: bool = False
    actual_rest_days: int | None = None
    planned_rest_days: int | None = None


@dataclass(frozen=True)
class PerformanceErrorEntry:
    """RIR errors (actual - target) reported for one training session."""

    date: str
    errors: tuple[int, ...]


@dataclass
class FatigueState:
    """
    Caller-owned fatigue state.

    Engine functions never mutate an instance in place; they return a new
    one.  A fresh instance means zero fatigue and full readiness.
    """

    local_fatigue: dict[str, float] = field(default_factory=dict)
    systemic_fatigue: float = 0.0
    weekly_stimulus: dict[str, float] = field(default_factory=dict)
    last_workout_date: str | None = None
    last_update_date: str | None = None
    muscle_soreness: dict[str, float] = field(default_factory=dict)
    stimulus_history: list[StimulusHistoryEntry] = field(default_factory=list)
    readiness_history: list[ReadinessHistoryEntry] = field(default_factory=list)
    performance_errors: list[PerformanceErrorEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate state data."""
        _check_day(self.last_workout_date, "last_workout_date")
        _check_day(self.last_update_date, "last_update_date")
        if self.systemic_fatigue < 0:
            raise ValidationError("systemic_fatigue must be non-negative")
        for muscle, value in self.local_fatigue.items():
            if value < 0:
                raise ValidationError(f"local fatigue for {muscle} must be non-negative")
        for muscle, value in self.weekly_stimulus.items():
            if value < 0:
                raise ValidationError(f"weekly stimulus for {muscle} must be non-negative")

    @property
    def reference_date(self) -> str | None:
        """Date recovery is computed from: last sync, else last workout."""
        return self.last_update_date or self.last_workout_date

    def copy(self, **changes) -> "FatigueState":
        """Return an independent copy with optional field changes."""
        base = replace(
            self,
            local_fatigue=dict(self.local_fatigue),
            weekly_stimulus=dict(self.weekly_stimulus),
            muscle_soreness=dict(self.muscle_soreness),
            stimulus_history=list(self.stimulus_history),
            readiness_history=list(self.readiness_history),
            performance_errors=list(self.performance_errors),
        )
        return replace(base, **changes) if changes else base


# =============================================================================
# ENGINE RESULTS
# =============================================================================


@dataclass(frozen=True)
class SetFatigue:
    """Fatigue cost of a single set."""

    local: float
    systemic: float


@dataclass
class ExerciseFatigue:
    """Summed fatigue of one exercise's sets and its per-muscle split."""

    total_local: float
    total_systemic: float
    total_volume: float
    muscle_fatigue: dict[str, float]
    set_count: int


@dataclass(frozen=True)
class Readiness:
    """Readiness derived from a fatigue state (1 - fatigue, clamped)."""

    muscle_readiness: dict[str, float]
    systemic_readiness: float

    @property
    def average_muscle_readiness(self) -> float:
        if not self.muscle_readiness:
            return 1.0
        return sum(self.muscle_readiness.values()) / len(self.muscle_readiness)

    def min_for(self, muscles) -> float:
        """Lowest readiness among *muscles*; unknown muscles count as fresh."""
        values = [self.muscle_readiness.get(m, 1.0) for m in muscles]
        return min(values) if values else 1.0


@dataclass
class SessionUpdate:
    """Result of ingesting one session (or rest day) into the state."""

    state: FatigueState
    readiness: Readiness
    session_stimulus: dict[str, float]
    is_rest_day: bool
    actual_rest_days: int = 0
    planned_rest_days: int = 0


@dataclass
class DeloadCheck:
    """Outcome of the threshold-only deload check."""

    needed: bool
    type: DeloadType | None = None
    severity: Severity | None = None
    message: str = "Recovery is adequate"
    affected_muscles: list[str] = field(default_factory=list)


@dataclass
class DeloadRecommendation:
    """Threshold check combined with the trend conditions that were met."""

    needed: bool
    conditions_met: int
    conditions: list[str]
    message: str
    basic: DeloadCheck


# =============================================================================
# PROGRESSION RESULTS
# =============================================================================


@dataclass(frozen=True)
class DeloadProtocol:
    """
    Advisory numbers attached to a deload recommendation.

    Fractions are reductions (0.4 = 40% fewer sets); ``full_rest`` means
    skip training altogether for ``duration``.
    """

    reason: str
    duration: str
    set_reduction: float = 0.0
    rir_increase: int = 0
    weight_reduction: float = 0.0
    full_rest: bool = False


@dataclass
class PerformanceAnalysis:
    """Session-over-session performance of one exercise."""

    trend: Trend
    long_term_trend: LongTermTrend
    average_rir: float
    top_set: WorkoutSet | None
    set_count: int


@dataclass
class ProgressionRecommendation:
    """
    Advice for the next time an exercise is trained.

    ``muscle_readiness`` is the lowest readiness among the exercise's primary
    muscles; both readiness values are the ones the advice was computed from.
    """

    advice: Advice
    readiness_band: ReadinessBand | None
    message: str
    muscle_readiness: float
    systemic_readiness: float
    found: bool = True
    recommended_weight: float | None = None
    recommended_sets: int | None = None
    rir_delta: int | None = None
    rationale: str | None = None
    deload_protocol: DeloadProtocol | None = None
    performance: PerformanceAnalysis | None = None


@dataclass
class DeloadPrescription:
    """Concrete deload session for one exercise."""

    sets: int
    reps: int
    weight: float | None
    rir: int
    duration: str
    severity: Literal["high", "moderate", "light"] | None = None
    instructions: list[str] = field(default_factory=list)


@dataclass
class VolumeRecommendation:
    """Weekly set-volume status for one muscle."""

    muscle: str
    status: Literal["low", "high", "good_can_add", "optimal", "moderate_high"]
    recommendation: Literal["increase", "decrease", "increase_optional", "maintain", "monitor"]
    message: str
    current_sets: float
    target_sets: float | None = None


# =============================================================================
# PROGRAMS
# =============================================================================


@dataclass
class ProgramDay:
    """One day of a training program cycle."""

    name: str
    is_rest_day: bool = False
    exercises: list[ExerciseDefinition] = field(default_factory=list)

    @property
    def target_muscles(self) -> set[str]:
        return {m for ex in self.exercises for m in ex.primary_muscles}


@dataclass
class ProgramContext:
    """An active program and the index of today's day in its cycle."""

    days: list[ProgramDay]
    current_day_index: int = 0

    def __post_init__(self) -> None:
        """Validate the day index."""
        if self.days and not 0 <= self.current_day_index < len(self.days):
            raise ValidationError(
                f"current_day_index {self.current_day_index} outside program of {len(self.days)} days"
            )

    @property
    def rest_days_per_cycle(self) -> int:
        return sum(1 for d in self.days if d.is_rest_day)


# =============================================================================
# RECOVERY / PROGRAM ANALYSIS RESULTS
# =============================================================================


@dataclass
class RecoveryEstimate:
    """Whole days until each muscle (and the body) reaches target readiness."""

    muscle_days: dict[str, int]
    systemic_days: int

    @property
    def max_days(self) -> int:
        return max([self.systemic_days, *self.muscle_days.values()])


@dataclass
class StimulusEfficiency:
    """Stimulus-per-fatigue of the latest session and the stimulus trend."""

    efficiency: dict[str, float]
    trend: LongTermTrend
    recent_totals: list[float] = field(default_factory=list)


@dataclass
class RestCompliance:
    """Actual training frequency compared with a program's rest cadence."""

    compliant: bool
    warning: bool
    message: str | None = None
    severity: Literal["moderate", "low"] | None = None
    recommendation: str | None = None
    expected_rest_days: int | None = None
    actual_rest_days: int | None = None
    compliance: float | None = None


@dataclass
class RestRecommendation:
    """Rest advice before the next session."""

    recommend_rest: bool
    min_rest_days: int
    reason: str
    message: str
    affected_muscles: dict[str, float] = field(default_factory=dict)
    optional: bool = False


@dataclass
class ExpectedRecovery:
    """Planned versus actual rest since the last workout."""

    expected_recovery_days: int
    actual_recovery_days: int
    planned_rest_days: int
    is_ahead_of_schedule: bool
    is_behind_schedule: bool


@dataclass
class RestDaySuggestion:
    """A suggested change to rest-day placement within a program."""

    position: int
    reason: str
    message: str
    priority: Literal["high", "medium", "low"]


@dataclass
class ProgramValidation:
    """Structural problems found in a program."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    total_days: int = 0
    training_days: int = 0
    rest_days: int = 0
    max_consecutive_training: int = 0


# =============================================================================
# VOLUME ANALYTICS RESULTS
# =============================================================================


@dataclass
class OverloadAnalysis:
    """Session-volume trend of one exercise over its whole history."""

    trend: LongTermTrend
    message: str
    workout_count: int = 0
    starting_volume: float = 0.0
    current_volume: float = 0.0
    total_change_pct: float = 0.0
    increase_rate_pct: float = 0.0
    time_span_days: int = 0


@dataclass(frozen=True)
class RecordSet:
    """A set that holds a personal record, with the day it was logged."""

    set: WorkoutSet
    date: str


@dataclass
class PersonalRecords:
    """Heaviest, highest-volume and highest-rep sets of one exercise."""

    max_weight: RecordSet | None = None
    max_volume: RecordSet | None = None
    max_reps: RecordSet | None = None


@dataclass
class IntensityDistribution:
    """Share of sets by RIR: high (0-1), moderate (2-3), low (4+), in percent."""

    high: float
    moderate: float
    low: float
    total_sets: int
