"""
Configuration constants for the fatigue / readiness / progression model.

All adjustable parameters are centralized here for easy tuning.  The
module-level constants are the defaults; ``ModelConfig`` bundles them into
an immutable object that every engine function accepts, so a caller (or a
test) can override one tunable without touching shared state.
"""

import warnings
from dataclasses import dataclass, field, fields
from typing import Any, Final

# =============================================================================
# MUSCLE CATALOGUE
# =============================================================================

MUSCLES: Final[tuple[str, ...]] = (
    "Chest",
    "Back",
    "Shoulders",
    "Biceps",
    "Triceps",
    "Quads",
    "Hamstrings",
    "Glutes",
    "Calves",
    "Abs",
    "Forearms",
    "Traps",
)

MUSCLE_CATEGORIES: Final[dict[str, tuple[str, ...]]] = {
    "Upper Push": ("Chest", "Shoulders", "Triceps"),
    "Upper Pull": ("Back", "Biceps", "Forearms", "Traps"),
    "Lower Body": ("Quads", "Hamstrings", "Glutes", "Calves"),
    "Core": ("Abs",),
}

EXERCISE_TYPES: Final[tuple[str, ...]] = (
    "compound_upper",
    "compound_lower",
    "isolation_upper",
    "isolation_lower",
)

# =============================================================================
# RECOVERY RATES (exponential decay per whole day)
# =============================================================================

LOCAL_RECOVERY_RATE: Final[float] = 0.20  # fatigue *= (1 - rate)^days
SYSTEMIC_RECOVERY_RATE: Final[float] = 0.15  # slower than local
STIMULUS_DECAY_RATE: Final[float] = 0.14  # weekly stimulus, own clock
REST_DAY_RECOVERY_BONUS: Final[float] = 0.05  # extra decay per planned rest day

# =============================================================================
# SET FATIGUE COST
# =============================================================================

BASE_FATIGUE_PER_SET: Final[float] = 0.033
SYSTEMIC_SHARE: Final[float] = 0.5  # systemic = local * share
AXIAL_LOAD_MULTIPLIER: Final[float] = 1.3  # spine loading, systemic only
COMPOUND_LOCAL_MULTIPLIER: Final[float] = 1.2
COMPOUND_SYSTEMIC_MULTIPLIER: Final[float] = 1.3

# Muscle role weights for local fatigue distribution
PRIMARY_MUSCLE_MULTIPLIER: Final[float] = 1.0
SECONDARY_MUSCLE_MULTIPLIER: Final[float] = 0.6
TERTIARY_MUSCLE_MULTIPLIER: Final[float] = 0.3

# =============================================================================
# OBSERVATIONAL CORRECTIONS
# =============================================================================

PERCEIVED_FATIGUE_NEUTRAL: Final[float] = 5.0  # centre of the 0-10 scale
PERCEIVED_FATIGUE_DIVISOR: Final[float] = 50.0  # (p - 5) / 50 -> +/- 0.1
SORENESS_DIVISOR: Final[float] = 100.0  # soreness / 100 added to local

# =============================================================================
# READINESS THRESHOLDS
# =============================================================================

PROGRESSION_THRESHOLD: Final[float] = 0.85
MODERATE_READINESS_THRESHOLD: Final[float] = 0.65
DELOAD_THRESHOLD: Final[float] = 0.60
CRITICAL_SYSTEMIC_READINESS: Final[float] = 0.50
RECOVERY_TARGET_READINESS: Final[float] = 0.85

# =============================================================================
# DELOAD DETECTION
# =============================================================================

DELOAD_MIN_CONDITIONS: Final[int] = 2  # of the four trend conditions
SORENESS_HIGH_LEVEL: Final[float] = 6.0  # soreness above this counts
SORENESS_MUSCLE_COUNT: Final[int] = 2  # more than this many sore muscles
STIMULUS_PLATEAU_BAND: Final[float] = 0.10  # +/- 10% around the mean
STIMULUS_PLATEAU_SESSIONS: Final[int] = 3
PLATEAU_MIN_READINESS: Final[float] = 0.65
PERFORMANCE_ERROR_THRESHOLD: Final[int] = -1  # RIR 1+ worse than target
PERFORMANCE_ERROR_SESSIONS: Final[int] = 2

# History retention on the fatigue state
STIMULUS_HISTORY_LENGTH: Final[int] = 7
READINESS_HISTORY_LENGTH: Final[int] = 7
PERFORMANCE_ERROR_HISTORY_LENGTH: Final[int] = 10

# =============================================================================
# PROGRESSION
# =============================================================================

UPPER_BODY_INCREMENT: Final[float] = 2.5
LOWER_BODY_INCREMENT: Final[float] = 5.0
RIR_PROGRESSION_THRESHOLD: Final[float] = 1.0
HIGH_RIR_THRESHOLD: Final[float] = 3.0  # avg RIR at/above this -> push harder
STAGNATION_BAND: Final[float] = 0.15  # flat volume within +/- 15%
STAGNATION_WINDOW: Final[int] = 4
TREND_BAND: Final[float] = 0.05  # improved / declined cut-offs
OVERTRAINING_MIN_READINESS: Final[float] = 0.75

DELOAD_SET_REDUCTION: Final[float] = 0.40
DELOAD_WEIGHT_REDUCTION: Final[float] = 0.30
DELOAD_RIR_INCREASE: Final[int] = 2

# =============================================================================
# VOLUME LANDMARKS (sets per muscle per week)
# =============================================================================

MIN_SETS_PER_WEEK: Final[float] = 10.0
OPTIMAL_SETS_PER_WEEK: Final[float] = 15.0
MAX_SETS_PER_WEEK: Final[float] = 20.0
MAX_WEEKLY_STIMULUS: Final[float] = 25.0
MIN_STIMULUS_EFFICIENCY: Final[float] = 0.7
STIMULUS_EFFICIENCY_EPSILON: Final[float] = 0.01

# =============================================================================
# READINESS LEVELS (display bands)
# =============================================================================


@dataclass(frozen=True)
class ReadinessLevel:
    """A named readiness band used for display."""

    label: str
    low: float
    high: float
    color: str
    description: str


READINESS_LEVELS: Final[tuple[ReadinessLevel, ...]] = (
    ReadinessLevel("Optimal", 0.85, 1.0, "green", "Ready to progress and push hard"),
    ReadinessLevel("Good", 0.65, 0.85, "yellow", "Maintain current intensity"),
    ReadinessLevel("Moderate", 0.50, 0.65, "dark_orange", "Reduce volume or intensity"),
    ReadinessLevel("Low", 0.0, 0.50, "red", "Deload or rest needed"),
)


def readiness_level(readiness: float) -> ReadinessLevel:
    """
    Map a readiness value onto its display band.

    Bands are checked from the top; values outside [0, 1] fall into the
    nearest band.

    Args:
        readiness: Readiness in [0, 1]

    Returns:
        Matching ReadinessLevel
    """
    for level in READINESS_LEVELS:
        if readiness >= level.low:
            return level
    return READINESS_LEVELS[-1]


# =============================================================================
# INJECTABLE CONFIGURATION
# =============================================================================

# YAML section -> ModelConfig field names that live in that section
_FATIGUE_SECTION: Final[str] = "fatigue"
_PROGRESSION_SECTION: Final[str] = "progression"


@dataclass(frozen=True)
class ModelConfig:
    """
    Every numeric tunable of the model in one immutable object.

    Field names are the lower-case constant names above.  Build a variant
    with ``dataclasses.replace(DEFAULT_CONFIG, deload_threshold=0.5)``.
    """

    # Recovery
    local_recovery_rate: float = field(default=LOCAL_RECOVERY_RATE, metadata={"section": _FATIGUE_SECTION})
    systemic_recovery_rate: float = field(default=SYSTEMIC_RECOVERY_RATE, metadata={"section": _FATIGUE_SECTION})
    stimulus_decay_rate: float = field(default=STIMULUS_DECAY_RATE, metadata={"section": _FATIGUE_SECTION})
    rest_day_recovery_bonus: float = field(default=REST_DAY_RECOVERY_BONUS, metadata={"section": _FATIGUE_SECTION})

    # Set cost
    base_fatigue_per_set: float = field(default=BASE_FATIGUE_PER_SET, metadata={"section": _FATIGUE_SECTION})
    systemic_share: float = field(default=SYSTEMIC_SHARE, metadata={"section": _FATIGUE_SECTION})
    axial_load_multiplier: float = field(default=AXIAL_LOAD_MULTIPLIER, metadata={"section": _FATIGUE_SECTION})
    compound_local_multiplier: float = field(default=COMPOUND_LOCAL_MULTIPLIER, metadata={"section": _FATIGUE_SECTION})
    compound_systemic_multiplier: float = field(default=COMPOUND_SYSTEMIC_MULTIPLIER, metadata={"section": _FATIGUE_SECTION})
    primary_muscle_multiplier: float = field(default=PRIMARY_MUSCLE_MULTIPLIER, metadata={"section": _FATIGUE_SECTION})
    secondary_muscle_multiplier: float = field(default=SECONDARY_MUSCLE_MULTIPLIER, metadata={"section": _FATIGUE_SECTION})
    tertiary_muscle_multiplier: float = field(default=TERTIARY_MUSCLE_MULTIPLIER, metadata={"section": _FATIGUE_SECTION})

    # Observations
    perceived_fatigue_neutral: float = field(default=PERCEIVED_FATIGUE_NEUTRAL, metadata={"section": _FATIGUE_SECTION})
    perceived_fatigue_divisor: float = field(default=PERCEIVED_FATIGUE_DIVISOR, metadata={"section": _FATIGUE_SECTION})
    soreness_divisor: float = field(default=SORENESS_DIVISOR, metadata={"section": _FATIGUE_SECTION})

    # Thresholds
    progression_threshold: float = field(default=PROGRESSION_THRESHOLD, metadata={"section": _FATIGUE_SECTION})
    moderate_readiness_threshold: float = field(default=MODERATE_READINESS_THRESHOLD, metadata={"section": _FATIGUE_SECTION})
    deload_threshold: float = field(default=DELOAD_THRESHOLD, metadata={"section": _FATIGUE_SECTION})
    critical_systemic_readiness: float = field(default=CRITICAL_SYSTEMIC_READINESS, metadata={"section": _FATIGUE_SECTION})
    recovery_target_readiness: float = field(default=RECOVERY_TARGET_READINESS, metadata={"section": _FATIGUE_SECTION})

    # Deload detection
    deload_min_conditions: int = field(default=DELOAD_MIN_CONDITIONS, metadata={"section": _FATIGUE_SECTION})
    soreness_high_level: float = field(default=SORENESS_HIGH_LEVEL, metadata={"section": _FATIGUE_SECTION})
    soreness_muscle_count: int = field(default=SORENESS_MUSCLE_COUNT, metadata={"section": _FATIGUE_SECTION})
    stimulus_plateau_band: float = field(default=STIMULUS_PLATEAU_BAND, metadata={"section": _FATIGUE_SECTION})
    stimulus_plateau_sessions: int = field(default=STIMULUS_PLATEAU_SESSIONS, metadata={"section": _FATIGUE_SECTION})
    plateau_min_readiness: float = field(default=PLATEAU_MIN_READINESS, metadata={"section": _FATIGUE_SECTION})
    performance_error_threshold: int = field(default=PERFORMANCE_ERROR_THRESHOLD, metadata={"section": _FATIGUE_SECTION})
    performance_error_sessions: int = field(default=PERFORMANCE_ERROR_SESSIONS, metadata={"section": _FATIGUE_SECTION})
    stimulus_history_length: int = field(default=STIMULUS_HISTORY_LENGTH, metadata={"section": _FATIGUE_SECTION})
    readiness_history_length: int = field(default=READINESS_HISTORY_LENGTH, metadata={"section": _FATIGUE_SECTION})
    performance_error_history_length: int = field(default=PERFORMANCE_ERROR_HISTORY_LENGTH, metadata={"section": _FATIGUE_SECTION})

    # Progression
    upper_body_increment: float = field(default=UPPER_BODY_INCREMENT, metadata={"section": _PROGRESSION_SECTION})
    lower_body_increment: float = field(default=LOWER_BODY_INCREMENT, metadata={"section": _PROGRESSION_SECTION})
    rir_progression_threshold: float = field(default=RIR_PROGRESSION_THRESHOLD, metadata={"section": _PROGRESSION_SECTION})
    high_rir_threshold: float = field(default=HIGH_RIR_THRESHOLD, metadata={"section": _PROGRESSION_SECTION})
    stagnation_band: float = field(default=STAGNATION_BAND, metadata={"section": _PROGRESSION_SECTION})
    stagnation_window: int = field(default=STAGNATION_WINDOW, metadata={"section": _PROGRESSION_SECTION})
    trend_band: float = field(default=TREND_BAND, metadata={"section": _PROGRESSION_SECTION})
    overtraining_min_readiness: float = field(default=OVERTRAINING_MIN_READINESS, metadata={"section": _PROGRESSION_SECTION})
    deload_set_reduction: float = field(default=DELOAD_SET_REDUCTION, metadata={"section": _PROGRESSION_SECTION})
    deload_weight_reduction: float = field(default=DELOAD_WEIGHT_REDUCTION, metadata={"section": _PROGRESSION_SECTION})
    deload_rir_increase: int = field(default=DELOAD_RIR_INCREASE, metadata={"section": _PROGRESSION_SECTION})
    min_sets_per_week: float = field(default=MIN_SETS_PER_WEEK, metadata={"section": _PROGRESSION_SECTION})
    optimal_sets_per_week: float = field(default=OPTIMAL_SETS_PER_WEEK, metadata={"section": _PROGRESSION_SECTION})
    max_sets_per_week: float = field(default=MAX_SETS_PER_WEEK, metadata={"section": _PROGRESSION_SECTION})
    max_weekly_stimulus: float = field(default=MAX_WEEKLY_STIMULUS, metadata={"section": _PROGRESSION_SECTION})
    min_stimulus_efficiency: float = field(default=MIN_STIMULUS_EFFICIENCY, metadata={"section": _PROGRESSION_SECTION})
    stimulus_efficiency_epsilon: float = field(default=STIMULUS_EFFICIENCY_EPSILON, metadata={"section": _PROGRESSION_SECTION})

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "ModelConfig":
        """
        Build a config from the YAML layout ``{fatigue: {...}, progression: {...}}``.

        Keys are the upper-case constant names (``LOCAL_RECOVERY_RATE``).
        Unknown keys are reported with a warning and ignored; missing keys
        keep their defaults.

        Args:
            data: Parsed YAML mapping

        Returns:
            ModelConfig with overrides applied
        """
        by_name = {f.name: f for f in fields(cls)}
        overrides: dict[str, Any] = {}

        for section, values in data.items():
            if not isinstance(values, dict):
                warnings.warn(
                    f"lift-readiness: config section '{section}' is not a mapping; ignored",
                    stacklevel=2,
                )
                continue
            for key, value in values.items():
                name = str(key).lower()
                f = by_name.get(name)
                if f is None or f.metadata.get("section") != section:
                    warnings.warn(
                        f"lift-readiness: unknown config key '{section}.{key}'; ignored",
                        stacklevel=2,
                    )
                    continue
                caster = int if f.type in (int, "int") else float
                overrides[name] = caster(value)

        return cls(**overrides)


DEFAULT_CONFIG: Final[ModelConfig] = ModelConfig()


def weight_increment(exercise_type: str, cfg: ModelConfig | None = None) -> float:
    """
    Progression increment for an exercise type.

    Lower-body types progress in bigger steps than upper-body ones.

    Args:
        exercise_type: One of EXERCISE_TYPES
        cfg: Model configuration

    Returns:
        Weight increment
    """
    cfg = cfg or DEFAULT_CONFIG
    if exercise_type.endswith("_lower"):
        return cfg.lower_body_increment
    return cfg.upper_body_increment
