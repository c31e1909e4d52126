"""
JSON serialization for training data models.

Handles conversion between dataclasses and JSON-compatible dicts, and the
compact text formats accepted on the command line.
"""

import json
import re
from typing import Any

from ..core.dates import is_calendar_day
from ..core.models import (
    FatigueState,
    PerformanceErrorEntry,
    ReadinessHistoryEntry,
    StimulusHistoryEntry,
    ValidationError,
    WorkoutRecord,
    WorkoutSet,
)

__all__ = [
    "ValidationError",
    "validate_date",
    "set_to_dict",
    "dict_to_set",
    "record_to_dict",
    "dict_to_record",
    "record_to_json_line",
    "json_line_to_record",
    "fatigue_state_to_dict",
    "dict_to_fatigue_state",
    "parse_sets_string",
    "parse_entry_string",
    "parse_muscle_levels",
    "parse_int_list",
]

DEFAULT_RIR = 2  # Used when a set omits "@RIR"


def validate_date(date_str: str) -> str:
    """
    Validate a calendar-day string.

    Args:
        date_str: Date string to validate

    Returns:
        The same YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not is_calendar_day(date_str):
        raise ValidationError(f"Invalid date: {date_str!r}. Expected YYYY-MM-DD")
    return date_str


def _require(data: dict[str, Any], key: str, what: str) -> Any:
    if key not in data:
        raise ValidationError(f"{what} is missing '{key}'")
    return data[key]


# =============================================================================
# SETS / RECORDS
# =============================================================================


def set_to_dict(s: WorkoutSet) -> dict[str, Any]:
    """Convert a WorkoutSet to its compact dict form."""
    return {"weight": s.weight, "reps": s.reps, "rir": s.rir}


def dict_to_set(data: dict[str, Any]) -> WorkoutSet:
    """
    Convert dict to WorkoutSet.

    Raises:
        ValidationError: If a field is missing, out of range, or reps/RIR are
            not whole numbers
    """
    try:
        return WorkoutSet(
            weight=float(_require(data, "weight", "set")),
            reps=_require(data, "reps", "set"),
            rir=data.get("rir", DEFAULT_RIR),
        )
    except ValidationError:
        raise
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid set {data!r}: {e}") from e


def record_to_dict(record: WorkoutRecord) -> dict[str, Any]:
    """
    Convert WorkoutRecord to JSON-compatible dict.

    Args:
        record: WorkoutRecord to convert

    Returns:
        Dict representation
    """
    return {
        "date": record.date,
        "exercise_id": record.exercise_id,
        "exercise_type": record.exercise_type,
        "is_axial": record.is_axial,
        "primary_muscles": list(record.primary_muscles),
        "secondary_muscles": list(record.secondary_muscles),
        "tertiary_muscles": list(record.tertiary_muscles),
        "sets": [set_to_dict(s) for s in record.sets],
        "timestamp": record.timestamp,
    }


def dict_to_record(data: dict[str, Any]) -> WorkoutRecord:
    """
    Convert dict to WorkoutRecord.

    Args:
        data: Dict representation

    Returns:
        WorkoutRecord instance

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Workout record must be an object, got {type(data).__name__}")
    date = validate_date(str(_require(data, "date", "workout record")))
    sets_raw = data.get("sets", [])
    if not isinstance(sets_raw, list):
        raise ValidationError("'sets' must be a list")

    return WorkoutRecord(
        exercise_id=str(_require(data, "exercise_id", "workout record")),
        date=date,
        sets=[dict_to_set(s) for s in sets_raw],
        primary_muscles=tuple(data.get("primary_muscles", ())),
        secondary_muscles=tuple(data.get("secondary_muscles", ())),
        tertiary_muscles=tuple(data.get("tertiary_muscles", ())),
        is_axial=bool(data.get("is_axial", False)),
        exercise_type=str(_require(data, "exercise_type", "workout record")),
        timestamp=str(data.get("timestamp", "")),
    )


def record_to_json_line(record: WorkoutRecord) -> str:
    """
    Serialize a record to a single JSON line.

    Returns:
        JSON string (single line, no trailing newline)
    """
    return json.dumps(record_to_dict(record), separators=(",", ":"))


def json_line_to_record(line: str) -> WorkoutRecord:
    """
    Deserialize a JSON line to a WorkoutRecord.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e

    return dict_to_record(data)


# =============================================================================
# FATIGUE STATE
# =============================================================================


def fatigue_state_to_dict(state: FatigueState) -> dict[str, Any]:
    """Convert FatigueState to JSON-compatible dict."""
    return {
        "local_fatigue": dict(state.local_fatigue),
        "systemic_fatigue": state.systemic_fatigue,
        "weekly_stimulus": dict(state.weekly_stimulus),
        "last_workout_date": state.last_workout_date,
        "last_update_date": state.last_update_date,
        "muscle_soreness": dict(state.muscle_soreness),
        "stimulus_history": [
            {"date": h.date, "stimulus": dict(h.stimulus), "total": h.total}
            for h in state.stimulus_history
        ],
        "readiness_history": [
            {
                "date": h.date,
                "systemic_readiness": h.systemic_readiness,
                "average_muscle_readiness": h.average_muscle_readiness,
                "is_rest_day": h.is_rest_day,
                "actual_rest_days": h.actual_rest_days,
                "planned_rest_days": h.planned_rest_days,
            }
            for h in state.readiness_history
        ],
        "performance_errors": [
            {"date": e.date, "errors": list(e.errors)} for e in state.performance_errors
        ],
    }


def _number(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"'{name}' must be a number, got {value!r}") from e


def _float_map(data: Any, name: str) -> dict[str, float]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"'{name}' must be an object")
    try:
        return {str(k): float(v) for k, v in data.items()}
    except (TypeError, ValueError) as e:
        raise ValidationError(f"'{name}' must map muscles to numbers: {e}") from e


def dict_to_fatigue_state(data: dict[str, Any]) -> FatigueState:
    """
    Convert dict to FatigueState.

    Missing keys take their defaults, so ``{}`` is a fresh state.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Fatigue state must be an object")
    try:
        stimulus_history = [
            StimulusHistoryEntry(
                date=validate_date(h["date"]),
                stimulus=_float_map(h.get("stimulus"), "stimulus"),
                total=float(h.get("total", 0.0)),
            )
            for h in data.get("stimulus_history", [])
        ]
        readiness_history = [
            ReadinessHistoryEntry(
                date=validate_date(h["date"]),
                systemic_readiness=float(h["systemic_readiness"]),
                average_muscle_readiness=float(h["average_muscle_readiness"]),
                is_rest_day=bool(h.get("is_rest_day", False)),
                actual_rest_days=h.get("actual_rest_days"),
                planned_rest_days=h.get("planned_rest_days"),
            )
            for h in data.get("readiness_history", [])
        ]
        performance_errors = [
            PerformanceErrorEntry(
                date=validate_date(e["date"]),
                errors=tuple(int(x) for x in e.get("errors", [])),
            )
            for e in data.get("performance_errors", [])
        ]
    except ValidationError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid fatigue state history: {e}") from e

    return FatigueState(
        local_fatigue=_float_map(data.get("local_fatigue"), "local_fatigue"),
        systemic_fatigue=_number(data.get("systemic_fatigue", 0.0), "systemic_fatigue"),
        weekly_stimulus=_float_map(data.get("weekly_stimulus"), "weekly_stimulus"),
        last_workout_date=data.get("last_workout_date"),
        last_update_date=data.get("last_update_date"),
        muscle_soreness=_float_map(data.get("muscle_soreness"), "muscle_soreness"),
        stimulus_history=stimulus_history,
        readiness_history=readiness_history,
        performance_errors=performance_errors,
    )


# =============================================================================
# COMMAND-LINE FORMATS
# =============================================================================

_SET_RE = re.compile(
    r"^(?P<weight>\d+(?:\.\d+)?)\s*[xX×]\s*(?P<reps>\d+)"
    r"(?:\s*@\s*(?P<rir>\d+))?"
    r"(?:\s*\*\s*(?P<count>\d+))?$"
)


def parse_sets_string(sets_str: str) -> list[WorkoutSet]:
    """
    Parse a sets string.

    Comma-separated sets, each ``WEIGHTxREPS[@RIR][*COUNT]``:
        "100x8@2"            one set, 100 x 8 at RIR 2
        "100x8@2, 105x6@1"   two sets
        "100x8@2*3"          three identical sets
        "60x12"              RIR defaults to 2

    Args:
        sets_str: Sets string to parse

    Returns:
        List of WorkoutSet

    Raises:
        ValidationError: If format is invalid or a value is out of range
    """
    if not sets_str or not sets_str.strip():
        raise ValidationError("Sets string cannot be empty")

    sets: list[WorkoutSet] = []
    for part in (p.strip() for p in sets_str.split(",")):
        if not part:
            continue
        m = _SET_RE.match(part)
        if not m:
            raise ValidationError(
                f"Invalid set format: '{part}'.\n"
                "Use: WEIGHTxREPS@RIR (e.g. 100x8@2), optionally *COUNT (e.g. 100x8@2*3)."
            )
        count = int(m.group("count") or 1)
        if count < 1:
            raise ValidationError(f"Set count must be at least 1: '{part}'")
        rir = int(m.group("rir")) if m.group("rir") is not None else DEFAULT_RIR
        s = WorkoutSet(weight=float(m.group("weight")), reps=int(m.group("reps")), rir=rir)
        sets.extend([s] * count)

    if not sets:
        raise ValidationError("No valid sets found in sets string")
    return sets


def parse_entry_string(entry: str) -> tuple[str, list[WorkoutSet]]:
    """
    Parse ``EXERCISE_ID:SETS`` into the id and its sets.

    Raises:
        ValidationError: If the separator or the id is missing
    """
    ex_id, sep, sets_str = entry.partition(":")
    if not sep or not ex_id.strip():
        raise ValidationError(f"Invalid entry '{entry}'. Use EXERCISE_ID:100x8@2,100x8@2")
    return ex_id.strip(), parse_sets_string(sets_str)


def parse_muscle_levels(text: str, low: float = 0.0, high: float = 10.0) -> dict[str, float]:
    """
    Parse ``Muscle=level`` pairs, e.g. "Chest=7,Quads=3".

    Raises:
        ValidationError: On malformed pairs or levels outside [low, high]
    """
    levels: dict[str, float] = {}
    for part in (p.strip() for p in text.split(",")):
        if not part:
            continue
        muscle, sep, value = part.partition("=")
        if not sep or not muscle.strip():
            raise ValidationError(f"Invalid muscle level '{part}'. Use Muscle=level, e.g. Chest=7")
        try:
            level = float(value)
        except ValueError as e:
            raise ValidationError(f"Invalid level in '{part}'") from e
        if not low <= level <= high:
            raise ValidationError(f"Level for {muscle.strip()} must be between {low:g} and {high:g}")
        levels[muscle.strip()] = level
    return levels


def parse_int_list(text: str) -> list[int]:
    """Parse comma-separated signed integers, e.g. "-1,0,-2"."""
    try:
        return [int(p) for p in (x.strip() for x in text.split(",")) if p]
    except ValueError as e:
        raise ValidationError(f"Invalid integer list '{text}'") from e
