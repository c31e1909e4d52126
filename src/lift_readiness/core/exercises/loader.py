"""
YAML -> ExerciseDefinition loader.

Loads exercise presets from the YAML files in the bundled
``src/lift_readiness/exercises/`` directory.  Each file holds a list under
``exercises:``; every entry matches the ExerciseDefinition schema with the
muscle roles written as ``primary`` / ``secondary`` / ``tertiary``.

User overrides: place YAML files of the same shape in
``~/.lift-readiness/exercises/``.  An entry whose id matches a bundled
exercise is merged over it, so only changed keys need to be listed; an
entry with a new id adds an exercise.

Usage (internal, called by registry.py):
    from .loader import load_exercises_from_yaml
    exercises = load_exercises_from_yaml()   # dict or None when nothing loaded
"""

from __future__ import annotations

import warnings
from pathlib import Path

import yaml

from ..engine.config_loader import get_data_dir
from ..models import ExerciseDefinition, ValidationError

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset({"id", "name", "type", "primary"})


def exercise_from_dict(d: dict) -> ExerciseDefinition:
    """Convert a raw dict (from YAML) to an ExerciseDefinition.

    Raises ValidationError if a required field is absent or the muscle
    roles overlap.
    """
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValidationError(f"exercise missing fields: {sorted(missing)}")
    return ExerciseDefinition(
        id=str(d["id"]),
        name=str(d["name"]),
        type=str(d["type"]),
        is_axial=bool(d.get("is_axial", False)),
        primary_muscles=tuple(str(m) for m in d.get("primary") or ()),
        secondary_muscles=tuple(str(m) for m in d.get("secondary") or ()),
        tertiary_muscles=tuple(str(m) for m in d.get("tertiary") or ()),
    )


def exercise_to_dict(ex: ExerciseDefinition) -> dict:
    """Inverse of exercise_from_dict, in the YAML key layout."""
    return {
        "id": ex.id,
        "name": ex.name,
        "type": ex.type,
        "is_axial": ex.is_axial,
        "primary": list(ex.primary_muscles),
        "secondary": list(ex.secondary_muscles),
        "tertiary": list(ex.tertiary_muscles),
    }


def _load_entries(path: Path) -> list[dict]:
    """Read the ``exercises:`` list of one file; warn and return [] on errors."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"lift-readiness: cannot read {path} ({exc}); skipped", stacklevel=2)
        return []
    if not isinstance(data, dict) or not isinstance(data.get("exercises"), list):
        warnings.warn(f"lift-readiness: {path} has no 'exercises' list; skipped", stacklevel=2)
        return []
    return [e for e in data["exercises"] if isinstance(e, dict)]


def _get_bundled_exercises_dir() -> Path | None:
    """Return path to the bundled exercises/ data directory, or None if not found."""
    # loader.py lives at src/lift_readiness/core/exercises/loader.py
    candidate = Path(__file__).parent.parent.parent / "exercises"
    return candidate if candidate.is_dir() else None


def _get_user_exercises_dir() -> Path | None:
    """Return ~/.lift-readiness/exercises/ if it exists, else None."""
    p = get_data_dir() / "exercises"
    return p if p.is_dir() else None


def _read_dir(directory: Path | None) -> dict[str, dict]:
    raw: dict[str, dict] = {}
    if directory is None:
        return raw
    for path in sorted(directory.glob("*.yaml")):
        for entry in _load_entries(path):
            if "id" not in entry:
                warnings.warn(f"lift-readiness: exercise without id in {path}; skipped", stacklevel=2)
                continue
            raw[str(entry["id"])] = entry
    return raw


def load_exercises_from_yaml() -> dict[str, ExerciseDefinition] | None:
    """Return {exercise_id: ExerciseDefinition} from bundled and user YAML.

    Invalid entries are skipped with a warning.  Returns None when no
    exercise could be loaded so the registry can report the problem.
    """
    raw = _read_dir(_get_bundled_exercises_dir())
    for ex_id, override in _read_dir(_get_user_exercises_dir()).items():
        raw[ex_id] = {**raw.get(ex_id, {}), **override}

    result: dict[str, ExerciseDefinition] = {}
    for ex_id, entry in raw.items():
        try:
            result[ex_id] = exercise_from_dict(entry)
        except ValidationError as exc:
            warnings.warn(f"lift-readiness: skipping exercise '{ex_id}' ({exc})", stacklevel=2)

    return result or None
