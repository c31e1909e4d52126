"""
Exercise registry.

All preset exercises are registered here.  Use get_exercise() to look up
an ExerciseDefinition by its id.

Exercises are loaded from the YAML files in the bundled
``src/lift_readiness/exercises/`` directory at import time.  If nothing
can be loaded a RuntimeError is raised; the application cannot start
without an exercise library.

User overrides: place YAML files in ``~/.lift-readiness/exercises/``.
"""

from ..config import MUSCLES
from ..models import ExerciseDefinition


def load_library() -> dict[str, ExerciseDefinition]:
    """Load a fresh copy of the library (bundled presets plus user files)."""
    from .loader import load_exercises_from_yaml

    loaded = load_exercises_from_yaml()
    if not loaded:
        raise RuntimeError(
            "lift-readiness: no exercise definitions could be loaded from YAML. "
            "Check that src/lift_readiness/exercises/*.yaml files are present and valid."
        )
    return loaded


EXERCISE_REGISTRY: dict[str, ExerciseDefinition] = load_library()


def get_exercise(exercise_id: str) -> ExerciseDefinition:
    """
    Return the ExerciseDefinition for the given id.

    Args:
        exercise_id: e.g. "barbell_squat" (any id in the registry)

    Returns:
        ExerciseDefinition for the requested exercise

    Raises:
        ValueError: If exercise_id is not in the registry
    """
    if exercise_id not in EXERCISE_REGISTRY:
        valid = ", ".join(EXERCISE_REGISTRY)
        raise ValueError(f"Unknown exercise '{exercise_id}'. Valid IDs: {valid}")
    return EXERCISE_REGISTRY[exercise_id]


def exercises_for_muscle(muscle: str, library: dict[str, ExerciseDefinition] | None = None) -> list[ExerciseDefinition]:
    """Exercises that train *muscle* in any role, primary movers first."""
    library = library if library is not None else EXERCISE_REGISTRY
    if muscle not in MUSCLES:
        raise ValueError(f"Unknown muscle '{muscle}'. Valid: {', '.join(MUSCLES)}")
    found = [ex for ex in library.values() if muscle in ex.all_muscles]
    return sorted(found, key=lambda ex: muscle not in ex.primary_muscles)


def exercises_by_type(exercise_type: str, library: dict[str, ExerciseDefinition] | None = None) -> list[ExerciseDefinition]:
    """Exercises of one type (compound_upper, isolation_lower, ...)."""
    library = library if library is not None else EXERCISE_REGISTRY
    return [ex for ex in library.values() if ex.type == exercise_type]
