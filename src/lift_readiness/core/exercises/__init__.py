"""
Exercise library for lift-readiness.

Preset exercises with their type, axial flag and muscle roles, loaded
from bundled YAML.
"""

from .registry import EXERCISE_REGISTRY, exercises_by_type, exercises_for_muscle, get_exercise, load_library

__all__ = [
    "EXERCISE_REGISTRY",
    "exercises_by_type",
    "exercises_for_muscle",
    "get_exercise",
    "load_library",
]
