"""Tests for the YAML model config and the exercise library."""

from dataclasses import fields

import pytest

from lift_readiness.core.config import (
    DEFAULT_CONFIG,
    EXERCISE_TYPES,
    LOCAL_RECOVERY_RATE,
    MUSCLES,
    ModelConfig,
    readiness_level,
)
from lift_readiness.core.engine.config_loader import get_data_dir, load_model_config
from lift_readiness.core.exercises import (
    EXERCISE_REGISTRY,
    exercises_by_type,
    exercises_for_muscle,
    get_exercise,
    load_library,
)
from lift_readiness.core.exercises.loader import exercise_from_dict
from lift_readiness.core.models import ValidationError


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("LIFT_READINESS_HOME", str(tmp_path))
    return tmp_path


class TestModelConfig:
    def test_from_mapping_overrides_by_section(self):
        cfg = ModelConfig.from_mapping(
            {"fatigue": {"LOCAL_RECOVERY_RATE": 0.3}, "progression": {"STAGNATION_WINDOW": 5}}
        )
        assert cfg.local_recovery_rate == 0.3
        assert cfg.stagnation_window == 5
        assert isinstance(cfg.stagnation_window, int)
        assert cfg.deload_threshold == DEFAULT_CONFIG.deload_threshold

    def test_unknown_key_warns(self):
        with pytest.warns(UserWarning, match="unknown config key 'fatigue.NOT_A_KEY'"):
            cfg = ModelConfig.from_mapping({"fatigue": {"NOT_A_KEY": 1}})
        assert cfg == DEFAULT_CONFIG

    def test_key_in_wrong_section_warns(self):
        with pytest.warns(UserWarning):
            ModelConfig.from_mapping({"progression": {"LOCAL_RECOVERY_RATE": 0.5}})

    def test_non_mapping_section_warns(self):
        with pytest.warns(UserWarning, match="not a mapping"):
            ModelConfig.from_mapping({"fatigue": [1, 2]})

    def test_every_field_has_a_section(self):
        assert all(f.metadata.get("section") in ("fatigue", "progression") for f in fields(ModelConfig))

    @pytest.mark.parametrize(
        "value, label",
        [(1.0, "Optimal"), (0.85, "Optimal"), (0.7, "Good"), (0.5, "Moderate"), (0.2, "Low"), (-0.1, "Low")],
    )
    def test_readiness_levels(self, value, label):
        assert readiness_level(value).label == label


class TestConfigLoader:
    def test_data_dir_from_environment(self, home):
        assert get_data_dir() == home

    def test_bundled_defaults(self, home):
        cfg = load_model_config()
        assert cfg.local_recovery_rate == LOCAL_RECOVERY_RATE
        assert cfg == DEFAULT_CONFIG

    def test_user_override_is_merged(self, home):
        (home / "model.yaml").write_text("fatigue:\n  DELOAD_THRESHOLD: 0.55\n")
        cfg = load_model_config()
        assert cfg.deload_threshold == 0.55
        assert cfg.local_recovery_rate == LOCAL_RECOVERY_RATE

    def test_explicit_data_dir_overrides_home(self, home, tmp_path):
        (home / "model.yaml").write_text("fatigue:\n  DELOAD_THRESHOLD: 0.55\n")
        other = tmp_path / "other"
        other.mkdir()
        (other / "model.yaml").write_text("fatigue:\n  DELOAD_THRESHOLD: 0.5\n")
        assert load_model_config(other).deload_threshold == 0.5
        assert load_model_config().deload_threshold == 0.55

    def test_broken_user_file_is_ignored(self, home):
        (home / "model.yaml").write_text("fatigue: [unclosed\n")
        with pytest.warns(UserWarning, match="cannot read"):
            cfg = load_model_config()
        assert cfg == DEFAULT_CONFIG


class TestExerciseLibrary:
    def test_bundled_presets(self):
        assert len(EXERCISE_REGISTRY) == 41
        squat = get_exercise("barbell_squat")
        assert squat.is_axial is True
        assert squat.type == "compound_lower"

    def test_presets_are_consistent(self):
        for ex in EXERCISE_REGISTRY.values():
            assert ex.type in EXERCISE_TYPES
            assert ex.primary_muscles
            assert set(ex.all_muscles) <= set(MUSCLES)

    def test_unknown_exercise(self):
        with pytest.raises(ValueError, match="Unknown exercise 'zercher_squat'"):
            get_exercise("zercher_squat")

    def test_for_muscle_lists_primary_movers_first(self):
        found = exercises_for_muscle("Triceps")
        assert found
        roles = ["Triceps" in ex.primary_muscles for ex in found]
        assert roles == sorted(roles, reverse=True)
        with pytest.raises(ValueError):
            exercises_for_muscle("Neck")

    def test_by_type(self):
        assert all(ex.type == "isolation_lower" for ex in exercises_by_type("isolation_lower"))
        assert exercises_by_type("cardio") == []

    def test_overlapping_roles_rejected(self):
        with pytest.raises(ValidationError, match="both primary and secondary"):
            exercise_from_dict(
                {"id": "x", "name": "X", "type": "compound_upper", "primary": ["Chest"], "secondary": ["Chest"]}
            )

    def test_missing_fields_rejected(self):
        with pytest.raises(ValidationError, match="missing fields"):
            exercise_from_dict({"id": "x", "name": "X"})

    def test_user_overrides(self, home):
        (home / "exercises").mkdir()
        (home / "exercises" / "mine.yaml").write_text(
            "exercises:\n"
            "  - {id: barbell_squat, is_axial: false}\n"
            "  - {id: belt_squat, name: Belt Squat, type: compound_lower, primary: [Quads], secondary: [Glutes]}\n"
        )
        library = load_library()
        assert library["barbell_squat"].is_axial is False
        assert library["barbell_squat"].name == "Barbell Squat"
        assert library["belt_squat"].secondary_muscles == ("Glutes",)
        assert len(library) == 42

    def test_invalid_user_entry_is_skipped(self, home):
        (home / "exercises").mkdir()
        (home / "exercises" / "bad.yaml").write_text("exercises:\n  - {id: broken, name: Broken}\n")
        with pytest.warns(UserWarning, match="skipping exercise 'broken'"):
            library = load_library()
        assert "broken" not in library
