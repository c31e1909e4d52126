"""
Smoke tests for the lift-readiness CLI.

Tests basic functionality:
- App runs without errors
- Data directory is created
- Sessions and rest days can be logged
- Status, progression and recovery report as text and JSON
"""

import json

import pytest
from typer.testing import CliRunner

from lift_readiness.cli.main import app


runner = CliRunner()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Initialized data directory; also used as the config home."""
    monkeypatch.setenv("LIFT_READINESS_HOME", str(tmp_path))
    result = runner.invoke(app, ["init", "--data-dir", str(tmp_path)])
    assert result.exit_code == 0
    return tmp_path


def _invoke(data_dir, *args):
    return runner.invoke(app, [*args, "--data-dir", str(data_dir)])


def _log_bench(data_dir, date="2024-03-01"):
    return _invoke(
        data_dir,
        "log-session",
        "--date", date,
        "-e", "barbell_bench_press:100x8@2*3",
        "-e", "cable_fly:20x12@1",
        "--perceived-fatigue", "6",
        "--soreness", "Chest=4",
    )


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "log-session" in result.output

    def test_init_creates_files(self, tmp_path):
        target = tmp_path / "home"
        result = runner.invoke(app, ["init", "--data-dir", str(target)])
        assert result.exit_code == 0
        assert (target / "history.jsonl").exists()
        assert (target / "fatigue_state.json").exists()

        again = runner.invoke(app, ["init", "--data-dir", str(target)])
        assert again.exit_code == 0
        assert "Already initialized" in again.output

    def test_exercises_json(self):
        result = runner.invoke(app, ["exercises", "--json"])
        assert result.exit_code == 0
        ids = {ex["id"] for ex in json.loads(result.output)}
        assert "barbell_squat" in ids
        assert len(ids) == 41

    def test_exercises_filtered_by_muscle(self):
        result = runner.invoke(app, ["exercises", "--muscle", "Calves", "--json"])
        assert result.exit_code == 0
        assert all("Calves" in ex["primary"] + ex["secondary"] + ex["tertiary"] for ex in json.loads(result.output))

    def test_exercises_unknown_muscle(self):
        result = runner.invoke(app, ["exercises", "--muscle", "Neck"])
        assert result.exit_code == 1

    def test_log_session_adds_to_history(self, data_dir):
        result = _log_bench(data_dir)
        assert result.exit_code == 0, result.output
        assert "Logged 2 exercise(s), 4 set(s) on 2024-03-01" in result.output

        history = _invoke(data_dir, "show-history", "--json")
        assert history.exit_code == 0
        records = json.loads(history.output)
        assert [r["exercise_id"] for r in records] == ["barbell_bench_press", "cable_fly"]
        assert len(records[0]["sets"]) == 3
        assert records[0]["primary_muscles"] == ["Chest"]

    def test_show_history_table(self, data_dir):
        _log_bench(data_dir)
        result = _invoke(data_dir, "show-history", "--exercise", "cable_fly")
        assert result.exit_code == 0
        assert "Workout History" in result.output

    def test_empty_history(self, data_dir):
        result = _invoke(data_dir, "show-history")
        assert result.exit_code == 0
        assert "No workouts recorded yet" in result.output

    def test_status_json(self, data_dir):
        _log_bench(data_dir)
        result = _invoke(data_dir, "status", "--date", "2024-03-02", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["date"] == "2024-03-02"
        assert data["last_workout_date"] == "2024-03-01"
        assert data["muscle_readiness"]["Chest"] < 1.0
        assert data["weekly_frequency"] == {"Chest": 2}
        assert data["deload"]["needed"] in (True, False)

    def test_status_table(self, data_dir):
        _log_bench(data_dir)
        result = _invoke(data_dir, "status", "--date", "2024-03-02")
        assert result.exit_code == 0
        assert "Muscle Readiness" in result.output

    def test_status_preview_is_not_saved(self, data_dir):
        _log_bench(data_dir)
        before = (data_dir / "fatigue_state.json").read_text()
        _invoke(data_dir, "status", "--date", "2024-03-10")
        assert (data_dir / "fatigue_state.json").read_text() == before

    def test_progression_json(self, data_dir):
        _log_bench(data_dir)
        result = _invoke(data_dir, "progression", "barbell_bench_press", "--date", "2024-03-04", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["exercise_id"] == "barbell_bench_press"
        assert data["recommendation"]["found"] is True
        assert data["personal_records"]["max_weight"]["set"]["weight"] == 100.0
        assert data["overload"]["trend"] == "insufficient_data"

    def test_progression_first_time(self, data_dir):
        result = _invoke(data_dir, "progression", "barbell_squat", "--json")
        assert result.exit_code == 0
        assert json.loads(result.output)["recommendation"]["advice"] == "first_time"

    def test_progression_unknown_exercise(self, data_dir):
        result = _invoke(data_dir, "progression", "zercher_squat", "--json")
        assert result.exit_code == 1
        assert json.loads(result.output)["advice"] == "not_found"

    def test_recovery_json(self, data_dir):
        _log_bench(data_dir)
        result = _invoke(data_dir, "recovery", "--target", "Chest,Triceps", "--date", "2024-03-02", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["muscle_days"]["Chest"] >= 0
        assert data["max_days"] >= data["systemic_days"]
        assert [v["muscle"] for v in data["volume"]] == ["Chest", "Triceps"]

    def test_recovery_table(self, data_dir):
        _log_bench(data_dir)
        result = _invoke(data_dir, "recovery", "--date", "2024-03-02")
        assert result.exit_code == 0
        assert "Recovery Timeline" in result.output

    def test_recovery_unknown_muscle(self, data_dir):
        result = _invoke(data_dir, "recovery", "--target", "Neck")
        assert result.exit_code == 1

    def test_rest_day(self, data_dir):
        _log_bench(data_dir)
        result = _invoke(data_dir, "rest-day", "--date", "2024-03-02")
        assert result.exit_code == 0, result.output
        assert "Rest day recorded on 2024-03-02" in result.output

        state = json.loads((data_dir / "fatigue_state.json").read_text())
        assert state["last_update_date"] == "2024-03-02"
        assert state["last_workout_date"] == "2024-03-01"

    def test_model_yaml_read_from_data_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LIFT_READINESS_HOME", str(tmp_path / "elsewhere"))
        target = tmp_path / "data"
        assert runner.invoke(app, ["init", "--data-dir", str(target)]).exit_code == 0
        (target / "model.yaml").write_text("fatigue:\n  BASE_FATIGUE_PER_SET: 0.0\n")

        logged = _invoke(target, "log-session", "--date", "2024-03-01", "-e", "barbell_bench_press:100x8@0*3")
        assert logged.exit_code == 0, logged.output
        result = _invoke(target, "status", "--date", "2024-03-01", "--json")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["muscle_readiness"].get("Chest", 1.0) == 1.0

    def test_reset(self, data_dir):
        _log_bench(data_dir)
        result = _invoke(data_dir, "reset", "--force")
        assert result.exit_code == 0
        assert json.loads(_invoke(data_dir, "show-history", "--json").output) == []


class TestCLIErrors:
    def test_unknown_exercise(self, data_dir):
        result = _invoke(data_dir, "log-session", "--date", "2024-03-01", "-e", "zercher_squat:100x5@2")
        assert result.exit_code == 1
        assert "Unknown exercise" in result.output

    def test_bad_sets(self, data_dir):
        result = _invoke(data_dir, "log-session", "-e", "barbell_squat:heavy")
        assert result.exit_code == 1

    def test_bad_date(self, data_dir):
        result = _invoke(data_dir, "log-session", "--date", "03/01/2024", "-e", "barbell_squat:100x5")
        assert result.exit_code == 1

    def test_missing_init(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LIFT_READINESS_HOME", str(tmp_path))
        missing = tmp_path / "missing"
        for args in (["status"], ["show-history"], ["log-session", "-e", "barbell_squat:100x5"]):
            result = runner.invoke(app, [*args, "--data-dir", str(missing)])
            assert result.exit_code == 1
