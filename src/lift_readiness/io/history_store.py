"""
JSONL-based history storage for logged workouts.

Handles reading, writing, and managing the workout history file and the
fatigue-state snapshot kept next to it.
"""

import json
import logging
from pathlib import Path

from ..core.engine.config_loader import get_data_dir
from ..core.models import FatigueState, WorkoutRecord
from .serializers import (
    ValidationError,
    dict_to_fatigue_state,
    fatigue_state_to_dict,
    json_line_to_record,
    record_to_json_line,
)

logger = logging.getLogger(__name__)

HISTORY_FILENAME = "history.jsonl"
STATE_FILENAME = "fatigue_state.json"


class HistoryStore:
    """
    Manages workout history stored in JSONL format.

    The history file contains one WorkoutRecord per line, kept sorted by
    date.  A separate fatigue_state.json holds the FatigueState as of the
    last logged session, rest day or recovery sync.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the history store.

        Args:
            data_dir: Directory holding history.jsonl and fatigue_state.json
        """
        self.data_dir = Path(data_dir)
        self.history_path = self.data_dir / HISTORY_FILENAME
        self.state_path = self.data_dir / STATE_FILENAME

    def exists(self) -> bool:
        """Check if the history file exists."""
        return self.history_path.exists()

    def init(self) -> None:
        """
        Initialize empty history and state files if they don't exist.

        Creates the data directory if needed.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)

        if not self.history_path.exists():
            self.history_path.touch()
        if not self.state_path.exists():
            self.save_state(FatigueState())

    def _require_init(self) -> None:
        if not self.history_path.exists():
            raise FileNotFoundError(
                f"History file not found: {self.history_path}. Run 'init' first."
            )

    def load_history(self) -> list[WorkoutRecord]:
        """
        Load all workout records from the history file.

        Returns:
            List of WorkoutRecord, sorted by date (log order within a day)

        Raises:
            FileNotFoundError: If history file doesn't exist
            ValidationError: If a line cannot be parsed
        """
        self._require_init()

        records: list[WorkoutRecord] = []

        with open(self.history_path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(json_line_to_record(line))
                except ValidationError as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.history_path}: {e}"
                    ) from e

        records.sort(key=lambda r: r.date)
        logger.debug("Loaded %d records from %s", len(records), self.history_path)
        return records

    def append_records(self, records: list[WorkoutRecord]) -> None:
        """
        Add records to the history file.

        Records dated before existing ones are inserted in chronological
        order; same-day records keep the order they were logged in.

        Args:
            records: Records to add
        """
        existing = self.load_history()
        combined = existing + list(records)
        combined.sort(key=lambda r: r.date)
        self._write_records(combined)

    def _write_records(self, records: list[WorkoutRecord]) -> None:
        with open(self.history_path, "w") as f:
            for record in records:
                f.write(record_to_json_line(record) + "\n")

    def load_state(self) -> FatigueState:
        """
        Load the saved fatigue state.

        Returns:
            Saved FatigueState, or a fresh one if none was saved yet

        Raises:
            FileNotFoundError: If the store was never initialized
            ValidationError: If the state file is invalid
        """
        self._require_init()
        if not self.state_path.exists():
            return FatigueState()

        try:
            with open(self.state_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {self.state_path}: {e}") from e

        return dict_to_fatigue_state(data)

    def save_state(self, state: FatigueState) -> None:
        """Write the fatigue state, replacing the previous snapshot."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.state_path, "w") as f:
            json.dump(fatigue_state_to_dict(state), f, indent=2)

    def get_records_for(self, exercise_id: str) -> list[WorkoutRecord]:
        """All records of one exercise, oldest first."""
        return [r for r in self.load_history() if r.exercise_id == exercise_id]

    def clear(self) -> None:
        """Empty the history and reset the fatigue state to fresh."""
        self._require_init()
        self._write_records([])
        self.save_state(FatigueState())


def get_default_store(data_dir: Path | None = None) -> HistoryStore:
    """
    Get a history store in *data_dir* or the default data directory.

    The default is ``$LIFT_READINESS_HOME`` if set, else ~/.lift-readiness.
    """
    return HistoryStore(data_dir if data_dir is not None else get_data_dir())
