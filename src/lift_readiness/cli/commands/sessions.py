"""Session commands: log-session, rest-day, show-history, and helpers."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.config import DELOAD_THRESHOLD
from ...core.dates import today
from ...core.exercises.registry import EXERCISE_REGISTRY, get_exercise
from ...core.fatigue import update_fatigue_from_session
from ...core.models import Session, SessionEntry, SessionUpdate, WorkoutRecord
from ...io.history_store import HistoryStore
from ...io.serializers import (
    ValidationError,
    parse_entry_string,
    parse_int_list,
    parse_muscle_levels,
    record_to_dict,
    validate_date,
)
from .. import views
from ..app import DataDirOption, JsonOption, app, get_config, get_store

PerceivedFatigueOption = Annotated[
    float,
    typer.Option(
        "--perceived-fatigue",
        "-f",
        min=0,
        max=10,
        help="How tired you feel overall, 0-10 (5 = normal)",
    ),
]

SorenessOption = Annotated[
    Optional[str],
    typer.Option("--soreness", "-s", help="Per-muscle soreness 0-10, e.g. Chest=7,Quads=3"),
]


def _require_store(store: HistoryStore) -> None:
    if not store.exists():
        views.print_error(f"History file not found: {store.history_path}")
        views.print_info("Run 'init' first to create the data directory.")
        raise typer.Exit(1)


def _print_update(update: SessionUpdate) -> None:
    """Summarise a state update: readiness and (for training) stimulus."""
    r = update.readiness
    views.console.print(
        f"Systemic readiness: {r.systemic_readiness:.0%}   "
        f"Average muscle readiness: {r.average_muscle_readiness:.0%}"
    )
    if update.session_stimulus:
        stim = ", ".join(f"{m} {v:g}" for m, v in sorted(update.session_stimulus.items()))
        views.console.print(f"[dim]Sets counted: {stim}[/dim]")
    low = sorted(m for m, v in r.muscle_readiness.items() if v < DELOAD_THRESHOLD)
    if low:
        views.print_warning(f"Low readiness: {', '.join(low)}")


def _ingest(
    store: HistoryStore,
    entries: list[SessionEntry],
    date: str,
    perceived_fatigue: float,
    soreness: Optional[str],
    rir_errors: Optional[str],
) -> tuple[SessionUpdate, list[WorkoutRecord]]:
    """Apply one day to the saved state, then persist history and state."""
    session = Session(
        entries=entries,
        perceived_fatigue=perceived_fatigue,
        muscle_soreness=parse_muscle_levels(soreness) if soreness else {},
        rir_errors=parse_int_list(rir_errors) if rir_errors else [],
    )
    state = store.load_state()
    update = update_fatigue_from_session(session, date, state, cfg=get_config(store.data_dir))

    timestamp = datetime.now().isoformat(timespec="seconds")
    records = [WorkoutRecord.from_entry(e, date, timestamp) for e in entries if e.sets]
    if records:
        store.append_records(records)
    store.save_state(update.state)
    return update, records


@app.command("log-session")
def log_session(
    entry: Annotated[
        list[str],
        typer.Option(
            "--entry",
            "-e",
            help="EXERCISE_ID:SETS, repeatable. Sets are WEIGHTxREPS@RIR, e.g. barbell_squat:100x5@2*3",
        ),
    ],
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Session date (YYYY-MM-DD, default: today)"),
    ] = None,
    perceived_fatigue: PerceivedFatigueOption = 5.0,
    soreness: SorenessOption = None,
    rir_error: Annotated[
        Optional[str],
        typer.Option(
            "--rir-error",
            help="Actual minus target RIR per set, comma-separated, e.g. -1,0,-2",
        ),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log a completed training session.

    Example:

      lift-readiness log-session --date 2026-03-02 \\
        -e barbell_squat:100x5@2*3 -e romanian_deadlift:80x8@2,80x8@1 \\
        --perceived-fatigue 6 --soreness Quads=4
    """
    store = get_store(data_dir)
    _require_store(store)

    try:
        day = validate_date(date) if date else today()
        entries: list[SessionEntry] = []
        for raw in entry:
            ex_id, sets = parse_entry_string(raw)
            entries.append(SessionEntry(exercise=get_exercise(ex_id), sets=sets))
        update, records = _ingest(store, entries, day, perceived_fatigue, soreness, rir_error)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    except ValueError as e:
        # Unknown exercise id
        views.print_error(str(e))
        views.print_info("Run 'exercises' to list valid IDs.")
        raise typer.Exit(1)

    total_sets = sum(len(r.sets) for r in records)
    views.print_success(f"Logged {len(records)} exercise(s), {total_sets} set(s) on {day}")
    _print_update(update)


@app.command("rest-day")
def rest_day(
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Rest day date (YYYY-MM-DD, default: today)"),
    ] = None,
    perceived_fatigue: PerceivedFatigueOption = 5.0,
    soreness: SorenessOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Record a rest day: recovery only, with optional fatigue and soreness notes.
    """
    store = get_store(data_dir)
    _require_store(store)

    try:
        day = validate_date(date) if date else today()
        update, _ = _ingest(store, [], day, perceived_fatigue, soreness, None)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Rest day recorded on {day}")
    _print_update(update)


@app.command("show-history")
def show_history(
    exercise_id: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Only this exercise"),
    ] = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Limit number of records to show"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Display workout history as a table.
    """
    store = get_store(data_dir)
    _require_store(store)

    try:
        records = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if exercise_id is not None:
        records = [r for r in records if r.exercise_id == exercise_id]
    if limit is not None:
        records = records[-limit:]

    if json_out:
        print(json.dumps([record_to_dict(r) for r in records], indent=2))
        return

    names = {ex_id: ex.name for ex_id, ex in EXERCISE_REGISTRY.items()}
    views.print_history(records, names)
