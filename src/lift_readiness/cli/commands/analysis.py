"""Analysis commands: status, progression, recovery."""

import json
from dataclasses import asdict
from typing import Annotated, Optional

import typer

from ...core.adaptation import estimate_recovery_time, get_deload_recommendation, get_stimulus_efficiency
from ...core.config import MUSCLES, ModelConfig
from ...core.dates import today
from ...core.exercises.registry import EXERCISE_REGISTRY
from ...core.fatigue import apply_recovery, calculate_readiness
from ...core.metrics import (
    analyze_progressive_overload,
    get_intensity_distribution,
    get_muscle_frequency,
    get_personal_records,
    sort_newest_first,
)
from ...core.models import ExerciseDefinition, FatigueState
from ...core.progression import generate_deload_protocol, get_progression, get_volume_recommendation
from ...core.recovery import get_rest_recommendation
from ...io.history_store import HistoryStore
from ...io.serializers import ValidationError, validate_date
from .. import views
from ..app import DataDirOption, JsonOption, app, get_config, get_store

DateOption = Annotated[
    Optional[str],
    typer.Option("--date", "-d", help="Evaluate as of this day (YYYY-MM-DD, default: today)"),
]


def _load_recovered(store: HistoryStore, date: Optional[str], cfg: ModelConfig) -> tuple[FatigueState, str]:
    """Saved state brought forward to *date* (not written back)."""
    if not store.exists():
        raise FileNotFoundError(f"History file not found: {store.history_path}. Run 'init' first.")
    as_of = validate_date(date) if date else today()
    return apply_recovery(store.load_state(), as_of, cfg=cfg), as_of


def _rounded(values: dict[str, float], digits: int = 4) -> dict[str, float]:
    return {k: round(v, digits) for k, v in values.items()}


@app.command()
def status(
    date: DateOption = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show muscle readiness and whether a deload is due.

    With --date the saved state is recovered to that day for a preview;
    nothing is written.
    """
    store = get_store(data_dir)
    cfg = get_config(data_dir)

    try:
        state, as_of = _load_recovered(store, date, cfg)
        history = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    readiness = calculate_readiness(state)
    deload = get_deload_recommendation(state, cfg)
    efficiency = get_stimulus_efficiency(state, cfg)

    if json_out:
        print(json.dumps({
            "date": as_of,
            "last_workout_date": state.last_workout_date,
            "systemic_readiness": round(readiness.systemic_readiness, 4),
            "average_muscle_readiness": round(readiness.average_muscle_readiness, 4),
            "muscle_readiness": _rounded(readiness.muscle_readiness),
            "weekly_stimulus": _rounded(state.weekly_stimulus),
            "weekly_frequency": get_muscle_frequency(history, as_of),
            "stimulus_trend": efficiency.trend,
            "deload": {
                "needed": deload.needed,
                "message": deload.message,
                "conditions": deload.conditions,
                "type": deload.basic.type,
                "severity": deload.basic.severity,
                "affected_muscles": deload.basic.affected_muscles,
            },
        }, indent=2))
        return

    views.print_status(readiness, state, deload, as_of, efficiency)


@app.command()
def progression(
    exercise_id: Annotated[
        str,
        typer.Argument(help="Exercise ID (see 'exercises')"),
    ],
    date: DateOption = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Advise on weight, sets and effort for the next time an exercise is trained.
    """
    store = get_store(data_dir)
    cfg = get_config(data_dir)

    try:
        state, _ = _load_recovered(store, date, cfg)
        history = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    readiness = calculate_readiness(state)
    rec = get_progression(
        exercise_id,
        EXERCISE_REGISTRY,
        history,
        readiness.muscle_readiness,
        readiness.systemic_readiness,
        state.weekly_stimulus,
        cfg,
    )

    if not rec.found:
        if json_out:
            print(json.dumps(asdict(rec), indent=2))
        else:
            views.print_error(rec.message)
            views.print_info("Run 'exercises' to list valid IDs.")
        raise typer.Exit(1)

    exercise = EXERCISE_REGISTRY[exercise_id]
    ex_history = sort_newest_first([r for r in history if r.exercise_id == exercise_id and r.sets])
    deload = None
    if rec.advice == "deload":
        deload = generate_deload_protocol(
            exercise,
            ex_history[0] if ex_history else None,
            min(rec.muscle_readiness, rec.systemic_readiness),
            cfg,
        )
    overload = analyze_progressive_overload(ex_history)
    prs = get_personal_records(ex_history)
    intensity = get_intensity_distribution(ex_history)

    if json_out:
        print(json.dumps({
            "exercise_id": exercise_id,
            "recommendation": asdict(rec),
            "deload_prescription": asdict(deload) if deload is not None else None,
            "overload": asdict(overload),
            "personal_records": asdict(prs),
            "intensity": asdict(intensity),
        }, indent=2))
        return

    views.print_progression(exercise, rec, deload, overload, prs, intensity)


@app.command()
def recovery(
    target: Annotated[
        Optional[str],
        typer.Option(
            "--target",
            "-t",
            help="Muscles you plan to train next, comma-separated, e.g. Chest,Triceps",
        ),
    ] = None,
    date: DateOption = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show days until each muscle recovers and whether to rest before training.
    """
    store = get_store(data_dir)
    cfg = get_config(data_dir)

    targets = [m.strip() for m in target.split(",") if m.strip()] if target else []
    unknown = [m for m in targets if m not in MUSCLES]
    if unknown:
        views.print_error(f"Unknown muscle(s): {', '.join(unknown)}. Valid: {', '.join(MUSCLES)}")
        raise typer.Exit(1)

    try:
        state, _ = _load_recovered(store, date, cfg)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    readiness = calculate_readiness(state)
    estimate = estimate_recovery_time(state.local_fatigue, state.systemic_fatigue, cfg)
    planned = None
    if targets:
        planned = [
            ExerciseDefinition(
                id="planned_session",
                name="Planned session",
                type="isolation_upper",
                primary_muscles=tuple(targets),
            )
        ]
    rest = get_rest_recommendation(readiness.muscle_readiness, readiness.systemic_readiness, planned)
    volume = [
        get_volume_recommendation(m, state.weekly_stimulus, readiness.muscle_readiness, cfg)
        for m in targets
    ]

    if json_out:
        print(json.dumps({
            "muscle_days": estimate.muscle_days,
            "systemic_days": estimate.systemic_days,
            "max_days": estimate.max_days,
            "rest": asdict(rest),
            "volume": [asdict(v) for v in volume],
        }, indent=2))
        return

    views.print_recovery(estimate, rest, volume)
