"""Profile commands: init, reset, exercises."""

import json
from typing import Annotated, Optional

import typer

from ...core.exercises.registry import EXERCISE_REGISTRY, exercises_by_type, exercises_for_muscle
from ...core.exercises.loader import exercise_to_dict
from ...io.serializers import ValidationError
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store


@app.command()
def init(
    data_dir: DataDirOption = None,
) -> None:
    """
    Create the data directory with an empty history and a fresh fatigue state.

    Existing files are left untouched.
    """
    store = get_store(data_dir)
    existed = store.exists()

    try:
        store.init()
    except OSError as e:
        views.print_error(f"Cannot create {store.data_dir}: {e}")
        raise typer.Exit(1)

    if existed:
        views.print_info(f"Already initialized: {store.data_dir}")
    else:
        views.print_success(f"Initialized {store.data_dir}")


@app.command()
def reset(
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Delete all logged workouts and reset fatigue to zero.
    """
    store = get_store(data_dir)

    if not force and not views.confirm_action("Delete all history and fatigue state?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.clear()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success("History cleared and fatigue state reset.")


@app.command()
def exercises(
    muscle: Annotated[
        Optional[str],
        typer.Option("--muscle", "-m", help="Only exercises that train this muscle"),
    ] = None,
    exercise_type: Annotated[
        Optional[str],
        typer.Option("--type", "-t", help="Only exercises of this type, e.g. compound_lower"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    List the exercise library.
    """
    try:
        found = exercises_for_muscle(muscle) if muscle else list(EXERCISE_REGISTRY.values())
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if exercise_type:
        of_type = {ex.id for ex in exercises_by_type(exercise_type)}
        found = [ex for ex in found if ex.id in of_type]

    if json_out:
        print(json.dumps([exercise_to_dict(ex) for ex in found], indent=2))
        return

    if not found:
        views.print_warning("No exercises match.")
        return

    views.print_exercises(found)
