"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of readiness, history and advice.
"""

from itertools import groupby
from typing import Sequence

from rich.console import Console
from rich.table import Table

from ..core.config import MUSCLES, readiness_level
from ..core.models import (
    DeloadPrescription,
    DeloadRecommendation,
    ExerciseDefinition,
    FatigueState,
    IntensityDistribution,
    OverloadAnalysis,
    PersonalRecords,
    ProgressionRecommendation,
    Readiness,
    RecoveryEstimate,
    RestRecommendation,
    StimulusEfficiency,
    VolumeRecommendation,
    WorkoutRecord,
    WorkoutSet,
)

console = Console()

ADVICE_STYLES: dict[str, str] = {
    "first_time": "cyan",
    "deload": "bold red",
    "add_volume": "green",
    "progress": "bold green",
    "reduce_rir": "green",
    "push_harder": "green",
    "maintain": "yellow",
    "reduce": "dark_orange",
    "not_found": "red",
}


def format_sets(sets: Sequence[WorkoutSet]) -> str:
    """
    Compact text form of sets, collapsing identical consecutive sets.

    Example: three 100x8@2 sets then 105x6@1 -> "100x8@2*3, 105x6@1"
    """
    parts: list[str] = []
    for s, group in groupby(sets):
        n = len(list(group))
        text = f"{s.weight:g}x{s.reps}@{s.rir}"
        parts.append(f"{text}*{n}" if n > 1 else text)
    return ", ".join(parts) if parts else "-"


def _readiness_cell(value: float) -> str:
    level = readiness_level(value)
    return f"[{level.color}]{value:.0%}[/{level.color}]"


def format_readiness_table(readiness: Readiness, state: FatigueState) -> Table:
    """
    Create a Rich table of per-muscle fatigue and readiness.

    Args:
        readiness: Readiness derived from the state
        state: Fatigue state (for fatigue, weekly stimulus and soreness)

    Returns:
        Rich Table object
    """
    table = Table(title="Muscle Readiness")

    table.add_column("Muscle", style="cyan")
    table.add_column("Fatigue", justify="right")
    table.add_column("Readiness", justify="right", style="bold")
    table.add_column("Level")
    table.add_column("Weekly sets", justify="right")
    table.add_column("Soreness", justify="right", style="dim")

    extras = sorted(m for m in readiness.muscle_readiness if m not in MUSCLES)
    for muscle in [*MUSCLES, *extras]:
        value = readiness.muscle_readiness.get(muscle, 1.0)
        level = readiness_level(value)
        soreness = state.muscle_soreness.get(muscle)
        table.add_row(
            muscle,
            f"{state.local_fatigue.get(muscle, 0.0):.3f}",
            _readiness_cell(value),
            f"[{level.color}]{level.label}[/{level.color}]",
            f"{state.weekly_stimulus.get(muscle, 0.0):.1f}",
            f"{soreness:g}" if soreness else "-",
        )

    return table


def print_status(
    readiness: Readiness,
    state: FatigueState,
    deload: DeloadRecommendation,
    as_of: str,
    efficiency: StimulusEfficiency | None = None,
) -> None:
    """
    Print readiness table and deload recommendation.

    Args:
        readiness: Readiness at *as_of*
        state: Fatigue state recovered to *as_of*
        deload: Deload recommendation for the same state
        as_of: Day the numbers refer to
        efficiency: Stimulus efficiency of the latest session, if any
    """
    level = readiness_level(readiness.systemic_readiness)

    console.print()
    console.print(f"[bold]Status as of {as_of}[/bold]")
    console.print(
        f"- Systemic readiness: {_readiness_cell(readiness.systemic_readiness)}"
        f"  [{level.color}]{level.label}[/{level.color}] ({level.description})"
    )
    console.print(f"- Average muscle readiness: {_readiness_cell(readiness.average_muscle_readiness)}")
    console.print(f"- Last workout: {state.last_workout_date or '-'}")
    console.print()
    console.print(format_readiness_table(readiness, state))

    if efficiency is not None and efficiency.efficiency:
        console.print()
        console.print(f"[bold]Stimulus trend:[/bold] {efficiency.trend}")

    console.print()
    if deload.needed:
        console.print(f"[bold red]Deload recommended:[/bold red] {deload.message}")
        if deload.basic.affected_muscles:
            console.print(f"  Affected: {', '.join(deload.basic.affected_muscles)}")
    else:
        console.print(f"[green]No deload needed:[/green] {deload.message}")
    for condition in deload.conditions:
        console.print(f"  [yellow]•[/yellow] {condition}")
    console.print()


def format_history_table(records: Sequence[WorkoutRecord], exercise_names: dict[str, str]) -> Table:
    """
    Create a Rich table displaying workout history.

    Args:
        records: Records to display, oldest first
        exercise_names: Display names by exercise id

    Returns:
        Rich Table object
    """
    table = Table(title="Workout History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Exercise", style="magenta")
    table.add_column("Sets")
    table.add_column("Volume", justify="right", style="bold")

    for i, record in enumerate(records, 1):
        table.add_row(
            str(i),
            record.date,
            exercise_names.get(record.exercise_id, record.exercise_id),
            format_sets(record.sets),
            f"{sum(s.volume for s in record.sets):g}",
        )

    return table


def print_history(records: Sequence[WorkoutRecord], exercise_names: dict[str, str]) -> None:
    """Print workout history to console."""
    if not records:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return

    console.print(format_history_table(records, exercise_names))


def print_exercises(exercises: Sequence[ExerciseDefinition]) -> None:
    """Print the exercise library."""
    table = Table(title="Exercises")

    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Type", style="magenta")
    table.add_column("Axial", justify="center")
    table.add_column("Primary", style="bold")
    table.add_column("Secondary", style="dim")

    for ex in exercises:
        table.add_row(
            ex.id,
            ex.name,
            ex.type,
            "yes" if ex.is_axial else "",
            ", ".join(ex.primary_muscles),
            ", ".join(ex.secondary_muscles),
        )

    console.print(table)


def print_progression(
    exercise: ExerciseDefinition,
    rec: ProgressionRecommendation,
    deload: DeloadPrescription | None = None,
    overload: OverloadAnalysis | None = None,
    records: PersonalRecords | None = None,
    intensity: IntensityDistribution | None = None,
) -> None:
    """
    Print progression advice for one exercise, with its analytics.

    Args:
        exercise: Exercise the advice is for
        rec: Progression recommendation
        deload: Concrete deload session when the advice is deload
        overload: Session-volume trend
        records: Personal records
        intensity: RIR distribution of all logged sets
    """
    style = ADVICE_STYLES.get(rec.advice, "white")

    console.print()
    console.print(f"[bold]{exercise.name}[/bold] [dim]({exercise.id})[/dim]")
    console.print(f"- Advice: [{style}]{rec.advice}[/{style}]")
    console.print(f"- {rec.message}")
    console.print(
        f"- Muscle readiness: {_readiness_cell(rec.muscle_readiness)}"
        f"  Systemic: {_readiness_cell(rec.systemic_readiness)}"
    )
    if rec.recommended_weight is not None:
        console.print(f"- Weight: [bold]{rec.recommended_weight:g}[/bold]")
    if rec.recommended_sets is not None:
        console.print(f"- Sets: [bold]{rec.recommended_sets}[/bold]")
    if rec.rir_delta:
        console.print(f"- Target RIR change: {rec.rir_delta:+d}")
    if rec.rationale:
        console.print(f"  [dim]{rec.rationale}[/dim]")

    if rec.deload_protocol is not None:
        p = rec.deload_protocol
        console.print()
        console.print(f"[bold red]Deload[/bold red] ({p.duration}): {p.reason}")
        if p.full_rest:
            console.print("  Full rest from training")
        else:
            console.print(
                f"  Sets -{p.set_reduction:.0%}, RIR +{p.rir_increase}, weight -{p.weight_reduction:.0%}"
            )

    if deload is not None:
        console.print(
            f"  Suggested: {deload.sets} x {deload.reps}"
            + (f" @ {deload.weight:g}" if deload.weight is not None else "")
            + f", RIR {deload.rir} for {deload.duration}"
        )
        for line in deload.instructions:
            console.print(f"  [yellow]•[/yellow] {line}")

    if overload is not None:
        console.print()
        console.print(f"[bold]Volume trend:[/bold] {overload.trend} - {overload.message}")

    if records is not None and records.max_weight is not None:
        console.print("[bold]Personal records:[/bold]")
        for label, rs in (
            ("Heaviest", records.max_weight),
            ("Most volume", records.max_volume),
            ("Most reps", records.max_reps),
        ):
            if rs is not None:
                console.print(f"  {label}: {format_sets([rs.set])} on {rs.date}")

    if intensity is not None and intensity.total_sets:
        console.print(
            f"[bold]Intensity:[/bold] RIR 0-1 {intensity.high:.0f}%  "
            f"RIR 2-3 {intensity.moderate:.0f}%  RIR 4+ {intensity.low:.0f}%"
        )
    console.print()


def print_recovery(
    estimate: RecoveryEstimate,
    rest: RestRecommendation,
    volume: Sequence[VolumeRecommendation] = (),
) -> None:
    """
    Print the recovery timeline and rest advice.

    Args:
        estimate: Days to target readiness per muscle
        rest: Rest recommendation before the next session
        volume: Weekly volume status of muscles of interest
    """
    table = Table(title="Recovery Timeline")
    table.add_column("Muscle", style="cyan")
    table.add_column("Days to recover", justify="right", style="bold")

    for muscle, days in sorted(estimate.muscle_days.items(), key=lambda kv: (-kv[1], kv[0])):
        if days > 0:
            table.add_row(muscle, str(days))
    table.add_row("[bold]Systemic[/bold]", str(estimate.systemic_days))

    console.print()
    console.print(table)
    console.print()

    colour = "yellow" if rest.recommend_rest else "green"
    console.print(f"[{colour}]{rest.reason}[/{colour}]: {rest.message}")
    if rest.min_rest_days:
        console.print(f"  Minimum rest: {rest.min_rest_days} day(s)")
    for muscle, value in rest.affected_muscles.items():
        console.print(f"  {muscle}: {_readiness_cell(value)}")

    for v in volume:
        console.print(f"[bold]{v.muscle}[/bold] weekly volume {v.current_sets:.1f} sets: {v.message}")
    console.print()


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
