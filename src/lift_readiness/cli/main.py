"""
CLI entry point using Typer.

Provides commands for readiness tracking:
- init / reset: Create or clear the data directory
- exercises: List the exercise library
- log-session / rest-day: Record training and rest
- show-history: Display logged workouts
- status: Muscle readiness and deload check
- progression: Advice for the next session of an exercise
- recovery: Recovery timeline and rest advice
"""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from .app import app

# Importing the command modules registers their commands on the app
from .commands import analysis, profile, sessions  # noqa: F401

__all__ = ["app", "main"]


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging from the model"),
    ] = False,
) -> None:
    """
    Track muscle fatigue and readiness, and get progression advice.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def main() -> None:
    """Run the CLI."""
    app()


if __name__ == "__main__":
    main()
