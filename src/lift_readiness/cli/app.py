"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.config import ModelConfig
from ..core.engine.config_loader import load_model_config
from ..io.history_store import HistoryStore, get_default_store

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option(
        "--data-dir",
        "-D",
        envvar="LIFT_READINESS_HOME",
        help="Data directory (default: ~/.lift-readiness)",
    ),
]

# Shared --json flag for read commands
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="lift-readiness",
    help="Muscle fatigue, readiness and progression advice for strength training.",
    no_args_is_help=True,
)


def get_store(data_dir: Path | None) -> HistoryStore:
    """Get history store from the given directory or the default location."""
    return get_default_store(data_dir)


def get_config(data_dir: Path | None = None) -> ModelConfig:
    """Model tunables: bundled model.yaml merged with the copy in the data directory."""
    return load_model_config(data_dir)
