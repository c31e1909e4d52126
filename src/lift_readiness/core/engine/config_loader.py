"""
YAML → typed config loader.

Loads model tunables from model.yaml (bundled with the package) and
optionally merges user overrides from ~/.lift-readiness/model.yaml.

Usage:
    from lift_readiness.core.engine.config_loader import load_model_config
    cfg = load_model_config()
    cfg.local_recovery_rate

A user override file with parse errors is reported with a warning and
ignored; the bundled values (which mirror core/config.py) still apply.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import ModelConfig

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; warn and return {} when it cannot be used."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"lift-readiness: cannot read {path} ({exc}); ignored", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_data_dir() -> Path:
    """Return the per-user data directory (``$LIFT_READINESS_HOME`` or ~/.lift-readiness)."""
    override = os.environ.get("LIFT_READINESS_HOME")
    if override:
        return Path(override).expanduser()
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".lift-readiness"


def get_bundled_yaml_path(name: str = "model.yaml") -> Path | None:
    """Return the path to a YAML file bundled with the package, or None if not found."""
    ref = importlib.resources.files("lift_readiness").joinpath(name)
    if ref.is_file():
        return Path(str(ref))
    candidate = Path(__file__).parent.parent.parent / name
    return candidate if candidate.exists() else None


def get_user_yaml_path(name: str = "model.yaml", data_dir: Path | None = None) -> Path | None:
    """Return <data_dir>/<name> (default ~/.lift-readiness) if it exists, else None."""
    p = (data_dir if data_dir is not None else get_data_dir()) / name
    return p if p.exists() else None


def load_model_config(data_dir: Path | None = None) -> ModelConfig:
    """
    Load and merge model configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/lift_readiness/model.yaml
    2. User override at <data_dir>/model.yaml (default ~/.lift-readiness)

    Args:
        data_dir: Data directory holding the user override

    Returns:
        ModelConfig; the Python defaults when no YAML is available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path(data_dir=data_dir)
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return ModelConfig.from_mapping(config)
