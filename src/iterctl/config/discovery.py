"""Locate the iterctl.toml for a run.

Resolution order: the ``--config`` flag, then ``ITERCTL_CONFIG``, then the
first ``iterctl.toml`` found in the working directory or one of its parents.
"""

from __future__ import annotations

import os
from pathlib import Path

from iterctl.domain.errors import ConfigurationError

CONFIG_FILENAME = "iterctl.toml"
CONFIG_ENV_VAR = "ITERCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Nearest ``iterctl.toml`` at or above *start* (default: cwd)."""
    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_config(explicit: str | None = None, start: Path | None = None) -> Path | None:
    """Pick the config file for this run, or None to run on defaults.

    A path named explicitly (flag or env var) must exist; only the
    walk-up search is allowed to come back empty.

    Raises:
        ConfigurationError: An explicitly named file does not exist.
    """
    named = explicit or os.environ.get(CONFIG_ENV_VAR)
    if not named:
        return find_config(start)
    path = Path(named).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}", detail={"path": str(path)})
    return path
