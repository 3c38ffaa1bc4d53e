"""Filesystem path helpers for depositkit state."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

STATE_DIR_ENV = "DEPOSITKIT_STATE_DIR"


def state_dir() -> Path:
    """Return the directory used for logs and the audit trail.

    The location defaults to ``~/.depositkit`` but can be overridden via the
    ``DEPOSITKIT_STATE_DIR`` environment variable. The path is expanded and
    resolved so callers always receive an absolute location.
    """

    override = os.environ.get(STATE_DIR_ENV)
    if override:
        return Path(override).expanduser().resolve()
    return Path.home() / ".depositkit"


def env_file_path(root: Optional[Path] = None) -> Path:
    """Return the ``.env`` file consulted when loading settings."""

    base = root or Path.cwd()
    return base / ".env"


__all__ = ["STATE_DIR_ENV", "env_file_path", "state_dir"]
