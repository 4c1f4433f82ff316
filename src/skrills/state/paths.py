"""
Locations of persisted state.

All state files live in one per-user directory (``~/.codex`` unless
overridden). Failing to resolve the home directory is the one condition
that is fatal for the whole tool.
"""

from __future__ import annotations

import os as _os
import pathlib as _pathlib

import skrills.constants as constants
import skrills.errors as errors

# Environment variable for overriding the state directory
ENV_STATE_DIR = "SKRILLS_STATE_DIR"


def home_dir() -> _pathlib.Path:
    """
    Resolve the user's home directory.

    Raises:
        StateDirectoryError: If no home directory can be determined.
    """
    try:
        return _pathlib.Path.home()
    except (RuntimeError, KeyError) as e:
        raise errors.StateDirectoryError(f"Cannot resolve home directory: {e}") from e


def state_dir(override: _pathlib.Path | str | None = None) -> _pathlib.Path:
    """
    Directory holding pins, history and runtime overrides.

    Precedence: explicit override, SKRILLS_STATE_DIR, ~/.codex.
    """
    if override:
        return _pathlib.Path(override).expanduser()
    if env_dir := _os.environ.get(ENV_STATE_DIR):
        return _pathlib.Path(env_dir).expanduser()
    return home_dir() / ".codex"


def pinned_file(base: _pathlib.Path) -> _pathlib.Path:
    return base / constants.PINNED_FILE_NAME


def auto_pin_file(base: _pathlib.Path) -> _pathlib.Path:
    return base / constants.AUTO_PIN_FILE_NAME


def history_file(base: _pathlib.Path) -> _pathlib.Path:
    return base / constants.HISTORY_FILE_NAME


def runtime_overrides_file(base: _pathlib.Path) -> _pathlib.Path:
    return base / constants.RUNTIME_FILE_NAME


def agents_manifest_file(base: _pathlib.Path) -> _pathlib.Path:
    return base / constants.AGENTS_FILE_NAME
