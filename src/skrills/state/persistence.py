"""
File helpers shared by the state stores.

Reads are forgiving: a missing file or one that does not parse yields the
caller's default. Writes replace the file atomically (temp file plus
rename) so readers never see a partial document. Read-modify-write cycles
are NOT locked; two processes updating the same store concurrently are
last-writer-wins.
"""

from __future__ import annotations

import json as _json
import logging as _logging
import os as _os
import pathlib as _pathlib
import tempfile as _tempfile
import typing as _typing

_logger = _logging.getLogger(__name__)


def read_json(path: _pathlib.Path, default: _typing.Any = None) -> _typing.Any:
    """
    Load a JSON document, falling back to ``default``.

    Args:
        path: File to read.
        default: Returned when the file is absent, unreadable or malformed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default
    except OSError as e:
        _logger.warning("Cannot read state file %s: %s", path, e)
        return default

    try:
        return _json.loads(text)
    except ValueError as e:
        _logger.warning("Ignoring malformed state file %s: %s", path, e)
        return default


def write_text(path: _pathlib.Path, text: str) -> None:
    """
    Replace ``path`` with ``text`` atomically.

    Creates parent directories as needed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = _tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with _os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        _os.replace(tmp_name, path)
    except BaseException:
        _pathlib.Path(tmp_name).unlink(missing_ok=True)
        raise


def write_json(path: _pathlib.Path, data: _typing.Any) -> None:
    """Write ``data`` as pretty JSON, replacing ``path`` atomically."""
    write_text(path, _json.dumps(data, indent=2) + "\n")
