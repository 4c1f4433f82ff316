"""
Autoload history: which skills each past render included.

The log is append-only and capped at a fixed number of entries (oldest
dropped first). Auto-pinning reads the most recent window of entries and
counts how often each skill appeared.
"""

from __future__ import annotations

import collections as _collections
import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import time as _time
import typing as _typing

import skrills.constants as constants
import skrills.state.persistence as persistence

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass
class HistoryEntry:
    """One past render."""

    ts: int
    """Unix timestamp (seconds)."""

    skills: list[str] = _dataclasses.field(default_factory=list)
    """Names included in that render, sorted."""

    def to_dict(self) -> dict[str, _typing.Any]:
        return {"ts": self.ts, "skills": list(self.skills)}

    @classmethod
    def from_dict(cls, data: dict[str, _typing.Any]) -> HistoryEntry:
        """
        Build an entry from its JSON form.

        Raises:
            TypeError: If "skills" is not a list.
        """
        skills = data.get("skills", [])
        if not isinstance(skills, list):
            raise TypeError(f"history skills must be a list, got {type(skills).__name__}")
        return cls(ts=int(data.get("ts", 0)), skills=[str(s) for s in skills])


def truncate(history: list[HistoryEntry], limit: int) -> list[HistoryEntry]:
    """Keep the ``limit`` most recent entries, preserving order."""
    if limit <= 0:
        return []
    return history[-limit:]


def append_entry(
    history: list[HistoryEntry],
    entry: HistoryEntry,
    limit: int = constants.HISTORY_LIMIT,
) -> list[HistoryEntry]:
    """Return a new history with ``entry`` appended and the FIFO cap applied."""
    return truncate([*history, entry], limit)


def auto_pin_window(
    history: list[HistoryEntry],
    window: int = constants.AUTO_PIN_WINDOW,
) -> _collections.Counter[str]:
    """Count skill occurrences within the ``window`` most recent entries."""
    counts: _collections.Counter[str] = _collections.Counter()
    if window <= 0:
        return counts
    for entry in history[-window:]:
        # A name listed twice in one entry still counts once for that render
        counts.update(set(entry.skills))
    return counts


def auto_pin_from_history(
    history: list[HistoryEntry],
    window: int = constants.AUTO_PIN_WINDOW,
    min_hits: int = constants.AUTO_PIN_MIN_HITS,
) -> set[str]:
    """Skills appearing at least ``min_hits`` times in the recent window."""
    return {name for name, count in auto_pin_window(history, window).items() if count >= min_hits}


def recent(history: list[HistoryEntry], limit: int) -> list[HistoryEntry]:
    """Newest entries first, at most ``limit`` of them."""
    if limit <= 0:
        return []
    return list(reversed(history[-limit:]))


class HistoryStore:
    """Persisted history list (JSON array of entries)."""

    def __init__(self, path: _pathlib.Path, limit: int = constants.HISTORY_LIMIT) -> None:
        self._path = path
        self._limit = limit

    @property
    def path(self) -> _pathlib.Path:
        return self._path

    @property
    def limit(self) -> int:
        return self._limit

    def load(self) -> list[HistoryEntry]:
        """Load history; absent or malformed files give an empty list."""
        data = persistence.read_json(self._path, default=[])
        if not isinstance(data, list):
            _logger.warning("Ignoring history file with unexpected shape: %s", self._path)
            return []
        entries: list[HistoryEntry] = []
        for item in data:
            if not isinstance(item, dict):
                _logger.warning("Ignoring malformed history file: %s", self._path)
                return []
            try:
                entries.append(HistoryEntry.from_dict(item))
            except (TypeError, ValueError):
                _logger.warning("Ignoring malformed history file: %s", self._path)
                return []
        return truncate(entries, self._limit)

    def save(self, history: list[HistoryEntry]) -> None:
        persistence.write_json(
            self._path, [e.to_dict() for e in truncate(history, self._limit)]
        )

    def record(
        self,
        names: _typing.Iterable[str],
        ts: int | None = None,
    ) -> list[HistoryEntry]:
        """
        Append one render to the persisted history.

        Args:
            names: Skills included in the render (may be empty).
            ts: Timestamp override; defaults to now.

        Returns:
            The history as saved.
        """
        entry = HistoryEntry(
            ts=int(_time.time()) if ts is None else ts,
            skills=sorted(set(names)),
        )
        history = append_entry(self.load(), entry, self._limit)
        self.save(history)
        return history
