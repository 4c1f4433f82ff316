"""
Pinned skills.

A pinned skill is rendered on every autoload regardless of relevance. The
effective pin set for one invocation merges three sources:

- manual pins, persisted in the state directory
- environment pins (SKRILLS_PINNED, comma separated), never persisted
- auto pins derived from recent history, when auto-pinning is enabled
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import typing as _typing

import skrills.constants as constants
import skrills.state.history as history_module
import skrills.state.persistence as persistence

_logger = _logging.getLogger(__name__)


def parse_env_pins(value: str | None) -> set[str]:
    """Split a comma-separated pin list, dropping blanks."""
    if not value:
        return set()
    return {item.strip() for item in value.split(",") if item.strip()}


def effective_pins(
    manual: _typing.Iterable[str],
    env_seeded: _typing.Iterable[str],
    history: list[history_module.HistoryEntry],
    auto_pin_enabled: bool,
    *,
    window: int = constants.AUTO_PIN_WINDOW,
    min_hits: int = constants.AUTO_PIN_MIN_HITS,
) -> set[str]:
    """
    Merge all pin sources into the set used for one render.

    Returns:
        Union of manual, environment and (optionally) auto pins.
    """
    pins = set(manual)
    pins.update(env_seeded)
    if auto_pin_enabled:
        auto = history_module.auto_pin_from_history(history, window, min_hits)
        if auto:
            _logger.debug("Auto-pinned from history: %s", ", ".join(sorted(auto)))
        pins.update(auto)
    return pins


class PinStore:
    """Manually pinned skill names (JSON array)."""

    def __init__(self, path: _pathlib.Path) -> None:
        self._path = path

    @property
    def path(self) -> _pathlib.Path:
        return self._path

    def load(self) -> set[str]:
        """Load pins; absent or malformed files give an empty set."""
        data = persistence.read_json(self._path, default=[])
        if not isinstance(data, list) or not all(isinstance(x, str) for x in data):
            _logger.warning("Ignoring pin file with unexpected shape: %s", self._path)
            return set()
        return set(data)

    def save(self, pins: _typing.Iterable[str]) -> None:
        persistence.write_json(self._path, sorted(set(pins)))

    def pin(self, names: _typing.Iterable[str]) -> set[str]:
        """Add names to the persisted pins and return the new set."""
        pins = self.load()
        pins.update(names)
        self.save(pins)
        return pins

    def unpin(self, names: _typing.Iterable[str]) -> set[str]:
        """Remove names from the persisted pins and return the new set."""
        pins = self.load()
        pins.difference_update(names)
        self.save(pins)
        return pins


class AutoPinFlag:
    """Persisted on/off switch for history-based auto-pinning."""

    def __init__(self, path: _pathlib.Path) -> None:
        self._path = path

    @property
    def path(self) -> _pathlib.Path:
        return self._path

    def load(self) -> bool:
        data = persistence.read_json(self._path, default=False)
        if not isinstance(data, bool):
            _logger.warning("Ignoring auto-pin flag with unexpected value: %s", self._path)
            return False
        return data

    def save(self, value: bool) -> None:
        persistence.write_json(self._path, bool(value))
