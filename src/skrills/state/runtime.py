"""
Runtime overrides for manifest rendering.

Overrides are a small JSON object in the state directory that lets a user
(or a tool call) flip rendering behavior without editing config files.
Unset values fall back to the configured defaults.

There is no module-level cache. Callers that want "load once per process"
semantics own a RuntimeOverridesCache; anything else loads fresh.
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic

import skrills.state.persistence as persistence

if _typing.TYPE_CHECKING:
    import skrills.config.types as config_types

_logger = _logging.getLogger(__name__)


class RuntimeOverrides(_pydantic.BaseModel):
    """Persisted overrides; None means 'use the configured default'."""

    model_config = _pydantic.ConfigDict(extra="ignore")

    manifest_first: bool | None = None
    """Render manifest only (bodies fetched on demand)."""

    render_mode_log: bool | None = None
    """Log the chosen render mode."""

    manifest_minimal: bool | None = None
    """Shrink manifest entries to names only."""

    @classmethod
    def load(cls, path: _pathlib.Path) -> RuntimeOverrides:
        """Load overrides; absent or malformed files give all-None overrides."""
        data = persistence.read_json(path, default={})
        if not isinstance(data, dict):
            _logger.warning("Ignoring runtime overrides with unexpected shape: %s", path)
            return cls()
        try:
            return cls.model_validate(data)
        except _pydantic.ValidationError as e:
            _logger.warning("Ignoring invalid runtime overrides %s: %s", path, e)
            return cls()

    def save(self, path: _pathlib.Path) -> None:
        persistence.write_json(path, self.model_dump())

    def merged(self, **updates: bool | None) -> RuntimeOverrides:
        """Copy with the given non-None values replaced."""
        changes = {k: v for k, v in updates.items() if v is not None}
        return self.model_copy(update=changes)

    # Effective values
    def effective_manifest_first(self, defaults: config_types.ManifestConfig) -> bool:
        return defaults.first if self.manifest_first is None else self.manifest_first

    def effective_render_mode_log(self, defaults: config_types.ManifestConfig) -> bool:
        if self.render_mode_log is None:
            return defaults.log_render_mode
        return self.render_mode_log

    def effective_manifest_minimal(self, defaults: config_types.ManifestConfig) -> bool:
        return defaults.minimal if self.manifest_minimal is None else self.manifest_minimal


class RuntimeOverridesCache:
    """
    Caller-owned cache: the first load wins until reset().

    External edits to the overrides file are not seen by a cache that has
    already loaded.
    """

    def __init__(self, path: _pathlib.Path) -> None:
        self._path = path
        self._value: RuntimeOverrides | None = None

    @property
    def path(self) -> _pathlib.Path:
        return self._path

    def get(self) -> RuntimeOverrides:
        if self._value is None:
            self._value = RuntimeOverrides.load(self._path)
        return self._value

    def reset(self) -> None:
        self._value = None
