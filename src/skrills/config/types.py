"""Configuration type definitions for Skrills settings.

This module defines the Pydantic models used to represent configuration
sections nested within the main Settings class:

- AutoloadConfig: budget, similarity threshold, source and pin switches
- ManifestConfig: manifest-first rendering, minimal entries, mode logging
- HistoryConfig: history cap and auto-pin window/threshold
- DiscoveryConfig: extra skill directories, project-local roots

All types use `extra="allow"` to preserve unknown fields so config files
can be audited for typos with `collect_all_extra_fields()`.
"""

import typing as _typing

import pydantic as _pydantic

import skrills.constants as constants

# =============================================================================
# Base class with introspection
# =============================================================================


class ConfigBase(_pydantic.BaseModel):
    """
    Base class for all config types.

    Unknown fields are preserved rather than silently dropped.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Return fields that were provided but not in the schema."""
        return dict(self.model_extra) if self.model_extra else {}

    def has_extra_fields(self) -> bool:
        """Check if this config has any unrecognized fields."""
        return bool(self.model_extra)

    def collect_all_extra_fields(
        self,
        prefix: str = "",
    ) -> dict[str, _typing.Any]:
        """
        Recursively collect extra fields from this config and nested configs.

        Returns a flat dict with dotted paths as keys, e.g.:
            {"autoload.max_byte": 1024}
        """
        result: dict[str, _typing.Any] = {}

        for key, value in self.get_extra_fields().items():
            path = f"{prefix}.{key}" if prefix else key
            result[path] = value

        for field_name in self.__class__.model_fields:
            value = getattr(self, field_name, None)
            if isinstance(value, ConfigBase):
                child_prefix = f"{prefix}.{field_name}" if prefix else field_name
                result.update(value.collect_all_extra_fields(child_prefix))

        return result


# =============================================================================
# Autoload Settings
# =============================================================================


class AutoloadConfig(ConfigBase):
    """
    Defaults for one autoload render.

    YAML section: autoload.*
    """

    max_bytes: int | None = _pydantic.Field(default=constants.DEFAULT_MAX_BYTES, ge=0)
    """Byte budget for the rendered payload (None = unlimited)."""

    embed_threshold: float = _pydantic.Field(
        default=constants.DEFAULT_EMBED_THRESHOLD, ge=0.0, le=1.0
    )
    """Minimum similarity for a prompt match."""

    include_claude: bool = False
    """Render skills from Claude roots (normally mirrored under Codex)."""

    auto_pin: bool | None = None
    """Enable auto-pinning; None defers to the persisted flag."""

    diagnose: bool = False
    """Append inclusion/exclusion diagnostics to the payload."""


# =============================================================================
# Manifest Settings
# =============================================================================


class ManifestConfig(ConfigBase):
    """
    Manifest rendering defaults (runtime overrides take precedence).

    YAML section: manifest.*
    """

    first: bool = False
    """Emit the manifest only, without skill bodies."""

    minimal: bool = False
    """Reduce manifest entries to skill names."""

    log_render_mode: bool = False
    """Log which render mode was chosen."""


# =============================================================================
# History Settings
# =============================================================================


class HistoryConfig(ConfigBase):
    """
    History retention and auto-pin thresholds.

    YAML section: history.*
    """

    limit: int = _pydantic.Field(default=constants.HISTORY_LIMIT, ge=1)
    """Maximum retained history entries."""

    auto_pin_window: int = _pydantic.Field(default=constants.AUTO_PIN_WINDOW, ge=1)
    """Recent entries considered for auto-pinning."""

    auto_pin_min_hits: int = _pydantic.Field(default=constants.AUTO_PIN_MIN_HITS, ge=1)
    """Occurrences within the window needed to auto-pin."""


# =============================================================================
# Discovery Settings
# =============================================================================


class DiscoveryConfig(ConfigBase):
    """
    Skill root configuration.

    YAML section: discovery.*
    """

    extra_dirs: list[str] = _pydantic.Field(default_factory=list)
    """Additional skill directories, ranked after built-in roots."""

    include_project: bool = True
    """Scan project-local .codex/skills and .claude/skills."""
