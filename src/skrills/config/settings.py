"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with SKRILLS_ prefix (nested names win over the
   flat SKRILLS_MAX_BYTES style names)
3. .env file (only when SKRILLS_ENV_FILE names one)
4. Layered YAML config files:
   - Project config: .skrills/config.yaml (highest)
   - User config: ~/.config/skrills/config.yaml

Nested config uses double underscore delimiter:
  SKRILLS_AUTOLOAD__MAX_BYTES=4096
  SKRILLS_MANIFEST__FIRST=true
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import skrills.config.sources as sources
import skrills.config.types as types
import skrills.state.paths as state_paths


def _get_env_file() -> str | None:
    """Return SKRILLS_ENV_FILE when it names an existing file.

    Without an explicit file no .env is loaded; the hook runs from arbitrary
    working directories and must not pick up unrelated .env files.
    """
    if env_file := _os.environ.get("SKRILLS_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


def _project_root_for_config() -> _pathlib.Path:
    if env_root := _os.environ.get("SKRILLS_PROJECT_ROOT"):
        return _pathlib.Path(env_root)
    return _pathlib.Path.cwd()


class Settings(_pydantic_settings.BaseSettings):
    """
    Skrills configuration settings.

    All settings can be overridden via environment variables with SKRILLS_ prefix.
    For nested config, use double underscore: SKRILLS_AUTOLOAD__MAX_BYTES=4096

    Config precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (SKRILLS_*)
    3. Flat environment names (SKRILLS_MAX_BYTES, SKRILLS_DIAG, ...)
    4. .env file
    5. Project config (.skrills/config.yaml)
    6. User config (~/.config/skrills/config.yaml)
    7. Built-in defaults
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="SKRILLS_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # SKRILLS_AUTOLOAD__MAX_BYTES
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args), highest
        2. env_settings (SKRILLS_* env vars)
        3. flat env vars (SKRILLS_MAX_BYTES, SKRILLS_DIAG, ...)
        4. dotenv_settings (.env file)
        5. yaml_settings (user + project config.yaml)
        6. (defaults via Field definitions), lowest
        """
        return (
            init_settings,
            env_settings,
            sources.FlatEnvSettingsSource(settings_cls),
            dotenv_settings,
            sources.LayeredYamlSettingsSource(settings_cls, _project_root_for_config()),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings from environment variables only, without loading .env file.

        Useful for test isolation and for reproducing issues without .env
        interference.
        """
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    # =========================================================================
    # Nested config sections
    # =========================================================================

    autoload: types.AutoloadConfig = _pydantic.Field(default_factory=types.AutoloadConfig)
    """Autoload defaults (budget, threshold, include_claude, auto_pin, diagnose)."""

    manifest: types.ManifestConfig = _pydantic.Field(default_factory=types.ManifestConfig)
    """Manifest rendering defaults."""

    history: types.HistoryConfig = _pydantic.Field(default_factory=types.HistoryConfig)
    """History cap and auto-pin thresholds."""

    discovery: types.DiscoveryConfig = _pydantic.Field(default_factory=types.DiscoveryConfig)
    """Skill roots."""

    # =========================================================================
    # Flat fields (long-standing env var names)
    # =========================================================================

    state_dir: str | None = _pydantic.Field(
        default=None,
        description="Directory for pins, history and runtime overrides (default ~/.codex)",
    )

    pinned: str = _pydantic.Field(
        default="",
        description="Comma-separated session pins (SKRILLS_PINNED), never persisted",
    )

    prompt: str | None = _pydantic.Field(
        default=None,
        description="Fallback prompt when none is passed (SKRILLS_PROMPT)",
    )

    extra_dirs: str = _pydantic.Field(
        default="",
        description="Extra skill directories separated by os.pathsep (SKRILLS_EXTRA_DIRS)",
    )

    project_root: str | None = _pydantic.Field(
        default=None,
        description="Project directory for local skill roots (default: cwd)",
    )

    # =========================================================================
    # Derived values
    # =========================================================================

    def resolved_state_dir(self) -> _pathlib.Path:
        """State directory; raises StateDirectoryError if home is unknown."""
        return state_paths.state_dir(self.state_dir)

    def resolved_project_root(self) -> _pathlib.Path | None:
        if not self.discovery.include_project:
            return None
        if self.project_root:
            return _pathlib.Path(self.project_root).expanduser()
        return _pathlib.Path.cwd()

    def extra_dir_paths(self, cli_dirs: _typing.Iterable[str] = ()) -> list[_pathlib.Path]:
        """Extra skill directories: CLI first, then config, then environment."""
        dirs: list[str] = list(cli_dirs)
        dirs.extend(self.discovery.extra_dirs)
        dirs.extend(p.strip() for p in self.extra_dirs.split(_os.pathsep) if p.strip())

        seen: set[str] = set()
        result: list[_pathlib.Path] = []
        for d in dirs:
            if d not in seen:
                seen.add(d)
                result.append(_pathlib.Path(d).expanduser())
        return result

    # =========================================================================
    # Introspection
    # =========================================================================

    def collect_all_extra_fields(self) -> dict[str, _typing.Any]:
        """
        Unknown keys from the config files, as dotted paths.

        e.g. {"autoload.max_byte": 1024, "histroy": {...}}
        """
        result: dict[str, _typing.Any] = dict(self.model_extra) if self.model_extra else {}
        for field_name in ("autoload", "manifest", "history", "discovery"):
            section: types.ConfigBase = getattr(self, field_name)
            result.update(section.collect_all_extra_fields(prefix=field_name))
        return result

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for display."""
        return self.model_dump(mode="json")
