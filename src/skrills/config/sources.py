"""Custom pydantic-settings source for Skrills configuration.

LayeredYamlSettingsSource loads configuration from layered YAML files and
deep-merges them so nested sections combine while scalar values override.

Configuration layers (in precedence order, highest first):
1. Environment variables (handled by pydantic-settings)
   (FlatEnvSettingsSource adds the flat SKRILLS_MAX_BYTES style names)
2. Project config: .skrills/config.yaml in project root
3. User config: ~/.config/skrills/config.yaml (or SKRILLS_CONFIG_DIR)

Environment variables:
- SKRILLS_CONFIG_DIR: Override user config directory (default: ~/.config/skrills)
"""

import collections.abc as _abc
import copy as _copy
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

import skrills.errors as errors
import skrills.state.paths as state_paths

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = "SKRILLS_CONFIG_DIR"


class ConfigFileError(errors.SkrillsError):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


def deep_merge(
    base: _abc.Mapping[str, _typing.Any],
    override: _abc.Mapping[str, _typing.Any],
) -> dict[str, _typing.Any]:
    """
    Merge ``override`` onto ``base``.

    Nested mappings merge key by key; any other value in ``override``
    replaces the one in ``base``. Neither input is modified.
    """
    result: dict[str, _typing.Any] = _copy.deepcopy(dict(base))
    for key, value in override.items():
        existing = result.get(key)
        if isinstance(existing, _abc.Mapping) and isinstance(value, _abc.Mapping):
            result[key] = deep_merge(existing, value)
        else:
            result[key] = _copy.deepcopy(value)
    return result


def load_yaml_file(path: _pathlib.Path) -> dict[str, _typing.Any] | None:
    """
    Load a YAML config file.

    Returns:
        Parsed mapping, or None if the file is empty.

    Raises:
        ConfigFileError: If the file cannot be read, is malformed YAML,
            or is not a mapping at the top level.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except PermissionError as e:
        raise ConfigFileError(path, f"permission denied: {e}") from e
    except OSError as e:
        raise ConfigFileError(path, f"cannot read file: {e}") from e

    try:
        parsed = _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if parsed is None:
        return None

    if not isinstance(parsed, dict):
        type_name = type(parsed).__name__
        raise ConfigFileError(
            path,
            f"config must be a YAML mapping (dict), got {type_name}",
        )

    return parsed


class LayeredYamlSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that merges the user and project YAML config files.

    Missing files are normal and skipped; malformed files raise
    ConfigFileError so mistakes are not silently ignored.
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        project_root: _pathlib.Path | None = None,
        *,
        user_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            project_root: Optional project root path for project-level config.
            user_config_path: Override path for user config file (for testing).
        """
        super().__init__(settings_cls)
        self._project_root = project_root
        self._user_config_path = user_config_path
        self._loaded_layers: list[tuple[str, _pathlib.Path]] = []
        self._merged = self._load_config_layers()

    def _load_config_layers(self) -> dict[str, _typing.Any]:
        """Load config files lowest precedence first and merge them."""
        merged: dict[str, _typing.Any] = {}

        for layer_name, path in self._candidate_layers():
            if not path.exists():
                continue
            content = load_yaml_file(path)
            if content:
                merged = deep_merge(merged, content)
                self._loaded_layers.append((layer_name, path))

        # Highest precedence first, matching get_layer_paths()
        self._loaded_layers.reverse()
        return merged

    def _candidate_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """Layers in ascending precedence order."""
        layers = [("user", self._get_user_config_path())]
        if self._project_root is not None:
            layers.append(("project", get_project_config_path(self._project_root)))
        return layers

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """Layers that were actually loaded (highest precedence first)."""
        return list(self._loaded_layers)

    def get_layer_paths(self) -> list[tuple[str, _pathlib.Path, bool]]:
        """All candidate layers as (name, path, exists), highest first."""
        return [
            (name, path, path.exists()) for name, path in reversed(self._candidate_layers())
        ]

    def _get_user_config_path(self) -> _pathlib.Path:
        if self._user_config_path is not None:
            return self._user_config_path
        return get_user_config_path()

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """Get value for a single top-level field from the merged config."""
        value = self._merged.get(field_name)
        if value is None:
            return None, field_name, False
        return value, field_name, isinstance(value, (_abc.Mapping, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return the merged config as a plain dict for Pydantic validation."""
        return _copy.deepcopy(self._merged)


FLAT_ENV_VARS: dict[str, tuple[str, str]] = {
    "SKRILLS_MAX_BYTES": ("autoload", "max_bytes"),
    "SKRILLS_EMBED_THRESHOLD": ("autoload", "embed_threshold"),
    "SKRILLS_INCLUDE_CLAUDE": ("autoload", "include_claude"),
    "SKRILLS_AUTO_PIN": ("autoload", "auto_pin"),
    "SKRILLS_DIAG": ("autoload", "diagnose"),
    "SKRILLS_MANIFEST_FIRST": ("manifest", "first"),
}
"""Single-word variables accepted by existing hook setups, as (section, key)."""


class FlatEnvSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source for the flat SKRILLS_* variables in FLAT_ENV_VARS.

    Values are handed to the nested sections unparsed so pydantic applies the
    same coercion as for SKRILLS_AUTOLOAD__* variables. Blank values are
    ignored.
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        environ: _abc.Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(settings_cls)
        env = _os.environ if environ is None else environ
        self._values: dict[str, dict[str, str]] = {}
        for var, (section, key) in FLAT_ENV_VARS.items():
            raw = env.get(var, "").strip()
            if raw:
                self._values.setdefault(section, {})[key] = raw

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        value = self._values.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, _typing.Any]:
        return _copy.deepcopy(self._values)


def get_user_config_dir() -> _pathlib.Path:
    """
    Get the user config directory.

    Respects SKRILLS_CONFIG_DIR if set, otherwise uses the XDG path.
    """
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env)
    return state_paths.home_dir() / ".config" / "skrills"


def get_user_config_path() -> _pathlib.Path:
    """Path to config.yaml in the user config directory."""
    return get_user_config_dir() / "config.yaml"


def get_project_config_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Path to .skrills/config.yaml within the project."""
    return project_root / ".skrills" / "config.yaml"
