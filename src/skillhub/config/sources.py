"""Custom pydantic-settings source for SkillHub configuration.

This module provides:

- YamlConfigSettingsSource: loads the user config file
  (~/.config/skillhub/config.yaml, or $SKILLHUB_CONFIG_DIR/config.yaml)
- Helpers to locate, read and write that file

Environment variables:
- SKILLHUB_CONFIG_DIR: Override user config directory (default: ~/.config/skillhub)
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = "SKILLHUB_CONFIG_DIR"

CONFIG_FILENAME = "config.yaml"


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


def get_user_config_dir() -> _pathlib.Path:
    """
    Get the user config directory.

    Returns:
        $SKILLHUB_CONFIG_DIR if set, otherwise ~/.config/skillhub.
    """
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env).expanduser()
    return _pathlib.Path.home() / ".config" / "skillhub"


def get_user_config_path() -> _pathlib.Path:
    """Get the path to the user config file."""
    return get_user_config_dir() / CONFIG_FILENAME


def load_yaml_file(path: _pathlib.Path) -> dict[str, _typing.Any] | None:
    """
    Load a YAML file and return its contents as a dict.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML contents, or None if the file is empty.

    Raises:
        ConfigFileError: If the file cannot be read, is malformed YAML,
            or contains non-dict content at the top level.
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


def save_user_config(
    data: dict[str, _typing.Any],
    path: _pathlib.Path | None = None,
) -> _pathlib.Path:
    """
    Write the user config file.

    Args:
        data: Full config mapping to write.
        path: Destination (default: the user config path).

    Returns:
        The path written.

    Raises:
        ConfigFileError: If the file cannot be written.
    """
    if path is None:
        path = get_user_config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            _yaml.safe_dump(data, default_flow_style=False, sort_keys=True),
            encoding="utf-8",
        )
    except OSError as e:
        raise ConfigFileError(path, f"cannot write file: {e}") from e
    return path


class YamlConfigSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that loads the user's config.yaml.

    A missing file is normal (the user hasn't created one yet) and
    contributes nothing. A present but broken file fails fast.
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        *,
        config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            config_path: Override path for the config file (for testing).
                If not provided, uses SKILLHUB_CONFIG_DIR or the default path.
        """
        super().__init__(settings_cls)
        self._config_path = config_path or get_user_config_path()
        self._data: dict[str, _typing.Any] = {}
        if self._config_path.exists():
            self._data = load_yaml_file(self._config_path) or {}

    @property
    def config_path(self) -> _pathlib.Path:
        """Path of the config file this source reads."""
        return self._config_path

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """
        Get value for a field from the loaded YAML.

        Returns:
            Tuple of (value, field_name, is_complex).
        """
        value = self._data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return the loaded config as a plain dict for Pydantic validation."""
        return dict(self._data)
