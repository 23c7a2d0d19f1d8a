"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with SKILLHUB_ prefix
3. User config: ~/.config/skillhub/config.yaml (or $SKILLHUB_CONFIG_DIR)
4. Field defaults (lowest)

Nested config uses double underscore delimiter:
  SKILLHUB_LOGGING__LEVEL=debug
  SKILLHUB_PATHS__STATE_DIR=/srv/skillhub
"""

import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import skillhub.config.paths as paths_module
import skillhub.config.sources as sources
import skillhub.config.types as types
import skillhub.constants as constants


class Settings(_pydantic_settings.BaseSettings):
    """
    SkillHub configuration settings.

    All settings can be overridden via environment variables with SKILLHUB_ prefix.
    For nested config, use double underscore: SKILLHUB_LOGGING__LEVEL=debug
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="SKILLHUB_",
        env_nested_delimiter="__",  # SKILLHUB_LOGGING__LEVEL
        extra="ignore",
    )

    paths: types.PathsConfig = _pydantic.Field(default_factory=types.PathsConfig)
    """Filesystem root overrides."""

    products: types.ProductsConfig = _pydantic.Field(default_factory=types.ProductsConfig)
    """Product overrides and custom products."""

    logging: types.LoggingConfig = _pydantic.Field(default_factory=types.LoggingConfig)
    """Diagnostic and activity logging."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args), highest
        2. env_settings (SKILLHUB_* env vars)
        3. yaml_settings (user config.yaml)
        4. (defaults via Field definitions), lowest
        """
        return (
            init_settings,
            env_settings,
            sources.YamlConfigSettingsSource(settings_cls),
        )

    # =========================================================================
    # Directory settings (computed at runtime)
    # =========================================================================

    @property
    def config_dir(self) -> _pathlib.Path:
        """User configuration directory (~/.config/skillhub/)."""
        return sources.get_user_config_dir()

    @property
    def config_file(self) -> _pathlib.Path:
        """User configuration file."""
        return sources.get_user_config_path()

    def resolve_paths(self) -> paths_module.SkillHubPaths:
        """Build the SkillHubPaths these settings describe."""
        default = paths_module.SkillHubPaths.default()
        user_home = (
            _pathlib.Path(self.paths.user_home).expanduser()
            if self.paths.user_home
            else default.user_home
        )
        state_dir = (
            _pathlib.Path(self.paths.state_dir).expanduser()
            if self.paths.state_dir
            else user_home / constants.DEFAULT_STATE_DIRNAME
        )
        return paths_module.SkillHubPaths(user_home=user_home, state_dir=state_dir)

    def skills_dir_overrides(self) -> dict[str, _pathlib.Path]:
        """Per-product skills directory overrides as expanded paths."""
        return {
            product_id: _pathlib.Path(path).expanduser()
            for product_id, path in self.products.skills_dir_overrides.items()
        }

    # =========================================================================
    # Introspection
    # =========================================================================

    def collect_all_extra_fields(self) -> dict[str, _typing.Any]:
        """
        Unknown keys in every config section, keyed by dotted path.

        Unknown keys usually mean a typo in config.yaml, e.g.
        {"logging.levle": "debug"}.
        """
        result: dict[str, _typing.Any] = {}
        for section_name in ["paths", "products", "logging"]:
            section: types.ConfigBase = getattr(self, section_name)
            result.update(section.collect_all_extra_fields(prefix=section_name))
        return result

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for display (e.g. `skillhub config show`)."""
        return {
            "paths": self.paths.model_dump(),
            "products": self.products.model_dump(),
            "logging": self.logging.model_dump(),
            "config_file": str(self.config_file),
        }
