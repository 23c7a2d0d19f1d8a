"""
Configuration module for SkillHub.

Uses pydantic-settings for environment variable and YAML loading.
"""

from skillhub.config.paths import SkillHubPaths
from skillhub.config.settings import Settings
from skillhub.config.sources import (
    ENV_CONFIG_DIR,
    ConfigFileError,
    get_user_config_dir,
    get_user_config_path,
    load_yaml_file,
    save_user_config,
)
from skillhub.config.types import (
    CustomProductConfig,
    LoggingConfig,
    PathsConfig,
    ProductsConfig,
)

__all__ = [
    "ENV_CONFIG_DIR",
    "ConfigFileError",
    "CustomProductConfig",
    "LoggingConfig",
    "PathsConfig",
    "ProductsConfig",
    "Settings",
    "SkillHubPaths",
    "get_user_config_dir",
    "get_user_config_path",
    "load_yaml_file",
    "save_user_config",
]
