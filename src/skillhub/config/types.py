"""Configuration type definitions for SkillHub settings.

This module defines the Pydantic models used to represent configuration
sections nested within the main Settings class:

- PathsConfig: state directory and home directory overrides
- CustomProductConfig: a user-defined product (skills dir, executables)
- ProductsConfig: per-product skills directory overrides, custom products
- LoggingConfig: log level, activity log switch

All types use `extra="allow"` so unknown keys are preserved rather than
silently dropped; `get_extra_fields()` exposes them for auditing.
"""

import typing as _typing

import pydantic as _pydantic

import skillhub.constants as constants

# =============================================================================
# Base class with introspection
# =============================================================================


class ConfigBase(_pydantic.BaseModel):
    """
    Base class for all config types.

    Unknown fields are kept in `model_extra` so that typos in a user's
    config.yaml can be reported instead of vanishing.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """
        Return fields that were provided but not in the schema.

        Returns:
            Dict of field_name → value for all unrecognized fields.
        """
        return dict(self.model_extra) if self.model_extra else {}

    def has_extra_fields(self) -> bool:
        """Check if this config has any unrecognized fields."""
        return bool(self.model_extra)

    def collect_all_extra_fields(self, prefix: str = "") -> dict[str, _typing.Any]:
        """
        Recursively collect extra fields from this config and nested configs.

        Returns a flat dict with dotted paths as keys, e.g.:
            {"logging.levle": "debug", "products.custom.0.skils_dir": "~/x"}

        Args:
            prefix: Dotted path prefix (used in recursion).
        """
        result: dict[str, _typing.Any] = {}
        for key, value in self.get_extra_fields().items():
            result[f"{prefix}.{key}" if prefix else key] = value

        for field_name in self.__class__.model_fields:
            value = getattr(self, field_name, None)
            path = f"{prefix}.{field_name}" if prefix else field_name
            if isinstance(value, ConfigBase):
                result.update(value.collect_all_extra_fields(path))
            elif isinstance(value, list):
                for index, item in enumerate(value):
                    if isinstance(item, ConfigBase):
                        result.update(item.collect_all_extra_fields(f"{path}.{index}"))
        return result


# =============================================================================
# Paths
# =============================================================================


class PathsConfig(ConfigBase):
    """
    Filesystem root overrides.

    YAML section: paths.*
    """

    state_dir: str | None = None
    """State directory. None = ~/.skillhub."""

    user_home: str | None = None
    """Home directory products are resolved against. None = the real home."""


# =============================================================================
# Products
# =============================================================================


class CustomProductConfig(ConfigBase):
    """
    A product not built into SkillHub.

    Custom products only support copy placement into their skills directory.

    YAML section: products.custom[]
    """

    id: str = _pydantic.Field(
        ...,
        min_length=1,
        max_length=constants.SKILL_ID_MAX_LENGTH,
        pattern=constants.SKILL_ID_PATTERN,
    )
    """Product ID used on the command line and in the registry."""

    name: str = ""
    """Display name. Empty = the ID."""

    skills_dir: str
    """Directory the product loads skills from (~ is expanded)."""

    executables: list[str] = _pydantic.Field(default_factory=list)
    """Executable names whose presence counts as detection."""

    footprints: list[str] = _pydantic.Field(default_factory=list)
    """Paths whose existence counts as detection (~ is expanded)."""


class ProductsConfig(ConfigBase):
    """
    Product settings.

    YAML section: products.*
    """

    skills_dir_overrides: dict[str, str] = _pydantic.Field(default_factory=dict)
    """Product ID → skills directory replacing the built-in default."""

    custom: list[CustomProductConfig] = _pydantic.Field(default_factory=list)
    """User-defined products."""


# =============================================================================
# Logging
# =============================================================================


class LoggingConfig(ConfigBase):
    """
    Logging settings.

    YAML section: logging.*
    """

    level: _typing.Literal["debug", "info", "warning", "error"] = "warning"
    """Diagnostic log level."""

    activity_log: bool = True
    """Record lifecycle events to the JSONL activity log."""
