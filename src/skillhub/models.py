"""
Data model for manifests and the local skill registry.

Persisted types are pydantic models whose JSON field names follow the
registry file layout (camelCase). Derived, never-persisted values are
plain dataclasses.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import datetime as _datetime
import enum as _enum
import typing as _typing

import pydantic as _pydantic

import skillhub.constants as constants


class InstallMode(str, _enum.Enum):
    """
    Mechanism used to place a skill at a product.

    AUTO is a request, never a recorded outcome: it is resolved to one of
    the concrete modes before anything is persisted.
    """

    AUTO = "auto"
    """Let the adapter's resolver pick a concrete mode."""

    SYMLINK = "symlink"
    """Link the product's skill path to the canonical store entry."""

    COPY = "copy"
    """Duplicate the staged files into the product's skills directory."""

    CONFIG_PATCH = "configPatch"
    """Register the skill's path inside the product's JSON config."""

    @classmethod
    def _missing_(cls, value: object) -> InstallMode | None:
        # Older registry files spelled the patch mode with a hyphen
        if value == "config-patch":
            return cls.CONFIG_PATCH
        return None

    @property
    def is_concrete(self) -> bool:
        """Whether this mode can be recorded as the mode actually used."""
        return self is not InstallMode.AUTO


def _utcnow() -> _datetime.datetime:
    return _datetime.datetime.now(_datetime.UTC).replace(microsecond=0)


def _format_timestamp(value: _datetime.datetime) -> str:
    """ISO-8601, UTC, second precision, 'Z' suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=_datetime.UTC)
    value = value.astimezone(_datetime.UTC).replace(microsecond=0)
    return value.isoformat().replace("+00:00", "Z")


class _RegistryModel(_pydantic.BaseModel):
    """Base for registry models: camelCase on disk, snake_case in Python."""

    model_config = _pydantic.ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )

    def to_json_dict(self) -> dict[str, _typing.Any]:
        """Dump using on-disk field names, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AdapterConfig(_RegistryModel):
    """Product-specific default install-mode hint carried by rich manifests."""

    model_config = _pydantic.ConfigDict(populate_by_name=True, frozen=True)

    product_id: str = _pydantic.Field(..., min_length=1, alias="productID")
    install_mode: InstallMode = _pydantic.Field(InstallMode.AUTO, alias="installMode")
    target_path: str | None = _pydantic.Field(default=None, alias="targetPath")
    config_patch: dict[str, str] | None = _pydantic.Field(default=None, alias="configPatch")


class Manifest(_RegistryModel):
    """
    Immutable description of a skill.

    The id is the stable registry key. Tags are a set: duplicates are
    dropped and the stored order is sorted.
    """

    model_config = _pydantic.ConfigDict(populate_by_name=True, frozen=True)

    id: str = _pydantic.Field(
        ...,
        min_length=1,
        max_length=constants.SKILL_ID_MAX_LENGTH,
        pattern=constants.SKILL_ID_PATTERN,
        description="Skill identifier (lowercase, hyphen-separated)",
    )

    name: str = _pydantic.Field(..., min_length=1)

    version: str = _pydantic.Field(default=constants.DEFAULT_SKILL_VERSION, min_length=1)

    summary: str = _pydantic.Field(
        default="",
        max_length=constants.SUMMARY_MAX_LENGTH,
    )

    entrypoint: str | None = None

    tags: tuple[str, ...] = ()

    adapters: tuple[AdapterConfig, ...] = ()

    @_pydantic.field_validator("tags", mode="after")
    @classmethod
    def _normalize_tags(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(sorted(set(value)))

    def adapter_hint(self, product_id: str) -> AdapterConfig | None:
        """Return the manifest's default hint for a product, if any."""
        for hint in self.adapters:
            if hint.product_id == product_id:
                return hint
        return None


class InstalledSkillRecord(_RegistryModel):
    """Registry entry: a manifest plus its per-product deployment state."""

    manifest: Manifest

    manifest_path: str = _pydantic.Field(..., alias="manifestPath")
    """Location of the resolved source, used for re-staging."""

    manifest_source: str | None = _pydantic.Field(default=None, alias="manifestSource")
    """Opaque source string the manifest was resolved from (path, URL)."""

    installed_products: list[str] = _pydantic.Field(
        default_factory=list, alias="installedProducts"
    )

    enabled_products: list[str] = _pydantic.Field(
        default_factory=list, alias="enabledProducts"
    )

    last_install_mode_by_product: dict[str, InstallMode] = _pydantic.Field(
        default_factory=dict, alias="lastInstallModeByProduct"
    )

    has_update: bool = _pydantic.Field(default=False, alias="hasUpdate")

    @property
    def id(self) -> str:
        """Skill ID (the manifest's id)."""
        return self.manifest.id

    def normalize(self) -> None:
        """
        Re-derive product sets before persisting.

        Installed and enabled products are deduplicated and sorted, and
        enabled products are kept a subset of installed products.
        """
        installed = set(self.installed_products)
        self.installed_products = sorted(installed)
        self.enabled_products = sorted(set(self.enabled_products) & installed)


class RegistryState(_RegistryModel):
    """Root registry document."""

    schema_version: int = _pydantic.Field(
        default=constants.STATE_SCHEMA_VERSION, alias="schemaVersion"
    )

    skills: list[InstalledSkillRecord] = _pydantic.Field(default_factory=list)

    product_config_file_path_overrides: dict[str, str] = _pydantic.Field(
        default_factory=dict, alias="productConfigFilePathOverrides"
    )

    updated_at: _datetime.datetime = _pydantic.Field(
        default_factory=_utcnow, alias="updatedAt"
    )

    @_pydantic.field_serializer("updated_at")
    def _serialize_updated_at(self, value: _datetime.datetime) -> str:
        return _format_timestamp(value)

    def find(self, skill_id: str) -> InstalledSkillRecord | None:
        """Return the record for a skill ID, or None."""
        for record in self.skills:
            if record.id == skill_id:
                return record
        return None

    def touch(self) -> None:
        """Normalize every record, order by id and refresh updated_at."""
        for record in self.skills:
            record.normalize()
        self.skills.sort(key=lambda record: record.id)
        self.updated_at = _utcnow()


@_dataclasses.dataclass(frozen=True)
class ProductSkillStatus:
    """Derived, read-only view of one skill on one product."""

    is_installed: bool
    """The staged copy exists in the canonical store."""

    is_enabled: bool
    """A placement exists at the target or a config registration exists."""

    detail: str
    """Human-readable explanation."""

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "is_installed": self.is_installed,
            "is_enabled": self.is_enabled,
            "detail": self.detail,
        }


@_dataclasses.dataclass(frozen=True)
class DetectionResult:
    """Outcome of a product presence check; reason is always populated."""

    is_detected: bool
    reason: str

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {"is_detected": self.is_detected, "reason": self.reason}
