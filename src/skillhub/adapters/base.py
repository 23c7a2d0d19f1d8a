"""
Base classes for product adapters.

Every product implements the same capability set (detect, install,
enable, disable, status) over its own placement mechanism. Most products
load skills from a directory, so DirectoryProductAdapter implements the
whole lifecycle once; concrete products only declare their paths,
supported modes and how a configPatch payload is placed.
"""

from __future__ import annotations

import abc as _abc
import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import skillhub.adapters.config_patch as config_patch
import skillhub.adapters.detection as detection
import skillhub.adapters.resolver as resolver
import skillhub.config.paths as paths_module
import skillhub.errors as errors
import skillhub.filesystem as filesystem
import skillhub.models as models

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True)
class ProductOverrides:
    """User overrides for product locations."""

    skills_dirs: _typing.Mapping[str, _pathlib.Path] = _dataclasses.field(default_factory=dict)
    """Product ID → skills directory (from settings)."""

    config_files: _typing.Mapping[str, _pathlib.Path] = _dataclasses.field(default_factory=dict)
    """Product ID → config document (from the registry)."""

    def skills_dir_for(self, product_id: str) -> _pathlib.Path | None:
        """Skills directory override for a product, if any."""
        return self.skills_dirs.get(product_id)

    def config_file_for(self, product_id: str) -> _pathlib.Path | None:
        """Config document override for a product, if any."""
        return self.config_files.get(product_id)


class ProductAdapter(_abc.ABC):
    """
    Abstract base class for product adapters.

    Adapters are held in an AdapterRegistry keyed by product ID.
    """

    @property
    @_abc.abstractmethod
    def id(self) -> str:
        """Stable product ID."""
        ...

    @property
    @_abc.abstractmethod
    def name(self) -> str:
        """Display name."""
        ...

    @property
    @_abc.abstractmethod
    def supported_install_modes(self) -> tuple[models.InstallMode, ...]:
        """Concrete modes this adapter can place skills with."""
        ...

    @_abc.abstractmethod
    def skills_directory(self) -> _pathlib.Path:
        """Directory the product loads skills from."""
        ...

    def config_file_path(self) -> _pathlib.Path | None:
        """The product's JSON config, if it supports configPatch."""
        return None

    @_abc.abstractmethod
    def detect(self) -> models.DetectionResult:
        """Check whether the product is present. Never mutates state."""
        ...

    @_abc.abstractmethod
    def install(
        self,
        manifest: models.Manifest,
        mode: models.InstallMode,
    ) -> models.InstallMode:
        """
        Prepare the product for a staged skill.

        Validates staging and target directories and performs any
        install-time config registration. Skill files are not placed.

        Returns:
            The concrete mode resolved from mode.

        Raises:
            NotStagedError: If the skill is not in the store.
            UnsupportedModeError: If the mode is not supported.
        """
        ...

    @_abc.abstractmethod
    def enable(self, skill_id: str, mode: models.InstallMode) -> None:
        """
        Place a staged skill at the product with a concrete mode.

        Pre-existing content at the destination is backed up first.

        Raises:
            NotStagedError: If the skill is not in the store.
            UnsupportedModeError: If the mode is AUTO or not supported.
        """
        ...

    @_abc.abstractmethod
    def disable(self, skill_id: str) -> None:
        """Remove a placement and its config registration. Idempotent."""
        ...

    @_abc.abstractmethod
    def status(self, skill_id: str) -> models.ProductSkillStatus:
        """Read-only reconciliation of store, target and config state."""
        ...

    def resolve_install_mode(self, mode: models.InstallMode | str) -> models.InstallMode:
        """Resolve a requested mode against supported_install_modes."""
        return resolver.resolve_install_mode(mode, self.supported_install_modes, self.id)

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        config_path = self.config_file_path()
        return {
            "id": self.id,
            "name": self.name,
            "supported_install_modes": [m.value for m in self.supported_install_modes],
            "skills_directory": str(self.skills_directory()),
            "config_file": str(config_path) if config_path else None,
        }


class DirectoryProductAdapter(ProductAdapter):
    """
    Adapter for products that load skills from ``<skills dir>/<skill id>``.

    Subclasses set the class attributes below and may override
    default_skills_directory() / default_config_file_path().
    """

    product_id: _typing.ClassVar[str]
    display_name: _typing.ClassVar[str]
    install_modes: _typing.ClassVar[tuple[models.InstallMode, ...]]

    config_patch_placement: _typing.ClassVar[models.InstallMode] = models.InstallMode.COPY
    """How the payload is placed before a configPatch registration."""

    register_at_install: _typing.ClassVar[bool] = False
    """Register the target path in the config during install, not only enable."""

    config_label: _typing.ClassVar[str] = "settings"
    """Word used for the config document in status details."""

    executables: _typing.ClassVar[tuple[str, ...]] = ()
    """Executable names that indicate the product is installed."""

    def __init__(
        self,
        paths: paths_module.SkillHubPaths,
        overrides: ProductOverrides | None = None,
        *,
        executable_search_paths: _typing.Sequence[_pathlib.Path] | None = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            paths: SkillHub filesystem roots.
            overrides: User overrides for skills and config locations.
            executable_search_paths: Directories searched for executables
                during detection. None = well-known directories plus $PATH.
        """
        self._paths = paths
        self._overrides = overrides or ProductOverrides()
        self._executable_search_paths = executable_search_paths

    # =========================================================================
    # Identity and locations
    # =========================================================================

    @property
    def id(self) -> str:
        return self.product_id

    @property
    def name(self) -> str:
        return self.display_name

    @property
    def supported_install_modes(self) -> tuple[models.InstallMode, ...]:
        return self.install_modes

    @property
    def home(self) -> _pathlib.Path:
        """Home directory product locations are resolved against."""
        return self._paths.user_home

    @_abc.abstractmethod
    def default_skills_directory(self) -> _pathlib.Path:
        """Built-in skills directory for this product."""
        ...

    def default_config_file_path(self) -> _pathlib.Path | None:
        """Built-in config document for this product, if any."""
        return None

    def footprints(self) -> list[_pathlib.Path]:
        """Paths whose existence means the product is installed."""
        return [self.default_skills_directory().parent]

    def skills_directory(self) -> _pathlib.Path:
        return self._overrides.skills_dir_for(self.id) or self.default_skills_directory()

    def config_file_path(self) -> _pathlib.Path | None:
        default = self.default_config_file_path()
        if default is None:
            return None
        return self._overrides.config_file_for(self.id) or default

    def staged_path(self, skill_id: str) -> _pathlib.Path:
        """Canonical store entry for a skill."""
        return self._paths.store_path(skill_id)

    def target_path(self, skill_id: str) -> _pathlib.Path:
        """Where the skill is placed for this product."""
        return self.skills_directory() / skill_id

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def detect(self) -> models.DetectionResult:
        footprints = self.footprints()
        found = detection.first_existing_path(footprints)
        if found is not None:
            return models.DetectionResult(True, f"Detected filesystem footprint at {found}")

        if self.executables:
            search_paths = (
                self._executable_search_paths
                if self._executable_search_paths is not None
                else detection.default_search_paths(self.home)
            )
            executable = detection.first_executable_path(self.executables, search_paths, self.home)
            if executable is not None:
                return models.DetectionResult(True, f"Detected executable at {executable}")

        missing = " and ".join(str(p) for p in footprints)
        if self.executables:
            names = ", ".join(self.executables)
            return models.DetectionResult(
                False, f"Missing {missing} and no executable found: {names}"
            )
        return models.DetectionResult(False, f"Missing {missing}")

    def _require_staged(self, skill_id: str) -> _pathlib.Path:
        staged = self.staged_path(skill_id)
        if not staged.is_dir():
            raise errors.NotStagedError(skill_id, staged)
        return staged

    def _require_concrete(self, mode: models.InstallMode | str) -> models.InstallMode:
        mode = models.InstallMode(mode)
        if not mode.is_concrete:
            raise errors.UnsupportedModeError(
                mode.value, self.id, "auto must be resolved before enable"
            )
        if mode not in self.supported_install_modes:
            raise errors.UnsupportedModeError(mode.value, self.id)
        return mode

    def install(
        self,
        manifest: models.Manifest,
        mode: models.InstallMode,
    ) -> models.InstallMode:
        resolved = self.resolve_install_mode(mode)
        self._require_staged(manifest.id)
        filesystem.ensure_directory(self.skills_directory())

        if resolved is models.InstallMode.CONFIG_PATCH:
            config_path = self._require_config_path(resolved)
            filesystem.ensure_directory(config_path.parent)
            if self.register_at_install:
                config_patch.register_skill_path(config_path, str(self.target_path(manifest.id)))

        _logger.debug("Installed '%s' on %s (%s)", manifest.id, self.id, resolved.value)
        return resolved

    def enable(self, skill_id: str, mode: models.InstallMode) -> None:
        mode = self._require_concrete(mode)
        source = self._require_staged(skill_id)
        filesystem.ensure_directory(self.skills_directory())

        destination = self.target_path(skill_id)
        filesystem.backup_if_exists(destination, self._paths.backups_dir, self.id, skill_id)

        if mode is models.InstallMode.SYMLINK:
            filesystem.create_symlink(source, destination)
        elif mode is models.InstallMode.COPY:
            filesystem.copy_item(source, destination)
        else:
            config_path = self._require_config_path(mode)
            if self.config_patch_placement is models.InstallMode.SYMLINK:
                filesystem.create_symlink(source, destination)
            else:
                filesystem.copy_item(source, destination)
            config_patch.register_skill_path(config_path, str(destination))

        _logger.debug("Enabled '%s' on %s (%s)", skill_id, self.id, mode.value)

    def disable(self, skill_id: str) -> None:
        filesystem.remove_item(self.target_path(skill_id))
        self._unregister(skill_id)
        _logger.debug("Disabled '%s' on %s", skill_id, self.id)

    def status(self, skill_id: str) -> models.ProductSkillStatus:
        staged = self.staged_path(skill_id)
        target = self.target_path(skill_id)

        is_installed = staged.is_dir()
        is_symlink = target.is_symlink()
        at_destination = filesystem.exists(target)
        registered = self._is_registered(skill_id)

        if is_symlink:
            detail = f"Enabled via symlink at {target}"
        elif at_destination:
            detail = f"Enabled via copied files at {target}"
        elif registered:
            detail = f"Registered in {self.name} {self.config_label} (skillhub.skills)"
        elif is_installed:
            detail = "Installed but not enabled"
        else:
            detail = "Not installed"

        return models.ProductSkillStatus(
            is_installed=is_installed,
            is_enabled=at_destination or registered,
            detail=detail,
        )

    def _is_registered(self, skill_id: str) -> bool:
        config_path = self.config_file_path()
        if config_path is None:
            return False
        try:
            return config_patch.is_skill_registered(config_path, skill_id)
        except (errors.ConfigShapeError, errors.FileSystemError) as e:
            # status() is read-only; report the unpatchable config and carry on
            _logger.warning("Cannot read %s config: %s", self.id, e)
            return False

    def _unregister(self, skill_id: str) -> None:
        config_path = self.config_file_path()
        if config_path is None:
            return
        try:
            config_patch.unregister_skill(config_path, skill_id)
        except (errors.ConfigShapeError, errors.FileSystemError) as e:
            # A config we cannot parse holds no registration of ours; leave it as is
            _logger.warning("Cannot unregister '%s' from %s config: %s", skill_id, self.id, e)

    def _require_config_path(self, mode: models.InstallMode) -> _pathlib.Path:
        config_path = self.config_file_path()
        if config_path is None:
            raise errors.UnsupportedModeError(mode.value, self.id, "product has no config file")
        return config_path
