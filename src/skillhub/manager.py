"""
Deployment orchestration.

SkillManager composes the loader, the store primitives, the registry and
the product adapters into the user-facing lifecycles:

    stage → install → enable → record

Each lifecycle runs its steps strictly in order and aborts on the first
failure. Completed steps are durable and are not rolled back; a retry
resumes from them. The exception that aborted the operation is re-raised
with a note listing what had already completed.
"""

from __future__ import annotations

import contextlib as _contextlib
import dataclasses as _dataclasses
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import skillhub.adapters as product_adapters
import skillhub.config as config
import skillhub.errors as errors
import skillhub.filesystem as filesystem
import skillhub.logging as skillhub_logging
import skillhub.models as models
import skillhub.skills as skills
import skillhub.store as store

_logger = _logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================


@_dataclasses.dataclass(frozen=True)
class StageResult:
    """Outcome of staging a skill into the store."""

    manifest: models.Manifest
    store_path: _pathlib.Path
    recovered: tuple[str, ...] = ()
    """Repairs made to leftovers of earlier interrupted staging."""

    @property
    def skill_id(self) -> str:
        return self.manifest.id

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.skill_id,
            "version": self.manifest.version,
            "store_path": str(self.store_path),
            "recovered": list(self.recovered),
        }


@_dataclasses.dataclass(frozen=True)
class ApplyResult:
    """Outcome of install + enable on one product."""

    skill_id: str
    product_id: str
    requested_mode: models.InstallMode
    mode: models.InstallMode
    store_path: _pathlib.Path
    staged: bool
    """Whether this call staged the skill (False if it was already staged)."""

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.skill_id,
            "product": self.product_id,
            "requested_mode": self.requested_mode.value,
            "mode": self.mode.value,
            "store_path": str(self.store_path),
            "staged": self.staged,
        }


@_dataclasses.dataclass(frozen=True)
class AcquireResult:
    """Outcome of taking over a product-side skill."""

    skill_id: str
    product_id: str
    store_path: _pathlib.Path
    link_path: _pathlib.Path
    backup_path: _pathlib.Path | None

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.skill_id,
            "product": self.product_id,
            "store_path": str(self.store_path),
            "link_path": str(self.link_path),
            "backup_path": str(self.backup_path) if self.backup_path else None,
        }


@_dataclasses.dataclass(frozen=True)
class SkillStatus:
    """A registry record joined with live per-product status."""

    record: models.InstalledSkillRecord
    staged: bool
    products: dict[str, models.ProductSkillStatus]

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        manifest = self.record.manifest
        return {
            "id": manifest.id,
            "name": manifest.name,
            "version": manifest.version,
            "manifestPath": self.record.manifest_path,
            "staged": self.staged,
            "hasUpdate": self.record.has_update,
            "installedProducts": list(self.record.installed_products),
            "enabledProducts": list(self.record.enabled_products),
            "installModes": {
                product_id: mode.value
                for product_id, mode in sorted(self.record.last_install_mode_by_product.items())
            },
            "products": {
                product_id: status.to_dict() for product_id, status in self.products.items()
            },
        }


@_dataclasses.dataclass(frozen=True)
class ProductInfo:
    """An adapter together with its detection result."""

    adapter: product_adapters.ProductAdapter
    detection: models.DetectionResult

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            **self.adapter.to_dict(),
            "detected": self.detection.is_detected,
            "reason": self.detection.reason,
        }


@_dataclasses.dataclass(frozen=True)
class UnregisteredSkill:
    """A skill found in a product directory but absent from the registry."""

    product_id: str
    candidate: skills.SkillCandidate

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {"product": self.product_id, **self.candidate.to_dict()}


@_dataclasses.dataclass(frozen=True)
class Diagnosis:
    """Health report for one product."""

    product_id: str
    detection: models.DetectionResult
    skills_directory: _pathlib.Path
    issues: tuple[str, ...] = ()
    fixed: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        """Whether no issues remain."""
        return not self.issues

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "product": self.product_id,
            "detected": self.detection.is_detected,
            "reason": self.detection.reason,
            "skills_directory": str(self.skills_directory),
            "ok": self.ok,
            "issues": list(self.issues),
            "fixed": list(self.fixed),
        }


# =============================================================================
# Manager
# =============================================================================


class SkillManager:
    """
    Orchestrates skill lifecycles across products.

    All filesystem roots come from the SkillHubPaths passed in, so a
    manager built with SkillHubPaths.under(tmp_path) never touches the
    real home directory.
    """

    def __init__(
        self,
        paths: config.SkillHubPaths,
        *,
        registry: store.JSONSkillStore | None = None,
        adapter_registry: product_adapters.AdapterRegistry | None = None,
        activity: skillhub_logging.ActivityLogger | None = None,
        skills_dir_overrides: _typing.Mapping[str, _pathlib.Path] | None = None,
        custom_products: _typing.Sequence[config.CustomProductConfig] = (),
        executable_search_paths: _typing.Sequence[_pathlib.Path] | None = None,
    ) -> None:
        """
        Initialize the manager.

        Args:
            paths: SkillHub filesystem roots.
            registry: Skill registry (default: JSONSkillStore at paths.state_file).
            adapter_registry: Product adapters. Default: built-in and custom
                adapters, rebuilt whenever config-file overrides change.
            activity: Activity logger (default: disabled).
            skills_dir_overrides: Product ID → skills directory.
            custom_products: User-defined products.
            executable_search_paths: Directories searched during detection
                (None = well-known directories plus $PATH).
        """
        self._paths = paths
        self._store = registry or store.JSONSkillStore(paths.state_file)
        self._fixed_adapters = adapter_registry
        self._adapters: product_adapters.AdapterRegistry | None = adapter_registry
        self._activity = activity or skillhub_logging.ActivityLogger(enabled=False)
        self._skills_dir_overrides = dict(skills_dir_overrides or {})
        self._custom_products = tuple(custom_products)
        self._executable_search_paths = executable_search_paths

    @classmethod
    def from_settings(
        cls,
        settings: config.Settings | None = None,
        **kwargs: _typing.Any,
    ) -> SkillManager:
        """
        Build a manager from Settings.

        Args:
            settings: Loaded settings (default: load from env and config.yaml).
            **kwargs: Passed through to the constructor.
        """
        settings = settings or config.Settings()
        paths = settings.resolve_paths()
        kwargs.setdefault(
            "activity",
            skillhub_logging.ActivityLogger(
                log_file=paths.activity_log,
                enabled=settings.logging.activity_log,
            ),
        )
        kwargs.setdefault("skills_dir_overrides", settings.skills_dir_overrides())
        kwargs.setdefault("custom_products", settings.products.custom)
        return cls(paths, **kwargs)

    # =========================================================================
    # Collaborators
    # =========================================================================

    @property
    def paths(self) -> config.SkillHubPaths:
        return self._paths

    @property
    def registry(self) -> store.JSONSkillStore:
        return self._store

    @property
    def activity(self) -> skillhub_logging.ActivityLogger:
        return self._activity

    @property
    def adapters(self) -> product_adapters.AdapterRegistry:
        """Product adapters, built on first use."""
        if self._adapters is None:
            overrides = product_adapters.ProductOverrides(
                skills_dirs=self._skills_dir_overrides,
                config_files=self._store.product_config_paths(),
            )
            self._adapters = product_adapters.default_registry(
                self._paths,
                overrides,
                self._custom_products,
                executable_search_paths=self._executable_search_paths,
            )
        return self._adapters

    def adapter(self, product_id: str) -> product_adapters.ProductAdapter:
        """
        Look up a product adapter.

        Raises:
            AdapterNotFoundError: If the product is unknown.
        """
        return self.adapters.get(product_id)

    @_contextlib.contextmanager
    def _operation(
        self,
        name: str,
        *,
        skill_id: str | None = None,
        product_id: str | None = None,
    ) -> _typing.Iterator[list[str]]:
        """Track completed steps; on failure annotate, log and re-raise."""
        steps: list[str] = []
        try:
            yield steps
        except Exception as e:
            if steps:
                e.add_note(f"Completed before failure: {', '.join(steps)}")
            self._activity.log_failed(
                name, e, steps, skill_id=skill_id, product_id=product_id
            )
            _logger.debug("%s failed after %d steps: %s", name, len(steps), e)
            raise

    def _require_detected(self, adapter: product_adapters.ProductAdapter, force: bool) -> None:
        if force:
            return
        detection = adapter.detect()
        if not detection.is_detected:
            raise errors.ProductNotDetectedError(adapter.id, detection.reason)

    @staticmethod
    def _preferred_mode(
        manifest: models.Manifest,
        adapter: product_adapters.ProductAdapter,
        mode: models.InstallMode,
    ) -> models.InstallMode:
        """Use the manifest's hint for this product when auto was requested."""
        if mode is not models.InstallMode.AUTO:
            return mode
        hint = manifest.adapter_hint(adapter.id)
        if (
            hint is not None
            and hint.install_mode.is_concrete
            and hint.install_mode in adapter.supported_install_modes
        ):
            return hint.install_mode
        return mode

    # =========================================================================
    # Store
    # =========================================================================

    def is_staged(self, skill_id: str) -> bool:
        """Whether the store holds an entry for a skill."""
        return self._paths.store_path(skill_id).is_dir()

    def stage(
        self,
        source: _pathlib.Path | str,
        *,
        manifest_source: str | None = None,
    ) -> StageResult:
        """
        Register a skill and copy it into the canonical store.

        Leftovers of an earlier interrupted staging of the same skill are
        repaired first.

        Args:
            source: Skill directory, SKILL.md, or JSON manifest.
            manifest_source: Opaque origin to record (default: the source path).

        Returns:
            StageResult for the staged skill.

        Raises:
            ValidationError: If the manifest is invalid.
            FileSystemError: If the store cannot be written.
        """
        source = _pathlib.Path(source).expanduser()
        with self._operation("stage") as steps:
            loaded = skills.load_skill(source)
            steps.append("loaded manifest")
            return self._stage_loaded(loaded, manifest_source or str(source), steps)

    def _stage_loaded(
        self,
        loaded: skills.LoadedSkill,
        manifest_source: str | None,
        steps: list[str],
    ) -> StageResult:
        skill_id = loaded.skill_id
        recovered = filesystem.recover_store(self._paths.store_dir, skill_id)
        if recovered:
            steps.append("recovered store")

        self._store.upsert_skill(loaded.manifest, loaded.manifest_path, manifest_source)
        steps.append("registered")

        store_path = filesystem.stage_into_store(
            skill_id, loaded.source_dir, self._paths.store_dir
        )
        steps.append("staged")

        self._activity.log_staged(skill_id, store_path, source=manifest_source)
        _logger.info("Staged '%s' at %s", skill_id, store_path)
        return StageResult(
            manifest=loaded.manifest, store_path=store_path, recovered=tuple(recovered)
        )

    def unstage(self, skill_id: str) -> bool:
        """
        Delete a skill's store entry. The registry record is kept.

        Returns:
            True if an entry was removed, False if there was none.
        """
        removed = filesystem.remove_item(self._paths.store_path(skill_id))
        self._activity.log_unstaged(skill_id, removed)
        return removed

    # =========================================================================
    # Per-product lifecycles
    # =========================================================================

    def install(
        self,
        skill_id: str,
        product_id: str,
        mode: models.InstallMode | str = models.InstallMode.AUTO,
        *,
        force: bool = False,
    ) -> models.InstallMode:
        """
        Prepare a product for a staged skill and record the resolved mode.

        Skill files are not placed; call enable() for that.

        Returns:
            The concrete mode recorded.

        Raises:
            SkillNotFoundError: If the skill is not registered.
            AdapterNotFoundError: If the product is unknown.
            ProductNotDetectedError: If the product is absent and not force.
            NotStagedError: If the skill is not in the store.
            UnsupportedModeError: If the mode is not supported.
        """
        mode = models.InstallMode(mode)
        adapter = self.adapter(product_id)
        record = self._store.get_skill(skill_id)
        self._require_detected(adapter, force)

        with self._operation("install", skill_id=skill_id, product_id=product_id) as steps:
            requested = self._preferred_mode(record.manifest, adapter, mode)
            resolved = adapter.install(record.manifest, requested)
            steps.append(f"installed on {product_id}")
            self._store.mark_installed(skill_id, product_id, resolved)
            steps.append("recorded install")

        self._activity.log_installed(skill_id, product_id, resolved.value)
        return resolved

    def apply(
        self,
        source_or_id: _pathlib.Path | str,
        product_id: str,
        mode: models.InstallMode | str = models.InstallMode.AUTO,
        *,
        force: bool = False,
    ) -> ApplyResult:
        """
        Stage (if needed), install, enable and record a skill on a product.

        A path is always (re)staged. A registered skill ID is staged from
        its recorded manifest path only when the store has no entry.

        Args:
            source_or_id: Skill source path or registered skill ID.
            product_id: Target product.
            mode: Requested install mode.
            force: Skip the detection check.

        Returns:
            ApplyResult describing what was done.

        Raises:
            SkillNotFoundError: If source_or_id is neither a path nor a
                registered skill.
            AdapterNotFoundError: If the product is unknown.
            ProductNotDetectedError: If the product is absent and not force.
        """
        mode = models.InstallMode(mode)
        adapter = self.adapter(product_id)
        self._require_detected(adapter, force)

        source_path = _pathlib.Path(source_or_id).expanduser()
        loaded: skills.LoadedSkill | None = None
        manifest_source: str | None = None
        skill_id = str(source_or_id)

        with self._operation("apply", product_id=product_id) as steps:
            if source_path.exists():
                loaded = skills.load_skill(source_path)
                manifest_source = str(source_path)
            else:
                record = self._store.get_skill(skill_id)
                if not self.is_staged(skill_id):
                    loaded = skills.load_skill(_pathlib.Path(record.manifest_path))

            staged = loaded is not None
            if loaded is not None:
                steps.append("loaded manifest")
                self._stage_loaded(loaded, manifest_source, steps)
                skill_id = loaded.skill_id

            record = self._store.get_skill(skill_id)
            requested = self._preferred_mode(record.manifest, adapter, mode)
            resolved = adapter.install(record.manifest, requested)
            steps.append(f"installed on {product_id}")
            self._activity.log_installed(skill_id, product_id, resolved.value)

            adapter.enable(skill_id, resolved)
            steps.append(f"enabled on {product_id}")

            self._store.mark_installed(skill_id, product_id, resolved)
            self._store.set_enabled(skill_id, product_id, True)
            steps.append("recorded")

        self._activity.log_enabled(skill_id, product_id, resolved.value)
        _logger.info("Applied '%s' to %s (%s)", skill_id, product_id, resolved.value)
        return ApplyResult(
            skill_id=skill_id,
            product_id=product_id,
            requested_mode=mode,
            mode=resolved,
            store_path=self._paths.store_path(skill_id),
            staged=staged,
        )

    def enable(self, skill_id: str, product_id: str, *, force: bool = False) -> models.InstallMode:
        """
        Re-place a skill on a product using its recorded install mode.

        Returns:
            The mode used.

        Raises:
            SkillNotFoundError: If the skill is not registered.
            NotInstalledError: If the product has no recorded install mode.
            ProductNotDetectedError: If the product is absent and not force.
        """
        adapter = self.adapter(product_id)
        record = self._store.get_skill(skill_id)
        mode = record.last_install_mode_by_product.get(product_id)
        if mode is None:
            raise errors.NotInstalledError(skill_id, product_id)
        self._require_detected(adapter, force)

        with self._operation("enable", skill_id=skill_id, product_id=product_id) as steps:
            adapter.enable(skill_id, mode)
            steps.append(f"enabled on {product_id}")
            self._store.set_enabled(skill_id, product_id, True)

        self._activity.log_enabled(skill_id, product_id, mode.value)
        return mode

    def disable(self, skill_id: str, product_id: str, *, force: bool = False) -> None:
        """
        Remove a placement but keep the install record for re-enabling.

        Raises:
            SkillNotFoundError: If the skill is not registered.
            ProductNotDetectedError: If the product is absent and not force.
        """
        adapter = self.adapter(product_id)
        self._store.get_skill(skill_id)
        self._require_detected(adapter, force)

        with self._operation("disable", skill_id=skill_id, product_id=product_id) as steps:
            adapter.disable(skill_id)
            steps.append(f"removed placement on {product_id}")
            self._store.set_enabled(skill_id, product_id, False)

        self._activity.log_disabled(skill_id, product_id)

    def uninstall(self, skill_id: str, product_id: str, *, force: bool = False) -> None:
        """
        Remove a placement and forget the product. Staged files are kept.

        Raises:
            SkillNotFoundError: If the skill is not registered.
            ProductNotDetectedError: If the product is absent and not force.
        """
        adapter = self.adapter(product_id)
        self._store.get_skill(skill_id)
        self._require_detected(adapter, force)

        with self._operation("uninstall", skill_id=skill_id, product_id=product_id) as steps:
            adapter.disable(skill_id)
            steps.append(f"removed placement on {product_id}")
            self._store.mark_uninstalled(skill_id, product_id)

        self._activity.log_uninstalled(skill_id, product_id)

    def acquire(self, directory: _pathlib.Path | str, product_id: str) -> AcquireResult:
        """
        Take over a skill that a product holds as plain files.

        The content is staged into the store, the product-side directory
        is moved to the backups directory, and a symlink into the store
        takes its place. The product is recorded as installed and enabled
        via symlink.

        Args:
            directory: Product-side skill directory, or a skill directory
                name inside the product's skills directory.
            product_id: Product that owns the directory.

        Returns:
            AcquireResult describing the takeover.

        Raises:
            ValidationError: If the directory is already a symlink or has
                no valid manifest.
        """
        adapter = self.adapter(product_id)
        directory = _pathlib.Path(directory).expanduser()
        if not filesystem.exists(directory) and len(directory.parts) == 1:
            directory = adapter.skills_directory() / directory

        if directory.is_symlink():
            raise errors.ValidationError(
                "already a symlink; nothing to acquire", path=directory
            )
        if not directory.is_dir():
            raise errors.ValidationError("not a skill directory", path=directory)

        with self._operation("acquire", product_id=product_id) as steps:
            loaded = skills.load_skill(directory)
            skill_id = loaded.skill_id
            steps.append("loaded manifest")

            self._store.upsert_skill(loaded.manifest, loaded.manifest_path, str(directory))
            steps.append("registered")
            store_path = filesystem.stage_into_store(
                skill_id, directory, self._paths.store_dir
            )
            steps.append("staged")
            self._activity.log_staged(skill_id, store_path, source=str(directory))

            backup = filesystem.backup_if_exists(
                directory, self._paths.backups_dir, product_id, skill_id
            )
            steps.append("backed up original")
            filesystem.create_symlink(store_path, directory)
            steps.append("linked")

            self._store.mark_installed(skill_id, product_id, models.InstallMode.SYMLINK)
            self._store.set_enabled(skill_id, product_id, True)

        self._activity.log_acquired(skill_id, product_id, backup)
        _logger.info("Acquired '%s' from %s", skill_id, directory)
        return AcquireResult(
            skill_id=skill_id,
            product_id=product_id,
            store_path=store_path,
            link_path=directory,
            backup_path=backup,
        )

    def remove(self, skill_id: str, *, purge: bool = False) -> models.InstalledSkillRecord:
        """
        Delete a registry record.

        Product placements are left alone; uninstall them first.

        Args:
            skill_id: Skill to forget.
            purge: Also delete the store entry.

        Returns:
            The removed record.

        Raises:
            SkillNotFoundError: If the skill is not registered.
        """
        record = self._store.remove_skill(skill_id)
        if purge:
            filesystem.remove_item(self._paths.store_path(skill_id))
        self._activity.log_removed(skill_id, purge)
        return record

    # =========================================================================
    # Registry passthroughs
    # =========================================================================

    def list_skills(self) -> list[models.InstalledSkillRecord]:
        """All registered skills, ordered by ID."""
        return self._store.list_skills()

    def set_has_update(self, skill_id: str, has_update: bool) -> models.InstalledSkillRecord:
        """Set a skill's update-available flag."""
        return self._store.set_has_update(skill_id, has_update)

    def set_product_config_path(
        self,
        product_id: str,
        config_path: _pathlib.Path | str | None,
    ) -> None:
        """
        Point a product at a different config document (None clears).

        Raises:
            AdapterNotFoundError: If the product is unknown.
        """
        self.adapter(product_id)
        self._store.set_product_config_path(product_id, config_path)
        if self._fixed_adapters is None:
            self._adapters = None

    # =========================================================================
    # Reports
    # =========================================================================

    def status(self, skill_id: str | None = None) -> list[SkillStatus]:
        """
        Registry records joined with each installed product's live status.

        Args:
            skill_id: Limit to one skill.

        Raises:
            SkillNotFoundError: If skill_id is given but not registered.
        """
        if skill_id is not None:
            records = [self._store.get_skill(skill_id)]
        else:
            records = self._store.list_skills()

        results = []
        for record in records:
            products: dict[str, models.ProductSkillStatus] = {}
            for product_id in record.installed_products:
                if product_id not in self.adapters:
                    _logger.debug("Skipping status for unknown product %s", product_id)
                    continue
                products[product_id] = self.adapter(product_id).status(record.id)
            results.append(
                SkillStatus(record=record, staged=self.is_staged(record.id), products=products)
            )
        return results

    def products(self) -> list[ProductInfo]:
        """Every adapter with its detection result, sorted by ID."""
        return [ProductInfo(adapter, adapter.detect()) for adapter in self.adapters.all()]

    def scan_unregistered(
        self,
        registered_ids: _typing.Iterable[str] | None = None,
    ) -> list[UnregisteredSkill]:
        """
        Find skills in product directories that the registry does not know.

        Read-only; never mutates the registry or the filesystem.

        Args:
            registered_ids: IDs to treat as known (default: the registry's).
        """
        if registered_ids is None:
            known = {record.id for record in self._store.list_skills()}
        else:
            known = set(registered_ids)

        found: list[UnregisteredSkill] = []
        for adapter in self.adapters.all():
            for candidate in skills.scan_directory(adapter.skills_directory()):
                if candidate.skill_id not in known:
                    found.append(UnregisteredSkill(adapter.id, candidate))
        return found

    def activity_log(self, limit: int | None = None) -> list[dict[str, _typing.Any]]:
        """Most recent activity events, oldest first."""
        return skillhub_logging.read_activity(self._paths.activity_log, limit)

    # =========================================================================
    # Doctor
    # =========================================================================

    def _diagnose_adapter(self, adapter: product_adapters.ProductAdapter) -> Diagnosis:
        detection = adapter.detect()
        skills_dir = adapter.skills_directory()
        issues: list[str] = []

        if not filesystem.exists(skills_dir):
            # Expected when the product is absent
            if detection.is_detected:
                issues.append(f"Skills directory does not exist: {skills_dir}")
        elif not skills_dir.is_dir():
            issues.append(f"Skills directory is not a directory: {skills_dir}")
        else:
            if not _os.access(skills_dir, _os.W_OK):
                issues.append(f"Skills directory is not writable: {skills_dir}")
            for entry in sorted(skills_dir.iterdir()):
                if entry.is_symlink() and not entry.exists():
                    issues.append(f"Broken symlink: {entry} -> {_os.readlink(entry)}")

        config_path = adapter.config_file_path()
        if config_path is not None and config_path.exists():
            try:
                product_adapters.ConfigDocument.load(config_path)
            except (errors.ConfigShapeError, errors.FileSystemError) as e:
                issues.append(str(e))

        return Diagnosis(
            product_id=adapter.id,
            detection=detection,
            skills_directory=skills_dir,
            issues=tuple(issues),
        )

    def _selected_adapters(self, product_id: str | None) -> list[product_adapters.ProductAdapter]:
        if product_id is not None:
            return [self.adapter(product_id)]
        return self.adapters.all()

    def diagnose(self, product_id: str | None = None) -> list[Diagnosis]:
        """
        Check product skills directories and config documents.

        Args:
            product_id: Limit to one product (default: all).
        """
        return [self._diagnose_adapter(a) for a in self._selected_adapters(product_id)]

    def fix(self, product_id: str | None = None) -> list[Diagnosis]:
        """
        Create missing skills directories for detected products.

        Other issues are reported but not repaired.

        Args:
            product_id: Limit to one product (default: all).

        Returns:
            Diagnoses taken after the repairs, with the repairs listed.
        """
        results = []
        for adapter in self._selected_adapters(product_id):
            diagnosis = self._diagnose_adapter(adapter)
            skills_dir = diagnosis.skills_directory
            if diagnosis.detection.is_detected and not filesystem.exists(skills_dir):
                filesystem.ensure_directory(skills_dir)
                _logger.info("Created skills directory %s", skills_dir)
                diagnosis = _dataclasses.replace(
                    self._diagnose_adapter(adapter),
                    fixed=(f"Created skills directory: {skills_dir}",),
                )
            results.append(diagnosis)
        return results
