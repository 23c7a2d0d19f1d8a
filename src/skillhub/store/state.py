"""
Local skill registry persisted as a single JSON document.

Each mutator is one load → mutate → save cycle. Saving writes a
temporary sibling file and atomically replaces the real one, so readers
never observe a half-written document. The replace itself runs under an
advisory lock on ``<state file>.lock``; the surrounding read-modify-write
cycle does not, so two processes mutating concurrently can still lose
one writer's update.
"""

from __future__ import annotations

import contextlib as _contextlib
import fcntl as _fcntl
import json as _json
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic

import skillhub.errors as errors
import skillhub.filesystem as filesystem
import skillhub.models as models

_logger = _logging.getLogger(__name__)


class JSONSkillStore:
    """
    Registry of skills and their per-product deployment state.

    The backing file is created on first save; loading a missing file
    yields an empty registry.
    """

    def __init__(self, state_file: _pathlib.Path) -> None:
        """
        Initialize the store.

        Args:
            state_file: Path of the registry document.
        """
        self._state_file = state_file

    @property
    def state_file(self) -> _pathlib.Path:
        """Path of the registry document."""
        return self._state_file

    @property
    def lock_file(self) -> _pathlib.Path:
        """Advisory lock taken while the document is replaced."""
        return self._state_file.with_name(self._state_file.name + ".lock")

    # =========================================================================
    # Load / save
    # =========================================================================

    def load_state(self) -> models.RegistryState:
        """
        Read the registry document.

        Returns:
            The parsed state, or an empty state if the file does not exist.

        Raises:
            StateFileCorruptedError: If the file is not valid registry JSON.
            FileSystemError: If the file cannot be read.
        """
        if not self._state_file.exists():
            return models.RegistryState()

        try:
            content = self._state_file.read_text(encoding="utf-8")
        except OSError as e:
            raise errors.FileSystemError(self._state_file, "cannot read state file") from e

        try:
            data = _json.loads(content)
            return models.RegistryState.model_validate(data)
        except _json.JSONDecodeError as e:
            raise errors.StateFileCorruptedError(self._state_file, f"invalid JSON: {e}") from e
        except _pydantic.ValidationError as e:
            raise errors.StateFileCorruptedError(self._state_file, str(e)) from e

    def save_state(self, state: models.RegistryState) -> None:
        """
        Persist the registry document atomically.

        Records are normalized and ordered by ID and ``updated_at`` is
        refreshed before writing.

        Raises:
            FileSystemError: If the document cannot be written.
        """
        state.touch()
        payload = _json.dumps(state.to_json_dict(), indent=2, sort_keys=True) + "\n"

        filesystem.ensure_directory(self._state_file.parent)
        with self._locked():
            filesystem.write_text_atomic(self._state_file, payload)
        _logger.debug("Saved state (%d skills) to %s", len(state.skills), self._state_file)

    @_contextlib.contextmanager
    def _locked(self) -> _typing.Iterator[None]:
        """Hold an exclusive flock on the lock file."""
        try:
            fd = _os.open(self.lock_file, _os.O_CREAT | _os.O_RDWR, 0o600)
        except OSError as e:
            raise errors.FileSystemError(self.lock_file, "cannot open lock file") from e
        try:
            _fcntl.flock(fd, _fcntl.LOCK_EX)
            try:
                yield
            finally:
                _fcntl.flock(fd, _fcntl.LOCK_UN)
        finally:
            _os.close(fd)

    # =========================================================================
    # Queries
    # =========================================================================

    def list_skills(self) -> list[models.InstalledSkillRecord]:
        """All records, ordered by skill ID."""
        return sorted(self.load_state().skills, key=lambda record: record.id)

    def get_skill(self, skill_id: str) -> models.InstalledSkillRecord:
        """
        Get one record.

        Raises:
            SkillNotFoundError: If the skill is not registered.
        """
        record = self.load_state().find(skill_id)
        if record is None:
            raise errors.SkillNotFoundError(skill_id)
        return record

    def has_skill(self, skill_id: str) -> bool:
        """Whether a skill is registered."""
        return self.load_state().find(skill_id) is not None

    def get_product_config_path(self, product_id: str) -> _pathlib.Path | None:
        """The user's config-file override for a product, if any."""
        value = self.load_state().product_config_file_path_overrides.get(product_id)
        return _pathlib.Path(value).expanduser() if value else None

    def product_config_paths(self) -> dict[str, _pathlib.Path]:
        """All config-file overrides."""
        overrides = self.load_state().product_config_file_path_overrides
        return {product_id: _pathlib.Path(p).expanduser() for product_id, p in overrides.items()}

    # =========================================================================
    # Mutators (each is one load → mutate → save cycle)
    # =========================================================================

    def _mutate_record(
        self,
        skill_id: str,
        mutate: _typing.Callable[[models.InstalledSkillRecord], None],
    ) -> models.InstalledSkillRecord:
        state = self.load_state()
        record = state.find(skill_id)
        if record is None:
            raise errors.SkillNotFoundError(skill_id)
        mutate(record)
        self.save_state(state)
        return record

    def upsert_skill(
        self,
        manifest: models.Manifest,
        manifest_path: _pathlib.Path | str,
        manifest_source: str | None = None,
    ) -> models.InstalledSkillRecord:
        """
        Insert a record or replace an existing record's manifest.

        Per-product deployment state of an existing record is kept.

        Args:
            manifest: Validated manifest.
            manifest_path: Where the manifest was resolved from.
            manifest_source: Opaque source string (path, URL), if known.

        Returns:
            The stored record.
        """
        state = self.load_state()
        record = state.find(manifest.id)
        if record is None:
            record = models.InstalledSkillRecord(
                manifest=manifest,
                manifest_path=str(manifest_path),
                manifest_source=manifest_source,
            )
            state.skills.append(record)
        else:
            record.manifest = manifest
            record.manifest_path = str(manifest_path)
            if manifest_source is not None:
                record.manifest_source = manifest_source
        self.save_state(state)
        return record

    def mark_installed(
        self,
        skill_id: str,
        product_id: str,
        mode: models.InstallMode,
    ) -> models.InstalledSkillRecord:
        """
        Record a placement on a product and the concrete mode used.

        Raises:
            SkillNotFoundError: If the skill is not registered.
            UnsupportedModeError: If mode is AUTO.
        """
        mode = models.InstallMode(mode)
        if not mode.is_concrete:
            raise errors.UnsupportedModeError(
                mode.value, product_id, "auto must be resolved before it is recorded"
            )

        def mutate(record: models.InstalledSkillRecord) -> None:
            if product_id not in record.installed_products:
                record.installed_products.append(product_id)
            record.last_install_mode_by_product[product_id] = mode

        return self._mutate_record(skill_id, mutate)

    def mark_uninstalled(self, skill_id: str, product_id: str) -> models.InstalledSkillRecord:
        """
        Forget a product: not installed, not enabled, no recorded mode.

        Raises:
            SkillNotFoundError: If the skill is not registered.
        """

        def mutate(record: models.InstalledSkillRecord) -> None:
            record.installed_products = [p for p in record.installed_products if p != product_id]
            record.enabled_products = [p for p in record.enabled_products if p != product_id]
            record.last_install_mode_by_product.pop(product_id, None)

        return self._mutate_record(skill_id, mutate)

    def set_enabled(
        self,
        skill_id: str,
        product_id: str,
        enabled: bool,
    ) -> models.InstalledSkillRecord:
        """
        Mark a product enabled or disabled for a skill.

        Raises:
            SkillNotFoundError: If the skill is not registered.
            NotInstalledError: If enabling a product with no recorded mode.
        """

        def mutate(record: models.InstalledSkillRecord) -> None:
            if enabled:
                if product_id not in record.last_install_mode_by_product:
                    raise errors.NotInstalledError(skill_id, product_id)
                if product_id not in record.installed_products:
                    record.installed_products.append(product_id)
                if product_id not in record.enabled_products:
                    record.enabled_products.append(product_id)
            else:
                record.enabled_products = [
                    p for p in record.enabled_products if p != product_id
                ]

        return self._mutate_record(skill_id, mutate)

    def set_has_update(self, skill_id: str, has_update: bool) -> models.InstalledSkillRecord:
        """
        Set the update-available flag.

        Raises:
            SkillNotFoundError: If the skill is not registered.
        """

        def mutate(record: models.InstalledSkillRecord) -> None:
            record.has_update = has_update

        return self._mutate_record(skill_id, mutate)

    def remove_skill(self, skill_id: str) -> models.InstalledSkillRecord:
        """
        Delete a record.

        Returns:
            The removed record.

        Raises:
            SkillNotFoundError: If the skill is not registered.
        """
        state = self.load_state()
        record = state.find(skill_id)
        if record is None:
            raise errors.SkillNotFoundError(skill_id)
        state.skills = [r for r in state.skills if r.id != skill_id]
        self.save_state(state)
        return record

    def set_product_config_path(
        self,
        product_id: str,
        config_path: _pathlib.Path | str | None,
    ) -> None:
        """Set or (with None or a blank value) clear a product's config-file override."""
        state = self.load_state()
        normalized = str(config_path).strip() if config_path is not None else ""
        if normalized:
            state.product_config_file_path_overrides[product_id] = normalized
        else:
            state.product_config_file_path_overrides.pop(product_id, None)
        self.save_state(state)
