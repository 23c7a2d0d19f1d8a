"""
Namespaced patching of a product's own JSON configuration.

SkillHub owns exactly one top-level key of a foreign config document:

    {"skillhub": {"skills": ["/abs/path/to/skill", ...]}, ...}

Only that namespace is validated (through a pydantic model). Every other
top-level key is carried as an opaque JSON value and written back
unchanged. Output is pretty-printed with sorted keys so rewrites diff
cleanly.
"""

from __future__ import annotations

import json as _json
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic

import skillhub.constants as constants
import skillhub.errors as errors
import skillhub.filesystem as filesystem

_logger = _logging.getLogger(__name__)


def validate_skill_path(path: str) -> str:
    """
    Check a path destined for the skills array.

    Returns:
        The path with surrounding whitespace removed.

    Raises:
        ValueError: If the path is empty or not absolute.
    """
    trimmed = path.strip()
    if not trimmed:
        raise ValueError("skill path must be non-empty")
    if not _pathlib.PurePosixPath(trimmed).is_absolute():
        raise ValueError(f"skill path must be absolute: {path!r}")
    return trimmed


class SkillHubNamespace(_pydantic.BaseModel):
    """The ``skillhub`` object inside a product config."""

    model_config = _pydantic.ConfigDict(extra="allow")

    skills: list[_pydantic.StrictStr] = _pydantic.Field(default_factory=list)

    @_pydantic.field_validator("skills", mode="after")
    @classmethod
    def _check_paths(cls, value: list[str]) -> list[str]:
        for entry in value:
            validate_skill_path(entry)
        return value


class ConfigDocument:
    """
    A product's JSON config with only the SkillHub namespace typed.

    Usage:
        doc = ConfigDocument.load(settings_path)
        doc.add_skill_path("/home/me/.cursor/skills/git-lfs")
        doc.save()
    """

    def __init__(
        self,
        path: _pathlib.Path,
        root: dict[str, _typing.Any],
        namespace: SkillHubNamespace,
        *,
        existed: bool,
    ) -> None:
        self._path = path
        self._root = root
        self._namespace = namespace
        self._existed = existed

    @classmethod
    def load(cls, path: _pathlib.Path) -> ConfigDocument:
        """
        Load a config document.

        A missing file is treated as an empty object.

        Raises:
            ConfigShapeError: If the file is not a JSON object, or the
                namespace is malformed.
            FileSystemError: If the file cannot be read.
        """
        if not filesystem.exists(path):
            return cls(path, {}, SkillHubNamespace(), existed=False)

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise errors.FileSystemError(path, "cannot read config") from e

        try:
            root = _json.loads(content) if content.strip() else {}
        except _json.JSONDecodeError as e:
            raise errors.ConfigShapeError(path, f"not valid JSON: {e}") from e

        if not isinstance(root, dict):
            raise errors.ConfigShapeError(
                path, f"root must be a JSON object, got {type(root).__name__}"
            )

        raw_namespace = root.get(constants.CONFIG_NAMESPACE, {})
        if not isinstance(raw_namespace, dict):
            raise errors.ConfigShapeError(
                path, f"'{constants.CONFIG_NAMESPACE}' must be an object"
            )

        try:
            namespace = SkillHubNamespace.model_validate(raw_namespace)
        except _pydantic.ValidationError as e:
            raise errors.ConfigShapeError(
                path,
                f"'{constants.CONFIG_NAMESPACE}.{constants.CONFIG_SKILLS_KEY}' "
                f"must be an array of absolute path strings: {e}",
            ) from e

        return cls(path, root, namespace, existed=True)

    @property
    def path(self) -> _pathlib.Path:
        """Location of the document."""
        return self._path

    @property
    def existed(self) -> bool:
        """Whether the file existed when loaded."""
        return self._existed

    @property
    def skill_paths(self) -> list[str]:
        """Registered skill paths, in document order."""
        return list(self._namespace.skills)

    def foreign_keys(self) -> dict[str, _typing.Any]:
        """Top-level entries not owned by SkillHub."""
        return {k: v for k, v in self._root.items() if k != constants.CONFIG_NAMESPACE}

    def add_skill_path(self, skill_path: str) -> bool:
        """
        Register a skill path if not already present.

        Returns:
            True if the path was added.

        Raises:
            ConfigShapeError: If the path is empty or relative.
        """
        try:
            skill_path = validate_skill_path(skill_path)
        except ValueError as e:
            raise errors.ConfigShapeError(self._path, str(e)) from e

        if skill_path in self._namespace.skills:
            return False
        self._namespace.skills.append(skill_path)
        return True

    def remove_skill(self, skill_id: str) -> list[str]:
        """
        Drop every entry that has skill_id as a path component.

        Returns:
            The removed entries.
        """
        removed = [p for p in self._namespace.skills if _matches(p, skill_id)]
        self._namespace.skills = [p for p in self._namespace.skills if not _matches(p, skill_id)]
        return removed

    def contains_skill(self, skill_id: str) -> bool:
        """Whether any entry has skill_id as a path component."""
        return any(_matches(p, skill_id) for p in self._namespace.skills)

    def to_dict(self) -> dict[str, _typing.Any]:
        """The full document, with the namespace written back in place."""
        root = dict(self._root)
        root[constants.CONFIG_NAMESPACE] = self._namespace.model_dump(mode="json")
        return root

    def dumps(self) -> str:
        """Serialize: two-space indent, sorted keys, trailing newline."""
        return _json.dumps(self.to_dict(), indent=2, sort_keys=True) + "\n"

    def save(self) -> None:
        """
        Write the document atomically, creating parent directories.

        Raises:
            FileSystemError: If the document cannot be written.
        """
        filesystem.write_text_atomic(self._path, self.dumps())
        self._existed = True
        _logger.debug("Wrote %s (%d skill paths)", self._path, len(self._namespace.skills))


def _matches(entry: str, skill_id: str) -> bool:
    return skill_id in _pathlib.PurePosixPath(entry).parts


def register_skill_path(config_path: _pathlib.Path, skill_path: str) -> bool:
    """
    Add a skill path to a product config and save it.

    Returns:
        True if the path was newly added.

    Raises:
        ConfigShapeError: If the document or the path is malformed.
        FileSystemError: If the document cannot be read or written.
    """
    doc = ConfigDocument.load(config_path)
    added = doc.add_skill_path(skill_path)
    doc.save()
    return added


def unregister_skill(config_path: _pathlib.Path, skill_id: str) -> list[str]:
    """
    Remove a skill's entries from a product config.

    The document is only rewritten when an entry was removed. A missing
    file is left missing.

    Returns:
        The removed entries.

    Raises:
        ConfigShapeError: If the document is malformed.
        FileSystemError: If the document cannot be read or written.
    """
    doc = ConfigDocument.load(config_path)
    if not doc.existed:
        return []
    removed = doc.remove_skill(skill_id)
    if removed:
        doc.save()
    return removed


def is_skill_registered(config_path: _pathlib.Path, skill_id: str) -> bool:
    """
    Whether a product config lists the skill.

    Raises:
        ConfigShapeError: If the document is malformed.
        FileSystemError: If the document cannot be read.
    """
    return ConfigDocument.load(config_path).contains_skill(skill_id)
