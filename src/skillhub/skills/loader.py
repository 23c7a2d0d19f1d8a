"""
Manifest loading.

Resolves a source (a skill directory or its entrypoint file) to a
validated Manifest. The lightweight SKILL.md format binds the manifest's
identity to the directory that holds it; structured JSON manifests
(skill.json / manifest.json) carry the same fields directly.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import json as _json
import logging as _logging
import os as _os
import pathlib as _pathlib
import re as _re

import pydantic as _pydantic

import skillhub.constants as constants
import skillhub.errors as errors
import skillhub.models as models
import skillhub.skills.frontmatter as frontmatter

_logger = _logging.getLogger(__name__)

_SKILL_ID_RE = _re.compile(constants.SKILL_ID_PATTERN)


@_dataclasses.dataclass(frozen=True)
class LoadedSkill:
    """A validated manifest paired with the file it was read from."""

    manifest: models.Manifest
    """Validated manifest."""

    manifest_path: _pathlib.Path
    """SKILL.md or JSON manifest the manifest was parsed from."""

    @property
    def skill_id(self) -> str:
        """Skill ID from the manifest."""
        return self.manifest.id

    @property
    def source_dir(self) -> _pathlib.Path:
        """Directory holding the skill's files (the manifest's parent)."""
        return self.manifest_path.parent


def validate_skill_id(skill_id: str) -> None:
    """
    Check a skill ID against the identifier rules.

    Raises:
        ValidationError: If the ID is empty, longer than 64 characters,
            or not lowercase hyphen-separated alphanumerics.
    """
    if not 1 <= len(skill_id) <= constants.SKILL_ID_MAX_LENGTH:
        raise errors.ValidationError(
            f"'name' must be 1-{constants.SKILL_ID_MAX_LENGTH} characters, got {len(skill_id)}"
        )
    if not _SKILL_ID_RE.match(skill_id):
        raise errors.ValidationError(
            f"'name' must use lowercase letters, numbers and single hyphens: {skill_id!r}"
        )


def _find_entrypoints(directory: _pathlib.Path) -> list[_pathlib.Path]:
    """All SKILL.md regular files below a directory, hidden entries skipped."""
    matches: list[_pathlib.Path] = []
    for dirpath, dirnames, filenames in _os.walk(directory):
        # Prune hidden directories in place so walk never descends into them
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        if constants.ENTRYPOINT_FILENAME in filenames:
            candidate = _pathlib.Path(dirpath) / constants.ENTRYPOINT_FILENAME
            if candidate.is_file():
                matches.append(candidate)
    return matches


def locate_entrypoint(source: _pathlib.Path) -> _pathlib.Path:
    """
    Find the single SKILL.md for a source.

    A file source must itself be named SKILL.md. A directory source is
    searched recursively, skipping hidden files and directories.

    Args:
        source: Skill directory or entrypoint file.

    Returns:
        Path to the entrypoint file.

    Raises:
        ValidationError: If the source is missing, is a file with another
            name, or holds zero or several entrypoints.
    """
    if not source.exists():
        raise errors.ValidationError(f"source not found: {source}")

    if not source.is_dir():
        if source.name != constants.ENTRYPOINT_FILENAME:
            raise errors.ValidationError(
                f"source file must be {constants.ENTRYPOINT_FILENAME}", path=source
            )
        return source

    matches = _find_entrypoints(source)
    if not matches:
        raise errors.ValidationError(
            f"no {constants.ENTRYPOINT_FILENAME} found in source: {source}"
        )
    if len(matches) > 1:
        listed = ", ".join(sorted(str(m) for m in matches))
        raise errors.ValidationError(
            f"multiple {constants.ENTRYPOINT_FILENAME} files found; "
            f"provide a specific skill directory: {listed}"
        )
    return matches[0]


def parse_entrypoint(path: _pathlib.Path) -> models.Manifest:
    """
    Parse and validate a SKILL.md file.

    Args:
        path: Path to the entrypoint file.

    Returns:
        Manifest with ``id == name``, the baseline version and no tags
        or adapter hints.

    Raises:
        ValidationError: On any frontmatter, field, body or location error.
        FileSystemError: If the file cannot be read.
    """
    if path.name != constants.ENTRYPOINT_FILENAME:
        raise errors.ValidationError(
            f"entrypoint must be {constants.ENTRYPOINT_FILENAME}", path=path
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise errors.FileSystemError(path, "cannot read entrypoint") from e

    try:
        parsed = frontmatter.parse_frontmatter(text)
    except errors.ValidationError as e:
        raise errors.ValidationError(str(e), path=path) from e

    name = parsed.fields.get("name", "").strip()
    if not name:
        raise errors.ValidationError("frontmatter requires non-empty 'name'", path=path)

    description = parsed.fields.get("description", "").strip()
    if not description:
        raise errors.ValidationError(
            "frontmatter requires non-empty 'description'", path=path
        )

    try:
        validate_skill_id(name)
    except errors.ValidationError as e:
        raise errors.ValidationError(str(e), path=path) from e

    if len(description) > constants.SUMMARY_MAX_LENGTH:
        raise errors.ValidationError(
            f"'description' must be 1-{constants.SUMMARY_MAX_LENGTH} characters, "
            f"got {len(description)}",
            path=path,
        )

    if not parsed.body.strip():
        raise errors.ValidationError("body must not be empty", path=path)

    directory_name = path.parent.name
    if directory_name != name:
        raise errors.ValidationError(
            f"'name' must match parent directory name (name={name}, directory={directory_name})",
            path=path,
        )

    return models.Manifest(
        id=name,
        name=name,
        version=constants.DEFAULT_SKILL_VERSION,
        summary=description,
        entrypoint=constants.ENTRYPOINT_FILENAME,
    )


def find_json_manifest(directory: _pathlib.Path) -> _pathlib.Path | None:
    """Return the first structured manifest file directly inside a directory."""
    for filename in constants.JSON_MANIFEST_FILENAMES:
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    return None


def load_json_manifest(path: _pathlib.Path) -> models.Manifest:
    """
    Load a structured JSON manifest.

    Args:
        path: Path to skill.json or manifest.json.

    Returns:
        Validated Manifest.

    Raises:
        ValidationError: If the file is not valid JSON or violates the
            manifest invariants.
        FileSystemError: If the file cannot be read.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise errors.FileSystemError(path, "cannot read manifest") from e

    try:
        data = _json.loads(content)
        return models.Manifest.model_validate(data)
    except _json.JSONDecodeError as e:
        raise errors.ValidationError(f"invalid JSON: {e}", path=path) from e
    except _pydantic.ValidationError as e:
        raise errors.ValidationError(f"invalid manifest: {e}", path=path) from e


def load_skill(source: _pathlib.Path) -> LoadedSkill:
    """
    Resolve a source to a LoadedSkill.

    SKILL.md is preferred. A directory with no SKILL.md anywhere below it
    falls back to a top-level skill.json or manifest.json.

    Raises:
        ValidationError: If no valid manifest can be resolved.
        FileSystemError: If a manifest cannot be read.
    """
    source = source.expanduser()

    if source.is_file() and source.name in constants.JSON_MANIFEST_FILENAMES:
        return LoadedSkill(manifest=load_json_manifest(source), manifest_path=source)

    if source.is_dir() and not _find_entrypoints(source):
        json_manifest = find_json_manifest(source)
        if json_manifest is not None:
            _logger.debug("No SKILL.md in %s, using %s", source, json_manifest.name)
            return LoadedSkill(
                manifest=load_json_manifest(json_manifest), manifest_path=json_manifest
            )

    entrypoint = locate_entrypoint(source)
    manifest = parse_entrypoint(entrypoint)
    _logger.debug("Loaded manifest '%s' from %s", manifest.id, entrypoint)
    return LoadedSkill(manifest=manifest, manifest_path=entrypoint)


def load_manifest(source: _pathlib.Path) -> models.Manifest:
    """Resolve a skill directory or entrypoint file to its validated Manifest."""
    return load_skill(source).manifest
