"""
Discovery of skills already present inside product skills directories.

Scanning is read-only: it produces candidates that the manager can later
acquire, and never touches the registry itself. That makes it safe to run
off the calling thread.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import skillhub.constants as constants
import skillhub.errors as errors
import skillhub.models as models
import skillhub.skills.loader as loader

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True)
class SkillCandidate:
    """A skill found in a product directory."""

    manifest: models.Manifest
    """Manifest parsed from the directory."""

    directory: _pathlib.Path
    """Product-side skill directory."""

    is_symlink: bool = False
    """Whether the directory is a symlink (usually into the store)."""

    @property
    def skill_id(self) -> str:
        """Skill ID from the manifest."""
        return self.manifest.id

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.manifest.id,
            "name": self.manifest.name,
            "version": self.manifest.version,
            "summary": self.manifest.summary,
            "directory": str(self.directory),
            "is_symlink": self.is_symlink,
        }


def _load_candidate(skill_dir: _pathlib.Path) -> models.Manifest | None:
    """Parse the manifest in one skill directory; None if there is none."""
    entrypoint = skill_dir / constants.ENTRYPOINT_FILENAME
    if entrypoint.is_file():
        return loader.parse_entrypoint(entrypoint)

    json_manifest = loader.find_json_manifest(skill_dir)
    if json_manifest is not None:
        return loader.load_json_manifest(json_manifest)

    return None


def scan_directory(skills_dir: _pathlib.Path) -> _typing.Iterator[SkillCandidate]:
    """
    Yield the skills found directly below a skills directory.

    Each visible subdirectory holding a SKILL.md (or, failing that, a
    skill.json / manifest.json) is parsed. A missing or unreadable
    directory yields nothing. Directories whose manifest does not validate
    are logged and skipped.

    Args:
        skills_dir: Product skills directory to scan.

    Yields:
        SkillCandidate instances, ordered by directory name.
    """
    if not skills_dir.is_dir():
        return

    try:
        entries = sorted(skills_dir.iterdir())
    except OSError:
        return

    for skill_dir in entries:
        if skill_dir.name.startswith(".") or not skill_dir.is_dir():
            continue

        try:
            manifest = _load_candidate(skill_dir)
        except (errors.ValidationError, errors.FileSystemError) as e:
            _logger.info("Skipping %s: %s", skill_dir, e)
            continue

        if manifest is not None:
            yield SkillCandidate(
                manifest=manifest,
                directory=skill_dir,
                is_symlink=skill_dir.is_symlink(),
            )
