"""
Filesystem roots used by SkillHub.

SkillHubPaths is passed explicitly to the registry, the filesystem
primitives, every adapter and the manager, so tests can point the whole
engine at a temporary sandbox.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import pathlib as _pathlib

import skillhub.constants as constants


@_dataclasses.dataclass(frozen=True)
class SkillHubPaths:
    """Resolved filesystem roots."""

    user_home: _pathlib.Path
    """Home directory that product locations are resolved against."""

    state_dir: _pathlib.Path
    """Directory holding the registry, the store, backups and logs."""

    @classmethod
    def default(cls) -> SkillHubPaths:
        """Real home directory with the state directory at ~/.skillhub."""
        home = _pathlib.Path.home()
        return cls(user_home=home, state_dir=home / constants.DEFAULT_STATE_DIRNAME)

    @classmethod
    def under(cls, root: _pathlib.Path) -> SkillHubPaths:
        """Fully sandboxed layout: a fake home at ``<root>/home``."""
        home = root / "home"
        return cls(user_home=home, state_dir=home / constants.DEFAULT_STATE_DIRNAME)

    @property
    def state_file(self) -> _pathlib.Path:
        """Registry document."""
        return self.state_dir / constants.STATE_FILENAME

    @property
    def store_dir(self) -> _pathlib.Path:
        """Canonical skill store root."""
        return self.state_dir / constants.STORE_DIRNAME

    @property
    def backups_dir(self) -> _pathlib.Path:
        """Backups root."""
        return self.state_dir / constants.BACKUPS_DIRNAME

    @property
    def logs_dir(self) -> _pathlib.Path:
        """Activity log directory."""
        return self.state_dir / constants.LOGS_DIRNAME

    @property
    def activity_log(self) -> _pathlib.Path:
        """Activity log file."""
        return self.logs_dir / constants.ACTIVITY_LOG_FILENAME

    def store_path(self, skill_id: str) -> _pathlib.Path:
        """Canonical store entry for a skill."""
        return self.store_dir / skill_id

    def home_path(self, *parts: str) -> _pathlib.Path:
        """Path below the user home."""
        return self.user_home.joinpath(*parts)
