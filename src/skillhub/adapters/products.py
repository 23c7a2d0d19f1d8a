"""
Built-in product adapters.

Each adapter declares where its product keeps skills and configuration
and which install modes it accepts; the lifecycle itself lives in
DirectoryProductAdapter.
"""

from __future__ import annotations

import pathlib as _pathlib
import typing as _typing

import skillhub.adapters.base as base
import skillhub.adapters.detection as detection
import skillhub.config.paths as paths_module
import skillhub.config.types as config_types
import skillhub.models as models

_SYMLINK = models.InstallMode.SYMLINK
_COPY = models.InstallMode.COPY
_CONFIG_PATCH = models.InstallMode.CONFIG_PATCH


class ClaudeCodeAdapter(base.DirectoryProductAdapter):
    """
    Claude Code: ``~/.claude/skills``.

    Placement is always a physical copy, since downstream tooling may not
    follow symlinks. configPatch copies and then registers the path in
    ``~/.claude/settings.json``.
    """

    product_id = "claude-code"
    display_name = "Claude Code"
    install_modes = (_COPY, _CONFIG_PATCH)
    config_patch_placement = _COPY
    executables = ("claude",)

    @property
    def config_root(self) -> _pathlib.Path:
        """``~/.claude``."""
        return self.home / ".claude"

    def default_skills_directory(self) -> _pathlib.Path:
        return self.config_root / "skills"

    def default_config_file_path(self) -> _pathlib.Path | None:
        return self.config_root / "settings.json"

    def footprints(self) -> list[_pathlib.Path]:
        return [self.config_root]


class CodexAdapter(base.DirectoryProductAdapter):
    """Codex: copies into ``~/.codex/skills``."""

    product_id = "codex"
    display_name = "Codex"
    install_modes = (_COPY,)
    executables = ("codex",)

    def default_skills_directory(self) -> _pathlib.Path:
        return self.home / ".codex" / "skills"


class CursorAdapter(base.DirectoryProductAdapter):
    """
    Cursor.

    Skills live under the Application Support directory when Cursor is
    installed as an app, otherwise under ``~/.cursor/skills``. configPatch
    links the skill and registers it in the app's ``User/settings.json``.
    """

    product_id = "cursor"
    display_name = "Cursor"
    install_modes = (_SYMLINK, _COPY, _CONFIG_PATCH)
    config_patch_placement = _SYMLINK
    executables = ("cursor",)

    @property
    def app_support_root(self) -> _pathlib.Path:
        """``~/Library/Application Support/Cursor``."""
        return self.home / "Library" / "Application Support" / "Cursor"

    @property
    def dot_root(self) -> _pathlib.Path:
        """``~/.cursor``."""
        return self.home / ".cursor"

    def default_skills_directory(self) -> _pathlib.Path:
        if self.app_support_root.exists():
            return self.app_support_root / "skills"
        return self.dot_root / "skills"

    def default_config_file_path(self) -> _pathlib.Path | None:
        return self.app_support_root / "User" / "settings.json"

    def footprints(self) -> list[_pathlib.Path]:
        return [self.app_support_root, self.dot_root]


class OpenCodeAdapter(base.DirectoryProductAdapter):
    """
    OpenCode: ``~/.config/opencode/skills``.

    configPatch registers the target path in ``config.json`` at install
    time, then links and re-registers at enable.
    """

    product_id = "opencode"
    display_name = "OpenCode"
    install_modes = (_SYMLINK, _COPY, _CONFIG_PATCH)
    config_patch_placement = _SYMLINK
    register_at_install = True
    config_label = "config"
    executables = ("opencode",)

    @property
    def config_root(self) -> _pathlib.Path:
        """``~/.config/opencode``."""
        return self.home / ".config" / "opencode"

    def default_skills_directory(self) -> _pathlib.Path:
        return self.config_root / "skills"

    def default_config_file_path(self) -> _pathlib.Path | None:
        return self.config_root / "config.json"

    def footprints(self) -> list[_pathlib.Path]:
        config_file = self.config_file_path()
        candidates = [self.config_root, self.skills_directory()]
        if config_file is not None:
            candidates.insert(1, config_file)
        return candidates


class OpenClawAdapter(base.DirectoryProductAdapter):
    """OpenClaw: copies into ``~/.openclaw/skills``."""

    product_id = "openclaw"
    display_name = "OpenClaw"
    install_modes = (_COPY,)
    executables = ("openclaw",)

    @property
    def root(self) -> _pathlib.Path:
        """``~/.openclaw``."""
        return self.home / ".openclaw"

    def default_skills_directory(self) -> _pathlib.Path:
        return self.root / "skills"

    def footprints(self) -> list[_pathlib.Path]:
        return [self.root, self.skills_directory()]


class VSCodeAdapter(base.DirectoryProductAdapter):
    """VS Code: links (or copies) into ``~/.vscode/skills``."""

    product_id = "vscode"
    display_name = "VS Code"
    install_modes = (_SYMLINK, _COPY)
    executables = ("code",)

    def default_skills_directory(self) -> _pathlib.Path:
        return self.home / ".vscode" / "skills"


class CustomProductAdapter(base.DirectoryProductAdapter):
    """A user-defined product from ``products.custom`` in config.yaml."""

    install_modes = (_COPY,)

    def __init__(
        self,
        config: config_types.CustomProductConfig,
        paths: paths_module.SkillHubPaths,
        overrides: base.ProductOverrides | None = None,
        *,
        executable_search_paths: _typing.Sequence[_pathlib.Path] | None = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            config: The product's definition.
            paths: SkillHub filesystem roots.
            overrides: User overrides for skills and config locations.
            executable_search_paths: Directories searched for executables.
        """
        super().__init__(paths, overrides, executable_search_paths=executable_search_paths)
        self._config = config
        self.executables = tuple(config.executables)  # type: ignore[misc]

    @property
    def id(self) -> str:
        return self._config.id

    @property
    def name(self) -> str:
        return self._config.name or self._config.id

    def default_skills_directory(self) -> _pathlib.Path:
        return detection.expand_home(self._config.skills_dir, self.home)

    def footprints(self) -> list[_pathlib.Path]:
        extra = [detection.expand_home(p, self.home) for p in self._config.footprints]
        return [self.skills_directory(), *extra]


BUILTIN_ADAPTERS: tuple[type[base.DirectoryProductAdapter], ...] = (
    ClaudeCodeAdapter,
    CodexAdapter,
    CursorAdapter,
    OpenCodeAdapter,
    OpenClawAdapter,
    VSCodeAdapter,
)
"""Adapter classes registered by default."""
