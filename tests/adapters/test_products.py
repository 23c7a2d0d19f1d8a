"""
Tests for the built-in and custom product adapters.

Tests verify that:
- Detection reports footprints, executables and what is missing
- Locations honour the sandbox home and user overrides
- install / enable / disable / status behave per install mode
"""

import json as _json
import os as _os
import pathlib as _pathlib

import pytest as _pytest

import skillhub.adapters as adapters
import skillhub.config as config
import skillhub.errors as errors
import skillhub.filesystem as filesystem
import skillhub.models as models


def _stage(paths: config.SkillHubPaths, skill_id: str = "git-lfs") -> models.Manifest:
    """Put a skill into the store and return its manifest."""
    source = paths.user_home.parent / "sources" / skill_id
    source.mkdir(parents=True, exist_ok=True)
    (source / "SKILL.md").write_text(
        f"---\nname: {skill_id}\ndescription: test\n---\nDo things.\n"
    )
    filesystem.stage_into_store(skill_id, source, paths.store_dir)
    return models.Manifest(id=skill_id, name=skill_id)


class TestDetection:
    """Tests for adapter detection."""

    def test_not_detected_names_what_is_missing(self, paths: config.SkillHubPaths) -> None:
        """Without footprints or executables the reason lists both."""
        adapter = adapters.VSCodeAdapter(paths, executable_search_paths=[])

        result = adapter.detect()

        assert result.is_detected is False
        assert result.reason == (
            f"Missing {paths.user_home / '.vscode'} and no executable found: code"
        )

    def test_footprint_detected(self, paths: config.SkillHubPaths) -> None:
        """An existing footprint directory counts as detection."""
        (paths.user_home / ".vscode").mkdir()
        adapter = adapters.VSCodeAdapter(paths, executable_search_paths=[])

        result = adapter.detect()

        assert result.is_detected is True
        assert result.reason == f"Detected filesystem footprint at {paths.user_home / '.vscode'}"

    def test_executable_detected(self, paths: config.SkillHubPaths, tmp_path: _pathlib.Path) -> None:
        """An executable in a search path counts as detection."""
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir()
        executable = bin_dir / "codex"
        executable.write_text("#!/bin/sh\n")
        executable.chmod(0o755)
        adapter = adapters.CodexAdapter(paths, executable_search_paths=[bin_dir])

        result = adapter.detect()

        assert result.is_detected is True
        assert result.reason == f"Detected executable at {executable}"

    def test_non_executable_file_ignored(
        self, paths: config.SkillHubPaths, tmp_path: _pathlib.Path
    ) -> None:
        """A file without the execute bit does not count."""
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir()
        (bin_dir / "codex").write_text("")
        adapter = adapters.CodexAdapter(paths, executable_search_paths=[bin_dir])

        assert adapter.detect().is_detected is False

    def test_detection_does_not_mutate(self, paths: config.SkillHubPaths) -> None:
        """detect() creates nothing under the home directory."""
        for adapter_cls in adapters.BUILTIN_ADAPTERS:
            adapter_cls(paths, executable_search_paths=[]).detect()
        assert list(paths.user_home.iterdir()) == []

    def test_opencode_config_file_is_a_footprint(self, paths: config.SkillHubPaths) -> None:
        """OpenCode is detected by its config file alone."""
        adapter = adapters.OpenCodeAdapter(
            paths,
            adapters.ProductOverrides(config_files={"opencode": paths.user_home / "oc.json"}),
            executable_search_paths=[],
        )
        (paths.user_home / "oc.json").write_text("{}")

        result = adapter.detect()

        assert result.is_detected is True
        assert "oc.json" in result.reason


class TestLocations:
    """Tests for skills directories and config documents."""

    def test_builtin_defaults(self, paths: config.SkillHubPaths) -> None:
        """Each product resolves below the sandbox home."""
        home = paths.user_home
        expected = {
            "claude-code": home / ".claude" / "skills",
            "codex": home / ".codex" / "skills",
            "cursor": home / ".cursor" / "skills",
            "opencode": home / ".config" / "opencode" / "skills",
            "openclaw": home / ".openclaw" / "skills",
            "vscode": home / ".vscode" / "skills",
        }
        registry = adapters.default_registry(paths, executable_search_paths=[])
        for product_id, skills_dir in expected.items():
            assert registry.get(product_id).skills_directory() == skills_dir

    def test_cursor_prefers_application_support(self, paths: config.SkillHubPaths) -> None:
        """Cursor uses the app directory when it exists."""
        app_root = paths.user_home / "Library" / "Application Support" / "Cursor"
        app_root.mkdir(parents=True)
        adapter = adapters.CursorAdapter(paths, executable_search_paths=[])

        assert adapter.skills_directory() == app_root / "skills"
        assert adapter.config_file_path() == app_root / "User" / "settings.json"

    def test_config_files(self, paths: config.SkillHubPaths) -> None:
        """Only configPatch-capable products have a config document."""
        home = paths.user_home
        assert adapters.ClaudeCodeAdapter(paths).config_file_path() == (
            home / ".claude" / "settings.json"
        )
        assert adapters.OpenCodeAdapter(paths).config_file_path() == (
            home / ".config" / "opencode" / "config.json"
        )
        assert adapters.CodexAdapter(paths).config_file_path() is None
        assert adapters.VSCodeAdapter(paths).config_file_path() is None

    def test_skills_dir_override(self, paths: config.SkillHubPaths, tmp_path: _pathlib.Path) -> None:
        """A skills directory override replaces the default."""
        overrides = adapters.ProductOverrides(skills_dirs={"codex": tmp_path / "elsewhere"})
        adapter = adapters.CodexAdapter(paths, overrides)
        assert adapter.skills_directory() == tmp_path / "elsewhere"
        assert adapter.target_path("x") == tmp_path / "elsewhere" / "x"

    def test_config_file_override(self, paths: config.SkillHubPaths, tmp_path: _pathlib.Path) -> None:
        """A config file override replaces the default document."""
        overrides = adapters.ProductOverrides(config_files={"claude-code": tmp_path / "c.json"})
        assert adapters.ClaudeCodeAdapter(paths, overrides).config_file_path() == (
            tmp_path / "c.json"
        )

    def test_to_dict(self, paths: config.SkillHubPaths) -> None:
        """Adapters describe themselves for JSON output."""
        data = adapters.ClaudeCodeAdapter(paths).to_dict()
        assert data["id"] == "claude-code"
        assert data["name"] == "Claude Code"
        assert data["supported_install_modes"] == ["copy", "configPatch"]
        assert data["config_file"].endswith("settings.json")


class TestSymlinkLifecycle:
    """install / enable / disable / status through VS Code."""

    def test_install_requires_staging(self, paths: config.SkillHubPaths) -> None:
        """Installing an unstaged skill raises NotStagedError."""
        adapter = adapters.VSCodeAdapter(paths)
        manifest = models.Manifest(id="git-lfs", name="git-lfs")
        with _pytest.raises(errors.NotStagedError, match="stage it first"):
            adapter.install(manifest, models.InstallMode.AUTO)

    def test_install_resolves_auto_without_placing(self, paths: config.SkillHubPaths) -> None:
        """Install picks symlink and prepares the directory only."""
        manifest = _stage(paths)
        adapter = adapters.VSCodeAdapter(paths)

        mode = adapter.install(manifest, models.InstallMode.AUTO)

        assert mode is models.InstallMode.SYMLINK
        assert adapter.skills_directory().is_dir()
        assert not filesystem.exists(adapter.target_path("git-lfs"))

    def test_install_rejects_unsupported_mode(self, paths: config.SkillHubPaths) -> None:
        """VS Code has no config document to patch."""
        manifest = _stage(paths)
        with _pytest.raises(errors.UnsupportedModeError):
            adapters.VSCodeAdapter(paths).install(manifest, models.InstallMode.CONFIG_PATCH)

    def test_enable_symlink(self, paths: config.SkillHubPaths) -> None:
        """The target becomes a link to the store entry."""
        _stage(paths)
        adapter = adapters.VSCodeAdapter(paths)

        adapter.enable("git-lfs", models.InstallMode.SYMLINK)

        target = adapter.target_path("git-lfs")
        assert target.is_symlink()
        assert _pathlib.Path(_os.readlink(target)) == paths.store_path("git-lfs")
        status = adapter.status("git-lfs")
        assert status.is_installed and status.is_enabled
        assert status.detail == f"Enabled via symlink at {target}"

    def test_enable_rejects_auto(self, paths: config.SkillHubPaths) -> None:
        """enable() needs a concrete mode."""
        _stage(paths)
        with _pytest.raises(errors.UnsupportedModeError, match="auto"):
            adapters.VSCodeAdapter(paths).enable("git-lfs", models.InstallMode.AUTO)

    def test_enable_requires_staging(self, paths: config.SkillHubPaths) -> None:
        """enable() refuses unstaged skills."""
        with _pytest.raises(errors.NotStagedError):
            adapters.VSCodeAdapter(paths).enable("git-lfs", models.InstallMode.SYMLINK)

    def test_enable_backs_up_existing_content(self, paths: config.SkillHubPaths) -> None:
        """A user's own directory at the target is moved to backups, not deleted."""
        _stage(paths)
        adapter = adapters.VSCodeAdapter(paths)
        existing = adapter.target_path("git-lfs")
        existing.mkdir(parents=True)
        (existing / "mine.md").write_text("precious")

        adapter.enable("git-lfs", models.InstallMode.SYMLINK)

        backups = list(paths.backups_dir.glob("*/vscode/git-lfs/mine.md"))
        assert len(backups) == 1
        assert backups[0].read_text() == "precious"

    def test_disable_removes_placement_only(self, paths: config.SkillHubPaths) -> None:
        """The link goes away but the store entry stays."""
        _stage(paths)
        adapter = adapters.VSCodeAdapter(paths)
        adapter.enable("git-lfs", models.InstallMode.SYMLINK)

        adapter.disable("git-lfs")
        adapter.disable("git-lfs")

        assert not filesystem.exists(adapter.target_path("git-lfs"))
        assert paths.store_path("git-lfs").is_dir()
        status = adapter.status("git-lfs")
        assert status.is_installed and not status.is_enabled
        assert status.detail == "Installed but not enabled"

    def test_status_not_installed(self, paths: config.SkillHubPaths) -> None:
        """Nothing staged and nothing placed."""
        status = adapters.VSCodeAdapter(paths).status("git-lfs")
        assert status == models.ProductSkillStatus(False, False, "Not installed")


class TestCopyLifecycle:
    """Copy placement through Codex."""

    def test_enable_copy_is_independent_of_store(self, paths: config.SkillHubPaths) -> None:
        """Copied files survive unstaging."""
        _stage(paths)
        adapter = adapters.CodexAdapter(paths)

        adapter.enable("git-lfs", models.InstallMode.COPY)
        filesystem.remove_item(paths.store_path("git-lfs"))

        target = adapter.target_path("git-lfs")
        assert not target.is_symlink()
        assert (target / "SKILL.md").exists()
        status = adapter.status("git-lfs")
        assert status.is_enabled and not status.is_installed
        assert status.detail == f"Enabled via copied files at {target}"

    def test_reenable_replaces_previous_copy(self, paths: config.SkillHubPaths) -> None:
        """A second enable backs up the old copy instead of failing."""
        _stage(paths)
        adapter = adapters.CodexAdapter(paths)

        adapter.enable("git-lfs", models.InstallMode.COPY)
        adapter.enable("git-lfs", models.InstallMode.COPY)

        assert (adapter.target_path("git-lfs") / "SKILL.md").exists()
        assert len(list(paths.backups_dir.glob("*/codex/git-lfs"))) == 1

    def test_symlink_not_supported(self, paths: config.SkillHubPaths) -> None:
        """Codex accepts only copies."""
        _stage(paths)
        with _pytest.raises(errors.UnsupportedModeError):
            adapters.CodexAdapter(paths).enable("git-lfs", models.InstallMode.SYMLINK)


class TestConfigPatchLifecycle:
    """configPatch placement through Claude Code, OpenCode and Cursor."""

    def test_claude_code_copies_and_registers(self, paths: config.SkillHubPaths) -> None:
        """Claude Code copies the skill and lists it in settings.json."""
        manifest = _stage(paths)
        adapter = adapters.ClaudeCodeAdapter(paths)
        settings_file = adapter.config_file_path()
        assert settings_file is not None
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text(_json.dumps({"theme": "dark"}))

        mode = adapter.install(manifest, models.InstallMode.CONFIG_PATCH)
        adapter.enable("git-lfs", mode)

        target = adapter.target_path("git-lfs")
        assert target.is_dir() and not target.is_symlink()
        data = _json.loads(settings_file.read_text())
        assert data["theme"] == "dark"
        assert data["skillhub"]["skills"] == [str(target)]

    def test_claude_code_auto_prefers_copy(self, paths: config.SkillHubPaths) -> None:
        """Without symlink support, auto resolves to copy."""
        manifest = _stage(paths)
        mode = adapters.ClaudeCodeAdapter(paths).install(manifest, models.InstallMode.AUTO)
        assert mode is models.InstallMode.COPY

    def test_disable_unregisters(self, paths: config.SkillHubPaths) -> None:
        """Disable removes the placement and the config entry."""
        _stage(paths)
        adapter = adapters.ClaudeCodeAdapter(paths)
        adapter.enable("git-lfs", models.InstallMode.CONFIG_PATCH)

        adapter.disable("git-lfs")

        settings_file = adapter.config_file_path()
        assert settings_file is not None
        assert _json.loads(settings_file.read_text())["skillhub"]["skills"] == []
        assert not filesystem.exists(adapter.target_path("git-lfs"))

    def test_opencode_registers_at_install(self, paths: config.SkillHubPaths) -> None:
        """OpenCode registers during install, before anything is placed."""
        manifest = _stage(paths)
        adapter = adapters.OpenCodeAdapter(paths)

        adapter.install(manifest, models.InstallMode.CONFIG_PATCH)

        status = adapter.status("git-lfs")
        assert status.is_enabled is True
        assert status.detail == "Registered in OpenCode config (skillhub.skills)"
        assert not filesystem.exists(adapter.target_path("git-lfs"))

    def test_cursor_links_and_registers(self, paths: config.SkillHubPaths) -> None:
        """Cursor's configPatch places a symlink."""
        _stage(paths)
        adapter = adapters.CursorAdapter(paths)
        adapter.app_support_root.mkdir(parents=True)

        adapter.enable("git-lfs", models.InstallMode.CONFIG_PATCH)

        assert adapter.target_path("git-lfs").is_symlink()
        settings_file = adapter.config_file_path()
        assert settings_file is not None
        assert _json.loads(settings_file.read_text())["skillhub"]["skills"] == [
            str(adapter.target_path("git-lfs"))
        ]

    def test_malformed_config_refused_on_enable(self, paths: config.SkillHubPaths) -> None:
        """A config that cannot be patched aborts enable and is left alone."""
        _stage(paths)
        adapter = adapters.ClaudeCodeAdapter(paths)
        settings_file = adapter.config_file_path()
        assert settings_file is not None
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text('["not", "an", "object"]')

        with _pytest.raises(errors.ConfigShapeError):
            adapter.enable("git-lfs", models.InstallMode.CONFIG_PATCH)
        assert settings_file.read_text() == '["not", "an", "object"]'

    def test_status_tolerates_malformed_config(self, paths: config.SkillHubPaths) -> None:
        """status() is read-only and treats an unreadable config as unregistered."""
        _stage(paths)
        adapter = adapters.ClaudeCodeAdapter(paths)
        settings_file = adapter.config_file_path()
        assert settings_file is not None
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text("{broken")

        status = adapter.status("git-lfs")

        assert status.detail == "Installed but not enabled"

    def test_disable_tolerates_commented_settings(self, paths: config.SkillHubPaths) -> None:
        """A symlinked skill is disabled even when settings.json has comments."""
        _stage(paths)
        adapter = adapters.CursorAdapter(paths)
        adapter.app_support_root.mkdir(parents=True)
        adapter.enable("git-lfs", models.InstallMode.SYMLINK)
        settings_file = adapter.config_file_path()
        assert settings_file is not None
        settings_file.parent.mkdir(parents=True, exist_ok=True)
        content = '{ // font\n "editor.fontSize": 14 }\n'
        settings_file.write_text(content)

        adapter.disable("git-lfs")

        assert not filesystem.exists(adapter.target_path("git-lfs"))
        assert settings_file.read_text() == content

    def test_disable_leaves_unrelated_config_untouched(
        self, paths: config.SkillHubPaths
    ) -> None:
        """A config without the skill is not rewritten on disable."""
        _stage(paths)
        adapter = adapters.ClaudeCodeAdapter(paths)
        settings_file = adapter.config_file_path()
        assert settings_file is not None
        settings_file.parent.mkdir(parents=True)
        content = '{"theme":   "dark"}'
        settings_file.write_text(content)
        adapter.enable("git-lfs", models.InstallMode.COPY)

        adapter.disable("git-lfs")

        assert settings_file.read_text() == content


class TestCustomProductAdapter:
    """Tests for user-defined products."""

    def _config(self, **kwargs: object) -> config.CustomProductConfig:
        return config.CustomProductConfig.model_validate(
            {"id": "my-tool", "skills_dir": "~/.mytool/skills", **kwargs}
        )

    def test_identity_and_location(self, paths: config.SkillHubPaths) -> None:
        """The name defaults to the ID and ~ expands to the sandbox home."""
        adapter = adapters.CustomProductAdapter(self._config(), paths)
        assert adapter.id == "my-tool"
        assert adapter.name == "my-tool"
        assert adapter.skills_directory() == paths.user_home / ".mytool" / "skills"
        assert adapter.supported_install_modes == (models.InstallMode.COPY,)

    def test_detected_by_skills_dir(self, paths: config.SkillHubPaths) -> None:
        """The skills directory itself is a footprint."""
        adapter = adapters.CustomProductAdapter(self._config(), paths, executable_search_paths=[])
        assert adapter.detect().is_detected is False
        adapter.skills_directory().mkdir(parents=True)
        assert adapter.detect().is_detected is True

    def test_extra_footprints(self, paths: config.SkillHubPaths) -> None:
        """Configured footprints also count."""
        adapter = adapters.CustomProductAdapter(
            self._config(footprints=["~/.mytoolrc"]), paths, executable_search_paths=[]
        )
        (paths.user_home / ".mytoolrc").write_text("")
        assert adapter.detect().is_detected is True

    def test_copy_lifecycle(self, paths: config.SkillHubPaths) -> None:
        """Custom products place copies."""
        manifest = _stage(paths)
        adapter = adapters.CustomProductAdapter(self._config(name="My Tool"), paths)

        mode = adapter.install(manifest, models.InstallMode.AUTO)
        adapter.enable("git-lfs", mode)

        assert adapter.name == "My Tool"
        assert mode is models.InstallMode.COPY
        assert (adapter.target_path("git-lfs") / "SKILL.md").exists()
