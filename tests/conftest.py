"""
Shared pytest fixtures for SkillHub tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.

Every fixture that touches the filesystem works below tmp_path through
SkillHubPaths.under(), so no test ever reads or writes the real home.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing
import unittest.mock as _mock

import click.testing as _click_testing
import pytest as _pytest

import skillhub.config as config
import skillhub.logging as skillhub_logging
import skillhub.manager as manager

# Environment keys that should be cleared for isolated tests
ENV_KEYS_TO_CLEAR = [
    "SKILLHUB_CONFIG_DIR",
    "SKILLHUB_PATHS__STATE_DIR",
    "SKILLHUB_PATHS__USER_HOME",
    "SKILLHUB_LOGGING__LEVEL",
    "SKILLHUB_LOGGING__ACTIVITY_LOG",
]

DEFAULT_BODY = "# Instructions\n\nFollow these steps carefully.\n"


def write_skill(
    parent: _pathlib.Path,
    name: str,
    description: str = "A test skill",
    body: str = DEFAULT_BODY,
    *,
    frontmatter_name: str | None = None,
    extra_files: _typing.Mapping[str, str] | None = None,
) -> _pathlib.Path:
    """
    Create ``<parent>/<name>/SKILL.md`` and return the skill directory.

    Args:
        parent: Directory to create the skill directory in.
        name: Directory name (and frontmatter name unless overridden).
        description: Frontmatter description.
        body: Markdown after the frontmatter block.
        frontmatter_name: Name written into the frontmatter.
        extra_files: Relative path → content for additional files.
    """
    skill_dir = parent / name
    skill_dir.mkdir(parents=True, exist_ok=True)
    fm_name = frontmatter_name if frontmatter_name is not None else name
    (skill_dir / "SKILL.md").write_text(
        f"---\nname: {fm_name}\ndescription: {description}\n---\n{body}"
    )
    for relative, content in (extra_files or {}).items():
        target = skill_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    return skill_dir


@_pytest.fixture
def clean_env() -> dict[str, str]:
    """
    Return environment dict with SkillHub keys removed.

    Use with mock.patch.dict to isolate tests from the actual environment.
    """
    return {
        k: v
        for k, v in _os.environ.items()
        if k not in ENV_KEYS_TO_CLEAR and not k.startswith("SKILLHUB_")
    }


@_pytest.fixture
def isolated_env(clean_env: dict[str, str], tmp_path: _pathlib.Path):
    """
    Context manager that isolates tests from environment variables.

    The user config directory is pointed at an empty directory under
    tmp_path so a real ~/.config/skillhub/config.yaml is never read.

    Usage:
        def test_something(isolated_env):
            with isolated_env:
                settings = config.Settings()
    """
    env = dict(clean_env)
    env[config.ENV_CONFIG_DIR] = str(tmp_path / "config")
    return _mock.patch.dict(_os.environ, env, clear=True)


@_pytest.fixture
def sandbox_env(clean_env: dict[str, str], tmp_path: _pathlib.Path) -> dict[str, str]:
    """
    Environment that points every SkillHub root below tmp_path.

    Suitable for CliRunner(env=...) so the CLI builds its own manager
    against the sandbox.
    """
    env = dict(clean_env)
    env[config.ENV_CONFIG_DIR] = str(tmp_path / "config")
    env["SKILLHUB_PATHS__USER_HOME"] = str(tmp_path / "home")
    env["SKILLHUB_PATHS__STATE_DIR"] = str(tmp_path / "home" / ".skillhub")
    return env


@_pytest.fixture
def paths(tmp_path: _pathlib.Path) -> config.SkillHubPaths:
    """Sandboxed SkillHubPaths with the fake home created."""
    sandbox = config.SkillHubPaths.under(tmp_path)
    sandbox.user_home.mkdir(parents=True)
    return sandbox


@_pytest.fixture
def sources_dir(tmp_path: _pathlib.Path) -> _pathlib.Path:
    """Directory for skill sources, outside the fake home."""
    directory = tmp_path / "sources"
    directory.mkdir()
    return directory


@_pytest.fixture
def make_skill(
    sources_dir: _pathlib.Path,
) -> _typing.Callable[..., _pathlib.Path]:
    """
    Factory that writes a skill directory below sources_dir.

    Pass parent= to create the skill somewhere else (for example inside a
    product's skills directory).

    Usage:
        def test_something(make_skill):
            skill_dir = make_skill("git-lfs", description="Use Git LFS")
    """

    def _make(
        name: str,
        *args: _typing.Any,
        parent: _pathlib.Path | None = None,
        **kwargs: _typing.Any,
    ) -> _pathlib.Path:
        return write_skill(parent or sources_dir, name, *args, **kwargs)

    return _make


@_pytest.fixture
def skill_manager(paths: config.SkillHubPaths) -> manager.SkillManager:
    """
    SkillManager over the sandbox.

    Executable lookup is disabled so detection depends only on the
    footprints a test creates under the fake home.
    """
    return manager.SkillManager(
        paths,
        activity=skillhub_logging.ActivityLogger(log_file=paths.activity_log),
        executable_search_paths=[],
    )


@_pytest.fixture
def cli_runner(sandbox_env: dict[str, str]) -> _click_testing.CliRunner:
    """CliRunner whose environment points SkillHub at the sandbox."""
    return _click_testing.CliRunner(env=sandbox_env)
