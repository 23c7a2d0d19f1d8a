"""Tests for the user config file source and helpers.

Tests for YamlConfigSettingsSource:
- Loading from the user config file
- Handling missing and empty files gracefully
- Failing fast on malformed YAML
- Integration with pydantic-settings
"""

import os as _os
import pathlib as _pathlib

import pydantic_settings as _pydantic_settings
import pytest as _pytest
import yaml as _yaml

import skillhub.config.settings as settings
import skillhub.config.sources as sources


class TestHelperFunctions:
    """Tests for path helper functions."""

    def test_get_user_config_path_default(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """Without env var, should return XDG-style user config path."""
        monkeypatch.delenv("SKILLHUB_CONFIG_DIR", raising=False)
        path = sources.get_user_config_path()
        assert path == _pathlib.Path.home() / ".config" / "skillhub" / "config.yaml"

    def test_get_user_config_path_with_env_var(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """With env var set, should use that directory."""
        monkeypatch.setenv("SKILLHUB_CONFIG_DIR", "/custom/config/dir")
        path = sources.get_user_config_path()
        assert path == _pathlib.Path("/custom/config/dir/config.yaml")


class TestLoadYamlFile:
    """Tests for load_yaml_file()."""

    def test_loads_mapping(self, tmp_path: _pathlib.Path) -> None:
        """A YAML mapping is returned as a dict."""
        path = tmp_path / "config.yaml"
        path.write_text("logging:\n  level: debug\n")
        assert sources.load_yaml_file(path) == {"logging": {"level": "debug"}}

    def test_empty_file_returns_none(self, tmp_path: _pathlib.Path) -> None:
        """An empty file is not an error."""
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert sources.load_yaml_file(path) is None

    def test_malformed_yaml_raises(self, tmp_path: _pathlib.Path) -> None:
        """Invalid YAML names the file."""
        path = tmp_path / "config.yaml"
        path.write_text("logging: [unclosed\n")
        with _pytest.raises(sources.ConfigFileError, match="invalid YAML"):
            sources.load_yaml_file(path)

    def test_non_mapping_raises(self, tmp_path: _pathlib.Path) -> None:
        """A list at the top level is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with _pytest.raises(sources.ConfigFileError, match="must be a YAML mapping"):
            sources.load_yaml_file(path)

    def test_missing_file_raises(self, tmp_path: _pathlib.Path) -> None:
        """Reading a file that does not exist is an error."""
        with _pytest.raises(sources.ConfigFileError, match="cannot read file"):
            sources.load_yaml_file(tmp_path / "missing.yaml")


class TestSaveUserConfig:
    """Tests for save_user_config()."""

    def test_writes_yaml(self, tmp_path: _pathlib.Path) -> None:
        """Data is written as block-style YAML, creating directories."""
        path = tmp_path / "nested" / "config.yaml"
        written = sources.save_user_config(
            {"products": {"skills_dir_overrides": {"codex": "/x"}}}, path
        )
        assert written == path
        assert _yaml.safe_load(path.read_text()) == {
            "products": {"skills_dir_overrides": {"codex": "/x"}}
        }

    def test_defaults_to_user_config_path(
        self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        """Without a path, the user config file is written."""
        monkeypatch.setenv("SKILLHUB_CONFIG_DIR", str(tmp_path))
        assert sources.save_user_config({"a": 1}) == tmp_path / "config.yaml"


class TestYamlConfigSettingsSource:
    """Tests for YamlConfigSettingsSource."""

    def test_is_pydantic_settings_source(self) -> None:
        """YamlConfigSettingsSource should be a pydantic-settings source."""
        assert issubclass(
            sources.YamlConfigSettingsSource,
            _pydantic_settings.PydanticBaseSettingsSource,
        )

    def test_missing_file_contributes_nothing(self, tmp_path: _pathlib.Path) -> None:
        """No config file yields an empty mapping."""
        source = sources.YamlConfigSettingsSource(
            settings.Settings, config_path=tmp_path / "config.yaml"
        )
        assert source() == {}

    def test_returns_file_contents(self, tmp_path: _pathlib.Path) -> None:
        """The parsed file is returned for validation."""
        path = tmp_path / "config.yaml"
        path.write_text("paths:\n  state_dir: /srv/skillhub\n")
        source = sources.YamlConfigSettingsSource(settings.Settings, config_path=path)
        assert source() == {"paths": {"state_dir": "/srv/skillhub"}}
        assert source.config_path == path

    def test_malformed_file_fails_fast(self, tmp_path: _pathlib.Path) -> None:
        """A broken config file raises at construction."""
        path = tmp_path / "config.yaml"
        path.write_text(": : :\n  - [")
        with _pytest.raises(sources.ConfigFileError):
            sources.YamlConfigSettingsSource(settings.Settings, config_path=path)

    def test_settings_read_user_config(self, tmp_path: _pathlib.Path, isolated_env) -> None:
        """Settings pick up values from $SKILLHUB_CONFIG_DIR/config.yaml."""
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("logging:\n  level: info\n")
        with isolated_env:
            assert _os.environ["SKILLHUB_CONFIG_DIR"] == str(config_dir)
            loaded = settings.Settings()
        assert loaded.logging.level == "info"
