"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() function
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from gogen.config.loader import _deep_merge, _load_yaml, load_config
from gogen.core.errors import ConfigError, ErrorCode


@pytest.fixture
def no_global_config(tmp_path: Path):
    """Point the global config path at a file that does not exist."""
    with patch("gogen.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "absent" / "config.yaml"):
        yield


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        """Returns empty dict when file doesn't exist."""
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("build:\n  goos: darwin\n")

        assert _load_yaml(yaml_file) == {"build": {"goos": "darwin"}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_invalid_yaml_raises_config_error(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("build: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_non_mapping_raises_config_error(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_nested_keys_merge(self) -> None:
        base = {"build": {"goos": "linux", "goarch": "amd64"}}
        override = {"build": {"goos": "darwin"}}

        assert _deep_merge(base, override) == {"build": {"goos": "darwin", "goarch": "amd64"}}

    def test_base_not_mutated(self) -> None:
        base = {"check": {"max_errors": 10}}
        _deep_merge(base, {"check": {"max_errors": 1}})
        assert base == {"check": {"max_errors": 10}}


class TestLoadConfig:
    """Tests for load_config precedence."""

    def test_defaults_without_files(self, tmp_path: Path, no_global_config: None) -> None:
        config = load_config(tmp_path)
        assert config.check.max_errors == 10
        assert config.build.include_tests is False

    def test_project_yaml_applies(self, tmp_path: Path, no_global_config: None) -> None:
        (tmp_path / "gogen.yaml").write_text("check:\n  report_unused_imports: false\n")

        config = load_config(tmp_path)

        assert config.check.report_unused_imports is False

    def test_env_overrides_yaml(
        self, tmp_path: Path, no_global_config: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "gogen.yaml").write_text("build:\n  goos: darwin\n")
        monkeypatch.setenv("GOGEN__BUILD__GOOS", "windows")

        config = load_config(tmp_path)

        assert config.build.goos == "windows"

    def test_kwargs_override_env(
        self, tmp_path: Path, no_global_config: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GOGEN__CHECK__MAX_ERRORS", "5")

        config = load_config(tmp_path, check={"max_errors": 2})

        assert config.check.max_errors == 2

    def test_global_yaml_below_project_yaml(self, tmp_path: Path) -> None:
        global_file = tmp_path / "global.yaml"
        global_file.write_text("build:\n  goos: darwin\n  cgo_enabled: true\n")
        project = tmp_path / "project"
        project.mkdir()
        (project / "gogen.yaml").write_text("build:\n  goos: windows\n")

        with patch("gogen.config.loader.GLOBAL_CONFIG_PATH", global_file):
            config = load_config(project)

        assert config.build.goos == "windows"
        assert config.build.cgo_enabled is True

    def test_invalid_value_raises_config_error(self, tmp_path: Path, no_global_config: None) -> None:
        (tmp_path / "gogen.yaml").write_text("check:\n  max_errors: 0\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "max_errors" in exc_info.value.details["field"]
