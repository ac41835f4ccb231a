"""Tests for config/models.py module.

Covers:
- LogOutputConfig model
- LoggingConfig model
- BuildConfig model
- CheckConfig model
- GoGenConfig root model
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from gogen.config.models import (
    BuildConfig,
    CheckConfig,
    GoGenConfig,
    LoggingConfig,
    LogOutputConfig,
)


class TestLogOutputConfig:
    """Tests for LogOutputConfig model."""

    def test_defaults(self) -> None:
        """Default values."""
        config = LogOutputConfig()
        assert config.format == "console"
        assert config.destination == "stderr"
        assert config.level is None

    def test_absolute_path_destination(self) -> None:
        """Absolute path is valid destination."""
        config = LogOutputConfig(destination="/var/log/gogen.log")
        assert config.destination == "/var/log/gogen.log"

    def test_relative_path_fails(self) -> None:
        """Relative path is rejected."""
        with pytest.raises(ValidationError, match="absolute path"):
            LogOutputConfig(destination="logs/app.log")


class TestLoggingConfig:
    """Tests for LoggingConfig model."""

    def test_defaults(self) -> None:
        config = LoggingConfig()
        assert config.level == "INFO"
        assert len(config.outputs) == 1

    def test_invalid_level_fails(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="VERBOSE")  # type: ignore[arg-type]


class TestBuildConfig:
    """Tests for BuildConfig model."""

    def test_defaults(self) -> None:
        config = BuildConfig()
        assert config.goos in ("linux", "darwin", "windows")
        assert config.goarch
        assert config.tags == []
        assert config.cgo_enabled is False
        assert config.include_tests is False
        assert config.go_version == "1.22"

    def test_release_tags_up_to_version(self) -> None:
        config = BuildConfig(go_version="1.3")
        assert config.release_tags == ["go1.1", "go1.2", "go1.3"]

    @pytest.mark.parametrize("version", ["1", "go1.21", "2.0", "1.x"])
    def test_malformed_go_version_fails(self, version: str) -> None:
        with pytest.raises(ValidationError, match="go_version"):
            BuildConfig(go_version=version)


class TestCheckConfig:
    """Tests for CheckConfig model."""

    def test_defaults(self) -> None:
        config = CheckConfig()
        assert config.report_unused_imports is True
        assert config.report_unused_variables is True
        assert config.max_errors == 10

    def test_max_errors_must_be_positive(self) -> None:
        with pytest.raises(ValidationError, match="max_errors"):
            CheckConfig(max_errors=0)


class TestGoGenConfig:
    """Tests for the root model."""

    def test_sections_default(self) -> None:
        config = GoGenConfig()
        assert isinstance(config.logging, LoggingConfig)
        assert isinstance(config.build, BuildConfig)
        assert isinstance(config.check, CheckConfig)

    def test_nested_dict_values(self) -> None:
        config = GoGenConfig.model_validate(
            {"build": {"goos": "windows", "tags": ["integration"]}, "check": {"max_errors": 3}}
        )
        assert config.build.goos == "windows"
        assert config.build.tags == ["integration"]
        assert config.check.max_errors == 3
