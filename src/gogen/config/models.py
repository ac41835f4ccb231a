"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (GOGEN__SECTION__KEY)
3. Project YAML (<root>/gogen.yaml)
4. Global YAML (~/.config/gogen/config.yaml)
5. Built-in defaults (this file)

Examples:
    GOGEN__LOGGING__LEVEL=DEBUG
    GOGEN__BUILD__GOOS=windows
    GOGEN__CHECK__REPORT_UNUSED_IMPORTS=false
"""

import platform
import re
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_GOVERSION_RE = re.compile(r"^1\.(\d+)$")

_HOST_GOOS = {"linux": "linux", "darwin": "darwin", "win32": "windows", "cygwin": "windows"}
_HOST_GOARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
}


def _default_goos() -> str:
    for prefix, goos in _HOST_GOOS.items():
        if sys.platform.startswith(prefix):
            return goos
    return "linux"


def _default_goarch() -> str:
    return _HOST_GOARCH.get(platform.machine().lower(), "amd64")


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        GOGEN__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class BuildConfig(BaseModel):
    """Build context used when discovering the Go files of a directory.

    Env vars:
        GOGEN__BUILD__GOOS: Target operating system (default: host)
        GOGEN__BUILD__GOARCH: Target architecture (default: host)
        GOGEN__BUILD__TAGS: Extra build tags (JSON list)
        GOGEN__BUILD__CGO_ENABLED: Include files that import "C"
        GOGEN__BUILD__INCLUDE_TESTS: Include _test.go files
        GOGEN__BUILD__GO_VERSION: Highest goX.Y release tag satisfied
    """

    goos: str = Field(default_factory=_default_goos)
    goarch: str = Field(default_factory=_default_goarch)
    tags: list[str] = Field(default_factory=list)
    cgo_enabled: bool = False
    include_tests: bool = False
    go_version: str = Field(
        default="1.22",
        description="Release tags go1.1 .. go<version> are satisfied by //go:build lines.",
    )

    @field_validator("go_version")
    @classmethod
    def validate_go_version(cls, v: str) -> str:
        if not _GOVERSION_RE.match(v):
            raise ValueError(f"go_version must look like 1.N, got {v}")
        return v

    @property
    def release_tags(self) -> list[str]:
        minor = int(self.go_version.split(".")[1])
        return [f"go1.{i}" for i in range(1, minor + 1)]


class CheckConfig(BaseModel):
    """Semantic check configuration.

    Env vars:
        GOGEN__CHECK__REPORT_UNUSED_IMPORTS: Fail on imports that are never used
        GOGEN__CHECK__REPORT_UNUSED_VARIABLES: Fail on unused local variables
        GOGEN__CHECK__MAX_ERRORS: Diagnostics collected before giving up
    """

    report_unused_imports: bool = True
    report_unused_variables: bool = True
    max_errors: int = Field(
        default=10,
        description="Stop collecting diagnostics after this many.",
    )

    @field_validator("max_errors")
    @classmethod
    def validate_max_errors(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_errors must be >= 1, got {v}")
        return v


class GoGenConfig(BaseModel):
    """Root configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    check: CheckConfig = Field(default_factory=CheckConfig)
