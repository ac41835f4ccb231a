"""gogen error types with typed error codes.

Error code ranges:
- 1xxx: Input (paths, discovery, lookups)
- 2xxx: Parse
- 3xxx: Resolve (whole-package semantic checks)
- 4xxx: Config
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Input (1xxx)
    PATH_NOT_FOUND = 1001
    PATH_UNREADABLE = 1002
    NO_GO_FILES = 1003
    MULTIPLE_PACKAGES = 1004
    DECL_NOT_FOUND = 1005

    # Parse (2xxx)
    SYNTAX_ERROR = 2001

    # Resolve (3xxx)
    UNDEFINED = 3001
    REDECLARED = 3002
    TYPE_MISMATCH = 3003
    PACKAGE_MISMATCH = 3004
    UNUSED = 3005
    INVALID_DECL = 3006

    # Config (4xxx)
    CONFIG_PARSE_ERROR = 4001
    CONFIG_INVALID_VALUE = 4002
    CONFIG_MISSING_REQUIRED = 4003
    CONFIG_FILE_NOT_FOUND = 4004

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True)
class GoGenError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'SYNTAX_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class InputError(GoGenError):
    """A named path or declaration could not be used."""

    @classmethod
    def path_not_found(cls, path: str) -> "InputError":
        return cls(
            code=ErrorCode.PATH_NOT_FOUND,
            message=f"No such file or directory: {path}",
            details={"path": path},
        )

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "InputError":
        return cls(
            code=ErrorCode.PATH_UNREADABLE,
            message=f"Cannot read {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def no_go_files(cls, directory: str) -> "InputError":
        return cls(
            code=ErrorCode.NO_GO_FILES,
            message=f"no buildable Go source files in {directory}",
            details={"dir": directory},
        )

    @classmethod
    def multiple_packages(
        cls, directory: str, packages: list[str], files: list[str]
    ) -> "InputError":
        found = ", ".join(f"{p} ({f})" for p, f in zip(packages, files, strict=True))
        return cls(
            code=ErrorCode.MULTIPLE_PACKAGES,
            message=f"found packages {found} in {directory}",
            details={"dir": directory, "packages": packages, "files": files},
        )

    @classmethod
    def decl_not_found(cls, kind: str, name: str) -> "InputError":
        return cls(
            code=ErrorCode.DECL_NOT_FOUND,
            message=f"{kind} {name} not found",
            details={"kind": kind, "name": name},
        )


class ParseError(GoGenError):
    """Malformed source text."""

    @classmethod
    def syntax(cls, position: str, reason: str) -> "ParseError":
        return cls(
            code=ErrorCode.SYNTAX_ERROR,
            message=f"{position}: {reason}",
            details={"position": position, "reason": reason},
        )


class ResolveError(GoGenError):
    """Whole-package semantic inconsistency."""

    @classmethod
    def from_diagnostics(cls, diagnostics: list[Any]) -> "ResolveError":
        """Build the error from the first diagnostic, attaching all of them."""
        first = diagnostics[0]
        return cls(
            code=first.code,
            message=str(first),
            details={
                "position": first.position,
                "errors": [str(d) for d in diagnostics],
            },
        )


class ConfigError(GoGenError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class InternalError(GoGenError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
