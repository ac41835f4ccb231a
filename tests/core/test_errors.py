"""Tests for error types and codes."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import pytest

from gogen.core.errors import (
    ConfigError,
    ErrorCode,
    GoGenError,
    InputError,
    InternalError,
    ParseError,
    ResolveError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.PATH_NOT_FOUND, 1000),
            (ErrorCode.DECL_NOT_FOUND, 1000),
            (ErrorCode.SYNTAX_ERROR, 2000),
            (ErrorCode.UNDEFINED, 3000),
            (ErrorCode.INVALID_DECL, 3000),
            (ErrorCode.CONFIG_PARSE_ERROR, 4000),
            (ErrorCode.INTERNAL_ERROR, 9000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        # Given
        error_code = code

        # When
        value = error_code.value

        # Then
        assert expected_range <= value < expected_range + 1000


class TestGoGenError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = GoGenError(
            code=ErrorCode.SYNTAX_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "SYNTAX_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_human_readable(self) -> None:
        """Error string representation is human readable."""
        # Given
        error = GoGenError(code=ErrorCode.INTERNAL_ERROR, message="Something broke")

        # When
        result = str(error)

        # Then
        assert result == "[9001] INTERNAL_ERROR: Something broke"

    def test_given_error_when_raised_then_catchable_as_base(self) -> None:
        """Every subclass is caught through the base class."""
        with pytest.raises(GoGenError) as exc_info:
            raise InputError.path_not_found("/nope")
        assert exc_info.value.code == ErrorCode.PATH_NOT_FOUND

    def test_given_context_manager_when_error_passes_through_then_type_kept(self) -> None:
        """Subclasses survive a generator-based context manager unchanged."""
        # Given
        @contextmanager
        def scope() -> Iterator[None]:
            yield

        # When
        with pytest.raises(GoGenError) as exc_info, scope():
            raise ParseError.syntax("a.go:1:1", "unexpected EOF")

        # Then
        assert type(exc_info.value) is ParseError
        assert exc_info.value.__traceback__ is not None


class TestInputError:
    """InputError factory method tests."""

    @pytest.mark.parametrize(
        ("factory", "args", "expected_code"),
        [
            ("path_not_found", ("/missing",), ErrorCode.PATH_NOT_FOUND),
            ("unreadable", ("/x", "permission denied"), ErrorCode.PATH_UNREADABLE),
            ("no_go_files", ("/empty",), ErrorCode.NO_GO_FILES),
            ("decl_not_found", ("type", "X"), ErrorCode.DECL_NOT_FOUND),
        ],
    )
    def test_given_factory_when_called_then_correct_code(
        self, factory: str, args: tuple[str, ...], expected_code: ErrorCode
    ) -> None:
        """Factory methods produce errors with correct error codes."""
        error = getattr(InputError, factory)(*args)
        assert error.code == expected_code

    def test_multiple_packages_lists_each_package_with_a_file(self) -> None:
        error = InputError.multiple_packages("/d", ["a", "b"], ["a.go", "b.go"])

        assert error.code == ErrorCode.MULTIPLE_PACKAGES
        assert error.message == "found packages a (a.go), b (b.go) in /d"
        assert error.details["packages"] == ["a", "b"]


class TestParseError:
    def test_syntax_error_carries_position(self) -> None:
        error = ParseError.syntax("a.go:3:7", "syntax error near '}'")

        assert error.message == "a.go:3:7: syntax error near '}'"
        assert error.details["position"] == "a.go:3:7"


@dataclass
class _Diag:
    position: str
    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.position}: {self.message}"


class TestResolveError:
    def test_from_diagnostics_uses_first_and_keeps_all(self) -> None:
        # Given
        diags = [
            _Diag("0.go:2:5", ErrorCode.UNDEFINED, "undefined: x"),
            _Diag("0.go:4:1", ErrorCode.UNUSED, "declared and not used: y"),
        ]

        # When
        error = ResolveError.from_diagnostics(diags)

        # Then
        assert error.code == ErrorCode.UNDEFINED
        assert error.message == "0.go:2:5: undefined: x"
        assert error.details["position"] == "0.go:2:5"
        assert error.details["errors"] == [
            "0.go:2:5: undefined: x",
            "0.go:4:1: declared and not used: y",
        ]


class TestConfigError:
    """ConfigError factory method tests."""

    @pytest.mark.parametrize(
        ("factory", "kwargs", "expected_code"),
        [
            (
                "parse_error",
                {"path": "/foo", "reason": "bad yaml"},
                ErrorCode.CONFIG_PARSE_ERROR,
            ),
            (
                "invalid_value",
                {"field": "check.max_errors", "value": 0, "reason": "too small"},
                ErrorCode.CONFIG_INVALID_VALUE,
            ),
            ("missing_required", {"field": "build.goos"}, ErrorCode.CONFIG_MISSING_REQUIRED),
            ("file_not_found", {"path": "/missing"}, ErrorCode.CONFIG_FILE_NOT_FOUND),
        ],
    )
    def test_given_factory_when_called_then_correct_code(
        self, factory: str, kwargs: dict[str, object], expected_code: ErrorCode
    ) -> None:
        """Factory methods produce errors with correct error codes."""
        # Given
        factory_method = getattr(ConfigError, factory)

        # When
        error = factory_method(**kwargs)

        # Then
        assert error.code == expected_code


class TestInternalError:
    """InternalError tests."""

    def test_given_unexpected_error_when_created_then_includes_extras(self) -> None:
        """Unexpected error captures arbitrary extra details."""
        # Given
        message = "boom"
        extras = {"package": "tree-sitter-go"}

        # When
        error = InternalError.unexpected(message, **extras)

        # Then
        assert error.details == extras
        assert error.code == ErrorCode.INTERNAL_ERROR
