"""Tests for build constraint parsing and file name matching."""

from __future__ import annotations

import pytest

from gogen.build.constraints import (
    BuildContext,
    ConstraintSyntaxError,
    parse_expr,
    parse_plus_build,
)
from gogen.config.models import BuildConfig


@pytest.fixture
def linux_amd64() -> BuildContext:
    return BuildContext.from_config(
        BuildConfig(goos="linux", goarch="amd64", tags=["integration"], go_version="1.21")
    )


class TestMatchTag:
    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("linux", True),
            ("amd64", True),
            ("unix", True),
            ("gc", True),
            ("go1.21", True),
            ("go1.22", False),
            ("integration", True),
            ("cgo", False),
            ("windows", False),
            ("arm64", False),
        ],
    )
    def test_tags(self, linux_amd64: BuildContext, tag: str, expected: bool) -> None:
        assert linux_amd64.match_tag(tag) is expected

    def test_android_satisfies_linux(self) -> None:
        ctx = BuildContext(goos="android", goarch="arm64")
        assert ctx.match_tag("linux")
        assert ctx.match_tag("unix")

    def test_windows_is_not_unix(self) -> None:
        ctx = BuildContext(goos="windows", goarch="amd64")
        assert not ctx.match_tag("unix")

    def test_cgo_when_enabled(self) -> None:
        ctx = BuildContext.from_config(BuildConfig(cgo_enabled=True))
        assert ctx.match_tag("cgo")


class TestMatchFile:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("file.go", True),
            ("linux.go", True),
            ("file_linux.go", True),
            ("file_windows.go", False),
            ("file_amd64.go", True),
            ("file_arm64.go", False),
            ("file_linux_amd64.go", True),
            ("file_linux_arm64.go", False),
            ("file_windows_test.go", False),
            ("file_linux_test.go", True),
            ("file_other.go", True),
        ],
    )
    def test_suffixes(self, linux_amd64: BuildContext, name: str, expected: bool) -> None:
        assert linux_amd64.match_file(name) is expected


class TestParseExpr:
    @pytest.mark.parametrize(
        ("expr", "expected"),
        [
            ("linux", True),
            ("!linux", False),
            ("linux && amd64", True),
            ("linux && !amd64", False),
            ("windows || linux", True),
            ("(windows || darwin) && amd64", False),
            ("!(windows || darwin)", True),
            ("ignore", False),
            ("go1.18 && integration", True),
        ],
    )
    def test_evaluation(self, linux_amd64: BuildContext, expr: str, expected: bool) -> None:
        assert parse_expr(expr)(linux_amd64.match_tag) is expected

    @pytest.mark.parametrize("expr", ["", "linux &&", "(linux", "linux)", "&& linux", "linux $ x"])
    def test_malformed(self, expr: str) -> None:
        with pytest.raises(ConstraintSyntaxError):
            parse_expr(expr)


class TestParsePlusBuild:
    def test_space_is_or(self, linux_amd64: BuildContext) -> None:
        assert parse_plus_build(["windows linux"])(linux_amd64.match_tag)

    def test_comma_is_and(self, linux_amd64: BuildContext) -> None:
        assert not parse_plus_build(["linux,arm64"])(linux_amd64.match_tag)

    def test_lines_are_anded(self, linux_amd64: BuildContext) -> None:
        assert not parse_plus_build(["linux", "windows"])(linux_amd64.match_tag)

    def test_negation(self, linux_amd64: BuildContext) -> None:
        assert parse_plus_build(["!windows"])(linux_amd64.match_tag)

    def test_invalid_tag(self) -> None:
        with pytest.raises(ConstraintSyntaxError):
            parse_plus_build(["linux,!"])
