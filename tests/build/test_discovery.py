"""Tests for package file discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from gogen.build.discovery import import_dir, read_header
from gogen.config.models import BuildConfig
from gogen.core.errors import ErrorCode, InputError, ParseError

LINUX = BuildConfig(goos="linux", goarch="amd64")


class TestReadHeader:
    def test_package_and_imports(self, tmp_path: Path) -> None:
        # Given
        path = tmp_path / "a.go"
        path.write_text('package p\n\nimport (\n\t"fmt"\n\tio "io"\n)\n\nimport "C"\n')

        # When
        header = read_header(path)

        # Then
        assert header.package == "p"
        assert header.imports == ["fmt", "io", "C"]

    def test_go_build_line(self, tmp_path: Path) -> None:
        path = tmp_path / "a.go"
        path.write_text("// Copyright\n\n//go:build linux && !cgo\n\npackage p\n")

        header = read_header(path)

        assert header.go_build == "linux && !cgo"
        assert header.go_build_line == 3

    def test_plus_build_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "a.go"
        path.write_text("// +build linux darwin\n// +build amd64\n\npackage p\n")

        header = read_header(path)

        assert header.plus_build == ["linux darwin", "amd64"]

    def test_constraints_after_package_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "a.go"
        path.write_text("package p\n\n//go:build ignore\n")

        assert read_header(path).go_build is None

    def test_missing_package_clause(self, tmp_path: Path) -> None:
        path = tmp_path / "a.go"
        path.write_text("// just a comment\n")

        with pytest.raises(ParseError):
            read_header(path)


class TestImportDir:
    def test_sorted_go_files(self, go_dir) -> None:
        d = go_dir({"b.go": "package p\n", "a.go": "package p\n", "notes.txt": "x"})

        assert import_dir(str(d), LINUX) == ["a.go", "b.go"]

    def test_hidden_and_underscore_files_skipped(self, go_dir) -> None:
        d = go_dir({"a.go": "package p\n", "_x.go": "package q\n", ".y.go": "package q\n"})

        assert import_dir(str(d), LINUX) == ["a.go"]

    def test_tests_excluded_by_default(self, go_dir) -> None:
        d = go_dir({"a.go": "package p\n", "a_test.go": "package p\n"})

        assert import_dir(str(d), LINUX) == ["a.go"]

    def test_tests_included_when_configured(self, go_dir) -> None:
        d = go_dir(
            {
                "a.go": "package p\n",
                "a_test.go": "package p\n",
                "ext_test.go": "package p_test\n",
            }
        )
        config = BuildConfig(goos="linux", goarch="amd64", include_tests=True)

        assert import_dir(str(d), config) == ["a.go", "a_test.go"]

    def test_platform_suffixes(self, go_dir) -> None:
        d = go_dir(
            {
                "a.go": "package p\n",
                "a_linux.go": "package p\n",
                "a_windows.go": "package p\n",
                "a_arm64.go": "package p\n",
            }
        )

        assert import_dir(str(d), LINUX) == ["a.go", "a_linux.go"]

    def test_build_constraints(self, go_dir) -> None:
        d = go_dir(
            {
                "a.go": "package p\n",
                "b.go": "//go:build ignore\n\npackage main\n",
                "c.go": "//go:build linux || darwin\n\npackage p\n",
            }
        )

        assert import_dir(str(d), LINUX) == ["a.go", "c.go"]

    def test_custom_tags(self, go_dir) -> None:
        d = go_dir({"a.go": "package p\n", "b.go": "//go:build integration\n\npackage p\n"})
        config = BuildConfig(goos="linux", goarch="amd64", tags=["integration"])

        assert import_dir(str(d), config) == ["a.go", "b.go"]

    def test_cgo_files_need_cgo(self, go_dir) -> None:
        d = go_dir({"a.go": "package p\n", "b.go": 'package p\n\nimport "C"\n'})

        assert import_dir(str(d), LINUX) == ["a.go"]
        with_cgo = BuildConfig(goos="linux", goarch="amd64", cgo_enabled=True)
        assert import_dir(str(d), with_cgo) == ["a.go", "b.go"]

    def test_documentation_package_ignored(self, go_dir) -> None:
        d = go_dir({"a.go": "package p\n", "doc.go": "package documentation\n"})

        assert import_dir(str(d), LINUX) == ["a.go"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(InputError) as exc_info:
            import_dir(str(tmp_path / "nope"), LINUX)
        assert exc_info.value.code == ErrorCode.PATH_NOT_FOUND

    def test_file_is_not_a_directory(self, go_dir) -> None:
        d = go_dir({"a.go": "package p\n"})

        with pytest.raises(InputError) as exc_info:
            import_dir(str(d / "a.go"), LINUX)
        assert exc_info.value.code == ErrorCode.PATH_UNREADABLE

    def test_no_go_files(self, tmp_path: Path) -> None:
        with pytest.raises(InputError) as exc_info:
            import_dir(str(tmp_path), LINUX)
        assert exc_info.value.code == ErrorCode.NO_GO_FILES

    def test_multiple_packages(self, go_dir) -> None:
        d = go_dir({"a.go": "package p\n", "b.go": "package q\n"})

        with pytest.raises(InputError) as exc_info:
            import_dir(str(d), LINUX)
        assert exc_info.value.code == ErrorCode.MULTIPLE_PACKAGES
        assert exc_info.value.details["packages"] == ["p", "q"]

    def test_malformed_constraint(self, go_dir) -> None:
        d = go_dir({"a.go": "//go:build linux &&\n\npackage p\n"})

        with pytest.raises(ParseError, match="go:build"):
            import_dir(str(d), LINUX)
