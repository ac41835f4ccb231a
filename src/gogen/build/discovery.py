"""Package file discovery for one directory.

Selects the Go files ``go build`` would compile for the package in a
directory: regular ``.go`` files not hidden by a ``_`` or ``.`` prefix,
filtered by test suffix, _GOOS/_GOARCH file name suffixes, build
constraints and cgo usage. Only file headers (leading comments, package
clause, imports) are inspected.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from gogen.build.constraints import (
    BuildContext,
    ConstraintSyntaxError,
    parse_expr,
    parse_plus_build,
)
from gogen.config.models import BuildConfig
from gogen.core.errors import InputError, ParseError
from gogen.core.logging import get_logger
from gogen.syntax.grammar import GO_GRAMMAR, new_parser

log = get_logger("build.discovery")

_DOCUMENTATION_PKG = "documentation"


@dataclass
class FileHeader:
    """What discovery needs to know about one file."""

    name: str
    package: str
    imports: list[str] = field(default_factory=list)
    go_build: str | None = None
    plus_build: list[str] = field(default_factory=list)
    go_build_line: int = 0


def read_header(path: Path) -> FileHeader:
    """Read the package clause, imports and build constraints of a file.

    Raises:
        InputError: The file cannot be read.
        ParseError: The file has no package clause.
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise InputError.unreadable(str(path), e.strerror or str(e)) from e

    header = FileHeader(name=path.name, package="")
    _scan_constraint_lines(data.decode("utf-8", errors="replace"), header)

    root = new_parser().parse(data).root_node
    for child in root.named_children:
        if child.type == "package_clause":
            for ident in child.named_children:
                if ident.type == "package_identifier":
                    header.package = ident.text.decode("utf-8")
        elif child.type == "import_declaration":
            header.imports.extend(_import_paths(child))
        elif child.type != "comment":
            break

    if not header.package:
        raise ParseError.syntax(f"{path}:1:1", "expected 'package'")
    return header


def _import_paths(decl: Any) -> list[str]:
    paths: list[str] = []
    stack = list(decl.named_children)
    while stack:
        node = stack.pop(0)
        if node.type == "import_spec":
            p = node.child_by_field_name("path")
            if p is not None and p.text:
                paths.append(p.text.decode("utf-8").strip("`\""))
        elif node.type == "import_spec_list":
            stack[0:0] = list(node.named_children)
    return paths


def _scan_constraint_lines(text: str, header: FileHeader) -> None:
    """Collect //go:build and // +build lines from the leading comments."""
    in_block = False
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if in_block:
            if "*/" in line:
                in_block = False
            continue
        if not line:
            continue
        if line.startswith("/*"):
            in_block = "*/" not in line[2:]
            continue
        if not line.startswith("//"):
            return
        if line.startswith("//go:build") and header.go_build is None:
            rest = line[len("//go:build") :]
            if rest and not rest[0].isspace():
                continue
            header.go_build = rest.strip()
            header.go_build_line = lineno
        elif line[2:].lstrip().startswith("+build"):
            body = line[2:].lstrip()[len("+build") :]
            if not body or body[0].isspace():
                header.plus_build.append(body.strip())


def should_build(header: FileHeader, ctx: BuildContext, directory: str) -> bool:
    """Evaluate the file's build constraints. //go:build wins over +build."""
    try:
        if header.go_build is not None:
            return parse_expr(header.go_build)(ctx.match_tag)
        if header.plus_build:
            return parse_plus_build(header.plus_build)(ctx.match_tag)
    except ConstraintSyntaxError as e:
        where = os.path.join(directory, header.name)
        raise ParseError.syntax(
            f"{where}:{header.go_build_line or 1}:1", f"parsing //go:build line: {e}"
        ) from e
    return True


def import_dir(directory: str, config: BuildConfig | None = None) -> list[str]:
    """List the package's Go files in ``directory``, sorted by name.

    Returned names are bare file names, relative to ``directory``.

    Raises:
        InputError: Missing or unreadable directory, no buildable files, or
            files of more than one package.
        ParseError: A file header or build constraint is malformed.
    """
    config = config or BuildConfig()
    ctx = BuildContext.from_config(config)
    root = Path(directory)

    if not root.exists():
        raise InputError.path_not_found(directory)
    if not root.is_dir():
        raise InputError.unreadable(directory, "not a directory")

    try:
        entries = sorted(os.scandir(root), key=lambda e: e.name)
    except OSError as e:
        raise InputError.unreadable(directory, e.strerror or str(e)) from e

    selected: list[FileHeader] = []
    for entry in entries:
        name = entry.name
        if not entry.is_file() or not name.endswith(GO_GRAMMAR.extension):
            continue
        if name.startswith(("_", ".")):
            continue
        is_test = name.endswith("_test.go")
        if is_test and not config.include_tests:
            continue
        if not ctx.match_file(name):
            log.debug("discovery.skip", file=name, reason="os/arch suffix")
            continue

        header = read_header(root / name)
        if not should_build(header, ctx, directory):
            log.debug("discovery.skip", file=name, reason="build constraints")
            continue
        if "C" in header.imports and not config.cgo_enabled:
            log.debug("discovery.skip", file=name, reason="cgo")
            continue
        if header.package == _DOCUMENTATION_PKG:
            continue
        if is_test and header.package.endswith("_test"):
            # external test package, a separate unit
            continue
        selected.append(header)

    if not selected:
        raise InputError.no_go_files(directory)

    packages = {h.package for h in selected}
    if len(packages) > 1:
        first_by_pkg: dict[str, str] = {}
        for h in selected:
            first_by_pkg.setdefault(h.package, h.name)
        raise InputError.multiple_packages(
            directory, list(first_by_pkg), list(first_by_pkg.values())
        )

    names = [h.name for h in selected]
    log.debug("discovery.files", dir=directory, files=names)
    return names
