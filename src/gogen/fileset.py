"""FileSet: one parsed and resolved Go package, ready for structural queries.

A FileSet is built in one step: find the files, parse each against a shared
position table, then resolve all of them together as one package. Any
failure along the way raises and no FileSet exists; a FileSet that exists
is complete and never changes.

Usage::

    fs = FileSet.from_dir("./pkg")
    fs.each_type(lambda spec: print(spec.name.name) or True)
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from gogen.build.discovery import import_dir
from gogen.check.checker import check_package
from gogen.check.info import Info, Package
from gogen.config.models import GoGenConfig
from gogen.core.errors import GoGenError, InputError
from gogen.core.logging import analysis_context, get_logger, set_analysis_id
from gogen.syntax.grammar import GO_GRAMMAR
from gogen.syntax.nodes import File, FuncDecl, GenDecl, Ident, Node, Token, TypeSpec, ValueSpec
from gogen.syntax.parser import parse_file
from gogen.syntax.positions import Position, PositionTable
from gogen.traversal import Visit, iter_nodes, traverse
from gogen.traversal import inspect as inspect_trees
from gogen.traversal import walk as walk_trees

log = get_logger("fileset")

CURRENT_DIR = "."


class InputKind(Enum):
    """Shape of the names handed to :meth:`FileSet.from_names`."""

    CURRENT_DIR = "current_dir"
    DIRECTORY = "directory"
    FILES = "files"


def classify_names(names: Sequence[str]) -> InputKind:
    """Decide how a list of names is analyzed.

    Raises:
        InputError: A single name that does not exist.
    """
    if not names:
        return InputKind.CURRENT_DIR
    if len(names) > 1:
        return InputKind.FILES
    path = Path(names[0])
    if path.is_dir():
        return InputKind.DIRECTORY
    if path.exists():
        return InputKind.FILES
    raise InputError.path_not_found(names[0])


@dataclass(frozen=True)
class FileSet:
    """A package's files, their syntax trees and its semantic model.

    ``files`` and ``ast_files`` have the same length and order. Construct
    with :meth:`from_names`, :meth:`from_dir` or :meth:`from_texts`.
    """

    dir: str
    files: tuple[str, ...]
    positions: PositionTable
    ast_files: tuple[File, ...]
    info: Info
    package: Package

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_names(cls, names: Sequence[str] = (), config: GoGenConfig | None = None) -> FileSet:
        """Analyze the current directory, one directory, or a list of files.

        No names means the current directory. A single existing directory is
        analyzed as a package directory. A single existing file, or two or
        more names, are parsed as given; ``dir`` is the first file's parent.

        Raises:
            InputError: A name does not exist or cannot be read, or
                discovery finds no package.
            ParseError: A file is not valid Go.
            ResolveError: The files do not form a consistent package.
        """
        names = list(names)
        try:
            kind = classify_names(names)
        except InputError as e:
            log.warning("fileset.input_failed", names=names, error=e.error_name, message=e.message)
            raise
        if kind is InputKind.CURRENT_DIR:
            return cls.from_dir(CURRENT_DIR, config)
        if kind is InputKind.DIRECTORY:
            return cls.from_dir(names[0], config)
        set_analysis_id()
        directory = os.path.dirname(names[0]) or CURRENT_DIR
        return cls._build(directory, [(name, None) for name in names], config)

    @classmethod
    def from_dir(cls, directory: str, config: GoGenConfig | None = None) -> FileSet:
        """Analyze the package in ``directory``.

        Raises:
            InputError: Missing or unreadable directory, no buildable Go
                files, or more than one package.
            ParseError: A file is not valid Go.
            ResolveError: The files do not form a consistent package.
        """
        config = config or GoGenConfig()
        set_analysis_id()
        try:
            names = import_dir(directory, config.build)
        except GoGenError as e:
            log.warning("fileset.discovery_failed", dir=directory, error=e.error_name, message=e.message)
            raise
        if directory != CURRENT_DIR:
            names = [os.path.join(directory, name) for name in names]
        log.debug("fileset.discovered", dir=directory, files=names)
        return cls._build(directory, [(name, None) for name in names], config)

    @classmethod
    def from_texts(cls, *texts: str | bytes, config: GoGenConfig | None = None) -> FileSet:
        """Analyze source texts as the files ``0.go``, ``1.go``, ... of one package.

        Nothing is read from disk.

        Raises:
            ParseError: A text is not valid Go.
            ResolveError: The texts do not form a consistent package.
        """
        set_analysis_id()
        sources = [(f"{i}{GO_GRAMMAR.extension}", text) for i, text in enumerate(texts)]
        return cls._build(CURRENT_DIR, sources, config)

    @classmethod
    def _build(
        cls,
        directory: str,
        sources: list[tuple[str, str | bytes | None]],
        config: GoGenConfig | None,
    ) -> FileSet:
        config = config or GoGenConfig()
        with analysis_context(package_dir=directory):
            table, trees, info, package = _analyze(directory, sources, config)
        return cls(
            dir=directory,
            files=tuple(name for name, _ in sources),
            positions=table,
            ast_files=tuple(trees),
            info=info,
            package=package,
        )

    # =========================================================================
    # Traversal
    # =========================================================================

    def walk(self, visitor: Callable[[Node], object]) -> None:
        """Call ``visitor`` on every node of every file, pre-order."""
        walk_trees(visitor, self.ast_files)

    def inspect(self, predicate: Callable[[Node], bool]) -> None:
        """Call ``predicate`` on every reached node; falsy prunes its children."""
        inspect_trees(predicate, self.ast_files)

    def nodes(self) -> Iterator[Node]:
        """Every node of every file, in traversal order."""
        return iter_nodes(self.ast_files)

    # =========================================================================
    # Declaration queries
    # =========================================================================

    def each_type(self, fn: Callable[[TypeSpec], bool]) -> bool:
        """Offer every type spec, aliases included, to ``fn``.

        Declarations nested in function bodies are offered too, in source
        order. ``fn`` returning False stops the search.

        Returns:
            True if every type spec was offered, False if ``fn`` stopped.
        """

        def visit(node: Node) -> Visit:
            if isinstance(node, TypeSpec) and not fn(node):
                return Visit.STOP
            return Visit.DESCEND

        return traverse(visit, self.ast_files)

    def each_const(self, fn: Callable[[ValueSpec], bool]) -> bool:
        """Offer every const spec to ``fn``, one per spec of a group."""
        return self._each_value_spec(Token.CONST, fn)

    def each_var(self, fn: Callable[[ValueSpec], bool]) -> bool:
        """Offer every var spec to ``fn``, one per spec of a group."""
        return self._each_value_spec(Token.VAR, fn)

    def _each_value_spec(self, tok: Token, fn: Callable[[ValueSpec], bool]) -> bool:
        def visit(node: Node) -> Visit:
            if isinstance(node, GenDecl) and node.tok is tok:
                for spec in node.specs:
                    if isinstance(spec, ValueSpec) and not fn(spec):
                        return Visit.STOP
            return Visit.DESCEND

        return traverse(visit, self.ast_files)

    def each_func(self, fn: Callable[[FuncDecl], bool]) -> bool:
        """Offer every function and method declaration to ``fn``.

        Function literals are not declarations and are never offered.
        """

        def visit(node: Node) -> Visit:
            if isinstance(node, FuncDecl) and not fn(node):
                return Visit.STOP
            return Visit.DESCEND

        return traverse(visit, self.ast_files)

    def lookup_type(self, name: str) -> TypeSpec | None:
        """The package-level type spec declaring ``name``."""
        for decl in self._top_level(GenDecl):
            if decl.tok is Token.TYPE:
                for spec in decl.specs:
                    if isinstance(spec, TypeSpec) and spec.name.name == name:
                        return spec
        return None

    def lookup_value(self, name: str) -> ValueSpec | None:
        """The package-level const or var spec declaring ``name``."""
        for decl in self._top_level(GenDecl):
            if decl.tok not in (Token.CONST, Token.VAR):
                continue
            for spec in decl.specs:
                if isinstance(spec, ValueSpec) and any(n.name == name for n in spec.names):
                    return spec
        return None

    def lookup_func(self, name: str, recv: str | None = None) -> FuncDecl | None:
        """The function ``name``, or the method ``name`` of type ``recv``."""
        for decl in self._top_level(FuncDecl):
            if decl.name.name != name:
                continue
            if recv is None and decl.recv is None:
                return decl
            if recv is not None and decl.recv is not None and _receiver_name(decl) == recv:
                return decl
        return None

    def _top_level(self, kind: type[Node]) -> Iterator[Node]:
        for tree in self.ast_files:
            for decl in tree.decls:
                if isinstance(decl, kind):
                    yield decl

    def position(self, node: Node) -> Position:
        """File, line and column of a node's start."""
        return self.positions.position(node.pos)


def _analyze(
    directory: str, sources: list[tuple[str, str | bytes | None]], config: GoGenConfig
) -> tuple[PositionTable, list[File], Info, Package]:
    """Parse every source against one position table, then check them as one package."""
    table = PositionTable()
    trees: list[File] = []
    for name, src in sources:
        try:
            trees.append(parse_file(table, name, src))
        except GoGenError as e:
            log.warning("fileset.parse_failed", file=name, error=e.error_name, message=e.message)
            raise
    log.debug("fileset.parsed", files=len(trees))

    try:
        info, package = check_package(directory, table, trees, config.check)
    except GoGenError as e:
        log.warning(
            "fileset.check_failed",
            error=e.error_name,
            message=e.message,
            errors=len(e.details.get("errors", ())),
        )
        raise
    log.debug("fileset.checked", package=package.name, defs=len(info.defs))
    return table, trees, info, package


def _receiver_name(decl: FuncDecl) -> str | None:
    """Base type name of a method's receiver, without ``*`` or type arguments."""
    recv = decl.recv
    param = next((c for c in recv.children if c.child("type") is not None), None) if recv else None
    t = param.child("type") if param is not None else None
    while t is not None and not isinstance(t, Ident):
        if t.kind == "generic_type":
            t = t.child("type")
        else:
            t = t.children[0] if t.children else None
    return t.name if t is not None else None


def new_file_set(*names: str, config: GoGenConfig | None = None) -> FileSet:
    """Shorthand for :meth:`FileSet.from_names`."""
    return FileSet.from_names(names, config)


def file_set_from_dir(directory: str, config: GoGenConfig | None = None) -> FileSet:
    """Shorthand for :meth:`FileSet.from_dir`."""
    return FileSet.from_dir(directory, config)


def new_file_set_from_texts(*texts: str | bytes, config: GoGenConfig | None = None) -> FileSet:
    """Shorthand for :meth:`FileSet.from_texts`."""
    return FileSet.from_texts(*texts, config=config)
