"""Syntax tree node types.

Trees are built from tree-sitter Go parse trees (see ``parser.py``). Every
named tree-sitter node becomes a :class:`Node` carrying the grammar's node
type as ``kind`` and its position range in the owning ``PositionTable``.
Constructs that callers query or the checker binds get a dedicated subclass
with typed accessors; everything else stays a plain ``Node``.

Nodes compare and hash by identity, so they can key the semantic maps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from gogen.syntax.literals import unquote_string
from gogen.syntax.positions import NO_POS, Pos


class Token(StrEnum):
    """Declaration keyword of a GenDecl."""

    IMPORT = "import"
    CONST = "const"
    TYPE = "type"
    VAR = "var"


@dataclass(eq=False)
class Node:
    """A syntax tree node."""

    kind: str
    pos: Pos = NO_POS
    end: Pos = NO_POS
    children: list[Node] = field(default_factory=list, repr=False)
    fields: dict[str, list[Node]] = field(default_factory=dict, repr=False)
    op: str | None = None  # operator token of unary/binary/assignment nodes

    def child(self, name: str) -> Node | None:
        """First child recorded under a grammar field name."""
        nodes = self.fields.get(name)
        return nodes[0] if nodes else None

    def child_list(self, name: str) -> list[Node]:
        return list(self.fields.get(name, ()))


IDENT_KINDS = frozenset(
    {
        "identifier",
        "type_identifier",
        "field_identifier",
        "package_identifier",
        "label_name",
        "blank_identifier",
        "dot",
        "true",
        "false",
        "nil",
        "iota",
    }
)

LITERAL_KINDS = frozenset(
    {
        "int_literal",
        "float_literal",
        "imaginary_literal",
        "rune_literal",
        "interpreted_string_literal",
        "raw_string_literal",
    }
)


@dataclass(eq=False)
class Ident(Node):
    """An identifier. ``kind`` tells which grammar role it was parsed in."""

    name: str = ""

    @property
    def is_blank(self) -> bool:
        return self.name == "_"


@dataclass(eq=False)
class BasicLit(Node):
    """A literal of basic type; ``value`` is the literal source text."""

    value: str = ""

    def string_value(self) -> str:
        """Unquoted value of a string literal."""
        return unquote_string(self.value)


@dataclass(eq=False)
class File(Node):
    """Root of one source file's tree."""

    filename: str = ""

    @property
    def name(self) -> Ident | None:
        """Package name from the package clause."""
        for child in self.children:
            if child.kind == "package_clause":
                for ident in child.children:
                    if isinstance(ident, Ident):
                        return ident
        return None

    @property
    def decls(self) -> list[Node]:
        """Top-level declarations in source order."""
        return [c for c in self.children if isinstance(c, (GenDecl, FuncDecl))]

    @property
    def imports(self) -> list[ImportSpec]:
        return [
            spec
            for decl in self.children
            if isinstance(decl, GenDecl) and decl.tok is Token.IMPORT
            for spec in decl.specs
            if isinstance(spec, ImportSpec)
        ]


@dataclass(eq=False)
class GenDecl(Node):
    """An import, const, type or var declaration, grouped or not."""

    tok: Token = Token.VAR
    grouped: bool = False

    @property
    def specs(self) -> list[Node]:
        return [c for c in self.children if isinstance(c, (ImportSpec, ValueSpec, TypeSpec))]


@dataclass(eq=False)
class ImportSpec(Node):
    @property
    def name(self) -> Ident | None:
        """Explicit local name (alias, ``.`` or ``_``), if any."""
        n = self.child("name")
        return n if isinstance(n, Ident) else None

    @property
    def path(self) -> BasicLit:
        p = self.child("path")
        assert isinstance(p, BasicLit)
        return p

    @property
    def path_value(self) -> str:
        return self.path.string_value()


@dataclass(eq=False)
class ValueSpec(Node):
    """A const or var spec: ``names [type] [= values]``."""

    tok: Token = Token.VAR

    @property
    def names(self) -> list[Ident]:
        return [n for n in self.child_list("name") if isinstance(n, Ident)]

    @property
    def type(self) -> Node | None:
        return self.child("type")

    @property
    def values(self) -> list[Node]:
        return self.child_list("value")


@dataclass(eq=False)
class TypeSpec(Node):
    """A type definition (``type T U``) or alias (``type T = U``)."""

    @property
    def name(self) -> Ident:
        n = self.child("name")
        assert isinstance(n, Ident)
        return n

    @property
    def type_params(self) -> Node | None:
        return self.child("type_parameters")

    @property
    def type(self) -> Node | None:
        return self.child("type")

    @property
    def is_alias(self) -> bool:
        return self.kind == "type_alias"


@dataclass(eq=False)
class FuncDecl(Node):
    """A function or method declaration."""

    @property
    def recv(self) -> Node | None:
        """Receiver parameter list; None for free functions."""
        return self.child("receiver")

    @property
    def name(self) -> Ident:
        n = self.child("name")
        assert isinstance(n, Ident)
        return n

    @property
    def type_params(self) -> Node | None:
        return self.child("type_parameters")

    @property
    def params(self) -> Node | None:
        return self.child("parameters")

    @property
    def result(self) -> Node | None:
        return self.child("result")

    @property
    def body(self) -> Node | None:
        return self.child("body")

    @property
    def is_method(self) -> bool:
        return self.recv is not None


@dataclass(eq=False)
class SelectorExpr(Node):
    """``x.sel``."""

    @property
    def x(self) -> Node:
        n = self.child("operand")
        assert n is not None
        return n

    @property
    def sel(self) -> Ident:
        n = self.child("field")
        assert isinstance(n, Ident)
        return n
