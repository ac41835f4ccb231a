"""Results of a package check: the semantic model and the package."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

from gogen.core.errors import ErrorCode

if TYPE_CHECKING:
    from gogen.check.constant import Value
    from gogen.check.objects import Object, PkgName
    from gogen.check.scope import Scope
    from gogen.check.typesys import Type
    from gogen.syntax.nodes import Ident, Node, SelectorExpr
    from gogen.syntax.positions import Pos


class Mode(StrEnum):
    """Addressing mode of an evaluated expression."""

    NOVALUE = "novalue"
    BUILTIN = "builtin"
    TYPE = "type"
    CONSTANT = "constant"
    VARIABLE = "variable"
    MAPINDEX = "mapindex"
    VALUE = "value"
    COMMAOK = "commaok"
    NIL = "nil"


@dataclass(frozen=True, slots=True)
class TypeAndValue:
    mode: Mode
    type: Type | None
    value: Value | None = None

    @property
    def is_type(self) -> bool:
        return self.mode is Mode.TYPE

    @property
    def is_value(self) -> bool:
        return self.mode in (
            Mode.CONSTANT,
            Mode.VARIABLE,
            Mode.MAPINDEX,
            Mode.VALUE,
            Mode.COMMAOK,
            Mode.NIL,
        )


class SelectionKind(StrEnum):
    FIELD_VAL = "field"
    METHOD_VAL = "method"
    METHOD_EXPR = "method expr"


@dataclass(frozen=True, slots=True)
class Selection:
    """A resolved ``x.f``: which field or method f denotes."""

    kind: SelectionKind
    recv: Type
    obj: Object
    index: tuple[int, ...]
    indirect: bool

    @property
    def type(self) -> Type | None:
        return self.obj.type


@dataclass(frozen=True)
class Info:
    """Bindings produced by one check, keyed by node identity. Read-only."""

    types: Mapping[Node, TypeAndValue]
    defs: Mapping[Ident, Object | None]
    uses: Mapping[Ident, Object]
    implicits: Mapping[Node, Object]
    selections: Mapping[SelectorExpr, Selection]
    scopes: Mapping[Node, Scope]

    @classmethod
    def freeze(
        cls,
        *,
        types: dict[Node, TypeAndValue],
        defs: dict[Ident, Object | None],
        uses: dict[Ident, Object],
        implicits: dict[Node, Object],
        selections: dict[SelectorExpr, Selection],
        scopes: dict[Node, Scope],
    ) -> Info:
        return cls(
            types=MappingProxyType(types),
            defs=MappingProxyType(defs),
            uses=MappingProxyType(uses),
            implicits=MappingProxyType(implicits),
            selections=MappingProxyType(selections),
            scopes=MappingProxyType(scopes),
        )

    def type_of(self, expr: Node) -> Type | None:
        """Type of an expression, or of the object an identifier denotes."""
        tv = self.types.get(expr)
        if tv is not None:
            return tv.type
        obj = self.object_of(expr)  # type: ignore[arg-type]
        return obj.type if obj is not None else None

    def object_of(self, ident: Ident) -> Object | None:
        """Object an identifier defines or uses."""
        obj = self.defs.get(ident)
        if obj is not None:
            return obj
        return self.uses.get(ident)


@dataclass
class Package:
    """The unit produced by a successful check."""

    path: str
    name: str
    scope: Scope
    imports: list[PkgName] = field(default_factory=list)
    complete: bool = False

    def __str__(self) -> str:
        return f"package {self.name} ({self.path})"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One problem found while checking."""

    pos: Pos
    position: str
    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.position}: {self.message}"
