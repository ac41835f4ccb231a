"""Go type representation.

Composite types compare structurally through :func:`identical`; named types
and type parameters are identical only to themselves. Types the checker
cannot know (members of imported packages) are :class:`Opaque`, and any
type built from one is treated as incomplete rather than wrong.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Flag
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gogen.check.objects import Func, TypeName, Var


class Type:
    """Base of all types."""

    def underlying(self) -> Type:
        return self


class BasicInfo(Flag):
    NONE = 0
    BOOLEAN = 1
    INTEGER = 2
    UNSIGNED = 4
    FLOAT = 8
    COMPLEX = 16
    STRING = 32
    UNTYPED = 64

    NUMERIC = INTEGER | FLOAT | COMPLEX
    ORDERED = INTEGER | FLOAT | STRING
    CONST_TYPE = BOOLEAN | NUMERIC | STRING


@dataclass(eq=False)
class Basic(Type):
    name: str
    info: BasicInfo
    size: int = 0  # bits, 0 when not fixed

    @property
    def is_untyped(self) -> bool:
        return BasicInfo.UNTYPED in self.info

    def is_(self, flag: BasicInfo) -> bool:
        return bool(self.info & flag)

    def __str__(self) -> str:
        return self.name


_I = BasicInfo

BOOL = Basic("bool", _I.BOOLEAN)
INT = Basic("int", _I.INTEGER, 64)
INT8 = Basic("int8", _I.INTEGER, 8)
INT16 = Basic("int16", _I.INTEGER, 16)
INT32 = Basic("int32", _I.INTEGER, 32)
INT64 = Basic("int64", _I.INTEGER, 64)
UINT = Basic("uint", _I.INTEGER | _I.UNSIGNED, 64)
UINT8 = Basic("uint8", _I.INTEGER | _I.UNSIGNED, 8)
UINT16 = Basic("uint16", _I.INTEGER | _I.UNSIGNED, 16)
UINT32 = Basic("uint32", _I.INTEGER | _I.UNSIGNED, 32)
UINT64 = Basic("uint64", _I.INTEGER | _I.UNSIGNED, 64)
UINTPTR = Basic("uintptr", _I.INTEGER | _I.UNSIGNED, 64)
FLOAT32 = Basic("float32", _I.FLOAT, 32)
FLOAT64 = Basic("float64", _I.FLOAT, 64)
COMPLEX64 = Basic("complex64", _I.COMPLEX, 64)
COMPLEX128 = Basic("complex128", _I.COMPLEX, 128)
STRING = Basic("string", _I.STRING)

UNTYPED_BOOL = Basic("untyped bool", _I.BOOLEAN | _I.UNTYPED)
UNTYPED_INT = Basic("untyped int", _I.INTEGER | _I.UNTYPED)
UNTYPED_RUNE = Basic("untyped rune", _I.INTEGER | _I.UNTYPED)
UNTYPED_FLOAT = Basic("untyped float", _I.FLOAT | _I.UNTYPED)
UNTYPED_COMPLEX = Basic("untyped complex", _I.COMPLEX | _I.UNTYPED)
UNTYPED_STRING = Basic("untyped string", _I.STRING | _I.UNTYPED)
UNTYPED_NIL = Basic("untyped nil", _I.UNTYPED)

INVALID = Basic("invalid type", _I.NONE)

BASIC_TYPES: tuple[Basic, ...] = (
    BOOL,
    INT,
    INT8,
    INT16,
    INT32,
    INT64,
    UINT,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    UINTPTR,
    FLOAT32,
    FLOAT64,
    COMPLEX64,
    COMPLEX128,
    STRING,
)

_DEFAULTS = {
    UNTYPED_BOOL: BOOL,
    UNTYPED_INT: INT,
    UNTYPED_RUNE: INT32,
    UNTYPED_FLOAT: FLOAT64,
    UNTYPED_COMPLEX: COMPLEX128,
    UNTYPED_STRING: STRING,
}


def default_type(t: Type) -> Type:
    """The type an untyped constant assumes when no other type is implied."""
    if isinstance(t, Basic):
        return _DEFAULTS.get(t, t)
    return t


@dataclass(eq=False)
class Opaque(Type):
    """A type declared in an imported package; its structure is unknown."""

    pkg: str
    name: str

    def __str__(self) -> str:
        return f"{self.pkg}.{self.name}"


@dataclass(eq=False)
class Pointer(Type):
    elem: Type

    def __str__(self) -> str:
        return f"*{self.elem}"


@dataclass(eq=False)
class Slice(Type):
    elem: Type

    def __str__(self) -> str:
        return f"[]{self.elem}"


@dataclass(eq=False)
class Array(Type):
    length: int | None  # None when the length could not be evaluated
    elem: Type

    def __str__(self) -> str:
        n = "?" if self.length is None else str(self.length)
        return f"[{n}]{self.elem}"


@dataclass(eq=False)
class Map(Type):
    key: Type
    elem: Type

    def __str__(self) -> str:
        return f"map[{self.key}]{self.elem}"


@dataclass(eq=False)
class Chan(Type):
    elem: Type
    dir: str = "both"  # both, send, recv

    def __str__(self) -> str:
        prefix = {"both": "chan ", "send": "chan<- ", "recv": "<-chan "}[self.dir]
        return f"{prefix}{self.elem}"


@dataclass(eq=False)
class Tuple(Type):
    vars: list[Var] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.vars)

    def types(self) -> list[Type]:
        return [v.type or INVALID for v in self.vars]

    def __str__(self) -> str:
        return "(" + ", ".join(str(t) for t in self.types()) + ")"


@dataclass(eq=False)
class Signature(Type):
    params: Tuple = field(default_factory=Tuple)
    results: Tuple = field(default_factory=Tuple)
    variadic: bool = False
    recv: Var | None = None
    tparams: list[TypeName] = field(default_factory=list)

    def __str__(self) -> str:
        s = f"func{self.params}"
        if len(self.results) == 1 and not self.results.vars[0].name:
            s += f" {self.results.types()[0]}"
        elif len(self.results):
            s += f" {self.results}"
        return s


@dataclass(eq=False)
class Struct(Type):
    fields: list[Var] = field(default_factory=list)
    complete: bool = True  # False when an embedded field's type is unknown

    def __str__(self) -> str:
        parts = []
        for f in self.fields:
            parts.append(str(f.type) if f.embedded else f"{f.name} {f.type}")
        return "struct{" + "; ".join(parts) + "}"


@dataclass(eq=False)
class Interface(Type):
    methods: list[Func] = field(default_factory=list)
    embeddeds: list[Type] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.methods and not self.embeddeds

    def method_set(self) -> tuple[list[Func], bool]:
        """All methods including embedded ones, and whether the set is complete."""
        methods = list(self.methods)
        complete = True
        for e in self.embeddeds:
            u = e.underlying()
            if isinstance(u, Interface) and u is not self:
                more, ok = u.method_set()
                methods.extend(more)
                complete = complete and ok
            elif not isinstance(u, Basic):
                # unions and opaque constraints
                complete = False
        return methods, complete

    def __str__(self) -> str:
        if self.is_empty:
            return "interface{}"
        parts = [f"{m.name}{str(m.type)[4:]}" for m in self.methods]
        parts += [str(e) for e in self.embeddeds]
        return "interface{" + "; ".join(parts) + "}"


@dataclass(eq=False)
class Named(Type):
    obj: TypeName
    rhs: Type | None = None  # type expression the name was declared with
    methods: list[Func] = field(default_factory=list)

    def underlying(self) -> Type:
        t: Type | None = self.rhs
        seen: set[int] = {id(self)}
        while isinstance(t, Named):
            if id(t) in seen:
                return INVALID
            seen.add(id(t))
            t = t.rhs
        return t if t is not None else INVALID

    def __str__(self) -> str:
        pkg = self.obj.pkg
        if pkg is not None and pkg.name:
            return f"{pkg.name}.{self.obj.name}"
        return self.obj.name


@dataclass(eq=False)
class TypeParam(Type):
    obj: TypeName
    constraint: Type | None = None

    def underlying(self) -> Type:
        return self

    def __str__(self) -> str:
        return self.obj.name


def is_complete(t: Type | None) -> bool:
    """Whether every part of t is known to the checker."""
    if t is None or isinstance(t, (Opaque, TypeParam)) or t is INVALID:
        return False
    u = t.underlying()
    if isinstance(u, Struct):
        return u.complete
    if isinstance(u, Interface):
        return u.method_set()[1]
    return u is not INVALID


def identical(x: Type, y: Type) -> bool:
    """Structural identity for unnamed types, identity for named ones."""
    if x is y:
        return True
    if isinstance(x, Basic) and isinstance(y, Basic):
        return x.name == y.name
    if type(x) is not type(y):
        return False
    if isinstance(x, (Pointer, Slice)):
        return identical(x.elem, y.elem)  # type: ignore[attr-defined]
    if isinstance(x, Array):
        return x.length == y.length and identical(x.elem, y.elem)  # type: ignore[attr-defined]
    if isinstance(x, Map):
        return identical(x.key, y.key) and identical(x.elem, y.elem)  # type: ignore[attr-defined]
    if isinstance(x, Chan):
        return x.dir == y.dir and identical(x.elem, y.elem)  # type: ignore[attr-defined]
    if isinstance(x, Signature):
        assert isinstance(y, Signature)
        return (
            x.variadic == y.variadic
            and _identical_lists(x.params.types(), y.params.types())
            and _identical_lists(x.results.types(), y.results.types())
        )
    if isinstance(x, Struct):
        assert isinstance(y, Struct)
        return len(x.fields) == len(y.fields) and all(
            a.name == b.name and a.embedded == b.embedded and identical(a.type, b.type)  # type: ignore[arg-type]
            for a, b in zip(x.fields, y.fields, strict=True)
        )
    if isinstance(x, Interface):
        assert isinstance(y, Interface)
        (xm, xok), (ym, yok) = x.method_set(), y.method_set()
        if not (xok and yok) or len(xm) != len(ym):
            return False
        xs = sorted(xm, key=lambda m: m.name)
        ys = sorted(ym, key=lambda m: m.name)
        return all(
            a.name == b.name and a.type is not None and b.type is not None and identical(a.type, b.type)
            for a, b in zip(xs, ys, strict=True)
        )
    return False


def _identical_lists(xs: list[Type], ys: list[Type]) -> bool:
    return len(xs) == len(ys) and all(identical(a, b) for a, b in zip(xs, ys, strict=True))


def is_known(t: Type | None, _seen: set[int] | None = None) -> bool:
    """Whether t is built only from types the checker fully knows.

    Imported (opaque) types, type parameters, tuples and arrays of unknown
    length make a type unknown.
    """
    if t is None or t is INVALID or isinstance(t, (Opaque, TypeParam, Tuple)):
        return False
    if isinstance(t, Basic):
        return not t.is_untyped
    seen = _seen if _seen is not None else set()
    if id(t) in seen:
        return True
    seen.add(id(t))
    if isinstance(t, Named):
        return is_known(t.rhs, seen)
    if isinstance(t, (Pointer, Slice, Chan)):
        return is_known(t.elem, seen)
    if isinstance(t, Array):
        return t.length is not None and is_known(t.elem, seen)
    if isinstance(t, Map):
        return is_known(t.key, seen) and is_known(t.elem, seen)
    if isinstance(t, Signature):
        return not t.tparams and all(
            is_known(p, seen) for p in (*t.params.types(), *t.results.types())
        )
    if isinstance(t, Struct):
        return t.complete and all(is_known(f.type, seen) for f in t.fields)
    if isinstance(t, Interface):
        return t.method_set()[1]
    return False
