"""Named language entities: constants, variables, types, functions, packages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gogen.syntax.positions import NO_POS, Pos

if TYPE_CHECKING:
    from gogen.check.constant import Value
    from gogen.check.info import Package
    from gogen.check.scope import Scope
    from gogen.check.typesys import Type


@dataclass(eq=False)
class Object:
    """Base of all objects. Identity matters; objects are never compared by value."""

    name: str
    pos: Pos = NO_POS
    type: Type | None = None
    pkg: Package | None = None
    parent: Scope | None = field(default=None, repr=False)

    @property
    def exported(self) -> bool:
        return bool(self.name) and self.name[0].isupper()

    @property
    def kind(self) -> str:
        return type(self).__name__.lower()

    def __str__(self) -> str:
        t = f" {self.type}" if self.type is not None else ""
        return f"{self.kind} {self.name}{t}"


@dataclass(eq=False)
class Const(Object):
    value: Value | None = None


@dataclass(eq=False)
class Var(Object):
    is_field: bool = False
    embedded: bool = False
    is_param: bool = False


@dataclass(eq=False)
class TypeName(Object):
    is_alias: bool = False


@dataclass(eq=False)
class Func(Object):
    has_ptr_recv: bool = False

    @property
    def full_name(self) -> str:
        from gogen.check.typesys import Signature

        sig = self.type
        if isinstance(sig, Signature) and sig.recv is not None and sig.recv.type is not None:
            return f"({sig.recv.type}).{self.name}"
        return self.name


@dataclass(eq=False)
class PkgName(Object):
    """An imported package as seen from one file."""

    imported: str = ""
    used: bool = False


@dataclass(eq=False)
class Builtin(Object):
    pass


@dataclass(eq=False)
class Nil(Object):
    pass
