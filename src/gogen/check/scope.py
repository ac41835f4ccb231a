"""Lexical scopes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gogen.syntax.positions import NO_POS, Pos

if TYPE_CHECKING:
    from gogen.check.objects import Object


@dataclass(eq=False)
class Scope:
    """A set of declared names with a link to the enclosing scope.

    ``kind`` names the construct that opened the scope: universe, package,
    file, type, function, block, if, for, switch, select, case.
    """

    parent: Scope | None
    kind: str
    pos: Pos = NO_POS
    end: Pos = NO_POS
    children: list[Scope] = field(default_factory=list, repr=False)
    _elems: dict[str, Object] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        # the universe is shared by every check and never records children
        if self.parent is not None and self.parent.kind != "universe":
            self.parent.children.append(self)

    def __len__(self) -> int:
        return len(self._elems)

    def __contains__(self, name: str) -> bool:
        return name in self._elems

    def names(self) -> list[str]:
        """Declared names in sorted order."""
        return sorted(self._elems)

    def lookup(self, name: str) -> Object | None:
        """The object declared with name in this scope only."""
        return self._elems.get(name)

    def lookup_parent(self, name: str) -> tuple[Scope | None, Object | None]:
        """Search this scope and its ancestors; return (scope, object)."""
        s: Scope | None = self
        while s is not None:
            obj = s._elems.get(name)
            if obj is not None:
                return s, obj
            s = s.parent
        return None, None

    def insert(self, obj: Object) -> Object | None:
        """Declare obj. If the name is taken, leave the scope unchanged and
        return the existing object instead.
        """
        existing = self._elems.get(obj.name)
        if existing is not None:
            return existing
        self._elems[obj.name] = obj
        if obj.parent is None:
            obj.parent = self
        return None

    def contains(self, pos: Pos) -> bool:
        return self.pos <= pos <= self.end

    def innermost(self, pos: Pos) -> Scope | None:
        """The innermost scope under this one containing pos."""
        if self.kind not in ("universe", "package") and not self.contains(pos):
            return None
        for child in self.children:
            found = child.innermost(pos)
            if found is not None:
                return found
        return self
