"""Field and method lookup, including promotion through embedded fields."""

from __future__ import annotations

from dataclasses import dataclass

from gogen.check import typesys as T
from gogen.check.objects import Func, Object, Var


@dataclass(frozen=True, slots=True)
class LookupResult:
    obj: Object | None
    index: tuple[int, ...] = ()
    indirect: bool = False
    complete: bool = True  # False when unknown types may hide the name
    ambiguous: bool = False


def lookup_field_or_method(typ: T.Type, name: str) -> LookupResult:
    """Find the field or method ``name`` of ``typ``.

    The shallowest match wins; two matches at the same depth are ambiguous.
    """
    indirect = False
    if isinstance(typ, T.Pointer) and (
        isinstance(typ.elem, (T.Named, T.TypeParam, T.Opaque))
        or isinstance(typ.elem.underlying(), T.Struct)
    ):
        typ = typ.elem
        indirect = True

    current: list[tuple[T.Type, tuple[int, ...], bool]] = [(typ, (), indirect)]
    seen: set[int] = set()
    complete = True

    while current:
        found: list[tuple[Object, tuple[int, ...], bool]] = []
        following: list[tuple[T.Type, tuple[int, ...], bool]] = []

        for t, path, ind in current:
            if isinstance(t, T.Named):
                if id(t) in seen:
                    continue
                seen.add(id(t))
                for i, m in enumerate(t.methods):
                    if m.name == name:
                        found.append((m, (*path, i), ind))
                under = t.underlying()
            else:
                under = t.underlying()

            if isinstance(under, T.Struct):
                if not under.complete:
                    complete = False
                for i, f in enumerate(under.fields):
                    if f.name == name:
                        found.append((f, (*path, i), ind))
                    if f.embedded and f.type is not None:
                        ft = f.type
                        ptr = False
                        if isinstance(ft, T.Pointer):
                            ft, ptr = ft.elem, True
                        if isinstance(ft, (T.Opaque, T.TypeParam)):
                            complete = False
                        else:
                            following.append((ft, (*path, i), ind or ptr))
            elif isinstance(under, T.Interface):
                methods, ok = under.method_set()
                complete = complete and ok
                for i, m in enumerate(methods):
                    if m.name == name:
                        found.append((m, (*path, i), ind))
            elif not isinstance(under, T.Basic) or under is T.INVALID:
                if not isinstance(under, (T.Pointer, T.Slice, T.Array, T.Map, T.Chan, T.Signature)):
                    complete = False

        if len(found) == 1:
            obj, index, ind = found[0]
            return LookupResult(obj=obj, index=index, indirect=ind, complete=True)
        if len(found) > 1:
            return LookupResult(obj=None, complete=True, ambiguous=True)
        current = following

    return LookupResult(obj=None, complete=complete)


def method_signature(fn: Func) -> T.Signature | None:
    """The method's signature without its receiver."""
    sig = fn.type
    if not isinstance(sig, T.Signature):
        return None
    return T.Signature(params=sig.params, results=sig.results, variadic=sig.variadic)


def method_expr_signature(recv: T.Type, fn: Func) -> T.Signature | None:
    """Signature of ``T.m``: the receiver becomes the first parameter."""
    sig = fn.type
    if not isinstance(sig, T.Signature):
        return None
    params = [Var(name="", type=recv, is_param=True), *sig.params.vars]
    return T.Signature(params=T.Tuple(params), results=sig.results, variadic=sig.variadic)
