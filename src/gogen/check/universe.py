"""The universe scope: predeclared types, constants, nil and builtins."""

from __future__ import annotations

from gogen.check import typesys as T
from gogen.check.constant import make_bool, make_int
from gogen.check.objects import Builtin, Const, Func, Nil, TypeName, Var
from gogen.check.scope import Scope

BUILTINS = (
    "append",
    "cap",
    "clear",
    "close",
    "complex",
    "copy",
    "delete",
    "imag",
    "len",
    "make",
    "max",
    "min",
    "new",
    "panic",
    "print",
    "println",
    "real",
    "recover",
)


def _build() -> tuple[Scope, Const, T.Named, T.Interface]:
    scope = Scope(parent=None, kind="universe")

    for basic in T.BASIC_TYPES:
        obj = TypeName(name=basic.name, type=basic)
        scope.insert(obj)
    scope.insert(TypeName(name="byte", type=T.UINT8, is_alias=True))
    scope.insert(TypeName(name="rune", type=T.INT32, is_alias=True))

    empty = T.Interface()
    scope.insert(TypeName(name="any", type=empty, is_alias=True))

    error_obj = TypeName(name="error")
    error_type = T.Named(obj=error_obj)
    error_obj.type = error_type
    error_method = Func(
        name="Error",
        type=T.Signature(results=T.Tuple([Var(name="", type=T.STRING)])),
    )
    error_type.rhs = T.Interface(methods=[error_method])
    scope.insert(error_obj)

    comparable_obj = TypeName(name="comparable")
    comparable_obj.type = T.Named(obj=comparable_obj, rhs=T.Interface())
    scope.insert(comparable_obj)

    scope.insert(Const(name="true", type=T.UNTYPED_BOOL, value=make_bool(True)))
    scope.insert(Const(name="false", type=T.UNTYPED_BOOL, value=make_bool(False)))
    iota = Const(name="iota", type=T.UNTYPED_INT, value=make_int(0))
    scope.insert(iota)
    scope.insert(Nil(name="nil", type=T.UNTYPED_NIL))

    for name in BUILTINS:
        scope.insert(Builtin(name=name))

    return scope, iota, error_type, empty


UNIVERSE, IOTA, ERROR_TYPE, EMPTY_INTERFACE = _build()
