"""Whole-package semantic resolution of Go source."""

from gogen.check.checker import Checker, check_package, default_package_name
from gogen.check.info import (
    Diagnostic,
    Info,
    Mode,
    Package,
    Selection,
    SelectionKind,
    TypeAndValue,
)
from gogen.check.lookup import LookupResult, lookup_field_or_method
from gogen.check.objects import (
    Builtin,
    Const,
    Func,
    Nil,
    Object,
    PkgName,
    TypeName,
    Var,
)
from gogen.check.scope import Scope
from gogen.check.universe import UNIVERSE

__all__ = [
    # Checking
    "Checker",
    "check_package",
    "default_package_name",
    # Results
    "Diagnostic",
    "Info",
    "Mode",
    "Package",
    "Selection",
    "SelectionKind",
    "TypeAndValue",
    # Objects and scopes
    "Builtin",
    "Const",
    "Func",
    "LookupResult",
    "Nil",
    "Object",
    "PkgName",
    "Scope",
    "TypeName",
    "UNIVERSE",
    "Var",
    "lookup_field_or_method",
]
