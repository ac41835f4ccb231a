"""Whole-package semantic resolution.

:func:`check_package` binds every identifier in a set of parsed files to the
object it denotes, records expression types and constant values, and
reports the inconsistencies it finds. Imported packages are not loaded:
their members are opaque, so nothing reached through an import can cause
an error.

Package-level declarations are resolved lazily and in dependency order,
so a constant may refer to one declared later or in another file. Function
bodies are checked after every package-level object has a type.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from gogen.check import constant as C
from gogen.check import typesys as T
from gogen.check.info import (
    Diagnostic,
    Info,
    Mode,
    Package,
    Selection,
    SelectionKind,
    TypeAndValue,
)
from gogen.check.lookup import lookup_field_or_method, method_expr_signature, method_signature
from gogen.check.objects import Builtin, Const, Func, Nil, Object, PkgName, TypeName, Var
from gogen.check.scope import Scope
from gogen.check.universe import EMPTY_INTERFACE, IOTA, UNIVERSE
from gogen.config.models import CheckConfig
from gogen.core.errors import ErrorCode, ResolveError
from gogen.core.logging import get_logger
from gogen.syntax.literals import encode_go_string
from gogen.syntax.nodes import (
    BasicLit,
    File,
    FuncDecl,
    GenDecl,
    Ident,
    ImportSpec,
    Node,
    SelectorExpr,
    Token,
    TypeSpec,
    ValueSpec,
)
from gogen.syntax.positions import Pos, PositionTable
from gogen.traversal import iter_nodes

log = get_logger("check.checker")

_TYPE_KINDS = frozenset(
    {
        "type_identifier",
        "qualified_type",
        "pointer_type",
        "slice_type",
        "array_type",
        "implicit_length_array_type",
        "map_type",
        "channel_type",
        "function_type",
        "struct_type",
        "interface_type",
        "generic_type",
        "parenthesized_type",
        "negated_type",
        "type_elem",
        "type_constraint",
        "union_type",
    }
)

_PARAM_KINDS = frozenset({"parameter_declaration", "variadic_parameter_declaration"})

_COMPARISONS = frozenset({"==", "!=", "<", "<=", ">", ">="})

_NOOP_STMTS = frozenset(
    {
        "empty_statement",
        "break_statement",
        "continue_statement",
        "goto_statement",
        "fallthrough_statement",
    }
)

_LITERAL_TYPES: dict[str, T.Basic] = {
    "int_literal": T.UNTYPED_INT,
    "float_literal": T.UNTYPED_FLOAT,
    "imaginary_literal": T.UNTYPED_COMPLEX,
    "rune_literal": T.UNTYPED_RUNE,
    "interpreted_string_literal": T.UNTYPED_STRING,
    "raw_string_literal": T.UNTYPED_STRING,
}

_UNTYPED_RANK = {
    T.UNTYPED_INT: 1,
    T.UNTYPED_RUNE: 2,
    T.UNTYPED_FLOAT: 3,
    T.UNTYPED_COMPLEX: 4,
}

_VERSION_SUFFIX = re.compile(r"^v[0-9]+$")


@dataclass(slots=True)
class Operand:
    """An evaluated expression. ``type`` is None when it cannot be known."""

    mode: Mode
    type: T.Type | None = None
    value: C.Value | None = None
    obj: Object | None = None

    @property
    def is_untyped(self) -> bool:
        return isinstance(self.type, T.Basic) and self.type.is_untyped

    @property
    def is_constant(self) -> bool:
        return self.mode is Mode.CONSTANT and self.value is not None


@dataclass(eq=False)
class _DeclInfo:
    """Where and how a package-level object was declared."""

    scope: Scope  # file scope of the declaration
    node: Node  # ValueSpec, TypeSpec or FuncDecl
    type_expr: Node | None = None
    init: Node | None = None
    index: int = 0  # position among names sharing one multi-value init
    multi: bool = False
    iota: int = 0


def check_package(
    path: str,
    table: PositionTable,
    files: list[File],
    config: CheckConfig | None = None,
) -> tuple[Info, Package]:
    """Resolve a package made of ``files``.

    Args:
        path: Package path recorded on the result.
        table: Position table the files were parsed into.
        files: Parsed files, in the order their diagnostics should tie-break.
        config: Check options. Defaults apply when omitted.

    Returns:
        The semantic model and the checked package.

    Raises:
        ResolveError: The package is inconsistent. Carries the first
            diagnostic by position, with all of them in ``details``.
    """
    return Checker(path, table, files, config).check()


def default_package_name(path: str) -> str:
    """Local name an import binds when it has no explicit name.

    Without loading the package this is a guess from the path: the last
    element, skipping a major-version suffix, minus ``go-``/``-go``
    decorations and anything after a dot.
    """
    elems = [e for e in path.split("/") if e]
    if not elems:
        return path
    last = elems[-1]
    if _VERSION_SUFFIX.match(last) and len(elems) > 1:
        last = elems[-2]
    if last.startswith("go-"):
        last = last[3:]
    for suffix in ("-go", ".go"):
        if last.endswith(suffix):
            last = last[: -len(suffix)]
    last = last.split(".")[0]
    return last.replace("-", "_") or path


class Checker:
    """Checks one package. Use :func:`check_package`."""

    def __init__(
        self,
        path: str,
        table: PositionTable,
        files: list[File],
        config: CheckConfig | None = None,
    ) -> None:
        self.path = path
        self.table = table
        self.files = files
        self.config = config or CheckConfig()
        self.pkg = Package(path=path, name="", scope=Scope(UNIVERSE, "package"))

        self.types: dict[Node, TypeAndValue] = {}
        self.defs: dict[Ident, Object | None] = {}
        self.uses: dict[Ident, Object] = {}
        self.implicits: dict[Node, Object] = {}
        self.selections: dict[SelectorExpr, Selection] = {}
        self.scopes: dict[Node, Scope] = {}
        self.diagnostics: list[Diagnostic] = []

        self._reported: set[tuple[Pos, str]] = set()
        self._decls: dict[Object, _DeclInfo] = {}
        self._state: dict[Object, str] = {}
        self._methods: list[tuple[FuncDecl, Scope]] = []
        self._bodies: list[tuple[FuncDecl, Scope, T.Signature]] = []
        self._imports: list[tuple[PkgName, ImportSpec]] = []
        self._dot_imports: dict[Scope, list[PkgName]] = {}
        self._multi_inits: dict[Node, list[Operand]] = {}
        self._locals: list[Var] = []
        self._used: set[Var] = set()
        self._iota: C.Value | None = None
        self._sigs: list[T.Signature] = []

    def check(self) -> tuple[Info, Package]:
        self._collect_objects()
        self._package_objects()
        for decl, scope, sig in self._bodies:
            assert decl.body is not None
            self._func_body(decl.body, scope, sig)
        self._unused_imports()
        self._unused_variables()

        if self.diagnostics:
            ordered = sorted(self.diagnostics, key=lambda d: d.pos)
            raise ResolveError.from_diagnostics(ordered[: self.config.max_errors])

        self.pkg.complete = True
        log.debug(
            "check.complete",
            package=self.pkg.name,
            defs=len(self.defs),
            uses=len(self.uses),
        )
        info = Info.freeze(
            types=self.types,
            defs=self.defs,
            uses=self.uses,
            implicits=self.implicits,
            selections=self.selections,
            scopes=self.scopes,
        )
        return info, self.pkg

    def error(self, at: Node | Pos, code: ErrorCode, message: str) -> None:
        pos = at if isinstance(at, int) else at.pos
        if (pos, message) in self._reported:
            return
        self._reported.add((pos, message))
        self.diagnostics.append(
            Diagnostic(
                pos=pos,
                position=str(self.table.position(pos)),
                code=code,
                message=message,
            )
        )

    # =========================================================================
    # Package-level objects
    # =========================================================================

    def _collect_objects(self) -> None:
        file_scopes: list[Scope] = []
        for file in self.files:
            ident = file.name
            name = ident.name if ident is not None else ""
            if ident is not None:
                self.defs[ident] = None
            if not self.pkg.name:
                self.pkg.name = name
            elif name != self.pkg.name:
                self.error(
                    ident or file,
                    ErrorCode.PACKAGE_MISMATCH,
                    f"package {name}; expected package {self.pkg.name}",
                )
                continue

            fscope = Scope(self.pkg.scope, "file", file.pos, file.end)
            self.scopes[file] = fscope
            file_scopes.append(fscope)

            for decl in file.decls:
                if isinstance(decl, FuncDecl):
                    self._collect_func(decl, fscope)
                    continue
                assert isinstance(decl, GenDecl)
                if decl.tok is Token.IMPORT:
                    for spec in decl.specs:
                        assert isinstance(spec, ImportSpec)
                        self._declare_import(spec, fscope)
                elif decl.tok is Token.CONST:
                    for spec, iota, texpr, values in self._const_specs(decl):
                        for i, name_ident in enumerate(spec.names):
                            obj = Const(name=name_ident.name, pos=name_ident.pos, pkg=self.pkg)
                            self._decls[obj] = _DeclInfo(
                                scope=fscope,
                                node=spec,
                                type_expr=texpr,
                                init=values[i] if i < len(values) else None,
                                iota=iota,
                            )
                            self._declare_pkg(name_ident, obj)
                elif decl.tok is Token.VAR:
                    for spec in decl.specs:
                        assert isinstance(spec, ValueSpec)
                        self._collect_vars(spec, fscope)
                else:
                    for spec in decl.specs:
                        assert isinstance(spec, TypeSpec)
                        name_ident = spec.name
                        tn = TypeName(
                            name=name_ident.name,
                            pos=name_ident.pos,
                            pkg=self.pkg,
                            is_alias=spec.is_alias,
                        )
                        if not spec.is_alias:
                            tn.type = T.Named(obj=tn)
                        self._decls[tn] = _DeclInfo(scope=fscope, node=spec)
                        self._declare_pkg(name_ident, tn)

        for fscope in file_scopes:
            for name in fscope.names():
                obj = self.pkg.scope.lookup(name)
                imported = fscope.lookup(name)
                if obj is not None and isinstance(imported, PkgName):
                    self.error(
                        obj.pos,
                        ErrorCode.REDECLARED,
                        f"{name} already declared through import of package {imported.imported}",
                    )

    def _collect_vars(self, spec: ValueSpec, fscope: Scope) -> None:
        names, values = spec.names, spec.values
        multi = len(values) == 1 and len(names) > 1
        if values and not multi and len(values) != len(names):
            self._assign_mismatch(spec, len(names), len(values))
        for i, name_ident in enumerate(names):
            if multi:
                init = values[0]
            else:
                init = values[i] if i < len(values) else None
            obj = Var(name=name_ident.name, pos=name_ident.pos, pkg=self.pkg)
            self._decls[obj] = _DeclInfo(
                scope=fscope,
                node=spec,
                type_expr=spec.type,
                init=init,
                index=i,
                multi=multi,
            )
            self._declare_pkg(name_ident, obj)

    def _collect_func(self, decl: FuncDecl, fscope: Scope) -> None:
        if decl.recv is not None:
            self._methods.append((decl, fscope))
            return
        ident = decl.name
        obj = Func(name=ident.name, pos=ident.pos, pkg=self.pkg)
        self._decls[obj] = _DeclInfo(scope=fscope, node=decl)
        if ident.name == "init":
            # init functions are never declared; they cannot be referred to
            self.defs[ident] = obj
            if decl.type_params is not None:
                self.error(ident, ErrorCode.INVALID_DECL, "func init must have no type parameters")
            if decl.body is None:
                self.error(ident, ErrorCode.INVALID_DECL, "missing function body")
            return
        self._declare_pkg(ident, obj)

    def _declare_pkg(self, ident: Ident, obj: Object) -> None:
        self.defs[ident] = obj
        if ident.is_blank:
            return
        if self.pkg.scope.insert(obj) is not None:
            self.error(ident, ErrorCode.REDECLARED, f"{ident.name} redeclared in this block")

    def _declare_local(self, scope: Scope, ident: Ident, obj: Object) -> None:
        if ident.is_blank:
            return
        if scope.insert(obj) is not None:
            self.error(ident, ErrorCode.REDECLARED, f"{ident.name} redeclared in this block")

    def _declare_import(self, spec: ImportSpec, fscope: Scope) -> None:
        try:
            path = spec.path_value
        except ValueError:
            self.error(spec.path, ErrorCode.INVALID_DECL, f"invalid import path: {spec.path.value}")
            return
        if not path:
            self.error(spec.path, ErrorCode.INVALID_DECL, "invalid import path (empty string)")
            return

        ident = spec.name
        name = ident.name if ident is not None else default_package_name(path)
        obj = PkgName(name=name, pos=(ident or spec).pos, pkg=self.pkg, imported=path)
        if ident is not None:
            self.defs[ident] = obj
        else:
            self.implicits[spec] = obj
        if all(p.imported != path for p in self.pkg.imports):
            self.pkg.imports.append(obj)

        if name == "_":
            return
        self._imports.append((obj, spec))
        if name == ".":
            self._dot_imports.setdefault(fscope, []).append(obj)
            return
        if fscope.insert(obj) is not None:
            self.error(spec, ErrorCode.REDECLARED, f"{name} redeclared in this block")

    def _dot_fallback(self, scope: Scope) -> bool:
        """Whether an unresolved name may come from a dot import of the
        enclosing file. Such imports count as used.
        """
        s: Scope | None = scope
        while s is not None and s.kind != "file":
            s = s.parent
        pkgs = self._dot_imports.get(s) if s is not None else None
        if not pkgs:
            return False
        for p in pkgs:
            p.used = True
        return True

    def _const_specs(self, decl: GenDecl) -> Iterator[tuple[ValueSpec, int, Node | None, list[Node]]]:
        """Yield (spec, iota, type expr, init exprs) for each const spec.

        A spec with neither type nor values repeats the previous spec's.
        """
        last_type: Node | None = None
        last_values: list[Node] = []
        for iota, spec in enumerate(decl.specs):
            assert isinstance(spec, ValueSpec)
            texpr, values = spec.type, spec.values
            inherited = texpr is None and not values
            if inherited:
                texpr, values = last_type, last_values
            else:
                last_type, last_values = texpr, values

            names = spec.names
            if not values:
                self.error(spec, ErrorCode.INVALID_DECL, "missing init expr for const declaration")
            elif len(values) < len(names):
                missing = names[len(values)]
                self.error(missing, ErrorCode.INVALID_DECL, f"missing init expr for {missing.name}")
            elif len(values) > len(names):
                self.error(
                    spec if inherited else values[len(names)],
                    ErrorCode.INVALID_DECL,
                    "extra init expr",
                )
            yield spec, iota, texpr, values

    def _package_objects(self) -> None:
        declared = list(self._decls)
        for obj in declared:
            if isinstance(obj, TypeName):
                self._obj_decl(obj)
        self._collect_methods()
        for obj in list(self._decls):
            if not isinstance(obj, TypeName):
                self._obj_decl(obj)

        for obj in declared:
            if not isinstance(obj, TypeName) or not isinstance(obj.type, T.Named):
                continue
            named = obj.type
            if named.rhs is not None and named.rhs is not T.INVALID and named.underlying() is T.INVALID:
                self.error(obj.pos, ErrorCode.INVALID_DECL, f"invalid recursive type {obj.name}")
            under = named.underlying()
            if isinstance(under, T.Struct):
                fields = {f.name for f in under.fields}
                for m in named.methods:
                    if m.name in fields:
                        self.error(
                            m.pos,
                            ErrorCode.REDECLARED,
                            f"field and method with the same name {m.name}",
                        )

    def _collect_methods(self) -> None:
        for decl, fscope in self._methods:
            ident = decl.name
            assert decl.recv is not None
            base, ptr = _receiver_base(decl.recv)
            obj = Func(name=ident.name, pos=ident.pos, pkg=self.pkg, has_ptr_recv=ptr)
            self.defs[ident] = obj
            self._decls[obj] = _DeclInfo(scope=fscope, node=decl)
            if base is None:
                continue
            named = self._receiver_named(base)
            if named is None or ident.is_blank:
                continue
            if any(m.name == ident.name for m in named.methods):
                self.error(
                    ident,
                    ErrorCode.REDECLARED,
                    f"method {named.obj.name}.{ident.name} already declared",
                )
                continue
            named.methods.append(obj)

    def _receiver_named(self, base: Ident) -> T.Named | None:
        obj = self.pkg.scope.lookup(base.name)
        if obj is None:
            if UNIVERSE.lookup(base.name) is not None:
                self.error(
                    base,
                    ErrorCode.INVALID_DECL,
                    f"cannot define new methods on non-local type {base.name}",
                )
            else:
                self.error(base, ErrorCode.UNDEFINED, f"undefined: {base.name}")
            return None
        if not isinstance(obj, TypeName):
            self.error(base, ErrorCode.INVALID_DECL, f"{base.name} is not a type")
            return None
        self._obj_decl(obj)
        t = obj.type
        if not isinstance(t, T.Named) or t.obj.pkg is not self.pkg:
            if t is not None and t is not T.INVALID:
                self.error(
                    base,
                    ErrorCode.INVALID_DECL,
                    f"cannot define new methods on non-local type {t}",
                )
            return None
        if isinstance(t.underlying(), (T.Pointer, T.Interface)):
            self.error(
                base,
                ErrorCode.INVALID_DECL,
                f"invalid receiver type {base.name} (pointer or interface type)",
            )
            return None
        return t

    def _obj_decl(self, obj: Object) -> None:
        state = self._state.get(obj)
        if state == "done":
            return
        if state == "resolving":
            # types may refer to themselves through a name; values may not
            if not isinstance(obj, TypeName):
                self.error(
                    obj.pos,
                    ErrorCode.INVALID_DECL,
                    f"initialization cycle: {obj.name} refers to itself",
                )
            return
        d = self._decls.get(obj)
        if d is None:
            return

        self._state[obj] = "resolving"
        saved_iota, saved_sigs = self._iota, self._sigs
        self._iota, self._sigs = None, []
        try:
            if isinstance(obj, Const):
                self._const_decl(obj, d)
            elif isinstance(obj, Var):
                self._var_decl(obj, d)
            elif isinstance(obj, TypeName):
                assert isinstance(d.node, TypeSpec)
                self._type_decl(obj, d.node, d.scope)
            elif isinstance(obj, Func):
                self._func_decl(obj, d)
        finally:
            self._iota, self._sigs = saved_iota, saved_sigs
        self._state[obj] = "done"

    def _const_decl(self, obj: Const, d: _DeclInfo) -> None:
        self._iota = C.make_int(d.iota)
        typ = self._const_type(d.type_expr, d.scope) if d.type_expr is not None else None
        if d.init is None:
            obj.type = typ or T.INVALID
            return
        x = self._value(d.init, d.scope)
        obj.type, obj.value = self._const_init(x, typ, d.init)

    def _const_type(self, node: Node, scope: Scope) -> T.Type:
        t = self._typexpr(node, scope)
        u = t.underlying()
        if T.is_complete(t) and not (isinstance(u, T.Basic) and u.is_(T.BasicInfo.CONST_TYPE)):
            self.error(node, ErrorCode.INVALID_DECL, f"invalid constant type {t}")
            return T.INVALID
        return t

    def _const_init(
        self, x: Operand, typ: T.Type | None, node: Node
    ) -> tuple[T.Type, C.Value | None]:
        if not x.is_constant:
            if _known(x.type) and x.mode is not Mode.NOVALUE:
                self.error(
                    node,
                    ErrorCode.INVALID_DECL,
                    f"{_describe(node)} (value of type {x.type}) is not constant",
                )
            return typ or T.INVALID, None
        assert x.value is not None and x.type is not None
        if typ is None or not T.is_complete(typ):
            return typ or x.type, x.value
        if not self._assignable(x, typ, node, "constant declaration"):
            return typ, None
        return typ, _representable(x.value, typ) or x.value

    def _var_decl(self, obj: Var, d: _DeclInfo) -> None:
        typ = self._typexpr(d.type_expr, d.scope) if d.type_expr is not None else None
        if d.init is None:
            obj.type = typ or T.INVALID
            return
        if d.multi:
            ops = self._multi_inits.get(d.init)
            if ops is None:
                assert isinstance(d.node, ValueSpec)
                ops = self._unpack([d.init], len(d.node.names), d.scope, d.node)
                self._multi_inits[d.init] = ops
            x = ops[d.index]
        else:
            x = self._value(d.init, d.scope, typ)
        obj.type = self._var_type(x, typ, d.init, "variable declaration")

    def _var_type(
        self, x: Operand, typ: T.Type | None, node: Node, context: str
    ) -> T.Type | None:
        """Type of a variable declared with initial value x."""
        if typ is not None:
            self._assignable(x, typ, node, context)
            return typ
        if x.mode is Mode.NIL:
            self.error(node, ErrorCode.TYPE_MISMATCH, f"use of untyped nil in {context}")
            return T.INVALID
        if x.type is None:
            return None
        return T.default_type(x.type)

    def _type_decl(self, obj: TypeName, spec: TypeSpec, scope: Scope) -> None:
        if spec.type_params is not None:
            scope = Scope(scope, "type", spec.pos, spec.end)
            self.scopes[spec] = scope
            self._declare_type_params(spec.type_params, scope)
        rhs = self._typexpr(spec.type, scope) if spec.type is not None else T.INVALID
        if obj.is_alias:
            obj.type = rhs
            return
        named = obj.type
        assert isinstance(named, T.Named)
        if rhs is named:
            self.error(spec.name, ErrorCode.INVALID_DECL, f"invalid recursive type {obj.name}")
            rhs = T.INVALID
        named.rhs = rhs

    def _func_decl(self, obj: Func, d: _DeclInfo) -> None:
        decl = d.node
        assert isinstance(decl, FuncDecl)
        scope = Scope(d.scope, "function", decl.pos, decl.end)
        self.scopes[decl] = scope
        tparams = self._declare_type_params(decl.type_params, scope) if decl.type_params else []
        recv = self._receiver(decl.recv, scope) if decl.recv is not None else None
        sig = self._signature(decl.params, decl.result, scope)
        sig.recv = recv
        sig.tparams = tparams
        obj.type = sig
        if obj.name == "init" and decl.recv is None and (len(sig.params) or len(sig.results)):
            self.error(
                decl.name,
                ErrorCode.INVALID_DECL,
                "func init must have no arguments and no return values",
            )
        if decl.body is not None:
            self._bodies.append((decl, scope, sig))

    def _receiver(self, recv: Node, scope: Scope) -> Var | None:
        params = [c for c in recv.children if c.kind in _PARAM_KINDS]
        if len(params) != 1:
            msg = "method has no receiver" if not params else "method has multiple receivers"
            self.error(recv, ErrorCode.INVALID_DECL, msg)
            self._collect_params(recv, scope)
            return None

        param = params[0]
        tnode = param.child("type")
        if tnode is None:
            return None
        # a generic receiver declares the type's parameters: func (l *List[T]) ...
        base = tnode
        ptr = False
        while base.kind in ("pointer_type", "parenthesized_type") and base.children:
            ptr = ptr or base.kind == "pointer_type"
            base = base.children[0]
        if base.kind == "generic_type":
            args = base.child("type_arguments")
            for ident in self._receiver_tparams(args):
                tn = TypeName(name=ident.name, pos=ident.pos, pkg=self.pkg)
                tn.type = T.TypeParam(obj=tn, constraint=EMPTY_INTERFACE)
                self.defs[ident] = tn
                self._declare_local(scope, ident, tn)
            inner = base.child("type")
            t: T.Type = self._typexpr(inner, scope) if inner is not None else T.INVALID
            self.types[base] = TypeAndValue(Mode.TYPE, t)
        else:
            t = self._typexpr(base, scope)
        if ptr:
            t = T.Pointer(t)
        self.types[tnode] = TypeAndValue(Mode.TYPE, t)

        names = [n for n in param.child_list("name") if isinstance(n, Ident)]
        if not names:
            return Var(name="", pos=param.pos, type=t, pkg=self.pkg, is_param=True)
        ident = names[0]
        v = Var(name=ident.name, pos=ident.pos, type=t, pkg=self.pkg, is_param=True)
        self.defs[ident] = v
        self._declare_local(scope, ident, v)
        return v

    def _receiver_tparams(self, args: Node | None) -> Iterator[Ident]:
        if args is None:
            return
        for arg in args.children:
            while arg.kind in ("type_elem", "parenthesized_type") and len(arg.children) == 1:
                arg = arg.children[0]
            if isinstance(arg, Ident):
                yield arg
            else:
                self.error(
                    arg,
                    ErrorCode.INVALID_DECL,
                    "receiver type parameter must be an identifier",
                )

    def _declare_type_params(self, node: Node, scope: Scope) -> list[TypeName]:
        tparams: list[TypeName] = []
        pending: list[tuple[T.TypeParam, Node | None]] = []
        for decl in node.children:
            if decl.kind != "type_parameter_declaration":
                continue
            for ident in decl.child_list("name"):
                if not isinstance(ident, Ident):
                    continue
                tn = TypeName(name=ident.name, pos=ident.pos, pkg=self.pkg)
                tp = T.TypeParam(obj=tn)
                tn.type = tp
                self.defs[ident] = tn
                self._declare_local(scope, ident, tn)
                tparams.append(tn)
                pending.append((tp, decl.child("type")))
        # constraints may mention any parameter of the list
        for tp, cnode in pending:
            tp.constraint = self._typexpr(cnode, scope) if cnode is not None else EMPTY_INTERFACE
        return tparams

    def _signature(self, params: Node | None, result: Node | None, scope: Scope) -> T.Signature:
        pvars, variadic = self._collect_params(params, scope) if params is not None else ([], False)
        rvars: list[Var] = []
        if result is not None:
            if result.kind == "parameter_list":
                rvars, _ = self._collect_params(result, scope)
            else:
                t = self._typexpr(result, scope)
                rvars = [Var(name="", pos=result.pos, type=t, pkg=self.pkg, is_param=True)]
        return T.Signature(params=T.Tuple(pvars), results=T.Tuple(rvars), variadic=variadic)

    def _collect_params(self, plist: Node, scope: Scope) -> tuple[list[Var], bool]:
        out: list[Var] = []
        variadic = False
        params = [c for c in plist.children if c.kind in _PARAM_KINDS]
        for i, p in enumerate(params):
            tnode = p.child("type")
            t: T.Type = self._typexpr(tnode, scope) if tnode is not None else T.INVALID
            if p.kind == "variadic_parameter_declaration":
                if i != len(params) - 1:
                    self.error(p, ErrorCode.INVALID_DECL, "can only use ... with final parameter in list")
                else:
                    variadic = True
                t = T.Slice(t)
            names = [n for n in p.child_list("name") if isinstance(n, Ident)]
            if not names:
                out.append(Var(name="", pos=p.pos, type=t, pkg=self.pkg, is_param=True))
                continue
            for ident in names:
                v = Var(name=ident.name, pos=ident.pos, type=t, pkg=self.pkg, is_param=True)
                self.defs[ident] = v
                self._declare_local(scope, ident, v)
                out.append(v)
        return out, variadic

    def _unused_imports(self) -> None:
        if not self.config.report_unused_imports:
            return
        for obj, spec in self._imports:
            if obj.used:
                continue
            path = obj.imported
            if spec.name is not None and obj.name not in (".", default_package_name(path)):
                msg = f'"{path}" imported as {obj.name} and not used'
            else:
                msg = f'"{path}" imported and not used'
            self.error(spec, ErrorCode.UNUSED, msg)

    def _unused_variables(self) -> None:
        if not self.config.report_unused_variables:
            return
        for v in self._locals:
            if v not in self._used:
                self.error(v.pos, ErrorCode.UNUSED, f"declared and not used: {v.name}")

    # =========================================================================
    # Type expressions
    # =========================================================================

    def _typexpr(self, node: Node, scope: Scope) -> T.Type:
        t = self._typexpr_inner(node, scope)
        self.types[node] = TypeAndValue(Mode.TYPE, t)
        return t

    def _typexpr_inner(self, node: Node, scope: Scope) -> T.Type:
        k = node.kind
        if isinstance(node, Ident):
            return self._ident_type(node, scope)
        if isinstance(node, SelectorExpr):
            return self._qualified_type(node.x, node.sel, scope)
        if k == "qualified_type":
            pkg, name = node.child("package"), node.child("name")
            if pkg is None or not isinstance(name, Ident):
                return T.INVALID
            return self._qualified_type(pkg, name, scope)
        if k in ("parenthesized_type", "parenthesized_expression", "negated_type"):
            return self._typexpr(node.children[0], scope) if node.children else T.INVALID
        if k == "pointer_type" or (k == "unary_expression" and node.op == "*"):
            inner = node.child("operand") or (node.children[0] if node.children else None)
            return T.Pointer(self._typexpr(inner, scope) if inner is not None else T.INVALID)
        if k in ("type_elem", "type_constraint", "union_type"):
            terms = [self._typexpr(c, scope) for c in node.children]
            if len(terms) == 1:
                return terms[0]
            return T.Interface(embeddeds=terms)
        if k == "slice_type":
            return T.Slice(self._elem_type(node, "element", scope))
        if k == "array_type":
            length = self._array_length(node.child("length"), scope)
            return T.Array(length, self._elem_type(node, "element", scope))
        if k == "implicit_length_array_type":
            self.error(node, ErrorCode.INVALID_DECL, "invalid use of [...] array (outside a composite literal)")
            return T.Array(None, self._elem_type(node, "element", scope))
        if k == "map_type":
            return T.Map(self._elem_type(node, "key", scope), self._elem_type(node, "value", scope))
        if k == "channel_type":
            op = node.op or "chan"
            direction = "send" if op == "chan<-" else "recv" if op.startswith("<-") else "both"
            return T.Chan(self._elem_type(node, "value", scope), direction)
        if k == "function_type":
            fscope = Scope(scope, "function", node.pos, node.end)
            self.scopes[node] = fscope
            return self._signature(node.child("parameters"), node.child("result"), fscope)
        if k == "struct_type":
            return self._struct_type(node, scope)
        if k == "interface_type":
            return self._interface_type(node, scope)
        if k in ("generic_type", "type_instantiation_expression", "index_expression"):
            # instantiations are represented by their generic type
            base = node.child("type") or node.child("operand")
            t = self._typexpr(base, scope) if base is not None else T.INVALID
            for arg in node.children:
                if arg is base:
                    continue
                if arg.kind == "type_arguments":
                    for a in arg.children:
                        self._typexpr(a, scope)
                else:
                    self._typexpr(arg, scope)
            return t
        self.error(node, ErrorCode.INVALID_DECL, f"{_describe(node)} is not a type")
        return T.INVALID

    def _elem_type(self, node: Node, field_name: str, scope: Scope) -> T.Type:
        elem = node.child(field_name)
        if elem is None and node.children:
            elem = node.children[-1]
        return self._typexpr(elem, scope) if elem is not None else T.INVALID

    def _ident_type(self, ident: Ident, scope: Scope) -> T.Type:
        if ident.is_blank:
            self.error(ident, ErrorCode.INVALID_DECL, "cannot use _ as value or type")
            return T.INVALID
        _, obj = scope.lookup_parent(ident.name)
        if obj is None:
            if self._dot_fallback(scope):
                return T.Opaque(".", ident.name)
            self.error(ident, ErrorCode.UNDEFINED, f"undefined: {ident.name}")
            return T.INVALID
        self.uses[ident] = obj
        if isinstance(obj, PkgName):
            obj.used = True
            self.error(ident, ErrorCode.INVALID_DECL, f"use of package {ident.name} without selector")
            return T.INVALID
        if not isinstance(obj, TypeName):
            self.error(ident, ErrorCode.INVALID_DECL, f"{ident.name} is not a type")
            return T.INVALID
        if obj in self._decls:
            self._obj_decl(obj)
        if obj.type is None:
            self.error(ident, ErrorCode.INVALID_DECL, f"invalid recursive type alias {ident.name}")
            return T.INVALID
        return obj.type

    def _qualified_type(self, pkg: Node, name: Ident, scope: Scope) -> T.Type:
        if not isinstance(pkg, Ident):
            self.error(pkg, ErrorCode.INVALID_DECL, f"{_describe(pkg)}.{name.name} is not a type")
            return T.INVALID
        _, obj = scope.lookup_parent(pkg.name)
        if isinstance(obj, PkgName):
            obj.used = True
            self.uses[pkg] = obj
            return T.Opaque(obj.imported, name.name)
        if obj is None:
            if self._dot_fallback(scope):
                return T.Opaque(".", f"{pkg.name}.{name.name}")
            self.error(pkg, ErrorCode.UNDEFINED, f"undefined: {pkg.name}")
            return T.INVALID
        self.uses[pkg] = obj
        self.error(pkg, ErrorCode.INVALID_DECL, f"{pkg.name}.{name.name} is not a type")
        return T.INVALID

    def _array_length(self, node: Node | None, scope: Scope) -> int | None:
        if node is None:
            return None
        x = self._value(node, scope)
        if not x.is_constant:
            if _known(x.type):
                self.error(
                    node,
                    ErrorCode.INVALID_DECL,
                    f"array length {_describe(node)} (value of type {x.type}) must be constant",
                )
            return None
        assert x.value is not None
        n = C.to_int(x.value) if x.value.is_numeric else None
        if n is None or not isinstance(n.val, int) or n.val < 0:
            self.error(node, ErrorCode.INVALID_DECL, f"invalid array length {_describe(node)}")
            return None
        return n.val

    def _struct_type(self, node: Node, scope: Scope) -> T.Struct:
        st = T.Struct()
        seen: set[str] = set()
        decls = [
            fd
            for fl in node.children
            if fl.kind == "field_declaration_list"
            for fd in fl.children
            if fd.kind == "field_declaration"
        ]
        for fd in decls:
            tnode = fd.child("type")
            t = self._typexpr(tnode, scope) if tnode is not None else T.INVALID
            idents = [n for n in fd.child_list("name") if isinstance(n, Ident)]
            if idents:
                for ident in idents:
                    v = Var(name=ident.name, pos=ident.pos, type=t, pkg=self.pkg, is_field=True)
                    self.defs[ident] = v
                    self._add_field(st, seen, ident, v)
                continue

            # embedded field, named after its type
            if isinstance(t, T.Opaque) or t is T.INVALID:
                st.complete = False
            if fd.op == "*":
                t = T.Pointer(t)
            name_ident = _embedded_name(tnode)
            v = Var(
                name=name_ident.name if name_ident is not None else "",
                pos=(name_ident or fd).pos,
                type=t,
                pkg=self.pkg,
                is_field=True,
                embedded=True,
            )
            if name_ident is not None:
                self.defs[name_ident] = v
            self._add_field(st, seen, name_ident or fd, v)
        return st

    def _add_field(self, st: T.Struct, seen: set[str], at: Node, v: Var) -> None:
        if v.name != "_" and v.name in seen:
            self.error(at, ErrorCode.REDECLARED, f"{v.name} redeclared")
            return
        seen.add(v.name)
        st.fields.append(v)

    def _interface_type(self, node: Node, scope: Scope) -> T.Interface:
        it = T.Interface()
        names: set[str] = set()
        for elem in node.children:
            if elem.kind in ("method_elem", "method_spec"):
                ident = elem.child("name")
                if not isinstance(ident, Ident):
                    continue
                mscope = Scope(scope, "function", elem.pos, elem.end)
                self.scopes[elem] = mscope
                sig = self._signature(elem.child("parameters"), elem.child("result"), mscope)
                m = Func(name=ident.name, pos=ident.pos, type=sig, pkg=self.pkg)
                self.defs[ident] = m
                if ident.name in names:
                    self.error(ident, ErrorCode.REDECLARED, f"duplicate method {ident.name}")
                    continue
                names.add(ident.name)
                it.methods.append(m)
            elif elem.kind in _TYPE_KINDS or elem.kind in ("constraint_elem", "interface_type_name"):
                it.embeddeds.append(self._typexpr(elem, scope))
        return it

    # =========================================================================
    # Expressions
    # =========================================================================

    def _value(self, node: Node, scope: Scope, hint: T.Type | None = None) -> Operand:
        """Evaluate an expression that must denote a single value."""
        return self._single(self._expr(node, scope, hint), node)

    def _single(self, x: Operand, node: Node) -> Operand:
        if x.mode is Mode.TYPE:
            self.error(node, ErrorCode.INVALID_DECL, f"{_describe(node)} (type) is not an expression")
        elif x.mode is Mode.NOVALUE:
            self.error(node, ErrorCode.TYPE_MISMATCH, f"{_describe(node)} (no value) used as value")
        elif x.mode is Mode.BUILTIN:
            self.error(node, ErrorCode.TYPE_MISMATCH, f"{_describe(node)} (built-in) must be called")
        elif isinstance(x.type, T.Tuple):
            self.error(
                node,
                ErrorCode.TYPE_MISMATCH,
                f"multiple-value {_describe(node)} (value of type {x.type}) in single-value context",
            )
        else:
            return x
        return Operand(Mode.VALUE, T.INVALID)

    def _expr(self, node: Node, scope: Scope, hint: T.Type | None = None) -> Operand:
        if isinstance(node, Ident):
            x = self._ident_expr(node, scope)
        elif isinstance(node, BasicLit):
            x = self._basic_lit(node)
        elif isinstance(node, SelectorExpr):
            x = self._selector(node, scope)
        else:
            method = getattr(self, f"_expr_{node.kind}", None)
            if method is not None:
                x = method(node, scope, hint)
            elif node.kind in _TYPE_KINDS:
                return Operand(Mode.TYPE, self._typexpr(node, scope))
            else:
                for child in node.children:
                    self._expr(child, scope)
                x = Operand(Mode.VALUE)
        if x.type is not None or x.mode in (Mode.NOVALUE, Mode.BUILTIN):
            self.types[node] = TypeAndValue(x.mode, x.type, x.value if x.mode is Mode.CONSTANT else None)
        return x

    def _ident_expr(self, ident: Ident, scope: Scope) -> Operand:
        if ident.is_blank:
            self.error(ident, ErrorCode.INVALID_DECL, "cannot use _ as value")
            return Operand(Mode.VALUE, T.INVALID)
        _, obj = scope.lookup_parent(ident.name)
        if obj is None:
            if self._dot_fallback(scope):
                return Operand(Mode.VALUE)
            self.error(ident, ErrorCode.UNDEFINED, f"undefined: {ident.name}")
            return Operand(Mode.VALUE, T.INVALID)
        self.uses[ident] = obj
        return self._object_operand(ident, obj)

    def _object_operand(self, ident: Ident, obj: Object) -> Operand:
        if obj in self._decls and self._state.get(obj) != "done":
            self._obj_decl(obj)
        if isinstance(obj, PkgName):
            obj.used = True
            self.error(ident, ErrorCode.INVALID_DECL, f"use of package {obj.name} without selector")
            return Operand(Mode.VALUE, T.INVALID)
        if isinstance(obj, Const):
            if obj is IOTA:
                if self._iota is None:
                    self.error(ident, ErrorCode.INVALID_DECL, "cannot use iota outside constant declaration")
                    return Operand(Mode.VALUE, T.INVALID)
                return Operand(Mode.CONSTANT, T.UNTYPED_INT, self._iota)
            if obj.value is None:
                return Operand(Mode.VALUE, obj.type, obj=obj)
            return Operand(Mode.CONSTANT, obj.type, obj.value, obj=obj)
        if isinstance(obj, TypeName):
            return Operand(Mode.TYPE, obj.type or T.INVALID, obj=obj)
        if isinstance(obj, Var):
            self._used.add(obj)
            return Operand(Mode.VARIABLE, obj.type, obj=obj)
        if isinstance(obj, Builtin):
            return Operand(Mode.BUILTIN, obj=obj)
        if isinstance(obj, Nil):
            return Operand(Mode.NIL, T.UNTYPED_NIL)
        return Operand(Mode.VALUE, obj.type, obj=obj)

    def _basic_lit(self, lit: BasicLit) -> Operand:
        try:
            value = C.from_literal(lit.kind, lit.value)
        except ValueError as e:
            self.error(lit, ErrorCode.INVALID_DECL, f"invalid literal {lit.value}: {e}")
            return Operand(Mode.VALUE, T.INVALID)
        return Operand(Mode.CONSTANT, _LITERAL_TYPES[lit.kind], value)

    def _selector(self, node: SelectorExpr, scope: Scope) -> Operand:
        x_node, sel = node.x, node.sel
        if isinstance(x_node, Ident):
            _, obj = scope.lookup_parent(x_node.name)
            if isinstance(obj, PkgName):
                obj.used = True
                self.uses[x_node] = obj
                return Operand(Mode.VALUE)

        x = self._expr(x_node, scope)
        if x.mode is Mode.TYPE:
            return self._method_expr(node, x)
        x = self._single(x, x_node)
        if not _known(x.type):
            return Operand(Mode.VALUE)
        assert x.type is not None

        res = lookup_field_or_method(x.type, sel.name)
        if res.obj is None:
            if res.ambiguous:
                self.error(sel, ErrorCode.UNDEFINED, f"ambiguous selector {_describe(node)}")
            elif res.complete:
                self.error(
                    sel,
                    ErrorCode.UNDEFINED,
                    f"{_describe(node)} undefined (type {x.type} has no field or method {sel.name})",
                )
            return Operand(Mode.VALUE)

        obj = res.obj
        self.uses[sel] = obj
        if isinstance(obj, Var):
            self.selections[node] = Selection(
                SelectionKind.FIELD_VAL, x.type, obj, res.index, res.indirect
            )
            return Operand(Mode.VARIABLE, obj.type)
        assert isinstance(obj, Func)
        if obj in self._decls:
            self._obj_decl(obj)
        self.selections[node] = Selection(
            SelectionKind.METHOD_VAL, x.type, obj, res.index, res.indirect
        )
        return Operand(Mode.VALUE, method_signature(obj))

    def _method_expr(self, node: SelectorExpr, x: Operand) -> Operand:
        sel = node.sel
        if not _known(x.type):
            return Operand(Mode.VALUE)
        assert x.type is not None
        res = lookup_field_or_method(x.type, sel.name)
        if not isinstance(res.obj, Func):
            if res.complete and not res.ambiguous:
                self.error(
                    sel,
                    ErrorCode.UNDEFINED,
                    f"{_describe(node)} undefined (type {x.type} has no method {sel.name})",
                )
            return Operand(Mode.VALUE)
        fn = res.obj
        self.uses[sel] = fn
        if fn in self._decls:
            self._obj_decl(fn)
        self.selections[node] = Selection(
            SelectionKind.METHOD_EXPR, x.type, fn, res.index, res.indirect
        )
        return Operand(Mode.VALUE, method_expr_signature(x.type, fn))

    def _expr_parenthesized_expression(self, node: Node, scope: Scope, hint: T.Type | None) -> Operand:
        if not node.children:
            return Operand(Mode.VALUE)
        return self._expr(node.children[0], scope, hint)

    def _expr_variadic_argument(self, node: Node, scope: Scope, hint: T.Type | None) -> Operand:
        if not node.children:
            return Operand(Mode.VALUE)
        return self._value(node.children[0], scope)

    def _expr_func_literal(self, node: Node, scope: Scope, hint: T.Type | None) -> Operand:
        fscope = Scope(scope, "function", node.pos, node.end)
        self.scopes[node] = fscope
        sig = self._signature(node.child("parameters"), node.child("result"), fscope)
        body = node.child("body")
        if body is not None:
            self._func_body(body, fscope, sig)
        return Operand(Mode.VALUE, sig)

    def _expr_composite_literal(self, node: Node, scope: Scope, hint: T.Type | None) -> Operand:
        tnode, body = node.child("type"), node.child("body")
        implicit: T.Array | None = None
        if tnode is not None and tnode.kind == "implicit_length_array_type":
            implicit = T.Array(None, self._elem_type(tnode, "element", scope))
            t: T.Type | None = implicit
        elif tnode is not None:
            t = self._typexpr(tnode, scope)
        else:
            t = hint
        n = self._literal_value(body, t, scope) if body is not None else 0
        if implicit is not None and tnode is not None:
            implicit.length = n
            self.types[tnode] = TypeAndValue(Mode.TYPE, implicit)
        return Operand(Mode.VALUE, t)

    def _expr_literal_value(self, node: Node, scope: Scope, hint: T.Type | None) -> Operand:
        self._literal_value(node, hint, scope)
        return Operand(Mode.VALUE, hint)

    def _literal_value(self, lv: Node, t: T.Type | None, scope: Scope) -> int:
        """Check the elements of ``{...}`` against t; return the element count."""
        u = t.underlying() if _known(t) and t is not None else None
        index = 0
        length = 0
        for el in lv.children:
            if el.kind == "keyed_element":
                key, val = el.child("key"), el.child("value")
                if key is None or val is None:
                    continue
                if isinstance(u, T.Struct):
                    f = self._struct_key(key, u, t)
                    self._element(val, f.type if f is not None else None, scope, "struct literal")
                elif isinstance(u, T.Map):
                    self._element(key, u.key, scope, "map literal")
                    self._element(val, u.elem, scope, "map literal")
                elif isinstance(u, (T.Slice, T.Array)):
                    k = self._value(key, scope)
                    if k.is_constant:
                        assert k.value is not None
                        iv = C.to_int(k.value) if k.value.is_numeric else None
                        if iv is not None and isinstance(iv.val, int):
                            index = iv.val
                    self._element(val, u.elem, scope, "array or slice literal")
                    index += 1
                else:
                    self._unknown_key(key, scope)
                    self._element(val, None, scope, "")
            else:
                if isinstance(u, T.Struct):
                    ft = u.fields[index].type if index < len(u.fields) else None
                    if index >= len(u.fields) and u.complete:
                        self.error(el, ErrorCode.TYPE_MISMATCH, f"too many values in struct literal of type {t}")
                    self._element(el, ft, scope, "struct literal")
                elif isinstance(u, T.Map):
                    self.error(el, ErrorCode.TYPE_MISMATCH, "missing key in map literal")
                    self._element(el, u.elem, scope, "")
                elif isinstance(u, (T.Slice, T.Array)):
                    self._element(el, u.elem, scope, "array or slice literal")
                else:
                    self._element(el, None, scope, "")
                index += 1
            length = max(length, index)
        return length

    def _struct_key(self, key: Node, st: T.Struct, t: T.Type | None) -> Var | None:
        if not isinstance(key, Ident):
            self.error(key, ErrorCode.INVALID_DECL, f"invalid field name {_describe(key)} in struct literal")
            return None
        for f in st.fields:
            if f.name == key.name:
                self.uses[key] = f
                return f
        if st.complete:
            self.error(key, ErrorCode.UNDEFINED, f"unknown field {key.name} in struct literal of type {t}")
        return None

    def _unknown_key(self, key: Node, scope: Scope) -> None:
        """Key of a literal whose type is unknown: a field name or a map key."""
        if not isinstance(key, Ident):
            self._element(key, None, scope, "")
            return
        _, obj = scope.lookup_parent(key.name)
        if isinstance(obj, (Var, Const)):
            self.uses[key] = obj
            if isinstance(obj, Var):
                self._used.add(obj)

    def _element(self, node: Node, hint: T.Type | None, scope: Scope, context: str) -> None:
        if node.kind == "literal_value":
            # elided type: {...} inside a literal stands for T{...} or &T{...}
            lit_t = hint.elem if isinstance(hint, T.Pointer) else hint
            self._literal_value(node, lit_t, scope)
            if lit_t is not None:
                self.types[node] = TypeAndValue(Mode.VALUE, lit_t)
            return
        x = self._value(node, scope, hint)
        if hint is not None and context:
            self._assignable(x, hint, node, context)

    def _expr_call_expression(self, node: Node, scope: Scope, hint: T.Type | None) -> Operand:
        fn = node.child("function")
        args = node.child("arguments")
        arg_nodes = list(args.children) if args is not None else []
        f = self._expr(fn, scope) if fn is not None else Operand(Mode.VALUE)
        targs = node.child("type_arguments")
        if targs is not None:
            for a in targs.children:
                self._typexpr(a, scope)

        if f.mode is Mode.TYPE:
            return self._conversion_call(node, f.type or T.INVALID, arg_nodes, scope)
        if f.mode is Mode.BUILTIN:
            assert f.obj is not None
            return self._builtin(f.obj.name, node, arg_nodes, scope)

        sig = f.type.underlying() if _known(f.type) and f.type is not None else None
        if not isinstance(sig, T.Signature):
            for a in arg_nodes:
                self._expr(a, scope)
            if sig is not None and T.is_complete(f.type):
                self.error(
                    node,
                    ErrorCode.TYPE_MISMATCH,
                    f"invalid operation: cannot call non-function {_describe(fn)} (variable of type {f.type})",
                )
            return Operand(Mode.VALUE)

        spread = any(a.kind == "variadic_argument" for a in arg_nodes)
        if len(arg_nodes) == 1 and not spread:
            x = self._expr(arg_nodes[0], scope, _param_type(sig, 0))
            if isinstance(x.type, T.Tuple):
                nargs = len(x.type)
            else:
                nargs = 1
                x = self._single(x, arg_nodes[0])
                self._assignable(x, _param_type(sig, 0), arg_nodes[0], "argument")
        else:
            for i, a in enumerate(arg_nodes):
                pt = None if spread else _param_type(sig, i)
                x = self._value(a, scope, pt)
                if pt is not None:
                    self._assignable(x, pt, a, "argument")
            nargs = len(arg_nodes)

        nparams = len(sig.params)
        if spread or not sig.variadic:
            too_few, too_many = nargs < nparams, nargs > nparams
        else:
            too_few, too_many = nargs < nparams - 1, False
        if too_few:
            self.error(node, ErrorCode.TYPE_MISMATCH, f"not enough arguments in call to {_describe(fn)}")
        elif too_many:
            at = arg_nodes[nparams] if nparams < len(arg_nodes) else node
            self.error(at, ErrorCode.TYPE_MISMATCH, f"too many arguments in call to {_describe(fn)}")

        results = sig.results
        if len(results) == 0:
            return Operand(Mode.NOVALUE)
        if len(results) == 1:
            return Operand(Mode.VALUE, results.types()[0])
        return Operand(Mode.VALUE, results)

    def _conversion_call(self, node: Node, t: T.Type, args: list[Node], scope: Scope) -> Operand:
        if len(args) != 1:
            msg = f"missing argument in conversion to {t}" if not args else f"too many arguments in conversion to {t}"
            self.error(node, ErrorCode.TYPE_MISMATCH, msg)
            for a in args:
                self._expr(a, scope)
            return Operand(Mode.VALUE, t)
        return self._conversion(self._value(args[0], scope), t, args[0])

    def _conversion(self, x: Operand, t: T.Type, node: Node) -> Operand:
        u = t.underlying()
        if not (x.is_constant and _known(t) and isinstance(u, T.Basic)):
            return Operand(Mode.VALUE, t)
        v = x.value
        assert v is not None
        if u.is_(T.BasicInfo.STRING) and v.kind is C.Kind.INT:
            code = v.val
            assert isinstance(code, int)
            ch = chr(code) if 0 <= code <= 0x10FFFF and not 0xD800 <= code <= 0xDFFF else "�"
            return Operand(Mode.CONSTANT, t, C.make_string(ch))
        converted = _representable(v, t)
        if converted is None:
            self.error(
                node,
                ErrorCode.TYPE_MISMATCH,
                f"cannot convert {_describe(node)} ({_const_desc(x)}) to type {t}",
            )
            return Operand(Mode.VALUE, t)
        return Operand(Mode.CONSTANT, t, converted)

    def _builtin(self, name: str, node: Node, args: list[Node], scope: Scope) -> Operand:
        if name in ("new", "make"):
            if not args:
                self.error(node, ErrorCode.TYPE_MISMATCH, f"not enough arguments for {name}() (expected 1, found 0)")
                return Operand(Mode.VALUE)
            t = self._typexpr(args[0], scope)
            for a in args[1:]:
                self._value(a, scope)
            return Operand(Mode.VALUE, T.Pointer(t) if name == "new" else t)

        xs = [self._value(a, scope) for a in args]
        if name in ("len", "cap"):
            if name == "len" and xs and xs[0].is_constant:
                v = xs[0].value
                assert v is not None
                if v.kind is C.Kind.STRING:
                    return Operand(Mode.CONSTANT, T.INT, C.make_int(len(encode_go_string(str(v.val)))))
            n = _static_array_len(xs[0].type) if xs else None
            if n is not None and not _calls_or_receives(args[0]):
                return Operand(Mode.CONSTANT, T.INT, C.make_int(n))
            return Operand(Mode.VALUE, T.INT)
        if name == "append":
            return Operand(Mode.VALUE, xs[0].type if xs else None)
        if name == "copy":
            return Operand(Mode.VALUE, T.INT)
        if name == "recover":
            return Operand(Mode.VALUE, EMPTY_INTERFACE)
        if name == "complex":
            if len(xs) == 2 and all(x.is_constant for x in xs):
                re_v, im_v = (C.to_float(x.value) for x in xs)  # type: ignore[arg-type]
                if re_v is not None and im_v is not None:
                    c = complex(float(re_v.val), float(im_v.val))  # type: ignore[arg-type]
                    return Operand(Mode.CONSTANT, T.UNTYPED_COMPLEX, C.Value(C.Kind.COMPLEX, c))
            small = any(x.type is T.FLOAT32 for x in xs)
            return Operand(Mode.VALUE, T.COMPLEX64 if small else T.COMPLEX128)
        if name in ("real", "imag"):
            if xs and xs[0].is_constant:
                v = xs[0].value
                assert v is not None
                c = complex(v.val) if v.is_numeric else None  # type: ignore[arg-type]
                if c is not None:
                    part = c.real if name == "real" else c.imag
                    return Operand(Mode.CONSTANT, T.UNTYPED_FLOAT, C.make_float(part))
            small = bool(xs) and xs[0].type is T.COMPLEX64
            return Operand(Mode.VALUE, T.FLOAT32 if small else T.FLOAT64)
        if name in ("min", "max"):
            return self._min_max(name, node, xs)
        return Operand(Mode.NOVALUE)

    def _min_max(self, name: str, node: Node, xs: list[Operand]) -> Operand:
        if not xs:
            self.error(node, ErrorCode.TYPE_MISMATCH, f"not enough arguments for {name}() (expected 1, found 0)")
            return Operand(Mode.VALUE)
        typed = next((x.type for x in xs if _known(x.type) and not x.is_untyped), None)
        t = typed or xs[0].type
        if all(x.is_constant for x in xs):
            op = "<" if name == "min" else ">"
            best = xs[0].value
            assert best is not None
            try:
                for x in xs[1:]:
                    assert x.value is not None
                    if C.compare(op, x.value, best):
                        best = x.value
            except ValueError as e:
                self.error(node, ErrorCode.TYPE_MISMATCH, f"invalid argument: {e}")
                return Operand(Mode.VALUE, T.INVALID)
            return Operand(Mode.CONSTANT, t, best)
        return Operand(Mode.VALUE, T.default_type(t) if t is not None else None)

    def _expr_index_expression(self, node: Node, scope: Scope, hint: T.Type | None) -> Operand:
        operand = node.child("operand")
        indices = node.child_list("index")
        if operand is None:
            return Operand(Mode.VALUE)
        x = self._expr(operand, scope)
        if x.mode is Mode.TYPE:
            for i in indices:
                self._typexpr(i, scope)
            return Operand(Mode.TYPE, x.type)
        if isinstance(x.type, T.Signature) and x.type.tparams:
            for i in indices:
                self._typexpr(i, scope)
            return Operand(Mode.VALUE, x.type)

        x = self._single(x, operand)
        for i in indices:
            self._value(i, scope)
        if not _known(x.type):
            return Operand(Mode.VALUE)
        assert x.type is not None
        u = x.type.underlying()
        if isinstance(u, T.Pointer) and isinstance(u.elem.underlying(), T.Array):
            u = u.elem.underlying()
        if isinstance(u, (T.Slice, T.Array)):
            return Operand(Mode.VARIABLE, u.elem)
        if isinstance(u, T.Map):
            return Operand(Mode.MAPINDEX, u.elem)
        if isinstance(u, T.Basic) and u.is_(T.BasicInfo.STRING):
            return Operand(Mode.VALUE, T.UINT8)
        if T.is_complete(x.type):
            self.error(
                node,
                ErrorCode.TYPE_MISMATCH,
                f"invalid operation: cannot index {_describe(operand)} (variable of type {x.type})",
            )
        return Operand(Mode.VALUE)

    def _expr_type_instantiation_expression(
        self, node: Node, scope: Scope, hint: T.Type | None
    ) -> Operand:
        return Operand(Mode.TYPE, self._typexpr(node, scope))

    def _expr_slice_expression(self, node: Node, scope: Scope, hint: T.Type | None) -> Operand:
        operand = node.child("operand")
        x = self._value(operand, scope) if operand is not None else Operand(Mode.VALUE)
        for name in ("start", "end", "capacity"):
            bound = node.child(name)
            if bound is not None:
                self._value(bound, scope)
        if not _known(x.type):
            return Operand(Mode.VALUE)
        assert x.type is not None
        u = x.type.underlying()
        if isinstance(u, T.Pointer) and isinstance(u.elem.underlying(), T.Array):
            u = u.elem.underlying()
        if isinstance(u, T.Array):
            return Operand(Mode.VALUE, T.Slice(u.elem))
        if isinstance(u, T.Slice):
            return Operand(Mode.VALUE, x.type)
        if isinstance(u, T.Basic) and u.is_(T.BasicInfo.STRING):
            return Operand(Mode.VALUE, T.STRING if x.is_untyped else x.type)
        if T.is_complete(x.type):
            self.error(
                node,
                ErrorCode.TYPE_MISMATCH,
                f"cannot slice {_describe(operand)} (variable of type {x.type})",
            )
        return Operand(Mode.VALUE)

    def _expr_type_assertion_expression(
        self, node: Node, scope: Scope, hint: T.Type | None
    ) -> Operand:
        operand, tnode = node.child("operand"), node.child("type")
        x = self._value(operand, scope) if operand is not None else Operand(Mode.VALUE)
        t = self._typexpr(tnode, scope) if tnode is not None else None
        if _known(x.type) and T.is_complete(x.type) and x.type is not None:
            if not isinstance(x.type.underlying(), T.Interface):
                self.error(
                    node,
                    ErrorCode.TYPE_MISMATCH,
                    f"invalid operation: {_describe(operand)} (variable of type {x.type}) is not an interface",
                )
        return Operand(Mode.COMMAOK, t)

    def _expr_type_conversion_expression(
        self, node: Node, scope: Scope, hint: T.Type | None
    ) -> Operand:
        tnode, operand = node.child("type"), node.child("operand")
        t = self._typexpr(tnode, scope) if tnode is not None else T.INVALID
        if operand is None:
            return Operand(Mode.VALUE, t)
        return self._conversion(self._value(operand, scope), t, operand)

    def _expr_unary_expression(self, node: Node, scope: Scope, hint: T.Type | None) -> Operand:
        op = node.op or ""
        operand = node.child("operand")
        if operand is None:
            return Operand(Mode.VALUE)

        if op == "&":
            inner = hint.elem if isinstance(hint, T.Pointer) else None
            x = self._value(operand, scope, inner)
            return Operand(Mode.VALUE, T.Pointer(x.type) if _known(x.type) and x.type else None)

        x = self._expr(operand, scope)
        if op == "*" and x.mode is Mode.TYPE:
            return Operand(Mode.TYPE, T.Pointer(x.type or T.INVALID))
        x = self._single(x, operand)
        u = x.type.underlying() if _known(x.type) and x.type is not None else None

        if op == "*":
            if isinstance(u, T.Pointer):
                return Operand(Mode.VARIABLE, u.elem)
            if u is not None and T.is_complete(x.type):
                self.error(
                    node,
                    ErrorCode.TYPE_MISMATCH,
                    f"invalid operation: cannot indirect {_describe(operand)} (variable of type {x.type})",
                )
            return Operand(Mode.VARIABLE)
        if op == "<-":
            if isinstance(u, T.Chan):
                return Operand(Mode.COMMAOK, u.elem)
            if u is not None and T.is_complete(x.type):
                self.error(
                    node,
                    ErrorCode.TYPE_MISMATCH,
                    f"invalid operation: cannot receive from non-channel {_describe(operand)} (variable of type {x.type})",
                )
            return Operand(Mode.VALUE)

        if x.is_constant:
            assert x.value is not None
            bits = 0
            if isinstance(u, T.Basic) and not u.is_untyped and u.is_(T.BasicInfo.UNSIGNED):
                bits = u.size
            try:
                v = C.unary_op(op, x.value, bits)
            except ValueError:
                self.error(
                    node,
                    ErrorCode.TYPE_MISMATCH,
                    f"invalid operation: operator {op} not defined on {_describe(operand)} ({_const_desc(x)})",
                )
                return Operand(Mode.VALUE, T.INVALID)
            self._check_overflow(node, v, x.type)
            return Operand(Mode.CONSTANT, x.type, v)

        if op == "!" and isinstance(u, T.Basic) and u is not T.INVALID and not u.is_(T.BasicInfo.BOOLEAN):
            self.error(
                node,
                ErrorCode.TYPE_MISMATCH,
                f"invalid operation: operator ! not defined on {_describe(operand)} (variable of type {x.type})",
            )
        return Operand(Mode.VALUE, x.type)

    def _expr_binary_expression(self, node: Node, scope: Scope, hint: T.Type | None) -> Operand:
        op = node.op or ""
        lnode, rnode = node.child("left"), node.child("right")
        if lnode is None or rnode is None:
            return Operand(Mode.VALUE)
        x = self._value(lnode, scope)
        y = self._value(rnode, scope)

        if op in ("<<", ">>"):
            return self._shift(node, op, x, y)

        if op in _COMPARISONS:
            if self._match_operands(node, op, x, y, lnode, rnode) and x.is_constant and y.is_constant:
                assert x.value is not None and y.value is not None
                try:
                    result = C.compare(op, x.value, y.value)
                except ValueError:
                    self._mismatch(node, op, x, y, lnode, rnode)
                    return Operand(Mode.VALUE, T.UNTYPED_BOOL)
                return Operand(Mode.CONSTANT, T.UNTYPED_BOOL, C.make_bool(result))
            return Operand(Mode.VALUE, T.UNTYPED_BOOL)

        if not self._match_operands(node, op, x, y, lnode, rnode):
            return Operand(Mode.VALUE, T.INVALID)
        t = _result_type(x.type, y.type)

        if op in ("/", "%") and y.is_constant and _is_integer(t):
            assert y.value is not None
            if y.value.is_numeric and y.value.val == 0:
                self.error(node, ErrorCode.TYPE_MISMATCH, "invalid operation: division by zero")
                return Operand(Mode.VALUE, T.INVALID)

        if x.is_constant and y.is_constant:
            assert x.value is not None and y.value is not None
            try:
                v = C.binary_op(op, x.value, y.value)
            except ValueError as e:
                self.error(node, ErrorCode.TYPE_MISMATCH, f"invalid operation: {e}")
                return Operand(Mode.VALUE, T.INVALID)
            self._check_overflow(node, v, t)
            return Operand(Mode.CONSTANT, t, v)
        return Operand(Mode.VALUE, t)

    def _shift(self, node: Node, op: str, x: Operand, y: Operand) -> Operand:
        if x.is_constant and y.is_constant:
            assert x.value is not None and y.value is not None
            try:
                v = C.shift(op, x.value, y.value)
            except ValueError as e:
                self.error(node, ErrorCode.TYPE_MISMATCH, f"invalid operation: {e}")
                return Operand(Mode.VALUE, T.INVALID)
            t = x.type
            if x.is_untyped and t is not T.UNTYPED_RUNE:
                t = T.UNTYPED_INT
            self._check_overflow(node, v, t)
            return Operand(Mode.CONSTANT, t, v)
        t = x.type
        if t is not None and x.is_untyped:
            # an untyped constant shifted by a variable amount takes its type
            # from the context, like the constant alone would
            t = T.UNTYPED_RUNE if t is T.UNTYPED_RUNE else T.UNTYPED_INT
        return Operand(Mode.VALUE, t)

    def _match_operands(
        self, node: Node, op: str, x: Operand, y: Operand, lnode: Node, rnode: Node
    ) -> bool:
        """Check that the operands of a binary operation agree in type.

        An untyped constant facing a typed operand is converted to that type
        in place.
        """
        if not (_known(x.type) and _known(y.type)):
            return True
        assert x.type is not None and y.type is not None
        if x.mode is Mode.NIL or y.mode is Mode.NIL:
            return True
        if x.is_untyped and y.is_untyped:
            if _kind_class(x.type) != _kind_class(y.type):
                self._mismatch(node, op, x, y, lnode, rnode)
                return False
            return True
        if x.is_untyped or y.is_untyped:
            typed, untyped, unode = (y.type, x, lnode) if x.is_untyped else (x.type, y, rnode)
            if (
                untyped.is_constant
                and T.is_complete(typed)
                and isinstance(typed.underlying(), T.Basic)
            ):
                assert untyped.value is not None
                converted = _representable(untyped.value, typed)
                if converted is None:
                    self.error(
                        unode,
                        ErrorCode.TYPE_MISMATCH,
                        f"cannot convert {_describe(unode)} ({_const_desc(untyped)}) to type {typed}",
                    )
                    return False
                untyped.value = converted
                untyped.type = typed
            return True
        if T.identical(x.type, y.type):
            return True
        if isinstance(x.type.underlying(), T.Interface) or isinstance(y.type.underlying(), T.Interface):
            return True
        if not (T.is_complete(x.type) and T.is_complete(y.type)):
            return True
        self._mismatch(node, op, x, y, lnode, rnode)
        return False

    def _mismatch(self, node: Node, op: str, x: Operand, y: Operand, lnode: Node, rnode: Node) -> None:
        self.error(
            node,
            ErrorCode.TYPE_MISMATCH,
            f"invalid operation: {_describe(lnode)} {op} {_describe(rnode)} "
            f"(mismatched types {x.type} and {y.type})",
        )

    def _check_overflow(self, node: Node, v: C.Value, t: T.Type | None) -> None:
        if t is None or not isinstance(t.underlying(), T.Basic) or not T.is_complete(t):
            return
        u = t.underlying()
        assert isinstance(u, T.Basic)
        if u.is_untyped or not u.is_(T.BasicInfo.NUMERIC):
            return
        if _representable(v, t) is None:
            self.error(node, ErrorCode.TYPE_MISMATCH, f"constant {v} overflows {t}")

    def _assignable(self, x: Operand, t: T.Type | None, node: Node, context: str) -> bool:
        """Report whether a value x can be assigned to a variable of type t."""
        if t is None or t is T.INVALID or not _known(x.type):
            return True
        assert x.type is not None
        u = t.underlying()
        if x.mode is Mode.NIL:
            if isinstance(u, (T.Pointer, T.Slice, T.Map, T.Chan, T.Signature, T.Interface)):
                return True
            if not T.is_complete(t):
                return True
            self.error(node, ErrorCode.TYPE_MISMATCH, f"cannot use nil as {t} value in {context}")
            return False
        if isinstance(u, T.Interface) or not T.is_complete(t):
            return True

        if x.is_untyped:
            if not isinstance(u, T.Basic):
                if x.is_constant:
                    self.error(
                        node,
                        ErrorCode.TYPE_MISMATCH,
                        f"cannot use {_describe(node)} ({_const_desc(x)}) as {t} value in {context}",
                    )
                    return False
                return True
            if x.is_constant:
                assert x.value is not None
                if _representable(x.value, t) is None:
                    self.error(
                        node,
                        ErrorCode.TYPE_MISMATCH,
                        f"cannot use {_describe(node)} ({_const_desc(x)}) as {t} value in {context}"
                        + _overflow_suffix(x.value, u),
                    )
                    return False
                return True
            if _kind_class(x.type) != _kind_class(u):
                self.error(
                    node,
                    ErrorCode.TYPE_MISMATCH,
                    f"cannot use {_describe(node)} (untyped {_kind_class(x.type)} value) as {t} value in {context}",
                )
                return False
            return True

        if T.identical(x.type, t) or _assignable_types(x.type, t):
            return True
        if T.is_known(x.type) and T.is_known(t):
            what = f"constant {x.value} of type" if x.is_constant else (
                "variable of type" if x.mode is Mode.VARIABLE else "value of type"
            )
            self.error(
                node,
                ErrorCode.TYPE_MISMATCH,
                f"cannot use {_describe(node)} ({what} {x.type}) as {t} value in {context}",
            )
            return False
        return True

    # =========================================================================
    # Statements
    # =========================================================================

    def _func_body(self, body: Node, scope: Scope, sig: T.Signature) -> None:
        self._sigs.append(sig)
        try:
            self._stmt_list(body.children, scope)
        finally:
            self._sigs.pop()

    def _stmt_list(self, stmts: Iterable[Node], scope: Scope) -> None:
        for stmt in stmts:
            self._stmt(stmt, scope)

    def _stmt(self, node: Node, scope: Scope) -> None:
        if isinstance(node, GenDecl):
            self._local_decl(node, scope)
            return
        if node.kind in _NOOP_STMTS:
            return
        method = getattr(self, f"_stmt_{node.kind}", None)
        if method is not None:
            method(node, scope)
        else:
            self._expr(node, scope)

    def _stmt_expression_statement(self, node: Node, scope: Scope) -> None:
        for child in node.children:
            self._expr(child, scope)

    def _stmt_block(self, node: Node, scope: Scope) -> None:
        bscope = Scope(scope, "block", node.pos, node.end)
        self.scopes[node] = bscope
        self._stmt_list(node.children, bscope)

    def _stmt_labeled_statement(self, node: Node, scope: Scope) -> None:
        for child in node.children:
            if child.kind != "label_name":
                self._stmt(child, scope)

    def _stmt_go_statement(self, node: Node, scope: Scope) -> None:
        for child in node.children:
            self._expr(child, scope)

    _stmt_defer_statement = _stmt_go_statement

    def _stmt_inc_statement(self, node: Node, scope: Scope) -> None:
        for child in node.children:
            self._value(child, scope)

    _stmt_dec_statement = _stmt_inc_statement

    def _stmt_send_statement(self, node: Node, scope: Scope) -> None:
        chan_node, value_node = node.child("channel"), node.child("value")
        ch = self._value(chan_node, scope) if chan_node is not None else Operand(Mode.VALUE)
        if value_node is None:
            return
        u = ch.type.underlying() if _known(ch.type) and ch.type is not None else None
        elem = u.elem if isinstance(u, T.Chan) else None
        x = self._value(value_node, scope, elem)
        if elem is not None:
            self._assignable(x, elem, value_node, "send")

    def _stmt_assignment_statement(self, node: Node, scope: Scope) -> None:
        lhs, rhs = node.child_list("left"), node.child_list("right")
        op = node.op or "="
        if op != "=":
            if len(lhs) != 1 or len(rhs) != 1:
                self.error(
                    node,
                    ErrorCode.TYPE_MISMATCH,
                    f"assignment operation {op} requires single-valued expressions",
                )
                return
            x = self._value(lhs[0], scope)
            y = self._value(rhs[0], scope)
            binop = op[:-1]
            if binop in ("<<", ">>"):
                return
            if self._match_operands(node, binop, x, y, lhs[0], rhs[0]) and binop in ("/", "%"):
                if y.is_constant and _is_integer(x.type):
                    assert y.value is not None
                    if y.value.is_numeric and y.value.val == 0:
                        self.error(node, ErrorCode.TYPE_MISMATCH, "invalid operation: division by zero")
            return

        ops = self._unpack(rhs, len(lhs), scope, node)
        for i, (target, x) in enumerate(zip(lhs, ops, strict=True)):
            t = self._assign_target(target, scope)
            rnode = rhs[i] if len(rhs) == len(lhs) else rhs[0]
            if t is not None:
                self._assignable(x, t, rnode, "assignment")

    def _assign_target(self, node: Node, scope: Scope) -> T.Type | None:
        """Resolve the left side of ``=``. A plain variable is not a use."""
        if isinstance(node, Ident):
            if node.is_blank:
                return None
            _, obj = scope.lookup_parent(node.name)
            if obj is None:
                if not self._dot_fallback(scope):
                    self.error(node, ErrorCode.UNDEFINED, f"undefined: {node.name}")
                return None
            self.uses[node] = obj
            if isinstance(obj, Var):
                if obj in self._decls:
                    self._obj_decl(obj)
                return obj.type
            self.error(
                node,
                ErrorCode.TYPE_MISMATCH,
                f"cannot assign to {node.name} (neither addressable nor a map index expression)",
            )
            return None
        if node.kind == "parenthesized_expression" and node.children:
            return self._assign_target(node.children[0], scope)
        x = self._value(node, scope)
        if x.mode is Mode.VALUE and _known(x.type):
            self.error(
                node,
                ErrorCode.TYPE_MISMATCH,
                f"cannot assign to {_describe(node)} (neither addressable nor a map index expression)",
            )
            return None
        return x.type

    def _unpack(self, rhs: list[Node], n: int, scope: Scope, stmt: Node) -> list[Operand]:
        """Evaluate the right side of an n-way assignment into n operands."""
        if len(rhs) == n:
            return [self._value(r, scope) for r in rhs]
        if len(rhs) == 1:
            x = self._expr(rhs[0], scope)
            if isinstance(x.type, T.Tuple):
                if len(x.type) == n:
                    return [Operand(Mode.VALUE, t) for t in x.type.types()]
                self._assign_mismatch(stmt, n, len(x.type))
                return [Operand(Mode.VALUE) for _ in range(n)]
            if n == 2 and x.mode in (Mode.COMMAOK, Mode.MAPINDEX):
                return [Operand(Mode.VALUE, x.type), Operand(Mode.VALUE, T.UNTYPED_BOOL)]
            if x.mode is Mode.VALUE and x.type is None:
                return [Operand(Mode.VALUE) for _ in range(n)]
            self._single(x, rhs[0])
            self._assign_mismatch(stmt, n, 1)
        else:
            for r in rhs:
                self._expr(r, scope)
            self._assign_mismatch(stmt, n, len(rhs))
        return [Operand(Mode.VALUE) for _ in range(n)]

    def _assign_mismatch(self, node: Node, n: int, m: int) -> None:
        self.error(
            node,
            ErrorCode.TYPE_MISMATCH,
            f"assignment mismatch: {n} variable{'s' if n != 1 else ''} but {m} value{'s' if m != 1 else ''}",
        )

    def _stmt_short_var_declaration(self, node: Node, scope: Scope) -> None:
        lhs, rhs = node.child_list("left"), node.child_list("right")
        ops = self._unpack(rhs, len(lhs), scope, node)
        self._define_vars(node, lhs, ops, rhs, scope)

    def _define_vars(
        self,
        node: Node,
        lhs: list[Node],
        ops: list[Operand],
        rhs: list[Node],
        scope: Scope,
    ) -> None:
        new: list[tuple[Ident, Var]] = []
        seen: set[str] = set()
        ok = True
        for i, (target, x) in enumerate(zip(lhs, ops, strict=True)):
            rnode = rhs[i] if len(rhs) == len(lhs) else (rhs[0] if rhs else node)
            if not isinstance(target, Ident):
                self.error(target, ErrorCode.INVALID_DECL, f"non-name {_describe(target)} on left side of :=")
                ok = False
                continue
            if not target.is_blank:
                if target.name in seen:
                    self.error(target, ErrorCode.REDECLARED, f"{target.name} repeated on left side of :=")
                    ok = False
                    continue
                seen.add(target.name)
                existing = scope.lookup(target.name)
                if existing is not None:
                    # redeclaration: assigns to the variable already in this scope
                    self.uses[target] = existing
                    if isinstance(existing, Var):
                        self._assignable(x, existing.type, rnode, "assignment")
                    else:
                        self.error(
                            target,
                            ErrorCode.TYPE_MISMATCH,
                            f"cannot assign to {target.name} (neither addressable nor a map index expression)",
                        )
                    continue
            v = Var(
                name=target.name,
                pos=target.pos,
                type=self._var_type(x, None, rnode, "assignment"),
                pkg=self.pkg,
            )
            self.defs[target] = v
            if not target.is_blank:
                new.append((target, v))
        if not new and ok:
            self.error(node, ErrorCode.INVALID_DECL, "no new variables on left side of :=")
        for ident, v in new:
            self._declare_local(scope, ident, v)
            self._locals.append(v)

    def _local_decl(self, decl: GenDecl, scope: Scope) -> None:
        if decl.tok is Token.VAR:
            for spec in decl.specs:
                assert isinstance(spec, ValueSpec)
                self._local_vars(spec, scope)
        elif decl.tok is Token.CONST:
            for spec, iota, texpr, values in self._const_specs(decl):
                saved = self._iota
                self._iota = C.make_int(iota)
                consts: list[tuple[Ident, Const]] = []
                try:
                    typ = self._const_type(texpr, scope) if texpr is not None else None
                    for i, ident in enumerate(spec.names):
                        c = Const(name=ident.name, pos=ident.pos, pkg=self.pkg)
                        if i < len(values):
                            c.type, c.value = self._const_init(self._value(values[i], scope), typ, values[i])
                        else:
                            c.type = typ or T.INVALID
                        self.defs[ident] = c
                        consts.append((ident, c))
                finally:
                    self._iota = saved
                for ident, c in consts:
                    self._declare_local(scope, ident, c)
        elif decl.tok is Token.TYPE:
            for spec in decl.specs:
                assert isinstance(spec, TypeSpec)
                ident = spec.name
                tn = TypeName(name=ident.name, pos=ident.pos, pkg=self.pkg, is_alias=spec.is_alias)
                if not spec.is_alias:
                    tn.type = T.Named(obj=tn)
                self.defs[ident] = tn
                # in scope from its own name on, so it may refer to itself
                self._declare_local(scope, ident, tn)
                self._type_decl(tn, spec, scope)
        else:
            self.error(decl, ErrorCode.INVALID_DECL, "imports must appear before other declarations")

    def _local_vars(self, spec: ValueSpec, scope: Scope) -> None:
        typ = self._typexpr(spec.type, scope) if spec.type is not None else None
        names, values = spec.names, spec.values
        if values:
            ops: list[Operand | None] = list(self._unpack(values, len(names), scope, spec))
        else:
            ops = [None] * len(names)
        declared: list[tuple[Ident, Var]] = []
        for i, ident in enumerate(names):
            x = ops[i]
            if x is None:
                t: T.Type | None = typ
            else:
                rnode = values[i] if len(values) == len(names) else values[0]
                t = self._var_type(x, typ, rnode, "variable declaration")
            v = Var(name=ident.name, pos=ident.pos, type=t, pkg=self.pkg)
            self.defs[ident] = v
            declared.append((ident, v))
        for ident, v in declared:
            self._declare_local(scope, ident, v)
            if not ident.is_blank:
                self._locals.append(v)

    def _condition(self, node: Node, scope: Scope, what: str) -> None:
        x = self._value(node, scope)
        if not _known(x.type) or x.type is None or not T.is_complete(x.type):
            return
        u = x.type.underlying()
        if not (isinstance(u, T.Basic) and u.is_(T.BasicInfo.BOOLEAN)):
            self.error(node, ErrorCode.TYPE_MISMATCH, f"non-boolean condition in {what}")

    def _stmt_if_statement(self, node: Node, scope: Scope) -> None:
        s = Scope(scope, "if", node.pos, node.end)
        self.scopes[node] = s
        init = node.child("initializer")
        if init is not None:
            self._stmt(init, s)
        cond = node.child("condition")
        if cond is not None:
            self._condition(cond, s, "if statement")
        for name in ("consequence", "alternative"):
            branch = node.child(name)
            if branch is not None:
                self._stmt(branch, s)

    def _stmt_for_statement(self, node: Node, scope: Scope) -> None:
        s = Scope(scope, "for", node.pos, node.end)
        self.scopes[node] = s
        body = node.child("body")
        for child in node.children:
            if child is body:
                continue
            if child.kind == "for_clause":
                init = child.child("initializer")
                if init is not None:
                    self._stmt(init, s)
                cond = child.child("condition")
                if cond is not None:
                    self._condition(cond, s, "for statement")
                update = child.child("update")
                if update is not None:
                    self._stmt(update, s)
            elif child.kind == "range_clause":
                self._range_clause(child, s)
            else:
                self._condition(child, s, "for statement")
        if body is not None:
            self._stmt(body, s)

    def _range_clause(self, node: Node, scope: Scope) -> None:
        right = node.child("right")
        left = node.child_list("left")
        x = self._value(right, scope) if right is not None else Operand(Mode.VALUE)
        key_t, val_t = self._range_types(x, right)
        if len(left) > 2:
            self.error(left[2], ErrorCode.INVALID_DECL, "range clause permits at most two iteration variables")

        if node.op == ":=":
            declared: list[tuple[Ident, Var]] = []
            for i, target in enumerate(left[:2]):
                if not isinstance(target, Ident):
                    self.error(target, ErrorCode.INVALID_DECL, f"non-name {_describe(target)} on left side of :=")
                    continue
                v = Var(name=target.name, pos=target.pos, type=(key_t, val_t)[i], pkg=self.pkg)
                self.defs[target] = v
                if not target.is_blank:
                    declared.append((target, v))
            for ident, v in declared:
                self._declare_local(scope, ident, v)
                self._locals.append(v)
        else:
            for target in left:
                self._assign_target(target, scope)

    def _range_types(self, x: Operand, node: Node | None) -> tuple[T.Type | None, T.Type | None]:
        if not _known(x.type) or x.type is None:
            return None, None
        u = x.type.underlying()
        if isinstance(u, T.Pointer) and isinstance(u.elem.underlying(), T.Array):
            u = u.elem.underlying()
        if isinstance(u, T.Basic):
            if u.is_(T.BasicInfo.STRING):
                return T.INT, T.INT32
            if u.is_(T.BasicInfo.INTEGER):
                return T.default_type(x.type), None
        elif isinstance(u, (T.Array, T.Slice)):
            return T.INT, u.elem
        elif isinstance(u, T.Map):
            return u.key, u.elem
        elif isinstance(u, T.Chan):
            return u.elem, None
        elif isinstance(u, T.Signature):
            # range over func(yield func(K, V) bool)
            params = u.params.types()
            yield_sig = params[0].underlying() if len(params) == 1 else None
            if isinstance(yield_sig, T.Signature):
                ts = yield_sig.params.types()
                return (ts[0] if ts else None), (ts[1] if len(ts) > 1 else None)
            return None, None
        if T.is_complete(x.type) and node is not None:
            self.error(
                node,
                ErrorCode.TYPE_MISMATCH,
                f"cannot range over {_describe(node)} (variable of type {x.type})",
            )
        return None, None

    def _stmt_expression_switch_statement(self, node: Node, scope: Scope) -> None:
        s = Scope(scope, "switch", node.pos, node.end)
        self.scopes[node] = s
        init = node.child("initializer")
        if init is not None:
            self._stmt(init, s)
        tag_node = node.child("value")
        tag = self._value(tag_node, s) if tag_node is not None else None
        for clause in node.children:
            if clause.kind not in ("expression_case", "default_case"):
                continue
            cs = Scope(s, "case", clause.pos, clause.end)
            self.scopes[clause] = cs
            values = clause.child_list("value")
            for v in values:
                y = self._value(v, s)
                if tag is not None and tag_node is not None:
                    self._match_operands(v, "==", Operand(tag.mode, tag.type, tag.value), y, tag_node, v)
            self._stmt_list(_rest(clause, values), cs)

    def _stmt_type_switch_statement(self, node: Node, scope: Scope) -> None:
        s = Scope(scope, "switch", node.pos, node.end)
        self.scopes[node] = s
        init = node.child("initializer")
        if init is not None:
            self._stmt(init, s)
        value_node = node.child("value")
        x = self._value(value_node, s) if value_node is not None else Operand(Mode.VALUE)
        if value_node is not None and _known(x.type) and x.type is not None and T.is_complete(x.type):
            if not isinstance(x.type.underlying(), T.Interface):
                self.error(
                    value_node,
                    ErrorCode.TYPE_MISMATCH,
                    f"{_describe(value_node)} (variable of type {x.type}) is not an interface",
                )

        aliases = node.child_list("alias")
        alias = aliases[0] if aliases and isinstance(aliases[0], Ident) else None
        if alias is not None:
            # the symbolic variable is only declared per clause
            self.defs[alias] = None
        implicit: list[Var] = []
        for clause in node.children:
            if clause.kind not in ("type_case", "default_case"):
                continue
            cs = Scope(s, "case", clause.pos, clause.end)
            self.scopes[clause] = cs
            tnodes = clause.child_list("type")
            ts = [self._case_type(t, s) for t in tnodes]
            if alias is not None and not alias.is_blank:
                t = ts[0] if len(ts) == 1 and ts[0] is not None else x.type
                v = Var(name=alias.name, pos=alias.pos, type=t, pkg=self.pkg)
                cs.insert(v)
                self.implicits[clause] = v
                implicit.append(v)
            self._stmt_list(_rest(clause, tnodes), cs)

        if (
            alias is not None
            and not alias.is_blank
            and self.config.report_unused_variables
            and not any(v in self._used for v in implicit)
        ):
            self.error(alias, ErrorCode.UNUSED, f"declared and not used: {alias.name}")

    def _case_type(self, node: Node, scope: Scope) -> T.Type | None:
        if isinstance(node, Ident) and node.name == "nil":
            _, obj = scope.lookup_parent("nil")
            if isinstance(obj, Nil):
                self.uses[node] = obj
                self.types[node] = TypeAndValue(Mode.NIL, T.UNTYPED_NIL)
                return None
        return self._typexpr(node, scope)

    def _stmt_select_statement(self, node: Node, scope: Scope) -> None:
        for clause in node.children:
            if clause.kind not in ("communication_case", "default_case"):
                continue
            cs = Scope(scope, "case", clause.pos, clause.end)
            self.scopes[clause] = cs
            comm = clause.child("communication")
            if comm is not None:
                if comm.kind == "receive_statement":
                    self._receive(comm, cs)
                else:
                    self._stmt(comm, cs)
            self._stmt_list(_rest(clause, [comm] if comm is not None else []), cs)

    def _receive(self, node: Node, scope: Scope) -> None:
        left, right = node.child_list("left"), node.child("right")
        if right is None:
            return
        if not left:
            self._expr(right, scope)
            return
        ops = self._unpack([right], len(left), scope, node)
        if node.op == ":=":
            self._define_vars(node, left, ops, [right], scope)
            return
        for target, x in zip(left, ops, strict=True):
            t = self._assign_target(target, scope)
            if t is not None:
                self._assignable(x, t, right, "assignment")

    def _stmt_return_statement(self, node: Node, scope: Scope) -> None:
        results = list(node.children)
        sig = self._sigs[-1] if self._sigs else None
        if sig is None:
            for r in results:
                self._expr(r, scope)
            return
        want = sig.results.types()
        if not results:
            if want and not all(v.name for v in sig.results.vars):
                self.error(node, ErrorCode.TYPE_MISMATCH, "not enough return values")
            return
        if not want:
            for r in results:
                self._expr(r, scope)
            self.error(results[0], ErrorCode.TYPE_MISMATCH, "too many return values")
            return
        if len(results) == 1 and len(want) > 1:
            x = self._expr(results[0], scope)
            if isinstance(x.type, T.Tuple):
                if len(x.type) < len(want):
                    self.error(node, ErrorCode.TYPE_MISMATCH, "not enough return values")
                elif len(x.type) > len(want):
                    self.error(results[0], ErrorCode.TYPE_MISMATCH, "too many return values")
                return
            if x.mode is Mode.VALUE and x.type is None:
                return
            self._single(x, results[0])
            self.error(node, ErrorCode.TYPE_MISMATCH, "not enough return values")
            return

        ops = [self._value(r, scope, want[i] if i < len(want) else None) for i, r in enumerate(results)]
        if len(results) < len(want):
            self.error(node, ErrorCode.TYPE_MISMATCH, "not enough return values")
            return
        if len(results) > len(want):
            self.error(results[len(want)], ErrorCode.TYPE_MISMATCH, "too many return values")
            return
        for x, t, r in zip(ops, want, results, strict=True):
            self._assignable(x, t, r, "return statement")


# =============================================================================
# Helpers
# =============================================================================


def _known(t: T.Type | None) -> bool:
    return t is not None and t is not T.INVALID


def _is_integer(t: T.Type | None) -> bool:
    if t is None:
        return False
    u = t.underlying()
    return isinstance(u, T.Basic) and u.is_(T.BasicInfo.INTEGER)


def _kind_class(t: T.Type) -> str:
    u = t.underlying()
    if not isinstance(u, T.Basic):
        return "other"
    if u.is_(T.BasicInfo.BOOLEAN):
        return "bool"
    if u.is_(T.BasicInfo.STRING):
        return "string"
    if u.is_(T.BasicInfo.NUMERIC):
        return "numeric"
    return "nil"


def _result_type(x: T.Type | None, y: T.Type | None) -> T.Type | None:
    if x is None or y is None:
        return x or y
    xu = isinstance(x, T.Basic) and x.is_untyped
    yu = isinstance(y, T.Basic) and y.is_untyped
    if xu and not yu:
        return y
    if yu and not xu:
        return x
    if xu and yu:
        return x if _UNTYPED_RANK.get(x, 0) >= _UNTYPED_RANK.get(y, 0) else y  # type: ignore[call-overload]
    return x


def _param_type(sig: T.Signature, i: int) -> T.Type | None:
    params = sig.params.types()
    n = len(params)
    if sig.variadic and i >= n - 1 and n:
        last = params[-1]
        return last.elem if isinstance(last, T.Slice) else None
    return params[i] if i < n else None


def _representable(v: C.Value, t: T.Type) -> C.Value | None:
    """v converted to the representation of basic type t, or None if it does not fit."""
    u = t.underlying()
    if not isinstance(u, T.Basic):
        return None
    if u.is_(T.BasicInfo.BOOLEAN):
        return v if v.kind is C.Kind.BOOL else None
    if u.is_(T.BasicInfo.STRING):
        return v if v.kind is C.Kind.STRING else None
    if not v.is_numeric:
        return None
    if u.is_(T.BasicInfo.INTEGER):
        iv = C.to_int(v)
        if iv is None:
            return None
        if u.is_untyped or not u.size:
            return iv
        n = iv.val
        assert isinstance(n, int)
        if u.is_(T.BasicInfo.UNSIGNED):
            return iv if 0 <= n < 1 << u.size else None
        half = 1 << (u.size - 1)
        return iv if -half <= n < half else None
    if u.is_(T.BasicInfo.FLOAT):
        return C.to_float(v)
    if u.is_(T.BasicInfo.COMPLEX):
        return v
    return None


def _overflow_suffix(v: C.Value, u: T.Basic) -> str:
    if not (v.is_numeric and u.is_(T.BasicInfo.INTEGER)):
        return ""
    return " (overflows)" if C.to_int(v) is not None else " (truncated)"


def _const_desc(x: Operand) -> str:
    if x.is_untyped:
        return f"{x.type} constant"
    return f"constant {x.value} of type {x.type}"


def _describe(node: Node | None) -> str:
    """Short source-like rendering of an expression for messages."""
    if node is None:
        return "expression"
    if isinstance(node, Ident):
        return node.name
    if isinstance(node, BasicLit):
        return node.value
    if isinstance(node, SelectorExpr):
        return f"{_describe(node.x)}.{node.sel.name}"
    if node.kind == "call_expression":
        return f"{_describe(node.child('function'))}()"
    if node.kind == "unary_expression" and node.op:
        return f"{node.op}{_describe(node.child('operand'))}"
    if node.kind == "binary_expression" and node.op:
        return f"{_describe(node.child('left'))} {node.op} {_describe(node.child('right'))}"
    if node.kind == "parenthesized_expression" and node.children:
        return f"({_describe(node.children[0])})"
    if node.kind == "index_expression":
        return f"{_describe(node.child('operand'))}[{_describe(node.child('index'))}]"
    return node.kind.replace("_", " ")


def _receiver_base(recv: Node) -> tuple[Ident | None, bool]:
    """Base type name of a receiver and whether it is a pointer receiver."""
    params = [c for c in recv.children if c.kind in _PARAM_KINDS]
    if len(params) != 1:
        return None, False
    t = params[0].child("type")
    ptr = False
    while t is not None:
        if t.kind == "parenthesized_type":
            t = t.children[0] if t.children else None
        elif t.kind == "pointer_type" and not ptr:
            ptr = True
            t = t.children[0] if t.children else None
        elif t.kind == "generic_type":
            t = t.child("type")
        else:
            break
    return (t, ptr) if isinstance(t, Ident) else (None, ptr)


def _embedded_name(tnode: Node | None) -> Ident | None:
    t = tnode
    while t is not None:
        if isinstance(t, Ident):
            return t
        if t.kind == "qualified_type":
            name = t.child("name")
            return name if isinstance(name, Ident) else None
        if t.kind == "generic_type":
            t = t.child("type")
        elif t.kind in ("pointer_type", "parenthesized_type") and t.children:
            t = t.children[0]
        else:
            return None
    return None


def _rest(clause: Node, exclude: list[Node]) -> list[Node]:
    """Children of a case clause other than its case expressions."""
    skip = {id(n) for n in exclude}
    return [c for c in clause.children if id(c) not in skip]


def _static_array_len(t: T.Type | None) -> int | None:
    """Length of an array or pointer-to-array type, if known."""
    if t is None:
        return None
    u = t.underlying()
    if isinstance(u, T.Pointer):
        u = u.elem.underlying()
    return u.length if isinstance(u, T.Array) else None


def _calls_or_receives(node: Node) -> bool:
    return any(
        n.kind == "call_expression" or (n.kind == "unary_expression" and n.op == "<-")
        for n in iter_nodes([node])
    )


def _assignable_types(v: T.Type, t: T.Type) -> bool:
    """Assignability of distinct types with identical structure.

    A value of type v is assignable to t when both have identical
    underlying types and one of them is unnamed, or when v is a
    bidirectional channel whose element type matches t's.
    """
    unnamed = not isinstance(v, (T.Named, T.Basic)) or not isinstance(t, (T.Named, T.Basic))
    if not unnamed:
        return False
    vu, tu = v.underlying(), t.underlying()
    if T.identical(vu, tu):
        return True
    return (
        isinstance(vu, T.Chan)
        and isinstance(tu, T.Chan)
        and vu.dir == "both"
        and T.identical(vu.elem, tu.elem)
    )
