"""Go source parsing into position-tracked syntax trees.

tree-sitter always produces a tree, recovering from errors with ``ERROR``
and missing nodes. A tree containing either is reported as a parse failure
here, so callers only ever see complete trees.

Conversion keeps every named node except comments and folds a few pure
list wrappers (``expression_list``, ``statement_list``, ``literal_element``,
``var_spec_list``, ``import_spec_list``) into their parents; folded children
inherit the wrapper's grammar field name. A single ``x, y`` expression list
therefore shows up as two nodes under the parent's ``left``/``right``/
``value`` field, matching how Go's own AST lays them out.

Operators land in ``Node.op``: the ``operator`` field of unary, binary and
assignment nodes, the ``:=``/``=`` of short variable declarations, range
clauses and receive statements, the ``*`` of an embedded pointer field,
and the direction tokens of a channel type.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

from gogen.core.errors import InputError, ParseError
from gogen.syntax.grammar import new_parser
from gogen.syntax.nodes import (
    IDENT_KINDS,
    LITERAL_KINDS,
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
from gogen.syntax.positions import Pos, PositionTable, SourceFile

_FOLDED = frozenset(
    {
        "expression_list",
        "statement_list",
        "literal_element",
        "var_spec_list",
        "import_spec_list",
    }
)

_SKIPPED = frozenset({"comment"})

# kinds whose anonymous "=", ":=" or "*" token is kept as ``op``
_TOKEN_OPS = {
    "short_var_declaration": frozenset({":="}),
    "range_clause": frozenset({":=", "="}),
    "receive_statement": frozenset({":=", "="}),
    "field_declaration": frozenset({"*"}),
}

_GEN_DECLS = {
    "import_declaration": Token.IMPORT,
    "const_declaration": Token.CONST,
    "type_declaration": Token.TYPE,
    "var_declaration": Token.VAR,
}


def parse_file(table: PositionTable, name: str, src: str | bytes | None = None) -> File:
    """Parse one Go source file.

    Args:
        table: Position table the file is registered in.
        name: File name used in positions. Read from disk when src is None.
        src: Source text. Strings are encoded as UTF-8.

    Returns:
        The File node.

    Raises:
        InputError: The file cannot be read.
        ParseError: The text is not syntactically valid Go.
    """
    if src is None:
        try:
            data = Path(name).read_bytes()
        except FileNotFoundError as e:
            raise InputError.path_not_found(name) from e
        except OSError as e:
            raise InputError.unreadable(name, e.strerror or str(e)) from e
    elif isinstance(src, str):
        data = src.encode("utf-8")
    else:
        data = src

    sf = table.add_file(name, data)
    # a file may end without a newline; the grammar needs the final terminator
    tree = new_parser().parse(data if not data or data.endswith(b"\n") else data + b"\n")
    root = tree.root_node

    if root.has_error:
        bad = _first_error(root)
        if bad is not None:
            raise ParseError.syntax(str(sf.position(_pos(sf, bad.start_byte))), _describe(bad))

    _check_package_clause(root, sf)

    file = _convert(root, sf)
    assert isinstance(file, File)
    file.filename = name
    return file


def _pos(sf: SourceFile, byte: int) -> Pos:
    # the terminator appended before parsing lies one byte past the end
    return sf.pos(min(byte, sf.size))


def _first_error(node: Any) -> Any | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return node


def _describe(node: Any) -> str:
    if node.is_missing:
        return f"expected {node.type}"
    text = node.text.decode("utf-8", errors="replace") if node.text else ""
    text = text.strip().splitlines()[0] if text.strip() else ""
    if not text:
        return "syntax error"
    if len(text) > 32:
        text = text[:29] + "..."
    return f"syntax error near {text!r}"


def _check_package_clause(root: Any, sf: SourceFile) -> None:
    for child in root.named_children:
        if child.type in _SKIPPED:
            continue
        if child.type == "package_clause":
            return
        raise ParseError.syntax(
            str(sf.position(_pos(sf, child.start_byte))),
            f"expected 'package', found {child.type}",
        )
    raise ParseError.syntax(str(sf.position(sf.pos(sf.size))), "expected 'package', found 'EOF'")


def _iter_children(ts_node: Any) -> Iterator[tuple[str | None, Any]]:
    """Yield (field name, child) for every child, folding list wrappers."""
    cursor = ts_node.walk()
    if not cursor.goto_first_child():
        return
    while True:
        child = cursor.node
        field_name = cursor.field_name
        if child.type in _FOLDED:
            for inner_field, inner in _iter_children(child):
                yield field_name or inner_field, inner
        else:
            yield field_name, child
        if not cursor.goto_next_sibling():
            break


def _text(ts_node: Any) -> str:
    return ts_node.text.decode("utf-8") if ts_node.text else ""


def _new_node(ts_node: Any, sf: SourceFile) -> Node:
    kind = ts_node.type
    pos = _pos(sf, ts_node.start_byte)
    end = _pos(sf, ts_node.end_byte)

    if kind in IDENT_KINDS:
        return Ident(kind=kind, pos=pos, end=end, name=_text(ts_node))
    if kind in LITERAL_KINDS:
        return BasicLit(kind=kind, pos=pos, end=end, value=_text(ts_node))
    if kind == "source_file":
        return File(kind=kind, pos=pos, end=end)
    if kind in _GEN_DECLS:
        return GenDecl(kind=kind, pos=pos, end=end, tok=_GEN_DECLS[kind])
    if kind == "const_spec":
        return ValueSpec(kind=kind, pos=pos, end=end, tok=Token.CONST)
    if kind == "var_spec":
        return ValueSpec(kind=kind, pos=pos, end=end, tok=Token.VAR)
    if kind in ("type_spec", "type_alias"):
        return TypeSpec(kind=kind, pos=pos, end=end)
    if kind == "import_spec":
        return ImportSpec(kind=kind, pos=pos, end=end)
    if kind in ("function_declaration", "method_declaration"):
        return FuncDecl(kind=kind, pos=pos, end=end)
    if kind == "selector_expression":
        return SelectorExpr(kind=kind, pos=pos, end=end)
    return Node(kind=kind, pos=pos, end=end)


def _convert(ts_node: Any, sf: SourceFile) -> Node:
    node = _new_node(ts_node, sf)
    if isinstance(node, (Ident, BasicLit)):
        return node

    for field_name, child in _iter_children(ts_node):
        if not child.is_named:
            if field_name == "operator":
                node.op = _text(child)
            elif child.type == "(" and isinstance(node, GenDecl):
                node.grouped = True
            elif node.kind == "channel_type":
                # "chan", "chan<-" or "<-chan"
                node.op = (node.op or "") + child.type
            elif node.op is None and child.type in _TOKEN_OPS.get(node.kind, ()):
                node.op = child.type
            continue
        if child.type in _SKIPPED:
            continue
        converted = _convert(child, sf)
        node.children.append(converted)
        if field_name:
            node.fields.setdefault(field_name, []).append(converted)

    if node.kind == "keyed_element" and not node.fields and len(node.children) == 2:
        # older grammars leave key and value unnamed
        node.fields["key"] = [node.children[0]]
        node.fields["value"] = [node.children[1]]
    return node
