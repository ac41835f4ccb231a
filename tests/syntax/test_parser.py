"""Tests for syntax/parser.py: tree-sitter parse trees converted to Nodes."""

from __future__ import annotations

from pathlib import Path

import pytest

from gogen.core.errors import ErrorCode, InputError, ParseError
from gogen.syntax.nodes import (
    BasicLit,
    File,
    FuncDecl,
    GenDecl,
    Ident,
    SelectorExpr,
    Token,
    TypeSpec,
    ValueSpec,
)
from gogen.syntax.parser import parse_file
from gogen.syntax.positions import PositionTable
from gogen.traversal import iter_nodes

SRC = """\
// Package p is a sample.
package p

import (
	"fmt"
	str "strings"
)

const (
	A = iota
	B
)

var x, y = 1, 2

type T struct{ n int }

type Alias = T

func (t *T) Get() int { return t.n }

func main() {
	z := x + y
	fmt.Println(str.ToUpper("hi"), z)
}
"""


def _parse(src: str, name: str = "a.go") -> tuple[File, PositionTable]:
    table = PositionTable()
    return parse_file(table, name, src), table


def _find(root: File, kind: str) -> list:
    return [n for n in iter_nodes([root]) if n.kind == kind]


class TestParseFile:
    def test_package_name_and_filename(self) -> None:
        file, _ = _parse(SRC)

        assert file.filename == "a.go"
        assert file.name is not None
        assert file.name.name == "p"

    def test_top_level_decls_in_source_order(self) -> None:
        file, _ = _parse(SRC)

        kinds = [d.kind for d in file.decls]

        assert kinds == [
            "import_declaration",
            "const_declaration",
            "var_declaration",
            "type_declaration",
            "type_declaration",
            "method_declaration",
            "function_declaration",
        ]

    def test_imports(self) -> None:
        file, _ = _parse(SRC)

        imports = file.imports

        assert [s.path_value for s in imports] == ["fmt", "strings"]
        assert imports[0].name is None
        assert imports[1].name is not None and imports[1].name.name == "str"

    def test_comments_dropped(self) -> None:
        file, _ = _parse(SRC)
        assert not _find(file, "comment")

    def test_reads_from_disk_when_no_source(self, tmp_path: Path) -> None:
        path = tmp_path / "disk.go"
        path.write_text("package disk\n")

        file = parse_file(PositionTable(), str(path))

        assert file.name is not None and file.name.name == "disk"


class TestDeclarations:
    def test_grouped_const_decl(self) -> None:
        file, _ = _parse(SRC)
        const = file.decls[1]

        assert isinstance(const, GenDecl)
        assert const.tok is Token.CONST
        assert const.grouped
        specs = const.specs
        assert [s.names[0].name for s in specs if isinstance(s, ValueSpec)] == ["A", "B"]
        assert isinstance(specs[1], ValueSpec) and specs[1].values == []

    def test_ungrouped_var_decl_with_multiple_names(self) -> None:
        file, _ = _parse(SRC)
        var = file.decls[2]

        assert isinstance(var, GenDecl)
        assert var.tok is Token.VAR
        assert not var.grouped
        (spec,) = var.specs
        assert isinstance(spec, ValueSpec)
        assert [n.name for n in spec.names] == ["x", "y"]
        assert [v.value for v in spec.values if isinstance(v, BasicLit)] == ["1", "2"]

    def test_grouped_var_decl(self) -> None:
        file, _ = _parse("package p\n\nvar (\n\ta int\n\tb = 2\n)\n")
        (var,) = file.decls

        assert isinstance(var, GenDecl)
        assert var.grouped
        assert len(var.specs) == 2

    def test_type_definition_and_alias(self) -> None:
        file, _ = _parse(SRC)
        (t,) = file.decls[3].specs
        (alias,) = file.decls[4].specs

        assert isinstance(t, TypeSpec) and isinstance(alias, TypeSpec)
        assert t.name.name == "T"
        assert not t.is_alias
        assert t.type is not None and t.type.kind == "struct_type"
        assert alias.name.name == "Alias"
        assert alias.is_alias

    def test_method_and_function(self) -> None:
        file, _ = _parse(SRC)
        method, func = file.decls[5], file.decls[6]

        assert isinstance(method, FuncDecl) and isinstance(func, FuncDecl)
        assert method.is_method
        assert method.name.name == "Get"
        assert method.result is not None
        assert not func.is_method
        assert func.name.name == "main"
        assert func.body is not None

    def test_generic_type_params(self) -> None:
        file, _ = _parse("package p\n\ntype List[T any] []T\n\nfunc Map[A, B any](a A) B { var b B; return b }\n")
        (spec,) = file.decls[0].specs
        func = file.decls[1]

        assert isinstance(spec, TypeSpec) and spec.type_params is not None
        assert isinstance(func, FuncDecl) and func.type_params is not None


class TestExpressions:
    def test_short_var_declaration(self) -> None:
        file, _ = _parse(SRC)
        (stmt,) = _find(file, "short_var_declaration")

        assert stmt.op == ":="
        assert [n.name for n in stmt.child_list("left")] == ["z"]
        (rhs,) = stmt.child_list("right")
        assert rhs.kind == "binary_expression"
        assert rhs.op == "+"

    def test_selector(self) -> None:
        file, _ = _parse(SRC)
        selectors = [n for n in _find(file, "selector_expression") if isinstance(n, SelectorExpr)]

        pairs = [(s.x.name, s.sel.name) for s in selectors if isinstance(s.x, Ident)]

        assert ("fmt", "Println") in pairs
        assert ("str", "ToUpper") in pairs
        assert ("t", "n") in pairs

    def test_expression_lists_fold_into_fields(self) -> None:
        file, _ = _parse("package p\n\nfunc f() { a, b := 1, 2; _, _ = a, b }\n")
        (stmt,) = _find(file, "short_var_declaration")

        assert len(stmt.child_list("left")) == 2
        assert len(stmt.child_list("right")) == 2
        (assign,) = _find(file, "assignment_statement")
        assert assign.op == "="

    def test_string_values(self) -> None:
        file, _ = _parse('package p\n\nconst s, r = "a\\tb", `x\\n`\n')
        lits = [n for n in iter_nodes([file]) if isinstance(n, BasicLit)]

        assert [lit.string_value() for lit in lits] == ["a\tb", "x\\n"]

    def test_channel_direction(self) -> None:
        file, _ = _parse("package p\n\nvar a chan int\nvar b <-chan int\nvar c chan<- int\n")

        ops = [n.op for n in _find(file, "channel_type")]

        assert ops == ["chan", "<-chan", "chan<-"]


class TestPositions:
    def test_ident_position(self) -> None:
        file, table = _parse(SRC)
        method = file.decls[5]
        assert isinstance(method, FuncDecl)

        position = table.position(method.name.pos)

        assert str(position) == "a.go:20:13"

    def test_node_range_covers_source(self) -> None:
        src = "package p\n"
        file, table = _parse(src)

        assert table.position(file.pos).offset == 0
        assert table.position(file.end).offset == len(src)

    def test_given_no_trailing_newline_when_parsed_then_range_ends_at_source_end(self) -> None:
        # Given
        src = "package p; type X struct { a string }"

        # When
        file, table = _parse(src)

        # Then
        (spec,) = _find(file, "type_spec")
        assert isinstance(spec, TypeSpec) and spec.name.name == "X"
        assert table.position(file.end).offset == len(src)
        assert table.position(spec.end).offset == len(src)

    def test_second_file_positions_after_first(self) -> None:
        table = PositionTable()
        a = parse_file(table, "a.go", "package p\n")
        b = parse_file(table, "b.go", "package p\n")

        assert b.pos > a.end
        assert table.position(b.pos).filename == "b.go"


class TestParseErrors:
    def test_syntax_error_has_position(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            _parse("package p\n\nfunc f( {\n", name="bad.go")

        assert exc_info.value.code == ErrorCode.SYNTAX_ERROR
        assert exc_info.value.details["position"].startswith("bad.go:")

    def test_missing_package_clause(self) -> None:
        with pytest.raises(ParseError, match="expected 'package'"):
            _parse("func f() {}\n")

    def test_empty_file(self) -> None:
        with pytest.raises(ParseError, match="expected 'package', found 'EOF'"):
            _parse("")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(InputError) as exc_info:
            parse_file(PositionTable(), str(tmp_path / "missing.go"))
        assert exc_info.value.code == ErrorCode.PATH_NOT_FOUND
