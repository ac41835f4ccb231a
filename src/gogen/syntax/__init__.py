"""Go syntax trees: positions, nodes and the tree-sitter backed parser."""

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
from gogen.syntax.parser import parse_file
from gogen.syntax.positions import NO_POS, Pos, Position, PositionTable, SourceFile

__all__ = [
    "BasicLit",
    "File",
    "FuncDecl",
    "GenDecl",
    "Ident",
    "ImportSpec",
    "NO_POS",
    "Node",
    "Pos",
    "Position",
    "PositionTable",
    "SelectorExpr",
    "SourceFile",
    "Token",
    "TypeSpec",
    "ValueSpec",
    "parse_file",
]
