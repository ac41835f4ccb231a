"""Tree-sitter Go grammar loading.

The grammar ships as the ``tree-sitter-go`` wheel; ``tree_sitter_go.language()``
returns a capsule that ``tree_sitter.Language`` wraps. Loading is cached per
process since languages are immutable and cheap to share between parsers.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import tree_sitter

from gogen.core.errors import InternalError


@dataclass(frozen=True)
class GrammarPack:
    """Install and detection metadata for the Go grammar."""

    name: str
    grammar_package: str
    grammar_module: str
    min_version: str
    extension: str


GO_GRAMMAR = GrammarPack(
    name="go",
    grammar_package="tree-sitter-go",
    grammar_module="tree_sitter_go",
    min_version="0.23.0",
    extension=".go",
)


@lru_cache(maxsize=1)
def go_language() -> tree_sitter.Language:
    """Load the tree-sitter Go language."""
    try:
        mod = importlib.import_module(GO_GRAMMAR.grammar_module)
        return tree_sitter.Language(mod.language())
    except (ImportError, AttributeError) as err:
        raise InternalError.unexpected(
            f"Language not available: {GO_GRAMMAR.name}",
            package=GO_GRAMMAR.grammar_package,
        ) from err


def new_parser() -> Any:
    """Return a tree-sitter parser bound to the Go language.

    Parsers hold mutable state, so each caller gets its own.
    """
    parser = tree_sitter.Parser()
    parser.language = go_language()
    return parser
