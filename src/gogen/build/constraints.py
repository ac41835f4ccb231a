"""Build constraint evaluation (``//go:build`` and legacy ``// +build`` lines).

A constraint expression is parsed once into a predicate over tag names and
evaluated against a :class:`BuildContext` built from ``BuildConfig``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from gogen.config.models import BuildConfig

KNOWN_OS = frozenset(
    {
        "aix",
        "android",
        "darwin",
        "dragonfly",
        "freebsd",
        "hurd",
        "illumos",
        "ios",
        "js",
        "linux",
        "nacl",
        "netbsd",
        "openbsd",
        "plan9",
        "solaris",
        "wasip1",
        "windows",
        "zos",
    }
)

KNOWN_ARCH = frozenset(
    {
        "386",
        "amd64",
        "amd64p32",
        "arm",
        "armbe",
        "arm64",
        "arm64be",
        "loong64",
        "mips",
        "mipsle",
        "mips64",
        "mips64le",
        "mips64p32",
        "mips64p32le",
        "ppc",
        "ppc64",
        "ppc64le",
        "riscv",
        "riscv64",
        "s390",
        "s390x",
        "sparc",
        "sparc64",
        "wasm",
    }
)

UNIX_OS = frozenset(
    {
        "aix",
        "android",
        "darwin",
        "dragonfly",
        "freebsd",
        "hurd",
        "illumos",
        "ios",
        "linux",
        "netbsd",
        "openbsd",
        "solaris",
    }
)

Predicate = Callable[[Callable[[str], bool]], bool]

_TOKEN_RE = re.compile(r"\s*(\|\||&&|!|\(|\)|[A-Za-z0-9_.]+)")


class ConstraintSyntaxError(ValueError):
    """A malformed build constraint line."""


@dataclass
class BuildContext:
    """Tags satisfied for one target platform."""

    goos: str
    goarch: str
    tags: frozenset[str] = field(default_factory=frozenset)
    release_tags: frozenset[str] = field(default_factory=frozenset)
    cgo_enabled: bool = False

    @classmethod
    def from_config(cls, config: BuildConfig) -> BuildContext:
        return cls(
            goos=config.goos,
            goarch=config.goarch,
            tags=frozenset(config.tags),
            release_tags=frozenset(config.release_tags),
            cgo_enabled=config.cgo_enabled,
        )

    def match_tag(self, tag: str) -> bool:
        if tag in self.tags or tag in self.release_tags:
            return True
        if tag == "cgo":
            return self.cgo_enabled
        if tag == "gc":
            return True
        if tag == self.goos or tag == self.goarch:
            return True
        if tag == "unix":
            return self.goos in UNIX_OS
        if tag == "linux" and self.goos == "android":
            return True
        if tag == "solaris" and self.goos == "illumos":
            return True
        return tag == "darwin" and self.goos == "ios"

    def match_file(self, name: str) -> bool:
        """Report whether the _GOOS/_GOARCH suffixes of a file name match.

        The part before the first underscore is never a suffix, so
        ``linux.go`` always matches while ``x_linux.go`` only matches on linux.
        """
        stem = name.rsplit(".", 1)[0]
        i = stem.find("_")
        if i < 0:
            return True
        parts = stem[i:].split("_")
        if parts and parts[-1] == "test":
            parts = parts[:-1]
        if len(parts) >= 2 and parts[-2] in KNOWN_OS and parts[-1] in KNOWN_ARCH:
            return self.match_tag(parts[-2]) and self.match_tag(parts[-1])
        if parts and parts[-1] in KNOWN_OS:
            return self.match_tag(parts[-1])
        if parts and parts[-1] in KNOWN_ARCH:
            return self.match_tag(parts[-1])
        return True


def parse_expr(text: str) -> Predicate:
    """Parse a ``//go:build`` expression into a predicate.

    Raises:
        ConstraintSyntaxError: On malformed input.
    """
    tokens = _tokenize(text)
    parser = _ExprParser(tokens)
    pred = parser.parse_or()
    if parser.peek() is not None:
        raise ConstraintSyntaxError(f"unexpected token {parser.peek()!r}")
    return pred


def parse_plus_build(lines: list[str]) -> Predicate:
    """Parse legacy ``// +build`` lines: lines AND, spaces OR, commas AND."""
    clauses: list[list[list[tuple[bool, str]]]] = []
    for line in lines:
        options: list[list[tuple[bool, str]]] = []
        for option in line.split():
            terms: list[tuple[bool, str]] = []
            for term in option.split(","):
                negated = term.startswith("!")
                tag = term[1:] if negated else term
                if not tag or not re.fullmatch(r"[A-Za-z0-9_.]+", tag):
                    raise ConstraintSyntaxError(f"invalid tag {term!r}")
                terms.append((negated, tag))
            options.append(terms)
        clauses.append(options)

    def pred(ok: Callable[[str], bool]) -> bool:
        return all(
            any(all(ok(tag) != negated for negated, tag in terms) for terms in options)
            for options in clauses
        )

    return pred


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise ConstraintSyntaxError(f"unexpected character {text[pos:].strip()[:1]!r}")
        tokens.append(m.group(1))
        pos = m.end()
    if not tokens:
        raise ConstraintSyntaxError("empty expression")
    return tokens


class _ExprParser:
    def __init__(self, tokens: list[str]) -> None:
        self._tokens = tokens
        self._i = 0

    def peek(self) -> str | None:
        return self._tokens[self._i] if self._i < len(self._tokens) else None

    def _next(self) -> str:
        tok = self.peek()
        if tok is None:
            raise ConstraintSyntaxError("unexpected end of expression")
        self._i += 1
        return tok

    def parse_or(self) -> Predicate:
        left = self.parse_and()
        while self.peek() == "||":
            self._next()
            right = self.parse_and()
            left = _or(left, right)
        return left

    def parse_and(self) -> Predicate:
        left = self.parse_not()
        while self.peek() == "&&":
            self._next()
            right = self.parse_not()
            left = _and(left, right)
        return left

    def parse_not(self) -> Predicate:
        if self.peek() == "!":
            self._next()
            inner = self.parse_not()
            return lambda ok: not inner(ok)
        return self.parse_atom()

    def parse_atom(self) -> Predicate:
        tok = self._next()
        if tok == "(":
            inner = self.parse_or()
            if self._next() != ")":
                raise ConstraintSyntaxError("missing )")
            return inner
        if tok in ("||", "&&", ")"):
            raise ConstraintSyntaxError(f"unexpected token {tok!r}")
        return lambda ok: ok(tok)


def _or(a: Predicate, b: Predicate) -> Predicate:
    return lambda ok: a(ok) or b(ok)


def _and(a: Predicate, b: Predicate) -> Predicate:
    return lambda ok: a(ok) and b(ok)
