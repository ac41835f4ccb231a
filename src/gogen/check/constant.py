"""Exact constant values and constant arithmetic.

Integers are Python ints and floats are Fractions, so untyped constant
arithmetic is exact the way Go's is. Complex values use Python complex.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from fractions import Fraction

from gogen.syntax.literals import unquote_rune, unquote_string


class Kind(IntEnum):
    # numeric kinds are ordered so that max() gives the promoted kind
    BOOL = 0
    STRING = 1
    INT = 2
    FLOAT = 3
    COMPLEX = 4


@dataclass(frozen=True, slots=True)
class Value:
    kind: Kind
    val: bool | str | int | Fraction | complex

    @property
    def is_numeric(self) -> bool:
        return self.kind >= Kind.INT

    def __str__(self) -> str:
        if self.kind is Kind.BOOL:
            return "true" if self.val else "false"
        if self.kind is Kind.STRING:
            return _go_quote(str(self.val))
        if self.kind is Kind.FLOAT:
            f = self.val
            assert isinstance(f, Fraction)
            return str(f.numerator) if f.denominator == 1 else repr(float(f))
        if self.kind is Kind.COMPLEX:
            c = complex(self.val)
            return f"({_num(c.real)} + {_num(c.imag)}i)"
        return str(self.val)


def _num(x: float) -> str:
    return str(int(x)) if x == int(x) else repr(x)


def _go_quote(s: str) -> str:
    out = []
    for ch in s:
        if ch == '"':
            out.append('\\"')
        elif ch == "\\":
            out.append("\\\\")
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\t":
            out.append("\\t")
        elif ord(ch) < 0x20:
            out.append(f"\\x{ord(ch):02x}")
        elif 0xDC80 <= ord(ch) <= 0xDCFF:
            # a byte that is not valid UTF-8
            out.append(f"\\x{ord(ch) - 0xDC00:02x}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def make_bool(b: bool) -> Value:
    return Value(Kind.BOOL, b)


def make_string(s: str) -> Value:
    return Value(Kind.STRING, s)


def make_int(i: int) -> Value:
    return Value(Kind.INT, i)


def make_float(f: Fraction | float | int) -> Value:
    return Value(Kind.FLOAT, Fraction(f))


_INT_RE = re.compile(r"^(0[xX][0-9a-fA-F_]+|0[bB][01_]+|0[oO]?[0-7_]*|[1-9][0-9_]*|0)$")


def parse_int(text: str) -> int:
    t = text.replace("_", "")
    if not _INT_RE.match(text):
        raise ValueError(f"malformed integer literal {text}")
    if t[:2] in ("0x", "0X"):
        return int(t[2:], 16)
    if t[:2] in ("0b", "0B"):
        return int(t[2:], 2)
    if t[:2] in ("0o", "0O"):
        return int(t[2:], 8)
    if len(t) > 1 and t[0] == "0":
        return int(t[1:], 8)
    return int(t)


def parse_float(text: str) -> Fraction:
    t = text.replace("_", "")
    if t[:2] in ("0x", "0X"):
        if "p" not in t and "P" not in t:
            raise ValueError(f"hexadecimal mantissa requires a 'p' exponent: {text}")
        return Fraction(float.fromhex(t))
    return Fraction(t)


def from_literal(kind: str, text: str) -> Value:
    """Value of a basic literal given its grammar node kind and source text.

    Raises:
        ValueError: The literal text is malformed.
    """
    if kind == "int_literal":
        return make_int(parse_int(text))
    if kind == "float_literal":
        return make_float(parse_float(text))
    if kind == "imaginary_literal":
        body = text[:-1]
        try:
            mag = float(parse_int(body))
        except ValueError:
            mag = float(parse_float(body))
        return Value(Kind.COMPLEX, complex(0, mag))
    if kind == "rune_literal":
        return make_int(unquote_rune(text))
    if kind in ("raw_string_literal", "interpreted_string_literal"):
        return make_string(unquote_string(text))
    raise ValueError(f"not a literal kind: {kind}")


def _promote(x: Value, y: Value) -> tuple[Kind, object, object]:
    k = max(x.kind, y.kind)
    return k, _as(x, k), _as(y, k)


def _as(v: Value, k: Kind) -> object:
    if k is Kind.FLOAT:
        return Fraction(v.val)  # type: ignore[arg-type]
    if k is Kind.COMPLEX:
        return complex(v.val)  # type: ignore[arg-type]
    return v.val


def to_int(v: Value) -> Value | None:
    """v as an integer constant if it has an exact integer value."""
    if v.kind is Kind.INT:
        return v
    if v.kind is Kind.FLOAT:
        f = v.val
        assert isinstance(f, Fraction)
        return make_int(int(f)) if f.denominator == 1 else None
    if v.kind is Kind.COMPLEX:
        c = complex(v.val)
        if c.imag == 0 and c.real == int(c.real):
            return make_int(int(c.real))
    return None


def to_float(v: Value) -> Value | None:
    if v.kind in (Kind.INT, Kind.FLOAT):
        return make_float(v.val)  # type: ignore[arg-type]
    if v.kind is Kind.COMPLEX:
        c = complex(v.val)
        if c.imag == 0:
            return make_float(c.real)
    return None


def unary_op(op: str, x: Value, unsigned_bits: int = 0) -> Value:
    """Apply a unary operator. ``unsigned_bits`` bounds ``^`` for unsigned types.

    Raises:
        ValueError: The operator does not apply to the operand.
    """
    if op == "+" and x.is_numeric:
        return x
    if op == "-" and x.is_numeric:
        return Value(x.kind, -x.val)  # type: ignore[operator]
    if op == "^" and x.kind is Kind.INT:
        i = x.val
        assert isinstance(i, int)
        if unsigned_bits:
            return make_int(i ^ ((1 << unsigned_bits) - 1))
        return make_int(~i)
    if op == "!" and x.kind is Kind.BOOL:
        return make_bool(not x.val)
    raise ValueError(f"operator {op} not defined on {x}")


def binary_op(op: str, x: Value, y: Value, integer_div: bool | None = None) -> Value:
    """Apply an arithmetic or logical binary operator.

    Division truncates when both operands are integers, unless
    ``integer_div`` overrides that (typed float operands holding integral
    values).

    Raises:
        ValueError: Mismatched kinds, undefined operator, or division by zero.
    """
    if op in ("&&", "||"):
        if x.kind is Kind.BOOL and y.kind is Kind.BOOL:
            return make_bool(x.val and y.val if op == "&&" else x.val or y.val)  # type: ignore[arg-type]
        raise ValueError(f"operator {op} not defined on {x}")

    if x.kind is Kind.STRING and y.kind is Kind.STRING:
        if op == "+":
            return make_string(str(x.val) + str(y.val))
        raise ValueError(f"operator {op} not defined on {x}")

    if not (x.is_numeric and y.is_numeric):
        raise ValueError(f"mismatched constant kinds for {op}")

    k, a, b = _promote(x, y)
    if integer_div is None:
        integer_div = k is Kind.INT

    if op in ("/", "%") and b == 0:
        raise ValueError("division by zero")

    if op == "+":
        return Value(k, a + b)  # type: ignore[operator]
    if op == "-":
        return Value(k, a - b)  # type: ignore[operator]
    if op == "*":
        return Value(k, a * b)  # type: ignore[operator]
    if op == "/":
        if integer_div and k is Kind.INT:
            assert isinstance(a, int) and isinstance(b, int)
            q = abs(a) // abs(b)
            return make_int(q if (a >= 0) == (b >= 0) else -q)
        if k is Kind.INT:
            return make_float(Fraction(a, b))  # type: ignore[arg-type]
        return Value(k, a / b)  # type: ignore[operator]

    if k is not Kind.INT:
        raise ValueError(f"operator {op} not defined on untyped float")
    assert isinstance(a, int) and isinstance(b, int)
    if op == "%":
        q = abs(a) // abs(b)
        q = q if (a >= 0) == (b >= 0) else -q
        return make_int(a - b * q)
    if op == "&":
        return make_int(a & b)
    if op == "|":
        return make_int(a | b)
    if op == "^":
        return make_int(a ^ b)
    if op == "&^":
        return make_int(a & ~b)
    raise ValueError(f"unknown operator {op}")


def shift(op: str, x: Value, s: Value) -> Value:
    """Apply << or >>. The shift count must be a non-negative integer."""
    xi = to_int(x)
    si = to_int(s)
    if xi is None or si is None:
        raise ValueError("shifted operand must be integer")
    n = si.val
    assert isinstance(n, int)
    if n < 0:
        raise ValueError(f"negative shift count {n}")
    v = xi.val
    assert isinstance(v, int)
    return make_int(v << n if op == "<<" else v >> n)


def compare(op: str, x: Value, y: Value) -> bool:
    """Compare two constants.

    Raises:
        ValueError: The operands are not comparable with op.
    """
    if x.kind is Kind.BOOL or y.kind is Kind.BOOL or x.kind is Kind.STRING or y.kind is Kind.STRING:
        if x.kind is not y.kind:
            raise ValueError("mismatched constant kinds")
        a, b = x.val, y.val
        if x.kind is Kind.BOOL and op not in ("==", "!="):
            raise ValueError(f"operator {op} not defined on bool")
    else:
        k, a, b = _promote(x, y)
        if k is Kind.COMPLEX and op not in ("==", "!="):
            raise ValueError(f"operator {op} not defined on complex")
    if op == "==":
        return a == b
    if op == "!=":
        return a != b
    if op == "<":
        return a < b  # type: ignore[operator]
    if op == "<=":
        return a <= b  # type: ignore[operator]
    if op == ">":
        return a > b  # type: ignore[operator]
    if op == ">=":
        return a >= b  # type: ignore[operator]
    raise ValueError(f"unknown comparison {op}")
