"""Tests for exact constant arithmetic."""

from __future__ import annotations

from fractions import Fraction

import pytest

from gogen.check.constant import (
    Kind,
    binary_op,
    compare,
    from_literal,
    make_bool,
    make_float,
    make_int,
    make_string,
    shift,
    to_int,
    unary_op,
)
from gogen.syntax.literals import encode_go_string


class TestFromLiteral:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("42", 42),
            ("1_000", 1000),
            ("0x1F", 31),
            ("0b101", 5),
            ("0o17", 15),
            ("017", 15),
            ("0", 0),
        ],
    )
    def test_int_literals(self, text: str, expected: int) -> None:
        assert from_literal("int_literal", text) == make_int(expected)

    def test_malformed_int(self) -> None:
        with pytest.raises(ValueError):
            from_literal("int_literal", "09")

    def test_float_is_exact(self) -> None:
        v = from_literal("float_literal", "0.1")
        assert v.kind is Kind.FLOAT
        assert v.val == Fraction(1, 10)

    def test_hex_float(self) -> None:
        assert from_literal("float_literal", "0x1p-2").val == Fraction(1, 4)

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("'a'", 97), ("'\\n'", 10), ("'\\x41'", 65), ("'\\u00e9'", 0xE9), ("'\\101'", 65)],
    )
    def test_rune_literals(self, text: str, expected: int) -> None:
        assert from_literal("rune_literal", text) == make_int(expected)

    def test_strings(self) -> None:
        assert from_literal("interpreted_string_literal", '"a\\tb"') == make_string("a\tb")
        assert from_literal("raw_string_literal", "`a\\tb`") == make_string("a\\tb")

    def test_given_byte_escapes_when_decoded_then_string_keeps_bytes(self) -> None:
        # When
        v = from_literal("interpreted_string_literal", '"\\377\\u00e9"')

        # Then
        assert encode_go_string(str(v.val)) == b"\xff\xc3\xa9"
        assert str(v) == '"\\xffé"'

    def test_unknown_escape_rejected(self) -> None:
        with pytest.raises(ValueError):
            from_literal("interpreted_string_literal", '"\\N{DASH}"')

    def test_imaginary(self) -> None:
        v = from_literal("imaginary_literal", "2i")
        assert v.kind is Kind.COMPLEX
        assert v.val == 2j


class TestArithmetic:
    def test_untyped_precision(self) -> None:
        # Given - a value far beyond 64 bits
        big = shift("<<", make_int(1), make_int(100))

        # When
        result = binary_op("-", big, big)

        # Then
        assert result == make_int(0)

    def test_integer_division_truncates_toward_zero(self) -> None:
        assert binary_op("/", make_int(-7), make_int(2)) == make_int(-3)
        assert binary_op("%", make_int(-7), make_int(2)) == make_int(-1)

    def test_float_division_exact(self) -> None:
        result = binary_op("/", make_float(1), make_int(3))
        assert result.val == Fraction(1, 3)

    def test_integer_div_override_keeps_exact_quotient(self) -> None:
        result = binary_op("/", make_int(7), make_int(2), integer_div=False)
        assert result == make_float(Fraction(7, 2))

    def test_division_by_zero(self) -> None:
        with pytest.raises(ValueError, match="division by zero"):
            binary_op("/", make_int(1), make_int(0))

    def test_string_concatenation(self) -> None:
        assert binary_op("+", make_string("a"), make_string("b")) == make_string("ab")

    def test_mismatched_kinds(self) -> None:
        with pytest.raises(ValueError):
            binary_op("+", make_string("a"), make_int(1))

    def test_bit_ops(self) -> None:
        assert binary_op("&^", make_int(0b1111), make_int(0b0101)) == make_int(0b1010)

    def test_unary(self) -> None:
        assert unary_op("-", make_int(3)) == make_int(-3)
        assert unary_op("^", make_int(0)) == make_int(-1)
        assert unary_op("^", make_int(0), unsigned_bits=8) == make_int(255)
        assert unary_op("!", make_bool(True)) == make_bool(False)

    def test_negative_shift(self) -> None:
        with pytest.raises(ValueError, match="negative shift"):
            shift("<<", make_int(1), make_int(-1))

    def test_to_int(self) -> None:
        assert to_int(make_float(Fraction(4, 1))) == make_int(4)
        assert to_int(make_float(Fraction(1, 2))) is None


class TestCompare:
    def test_numeric_across_kinds(self) -> None:
        assert compare("<", make_int(1), make_float(Fraction(3, 2)))
        assert compare("==", make_int(2), make_float(2))

    def test_strings(self) -> None:
        assert compare("<", make_string("a"), make_string("b"))

    def test_bool_ordering_rejected(self) -> None:
        with pytest.raises(ValueError):
            compare("<", make_bool(True), make_bool(False))


class TestStr:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (make_int(7), "7"),
            (make_bool(False), "false"),
            (make_string('a"b\n'), '"a\\"b\\n"'),
            (make_float(Fraction(1, 2)), "0.5"),
            (make_float(3), "3"),
        ],
    )
    def test_go_syntax(self, value, expected: str) -> None:
        assert str(value) == expected
