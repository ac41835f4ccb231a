"""Tests for Go rune and string literal decoding."""

from __future__ import annotations

import pytest

from gogen.syntax.literals import encode_go_string, unquote_rune, unquote_string


class TestUnquoteString:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ('"a\\tb"', b"a\tb"),
            ('"\\377"', b"\xff"),
            ('"\\xff\\x00"', b"\xff\x00"),
            ('"\\u00e9"', "é".encode()),
            ('"\\U0001F600"', "\U0001f600".encode()),
            ('"é"', "é".encode()),
            ('"\\"q\\""', b'"q"'),
            ("`a\\tb`", b"a\\tb"),
            ("`line\r\nnext`", b"line\nnext"),
        ],
    )
    def test_bytes_of_decoded_string(self, text: str, expected: bytes) -> None:
        assert encode_go_string(unquote_string(text)) == expected

    def test_given_byte_escape_when_decoded_then_one_byte_not_one_code_point(self) -> None:
        # Given
        text = '"\\xc3\\xa9"'

        # When
        value = unquote_string(text)

        # Then - two bytes forming a valid UTF-8 sequence read back as é
        assert value == "é"
        assert len(encode_go_string(value)) == 2

    @pytest.mark.parametrize(
        "text",
        [
            '"\\\'"',
            '"\\N{DASH}"',
            '"\\400"',
            '"\\12"',
            '"\\x4"',
            '"\\uD800"',
            '"\\U00110000"',
            '"\\q"',
            '"a\nb"',
        ],
    )
    def test_invalid_escapes_rejected(self, text: str) -> None:
        with pytest.raises(ValueError):
            unquote_string(text)


class TestUnquoteRune:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("'a'", 97),
            ("'\\n'", 10),
            ("'\\''", 39),
            ("'\\377'", 255),
            ("'\\x41'", 65),
            ("'\\u00e9'", 0xE9),
            ("'é'", 0xE9),
        ],
    )
    def test_code_point(self, text: str, expected: int) -> None:
        assert unquote_rune(text) == expected

    @pytest.mark.parametrize("text", ["''", "'ab'", "'\\\"'", "'\\400'"])
    def test_invalid_runes_rejected(self, text: str) -> None:
        with pytest.raises(ValueError):
            unquote_rune(text)
