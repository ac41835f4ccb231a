"""Decoding of Go rune and string literals.

Go strings are byte sequences. ``\\x`` and octal escapes denote single
bytes, ``\\u``/``\\U`` escapes and plain characters denote UTF-8 encoded
code points. Decoded strings keep bytes that are not valid UTF-8 as lone
surrogates (``surrogateescape``), so ``encode_go_string`` gives back the
exact bytes.
"""

from __future__ import annotations

_SIMPLE_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "v": 0x0B,
    "\\": 0x5C,
}

_HEX_DIGITS = {"x": 2, "u": 4, "U": 8}


def _escape(body: str, i: int, quote: str) -> tuple[int, bool, int]:
    """Decode the escape starting at ``body[i] == "\\"``.

    Returns:
        (value, is_byte, index after the escape).

    Raises:
        ValueError: Unknown or malformed escape.
    """
    c = body[i + 1 : i + 2]
    if c in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[c], False, i + 2
    if c == quote:
        return ord(quote), False, i + 2
    if c in _HEX_DIGITS:
        n = _HEX_DIGITS[c]
        digits = body[i + 2 : i + 2 + n]
        if len(digits) != n or any(d not in "0123456789abcdefABCDEF" for d in digits):
            raise ValueError(f"escape \\{c} needs {n} hexadecimal digits")
        value = int(digits, 16)
        if c != "x" and (value > 0x10FFFF or 0xD800 <= value <= 0xDFFF):
            raise ValueError(f"escape sequence is invalid Unicode code point: \\{c}{digits}")
        return value, c == "x", i + 2 + n
    if c and c in "01234567":
        digits = body[i + 1 : i + 4]
        if len(digits) != 3 or any(d not in "01234567" for d in digits):
            raise ValueError("octal escape needs 3 digits")
        value = int(digits, 8)
        if value > 255:
            raise ValueError(f"octal escape value {value} > 255")
        return value, True, i + 4
    raise ValueError(f"unknown escape sequence \\{c}")


def unquote_rune(text: str) -> int:
    """Code point of a rune literal such as ``'a'`` or ``'\\n'``."""
    body = text[1:-1]
    if not body:
        raise ValueError("empty rune literal")
    if body[0] == "\\":
        value, _, end = _escape(body, 0, "'")
    else:
        value, end = ord(body[0]), 1
    if end != len(body):
        raise ValueError(f"more than one character in rune literal {text}")
    return value


def unquote_string(text: str) -> str:
    """Value of a string literal, interpreted or raw."""
    if text.startswith("`"):
        return text[1:-1].replace("\r", "")
    body = text[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\":
            value, is_byte, i = _escape(body, i, '"')
            if is_byte:
                out.append(value)
            else:
                out += chr(value).encode("utf-8")
            continue
        if ch == "\n":
            raise ValueError("newline in string")
        out += ch.encode("utf-8", "surrogateescape")
        i += 1
    return out.decode("utf-8", "surrogateescape")


def encode_go_string(s: str) -> bytes:
    """Bytes of a decoded Go string."""
    return s.encode("utf-8", "surrogateescape")
