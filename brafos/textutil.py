"""Small text and number helpers used by the console and its programs."""

from __future__ import annotations

_UINT32_MASK = 0xFFFFFFFF


def str_to_int(text: str) -> int:
    """Parse the leading decimal digits of text, after skipping spaces.

    Parsing stops at the first character that is not a digit; text with no
    leading digits gives 0.
    """
    result = 0
    for ch in text.lstrip(" "):
        if not "0" <= ch <= "9":
            break
        result = result * 10 + (ord(ch) - ord("0"))
    return result


def int_to_str(value: int) -> str:
    """Format an unsigned 32-bit value in decimal; wider values wrap."""
    return str(value & _UINT32_MASK)