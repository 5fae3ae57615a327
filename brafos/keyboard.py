"""Scancode set 1 keyboard: scancode to character mapping and key reading."""

from __future__ import annotations

from collections.abc import Iterable

_ASCII: dict[int, str] = {
    0x02: "1",
    0x03: "2",
    0x04: "3",
    0x05: "4",
    0x06: "5",
    0x07: "6",
    0x08: "7",
    0x09: "8",
    0x0A: "9",
    0x0B: "0",
    0x0C: "-",
    0x0E: "\b",
    0x0F: "\t",
    0x10: "q",
    0x11: "w",
    0x12: "e",
    0x13: "r",
    0x14: "t",
    0x15: "y",
    0x16: "u",
    0x17: "i",
    0x18: "o",
    0x19: "p",
    0x1A: "[",
    0x1B: "]",
    0x1C: "\r",
    0x1E: "a",
    0x1F: "s",
    0x20: "d",
    0x21: "f",
    0x22: "g",
    0x23: "h",
    0x24: "j",
    0x25: "k",
    0x26: "l",
    0x27: ";",
    0x28: '"',
    0x29: "~",
    0x2B: "$",
    0x2C: "z",
    0x2D: "x",
    0x2E: "c",
    0x2F: "v",
    0x30: "b",
    0x31: "n",
    0x32: "m",
    0x33: ",",
    0x34: ".",
    0x35: "/",
    0x39: " ",
}


def scancode_to_ascii(scancode: int) -> str:
    """Return the character for a scancode, or "" when it has none."""
    return _ASCII.get(scancode & 0xFF, "")


class Keyboard:
    """A keyboard fed from a sequence of scancodes."""

    def __init__(self, scancodes: Iterable[int]) -> None:
        self._scancodes = iter(scancodes)

    def read_scancode(self) -> int:
        """Return the next scancode; raise EOFError when there are no more."""
        try:
            return next(self._scancodes) & 0xFF
        except StopIteration:
            raise EOFError("no more scancodes") from None

    def read_key(self) -> str:
        """Read one scancode and return its character, or "" if it has none."""
        return scancode_to_ascii(self.read_scancode())