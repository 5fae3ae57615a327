"""Framebuffer, bitmap font and colours for the console screen."""

from __future__ import annotations

from array import array
from dataclasses import dataclass
from typing import Union

GLYPH_WIDTH = 8
GLYPH_HEIGHT = 10
DEFAULT_WIDTH = 640
DEFAULT_HEIGHT = 480
INPUT_BUFFER_SIZE = 32

Letter = Union[int, str]


def rgb555(r: int, g: int, b: int) -> int:
    """Pack three 5-bit channels into a 15-bit colour; higher bits are dropped."""
    return ((r & 0x1F) << 10) | ((g & 0x1F) << 5) | (b & 0x1F)


_BLANK = (0,) * GLYPH_HEIGHT
_DOT = (0,) * 9 + (0x10,)

_GLYPHS: dict[int, tuple[int, ...]] = {
    0x01: (0, 0, 0, 0, 0x44, 0, 0x82, 0x7C, 0, 0),
    0x02: (0, 0, 0, 0, 0x44, 0, 0x7C, 0x82, 0, 0),
    0x03: (0, 0, 0, 0, 0, 0x10, 0x38, 0x7C, 0x38, 0x10),
    **{code: _DOT for code in range(0x04, 0x20)},
    0x20: _BLANK,
    0x21: (0, 0x10, 0x10, 0x10, 0x10, 0x10, 0x10, 0x10, 0, 0x10),
    0x22: (0, 0, 0x28, 0x28, 0, 0, 0, 0, 0, 0),
    0x23: (0, 0, 0, 0x24, 0x24, 0xFF, 0x24, 0xFF, 0x24, 0x34),
    0x24: (0, 0x10, 0x38, 0x54, 0x50, 0x38, 0x14, 0x54, 0x38, 0x10),
    0x25: (0, 0, 0, 0x01, 0x62, 0x64, 0x08, 0x10, 0x26, 0x46),
    0x26: (0, 0, 0x1C, 0x22, 0x24, 0x18, 0x2A, 0x46, 0x46, 0x39),
    0x27: (0, 0, 0x10, 0x10, 0, 0, 0, 0, 0, 0),
    0x28: (0, 0, 0x10, 0x20, 0x40, 0x40, 0x40, 0x40, 0x20, 0x10),
    0x29: (0, 0, 0x10, 0x08, 0x04, 0x04, 0x04, 0x04, 0x08, 0x10),
    0x2A: (0, 0x54, 0x38, 0x38, 0x54, 0, 0, 0, 0, 0),
    0x2B: (0, 0, 0, 0x10, 0x10, 0x7C, 0x10, 0x10, 0, 0),
    0x2C: (0, 0, 0, 0, 0, 0, 0, 0, 0x08, 0x10),
    0x2D: (0, 0, 0, 0, 0, 0x7C, 0, 0, 0, 0),
    0x2E: _DOT,
    0x2F: (0x06, 0x0C, 0x08, 0x18, 0x10, 0x30, 0x60, 0x40, 0xC0, 0x80),
    0x30: (0, 0x3C, 0x42, 0x42, 0x42, 0x42, 0x42, 0x42, 0x42, 0x3C),
    0x31: (0, 0x08, 0x18, 0x28, 0x08, 0x08, 0x08, 0x08, 0x08, 0x3E),
    0x32: (0, 0x3C, 0x42, 0x42, 0x02, 0x04, 0x08, 0x10, 0x20, 0x7E),
    0x33: (0, 0x38, 0x44, 0x04, 0x04, 0x3C, 0x02, 0x02, 0x82, 0x7C),
    0x34: (0, 0x04, 0x0C, 0x14, 0x24, 0x44, 0xFE, 0x04, 0x04, 0x04),
    0x35: (0, 0x7E, 0x40, 0x40, 0x40, 0x7C, 0x02, 0x02, 0x42, 0x3C),
    0x36: (0, 0x3C, 0x42, 0x40, 0x40, 0x7C, 0x42, 0x42, 0x42, 0x3C),
    0x37: (0, 0x7E, 0x02, 0x02, 0x04, 0x04, 0x08, 0x08, 0x10, 0x10),
    0x38: (0, 0x18, 0x24, 0x24, 0x18, 0x24, 0x42, 0x42, 0x42, 0x3C),
    0x39: (0, 0x3C, 0x42, 0x42, 0x42, 0x42, 0x3E, 0x02, 0x42, 0x3C),
    0x40: (0, 0, 0x3E, 0x41, 0x8F, 0x91, 0x91, 0x8F, 0x41, 0x3C),
    0x61: (0, 0, 0, 0x78, 0x84, 0x04, 0x7C, 0x84, 0x84, 0x7A),
    0x62: (0, 0, 0xC0, 0x40, 0x40, 0x5C, 0x62, 0x42, 0x62, 0xDC),
    0x63: (0, 0, 0, 0x38, 0x44, 0x80, 0x80, 0x80, 0x44, 0x38),
    0x64: (0, 0, 0x04, 0x04, 0x04, 0x74, 0x8C, 0x84, 0x8C, 0x76),
    0x65: (0, 0, 0, 0x78, 0x84, 0x84, 0xFC, 0x80, 0x84, 0x78),
    0x66: (0, 0, 0x38, 0x44, 0x40, 0x40, 0xF0, 0x40, 0x40, 0x40),
    0x67: (0, 0, 0x7E, 0x84, 0x84, 0x84, 0x7C, 0x04, 0x44, 0x38),
    0x68: (0, 0, 0xE0, 0x40, 0x40, 0x58, 0x64, 0x44, 0x44, 0xEE),
    0x69: (0, 0x10, 0, 0x30, 0x10, 0x10, 0x10, 0x10, 0x10, 0x38),
    0x6A: (0, 0x04, 0, 0x0C, 0x04, 0x04, 0x04, 0x44, 0x44, 0x38),
    0x6B: (0, 0, 0xC0, 0x4C, 0x50, 0x60, 0x50, 0x48, 0x44, 0xC2),
    0x6C: (0, 0, 0x70, 0x10, 0x10, 0x10, 0x10, 0x10, 0x10, 0x7C),
    0x6D: (0, 0, 0, 0xEC, 0x92, 0x92, 0x92, 0x92, 0x92, 0x92),
    0x6E: (0, 0, 0, 0xDC, 0x62, 0x42, 0x42, 0x42, 0x42, 0xE7),
    0x6F: (0, 0, 0, 0x78, 0x84, 0x84, 0x84, 0x84, 0x84, 0x78),
    0x70: (0, 0, 0, 0xDC, 0x62, 0x62, 0x5C, 0x40, 0x40, 0xE0),
    0x71: (0, 0, 0, 0x3C, 0x42, 0x42, 0x42, 0x3E, 0x02, 0x02),
    0x72: (0, 0, 0, 0x6C, 0x32, 0x20, 0x20, 0x20, 0x20, 0x78),
    0x73: (0, 0, 0, 0x38, 0x44, 0x40, 0x38, 0x04, 0x44, 0x38),
    0x74: (0, 0x20, 0x20, 0x20, 0x78, 0x20, 0x20, 0x20, 0x22, 0x1C),
    0x75: (0, 0, 0, 0xCC, 0x44, 0x44, 0x44, 0x44, 0x44, 0x3A),
    0x76: (0, 0, 0, 0x82, 0x82, 0x44, 0x44, 0x28, 0x28, 0x10),
    0x77: (0, 0, 0, 0x82, 0x82, 0x92, 0x92, 0x92, 0xAA, 0x44),
    0x78: (0, 0, 0, 0x82, 0x44, 0x28, 0x10, 0x28, 0x44, 0x82),
    0x79: (0, 0, 0, 0xE7, 0x42, 0x22, 0x1C, 0x04, 0x48, 0x30),
    0x7A: (0, 0, 0, 0x7E, 0x04, 0x08, 0x10, 0x20, 0x40, 0x7E),
}

FONT: tuple[tuple[int, ...], ...] = tuple(_GLYPHS.get(code, _BLANK) for code in range(256))


def _letter_code(letter: Letter) -> int:
    if isinstance(letter, str):
        if len(letter) != 1:
            raise ValueError(f"expected a single character, got {letter!r}")
        return ord(letter)
    return letter


def glyph(code: Letter) -> tuple[int, ...]:
    """Return the ten 8-bit rows of the glyph for a character code (0-255)."""
    value = _letter_code(code)
    if not 0 <= value <= 0xFF:
        raise ValueError(f"character code out of range: {value}")
    return FONT[value]


@dataclass(frozen=True)
class Palette:
    """The colours the console uses, as set up at start-up."""

    table_background: int = rgb555(0, 0, 200)
    background: int = rgb555(1, 1, 1)
    font: int = rgb555(250, 250, 250)
    font_red: int = rgb555(250, 0, 0)
    font_blue: int = rgb555(0, 50, 240)
    font_green: int = rgb555(0, 250, 0)
    user: int = rgb555(0, 250, 0)


class Framebuffer:
    """A 16-bit-per-pixel linear framebuffer with text drawing."""

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid framebuffer size {width}x{height}")
        self.width = width
        self.height = height
        self._pixels = array("H", bytes(2 * width * height))

    @property
    def pitch(self) -> int:
        """Bytes per scan line."""
        return self.width * 2

    @property
    def columns(self) -> int:
        """Number of character cells per text row."""
        return self.width // GLYPH_WIDTH

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height}")
        return y * self.width + x

    def pix(self, x: int, y: int, color: int) -> None:
        """Set one pixel; the colour is truncated to 16 bits."""
        self._pixels[self._index(x, y)] = color & 0xFFFF

    def pixel(self, x: int, y: int) -> int:
        """Return the colour of one pixel."""
        return self._pixels[self._index(x, y)]

    def fill(self, color: int) -> None:
        """Paint every pixel with one colour."""
        value = color & 0xFFFF
        self._pixels = array("H", [value]) * (self.width * self.height)

    def draw_letter(self, x: int, y: int, front: int, back: int, letter: Letter) -> None:
        """Draw one glyph into the character cell at column x, row y."""
        rows = glyph(_letter_code(letter) & 0xFF)
        left = x * GLYPH_WIDTH
        top = y * GLYPH_HEIGHT
        for dy, bits in enumerate(rows):
            for dx in range(GLYPH_WIDTH):
                lit = (bits >> (GLYPH_WIDTH - 1 - dx)) & 1
                self.pix(left + dx, top + dy, front if lit else back)

    def print_text(self, x: int, y: int, front: int, back: int, text: str) -> tuple[int, int]:
        """Draw text from cell (x, y), wrapping at the right edge.

        A carriage return moves to the start of the next row and the character
        after it is drawn there. Drawing stops at a NUL character. Returns the
        cell after the last character drawn.
        """
        chars = iter(text)
        for ch in chars:
            if ch == "\0":
                break
            if ch == "\r":
                y += 1
                x = 0
                ch = next(chars, "\0")
            self.draw_letter(x, y, front, back, ch)
            x += 1
            if x >= self.columns:
                x = 0
                y += 1
            if ch == "\0":
                break
        return x, y