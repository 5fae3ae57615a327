"""The command console: line input, tokenizer and command dispatch."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Optional

from brafos.disk import BITMAP_SECTOR, BlockDevice, DiskError, FileSystem, format_hex
from brafos.display import INPUT_BUFFER_SIZE, Framebuffer, Palette
from brafos.editor import EditorError, TextEditor
from brafos.keyboard import Keyboard, scancode_to_ascii
from brafos.textutil import str_to_int

MAX_TOKENS = 10
WORD_LIMIT = INPUT_BUFFER_SIZE - 1
LINE_LIMIT = INPUT_BUFFER_SIZE - 2
PROMPT = "/user $ "
PROMPT_X = 1
PROMPT_Y = 1
START_X = 9
START_Y = 1
SECTOR_COLUMNS = 80

HELP_TEXT = (
    "\r- - - -help panel - - - -\r \r \rhelp - show commands \r \r"
    "clear - clear screen\r \r \r- - - - - - - - - - - - -"
)


class TokenType(Enum):
    """Kinds of words on a command line."""

    REBOOT = 0
    HELP = 1
    ECHO = 2
    CLEAR = 3
    READSECTOR = 4
    STR = 5
    NUM = 6
    SHOWFILES = 7
    CFILE = 8
    BTE = 9
    WORD = 10


_KEYWORDS = {
    "echo": TokenType.ECHO,
    "help": TokenType.HELP,
    "reboot": TokenType.REBOOT,
    "clear": TokenType.CLEAR,
    "readsector": TokenType.READSECTOR,
    "showfiles": TokenType.SHOWFILES,
    "cfile": TokenType.CFILE,
    "bte": TokenType.BTE,
}


@dataclass(frozen=True)
class Token:
    """One word of a command line with its kind; quotes are removed from the value."""

    kind: TokenType
    value: str = ""


def _words(text: str) -> Iterator[str]:
    for chunk in text.split(" "):
        for start in range(0, len(chunk), WORD_LIMIT):
            yield chunk[start : start + WORD_LIMIT]


def _classify(word: str) -> Token:
    kind = _KEYWORDS.get(word, TokenType.WORD)
    if word[0] == '"' and word[-1] == '"':
        kind = TokenType.STR
    if all("0" <= ch <= "9" for ch in word):
        kind = TokenType.NUM
    return Token(kind, word.replace('"', ""))


def tokenize(text: str) -> list[Token]:
    """Split a command line on spaces into at most ten tokens."""
    tokens: list[Token] = []
    for word in _words(text.split("\0", 1)[0]):
        if len(tokens) >= MAX_TOKENS:
            break
        tokens.append(_classify(word))
    return tokens


class Console:
    """The prompt line and the commands it starts."""

    def __init__(
        self,
        screen: Framebuffer,
        fs: FileSystem,
        keyboard: Keyboard,
        palette: Optional[Palette] = None,
    ) -> None:
        self.screen = screen
        self.fs = fs
        self.keyboard = keyboard
        self.palette = palette or Palette()
        self.line = ""
        self.cursor_x = START_X
        self.cursor_y = START_Y

    def _clear_screen(self) -> None:
        self.screen.fill(self.palette.background)

    def _text(self, x: int, y: int, front: int, text: str) -> None:
        self.screen.print_text(x, y, front, self.palette.background, text)

    def _draw_at_cursor(self, letter) -> None:
        self.screen.draw_letter(
            self.cursor_x, self.cursor_y, self.palette.font, self.palette.background, letter
        )

    def feed_key(self, key: str) -> Optional[list[Token]]:
        """Handle one typed character; return the tokens when Enter runs a line."""
        self._text(PROMPT_X, PROMPT_Y, self.palette.user, PROMPT)
        if not key:
            return None
        if key == "\b":
            if self.line:
                self.line = self.line[:-1]
                self.cursor_x -= 1
                self._draw_at_cursor(0)
            return None
        if key == "\r":
            return self._submit()
        if len(self.line) >= LINE_LIMIT:
            while self.line:
                self.line = self.line[:-1]
                self.cursor_x -= 1
                self._draw_at_cursor(" ")
            return None
        self.line += key
        self._draw_at_cursor(key)
        self.cursor_x += 1
        if self.cursor_x >= self.screen.columns:
            self.cursor_x = 0
            self.cursor_y += 1
        return None

    def _submit(self) -> list[Token]:
        tokens = tokenize(self.line)
        for _ in self.line:
            self.cursor_x -= 1
            self._draw_at_cursor(0)
        self.line = ""
        self.execute(tokens)
        return tokens

    def execute(self, tokens: list[Token]) -> None:
        """Run the command that the tokens form; other lines do nothing."""
        kinds = tuple(token.kind for token in tokens)
        match kinds:
            case (TokenType.HELP,):
                self._clear_screen()
                self._text(0, 5, self.palette.font, HELP_TEXT)
            case (TokenType.ECHO, TokenType.STR):
                self._clear_screen()
                self._text(0, 5, self.palette.font, tokens[1].value)
            case (TokenType.READSECTOR, TokenType.NUM):
                self._clear_screen()
                self._read_sector(str_to_int(tokens[1].value))
            case (TokenType.SHOWFILES,):
                self._clear_screen()
                self.fs.show_files(self.screen, self.palette)
            case (TokenType.BTE, TokenType.STR):
                self._clear_screen()
                self._edit(tokens[1].value)
            case (TokenType.CFILE, TokenType.STR, TokenType.NUM):
                self._clear_screen()
                self._create_file(tokens[1].value, str_to_int(tokens[2].value) & 0xFF)
            case (TokenType.CLEAR,):
                self._clear_screen()

    def _read_sector(self, lba: int) -> None:
        try:
            data = self.fs.device.read_sector(lba)
        except DiskError:
            self._text(55, 6, self.palette.font_red, "ata read failed")
            return
        for index, byte in enumerate(data):
            y, x = divmod(index, SECTOR_COLUMNS)
            self.screen.draw_letter(x, 15 + y, self.palette.font, self.palette.background, byte)

    def _edit(self, filename: str) -> None:
        try:
            TextEditor(self.fs, self.screen, self.palette, filename).run(self.keyboard)
        except EditorError as err:
            self._text(0, 4, self.palette.font_red, str(err))

    def _create_file(self, name: str, size: int) -> None:
        try:
            entry = self.fs.create_file(name, "txt", size)
        except (DiskError, ValueError) as err:
            self._text(0, 20, self.palette.font_red, str(err))
            return
        self._text(0, 0, self.palette.font_blue, format_hex(entry.first_sector))
        for row, lba in enumerate(range(BITMAP_SECTOR, BITMAP_SECTOR + 10), start=3):
            try:
                sector = self.fs.device.read_sector(lba)
            except DiskError:
                continue
            self._text(0, row, self.palette.font, f"{lba} -")
            self._text(5, row, self.palette.font_blue, format_hex(sector[0]))
            self._text(10, row, self.palette.font_blue, format_hex(sector[1]))

    def run(self) -> None:
        """Clear the screen and process keys until the keyboard runs out."""
        self._clear_screen()
        try:
            while True:
                self.feed_key(self.keyboard.read_key())
        except EOFError:
            pass


def _scancode_table() -> dict[str, int]:
    table: dict[str, int] = {}
    for code in range(0x80):
        char = scancode_to_ascii(code)
        if char:
            table.setdefault(char, code)
    return table


_SCANCODES = _scancode_table()


def _text_to_scancodes(text: str) -> Iterable[int]:
    for char in text.replace("\r\n", "\n").replace("\n", "\r"):
        code = _SCANCODES.get(char)
        if code is not None:
            yield code


def _write_ppm(screen: Framebuffer, path: Path) -> None:
    out = bytearray(f"P6\n{screen.width} {screen.height}\n255\n".encode("ascii"))
    for y in range(screen.height):
        for x in range(screen.width):
            color = screen.pixel(x, y)
            out += bytes(
                ((color >> shift) & 0x1F) * 255 // 31 for shift in (10, 5, 0)
            )
    path.write_bytes(bytes(out))


def main(argv: Optional[list[str]] = None) -> int:
    """Run the console on keys read from standard input."""
    parser = argparse.ArgumentParser(prog="brafos", description="Run the command console.")
    parser.add_argument("--disk", type=Path, help="disk image to use and save back")
    parser.add_argument(
        "--raw", action="store_true", help="read whitespace-separated scancodes, not text"
    )
    parser.add_argument("--screenshot", type=Path, help="write the final screen as a PPM image")
    args = parser.parse_args(argv)

    data = sys.stdin.read()
    if args.raw:
        try:
            scancodes = [int(item, 0) for item in data.split()]
        except ValueError as err:
            parser.error(f"invalid scancode: {err}")
    else:
        scancodes = list(_text_to_scancodes(data))

    if args.disk is not None and args.disk.exists():
        device = BlockDevice.load(args.disk)
    else:
        device = BlockDevice()
    screen = Framebuffer()
    console = Console(screen, FileSystem(device), Keyboard(scancodes), Palette())
    console.run()

    if args.disk is not None:
        device.save(args.disk)
    if args.screenshot is not None:
        _write_ppm(screen, args.screenshot)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())