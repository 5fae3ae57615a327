"""Full-screen text editor for files on the chained-sector file system."""

from __future__ import annotations

from brafos.disk import LINK_SIZE, SECTOR_SIZE, DirEntry, FileSystem
from brafos.display import GLYPH_HEIGHT, Framebuffer, Palette
from brafos.keyboard import Keyboard, scancode_to_ascii
from brafos.textutil import int_to_str

COLUMNS = 80
LAST_COLUMN = COLUMNS - 1
LAST_ROW = 100
CHARS_PER_SECTOR = SECTOR_SIZE - LINK_SIZE
MAX_EDIT_SECTORS = 7
NAME_LIMIT = 8
EXT_LIMIT = 4

STATUS_ROW = 45
INFO_ROW = 46
BAR_COLOR = 0x00F
BAR_TEXT_COLOR = 0xFFFF

SC_CTRL_DOWN = 0x1D
SC_CTRL_UP = 0x9D
SC_C = 0x2E
SC_W = 0x11
SC_RIGHT = 0x4D
SC_LEFT = 0x4B
SC_UP = 0x48
SC_DOWN = 0x50

HELP_LINE = "(ctrl + w) - to save, (ctrl + c) - to exit"


class EditorError(Exception):
    """The editor could not open a file."""


class FileTooBigError(EditorError):
    """The file has more sectors than the editor can hold."""


class NoSuchFileError(EditorError):
    """No directory entry matches the file name."""


def calc_offset(cursor_x: int, cursor_y: int) -> int:
    """Map a screen cell to its byte offset in the file's sector data.

    Each sector holds 508 characters after its 4-byte link.
    """
    full, rest = divmod(cursor_y * COLUMNS + cursor_x, CHARS_PER_SECTOR)
    return full * SECTOR_SIZE + LINK_SIZE + rest


def split_filename(filename: str) -> tuple[str, str]:
    """Split "name.ext" into a name of at most 8 and an extension of at most 4 characters."""
    head = filename.split("\0", 1)[0]
    name = head[:NAME_LIMIT].split(".", 1)[0]
    rest = head[len(name):]
    ext = rest[1 : 1 + EXT_LIMIT] if rest.startswith(".") else ""
    return name, ext


class TextEditor:
    """An open file: its sector data, the cursor and the screen it draws on."""

    def __init__(self, fs: FileSystem, screen: Framebuffer, palette: Palette, filename: str) -> None:
        self.fs = fs
        self.screen = screen
        self.palette = palette
        name, ext = split_filename(filename)
        entry = fs.find(name, ext)
        if entry is None:
            raise NoSuchFileError("no such file in directory!")
        self.entry: DirEntry = entry
        screen.fill(palette.background)
        if entry.size > MAX_EDIT_SECTORS:
            raise FileTooBigError("file too big!")
        self.size = entry.size
        self.text = fs.read_chain(entry.first_sector, entry.size)
        self.cursor_x = 0
        self.cursor_y = 0
        self.ctrl = False
        self._draw_frame()

    @property
    def limit(self) -> int:
        """Number of bytes of sector data, links included."""
        return self.size * SECTOR_SIZE

    @property
    def content(self) -> bytes:
        """The editable characters, without the sector links."""
        return b"".join(
            bytes(self.text[start + LINK_SIZE : start + SECTOR_SIZE])
            for start in range(0, len(self.text), SECTOR_SIZE)
        )

    def _bar_text(self, x: int, y: int, front: int, text: str) -> None:
        self.screen.print_text(x, y, front, BAR_COLOR, text)

    def _draw_frame(self) -> None:
        for y in range(STATUS_ROW * GLYPH_HEIGHT, self.screen.height):
            for x in range(self.screen.width):
                self.screen.pix(x, y, BAR_COLOR)
        name_len = len(self.entry.name)
        self._bar_text(35, INFO_ROW, BAR_TEXT_COLOR, HELP_LINE)
        self._bar_text(0, INFO_ROW, BAR_TEXT_COLOR, self.entry.name)
        self._bar_text(name_len, INFO_ROW, BAR_TEXT_COLOR, ".")
        self._bar_text(name_len + 1, INFO_ROW, BAR_TEXT_COLOR, self.entry.ext)
        self._bar_text(name_len + 5, INFO_ROW, BAR_TEXT_COLOR, "size: ")
        self._bar_text(name_len + 10, INFO_ROW, BAR_TEXT_COLOR, int_to_str(self.limit))
        self._bar_text(name_len + 16, INFO_ROW, BAR_TEXT_COLOR, "bytes")

    def _move(self, scancode: int) -> None:
        x, y = self.cursor_x, self.cursor_y
        if scancode == SC_RIGHT and x != LAST_COLUMN and calc_offset(x + 1, y) < self.limit:
            self.cursor_x += 1
        elif scancode == SC_LEFT and x != 0 and calc_offset(x - 1, y) < self.limit:
            self.cursor_x -= 1
        elif scancode == SC_UP and y != 0 and calc_offset(x, y - 1) < self.limit:
            self.cursor_y -= 1
        elif scancode == SC_DOWN and y != LAST_ROW and calc_offset(x, y + 1) < self.limit:
            self.cursor_y += 1

    def _insert(self, key: str) -> None:
        offset = calc_offset(self.cursor_x, self.cursor_y)
        if offset < self.limit and offset % SECTOR_SIZE >= LINK_SIZE:
            self.text[offset] = ord(key)
            self.cursor_x += 1
            self._bar_text(0, STATUS_ROW, self.palette.font_red, " " * 13)
            if self.cursor_x == COLUMNS:
                self.cursor_x = 0
                self.cursor_y += 1
        else:
            self._bar_text(0, STATUS_ROW, self.palette.font_red, "file is full!")

    def handle_scancode(self, scancode: int) -> bool:
        """Process one scancode; return False when the editor is closed."""
        scancode &= 0xFF
        if scancode == SC_CTRL_UP:
            self.ctrl = False
        if scancode == SC_CTRL_DOWN:
            self.ctrl = True
        if self.ctrl and scancode == SC_C:
            self.screen.fill(self.palette.background)
            return False
        if self.ctrl and scancode == SC_W:
            self.save()
            return True
        self._move(scancode)
        self.render()
        key = scancode_to_ascii(scancode)
        if key and " " <= key <= "~":
            self._insert(key)
        return True

    def save(self) -> None:
        """Write the sector data back along the file's chain."""
        self.fs.write_chain(self.entry.first_sector, self.text, self.size)
        self._bar_text(0, STATUS_ROW, self.palette.font, " " * 20)
        self._bar_text(0, STATUS_ROW, self.palette.font_green, "file was saved!")

    def render(self) -> None:
        """Draw the file's characters, with the cursor cell in inverted colours."""
        font, back = self.palette.font, self.palette.background
        for index, byte in enumerate(self.content):
            y, x = divmod(index, COLUMNS)
            if x == self.cursor_x and y == self.cursor_y:
                self.screen.draw_letter(x, y, back, font, byte)
            else:
                self.screen.draw_letter(x, y, font, back, byte)

    def run(self, keyboard: Keyboard) -> None:
        """Feed scancodes from the keyboard until the editor is closed."""
        while self.handle_scancode(keyboard.read_scancode()):
            pass