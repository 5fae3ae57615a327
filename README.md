# brafos

`brafos` simulates a small hobby operating system in pure Python. Everything
runs in memory, optionally backed by an ordinary disk image file:

- `brafos.display`: a 16-bit RGB555 `Framebuffer` with an 8x10 bitmap font,
  `rgb555()`, `glyph()` and the console `Palette`
- `brafos.keyboard`: `scancode_to_ascii()` and a `Keyboard` fed from a
  sequence of scancodes (scancode set 1, lower-case keys only)
- `brafos.textutil`: `str_to_int()` and `int_to_str()`
- `brafos.disk`: an in-memory `BlockDevice` of 512-byte sectors and a
  `FileSystem` with a root directory of 16-byte entries (LBA 64-71), a
  free-sector bitmap (LBA 72) and chained data sectors from LBA 73, each
  starting with a 4-byte little-endian link to the next
- `brafos.editor`: a full-screen `TextEditor` for files of up to 7 sectors
- `brafos.shell`: `tokenize()`, the command `Console` and the `brafos` command

## Installation

```
pip install .
```

The package has no runtime dependencies. To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
brafos [--disk IMAGE] [--raw] [--screenshot FILE.ppm] < input
```

The console reads all of standard input as keystrokes and runs them until the
input is used up.

- By default the input is text: each character that has a scancode is typed,
  newlines act as Enter, and characters the keyboard cannot produce (upper-case
  letters, for instance) are dropped.
- `--raw` reads whitespace-separated scancodes instead (decimal or `0x..`).
  This is the only way to send Ctrl, the arrow keys or key releases.
- `--disk IMAGE` loads the image if it exists (otherwise a blank disk of 4169
  sectors is used) and writes the disk back to `IMAGE` at the end.
- `--screenshot FILE` writes the final 640x480 screen as a binary PPM image.

Commands understood by the console:

| Command             | Effect                                               |
|---------------------|------------------------------------------------------|
| `help`              | show the help panel                                  |
| `clear`             | clear the screen                                     |
| `echo "text"`       | print the quoted word                                |
| `readsector N`      | draw the 512 bytes of sector `N`                     |
| `showfiles`         | list the files in the root directory                 |
| `cfile "name" N`    | create `name.txt` spanning `N` sectors (1-255)       |
| `bte "name.ext"`    | open a file in the text editor                       |

Words are split on spaces; a quoted argument must be a single word. Other
lines, including `reboot`, do nothing. Errors such as "dir full" or "no such
file in directory!" are drawn on the screen.

In the editor the arrow keys move the cursor, printable keys overwrite the
character under it, Ctrl+W saves the file and Ctrl+C leaves the editor.

## Library use

```python
from brafos.display import Framebuffer, Palette, rgb555
from brafos.disk import BlockDevice, FileSystem
from brafos.shell import tokenize

screen = Framebuffer(640, 480)
screen.print_text(0, 0, rgb555(31, 31, 31), rgb555(1, 1, 1), "hello")

fs = FileSystem(BlockDevice())
entry = fs.create_file("notes", "txt", 2)
data = fs.read_chain(entry.first_sector, entry.size)
print(fs.entries())

for token in tokenize('echo "hi"'):
    print(token.kind, token.value)
```

A `BlockDevice` can be written to and read from a disk image with
`BlockDevice.save(path)` and `BlockDevice.load(path)`.

## What it does not do

- There is no live display: the framebuffer lives in memory and is only
  visible through `--screenshot` or `Framebuffer.pixel()`.
- There is no interactive keyboard: keys come from standard input or from a
  scancode sequence given to `Keyboard`, and there is no Shift, so upper-case
  letters cannot be typed.
- There is no real disk hardware; sectors live in a `BlockDevice` in memory.
- Files cannot be deleted, and the sector bitmap only grows.