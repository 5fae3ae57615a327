"""Sector device and the simple chained-sector file system on it."""

from __future__ import annotations

import os
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Optional, Union

from brafos.display import Framebuffer, Palette

SECTOR_SIZE = 512
ROOT_DIR_LBA = 64
ROOT_DIR_SECTORS = 8
ROOT_DIR_SIZE = ROOT_DIR_SECTORS * SECTOR_SIZE
ENTRY_SIZE = 16
NAME_LENGTH = 8
EXT_LENGTH = 3
BITMAP_SECTOR = 72
DATA_START = 73
MAX_SECTORS = 4096
LINK_SIZE = 4
MAX_FILE_SECTORS = 0xFF
DEFAULT_DISK_SECTORS = DATA_START + MAX_SECTORS

_HEX_DIGITS = "0123456789abcdef"


class DiskError(Exception):
    """A sector could not be read or written."""


class DiskFullError(DiskError):
    """Not enough free sectors for a new file."""


class DirectoryFullError(DiskError):
    """The root directory has no free entry."""


def format_hex(byte: int) -> str:
    """Format the low byte of a value as 0x followed by two hex digits."""
    value = byte & 0xFF
    return "0x" + _HEX_DIGITS[value >> 4] + _HEX_DIGITS[value & 0x0F]


class BlockDevice:
    """An in-memory disk of 512-byte sectors addressed by LBA."""

    def __init__(self, sectors: int = DEFAULT_DISK_SECTORS) -> None:
        if sectors <= 0:
            raise ValueError(f"invalid sector count: {sectors}")
        self._data = bytearray(sectors * SECTOR_SIZE)

    @property
    def sectors(self) -> int:
        """Number of sectors on the device."""
        return len(self._data) // SECTOR_SIZE

    @classmethod
    def load(cls, path: Union[str, os.PathLike]) -> "BlockDevice":
        """Load a disk image; a partial last sector is padded with zeros."""
        raw = Path(path).read_bytes()
        count = max(1, -(-len(raw) // SECTOR_SIZE))
        device = cls(count)
        device._data[: len(raw)] = raw
        return device

    def save(self, path: Union[str, os.PathLike]) -> None:
        """Write the whole disk image to a file."""
        Path(path).write_bytes(bytes(self._data))

    def _offset(self, lba: int) -> int:
        if not 0 <= lba < self.sectors:
            raise DiskError(f"sector {lba} outside disk of {self.sectors} sectors")
        return lba * SECTOR_SIZE

    def read_sector(self, lba: int) -> bytes:
        """Return the 512 bytes of one sector."""
        offset = self._offset(lba)
        return bytes(self._data[offset : offset + SECTOR_SIZE])

    def write_sector(self, lba: int, data: bytes) -> None:
        """Write up to 512 bytes to a sector; the rest is filled with zeros."""
        payload = bytes(data)
        if len(payload) > SECTOR_SIZE:
            raise ValueError(f"{len(payload)} bytes do not fit in one sector")
        offset = self._offset(lba)
        self._data[offset : offset + SECTOR_SIZE] = payload.ljust(SECTOR_SIZE, b"\0")


@dataclass(frozen=True)
class DirEntry:
    """One used slot of the root directory."""

    slot: int
    name: str
    ext: str
    first_sector: int
    size: int

    @property
    def filename(self) -> str:
        return f"{self.name}.{self.ext}"


def _decode_field(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


class FileSystem:
    """Root directory, sector bitmap and chained file sectors on a device.

    Each directory entry is 16 bytes: an 8-byte name, a 3-byte extension,
    the little-endian first sector and a one-byte size in sectors. Every
    file sector starts with a 4-byte little-endian link to the next one.
    """

    def __init__(self, device: BlockDevice) -> None:
        self.device = device

    def read_root(self) -> bytearray:
        """Return the raw bytes of the root directory."""
        return bytearray(
            b"".join(self.device.read_sector(ROOT_DIR_LBA + i) for i in range(ROOT_DIR_SECTORS))
        )

    def write_root(self, root: bytes) -> None:
        """Write the raw bytes of the root directory back to disk."""
        if len(root) != ROOT_DIR_SIZE:
            raise ValueError(f"root directory must be {ROOT_DIR_SIZE} bytes, got {len(root)}")
        for i in range(ROOT_DIR_SECTORS):
            start = i * SECTOR_SIZE
            self.device.write_sector(ROOT_DIR_LBA + i, root[start : start + SECTOR_SIZE])

    @staticmethod
    def _parse(root: bytes, offset: int) -> DirEntry:
        raw = root[offset : offset + ENTRY_SIZE]
        return DirEntry(
            slot=offset // ENTRY_SIZE,
            name=_decode_field(raw[:NAME_LENGTH]),
            ext=_decode_field(raw[NAME_LENGTH : NAME_LENGTH + EXT_LENGTH]),
            first_sector=int.from_bytes(raw[11:15], "little"),
            size=raw[15],
        )

    def entries(self) -> list[DirEntry]:
        """Return the used directory entries in slot order."""
        root = self.read_root()
        return [
            self._parse(root, offset)
            for offset in range(0, ROOT_DIR_SIZE, ENTRY_SIZE)
            if root[offset] != 0
        ]

    def find(self, name: str, ext: str) -> Optional[DirEntry]:
        """Return the first entry with this name and extension, or None."""
        return next((e for e in self.entries() if e.name == name and e.ext == ext), None)

    def allocate_file_sectors(self, size: int) -> int:
        """Reserve a chain of free sectors, link them and return the first."""
        if not 1 <= size <= MAX_FILE_SECTORS:
            raise ValueError(f"file size must be 1 to {MAX_FILE_SECTORS} sectors, got {size}")
        bitmap = bytearray(self.device.read_sector(BITMAP_SECTOR))
        free = list(
            islice(
                (bit for bit in range(MAX_SECTORS) if not bitmap[bit // 8] & (1 << (bit % 8))),
                size,
            )
        )
        if len(free) < size:
            raise DiskFullError(f"only {len(free)} free sectors, {size} needed")
        for bit in free:
            bitmap[bit // 8] |= 1 << (bit % 8)
        self.device.write_sector(BITMAP_SECTOR, bitmap)

        chain = [bit + DATA_START for bit in free]
        for sector, following in zip(chain, chain[1:] + [0]):
            self.device.write_sector(sector, following.to_bytes(LINK_SIZE, "little"))
        return chain[0]

    def create_file(self, name: str, ext: str, size: int) -> DirEntry:
        """Add a file of size sectors to the first free directory slot."""
        raw_name = name.encode("latin-1")[:NAME_LENGTH]
        raw_ext = ext.encode("latin-1")[:EXT_LENGTH]
        if not raw_name or raw_name[0] == 0:
            raise ValueError("file name must not be empty")
        if not 1 <= size <= MAX_FILE_SECTORS:
            raise ValueError(f"file size must be 1 to {MAX_FILE_SECTORS} sectors, got {size}")

        root = self.read_root()
        offset = next(
            (off for off in range(0, ROOT_DIR_SIZE, ENTRY_SIZE) if root[off] == 0), None
        )
        if offset is None:
            raise DirectoryFullError("dir full")

        first_sector = self.allocate_file_sectors(size)
        root[offset : offset + ENTRY_SIZE] = (
            raw_name.ljust(NAME_LENGTH, b"\0")
            + raw_ext.ljust(EXT_LENGTH, b"\0")
            + (first_sector & 0xFFFFFFFF).to_bytes(LINK_SIZE, "little")
            + bytes([size])
        )
        self.write_root(root)
        return self._parse(root, offset)

    def read_chain(self, first_sector: int, count: int) -> bytearray:
        """Read count sectors following the links from first_sector."""
        data = bytearray()
        sector = first_sector
        for _ in range(count):
            block = self.device.read_sector(sector)
            data += block
            sector = int.from_bytes(block[:LINK_SIZE], "little")
        return data

    def write_chain(self, first_sector: int, data: bytes, count: int) -> None:
        """Write count sectors of data along the links held in the data itself."""
        if len(data) < count * SECTOR_SIZE:
            raise ValueError(f"{len(data)} bytes are fewer than {count} sectors")
        sector = first_sector
        for i in range(count):
            block = bytes(data[i * SECTOR_SIZE : (i + 1) * SECTOR_SIZE])
            self.device.write_sector(sector, block)
            sector = int.from_bytes(block[:LINK_SIZE], "little")

    def show_files(self, screen: Framebuffer, palette: Palette) -> list[DirEntry]:
        """Draw the directory listing from text row 5 and return its entries."""
        listed = self.entries()
        for row, entry in enumerate(listed):
            y = 5 + row
            x = len(entry.name)
            screen.print_text(0, y, palette.font, palette.background, entry.name)
            screen.print_text(x, y, palette.font, palette.background, ".")
            screen.print_text(x + 1, y, palette.font, palette.background, entry.ext)
            hex_text = format_hex(entry.first_sector)
            screen.print_text(x + 5, y, palette.font_blue, palette.background, hex_text[:2])
            screen.print_text(x + 7, y, palette.font_blue, palette.background, hex_text[2:])
        return listed