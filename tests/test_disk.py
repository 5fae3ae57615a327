import pytest

from brafos.disk import (
    BITMAP_SECTOR,
    DATA_START,
    ROOT_DIR_SIZE,
    SECTOR_SIZE,
    BlockDevice,
    DirectoryFullError,
    DiskError,
    DiskFullError,
    FileSystem,
    format_hex,
)
from brafos.display import Framebuffer, Palette


@pytest.fixture
def fs():
    return FileSystem(BlockDevice())


def test_format_hex():
    assert format_hex(0xAB) == "0xab"
    assert format_hex(0) == "0x00"


def test_format_hex_uses_low_byte_only():
    assert format_hex(0x1AB) == format_hex(0xAB)


def test_device_write_pads_sector():
    device = BlockDevice(4)
    device.write_sector(2, b"abc")
    sector = device.read_sector(2)
    assert len(sector) == SECTOR_SIZE
    assert sector[:3] == b"abc"
    assert sector[3:] == bytes(SECTOR_SIZE - 3)


def test_device_rejects_out_of_range_sector():
    device = BlockDevice(4)
    with pytest.raises(DiskError):
        device.read_sector(4)
    with pytest.raises(DiskError):
        device.write_sector(-1, b"x")


def test_device_rejects_oversized_write():
    device = BlockDevice(4)
    with pytest.raises(ValueError):
        device.write_sector(0, bytes(SECTOR_SIZE + 1))


def test_device_save_load_round_trip(tmp_path):
    device = BlockDevice(3)
    device.write_sector(1, b"hello")
    path = tmp_path / "disk.img"
    device.save(path)
    loaded = BlockDevice.load(path)
    assert loaded.sectors == 3
    assert loaded.read_sector(1) == device.read_sector(1)


def test_device_load_pads_partial_sector(tmp_path):
    path = tmp_path / "short.img"
    path.write_bytes(b"x" * (SECTOR_SIZE + 10))
    loaded = BlockDevice.load(path)
    assert loaded.sectors == 2
    assert loaded.read_sector(1)[:10] == b"x" * 10
    assert loaded.read_sector(1)[10:] == bytes(SECTOR_SIZE - 10)


def test_root_round_trip(fs):
    root = bytearray(ROOT_DIR_SIZE)
    root[0:4] = b"abcd"
    fs.write_root(root)
    assert fs.read_root() == root


def test_write_root_rejects_wrong_size(fs):
    with pytest.raises(ValueError):
        fs.write_root(bytes(10))


def test_empty_disk_has_no_entries(fs):
    assert fs.entries() == []
    assert fs.find("notes", "txt") is None


def test_first_allocation_starts_at_data_area(fs):
    first = fs.allocate_file_sectors(1)
    assert first == DATA_START
    assert fs.device.read_sector(BITMAP_SECTOR)[0] & 1 == 1


def test_allocation_links_sectors(fs):
    first = fs.allocate_file_sectors(3)
    chain = [first]
    for _ in range(2):
        chain.append(int.from_bytes(fs.device.read_sector(chain[-1])[:4], "little"))
    assert int.from_bytes(fs.device.read_sector(chain[-1])[:4], "little") == 0
    assert len(set(chain)) == 3
    second = fs.allocate_file_sectors(1)
    assert second not in chain


def test_allocation_on_full_bitmap_raises(fs):
    fs.device.write_sector(BITMAP_SECTOR, b"\xff" * SECTOR_SIZE)
    with pytest.raises(DiskFullError):
        fs.allocate_file_sectors(1)


@pytest.mark.parametrize("size", [0, 256])
def test_allocation_rejects_bad_size(fs, size):
    with pytest.raises(ValueError):
        fs.allocate_file_sectors(size)


def test_create_file_adds_entry(fs):
    entry = fs.create_file("notes", "txt", 2)
    assert entry.name == "notes"
    assert entry.ext == "txt"
    assert entry.size == 2
    assert entry.slot == 0
    assert entry.first_sector == DATA_START
    assert entry.filename == "notes.txt"
    assert fs.entries() == [entry]
    assert fs.find("notes", "txt") == entry
    root = fs.read_root()
    assert root[11] == DATA_START
    assert root[15] == 2


def test_create_file_truncates_name_and_ext(fs):
    entry = fs.create_file("averylongname", "text", 1)
    assert entry.name == "averylon"
    assert entry.ext == "tex"


def test_create_file_uses_next_slot(fs):
    first = fs.create_file("one", "txt", 1)
    second = fs.create_file("two", "txt", 1)
    assert second.slot == first.slot + 1
    assert second.first_sector != first.first_sector
    assert [e.name for e in fs.entries()] == ["one", "two"]


def test_create_file_rejects_empty_name(fs):
    with pytest.raises(ValueError):
        fs.create_file("", "txt", 1)


def test_create_file_on_full_directory(fs):
    fs.write_root(b"\x01" * ROOT_DIR_SIZE)
    with pytest.raises(DirectoryFullError):
        fs.create_file("new", "txt", 1)
    assert fs.device.read_sector(BITMAP_SECTOR) == bytes(SECTOR_SIZE)


def test_read_chain_follows_links(fs):
    entry = fs.create_file("data", "txt", 3)
    data = fs.read_chain(entry.first_sector, entry.size)
    assert len(data) == 3 * SECTOR_SIZE
    links = [int.from_bytes(data[i * SECTOR_SIZE : i * SECTOR_SIZE + 4], "little") for i in range(3)]
    assert links[-1] == 0
    assert links[0] == int.from_bytes(fs.device.read_sector(entry.first_sector)[:4], "little")


def test_write_chain_round_trip(fs):
    entry = fs.create_file("data", "txt", 2)
    data = fs.read_chain(entry.first_sector, entry.size)
    data[4:9] = b"hello"
    data[SECTOR_SIZE + 4 : SECTOR_SIZE + 9] = b"world"
    fs.write_chain(entry.first_sector, data, entry.size)
    assert fs.read_chain(entry.first_sector, entry.size) == data


def test_write_chain_rejects_short_data(fs):
    entry = fs.create_file("data", "txt", 2)
    with pytest.raises(ValueError):
        fs.write_chain(entry.first_sector, bytes(SECTOR_SIZE), 2)


def _cells_equal(a, b, col_start, col_end, row):
    return all(
        a.pixel(x, y) == b.pixel(x, y)
        for x in range(col_start * 8, col_end * 8)
        for y in range(row * 10, row * 10 + 10)
    )


def test_show_files_draws_listing(fs):
    palette = Palette()
    entry = fs.create_file("notes", "txt", 1)
    screen = Framebuffer()
    listed = fs.show_files(screen, palette)
    assert listed == [entry]

    reference = Framebuffer()
    reference.print_text(0, 5, palette.font, palette.background, "notes.txt")
    reference.print_text(10, 5, palette.font_blue, palette.background, format_hex(entry.first_sector))
    assert _cells_equal(screen, reference, 0, 14, 5)
    assert any(
        screen.pixel(x, y) == palette.font
        for x in range(0, 8)
        for y in range(50, 60)
    )


def test_show_files_empty_disk_draws_nothing(fs):
    screen = Framebuffer()
    assert fs.show_files(screen, Palette()) == []
    assert all(screen.pixel(x, 55) == 0 for x in range(0, 80))