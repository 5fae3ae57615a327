import pytest

from brafos.display import (
    FONT,
    GLYPH_HEIGHT,
    GLYPH_WIDTH,
    Framebuffer,
    Palette,
    glyph,
    rgb555,
)

FRONT = 0x7FFF
BACK = 0x0001


def cell_rows(fb, col, row, front=FRONT):
    """Read back a character cell as ten 8-bit rows of lit pixels."""
    rows = []
    for dy in range(GLYPH_HEIGHT):
        bits = 0
        for dx in range(GLYPH_WIDTH):
            bits = (bits << 1) | (fb.pixel(col * GLYPH_WIDTH + dx, row * GLYPH_HEIGHT + dy) == front)
        rows.append(bits)
    return tuple(rows)


def test_rgb555_full_white():
    assert rgb555(31, 31, 31) == 0x7FFF


def test_rgb555_black():
    assert rgb555(0, 0, 0) == 0


@pytest.mark.parametrize("r,g,b", [(1, 2, 3), (31, 0, 17), (250, 250, 250), (0, 50, 240)])
def test_rgb555_components_round_trip(r, g, b):
    c = rgb555(r, g, b)
    assert (c >> 10) & 0x1F == r & 0x1F
    assert (c >> 5) & 0x1F == g & 0x1F
    assert c & 0x1F == b & 0x1F
    assert c <= 0x7FFF


def test_rgb555_masks_high_bits():
    assert rgb555(250, 250, 250) == rgb555(250 - 32 * 7, 250 - 32 * 7, 250 - 32 * 7)


def test_palette_defaults_follow_startup_colours():
    p = Palette()
    assert p.background == rgb555(1, 1, 1)
    assert p.user == p.font_green
    assert p.table_background == rgb555(0, 0, 200)


def test_glyph_digit_one_matches_font_table():
    assert glyph("1") == (
        0b00000000,
        0b00001000,
        0b00011000,
        0b00101000,
        0b00001000,
        0b00001000,
        0b00001000,
        0b00001000,
        0b00001000,
        0b00111110,
    )


def test_glyph_slash():
    assert glyph(0x2F)[0] == 0b00000110
    assert glyph(0x2F)[-1] == 0b10000000


def test_glyph_blank_codes():
    assert glyph(0) == (0,) * 10
    assert glyph(" ") == (0,) * 10
    assert glyph("A") == (0,) * 10


def test_glyph_control_codes_share_dot():
    assert glyph(0x0D) == glyph(".") == glyph(0x1F)


def test_font_shape():
    assert len(FONT) == 256
    for code in range(256):
        rows = glyph(code)
        assert len(rows) == GLYPH_HEIGHT
        assert all(0 <= b <= 0xFF for b in rows)
        assert tuple(rows) == tuple(FONT[code])


@pytest.mark.parametrize("bad", [-1, 256, "ab", ""])
def test_glyph_rejects_bad_codes(bad):
    with pytest.raises(ValueError):
        glyph(bad)


def test_framebuffer_starts_black():
    fb = Framebuffer(16, 20)
    assert all(fb.pixel(x, y) == 0 for x in range(16) for y in range(20))
    assert fb.pitch == 32
    assert fb.columns == 2


def test_framebuffer_rejects_empty_size():
    with pytest.raises(ValueError):
        Framebuffer(0, 10)


def test_pix_round_trip_and_truncation():
    fb = Framebuffer(8, 8)
    fb.pix(3, 4, 0x1234)
    assert fb.pixel(3, 4) == 0x1234
    fb.pix(3, 4, 0x1_0000 | 0x00F)
    assert fb.pixel(3, 4) == 0x00F


def test_pix_out_of_range():
    fb = Framebuffer(8, 8)
    with pytest.raises(IndexError):
        fb.pix(8, 0, 1)
    with pytest.raises(IndexError):
        fb.pixel(0, -1)


def test_fill():
    fb = Framebuffer(10, 5)
    fb.fill(BACK)
    assert {fb.pixel(x, y) for x in range(10) for y in range(5)} == {BACK}


def test_draw_letter_matches_glyph():
    fb = Framebuffer(32, 30)
    fb.draw_letter(1, 2, FRONT, BACK, "w")
    assert cell_rows(fb, 1, 2) == glyph("w")
    assert fb.pixel(0, 0) == 0


def test_draw_letter_background_pixels():
    fb = Framebuffer(8, 10)
    fb.draw_letter(0, 0, FRONT, BACK, "1")
    # row 1 of '1' is 0b00001000: only column 4 lit
    assert fb.pixel(4, 1) == FRONT
    assert fb.pixel(3, 1) == BACK
    assert fb.pixel(0, 0) == BACK


def test_draw_letter_outside_screen():
    fb = Framebuffer(16, 10)
    with pytest.raises(IndexError):
        fb.draw_letter(2, 0, FRONT, BACK, "a")


def test_print_text_draws_cells():
    fb = Framebuffer(80, 20)
    end = fb.print_text(0, 0, FRONT, BACK, "abc")
    assert end == (3, 0)
    assert [cell_rows(fb, c, 0) for c in range(3)] == [glyph(ch) for ch in "abc"]


def test_print_text_wraps_at_right_edge():
    fb = Framebuffer(16, 30)
    end = fb.print_text(0, 0, FRONT, BACK, "xyz")
    assert end == (1, 1)
    assert cell_rows(fb, 0, 1) == glyph("z")


def test_print_text_carriage_return():
    fb = Framebuffer(80, 30)
    end = fb.print_text(3, 0, FRONT, BACK, "a\rb")
    assert end == (1, 1)
    assert cell_rows(fb, 3, 0) == glyph("a")
    assert cell_rows(fb, 0, 1) == glyph("b")


def test_print_text_stops_at_nul():
    fb = Framebuffer(80, 10)
    end = fb.print_text(0, 0, FRONT, BACK, "ab\0cd")
    assert end == (2, 0)
    assert cell_rows(fb, 2, 0) == (0,) * 10
    assert fb.pixel(2 * GLYPH_WIDTH, 0) == 0


def test_print_text_empty():
    fb = Framebuffer(16, 10)
    assert fb.print_text(1, 0, FRONT, BACK, "") == (1, 0)
    assert fb.pixel(8, 0) == 0