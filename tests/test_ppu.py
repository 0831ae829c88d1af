import pytest

from germber.interrupts import InterruptType
from germber.lcd import LcdMode, StatSource
from germber.ppu import (
    LINES_PER_FRAME,
    TICKS_PER_LINE,
    XRES,
    OamEntry,
    Ppu,
)


def make_ppu():
    return Ppu(frame_limit=False)


def run(ppu, ticks):
    for _ in range(ticks):
        ppu.tick()


def test_oam_entry_from_bytes():
    entry = OamEntry.from_bytes(bytes([16, 8, 3, 0b1110_0000]))
    assert (entry.y, entry.x, entry.tile) == (16, 8, 3)
    assert entry.bg_priority
    assert entry.y_flip
    assert entry.x_flip
    assert entry.palette_number == 0


def test_oam_entry_wrong_length():
    with pytest.raises(ValueError):
        OamEntry.from_bytes(b"\x00\x01")


def test_oam_addressing():
    ppu = make_ppu()
    ppu.oam_write(0xFE05, 0x42)
    assert ppu.oam_read(5) == 0x42
    ppu.oam_write(0x9F, 0x11)
    assert ppu.oam_read(0xFE9F) == 0x11
    with pytest.raises(ValueError):
        ppu.oam_read(0xFEA0)


def test_vram_round_trip_and_bounds():
    ppu = make_ppu()
    ppu.vram_write(0x9FFF, 0xAB)
    assert ppu.vram_read(0x9FFF) == 0xAB
    with pytest.raises(ValueError):
        ppu.vram_read(0x7FFF)
    with pytest.raises(ValueError):
        ppu.vram_write(0xA000, 1)


def test_starts_in_oam_then_transfers():
    ppu = make_ppu()
    assert ppu.lcd.mode is LcdMode.OAM
    run(ppu, 79)
    assert ppu.lcd.mode is LcdMode.OAM
    ppu.tick()
    assert ppu.lcd.mode is LcdMode.XFER


def test_one_line_advances_ly():
    ppu = make_ppu()
    run(ppu, TICKS_PER_LINE - 1)
    assert ppu.lcd.mode is LcdMode.HBLANK
    ppu.tick()
    assert ppu.lcd.ly == 1
    assert ppu.lcd.mode is LcdMode.OAM
    assert ppu.line_ticks == 0


def test_full_frame():
    ppu = make_ppu()
    run(ppu, LINES_PER_FRAME * TICKS_PER_LINE)
    assert ppu.current_frame == 1
    assert ppu.lcd.ly == 0
    assert ppu.lcd.mode is LcdMode.OAM
    assert ppu.interrupts.int_flags & InterruptType.VBLANK


def test_lyc_interrupt():
    ppu = make_ppu()
    ppu.lcd.ly_compare = 1
    ppu.lcd.lcds |= StatSource.LYC
    run(ppu, TICKS_PER_LINE)
    assert ppu.lcd.lyc_flag
    assert ppu.interrupts.int_flags & InterruptType.LCD_STAT


def test_background_line_rendered():
    ppu = make_ppu()
    for offset in range(16):
        ppu.vram_write(0x8000 + offset, 0xFF)
    run(ppu, TICKS_PER_LINE)
    assert ppu.video_buffer[:XRES] == [ppu.lcd.bg_colors[3]] * XRES


def test_sprite_drawn_over_background():
    ppu = make_ppu()
    ppu.lcd.write(0xFF47, 0x00)
    ppu.lcd.lcdc |= 0b10
    for offset in range(16):
        ppu.vram_write(0x8010 + offset, 0xFF)
    for i, byte in enumerate((16, 8, 1, 0)):
        ppu.oam_write(0xFE00 + i, byte)
    run(ppu, TICKS_PER_LINE)
    sprite_color = ppu.lcd.sp1_colors[3]
    assert sprite_color != ppu.lcd.bg_colors[0]
    assert ppu.video_buffer[:8] == [sprite_color] * 8
    assert ppu.video_buffer[8] == ppu.lcd.bg_colors[0]


def test_line_sprites_sorted_and_filtered():
    ppu = make_ppu()
    sprites = [(16, 50), (16, 20), (16, 0), (100, 10), (16, 30)]
    for index, (y, x) in enumerate(sprites):
        for i, byte in enumerate((y, x, 0, 0)):
            ppu.oam_write(index * 4 + i, byte)
    ppu.load_line_sprites()
    assert [s.x for s in ppu.line_sprites] == [20, 30, 50]


def test_line_sprites_capped_at_ten():
    ppu = make_ppu()
    for index in range(12):
        for i, byte in enumerate((16, 12 - index, 0, 0)):
            ppu.oam_write(index * 4 + i, byte)
    ppu.load_line_sprites()
    xs = [s.x for s in ppu.line_sprites]
    assert len(xs) == 10
    assert xs == sorted(xs)
    assert xs == list(range(3, 13))


def test_window_visible():
    ppu = make_ppu()
    assert not ppu.window_visible()
    ppu.lcd.lcdc |= 1 << 5
    ppu.lcd.win_x = 7
    assert ppu.window_visible()
    ppu.lcd.win_x = 167
    assert not ppu.window_visible()
    ppu.lcd.win_x = 7
    ppu.lcd.win_y = 144
    assert not ppu.window_visible()