"""Picture processing unit: OAM/VRAM, pixel pipeline and mode state machine."""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

from germber.interrupts import InterruptController, InterruptType
from germber.lcd import Lcd, LcdMode, StatSource

if TYPE_CHECKING:
    from germber.cart import Cartridge

LINES_PER_FRAME = 154
TICKS_PER_LINE = 456
YRES = 144
XRES = 160

OAM_BASE = 0xFE00
OAM_SIZE = 0xA0
VRAM_BASE = 0x8000
VRAM_SIZE = 0x2000

_MAX_LINE_SPRITES = 10
_MAX_FETCHED_SPRITES = 3


class FetchState(IntEnum):
    """States of the background/window fetcher."""

    TILE = 0
    DATA0 = 1
    DATA1 = 2
    IDLE = 3
    PUSH = 4


@dataclass(frozen=True)
class OamEntry:
    """One sprite attribute entry: Y, X, tile index and flags byte."""

    y: int
    x: int
    tile: int
    flags: int

    @classmethod
    def from_bytes(cls, data: bytes) -> OamEntry:
        """Build an entry from its four OAM bytes."""
        if len(data) != 4:
            raise ValueError(f"an OAM entry is 4 bytes, got {len(data)}")
        return cls(data[0], data[1], data[2], data[3])

    @property
    def cgb_palette(self) -> int:
        return self.flags & 0b111

    @property
    def cgb_vram_bank(self) -> int:
        return (self.flags >> 3) & 1

    @property
    def palette_number(self) -> int:
        return (self.flags >> 4) & 1

    @property
    def x_flip(self) -> bool:
        return bool(self.flags & (1 << 5))

    @property
    def y_flip(self) -> bool:
        return bool(self.flags & (1 << 6))

    @property
    def bg_priority(self) -> bool:
        return bool(self.flags & (1 << 7))


class Ppu:
    """Renders scanlines into ``video_buffer`` one dot at a time."""

    def __init__(
        self,
        lcd: Lcd | None = None,
        interrupts: InterruptController | None = None,
        cart: Cartridge | None = None,
        bus_read: Callable[[int], int] | None = None,
        *,
        debug: bool = False,
        frame_limit: bool = True,
    ) -> None:
        self.lcd = lcd if lcd is not None else Lcd()
        self.interrupts = interrupts if interrupts is not None else InterruptController()
        self.cart = cart
        self.bus_read = bus_read if bus_read is not None else self._vram_or_ff
        self.debug = debug
        self.frame_limit = frame_limit

        self.oam = bytearray(OAM_SIZE)
        self.vram = bytearray(VRAM_SIZE)

        self.current_frame = 0
        self.line_ticks = 0
        self.video_buffer = [0] * (XRES * YRES)

        self.line_sprites: list[OamEntry] = []
        self.fetched_entries: list[OamEntry] = []
        self.window_line = 0

        self.fetch_state = FetchState.TILE
        self.pixel_fifo: deque[int] = deque()
        self.line_x = 0
        self.pushed_x = 0
        self.fetch_x = 0
        self.fifo_x = 0
        self.bgw_fetch_data = [0, 0, 0]
        self.fetch_entry_data = [0] * 6
        self.map_y = 0
        self.map_x = 0
        self.tile_y = 0

        self._clock_origin = time.monotonic()
        self._target_frame_ms = 1000 // 60
        self._prev_frame_time = 0
        self._start_timer = 0
        self._frame_count = 0

        self._handlers = {
            LcdMode.OAM: self._mode_oam,
            LcdMode.XFER: self._mode_xfer,
            LcdMode.VBLANK: self._mode_vblank,
            LcdMode.HBLANK: self._mode_hblank,
        }

        self.lcd.mode = LcdMode.OAM

    # Memory ------------------------------------------------------------

    def _vram_or_ff(self, address: int) -> int:
        if VRAM_BASE <= address < VRAM_BASE + VRAM_SIZE:
            return self.vram[address - VRAM_BASE]
        return 0xFF

    @staticmethod
    def _oam_offset(address: int) -> int:
        if address >= OAM_BASE:
            address -= OAM_BASE
        if not 0 <= address < OAM_SIZE:
            raise ValueError(f"not an OAM address: {address:#06x}")
        return address

    @staticmethod
    def _vram_offset(address: int) -> int:
        offset = address - VRAM_BASE
        if not 0 <= offset < VRAM_SIZE:
            raise ValueError(f"not a VRAM address: {address:#06x}")
        return offset

    def oam_read(self, address: int) -> int:
        """Read OAM by bus address (0xFE00-0xFE9F) or by offset (0-0x9F)."""
        return self.oam[self._oam_offset(address)]

    def oam_write(self, address: int, value: int) -> None:
        """Write OAM by bus address (0xFE00-0xFE9F) or by offset (0-0x9F)."""
        self.oam[self._oam_offset(address)] = value & 0xFF

    def vram_read(self, address: int) -> int:
        """Read a VRAM byte at 0x8000-0x9FFF."""
        return self.vram[self._vram_offset(address)]

    def vram_write(self, address: int, value: int) -> None:
        """Write a VRAM byte at 0x8000-0x9FFF."""
        self.vram[self._vram_offset(address)] = value & 0xFF

    def _oam_entries(self):
        for start in range(0, OAM_SIZE, 4):
            yield OamEntry.from_bytes(self.oam[start:start + 4])

    # State machine -----------------------------------------------------

    def tick(self) -> None:
        """Advance the PPU by one dot."""
        self.line_ticks += 1
        self._handlers[self.lcd.mode]()

    def window_visible(self) -> bool:
        """True when the window is enabled and positioned on screen."""
        lcd = self.lcd
        return lcd.win_enable and lcd.win_x <= 166 and lcd.win_y < YRES

    def _increment_ly(self) -> None:
        lcd = self.lcd
        if self.window_visible() and lcd.win_y <= lcd.ly < lcd.win_y + YRES:
            self.window_line = (self.window_line + 1) & 0xFF

        lcd.ly = (lcd.ly + 1) & 0xFF

        if lcd.ly == lcd.ly_compare:
            lcd.lyc_flag = True
            if lcd.stat_int(StatSource.LYC):
                self.interrupts.request(InterruptType.LCD_STAT)
        else:
            lcd.lyc_flag = False

    def load_line_sprites(self) -> None:
        """Collect up to ten sprites on the current line, ordered by X."""
        self.line_sprites = []
        cur_y = self.lcd.ly
        height = self.lcd.obj_height

        for entry in self._oam_entries():
            if not entry.x:
                continue
            if len(self.line_sprites) >= _MAX_LINE_SPRITES:
                break
            if entry.y <= cur_y + 16 < entry.y + height:
                index = next(
                    (i for i, s in enumerate(self.line_sprites) if s.x > entry.x),
                    len(self.line_sprites),
                )
                self.line_sprites.insert(index, entry)

    def _mode_oam(self) -> None:
        if self.line_ticks >= 80:
            self.lcd.mode = LcdMode.XFER
            self.fetch_state = FetchState.TILE
            self.line_x = 0
            self.fetch_x = 0
            self.pushed_x = 0
            self.fifo_x = 0

        if self.line_ticks == 1:
            self.load_line_sprites()

    def _mode_xfer(self) -> None:
        self._pipeline_process()

        if self.pushed_x >= XRES:
            self.pixel_fifo.clear()
            self.lcd.mode = LcdMode.HBLANK
            if self.lcd.stat_int(StatSource.HBLANK):
                self.interrupts.request(InterruptType.LCD_STAT)

    def _mode_vblank(self) -> None:
        if self.line_ticks >= TICKS_PER_LINE:
            self._increment_ly()
            if self.lcd.ly >= LINES_PER_FRAME:
                self.lcd.mode = LcdMode.OAM
                self.lcd.ly = 0
                self.window_line = 0
            self.line_ticks = 0

    def _ticks_ms(self) -> int:
        return int((time.monotonic() - self._clock_origin) * 1000)

    def _end_of_frame(self) -> None:
        end = self._ticks_ms()
        frame_time = end - self._prev_frame_time

        if self.frame_limit and frame_time < self._target_frame_ms:
            time.sleep((self._target_frame_ms - frame_time) / 1000)

        if end - self._start_timer >= 1000:
            fps = self._frame_count
            self._start_timer = end
            self._frame_count = 0
            if self.debug:
                print(f"FPS: {fps}")
            if self.cart is not None and self.cart.need_save:
                self.cart.battery_save()

        self._frame_count += 1
        self._prev_frame_time = self._ticks_ms()

    def _mode_hblank(self) -> None:
        if self.line_ticks >= TICKS_PER_LINE:
            self._increment_ly()

            if self.lcd.ly >= YRES:
                self.lcd.mode = LcdMode.VBLANK
                self.interrupts.request(InterruptType.VBLANK)
                if self.lcd.stat_int(StatSource.VBLANK):
                    self.interrupts.request(InterruptType.LCD_STAT)
                self.current_frame += 1
                self._end_of_frame()
            else:
                self.lcd.mode = LcdMode.OAM

            self.line_ticks = 0

    # Pixel pipeline ----------------------------------------------------

    def _fifo_pop(self) -> int:
        if not self.pixel_fifo:
            raise RuntimeError("pixel FIFO is empty")
        return self.pixel_fifo.popleft()

    def _fetch_sprite_pixels(self, color: int, bg_color: int) -> int:
        scroll_fine = self.lcd.scroll_x % 8
        for i, entry in enumerate(self.fetched_entries):
            sp_x = (entry.x - 8) + scroll_fine
            if sp_x + 8 < self.fifo_x:
                continue

            offset = self.fifo_x - sp_x
            if offset < 0 or offset > 7:
                continue

            bit = offset if entry.x_flip else 7 - offset
            hi = int(bool(self.fetch_entry_data[i * 2] & (1 << bit)))
            lo = int(bool(self.fetch_entry_data[i * 2 + 1] & (1 << bit))) << 1
            index = hi | lo

            if not index:
                continue

            if not entry.bg_priority or bg_color == 0:
                colors = self.lcd.sp2_colors if entry.palette_number else self.lcd.sp1_colors
                color = colors[index]
                break

        return color

    def _fifo_add(self) -> bool:
        if len(self.pixel_fifo) > 8:
            return False

        lcd = self.lcd
        x = self.fetch_x - (8 - lcd.scroll_x % 8)

        for i in range(8):
            bit = 7 - i
            hi = int(bool(self.bgw_fetch_data[1] & (1 << bit)))
            lo = int(bool(self.bgw_fetch_data[2] & (1 << bit))) << 1
            color = lcd.bg_colors[hi | lo]

            if not lcd.bgw_enable:
                color = lcd.bg_colors[0]

            if lcd.obj_enable:
                color = self._fetch_sprite_pixels(color, hi | lo)

            if x >= 0:
                self.pixel_fifo.append(color)
                self.fifo_x = (self.fifo_x + 1) & 0xFF

        return True

    def _load_sprite_tile(self) -> None:
        scroll_fine = self.lcd.scroll_x % 8
        for entry in self.line_sprites:
            sp_x = (entry.x - 8) + scroll_fine
            if (self.fetch_x <= sp_x < self.fetch_x + 8
                    or self.fetch_x <= sp_x + 8 < self.fetch_x + 8):
                self.fetched_entries.append(entry)
            if len(self.fetched_entries) >= _MAX_FETCHED_SPRITES:
                break

    def _load_sprite_data(self, offset: int) -> None:
        cur_y = self.lcd.ly
        height = self.lcd.obj_height

        for i, entry in enumerate(self.fetched_entries):
            ty = (((cur_y + 16) - entry.y) * 2) & 0xFF
            if entry.y_flip:
                ty = ((height * 2) - 2 - ty) & 0xFF

            tile_index = entry.tile
            if height == 16:
                tile_index &= 0xFE

            self.fetch_entry_data[i * 2 + offset] = self.bus_read(
                VRAM_BASE + tile_index * 16 + ty + offset
            )

    def _load_window_tile(self) -> None:
        if not self.window_visible():
            return

        lcd = self.lcd
        if lcd.win_x <= self.fetch_x + 7 < lcd.win_x + YRES + 14:
            if lcd.win_y <= lcd.ly < lcd.win_y + XRES:
                w_tile_y = self.window_line // 8
                tile = self.bus_read(
                    lcd.win_map_area
                    + (self.fetch_x + 7 - lcd.win_x) // 8
                    + w_tile_y * 32
                )
                if lcd.bgw_data_area == 0x8800:
                    tile = (tile + 128) & 0xFF
                self.bgw_fetch_data[0] = tile

    def _tile_data_address(self) -> int:
        return self.lcd.bgw_data_area + self.bgw_fetch_data[0] * 16 + self.tile_y

    def _fetch(self) -> None:
        lcd = self.lcd
        state = self.fetch_state

        if state is FetchState.TILE:
            self.fetched_entries = []

            if lcd.bgw_enable:
                tile = self.bus_read(
                    lcd.bg_map_area + self.map_x // 8 + (self.map_y // 8) * 32
                )
                if lcd.bgw_data_area == 0x8800:
                    tile = (tile + 128) & 0xFF
                self.bgw_fetch_data[0] = tile
                self._load_window_tile()

            if lcd.obj_enable and self.line_sprites:
                self._load_sprite_tile()

            self.fetch_state = FetchState.DATA0
            self.fetch_x = (self.fetch_x + 8) & 0xFF

        elif state is FetchState.DATA0:
            self.bgw_fetch_data[1] = self.bus_read(self._tile_data_address())
            self._load_sprite_data(0)
            self.fetch_state = FetchState.DATA1

        elif state is FetchState.DATA1:
            self.bgw_fetch_data[2] = self.bus_read(self._tile_data_address() + 1)
            self._load_sprite_data(1)
            self.fetch_state = FetchState.IDLE

        elif state is FetchState.IDLE:
            self.fetch_state = FetchState.PUSH

        elif state is FetchState.PUSH:
            if self._fifo_add():
                self.fetch_state = FetchState.TILE

    def _push_pixel(self) -> None:
        if len(self.pixel_fifo) > 8:
            pixel = self._fifo_pop()
            if self.line_x >= self.lcd.scroll_x % 8:
                self.video_buffer[self.pushed_x + self.lcd.ly * XRES] = pixel
                self.pushed_x = (self.pushed_x + 1) & 0xFF
            self.line_x = (self.line_x + 1) & 0xFF

    def _pipeline_process(self) -> None:
        lcd = self.lcd
        self.map_y = (lcd.ly + lcd.scroll_y) & 0xFF
        self.map_x = (self.fetch_x + lcd.scroll_x) & 0xFF
        self.tile_y = ((lcd.ly + lcd.scroll_y) % 8) * 2

        if not self.line_ticks & 1:
            self._fetch()

        self._push_pixel()