"""LCD control and status registers, and colour palettes."""

from __future__ import annotations

from collections.abc import Callable
from enum import IntEnum, IntFlag

LCD_BASE = 0xFF40
DMA_REGISTER = 0xFF46
BGP_REGISTER = 0xFF47
OBP0_REGISTER = 0xFF48
OBP1_REGISTER = 0xFF49

PALETTES: tuple[tuple[int, int, int, int], ...] = (
    (0xFFFFFFFF, 0xFFAAAAAA, 0xFF555555, 0xFF000000),  # mono
    (0xFFFDF6E3, 0xFFDECBA4, 0xFF8B6E4B, 0xFF3B2F2F),  # beige
    (0xFFE8F5E9, 0xFF81C784, 0xFF388E3C, 0xFF1B5E20),  # forest
    (0xFFFFB7C5, 0xFFB0E0E6, 0xFF9B59B6, 0xFF2C3E50),  # vaporwave
    (0xFFE0FFFF, 0xFF00CED1, 0xFF4682B4, 0xFF2F4F4F),  # cyber ice
)

# Register attributes in address order starting at 0xFF40.
_REGISTERS = (
    "lcdc",
    "lcds",
    "scroll_y",
    "scroll_x",
    "ly",
    "ly_compare",
    "dma",
    "bg_palette",
    "obj_palette_0",
    "obj_palette_1",
    "win_y",
    "win_x",
)


class LcdMode(IntEnum):
    """The PPU mode held in the low two bits of the STAT register."""

    HBLANK = 0
    VBLANK = 1
    OAM = 2
    XFER = 3


class StatSource(IntFlag):
    """STAT register bits that enable LCD_STAT interrupt sources."""

    HBLANK = 1 << 3
    VBLANK = 1 << 4
    OAM = 1 << 5
    LYC = 1 << 6


class Lcd:
    """The LCD registers at 0xFF40-0xFF4B and the derived colour tables."""

    def __init__(self, palette: int = 0, on_dma: Callable[[int], None] | None = None) -> None:
        if not 0 <= palette < len(PALETTES):
            raise ValueError(f"Invalid palette: {palette}")
        self.current_colors = PALETTES[palette]
        self.on_dma = on_dma

        self.lcdc = 0x91
        self.lcds = 0
        self.scroll_y = 0
        self.scroll_x = 0
        self.ly = 0
        self.ly_compare = 0
        self.dma = 0
        self.bg_palette = 0xFC
        self.obj_palette_0 = 0xFF
        self.obj_palette_1 = 0xFF
        self.win_y = 0
        self.win_x = 0

        self.bg_colors = list(self.current_colors)
        self.sp1_colors = list(self.current_colors)
        self.sp2_colors = list(self.current_colors)

    def _lcdc_bit(self, n: int) -> bool:
        return bool(self.lcdc & (1 << n))

    @property
    def bgw_enable(self) -> bool:
        return self._lcdc_bit(0)

    @property
    def obj_enable(self) -> bool:
        return self._lcdc_bit(1)

    @property
    def obj_height(self) -> int:
        return 16 if self._lcdc_bit(2) else 8

    @property
    def bg_map_area(self) -> int:
        return 0x9C00 if self._lcdc_bit(3) else 0x9800

    @property
    def bgw_data_area(self) -> int:
        return 0x8000 if self._lcdc_bit(4) else 0x8800

    @property
    def win_enable(self) -> bool:
        return self._lcdc_bit(5)

    @property
    def win_map_area(self) -> int:
        return 0x9C00 if self._lcdc_bit(6) else 0x9800

    @property
    def lcd_enable(self) -> bool:
        return self._lcdc_bit(7)

    @property
    def mode(self) -> LcdMode:
        """The current PPU mode from STAT."""
        return LcdMode(self.lcds & 0b11)

    @mode.setter
    def mode(self, mode: LcdMode) -> None:
        self.lcds = (self.lcds & ~0b11 & 0xFF) | int(mode)

    @property
    def lyc_flag(self) -> bool:
        """The LY == LYC coincidence bit of STAT."""
        return bool(self.lcds & (1 << 2))

    @lyc_flag.setter
    def lyc_flag(self, on: bool) -> None:
        if on:
            self.lcds |= 1 << 2
        else:
            self.lcds &= ~(1 << 2) & 0xFF

    def stat_int(self, source: StatSource) -> bool:
        """True when STAT enables the given interrupt source."""
        return bool(self.lcds & source)

    @staticmethod
    def _register(address: int) -> str:
        offset = address - LCD_BASE
        if not 0 <= offset < len(_REGISTERS):
            raise ValueError(f"not an LCD register: {address:#06x}")
        return _REGISTERS[offset]

    def read(self, address: int) -> int:
        """Read an LCD register in 0xFF40-0xFF4B."""
        return getattr(self, self._register(address))

    def write(self, address: int, value: int) -> None:
        """Write an LCD register; DMA and palette registers have side effects."""
        value &= 0xFF
        setattr(self, self._register(address), value)

        if address == DMA_REGISTER and self.on_dma is not None:
            self.on_dma(value)

        if address == BGP_REGISTER:
            self.update_palette(value, 0)
        elif address == OBP0_REGISTER:
            self.update_palette(value & 0b11111100, 1)
        elif address == OBP1_REGISTER:
            self.update_palette(value & 0b11111100, 2)

    def update_palette(self, palette_data: int, pal: int) -> None:
        """Rebuild a colour table: 0 background, 1 and 2 the sprite palettes."""
        if pal == 1:
            colors = self.sp1_colors
        elif pal == 2:
            colors = self.sp2_colors
        else:
            colors = self.bg_colors

        for index in range(4):
            colors[index] = self.current_colors[(palette_data >> (2 * index)) & 0b11]