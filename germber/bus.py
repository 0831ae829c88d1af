"""The address bus: maps every 16-bit address to the component behind it."""

from __future__ import annotations

from bisect import bisect_right
from enum import Enum, auto

from germber.cart import Cartridge
from germber.dma import Dma
from germber.interrupts import InterruptController
from germber.io import Io
from germber.ppu import Ppu
from germber.ram import Ram


class MemRegion(Enum):
    """Regions of the memory map."""

    ROM_BANK_0 = auto()
    ROM_BANK_1 = auto()
    CHR_RAM = auto()
    BG_MAP_1 = auto()
    BG_MAP_2 = auto()
    CART_RAM = auto()
    WRAM_BANK_0 = auto()
    WRAM_BANK_1_7 = auto()
    ECHO_RAM = auto()
    OAM = auto()
    UNUSABLE = auto()
    IO = auto()
    IE = auto()
    HRAM = auto()


_REGION_STARTS = (
    (0x0000, MemRegion.ROM_BANK_0),
    (0x4000, MemRegion.ROM_BANK_1),
    (0x8000, MemRegion.CHR_RAM),
    (0x9800, MemRegion.BG_MAP_1),
    (0x9C00, MemRegion.BG_MAP_2),
    (0xA000, MemRegion.CART_RAM),
    (0xC000, MemRegion.WRAM_BANK_0),
    (0xD000, MemRegion.WRAM_BANK_1_7),
    (0xE000, MemRegion.ECHO_RAM),
    (0xFE00, MemRegion.OAM),
    (0xFEA0, MemRegion.UNUSABLE),
    (0xFF00, MemRegion.IO),
    (0xFF80, MemRegion.HRAM),
    (0xFFFF, MemRegion.IE),
)
_STARTS = [start for start, _ in _REGION_STARTS]

_CART = {MemRegion.ROM_BANK_0, MemRegion.ROM_BANK_1, MemRegion.CART_RAM}
_VRAM = {MemRegion.CHR_RAM, MemRegion.BG_MAP_1, MemRegion.BG_MAP_2}
_WRAM = {MemRegion.WRAM_BANK_0, MemRegion.WRAM_BANK_1_7}


def region_of(address: int) -> MemRegion:
    """Return the memory region an address belongs to."""
    if not 0 <= address <= 0xFFFF:
        raise ValueError(f"address out of range: {address:#x}")
    return _REGION_STARTS[bisect_right(_STARTS, address) - 1][1]


class Bus:
    """Dispatches reads and writes to the cartridge, RAM, PPU, I/O and IE."""

    def __init__(
        self,
        cart: Cartridge | None = None,
        *,
        ppu: Ppu | None = None,
        ram: Ram | None = None,
        io: Io | None = None,
        dma: Dma | None = None,
        interrupts: InterruptController | None = None,
    ) -> None:
        if interrupts is None:
            interrupts = ppu.interrupts if ppu is not None else InterruptController()
        self.interrupts = interrupts
        self.cart = cart
        self.ppu = ppu if ppu is not None else Ppu(interrupts=interrupts, cart=cart)
        self.ram = ram if ram is not None else Ram()
        self.io = io if io is not None else Io(lcd=self.ppu.lcd, interrupts=interrupts)
        self.dma = dma if dma is not None else Dma(self.ppu, self.read)
        if self.ppu.lcd.on_dma is None:
            self.ppu.lcd.on_dma = self.dma.start

    def read(self, address: int) -> int:
        """Read one byte."""
        address &= 0xFFFF
        region = region_of(address)

        if region in _CART:
            return self.cart.read(address) if self.cart is not None else 0xFF
        if region in _VRAM:
            return self.ppu.vram_read(address)
        if region in _WRAM:
            return self.ram.wram_read(address)
        if region is MemRegion.ECHO_RAM:
            return self.ram.wram_read(address - 0xE000)
        if region is MemRegion.OAM:
            if self.dma.transferring():
                return 0xFF
            return self.ppu.oam_read(address)
        if region is MemRegion.UNUSABLE:
            return 0
        if region is MemRegion.IO:
            return self.io.read(address)
        if region is MemRegion.IE:
            return self.interrupts.ie_register
        return self.ram.hram_read(address)

    def write(self, address: int, value: int) -> None:
        """Write one byte."""
        address &= 0xFFFF
        value &= 0xFF
        region = region_of(address)

        if region in _CART:
            if self.cart is not None:
                self.cart.write(address, value)
        elif region in _VRAM:
            self.ppu.vram_write(address, value)
        elif region in _WRAM:
            self.ram.wram_write(address, value)
        elif region is MemRegion.ECHO_RAM:
            self.ram.wram_write(address - 0xE000, value)
        elif region is MemRegion.OAM:
            if not self.dma.transferring():
                self.ppu.oam_write(address, value)
        elif region is MemRegion.UNUSABLE:
            pass
        elif region is MemRegion.IO:
            self.io.write(address, value)
        elif region is MemRegion.IE:
            self.interrupts.ie_register = value
        else:
            self.ram.hram_write(address, value)

    def read16(self, address: int) -> int:
        """Read a little-endian 16-bit value."""
        lo = self.read(address)
        hi = self.read((address + 1) & 0xFFFF)
        return lo | (hi << 8)

    def write16(self, address: int, value: int) -> None:
        """Write a little-endian 16-bit value, high byte first."""
        self.write((address + 1) & 0xFFFF, (value >> 8) & 0xFF)
        self.write(address, value & 0xFF)