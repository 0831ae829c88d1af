"""Work RAM and high RAM."""

from __future__ import annotations

from dataclasses import dataclass, field

WRAM_BASE = 0xC000
HRAM_BASE = 0xFF80


@dataclass
class Ram:
    """8 KiB of work RAM at 0xC000 and 127 bytes of high RAM at 0xFF80."""

    wram: bytearray = field(default_factory=lambda: bytearray(0x2000))
    hram: bytearray = field(default_factory=lambda: bytearray(0x80))

    @staticmethod
    def _offset(address: int, base: int, size: int, what: str) -> int:
        offset = (address - base) & 0xFFFF
        if offset >= size:
            raise ValueError(f"invalid {what} address {address & 0xFFFF:08X}")
        return offset

    def wram_read(self, address: int) -> int:
        """Read a work RAM byte; the address must lie in 0xC000-0xDFFF."""
        return self.wram[self._offset(address, WRAM_BASE, len(self.wram), "WRAM")]

    def wram_write(self, address: int, value: int) -> None:
        """Write a work RAM byte; the address must lie in 0xC000-0xDFFF."""
        self.wram[self._offset(address, WRAM_BASE, len(self.wram), "WRAM")] = value & 0xFF

    def hram_read(self, address: int) -> int:
        """Read a high RAM byte; the address must lie in 0xFF80-0xFFFF."""
        return self.hram[self._offset(address, HRAM_BASE, len(self.hram), "HRAM")]

    def hram_write(self, address: int, value: int) -> None:
        """Write a high RAM byte; the address must lie in 0xFF80-0xFFFF."""
        self.hram[self._offset(address, HRAM_BASE, len(self.hram), "HRAM")] = value & 0xFF