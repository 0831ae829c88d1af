"""OAM DMA transfer."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from germber.ppu import Ppu

OAM_BYTES = 0xA0
START_DELAY = 2


class Dma:
    """Copies 160 bytes from ``value * 0x100`` into OAM, one byte per tick."""

    def __init__(self, ppu: Ppu, read: Callable[[int], int]) -> None:
        self.ppu = ppu
        self.read = read
        self.active = False
        self.byte = 0
        self.value = 0
        self.start_delay = 0

    def start(self, value: int) -> None:
        """Begin a transfer from source page ``value``."""
        self.active = True
        self.byte = 0
        self.start_delay = START_DELAY
        self.value = value & 0xFF

    def tick(self) -> None:
        """Copy one byte, after the start delay has run out."""
        if not self.active:
            return

        if self.start_delay:
            self.start_delay -= 1
            return

        self.ppu.oam_write(self.byte, self.read(self.value * 0x100 + self.byte))
        self.byte += 1
        self.active = self.byte < OAM_BYTES

    def transferring(self) -> bool:
        """True while a transfer is in progress."""
        return self.active