"""Interrupt request and enable registers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag


class InterruptType(IntFlag):
    """Interrupt sources, as bits of the IF and IE registers."""

    VBLANK = 1
    LCD_STAT = 2
    TIMER = 4
    SERIAL = 8
    JOYPAD = 16


_PRIORITY = (
    InterruptType.VBLANK,
    InterruptType.LCD_STAT,
    InterruptType.TIMER,
    InterruptType.SERIAL,
    InterruptType.JOYPAD,
)

_VECTORS = {
    InterruptType.VBLANK: 0x40,
    InterruptType.LCD_STAT: 0x48,
    InterruptType.TIMER: 0x50,
    InterruptType.SERIAL: 0x58,
    InterruptType.JOYPAD: 0x60,
}


def vector_for(kind: InterruptType) -> int:
    """Return the handler address for an interrupt source."""
    try:
        return _VECTORS[InterruptType(kind)]
    except (KeyError, ValueError):
        raise ValueError(f"not a single interrupt source: {kind!r}") from None


@dataclass
class InterruptController:
    """Holds the IE register and the IF (requested interrupts) register."""

    ie_register: int = 0
    int_flags: int = 0

    def request(self, kind: InterruptType) -> None:
        """Raise the request bit for an interrupt source."""
        self.int_flags = (self.int_flags | int(kind)) & 0xFF

    def next_pending(self) -> InterruptType | None:
        """Return the highest-priority source that is both requested and enabled."""
        for kind in _PRIORITY:
            if self.int_flags & kind and self.ie_register & kind:
                return kind
        return None

    def acknowledge(self, kind: InterruptType) -> None:
        """Clear the request bit for an interrupt source."""
        self.int_flags &= ~int(kind) & 0xFF