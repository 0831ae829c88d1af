"""DIV/TIMA/TMA/TAC timer."""

from __future__ import annotations

from dataclasses import dataclass, field

from germber.interrupts import InterruptController, InterruptType

DIV = 0xFF04
TIMA = 0xFF05
TMA = 0xFF06
TAC = 0xFF07

# DIV bit whose falling edge clocks TIMA, selected by TAC's low two bits.
_CLOCK_BITS = (9, 3, 5, 7)


@dataclass
class Timer:
    """The divider and programmable timer, requesting TIMER interrupts."""

    interrupts: InterruptController = field(default_factory=InterruptController)
    div: int = 0xAC00
    tima: int = 0
    tma: int = 0
    tac: int = 0

    def tick(self) -> None:
        """Advance the divider by one clock and update TIMA on a falling edge."""
        prev_div = self.div
        self.div = (self.div + 1) & 0xFFFF

        bit = 1 << _CLOCK_BITS[self.tac & 0b11]
        falling_edge = bool(prev_div & bit) and not (self.div & bit)

        if falling_edge and self.tac & 0b100:
            self.tima = (self.tima + 1) & 0xFF
            if self.tima == 0xFF:
                self.tima = self.tma
                self.interrupts.request(InterruptType.TIMER)

    def read(self, address: int) -> int:
        """Read a timer register; unknown addresses read as 0."""
        if address == DIV:
            return self.div >> 8
        if address == TIMA:
            return self.tima
        if address == TMA:
            return self.tma
        if address == TAC:
            return self.tac
        return 0

    def write(self, address: int, value: int) -> None:
        """Write a timer register; any write to DIV resets it."""
        value &= 0xFF
        if address == DIV:
            self.div = 0
        elif address == TIMA:
            self.tima = value
        elif address == TMA:
            self.tma = value
        elif address == TAC:
            self.tac = value