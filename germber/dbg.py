"""Collects bytes sent over the serial port, as test ROMs report through it."""

from __future__ import annotations

from typing import Protocol

SERIAL_DATA = 0xFF01
SERIAL_CONTROL = 0xFF02
TRANSFER_START = 0x81


class _BusLike(Protocol):
    def read(self, address: int) -> int: ...

    def write(self, address: int, value: int) -> None: ...


class SerialDebug:
    """Accumulates characters written to the serial port."""

    def __init__(self) -> None:
        self._chars: list[str] = []

    def update(self, bus: _BusLike) -> None:
        """Take the pending serial byte, if a transfer was started."""
        if bus.read(SERIAL_CONTROL) == TRANSFER_START:
            self._chars.append(chr(bus.read(SERIAL_DATA)))
            bus.write(SERIAL_CONTROL, 0)

    def message(self) -> str:
        """Everything received so far."""
        return "".join(self._chars)