"""Memory-mapped I/O registers at 0xFF00-0xFF7F."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from germber.gamepad import Gamepad
from germber.interrupts import InterruptController
from germber.lcd import Lcd
from germber.timer import Timer

_log = logging.getLogger(__name__)

JOYPAD = 0xFF00
SERIAL_DATA = 0xFF01
SERIAL_CONTROL = 0xFF02
INTERRUPT_FLAGS = 0xFF0F

_TIMER_RANGE = range(0xFF04, 0xFF08)
_SOUND_RANGE = range(0xFF10, 0xFF40)
_LCD_RANGE = range(0xFF40, 0xFF4C)


@dataclass
class Io:
    """Routes I/O register accesses to the joypad, serial, timer, IF and LCD."""

    lcd: Lcd = field(default_factory=Lcd)
    interrupts: InterruptController = field(default_factory=InterruptController)
    timer: Timer | None = None
    gamepad: Gamepad = field(default_factory=Gamepad)
    serial_data: bytearray = field(default_factory=lambda: bytearray(2))

    def __post_init__(self) -> None:
        if self.timer is None:
            self.timer = Timer(interrupts=self.interrupts)

    def read(self, address: int) -> int:
        """Read an I/O register; sound and unsupported registers read as 0."""
        if address == JOYPAD:
            return self.gamepad.output()
        if address == SERIAL_DATA:
            return self.serial_data[0]
        if address == SERIAL_CONTROL:
            return self.serial_data[1]
        if address in _TIMER_RANGE:
            return self.timer.read(address)
        if address == INTERRUPT_FLAGS:
            return self.interrupts.int_flags
        if address in _SOUND_RANGE:
            return 0
        if address in _LCD_RANGE:
            return self.lcd.read(address)

        _log.warning("UNSUPPORTED bus_read(%04X)", address)
        return 0

    def write(self, address: int, value: int) -> None:
        """Write an I/O register; sound and unsupported registers are ignored."""
        value &= 0xFF
        if address == JOYPAD:
            self.gamepad.set_selection(value)
        elif address == SERIAL_DATA:
            self.serial_data[0] = value
        elif address == SERIAL_CONTROL:
            self.serial_data[1] = value
        elif address in _TIMER_RANGE:
            self.timer.write(address, value)
        elif address == INTERRUPT_FLAGS:
            self.interrupts.int_flags = value
        elif address in _SOUND_RANGE:
            pass
        elif address in _LCD_RANGE:
            self.lcd.write(address, value)
        else:
            _log.warning("UNSUPPORTED bus_write(%04X)", address)