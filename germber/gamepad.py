"""Joypad register."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GamepadState:
    """Which buttons are currently held."""

    start: bool = False
    select: bool = False
    a: bool = False
    b: bool = False
    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False


@dataclass
class Gamepad:
    """The joypad: selection lines plus the held-button state."""

    button_sel: bool = False
    dir_sel: bool = False
    state: GamepadState = field(default_factory=GamepadState)

    def set_selection(self, value: int) -> None:
        """Latch the selection bits written to the joypad register."""
        self.button_sel = bool(value & 0x20)
        self.dir_sel = bool(value & 0x10)

    def output(self) -> int:
        """Return the joypad register value; a pressed key clears its bit."""
        output = 0xCF
        state = self.state

        if not self.button_sel:
            for pressed, bit in ((state.start, 3), (state.select, 2),
                                 (state.a, 0), (state.b, 1)):
                if pressed:
                    output &= ~(1 << bit)

        if not self.dir_sel:
            for pressed, bit in ((state.left, 1), (state.right, 0),
                                 (state.up, 2), (state.down, 3)):
                if pressed:
                    output &= ~(1 << bit)

        return output & 0xFF