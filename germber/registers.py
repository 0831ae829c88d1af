"""CPU register file and flag helpers."""

from __future__ import annotations

from dataclasses import dataclass

from germber.instructions import RegType

_FLAG_Z = 7
_FLAG_N = 6
_FLAG_H = 5
_FLAG_C = 4

_SINGLE = {
    RegType.A: "a",
    RegType.F: "f",
    RegType.B: "b",
    RegType.C: "c",
    RegType.D: "d",
    RegType.E: "e",
    RegType.H: "h",
    RegType.L: "l",
}

_PAIRS = {
    RegType.AF: ("a", "f"),
    RegType.BC: ("b", "c"),
    RegType.DE: ("d", "e"),
    RegType.HL: ("h", "l"),
}

_WORDS = {
    RegType.PC: "pc",
    RegType.SP: "sp",
}


@dataclass
class Registers:
    """The 8-bit registers, their 16-bit pairs, PC and SP.

    Defaults are the values the machine holds once the boot ROM has run.
    """

    a: int = 0x01
    f: int = 0xB0
    b: int = 0x00
    c: int = 0x13
    d: int = 0x00
    e: int = 0xD8
    h: int = 0x01
    l: int = 0x4D
    pc: int = 0x100
    sp: int = 0xFFFE

    def read(self, reg: RegType) -> int:
        """Read an 8-bit register, a 16-bit pair, PC or SP; NONE reads as 0."""
        reg = RegType(reg)
        if reg in _SINGLE:
            return getattr(self, _SINGLE[reg])
        if reg in _PAIRS:
            hi, lo = _PAIRS[reg]
            return (getattr(self, hi) << 8) | getattr(self, lo)
        if reg in _WORDS:
            return getattr(self, _WORDS[reg])
        return 0

    def write(self, reg: RegType, value: int) -> None:
        """Write a register, truncating to its width; NONE is ignored."""
        reg = RegType(reg)
        if reg in _SINGLE:
            setattr(self, _SINGLE[reg], value & 0xFF)
        elif reg in _PAIRS:
            hi, lo = _PAIRS[reg]
            value &= 0xFFFF
            setattr(self, hi, value >> 8)
            setattr(self, lo, value & 0xFF)
        elif reg in _WORDS:
            setattr(self, _WORDS[reg], value & 0xFFFF)

    def _set_flag(self, bit: int, on: object) -> None:
        if on is None:
            return
        if on:
            self.f |= 1 << bit
        else:
            self.f &= ~(1 << bit) & 0xFF

    def set_flags(self, z: object, n: object, h: object, c: object) -> None:
        """Set or clear the Z, N, H and C flags; None leaves a flag unchanged."""
        self._set_flag(_FLAG_Z, z)
        self._set_flag(_FLAG_N, n)
        self._set_flag(_FLAG_H, h)
        self._set_flag(_FLAG_C, c)

    def flag_z(self) -> bool:
        """Zero flag."""
        return bool(self.f & (1 << _FLAG_Z))

    def flag_n(self) -> bool:
        """Subtract flag."""
        return bool(self.f & (1 << _FLAG_N))

    def flag_h(self) -> bool:
        """Half-carry flag."""
        return bool(self.f & (1 << _FLAG_H))

    def flag_c(self) -> bool:
        """Carry flag."""
        return bool(self.f & (1 << _FLAG_C))