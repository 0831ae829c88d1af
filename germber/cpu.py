"""The CPU: fetch, operand decoding, stack and interrupt dispatch."""

from __future__ import annotations

from collections.abc import Callable

from germber.bus import Bus
from germber.dbg import SerialDebug
from germber.instructions import AddrMode, Instruction, RegType, inst_to_str, instruction_by_opcode
from germber.interrupts import vector_for
from germber.ops import InvalidInstructionError, processor_for
from germber.registers import Registers

_REG8 = {
    RegType.A: "a",
    RegType.F: "f",
    RegType.B: "b",
    RegType.C: "c",
    RegType.D: "d",
    RegType.E: "e",
    RegType.H: "h",
    RegType.L: "l",
}

_BYTE_OPERAND = {AddrMode.R_D8, AddrMode.R_A8, AddrMode.HL_SPR, AddrMode.D8}
_WORD_OPERAND = {AddrMode.R_D16, AddrMode.D16}
_WORD_DEST = {AddrMode.A16_R, AddrMode.D16_R}


class Cpu:
    """Executes instructions over a :class:`Bus`."""

    def __init__(
        self,
        bus: Bus,
        *,
        on_cycles: Callable[[int], None] | None = None,
        debug: bool = False,
    ) -> None:
        self.bus = bus
        self.interrupts = bus.interrupts
        self.on_cycles = on_cycles
        self.debug = debug
        self.serial = SerialDebug()

        self.regs = Registers()
        self.fetched_data = 0
        self.mem_dest = 0
        self.dest_is_mem = False
        self.cur_opcode = 0
        self.cur_inst: Instruction | None = None

        self.halted = False
        self.stepping = False
        self.int_master_enabled = False
        self.enabling_ime = False
        self.ticks = 0

        bus.io.timer.div = 0xABCC

    # Timing ------------------------------------------------------------

    def cycles(self, count: int) -> None:
        """Let ``count`` machine cycles pass."""
        self.ticks += count * 4
        if self.on_cycles is not None:
            self.on_cycles(count)

    # Registers ---------------------------------------------------------

    def read_reg8(self, reg: RegType) -> int:
        """Read an 8-bit register; HL means the byte HL points at."""
        reg = RegType(reg)
        if reg in _REG8:
            return getattr(self.regs, _REG8[reg])
        if reg is RegType.HL:
            return self.bus.read(self.regs.read(RegType.HL))
        raise ValueError(f"invalid 8-bit register: {reg!r}")

    def write_reg8(self, reg: RegType, value: int) -> None:
        """Write an 8-bit register; HL means the byte HL points at."""
        reg = RegType(reg)
        if reg in _REG8:
            setattr(self.regs, _REG8[reg], value & 0xFF)
        elif reg is RegType.HL:
            self.bus.write(self.regs.read(RegType.HL), value & 0xFF)
        else:
            raise ValueError(f"invalid 8-bit register: {reg!r}")

    # Stack -------------------------------------------------------------

    def push(self, value: int) -> None:
        """Push one byte."""
        self.regs.sp = (self.regs.sp - 1) & 0xFFFF
        self.bus.write(self.regs.sp, value & 0xFF)

    def push16(self, value: int) -> None:
        """Push a 16-bit value, high byte first."""
        self.push((value >> 8) & 0xFF)
        self.push(value & 0xFF)

    def pop(self) -> int:
        """Pop one byte."""
        value = self.bus.read(self.regs.sp)
        self.regs.sp = (self.regs.sp + 1) & 0xFFFF
        return value

    def pop16(self) -> int:
        """Pop a 16-bit value."""
        lo = self.pop()
        hi = self.pop()
        return (hi << 8) | lo

    # Fetch -------------------------------------------------------------

    def _fetch_byte(self) -> int:
        value = self.bus.read(self.regs.pc)
        self.cycles(1)
        self.regs.pc = (self.regs.pc + 1) & 0xFFFF
        return value

    def _fetch_word(self) -> int:
        pc = self.regs.pc
        lo = self.bus.read(pc)
        self.cycles(1)
        hi = self.bus.read((pc + 1) & 0xFFFF)
        self.cycles(1)
        self.regs.pc = (pc + 2) & 0xFFFF
        return lo | (hi << 8)

    def _step_hl(self, delta: int) -> None:
        self.regs.write(RegType.HL, self.regs.read(RegType.HL) + delta)

    def fetch_data(self) -> None:
        """Load the current instruction's operand and memory destination."""
        self.mem_dest = 0
        self.dest_is_mem = False

        inst = self.cur_inst
        if inst is None:
            return

        mode = inst.mode
        regs = self.regs

        if mode is AddrMode.IMP:
            return
        if mode is AddrMode.R:
            self.fetched_data = regs.read(inst.reg_1)
        elif mode is AddrMode.R_R:
            self.fetched_data = regs.read(inst.reg_2)
        elif mode in _BYTE_OPERAND:
            self.fetched_data = self._fetch_byte()
        elif mode in _WORD_OPERAND:
            self.fetched_data = self._fetch_word()
        elif mode is AddrMode.MR_R:
            self.fetched_data = regs.read(inst.reg_2)
            self.mem_dest = regs.read(inst.reg_1)
            self.dest_is_mem = True
            if inst.reg_1 is RegType.C:
                self.mem_dest |= 0xFF00
        elif mode is AddrMode.R_MR:
            address = regs.read(inst.reg_2)
            if inst.reg_2 is RegType.C:
                address |= 0xFF00
            self.fetched_data = self.bus.read(address)
            self.cycles(1)
        elif mode in (AddrMode.R_HLI, AddrMode.R_HLD):
            self.fetched_data = self.bus.read(regs.read(inst.reg_2))
            self.cycles(1)
            self._step_hl(1 if mode is AddrMode.R_HLI else -1)
        elif mode in (AddrMode.HLI_R, AddrMode.HLD_R):
            self.fetched_data = regs.read(inst.reg_2)
            self.mem_dest = regs.read(inst.reg_1)
            self.dest_is_mem = True
            self._step_hl(1 if mode is AddrMode.HLI_R else -1)
        elif mode is AddrMode.A8_R:
            self.mem_dest = self._fetch_byte() | 0xFF00
            self.dest_is_mem = True
        elif mode in _WORD_DEST:
            self.mem_dest = self._fetch_word()
            self.dest_is_mem = True
            self.fetched_data = regs.read(inst.reg_2)
        elif mode is AddrMode.MR_D8:
            self.fetched_data = self._fetch_byte()
            self.mem_dest = regs.read(inst.reg_1)
            self.dest_is_mem = True
        elif mode is AddrMode.MR:
            self.mem_dest = regs.read(inst.reg_1)
            self.dest_is_mem = True
            self.fetched_data = self.bus.read(self.mem_dest)
            self.cycles(1)
        elif mode is AddrMode.R_A16:
            address = self._fetch_word()
            self.fetched_data = self.bus.read(address)
            self.cycles(1)
        else:
            raise InvalidInstructionError(
                f"unknown addressing mode {mode!r} ({self.cur_opcode:02X})"
            )

    # Execution ---------------------------------------------------------

    def handle_interrupts(self) -> None:
        """Dispatch the highest-priority pending, enabled interrupt."""
        kind = self.interrupts.next_pending()
        if kind is None:
            return
        self.push16(self.regs.pc)
        self.regs.pc = vector_for(kind)
        self.interrupts.acknowledge(kind)
        self.halted = False
        self.int_master_enabled = False

    def trace_line(self, pc: int, ticks: int) -> str:
        """One line describing the instruction just fetched at ``pc``."""
        r = self.regs
        flags = "".join(
            letter if r.f & (1 << bit) else "-"
            for letter, bit in (("Z", 7), ("N", 6), ("H", 5), ("C", 4))
        )
        text = inst_to_str(self.cur_inst, self.fetched_data, self.bus.read((r.pc - 1) & 0xFFFF))
        b1 = self.bus.read((pc + 1) & 0xFFFF)
        b2 = self.bus.read((pc + 2) & 0xFFFF)
        return (
            f"{ticks:08X} - {pc:04X}: {text:<12} "
            f"({self.cur_opcode:02X} {b1:02X} {b2:02X}) "
            f"A: {r.a:02X} F: {flags} BC: {r.b:02X}{r.c:02X} "
            f"DE: {r.d:02X}{r.e:02X} HL: {r.h:02X}{r.l:02X}"
        )

    def step(self) -> bool:
        """Run one instruction, or one idle cycle while halted."""
        if not self.halted:
            pc = self.regs.pc
            self.cur_opcode = self.bus.read(pc)
            self.regs.pc = (pc + 1) & 0xFFFF
            self.cur_inst = instruction_by_opcode(self.cur_opcode)
            self.cycles(1)
            self.fetch_data()

            if self.cur_inst is None:
                raise InvalidInstructionError(f"Unknown Instruction! {self.cur_opcode:02X}")

            if self.debug:
                print(self.trace_line(pc, self.ticks))

            self.serial.update(self.bus)
            processor_for(self.cur_inst.kind)(self)
        else:
            self.cycles(1)
            if self.interrupts.int_flags:
                self.halted = False

        if self.int_master_enabled:
            self.handle_interrupts()
            self.enabling_ime = False

        if self.enabling_ime:
            self.int_master_enabled = True

        return True