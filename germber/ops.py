"""Instruction behaviour: one processor function per instruction kind."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from germber.instructions import AddrMode, CondType, Instruction, InType, RegType
from germber.registers import Registers

_log = logging.getLogger(__name__)


class InvalidInstructionError(Exception):
    """Raised when the CPU meets an opcode it cannot execute."""


class _BusLike(Protocol):
    def read(self, address: int) -> int: ...

    def write(self, address: int, value: int) -> None: ...

    def write16(self, address: int, value: int) -> None: ...


class _CpuLike(Protocol):
    regs: Registers
    bus: _BusLike
    cur_inst: Instruction
    cur_opcode: int
    fetched_data: int
    mem_dest: int
    dest_is_mem: bool
    halted: bool
    int_master_enabled: bool
    enabling_ime: bool

    def cycles(self, count: int) -> None: ...

    def push(self, value: int) -> None: ...

    def push16(self, value: int) -> None: ...

    def pop(self) -> int: ...

    def read_reg8(self, reg: RegType) -> int: ...

    def write_reg8(self, reg: RegType, value: int) -> None: ...


_REG_LOOKUP = (
    RegType.B,
    RegType.C,
    RegType.D,
    RegType.E,
    RegType.H,
    RegType.L,
    RegType.HL,
    RegType.A,
)


def _signed8(value: int) -> int:
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


def decode_reg(reg: int) -> RegType:
    """Map a 3-bit register field to its register; out of range gives NONE."""
    if not 0 <= reg <= 0b111:
        return RegType.NONE
    return _REG_LOOKUP[reg]


def is_16_bit(reg: RegType) -> bool:
    """True for the register pairs, SP and PC."""
    return reg >= RegType.AF


def check_cond(cpu: _CpuLike) -> bool:
    """Evaluate the current instruction's condition against the flags."""
    cond = cpu.cur_inst.cond
    z = cpu.regs.flag_z()
    c = cpu.regs.flag_c()
    if cond is CondType.NONE:
        return True
    if cond is CondType.C:
        return c
    if cond is CondType.NC:
        return not c
    if cond is CondType.Z:
        return z
    if cond is CondType.NZ:
        return not z
    return False


def goto_addr(cpu: _CpuLike, address: int, push_pc: bool) -> None:
    """Jump when the condition holds, pushing PC first for calls."""
    if check_cond(cpu):
        if push_pc:
            cpu.cycles(2)
            cpu.push16(cpu.regs.pc)
        cpu.regs.pc = address & 0xFFFF
        cpu.cycles(1)


# Misc ---------------------------------------------------------------

def proc_none(cpu: _CpuLike) -> None:
    raise InvalidInstructionError(f"invalid instruction {cpu.cur_opcode:02X}")


def proc_nop(cpu: _CpuLike) -> None:
    pass


def proc_cpl(cpu: _CpuLike) -> None:
    cpu.regs.a = ~cpu.regs.a & 0xFF
    cpu.regs.set_flags(None, 1, 1, None)


def proc_scf(cpu: _CpuLike) -> None:
    cpu.regs.set_flags(None, 0, 0, 1)


def proc_ccf(cpu: _CpuLike) -> None:
    cpu.regs.set_flags(None, 0, 0, not cpu.regs.flag_c())


# Interrupt control --------------------------------------------------

def proc_di(cpu: _CpuLike) -> None:
    cpu.int_master_enabled = False


def proc_ei(cpu: _CpuLike) -> None:
    cpu.enabling_ime = True


def proc_stop(cpu: _CpuLike) -> None:
    _log.warning("STOPPING!")


# Memory -------------------------------------------------------------

def proc_ld(cpu: _CpuLike) -> None:
    inst = cpu.cur_inst
    regs = cpu.regs

    if cpu.dest_is_mem:
        if is_16_bit(inst.reg_2):
            cpu.cycles(1)
            cpu.bus.write16(cpu.mem_dest, cpu.fetched_data & 0xFFFF)
        else:
            cpu.bus.write(cpu.mem_dest, cpu.fetched_data & 0xFF)
        cpu.cycles(1)
        return

    if inst.mode is AddrMode.HL_SPR:
        source = regs.read(inst.reg_2)
        hflag = (source & 0xF) + (cpu.fetched_data & 0xF) >= 0x10
        cflag = (source & 0xFF) + (cpu.fetched_data & 0xFF) >= 0x100
        regs.set_flags(0, 0, hflag, cflag)
        regs.write(inst.reg_1, source + _signed8(cpu.fetched_data))
        return

    regs.write(inst.reg_1, cpu.fetched_data)


def proc_ldh(cpu: _CpuLike) -> None:
    inst = cpu.cur_inst
    if inst.reg_1 is RegType.A:
        cpu.regs.write(inst.reg_1, cpu.bus.read(0xFF00 | (cpu.fetched_data & 0xFF)))
    else:
        cpu.bus.write(cpu.mem_dest, cpu.regs.a)
    cpu.cycles(1)


def proc_pop(cpu: _CpuLike) -> None:
    lo = cpu.pop()
    cpu.cycles(1)
    hi = cpu.pop()
    cpu.cycles(1)

    value = (hi << 8) | lo
    reg = cpu.cur_inst.reg_1
    if reg is RegType.AF:
        value &= 0xFFF0
    cpu.regs.write(reg, value)


def proc_push(cpu: _CpuLike) -> None:
    reg = cpu.cur_inst.reg_1
    hi = (cpu.regs.read(reg) >> 8) & 0xFF
    cpu.cycles(1)
    cpu.push(hi)

    lo = cpu.regs.read(reg) & 0xFF
    cpu.cycles(1)
    cpu.push(lo)

    cpu.cycles(1)


# Control flow -------------------------------------------------------

def proc_halt(cpu: _CpuLike) -> None:
    cpu.halted = True


def proc_jp(cpu: _CpuLike) -> None:
    goto_addr(cpu, cpu.fetched_data, False)


def proc_jr(cpu: _CpuLike) -> None:
    rel = _signed8(cpu.fetched_data)
    goto_addr(cpu, (cpu.regs.pc + rel) & 0xFFFF, False)


def proc_call(cpu: _CpuLike) -> None:
    goto_addr(cpu, cpu.fetched_data, True)


def proc_rst(cpu: _CpuLike) -> None:
    goto_addr(cpu, cpu.cur_inst.param, True)


def proc_ret(cpu: _CpuLike) -> None:
    if cpu.cur_inst.cond is not CondType.NONE:
        cpu.cycles(1)

    if check_cond(cpu):
        lo = cpu.pop()
        cpu.cycles(1)
        hi = cpu.pop()
        cpu.cycles(1)
        cpu.regs.pc = (hi << 8) | lo
        cpu.cycles(1)


def proc_reti(cpu: _CpuLike) -> None:
    cpu.int_master_enabled = True
    proc_ret(cpu)


# Arithmetic and logic -----------------------------------------------

def proc_and(cpu: _CpuLike) -> None:
    cpu.regs.a &= cpu.fetched_data & 0xFF
    cpu.regs.set_flags(cpu.regs.a == 0, 0, 1, 0)


def proc_xor(cpu: _CpuLike) -> None:
    cpu.regs.a ^= cpu.fetched_data & 0xFF
    cpu.regs.set_flags(cpu.regs.a == 0, 0, 0, 0)


def proc_or(cpu: _CpuLike) -> None:
    cpu.regs.a |= cpu.fetched_data & 0xFF
    cpu.regs.set_flags(cpu.regs.a == 0, 0, 0, 0)


def proc_cp(cpu: _CpuLike) -> None:
    a = cpu.regs.a
    data = cpu.fetched_data
    n = a - data
    cpu.regs.set_flags(n == 0, 1, (a & 0x0F) - (data & 0x0F) < 0, n < 0)


def proc_daa(cpu: _CpuLike) -> None:
    regs = cpu.regs
    adjust = 0
    carry = 0

    if regs.flag_h() or (not regs.flag_n() and (regs.a & 0xF) > 9):
        adjust = 6

    if regs.flag_c() or (not regs.flag_n() and regs.a > 0x99):
        adjust |= 0x60
        carry = 1

    regs.a = (regs.a - adjust if regs.flag_n() else regs.a + adjust) & 0xFF
    regs.set_flags(regs.a == 0, None, 0, carry)


def proc_inc(cpu: _CpuLike) -> None:
    inst = cpu.cur_inst
    regs = cpu.regs
    value = (regs.read(inst.reg_1) + 1) & 0xFFFF

    if is_16_bit(inst.reg_1):
        cpu.cycles(1)

    if inst.reg_1 is RegType.HL and inst.mode is AddrMode.MR:
        address = regs.read(RegType.HL)
        value = (cpu.bus.read(address) + 1) & 0xFF
        cpu.bus.write(address, value)
    else:
        regs.write(inst.reg_1, value)
        value = regs.read(inst.reg_1)

    if (cpu.cur_opcode & 0x03) == 0x03:
        return

    regs.set_flags(value == 0, 0, (value & 0x0F) == 0, None)


def proc_dec(cpu: _CpuLike) -> None:
    inst = cpu.cur_inst
    regs = cpu.regs
    value = (regs.read(inst.reg_1) - 1) & 0xFFFF

    if is_16_bit(inst.reg_1):
        cpu.cycles(1)

    if inst.reg_1 is RegType.HL and inst.mode is AddrMode.MR:
        address = regs.read(RegType.HL)
        value = (cpu.bus.read(address) - 1) & 0xFFFF
        cpu.bus.write(address, value & 0xFF)
    else:
        regs.write(inst.reg_1, value)
        value = regs.read(inst.reg_1)

    if (cpu.cur_opcode & 0x0B) == 0x0B:
        return

    regs.set_flags(value == 0, 1, (value & 0x0F) == 0x0F, None)


def proc_sub(cpu: _CpuLike) -> None:
    reg = cpu.cur_inst.reg_1
    current = cpu.regs.read(reg)
    data = cpu.fetched_data
    value = (current - data) & 0xFFFF

    z = value == 0
    h = (current & 0xF) - (data & 0xF) < 0
    c = current - data < 0

    cpu.regs.write(reg, value)
    cpu.regs.set_flags(z, 1, h, c)


def proc_sbc(cpu: _CpuLike) -> None:
    reg = cpu.cur_inst.reg_1
    carry = int(cpu.regs.flag_c())
    current = cpu.regs.read(reg)
    data = cpu.fetched_data
    value = (data + carry) & 0xFF

    z = current - value == 0
    h = (current & 0xF) - (data & 0xF) - carry < 0
    c = current - data - carry < 0

    cpu.regs.write(reg, current - value)
    cpu.regs.set_flags(z, 1, h, c)


def proc_adc(cpu: _CpuLike) -> None:
    regs = cpu.regs
    u = cpu.fetched_data
    a = regs.a
    c = int(regs.flag_c())

    regs.a = (a + u + c) & 0xFF
    regs.set_flags(regs.a == 0, 0, (a & 0xF) + (u & 0xF) + c > 0xF, a + u + c > 0xFF)


def proc_add(cpu: _CpuLike) -> None:
    reg = cpu.cur_inst.reg_1
    current = cpu.regs.read(reg)
    data = cpu.fetched_data
    value = current + data
    wide = is_16_bit(reg)

    if wide:
        cpu.cycles(1)

    if reg is RegType.SP:
        value = current + _signed8(data)

    z: object = (value & 0xFF) == 0
    h = (current & 0xF) + (data & 0xF) >= 0x10
    c = (current & 0xFF) + (data & 0xFF) >= 0x100

    if wide:
        z = None
        h = (current & 0xFFF) + (data & 0xFFF) >= 0x1000
        c = current + data >= 0x10000

    if reg is RegType.SP:
        z = 0
        h = (current & 0xF) + (data & 0xF) >= 0x10
        c = (current & 0xFF) + (data & 0xFF) >= 0x100

    cpu.regs.write(reg, value & 0xFFFF)
    cpu.regs.set_flags(z, 0, h, c)


# Bit operations -----------------------------------------------------

def proc_cb(cpu: _CpuLike) -> None:
    op = cpu.fetched_data & 0xFF
    reg = decode_reg(op & 0b111)
    bit = (op >> 3) & 0b111
    bit_op = (op >> 6) & 0b11
    reg_val = cpu.read_reg8(reg)
    regs = cpu.regs

    cpu.cycles(1)
    if reg is RegType.HL:
        cpu.cycles(2)

    if bit_op == 1:
        regs.set_flags(not reg_val & (1 << bit), 0, 1, None)
        return
    if bit_op == 2:
        cpu.write_reg8(reg, reg_val & ~(1 << bit) & 0xFF)
        return
    if bit_op == 3:
        cpu.write_reg8(reg, reg_val | (1 << bit))
        return

    flag_c = int(regs.flag_c())

    if bit == 0:  # RLC
        result = ((reg_val << 1) | (reg_val >> 7)) & 0xFF
        carry = bool(reg_val & 0x80)
    elif bit == 1:  # RRC
        result = ((reg_val >> 1) | (reg_val << 7)) & 0xFF
        carry = bool(reg_val & 1)
    elif bit == 2:  # RL
        result = ((reg_val << 1) | flag_c) & 0xFF
        carry = bool(reg_val & 0x80)
    elif bit == 3:  # RR
        result = (reg_val >> 1) | (flag_c << 7)
        carry = bool(reg_val & 1)
    elif bit == 4:  # SLA
        result = (reg_val << 1) & 0xFF
        carry = bool(reg_val & 0x80)
    elif bit == 5:  # SRA
        result = (_signed8(reg_val) >> 1) & 0xFF
        carry = bool(reg_val & 1)
    elif bit == 6:  # SWAP
        result = ((reg_val & 0xF0) >> 4) | ((reg_val & 0x0F) << 4)
        carry = False
    else:  # SRL
        result = reg_val >> 1
        carry = bool(reg_val & 1)

    cpu.write_reg8(reg, result)
    regs.set_flags(result == 0, 0, 0, carry)


def proc_rlca(cpu: _CpuLike) -> None:
    a = cpu.regs.a
    carry = (a >> 7) & 1
    cpu.regs.a = ((a << 1) | carry) & 0xFF
    cpu.regs.set_flags(0, 0, 0, carry)


def proc_rrca(cpu: _CpuLike) -> None:
    a = cpu.regs.a
    low = a & 1
    cpu.regs.a = (a >> 1) | (low << 7)
    cpu.regs.set_flags(0, 0, 0, low)


def proc_rla(cpu: _CpuLike) -> None:
    a = cpu.regs.a
    old_carry = int(cpu.regs.flag_c())
    carry = (a >> 7) & 1
    cpu.regs.a = ((a << 1) | old_carry) & 0xFF
    cpu.regs.set_flags(0, 0, 0, carry)


def proc_rra(cpu: _CpuLike) -> None:
    a = cpu.regs.a
    old_carry = int(cpu.regs.flag_c())
    carry = a & 1
    cpu.regs.a = (a >> 1) | (old_carry << 7)
    cpu.regs.set_flags(0, 0, 0, carry)


_PROCESSORS: dict[InType, Callable[[_CpuLike], None]] = {
    InType.NONE: proc_none,
    InType.NOP: proc_nop,
    InType.LD: proc_ld,
    InType.LDH: proc_ldh,
    InType.JP: proc_jp,
    InType.DI: proc_di,
    InType.POP: proc_pop,
    InType.PUSH: proc_push,
    InType.JR: proc_jr,
    InType.CALL: proc_call,
    InType.RET: proc_ret,
    InType.RST: proc_rst,
    InType.DEC: proc_dec,
    InType.INC: proc_inc,
    InType.ADD: proc_add,
    InType.ADC: proc_adc,
    InType.SUB: proc_sub,
    InType.SBC: proc_sbc,
    InType.AND: proc_and,
    InType.XOR: proc_xor,
    InType.OR: proc_or,
    InType.CP: proc_cp,
    InType.CB: proc_cb,
    InType.RRCA: proc_rrca,
    InType.RLCA: proc_rlca,
    InType.RRA: proc_rra,
    InType.RLA: proc_rla,
    InType.STOP: proc_stop,
    InType.HALT: proc_halt,
    InType.DAA: proc_daa,
    InType.CPL: proc_cpl,
    InType.SCF: proc_scf,
    InType.CCF: proc_ccf,
    InType.EI: proc_ei,
    InType.RETI: proc_reti,
}


def processor_for(kind: InType) -> Callable[[_CpuLike], None]:
    """Return the function that executes an instruction kind."""
    try:
        return _PROCESSORS[InType(kind)]
    except (KeyError, ValueError):
        raise InvalidInstructionError(f"no processor for instruction kind {kind!r}") from None