"""Instruction set description: opcode table, names and disassembly."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class AddrMode(IntEnum):
    """How an instruction finds its operands."""

    IMP = 0
    R_D16 = 1
    R_R = 2
    MR_R = 3
    R = 4
    R_D8 = 5
    R_MR = 6
    R_HLI = 7
    R_HLD = 8
    HLI_R = 9
    HLD_R = 10
    R_A8 = 11
    A8_R = 12
    HL_SPR = 13
    D16 = 14
    D8 = 15
    D16_R = 16
    MR_D8 = 17
    MR = 18
    A16_R = 19
    R_A16 = 20


class RegType(IntEnum):
    """CPU registers, 8-bit ones first, then the 16-bit pairs."""

    NONE = 0
    A = 1
    F = 2
    B = 3
    C = 4
    D = 5
    E = 6
    H = 7
    L = 8
    AF = 9
    BC = 10
    DE = 11
    HL = 12
    SP = 13
    PC = 14


class InType(IntEnum):
    """Instruction kinds, including the CB-prefixed ones."""

    NONE = 0
    NOP = 1
    LD = 2
    INC = 3
    DEC = 4
    RLCA = 5
    ADD = 6
    RRCA = 7
    STOP = 8
    RLA = 9
    JR = 10
    RRA = 11
    DAA = 12
    CPL = 13
    SCF = 14
    CCF = 15
    HALT = 16
    ADC = 17
    SUB = 18
    SBC = 19
    AND = 20
    XOR = 21
    OR = 22
    CP = 23
    POP = 24
    JP = 25
    PUSH = 26
    RET = 27
    CB = 28
    CALL = 29
    RETI = 30
    LDH = 31
    JPHL = 32
    DI = 33
    EI = 34
    RST = 35
    ERR = 36
    RLC = 37
    RRC = 38
    RL = 39
    RR = 40
    SLA = 41
    SRA = 42
    SWAP = 43
    SRL = 44
    BIT = 45
    RES = 46
    SET = 47


class CondType(IntEnum):
    """Branch conditions."""

    NONE = 0
    NZ = 1
    Z = 2
    NC = 3
    C = 4


@dataclass(frozen=True)
class Instruction:
    """One entry of the opcode table."""

    kind: InType = InType.NONE
    mode: AddrMode = AddrMode.IMP
    reg_1: RegType = RegType.NONE
    reg_2: RegType = RegType.NONE
    cond: CondType = CondType.NONE
    param: int = 0


_NAMES = (
    "<NONE>", "NOP", "LD", "INC", "DEC", "RLCA", "ADD", "RRCA", "STOP", "RLA",
    "JR", "RRA", "DAA", "CPL", "SCF", "CCF", "HALT", "ADC", "SUB", "SBC",
    "AND", "XOR", "OR", "CP", "POP", "JP", "PUSH", "RET", "CB", "CALL",
    "RETI", "LDH", "JPHL", "DI", "EI", "RST", "IN_ERR",
    "IN_RLC", "IN_RRC", "IN_RL", "IN_RR", "IN_SLA", "IN_SRA", "IN_SWAP",
    "IN_SRL", "IN_BIT", "IN_RES", "IN_SET",
)

_REG_NAMES = {reg: ("<NONE>" if reg is RegType.NONE else reg.name) for reg in RegType}

# Register operand order used by the regular 0x40-0xBF block; None is (HL).
_BLOCK_REGS = (RegType.B, RegType.C, RegType.D, RegType.E,
               RegType.H, RegType.L, None, RegType.A)

_ALU_KINDS = (InType.ADD, InType.ADC, InType.SUB, InType.SBC,
              InType.AND, InType.XOR, InType.OR, InType.CP)


def _build_table() -> tuple[Instruction, ...]:
    A, B, C, D, E, H, L = (RegType.A, RegType.B, RegType.C, RegType.D,
                           RegType.E, RegType.H, RegType.L)
    BC, DE, HL, SP, AF, NONE = (RegType.BC, RegType.DE, RegType.HL,
                                RegType.SP, RegType.AF, RegType.NONE)
    M = AddrMode
    K = InType
    CT = CondType
    I = Instruction

    table: dict[int, Instruction] = {
        0x00: I(K.NOP, M.IMP),
        0x01: I(K.LD, M.R_D16, BC),
        0x02: I(K.LD, M.MR_R, BC, A),
        0x03: I(K.INC, M.R, BC),
        0x04: I(K.INC, M.R, B),
        0x05: I(K.DEC, M.R, B),
        0x06: I(K.LD, M.R_D8, B),
        0x07: I(K.RLCA),
        0x08: I(K.LD, M.A16_R, NONE, SP),
        0x09: I(K.ADD, M.R_R, HL, BC),
        0x0A: I(K.LD, M.R_MR, A, BC),
        0x0B: I(K.DEC, M.R, BC),
        0x0C: I(K.INC, M.R, C),
        0x0D: I(K.DEC, M.R, C),
        0x0E: I(K.LD, M.R_D8, C),
        0x0F: I(K.RRCA),
        0x10: I(K.STOP),
        0x11: I(K.LD, M.R_D16, DE),
        0x12: I(K.LD, M.MR_R, DE, A),
        0x13: I(K.INC, M.R, DE),
        0x14: I(K.INC, M.R, D),
        0x15: I(K.DEC, M.R, D),
        0x16: I(K.LD, M.R_D8, D),
        0x17: I(K.RLA),
        0x18: I(K.JR, M.D8),
        0x19: I(K.ADD, M.R_R, HL, DE),
        0x1A: I(K.LD, M.R_MR, A, DE),
        0x1B: I(K.DEC, M.R, DE),
        0x1C: I(K.INC, M.R, E),
        0x1D: I(K.DEC, M.R, E),
        0x1E: I(K.LD, M.R_D8, E),
        0x1F: I(K.RRA),
        0x20: I(K.JR, M.D8, NONE, NONE, CT.NZ),
        0x21: I(K.LD, M.R_D16, HL),
        0x22: I(K.LD, M.HLI_R, HL, A),
        0x23: I(K.INC, M.R, HL),
        0x24: I(K.INC, M.R, H),
        0x25: I(K.DEC, M.R, H),
        0x26: I(K.LD, M.R_D8, H),
        0x27: I(K.DAA),
        0x28: I(K.JR, M.D8, NONE, NONE, CT.Z),
        0x29: I(K.ADD, M.R_R, HL, HL),
        0x2A: I(K.LD, M.R_HLI, A, HL),
        0x2B: I(K.DEC, M.R, HL),
        0x2C: I(K.INC, M.R, L),
        0x2D: I(K.DEC, M.R, L),
        0x2E: I(K.LD, M.R_D8, L),
        0x2F: I(K.CPL),
        0x30: I(K.JR, M.D8, NONE, NONE, CT.NC),
        0x31: I(K.LD, M.R_D16, SP),
        0x32: I(K.LD, M.HLD_R, HL, A),
        0x33: I(K.INC, M.R, SP),
        0x34: I(K.INC, M.MR, HL),
        0x35: I(K.DEC, M.MR, HL),
        0x36: I(K.LD, M.MR_D8, HL),
        0x37: I(K.SCF),
        0x38: I(K.JR, M.D8, NONE, NONE, CT.C),
        0x39: I(K.ADD, M.R_R, HL, SP),
        0x3A: I(K.LD, M.R_HLD, A, HL),
        0x3B: I(K.DEC, M.R, SP),
        0x3C: I(K.INC, M.R, A),
        0x3D: I(K.DEC, M.R, A),
        0x3E: I(K.LD, M.R_D8, A),
        0x3F: I(K.CCF),
    }

    for opcode in range(0x40, 0x80):
        dst = _BLOCK_REGS[(opcode >> 3) & 7]
        src = _BLOCK_REGS[opcode & 7]
        if dst is None and src is None:
            table[opcode] = I(K.HALT)
        elif src is None:
            table[opcode] = I(K.LD, M.R_MR, dst, HL)
        elif dst is None:
            table[opcode] = I(K.LD, M.MR_R, HL, src)
        else:
            table[opcode] = I(K.LD, M.R_R, dst, src)

    for opcode in range(0x80, 0xC0):
        kind = _ALU_KINDS[(opcode >> 3) & 7]
        src = _BLOCK_REGS[opcode & 7]
        if src is None:
            table[opcode] = I(kind, M.R_MR, A, HL)
        else:
            table[opcode] = I(kind, M.R_R, A, src)

    for opcode in range(0xC7, 0x100, 8):
        table[opcode] = I(K.RST, M.IMP, NONE, NONE, CT.NONE, opcode & 0x38)

    table.update({
        0xC0: I(K.RET, M.IMP, NONE, NONE, CT.NZ),
        0xC1: I(K.POP, M.R, BC),
        0xC2: I(K.JP, M.D16, NONE, NONE, CT.NZ),
        0xC3: I(K.JP, M.D16),
        0xC4: I(K.CALL, M.D16, NONE, NONE, CT.NZ),
        0xC5: I(K.PUSH, M.R, BC),
        0xC6: I(K.ADD, M.R_D8, A),
        0xC8: I(K.RET, M.IMP, NONE, NONE, CT.Z),
        0xC9: I(K.RET),
        0xCA: I(K.JP, M.D16, NONE, NONE, CT.Z),
        0xCB: I(K.CB, M.D8),
        0xCC: I(K.CALL, M.D16, NONE, NONE, CT.Z),
        0xCD: I(K.CALL, M.D16),
        0xCE: I(K.ADC, M.R_D8, A),
        0xD0: I(K.RET, M.IMP, NONE, NONE, CT.NC),
        0xD1: I(K.POP, M.R, DE),
        0xD2: I(K.JP, M.D16, NONE, NONE, CT.NC),
        0xD4: I(K.CALL, M.D16, NONE, NONE, CT.NC),
        0xD5: I(K.PUSH, M.R, DE),
        0xD6: I(K.SUB, M.R_D8, A),
        0xD8: I(K.RET, M.IMP, NONE, NONE, CT.C),
        0xD9: I(K.RETI),
        0xDA: I(K.JP, M.D16, NONE, NONE, CT.C),
        0xDC: I(K.CALL, M.D16, NONE, NONE, CT.C),
        0xDE: I(K.SBC, M.R_D8, A),
        0xE0: I(K.LDH, M.A8_R, NONE, A),
        0xE1: I(K.POP, M.R, HL),
        0xE2: I(K.LD, M.MR_R, C, A),
        0xE5: I(K.PUSH, M.R, HL),
        0xE6: I(K.AND, M.R_D8, A),
        0xE8: I(K.ADD, M.R_D8, SP),
        0xE9: I(K.JP, M.R, HL),
        0xEA: I(K.LD, M.A16_R, NONE, A),
        0xEE: I(K.XOR, M.R_D8, A),
        0xF0: I(K.LDH, M.R_A8, A),
        0xF1: I(K.POP, M.R, AF),
        0xF2: I(K.LD, M.R_MR, A, C),
        0xF3: I(K.DI),
        0xF5: I(K.PUSH, M.R, AF),
        0xF6: I(K.OR, M.R_D8, A),
        0xF8: I(K.LD, M.HL_SPR, HL, SP),
        0xF9: I(K.LD, M.R_R, SP, HL),
        0xFA: I(K.LD, M.R_A16, A),
        0xFB: I(K.EI),
        0xFE: I(K.CP, M.R_D8, A),
    })

    return tuple(table.get(opcode, I()) for opcode in range(0x100))


_TABLE = _build_table()


def instruction_by_opcode(opcode: int) -> Instruction:
    """Return the table entry for an opcode byte; unused opcodes give a NONE entry."""
    if not 0 <= opcode <= 0xFF:
        raise ValueError(f"opcode out of range: {opcode:#x}")
    return _TABLE[opcode]


def inst_name(kind: InType) -> str:
    """Return the mnemonic for an instruction kind."""
    return _NAMES[InType(kind)]


def inst_to_str(inst: Instruction, fetched_data: int, operand_byte: int = 0) -> str:
    """Disassemble an instruction given its fetched operand.

    ``operand_byte`` is the immediate byte used by the A8_R form (the byte
    just before the program counter after fetching).
    """
    name = inst_name(inst.kind)
    r1 = _REG_NAMES[inst.reg_1]
    r2 = _REG_NAMES[inst.reg_2]
    mode = inst.mode
    data = fetched_data & 0xFFFF
    low = fetched_data & 0xFF

    if mode is AddrMode.IMP:
        return f"{name} "
    if mode in (AddrMode.R_D16, AddrMode.R_A16):
        return f"{name} {r1},${data:04X}"
    if mode is AddrMode.R:
        return f"{name} {r1}"
    if mode is AddrMode.R_R:
        return f"{name} {r1},{r2}"
    if mode is AddrMode.MR_R:
        return f"{name} ({r1}),{r2}"
    if mode is AddrMode.MR:
        return f"{name} ({r1})"
    if mode is AddrMode.R_MR:
        return f"{name} {r1},({r2})"
    if mode in (AddrMode.R_D8, AddrMode.R_A8):
        return f"{name} {r1},${low:02X}"
    if mode is AddrMode.R_HLI:
        return f"{name} {r1},({r2}+)"
    if mode is AddrMode.R_HLD:
        return f"{name} {r1},({r2}-)"
    if mode is AddrMode.HLI_R:
        return f"{name} ({r1}+),{r2}"
    if mode is AddrMode.HLD_R:
        return f"{name} ({r1}-),{r2}"
    if mode is AddrMode.A8_R:
        return f"{name} ${operand_byte & 0xFF:02X},{r2}"
    if mode is AddrMode.HL_SPR:
        return f"{name} ({r1}),SP+{low}"
    if mode is AddrMode.D8:
        return f"{name} ${low:02X}"
    if mode is AddrMode.D16:
        return f"{name} ${data:04X}"
    if mode is AddrMode.MR_D8:
        return f"{name} ({r1}),${low:02X}"
    if mode is AddrMode.A16_R:
        return f"{name} (${data:04X}),{r2}"
    raise ValueError(f"invalid addressing mode: {int(mode)}")