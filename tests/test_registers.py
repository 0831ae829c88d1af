import pytest

from germber.instructions import RegType
from germber.registers import Registers


def test_post_boot_pc_and_sp():
    regs = Registers()
    assert regs.read(RegType.PC) == 0x100
    assert regs.read(RegType.SP) == 0xFFFE


@pytest.mark.parametrize(
    "reg", [RegType.AF, RegType.BC, RegType.DE, RegType.HL, RegType.SP, RegType.PC]
)
@pytest.mark.parametrize("value", [0x0000, 0x1234, 0xBEEF, 0xFFFF])
def test_sixteen_bit_round_trip(reg, value):
    regs = Registers()
    regs.write(reg, value)
    assert regs.read(reg) == value


@pytest.mark.parametrize(
    "pair,hi,lo",
    [
        (RegType.BC, RegType.B, RegType.C),
        (RegType.DE, RegType.D, RegType.E),
        (RegType.HL, RegType.H, RegType.L),
        (RegType.AF, RegType.A, RegType.F),
    ],
)
def test_pair_is_high_then_low(pair, hi, lo):
    regs = Registers()
    regs.write(hi, 0x12)
    regs.write(lo, 0x34)
    assert regs.read(pair) == (0x12 << 8) | 0x34
    regs.write(pair, 0xABCD)
    assert regs.read(hi) == 0xAB
    assert regs.read(lo) == 0xCD


def test_eight_bit_write_truncates():
    regs = Registers()
    regs.write(RegType.A, 0x1FF)
    assert regs.read(RegType.A) == 0x1FF & 0xFF


def test_sixteen_bit_write_truncates():
    regs = Registers()
    regs.write(RegType.SP, 0x12345)
    assert regs.read(RegType.SP) == 0x12345 & 0xFFFF


def test_none_register_reads_zero_and_ignores_writes():
    regs = Registers()
    before = Registers(**vars(regs))
    regs.write(RegType.NONE, 0x55)
    assert regs == before
    assert regs.read(RegType.NONE) == 0


def test_set_flags_and_read_back():
    regs = Registers()
    regs.set_flags(True, False, True, False)
    assert regs.flag_z() is True
    assert regs.flag_n() is False
    assert regs.flag_h() is True
    assert regs.flag_c() is False


def test_set_flags_none_leaves_flag_unchanged():
    regs = Registers()
    regs.set_flags(True, True, True, True)
    regs.set_flags(None, False, None, False)
    assert regs.flag_z() is True
    assert regs.flag_n() is False
    assert regs.flag_h() is True
    assert regs.flag_c() is False


def test_flags_live_in_high_nibble_of_f():
    regs = Registers()
    regs.f = 0
    regs.set_flags(1, 1, 1, 1)
    assert regs.f & 0x0F == 0
    assert regs.f == 0xF0