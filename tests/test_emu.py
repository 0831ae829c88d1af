import pytest

from germber.emu import Emulator, Options, UsageError, main, parse_args


class _Cart:
    need_save = False

    def __init__(self, stop_after=None):
        self.reads = 0
        self.stop_after = stop_after
        self.emulator = None

    def read(self, address):
        self.reads += 1
        if self.stop_after is not None and self.reads >= self.stop_after and self.emulator:
            self.emulator.stop()
        return 0x00

    def write(self, address, value):
        pass

    def battery_save(self):
        pass


def test_parse_args_defaults():
    assert parse_args([]) == Options()


def test_parse_args_all_options():
    opts = parse_args(["-d", "-r", "game.gb", "-s", "2", "-p", "3"])
    assert opts.debug is True
    assert opts.rom_path == "game.gb"
    assert opts.scale == 2
    assert opts.palette == 3


def test_parse_args_help():
    assert parse_args(["-h"]).show_help is True


@pytest.mark.parametrize(
    "argv",
    [["-p", "5"], ["-p", "-1"], ["-s", "0"], ["-s", "abc"], ["-x"]],
)
def test_parse_args_errors(argv):
    with pytest.raises(UsageError):
        parse_args(argv)


def test_main_without_rom():
    assert main([]) == -1


def test_main_missing_rom(tmp_path):
    assert main(["-r", str(tmp_path / "missing.gb")]) == -2


def test_main_help(capsys):
    assert main(["-h"]) == 0
    assert "Usage" in capsys.readouterr().out


def test_main_bad_option(capsys):
    assert main(["-p", "9"]) == 1
    assert "Invalid palette." in capsys.readouterr().err


def test_cycles_advance_timer_and_ppu():
    emu = Emulator(cart=_Cart(), frame_limit=False)
    div0 = emu.timer.div
    line0 = emu.ppu.line_ticks
    emu.cycles(3)
    assert emu.ticks == 12
    assert emu.timer.div == (div0 + 12) & 0xFFFF
    assert emu.ppu.line_ticks == line0 + 12


def test_cycles_drive_dma_into_oam():
    emu = Emulator(cart=_Cart(), frame_limit=False)
    for i in range(0xA0):
        emu.bus.ram.wram_write(0xC000 + i, i)
    emu.bus.dma.start(0xC0)
    emu.cycles(2)
    assert emu.bus.dma.transferring()
    emu.cycles(0xA0)
    assert not emu.bus.dma.transferring()
    assert [emu.ppu.oam_read(i) for i in range(0xA0)] == list(range(0xA0))


def test_run_cpu_until_stopped():
    cart = _Cart(stop_after=50)
    emu = Emulator(cart=cart, frame_limit=False)
    cart.emulator = emu
    emu.run_cpu()
    assert emu.running is False
    assert emu.die is True
    assert emu.cpu.regs.pc > 0x100
    assert emu.ticks > 0
    assert emu.ticks == emu.cpu.ticks


def test_stop_sets_flags():
    emu = Emulator(cart=_Cart(), frame_limit=False)
    emu.running = True
    emu.stop()
    assert (emu.running, emu.die) == (False, True)