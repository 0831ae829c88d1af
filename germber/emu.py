"""Wires the machine together and runs it from the command line."""

from __future__ import annotations

import getopt
import logging
import re
import sys
import threading
import time
from dataclasses import dataclass
from typing import Any

from germber.bus import Bus
from germber.cart import Cartridge
from germber.cpu import Cpu
from germber.interrupts import InterruptController
from germber.lcd import PALETTES, Lcd
from germber.ppu import Ppu

_log = logging.getLogger(__name__)

DEFAULT_SCALE = 4
NUM_OF_PALETTES = len(PALETTES) - 1

USAGE = """\
Usage: germber [options]
Options:
  -d               Enable debug mode
  -h               Show this help message
  -p <n>           Select colour palette (0-4)
  -r <path>        Specify ROM Path
  -s <n>           Window scale factor"""


class UsageError(ValueError):
    """Raised for a malformed command line."""


@dataclass
class Options:
    """Settings taken from the command line."""

    rom_path: str | None = None
    scale: int = DEFAULT_SCALE
    palette: int = 0
    debug: bool = False
    show_help: bool = False


def _atoi(text: str) -> int:
    match = re.match(r"\s*[+-]?\d+", text)
    return int(match.group()) if match else 0


def parse_args(argv: list[str]) -> Options:
    """Parse command-line options; raises UsageError on bad input."""
    try:
        pairs, _ = getopt.getopt(list(argv), "dhp:r:s:")
    except getopt.GetoptError as exc:
        raise UsageError(
            f"Unknown option '-{exc.opt}'. Run with -h for options."
        ) from None

    options = Options()
    for flag, value in pairs:
        if flag == "-d":
            options.debug = True
        elif flag == "-h":
            options.show_help = True
            return options
        elif flag == "-p":
            palette = _atoi(value)
            if palette > NUM_OF_PALETTES or palette < 0:
                raise UsageError("Invalid palette.")
            options.palette = palette
        elif flag == "-r":
            options.rom_path = value
        elif flag == "-s":
            scale = _atoi(value)
            if scale == 0:
                raise UsageError("Failed to convert scale argument to int.")
            options.scale = scale
    return options


class Emulator:
    """Owns every component and drives them in lock step with the CPU."""

    def __init__(
        self,
        cart: Any = None,
        *,
        palette: int = 0,
        debug: bool = False,
        frame_limit: bool = True,
    ) -> None:
        self.paused = False
        self.running = False
        self.die = False
        self.ticks = 0
        self.debug = debug

        self.cart = cart
        self.interrupts = InterruptController()
        self.lcd = Lcd(palette=palette)
        self.ppu = Ppu(
            self.lcd,
            self.interrupts,
            cart,
            debug=debug,
            frame_limit=frame_limit,
        )
        self.bus = Bus(cart, ppu=self.ppu, interrupts=self.interrupts)
        self.ppu.bus_read = self.bus.read
        self.cpu = Cpu(self.bus, on_cycles=self.cycles, debug=debug)

    @property
    def timer(self):
        return self.bus.io.timer

    @property
    def gamepad_state(self):
        """The button state the joypad register reports."""
        return self.bus.io.gamepad.state

    def cycles(self, count: int) -> None:
        """Advance timer and PPU four ticks per machine cycle, DMA once."""
        timer = self.bus.io.timer
        for _ in range(count):
            for _ in range(4):
                self.ticks += 1
                timer.tick()
                self.ppu.tick()
            self.bus.dma.tick()

    def run_cpu(self) -> None:
        """Run instructions until :meth:`stop` is called."""
        self.running = True
        self.paused = False
        self.ticks = 0

        while self.running:
            if self.paused:
                time.sleep(0.01)
                continue
            if not self.cpu.step():
                print("CPU Stopped")
                return

    def stop(self) -> None:
        """Stop the CPU loop and ask the front end to exit."""
        self.running = False
        self.die = True


def _cpu_thread(emulator: Emulator) -> None:
    try:
        emulator.run_cpu()
    except Exception:
        _log.exception("CPU halted on an error")
        emulator.die = True


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    if argv is None:
        argv = sys.argv[1:]

    try:
        options = parse_args(argv)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1

    if options.show_help:
        print(USAGE)
        return 0

    if not options.rom_path:
        print("ROM path not specified.", file=sys.stderr)
        return -1

    try:
        cart = Cartridge.from_file(options.rom_path)
    except (OSError, ValueError):
        print(f"Failed to load ROM file: {options.rom_path}")
        return -2

    summary = cart.summary()
    if summary:
        print(summary)
    print("Cart loaded..")

    from germber.ui import Ui

    emulator = Emulator(cart, palette=options.palette, debug=options.debug)
    ui = Ui(options.scale, debug=options.debug)

    thread = threading.Thread(target=_cpu_thread, args=(emulator,), daemon=True)
    thread.start()

    prev_frame = 0
    try:
        while not emulator.die:
            time.sleep(0.001)
            ui.handle_events(emulator)
            current = emulator.ppu.current_frame
            if prev_frame != current:
                ui.update(emulator.ppu.video_buffer, emulator.bus.read)
            prev_frame = current
    finally:
        emulator.stop()
        thread.join(timeout=1.0)
        ui.close()

    return 0