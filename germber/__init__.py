"""Game Boy emulator: CPU, memory bus, cartridge, timer, PPU and a pygame front end."""

__version__ = "0.1.0"