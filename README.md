# germber

germber is a Game Boy (DMG) emulator. It has an SM83 CPU, an MBC1
cartridge mapper with battery-backed RAM, a timer, OAM DMA, joypad
input and a PPU that draws scanlines through a pixel FIFO. Frames are
shown in a pygame window.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Running a game

```
germber -r path/to/game.gb
```

Options:

| Option     | Meaning                                                                  |
|------------|--------------------------------------------------------------------------|
| `-r PATH`  | ROM file to load (required)                                              |
| `-s SCALE` | Window scale factor (default 4)                                          |
| `-p N`     | Colour palette 0-4: mono, beige, forest, vaporwave, cyber ice (default 0) |
| `-d`       | Debug mode: prints a trace line per instruction, prints FPS once a second and draws a tile viewer beside the game screen |
| `-h`       | Show help                                                                |

An unknown option, a palette outside 0-4 or a scale of 0 is reported on
standard error and the command exits with a non-zero status.

When the cartridge type is MBC1+RAM+BATTERY, its RAM is kept next to the
ROM as `<rom>.battery`. The file is read at start-up and written back
when the game has changed the RAM (checked about once a second, and
when the RAM bank is switched).

### Controls

| Game Boy | Keys                  |
|----------|-----------------------|
| D-pad    | arrow keys or W A S D |
| A        | X or Space            |
| B        | Z or Left Shift       |
| Start    | Enter                 |
| Select   | Backspace             |
| Quit     | Escape, or close the window |

## Using the library

ROM header inspection and cartridge loading:

```python
from germber.header import read_rom, rom_info, is_valid_rom
from germber.cart import Cartridge

data = read_rom("game.gb")
print(is_valid_rom(data))
print(rom_info(data))

cart = Cartridge.from_file("game.gb")
print(cart.summary())
print(cart.type_name(), cart.licensee_name(), cart.checksum_passed())
print(cart.header.title, cart.header.cart_type)
```

The instruction table:

```python
from germber.instructions import instruction_by_opcode, inst_name, inst_to_str

inst = instruction_by_opcode(0x3E)
print(inst_name(inst.kind))        # LD
print(inst_to_str(inst, 0x42))     # LD A,$42
```

Running the machine without a window:

```python
from germber.cart import Cartridge
from germber.emu import Emulator

emulator = Emulator(Cartridge.from_file("game.gb"), frame_limit=False)
for _ in range(100_000):
    emulator.cpu.step()

print(emulator.ppu.current_frame)
pixels = emulator.ppu.video_buffer   # 160 x 144 ARGB integers, row by row
emulator.gamepad_state.start = True  # press Start
```

`germber.bus.Bus`, `germber.cpu.Cpu`, `germber.ppu.Ppu`,
`germber.timer.Timer` and the other components can also be built and
driven separately.

## What it does not do

- There is no sound: the sound registers read as 0 and writes to them
  are ignored.
- Only MBC1 bank switching is handled. Other cartridge types are read as
  a flat ROM image and writes to them are ignored; battery saves are kept
  only for MBC1+RAM+BATTERY.
- There is no Game Boy Color mode and no serial link to another machine;
  bytes sent over the serial port are only collected by
  `germber.dbg.SerialDebug`.