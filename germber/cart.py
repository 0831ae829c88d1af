"""Cartridge loading, header parsing and MBC1 banking with battery-backed RAM."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

_log = logging.getLogger(__name__)

HEADER_START = 0x100
HEADER_END = 0x150
RAM_BANK_SIZE = 0x2000
ROM_BANK_SIZE = 0x4000

_ROM_TYPES = (
    "ROM ONLY",
    "MBC1",
    "MBC1+RAM",
    "MBC1+RAM+BATTERY",
    "0x04 ???",
    "MBC2",
    "MBC2+BATTERY",
    "0x07 ???",
    "ROM+RAM 1",
    "ROM+RAM+BATTERY 1",
    "0x0A ???",
    "MMM01",
    "MMM01+RAM",
    "MMM01+RAM+BATTERY",
    "0x0E ???",
    "MBC3+TIMER+BATTERY",
    "MBC3+TIMER+RAM+BATTERY 2",
    "MBC3",
    "MBC3+RAM 2",
    "MBC3+RAM+BATTERY 2",
    "0x14 ???",
    "0x15 ???",
    "0x16 ???",
    "0x17 ???",
    "0x18 ???",
    "MBC5",
    "MBC5+RAM",
    "MBC5+RAM+BATTERY",
    "MBC5+RUMBLE",
    "MBC5+RUMBLE+RAM",
    "MBC5+RUMBLE+RAM+BATTERY",
    "0x1F ???",
    "MBC6",
    "0x21 ???",
    "MBC7+SENSOR+RUMBLE+RAM+BATTERY",
)

_LIC_CODES = {
    0x00: "None",
    0x01: "Nintendo R&D1",
    0x08: "Capcom",
    0x13: "Electronic Arts",
    0x18: "Hudson Soft",
    0x19: "b-ai",
    0x20: "kss",
    0x22: "pow",
    0x24: "PCM Complete",
    0x25: "san-x",
    0x28: "Kemco Japan",
    0x29: "seta",
    0x30: "Viacom",
    0x31: "Nintendo",
    0x32: "Bandai",
    0x33: "Ocean/Acclaim",
    0x34: "Konami",
    0x35: "Hector",
    0x37: "Taito",
    0x38: "Hudson",
    0x39: "Banpresto",
    0x41: "Ubi Soft",
    0x42: "Atlus",
    0x44: "Malibu",
    0x46: "angel",
    0x47: "Bullet-Proof",
    0x49: "irem",
    0x50: "Absolute",
    0x51: "Acclaim",
    0x52: "Activision",
    0x53: "American sammy",
    0x54: "Konami",
    0x55: "Hi tech entertainment",
    0x56: "LJN",
    0x57: "Matchbox",
    0x58: "Mattel",
    0x59: "Milton Bradley",
    0x60: "Titus",
    0x61: "Virgin",
    0x64: "LucasArts",
    0x67: "Ocean",
    0x69: "Electronic Arts",
    0x70: "Infogrames",
    0x71: "Interplay",
    0x72: "Broderbund",
    0x73: "sculptured",
    0x75: "sci",
    0x78: "THQ",
    0x79: "Accolade",
    0x80: "misawa",
    0x83: "lozc",
    0x86: "Tokuma Shoten Intermedia",
    0x87: "Tsukuda Original",
    0x91: "Chunsoft",
    0x92: "Video system",
    0x93: "Ocean/Acclaim",
    0x95: "Varie",
    0x96: "Yonezawa/s’pal",
    0x97: "Kaneko",
    0x99: "Pack in soft",
    0xA4: "Konami (Yu-Gi-Oh!)",
}

# RAM size code -> number of 8 KiB banks.
_RAM_BANK_COUNTS = {2: 1, 3: 4, 4: 16, 5: 8}


@dataclass(frozen=True)
class RomHeader:
    """The cartridge header found at 0x100-0x14F."""

    entry: bytes
    logo: bytes
    title: str
    new_lic_code: int
    sgb_flag: int
    cart_type: int
    rom_size: int
    ram_size: int
    dest_code: int
    lic_code: int
    version: int
    checksum: int
    global_checksum: int

    @classmethod
    def parse(cls, data: bytes) -> RomHeader:
        """Parse the header out of a whole ROM image."""
        if len(data) < HEADER_END:
            raise ValueError(
                f"ROM too small for a header: {len(data)} bytes, need {HEADER_END}"
            )
        # The title field is treated as NUL-terminated within its first 15 bytes.
        raw_title = bytes(data[0x134:0x143]).split(b"\0", 1)[0]
        return cls(
            entry=bytes(data[0x100:0x104]),
            logo=bytes(data[0x104:0x134]),
            title=raw_title.decode("latin-1"),
            new_lic_code=int.from_bytes(data[0x144:0x146], "little"),
            sgb_flag=data[0x146],
            cart_type=data[0x147],
            rom_size=data[0x148],
            ram_size=data[0x149],
            dest_code=data[0x14A],
            lic_code=data[0x14B],
            version=data[0x14C],
            checksum=data[0x14D],
            global_checksum=int.from_bytes(data[0x14E:0x150], "little"),
        )


class Cartridge:
    """A loaded ROM image with MBC1 bank switching and optional battery RAM."""

    def __init__(self, rom_data: bytes, filename: str | Path = "") -> None:
        data = bytearray(rom_data)
        self.header = RomHeader.parse(data)
        # The header's title terminator is written into the image itself.
        data[0x143] = 0
        self.rom_data = bytes(data)
        self.filename = str(filename)

        self.ram_enabled = False
        self.ram_banking = False
        self.banking_mode = 0
        self.rom_bank_value = 0
        self.ram_bank_value = 0
        self._rom_bank_offset = ROM_BANK_SIZE

        bank_count = _RAM_BANK_COUNTS.get(self.header.ram_size, 0)
        self.ram_banks: list[bytearray | None] = [
            bytearray(RAM_BANK_SIZE) if i < bank_count else None for i in range(16)
        ]
        self.ram_bank: bytearray | None = self.ram_banks[0]

        self.battery = self.header.cart_type == 3
        self.need_save = False

    @classmethod
    def from_file(cls, path: str | Path) -> Cartridge:
        """Load a ROM file, restoring battery RAM when the cartridge has one."""
        cart = cls(Path(path).read_bytes(), path)
        if cart.battery:
            cart.battery_load()
        return cart

    @property
    def is_mbc1(self) -> bool:
        """True for MBC1 cartridges (types 1 to 3)."""
        return 1 <= self.header.cart_type <= 3

    @property
    def battery_path(self) -> Path:
        """Where the battery-backed RAM is kept."""
        return Path(f"{self.filename}.battery")

    def _rom_byte(self, index: int) -> int:
        if 0 <= index < len(self.rom_data):
            return self.rom_data[index]
        return 0xFF

    def read(self, address: int) -> int:
        """Read a byte from ROM or cartridge RAM."""
        address &= 0xFFFF
        if not self.is_mbc1 or address < 0x4000:
            return self._rom_byte(address)

        if (address & 0xE000) == 0xA000:
            if not self.ram_enabled or self.ram_bank is None:
                return 0xFF
            return self.ram_bank[address - 0xA000]

        return self._rom_byte(self._rom_bank_offset + address - 0x4000)

    def _select_ram_bank(self) -> None:
        if self.need_save:
            self.battery_save()
        self.ram_bank = self.ram_banks[self.ram_bank_value]

    def write(self, address: int, value: int) -> None:
        """Write to the MBC control registers or cartridge RAM."""
        if not self.is_mbc1:
            return

        address &= 0xFFFF
        value &= 0xFF
        region = address & 0xE000

        if address < 0x2000:
            self.ram_enabled = (value & 0xF) == 0xA

        if region == 0x2000:
            if value == 0:
                value = 1
            value &= 0b11111
            self.rom_bank_value = value
            self._rom_bank_offset = ROM_BANK_SIZE * value

        if region == 0x4000:
            self.ram_bank_value = value & 0b11
            if self.ram_banking:
                self._select_ram_bank()

        if region == 0x6000:
            self.banking_mode = value & 1
            self.ram_banking = bool(self.banking_mode)
            if self.ram_banking:
                self._select_ram_bank()

        if region == 0xA000:
            if not self.ram_enabled or self.ram_bank is None:
                return
            self.ram_bank[address - 0xA000] = value
            if self.battery:
                self.need_save = True

    def battery_load(self) -> None:
        """Fill the current RAM bank from the battery file, if it can be read."""
        if self.ram_bank is None:
            return
        try:
            with open(self.battery_path, "rb") as fp:
                chunk = fp.read(RAM_BANK_SIZE)
        except OSError:
            _log.warning("failed to open %s", self.battery_path)
            return
        self.ram_bank[: len(chunk)] = chunk

    def battery_save(self) -> None:
        """Write the current RAM bank to the battery file."""
        if self.ram_bank is None:
            return
        try:
            with open(self.battery_path, "wb") as fp:
                fp.write(self.ram_bank)
        except OSError:
            _log.warning("failed to open %s", self.battery_path)

    def type_name(self) -> str:
        """Name of the cartridge type."""
        if self.header.cart_type < len(_ROM_TYPES):
            return _ROM_TYPES[self.header.cart_type]
        return "UNKNOWN"

    def licensee_name(self) -> str:
        """Name of the licensee, or UNKNOWN."""
        if self.header.new_lic_code <= 0xA4:
            return _LIC_CODES.get(self.header.lic_code, "UNKNOWN")
        return "UNKNOWN"

    def checksum_passed(self) -> bool:
        """Header checksum test over 0x134-0x14C."""
        x = 0
        for byte in self.rom_data[0x134:0x14D]:
            x = (x - byte - 1) & 0xFFFF
        return bool(x & 0xFF)

    def summary(self) -> str:
        """Human-readable description of the loaded cartridge."""
        h = self.header
        lines = [
            "Cartridge Loaded:",
            f"\t Title    : {h.title}",
            f"\t Type     : {h.cart_type:02X} ({self.type_name()})",
            f"\t ROM Size : {32 << h.rom_size} KB",
            f"\t RAM Size : {h.ram_size:02X}",
            f"\t LIC Code : {h.lic_code:02X} ({self.licensee_name()})",
            f"\t ROM Vers : {h.version:02X}",
            f"\t Checksum : {h.checksum:02X} "
            f"({'PASSED' if self.checksum_passed() else 'FAILED'})",
        ]
        return "\n".join(lines)