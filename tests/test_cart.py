import pytest

from germber.cart import Cartridge, RomHeader


def make_rom(cart_type=0, ram_size=0, banks=2, title=b"TEST", lic_code=0x01,
             new_lic=b"\0\0"):
    data = bytearray()
    for bank in range(banks):
        data += bytes([bank]) * 0x4000
    data[0x134:0x134 + len(title)] = title
    data[0x144:0x146] = new_lic
    data[0x147] = cart_type
    data[0x148] = 0
    data[0x149] = ram_size
    data[0x14B] = lic_code
    data[0x14C] = 7
    return bytes(data)


def test_header_parse_fields():
    header = RomHeader.parse(make_rom(cart_type=0x03, ram_size=0x02, lic_code=0x31))
    assert header.title == "TEST"
    assert header.cart_type == 0x03
    assert header.ram_size == 0x02
    assert header.lic_code == 0x31
    assert header.version == 7
    assert header.new_lic_code == 0


def test_header_title_truncated_to_fifteen_chars():
    header = RomHeader.parse(make_rom(title=b"ABCDEFGHIJKLMNOP"))
    assert header.title == "ABCDEFGHIJKLMNO"


def test_header_too_short_raises():
    with pytest.raises(ValueError):
        RomHeader.parse(b"\0" * 0x120)


@pytest.mark.parametrize("cart_type,name", [
    (0x00, "ROM ONLY"),
    (0x01, "MBC1"),
    (0x03, "MBC1+RAM+BATTERY"),
    (0x22, "MBC7+SENSOR+RUMBLE+RAM+BATTERY"),
    (0x23, "UNKNOWN"),
])
def test_type_name(cart_type, name):
    assert Cartridge(make_rom(cart_type=cart_type)).type_name() == name


def test_licensee_name():
    assert Cartridge(make_rom(lic_code=0x01)).licensee_name() == "Nintendo R&D1"
    assert Cartridge(make_rom(lic_code=0x01, new_lic=b"01")).licensee_name() == "UNKNOWN"


def test_rom_only_reads_and_ignores_writes():
    cart = Cartridge(make_rom(cart_type=0))
    assert cart.read(0x4000) == 1
    cart.write(0x2000, 0)
    assert cart.read(0x4000) == 1
    assert cart.read(0xA000) == 0xFF


def test_mbc1_rom_bank_switching():
    cart = Cartridge(make_rom(cart_type=1, banks=4))
    assert cart.read(0x0000) == 0
    cart.write(0x2000, 2)
    assert cart.read(0x4000) == 2
    cart.write(0x2000, 3)
    assert cart.read(0x7FFF) == 3
    cart.write(0x2000, 0)
    assert cart.read(0x4000) == 1


def test_ram_disabled_reads_ff_and_ignores_writes():
    cart = Cartridge(make_rom(cart_type=2, ram_size=2))
    cart.write(0xA000, 0x42)
    assert cart.read(0xA000) == 0xFF
    cart.write(0x0000, 0x0A)
    assert cart.read(0xA000) == 0


def test_ram_write_read_round_trip():
    cart = Cartridge(make_rom(cart_type=2, ram_size=2))
    cart.write(0x0000, 0x0A)
    cart.write(0xA123, 0x5A)
    assert cart.read(0xA123) == 0x5A
    assert cart.need_save is False
    cart.write(0x0000, 0x00)
    assert cart.read(0xA123) == 0xFF


def test_ram_bank_switching_in_ram_mode():
    cart = Cartridge(make_rom(cart_type=2, ram_size=3))
    cart.write(0x0000, 0x0A)
    cart.write(0xA000, 0x11)
    cart.write(0x6000, 1)
    cart.write(0x4000, 1)
    assert cart.read(0xA000) == 0
    cart.write(0xA000, 0x22)
    cart.write(0x4000, 0)
    assert cart.read(0xA000) == 0x11
    cart.write(0x4000, 1)
    assert cart.read(0xA000) == 0x22


def test_no_ram_bank_reads_ff():
    cart = Cartridge(make_rom(cart_type=1, ram_size=0))
    cart.write(0x0000, 0x0A)
    cart.write(0xA000, 0x33)
    assert cart.read(0xA000) == 0xFF


def test_battery_round_trip(tmp_path):
    rom_path = tmp_path / "game.gb"
    rom_path.write_bytes(make_rom(cart_type=3, ram_size=2))

    cart = Cartridge.from_file(rom_path)
    cart.write(0x0000, 0x0A)
    cart.write(0xA010, 0x42)
    assert cart.need_save is True
    cart.battery_save()

    battery = tmp_path / "game.gb.battery"
    assert battery.stat().st_size == 0x2000

    again = Cartridge.from_file(rom_path)
    again.write(0x0000, 0x0A)
    assert again.read(0xA010) == 0x42


def test_from_file_missing_raises(tmp_path):
    with pytest.raises(OSError):
        Cartridge.from_file(tmp_path / "missing.gb")


def test_summary_mentions_title_and_type():
    text = Cartridge(make_rom(cart_type=1)).summary()
    assert text.startswith("Cartridge Loaded:")
    assert "Title    : TEST" in text
    assert "(MBC1)" in text