import pytest

from germber import header

LOGO = bytes((
    0xCE, 0xED, 0x66, 0x66, 0xCC, 0x0D, 0x00, 0x0B,
    0x03, 0x73, 0x00, 0x83, 0x00, 0x0C, 0x00, 0x0D,
))


def make_rom(title=b"TETRIS", old_lic=0x01, new_lic=b"\0\0", rom_code=0, ram_code=0):
    data = bytearray(0x8000)
    data[0x104:0x114] = LOGO
    data[0x134:0x134 + len(title)] = title
    data[0x144:0x146] = new_lic
    data[0x148] = rom_code
    data[0x149] = ram_code
    data[0x14B] = old_lic
    return bytes(data)


def test_valid_logo():
    assert header.is_valid_rom(make_rom()) is True


def test_broken_logo():
    data = bytearray(make_rom())
    data[0x10A] ^= 0xFF
    assert header.is_valid_rom(bytes(data)) is False


def test_title_skips_nul_bytes():
    assert header.title(make_rom(title=b"TE\0ST")) == "TEST"
    assert header.title(make_rom(title=b"ABCDEFGHIJKLMNOP")) == "ABCDEFGHIJKLMNOP"


def test_rom_size():
    assert header.rom_size_kib(make_rom(rom_code=0)) == 32
    for code in range(6):
        assert (header.rom_size_kib(make_rom(rom_code=code + 1))
                == 2 * header.rom_size_kib(make_rom(rom_code=code)))


@pytest.mark.parametrize("code,size", [(0x00, 0), (0x02, 8), (0x03, 32),
                                       (0x04, 128), (0x05, 64), (0x01, None)])
def test_cart_ram(code, size):
    assert header.cart_ram_kib(make_rom(ram_code=code)) == size


def test_publisher_old_code():
    assert header.publisher(make_rom(old_lic=0x01)) == "Nintendo"
    assert header.publisher(make_rom(old_lic=0x33)) == (
        "Indicates that the New licensee code should be used instead."
    )


def test_publisher_new_code_fallback():
    assert header.publisher(make_rom(old_lic=0x02, new_lic=b"A4")) == "Konami (Yu-Gi-Oh!)"
    assert header.publisher(make_rom(old_lic=0x02, new_lic=b"BL")) == "MTO"


def test_publisher_unknown():
    assert header.publisher(make_rom(old_lic=0x02, new_lic=b"ZZ")) is None


def test_rom_info_lines():
    text = header.rom_info(make_rom(old_lic=0x01, ram_code=0x03))
    assert text.splitlines() == [
        "Game title: TETRIS",
        "Publisher: Nintendo",
        "Cartridge RAM size: 32 KiB",
        "ROM size: 32 KiB",
    ]
    assert text.endswith("\n\n")


def test_rom_info_omits_unknown_parts():
    text = header.rom_info(make_rom(old_lic=0x02, new_lic=b"ZZ", ram_code=0x01))
    assert "Publisher" not in text
    assert "Cartridge RAM size" not in text
    assert "Game title: TETRIS" in text


def test_read_rom_round_trip(tmp_path):
    path = tmp_path / "game.gb"
    data = make_rom()
    path.write_bytes(data)
    assert header.read_rom(path) == data


def test_read_rom_missing(tmp_path):
    with pytest.raises(OSError):
        header.read_rom(tmp_path / "absent.gb")