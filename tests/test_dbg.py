from germber.bus import Bus
from germber.dbg import SerialDebug


def test_collects_started_transfer():
    bus = Bus()
    dbg = SerialDebug()
    bus.write(0xFF01, ord("O"))
    bus.write(0xFF02, 0x81)
    dbg.update(bus)
    assert dbg.message() == "O"
    assert bus.read(0xFF02) == 0


def test_ignores_without_start():
    bus = Bus()
    dbg = SerialDebug()
    bus.write(0xFF01, ord("X"))
    bus.write(0xFF02, 0x01)
    dbg.update(bus)
    assert dbg.message() == ""
    assert bus.read(0xFF02) == 0x01


def test_accumulates_text():
    bus = Bus()
    dbg = SerialDebug()
    for ch in "Passed":
        bus.write(0xFF01, ord(ch))
        bus.write(0xFF02, 0x81)
        dbg.update(bus)
    assert dbg.message() == "Passed"