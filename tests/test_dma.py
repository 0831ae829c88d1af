from germber.dma import Dma
from germber.ppu import Ppu


def _source(address):
    return (address * 7) & 0xFF


def test_not_transferring_initially():
    dma = Dma(Ppu(), _source)
    assert dma.transferring() is False


def test_tick_when_idle_leaves_oam_alone():
    ppu = Ppu()
    dma = Dma(ppu, _source)
    dma.tick()
    assert bytes(ppu.oam) == bytes(len(ppu.oam))


def test_start_delay_before_copy():
    ppu = Ppu()
    dma = Dma(ppu, _source)
    dma.start(0xC0)
    dma.tick()
    dma.tick()
    assert dma.transferring() is True
    assert bytes(ppu.oam) == bytes(len(ppu.oam))


def test_full_transfer_copies_page():
    ppu = Ppu()
    dma = Dma(ppu, _source)
    dma.start(0xC1)
    ticks = 0
    while dma.transferring():
        dma.tick()
        ticks += 1
    assert ticks == 2 + 0xA0
    for i in range(0xA0):
        assert ppu.oam_read(i) == _source(0xC100 + i)


def test_restart_resets_progress():
    ppu = Ppu()
    dma = Dma(ppu, _source)
    dma.start(0xC0)
    for _ in range(10):
        dma.tick()
    dma.start(0xD0)
    assert dma.byte == 0
    assert dma.value == 0xD0
    assert dma.transferring() is True