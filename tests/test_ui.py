from types import SimpleNamespace

import pygame
import pytest

from germber.gamepad import GamepadState
from germber.ppu import XRES, YRES
from germber.ui import TILE_COLORS, Ui, apply_key, tile_pixels


@pytest.fixture
def ui(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    window = Ui(1)
    yield window
    window.close()


def test_apply_key_sets_and_clears_button():
    state = GamepadState()
    assert apply_key(state, pygame.K_z, True) is False
    assert state.b is True
    apply_key(state, pygame.K_LSHIFT, False)
    assert state.b is False


@pytest.mark.parametrize(
    "key, button",
    [
        (pygame.K_x, "a"),
        (pygame.K_SPACE, "a"),
        (pygame.K_RETURN, "start"),
        (pygame.K_BACKSPACE, "select"),
        (pygame.K_w, "up"),
        (pygame.K_DOWN, "down"),
        (pygame.K_a, "left"),
        (pygame.K_RIGHT, "right"),
    ],
)
def test_apply_key_bindings(key, button):
    state = GamepadState()
    apply_key(state, key, True)
    assert getattr(state, button) is True


def test_apply_key_escape_quits():
    assert apply_key(GamepadState(), pygame.K_ESCAPE, True) is True


def test_apply_key_unknown_key_leaves_state():
    state = GamepadState()
    assert apply_key(state, pygame.K_q, True) is False
    buttons = ("start", "select", "a", "b", "up", "down", "left", "right")
    assert not any(getattr(state, name) for name in buttons)


def test_tile_pixels_reads_sixteen_bytes():
    seen = []

    def read(address):
        seen.append(address)
        return 0

    rows = tile_pixels(read, 0x8000, 3)
    assert sorted(seen) == list(range(0x8000 + 3 * 16, 0x8000 + 4 * 16))
    assert len(rows) == 8 and all(len(r) == 8 for r in rows)


def test_tile_pixels_bit_planes():
    memory = {0x8000: 0xFF, 0x8001: 0x00, 0x8002: 0x00, 0x8003: 0xFF,
              0x8004: 0x80, 0x8005: 0x80}
    rows = tile_pixels(lambda a: memory.get(a, 0), 0x8000, 0)
    assert rows[0] == [2] * 8
    assert rows[1] == [1] * 8
    assert rows[2] == [3] + [0] * 7
    assert rows[7] == [0] * 8


def test_handle_events_quit(ui):
    emu = SimpleNamespace(die=False, gamepad_state=GamepadState())
    pygame.event.post(pygame.event.Event(pygame.QUIT))
    ui.handle_events(emu)
    assert emu.die is True


def test_handle_events_key(ui):
    emu = SimpleNamespace(die=False, gamepad_state=GamepadState())
    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_RETURN))
    ui.handle_events(emu)
    assert emu.gamepad_state.start is True
    assert emu.die is False


def test_update_draws_frame(ui):
    buffer = [TILE_COLORS[0]] * (XRES * YRES)
    buffer[0] = TILE_COLORS[3]
    ui.update(buffer, lambda address: 0)
    assert tuple(ui.window.get_at((0, 0)))[:3] == (0, 0, 0)
    assert tuple(ui.window.get_at((1, 0)))[:3] == (0xFF, 0xFF, 0xFF)


def test_invalid_scale():
    with pytest.raises(ValueError):
        Ui(0)