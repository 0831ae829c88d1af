import pytest

from germber.gamepad import Gamepad, GamepadState


def test_idle_output():
    assert Gamepad().output() == 0xCF


def test_set_selection():
    pad = Gamepad()
    pad.set_selection(0x30)
    assert (pad.button_sel, pad.dir_sel) == (True, True)
    pad.set_selection(0x10)
    assert (pad.button_sel, pad.dir_sel) == (False, True)


@pytest.mark.parametrize(
    "button,bit",
    [("a", 0), ("b", 1), ("select", 2), ("start", 3)],
)
def test_buttons_clear_bits_when_selected(button, bit):
    pad = Gamepad()
    pad.set_selection(0x10)  # buttons selected, directions not
    setattr(pad.state, button, True)
    assert pad.output() & (1 << bit) == 0


@pytest.mark.parametrize(
    "direction,bit",
    [("right", 0), ("left", 1), ("up", 2), ("down", 3)],
)
def test_directions_clear_bits_when_selected(direction, bit):
    pad = Gamepad()
    pad.set_selection(0x20)  # directions selected, buttons not
    setattr(pad.state, direction, True)
    assert pad.output() & (1 << bit) == 0


def test_unselected_buttons_ignored():
    pad = Gamepad(state=GamepadState(start=True, a=True))
    pad.set_selection(0x30)
    assert pad.output() == Gamepad().output()


def test_both_groups_combine():
    pad = Gamepad(state=GamepadState(a=True, left=True))
    assert pad.output() & 0b11 == 0


def test_upper_bits_unchanged_by_presses():
    pad = Gamepad(state=GamepadState(**{name: True for name in
                                        ("start", "select", "a", "b", "up", "down", "left", "right")}))
    assert pad.output() & 0xF0 == Gamepad().output() & 0xF0
    assert pad.output() & 0x0F == 0