import pytest

from chip8py.keypad import Keypad


def test_set_and_query():
    keypad = Keypad()
    assert not keypad.is_pressed(0xA)
    keypad.set_key(0xA, True)
    assert keypad.is_pressed(0xA)
    keypad.set_key(0xA, False)
    assert not keypad.is_pressed(0xA)


def test_first_pressed_is_lowest_index():
    keypad = Keypad()
    assert keypad.first_pressed() is None
    keypad.set_key(0xC, True)
    keypad.set_key(0x3, True)
    assert keypad.first_pressed() == 0x3


def test_reset():
    keypad = Keypad()
    keypad.set_key(0xF, True)
    keypad.reset()
    assert keypad.first_pressed() is None


def test_invalid_key():
    keypad = Keypad()
    with pytest.raises(IndexError):
        keypad.set_key(16, True)
    with pytest.raises(IndexError):
        keypad.is_pressed(-1)
