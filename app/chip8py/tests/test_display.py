import pytest

from chip8py.display import Display

BLOCK = [0xFF] * 5


def test_starts_blank():
    display = Display()
    assert display.lit_pixels() == 0
    assert display.frame().shape == (32, 64)


def test_sprite_bits_are_msb_first():
    display = Display()
    assert display.draw_sprite(0, 0, [0x80, 0x01]) is False
    assert display.pixel_at(0, 0)
    assert not display.pixel_at(1, 0)
    assert display.pixel_at(7, 1)
    assert display.buffer[1 * 64 + 7] == 1


def test_drawing_twice_erases_and_collides():
    display = Display()
    assert display.draw_sprite(0, 0, BLOCK) is False
    assert display.lit_pixels() == 40
    assert display.draw_sprite(0, 0, BLOCK) is True
    assert display.lit_pixels() == 0


def test_wraparound():
    display = Display()
    display.draw_sprite(60, 30, BLOCK)
    assert display.pixel_at(60, 30)
    assert display.pixel_at(63, 31)
    assert display.pixel_at(0, 0)
    assert display.pixel_at(3, 2)
    assert not display.pixel_at(4, 0)
    assert not display.pixel_at(59, 30)
    assert not display.pixel_at(0, 3)
    assert display.lit_pixels() == 40


def test_collision_flag_is_sticky_within_a_draw():
    display = Display()
    display.draw_sprite(0, 0, [0x80])
    # first bit collides, second does not
    assert display.draw_sprite(0, 0, [0xC0]) is True
    assert not display.pixel_at(0, 0)
    assert display.pixel_at(1, 0)


def test_clear():
    display = Display()
    display.draw_sprite(10, 10, BLOCK)
    display.clear()
    assert display.lit_pixels() == 0


def test_pixel_at_bounds():
    display = Display()
    with pytest.raises(IndexError):
        display.pixel_at(64, 0)
    with pytest.raises(IndexError):
        display.pixel_at(0, 32)


def test_frame_is_read_only():
    display = Display()
    frame = display.frame()
    with pytest.raises(ValueError):
        frame[0, 0] = 1
