import numpy as np
import pytest

from chip8py.exception import OutOfBounds, OutOfMemory
from chip8py.memory import FONT_SET, Memory


def test_font_is_preloaded():
    mem = Memory()
    assert mem.RAM[Memory.FONT_START : Memory.FONT_END].tobytes() == FONT_SET
    assert mem.read_byte(0x050) == 0xF0
    assert Memory.font_address(0xA) == 0x050 + 50


def test_rest_of_memory_is_zeroed():
    mem = Memory()
    assert mem.read_byte(0x000) == 0
    assert mem.read_byte(0x200) == 0
    assert mem.read_byte(0xFFF) == 0


def test_write_confined_to_program_region():
    mem = Memory()
    mem.write_byte(0x200, 0xAB)
    mem.write_byte(0xFFF, 0x1CD)
    assert mem.read_byte(0x200) == 0xAB
    assert mem.read_byte(0xFFF) == 0xCD

    with pytest.raises(OutOfBounds):
        mem.write_byte(0x1FF, 1)
    with pytest.raises(OutOfBounds):
        mem.write_byte(0x050, 1)
    with pytest.raises(OutOfBounds):
        mem.write_byte(0x1000, 1)
    assert mem.read_byte(0x050) == 0xF0


def test_read_bounds():
    mem = Memory()
    with pytest.raises(OutOfBounds) as exc:
        mem.read_byte(0x1000)
    assert exc.value.address == 0x1000
    with pytest.raises(OutOfBounds):
        mem.read_byte(-1)


def test_read_opcode_is_big_endian():
    mem = Memory()
    mem.load_program(bytes([0x12, 0x34, 0xAB, 0xCD]))
    assert mem.read_opcode(0x200).word == 0x1234
    assert mem.read_opcode(0x202).word == 0xABCD
    assert mem.read_opcode(0x201).word == 0x34AB


def test_read_opcode_rejects_pc_outside_program_region():
    mem = Memory()
    mem.read_opcode(0xFFE)
    with pytest.raises(OutOfBounds):
        mem.read_opcode(0x1FE)
    with pytest.raises(OutOfBounds):
        mem.read_opcode(0xFFF)


def test_read_sprite_is_read_only_view():
    mem = Memory()
    sprite = mem.read_sprite(Memory.font_address(0), 5)
    assert list(sprite) == [0xF0, 0x90, 0x90, 0x90, 0xF0]
    with pytest.raises(ValueError):
        sprite[0] = 0
    mem.write_byte(0x300, 7)
    assert mem.RAM.flags.writeable


def test_read_sprite_bounds():
    mem = Memory()
    assert len(mem.read_sprite(0xFF1, 15)) == 15
    assert len(mem.read_sprite(0x300, 0)) == 0
    with pytest.raises(OutOfBounds):
        mem.read_sprite(0xFF2, 15)
    with pytest.raises(ValueError):
        mem.read_sprite(0x300, 16)


def test_load_program_capacity():
    mem = Memory()
    mem.load_program(bytes([0x11]) * Memory.PROGRAM_CAPACITY)
    assert mem.read_byte(0xFFF) == 0x11
    assert mem.program_size == 0xE00

    with pytest.raises(OutOfMemory) as exc:
        mem.load_program(bytes(Memory.PROGRAM_CAPACITY + 1))
    assert exc.value.requested == 0xE01
    assert exc.value.available == 0xE00


def test_load_program_replaces_previous_image():
    mem = Memory()
    mem.load_program(bytes([1, 2, 3, 4]))
    mem.load_program(np.array([9], dtype=np.uint8))
    assert mem.read_byte(0x200) == 9
    assert mem.read_byte(0x201) == 0


def test_reset_restores_power_on_state():
    mem = Memory()
    mem.load_program(bytes([1, 2]))
    mem.reset()
    assert mem.read_byte(0x200) == 0
    assert mem.read_byte(0x050) == 0xF0
    assert mem.program_size == 0
