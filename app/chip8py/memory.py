from typing import Final, Union

import numpy as np
from numpy.typing import NDArray

from chip8py.exception import OutOfBounds, OutOfMemory
from chip8py.opcode import Opcode

FONT_SET: Final[bytes] = bytes(
    [
        0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
        0x20, 0x60, 0x20, 0x20, 0x70,  # 1
        0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
        0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
        0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
        0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
        0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
        0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
        0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
        0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
        0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
        0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
        0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
        0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
        0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
        0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
    ]
)


class Memory:
    """
    The 4 KB CHIP-8 address space.

    Layout:
      - 0x000 - 0x1FF: reserved for the interpreter, read-only to programs
        - 0x050 - 0x09F: hex digit font, 16 sprites of 5 bytes
      - 0x200 - 0xFFF: program region, holds the ROM and everything it writes
    """

    SIZE: Final[int] = 0x1000
    FONT_START: Final[int] = 0x050
    FONT_SPRITE_SIZE: Final[int] = 5
    FONT_END: Final[int] = FONT_START + len(FONT_SET)
    PROGRAM_START: Final[int] = 0x200
    PROGRAM_END: Final[int] = SIZE  # exclusive
    PROGRAM_CAPACITY: Final[int] = PROGRAM_END - PROGRAM_START
    MAX_SPRITE_LENGTH: Final[int] = 15

    def __init__(self) -> None:
        self.RAM: NDArray[np.uint8] = np.zeros(self.SIZE, dtype=np.uint8)
        self.program_size: int = 0
        self.reset()

    def __repr__(self) -> str:
        return f"<Memory size={self.SIZE} program={self.program_size} bytes>"

    def reset(self) -> None:
        """Zero the whole address space and preload the font."""
        self.RAM.fill(0)
        self.RAM[self.FONT_START : self.FONT_END] = np.frombuffer(FONT_SET, dtype=np.uint8)
        self.program_size = 0

    @classmethod
    def font_address(cls, digit: int) -> int:
        return cls.FONT_START + cls.FONT_SPRITE_SIZE * digit

    @classmethod
    def is_program_address(cls, address: int) -> bool:
        return cls.PROGRAM_START <= address < cls.PROGRAM_END

    def read_byte(self, address: int) -> int:
        if not 0 <= address < self.SIZE:
            raise OutOfBounds(address)
        return int(self.RAM[address])

    def write_byte(self, address: int, value: int) -> None:
        if not self.is_program_address(address):
            raise OutOfBounds(address, "is outside program memory")
        self.RAM[address] = value & 0xFF

    def read_opcode(self, pc: int) -> Opcode:
        """Read the big-endian instruction word at `pc`."""
        if not (self.PROGRAM_START <= pc and pc + 1 < self.PROGRAM_END):
            raise OutOfBounds(pc, "is not a valid program counter")
        return Opcode((int(self.RAM[pc]) << 8) | int(self.RAM[pc + 1]))

    def read_sprite(self, address: int, length: int) -> NDArray[np.uint8]:
        """Return a read-only view of `length` bytes starting at `address`."""
        if not 0 <= length <= self.MAX_SPRITE_LENGTH:
            raise ValueError(f"Sprite length must be 0-{self.MAX_SPRITE_LENGTH}, got {length}")
        if address < 0 or address + length > self.SIZE:
            raise OutOfBounds(address, f"cannot hold a {length} byte sprite")
        view = self.RAM[address : address + length]
        view.flags.writeable = False
        return view

    def load_program(self, program: Union[bytes, bytearray, NDArray[np.uint8]]) -> None:
        """Copy a program image to the start of the program region."""
        data = np.frombuffer(bytes(program), dtype=np.uint8)
        if len(data) > self.PROGRAM_CAPACITY:
            raise OutOfMemory(len(data), self.PROGRAM_CAPACITY)
        self.RAM[self.PROGRAM_START : self.PROGRAM_END] = 0
        self.RAM[self.PROGRAM_START : self.PROGRAM_START + len(data)] = data
        self.program_size = len(data)
