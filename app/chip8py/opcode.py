from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class Opcode:
    """
    A 16-bit CHIP-8 instruction word split into its four nibbles.

        0x X Y N N
           | | | |_ lsq (least significant quarter)
           | | |___ iq1
           | |_____ iq2
           |_______ msq (most significant quarter)

    Every 16-bit value decodes; whether it is a valid instruction is decided by dispatch.
    """

    word: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "word", int(self.word) & 0xFFFF)

    @classmethod
    def from_nibbles(cls, msq: int, iq2: int, iq1: int, lsq: int) -> "Opcode":
        return cls(((msq & 0xF) << 12) | ((iq2 & 0xF) << 8) | ((iq1 & 0xF) << 4) | (lsq & 0xF))

    @property
    def msq(self) -> int:
        return (self.word >> 12) & 0xF

    @property
    def iq2(self) -> int:
        return (self.word >> 8) & 0xF

    @property
    def iq1(self) -> int:
        return (self.word >> 4) & 0xF

    @property
    def lsq(self) -> int:
        return self.word & 0xF

    # Register operands of the XY forms
    x = iq2
    y = iq1
    n = lsq

    @property
    def nibbles(self) -> Tuple[int, int, int, int]:
        return (self.msq, self.iq2, self.iq1, self.lsq)

    def address(self) -> int:
        """12-bit address NNN."""
        return (self.iq2 << 8) | (self.iq1 << 4) | self.lsq

    def immediate(self) -> int:
        """8-bit immediate KK."""
        return (self.iq1 << 4) | self.lsq

    def __int__(self) -> int:
        return self.word

    def __repr__(self) -> str:
        return f"Opcode(0x{self.word:04X})"
