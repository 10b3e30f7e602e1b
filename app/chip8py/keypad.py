from typing import Final, Optional

from bitarray import bitarray  # type: ignore


class Keypad:
    """State of the 16-key hex keypad, one bit per logical key 0x0-0xF."""

    SIZE: Final[int] = 16

    def __init__(self) -> None:
        self._bits = bitarray(self.SIZE)
        self._bits.setall(0)

    def __repr__(self) -> str:
        pressed = [f"{i:X}" for i in range(self.SIZE) if self._bits[i]]
        return f"<Keypad pressed={pressed}>"

    def _check(self, index: int) -> None:
        if not 0 <= index < self.SIZE:
            raise IndexError(f"Keypad has no key 0x{index:X}")

    def set_key(self, index: int, pressed: bool) -> None:
        self._check(index)
        self._bits[index] = bool(pressed)

    def is_pressed(self, index: int) -> bool:
        self._check(index)
        return bool(self._bits[index])

    def first_pressed(self) -> Optional[int]:
        """Lowest-numbered pressed key, or None."""
        index = self._bits.find(1)
        return None if index < 0 else index

    def reset(self) -> None:
        self._bits.setall(0)
