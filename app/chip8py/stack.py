from typing import Final, List, Tuple

from chip8py.exception import EmptyStack, StackOverflow


class CallStack:
    """16-level LIFO of subroutine return addresses."""

    SIZE: Final[int] = 16

    def __init__(self) -> None:
        self._buffer: List[int] = [0] * self.SIZE
        self.sp: int = 0

    def __len__(self) -> int:
        return self.sp

    def __repr__(self) -> str:
        return f"<CallStack depth={self.sp} {[f'0x{a:04X}' for a in self.snapshot()]}>"

    def call(self, return_address: int) -> None:
        if self.sp == self.SIZE:
            raise StackOverflow(self.sp)
        self._buffer[self.sp] = return_address & 0xFFFF
        self.sp += 1

    def ret(self) -> int:
        if self.sp == 0:
            raise EmptyStack()
        self.sp -= 1
        address = self._buffer[self.sp]
        self._buffer[self.sp] = 0
        return address

    def peek(self) -> int:
        if self.sp == 0:
            raise EmptyStack()
        return self._buffer[self.sp - 1]

    def snapshot(self) -> Tuple[int, ...]:
        """Return addresses bottom to top."""
        return tuple(self._buffer[: self.sp])

    def reset(self) -> None:
        self._buffer = [0] * self.SIZE
        self.sp = 0
