from typing import Final, Optional


class EmulatorError(Exception):
    """Base exception for all chip8py related errors."""

    def __init__(self, message: str, pc: Optional[int] = None) -> None:
        self.message: Final[str] = message
        self.pc: Optional[int] = pc
        super().__init__(message)

    def __str__(self) -> str:
        if self.pc is None:
            return self.message
        return f"{self.message} (PC=0x{self.pc:04X})"


class InvalidOpcode(EmulatorError):
    def __init__(self, opcode: int, pc: Optional[int] = None) -> None:
        self.opcode: Final[int] = opcode
        super().__init__(f"Invalid opcode 0x{opcode:04X}", pc)


class StackError(EmulatorError):
    pass


class StackOverflow(StackError):
    def __init__(self, depth: int) -> None:
        super().__init__(f"Call stack overflow (depth {depth})")


class EmptyStack(StackError):
    def __init__(self) -> None:
        super().__init__("Return with an empty call stack")


class MemoryAccessError(EmulatorError):
    pass


class OutOfBounds(MemoryAccessError):
    def __init__(self, address: int, reason: str = "out of bounds") -> None:
        self.address: Final[int] = address
        super().__init__(f"Address 0x{address:04X} {reason}")


class OutOfMemory(MemoryAccessError):
    def __init__(self, requested: int, available: int) -> None:
        self.requested: Final[int] = requested
        self.available: Final[int] = available
        super().__init__(f"Program of {requested} bytes exceeds {available} bytes of program memory")
