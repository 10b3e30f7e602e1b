from chip8py.config import Quirks, load_config
from chip8py.emulator import Emulator
from chip8py.exception import (
    EmptyStack,
    EmulatorError,
    InvalidOpcode,
    OutOfBounds,
    OutOfMemory,
    StackOverflow,
)
from chip8py.rom import Rom

__all__ = [
    "Emulator",
    "Rom",
    "Quirks",
    "load_config",
    "EmulatorError",
    "InvalidOpcode",
    "StackOverflow",
    "EmptyStack",
    "OutOfBounds",
    "OutOfMemory",
]
