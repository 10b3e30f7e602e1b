from pathlib import Path
from typing import Final, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray
from returns.result import Failure, Result, Success

from chip8py.logger import log
from chip8py.memory import Memory


class Rom:
    """
    A raw CHIP-8 program image.

    Notes:
      - No header: the file is a sequence of big-endian 16-bit instruction words
      - Loaded verbatim at 0x200
      - At most 0xE00 (3584) bytes fit in program memory
    """

    MAX_SIZE: Final[int] = Memory.PROGRAM_CAPACITY

    def __init__(self) -> None:
        self.file: str = ""
        self.data: NDArray[np.uint8] = np.zeros(0, dtype=np.uint8)

    def __repr__(self) -> str:
        return f"<Rom file={self.file!r} size={len(self)} bytes>"

    def __len__(self) -> int:
        return len(self.data)

    @property
    def name(self) -> str:
        return Path(self.file).stem if self.file else "<memory>"

    @classmethod
    def from_bytes(cls, data: bytes) -> Result["Rom", str]:
        """
        Validate and wrap a program image.

        Args:
            data: Raw bytes of the ROM file

        Returns:
            Result containing either a Rom instance or an error string.
        """
        if not isinstance(data, (bytes, bytearray)):
            return Failure(f"Expected bytes or bytearray, got {type(data).__name__}")

        if len(data) == 0:
            return Failure("ROM is empty")

        if len(data) > cls.MAX_SIZE:
            return Failure(f"ROM too large: {len(data)} bytes, maximum {cls.MAX_SIZE}")

        if len(data) % 2:
            log.warning(f"ROM has an odd length ({len(data)} bytes); last instruction is incomplete")

        obj = cls()
        obj.data = np.frombuffer(bytes(data), dtype=np.uint8).copy()
        return Success(obj)

    @classmethod
    def from_file(cls, filepath: Union[Path, str]) -> Result["Rom", str]:
        try:
            with open(filepath, "rb") as f:
                data = f.read()
        except OSError as e:
            return Failure(f"Failed to read file {filepath}: {e}")

        def attach_file(rom: "Rom") -> "Rom":
            rom.file = str(filepath)
            log.debug(f"Read {len(rom)} bytes from {filepath}")
            return rom

        return cls.from_bytes(data).map(attach_file)

    @classmethod
    def is_valid_file(cls, filepath: Union[Path, str]) -> Tuple[bool, Optional[str]]:
        result = cls.from_file(filepath)
        if isinstance(result, Success):
            return True, None
        return False, result.failure()
