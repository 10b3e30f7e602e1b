from typing import Final, Iterable

import numpy as np
from numpy.typing import NDArray


class Display:
    """
    64x32 monochrome framebuffer.

            (0,0)  ___________________________ (63,0)
                  |                           |
                  |                           |
          (0,31)  |___________________________| (63,31)

    Pixels are stored row-major (index = row * 64 + col). Coordinates wrap around
    the edges instead of clipping.
    """

    WIDTH: Final[int] = 64
    HEIGHT: Final[int] = 32
    SIZE: Final[int] = WIDTH * HEIGHT

    def __init__(self) -> None:
        self.buffer: NDArray[np.uint8] = np.zeros(self.SIZE, dtype=np.uint8)

    def __repr__(self) -> str:
        return f"<Display {self.WIDTH}x{self.HEIGHT} lit={self.lit_pixels()}>"

    def clear(self) -> None:
        self.buffer.fill(0)

    @classmethod
    def index(cls, x: int, y: int) -> int:
        return (y % cls.HEIGHT) * cls.WIDTH + (x % cls.WIDTH)

    def pixel_at(self, x: int, y: int) -> bool:
        if not (0 <= x < self.WIDTH and 0 <= y < self.HEIGHT):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.WIDTH}x{self.HEIGHT} display")
        return bool(self.buffer[y * self.WIDTH + x])

    def draw_sprite(self, x: int, y: int, sprite: Iterable[int]) -> bool:
        """
        XOR a sprite onto the framebuffer at (x, y).

        Each byte is one row, bit 7 is the leftmost column. Returns True if any
        lit pixel was switched off.
        """
        collided = False
        for row, byte in enumerate(sprite):
            byte = int(byte)
            for col in range(8):
                if not (byte >> (7 - col)) & 1:
                    continue
                i = self.index(x + col, y + row)
                if self.buffer[i]:
                    collided = True
                self.buffer[i] ^= 1
        return collided

    def frame(self) -> NDArray[np.uint8]:
        """Return a read-only (HEIGHT, WIDTH) view for renderers."""
        view = self.buffer.reshape(self.HEIGHT, self.WIDTH)
        view.flags.writeable = False
        return view

    def lit_pixels(self) -> int:
        return int(np.count_nonzero(self.buffer))
