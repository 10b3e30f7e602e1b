from typing import Final


class TimerUnit:
    """
    Delay and sound timers.

    Both are 8-bit countdowns decremented once per external tick (60 Hz) while
    positive. They never wrap below zero. A tone should sound while `sound` is
    nonzero.
    """

    RATE_HZ: Final[int] = 60

    def __init__(self) -> None:
        self.delay: int = 0
        self.sound: int = 0

    def __repr__(self) -> str:
        return f"<TimerUnit delay={self.delay} sound={self.sound}>"

    @property
    def sound_active(self) -> bool:
        return self.sound > 0

    def set_delay(self, value: int) -> None:
        self.delay = value & 0xFF

    def set_sound(self, value: int) -> None:
        self.sound = value & 0xFF

    def tick(self) -> None:
        if self.delay > 0:
            self.delay -= 1
        if self.sound > 0:
            self.sound -= 1

    def reset(self) -> None:
        self.delay = 0
        self.sound = 0
