import numpy as np
import pygame
from pygame import mixer

from chip8py.logger import log


class Beeper:
    """Square-wave tone played while the sound timer is running."""

    def __init__(self, frequency: int = 440, volume: float = 0.25, sample_rate: int = 44100) -> None:
        self.frequency = frequency
        self.volume = volume
        self.sample_rate = sample_rate

        if not mixer.get_init():
            mixer.init(frequency=sample_rate, size=-16, channels=1, buffer=512)

        # mixer may have negotiated a different format
        self.sample_rate, _, channels = mixer.get_init()
        self.sound: pygame.mixer.Sound = pygame.sndarray.make_sound(self._square_wave(channels))
        self.channel: pygame.mixer.Channel = mixer.Channel(0)
        self.playing: bool = False

    def _square_wave(self, channels: int) -> np.ndarray:
        period = max(2, int(round(self.sample_rate / self.frequency)))
        amplitude = int(np.iinfo(np.int16).max * self.volume)
        wave = np.full(period, -amplitude, dtype=np.int16)
        wave[: period // 2] = amplitude
        if channels > 1:
            wave = np.repeat(wave[:, np.newaxis], channels, axis=1)
        return np.ascontiguousarray(wave)

    def __call__(self, active: bool) -> None:
        if active and not self.playing:
            self.channel.play(self.sound, loops=-1)
        elif not active and self.playing:
            self.channel.stop()
        self.playing = active
        log.debug(f"Tone {'on' if active else 'off'}")

    def close(self) -> None:
        self.channel.stop()
        self.playing = False
