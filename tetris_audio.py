
"""Sound cues (short generated tones through pygame.mixer)"""
import io
import logging
import math
import struct
import wave
from enum import Enum
from typing import Dict, Optional

import pygame

log = logging.getLogger(__name__)

SAMPLE_RATE = 44100


class Sfx(Enum):
    DROP = "drop"
    GRID_DROP = "grid_drop"
    LINE = "line"
    LOST = "lost"
    MOVE = "move"
    PAUSE = "pause"
    ROTATION = "rotation"
    TETRIS = "tetris"
    WIN = "win"


# (frequency Hz, duration ms, volume)
TONES: Dict[Sfx, tuple] = {
    Sfx.DROP: (220, 60, 0.5),
    Sfx.GRID_DROP: (165, 120, 0.5),
    Sfx.LINE: (523, 140, 0.7),
    Sfx.LOST: (110, 600, 0.7),
    Sfx.MOVE: (660, 25, 0.3),
    Sfx.PAUSE: (440, 90, 0.5),
    Sfx.ROTATION: (880, 35, 0.4),
    Sfx.TETRIS: (1046, 300, 0.8),
    Sfx.WIN: (784, 500, 0.8),
}


class NullAudio:
    def play(self, fx: Sfx):
        pass


def generate_tone(frequency: int, duration_ms: int, volume: float = 0.5) -> Optional[pygame.mixer.Sound]:
    amplitude = int(32767 * max(0.0, min(volume, 1.0)))
    n_samples = int(SAMPLE_RATE * duration_ms / 1000)
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(SAMPLE_RATE)
        frames = bytearray()
        for i in range(n_samples):
            sample = int(amplitude * math.sin(2 * math.pi * frequency * (i / SAMPLE_RATE)))
            frames.extend(struct.pack("<h", sample))
        wav_file.writeframes(frames)
    buffer.seek(0)
    return pygame.mixer.Sound(buffer=buffer.read())


class PygameAudio:
    """Plays one cue at a time; a new cue cuts the previous one."""

    def __init__(self):
        self.sounds: Dict[Sfx, pygame.mixer.Sound] = {}
        self.channel: Optional[pygame.mixer.Channel] = None

    @classmethod
    def open(cls):
        """Return a PygameAudio, or a NullAudio when no device is usable."""
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
            audio = cls()
            for fx, (freq, ms, vol) in TONES.items():
                audio.sounds[fx] = generate_tone(freq, ms, vol)
        except pygame.error as exc:
            log.error("Music disabled: %s", exc)
            return NullAudio()
        log.info("Music enabled")
        return audio

    def play(self, fx: Sfx):
        sound = self.sounds.get(fx)
        if sound is None:
            return
        if self.channel is not None:
            self.channel.stop()
        self.channel = sound.play()
