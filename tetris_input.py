
"""Keyboard sources: pygame events or a scripted queue"""
import logging
from collections import deque
from enum import Enum
from typing import Iterable, Optional

import pygame

log = logging.getLogger(__name__)


class Key(Enum):
    LEFT = "left"
    RIGHT = "right"
    DOWN = "down"
    ROTATE_CW = "cw"
    ROTATE_CCW = "ccw"
    PAUSE = "pause"
    QUIT = "quit"


KEYMAP = {
    pygame.K_LEFT: Key.LEFT,
    pygame.K_j: Key.LEFT,
    pygame.K_RIGHT: Key.RIGHT,
    pygame.K_l: Key.RIGHT,
    pygame.K_DOWN: Key.DOWN,
    pygame.K_k: Key.DOWN,
    pygame.K_UP: Key.ROTATE_CW,
    pygame.K_i: Key.ROTATE_CW,
    pygame.K_f: Key.ROTATE_CW,
    pygame.K_z: Key.ROTATE_CCW,
    pygame.K_u: Key.ROTATE_CCW,
    pygame.K_d: Key.ROTATE_CCW,
    pygame.K_p: Key.PAUSE,
    pygame.K_RETURN: Key.PAUSE,
    pygame.K_ESCAPE: Key.QUIT,
}


class ScriptedInput:
    """Feeds a fixed sequence of keys, one per poll (None = no key that tick)."""

    def __init__(self, keys: Iterable[Optional[Key]] = ()):
        self.keys = deque(keys)

    def push(self, *keys: Optional[Key]):
        self.keys.extend(keys)

    def poll_key(self) -> Optional[Key]:
        return self.keys.popleft() if self.keys else None


class PygameInput:
    """Buffers pygame key presses and hands them out one per tick."""

    def __init__(self):
        self.pending = deque()

    def poll_key(self) -> Optional[Key]:
        try:
            events = pygame.event.get()
        except pygame.error as exc:
            log.error("Keyboard unavailable: %s", exc)
            return Key.QUIT
        for e in events:
            if e.type == pygame.QUIT:
                self.pending.append(Key.QUIT)
            elif e.type == pygame.KEYDOWN and e.key in KEYMAP:
                self.pending.append(KEYMAP[e.key])
        return self.pending.popleft() if self.pending else None

    def flush(self):
        """Forget key presses, both buffered here and still in pygame's queue."""
        pygame.event.clear(pygame.KEYDOWN)
        self.pending.clear()
