
"""Linear-congruential random source for pieces, garbage and crumbles"""
import time
from typing import Optional

from tetris_piece import COLS, PieceKind

MASK_32 = 0xFFFFFFFF
MASK_30 = (1 << 30) - 1


class LCGRandom:
    """
    state' = 1103515245 * state + 12345 (mod 2^32); every draw returns the
    low 30 bits of the new state. Not meant to be reproducible across runs:
    the default seed is the wall clock.
    """
    MULTIPLIER = 1103515245
    INCREMENT = 12345

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = int(time.time())
        self.seed(seed)

    def seed(self, value: int):
        self.state = value & MASK_32

    def next(self) -> int:
        self.state = (self.state * self.MULTIPLIER + self.INCREMENT) & MASK_32
        return self.state & MASK_30

    def next_kind(self) -> PieceKind:
        return PieceKind(self.next() % 7)

    def void_column(self) -> int:
        return 1 + self.next() % COLS

    def crumble(self) -> int:
        return self.next() % 20
