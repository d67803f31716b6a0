
"""Line clearing: row scan, timed blink, collapse and scoring"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from tetris_board import Board
from tetris_config import CONFIG

# Points per simultaneous clear (multiplied by level+1)
SCORE_TABLE = (0, 40, 100, 300, 1200)


def line_score(count: int, level: int) -> int:
    return SCORE_TABLE[min(max(count, 0), 4)] * (level + 1)


class LineClearState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    BLINKING = "blinking"
    COLLAPSING = "collapsing"


@dataclass(frozen=True)
class ClearResult:
    rows: Tuple[int, ...]
    score_delta: int

    @property
    def count(self) -> int:
        return min(len(self.rows), 4)


class LineClearEngine:
    """
    Marks completed rows and holds them for a blink animation before they are
    removed. While the engine is not idle the board is frozen for gameplay.
    """

    def __init__(self, blink_ticks: Optional[int] = None):
        self.blink_ticks = CONFIG["BLINK_TICKS"] if blink_ticks is None else blink_ticks
        self.state = LineClearState.IDLE
        self.rows: Tuple[int, ...] = ()
        self.frames_remaining = 0

    @property
    def idle(self) -> bool:
        return self.state is LineClearState.IDLE

    def scan(self, board: Board) -> Tuple[int, ...]:
        self.state = LineClearState.SCANNING
        rows = tuple(board.scan_complete_rows())
        if rows:
            self.rows = rows
            self.frames_remaining = max(self.blink_ticks, 1)
            self.state = LineClearState.BLINKING
        else:
            self.state = LineClearState.IDLE
        return rows

    def blink_state(self) -> Optional[bool]:
        """True to show the marked rows this tick, False to hide them, None to leave them."""
        if self.state is not LineClearState.BLINKING:
            return None
        if self.frames_remaining % 40 == 0:
            return True
        if self.frames_remaining % 20 == 0:
            return False
        return None

    def tick(self, board: Board, level: int) -> Optional[ClearResult]:
        if self.state is not LineClearState.BLINKING:
            return None
        if self.frames_remaining > 1:
            self.frames_remaining -= 1
            return None

        # Rows were detected top to bottom; collapsing one never moves the
        # rows below it, so the recorded indices stay valid in this order.
        self.state = LineClearState.COLLAPSING
        for row in self.rows:
            board.collapse_row(row)
        result = ClearResult(self.rows, line_score(len(self.rows), level))

        self.rows = ()
        self.frames_remaining = 0
        self.state = LineClearState.IDLE
        return result
