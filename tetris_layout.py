# tetris_layout.py
from dataclasses import dataclass
from typing import Optional, Tuple

from tetris_config import CONFIG
from tetris_piece import COLS, ROWS

MARGIN = 16
PANEL_W = 200


@dataclass(frozen=True)
class Dims:
    """Pixel geometry of the window: playfield, peer gauge and side panel, left to right."""
    cell: int
    margin: int
    panel_w: int
    gauge_w: int
    board_w: int
    board_h: int
    total_w: int
    total_h: int
    board_x: int
    board_y: int
    gauge_x: int
    panel_x: int
    panel_y: int

    def board_rect(self) -> Tuple[int, int, int, int]:
        return self.board_x, self.board_y, self.board_w, self.board_h

    def panel_rect(self) -> Tuple[int, int, int, int]:
        return self.panel_x, self.panel_y, self.panel_w, self.board_h


def compute_dims(cell: Optional[int] = None) -> Dims:
    cell = int(CONFIG["CELL_SIZE"] if cell is None else cell)
    lanes = (COLS * cell, cell // 2, PANEL_W)

    # each lane starts one margin after the previous one ends
    starts = []
    x = MARGIN
    for width in lanes:
        starts.append(x)
        x += width + MARGIN
    board_x, gauge_x, panel_x = starts

    return Dims(
        cell=cell, margin=MARGIN, panel_w=PANEL_W, gauge_w=lanes[1],
        board_w=lanes[0], board_h=ROWS * cell,
        total_w=x, total_h=ROWS * cell + 2 * MARGIN,
        board_x=board_x, board_y=MARGIN, gauge_x=gauge_x,
        panel_x=panel_x, panel_y=MARGIN,
    )
