
"""Board: locked cells, collision queries, row scan/collapse, penalty rows"""
from enum import IntEnum
from typing import List, Optional, Tuple
from tetris_piece import Pose, COLS, ROWS


class Cell(IntEnum):
    EMPTY = 0
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    L = 6
    J = 7

    @property
    def locked(self) -> bool:
        return self is not Cell.EMPTY


GARBAGE = Cell.I
MAX_HIGH = 5


def _empty_row() -> List[Cell]:
    return [Cell.EMPTY] * COLS


class Board:
    """
    10x18 grid of locked cells, row 0 at the top. Interior columns are
    numbered 1..10; column 0, column 11 and row 18 are the walls and floor.
    """

    def __init__(self):
        self._grid: List[List[Cell]] = [_empty_row() for _ in range(ROWS)]

    def _check(self, col: int, row: int):
        if not (1 <= col <= COLS and 0 <= row < ROWS):
            raise IndexError(f"cell ({col},{row}) is outside the playfield")

    def cell_at(self, col: int, row: int) -> Cell:
        self._check(col, row)
        return self._grid[row][col - 1]

    def set_cell(self, col: int, row: int, cell: Cell):
        self._check(col, row)
        self._grid[row][col - 1] = Cell(cell)

    def is_occupied(self, col: int, row: int) -> bool:
        """Walls and floor count as occupied, space above the top does not."""
        if row < 0:
            return False
        if col < 1 or col > COLS or row >= ROWS:
            return True
        return self._grid[row][col - 1].locked

    def lock_piece(self, pose: Pose):
        """Write the pose into the grid (no collision check)."""
        color = Cell(pose.kind.color)
        for bx, by in pose.cells():
            if by >= 0:
                self._grid[by][bx - 1] = color

    def scan_complete_rows(self) -> List[int]:
        return [r for r in range(ROWS) if all(c.locked for c in self._grid[r])]

    def collapse_row(self, row: int):
        """Remove `row`; everything above it moves down one, row 0 is emptied."""
        if not 0 <= row < ROWS:
            raise IndexError(f"row {row} is outside the playfield")
        del self._grid[row]
        self._grid.insert(0, _empty_row())

    def inject_penalty_rows(self, n: int, void_column: int):
        """Push the stack up by n rows and fill the bottom with garbage."""
        n = min(max(n, 0), ROWS)
        if not n:
            return
        del self._grid[:n]
        for _ in range(n):
            self._grid.append([Cell.EMPTY if col == void_column else GARBAGE
                               for col in range(1, COLS + 1)])

    def fill_crumbles(self, high: int, rng):
        """Handicap: randomly lock cells in the bottom 2*high rows."""
        high = min(max(high, 0), MAX_HIGH)
        for row in range(ROWS - 1, ROWS - 1 - 2 * high, -1):
            for col in range(COLS):
                v = rng.crumble()  # 0..19, the first seven lock a coloured cell
                self._grid[row][col] = Cell(v + 1) if v < 7 else Cell.EMPTY

    def top_row(self) -> Optional[int]:
        for r, row in enumerate(self._grid):
            if any(c.locked for c in row):
                return r
        return None

    def rows(self) -> Tuple[Tuple[Cell, ...], ...]:
        return tuple(tuple(row) for row in self._grid)
