
"""Piece catalog, poses and the falling piece's move protocol"""
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import TYPE_CHECKING, Iterator, Optional, Tuple

if TYPE_CHECKING:
    from tetris_board import Board

COLS, ROWS = 10, 18
SPAWN_X, SPAWN_Y = 3, 0
MAX_ORIENTATIONS = 4


class PieceKind(IntEnum):
    I = 0
    O = 1
    T = 2
    S = 3
    Z = 4
    L = 5
    J = 6

    @property
    def color(self) -> int:
        return int(self) + 1


def _mask(*rows: str) -> int:
    """Pack a 4x4 picture ('#' lit) into a 16-bit mask, bit row*4+col."""
    m = 0
    for r, line in enumerate(rows):
        for c, ch in enumerate(line.ljust(4)):
            if ch == "#":
                m |= 1 << (r * 4 + c)
    return m


# Successive clockwise rotations; None marks an unused slot.
PIECE_CATALOG: Tuple[Tuple[Optional[int], ...], ...] = (
    # I
    (_mask("    ",
           "    ",
           "####"),
     _mask(" #",
           " #",
           " #",
           " #"),
     None, None),
    # O
    (_mask("    ",
           " ##",
           " ##"),
     None, None, None),
    # T
    (_mask("    ",
           "###",
           " #"),
     _mask(" #",
           "##",
           " #"),
     _mask(" #",
           "###"),
     _mask(" #",
           " ##",
           " #")),
    # S
    (_mask("    ",
           " ##",
           "##"),
     _mask("#",
           "##",
           " #"),
     None, None),
    # Z
    (_mask("    ",
           "##",
           " ##"),
     _mask(" #",
           "##",
           "#"),
     None, None),
    # L
    (_mask("    ",
           "###",
           "#"),
     _mask("##",
           " #",
           " #"),
     _mask("  #",
           "###"),
     _mask(" #",
           " #",
           " ##")),
    # J
    (_mask("    ",
           "###",
           "  #"),
     _mask(" #",
           " #",
           "##"),
     _mask("#",
           "###"),
     _mask(" ##",
           " #",
           " #")),
)


def is_valid_orientation(kind: PieceKind, ori: int) -> bool:
    return 0 <= ori < MAX_ORIENTATIONS and PIECE_CATALOG[kind][ori] is not None


def is_lit(kind: PieceKind, ori: int, col: int, row: int) -> bool:
    image = PIECE_CATALOG[kind][ori]
    return bool(image >> (row * 4 + col) & 1)


def orientation_count(kind: PieceKind) -> int:
    return sum(1 for image in PIECE_CATALOG[kind] if image is not None)


def lit_cells(kind: PieceKind, ori: int) -> Iterator[Tuple[int, int]]:
    for row in range(4):
        for col in range(4):
            if is_lit(kind, ori, col, row):
                yield col, row


@dataclass(frozen=True)
class Pose:
    kind: PieceKind
    ori: int
    x: int
    y: int

    def cells(self) -> Iterator[Tuple[int, int]]:
        """Board (column, row) of every lit cell; interior columns start at 1."""
        for col, row in lit_cells(self.kind, self.ori):
            yield 1 + self.x + col, self.y + row

    @staticmethod
    def spawn(kind: PieceKind) -> "Pose":
        # The bar's image has empty top rows; start it one row higher.
        y = SPAWN_Y - 1 if kind is PieceKind.I else SPAWN_Y
        return Pose(kind, 0, SPAWN_X, y)


class ActivePiece:
    """
    The falling piece. Every move is a two-phase transaction: a proposed pose
    is derived from the current one, checked against the board, then either
    committed or rolled back. A rejected downward move raises `hit`, meaning
    the piece has to be locked this tick.
    """

    def __init__(self, board: "Board", kind: PieceKind = PieceKind.I):
        self.board = board
        self.current = Pose.spawn(kind)
        self._proposed = self.current
        self.hit = False

    @property
    def kind(self) -> PieceKind:
        return self.current.kind

    def can_place(self, pose: Pose) -> bool:
        for bx, by in pose.cells():
            if by < 0:
                continue
            if bx < 1 or bx > COLS or by >= ROWS:
                return False
            if self.board.is_occupied(bx, by):
                return False
        return True

    def try_move(self) -> bool:
        if self.can_place(self._proposed):
            self.current = self._proposed
            return True
        if self._proposed.y != self.current.y:
            self.hit = True
        self._proposed = self.current
        return False

    def shift(self, dx: int, dy: int = 0) -> bool:
        self._proposed = replace(self.current, x=self.current.x + dx, y=self.current.y + dy)
        return self.try_move()

    def drop(self) -> bool:
        return self.shift(0, 1)

    def rotate(self, direction: int) -> bool:
        """Rotate clockwise for direction > 0, counter-clockwise otherwise."""
        kind = self.current.kind
        if direction > 0:
            ori = self.current.ori + 1
            if not is_valid_orientation(kind, ori):
                ori = 0
        else:
            ori = self.current.ori - 1
            if ori < 0:
                ori = MAX_ORIENTATIONS
            while not is_valid_orientation(kind, ori):
                ori -= 1
                assert ori >= 0, "orientation 0 is always valid"
        self._proposed = replace(self.current, ori=ori)
        return self.try_move()

    def spawn_next(self, kind: PieceKind) -> None:
        self.current = Pose.spawn(kind)
        self._proposed = self.current
        self.hit = False

    def lock_into(self, board: "Board") -> None:
        board.lock_piece(self.current)

    def cells(self) -> Iterator[Tuple[int, int]]:
        return self.current.cells()
