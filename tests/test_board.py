import pytest

from conftest import fill_row
from tetris_board import Board, Cell, GARBAGE
from tetris_piece import COLS, ROWS, PieceKind, Pose
from tetris_rng import LCGRandom


def test_new_board_is_empty(board):
    assert all(c is Cell.EMPTY for row in board.rows() for c in row)
    assert board.top_row() is None


def test_walls_and_floor_are_occupied(board):
    assert board.is_occupied(0, 5)
    assert board.is_occupied(COLS + 1, 5)
    assert board.is_occupied(4, ROWS)
    assert not board.is_occupied(4, -1)
    assert not board.is_occupied(1, 0)
    assert not board.is_occupied(COLS, ROWS - 1)


def test_cell_at_rejects_outside(board):
    with pytest.raises(IndexError):
        board.cell_at(0, 0)
    with pytest.raises(IndexError):
        board.cell_at(1, ROWS)


def test_lock_piece_writes_kind_colour(board):
    board.lock_piece(Pose(PieceKind.T, 0, 0, 10))
    assert board.cell_at(1, 11) is Cell.T
    assert board.cell_at(2, 11) is Cell.T
    assert board.cell_at(3, 11) is Cell.T
    assert board.cell_at(2, 12) is Cell.T
    assert board.top_row() == 11


def test_lock_piece_skips_rows_above_top(board):
    board.lock_piece(Pose(PieceKind.I, 1, 0, -2))
    assert board.cell_at(2, 0) is Cell.I
    assert board.cell_at(2, 1) is Cell.I
    assert board.cell_at(2, 2) is Cell.EMPTY


def test_scan_lists_complete_rows_top_to_bottom(board):
    fill_row(board, 9)
    fill_row(board, 5)
    fill_row(board, 7, holes=(4,))
    assert board.scan_complete_rows() == [5, 9]


def test_collapse_shifts_rows_above(board):
    board.set_cell(3, 0, Cell.S)
    board.set_cell(3, 4, Cell.L)
    fill_row(board, 5)
    board.set_cell(8, 6, Cell.J)
    board.collapse_row(5)
    assert board.cell_at(3, 1) is Cell.S
    assert board.cell_at(3, 5) is Cell.L
    assert board.cell_at(8, 6) is Cell.J
    assert all(board.cell_at(c, 0) is Cell.EMPTY for c in range(1, COLS + 1))


def test_collapse_in_detection_order_removes_both_rows(board):
    fill_row(board, 5)
    fill_row(board, 9)
    board.set_cell(2, 3, Cell.O)
    board.set_cell(6, 7, Cell.Z)
    board.set_cell(9, 12, Cell.T)
    for row in board.scan_complete_rows():
        board.collapse_row(row)
    assert board.scan_complete_rows() == []
    assert board.cell_at(2, 5) is Cell.O
    assert board.cell_at(6, 8) is Cell.Z
    assert board.cell_at(9, 12) is Cell.T
    assert board.top_row() == 5


@pytest.mark.parametrize("n", [1, 2, 3])
def test_penalty_rows_push_stack_up(board, n):
    board.set_cell(4, ROWS - 1, Cell.L)
    board.inject_penalty_rows(n, void_column=7)
    for row in range(ROWS - n, ROWS):
        for col in range(1, COLS + 1):
            expected = Cell.EMPTY if col == 7 else GARBAGE
            assert board.cell_at(col, row) is expected
    assert board.cell_at(4, ROWS - 1 - n) is Cell.L


def test_penalty_larger_than_board_fills_it(board):
    board.inject_penalty_rows(31, void_column=1)
    assert board.top_row() == 0
    assert board.scan_complete_rows() == []


def test_zero_penalty_is_noop(board):
    board.set_cell(4, 10, Cell.L)
    board.inject_penalty_rows(0, void_column=1)
    assert board.cell_at(4, 10) is Cell.L


class FixedCrumbles:
    def __init__(self, values):
        self.values = iter(values)

    def crumble(self):
        return next(self.values)


def test_crumbles_fill_bottom_rows_only(board):
    board.fill_crumbles(2, FixedCrumbles([0, 6, 7, 19] * 10))
    rows = board.rows()
    assert all(c is Cell.EMPTY for row in rows[:ROWS - 4] for c in row)
    assert rows[ROWS - 1][:4] == (Cell.I, Cell.J, Cell.EMPTY, Cell.EMPTY)


def test_crumble_density_is_about_seven_in_twenty():
    board = Board()
    board.fill_crumbles(5, LCGRandom(99))
    cells = [c for row in board.rows()[ROWS - 10:] for c in row]
    ratio = sum(c.locked for c in cells) / len(cells)
    assert 0.2 < ratio < 0.5


def test_no_crumbles_without_handicap(board):
    board.fill_crumbles(0, LCGRandom(1))
    assert board.top_row() is None
