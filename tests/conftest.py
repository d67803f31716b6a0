import os
import socket

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from tetris_board import Board, Cell
from tetris_input import ScriptedInput
from tetris_net import NetLink, Role
from tetris_piece import COLS
from tetris_render import NullRenderer
from tetris_rng import LCGRandom
from tetris_session import GameMode, GameSession


def fill_row(board, row, color=Cell.T, holes=()):
    for col in range(1, COLS + 1):
        if col not in holes:
            board.set_cell(col, row, color)


class RecordingAudio:
    def __init__(self):
        self.played = []

    def play(self, fx):
        self.played.append(fx)


@pytest.fixture
def board():
    return Board()


@pytest.fixture
def rng():
    return LCGRandom(12345)


@pytest.fixture
def link_pair():
    a, b = socket.socketpair()
    left, right = NetLink(a, Role.SERVER), NetLink(b, Role.CLIENT)
    yield left, right
    left.close()
    right.close()


@pytest.fixture
def make_session():
    def factory(mode=GameMode.ENDLESS, keys=(), seed=12345, **kwargs):
        kwargs.setdefault("renderer", NullRenderer())
        kwargs.setdefault("audio", RecordingAudio())
        return GameSession(mode, rng=LCGRandom(seed), input_source=ScriptedInput(keys), **kwargs)
    return factory
