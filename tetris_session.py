
"""
Game session: the per-tick state machine.

One call to GameSession.tick() is one frame:

  a) take at most one key and apply it (or toggle pause / quit)
  b) automatic drop when the gravity counter reaches the level's period
  c) lock the piece if its last downward move was rejected, scan for lines,
     spawn the next piece, check for top-out, take penalty rows, report height
  d) count down freeze and gravity timers
  e) mode-specific end conditions, then read the peer's messages

While completed rows are blinking only pause and quit keys are honoured.
"""
import logging
from enum import Enum
from typing import Optional

from tetris_audio import NullAudio, Sfx
from tetris_board import Board, Cell, MAX_HIGH
from tetris_config import CONFIG, gravity_period
from tetris_input import Key, ScriptedInput
from tetris_lines import ClearResult, LineClearEngine
from tetris_net import MsgKind, NetError, NetLink
from tetris_piece import ActivePiece, Pose, COLS
from tetris_render import NullRenderer
from tetris_rng import LCGRandom

log = logging.getLogger(__name__)

MAX_LEVEL = 9
LINES_PER_LEVEL = 10


class GameMode(Enum):
    ENDLESS = "a"
    GOAL = "b"
    VERSUS = "2"


class Status(Enum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"
    LOCAL_QUIT = "quit"
    PEER_QUIT = "peer_left"


RESULT_TEXT = {
    Status.WON: " YOU WON !",
    Status.LOST: "GAME OVER",
    Status.PEER_QUIT: "PEER LEFT",
    Status.LOCAL_QUIT: "BYE BYE !!",
}


class GameSession:
    def __init__(self, mode: GameMode = GameMode.ENDLESS, level: int = 0, high: int = 0,
                 goal_lines: Optional[int] = None, rng: Optional[LCGRandom] = None,
                 net: Optional[NetLink] = None, renderer=None, audio=None, input_source=None):
        self.mode = mode
        self.rng = rng if rng is not None else LCGRandom(CONFIG["RNG_SEED"])
        self.net = net
        self.renderer = renderer if renderer is not None else NullRenderer()
        self.audio = audio if audio is not None else NullAudio()
        self.input = input_source if input_source is not None else ScriptedInput()

        self.board = Board()
        self.piece = ActivePiece(self.board)
        self.clearer = LineClearEngine()

        self.level = min(max(level, 0), MAX_LEVEL)
        self.high = min(max(high, 0), MAX_HIGH)
        if mode is GameMode.GOAL:
            self.lines = CONFIG["GOAL_LINES"] if goal_lines is None else goal_lines
        else:
            self.lines = 0
        self.score = 0
        self.period = gravity_period(self.level)
        self.frames = 0
        self.freeze = 0
        self.paused = False
        self.status = Status.PLAYING
        self.peer_height: Optional[int] = None
        self._settle_pending = False

        self.void_column = self.rng.void_column() if mode is GameMode.VERSUS else 0
        self.board.fill_crumbles(self.high, self.rng)
        self.next_kind = self.rng.next_kind()
        self._spawn()
        self._draw_board()
        self._draw_status()

    # ---------- state ----------
    @property
    def finished(self) -> bool:
        return self.status is not Status.PLAYING

    def result_text(self) -> Optional[str]:
        return RESULT_TEXT.get(self.status)

    def _finish(self, status: Status):
        if self.finished:
            return
        self.status = status
        log.info("Game over: %s (score %d, lines %d, level %d)",
                 status.value, self.score, self.lines, self.level)

    def _send(self, kind: MsgKind, value: int = 0):
        if self.net is None:
            return
        try:
            self.net.send(kind, value)
        except NetError as exc:
            log.error("Network failure: %s", exc)
            self._finish(Status.PEER_QUIT)

    # ---------- drawing ----------
    def _draw_board(self):
        for y, row in enumerate(self.board.rows()):
            for x, cell in enumerate(row, start=1):
                self.renderer.set_cell(x, y, cell)
        self._draw_pose(self.piece.current, True)

    def _draw_pose(self, pose: Pose, draw: bool):
        color = pose.kind.color if draw else Cell.EMPTY
        for x, y in pose.cells():
            self.renderer.set_cell(x, y, color)

    def _draw_rows(self, rows, shown: bool):
        for y in rows:
            for x in range(1, COLS + 1):
                self.renderer.set_cell(x, y, self.board.cell_at(x, y) if shown else Cell.EMPTY)

    def _draw_status(self):
        self.renderer.set_status_text("score", str(self.score))
        self.renderer.set_status_text("level", str(self.level))
        self.renderer.set_status_text("lines", str(self.lines))

    # ---------- piece ----------
    def _spawn(self):
        self.piece.spawn_next(self.next_kind)
        self.next_kind = self.rng.next_kind()
        self.renderer.set_next_piece(self.next_kind)
        self._draw_pose(self.piece.current, True)

    def _apply(self, action) -> bool:
        before = self.piece.current
        moved = action()
        if moved:
            self._draw_pose(before, False)
            self._draw_pose(self.piece.current, True)
            if self.piece.current.ori != before.ori:
                self.audio.play(Sfx.ROTATION)
            elif self.piece.current.x != before.x:
                self.audio.play(Sfx.MOVE)
        return moved

    def move(self, dx: int, dy: int = 0) -> bool:
        return self._apply(lambda: self.piece.shift(dx, dy))

    def rotate(self, direction: int) -> bool:
        return self._apply(lambda: self.piece.rotate(direction))

    def drop(self) -> bool:
        return self.move(0, 1)

    # ---------- pause / quit ----------
    def toggle_pause(self):
        self.paused = not self.paused
        if self.paused:
            self.audio.play(Sfx.PAUSE)
            self.renderer.show_message("* pause! *")
        else:
            self.renderer.show_message(None)
            self._draw_board()

    def request_pause(self):
        """Local pause key: toggle here and tell the peer to toggle too."""
        self._send(MsgKind.PAUSE)
        self.toggle_pause()

    def quit(self):
        if self.finished:
            return
        self._finish(Status.LOCAL_QUIT)
        self._send(MsgKind.QUIT)

    def handle_key(self, key: Key) -> bool:
        """Apply one key; returns True when it moved the piece down."""
        if key is Key.PAUSE:
            self.request_pause()
            return False
        if key is Key.QUIT:
            self.quit()
            return False
        if self.paused:
            return False
        if key is Key.LEFT:
            self.move(-1)
        elif key is Key.RIGHT:
            self.move(1)
        elif key is Key.DOWN:
            if not self.freeze:
                return self.drop()
        elif key is Key.ROTATE_CW:
            self.rotate(1)
        elif key is Key.ROTATE_CCW:
            self.rotate(-1)
        return False

    # ---------- lock / lines ----------
    def _piece_hit(self):
        self.audio.play(Sfx.DROP)
        self.piece.lock_into(self.board)
        rows = self.clearer.scan(self.board)
        self._spawn()
        if rows:
            self.audio.play(Sfx.TETRIS if len(rows) >= 4 else Sfx.LINE)
            self._settle_pending = True
        else:
            self._settle()

    def _settle(self):
        """Finish a lock once the board is final: top-out, penalties, height, freeze."""
        self._settle_pending = False
        if not self.piece.can_place(self.piece.current):
            self._finish(Status.LOST)
            self.audio.play(Sfx.LOST)
            self._send(MsgKind.LOST)
            return
        if self.net is not None:
            pending = self.net.take_pending_lines()
            if pending:
                self.board.inject_penalty_rows(pending, self.void_column)
                self.audio.play(Sfx.GRID_DROP)
                self._draw_board()
            try:
                self.net.report_height(self.board)
            except NetError as exc:
                log.error("Network failure: %s", exc)
                self._finish(Status.PEER_QUIT)
        self.freeze = CONFIG["FREEZE_FRAMES"]

    def apply_clear(self, result: ClearResult):
        """Update score, line counter, level and speed after rows were removed."""
        count = result.count
        self.score += result.score_delta
        if self.mode is GameMode.GOAL:
            self.lines = max(0, self.lines - count)
        else:
            self.lines += count
            level = max(self.level, self.lines // LINES_PER_LEVEL)
            if self.mode is GameMode.VERSUS:
                level = min(level, MAX_LEVEL)
            self.level = level
        self.period = gravity_period(self.level)
        self._draw_status()
        if self.mode is GameMode.VERSUS and count > 1:
            self._send(MsgKind.LINES, count - 1)

    def _check_goal(self):
        if self.mode is GameMode.GOAL and self.lines <= 0 and not self.finished:
            self.audio.play(Sfx.WIN)
            self._finish(Status.WON)

    # ---------- network ----------
    def poll_network(self):
        if self.net is None or self.finished:
            return
        try:
            messages = self.net.poll()
        except NetError as exc:
            log.warning("Peer link lost: %s", exc)
            self._finish(Status.PEER_QUIT)
            return
        for kind, value in messages:
            if kind is MsgKind.HEIGHT:
                self.peer_height = value
                self.renderer.set_peer_height(value)
            elif kind is MsgKind.LINES:
                self.net.queue_lines(value)
            elif kind is MsgKind.LOST:
                self.audio.play(Sfx.WIN)
                self._finish(Status.WON)
                break
            elif kind is MsgKind.QUIT:
                self._finish(Status.PEER_QUIT)
                break
            elif kind is MsgKind.PAUSE:
                self.toggle_pause()

    # ---------- frame ----------
    def tick(self) -> Status:
        if self.finished:
            return self.status
        if self.clearer.idle:
            self._play_tick()
        else:
            self._clear_tick()
        if not self.finished:
            self.poll_network()
        return self.status

    def _play_tick(self):
        moved_down = False
        key = self.input.poll_key()
        if key is not None:
            moved_down = self.handle_key(key)
            if self.finished:
                return
        if not self.paused and self.frames >= self.period:
            moved_down |= self.drop()
        if moved_down:
            self.frames = 0
        if self.piece.hit:
            self._piece_hit()
        if self.freeze:
            self.freeze -= 1
        if not self.paused:
            self.frames += 1
        self._check_goal()

    def _clear_tick(self):
        # Keys typed during the animation are dropped, except pause and quit.
        key = self.input.poll_key()
        if key is Key.PAUSE or key is Key.QUIT:
            self.handle_key(key)
        if self.paused or self.finished:
            return
        shown = self.clearer.blink_state()
        if shown is not None:
            self._draw_rows(self.clearer.rows, shown)
        result = self.clearer.tick(self.board, self.level)
        if result is None:
            return
        self.apply_clear(result)
        self._draw_board()
        if self._settle_pending:
            self._settle()
        self._check_goal()
