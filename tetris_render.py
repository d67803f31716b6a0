
"""
Rendering sinks for the engine.

The session never draws; it pushes cell colours, the next-piece preview,
status values and messages into a renderer, which paints them on present().
- NullRenderer keeps the pushed state in memory (headless runs, tests).
- PygameRenderer caches the static background and one sprite per colour and
  blits only what it was told about.
"""
from __future__ import annotations
import pygame
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
from tetris_layout import Dims
from tetris_piece import COLS, ROWS, PieceKind, lit_cells

# Colour per locked cell id (1..7, one per piece kind)
COLORS: Dict[int, Tuple[int, int, int]] = {
    1: (102, 224, 255),
    2: (255, 224, 102),
    3: (200, 119, 255),
    4: (94, 224, 142),
    5: (255, 102, 119),
    6: (255, 158, 94),
    7: (106, 119, 255),
}
GAUGE_STACK = (255, 224, 102)
GAUGE_EMPTY = (60, 70, 120)
BACKGROUND = (10, 13, 34)
GRID = (40, 50, 90)
WALL = (70, 80, 130)
PANEL = (21, 25, 53)
PANEL_EDGE = (50, 60, 100)


class NullRenderer:
    def __init__(self):
        self.cells: Dict[Tuple[int, int], int] = {}
        self.status: Dict[str, str] = {}
        self.next_kind: Optional[PieceKind] = None
        self.peer_height: Optional[int] = None
        self.message: Optional[str] = None

    def set_cell(self, x: int, y: int, color: int):
        if 1 <= x <= COLS and 0 <= y < ROWS:
            self.cells[(x, y)] = int(color)

    def set_next_piece(self, kind: PieceKind):
        self.next_kind = kind

    def set_status_text(self, name: str, text: str):
        self.status[name] = text

    def set_peer_height(self, height: int):
        self.peer_height = height

    def show_message(self, text: Optional[str]):
        self.message = text

    def present(self):
        pass


@dataclass
class HudCache:
    values: Dict[str, str] = field(default_factory=dict)
    surfaces: Dict[str, pygame.Surface] = field(default_factory=dict)
    title: Optional[pygame.Surface] = None
    controls: Optional[list] = None


class PygameRenderer(NullRenderer):
    """Paints the pushed state onto a pygame screen from cached sprites."""
    def __init__(self, screen: pygame.Surface, dims: Dims, font: pygame.font.Font,
                 big_font: pygame.font.Font):
        super().__init__()
        self.screen = screen
        self.dims = dims
        self.font = font
        self.big_font = big_font
        self.hud = HudCache()
        self._make_static()
        self._make_cells()

    # ---------- Static background (well + panel) ----------
    def _make_static(self):
        d = self.dims
        self.bg = pygame.Surface((d.total_w, d.total_h))
        self.bg.fill(BACKGROUND)
        well = pygame.Rect(d.board_rect())
        # walls and floor, the cells a piece can never enter
        pygame.draw.rect(self.bg, WALL, well.inflate(d.margin, d.margin // 2).move(0, d.margin // 4))
        pygame.draw.rect(self.bg, BACKGROUND, well)
        for col in range(1, COLS):
            left = well.left + col * d.cell
            pygame.draw.line(self.bg, GRID, (left, well.top), (left, well.bottom - 1))
        for row in range(1, ROWS):
            top = well.top + row * d.cell
            pygame.draw.line(self.bg, GRID, (well.left, top), (well.right - 1, top))

        panel = pygame.Rect(d.panel_rect())
        pygame.draw.rect(self.bg, PANEL, panel)
        pygame.draw.rect(self.bg, PANEL_EDGE, panel, 1)
        self.pv_cell = max(14, d.cell * 3 // 4)
        self.pv_x = panel.left + 12
        self.pv_y = panel.top + 150
        preview = pygame.Rect(self.pv_x, self.pv_y, self.pv_cell * 4, self.pv_cell * 4).inflate(12, 12)
        pygame.draw.rect(self.bg, BACKGROUND, preview)
        pygame.draw.rect(self.bg, PANEL_EDGE, preview, 1)

    # ---------- Small cell sprites ----------
    def _make_cells(self):
        c = self.dims.cell
        self.cell_surf: Dict[int, pygame.Surface] = {}
        self.pv_surf: Dict[int, pygame.Surface] = {}
        for color, rgb in COLORS.items():
            s = pygame.Surface((c - 2, c - 2))
            s.fill(rgb)
            self.cell_surf[color] = s
            p = pygame.Surface((self.pv_cell - 2, self.pv_cell - 2))
            p.fill(rgb)
            self.pv_surf[color] = p

    def cell_rect(self, x: int, y: int) -> pygame.Rect:
        d = self.dims
        return pygame.Rect(d.board_x + (x - 1) * d.cell, d.board_y + y * d.cell, d.cell, d.cell)

    # ---------- HUD / Panel ----------
    def _text(self, name: str, text: str) -> pygame.Surface:
        if self.hud.values.get(name) != text:
            self.hud.values[name] = text
            self.hud.surfaces[name] = self.font.render(text, True, (200, 210, 240))
        return self.hud.surfaces[name]

    def _draw_panel(self):
        d = self.dims
        if self.hud.title is None:
            self.hud.title = self.font.render("Tetris Duel", True, (197, 202, 233))
        self.screen.blit(self.hud.title, (d.panel_x + 12, d.panel_y + 12))
        y = d.panel_y + 44
        for name in ("score", "level", "lines"):
            if name in self.status:
                self.screen.blit(self._text(name, f"{name.capitalize()}: {self.status[name]}"),
                                 (d.panel_x + 12, y))
            y += 24
        self.screen.blit(self._text("next", "Next:"), (d.panel_x + 12, d.panel_y + 126))
        if self.next_kind is not None and self.message is None:
            for col, row in lit_cells(self.next_kind, 0):
                self.screen.blit(self.pv_surf[self.next_kind.color],
                                 (self.pv_x + col * self.pv_cell + 1, self.pv_y + row * self.pv_cell + 1))
        if not self.hud.controls:
            self.hud.controls = [
                self.font.render("Controls:", True, (200, 210, 240)),
                self.font.render("←/→ or J/L Move", True, (165, 175, 215)),
                self.font.render("↓ or K Drop", True, (165, 175, 215)),
                self.font.render("↑/I/F Rot CW", True, (165, 175, 215)),
                self.font.render("Z/U/D Rot CCW", True, (165, 175, 215)),
                self.font.render("P Pause • Esc Quit", True, (165, 175, 215)),
            ]
        y = d.panel_y + 260
        for surf in self.hud.controls:
            self.screen.blit(surf, (d.panel_x + 12, y)); y += 20

    def _draw_gauge(self):
        if self.peer_height is None:
            return
        d = self.dims
        for row in range(ROWS):
            col = GAUGE_EMPTY if row < self.peer_height else GAUGE_STACK
            pygame.draw.rect(self.screen, col,
                             (d.gauge_x, d.board_y + row * d.cell + 1, d.gauge_w, d.cell - 2))

    def present(self):
        self.screen.blit(self.bg, (0, 0))
        if self.message is None:
            for (x, y), color in self.cells.items():
                if color:
                    self.screen.blit(self.cell_surf[color], self.cell_rect(x, y).inflate(-2, -2).topleft)
        else:
            d = self.dims
            veil = pygame.Rect(d.board_rect())
            pygame.draw.rect(self.screen, (200, 119, 255), veil)
            msg = self.big_font.render(self.message, True, (255, 240, 240))
            self.screen.blit(msg, msg.get_rect(center=veil.center))
        self._draw_gauge()
        self._draw_panel()
        pygame.display.flip()
