"""Simple pygame front-end for the board engine.

This module provides a minimal playable version of the game: drag a piece
sideways with the mouse and release it to settle the board.  Each settle
step is shown for ``STEP_MS`` milliseconds before the next one is applied,
so drops, clears and injected rows are visible one at a time.  It is meant
purely as a demonstration of how a presentation layer consumes the deltas
produced by :class:`~blockslide.game_state.GameSession`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterator, Optional, Tuple

import pygame

from .board import COLUMNS, ROWS
from .events import BoardDelta
from .game_state import GameSession
from .piece import Piece

# Size of a single board cell in pixels
CELL_SIZE = 48
# Milliseconds each settle step stays on screen
STEP_MS = 250
# Frames per second to run the game loop at
FPS = 60

# Colours for each piece width
WIDTH_COLORS = {
    1: (0, 200, 200),
    2: (230, 200, 0),
    3: (160, 60, 220),
    4: (230, 90, 40),
}
BACKGROUND = (15, 15, 20)
GRID_LINE = (50, 50, 50)
DRAG_HIGHLIGHT = (255, 255, 255)

LOGGER = logging.getLogger(__name__)


def cell_at(x: int, y: int, rows: int = ROWS) -> Tuple[int, int]:
    """Return the ``(row, col)`` under pixel ``(x, y)``.

    Row ``0`` is drawn at the bottom of the window.  The result may be off
    the board; callers check it against the board.
    """

    return rows - 1 - y // CELL_SIZE, x // CELL_SIZE


def cell_rect(row: int, col: int, width: int = 1, rows: int = ROWS) -> pygame.Rect:
    """Return the screen rectangle covering ``width`` cells from ``(row, col)``."""

    return pygame.Rect(col * CELL_SIZE, (rows - 1 - row) * CELL_SIZE, width * CELL_SIZE, CELL_SIZE)


def drag_column(piece: Piece, start_x: int, x: int) -> int:
    """Return the column a piece is dragged to after moving from ``start_x`` to ``x``."""

    offset = x - start_x
    steps = int((offset + (CELL_SIZE // 2 if offset > 0 else -(CELL_SIZE // 2))) / CELL_SIZE)
    return piece.col + steps


def draw_board(screen: pygame.Surface, session: GameSession, drag: Optional[Tuple[Piece, int]] = None) -> None:
    """Render every piece, with the dragged one at its preview column."""

    board = session.board
    for r in range(board.rows):
        for c in range(board.columns):
            pygame.draw.rect(screen, GRID_LINE, cell_rect(r, c, rows=board.rows), 1)

    for piece in board.all_pieces():
        col = piece.col
        if drag is not None and drag[0] is piece:
            col = drag[1]
        rect = cell_rect(piece.row, col, piece.width, board.rows).inflate(-4, -4)
        pygame.draw.rect(screen, WIDTH_COLORS[piece.width], rect, border_radius=6)
        if drag is not None and drag[0] is piece:
            pygame.draw.rect(screen, DRAG_HIGHLIGHT, rect, 2, border_radius=6)


class GameRunner:
    """Manage the window, input and frame-stepped settling."""

    def __init__(self, session: Optional[GameSession] = None) -> None:
        self.session = session or GameSession(ROWS, COLUMNS)
        self._running = False
        self._screen: Optional[pygame.Surface] = None
        self._clock: Optional[pygame.time.Clock] = None
        self._steps: Optional[Iterator[BoardDelta]] = None
        self._step_timer = 0
        self._drag: Optional[Tuple[Piece, int, int]] = None  # (piece, start_x, column)

    @property
    def running(self) -> bool:
        return self._running

    # Input ---------------------------------------------------------------
    def _on_mouse_down(self, pos: Tuple[int, int]) -> None:
        if self._steps is not None or self.session.is_settling():
            return
        row, col = cell_at(pos[0], pos[1], self.session.board.rows)
        piece = self.session.board.find_piece(row, col)
        if piece is not None:
            self._drag = (piece, pos[0], piece.col)

    def _on_mouse_motion(self, pos: Tuple[int, int]) -> None:
        if self._drag is None:
            return
        piece, start_x, _ = self._drag
        lo, hi = self.session.board.column_bounds(piece)
        column = min(max(drag_column(piece, start_x, pos[0]), lo), hi)
        self._drag = (piece, start_x, column)

    def _on_mouse_up(self) -> None:
        if self._drag is None:
            return
        piece, _, column = self._drag
        self._drag = None
        delta = self.session.move_request(piece.id, column)
        if delta is not None and delta.slid:
            self._steps = self.session.settle_steps()
            self._step_timer = STEP_MS

    # Settling ------------------------------------------------------------
    def _advance(self, dt: int) -> None:
        if self._steps is None:
            return
        self._step_timer += dt
        if self._step_timer < STEP_MS:
            return
        self._step_timer = 0
        delta = next(self._steps, None)
        if delta is None:
            self._steps = None
            LOGGER.info("Board settled; lines cleared so far: %d", self.session.lines_cleared)
            return
        LOGGER.debug("Settle step: %s", delta.as_dict())

    async def _run_loop(self) -> None:
        pygame.init()
        board = self.session.board
        self._screen = pygame.display.set_mode((board.columns * CELL_SIZE, board.rows * CELL_SIZE))
        pygame.display.set_caption("blockslide")
        self._clock = pygame.time.Clock()
        self.session.reset()
        self._running = True

        while self._running:
            dt = self._clock.tick(FPS)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self._running = False
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    self._on_mouse_down(event.pos)
                elif event.type == pygame.MOUSEMOTION:
                    self._on_mouse_motion(event.pos)
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                    self._on_mouse_up()

            self._advance(dt)

            self._screen.fill(BACKGROUND)
            drag = (self._drag[0], self._drag[2]) if self._drag else None
            draw_board(self._screen, self.session, drag)
            pygame.display.set_caption(f"blockslide - Lines: {self.session.lines_cleared}")
            pygame.display.flip()

            await asyncio.sleep(0)

        if self._steps is not None:
            # Finish the pending run so the session is left unlocked.
            for _ in self._steps:
                pass
            self._steps = None
        pygame.quit()

    def start(self) -> None:
        asyncio.run(self._run_loop())

    def stop(self) -> None:
        self._running = False


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")
    GameRunner().start()


if __name__ == "__main__":  # pragma: no cover - manual execution only
    main()
