"""High level game session container.

:class:`GameSession` is what input handlers and renderers talk to.  It owns
the board, the row injector and the settle loop, rejects moves while a
settle run holds the processing lock, and collects every
:class:`~blockslide.events.BoardDelta` in an outbox for the presentation
layer to consume.
"""

from __future__ import annotations

import logging
import random
from typing import Iterator, List, Optional, Tuple

from .board import COLUMNS, ROWS, Board, CellState
from .events import BoardDelta, DeltaKind
from .injector import FILL_RANGE, MAX_ATTEMPTS, SPAWN_ROWS, RowInjector
from .piece import Piece
from .settle import ProcessingLock, SettleLoop, SettleReport


# Number of pieces spawned on a fresh board, inclusive range.
INITIAL_PIECES = (3, 5)

LOGGER = logging.getLogger(__name__)


class GameSession:
    """Mutable state for one game on a sliding-block board."""

    def __init__(
        self,
        rows: int = ROWS,
        columns: int = COLUMNS,
        *,
        seed: Optional[int] = None,
        initial_pieces: Tuple[int, int] = INITIAL_PIECES,
        spawn_rows: int = SPAWN_ROWS,
        fill_range: Tuple[float, float] = FILL_RANGE,
        max_attempts: int = MAX_ATTEMPTS,
        strict: bool = True,
    ) -> None:
        low, high = initial_pieces
        if low < 0 or high < low:
            raise ValueError(f"Invalid initial piece range: {initial_pieces}")
        self.initial_pieces = (low, high)
        self.spawn_rows = spawn_rows
        self.rng = random.Random(seed)
        self.lock = ProcessingLock()
        self.board = Board(rows, columns, strict=strict)
        self.injector = RowInjector(
            self.board,
            self.lock,
            rng=self.rng,
            fill_range=fill_range,
            max_attempts=max_attempts,
        )
        self.settle_loop = SettleLoop(self.board, self.injector)
        self._outbox: List[BoardDelta] = []
        self.lines_cleared = 0
        self.moves = 0
        self.turns = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def reset(self, seed: Optional[int] = None) -> List[Piece]:
        """Start a new game with a few random pieces near the bottom.

        The starting pieces are not settled; the first settle run lets any
        floating ones fall.
        """

        if self.is_settling():
            raise RuntimeError("Cannot reset while the board is settling")
        if seed is not None:
            self.rng.seed(seed)
        self._outbox.clear()
        self.lines_cleared = 0
        self.moves = 0
        self.turns = 0
        count = self.rng.randint(*self.initial_pieces)
        pieces = self.injector.populate(count, self.spawn_rows)
        LOGGER.info("New game: %d starting piece(s)", len(pieces))
        return pieces

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    def move_request(self, piece_id: int, target_col: int) -> Optional[BoardDelta]:
        """Slide a piece towards ``target_col``.

        Returns ``None`` if the request is rejected: the board is settling or
        the piece does not exist.  Otherwise returns the slide delta, whose
        ``slid`` list is empty when the piece could not move.
        """

        if self.is_settling():
            LOGGER.info("Move of piece %s rejected: board is settling", piece_id)
            return None
        piece = self.board.get_piece(piece_id)
        if piece is None:
            LOGGER.warning("Move rejected: unknown piece %s", piece_id)
            return None

        from_col = piece.col
        to_col = self.board.move_piece(piece, target_col)
        delta = BoardDelta(kind=DeltaKind.SLIDE)
        if to_col != from_col:
            delta.slid.append((piece.id, from_col, to_col))
            self.moves += 1
        self._outbox.append(delta)
        return delta

    def settle_request(self) -> Optional[SettleReport]:
        """Run the settle loop to completion.

        Returns ``None`` immediately if a run is already in progress.
        """

        if self.is_settling():
            LOGGER.info("Settle already in progress; ignoring request")
            return None
        deltas = list(self.settle_steps())
        report = SettleReport(
            deltas=deltas,
            passes=self.settle_loop.passes,
            injected=self.settle_loop.injected,
        )
        LOGGER.debug("Turn %d settled, %d line(s) cleared so far", self.turns, self.lines_cleared)
        return report

    def settle_steps(self) -> Iterator[BoardDelta]:
        """Settle one mutation at a time, yielding each delta.

        Meant for front-ends that animate each step before continuing.  The
        session stays locked until the iterator is exhausted or closed.
        """

        if self.is_settling():
            LOGGER.info("Settle already in progress; ignoring request")
            return
        steps = self.settle_loop.steps()
        try:
            for delta in steps:
                self._outbox.append(delta)
                self.lines_cleared += len(delta.cleared_rows)
                yield delta
        finally:
            steps.close()
            # A run counts as a turn even when it stops early.
            self.turns += 1

    def move_and_settle(self, piece_id: int, target_col: int) -> Optional[SettleReport]:
        """Move a piece and, if it actually moved, settle the board."""

        delta = self.move_request(piece_id, target_col)
        if delta is None or not delta.slid:
            return None
        return self.settle_request()

    def drain_deltas(self) -> List[BoardDelta]:
        """Return and forget all deltas produced since the last call."""

        deltas = self._outbox
        self._outbox = []
        return deltas

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def is_settling(self) -> bool:
        return self.lock.held

    def all_pieces(self) -> List[Piece]:
        return self.board.all_pieces()

    def pieces_in_row(self, row: int) -> List[Piece]:
        return self.board.pieces_in_row(row)

    def cell(self, row: int, col: int) -> CellState:
        return self.board.get_cell(row, col)

    def movable_range(self, piece_id: int) -> Optional[Tuple[int, int]]:
        piece = self.board.get_piece(piece_id)
        if piece is None:
            return None
        return self.board.movable_range(piece)


__all__ = ["GameSession", "INITIAL_PIECES"]
