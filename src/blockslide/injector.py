"""Random row generation.

:class:`RowInjector` pushes the board up one row and packs a fresh bottom row
with pieces of random width.  The packer is greedy and bounded: it gives up
after a fixed number of attempts even when the sampled fill density has not
been reached, which keeps the difficulty of the game where it is.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

from .board import Board
from .piece import MAX_PIECE_WIDTH, Piece

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .settle import ProcessingLock


# Fraction of the new row to fill, sampled uniformly per injection.
FILL_RANGE = (0.5, 0.9)
# Placement attempts before the packer gives up.
MAX_ATTEMPTS = 50
# Rows, counted from the bottom, that random spawns may use.
SPAWN_ROWS = 3

LOGGER = logging.getLogger(__name__)


@dataclass
class InjectionReport:
    """What the last :meth:`RowInjector.inject` call did."""

    shifted: List[Tuple[int, int, int]] = field(default_factory=list)
    destroyed: List[int] = field(default_factory=list)
    injected: List[int] = field(default_factory=list)
    target: int = 0
    filled: int = 0
    attempts: int = 0


class RowInjector:
    """Shift the board up and populate the new bottom row."""

    def __init__(
        self,
        board: Board,
        lock: "ProcessingLock",
        *,
        rng: Optional[random.Random] = None,
        fill_range: Tuple[float, float] = FILL_RANGE,
        max_attempts: int = MAX_ATTEMPTS,
        max_width: int = MAX_PIECE_WIDTH,
    ) -> None:
        low, high = fill_range
        if not 0.0 <= low <= high <= 1.0:
            raise ValueError(f"Invalid fill range: {fill_range}")
        if max_attempts < 0:
            raise ValueError("max_attempts must be non-negative")
        if not 1 <= max_width <= MAX_PIECE_WIDTH:
            raise ValueError(f"max_width must be between 1 and {MAX_PIECE_WIDTH}")
        self.board = board
        self.lock = lock
        self.rng = rng or random.Random()
        self.fill_range = (low, high)
        self.max_attempts = max_attempts
        self.max_width = max_width
        self.last_report: Optional[InjectionReport] = None

    def inject(self) -> bool:
        """Shift every row up and fill row ``0``.

        Returns ``False`` without touching the board when the processing lock
        is not held.  An under-filled row still counts as success.
        """

        if not self.lock.held:
            LOGGER.warning("Row injection rejected: processing lock not held")
            return False

        shift = self.board.shift_rows_up_and_clear_bottom()
        report = InjectionReport(shifted=shift.shifted, destroyed=shift.destroyed)
        self._fill_bottom_row(report)
        self.last_report = report
        LOGGER.debug(
            "Injected row: shifted %d piece(s), lost %d, placed %d (%d/%d cells, %d attempts)",
            len(report.shifted),
            len(report.destroyed),
            len(report.injected),
            report.filled,
            self.board.columns,
            report.attempts,
        )
        return True

    def _fill_bottom_row(self, report: InjectionReport) -> None:
        columns = self.board.columns
        density = self.rng.uniform(*self.fill_range)
        report.target = math.floor(columns * density)

        while report.filled < report.target and report.attempts < self.max_attempts:
            report.attempts += 1
            width = self.rng.randint(1, self.max_width)
            remaining = columns - report.filled
            if width > remaining:
                width = self.rng.randint(1, remaining)
            start = self.rng.randint(0, columns - width)
            piece = self.board.place_piece(0, start, width)
            if piece is None:
                continue
            report.injected.append(piece.id)
            report.filled += width

    # ------------------------------------------------------------------
    # Initial board setup
    # ------------------------------------------------------------------
    def spawn_random_piece(self, rows: int = SPAWN_ROWS) -> Optional[Piece]:
        """Place one random piece somewhere in the bottom ``rows`` rows.

        Returns ``None`` if no free spot was found within the attempt budget.
        """

        rows = max(1, min(rows, self.board.rows))
        width = min(self.rng.randint(1, self.max_width), self.board.columns)
        for _ in range(self.max_attempts):
            row = self.rng.randrange(rows)
            col = self.rng.randint(0, self.board.columns - width)
            piece = self.board.place_piece(row, col, width)
            if piece is not None:
                return piece
        LOGGER.info("No room for a %d-wide piece in the bottom %d row(s)", width, rows)
        return None

    def populate(self, count: int, rows: int = SPAWN_ROWS) -> List[Piece]:
        """Clear the board and spawn up to ``count`` random pieces."""

        self.board.clear()
        pieces: List[Piece] = []
        for index in range(count):
            piece = self.spawn_random_piece(rows)
            if piece is None:
                LOGGER.info("Stopped spawning after %d of %d piece(s)", index, count)
                break
            pieces.append(piece)
        return pieces


__all__ = ["RowInjector", "InjectionReport", "FILL_RANGE", "MAX_ATTEMPTS", "SPAWN_ROWS"]
