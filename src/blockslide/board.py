"""Board representation for the sliding-block playfield.

Row ``0`` is the bottom of the board.  Pieces fall towards row ``0`` and
injected rows push everything towards ``rows - 1``.

The occupancy grid is a derived index over the live pieces: every mutating
method updates both together, and :meth:`Board.rebuild_grid` can recompute
the grid from the pieces at any time.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .piece import Piece, valid_width
from .utils import render_ascii


# Dimensions of the default board.
ROWS = 8
COLUMNS = 10

Grid = NDArray[np.uint8]
CellUpdate = Tuple[int, int, int]  # (row, col, state)

LOGGER = logging.getLogger(__name__)


class CellState(IntEnum):
    """State of a grid cell.  ``INVALID`` marks coordinates off the board."""

    INVALID = -1
    EMPTY = 0
    OCCUPIED = 1


@dataclass
class ShiftResult:
    """Outcome of :meth:`Board.shift_rows_up_and_clear_bottom`."""

    shifted: List[Tuple[int, int, int]] = field(default_factory=list)
    destroyed: List[int] = field(default_factory=list)


def create_empty_grid(rows: int = ROWS, columns: int = COLUMNS) -> Grid:
    """Return a new empty board grid filled with zeros."""

    return np.zeros((rows, columns), dtype=np.uint8)


class Board:
    """Grid occupancy plus the authoritative set of live pieces."""

    def __init__(self, rows: int = ROWS, columns: int = COLUMNS, *, strict: bool = True) -> None:
        if rows < 1 or columns < 1:
            raise ValueError("Board needs at least one row and one column")
        self.rows = rows
        self.columns = columns
        self.strict = strict
        self.grid: Grid = create_empty_grid(rows, columns)
        self._pieces: Dict[int, Piece] = {}
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------
    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.columns

    def get_cell(self, row: int, col: int) -> CellState:
        """Return the state at ``(row, col)``.

        Coordinates outside the board yield :attr:`CellState.INVALID` rather
        than raising, so callers can probe neighbours freely.
        """

        if self.in_bounds(row, col):
            return CellState(int(self.grid[row, col]))
        return CellState.INVALID

    def is_empty(self, row: int, col: int) -> bool:
        return self.get_cell(row, col) is CellState.EMPTY

    def set_cell(self, row: int, col: int, state: int) -> bool:
        """Write a single cell.  Out-of-bounds writes are ignored."""

        if not self.in_bounds(row, col):
            LOGGER.warning("Ignoring write outside the board at (%d, %d)", row, col)
            return False
        self.grid[row, col] = np.uint8(CellState.OCCUPIED if state else CellState.EMPTY)
        return True

    def batch_set(self, updates: Iterable[CellUpdate]) -> int:
        """Apply several cell writes as one unit and return how many applied.

        Writes are applied in order, so clearing a footprint and then writing
        an overlapping one leaves the later value in place.
        """

        applied = 0
        for row, col, state in updates:
            if self.set_cell(row, col, state):
                applied += 1
        if applied:
            LOGGER.debug("Batch updated %d cell(s)", applied)
        return applied

    def area_is_free(self, row: int, col: int, width: int) -> bool:
        """Return ``True`` if ``width`` cells from ``(row, col)`` are on the board and empty."""

        if width < 1 or not (0 <= row < self.rows) or col < 0 or col + width > self.columns:
            return False
        return not bool(np.any(self.grid[row, col : col + width]))

    def full_rows(self) -> List[int]:
        """Return the indices of rows where every cell is occupied."""

        full = np.all(self.grid != 0, axis=1)
        return [int(r) for r in np.flatnonzero(full)]

    def occupancy(self) -> Grid:
        """Return a read-only copy of the grid."""

        grid = self.grid.copy()
        grid.setflags(write=False)
        return grid

    # ------------------------------------------------------------------
    # Pieces
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._pieces)

    def __contains__(self, piece: object) -> bool:
        return isinstance(piece, Piece) and self._pieces.get(piece.id) is piece

    def all_pieces(self) -> List[Piece]:
        return list(self._pieces.values())

    def pieces_in_row(self, row: int) -> List[Piece]:
        return [p for p in self._pieces.values() if p.row == row]

    def get_piece(self, piece_id: int) -> Optional[Piece]:
        return self._pieces.get(piece_id)

    def find_piece(self, row: int, col: int) -> Optional[Piece]:
        """Return the piece covering ``(row, col)``, if any."""

        for piece in self._pieces.values():
            if piece.covers(row, col):
                return piece
        return None

    def place_piece(self, row: int, col: int, width: int) -> Optional[Piece]:
        """Create a piece at ``(row, col)`` if the area is free.

        Returns ``None`` when ``width`` is not 1-4 or the cells are taken.
        """

        if not valid_width(width) or not self.area_is_free(row, col, width):
            return None
        piece = Piece(id=next(self._ids), row=row, col=col, width=width)
        self._pieces[piece.id] = piece
        self.batch_set((row, c, CellState.OCCUPIED) for c in piece.columns)
        LOGGER.debug("Placed %d-wide piece %d at (%d, %d)", width, piece.id, row, col)
        return piece

    def remove_piece(self, piece: Piece) -> bool:
        """Destroy ``piece`` and free its cells."""

        if piece not in self:
            return False
        del self._pieces[piece.id]
        self.batch_set((piece.row, c, CellState.EMPTY) for c in piece.columns)
        return True

    def clear(self) -> None:
        """Remove every piece and empty the grid."""

        self._pieces.clear()
        self.grid = create_empty_grid(self.rows, self.columns)

    # ------------------------------------------------------------------
    # Horizontal movement
    # ------------------------------------------------------------------
    def movable_range(self, piece: Piece) -> Tuple[int, int]:
        """Return the leftmost and rightmost cells ``piece`` can reach in its row."""

        row = piece.row
        min_col = piece.col
        for c in range(piece.col - 1, -1, -1):
            if self.grid[row, c] != 0:
                break
            min_col = c
        max_col = piece.right
        for c in range(piece.right + 1, self.columns):
            if self.grid[row, c] != 0:
                break
            max_col = c
        return min_col, max_col

    def column_bounds(self, piece: Piece) -> Tuple[int, int]:
        """Return the smallest and largest legal ``col`` for ``piece``."""

        min_col, max_col = self.movable_range(piece)
        return min_col, max_col - piece.width + 1

    def move_piece(self, piece: Piece, target_col: int) -> int:
        """Slide ``piece`` towards ``target_col`` and return its new column.

        The target is clamped to the reachable range, so requesting a column
        beyond an obstruction stops the piece next to it.
        """

        lo, hi = self.column_bounds(piece)
        col = min(max(int(target_col), lo), hi)
        if col == piece.col:
            return col
        updates: List[CellUpdate] = [(piece.row, c, CellState.EMPTY) for c in piece.columns]
        updates.extend((piece.row, c, CellState.OCCUPIED) for c in range(col, col + piece.width))
        self.batch_set(updates)
        LOGGER.debug("Piece %d slid from column %d to %d", piece.id, piece.col, col)
        piece.col = col
        return col

    # ------------------------------------------------------------------
    # Gravity and line clears
    # ------------------------------------------------------------------
    def _landing_row(self, piece: Piece) -> int:
        target = piece.row
        for r in range(piece.row - 1, -1, -1):
            if not self.area_is_free(r, piece.col, piece.width):
                break
            target = r
        return target

    def _bottom_up(self) -> List[Piece]:
        return sorted(self._pieces.values(), key=lambda p: (p.row, p.col))

    def find_drops(self) -> Dict[Piece, int]:
        """Return the landing row of every piece that could fall right now.

        Nothing is moved; each piece is evaluated against the current grid.
        """

        drops: Dict[Piece, int] = {}
        for piece in self._bottom_up():
            target = self._landing_row(piece)
            if target < piece.row:
                drops[piece] = target
        return drops

    def resolve_drops(self) -> Dict[Piece, int]:
        """Let every piece fall as far as the empty rows directly below allow.

        Pieces are processed from the bottom row up so that a piece falling
        into space vacated by a lower piece in the same pass is not blocked.
        A piece never passes through an occupied row, even if an empty row
        lies further down.  Returns ``{piece: new_row}`` for moved pieces.
        """

        results: Dict[Piece, int] = {}
        for piece in self._bottom_up():
            if piece.row == 0:
                continue
            target = self._landing_row(piece)
            if target >= piece.row:
                continue
            updates: List[CellUpdate] = [(piece.row, c, CellState.EMPTY) for c in piece.columns]
            updates.extend((target, c, CellState.OCCUPIED) for c in piece.columns)
            self.batch_set(updates)
            LOGGER.debug("Piece %d dropped from row %d to row %d", piece.id, piece.row, target)
            piece.row = target
            results[piece] = target

        if results:
            self._after_bulk_update(f"after {len(results)} drop(s)")
        return results

    def resolve_clears(self) -> List[int]:
        """Clear every full row and destroy the pieces on it.

        Returns the cleared row indices in ascending order.
        """

        cleared = self.full_rows()
        for row in cleared:
            doomed = self.pieces_in_row(row)
            for piece in doomed:
                del self._pieces[piece.id]
            self.grid[row, :] = CellState.EMPTY
            LOGGER.debug("Cleared row %d, removed %d piece(s)", row, len(doomed))

        if cleared:
            self._after_bulk_update(f"after clearing {len(cleared)} row(s)")
        return cleared

    def shift_rows_up_and_clear_bottom(self) -> ShiftResult:
        """Move every piece up one row, leaving row ``0`` empty.

        Pieces pushed past the top row are destroyed.
        """

        result = ShiftResult()
        for piece in sorted(self._pieces.values(), key=lambda p: -p.row):
            new_row = piece.row + 1
            if new_row >= self.rows:
                del self._pieces[piece.id]
                result.destroyed.append(piece.id)
                LOGGER.debug("Piece %d pushed off the top of the board", piece.id)
                continue
            result.shifted.append((piece.id, piece.row, new_row))
            piece.row = new_row

        self.rebuild_grid()
        self._after_bulk_update(
            f"after shifting {len(result.shifted)} piece(s) up, {len(result.destroyed)} lost"
        )
        return result

    # ------------------------------------------------------------------
    # Consistency
    # ------------------------------------------------------------------
    def rebuild_grid(self) -> None:
        """Recompute the grid from the live pieces."""

        grid = create_empty_grid(self.rows, self.columns)
        for piece in self._pieces.values():
            grid[piece.row, piece.col : piece.right + 1] = CellState.OCCUPIED
        self.grid = grid

    def check_consistency(self) -> None:
        """Verify the board invariants.

        Raises:
            AssertionError: If pieces overlap, leave the board, or disagree
                with the grid.
        """

        expected = np.zeros((self.rows, self.columns), dtype=np.int16)
        for piece in self._pieces.values():
            if not (0 <= piece.row < self.rows and 0 <= piece.col and piece.right < self.columns):
                raise AssertionError(f"Piece {piece.id} lies outside the board")
            expected[piece.row, piece.col : piece.right + 1] += 1
        if np.any(expected > 1):
            raise AssertionError("Overlapping pieces detected")
        if not np.array_equal(expected, self.grid):
            raise AssertionError("Grid does not match the piece set")

    def _after_bulk_update(self, title: str) -> None:
        if self.strict:
            self.check_consistency()
        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug("Board %s:\n%s", title, render_ascii(self))

    def load_rows(self, layout: Sequence[Sequence[Tuple[int, int]]]) -> List[Piece]:
        """Replace the board with pieces described by per-row width lists.

        ``layout[r]`` lists ``(col, width)`` pairs for row ``r``.  This
        helper exists for tests and demos that need specific boards.
        """

        self.clear()
        placed: List[Piece] = []
        for row, entries in enumerate(layout):
            for col, width in entries:
                piece = self.place_piece(row, col, width)
                if piece is None:
                    raise ValueError(f"Cannot place {width}-wide piece at ({row}, {col})")
                placed.append(piece)
        return placed


__all__ = ["Board", "CellState", "ShiftResult", "ROWS", "COLUMNS", "create_empty_grid"]
