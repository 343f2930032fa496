"""Piece definitions and basic geometry.

A piece is a horizontal bar one cell high and one to four cells wide.  Its
position on the board is mutable (the board moves it around) but its width
and identity are fixed once the piece exists.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

MIN_PIECE_WIDTH = 1
MAX_PIECE_WIDTH = 4

Cell = Tuple[int, int]  # (row, col)


def valid_width(width: int) -> bool:
    return isinstance(width, int) and MIN_PIECE_WIDTH <= width <= MAX_PIECE_WIDTH


@dataclass(eq=False)
class Piece:
    """A 1xN piece living on a :class:`~blockslide.board.Board`.

    Pieces compare and hash by identity so they can be used as dictionary
    keys while their position changes.
    """

    id: int
    row: int
    col: int
    width: int

    def __post_init__(self) -> None:
        if not valid_width(self.width):
            raise ValueError(f"Piece width must be between 1 and 4, got {self.width}")
        if self.row < 0 or self.col < 0:
            raise ValueError("Piece position must be non-negative")

    def __setattr__(self, name: str, value: object) -> None:
        if name in ("id", "width") and name in self.__dict__:
            raise AttributeError(f"Piece.{name} cannot be changed")
        object.__setattr__(self, name, value)

    @property
    def right(self) -> int:
        """Column of the rightmost cell."""

        return self.col + self.width - 1

    @property
    def columns(self) -> range:
        return range(self.col, self.col + self.width)

    def footprint(self) -> List[Cell]:
        """Return the cells covered by the piece."""

        return [(self.row, c) for c in self.columns]

    def covers(self, row: int, col: int) -> bool:
        return row == self.row and self.col <= col <= self.right
