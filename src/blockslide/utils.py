"""Utility helpers for rendering and inspecting boards."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .board import Board


EMPTY_CHAR = "."
FILLED_CHAR = "#"


def render_grid(board: "Board") -> List[List[int]]:
    """Return the board as nested lists of piece widths, top row first.

    Empty cells are ``0``; occupied cells hold the width of the piece covering
    them, which lets text front-ends tell adjacent pieces apart.
    """

    grid = [[0] * board.columns for _ in range(board.rows)]
    for piece in board.all_pieces():
        for col in piece.columns:
            grid[board.rows - 1 - piece.row][col] = piece.width
    return grid


def render_ascii(board: "Board", *, labels: bool = False) -> str:
    """Return a text picture of the board with the top row first.

    With ``labels`` each line is prefixed by its row index.
    """

    lines: List[str] = []
    for offset, values in enumerate(render_grid(board)):
        row = board.rows - 1 - offset
        text = "".join(str(v) if v else EMPTY_CHAR for v in values)
        lines.append(f"{row:>2} {text}" if labels else text)
    return "\n".join(lines)


def occupancy_ascii(board: "Board") -> str:
    """Return the raw grid as ``#``/``.`` characters, top row first."""

    return "\n".join(
        "".join(FILLED_CHAR if cell else EMPTY_CHAR for cell in board.grid[row])
        for row in range(board.rows - 1, -1, -1)
    )
