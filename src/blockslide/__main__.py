"""Simple ASCII demo for the board engine.

Run with: `python -m blockslide`

Plays a handful of random turns (slide a random piece, then settle) and
prints the board after each one.  Pass ``--help`` for options.
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from . import GameSession, render_ascii
from .board import COLUMNS, ROWS


LOGGER = logging.getLogger(__name__)


def play_turn(session: GameSession) -> Optional[str]:
    """Slide one random piece to a random legal column and settle.

    Returns a one-line description of the turn, or ``None`` if no piece can
    move.
    """

    candidates = []
    for piece in session.all_pieces():
        lo, hi = session.board.column_bounds(piece)
        if hi > lo:
            candidates.append((piece, lo, hi))
    if not candidates:
        return None

    piece, lo, hi = session.rng.choice(candidates)
    target = session.rng.choice([c for c in range(lo, hi + 1) if c != piece.col])
    start = piece.col
    report = session.move_and_settle(piece.id, target)
    cleared = report.lines_cleared if report else 0
    return f"piece {piece.id} ({piece.width} wide): column {start} -> {target}, cleared {cleared}"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--rows", type=int, default=ROWS, help="Board height.")
    parser.add_argument("--columns", type=int, default=COLUMNS, help="Board width.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed.")
    parser.add_argument("--turns", type=int, default=5, help="Number of turns to play.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (e.g. DEBUG, INFO, WARNING).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(name)s: %(message)s",
    )

    session = GameSession(args.rows, args.columns, seed=args.seed)
    session.reset()
    print(render_ascii(session.board, labels=True))
    for turn in range(1, args.turns + 1):
        summary = play_turn(session)
        if summary is None:
            print(f"Turn {turn}: no piece can move")
            break
        print(f"\nTurn {turn}: {summary}")
        print(render_ascii(session.board, labels=True))
    LOGGER.info("Lines cleared: %d", session.lines_cleared)


if __name__ == "__main__":
    main()
