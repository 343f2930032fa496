"""Simulation core for a sliding-block puzzle board."""

from .piece import Piece
from .board import Board, CellState, ShiftResult
from .events import BoardDelta, DeltaKind
from .injector import InjectionReport, RowInjector
from .settle import (
    ProcessingLock,
    ProcessingLockError,
    SettleLoop,
    SettleReport,
    SettleState,
)
from .game_state import GameSession
from .utils import render_ascii, render_grid

__all__ = [
    "Board",
    "BoardDelta",
    "CellState",
    "DeltaKind",
    "GameSession",
    "InjectionReport",
    "Piece",
    "ProcessingLock",
    "ProcessingLockError",
    "RowInjector",
    "SettleLoop",
    "SettleReport",
    "SettleState",
    "ShiftResult",
    "render_ascii",
    "render_grid",
]
