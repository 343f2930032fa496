"""The settle loop: drop and clear until stable, inject a row, settle again.

A settle run goes through the states::

    IDLE -> DROPPING -> CLEARING -> ... -> INJECTING -> DROPPING -> CLEARING -> ... -> IDLE

The drain phases repeat drop and clear passes until a pass in which neither
moved a piece nor cleared a row.  A clear can open space for a drop and a
drop can complete a row, so one quiet phase on its own is not enough.

:meth:`SettleLoop.steps` exposes the run as a generator that yields one
:class:`~blockslide.events.BoardDelta` per board mutation.  Front-ends that
animate changes pull the next delta once the previous animation is done;
everything else simply calls :meth:`SettleLoop.run`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from .board import Board
from .events import BoardDelta, DeltaKind
from .injector import RowInjector


LOGGER = logging.getLogger(__name__)


class ProcessingLockError(RuntimeError):
    """Raised when the processing lock is entered while already held."""


class ProcessingLock:
    """Board-wide gate that serialises settle runs.

    The lock is not a thread primitive: the board is driven from a single
    thread and the lock only records that a run is in progress.
    """

    def __init__(self) -> None:
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> bool:
        """Take the lock.  Returns ``False`` if it is already held."""

        if self._held:
            return False
        self._held = True
        return True

    def release(self) -> None:
        self._held = False

    @contextmanager
    def hold(self) -> Iterator["ProcessingLock"]:
        """Hold the lock for the duration of a ``with`` block."""

        if not self.acquire():
            raise ProcessingLockError("Processing lock is already held")
        try:
            yield self
        finally:
            self.release()


class SettleState(str, Enum):
    IDLE = "idle"
    DROPPING = "dropping"
    CLEARING = "clearing"
    INJECTING = "injecting"


@dataclass
class SettleReport:
    """Summary of one completed settle run."""

    deltas: List[BoardDelta] = field(default_factory=list)
    passes: int = 0
    injected: bool = False

    @property
    def cleared_rows(self) -> List[int]:
        rows: List[int] = []
        for delta in self.deltas:
            rows.extend(delta.cleared_rows)
        return rows

    @property
    def lines_cleared(self) -> int:
        return len(self.cleared_rows)


class SettleLoop:
    """Drive the board to quiescence around a single row injection."""

    def __init__(self, board: Board, injector: RowInjector) -> None:
        self.board = board
        self.injector = injector
        # The injector refuses to run unless this same lock is held.
        self.lock = injector.lock
        self._state = SettleState.IDLE
        self._passes = 0
        self._injected = False

    @property
    def state(self) -> SettleState:
        return self._state

    @property
    def running(self) -> bool:
        return self.lock.held

    @property
    def passes(self) -> int:
        """Drop and clear passes made by the current or last run."""

        return self._passes

    @property
    def injected(self) -> bool:
        return self._injected

    def run(self) -> Optional[SettleReport]:
        """Settle the board completely.

        Returns ``None`` when another run is already in progress; the request
        is dropped, not queued.
        """

        if self.lock.held:
            LOGGER.info("Settle already in progress; ignoring request")
            return None
        deltas = list(self.steps())
        report = SettleReport(deltas=deltas, passes=self._passes, injected=self._injected)
        LOGGER.debug(
            "Settle finished: %d pass(es), %d delta(s), %d row(s) cleared",
            report.passes,
            len(report.deltas),
            report.lines_cleared,
        )
        return report

    def steps(self) -> Iterator[BoardDelta]:
        """Yield one delta per board mutation until the board is stable.

        The processing lock is held from the first step until the generator
        is exhausted or closed.  If a run is already active the generator is
        empty.
        """

        if self.lock.held:
            LOGGER.info("Settle already in progress; ignoring request")
            return
        with self.lock.hold():
            self._passes = 0
            self._injected = False
            try:
                yield from self._drain()

                self._state = SettleState.INJECTING
                if self.injector.inject():
                    self._injected = True
                    yield self._injection_delta()
                    yield from self._drain()
                else:
                    LOGGER.warning("Row injection failed; finishing without a new row")
            finally:
                self._state = SettleState.IDLE

    def _drain(self) -> Iterator[BoardDelta]:
        while True:
            self._passes += 1

            self._state = SettleState.DROPPING
            before: Dict[int, int] = {p.id: p.row for p in self.board.all_pieces()}
            drops = self.board.resolve_drops()
            if drops:
                yield BoardDelta(
                    kind=DeltaKind.DROP,
                    moved=sorted((p.id, before[p.id], row) for p, row in drops.items()),
                )

            self._state = SettleState.CLEARING
            alive = {p.id for p in self.board.all_pieces()}
            cleared = self.board.resolve_clears()
            if cleared:
                remaining = {p.id for p in self.board.all_pieces()}
                yield BoardDelta(
                    kind=DeltaKind.CLEAR,
                    cleared_rows=cleared,
                    destroyed=sorted(alive - remaining),
                )

            if not drops and not cleared:
                return
            LOGGER.debug(
                "Pass %d: %d drop(s), %d clear(s); continuing",
                self._passes,
                len(drops),
                len(cleared),
            )

    def _injection_delta(self) -> BoardDelta:
        report = self.injector.last_report
        if report is None:
            raise RuntimeError("Injector reported success without an injection report")
        return BoardDelta(
            kind=DeltaKind.INJECT,
            shifted=list(report.shifted),
            destroyed=list(report.destroyed),
            injected=list(report.injected),
        )


__all__ = [
    "ProcessingLock",
    "ProcessingLockError",
    "SettleLoop",
    "SettleReport",
    "SettleState",
]
