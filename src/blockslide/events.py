"""Structured notifications describing board mutations.

Every discrete mutation performed by the core produces one
:class:`BoardDelta`.  Front-ends read deltas to animate changes instead of
diffing the raw grid each frame.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

RowChange = Tuple[int, int, int]  # (piece_id, from_row, to_row)
ColumnChange = Tuple[int, int, int]  # (piece_id, from_col, to_col)


class DeltaKind(str, Enum):
    """Which operation produced a delta."""

    SLIDE = "slide"
    DROP = "drop"
    CLEAR = "clear"
    INJECT = "inject"


@dataclass
class BoardDelta:
    """Changes caused by a single board operation."""

    kind: DeltaKind
    moved: List[RowChange] = field(default_factory=list)
    slid: List[ColumnChange] = field(default_factory=list)
    cleared_rows: List[int] = field(default_factory=list)
    injected: List[int] = field(default_factory=list)
    shifted: List[RowChange] = field(default_factory=list)
    destroyed: List[int] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.moved
            or self.slid
            or self.cleared_rows
            or self.injected
            or self.shifted
            or self.destroyed
        )

    def as_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


__all__ = ["BoardDelta", "DeltaKind", "RowChange", "ColumnChange"]
