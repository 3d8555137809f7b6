"""Finger state — the physical state of both hands during one calculation.

One :class:`FingerSlot` per finger keeps only the most recent event: when
the finger last struck, on which row and column, and when its held note
releases. Used to detect same-finger jacks, row displacement and hold
interference.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import StrainTuning, load_tuning
from .keymap import FINGER_COUNT, ROW_HOME


@dataclass
class FingerSlot:
    last_time: float = -1000.0
    last_row: int = ROW_HOME
    last_col: float = 0.0
    free_at: float = -1000.0  # ms at which the held note releases


class FingerState:
    """Per-finger last-use model, updated once per row."""

    def __init__(self, tuning: StrainTuning | None = None) -> None:
        tuning = tuning or load_tuning()
        self.holding_tolerance: float = tuning.finger_state["holding_tolerance_ms"]
        self.fingers: list[FingerSlot] = [FingerSlot() for _ in range(FINGER_COUNT)]

    def update(
        self,
        finger_idx: int,
        time: float,
        row: int,
        col: float,
        duration: float = 0.0,
    ) -> None:
        if finger_idx < 0 or finger_idx >= FINGER_COUNT:
            return

        slot = self.fingers[finger_idx]
        slot.last_time = time
        slot.last_row = row
        slot.last_col = col
        slot.free_at = time + duration

    def get(self, finger_idx: int) -> FingerSlot:
        return self.fingers[finger_idx]

    def holding_count(self, time: float, exclude_idx: int | None = None) -> int:
        """Count *other* fingers still holding a note at *time*."""
        return sum(
            1
            for i, slot in enumerate(self.fingers)
            if i != exclude_idx and slot.free_at > time + self.holding_tolerance
        )
