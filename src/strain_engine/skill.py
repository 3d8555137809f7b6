"""Skill framework — strain decay and peak sectioning shared by every skill.

A skill turns each row into a raw strain increment. The framework decays
the running strain by ``decay ** dt_seconds`` between rows, adds the
increment and freezes the running value once per elapsed 400 ms bin.

Lifecycle:
    Idle          ``section_end is None``; no row seen yet
    Accumulating  rows are being processed
    Finalized     :meth:`Skill.finalize` has run; terminal
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from .config import StrainTuning, load_tuning
from .finger_state import FingerState
from .normalization import Row


@dataclass
class StrainContext:
    """Per-calculation state shared with every skill, by reference."""

    finger_state: FingerState


class Skill(ABC):
    """Abstract base for one strain dimension.

    Subclasses set :attr:`name` (the tuning / result id) and implement
    :meth:`calculate_note_strain`.
    """

    name: str = ""

    def __init__(self, tuning: StrainTuning | None = None) -> None:
        tuning = tuning or load_tuning()
        self.params: dict[str, Any] = tuning.skill(self.name)
        self.decay_factor: float = float(self.params["decay"])
        self.section_length: float = tuning.timing["section_length_ms"]

        self.current_strain: float = 0.0
        self.peaks: list[float] = []
        self.section_end: float | None = None
        self._finalized: bool = False

    @abstractmethod
    def calculate_note_strain(self, row: Row, prev_row: Row | None, context: StrainContext) -> float:
        """Return the raw strain added by *row*."""

    def set_start_time(self, start_time: float) -> None:
        """Align the first peak bin with the map's first note."""
        self.section_end = start_time + self.section_length

    def process(self, row: Row, prev_row: Row | None, context: StrainContext) -> None:
        if self._finalized:
            raise RuntimeError(f"Skill '{self.name}' was already finalized")

        time = row.time
        if self.section_end is None:
            self.set_start_time(time)

        dt = max((time - prev_row.time) / 1000.0, 0.001) if prev_row is not None else 1.0

        self.current_strain *= self.decay_factor ** dt
        self.current_strain += self.calculate_note_strain(row, prev_row, context)

        # Sparse rows may close several bins at once
        while time > self.section_end:
            self.peaks.append(self.current_strain)
            self.section_end += self.section_length

    def finalize(self) -> list[float]:
        """Flush the last bin and return all peaks. Call exactly once."""
        if self._finalized:
            raise RuntimeError(f"Skill '{self.name}' was already finalized")
        self._finalized = True
        self.peaks.append(self.current_strain)
        return self.peaks
