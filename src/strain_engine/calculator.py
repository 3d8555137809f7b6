"""Calculator — orchestrates one strain-rating pass over a chart.

Pipeline:
    1. Snap near-simultaneous notes (flams become chords).
    2. Group notes into rows.
    3. Feed every row to the seven skills, then update the finger state.
    4. Aggregate each skill's peaks and combine them into one star value.

A :class:`Calculator` owns its skills; build a fresh one per chart.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from .aggregation import aggregate_peaks, combine_skills, scale_skills
from .config import SKILL_NAMES, StrainTuning, load_tuning
from .finger_state import FingerState
from .keymap import KEY_MAP
from .normalization import Row, build_rows
from .rate_utils import snap_notes
from .skill import Skill, StrainContext
from .skills import SKILL_TYPES

logger = logging.getLogger(__name__)


def empty_result() -> dict[str, Any]:
    """Zero-valued result for charts without notes (no metadata / peaks)."""
    return {
        "total": 0.0,
        "details": {name: 0.0 for name in SKILL_NAMES},
    }


class Calculator:
    """Single-use strain calculator.

    Args:
        tuning: Optional tuning override; defaults to the bundled YAML.
    """

    def __init__(self, tuning: StrainTuning | None = None) -> None:
        self.tuning = tuning or load_tuning()
        self.skills: tuple[Skill, ...] = tuple(skill_type(self.tuning) for skill_type in SKILL_TYPES)
        self._used = False

    def calculate(
        self,
        raw_notes: Iterable[dict[str, Any]] | None,
        overall_difficulty: float | None = None,
        return_peaks: bool = False,
    ) -> dict[str, Any]:
        """Rate one chart.

        Args:
            raw_notes: Note dicts (``time``/``startTime``, ``endTime``, ``key``,
                ``type``) with times in milliseconds.
            overall_difficulty: Chart OD; ``None`` means the default (5).
            return_peaks: Also return each skill's raw per-bin peaks.

        Returns:
            ``{"total", "details", "metadata"}`` plus ``"peaks"`` when
            requested. Empty input yields :func:`empty_result`.
        """
        if self._used:
            raise RuntimeError("Calculator instances are single-use; create a new one per chart")
        self._used = True

        if overall_difficulty is None:
            overall_difficulty = self.tuning.od["default"]

        rows = build_rows(snap_notes(raw_notes, self.tuning), self.tuning)
        if not rows:
            return empty_result()

        first_note_time = rows[0].time
        drain_time = (rows[-1].time - first_note_time) / 1000.0

        for skill in self.skills:
            skill.set_start_time(first_note_time)

        finger_state = FingerState(self.tuning)
        context = StrainContext(finger_state=finger_state)

        processed = 0
        dropped = 0
        prev_row: Row | None = None
        for raw_row in rows:
            valid = [note for note in raw_row.notes if note.key in KEY_MAP]
            dropped += len(raw_row.notes) - len(valid)
            if not valid and len(rows) > 1:
                continue
            row = Row(time=raw_row.time, notes=valid)

            for skill in self.skills:
                skill.process(row, prev_row, context)

            for note in row.notes:
                key_data = KEY_MAP[note.key]
                finger_state.update(key_data.finger, row.time, key_data.row, key_data.x, note.duration)

            prev_row = row
            processed += 1

        if dropped:
            logger.debug("Dropped %d note(s) on keys outside the key table", dropped)

        aggregated: dict[str, float] = {}
        peaks: dict[str, list[float]] = {}
        for skill in self.skills:
            skill_peaks = skill.finalize()
            peaks[skill.name] = skill_peaks
            aggregated[skill.name] = aggregate_peaks(skill_peaks, self.tuning)

        details = scale_skills(aggregated, overall_difficulty, self.tuning)
        total = combine_skills(details, self.tuning)

        logger.debug(
            "Rated %d row(s) over %.2fs: total=%.4f (%s)",
            processed,
            drain_time,
            total,
            ", ".join(f"{name}={value:.3f}" for name, value in details.items()),
        )

        result: dict[str, Any] = {
            "total": total,
            "details": details,
            "metadata": {
                "drain_time": drain_time,
                "first_note_time": first_note_time,
            },
        }
        if return_peaks:
            result["peaks"] = peaks
        return result


def calculate_strain(
    raw_notes: Iterable[dict[str, Any]] | None,
    overall_difficulty: float | None = 5,
    return_peaks: bool = False,
    tuning: StrainTuning | None = None,
) -> dict[str, Any]:
    """Rate a chart with a fresh :class:`Calculator` (see :meth:`Calculator.calculate`)."""
    return Calculator(tuning).calculate(raw_notes, overall_difficulty, return_peaks)
