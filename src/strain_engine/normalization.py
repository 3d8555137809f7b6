"""Normalization — raw note dicts → canonical notes → time-ordered rows.

A *row* is every note struck at (approximately) the same instant. Two notes
share a row when their onset differs from the row's first onset by less than
the chord tolerance (10 ms, tighter than the 20 ms snapping window).

All computations are deterministic; sorting is stable, so notes with equal
onsets keep their input order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from .config import StrainTuning, load_tuning


@dataclass(frozen=True)
class CanonicalNote:
    time: float  # ms
    duration: float  # ms, 0 for taps
    key: str  # lowercased
    type: str  # "tap" | "hold"


@dataclass
class Row:
    time: float  # ms, onset of the first note in the row
    notes: list[CanonicalNote] = field(default_factory=list)


def _start_time(note: dict[str, Any]) -> float:
    start = note.get("time")
    if start is None:
        start = note.get("startTime")
    return float(start) if start is not None else 0.0


def canonicalize_note(note: dict[str, Any], tuning: StrainTuning | None = None) -> CanonicalNote:
    """Resolve one raw note into a :class:`CanonicalNote`.

    Holds shorter than ``min_hold_ms`` degrade to taps (duration 0).
    """
    tuning = tuning or load_tuning()
    start = _start_time(note)

    duration = 0.0
    end = note.get("endTime")
    if note.get("type") == "hold" and end:
        duration = max(0.0, float(end) - start)
        if duration < tuning.timing["min_hold_ms"]:
            duration = 0.0

    return CanonicalNote(
        time=start,
        duration=duration,
        key=str(note.get("key")).lower(),
        type="hold" if duration > 0 else "tap",
    )


def canonicalize_notes(
    notes: Iterable[dict[str, Any]] | None,
    tuning: StrainTuning | None = None,
) -> list[CanonicalNote]:
    """Canonicalize and sort (stably) by onset."""
    if not notes:
        return []
    tuning = tuning or load_tuning()
    canonical = [canonicalize_note(note, tuning) for note in notes]
    canonical.sort(key=lambda n: n.time)
    return canonical


def build_rows(
    notes: Iterable[dict[str, Any]] | None,
    tuning: StrainTuning | None = None,
) -> list[Row]:
    """Group raw notes into time-ascending rows.

    Args:
        notes: Raw note dicts (usually the output of :func:`snap_notes`).
        tuning: Optional tuning override.

    Returns:
        List of :class:`Row`; empty for empty input.
    """
    tuning = tuning or load_tuning()
    canonical = canonicalize_notes(notes, tuning)
    if not canonical:
        return []

    tolerance = tuning.timing["chord_tolerance_ms"]

    rows: list[Row] = []
    current = Row(time=canonical[0].time, notes=[canonical[0]])
    for note in canonical[1:]:
        if abs(note.time - current.time) < tolerance:
            current.notes.append(note)
        else:
            rows.append(current)
            current = Row(time=note.time, notes=[note])
    rows.append(current)
    return rows
