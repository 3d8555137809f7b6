"""Rate and snapping utilities — pure transforms on raw note dicts.

Provides:
    scale_notes  – rescale timestamps for a playback-rate variant (DT / HT / custom)
    scale_od     – rescale Overall Difficulty to the same wall-clock hit window
    apply_rate   – both of the above in one call
    snap_notes   – collapse near-simultaneous notes (flams) onto one timestamp

Raw notes are never mutated; every function returns copies.
"""

from __future__ import annotations

from typing import Any, Iterable

from .config import StrainTuning, load_tuning

_TIME_FIELDS: tuple[str, ...] = ("startTime", "endTime", "time", "duration")


def _clamp_rate(rate: float, tuning: StrainTuning) -> float:
    return max(tuning.timing["min_rate"], min(tuning.timing["max_rate"], rate))


def _is_unit_rate(rate: float, tuning: StrainTuning) -> bool:
    return abs(rate - 1.0) < tuning.timing["rate_epsilon"]


def scale_notes(
    notes: Iterable[dict[str, Any]] | None,
    rate: float,
    tuning: StrainTuning | None = None,
) -> list[dict[str, Any]]:
    """Scale every time-like field of *notes* by ``1 / rate``.

    Higher rate = faster song = smaller timestamps. The rate is clamped to
    ``[min_rate, max_rate]`` rather than rejected.

    Args:
        notes: Raw note dicts (``time`` / ``startTime`` / ``endTime`` / ``duration``
            in milliseconds).
        rate: Playback speed multiplier (e.g. ``1.5`` for DT).
        tuning: Optional tuning override.

    Returns:
        A new list of note dicts. At rate ≈ 1.0 the copies are unmodified.
    """
    if not notes:
        return []
    tuning = tuning or load_tuning()
    safe_rate = _clamp_rate(rate, tuning)

    if _is_unit_rate(safe_rate, tuning):
        return [dict(note) for note in notes]

    scaled: list[dict[str, Any]] = []
    for note in notes:
        new_note = dict(note)
        for field in _TIME_FIELDS:
            if new_note.get(field) is not None:
                new_note[field] = new_note[field] / safe_rate
        scaled.append(new_note)
    return scaled


def scale_od(od: float, rate: float, tuning: StrainTuning | None = None) -> float:
    """Recompute OD so the hit window matches the rate-scaled wall-clock window.

    The hit window is modelled as ``base - slope * od`` milliseconds; faster
    rates shrink it, which maps back to a higher OD. Result is clamped to
    ``[min_od, max_od]``.
    """
    tuning = tuning or load_tuning()
    safe_rate = _clamp_rate(rate, tuning)
    if _is_unit_rate(safe_rate, tuning):
        return od

    base = tuning.od["window_base_ms"]
    slope = tuning.od["window_slope_ms"]

    window = (base - slope * od) / safe_rate
    new_od = (base - window) / slope
    return max(tuning.od["min_od"], min(tuning.od["max_od"], new_od))


def apply_rate(
    notes: Iterable[dict[str, Any]] | None,
    od: float,
    rate: float,
    tuning: StrainTuning | None = None,
) -> tuple[list[dict[str, Any]], float]:
    """Return ``(scaled_notes, scaled_od)`` for a playback-rate variant."""
    return scale_notes(notes, rate, tuning), scale_od(od, rate, tuning)


def effective_time(note: dict[str, Any]) -> float:
    """Onset used for snapping: ``startTime`` first, then ``time``, else 0."""
    start = note.get("startTime")
    if start is None:
        start = note.get("time")
    return start or 0.0


def snap_notes(
    notes: Iterable[dict[str, Any]] | None,
    tuning: StrainTuning | None = None,
) -> list[dict[str, Any]]:
    """Snap notes closer than the snap threshold onto their cluster anchor.

    Converts flams and sub-20 ms rolls into chords so the scorer does not read
    them as impossibly fast streams. Notes are copied and sorted by onset
    (stable for equal onsets). A note within the threshold of the current
    anchor takes the anchor's time; any other note becomes the new anchor.

    Args:
        notes: Raw note dicts.
        tuning: Optional tuning override.

    Returns:
        New, time-sorted list of note dicts.
    """
    if not notes:
        return []
    tuning = tuning or load_tuning()
    threshold = tuning.timing["snap_threshold_ms"]

    snapped = sorted((dict(note) for note in notes), key=effective_time)
    if not snapped:
        return []

    anchor = effective_time(snapped[0])
    for note in snapped:
        t = effective_time(note)
        if t - anchor < threshold:
            if note.get("startTime") is not None:
                note["startTime"] = anchor
            if note.get("time") is not None:
                note["time"] = anchor
        else:
            anchor = t

    return snapped
