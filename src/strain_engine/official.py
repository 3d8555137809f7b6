"""Official formula — the legacy single-formula star rating.

Kept as an independent path for side-by-side comparison with the skill-based
rating. It does not snap, build rows or model fingers:

    1. One event per distinct timestamp (note starts, plus hold ends).
    2. Event strain ``(1/dt) ** alpha``, reduced when the same key was used in
       one of the last few events and boosted for chords.
    3. Strain is blended into an exponential moving average (half-life in s).
    4. Stars = mean of the top EMA values × length bonus × OD bonus.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Any, Iterable

import numpy as np

from .config import StrainTuning, load_tuning


def _to_seconds(value: Any) -> float:
    return float(value) / 1000.0 if value is not None else 0.0


def _events(notes: Iterable[dict[str, Any]]) -> list[tuple[float, list[str]]]:
    """Group keys by timestamp (seconds); keys are de-duplicated per time."""
    by_time: dict[float, list[str]] = {}

    def add(t: float, key: Any) -> None:
        keys = by_time.setdefault(t, [])
        if key not in keys:
            keys.append(key)

    for note in notes:
        kind = note.get("type")
        if kind == "hold":
            start = note.get("startTime")
            start = _to_seconds(start if start is not None else note.get("time"))
            add(start, note.get("key"))
            end = note.get("endTime")
            if end is not None and _to_seconds(end) > start:
                add(_to_seconds(end), note.get("key"))
        elif kind == "tap":
            time = note.get("time")
            add(_to_seconds(time if time is not None else note.get("startTime")), note.get("key"))

    return sorted(by_time.items())


def chord_bonus(key_count: int, tuning: StrainTuning | None = None) -> float:
    """Multiplier for an event striking *key_count* keys at once."""
    cfg = (tuning or load_tuning()).official
    return 1.0 + cfg["chord_bonus_max"] * (1.0 - math.exp(-cfg["chord_bonus_rate"] * max(0, key_count - 1)))


def reuse_penalty(distance: int, tuning: StrainTuning | None = None) -> float:
    """Penalty for a key already struck *distance* events earlier."""
    cfg = (tuning or load_tuning()).official
    return cfg["reuse_base"] * math.exp(-cfg["reuse_falloff"] * (distance - 1))


def event_strains(
    events: list[tuple[float, list[str]]],
    tuning: StrainTuning | None = None,
) -> list[tuple[float, float]]:
    """Return ``(dt, strain)`` per event, after the reuse and chord adjustments.

    Reuse is checked against the last ``reuse_window`` events only; the
    summed penalty can lower strain to ``reuse_floor`` at most.
    """
    tuning = tuning or load_tuning()
    cfg = tuning.official
    if not events:
        return []

    strains: list[tuple[float, float]] = []
    last_t = events[0][0]
    history: deque[set[str]] = deque(maxlen=int(cfg["reuse_window"]))

    for t, keys in events:
        dt = max(cfg["min_dt"], t - last_t)
        strain = (1.0 / dt) ** cfg["alpha"]

        reuse = 0.0
        for distance, previous in enumerate(reversed(history), start=1):
            if any(key in previous for key in keys):
                reuse += reuse_penalty(distance, tuning)

        strain *= max(cfg["reuse_floor"], 1.0 - reuse)
        strain *= chord_bonus(len(keys), tuning)
        strains.append((dt, strain))

        history.append(set(keys))
        last_t = t

    return strains


def calculate_official(
    notes: Iterable[dict[str, Any]] | None,
    overall_difficulty: float | None = 5,
    tuning: StrainTuning | None = None,
) -> float:
    """Legacy star rating for a chart.

    Args:
        notes: Note dicts with times in milliseconds. Taps use ``time``;
            holds use ``startTime`` / ``endTime``.
        overall_difficulty: Chart OD. ``None`` and ``0`` both mean the
            default (5), as in the legacy tool.
        tuning: Optional tuning override (``official`` section).

    Returns:
        Star value; ``0.0`` for empty input.
    """
    if not notes:
        return 0.0
    tuning = tuning or load_tuning()
    cfg = tuning.official
    od = overall_difficulty or tuning.od["default"]

    events = _events(notes)
    if not events:
        return 0.0

    # ── EMA over event strain ─────────────────────────────────
    ema = 0.0
    ema_values: list[float] = []
    for dt, strain in event_strains(events, tuning):
        decay = 0.5 ** (dt / cfg["half_life"])
        ema = ema * decay + strain * (1.0 - decay)
        ema_values.append(ema)

    # ── Aggregate: mean of the hardest tail ───────────────────
    ordered = np.sort(np.asarray(ema_values, dtype=np.float64))[::-1]
    take = max(1, int(len(ordered) * cfg["tail_fraction"]))
    core = float(ordered[:take].mean())

    # ── Final scaling ─────────────────────────────────────────
    max_events = cfg["max_length_events"]
    x = min(len(events), max_events)
    length_bonus = 1.0 + (cfg["max_length_bonus"] - 1.0) * math.log(1 + x) / math.log(1 + max_events)
    od_bonus = 1.0 + cfg["od_slope"] * (od - tuning.od["neutral"])

    return core * length_bonus * od_bonus * cfg["star_scale"]
