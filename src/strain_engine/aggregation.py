"""Aggregation — per-skill peak lists → scalars → one star rating.

Top-heavy weighting: the hardest bin counts in full, the next at 65 %, the
third at 42 %, and so on, so a map's rating is defined by its hardest
stretch rather than its length. The same weighting applies to every skill.
"""

from __future__ import annotations

import math
from typing import Mapping, Sequence

import numpy as np

from .config import SKILL_NAMES, StrainTuning, load_tuning


def aggregate_peaks(peaks: Sequence[float], tuning: StrainTuning | None = None) -> float:
    """Weighted sum of *peaks* sorted descending (weight ×0.65 per rank).

    Stops once the weight falls below ``min_weight``. Returns 0 for no peaks.
    """
    if len(peaks) == 0:
        return 0.0
    tuning = tuning or load_tuning()

    ordered = np.sort(np.asarray(peaks, dtype=np.float64))[::-1]

    total = 0.0
    weight = 1.0
    for peak in ordered:
        total += float(peak) * weight
        weight *= tuning.peak_decay
        if weight < tuning.min_peak_weight:
            break
    return total


def od_scale(overall_difficulty: float, tuning: StrainTuning | None = None) -> float:
    """Precision multiplier for OD: ``1 + slope * (od - 5)``."""
    tuning = tuning or load_tuning()
    return 1.0 + tuning.od["precision_slope"] * (overall_difficulty - tuning.od["neutral"])


def scale_skills(
    aggregated: Mapping[str, float],
    overall_difficulty: float,
    tuning: StrainTuning | None = None,
) -> dict[str, float]:
    """``sqrt(raw) * weight`` per skill; Precision also scales with OD."""
    tuning = tuning or load_tuning()
    scaled: dict[str, float] = {}
    for name in SKILL_NAMES:
        value = math.sqrt(aggregated.get(name, 0.0)) * tuning.skill_weight(name)
        if name == "prec":
            value *= od_scale(overall_difficulty, tuning)
        scaled[name] = value
    return scaled


def combine_skills(scaled: Mapping[str, float], tuning: StrainTuning | None = None) -> float:
    """Strongest-link total: rank skill intensities and apply diminishing weights."""
    tuning = tuning or load_tuning()
    ranked = sorted((scaled[name] for name in SKILL_NAMES), reverse=True)
    return sum(value * weight for value, weight in zip(ranked, tuning.rank_weights))
