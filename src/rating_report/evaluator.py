"""Evaluator — score charts with both formulas and compare the ratings.

Provides three levels:
    - ``score_chart``       : one chart → one flat record (rework + official)
    - ``score_charts``      : many charts → a ranked ``pandas.DataFrame``
    - ``rating_agreement``  : how closely the rework ranking tracks the official one

Records use the same fields the dashboard artifact carries (``id``,
``title``, ``stars``, ``stars_official`` and the seven skill stats).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd

from strain_engine.calculator import calculate_strain
from strain_engine.config import SKILL_NAMES, StrainTuning, load_tuning
from strain_engine.official import calculate_official
from strain_engine.rate_utils import apply_rate

logger = logging.getLogger(__name__)

RECORD_COLUMNS: list[str] = [
    "id",
    "title",
    "rate",
    "overall_difficulty",
    "stars",
    "stars_official",
    "drain_time",
    *SKILL_NAMES,
]


def score_chart(
    chart: Mapping[str, Any],
    rate: float = 1.0,
    tuning: StrainTuning | None = None,
    return_peaks: bool = False,
) -> dict[str, Any]:
    """Rate one chart with the rework and the official formula.

    Args:
        chart: Mapping with ``notes`` and optionally ``overallDifficulty``,
            ``id`` and ``title``.
        rate: Playback-rate variant to score (1.0 = as charted).
        tuning: Optional tuning override.
        return_peaks: Also attach the per-skill peak arrays under ``peaks``.

    Returns:
        A flat dict with the keys of :data:`RECORD_COLUMNS` (plus ``peaks``).
    """
    notes = chart.get("notes") or []
    # A chart OD of 0 is treated as unset, like the batch generator does
    od = chart.get("overallDifficulty") or (tuning or load_tuning()).od["default"]

    if rate != 1.0:
        notes, od = apply_rate(notes, od, rate, tuning)

    strain = calculate_strain(notes, od, return_peaks=return_peaks, tuning=tuning)
    official = calculate_official(notes, od, tuning=tuning)
    metadata = strain.get("metadata", {})

    record: dict[str, Any] = {
        "id": chart.get("id"),
        "title": chart.get("title", "Unknown"),
        "rate": rate,
        "overall_difficulty": od,
        "stars": strain["total"],
        "stars_official": official,
        "drain_time": metadata.get("drain_time", 0.0),
    }
    record.update(strain["details"])
    if return_peaks:
        record["peaks"] = strain.get("peaks", {})
    return record


def score_charts(
    charts: Iterable[Mapping[str, Any]],
    rate: float = 1.0,
    tuning: StrainTuning | None = None,
    return_peaks: bool = False,
) -> pd.DataFrame:
    """Rate every chart and rank them.

    Returns:
        DataFrame sorted by ``stars`` (descending) with extra columns
        ``rank``, ``rank_official`` (1 = hardest) and ``rank_shift``
        (positive = rated harder by the rework than by the official formula).
    """
    records = [score_chart(chart, rate=rate, tuning=tuning, return_peaks=return_peaks) for chart in charts]
    logger.debug("Scored %d chart(s) at rate %.2f", len(records), rate)

    columns = RECORD_COLUMNS + ["peaks"] if return_peaks else RECORD_COLUMNS
    frame = pd.DataFrame.from_records(records, columns=columns)
    if frame.empty:
        return frame.assign(rank=pd.Series(dtype="int64"),
                            rank_official=pd.Series(dtype="int64"),
                            rank_shift=pd.Series(dtype="int64"))

    frame["rank"] = frame["stars"].rank(ascending=False, method="min").astype("int64")
    frame["rank_official"] = frame["stars_official"].rank(ascending=False, method="min").astype("int64")
    frame["rank_shift"] = frame["rank_official"] - frame["rank"]

    return frame.sort_values("stars", ascending=False, kind="mergesort").reset_index(drop=True)


def rating_agreement(frame: pd.DataFrame) -> dict[str, float]:
    """Agreement between rework and official ratings across a scored set.

    Args:
        frame: Output of :func:`score_charts`.

    Returns:
        A dict with keys:
            - ``pearson``         (float): correlation of raw star values
            - ``spearman``        (float): correlation of star rankings
            - ``mean_rank_shift`` (float): mean absolute rank difference
            - ``mean_ratio``      (float): mean ``stars / stars_official``
              over charts with a non-zero official rating
        Correlations are 0.0 with fewer than two charts or no variance.
    """
    if frame.empty:
        return {"pearson": 0.0, "spearman": 0.0, "mean_rank_shift": 0.0, "mean_ratio": 0.0}

    stars = frame["stars"].astype("float64")
    official = frame["stars_official"].astype("float64")

    def _corr(a: pd.Series, b: pd.Series) -> float:
        if len(a) < 2 or a.std() == 0 or b.std() == 0:
            return 0.0
        return float(a.corr(b))

    nonzero = official > 0
    mean_ratio = float(np.mean(stars[nonzero] / official[nonzero])) if nonzero.any() else 0.0

    return {
        "pearson": _corr(stars, official),
        "spearman": _corr(stars.rank(), official.rank()),
        "mean_rank_shift": float(frame["rank_shift"].abs().mean()),
        "mean_ratio": mean_ratio,
    }
