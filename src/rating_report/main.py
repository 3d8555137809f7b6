"""Strain rating — command-line entry point.

Scores one or more chart JSON files (or directories of them) with both the
rework and the official formula and prints a ranked comparison table::

    strain-rating charts/ extra_chart.json --rate 1.5
    strain-rating chart.json --json --peaks
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from strain_engine.config import load_tuning

from .dataset import load_chart_dir, load_charts
from .evaluator import rating_agreement, score_charts

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="strain-rating",
        description="Rate typed rhythm charts (rework vs official star rating)",
    )
    parser.add_argument("paths", nargs="+", help="Chart JSON files or directories of them")
    parser.add_argument("--rate", type=float, default=1.0, help="Playback rate to score (default 1.0)")
    parser.add_argument("--config", default=None, help="Alternative tuning YAML")
    parser.add_argument("--json", action="store_true", help="Print JSON records instead of a table")
    parser.add_argument("--peaks", action="store_true", help="Include per-skill peak arrays (JSON output only)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _load_all(paths: Sequence[str]) -> list[dict[str, Any]]:
    charts: list[dict[str, Any]] = []
    for raw in paths:
        path = Path(raw)
        charts.extend(load_chart_dir(path) if path.is_dir() else load_charts(path))
    return charts


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        tuning = load_tuning(args.config)
        charts = _load_all(args.paths)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    if args.json:
        frame = score_charts(charts, rate=args.rate, tuning=tuning, return_peaks=args.peaks)
        print(json.dumps(frame.to_dict(orient="records"), indent=2, ensure_ascii=False))
        return 0

    frame = score_charts(charts, rate=args.rate, tuning=tuning)
    with pd.option_context("display.width", 200, "display.max_columns", None):
        print(frame.to_string(index=False, float_format=lambda v: f"{v:.2f}"))

    agreement = rating_agreement(frame)
    print()
    print(
        f"charts={len(frame)}  pearson={agreement['pearson']:.3f}  "
        f"spearman={agreement['spearman']:.3f}  "
        f"mean|rank shift|={agreement['mean_rank_shift']:.2f}  "
        f"mean ratio={agreement['mean_ratio']:.3f}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
