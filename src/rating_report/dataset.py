"""Dataset — load and validate chart JSON for batch rating.

Chart files carry one chart object or an array of them, in the shape the
batch generator hands to the engine::

    {
      "id": "1234_hard",
      "title": "Some Song",
      "overallDifficulty": 7,
      "notes": [
        {"time": 1000, "key": "a", "type": "tap"},
        {"startTime": 1250, "endTime": 1600, "key": "k", "type": "hold"},
        ...
      ]
    }

Only ``notes`` is required. Note contents are not validated here: the
engine itself drops what it cannot use.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def _validate_chart(entry: Any, index: int, path: Path) -> dict[str, Any]:
    if not isinstance(entry, dict):
        raise ValueError(
            f"Chart {index} in '{path.name}' must be a JSON object, got {type(entry).__name__}"
        )
    if "notes" not in entry:
        raise ValueError(f"Chart {index} in '{path.name}' is missing required key 'notes'")
    if not isinstance(entry["notes"], list):
        raise ValueError(
            f"Chart {index} in '{path.name}': 'notes' must be a list, "
            f"got {type(entry['notes']).__name__}"
        )

    chart = dict(entry)
    chart.setdefault("id", f"{path.stem}_{index}")
    chart.setdefault("title", path.stem)
    return chart


def load_charts(json_path: str | Path) -> list[dict[str, Any]]:
    """Load every chart in one JSON file.

    Args:
        json_path: Path to a ``.json`` file with a chart object or array.

    Returns:
        List of chart dicts, each guaranteed to have ``id``, ``title`` and a
        ``notes`` list.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the JSON is malformed or a chart fails validation.
    """
    path = Path(json_path)
    if not path.exists():
        raise FileNotFoundError(f"Chart file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Failed to parse chart file '{path.name}': {exc}") from exc

    entries = data if isinstance(data, list) else [data]
    return [_validate_chart(entry, i, path) for i, entry in enumerate(entries)]


def load_chart_dir(charts_dir: str | Path) -> list[dict[str, Any]]:
    """Load every ``*.json`` chart file in a directory (sorted by name).

    Raises:
        FileNotFoundError: If the directory does not exist or has no JSON files.
    """
    charts_dir = Path(charts_dir)
    if not charts_dir.is_dir():
        raise FileNotFoundError(f"Charts directory not found: {charts_dir}")

    files = sorted(charts_dir.glob("*.json"))
    if not files:
        raise FileNotFoundError(f"No *.json chart files found in: {charts_dir}")

    charts: list[dict[str, Any]] = []
    for chart_path in files:
        charts.extend(load_charts(chart_path))
    return charts
