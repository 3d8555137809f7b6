"""Tuning configuration for the strain engine.

All tuned constants are loaded from ``configs/strain_tuning.yaml`` (shipped
inside the package). Nothing numeric is hardcoded in the skills: if a
required section or key is missing from the YAML, a ``ValueError`` is raised
with a clear message.

Sections:
    timing        – snapping, chord grouping, hold and peak-bin windows
    od            – hit-window model and Precision OD scaling
    finger_state  – hold release tolerance
    pattern       – roll / jack / jump modifiers for the pattern analyzer
    skills        – one sub-section per strain skill
    aggregation   – peak weighting and ranked skill weights
    official      – constants of the legacy formula
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent / "configs" / "strain_tuning.yaml"

# ── Skill ids, in the fixed order the calculator iterates them ─
SKILL_NAMES: tuple[str, ...] = ("stream", "jack", "chord", "prec", "ergo", "disp", "stam")

_REQUIRED: dict[str, list[str]] = {
    "timing": [
        "snap_threshold_ms",
        "chord_tolerance_ms",
        "min_hold_ms",
        "section_length_ms",
        "min_rate",
        "max_rate",
        "rate_epsilon",
    ],
    "od": [
        "default",
        "neutral",
        "window_base_ms",
        "window_slope_ms",
        "min_od",
        "max_od",
        "precision_slope",
    ],
    "finger_state": ["holding_tolerance_ms"],
    "pattern": [
        "max_history",
        "anchor_window_ms",
        "anchor_hold_tolerance_ms",
        "anchor_mod",
        "roll_base",
        "roll_decay",
        "roll_max_streak",
        "jack_mod",
        "jump_mod",
        "alternation_mod",
    ],
    "aggregation": ["peak_decay", "min_weight", "rank_weights"],
    "official": [
        "min_dt",
        "alpha",
        "half_life",
        "tail_fraction",
        "star_scale",
        "od_slope",
        "max_length_events",
        "max_length_bonus",
        "reuse_window",
        "reuse_base",
        "reuse_falloff",
        "reuse_floor",
        "chord_bonus_max",
        "chord_bonus_rate",
    ],
}

_REQUIRED_SKILL_KEYS: dict[str, list[str]] = {
    "stream": ["decay", "weight", "min_dt", "jack_filter_ms", "roll_cutoff",
               "roll_exponent", "nps_base", "nps_scale"],
    "jack": ["decay", "weight", "min_finger_dt", "max_finger_dt", "nps_cap",
             "nps_floor", "exponent", "divisor"],
    "chord": ["decay", "weight", "min_dt", "history", "min_density",
              "density_base", "speed_exponent", "scale"],
    "prec": ["decay", "weight", "history", "break_ms", "ratio_tolerance",
             "irregular_strain", "entropy_exponent", "entropy_scale",
             "speed_base_nps", "speed_exponent", "ratios"],
    "ergo": ["decay", "weight", "awkward_threshold", "awkward_scale",
             "hold_tolerance_ms", "adjacent_interference", "distant_interference"],
    "disp": ["decay", "weight", "fast_window_ms", "idle_reset_ms", "slide_base",
             "min_slide_ms", "slide_scale", "far_jump_cost", "near_jump_cost",
             "stairs_bonus"],
    "stam": ["decay", "weight", "min_dt", "density_exponent", "threshold", "scale"],
}


class StrainTuning:
    """Validated view over the tuning YAML.

    Args:
        config_path: Path to the YAML file. Defaults to the bundled
            ``configs/strain_tuning.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a required section or key is missing.
    """

    def __init__(self, config_path: str | Path | None = None) -> None:
        config_path = DEFAULT_CONFIG_PATH if config_path is None else Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Tuning config not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as fh:
            cfg = yaml.safe_load(fh)

        if not isinstance(cfg, dict):
            raise ValueError(f"Tuning config must be a YAML mapping: {config_path}")

        self.path: Path = config_path
        self._cfg: dict[str, Any] = cfg

        for section, keys in _REQUIRED.items():
            self._check(cfg, section, keys, section)

        skills = cfg.get("skills")
        if not isinstance(skills, dict):
            raise ValueError(f"Missing required section 'skills' in tuning config: {config_path}")
        for name in SKILL_NAMES:
            self._check(skills, name, _REQUIRED_SKILL_KEYS[name], f"skills.{name}")

        self.timing: dict[str, float] = _floats(cfg["timing"])
        self.od: dict[str, float] = _floats(cfg["od"])
        self.finger_state: dict[str, float] = _floats(cfg["finger_state"])
        self.pattern: dict[str, float] = _floats(cfg["pattern"])
        self.official: dict[str, float] = _floats(cfg["official"])

        aggregation = cfg["aggregation"]
        self.peak_decay: float = float(aggregation["peak_decay"])
        self.min_peak_weight: float = float(aggregation["min_weight"])
        self.rank_weights: tuple[float, ...] = tuple(float(w) for w in aggregation["rank_weights"])
        if len(self.rank_weights) != len(SKILL_NAMES):
            raise ValueError(
                f"aggregation.rank_weights needs {len(SKILL_NAMES)} entries, "
                f"got {len(self.rank_weights)}: {config_path}"
            )

    def _check(self, parent: dict[str, Any], section: str, keys: list[str], label: str) -> None:
        block = parent.get(section)
        if not isinstance(block, dict):
            raise ValueError(f"Missing required section '{label}' in tuning config: {self.path}")
        for key in keys:
            if key not in block:
                raise ValueError(
                    f"Missing required key '{label}.{key}' in tuning config: {self.path}"
                )

    def skill(self, name: str) -> dict[str, Any]:
        """Return a copy of one skill's raw parameter block."""
        if name not in SKILL_NAMES:
            raise KeyError(f"Unknown skill '{name}'. Available: {list(SKILL_NAMES)}")
        return dict(self._cfg["skills"][name])

    def skill_weight(self, name: str) -> float:
        return float(self._cfg["skills"][name]["weight"])


def _floats(block: dict[str, Any]) -> dict[str, float]:
    return {key: float(value) for key, value in block.items()}


@lru_cache(maxsize=None)
def _load_cached(resolved: str) -> StrainTuning:
    tuning = StrainTuning(resolved)
    logger.debug("Loaded strain tuning from %s", resolved)
    return tuning


def load_tuning(config_path: str | Path | None = None) -> StrainTuning:
    """Load (once per path) and return a :class:`StrainTuning`.

    Parsed tuning is read-only; calculations share it freely.
    """
    path = DEFAULT_CONFIG_PATH if config_path is None else Path(config_path)
    return _load_cached(str(path.resolve()))
