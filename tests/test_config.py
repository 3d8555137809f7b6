import pytest
import yaml

from strain_engine.calculator import calculate_strain
from strain_engine.config import DEFAULT_CONFIG_PATH, SKILL_NAMES, StrainTuning, load_tuning

from conftest import make_stream_notes


def _write_tuning(tmp_path, mutate):
    cfg = yaml.safe_load(DEFAULT_CONFIG_PATH.read_text(encoding="utf-8"))
    mutate(cfg)
    path = tmp_path / "tuning.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return path


def test_bundled_tuning_loads():
    tuning = load_tuning()
    assert tuning.skill("stream")["decay"] == 0.15
    assert tuning.skill_weight("chord") == 0.75
    assert tuning.rank_weights == (1.0, 0.95, 0.85, 0.75, 0.65, 0.55, 0.45)
    assert tuning.timing["section_length_ms"] == 400
    assert tuning.od["neutral"] == 5


def test_load_tuning_is_cached():
    assert load_tuning() is load_tuning(DEFAULT_CONFIG_PATH)


def test_skill_returns_a_copy():
    tuning = load_tuning()
    tuning.skill("jack")["decay"] = 99
    assert tuning.skill("jack")["decay"] == 0.20


def test_unknown_skill():
    with pytest.raises(KeyError):
        load_tuning().skill("speed")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        StrainTuning(tmp_path / "absent.yaml")


def test_missing_key(tmp_path):
    path = _write_tuning(tmp_path, lambda cfg: cfg["timing"].pop("min_hold_ms"))
    with pytest.raises(ValueError, match="timing.min_hold_ms"):
        StrainTuning(path)


def test_missing_skill_key(tmp_path):
    path = _write_tuning(tmp_path, lambda cfg: cfg["skills"]["jack"].pop("divisor"))
    with pytest.raises(ValueError, match="skills.jack.divisor"):
        StrainTuning(path)


def test_missing_section(tmp_path):
    path = _write_tuning(tmp_path, lambda cfg: cfg.pop("official"))
    with pytest.raises(ValueError, match="official"):
        StrainTuning(path)


def test_rank_weights_length(tmp_path):
    path = _write_tuning(tmp_path, lambda cfg: cfg["aggregation"]["rank_weights"].pop())
    with pytest.raises(ValueError, match="rank_weights"):
        StrainTuning(path)


def test_not_a_mapping(tmp_path):
    path = tmp_path / "tuning.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        StrainTuning(path)


def test_custom_tuning_changes_rating(tmp_path):
    def double_jack(cfg):
        cfg["skills"]["jack"]["weight"] = 1.3

    custom = StrainTuning(_write_tuning(tmp_path, double_jack))
    notes = make_stream_notes(24, 100, keys="a")

    base = calculate_strain(notes)["details"]
    tuned = calculate_strain(notes, tuning=custom)["details"]
    assert base["jack"] > 0
    assert tuned["jack"] == pytest.approx(base["jack"] * 2)
    for name in SKILL_NAMES:
        if name != "jack":
            assert tuned[name] == pytest.approx(base[name])
