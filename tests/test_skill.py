import pytest

from strain_engine.skill import Skill

from conftest import row


class ConstantSkill(Skill):
    name = "stream"

    def calculate_note_strain(self, row, prev_row, context):
        return 1.0


def test_decay_and_peak_bins(context):
    skill = ConstantSkill()
    skill.set_start_time(0)

    first = row(0, "a")
    skill.process(first, None, context)
    assert skill.current_strain == pytest.approx(1.0)
    assert skill.peaks == []

    # 1 s later: 1 * 0.15 + 1, and two bins (400, 800) have closed
    skill.process(row(1000, "s"), first, context)
    assert skill.current_strain == pytest.approx(1.15)
    assert skill.peaks == pytest.approx([1.15, 1.15])
    assert skill.section_end == 1200

    assert skill.finalize() == pytest.approx([1.15, 1.15, 1.15])


def test_section_end_defaults_to_first_row(context):
    skill = ConstantSkill()
    skill.process(row(250, "a"), None, context)
    assert skill.section_end == 650


def test_finalized_skill_rejects_further_use(context):
    skill = ConstantSkill()
    skill.process(row(0, "a"), None, context)
    skill.finalize()
    with pytest.raises(RuntimeError):
        skill.finalize()
    with pytest.raises(RuntimeError):
        skill.process(row(100, "a"), None, context)


def test_finalize_without_rows_yields_one_zero_peak():
    assert ConstantSkill().finalize() == [0.0]
