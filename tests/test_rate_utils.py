import pytest

from strain_engine.rate_utils import apply_rate, effective_time, scale_notes, scale_od, snap_notes

from conftest import hold, tap


class TestSnapNotes:
    def test_flam_collapses_onto_anchor(self):
        notes = [tap(0, "a"), tap(15, "s"), tap(40, "d")]
        assert [n["time"] for n in snap_notes(notes)] == [0, 0, 40]

    def test_anchor_moves_to_first_note_outside_threshold(self):
        notes = [tap(0, "a"), tap(25, "s"), tap(35, "d")]
        assert [n["time"] for n in snap_notes(notes)] == [0, 25, 25]

    def test_sorts_without_mutating_input(self):
        notes = [tap(100, "a"), tap(0, "s")]
        snapped = snap_notes(notes)
        assert [n["key"] for n in snapped] == ["s", "a"]
        assert notes[0]["time"] == 100
        assert snapped[0] is not notes[1]

    def test_hold_start_time_is_snapped(self):
        notes = [tap(0, "a"), hold(10, 500, "j")]
        snapped = snap_notes(notes)
        assert snapped[1]["startTime"] == 0
        assert snapped[1]["endTime"] == 500

    def test_empty(self):
        assert snap_notes([]) == []
        assert snap_notes(None) == []


def test_effective_time_prefers_start_time():
    assert effective_time({"startTime": 10, "time": 20}) == 10
    assert effective_time({"time": 20}) == 20
    assert effective_time({}) == 0


class TestScaleNotes:
    def test_double_rate_halves_times(self):
        scaled = scale_notes([hold(1000, 1600, "a"), tap(2000, "s")], 2.0)
        assert scaled[0]["startTime"] == 500
        assert scaled[0]["endTime"] == 800
        assert scaled[1]["time"] == 1000

    def test_rate_is_clamped(self):
        assert scale_notes([tap(1000, "a")], 5.0)[0]["time"] == 500
        assert scale_notes([tap(1000, "a")], 0.01)[0]["time"] == pytest.approx(10000)

    def test_unit_rate_returns_copies(self):
        notes = [tap(1000, "a")]
        scaled = scale_notes(notes, 1.0005)
        assert scaled == notes
        assert scaled[0] is not notes[0]

    def test_missing_fields_are_left_alone(self):
        scaled = scale_notes([{"time": 300, "key": "a", "endTime": None}], 1.5)
        assert scaled[0]["time"] == pytest.approx(200)
        assert scaled[0]["endTime"] is None


class TestScaleOd:
    def test_unit_rate_is_identity(self):
        assert scale_od(7, 1.0) == 7

    def test_faster_rate_raises_od(self):
        # window 50 ms / 1.5 → (80 - 33.33) / 6
        assert scale_od(5, 1.5) == pytest.approx((80 - 50 / 1.5) / 6)

    def test_clamped_to_range(self):
        assert scale_od(10, 2.0) == 11
        assert scale_od(0, 0.5) == 0


def test_apply_rate_scales_both():
    notes, od = apply_rate([tap(900, "a")], 5, 1.5)
    assert notes[0]["time"] == pytest.approx(600)
    assert od == pytest.approx(scale_od(5, 1.5))
