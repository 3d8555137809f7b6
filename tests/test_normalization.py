from strain_engine.normalization import CanonicalNote, build_rows, canonicalize_note, canonicalize_notes

from conftest import hold, tap


class TestCanonicalizeNote:
    def test_tap(self):
        assert canonicalize_note(tap(100, "A")) == CanonicalNote(time=100.0, duration=0.0, key="a", type="tap")

    def test_hold_keeps_duration(self):
        note = canonicalize_note(hold(100, 400, "j"))
        assert note.duration == 300
        assert note.type == "hold"

    def test_short_hold_becomes_tap(self):
        note = canonicalize_note(hold(100, 130, "j"))
        assert note.duration == 0
        assert note.type == "tap"

    def test_hold_without_end_is_tap(self):
        note = canonicalize_note({"startTime": 100, "key": "j", "type": "hold"})
        assert note.type == "tap"
        assert note.time == 100

    def test_time_preferred_over_start_time(self):
        assert canonicalize_note({"time": 50, "startTime": 60, "key": "a"}).time == 50

    def test_missing_time_is_zero(self):
        assert canonicalize_note({"key": "a"}).time == 0.0


def test_canonicalize_sorts_stably():
    notes = canonicalize_notes([tap(100, "b"), tap(0, "a"), tap(100, "c")])
    assert [n.key for n in notes] == ["a", "b", "c"]


class TestBuildRows:
    def test_empty(self):
        assert build_rows([]) == []
        assert build_rows(None) == []

    def test_groups_within_tolerance(self):
        rows = build_rows([tap(0, "a"), tap(5, "s"), tap(12, "d")])
        assert [r.time for r in rows] == [0, 12]
        assert [n.key for n in rows[0].notes] == ["a", "s"]

    def test_grouping_is_anchored_to_row_onset(self):
        rows = build_rows([tap(0, "a"), tap(8, "s"), tap(16, "d")])
        assert len(rows) == 2
        assert rows[1].time == 16

    def test_rows_are_time_ascending(self):
        rows = build_rows([tap(300, "a"), tap(100, "s"), tap(200, "d")])
        assert [r.time for r in rows] == [100, 200, 300]
