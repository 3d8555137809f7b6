import pytest

from strain_engine.keymap import ROW_HOME
from strain_engine.normalization import CanonicalNote
from strain_engine.pattern_analyzer import PatternAnalyzer


def note(key, time=0.0):
    return CanonicalNote(time=time, duration=0.0, key=key, type="tap")


@pytest.fixture
def analyzer(tuning):
    return PatternAnalyzer(tuning)


def test_first_note_on_hand_is_alternation(analyzer, finger_state):
    assert analyzer.analyze(note("a"), finger_state, 0) == pytest.approx(0.45)
    assert analyzer.analyze(note("j"), finger_state, 100) == pytest.approx(0.45)


def test_same_finger_is_jack(analyzer, finger_state):
    analyzer.analyze(note("a"), finger_state, 0)
    assert analyzer.analyze(note("q"), finger_state, 100) == pytest.approx(1.3)


def test_jump(analyzer, finger_state):
    analyzer.analyze(note("a"), finger_state, 0)
    assert analyzer.analyze(note("d"), finger_state, 100) == pytest.approx(1.45)


def test_roll_discount_deepens_with_streak(analyzer, finger_state):
    analyzer.analyze(note("a"), finger_state, 0)
    assert analyzer.analyze(note("s"), finger_state, 100) == pytest.approx(0.35 * 0.55)
    assert analyzer.analyze(note("d"), finger_state, 200) == pytest.approx(0.35 * 0.55 ** 2)
    # Reversing direction restarts the streak
    assert analyzer.analyze(note("s"), finger_state, 300) == pytest.approx(0.35 * 0.55)


def test_roll_streak_is_capped(analyzer, finger_state):
    analyzer.analyze(note("a"), finger_state, 0)
    streak = analyzer.hand_streaks[0]
    streak.vector, streak.count = 1, 9
    assert analyzer.analyze(note("s"), finger_state, 100) == pytest.approx(0.35 * 0.55 ** 6)


def test_anchored_by_idle_holding_hand(analyzer, finger_state):
    finger_state.update(4, 0, ROW_HOME, 1.0, 5000)
    assert analyzer.analyze(note("a"), finger_state, 100) == pytest.approx(0.35)


def test_active_hand_is_not_an_anchor(analyzer, finger_state):
    analyzer.analyze(note("h"), finger_state, 0)
    finger_state.update(4, 0, ROW_HOME, 1.0, 5000)
    assert analyzer.analyze(note("a"), finger_state, 100) == pytest.approx(0.45)


def test_unknown_key_is_neutral_and_not_recorded(analyzer, finger_state):
    assert analyzer.analyze(note("!"), finger_state, 0) == 1.0
    assert len(analyzer.history) == 0


def test_history_is_bounded(analyzer, finger_state):
    for i in range(40):
        analyzer.analyze(note("a" if i % 2 else "j"), finger_state, i * 100)
    assert len(analyzer.history) == 16
