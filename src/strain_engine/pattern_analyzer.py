"""Pattern analyzer — biomechanical comfort modifier for sequential notes.

Detects comfortable typing motions (hand alternation, directional rolls,
anchored holds) versus technical conflicts (same-finger repetition,
disjointed jumps) and returns a multiplicative modifier for each note:

    < 1.0  comfortable, discounted
    = 1.0  neutral
    > 1.0  awkward

Each analyzer keeps its own fixed-capacity history; skills that need the
modifier own a private instance.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from .config import StrainTuning, load_tuning
from .finger_state import FingerState
from .keymap import HAND_LEFT, HAND_RIGHT, KEY_MAP, hand_fingers, hand_of
from .normalization import CanonicalNote


@dataclass(frozen=True)
class _HistoryEntry:
    key: str
    time: float
    finger: int
    hand: int


@dataclass
class _Streak:
    vector: int = 0
    count: int = 0


class PatternAnalyzer:
    """Per-hand sequential classifier.

    Args:
        tuning: Optional tuning override (``pattern`` section).
    """

    def __init__(self, tuning: StrainTuning | None = None) -> None:
        tuning = tuning or load_tuning()
        cfg = tuning.pattern
        self.anchor_window: float = cfg["anchor_window_ms"]
        self.anchor_hold_tolerance: float = cfg["anchor_hold_tolerance_ms"]
        self.anchor_mod: float = cfg["anchor_mod"]
        self.roll_base: float = cfg["roll_base"]
        self.roll_decay: float = cfg["roll_decay"]
        self.roll_max_streak: int = int(cfg["roll_max_streak"])
        self.jack_mod: float = cfg["jack_mod"]
        self.jump_mod: float = cfg["jump_mod"]
        self.alternation_mod: float = cfg["alternation_mod"]

        self.history: deque[_HistoryEntry] = deque(maxlen=int(cfg["max_history"]))
        self.hand_streaks: dict[int, _Streak] = {HAND_LEFT: _Streak(), HAND_RIGHT: _Streak()}

    def analyze(self, note: CanonicalNote, finger_state: FingerState, time: float) -> float:
        """Return the comfort modifier for *note* struck at *time* (ms).

        The note is recorded in the history after the modifier is computed.
        Notes on keys outside the key table are neutral and not recorded.
        """
        key_data = KEY_MAP.get(note.key)
        if key_data is None:
            return 1.0

        finger = key_data.finger
        hand = hand_of(finger)
        other_hand = HAND_RIGHT if hand == HAND_LEFT else HAND_LEFT

        if self._is_hand_holding(other_hand, finger_state, time) and not self._is_hand_active(other_hand, time):
            # Anchored: the other hand is a stable support
            mod = self.anchor_mod
        else:
            mod = self._sequence_modifier(finger, hand)

        self.history.append(_HistoryEntry(note.key, time, finger, hand))
        return mod

    def _sequence_modifier(self, finger: int, hand: int) -> float:
        previous = self._last_on_hand(hand)
        if previous is None:
            # Hand-to-hand alternation
            return self.alternation_mod

        streak = self.hand_streaks[hand]
        vector = finger - previous.finger
        distance = abs(vector)

        if distance == 1:
            # Directional roll: deeper discount the longer the direction holds
            if vector == streak.vector:
                streak.count += 1
            else:
                streak.vector = vector
                streak.count = 1
            return self.roll_base * self.roll_decay ** min(streak.count, self.roll_max_streak)

        streak.count = 0
        if distance == 0:
            return self.jack_mod
        return self.jump_mod

    def _is_hand_holding(self, hand: int, finger_state: FingerState, time: float) -> bool:
        return any(
            finger_state.get(i).free_at > time + self.anchor_hold_tolerance
            for i in hand_fingers(hand)
        )

    def _is_hand_active(self, hand: int, time: float) -> bool:
        for entry in reversed(self.history):
            if time - entry.time > self.anchor_window:
                break
            if entry.hand == hand:
                return True
        return False

    def _last_on_hand(self, hand: int) -> _HistoryEntry | None:
        for entry in reversed(self.history):
            if entry.hand == hand:
                return entry
        return None
