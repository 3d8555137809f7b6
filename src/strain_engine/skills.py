"""The seven strain skills.

    StreamSkill        – fast single-note sequences across different fingers
    JackSpeedSkill     – rapid same-finger repetition
    ChordStreamSkill   – sustained dense chords at speed
    PrecisionSkill     – irregular / syncopated rhythm
    ErgonomicsSkill    – awkward transitions and hold interference
    DisplacementSkill  – row travel of a finger between strikes
    StaminaSkill       – long-term density fatigue (very slow decay)

Every skill returns 0 for the first row. The finger state a skill sees is
the state *before* the current row is applied.
"""

from __future__ import annotations

import math
from collections import deque

from .config import StrainTuning
from .keymap import KEY_MAP, ROW_HOME, hand_fingers, hand_of
from .normalization import Row
from .pattern_analyzer import PatternAnalyzer
from .skill import Skill, StrainContext


class StreamSkill(Skill):
    name = "stream"

    def __init__(self, tuning: StrainTuning | None = None) -> None:
        super().__init__(tuning)
        self.min_dt: float = float(self.params["min_dt"])
        self.jack_filter: float = float(self.params["jack_filter_ms"])
        self.roll_cutoff: float = float(self.params["roll_cutoff"])
        self.roll_exponent: float = float(self.params["roll_exponent"])
        self.nps_base: float = float(self.params["nps_base"])
        self.nps_scale: float = float(self.params["nps_scale"])
        self.pattern_analyzer = PatternAnalyzer(tuning)

    def calculate_note_strain(self, row: Row, prev_row: Row | None, context: StrainContext) -> float:
        if prev_row is None:
            return 0.0

        dt = max((row.time - prev_row.time) / 1000.0, self.min_dt)
        nps = 1.0 / dt

        if len(row.notes) != 1:
            return 0.0

        note = row.notes[0]
        key_data = KEY_MAP.get(note.key)
        if key_data is None:
            return 0.0

        # Same finger used recently: that is a jack, not a stream
        finger_slot = context.finger_state.get(key_data.finger)
        if row.time - finger_slot.last_time < self.jack_filter:
            return 0.0

        pattern_mod = self.pattern_analyzer.analyze(note, context.finger_state, row.time)

        effective_nps = nps
        if pattern_mod < self.roll_cutoff:
            effective_nps *= pattern_mod ** self.roll_exponent
        elif pattern_mod < 1.0:
            effective_nps *= pattern_mod

        if effective_nps > self.nps_base:
            return math.log2(effective_nps / self.nps_base) * self.nps_scale
        return 0.0


class JackSpeedSkill(Skill):
    name = "jack"

    def __init__(self, tuning: StrainTuning | None = None) -> None:
        super().__init__(tuning)
        self.min_finger_dt: float = float(self.params["min_finger_dt"])
        self.max_finger_dt: float = float(self.params["max_finger_dt"])
        self.nps_cap: float = float(self.params["nps_cap"])
        self.nps_floor: float = float(self.params["nps_floor"])
        self.exponent: float = float(self.params["exponent"])
        self.divisor: float = float(self.params["divisor"])

    def jack_strain(self, finger_dt: float) -> float:
        """Strain of one same-finger repeat *finger_dt* seconds after the last."""
        if not self.min_finger_dt < finger_dt < self.max_finger_dt:
            return 0.0
        capped_nps = min(1.0 / finger_dt, self.nps_cap)
        return max(0.0, capped_nps - self.nps_floor) ** self.exponent / self.divisor

    def calculate_note_strain(self, row: Row, prev_row: Row | None, context: StrainContext) -> float:
        if prev_row is None:
            return 0.0

        strain = 0.0
        for note in row.notes:
            key_data = KEY_MAP.get(note.key)
            if key_data is None:
                continue
            finger_slot = context.finger_state.get(key_data.finger)
            strain += self.jack_strain((row.time - finger_slot.last_time) / 1000.0)
        return strain


class ChordStreamSkill(Skill):
    name = "chord"

    def __init__(self, tuning: StrainTuning | None = None) -> None:
        super().__init__(tuning)
        self.min_dt: float = float(self.params["min_dt"])
        self.min_density: float = float(self.params["min_density"])
        self.density_base: float = float(self.params["density_base"])
        self.speed_exponent: float = float(self.params["speed_exponent"])
        self.scale: float = float(self.params["scale"])
        self.density_history: deque[int] = deque(maxlen=int(self.params["history"]))

    def calculate_note_strain(self, row: Row, prev_row: Row | None, context: StrainContext) -> float:
        if prev_row is None:
            return 0.0

        dt = max((row.time - prev_row.time) / 1000.0, self.min_dt)
        nps = 1.0 / dt

        self.density_history.append(len(row.notes))
        avg_density = sum(self.density_history) / len(self.density_history)

        # Must be consistently dense to count
        if avg_density < self.min_density:
            return 0.0

        density_weight = self.density_base ** avg_density
        speed_weight = nps ** self.speed_exponent
        return density_weight * speed_weight * self.scale


class PrecisionSkill(Skill):
    name = "prec"

    def __init__(self, tuning: StrainTuning | None = None) -> None:
        super().__init__(tuning)
        self.break_ms: float = float(self.params["break_ms"])
        self.ratio_tolerance: float = float(self.params["ratio_tolerance"])
        self.irregular_strain: float = float(self.params["irregular_strain"])
        self.entropy_exponent: float = float(self.params["entropy_exponent"])
        self.entropy_scale: float = float(self.params["entropy_scale"])
        self.speed_base_nps: float = float(self.params["speed_base_nps"])
        self.speed_exponent: float = float(self.params["speed_exponent"])
        self.known_ratios: tuple[tuple[float, float], ...] = tuple(
            (float(ratio), float(strain)) for ratio, strain in self.params["ratios"]
        )
        self.delta_history: deque[float] = deque(maxlen=int(self.params["history"]))

    def ratio_strain(self, ratio: float) -> float:
        """Strain of a delta ratio: simple doublings are cheap, syncopation is not."""
        for known, strain in self.known_ratios:
            if abs(ratio - known) < self.ratio_tolerance:
                return strain
        return self.irregular_strain

    @staticmethod
    def entropy(deltas: deque[float] | list[float]) -> float:
        """Mean absolute log2 ratio between consecutive deltas."""
        if len(deltas) < 2:
            return 0.0
        values = list(deltas)
        score = 0.0
        for prev, cur in zip(values, values[1:]):
            score += abs(math.log2(max(cur, prev) / min(cur, prev)))
        return score / len(values)

    def calculate_note_strain(self, row: Row, prev_row: Row | None, context: StrainContext) -> float:
        if prev_row is None:
            return 0.0

        curr_dt = max(1.0, row.time - prev_row.time)

        # A break starts a new phrase, not a complex rhythm
        if curr_dt > self.break_ms:
            self.delta_history.clear()
            return 0.0

        self.delta_history.append(curr_dt)
        if len(self.delta_history) < 2:
            return 0.0

        prev_dt = self.delta_history[-2]
        ratio = max(curr_dt, prev_dt) / min(curr_dt, prev_dt)

        entropy_bonus = self.entropy(self.delta_history) ** self.entropy_exponent * self.entropy_scale

        nps = 1000.0 / curr_dt
        speed_boost = max(1.0, (nps / self.speed_base_nps) ** self.speed_exponent)

        return (self.ratio_strain(ratio) + entropy_bonus) * speed_boost


class ErgonomicsSkill(Skill):
    """Biomechanical awkwardness: inversions, jumps and anchored interference.

    Comfortable motions (alternation, rolls) add nothing here.
    """

    name = "ergo"

    def __init__(self, tuning: StrainTuning | None = None) -> None:
        super().__init__(tuning)
        self.awkward_threshold: float = float(self.params["awkward_threshold"])
        self.awkward_scale: float = float(self.params["awkward_scale"])
        self.hold_tolerance: float = float(self.params["hold_tolerance_ms"])
        self.adjacent_interference: float = float(self.params["adjacent_interference"])
        self.distant_interference: float = float(self.params["distant_interference"])
        self.pattern_analyzer = PatternAnalyzer(tuning)

    def calculate_note_strain(self, row: Row, prev_row: Row | None, context: StrainContext) -> float:
        if prev_row is None:
            return 0.0

        finger_state = context.finger_state
        strain = 0.0

        for note in row.notes:
            key_data = KEY_MAP.get(note.key)
            if key_data is None:
                continue

            pattern_mod = self.pattern_analyzer.analyze(note, finger_state, row.time)
            awkwardness = 0.0
            if pattern_mod > self.awkward_threshold:
                awkwardness = (pattern_mod - 1.0) * self.awkward_scale

            # A held neighbour restricts movement of this finger
            interference = 0.0
            for other in hand_fingers(hand_of(key_data.finger)):
                if other == key_data.finger:
                    continue
                if finger_state.get(other).free_at > row.time + self.hold_tolerance:
                    if abs(other - key_data.finger) == 1:
                        interference += self.adjacent_interference
                    else:
                        interference += self.distant_interference

            strain += awkwardness + interference

        return strain


class DisplacementSkill(Skill):
    name = "disp"

    def __init__(self, tuning: StrainTuning | None = None) -> None:
        super().__init__(tuning)
        self.fast_window: float = float(self.params["fast_window_ms"])
        self.idle_reset: float = float(self.params["idle_reset_ms"])
        self.slide_base: float = float(self.params["slide_base"])
        self.min_slide_ms: float = float(self.params["min_slide_ms"])
        self.slide_scale: float = float(self.params["slide_scale"])
        self.far_jump_cost: float = float(self.params["far_jump_cost"])
        self.near_jump_cost: float = float(self.params["near_jump_cost"])
        self.stairs_bonus: float = float(self.params["stairs_bonus"])

    def calculate_note_strain(self, row: Row, prev_row: Row | None, context: StrainContext) -> float:
        if prev_row is None:
            return 0.0

        strain = 0.0
        net_direction = 0

        for note in row.notes:
            key_data = KEY_MAP.get(note.key)
            if key_data is None:
                continue

            finger_slot = context.finger_state.get(key_data.finger)
            since_last_use = row.time - finger_slot.last_time

            if since_last_use < self.fast_window:
                # Vertical jack: the finger slides rows under time pressure
                row_dist = abs(key_data.row - finger_slot.last_row)
                if row_dist > 0:
                    speed_factor = self.fast_window / max(self.min_slide_ms, since_last_use)
                    strain += self.slide_base ** row_dist * speed_factor * self.slide_scale
                    net_direction += 1 if key_data.row > finger_slot.last_row else -1
            else:
                start_row = ROW_HOME if since_last_use > self.idle_reset else finger_slot.last_row
                row_dist = abs(key_data.row - start_row)
                if row_dist >= 2:
                    strain += self.far_jump_cost
                elif row_dist >= 1:
                    strain += self.near_jump_cost

        # Stairs: every slide heads the same way
        if abs(net_direction) > 1:
            strain *= self.stairs_bonus

        return strain


class StaminaSkill(Skill):
    """Density fatigue. Recovery takes seconds, so the decay is very slow."""

    name = "stam"

    def __init__(self, tuning: StrainTuning | None = None) -> None:
        super().__init__(tuning)
        self.min_dt: float = float(self.params["min_dt"])
        self.density_exponent: float = float(self.params["density_exponent"])
        self.threshold: float = float(self.params["threshold"])
        self.scale: float = float(self.params["scale"])

    def calculate_note_strain(self, row: Row, prev_row: Row | None, context: StrainContext) -> float:
        if prev_row is None:
            return 0.0

        dt = max((row.time - prev_row.time) / 1000.0, self.min_dt)
        nps = 1.0 / dt
        strain = nps * len(row.notes) ** self.density_exponent

        if strain <= self.threshold:
            return 0.0
        return (strain - self.threshold) * self.scale


# Fixed evaluation order; results and peaks are reported in this order.
SKILL_TYPES: tuple[type[Skill], ...] = (
    StreamSkill,
    JackSpeedSkill,
    ChordStreamSkill,
    PrecisionSkill,
    ErgonomicsSkill,
    DisplacementSkill,
    StaminaSkill,
)
