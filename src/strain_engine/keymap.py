"""Physical key table — key character → finger / row / horizontal offset.

The layout is a standard QWERTY block played with eight fingers (no thumbs).
Finger ids run left to right: ``0`` = left pinky … ``7`` = right pinky.
Rows are ``1`` (number + top letter row), ``0`` (home) and ``-1`` (bottom).
The x-offset is measured from the keyboard centre (between G and H).

Both tables are read-only mappings built once at import.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

# ── Fingers ───────────────────────────────────────────────────
FINGER_L_PINKY: int = 0
FINGER_L_RING: int = 1
FINGER_L_MIDDLE: int = 2
FINGER_L_INDEX: int = 3
FINGER_R_INDEX: int = 4
FINGER_R_MIDDLE: int = 5
FINGER_R_RING: int = 6
FINGER_R_PINKY: int = 7

FINGER_COUNT: int = 8
FINGERS_PER_HAND: int = 4

# ── Hands ─────────────────────────────────────────────────────
HAND_LEFT: int = 0
HAND_RIGHT: int = 1

# ── Rows ──────────────────────────────────────────────────────
ROW_TOP: int = 1
ROW_HOME: int = 0
ROW_BOT: int = -1


@dataclass(frozen=True)
class FingerInfo:
    hand: int
    strength: float
    name: str


@dataclass(frozen=True)
class KeyInfo:
    finger: int
    row: int
    x: float


FINGER_DATA: Mapping[int, FingerInfo] = MappingProxyType({
    FINGER_L_PINKY: FingerInfo(HAND_LEFT, 1.3, "L_Pinky"),
    FINGER_L_RING: FingerInfo(HAND_LEFT, 1.1, "L_Ring"),
    FINGER_L_MIDDLE: FingerInfo(HAND_LEFT, 1.0, "L_Middle"),
    FINGER_L_INDEX: FingerInfo(HAND_LEFT, 0.9, "L_Index"),
    FINGER_R_INDEX: FingerInfo(HAND_RIGHT, 0.9, "R_Index"),
    FINGER_R_MIDDLE: FingerInfo(HAND_RIGHT, 1.0, "R_Middle"),
    FINGER_R_RING: FingerInfo(HAND_RIGHT, 1.1, "R_Ring"),
    FINGER_R_PINKY: FingerInfo(HAND_RIGHT, 1.3, "R_Pinky"),
})

KEY_MAP: Mapping[str, KeyInfo] = MappingProxyType({
    "1": KeyInfo(FINGER_L_PINKY, ROW_TOP, -5.0),
    "q": KeyInfo(FINGER_L_PINKY, ROW_TOP, -4.5),
    "a": KeyInfo(FINGER_L_PINKY, ROW_HOME, -4.0),
    "z": KeyInfo(FINGER_L_PINKY, ROW_BOT, -3.5),

    "2": KeyInfo(FINGER_L_RING, ROW_TOP, -4.0),
    "w": KeyInfo(FINGER_L_RING, ROW_TOP, -3.5),
    "s": KeyInfo(FINGER_L_RING, ROW_HOME, -3.0),
    "x": KeyInfo(FINGER_L_RING, ROW_BOT, -2.5),

    "3": KeyInfo(FINGER_L_MIDDLE, ROW_TOP, -3.0),
    "e": KeyInfo(FINGER_L_MIDDLE, ROW_TOP, -2.5),
    "d": KeyInfo(FINGER_L_MIDDLE, ROW_HOME, -2.0),
    "c": KeyInfo(FINGER_L_MIDDLE, ROW_BOT, -1.5),

    "4": KeyInfo(FINGER_L_INDEX, ROW_TOP, -2.0),
    "5": KeyInfo(FINGER_L_INDEX, ROW_TOP, -1.0),
    "r": KeyInfo(FINGER_L_INDEX, ROW_TOP, -1.5),
    "t": KeyInfo(FINGER_L_INDEX, ROW_TOP, -0.5),
    "f": KeyInfo(FINGER_L_INDEX, ROW_HOME, -1.0),
    "g": KeyInfo(FINGER_L_INDEX, ROW_HOME, 0.0),
    "v": KeyInfo(FINGER_L_INDEX, ROW_BOT, -0.5),
    "b": KeyInfo(FINGER_L_INDEX, ROW_BOT, 0.5),

    "6": KeyInfo(FINGER_R_INDEX, ROW_TOP, 1.0),
    "7": KeyInfo(FINGER_R_INDEX, ROW_TOP, 2.0),
    "y": KeyInfo(FINGER_R_INDEX, ROW_TOP, 0.5),
    "u": KeyInfo(FINGER_R_INDEX, ROW_TOP, 1.5),
    "h": KeyInfo(FINGER_R_INDEX, ROW_HOME, 1.0),
    "j": KeyInfo(FINGER_R_INDEX, ROW_HOME, 2.0),
    "n": KeyInfo(FINGER_R_INDEX, ROW_BOT, 1.5),
    "m": KeyInfo(FINGER_R_INDEX, ROW_BOT, 2.5),

    "8": KeyInfo(FINGER_R_MIDDLE, ROW_TOP, 3.0),
    "i": KeyInfo(FINGER_R_MIDDLE, ROW_TOP, 2.5),
    "k": KeyInfo(FINGER_R_MIDDLE, ROW_HOME, 3.0),
    ",": KeyInfo(FINGER_R_MIDDLE, ROW_BOT, 3.5),

    "9": KeyInfo(FINGER_R_RING, ROW_TOP, 4.0),
    "o": KeyInfo(FINGER_R_RING, ROW_TOP, 3.5),
    "l": KeyInfo(FINGER_R_RING, ROW_HOME, 4.0),
    ".": KeyInfo(FINGER_R_RING, ROW_BOT, 4.5),

    "0": KeyInfo(FINGER_R_PINKY, ROW_TOP, 5.0),
    "p": KeyInfo(FINGER_R_PINKY, ROW_TOP, 4.5),
    ";": KeyInfo(FINGER_R_PINKY, ROW_HOME, 5.0),
    "/": KeyInfo(FINGER_R_PINKY, ROW_BOT, 5.5),
})


def hand_of(finger: int) -> int:
    """Return ``HAND_LEFT`` or ``HAND_RIGHT`` for a finger id."""
    return FINGER_DATA[finger].hand


def hand_fingers(hand: int) -> range:
    """Finger ids belonging to *hand*, left to right."""
    start = 0 if hand == HAND_LEFT else FINGERS_PER_HAND
    return range(start, start + FINGERS_PER_HAND)
