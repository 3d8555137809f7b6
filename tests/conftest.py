"""Shared chart fixtures for the strain engine and rating report tests."""

from __future__ import annotations

from typing import Any

import pytest

from strain_engine.config import load_tuning
from strain_engine.finger_state import FingerState
from strain_engine.normalization import CanonicalNote, Row
from strain_engine.skill import StrainContext


def tap(time: float, key: str) -> dict[str, Any]:
    return {"time": time, "key": key, "type": "tap"}


def hold(start: float, end: float, key: str) -> dict[str, Any]:
    return {"startTime": start, "endTime": end, "key": key, "type": "hold"}


def row(time: float, *keys: str) -> Row:
    return Row(time=time, notes=[CanonicalNote(time=time, duration=0.0, key=k, type="tap") for k in keys])


def make_mixed_notes(count: int = 64, start: float = 1000.0) -> list[dict[str, Any]]:
    """A stream with chords, holds and an uneven 135/90/90 ms rhythm."""
    keys = "asdfjkl;"
    notes: list[dict[str, Any]] = []
    t = start
    for i in range(count):
        notes.append(tap(t, keys[i % len(keys)]))
        if i % 8 == 0:
            notes.append(tap(t, "p"))
        if i % 16 == 4:
            notes.append(hold(t, t + 300, "h"))
        t += 90 if i % 3 else 135
    return notes


def make_stream_notes(count: int, spacing: float, keys: str = "ajsk", start: float = 0.0) -> list[dict[str, Any]]:
    return [tap(start + i * spacing, keys[i % len(keys)]) for i in range(count)]


@pytest.fixture
def tuning():
    return load_tuning()


@pytest.fixture
def finger_state(tuning):
    return FingerState(tuning)


@pytest.fixture
def context(finger_state):
    return StrainContext(finger_state=finger_state)


@pytest.fixture
def mixed_notes():
    return make_mixed_notes()
