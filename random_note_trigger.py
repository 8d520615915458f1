# -*- coding: utf-8 -*-
########################
# random_note_trigger.py
########################
# Purpose:
# - Periodic generator of ambient filler notes (pitch + duration) for non-scoring sound.
#
# Design notes:
# - One RNG step per tick. Pitch and duration come from the same value through independent transforms.
# - Consumers read the current pair through `latest`; nobody re-samples.
# - The trigger never touches State. The driver emits actions.PlayRandomNote alongside each step,
#   and the audio side plays the pair only when State.should_play_random_note is set.
#
########################
# Interfaces:
# Public dataclasses:
# - RandomNote(pitch: int, duration_seconds: float)
#
# Public functions:
# - random_pitch(value: float) -> int          ([-1, 1] -> [20, 110])
# - random_duration(value: float) -> float     ([-1, 1] -> [0, 0.5])
#
# Public classes:
# - class RandomNoteTrigger
#   - advance() -> RandomNote
#   - latest -> Optional[RandomNote]
#   - steps -> int
#   - reset() -> None
#
########################

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional

import rng

MIN_RANDOM_PITCH = 20
MAX_RANDOM_PITCH = 110


@dataclass(frozen=True)
class RandomNote:
    pitch: int
    duration_seconds: float


def random_pitch(value: float) -> int:
    span = MAX_RANDOM_PITCH - MIN_RANDOM_PITCH
    return int(math.floor(MIN_RANDOM_PITCH + ((float(value) + 1.0) / 2.0) * span))


def random_duration(value: float) -> float:
    return (float(value) + 1.0) / 4.0


class RandomNoteTrigger:
    def __init__(self, seed: int = 0) -> None:
        self._seed = int(seed)
        self._values: Iterator[float] = rng.random_values(self._seed)
        self._latest: Optional[RandomNote] = None
        self._steps = 0

    @property
    def latest(self) -> Optional[RandomNote]:
        return self._latest

    @property
    def steps(self) -> int:
        return self._steps

    def advance(self) -> RandomNote:
        value = next(self._values)
        self._latest = RandomNote(pitch=random_pitch(value), duration_seconds=random_duration(value))
        self._steps += 1
        return self._latest

    def reset(self) -> None:
        self._values = rng.random_values(self._seed)
        self._latest = None
        self._steps = 0


def _run_unit_tests() -> None:
    assert random_pitch(-1.0) == 20
    assert random_pitch(1.0) == 110
    assert random_duration(-1.0) == 0.0
    assert random_duration(1.0) == 0.5

    trigger = RandomNoteTrigger()
    assert trigger.latest is None
    first = trigger.advance()
    assert first.pitch == 20
    second = trigger.advance()
    assert second.pitch == 78
    assert trigger.latest == second
    assert trigger.steps == 2

    trigger.reset()
    assert trigger.advance() == first


if __name__ == "__main__":
    _run_unit_tests()
    print("random_note_trigger.py: ok")
