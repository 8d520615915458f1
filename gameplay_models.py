# -*- coding: utf-8 -*-
########################
# gameplay_models.py
########################
# Purpose:
# - Core gameplay data models for the runtime gameplay pipeline.
# - Defines the Note and State snapshots folded by the reducer, and the lane key bindings.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - No Qt usage. These are plain frozen dataclasses; a new State replaces the old one wholesale.
# - State.notes keeps insertion order, not position order.
#
########################
# Interfaces:
# Public dataclasses:
# - Note(id: str, user_played: bool, column: int, y: float, instrument_name: str, velocity: float,
#        pitch: int, start: float, end: float, hit: bool)
# - State(notes: tuple[Note, ...], score: float, missed_notes: int, game_end: bool, multiplier: float,
#         consecutive_hits: int, should_play_random_note: bool)
#
# Public constants and helpers:
# - LANE_COUNT, LANE_COLORS, KEY_BINDINGS, END_OF_GAME_NOTE_ID, INITIAL_STATE
# - lane_for_key(key: str) -> Optional[int]
# - end_of_game_note() -> Note
#
# Inputs/Outputs:
# - These types are exchanged between chart_engine, actions, game_session, presentation
#   and the Qt harness.
#
########################

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple

LANE_COUNT = 4

LANE_COLORS: Tuple[str, ...] = ("green", "red", "blue", "yellow")

END_OF_GAME_NOTE_ID = "end-of-game"

Key = Literal["KeyH", "KeyJ", "KeyK", "KeyL"]

KEY_BINDINGS: Dict[Key, int] = {
    "KeyH": 0,
    "KeyJ": 1,
    "KeyK": 2,
    "KeyL": 3,
}


def lane_for_key(key: str) -> Optional[int]:
    return KEY_BINDINGS.get(str(key))


def column_for_pitch(pitch: int) -> int:
    return int(pitch) % LANE_COUNT


@dataclass(frozen=True)
class Note:
    id: str
    user_played: bool
    column: int
    y: float
    instrument_name: str
    velocity: float
    pitch: int
    start: float
    end: float
    hit: bool = False

    @property
    def duration_seconds(self) -> float:
        return float(self.end) - float(self.start)

    @property
    def is_end_of_game(self) -> bool:
        return self.id == END_OF_GAME_NOTE_ID


@dataclass(frozen=True)
class State:
    notes: Tuple[Note, ...] = ()
    score: float = 0.0
    missed_notes: int = 0
    game_end: bool = False
    multiplier: float = 1.0
    consecutive_hits: int = 0
    should_play_random_note: bool = False

    @property
    def rounded_score(self) -> int:
        return int(math.floor(float(self.score) + 0.5))


INITIAL_STATE = State()


def end_of_game_note() -> Note:
    return Note(
        id=END_OF_GAME_NOTE_ID,
        user_played=True,
        column=0,
        y=0.0,
        instrument_name="",
        velocity=0.0,
        pitch=0,
        start=0.0,
        end=0.0,
        hit=False,
    )
