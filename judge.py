# -*- coding: utf-8 -*-
########################
# judge.py
########################
# Purpose:
# - Hit judgement and scoring laws.
# - Decides which notes a key press can hit, which notes a tick counts as missed,
#   and how score, combo and multiplier respond.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Judgement is positional: a note is hittable while |y - hit_line_y| <= hit_window.
# - A note that is already hit is never hittable and never missed.
# - Scores are stored rounded half up.
#
########################
# Interfaces:
# Public functions:
# - is_note_hittable(note: Note, lane: int, rules: GameRules) -> bool
# - is_missed_note(note: Note, rules: GameRules) -> bool
# - is_note_in_play_area(note: Note, rules: GameRules) -> bool
# - round_half_up(value: float) -> int
# - score_after_press(score: float, notes_hit: int, multiplier: float, rules: GameRules) -> float
# - combo_after_press(consecutive_hits: int, notes_hit: int) -> int
# - multiplier_after_press(multiplier: float, new_consecutive_hits: int, notes_hit: int) -> float
#
# Inputs:
# - Note snapshots and GameRules.
#
# Outputs:
# - Plain values consumed by actions.KeyPress and actions.Tick.
#
########################

from __future__ import annotations

import dataclasses
import math

import gameplay_models
import timing_model

COMBO_STEP = 10
MULTIPLIER_STEP = 0.2
BASE_MULTIPLIER = 1.0


def is_note_hittable(note: gameplay_models.Note, lane: int, rules: timing_model.GameRules) -> bool:
    return (
        int(note.column) == int(lane)
        and abs(float(note.y) - float(rules.hit_line_y)) <= float(rules.hit_window)
        and not note.hit
    )


def is_missed_note(note: gameplay_models.Note, rules: timing_model.GameRules) -> bool:
    return float(note.y) > float(rules.hit_line_y) and not note.hit


def is_note_in_play_area(note: gameplay_models.Note, rules: timing_model.GameRules) -> bool:
    return float(note.y) <= float(rules.hit_line_y) + rules.note_velocity()


def round_half_up(value: float) -> int:
    return int(math.floor(float(value) + 0.5))


def score_after_press(score: float, notes_hit: int, multiplier: float, rules: timing_model.GameRules) -> float:
    if notes_hit == 0:
        base_score = max(0.0, float(score) - float(rules.score_decrement))
    else:
        base_score = float(score) + int(notes_hit) * float(multiplier) * float(rules.score_increment)
    return float(round_half_up(base_score))


def combo_after_press(consecutive_hits: int, notes_hit: int) -> int:
    if notes_hit > 0:
        return int(consecutive_hits) + 1
    return 0


def multiplier_after_press(multiplier: float, new_consecutive_hits: int, notes_hit: int) -> float:
    if notes_hit == 0:
        return BASE_MULTIPLIER
    if new_consecutive_hits > 0 and new_consecutive_hits % COMBO_STEP == 0:
        return float(multiplier) + MULTIPLIER_STEP
    return float(multiplier)


def _run_unit_tests() -> None:
    rules = timing_model.DEFAULT_RULES
    note = gameplay_models.Note(
        id="0",
        user_played=True,
        column=0,
        y=350.0,
        instrument_name="piano",
        velocity=0.5,
        pitch=60,
        start=2.0,
        end=2.5,
    )
    assert is_note_hittable(note, 0, rules)
    assert not is_note_hittable(note, 1, rules)
    assert is_note_hittable(dataclasses.replace(note, y=320.0), 0, rules)
    assert not is_note_hittable(dataclasses.replace(note, y=319.0), 0, rules)
    assert not is_note_hittable(dataclasses.replace(note, hit=True), 0, rules)

    assert not is_missed_note(note, rules)
    assert is_missed_note(dataclasses.replace(note, y=351.0), rules)

    assert score_after_press(0.0, 0, 1.0, rules) == 0.0
    assert score_after_press(5.0, 0, 1.0, rules) == 4.0
    assert score_after_press(10.0, 1, 1.2, rules) == 11.0
    assert score_after_press(0.0, 2, 1.0, rules) == 2.0

    assert combo_after_press(9, 1) == 10
    assert combo_after_press(9, 0) == 0
    assert abs(multiplier_after_press(1.0, 10, 1) - 1.2) < 1e-9
    assert multiplier_after_press(1.0, 9, 1) == 1.0
    assert multiplier_after_press(1.4, 0, 0) == 1.0

    assert round_half_up(2.5) == 3
    assert round_half_up(11.2) == 11


if __name__ == "__main__":
    _run_unit_tests()
    print("judge.py: ok")
