# -*- coding: utf-8 -*-
########################
# actions.py
########################
# Purpose:
# - The closed set of gameplay actions and the state reducer that folds them.
#
# Design notes:
# - No Qt usage. Every action is a frozen dataclass with apply(state, rules) -> State.
# - apply never mutates its input; it returns a new State built with dataclasses.replace.
# - Order matters: the reducer applies actions strictly in the order they are given.
#   Merging event sources into one order is the driver's job (see note_scheduler, game_session).
# - Actions after game_end still apply harmlessly. Drivers stop feeding them.
#
########################
# Interfaces:
# Public dataclasses:
# - Tick()
# - AddNote(note: Note)
# - KeyPress(key: Key)
# - PlayRandomNote()
#
# Public functions:
# - reduce_state(state: State, action: Action, rules: GameRules = DEFAULT_RULES) -> State
# - reduce_actions(actions: Iterable[Action], state: State = INITIAL_STATE, rules = DEFAULT_RULES) -> State
# - scan_states(actions: Iterable[Action], state: State = INITIAL_STATE, rules = DEFAULT_RULES) -> Iterator[State]
#
########################

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

import gameplay_models
import judge
import timing_model
from gameplay_models import INITIAL_STATE, State
from timing_model import DEFAULT_RULES, GameRules


@dataclass(frozen=True)
class Tick:
    """Advance every note by one tick of travel and account for notes that fell past the hit line."""

    def apply(self, state: State, rules: GameRules = DEFAULT_RULES) -> State:
        # Misses are counted on positions before the advance.
        missed_count = sum(1 for note in state.notes if judge.is_missed_note(note, rules))

        velocity = rules.note_velocity()
        moved_notes = tuple(
            dataclasses.replace(note, y=float(note.y) + velocity) for note in state.notes
        )
        kept_notes = tuple(note for note in moved_notes if judge.is_note_in_play_area(note, rules))

        return dataclasses.replace(
            state,
            notes=kept_notes,
            missed_notes=int(state.missed_notes) + missed_count,
            consecutive_hits=0 if missed_count > 0 else int(state.consecutive_hits),
            multiplier=judge.BASE_MULTIPLIER if missed_count > 0 else float(state.multiplier),
            should_play_random_note=False,
        )


@dataclass(frozen=True)
class AddNote:
    note: gameplay_models.Note

    def apply(self, state: State, rules: GameRules = DEFAULT_RULES) -> State:
        if self.note.is_end_of_game:
            return dataclasses.replace(state, game_end=True)
        return dataclasses.replace(state, notes=state.notes + (self.note,))


@dataclass(frozen=True)
class KeyPress:
    key: gameplay_models.Key

    def lane(self) -> Optional[int]:
        return gameplay_models.lane_for_key(self.key)

    def apply(self, state: State, rules: GameRules = DEFAULT_RULES) -> State:
        lane = self.lane()
        if lane is None:
            # Not a bound lane key.
            return state

        notes_hit = sum(1 for note in state.notes if judge.is_note_hittable(note, lane, rules))
        pinned_y = float(rules.hit_line_y) + rules.note_velocity()
        updated_notes = tuple(
            dataclasses.replace(note, y=pinned_y, hit=True) if judge.is_note_hittable(note, lane, rules) else note
            for note in state.notes
        )
        new_consecutive_hits = judge.combo_after_press(state.consecutive_hits, notes_hit)

        return dataclasses.replace(
            state,
            notes=updated_notes,
            score=judge.score_after_press(state.score, notes_hit, state.multiplier, rules),
            should_play_random_note=notes_hit == 0,
            consecutive_hits=new_consecutive_hits,
            multiplier=judge.multiplier_after_press(state.multiplier, new_consecutive_hits, notes_hit),
        )


@dataclass(frozen=True)
class PlayRandomNote:
    """Scheduling pulse for ambient audio. Leaves the state untouched."""

    def apply(self, state: State, rules: GameRules = DEFAULT_RULES) -> State:
        return state


Action = Union[Tick, AddNote, KeyPress, PlayRandomNote]


def reduce_state(state: State, action: Action, rules: GameRules = DEFAULT_RULES) -> State:
    return action.apply(state, rules)


def scan_states(
    actions: Iterable[Action],
    state: State = INITIAL_STATE,
    rules: GameRules = DEFAULT_RULES,
) -> Iterator[State]:
    current = state
    for action in actions:
        current = reduce_state(current, action, rules)
        yield current


def reduce_actions(
    actions: Iterable[Action],
    state: State = INITIAL_STATE,
    rules: GameRules = DEFAULT_RULES,
) -> State:
    current = state
    for current in scan_states(actions, state, rules):
        pass
    return current


def _aligned_note(note_id: str, column: int) -> gameplay_models.Note:
    rules = timing_model.DEFAULT_RULES
    return gameplay_models.Note(
        id=note_id,
        user_played=True,
        column=column,
        y=float(rules.hit_line_y),
        instrument_name="piano",
        velocity=0.5,
        pitch=60 + column,
        start=0.0,
        end=0.5,
    )


def _run_unit_tests() -> None:
    # Stray press on an empty board.
    stray = reduce_state(INITIAL_STATE, KeyPress("KeyH"))
    assert stray.score == 0.0
    assert stray.should_play_random_note
    assert stray.multiplier == 1.0

    # Hit, then the hit note is removed on the next tick without counting as a miss.
    state = reduce_actions([AddNote(_aligned_note("0", 0)), KeyPress("KeyH")])
    assert state.score == 1.0
    assert state.consecutive_hits == 1
    assert state.notes[0].hit
    state = reduce_state(state, Tick())
    assert state.notes == ()
    assert state.missed_notes == 0

    # Unhit note past the line is counted once.
    state = reduce_actions([AddNote(_aligned_note("1", 2)), Tick(), Tick(), Tick()])
    assert state.missed_notes == 1
    assert state.notes == ()

    # Unknown keys are ignored.
    assert reduce_state(INITIAL_STATE, KeyPress("KeyZ")) is INITIAL_STATE

    ended = reduce_state(INITIAL_STATE, AddNote(gameplay_models.end_of_game_note()))
    assert ended.game_end
    assert ended.notes == ()


if __name__ == "__main__":
    _run_unit_tests()
    print("actions.py: ok")
