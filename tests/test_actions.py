import random

import pytest

import actions
import gameplay_models
from gameplay_models import INITIAL_STATE, State

KEYS = ("KeyH", "KeyJ", "KeyK", "KeyL")


def _random_actions(seed, make_note, count=400):
    generator = random.Random(seed)
    sequence = []
    next_id = 0
    for _ in range(count):
        roll = generator.random()
        if roll < 0.15:
            pitch = generator.randint(40, 80)
            sequence.append(actions.AddNote(make_note(id=str(next_id), pitch=pitch)))
            next_id += 1
        elif roll < 0.35:
            sequence.append(actions.KeyPress(generator.choice(KEYS)))
        elif roll < 0.40:
            sequence.append(actions.PlayRandomNote())
        else:
            sequence.append(actions.Tick())
    return sequence


def test_fold_is_deterministic(make_note):
    sequence = _random_actions(11, make_note)
    assert actions.reduce_actions(sequence) == actions.reduce_actions(sequence)
    assert list(actions.scan_states(sequence)) == list(actions.scan_states(sequence))


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_score_never_negative(seed, make_note):
    for state in actions.scan_states(_random_actions(seed, make_note)):
        assert state.score >= 0
        assert state.multiplier >= 1.0


def test_tick_with_miss_resets_combo_and_multiplier(make_note):
    state = State(notes=(make_note(y=351.0),), multiplier=1.4, consecutive_hits=12, score=30.0)
    after = actions.reduce_state(state, actions.Tick())
    assert after.missed_notes == 1
    assert after.multiplier == 1.0
    assert after.consecutive_hits == 0
    assert after.score == 30.0
    assert after.notes == ()


def test_tick_without_miss_keeps_combo(make_note):
    state = State(notes=(make_note(y=100.0),), multiplier=1.2, consecutive_hits=10)
    after = actions.reduce_state(state, actions.Tick())
    assert after.multiplier == 1.2
    assert after.consecutive_hits == 10
    assert after.notes[0].y == pytest.approx(100.0 + 350.0 / 112.5)


def test_tick_clears_random_note_flag():
    state = State(should_play_random_note=True)
    assert not actions.reduce_state(state, actions.Tick()).should_play_random_note


def test_hit_note_is_never_hittable_again(aligned_note):
    state = actions.reduce_actions([actions.AddNote(aligned_note()), actions.KeyPress("KeyH")])
    assert state.score == 1.0
    again = actions.reduce_state(state, actions.KeyPress("KeyH"))
    assert again.score == 0.0
    assert again.should_play_random_note
    assert again.consecutive_hits == 0


def test_ten_hits_raise_multiplier_once(aligned_note):
    state = INITIAL_STATE
    for index in range(10):
        state = actions.reduce_actions(
            [actions.AddNote(aligned_note(str(index))), actions.KeyPress("KeyH"), actions.Tick()],
            state,
        )
    assert state.consecutive_hits == 10
    assert state.multiplier == pytest.approx(1.2)
    assert state.score == 10.0
    assert state.missed_notes == 0

    state = actions.reduce_actions([actions.AddNote(aligned_note("10")), actions.KeyPress("KeyH")], state)
    assert state.consecutive_hits == 11
    assert state.multiplier == pytest.approx(1.2)
    assert state.score == 11.0


def test_single_aligned_hit(aligned_note):
    state = actions.reduce_actions([actions.AddNote(aligned_note()), actions.KeyPress("KeyH")])
    assert state.score == 1.0
    assert state.consecutive_hits == 1
    assert state.multiplier == 1.0
    assert not state.should_play_random_note
    assert state.notes[0].hit


def test_press_hits_every_hittable_note_in_lane(aligned_note):
    state = actions.reduce_actions(
        [
            actions.AddNote(aligned_note("a", 2)),
            actions.AddNote(aligned_note("b", 2)),
            actions.AddNote(aligned_note("c", 3)),
            actions.KeyPress("KeyK"),
        ]
    )
    assert state.score == 2.0
    assert state.consecutive_hits == 1
    assert [note.hit for note in state.notes] == [True, True, False]


def test_stray_press():
    state = actions.reduce_state(State(score=5.0, consecutive_hits=4, multiplier=1.2), actions.KeyPress("KeyJ"))
    assert state.score == 4.0
    assert state.consecutive_hits == 0
    assert state.multiplier == 1.0
    assert state.should_play_random_note

    floored = actions.reduce_state(INITIAL_STATE, actions.KeyPress("KeyJ"))
    assert floored.score == 0.0


def test_hit_note_removed_on_next_tick_without_miss(aligned_note, rules):
    state = actions.reduce_actions([actions.AddNote(aligned_note()), actions.KeyPress("KeyH")])
    assert state.notes[0].y == pytest.approx(rules.hit_line_y + rules.note_velocity())
    state = actions.reduce_state(state, actions.Tick())
    assert state.notes == ()
    assert state.missed_notes == 0


def test_unhit_note_falls_through_and_counts_once(make_note):
    state = actions.reduce_state(INITIAL_STATE, actions.AddNote(make_note()))
    for _ in range(200):
        state = actions.reduce_state(state, actions.Tick())
    assert state.missed_notes == 1
    assert state.notes == ()


def test_note_becomes_hittable_after_103_ticks(make_note, rules):
    state = actions.reduce_state(INITIAL_STATE, actions.AddNote(make_note()))
    for _ in range(102):
        state = actions.reduce_state(state, actions.Tick())
    assert actions.reduce_state(state, actions.KeyPress("KeyH")).score == 0.0
    state = actions.reduce_state(state, actions.Tick())
    assert actions.reduce_state(state, actions.KeyPress("KeyH")).score == 1.0


def test_unknown_key_and_random_note_are_identity():
    state = State(score=3.0)
    assert actions.reduce_state(state, actions.KeyPress("KeyZ")) is state
    assert actions.reduce_state(state, actions.PlayRandomNote()) is state
    assert actions.KeyPress("KeyZ").lane() is None
    assert actions.KeyPress("KeyL").lane() == 3


def test_end_of_game_sentinel_sets_flag_only(make_note):
    state = actions.reduce_state(INITIAL_STATE, actions.AddNote(make_note()))
    ended = actions.reduce_state(state, actions.AddNote(gameplay_models.end_of_game_note()))
    assert ended.game_end
    assert [note.id for note in ended.notes] == ["0"]


def test_actions_after_game_end_are_harmless(aligned_note):
    states = list(
        actions.scan_states(
            [
                actions.AddNote(aligned_note()),
                actions.AddNote(gameplay_models.end_of_game_note()),
                actions.Tick(),
                actions.KeyPress("KeyH"),
                actions.PlayRandomNote(),
            ]
        )
    )
    assert [state.game_end for state in states] == [False, True, True, True, True]
    final = states[-1]
    assert final.missed_notes == 0
    assert final.score == 1.0
    assert final.notes[0].hit
