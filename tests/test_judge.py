import pytest

import judge


def test_hit_window_edges(make_note, rules):
    assert judge.is_note_hittable(make_note(y=320.0), 0, rules)
    assert judge.is_note_hittable(make_note(y=380.0), 0, rules)
    assert not judge.is_note_hittable(make_note(y=319.9), 0, rules)
    assert not judge.is_note_hittable(make_note(y=350.0), 1, rules)
    assert not judge.is_note_hittable(make_note(y=350.0, hit=True), 0, rules)


def test_missed_and_play_area(make_note, rules):
    assert not judge.is_missed_note(make_note(y=350.0), rules)
    assert judge.is_missed_note(make_note(y=350.5), rules)
    assert not judge.is_missed_note(make_note(y=360.0, hit=True), rules)

    edge = rules.hit_line_y + rules.note_velocity()
    assert judge.is_note_in_play_area(make_note(y=edge), rules)
    assert not judge.is_note_in_play_area(make_note(y=edge + 0.01), rules)


def test_score_rounding_and_floor(rules):
    assert judge.score_after_press(0.0, 0, 1.0, rules) == 0.0
    assert judge.score_after_press(3.0, 0, 1.6, rules) == 2.0
    assert judge.score_after_press(10.0, 1, 1.2, rules) == 11.0
    assert judge.score_after_press(10.0, 3, 1.2, rules) == 14.0
    assert judge.round_half_up(0.5) == 1
    assert judge.round_half_up(1.49) == 1


def test_combo_and_multiplier():
    assert judge.combo_after_press(0, 1) == 1
    assert judge.combo_after_press(5, 0) == 0
    assert judge.multiplier_after_press(1.0, 10, 1) == pytest.approx(1.2)
    assert judge.multiplier_after_press(1.2, 20, 2) == pytest.approx(1.4)
    assert judge.multiplier_after_press(1.2, 11, 1) == pytest.approx(1.2)
    assert judge.multiplier_after_press(1.4, 0, 0) == 1.0
