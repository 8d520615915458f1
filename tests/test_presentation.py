import pytest

import presentation
from gameplay_models import State
from presentation import RenderOpKind


def test_note_lifecycle_create_update_remove(make_note, rules):
    note = make_note(id="5", pitch=63, y=0.0)
    ops, known = presentation.diff_render(frozenset(), State(notes=(note,)), rules)
    assert [(op.kind, op.note_id, op.column) for op in ops] == [(RenderOpKind.CREATE, "5", 3)]

    moved = make_note(id="5", pitch=63, y=200.0)
    ops, known = presentation.diff_render(known, State(notes=(moved,)), rules)
    assert [(op.kind, op.y) for op in ops] == [(RenderOpKind.UPDATE, 200.0)]

    past = make_note(id="5", pitch=63, y=rules.hit_line_y + 1.0)
    ops, known = presentation.diff_render(known, State(notes=(past,)), rules)
    assert [op.kind for op in ops] == [RenderOpKind.REMOVE]
    assert known == frozenset()

    ops, known = presentation.diff_render(known, State(notes=(past,)), rules)
    assert ops == []


def test_note_dropped_by_reducer_is_forgotten(make_note, rules):
    note = make_note(id="9", y=10.0)
    _ops, known = presentation.diff_render(frozenset(), State(notes=(note,)), rules)
    ops, known = presentation.diff_render(known, State(), rules)
    assert ops == []
    assert known == frozenset()


def test_lane_geometry(make_note, rules):
    assert [presentation.lane_color(column) for column in range(4)] == ["green", "red", "blue", "yellow"]
    centers = [presentation.note_center(make_note(pitch=60 + column, y=5.0), rules)[0] for column in range(4)]
    assert centers == pytest.approx([40.0, 80.0, 120.0, 160.0])
    assert presentation.note_radius(rules) == pytest.approx(14.0)


def test_hud_fields_use_rounded_score():
    fields = presentation.hud_fields(State(score=2.5, missed_notes=3, multiplier=1.4000000000000001, consecutive_hits=0))
    assert fields.score == "3"
    assert fields.missed == "3"
    assert fields.multiplier == "1.4x"
    assert fields.combo == "0"


def test_drawn_ops_resolve_to_note_centres(make_note, rules):
    notes = tuple(make_note(id=str(column), pitch=60 + column, y=25.0 * column) for column in range(4))
    state = State(notes=notes)
    ops, _known = presentation.diff_render(frozenset(), state, rules)
    notes_by_id = {note.id: note for note in state.notes}
    centres = [presentation.note_center(notes_by_id[op.note_id], rules) for op in ops]
    assert centres == [
        pytest.approx((40.0, 0.0)),
        pytest.approx((80.0, 25.0)),
        pytest.approx((120.0, 50.0)),
        pytest.approx((160.0, 75.0)),
    ]
