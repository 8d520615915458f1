# -*- coding: utf-8 -*-
########################
# presentation.py
########################
# Purpose:
# - Visual side of the presentation boundary, without any drawing toolkit.
# - Turns a State snapshot into keyed render operations and HUD text for a rendering surface.
#
# Design notes:
# - No Qt usage. overlay_renderer.py paints what this module describes.
# - Visual elements are keyed by note id. A note below the hit line is removed,
#   a known note is moved, an unknown note is created.
# - Ids missing from the State are dropped from the known set.
#
########################
# Interfaces:
# Public enums:
# - class RenderOpKind(enum.Enum): CREATE | UPDATE | REMOVE
#
# Public dataclasses:
# - RenderOp(kind: RenderOpKind, note_id: str, column: int, y: float)
# - HudFields(score: str, missed: str, multiplier: str, combo: str)
#
# Public functions:
# - diff_render(known_ids: AbstractSet[str], state: State, rules: GameRules) -> tuple[list[RenderOp], frozenset[str]]
# - hud_fields(state: State) -> HudFields
# - note_center(note: Note, rules: GameRules) -> tuple[float, float]
# - lane_color(column: int) -> str
#
########################

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import AbstractSet, List, Tuple

import gameplay_models
import timing_model

# Lane centres step by 20% of the canvas width, starting at 20%.
LANE_X_FRACTION_START = 0.20
LANE_X_FRACTION_STEP = 0.20
NOTE_RADIUS_FRACTION = 0.07


class RenderOpKind(enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    REMOVE = "remove"


@dataclass(frozen=True)
class RenderOp:
    kind: RenderOpKind
    note_id: str
    column: int
    y: float


@dataclass(frozen=True)
class HudFields:
    score: str
    missed: str
    multiplier: str
    combo: str


def lane_color(column: int) -> str:
    return gameplay_models.LANE_COLORS[int(column) % len(gameplay_models.LANE_COLORS)]


def note_center(note: gameplay_models.Note, rules: timing_model.GameRules = timing_model.DEFAULT_RULES) -> Tuple[float, float]:
    x_fraction = LANE_X_FRACTION_START + LANE_X_FRACTION_STEP * int(note.column)
    return (x_fraction * float(rules.canvas_width), float(note.y))


def note_radius(rules: timing_model.GameRules = timing_model.DEFAULT_RULES) -> float:
    return NOTE_RADIUS_FRACTION * float(rules.canvas_width)


def diff_render(
    known_ids: AbstractSet[str],
    state: gameplay_models.State,
    rules: timing_model.GameRules = timing_model.DEFAULT_RULES,
) -> Tuple[List[RenderOp], frozenset]:
    ops: List[RenderOp] = []
    visible = set(known_ids)

    for note in state.notes:
        if float(note.y) > float(rules.hit_line_y):
            if note.id in visible:
                visible.discard(note.id)
                ops.append(RenderOp(RenderOpKind.REMOVE, note.id, int(note.column), float(note.y)))
        elif note.id in visible:
            ops.append(RenderOp(RenderOpKind.UPDATE, note.id, int(note.column), float(note.y)))
        else:
            visible.add(note.id)
            ops.append(RenderOp(RenderOpKind.CREATE, note.id, int(note.column), float(note.y)))

    # Ids of notes the reducer already dropped are forgotten without an op.
    visible.intersection_update(note.id for note in state.notes)
    return ops, frozenset(visible)


def hud_fields(state: gameplay_models.State) -> HudFields:
    return HudFields(
        score=str(state.rounded_score),
        missed=str(int(state.missed_notes)),
        multiplier=f"{float(state.multiplier):.1f}x",
        combo=str(int(state.consecutive_hits)),
    )


def _run_unit_tests() -> None:
    rules = timing_model.DEFAULT_RULES
    note = gameplay_models.Note(
        id="3",
        user_played=True,
        column=1,
        y=10.0,
        instrument_name="piano",
        velocity=0.5,
        pitch=61,
        start=2.0,
        end=2.5,
    )
    ops, known = diff_render(frozenset(), gameplay_models.State(notes=(note,)), rules)
    assert [op.kind for op in ops] == [RenderOpKind.CREATE]
    assert known == frozenset({"3"})

    ops, known = diff_render(known, gameplay_models.State(notes=(note,)), rules)
    assert [op.kind for op in ops] == [RenderOpKind.UPDATE]

    gone = dataclasses.replace(note, y=360.0)
    ops, known = diff_render(known, gameplay_models.State(notes=(gone,)), rules)
    assert [op.kind for op in ops] == [RenderOpKind.REMOVE]
    assert known == frozenset()

    assert note_center(note, rules) == (0.4 * 200.0, 10.0)

    fields = hud_fields(gameplay_models.State(score=11.0, missed_notes=2, multiplier=1.2, consecutive_hits=10))
    assert fields == HudFields(score="11", missed="2", multiplier="1.2x", combo="10")


if __name__ == "__main__":
    _run_unit_tests()
    print("presentation.py: ok")
