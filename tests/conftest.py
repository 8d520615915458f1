import dataclasses
import os
import sys

import pytest

# Ensure the project root (containing the flat game modules) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import gameplay_models
import timing_model

SMOKE_CHART_TEXT = "\n".join(
    [
        "userPlayed,instrument,velocity,pitch,start,end",
        "true,piano,100,60,2.0,2.4",
        "true,piano,100,61,2.5,2.9",
        "false,violin,90,62,2.0,3.0",
    ]
)


@pytest.fixture()
def rules():
    return timing_model.DEFAULT_RULES


@pytest.fixture()
def make_note():
    base = gameplay_models.Note(
        id="0",
        user_played=True,
        column=0,
        y=0.0,
        instrument_name="piano",
        velocity=0.5,
        pitch=60,
        start=2.0,
        end=2.5,
    )

    def factory(**overrides):
        note = dataclasses.replace(base, **overrides)
        if "pitch" in overrides and "column" not in overrides:
            note = dataclasses.replace(note, column=gameplay_models.column_for_pitch(note.pitch))
        return note

    return factory


@pytest.fixture()
def aligned_note(make_note, rules):
    def factory(note_id="0", column=0):
        return make_note(id=note_id, column=column, pitch=60 + column, y=float(rules.hit_line_y))

    return factory


@pytest.fixture()
def smoke_chart_text():
    return SMOKE_CHART_TEXT


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    for name in (
        'NOTEFALL_CONFIG_PATH',
        'NOTEFALL_SONG_NAME',
        'NOTEFALL_ASSETS_DIR',
        'NOTEFALL_TICK_RATE_MS',
        'NOTEFALL_RANDOM_NOTE_INSTRUMENT',
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
