# -*- coding: utf-8 -*-
########################
# audio_triggers.py
########################
# Purpose:
# - Audio side of the presentation boundary.
# - Turns state transitions, background chart notes and ambient pulses into play commands,
#   and routes them to instruments through an explicitly passed InstrumentBank.
#
# Design notes:
# - No Qt usage and no audio library. Playback backends implement the Instrument protocol.
# - The bank is owned by the presentation side and injected. There is no global sample table.
# - Unknown instruments are logged and skipped; a missing sample never stops the game.
#
########################
# Interfaces:
# Public dataclasses:
# - PlayCommand(instrument_name: str, note_name: str, duration_seconds: float, velocity: float)
#
# Public protocols:
# - Instrument.trigger_attack_release(note_name: str, duration_seconds: float, velocity: float) -> None
#
# Public functions:
# - midi_to_note_name(pitch: int) -> str
# - hit_note_commands(previous: State, current: State) -> list[PlayCommand]
# - background_note_command(note: Note) -> PlayCommand
# - random_note_command(random_note: RandomNote, instrument_name: str = "piano") -> PlayCommand
#
# Public classes:
# - class LoggingInstrument
# - class InstrumentBank
#   - register(name: str, instrument: Instrument) -> None
#   - names() -> list[str]
#   - play(command: PlayCommand) -> bool
#
########################

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable

import gameplay_models
import random_note_trigger

logger = logging.getLogger(__name__)

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

NOTE_VELOCITY_SCALE = 0.8
RANDOM_NOTE_VELOCITY = 1.4
DEFAULT_RANDOM_NOTE_INSTRUMENT = "piano"

DEFAULT_INSTRUMENTS = (
    "bass-electric",
    "violin",
    "piano",
    "trumpet",
    "saxophone",
    "trombone",
    "flute",
)


@dataclass(frozen=True)
class PlayCommand:
    instrument_name: str
    note_name: str
    duration_seconds: float
    velocity: float


@runtime_checkable
class Instrument(Protocol):
    def trigger_attack_release(self, note_name: str, duration_seconds: float, velocity: float) -> None:
        ...


def midi_to_note_name(pitch: int) -> str:
    value = int(pitch)
    octave = value // 12 - 1
    return f"{NOTE_NAMES[value % 12]}{octave}"


def _note_command(note: gameplay_models.Note) -> PlayCommand:
    return PlayCommand(
        instrument_name=str(note.instrument_name),
        note_name=midi_to_note_name(note.pitch),
        duration_seconds=note.duration_seconds,
        velocity=float(note.velocity) * NOTE_VELOCITY_SCALE,
    )


def hit_note_commands(previous: gameplay_models.State, current: gameplay_models.State) -> List[PlayCommand]:
    """One command per note whose hit flag flipped between the two states."""
    already_hit = {note.id for note in previous.notes if note.hit}
    return [_note_command(note) for note in current.notes if note.hit and note.id not in already_hit]


def background_note_command(note: gameplay_models.Note) -> PlayCommand:
    return _note_command(note)


def random_note_command(
    random_note: random_note_trigger.RandomNote,
    instrument_name: str = DEFAULT_RANDOM_NOTE_INSTRUMENT,
) -> PlayCommand:
    return PlayCommand(
        instrument_name=str(instrument_name),
        note_name=midi_to_note_name(random_note.pitch),
        duration_seconds=float(random_note.duration_seconds),
        velocity=RANDOM_NOTE_VELOCITY,
    )


class LoggingInstrument:
    """Instrument backend that only records what it was asked to play."""

    def __init__(self, name: str) -> None:
        self.name = str(name)
        self.played: List[PlayCommand] = []

    def trigger_attack_release(self, note_name: str, duration_seconds: float, velocity: float) -> None:
        command = PlayCommand(
            instrument_name=self.name,
            note_name=str(note_name),
            duration_seconds=float(duration_seconds),
            velocity=float(velocity),
        )
        self.played.append(command)
        logger.debug("play %s %s dur=%.3f vel=%.2f", self.name, note_name, duration_seconds, velocity)


class InstrumentBank:
    def __init__(self, instruments: Optional[Dict[str, Instrument]] = None) -> None:
        self._instruments: Dict[str, Instrument] = dict(instruments or {})

    @classmethod
    def with_logging_instruments(cls, names: Iterable[str] = DEFAULT_INSTRUMENTS) -> "InstrumentBank":
        return cls({str(name): LoggingInstrument(str(name)) for name in names})

    def register(self, name: str, instrument: Instrument) -> None:
        self._instruments[str(name)] = instrument

    def names(self) -> List[str]:
        return sorted(self._instruments.keys())

    def get(self, name: str) -> Optional[Instrument]:
        return self._instruments.get(str(name))

    def play(self, command: PlayCommand) -> bool:
        instrument = self._instruments.get(command.instrument_name)
        if instrument is None:
            logger.warning("No instrument loaded for %r; skipping %s", command.instrument_name, command.note_name)
            return False
        instrument.trigger_attack_release(command.note_name, command.duration_seconds, command.velocity)
        return True


def _run_unit_tests() -> None:
    assert midi_to_note_name(60) == "C4"
    assert midi_to_note_name(69) == "A4"
    assert midi_to_note_name(61) == "C#4"
    assert midi_to_note_name(21) == "A0"

    note = gameplay_models.Note(
        id="7",
        user_played=True,
        column=0,
        y=350.0,
        instrument_name="piano",
        velocity=0.5,
        pitch=60,
        start=1.0,
        end=1.5,
    )
    previous = gameplay_models.State(notes=(note,))
    current = gameplay_models.State(notes=(dataclasses.replace(note, hit=True),))
    commands = hit_note_commands(previous, current)
    assert commands == [PlayCommand("piano", "C4", 0.5, 0.4)]
    assert hit_note_commands(current, current) == []

    bank = InstrumentBank.with_logging_instruments(["piano"])
    assert bank.play(commands[0])
    assert not bank.play(PlayCommand("kazoo", "C4", 0.5, 0.4))

    ambient = random_note_command(random_note_trigger.RandomNote(pitch=78, duration_seconds=0.25))
    assert ambient.velocity == RANDOM_NOTE_VELOCITY
    assert ambient.note_name == "F#5"


if __name__ == "__main__":
    _run_unit_tests()
    print("audio_triggers.py: ok")
