# -*- coding: utf-8 -*-
########################
# chart_engine.py
########################
# Purpose:
# - Chart loading and arrival scheduling.
# - Converts CSV chart rows into gameplay_models.Note values and computes when each note
#   must enter play so that it reaches the hit line at its musical start time.
#
########################
# Key Logic:
# - Row contract (after one ignored header line):
#     userPlayed, instrument, velocity (0-127), pitch (MIDI), start (seconds), end (seconds)
# - Derived fields:
#   - id = data row index as text
#   - column = pitch % 4
#   - velocity = velocity / 127
# - Arrival time = start - fall duration, clamped to 0.
# - Exactly one end-of-game sentinel is scheduled fall duration + end padding after the last arrival.
# - Lenient on shape:
#   - Fields after the sixth (a trailing comma included) are ignored.
#   - velocity and pitch accept integer-valued decimals such as "100.0" (truncated).
# - Strict contract:
#   - A malformed data row (fewer than six fields, unparseable number) aborts the whole load.
#     Rows are never clamped or skipped.
#   - Blank lines (including a trailing newline) are not data rows.
#
########################
# Interfaces:
# Public exceptions:
# - class MalformedChartRowError(ValueError)
# - class ChartLoadError(OSError)
#
# Public dataclasses:
# - ChartArrival(time_ms: float, note: Note)
# - Chart(name: str, notes: list[Note], arrivals: list[ChartArrival])
#
# Public functions:
# - parse_chart_row(line: str, index: int, *, line_number: int = 0) -> Note
# - parse_chart_csv(text: str) -> list[Note]
# - schedule_chart(notes: Iterable[Note], rules: GameRules) -> list[ChartArrival]
# - chart_from_csv(text: str, *, name: str, rules: GameRules) -> Chart
# - load_chart(path: Path, *, rules: GameRules) -> Chart
#
########################
# Smoke Tests:
#   - python chart_engine.py
########################

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

import gameplay_models
import timing_model

logger = logging.getLogger(__name__)

CHART_FIELD_COUNT = 6
MIDI_VELOCITY_MAX = 127.0


class MalformedChartRowError(ValueError):
    """Raised when a chart data row cannot be turned into a Note."""

    def __init__(self, message: str, *, line_number: int, line: str) -> None:
        super().__init__(f"line {line_number}: {message}: {line!r}")
        self.line_number = int(line_number)
        self.line = str(line)


class ChartLoadError(OSError):
    """Raised when a chart file cannot be read."""


@dataclass(frozen=True)
class ChartArrival:
    time_ms: float
    note: gameplay_models.Note


@dataclass(frozen=True)
class Chart:
    name: str
    notes: List[gameplay_models.Note]
    arrivals: List[ChartArrival]

    @property
    def user_note_count(self) -> int:
        return sum(1 for note in self.notes if note.user_played)

    @property
    def end_time_ms(self) -> float:
        if not self.arrivals:
            return 0.0
        return float(self.arrivals[-1].time_ms)


def _parse_whole_number(text: str) -> int:
    # Integer-valued decimals ("100.0") are truncated toward zero.
    try:
        return int(text)
    except ValueError:
        return int(float(text))


def parse_chart_row(line: str, index: int, *, line_number: int = 0) -> gameplay_models.Note:
    fields = [field.strip() for field in str(line).split(",")]
    if len(fields) < CHART_FIELD_COUNT:
        raise MalformedChartRowError(
            f"expected at least {CHART_FIELD_COUNT} fields, found {len(fields)}",
            line_number=line_number,
            line=line,
        )

    user_played_text, instrument_name, velocity_text, pitch_text, start_text, end_text = fields[:CHART_FIELD_COUNT]
    try:
        velocity = _parse_whole_number(velocity_text)
        pitch = _parse_whole_number(pitch_text)
        start = float(start_text)
        end = float(end_text)
    except (ValueError, OverflowError) as exc:
        raise MalformedChartRowError(str(exc), line_number=line_number, line=line) from exc

    return gameplay_models.Note(
        id=str(int(index)),
        user_played=user_played_text.lower() == "true",
        column=gameplay_models.column_for_pitch(pitch),
        y=0.0,
        instrument_name=instrument_name,
        velocity=velocity / MIDI_VELOCITY_MAX,
        pitch=pitch,
        start=start,
        end=end,
        hit=False,
    )


def parse_chart_csv(text: str) -> List[gameplay_models.Note]:
    lines = str(text).splitlines()
    notes: List[gameplay_models.Note] = []

    # Line 1 is the header.
    for line_number, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        notes.append(parse_chart_row(line, len(notes), line_number=line_number))
    return notes


def schedule_chart(
    notes: Iterable[gameplay_models.Note],
    rules: timing_model.GameRules = timing_model.DEFAULT_RULES,
) -> List[ChartArrival]:
    arrivals = [ChartArrival(time_ms=rules.arrival_delay_ms(note.start), note=note) for note in notes]
    # sorted() is stable, so notes sharing an arrival time keep row order.
    arrivals = sorted(arrivals, key=lambda item: float(item.time_ms))

    last_arrival_ms = arrivals[-1].time_ms if arrivals else 0.0
    arrivals.append(
        ChartArrival(
            time_ms=rules.end_of_game_delay_ms(last_arrival_ms),
            note=gameplay_models.end_of_game_note(),
        )
    )
    return arrivals


def chart_from_csv(
    text: str,
    *,
    name: str = "chart",
    rules: timing_model.GameRules = timing_model.DEFAULT_RULES,
) -> Chart:
    notes = parse_chart_csv(text)
    arrivals = schedule_chart(notes, rules)
    chart = Chart(name=str(name), notes=notes, arrivals=arrivals)
    logger.info(
        "Loaded chart %r: %d notes (%d user played), ends at %.0f ms",
        chart.name,
        len(chart.notes),
        chart.user_note_count,
        chart.end_time_ms,
    )
    return chart


def load_chart(path: Path, *, rules: timing_model.GameRules = timing_model.DEFAULT_RULES) -> Chart:
    chart_path = Path(path)
    try:
        raw_text = chart_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ChartLoadError(f"Failed to read chart file: {chart_path}. Error: {exc}") from exc
    return chart_from_csv(raw_text, name=chart_path.stem, rules=rules)


def _assert(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def _run_chunk_tests() -> None:
    text = "\n".join(
        [
            "user_played,instrument,velocity,pitch,start,end",
            "True,piano,127,60,3.0,3.5",
            "False,violin,64,61,0.5,1.0",
            "",
        ]
    )
    chart = chart_from_csv(text, name="smoke")
    _assert(len(chart.notes) == 2, "Expected two notes")
    _assert(chart.notes[0].column == 0 and chart.notes[1].column == 1, "Expected column = pitch % 4")
    _assert(chart.notes[0].velocity == 1.0, "Expected velocity scaled to 0..1")
    _assert([arrival.note.id for arrival in chart.arrivals] == ["1", "0", "end-of-game"], "Expected arrival order")
    _assert(chart.arrivals[0].time_ms == 0.0, "Expected negative delay clamped to 0")
    _assert(abs(chart.end_time_ms - (1200.0 + 1800.0 + 2000.0)) < 1e-9, "Expected sentinel after last arrival")

    try:
        parse_chart_csv("header\nTrue,piano,loud,60,1.0,1.5")
    except MalformedChartRowError as exc:
        _assert(exc.line_number == 2, "Expected line number of the bad row")
    else:
        raise AssertionError("Expected MalformedChartRowError for non numeric velocity")

    loose = parse_chart_row("True,piano,100.0,62.0,1.0,1.5,", 0)
    _assert(loose.pitch == 62 and loose.column == 2, "Expected decimal pitch and trailing comma accepted")

    empty = chart_from_csv("header\n", name="empty")
    _assert(len(empty.arrivals) == 1, "Expected only the sentinel")
    _assert(abs(empty.end_time_ms - 3800.0) < 1e-9, "Expected sentinel at fall + padding")


def main() -> int:
    """Chunk test entrypoint."""
    try:
        _run_chunk_tests()
    except Exception as exc:
        print("Chart loading and scheduling chunk tests: FAIL")
        print(str(exc))
        return 2

    print("Chart loading and scheduling chunk tests: PASS")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
