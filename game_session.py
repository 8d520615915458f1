# -*- coding: utf-8 -*-
########################
# game_session.py
########################
# Purpose:
# - Runs the reducer over a merged event timeline.
# - GameEngine folds actions one at a time and derives the audio commands of every step.
# - HeadlessSession drives a whole chart on a virtual clock, for tests, tooling and the --headless CLI.
#
# Design notes:
# - No Qt usage. gameplay_harness.py reuses GameEngine and chart_events on the Qt event loop.
# - Sources merged into one EventQueue:
#   - chart arrivals (user played notes become AddNote, the sentinel ends the game)
#   - background notes (non user played), heard note_fall_time_ms after their arrival
#   - key presses
#   - ticks every tick_rate_ms, first one at tick_rate_ms
# - One tick cycle = advance the random note trigger, apply PlayRandomNote, apply Tick.
#   The pulse runs before Tick so a stray press since the previous tick is still flagged.
# - Drivers stop at the first state with game_end set.
#
########################
# Interfaces:
# Public dataclasses:
# - NoteArrival(note), BackgroundNote(note), KeyInput(key)
# - StepResult(time_ms: float, action: Optional[Action], state: State, audio: tuple[PlayCommand, ...])
# - SessionSummary(score: int, missed_notes: int, multiplier: float, max_combo: int, total_hits: int,
#                  steps: int, end_time_ms: float, game_end: bool)
#
# Public functions:
# - chart_events(chart: Chart, rules: GameRules) -> list[tuple[float, object]]
#
# Public classes:
# - class GameEngine
#   - dispatch(action, *, time_ms) -> StepResult
#   - deliver(payload, *, time_ms) -> list[StepResult]
#   - tick_cycle(*, time_ms) -> list[StepResult]
#   - autoplay_presses(*, time_ms) -> list[StepResult]
#   - summary(*, end_time_ms) -> SessionSummary
#   - reset() -> None
# - class HeadlessSession
#   - run() -> Iterator[StepResult]
#   - play() -> SessionSummary
#
########################

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import actions
import audio_triggers
import chart_engine
import gameplay_models
import judge
import note_scheduler
import random_note_trigger
import timing_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoteArrival:
    note: gameplay_models.Note


@dataclass(frozen=True)
class BackgroundNote:
    note: gameplay_models.Note


@dataclass(frozen=True)
class KeyInput:
    key: gameplay_models.Key


@dataclass(frozen=True)
class StepResult:
    time_ms: float
    action: Optional[actions.Action]
    state: gameplay_models.State
    audio: Tuple[audio_triggers.PlayCommand, ...] = ()


@dataclass(frozen=True)
class SessionSummary:
    score: int
    missed_notes: int
    multiplier: float
    max_combo: int
    total_hits: int
    steps: int
    end_time_ms: float
    game_end: bool


_KEY_FOR_LANE: Dict[int, gameplay_models.Key] = {lane: key for key, lane in gameplay_models.KEY_BINDINGS.items()}


def chart_events(
    chart: chart_engine.Chart,
    rules: timing_model.GameRules = timing_model.DEFAULT_RULES,
) -> List[Tuple[float, object]]:
    events: List[Tuple[float, object]] = []
    for arrival in chart.arrivals:
        if arrival.note.user_played:
            events.append((float(arrival.time_ms), NoteArrival(arrival.note)))
        else:
            events.append((float(arrival.time_ms) + float(rules.note_fall_time_ms), BackgroundNote(arrival.note)))
    return events


class GameEngine:
    def __init__(
        self,
        rules: timing_model.GameRules = timing_model.DEFAULT_RULES,
        *,
        random_trigger: Optional[random_note_trigger.RandomNoteTrigger] = None,
        random_note_instrument: str = audio_triggers.DEFAULT_RANDOM_NOTE_INSTRUMENT,
    ) -> None:
        self._rules = rules
        self._random_trigger = random_trigger if random_trigger is not None else random_note_trigger.RandomNoteTrigger()
        self._random_note_instrument = str(random_note_instrument)
        self._state = gameplay_models.INITIAL_STATE
        self._max_combo = 0
        self._total_hits = 0
        self._steps = 0

    @property
    def state(self) -> gameplay_models.State:
        return self._state

    @property
    def rules(self) -> timing_model.GameRules:
        return self._rules

    @property
    def random_trigger(self) -> random_note_trigger.RandomNoteTrigger:
        return self._random_trigger

    @property
    def is_finished(self) -> bool:
        return bool(self._state.game_end)

    def reset(self) -> None:
        self._state = gameplay_models.INITIAL_STATE
        self._random_trigger.reset()
        self._max_combo = 0
        self._total_hits = 0
        self._steps = 0

    def dispatch(self, action: actions.Action, *, time_ms: float = 0.0) -> StepResult:
        previous = self._state
        current = actions.reduce_state(previous, action, self._rules)
        self._state = current
        self._steps += 1

        audio = audio_triggers.hit_note_commands(previous, current)
        self._total_hits += len(audio)

        if isinstance(action, actions.PlayRandomNote) and current.should_play_random_note:
            random_note = self._random_trigger.latest
            if random_note is not None:
                audio.append(audio_triggers.random_note_command(random_note, self._random_note_instrument))

        if current.consecutive_hits > self._max_combo:
            self._max_combo = int(current.consecutive_hits)

        if current.game_end and not previous.game_end:
            logger.info(
                "Game over at %.0f ms: score=%d missed=%d",
                float(time_ms),
                current.rounded_score,
                current.missed_notes,
            )
        else:
            logger.debug("%.0f ms %s", float(time_ms), type(action).__name__)

        return StepResult(time_ms=float(time_ms), action=action, state=current, audio=tuple(audio))

    def deliver(self, payload: object, *, time_ms: float) -> List[StepResult]:
        if isinstance(payload, NoteArrival):
            return [self.dispatch(actions.AddNote(payload.note), time_ms=time_ms)]
        if isinstance(payload, KeyInput):
            return [self.dispatch(actions.KeyPress(payload.key), time_ms=time_ms)]
        if isinstance(payload, BackgroundNote):
            command = audio_triggers.background_note_command(payload.note)
            return [StepResult(time_ms=float(time_ms), action=None, state=self._state, audio=(command,))]
        raise TypeError(f"Unsupported timeline payload: {payload!r}")

    def tick_cycle(self, *, time_ms: float) -> List[StepResult]:
        self._random_trigger.advance()
        return [
            self.dispatch(actions.PlayRandomNote(), time_ms=time_ms),
            self.dispatch(actions.Tick(), time_ms=time_ms),
        ]

    def autoplay_presses(self, *, time_ms: float) -> List[StepResult]:
        """Press every lane that currently has a hittable note."""
        results: List[StepResult] = []
        for lane in range(gameplay_models.LANE_COUNT):
            if any(judge.is_note_hittable(note, lane, self._rules) for note in self._state.notes):
                results.append(self.dispatch(actions.KeyPress(_KEY_FOR_LANE[lane]), time_ms=time_ms))
        return results

    def summary(self, *, end_time_ms: float) -> SessionSummary:
        return SessionSummary(
            score=self._state.rounded_score,
            missed_notes=int(self._state.missed_notes),
            multiplier=float(self._state.multiplier),
            max_combo=int(self._max_combo),
            total_hits=int(self._total_hits),
            steps=int(self._steps),
            end_time_ms=float(end_time_ms),
            game_end=bool(self._state.game_end),
        )


class HeadlessSession:
    _TICK = object()

    def __init__(
        self,
        chart: chart_engine.Chart,
        *,
        rules: timing_model.GameRules = timing_model.DEFAULT_RULES,
        key_presses: Iterable[Tuple[float, str]] = (),
        autoplay: bool = False,
        random_seed: int = 0,
        random_note_instrument: str = audio_triggers.DEFAULT_RANDOM_NOTE_INSTRUMENT,
        max_time_ms: Optional[float] = None,
    ) -> None:
        self._chart = chart
        self._rules = rules
        self._key_presses = sorted(((float(time_ms), str(key)) for time_ms, key in key_presses), key=lambda item: item[0])
        self._autoplay = bool(autoplay)
        self._max_time_ms = None if max_time_ms is None else float(max_time_ms)
        self._engine = GameEngine(
            rules,
            random_trigger=random_note_trigger.RandomNoteTrigger(seed=random_seed),
            random_note_instrument=random_note_instrument,
        )
        self._last_time_ms = 0.0

    @property
    def engine(self) -> GameEngine:
        return self._engine

    def _build_queue(self) -> note_scheduler.EventQueue:
        queue = note_scheduler.EventQueue()
        queue.extend(chart_events(self._chart, self._rules))
        queue.extend((time_ms, KeyInput(key)) for time_ms, key in self._key_presses)
        queue.push(float(self._rules.tick_rate_ms), self._TICK)
        return queue

    def run(self) -> Iterator[StepResult]:
        self._engine.reset()
        queue = self._build_queue()
        tick_index = 1

        while len(queue) > 0 and not self._engine.is_finished:
            event = queue.pop_next()
            time_ms = float(event.fire_time_ms)
            if self._max_time_ms is not None and time_ms > self._max_time_ms:
                logger.warning("Stopping headless session at %.0f ms before the end of the chart", time_ms)
                return
            self._last_time_ms = time_ms

            if event.payload is self._TICK:
                results = self._engine.tick_cycle(time_ms=time_ms)
                if self._autoplay:
                    results.extend(self._engine.autoplay_presses(time_ms=time_ms))
                tick_index += 1
                queue.push(float(tick_index * self._rules.tick_rate_ms), self._TICK)
            else:
                results = self._engine.deliver(event.payload, time_ms=time_ms)

            for result in results:
                yield result

    def play(self) -> SessionSummary:
        for _ in self.run():
            pass
        return self._engine.summary(end_time_ms=self._last_time_ms)


def _run_unit_tests() -> None:
    empty_chart = chart_engine.chart_from_csv("header\n", name="empty")
    summary = HeadlessSession(empty_chart).play()
    assert summary.game_end
    assert summary.end_time_ms == 3800.0
    assert summary.score == 0

    text = "\n".join(
        [
            "user_played,instrument,velocity,pitch,start,end",
            "True,piano,100,60,2.0,2.4",
            "True,piano,100,61,2.5,2.9",
            "False,violin,90,62,2.0,3.0",
        ]
    )
    chart = chart_engine.chart_from_csv(text, name="smoke")

    auto = HeadlessSession(chart, autoplay=True)
    steps = list(auto.run())
    auto_summary = auto.engine.summary(end_time_ms=steps[-1].time_ms)
    assert auto_summary.total_hits == 2
    assert auto_summary.missed_notes == 0
    assert auto_summary.score == 2
    assert any(step.action is None for step in steps)

    idle_summary = HeadlessSession(chart).play()
    assert idle_summary.missed_notes == 2
    assert idle_summary.score == 0


if __name__ == "__main__":
    _run_unit_tests()
    print("game_session.py: ok")
