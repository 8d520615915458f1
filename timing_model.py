# -*- coding: utf-8 -*-
########################
# timing_model.py
########################
# Purpose:
# - Single source of truth for gameplay timing and geometry.
# - Derives the per-tick note travel and the arrival delays used by the chart schedule.
#
# Design notes:
# - Gameplay code must read every timing constant from GameRules.
# - No Qt usage. Keep this module pure and deterministic.
# - Positions are canvas units: notes spawn at y = 0 and fall toward hit_line_y.
# - Arrival delays are clamped to non-negative. A note that should already be falling
#   at song start is emitted immediately.
#
########################
# Interfaces:
# Public dataclasses:
# - GameRules(tick_rate_ms: int, note_fall_time_ms: float, hit_window: float, hit_line_y: float,
#             score_increment: float, score_decrement: float, end_padding_ms: float,
#             canvas_width: float, canvas_height: float)
#   - note_velocity() -> float
#   - ticks_to_hit_line() -> float
#   - fall_duration_seconds() -> float
#   - arrival_delay_ms(start_seconds: float) -> float
#   - end_of_game_delay_ms(last_arrival_ms: float) -> float
#   - snapshot() -> TimingSnapshot
#
# Public constants:
# - DEFAULT_RULES: reference configuration (16 ms ticks, 1800 ms fall, hit line at 350)
#
# Inputs:
# - Values from config.GameplayConfig or the defaults below.
#
# Outputs:
# - Derived travel and delays used by chart_engine, judge, actions and presentation.
#
########################

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TimingSnapshot:
    tick_rate_ms: int
    note_velocity: float
    ticks_to_hit_line: float
    fall_duration_seconds: float


@dataclass(frozen=True)
class GameRules:
    tick_rate_ms: int = 16
    note_fall_time_ms: float = 1800.0
    hit_window: float = 30.0
    hit_line_y: float = 350.0
    score_increment: float = 1.0
    score_decrement: float = 1.0
    end_padding_ms: float = 2000.0
    canvas_width: float = 200.0
    canvas_height: float = 400.0

    def ticks_to_hit_line(self) -> float:
        return float(self.note_fall_time_ms) / float(self.tick_rate_ms)

    def note_velocity(self) -> float:
        # Total distance divided by the number of ticks it takes to cover it.
        return float(self.hit_line_y) / self.ticks_to_hit_line()

    def fall_duration_seconds(self) -> float:
        return float(self.note_fall_time_ms) / 1000.0

    def arrival_delay_ms(self, start_seconds: float) -> float:
        delay_ms = float(start_seconds) * 1000.0 - float(self.note_fall_time_ms)
        if delay_ms < 0.0:
            delay_ms = 0.0
        return delay_ms

    def end_of_game_delay_ms(self, last_arrival_ms: float) -> float:
        return float(last_arrival_ms) + float(self.note_fall_time_ms) + float(self.end_padding_ms)

    def snapshot(self) -> TimingSnapshot:
        return TimingSnapshot(
            tick_rate_ms=int(self.tick_rate_ms),
            note_velocity=self.note_velocity(),
            ticks_to_hit_line=self.ticks_to_hit_line(),
            fall_duration_seconds=self.fall_duration_seconds(),
        )


DEFAULT_RULES = GameRules()


def _run_unit_tests() -> None:
    rules = GameRules()
    assert abs(rules.ticks_to_hit_line() - 112.5) < 1e-9
    assert abs(rules.note_velocity() - 350.0 / 112.5) < 1e-9
    assert abs(rules.fall_duration_seconds() - 1.8) < 1e-9

    assert rules.arrival_delay_ms(0.5) == 0.0
    assert abs(rules.arrival_delay_ms(3.0) - 1200.0) < 1e-9
    assert abs(rules.end_of_game_delay_ms(0.0) - 3800.0) < 1e-9

    snap = rules.snapshot()
    assert snap.tick_rate_ms == 16
    assert abs(snap.note_velocity - rules.note_velocity()) < 1e-9


if __name__ == "__main__":
    _run_unit_tests()
    print("timing_model.py: ok")
