import pytest

import timing_model


def test_default_rules_derivations(rules):
    assert rules.ticks_to_hit_line() == pytest.approx(112.5)
    assert rules.note_velocity() == pytest.approx(350.0 / 112.5)
    assert rules.fall_duration_seconds() == pytest.approx(1.8)


def test_arrival_delay_clamped_to_zero(rules):
    assert rules.arrival_delay_ms(0.0) == 0.0
    assert rules.arrival_delay_ms(1.0) == 0.0
    assert rules.arrival_delay_ms(3.0) == pytest.approx(1200.0)


def test_end_of_game_delay(rules):
    assert rules.end_of_game_delay_ms(0.0) == pytest.approx(3800.0)
    assert rules.end_of_game_delay_ms(1200.0) == pytest.approx(5000.0)


def test_custom_rules_snapshot():
    rules = timing_model.GameRules(tick_rate_ms=10, note_fall_time_ms=1000.0, hit_line_y=300.0)
    snapshot = rules.snapshot()
    assert snapshot.tick_rate_ms == 10
    assert snapshot.ticks_to_hit_line == pytest.approx(100.0)
    assert snapshot.note_velocity == pytest.approx(3.0)
    assert snapshot.fall_duration_seconds == pytest.approx(1.0)
