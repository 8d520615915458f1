import pytest

import actions
import chart_engine
import game_session
import random_note_trigger


@pytest.fixture()
def smoke_chart(smoke_chart_text):
    return chart_engine.chart_from_csv(smoke_chart_text, name="smoke")


def test_chart_events_delay_background_notes(smoke_chart, rules):
    events = game_session.chart_events(smoke_chart, rules)
    kinds = [(time_ms, type(payload).__name__) for time_ms, payload in events]
    assert kinds == [
        (pytest.approx(200.0), "NoteArrival"),
        (pytest.approx(2000.0), "BackgroundNote"),
        (pytest.approx(700.0), "NoteArrival"),
        (pytest.approx(700.0 + 1800.0 + 2000.0), "NoteArrival"),
    ]


def test_empty_chart_ends_at_sentinel():
    chart = chart_engine.chart_from_csv("header\n", name="empty")
    session = game_session.HeadlessSession(chart)
    steps = list(session.run())
    assert steps[-1].state.game_end
    assert steps[-1].state.notes == ()
    assert steps[-1].time_ms == pytest.approx(3800.0)
    assert isinstance(steps[-1].action, actions.AddNote)


def test_autoplay_hits_every_note(smoke_chart):
    summary = game_session.HeadlessSession(smoke_chart, autoplay=True).play()
    assert summary.game_end
    assert summary.total_hits == 2
    assert summary.missed_notes == 0
    assert summary.score == 2
    assert summary.max_combo == 2


def test_idle_session_misses_every_note(smoke_chart):
    summary = game_session.HeadlessSession(smoke_chart).play()
    assert summary.missed_notes == 2
    assert summary.score == 0
    assert summary.total_hits == 0


def test_timed_key_press_hits_note(smoke_chart):
    # First note arrives at 200 ms and is hittable from the 1840 ms tick onward.
    summary = game_session.HeadlessSession(smoke_chart, key_presses=[(1900.0, "KeyH")]).play()
    assert summary.total_hits == 1
    assert summary.missed_notes == 1
    assert summary.score == 1


def test_background_note_audio_is_emitted(smoke_chart):
    steps = list(game_session.HeadlessSession(smoke_chart).run())
    background = [step for step in steps if step.action is None]
    assert len(background) == 1
    assert background[0].time_ms == pytest.approx(2000.0)
    assert background[0].audio[0].instrument_name == "violin"


def test_stray_press_plays_one_random_note(smoke_chart):
    steps = list(game_session.HeadlessSession(smoke_chart, key_presses=[(100.0, "KeyJ")]).run())
    random_audio = [
        command
        for step in steps
        if isinstance(step.action, actions.PlayRandomNote)
        for command in step.audio
    ]
    assert len(random_audio) == 1
    assert random_audio[0].instrument_name == "piano"


def test_runs_are_replayable(smoke_chart):
    presses = [(1850.0, "KeyH"), (1000.0, "KeyK"), (2400.0, "KeyJ")]
    first = [step.state for step in game_session.HeadlessSession(smoke_chart, key_presses=presses).run()]
    second = [step.state for step in game_session.HeadlessSession(smoke_chart, key_presses=presses).run()]
    assert first == second


def test_max_time_stops_early(smoke_chart):
    summary = game_session.HeadlessSession(smoke_chart, max_time_ms=1000.0).play()
    assert not summary.game_end
    assert summary.end_time_ms <= 1000.0


def test_engine_rejects_unknown_payload(rules):
    engine = game_session.GameEngine(rules, random_trigger=random_note_trigger.RandomNoteTrigger(seed=0))
    with pytest.raises(TypeError):
        engine.deliver("bogus", time_ms=0.0)


def test_tick_cycle_orders_random_note_before_tick(rules):
    engine = game_session.GameEngine(rules)
    engine.dispatch(actions.KeyPress("KeyH"))
    results = engine.tick_cycle(time_ms=16.0)
    assert [type(result.action).__name__ for result in results] == ["PlayRandomNote", "Tick"]
    assert len(results[0].audio) == 1
    assert results[1].audio == ()
    assert not engine.state.should_play_random_note
    assert engine.random_trigger.steps == 1
