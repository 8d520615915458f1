# -*- coding: utf-8 -*-
########################
# gameplay_harness.py
########################
# Purpose:
# - Real-time gameplay driver and window.
# - Integrates GameEngine + EventQueue + InputRouter + GameplayOverlayWidget + InstrumentBank
#   on the Qt event loop.
#
# Design notes:
# - Everything runs on the Qt thread. The timer, the key router and the chart schedule are
#   merged by event delivery order; the engine never reorders them.
# - Each timer fire drains chart events due on the elapsed clock, then runs one tick cycle.
# - Key presses are dispatched the moment the router emits them.
# - The controller stops its timer and ignores input once a state has game_end set.
# - Qt classes are built inside factory functions, the same pattern for controller and window.
#
########################
# Interfaces:
# Public classes:
# - class GameplayController(PyQt6.QtCore.QObject)
#   - Signals:
#     - stateChanged(State)
#     - gameEnded(SessionSummary)
#   - start() -> None
#   - stop() -> None
#   - restart() -> None
#   - is_running() -> bool
#
# - class GameplayWindow(PyQt6.QtWidgets.QMainWindow)
#   - controller -> GameplayController
#   - Restart button calls controller.restart(); stateChanged feeds the status line.
#
# Public functions:
# - run_gui(chart: Chart, *, rules: GameRules, instrument_bank: InstrumentBank, random_seed: int,
#           random_note_instrument: str) -> int
#
# Inputs:
# - A scheduled Chart, GameRules and an InstrumentBank.
# - Keyboard lane input (InputRouter handles QKeyEvent).
#
# Outputs:
# - Painted playfield, audio commands routed to the bank, and a summary when the game ends.
#
########################

from __future__ import annotations

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class GameplayController:  # QObject subclass, defined lazily inside Qt import block
    pass


def _create_controller_class():
    from PyQt6.QtCore import QElapsedTimer, QEvent, QObject, QTimer, pyqtSignal
    from PyQt6.QtGui import QKeyEvent

    import audio_triggers
    import chart_engine
    import game_session
    import input_router
    import note_scheduler
    import overlay_renderer
    import random_note_trigger
    import timing_model

    class _GameplayController(QObject):
        stateChanged = pyqtSignal(object)
        gameEnded = pyqtSignal(object)

        def __init__(
            self,
            *,
            chart: chart_engine.Chart,
            overlay_widget: overlay_renderer.GameplayOverlayWidget,
            instrument_bank: audio_triggers.InstrumentBank,
            rules: timing_model.GameRules = timing_model.DEFAULT_RULES,
            random_seed: int = 0,
            random_note_instrument: str = audio_triggers.DEFAULT_RANDOM_NOTE_INSTRUMENT,
            parent: Optional[QObject] = None,
        ) -> None:
            super().__init__(parent)
            self._chart = chart
            self._rules = rules
            self._overlay = overlay_widget
            self._instrument_bank = instrument_bank

            self._engine = game_session.GameEngine(
                rules,
                random_trigger=random_note_trigger.RandomNoteTrigger(seed=random_seed),
                random_note_instrument=random_note_instrument,
            )
            self._queue = note_scheduler.EventQueue()
            self._clock = QElapsedTimer()
            self._running = False

            self._timer = QTimer(self)
            self._timer.setInterval(int(rules.tick_rate_ms))
            self._timer.timeout.connect(self._on_tick_timer)

            self._router = input_router.InputRouter(parent=self)
            self._router.keyPressed.connect(self._on_key_pressed)

        # -----------------
        # Lifecycle
        # -----------------

        def is_running(self) -> bool:
            return bool(self._running)

        def start(self) -> None:
            self._engine.reset()
            self._overlay.reset()
            self._queue.clear()
            self._queue.extend(game_session.chart_events(self._chart, self._rules))
            self._router.clear_pressed_keys()
            self._clock.start()
            self._running = True
            self._timer.start()
            logger.info("Started chart %r (%d notes)", self._chart.name, len(self._chart.notes))

        def stop(self) -> None:
            self._timer.stop()
            self._running = False

        def restart(self) -> None:
            self.stop()
            self.start()

        def _now_ms(self) -> float:
            return float(self._clock.elapsed())

        # -----------------
        # Event filter and timer loop
        # -----------------

        def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802
            if event.type() == QEvent.Type.KeyPress:
                if isinstance(event, QKeyEvent) and self._router.handle_key_press(event):
                    return True
            if event.type() == QEvent.Type.KeyRelease:
                if isinstance(event, QKeyEvent) and self._router.handle_key_release(event):
                    return True
            if event.type() in (QEvent.Type.WindowDeactivate, QEvent.Type.FocusOut):
                self._router.clear_pressed_keys()
            return super().eventFilter(watched, event)

        def _on_tick_timer(self) -> None:
            if not self.is_running():
                return
            now_ms = self._now_ms()

            for event in self._queue.pop_due(now_ms):
                for step in self._engine.deliver(event.payload, time_ms=now_ms):
                    self._publish(step)
                if not self.is_running():
                    return

            for step in self._engine.tick_cycle(time_ms=now_ms):
                self._publish(step)

        def _on_key_pressed(self, key_name: str) -> None:
            if not self.is_running():
                return
            self._publish(self._engine.deliver(game_session.KeyInput(key_name), time_ms=self._now_ms())[0])

        def _publish(self, step: game_session.StepResult) -> None:
            for command in step.audio:
                self._instrument_bank.play(command)

            if step.action is not None:
                self._overlay.set_state(step.state)
                self.stateChanged.emit(step.state)

            if step.state.game_end and self.is_running():
                self.stop()
                self.gameEnded.emit(self._engine.summary(end_time_ms=step.time_ms))

    return _GameplayController


# Instantiate the Qt-backed controller class.
GameplayController = _create_controller_class()


class GameplayWindow:
    pass


def _create_window_class():
    from PyQt6.QtCore import Qt
    from PyQt6.QtWidgets import QHBoxLayout, QLabel, QMainWindow, QPushButton, QVBoxLayout, QWidget

    import audio_triggers
    import chart_engine
    import overlay_renderer
    import presentation
    import timing_model

    class _GameplayWindow(QMainWindow):
        def __init__(
            self,
            *,
            chart: chart_engine.Chart,
            instrument_bank: audio_triggers.InstrumentBank,
            rules: timing_model.GameRules = timing_model.DEFAULT_RULES,
            random_seed: int = 0,
            random_note_instrument: str = audio_triggers.DEFAULT_RANDOM_NOTE_INSTRUMENT,
        ) -> None:
            super().__init__()
            self.setWindowTitle(f"Notefall - {chart.name}")

            root_widget = QWidget(self)
            root_layout = QVBoxLayout(root_widget)

            self._overlay = overlay_renderer.GameplayOverlayWidget(rules=rules, parent=root_widget)
            self._status_label = QLabel("Press H J K L on the beat", root_widget)
            self._restart_button = QPushButton("Restart", root_widget)
            # Lane keys must keep reaching the window, not the button.
            self._restart_button.setFocusPolicy(Qt.FocusPolicy.NoFocus)

            status_row = QHBoxLayout()
            status_row.addWidget(self._status_label, stretch=1)
            status_row.addWidget(self._restart_button)

            root_layout.addWidget(self._overlay, stretch=1)
            root_layout.addLayout(status_row)
            self.setCentralWidget(root_widget)

            self._controller = GameplayController(
                chart=chart,
                overlay_widget=self._overlay,
                instrument_bank=instrument_bank,
                rules=rules,
                random_seed=random_seed,
                random_note_instrument=random_note_instrument,
                parent=self,
            )
            self._controller.stateChanged.connect(self._on_state_changed)
            self._controller.gameEnded.connect(self._on_game_ended)
            self._restart_button.clicked.connect(self._controller.restart)

            # Install the shared event filter.
            self.installEventFilter(self._controller)
            self._overlay.installEventFilter(self._controller)

        @property
        def controller(self) -> GameplayController:
            return self._controller

        def _on_state_changed(self, state: object) -> None:
            fields = presentation.hud_fields(state)
            self._status_label.setText(
                f"Score {fields.score}   Missed {fields.missed}   {fields.multiplier}   Combo {fields.combo}"
            )

        def _on_game_ended(self, summary: object) -> None:
            score = getattr(summary, "score", 0)
            missed = getattr(summary, "missed_notes", 0)
            self._status_label.setText(f"Game over. Score {score}, missed {missed}")

    return _GameplayWindow


GameplayWindow = _create_window_class()


def run_gui(
    chart,
    *,
    rules=None,
    instrument_bank=None,
    random_seed: int = 0,
    random_note_instrument: str = "piano",
) -> int:
    import sys

    from PyQt6.QtWidgets import QApplication

    import audio_triggers
    import timing_model

    app = QApplication(sys.argv)
    window = GameplayWindow(
        chart=chart,
        instrument_bank=instrument_bank or audio_triggers.InstrumentBank.with_logging_instruments(),
        rules=rules or timing_model.DEFAULT_RULES,
        random_seed=random_seed,
        random_note_instrument=random_note_instrument,
    )
    window.resize(int(window.minimumSizeHint().width()) + 40, 520)
    window.show()
    window.controller.start()
    return int(app.exec())
