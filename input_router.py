# -*- coding: utf-8 -*-
########################
# input_router.py
########################
# Purpose:
# - Single keyboard listener for gameplay lane input.
# - Translates QKeyEvent into a lane key name ("KeyH", "KeyJ", "KeyK", "KeyL") and emits a Qt signal.
#
# Design notes:
# - This must be the only lane input source. No duplicate key mapping elsewhere.
# - Debounce rules:
#   - Ignore auto repeat.
#   - Track pressed keys to avoid duplicate presses.
# - Keys outside the four bindings are never emitted, so the action layer only sees bound keys.
#
########################
# Interfaces:
# Public classes:
# - class InputRouter(PyQt6.QtCore.QObject)
#   - Signals:
#     - keyPressed(str)
#   - Methods:
#     - handle_key_press(event: QKeyEvent) -> bool
#     - handle_key_release(event: QKeyEvent) -> bool
#     - clear_pressed_keys() -> None
#     - reset_stats() -> None
#
# Inputs:
# - Raw QKeyEvent from the Qt event loop.
#
# Outputs:
# - Lane key names consumed by gameplay_harness.GameplayController as actions.KeyPress.
#
########################

from __future__ import annotations

from typing import Dict, Optional, Set

from PyQt6.QtCore import QObject, Qt, pyqtSignal
from PyQt6.QtGui import QKeyEvent

import gameplay_models


def _build_default_key_map() -> Dict[int, str]:
    """
    Default lane mapping for the four lane playfield.

    Lane indexes:
      0 = H
      1 = J
      2 = K
      3 = L
    """
    key_map: Dict[int, str] = {}

    def bind(key_constant: int, key_name: str) -> None:
        if key_name not in gameplay_models.KEY_BINDINGS:
            raise ValueError(f"{key_name!r} is not a lane key")
        key_map[int(key_constant)] = key_name

    bind(Qt.Key.Key_H, "KeyH")
    bind(Qt.Key.Key_J, "KeyJ")
    bind(Qt.Key.Key_K, "KeyK")
    bind(Qt.Key.Key_L, "KeyL")

    return key_map


class InputRouter(QObject):
    """
    Central keyboard router for gameplay lane input.

    This object never judges anything. Its only job is to map keys to lane
    key names and emit one keyPressed signal per fresh press.
    """

    keyPressed = pyqtSignal(str)

    def __init__(
        self,
        parent: Optional[QObject] = None,
        key_map: Optional[Dict[int, str]] = None,
    ) -> None:
        super().__init__(parent)

        self._key_map: Dict[int, str] = dict(key_map) if key_map is not None else _build_default_key_map()

        # Press tracking for debounce and focus loss handling.
        self._pressed_keys: Set[int] = set()

        self._total_presses: int = 0
        self._ignored_presses: int = 0

    # ------------------------------------------------------------------
    # Public API used by gameplay_harness
    # ------------------------------------------------------------------

    def handle_key_press(self, event: QKeyEvent) -> bool:
        """
        Handle a Qt key press.

        Returns True if this router consumed the event, False otherwise.
        """
        key_code = int(event.key())

        if event.isAutoRepeat():
            if key_code in self._key_map:
                self._ignored_presses += 1
                return True
            return False

        # Ignore second press while still held.
        if key_code in self._pressed_keys:
            if key_code in self._key_map:
                self._ignored_presses += 1
                return True
            return False

        key_name = self._key_map.get(key_code)
        if key_name is None:
            return False

        self._pressed_keys.add(key_code)
        self._total_presses += 1
        self.keyPressed.emit(key_name)
        return True

    def handle_key_release(self, event: QKeyEvent) -> bool:
        key_code = int(event.key())

        if event.isAutoRepeat():
            return key_code in self._key_map

        self._pressed_keys.discard(key_code)
        return key_code in self._key_map

    def clear_pressed_keys(self) -> None:
        """Called by the harness on focus loss or window deactivation."""
        self._pressed_keys.clear()

    def reset_stats(self) -> None:
        self._total_presses = 0
        self._ignored_presses = 0

    @property
    def key_map(self) -> Dict[int, str]:
        return dict(self._key_map)

    @property
    def total_presses(self) -> int:
        return self._total_presses

    @property
    def ignored_presses(self) -> int:
        return self._ignored_presses


def _run_unit_tests() -> None:
    router = InputRouter()

    assert router.key_map[int(Qt.Key.Key_H)] == "KeyH"
    assert router.key_map[int(Qt.Key.Key_L)] == "KeyL"
    assert int(Qt.Key.Key_A) not in router.key_map
    assert all(gameplay_models.lane_for_key(name) is not None for name in router.key_map.values())


if __name__ == "__main__":
    _run_unit_tests()
    print("input_router.py: ok")
