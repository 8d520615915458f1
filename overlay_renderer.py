# -*- coding: utf-8 -*-
########################
# overlay_renderer.py
########################
# Purpose:
# - Gameplay playfield Qt widget.
# - Paints the latest State: falling notes, the hit line, the HUD and the game over banner.
#
########################
# Key Logic:
# - The widget holds the latest State pushed by GameplayController.set_state.
# - Note visibility is keyed by note id through presentation.diff_render, so a note is drawn
#   from the frame it appears until it falls below the hit line.
# - Canvas coordinates (GameRules.canvas_width x canvas_height) are scaled to the widget size.
# - Strict boundaries:
#   - The widget never applies actions and never reads the clock.
#
########################
# Interfaces:
# Public dataclasses:
# - OverlayConfig(background_rgb, hit_line_rgb, text_rgb, font_family, hud_font_size, banner_font_size)
#
# Public classes:
# - class GameplayOverlayWidget(PyQt6.QtWidgets.QWidget)
#   - set_state(state: State) -> None
#   - reset() -> None
#
# Inputs:
# - State snapshots from GameplayController.
#
# Outputs:
# - Painted playfield on the widget surface.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QWidget

import gameplay_models
import presentation
import timing_model


@dataclass(frozen=True)
class OverlayConfig:
    background_rgb: Tuple[int, int, int] = (10, 10, 12)
    hit_line_rgb: Tuple[int, int, int] = (150, 150, 150)
    text_rgb: Tuple[int, int, int] = (240, 240, 240)
    font_family: str = "Arial"
    hud_font_size: int = 10
    banner_font_size: int = 18


class GameplayOverlayWidget(QWidget):
    def __init__(
        self,
        *,
        rules: timing_model.GameRules = timing_model.DEFAULT_RULES,
        config: Optional[OverlayConfig] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._rules = rules
        self._config = config or OverlayConfig()
        self._state = gameplay_models.INITIAL_STATE
        self._visible_ids: frozenset = frozenset()
        self._drawn_notes: Tuple[presentation.RenderOp, ...] = ()

        self.setMinimumSize(int(rules.canvas_width), int(rules.canvas_height))
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

    def set_state(self, state: gameplay_models.State) -> None:
        ops, self._visible_ids = presentation.diff_render(self._visible_ids, state, self._rules)
        self._drawn_notes = tuple(op for op in ops if op.kind != presentation.RenderOpKind.REMOVE)
        self._state = state
        self.update()

    def reset(self) -> None:
        self._state = gameplay_models.INITIAL_STATE
        self._visible_ids = frozenset()
        self._drawn_notes = ()
        self.update()

    def _scale(self) -> Tuple[float, float]:
        scale_x = float(self.width()) / float(self._rules.canvas_width)
        scale_y = float(self.height()) / float(self._rules.canvas_height)
        return scale_x, scale_y

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.fillRect(self.rect(), QBrush(QColor(*self._config.background_rgb)))

        scale_x, scale_y = self._scale()
        self._paint_hit_line(painter, scale_x, scale_y)
        self._paint_notes(painter, scale_x, scale_y)
        self._paint_hud(painter)
        if self._state.game_end:
            self._paint_game_over(painter)

        painter.end()

    def _paint_hit_line(self, painter: QPainter, scale_x: float, scale_y: float) -> None:
        line_y = float(self._rules.hit_line_y) * scale_y
        painter.save()
        painter.setPen(QPen(QColor(*self._config.hit_line_rgb), 2.0))
        painter.drawLine(QPointF(0.0, line_y), QPointF(float(self.width()), line_y))
        painter.restore()

    def _paint_notes(self, painter: QPainter, scale_x: float, scale_y: float) -> None:
        radius = presentation.note_radius(self._rules) * scale_x
        notes_by_id = {note.id: note for note in self._state.notes}

        for op in self._drawn_notes:
            canvas_x, canvas_y = presentation.note_center(notes_by_id[op.note_id], self._rules)
            center = QPointF(canvas_x * scale_x, canvas_y * scale_y)

            painter.save()
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(QColor(presentation.lane_color(op.column))))
            painter.drawEllipse(center, radius, radius)
            painter.restore()

    def _paint_hud(self, painter: QPainter) -> None:
        fields = presentation.hud_fields(self._state)
        hud_text = f"Score {fields.score}  Missed {fields.missed}  {fields.multiplier}  Combo {fields.combo}"

        painter.save()
        painter.setPen(QPen(QColor(*self._config.text_rgb)))
        painter.setFont(QFont(self._config.font_family, int(self._config.hud_font_size)))
        painter.drawText(QRectF(6.0, 6.0, float(self.width()) - 12.0, 20.0), int(Qt.AlignmentFlag.AlignLeft), hud_text)
        painter.restore()

    def _paint_game_over(self, painter: QPainter) -> None:
        painter.save()
        painter.setPen(QPen(QColor(*self._config.text_rgb)))
        painter.setFont(QFont(self._config.font_family, int(self._config.banner_font_size), weight=QFont.Weight.Bold))
        painter.drawText(
            QRectF(0.0, float(self.height()) / 2.0 - 20.0, float(self.width()), 40.0),
            int(Qt.AlignmentFlag.AlignHCenter),
            "GAME OVER",
        )
        painter.restore()
