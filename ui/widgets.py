"""Parameter-bound controls for the amp panel.

Every widget has two entry points: user interaction, which calls the
`on_change(param_id, value)` callback, and `set_value()`, which redraws
without calling back.  Values received from the amp only ever go through
`set_value()`, so they cannot bounce back out as writes.
"""
from __future__ import annotations
import math
from typing import Callable
from PyQt6.QtWidgets import (
    QWidget, QHBoxLayout, QComboBox, QRadioButton, QButtonGroup,
)
from PyQt6.QtCore import Qt, QRectF, QPointF, pyqtSignal
from PyQt6.QtGui import QPainter, QPen, QPalette
from midi.params import ParamDef

ChangeCallback = Callable[[int, object], None]

# One fine step equals one raw controller increment
FINE_STEP = 1 / 127
COARSE_STEP = 0.05


class ParamKnob(QWidget):
    """Rotary control for continuous parameters, scaled 0-10 like the amp.

    Drag vertically or use the wheel; Shift gives single-step resolution.
    `released` fires when a drag ends so the caller can drop suppression.
    """

    released = pyqtSignal(int)  # param id

    _START_DEG = 225.0  # 0 on the dial, Qt angles (0 = 3 o'clock, CCW)
    _SWEEP_DEG = 270.0
    _TICKS = 11
    _PIXELS_PER_SWEEP = 150

    def __init__(
        self,
        param: ParamDef,
        on_change: ChangeCallback,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.param = param
        self._value = 0.0
        self._on_change = on_change
        self._press_y: float | None = None
        self._press_value = 0.0
        self.setFixedSize(54, 66)
        self.setFocusPolicy(Qt.FocusPolicy.WheelFocus)
        self.setToolTip(param.display_name)

    @property
    def value(self) -> float:
        return self._value

    def set_value(self, value: float) -> None:
        value = self.param.clip(value)
        if value != self._value:
            self._value = value
            self.update()

    def _set_value_interactive(self, value: float) -> None:
        value = self.param.clip(value)
        if value == self._value:
            return
        self._value = value
        self.update()
        self._on_change(self.param.id, value)

    def _point(self, center: QPointF, radius: float, fraction: float) -> QPointF:
        angle = math.radians(self._START_DEG - self._SWEEP_DEG * fraction)
        return QPointF(center.x() + radius * math.cos(angle),
                       center.y() - radius * math.sin(angle))

    def paintEvent(self, event) -> None:  # noqa: N802
        pal = self.palette()
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        center = QPointF(self.width() / 2, 25)
        body_r = 15.0

        painter.setPen(QPen(pal.color(QPalette.ColorRole.Mid), 1))
        for i in range(self._TICKS):
            fraction = i / (self._TICKS - 1)
            inner = body_r + (3 if i % 5 else 2)
            painter.drawLine(self._point(center, inner, fraction),
                             self._point(center, body_r + 6, fraction))

        painter.setBrush(pal.color(QPalette.ColorRole.Button))
        painter.drawEllipse(center, body_r, body_r)

        pointer = QPen(pal.color(QPalette.ColorRole.Highlight), 2.5)
        pointer.setCapStyle(Qt.PenCapStyle.RoundCap)
        painter.setPen(pointer)
        painter.drawLine(self._point(center, 5, self._value),
                         self._point(center, body_r - 2, self._value))

        font = painter.font()
        font.setPointSize(8)
        painter.setFont(font)
        painter.setPen(pal.color(QPalette.ColorRole.Text))
        painter.drawText(
            QRectF(0, 50, self.width(), 14),
            int(Qt.AlignmentFlag.AlignCenter),
            f"{self._value * 10:.1f}",
        )
        painter.end()

    def mousePressEvent(self, event) -> None:  # noqa: N802
        if event.button() != Qt.MouseButton.LeftButton:
            return
        self._press_y = event.position().y()
        self._press_value = self._value
        event.accept()

    def mouseMoveEvent(self, event) -> None:  # noqa: N802
        if self._press_y is None:
            return
        travel = (self._press_y - event.position().y()) / self._PIXELS_PER_SWEEP
        if event.modifiers() & Qt.KeyboardModifier.ShiftModifier:
            travel /= 4
        self._set_value_interactive(self._press_value + travel)
        event.accept()

    def mouseReleaseEvent(self, event) -> None:  # noqa: N802
        dragging = self._press_y is not None
        self._press_y = None
        if dragging:
            self.released.emit(self.param.id)
        event.accept()

    def wheelEvent(self, event) -> None:  # noqa: N802
        fine = event.modifiers() & Qt.KeyboardModifier.ShiftModifier
        step = FINE_STEP if fine else COARSE_STEP
        direction = 1 if event.angleDelta().y() > 0 else -1
        self._set_value_interactive(self._value + direction * step)
        event.accept()


class ParamToggle(QWidget):
    """Two-position rocker for boolean parameters.

    The left segment is False, the right True; captions come from the
    descriptor's labels (e.g. "Pentode" / "Triode").
    """

    def __init__(
        self,
        param: ParamDef,
        on_change: ChangeCallback,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.param = param
        self._labels = param.labels or ("Off", "On")
        self._on_change = on_change
        self._value = False
        self.setFixedHeight(24)
        self.setMinimumWidth(110)

    @property
    def value(self) -> bool:
        return self._value

    def set_value(self, value: bool) -> None:
        value = bool(value)
        if value != self._value:
            self._value = value
            self.update()

    def _set_value_interactive(self, value: bool) -> None:
        if value == self._value:
            return
        self._value = value
        self.update()
        self._on_change(self.param.id, value)

    def _segment(self, index: int) -> QRectF:
        half = self.width() / 2
        return QRectF(index * half + 1, 1, half - 2, self.height() - 2)

    def paintEvent(self, event) -> None:  # noqa: N802
        pal = self.palette()
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        font = painter.font()
        font.setPointSize(9)
        painter.setFont(font)

        active = int(self._value)
        for index, caption in enumerate(self._labels[:2]):
            rect = self._segment(index)
            if index == active:
                painter.setPen(Qt.PenStyle.NoPen)
                painter.setBrush(pal.color(QPalette.ColorRole.Highlight))
                text_role = QPalette.ColorRole.HighlightedText
            else:
                painter.setPen(QPen(pal.color(QPalette.ColorRole.Mid), 1))
                painter.setBrush(pal.color(QPalette.ColorRole.Button))
                text_role = QPalette.ColorRole.ButtonText
            painter.drawRoundedRect(rect, 4, 4)
            painter.setPen(pal.color(text_role))
            painter.drawText(rect, int(Qt.AlignmentFlag.AlignCenter), caption)
        painter.end()

    def mousePressEvent(self, event) -> None:  # noqa: N802
        if event.button() == Qt.MouseButton.LeftButton:
            self._set_value_interactive(event.position().x() >= self.width() / 2)
            event.accept()


class ParamCombo(QComboBox):
    """Drop-down list for enum parameters (amp, cab, reverb, mic)."""

    def __init__(
        self,
        param: ParamDef,
        on_change: ChangeCallback,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.param = param
        self._on_change = on_change
        self.addItems(list(param.labels))
        self.currentIndexChanged.connect(self._emit_change)

    @property
    def value(self) -> int:
        return self.currentIndex()

    def _emit_change(self, idx: int) -> None:
        if idx >= 0:
            self._on_change(self.param.id, idx)

    def set_value(self, value: int) -> None:
        self.blockSignals(True)
        self.setCurrentIndex(self.param.clip(value))
        self.blockSignals(False)


class ParamSelector(QWidget):
    """Four-way radio selector for voicing and topology (I-IV)."""

    def __init__(
        self,
        param: ParamDef,
        on_change: ChangeCallback,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.param = param
        self._on_change = on_change
        self._value = 0
        self._group = QButtonGroup(self)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        for i, text in enumerate(param.labels):
            btn = QRadioButton(text)
            self._group.addButton(btn, i)
            layout.addWidget(btn)
        self._group.button(0).setChecked(True)
        self._group.idClicked.connect(self._on_clicked)

    @property
    def value(self) -> int:
        return self._value

    def button(self, index: int) -> QRadioButton:
        return self._group.button(index)

    def _on_clicked(self, idx: int) -> None:
        if idx != self._value:
            self._value = idx
            self._on_change(self.param.id, idx)

    def set_value(self, value: int) -> None:
        self._value = self.param.clip(value)
        # setChecked() does not emit idClicked
        self._group.button(self._value).setChecked(True)
