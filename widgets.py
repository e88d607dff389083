# widgets.py
from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from PySide6.QtCore import Qt, QRectF, QEasingCurve, QPropertyAnimation, Property, QSize, Signal
from PySide6.QtGui import QPainter, QColor, QPen
from PySide6.QtWidgets import QAbstractButton, QButtonGroup, QHBoxLayout, QLabel, QPushButton, QWidget


class ToggleSwitch(QAbstractButton):
    def __init__(self, checked: bool = False, parent=None) -> None:
        super().__init__(parent)
        self.setCheckable(True)
        self.setChecked(checked)
        self.setCursor(Qt.PointingHandCursor)
        self.setFixedSize(self.sizeHint())

        self._offset = 1.0 if checked else 0.0
        self._anim = QPropertyAnimation(self, b"offset", self)
        self._anim.setDuration(140)
        self._anim.setEasingCurve(QEasingCurve.InOutCubic)
        self.toggled.connect(self._animate)

    def sizeHint(self) -> QSize:
        return QSize(42, 22)

    def _animate(self, checked: bool) -> None:
        self._anim.stop()
        self._anim.setStartValue(self._offset)
        self._anim.setEndValue(1.0 if checked else 0.0)
        self._anim.start()

    def get_offset(self) -> float:
        return self._offset

    def set_offset(self, v: float) -> None:
        self._offset = float(v)
        self.update()

    offset = Property(float, get_offset, set_offset)

    def paintEvent(self, _event) -> None:
        p = QPainter(self)
        p.setRenderHint(QPainter.Antialiasing, True)

        r = QRectF(0.5, 0.5, self.width() - 1.0, self.height() - 1.0)
        rad = r.height() / 2.0
        track = QColor("#3ba55c") if self.isChecked() else QColor("#4f545c")
        if not self.isEnabled():
            track = track.darker(160)

        p.setPen(QPen(QColor("#202225"), 1.0))
        p.setBrush(track)
        p.drawRoundedRect(r, rad, rad)

        m = 3.0
        d = r.height() - 2 * m
        x = r.x() + m + self._offset * (r.width() - 2 * m - d)
        p.setPen(Qt.NoPen)
        p.setBrush(QColor("#ffffff"))
        p.drawEllipse(QRectF(x, r.y() + m, d, d))
        p.end()


_PILL_COLORS: Dict[str, Tuple[str, str, str]] = {
    "on": ("#233a2c", "#2f6b45", "#cfeedd"),
    "pending": ("#3a3424", "#7a6231", "#f3e6c8"),
    "error": ("#3a2424", "#7a3131", "#f3c8c8"),
    "off": ("#2a2a30", "#3a3a42", "#d6d6d6"),
}


class StatusPill(QLabel):
    def __init__(self, text: str = "", state: str = "off", parent=None) -> None:
        super().__init__(text, parent)
        self.setAlignment(Qt.AlignCenter)
        self.set_state(state)

    def set_state(self, state: str, text: Optional[str] = None) -> None:
        if text is not None:
            self.setText(text)
        bg, bd, fg = _PILL_COLORS.get(state, _PILL_COLORS["off"])
        self.setStyleSheet(
            f"QLabel {{ background: {bg}; border: 1px solid {bd}; border-radius: 10px;"
            f" padding: 3px 10px; color: {fg}; font-weight: 600; }}"
        )


class ChoiceRow(QWidget):
    """Exclusive row of pill buttons; emits the value of the picked option."""

    changed = Signal(str)

    def __init__(self, options: Sequence[Tuple[str, str]], current: str = "", parent=None) -> None:
        super().__init__(parent)
        self._group = QButtonGroup(self)
        self._group.setExclusive(True)

        row = QHBoxLayout(self)
        row.setContentsMargins(0, 0, 0, 0)
        row.setSpacing(6)

        for value, label in options:
            b = QPushButton(label)
            b.setObjectName("Choice")
            b.setCheckable(True)
            b.setChecked(value == current)
            b.clicked.connect(lambda _checked=False, v=value: self.changed.emit(v))
            self._group.addButton(b)
            row.addWidget(b)
        row.addStretch(1)
