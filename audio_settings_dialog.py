# audio_settings_dialog.py
from __future__ import annotations

from dataclasses import replace
from typing import Dict

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from store_config import AudioSettings
from widgets import ToggleSwitch


_TOGGLES = (
    (
        "workaround",
        "Microphone Workaround",
        "Work around an issue that causes the microphone to be shared instead of the correct audio. "
        "Only enable if you're experiencing this issue.",
    ),
    (
        "only_default_speakers",
        "Only Default Speakers",
        "When sharing entire desktop audio, only share apps that play to the default speakers.",
    ),
    (
        "ignore_inputs",
        "Ignore Inputs",
        "Exclude nodes that are intended to capture audio.",
    ),
    (
        "ignore_virtual",
        "Ignore Virtual",
        'Exclude virtual nodes, such as nodes belonging to sinks, this might be useful when using "mix bussing".',
    ),
    (
        "granular_select",
        "Granular Selection",
        "Allow to select applications more granularly.",
    ),
)


class AudioSettingsDialog(QDialog):
    """
    Edits the persisted capture switches.

    The caller saves the result; changing granular selection clears the current
    audio selection there, because the candidate list is rebuilt differently.
    """

    def __init__(self, settings: AudioSettings, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Audio Settings")
        self.setMinimumWidth(520)

        self._initial = settings
        self._switches: Dict[str, ToggleSwitch] = {}

        outer = QVBoxLayout(self)
        outer.setContentsMargins(16, 16, 16, 16)
        outer.setSpacing(12)

        for key, title, note in _TOGGLES:
            outer.addWidget(self._make_toggle_row(key, title, note, bool(getattr(settings, key))))

        form = QFormLayout()
        self.host_binary = QLineEdit(settings.host_binary)
        self.host_binary.setPlaceholderText("e.g. vesktop")
        self.host_binary.setToolTip("Process binary of the call client; used by the microphone workaround.")
        form.addRow("Call client binary:", self.host_binary)
        outer.addLayout(form)

        btns = QHBoxLayout()
        btns.addStretch(1)
        back = QPushButton("Back")
        back.setObjectName("Transparent")
        back.clicked.connect(self.reject)
        save = QPushButton("Save")
        save.setObjectName("Primary")
        save.clicked.connect(self.accept)
        btns.addWidget(back)
        btns.addWidget(save)
        outer.addLayout(btns)

    def _make_toggle_row(self, key: str, title: str, note: str, checked: bool) -> QWidget:
        row = QWidget()
        lay = QHBoxLayout(row)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.setSpacing(12)

        text = QVBoxLayout()
        t = QLabel(title)
        t.setStyleSheet("font-weight: 600;")
        n = QLabel(note)
        n.setObjectName("Hint")
        n.setWordWrap(True)
        text.addWidget(t)
        text.addWidget(n)

        sw = ToggleSwitch(checked)
        self._switches[key] = sw

        lay.addLayout(text, 1)
        lay.addWidget(sw, 0, Qt.AlignVCenter)
        return row

    def result_settings(self) -> AudioSettings:
        changes = {key: sw.isChecked() for key, sw in self._switches.items()}
        return replace(self._initial, host_binary=self.host_binary.text().strip(), **changes)
