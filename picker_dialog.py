# picker_dialog.py
from __future__ import annotations

import sys
from typing import Callable, List, Optional

from PySide6.QtCore import Qt, QSize, QTimer, QUrl
from PySide6.QtGui import QDesktopServices, QIcon, QPixmap
from PySide6.QtWidgets import (
    QDialog,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from audio_settings_dialog import AudioSettingsDialog
from errors import PIPEWIRE_PULSE_GUIDE_URL
from models import STREAM_FPS, STREAM_RESOLUTIONS, ScreenSource, StreamPick
from node_catalog import NodeCatalog
from session import ShareSession
from widgets import ChoiceRow, StatusPill, ToggleSwitch

ThumbnailProvider = Callable[[ScreenSource], QPixmap]

IS_LINUX = sys.platform.startswith("linux")
IS_WINDOWS = sys.platform.startswith("win")

VENMIC_REPO_URL = "https://github.com/Vencord/venmic"


def qt_scheduler(delay_ms: int, callback: Callable[[], None]) -> None:
    QTimer.singleShot(delay_ms, callback)


def _default_thumbnail(src: ScreenSource) -> QPixmap:
    return QPixmap(src.url) if src.url else QPixmap()


def _section(text: str) -> QLabel:
    lbl = QLabel(text)
    lbl.setObjectName("Section")
    return lbl


def _card() -> QFrame:
    frame = QFrame()
    frame.setObjectName("Card")
    return frame


class ScreenSharePicker(QDialog):
    def __init__(
        self,
        screens: List[ScreenSource],
        session: ShareSession,
        skip_picker: bool = False,
        thumbnail: Optional[ThumbnailProvider] = None,
        parent=None,
    ) -> None:
        super().__init__(parent)
        if not screens:
            raise ValueError("no screens to pick from")

        self.setWindowTitle("ScreenShare")
        self.resize(640, 620)

        self.screens = screens
        self.session = session
        self.skip_picker = skip_picker
        self._thumbnail = thumbnail or _default_thumbnail
        self._selected: Optional[ScreenSource] = screens[0] if skip_picker else None
        self._ignore_pulse_warning = False
        self.pick: Optional[StreamPick] = None

        outer = QVBoxLayout(self)
        outer.setContentsMargins(16, 16, 16, 16)
        outer.setSpacing(12)

        title = QLabel("ScreenShare")
        title.setObjectName("Title")
        outer.addWidget(title)

        self.pages = QStackedWidget()
        self.pages.addWidget(self._build_screen_grid())
        self.settings_page = QWidget()
        self.pages.addWidget(self.settings_page)
        outer.addWidget(self.pages, 1)

        outer.addLayout(self._build_footer())
        self._sync_page()

    # -- screen picker ----------------------------------------------------

    def _build_screen_grid(self) -> QWidget:
        page = QWidget()
        grid = QGridLayout(page)
        grid.setSpacing(10)
        for i, src in enumerate(self.screens):
            tile = QToolButton()
            tile.setObjectName("ScreenTile")
            tile.setToolButtonStyle(Qt.ToolButtonTextUnderIcon)
            tile.setIcon(QIcon(self._thumbnail(src)))
            tile.setIconSize(QSize(260, 146))
            tile.setText(src.name)
            tile.clicked.connect(lambda _checked=False, s=src: self._choose_screen(s))
            grid.addWidget(tile, i // 2, i % 2)
        grid.setRowStretch(grid.rowCount(), 1)
        return page

    def _choose_screen(self, src: ScreenSource) -> None:
        self._selected = src
        self._sync_page()

    # -- stream settings --------------------------------------------------

    def _rebuild_settings_page(self) -> None:
        old = self.settings_page
        self.settings_page = self._build_settings(self._selected)
        self.pages.insertWidget(1, self.settings_page)
        self.pages.removeWidget(old)
        old.deleteLater()

    def _build_settings(self, src: ScreenSource) -> QWidget:
        page = QWidget()
        v = QVBoxLayout(page)
        v.setContentsMargins(0, 0, 0, 0)
        v.setSpacing(8)

        v.addWidget(_section("What you're streaming"))
        preview = _card()
        pl = QVBoxLayout(preview)
        img = QLabel()
        pix = self._thumbnail(src)
        if not pix.isNull():
            img.setPixmap(pix.scaled(QSize(420, 236), Qt.KeepAspectRatio, Qt.SmoothTransformation))
        img.setAlignment(Qt.AlignCenter)
        pl.addWidget(img)
        pl.addWidget(QLabel(src.name))
        v.addWidget(preview)

        v.addWidget(_section("Stream Settings"))
        card = _card()
        cl = QVBoxLayout(card)
        cl.setSpacing(8)

        s = self.session.settings
        cl.addWidget(_section("Resolution"))
        res = ChoiceRow([(r, r) for r in STREAM_RESOLUTIONS], s.resolution)
        res.changed.connect(lambda value: self.session.update_settings(resolution=value))
        cl.addWidget(res)

        cl.addWidget(_section("Frame Rate"))
        fps = ChoiceRow([(f, f) for f in STREAM_FPS], s.fps)
        fps.changed.connect(lambda value: self.session.update_settings(fps=value))
        cl.addWidget(fps)

        cl.addWidget(_section("Content Type"))
        hint = ChoiceRow([("motion", "Prefer Smoothness"), ("detail", "Prefer Clarity")], s.content_hint or "")
        hint.changed.connect(lambda value: self.session.update_settings(content_hint=value))
        cl.addWidget(hint)
        desc = QLabel(
            'Choosing "Prefer Clarity" will result in a significantly lower framerate in exchange '
            "for a much sharper and clearer image."
        )
        desc.setObjectName("Hint")
        desc.setWordWrap(True)
        cl.addWidget(desc)

        if IS_WINDOWS:
            row = QHBoxLayout()
            row.addWidget(QLabel("Stream With Audio"), 1)
            sw = ToggleSwitch(s.audio)
            sw.toggled.connect(lambda checked: self.session.update_settings(audio=checked))
            row.addWidget(sw)
            cl.addLayout(row)

        if IS_LINUX and self.session.capture.enabled:
            cl.addWidget(self._build_audio_picker())

        v.addWidget(card, 1)
        return page

    def _build_audio_picker(self) -> QWidget:
        box = QWidget()
        lay = QVBoxLayout(box)
        lay.setContentsMargins(0, 6, 0, 0)
        lay.setSpacing(6)

        head = QHBoxLayout()
        self.audio_title = _section("Loading Audio Sources...")
        self.audio_status = StatusPill("Loading", "pending")
        head.addWidget(self.audio_title, 1)
        head.addWidget(self.audio_status)
        lay.addLayout(head)

        self.audio_error = QLabel()
        self.audio_error.setWordWrap(True)
        self.audio_error.setOpenExternalLinks(True)
        self.audio_error.hide()
        lay.addWidget(self.audio_error)

        self.pulse_warning = QLabel(
            "Could not find pipewire-pulse. See "
            f'<a href="{PIPEWIRE_PULSE_GUIDE_URL}">this guide</a> on how to switch to pipewire.<br>'
            "You can still continue, however, please <b>beware that you can only share audio of apps "
            "that are running under pipewire</b>.<br><br>"
            '<a href="#ignore">I know what I\'m doing</a>'
        )
        self.pulse_warning.setWordWrap(True)
        self.pulse_warning.linkActivated.connect(self._on_pulse_warning_link)
        self.pulse_warning.hide()
        lay.addWidget(self.pulse_warning)

        self.audio_list = QListWidget()
        self.audio_list.setMinimumHeight(140)
        self.audio_list.itemClicked.connect(self._on_audio_item_clicked)
        lay.addWidget(self.audio_list, 1)

        open_settings = QPushButton("Open Audio Settings")
        open_settings.setObjectName("Transparent")
        open_settings.clicked.connect(self._open_audio_settings)
        lay.addWidget(open_settings, 0, Qt.AlignLeft)

        self.session.load_sources(lambda _catalog: self._populate_audio())
        return box

    def _on_pulse_warning_link(self, href: str) -> None:
        if href == "#ignore":
            self._ignore_pulse_warning = True
            self._populate_audio()
            return
        QDesktopServices.openUrl(QUrl(href))

    def _populate_audio(self) -> None:
        catalog: NodeCatalog = self.session.catalog
        if catalog.loading:
            self.audio_title.setText("Loading Audio Sources...")
            self.audio_status.set_state("pending", "Loading")
            # old items may belong to the other selection mode
            self.audio_list.clear()
            return

        self.audio_title.setText("Audio Source")
        if catalog.error is not None:
            self.audio_status.set_state("error", "Error")
            if catalog.incompatible_library:
                self.audio_error.setText(
                    "Failed to retrieve Audio Sources because your C++ library is too old to run "
                    f'<a href="{VENMIC_REPO_URL}">venmic</a>. See '
                    f'<a href="{catalog.error.guide_url}">this guide</a> for possible solutions.'
                )
            else:
                self.audio_error.setText(f"Failed to retrieve Audio Sources: {catalog.error}")
            self.audio_error.show()
            self.audio_list.hide()
            return

        self.audio_error.hide()
        self.audio_status.set_state("on", "Ready")
        show_list = catalog.has_compat_layer or self._ignore_pulse_warning
        self.pulse_warning.setVisible(not show_list)
        self.audio_list.setVisible(show_list)

        self.audio_list.clear()
        for cand in self.session.candidates():
            it = QListWidgetItem(cand.label)
            it.setData(Qt.UserRole, cand.value)
            it.setFlags(Qt.ItemIsEnabled)
            self.audio_list.addItem(it)
        self._sync_audio_checks()

    def _sync_audio_checks(self) -> None:
        for i in range(self.audio_list.count()):
            it = self.audio_list.item(i)
            checked = self.session.is_selected(it.data(Qt.UserRole))
            it.setCheckState(Qt.Checked if checked else Qt.Unchecked)

    def _on_audio_item_clicked(self, item: QListWidgetItem) -> None:
        self.session.toggle(item.data(Qt.UserRole))
        self._sync_audio_checks()

    def _open_audio_settings(self) -> None:
        dlg = AudioSettingsDialog(self.session.audio_settings, self)
        if dlg.exec() != QDialog.DialogCode.Accepted:
            return
        try:
            self.session.save_audio_settings(dlg.result_settings())
        except OSError as e:
            QMessageBox.warning(self, "Audio settings", f"Could not save settings: {e}")
        self.session.load_sources(lambda _catalog: self._populate_audio())
        self._populate_audio()

    # -- footer -----------------------------------------------------------

    def _build_footer(self) -> QHBoxLayout:
        footer = QHBoxLayout()
        footer.addStretch(1)

        self.back_btn = QPushButton("Back")
        self.back_btn.setObjectName("Transparent")
        self.back_btn.clicked.connect(self._on_back)

        self.go_live_btn = QPushButton("Go Live")
        self.go_live_btn.setObjectName("Primary")
        self.go_live_btn.clicked.connect(self._go_live)

        footer.addWidget(self.back_btn)
        footer.addWidget(self.go_live_btn)
        return footer

    def _on_back(self) -> None:
        if self._selected is not None and not self.skip_picker:
            self._selected = None
            self._sync_page()
            return
        self.reject()

    def _sync_page(self) -> None:
        if self._selected is None:
            self.pages.setCurrentIndex(0)
        else:
            self._rebuild_settings_page()
            self.pages.setCurrentIndex(1)
        self.go_live_btn.setEnabled(self._selected is not None)
        self.back_btn.setText("Back" if self._selected is not None and not self.skip_picker else "Cancel")

    def _go_live(self) -> None:
        if self._selected is None:
            return
        self.pick = self.session.submit(self._selected.id)
        self.accept()


def open_screen_share_picker(
    screens: List[ScreenSource],
    session: ShareSession,
    skip_picker: bool = False,
    thumbnail: Optional[ThumbnailProvider] = None,
    parent=None,
) -> Optional[StreamPick]:
    """Runs the picker modally. Returns None when the user aborted."""
    dlg = ScreenSharePicker(screens, session, skip_picker=skip_picker, thumbnail=thumbnail, parent=parent)
    if dlg.exec() != QDialog.DialogCode.Accepted:
        return None
    return dlg.pick
