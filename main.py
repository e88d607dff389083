# main.py
from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
from dataclasses import asdict
from typing import List

from PySide6.QtCore import QTimer
from PySide6.QtGui import QGuiApplication, QPixmap
from PySide6.QtWidgets import QApplication

from backend import VirtmicBackend
from capture import CaptureController
from host import LocalHost
from models import ScreenSource, StreamPick, is_special
from patcher import ConnectionPatcher
from patterns import flatten_candidates
from picker_dialog import open_screen_share_picker, qt_scheduler
from quality import SettingsCell
from session import ShareSession
from store_config import ConfigStore
from theme import apply_dark_theme

RELINK_INTERVAL_MS = 1500

log = logging.getLogger("screenshare")


def _parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Pick a screen and the application audio to share with it.")
    p.add_argument("--skip-picker", action="store_true", help="use the first screen without asking")
    p.add_argument("--list-audio", action="store_true", help="print the selectable audio sources and exit")
    p.add_argument("--granular", action="store_true", help="with --list-audio, include per-process refinements")
    p.add_argument("--user-id", default="local", help="identifier of the local call participant")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p.parse_args(argv)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _list_audio(backend: VirtmicBackend, store: ConfigStore, granular: bool) -> int:
    if not backend.available:
        log.error("PipeWire tools (pw-dump, pw-link) are not available on this system")
        return 1
    settings = store.load_audio_settings()
    try:
        result = backend.list(settings.capture_options())
    finally:
        backend.close()
    if not result.has_compat_layer:
        log.warning("pipewire-pulse not found; only apps running under pipewire can be shared")
    for cand in flatten_candidates(result.nodes, granular or settings.granular_select):
        print(cand.label)
    return 0


def _screens() -> List[ScreenSource]:
    return [
        ScreenSource(id=f"screen:{i}", name=s.name() or f"Screen {i + 1}")
        for i, s in enumerate(QGuiApplication.screens())
    ]


def _thumbnail(src: ScreenSource) -> QPixmap:
    idx = int(src.id.split(":", 1)[1])
    screens = QGuiApplication.screens()
    if idx >= len(screens):
        return QPixmap()
    return screens[idx].grabWindow(0)


def _pick_json(pick: StreamPick) -> str:
    data = asdict(pick)
    sources = pick.settings.audio_sources
    if sources is None or is_special(sources):
        data["settings"]["audio_sources"] = sources.value if sources is not None else None
    else:
        data["settings"]["audio_sources"] = [p.to_props() for p in sources]
    return json.dumps(data, indent=2)


def main(argv: List[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    _setup_logging(args.verbose)

    store = ConfigStore()
    audio = store.load_audio_settings()
    backend = VirtmicBackend(host_binary=audio.host_binary)

    if args.list_audio:
        return _list_audio(backend, store, args.granular)

    app = QApplication(sys.argv[:1])
    apply_dark_theme(app)

    host = LocalHost(args.user_id)
    cell = SettingsCell()
    patcher = ConnectionPatcher(cell)
    capture = CaptureController(backend, host.local_user_id())
    host.set_options_hook(patcher.patch_options)
    host.subscribe_stream_closed(capture.on_stream_closed)

    session = ShareSession(host, cell, patcher, capture, backend, store, qt_scheduler)
    pick = open_screen_share_picker(_screens(), session, skip_picker=args.skip_picker, thumbnail=_thumbnail)
    if pick is None:
        log.info("Aborted")
        backend.close()
        return 1

    print(_pick_json(pick))
    log.debug("Stream options for new streams: %s", host.build_stream_options())

    if not capture.active:
        backend.close()
        return 0

    # keep linking streams that appear later until interrupted
    stream_key = f"call:local:0:{host.local_user_id()}"
    relink = QTimer()
    relink.setInterval(RELINK_INTERVAL_MS)
    relink.timeout.connect(capture.poll)
    relink.start()
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    # let the interpreter see SIGINT while Qt's loop is idle
    wake = QTimer()
    wake.timeout.connect(lambda: None)
    wake.start(250)

    log.info("Sharing audio; press Ctrl+C to stop")
    try:
        app.exec()
    finally:
        host.close_stream(stream_key)
        backend.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
