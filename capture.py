# capture.py
from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from errors import CaptureStartFailed, CaptureStopFailed
from host import stream_key_owner
from models import CaptureOptions, Pattern, Selection, SpecialMode, is_special


class CaptureBackend(Protocol):
    @property
    def available(self) -> bool: ...

    def start_with_filters(self, patterns: Sequence[Pattern], options: CaptureOptions) -> None: ...

    def start_system(self, options: CaptureOptions) -> None: ...

    def stop(self) -> None: ...

    def relink(self) -> None: ...


class CaptureController:
    """Starts and stops audio capture for the local user's share."""

    def __init__(
        self,
        backend: CaptureBackend,
        local_user_id: str,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.backend = backend
        self.local_user_id = local_user_id
        self._log = logger or logging.getLogger("screenshare.capture")
        self._active = False

    @property
    def enabled(self) -> bool:
        return bool(self.backend.available)

    @property
    def active(self) -> bool:
        return self._active

    def start(self, selection: Optional[Selection], options: CaptureOptions) -> bool:
        if not self.enabled or selection is None or selection == SpecialMode.NONE:
            return False

        try:
            if selection == SpecialMode.ENTIRE_SYSTEM:
                self.backend.start_system(options)
            elif is_special(selection) or not selection:
                return False
            else:
                self.backend.start_with_filters(list(selection), options)
        except Exception as e:
            self._log.error("Audio capture did not start, sharing without audio: %s", CaptureStartFailed(str(e)))
            return False

        self._active = True
        self._log.info("Audio capture started for %s", _describe(selection))
        return True

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        try:
            self.backend.stop()
        except Exception as e:
            self._log.error("Audio capture did not stop cleanly: %s", CaptureStopFailed(str(e)))
            return
        self._log.info("Audio capture stopped")

    def on_stream_closed(self, stream_key: str) -> None:
        if stream_key_owner(stream_key) != self.local_user_id:
            return
        self.stop()

    def poll(self) -> None:
        if not self._active:
            return
        try:
            self.backend.relink()
        except Exception as e:
            self._log.warning("Relinking audio streams failed: %s", e)


def _describe(selection: Selection) -> str:
    if is_special(selection):
        return selection.value
    return ", ".join(" ".join(f"{k}={v}" for k, v in p.items()) for p in selection)
