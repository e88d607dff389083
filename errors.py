# errors.py
from __future__ import annotations


VENMIC_GLIBCXX_GUIDE_URL = "https://gist.github.com/Vendicated/b655044ffbb16b2716095a448c6d827a"
PIPEWIRE_PULSE_GUIDE_URL = "https://gist.github.com/the-spyke/2de98b22ff4f978ebf0650c90e82027e#install"


class ScreenShareError(Exception):
    pass


class BackendCommandFailed(ScreenShareError, RuntimeError):
    """A pw-dump / pw-link / pipewire-pulse call failed."""


class EnumerationFailed(ScreenShareError):
    pass


class IncompatibleNativeLibrary(EnumerationFailed):
    def __init__(self, message: str = "", guide_url: str = VENMIC_GLIBCXX_GUIDE_URL) -> None:
        super().__init__(message or "The native audio library cannot be loaded on this system.")
        self.guide_url = guide_url


class CaptureStartFailed(ScreenShareError):
    pass


class CaptureStopFailed(ScreenShareError):
    pass


class ConstraintApplyFailed(ScreenShareError):
    pass
