# quality.py
from __future__ import annotations

from typing import Optional, Tuple

from models import QualityProfile, QualitySettings


def compute_profile(settings: QualitySettings) -> QualityProfile:
    frame_rate = int(settings.fps)
    height = int(settings.resolution)
    width = round(height * (16 / 9))
    return QualityProfile(
        frame_rate=frame_rate,
        width=width,
        height=height,
        pixel_count=width * height,
    )


class SettingsCell:
    """
    The settings of the most recent submission.

    Written only by the dialog at submit time, read by every options hook
    afterwards. Version and value are published in one assignment; the last
    write wins and nothing is rolled back.
    """

    def __init__(self) -> None:
        self._slot: Tuple[int, Optional[QualitySettings]] = (0, None)

    def publish(self, settings: QualitySettings) -> int:
        version = self._slot[0] + 1
        self._slot = (version, settings)
        return version

    def snapshot(self) -> Tuple[int, Optional[QualitySettings]]:
        return self._slot

    def current(self) -> Optional[QualitySettings]:
        return self._slot[1]

    def profile(self) -> Optional[QualityProfile]:
        settings = self._slot[1]
        return compute_profile(settings) if settings is not None else None
