# patcher.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, MutableMapping, Optional, Sequence

from errors import ConstraintApplyFailed
from host import Connection, Scheduler
from models import QualityProfile
from quality import SettingsCell

TRACK_UPDATE_DELAY_MS = 100
MIN_CAPTURE_WIDTH = 640
MIN_CAPTURE_HEIGHT = 480


class ConnectionPatcher:
    """Pushes the published stream quality into host options, connections and tracks."""

    def __init__(self, cell: SettingsCell, logger: Optional[logging.Logger] = None) -> None:
        self._cell = cell
        self._log = logger or logging.getLogger("screenshare.patcher")

    def patch_options(self, options: MutableMapping[str, Any]) -> None:
        """Options-construction hook: mutates a freshly built per-stream options mapping."""
        profile = self._cell.profile()
        if profile is None:
            return

        options["bitrate_min"] = profile.bitrate_min
        options["bitrate_max"] = profile.bitrate_max
        options["bitrate_target"] = profile.bitrate_target

        dims = {
            "frame_rate": profile.frame_rate,
            "width": profile.width,
            "height": profile.height,
            "pixel_count": profile.pixel_count,
        }
        encode = options.get("encode")
        if encode is not None:
            encode.update(dims)
        capture = options.get("capture")
        if capture is None:
            capture = options["capture"] = {}
        capture.update(dims)

    @staticmethod
    def find_connection(connections: Sequence[Connection], user_id: str) -> Optional[Connection]:
        return next((c for c in connections if c.stream_user_id == user_id), None)

    def apply_to_connection(self, connections: Sequence[Connection], user_id: str) -> bool:
        profile = self._cell.profile()
        conn = self.find_connection(connections, user_id)
        if profile is None or conn is None or not conn.video_stream_parameters:
            return False

        params = conn.video_stream_parameters[0]
        params.max_frame_rate = profile.frame_rate
        params.max_resolution.height = profile.height
        params.max_resolution.width = profile.width
        version, _ = self._cell.snapshot()
        self._log.debug(
            "Patched connection of %s to %dx%d@%d (settings v%d)",
            user_id,
            profile.width,
            profile.height,
            profile.frame_rate,
            version,
        )
        return True

    @staticmethod
    def build_constraints(current: Dict[str, Any], profile: QualityProfile) -> Dict[str, Any]:
        return {
            **current,
            "frameRate": profile.frame_rate,
            "width": {"min": MIN_CAPTURE_WIDTH, "ideal": profile.width, "max": profile.width},
            "height": {"min": MIN_CAPTURE_HEIGHT, "ideal": profile.height, "max": profile.height},
            "advanced": [{"width": profile.width, "height": profile.height}],
            "resizeMode": "none",
        }

    def apply_to_track(self, connections: Sequence[Connection], user_id: str) -> bool:
        """Best effort: failures are logged and reported as False, never raised."""
        profile = self._cell.profile()
        conn = self.find_connection(connections, user_id)
        if profile is None or conn is None:
            return False

        try:
            tracks = conn.input.video_tracks()
            if not tracks:
                return False
            track = tracks[0]
            track.apply_constraints(self.build_constraints(dict(track.get_constraints() or {}), profile))
        except Exception as e:
            err = ConstraintApplyFailed(str(e))
            self._log.error("Failed to apply constraints: %s", err, exc_info=e)
            return False

        self._log.info("Applied constraints successfully. New constraints: %s", track.get_constraints())
        return True

    def schedule_track_update(
        self,
        scheduler: Scheduler,
        connections: Callable[[], Sequence[Connection]],
        user_id: str,
        delay_ms: int = TRACK_UPDATE_DELAY_MS,
    ) -> None:
        scheduler(delay_ms, lambda: self._deferred_track_update(connections, user_id))

    def _deferred_track_update(self, connections: Callable[[], Sequence[Connection]], user_id: str) -> bool:
        # connections are looked up again when the timer fires; renegotiation may have replaced them
        try:
            current = connections()
        except Exception as e:
            err = ConstraintApplyFailed(str(e))
            self._log.error("Failed to apply constraints: %s", err, exc_info=e)
            return False
        return self.apply_to_track(current, user_id)
