# session.py
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, List, Optional

from capture import CaptureController
from host import Host, Scheduler
from models import AudioSource, CandidateItem, QualitySettings, Selection, StreamPick
from node_catalog import NodeCatalog, NodeLister
from patcher import ConnectionPatcher
from patterns import flatten_candidates
from quality import SettingsCell
from selection import SelectionSet
from store_config import AudioSettings, ConfigStore


class ShareSession:
    """
    State of one picker dialog, from opening to "Go Live".

    Quality settings start from the defaults every time; they only become the
    published settings when submit() runs.
    """

    def __init__(
        self,
        host: Host,
        cell: SettingsCell,
        patcher: ConnectionPatcher,
        capture: CaptureController,
        lister: NodeLister,
        store: ConfigStore,
        scheduler: Scheduler,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.host = host
        self.cell = cell
        self.patcher = patcher
        self.capture = capture
        self.store = store
        self.scheduler = scheduler
        self._log = logger or logging.getLogger("screenshare")

        self.settings = QualitySettings()
        self.selection = SelectionSet()
        self.catalog = NodeCatalog(lister)
        self.audio_settings: AudioSettings = store.load_audio_settings()

    def update_settings(self, **changes) -> QualitySettings:
        self.settings = replace(self.settings, **changes)
        return self.settings

    def load_sources(self, on_done: Optional[Callable[[NodeCatalog], None]] = None) -> None:
        if not self.capture.enabled:
            return
        self.catalog.load(self.scheduler, self.audio_settings.capture_options(), on_done)

    def candidates(self) -> List[CandidateItem]:
        if self.catalog.loading or not self.catalog.result or not self.catalog.result.ok:
            return []
        return flatten_candidates(self.catalog.nodes, self.audio_settings.granular_select)

    def is_selected(self, value: AudioSource) -> bool:
        return self.selection.is_selected(value)

    def toggle(self, value: AudioSource) -> Selection:
        return self.selection.toggle(value)

    def save_audio_settings(self, settings: AudioSettings) -> None:
        granular_changed = settings.granular_select != self.audio_settings.granular_select
        self.audio_settings = settings
        if granular_changed:
            # patterns built in the other mode no longer line up with the candidates
            self.selection.reset()
        self.store.save_audio_settings(settings)

    def set_granular(self, value: bool) -> None:
        self.save_audio_settings(replace(self.audio_settings, granular_select=value))

    def submit(self, screen_id: str) -> StreamPick:
        settings = replace(self.settings, audio_sources=self.selection.resolved())
        self.cell.publish(settings)
        user_id = self.host.local_user_id()

        try:
            self.patcher.apply_to_connection(self.host.connections(), user_id)
        except Exception as e:
            self._log.error("Error while submitting stream: %s", e, exc_info=e)

        self.capture.start(settings.audio_sources, self.audio_settings.capture_options())
        self.patcher.schedule_track_update(self.scheduler, self.host.connections, user_id)
        return StreamPick(id=screen_id, settings=settings)
