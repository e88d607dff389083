# node_catalog.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Protocol

from errors import EnumerationFailed, IncompatibleNativeLibrary
from host import Scheduler
from models import CaptureOptions, Node


@dataclass(frozen=True)
class ListResult:
    ok: bool
    nodes: List[Node] = field(default_factory=list)
    has_compat_layer: bool = True
    incompatible_library: bool = False
    error: str = ""


class NodeLister(Protocol):
    def list(self, options: CaptureOptions) -> ListResult: ...


class CatalogState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class NodeCatalog:
    def __init__(self, backend: NodeLister, logger: Optional[logging.Logger] = None) -> None:
        self._backend = backend
        self._log = logger or logging.getLogger("screenshare.catalog")
        self.state = CatalogState.IDLE
        self.result: Optional[ListResult] = None
        self.error: Optional[EnumerationFailed] = None

    @property
    def loading(self) -> bool:
        return self.state == CatalogState.PENDING

    @property
    def nodes(self) -> List[Node]:
        if self.result is None or not self.result.ok:
            return []
        return list(self.result.nodes)

    @property
    def has_compat_layer(self) -> bool:
        # Assume present until a successful listing says otherwise.
        if self.result is None or not self.result.ok:
            return True
        return self.result.has_compat_layer

    @property
    def incompatible_library(self) -> bool:
        return isinstance(self.error, IncompatibleNativeLibrary)

    def load(
        self,
        scheduler: Scheduler,
        options: CaptureOptions,
        on_done: Optional[Callable[["NodeCatalog"], None]] = None,
    ) -> None:
        self.state = CatalogState.PENDING
        self.error = None

        def run() -> None:
            self._finish(self._list(options))
            if on_done is not None:
                on_done(self)

        scheduler(0, run)

    def _list(self, options: CaptureOptions) -> ListResult:
        try:
            return self._backend.list(options)
        except IncompatibleNativeLibrary as e:
            return ListResult(ok=False, incompatible_library=True, error=str(e))
        except Exception as e:
            return ListResult(ok=False, error=str(e))

    def _finish(self, result: ListResult) -> None:
        self.result = result
        if result.ok:
            self.state = CatalogState.READY
            self._log.debug("Listed %d audio nodes", len(result.nodes))
            return

        if result.incompatible_library:
            self.error = IncompatibleNativeLibrary(result.error)
        else:
            self.error = EnumerationFailed(result.error or "audio backend unavailable")
        self.state = CatalogState.FAILED
        self._log.error("Failed to list audio sources: %s", self.error)
