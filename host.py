# host.py
"""
What the picker needs from the application that owns the call.

The call client itself is not part of this project; these protocols describe
the few attributes the picker reads or writes on it. LocalHost is an in-process
stand-in used by the standalone entry point.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, MutableMapping, Optional, Protocol, Sequence

from models import VideoStreamParameters


Scheduler = Callable[[int, Callable[[], None]], None]
OptionsHook = Callable[[MutableMapping[str, Any]], None]
StreamClosedListener = Callable[[str], None]


class VideoTrack(Protocol):
    def get_constraints(self) -> Dict[str, Any]: ...

    def apply_constraints(self, constraints: Dict[str, Any]) -> None: ...


class ConnectionInput(Protocol):
    def video_tracks(self) -> Sequence[VideoTrack]: ...


class Connection(Protocol):
    stream_user_id: str
    video_stream_parameters: List[VideoStreamParameters]
    input: ConnectionInput


class Host(Protocol):
    def local_user_id(self) -> str: ...

    def connections(self) -> Sequence[Connection]: ...

    def set_options_hook(self, hook: Optional[OptionsHook]) -> None: ...

    def subscribe_stream_closed(self, listener: StreamClosedListener) -> None: ...


def stream_key_owner(stream_key: str) -> str:
    """Owner id of a stream key such as "guild:123:456:<owner>"."""
    return stream_key.split(":")[-1]


def immediate_scheduler(_delay_ms: int, callback: Callable[[], None]) -> None:
    callback()


class LocalHost:
    """A host with no remote peers: options objects and closes come from this process."""

    def __init__(self, user_id: str = "local") -> None:
        self._user_id = user_id
        self._connections: List[Connection] = []
        self._options_hook: Optional[OptionsHook] = None
        self._closed_listeners: List[StreamClosedListener] = []

    def local_user_id(self) -> str:
        return self._user_id

    def connections(self) -> Sequence[Connection]:
        return list(self._connections)

    def add_connection(self, conn: Connection) -> None:
        self._connections.append(conn)

    def set_options_hook(self, hook: Optional[OptionsHook]) -> None:
        self._options_hook = hook

    def build_stream_options(self, **initial: Any) -> Dict[str, Any]:
        opts: Dict[str, Any] = {"capture": {}, **initial}
        if self._options_hook is not None:
            self._options_hook(opts)
        return opts

    def subscribe_stream_closed(self, listener: StreamClosedListener) -> None:
        self._closed_listeners.append(listener)

    def close_stream(self, stream_key: str) -> None:
        for listener in list(self._closed_listeners):
            listener(stream_key)
