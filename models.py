# models.py
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


# PipeWire property name for each Node/Pattern field.
PROP_KEYS: Dict[str, str] = {
    "name": "application.name",
    "process_binary": "application.process.binary",
    "process_id": "application.process.id",
    "media_name": "media.name",
    "media_class": "media.class",
}

STREAM_RESOLUTIONS: Tuple[str, ...] = ("480", "720", "1080", "1440")
STREAM_FPS: Tuple[str, ...] = ("15", "30", "60")
CONTENT_HINTS: Tuple[str, ...] = ("motion", "detail")

BITRATE_MIN = 500_000
BITRATE_MAX = 8_000_000
BITRATE_TARGET = 600_000


@dataclass(frozen=True)
class NodeProps:
    name: Optional[str] = None
    process_binary: Optional[str] = None
    process_id: Optional[str] = None
    media_name: Optional[str] = None
    media_class: Optional[str] = None

    def keys(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def items(self) -> List[Tuple[str, str]]:
        return [(k, getattr(self, k)) for k in self.keys()]

    def get(self, key: str) -> Optional[str]:
        return getattr(self, key, None)

    def to_props(self) -> Dict[str, str]:
        return {PROP_KEYS[k]: v for k, v in self.items()}

    def __bool__(self) -> bool:
        return bool(self.keys())


@dataclass(frozen=True)
class Node(NodeProps):
    """One concrete audio stream as reported by the backend."""

    @classmethod
    def from_props(cls, props: Dict[str, str]) -> "Node":
        kw = {}
        for k, pk in PROP_KEYS.items():
            v = props.get(pk)
            if v:
                kw[k] = str(v)
        return cls(**kw)


@dataclass(frozen=True)
class Pattern(NodeProps):
    """A partial set of node properties used as a match criterion."""

    def __post_init__(self) -> None:
        if not self.keys():
            raise ValueError("a pattern needs at least one property")

    def extend(self, **extra: Optional[str]) -> "Pattern":
        return replace(self, **extra)


class SpecialMode(str, Enum):
    NONE = "None"
    ENTIRE_SYSTEM = "Entire System"


AudioSource = Union[SpecialMode, Pattern]
Selection = Union[SpecialMode, Tuple[Pattern, ...]]


def is_special(value: object) -> bool:
    return isinstance(value, SpecialMode)


@dataclass(frozen=True)
class CandidateItem:
    label: str
    value: AudioSource


@dataclass
class QualitySettings:
    resolution: str = "1080"
    fps: str = "60"
    audio: bool = True
    content_hint: Optional[str] = "motion"
    audio_sources: Optional[Selection] = None

    def __post_init__(self) -> None:
        if self.resolution not in STREAM_RESOLUTIONS:
            raise ValueError(f"unsupported resolution: {self.resolution!r}")
        if self.fps not in STREAM_FPS:
            raise ValueError(f"unsupported frame rate: {self.fps!r}")
        if self.content_hint is not None and self.content_hint not in CONTENT_HINTS:
            raise ValueError(f"unsupported content hint: {self.content_hint!r}")


@dataclass(frozen=True)
class QualityProfile:
    frame_rate: int
    width: int
    height: int
    pixel_count: int
    bitrate_min: int = BITRATE_MIN
    bitrate_max: int = BITRATE_MAX
    bitrate_target: int = BITRATE_TARGET


@dataclass(frozen=True)
class ScreenSource:
    id: str
    name: str
    url: str = ""


@dataclass(frozen=True)
class StreamPick:
    id: str
    settings: QualitySettings


@dataclass(frozen=True)
class CaptureOptions:
    only_default_speakers: bool = True
    ignore_inputs: bool = True
    ignore_virtual: bool = True
    workaround: bool = False


@dataclass
class Resolution:
    width: int = 0
    height: int = 0


@dataclass
class VideoStreamParameters:
    max_frame_rate: int = 0
    max_resolution: Resolution = field(default_factory=Resolution)


@dataclass(frozen=True)
class AudioNode:
    """A PipeWire graph node together with its raw properties."""

    id: int
    name: str
    description: str
    media_class: str
    props: Dict[str, str]

    def as_node(self) -> Node:
        return Node.from_props(self.props)
