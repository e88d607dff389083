# pw_channels.py
from __future__ import annotations

from typing import Dict, Tuple


CHANNEL_ORDER: Tuple[str, ...] = (
    "MONO", "FL", "FR", "FC", "LFE", "SL", "SR", "RL", "RR",
) + tuple(f"AUX{i}" for i in range(16))

_ALIASES: Dict[str, str] = {
    "front-left": "FL",
    "front-right": "FR",
    "front-center": "FC",
    "low-frequency": "LFE",
    "side-left": "SL",
    "side-right": "SR",
    "rear-left": "RL",
    "rear-right": "RR",
}

_SUFFIX_TAGS = ("MONO", "LFE", "FL", "FR", "FC", "SL", "SR", "RL", "RR")


def channel_rank(ch: str) -> int:
    try:
        return CHANNEL_ORDER.index(ch)
    except ValueError:
        return len(CHANNEL_ORDER)


def normalize_channel(v: str) -> str:
    s = (v or "").strip().lower()
    if not s:
        return ""
    if s in _ALIASES:
        return _ALIASES[s]
    if s.startswith("aux") and s[3:].isdigit():
        return f"AUX{int(s[3:])}"
    return s.upper()


def channel_from_port_props(props: Dict[str, str]) -> str:
    """Best guess of a port's channel: explicit audio props first, then the port name suffix."""
    explicit = props.get("audio.channel") or props.get("audio.position") or ""
    if explicit.strip():
        return normalize_channel(explicit)

    pn = (props.get("port.name") or "").strip()
    if not pn:
        return ""

    # "output_FL", "monitor_FR", "capture_MONO"
    _, sep, tail = pn.rpartition("_")
    if sep and tail:
        return normalize_channel(tail)

    up = pn.upper()
    return next((tag for tag in _SUFFIX_TAGS if up.endswith(tag)), "")
