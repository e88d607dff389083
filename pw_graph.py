# pw_graph.py
from __future__ import annotations

from typing import Dict, List, Tuple

from models import AudioNode
from pw_channels import channel_rank
from pw_types import PwGraph, PwPort


INTERNAL_APPS = ("PipeWire", "WirePlumber", "PulseAudio")


def is_output_stream(n: AudioNode) -> bool:
    mc = n.media_class
    return mc.startswith("Stream/") and "Output" in mc and mc.endswith("/Audio")


def is_input_stream(n: AudioNode) -> bool:
    mc = n.media_class
    return mc.startswith("Stream/") and "Input" in mc and mc.endswith("/Audio")


def is_sink_node(n: AudioNode) -> bool:
    return n.media_class == "Audio/Sink"


def is_monitor_node(n: AudioNode) -> bool:
    return n.name.endswith(".monitor") or n.props.get("stream.monitor") == "true"


def is_virtual_node(n: AudioNode) -> bool:
    # sink-owned loopback and monitor streams, e.g. when mix bussing
    return n.props.get("node.virtual") == "true" or is_monitor_node(n)


def is_internal_node(n: AudioNode) -> bool:
    app = (n.props.get("application.name") or "").strip()
    return app in INTERNAL_APPS


def select_ports(graph: PwGraph, node_id: int, direction: str) -> List[PwPort]:
    """Ports of a node in canonical channel order; unlabelled ports follow by id."""
    ps = sorted(graph.node_ports(node_id, direction), key=lambda p: p.id)
    if not ps:
        return []

    first: Dict[str, PwPort] = {}
    for p in ps:
        if p.channel and p.channel not in first:
            first[p.channel] = p
    labelled = sorted(first.values(), key=lambda p: channel_rank(p.channel))
    used = {p.id for p in labelled}
    return labelled + [p for p in ps if p.id not in used]


def map_ports_1_to_1(src: List[PwPort], dst: List[PwPort]) -> List[Tuple[str, str]]:
    if not src or not dst:
        return []

    d_by = {p.channel: p for p in dst if p.channel}
    pairs = [(p.full_name, d_by[p.channel].full_name) for p in src if p.channel and p.channel in d_by]
    if pairs:
        return pairs

    # mono into stereo: fan the single channel out to every destination port
    if len(src) == 1:
        return [(src[0].full_name, p.full_name) for p in dst]

    return [(s.full_name, d.full_name) for s, d in zip(src, dst)]
