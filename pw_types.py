# pw_types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from models import AudioNode


@dataclass(frozen=True)
class PwPort:
    id: int
    node_id: int
    node_name: str
    port_name: str
    direction: str  # "in" | "out" | ""
    channel: str    # "FL","FR","AUX0"... or ""
    full_name: str  # "node.name:port.name" or ""

    @property
    def is_monitor(self) -> bool:
        return self.port_name.startswith("monitor_") or self.port_name.startswith("monitor.")


@dataclass(frozen=True)
class PwLink:
    id: int
    out_port_id: int
    in_port_id: int


@dataclass
class PwGraph:
    nodes: Dict[int, AudioNode] = field(default_factory=dict)
    ports: Dict[int, PwPort] = field(default_factory=dict)
    links: List[PwLink] = field(default_factory=list)

    def find_node(self, name: str) -> Optional[AudioNode]:
        return next((n for n in self.nodes.values() if n.name == name), None)

    def node_ports(self, node_id: int, direction: str) -> Iterator[PwPort]:
        for p in self.ports.values():
            if p.node_id == node_id and p.direction == direction and p.full_name:
                yield p

    def linked_node_ids(self, node_id: int) -> List[int]:
        """Ids of nodes that receive audio from node_id's output ports."""
        out: List[int] = []
        for lk in self.links:
            op = self.ports.get(lk.out_port_id)
            ip = self.ports.get(lk.in_port_id)
            if op is None or ip is None or op.node_id != node_id:
                continue
            if ip.node_id not in out:
                out.append(ip.node_id)
        return out
