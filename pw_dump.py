# pw_dump.py
from __future__ import annotations

from typing import Any, Dict, Iterator, List

from models import AudioNode
from pw_channels import channel_from_port_props
from pw_cli import pw_dump_json
from pw_types import PwGraph, PwLink, PwPort


def props_from_obj(obj: Dict[str, Any]) -> Dict[str, str]:
    """Merges top-level props and info.props; info wins, values are stringified."""
    out: Dict[str, str] = {}
    for src in (obj.get("props") or {}, (obj.get("info") or {}).get("props") or {}):
        if not isinstance(src, dict):
            continue
        for k, v in src.items():
            out[str(k)] = "" if v is None else str(v)
    return out


def node_desc(pr: Dict[str, str]) -> str:
    return pr.get("node.description") or pr.get("node.nick") or pr.get("node.name") or ""


def port_direction(pr: Dict[str, str], info: Dict[str, Any]) -> str:
    for raw in (pr.get("port.direction"), info.get("direction") if isinstance(info, dict) else None):
        d = (raw or "").strip().lower()
        if d in ("in", "out"):
            return d
    return ""


def _objects(data: List[Any], kind: str) -> Iterator[Dict[str, Any]]:
    for obj in data:
        if isinstance(obj, dict) and str(obj.get("type") or "").endswith(f":{kind}"):
            yield obj


def _as_int(v: Any, default: int = 0) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def parse_graph(data: List[Any]) -> PwGraph:
    graph = PwGraph()

    for obj in _objects(data, "Node"):
        oid = _as_int(obj.get("id"), -1)
        if oid < 0:
            continue
        pr = props_from_obj(obj)
        graph.nodes[oid] = AudioNode(
            id=oid,
            name=pr.get("node.name", ""),
            description=node_desc(pr),
            media_class=pr.get("media.class", ""),
            props=pr,
        )

    for obj in _objects(data, "Port"):
        oid = _as_int(obj.get("id"), -1)
        if oid < 0:
            continue
        pr = props_from_obj(obj)
        nid = _as_int(pr.get("node.id"))
        n = graph.nodes.get(nid)
        nname = n.name if n else ""
        pname = pr.get("port.name", "")

        graph.ports[oid] = PwPort(
            id=oid,
            node_id=nid,
            node_name=nname,
            port_name=pname,
            direction=port_direction(pr, obj.get("info") or {}),
            channel=channel_from_port_props(pr),
            full_name=f"{nname}:{pname}" if nname and pname else "",
        )

    for obj in _objects(data, "Link"):
        pr = props_from_obj(obj)
        out_pid = _as_int(pr.get("link.output.port") or pr.get("link.output.port.id"), -1)
        in_pid = _as_int(pr.get("link.input.port") or pr.get("link.input.port.id"), -1)
        if out_pid < 0 or in_pid < 0:
            continue
        graph.links.append(PwLink(id=_as_int(obj.get("id")), out_port_id=out_pid, in_port_id=in_pid))

    return graph


def dump_graph() -> PwGraph:
    return parse_graph(pw_dump_json())
