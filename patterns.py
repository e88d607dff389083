# patterns.py
"""
Turning audio nodes into selectable candidates, and matching selections against them.

A candidate is either one of the two special modes or a Pattern: a subset of a
node's properties. With granular selection a node yields its base pattern
(application name, or process binary when the name is missing) followed by one
refinement per extra property; refinements always extend the base and are never
combined with each other.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from models import CandidateItem, NodeProps, Pattern, SpecialMode

SPECIAL_MODES = (SpecialMode.NONE, SpecialMode.ENTIRE_SYSTEM)


def matches(query: NodeProps, target: NodeProps) -> bool:
    """True iff every property present in query has the same value in target.

    Not symmetric: extra properties on target are ignored.
    """
    return all(target.get(k) == v for k, v in query.items())


def _base(node: NodeProps, granular: bool) -> Optional[Tuple[str, Pattern]]:
    if node.name:
        return node.name, Pattern(name=node.name)
    if granular and node.process_binary:
        return node.process_binary, Pattern(process_binary=node.process_binary)
    return None


def build_candidates(node: NodeProps, granular: bool = False) -> List[CandidateItem]:
    base = _base(node, granular)
    if base is None:
        return []

    label, pattern = base
    out = [CandidateItem(label, pattern)]
    if not granular:
        return out

    if node.process_id:
        out.append(CandidateItem(f"{label} ({node.process_id})", pattern.extend(process_id=node.process_id)))
    if node.media_name:
        out.append(CandidateItem(f"{label} [{node.media_name}]", pattern.extend(media_name=node.media_name)))
    if node.media_class:
        out.append(CandidateItem(f"{label} [{node.media_class}]", pattern.extend(media_class=node.media_class)))

    return out


def special_candidates() -> List[CandidateItem]:
    return [CandidateItem(m.value, m) for m in SPECIAL_MODES]


def dedup_by_label(items: Iterable[CandidateItem]) -> List[CandidateItem]:
    # First wins, even when a later item with the same label carries a different pattern.
    seen = set()
    out: List[CandidateItem] = []
    for it in items:
        if it.label in seen:
            continue
        seen.add(it.label)
        out.append(it)
    return out


def flatten_candidates(nodes: Iterable[NodeProps], granular: bool = False) -> List[CandidateItem]:
    items = special_candidates()
    for n in nodes:
        items.extend(build_candidates(n, granular))
    return dedup_by_label(items)
