"""
Mermaid Export
==============

Renders a GraphSnapshot as a Mermaid flowchart for docs and the CLI.
Edge colors follow the snapshot's edge styles; the current-state
pointer is dashed.
"""

from __future__ import annotations
import re
from typing import Dict, List, Set

from ..contracts.graph import GraphSnapshot

_UNSAFE = re.compile(r'[^A-Za-z0-9_]')


def _mermaid_id(node_id: str) -> str:
    # Mermaid ids cannot contain dots or dashes
    return "n_" + _UNSAFE.sub("_", node_id)


def _mermaid_ids(snapshot: GraphSnapshot) -> Dict[str, str]:
    """
    Node id -> Mermaid id, unique within one render.

    The first node to claim a sanitized id keeps it; later nodes that
    sanitize to the same text get a counter suffix.
    """
    ids: Dict[str, str] = {}
    taken: Set[str] = set()
    for node in snapshot.nodes:
        base = candidate = _mermaid_id(node.node_id)
        suffix = 2
        while candidate in taken:
            candidate = f"{base}_{suffix}"
            suffix += 1
        taken.add(candidate)
        ids[node.node_id] = candidate
    return ids


def _label(text: str, limit: int = 28) -> str:
    text = text.replace('"', "'")
    if len(text) > limit:
        text = text[:limit - 3] + "..."
    return text


def render_mermaid(snapshot: GraphSnapshot, direction: str = "TD") -> str:
    """Generate a Mermaid flowchart for the snapshot."""
    lines: List[str] = [f"graph {direction}"]
    ids = _mermaid_ids(snapshot)

    lines.append("    classDef focused stroke:#60A5FA,stroke-width:3px;")
    lines.append("    classDef selected stroke:#A78BFA,stroke-width:3px,fill:#F5F3FF;")
    lines.append("    classDef current fill:#E0E7FF,stroke:#A5B4FC;")

    for node in snapshot.nodes:
        label = f"{node.style.icon} {node.display.version_label}"
        if node.display.field and not node.is_synthetic:
            label = f"{label}: {node.display.field}"
        lines.append(f'    {ids[node.node_id]}["{_label(label)}"]')

        if node.is_synthetic:
            lines.append(f"    class {ids[node.node_id]} current;")
        elif node.is_merge_candidate or node.is_multi_selected:
            lines.append(f"    class {ids[node.node_id]} selected;")
        elif node.is_focused:
            lines.append(f"    class {ids[node.node_id]} focused;")

    for i, edge in enumerate(snapshot.edges):
        link = "-.->" if edge.style.is_dashed else "-->"
        lines.append(f"    {ids[edge.source_id]} {link} {ids[edge.target_id]}")

        dash = f",stroke-dasharray: {edge.style.dash.replace(',', ' ')}" if edge.style.is_dashed else ""
        lines.append(
            f"    linkStyle {i} stroke:{edge.style.stroke},"
            f"stroke-width:{edge.style.stroke_width:g}px{dash};"
        )

    return "\n".join(lines)
