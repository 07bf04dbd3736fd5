"""
Styling and Edge Classification Helpers

Pure lookups from entry action to render tags. The rendering surface
decides what a color class or icon means; this module only names them.
"""

from __future__ import annotations
from typing import Dict

from ..contracts.graph import CURRENT_ACTION, EdgeKind, EdgeStyle, NodeStyle
from ..contracts.history import HistoryAction, HistoryEntry


DEFAULT_STROKE = "#6B7280"

_NODE_STYLES: Dict[str, NodeStyle] = {
    HistoryAction.CREATED.value: NodeStyle(icon="✨", color_class="bg-green-100 border-green-500"),
    HistoryAction.MODIFIED.value: NodeStyle(icon="✏️", color_class="bg-blue-100 border-blue-500"),
    HistoryAction.MERGED.value: NodeStyle(icon="🔀", color_class="bg-orange-100 border-orange-300"),
    HistoryAction.STAR.value: NodeStyle(icon="⭐", color_class="bg-gray-100 border-blue-500"),
    HistoryAction.UNSTARED.value: NodeStyle(icon="🌟", color_class="bg-gray-100 border-blue-500"),
    CURRENT_ACTION: NodeStyle(icon="🎯", color_class="bg-indigo-100 border-indigo-300"),
}

_DEFAULT_NODE_STYLE = NodeStyle(icon="📝", color_class="bg-gray-100 border-blue-500")

_STROKES: Dict[HistoryAction, str] = {
    HistoryAction.CREATED: "#10B981",   # green
    HistoryAction.MODIFIED: "#3B82F6",  # blue
    HistoryAction.MERGED: "#8B5CF6",    # purple
    HistoryAction.STAR: "#F59E0B",      # orange
    HistoryAction.UNSTARED: DEFAULT_STROKE,
}

CURRENT_EDGE_STYLE = EdgeStyle(stroke="#10B981", stroke_width=2.0, dash="5,5")


def node_style(action: str) -> NodeStyle:
    """Icon and color class for an action value (or 'current')."""
    return _NODE_STYLES.get(action, _DEFAULT_NODE_STYLE)


def edge_style_for_action(action: HistoryAction) -> EdgeStyle:
    """Solid stroke colored by the target entry's action."""
    return EdgeStyle(stroke=_STROKES.get(action, DEFAULT_STROKE))


def edge_style(kind: EdgeKind, target_action: HistoryAction) -> EdgeStyle:
    """
    Classify an edge into its display style.

    lineage: keyed by the child's action
    merge: always the merged stroke
    current: dashed virtual pointer
    """
    if kind == EdgeKind.CURRENT:
        return CURRENT_EDGE_STYLE
    if kind == EdgeKind.MERGE:
        return edge_style_for_action(HistoryAction.MERGED)
    return edge_style_for_action(target_action)


def commit_hash(entry: HistoryEntry, index: int) -> str:
    """
    Short git-like hash for display.

    Last six hex digits of the timestamp in milliseconds, the first three
    letters of the modifier, and the 1-based position padded to two digits.
    """
    millis = int(entry.timestamp.timestamp() * 1000)
    stamp = format(millis, 'x')[-6:]
    modifier = entry.modifier[:3].lower()
    return f"{stamp}{modifier}{index:02d}"
