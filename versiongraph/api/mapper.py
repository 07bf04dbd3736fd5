"""
API Mapper
==========

Transforms engine contracts into JSON-ready dicts for the rendering
surface. Exposes structure as built; no re-layout, no smoothing.
"""
from typing import Any, Dict, Optional

from ..contracts.base import Error
from ..contracts.graph import GraphEdge, GraphNode, GraphSnapshot
from ..contracts.history import HistoryEntry, VersionData
from ..interaction.selection import SelectionState


def map_entry(entry: HistoryEntry) -> Dict[str, Any]:
    """HistoryEntry -> camelCase dict mirroring the editor's entry shape."""
    return {
        "id": entry.id,
        "timestamp": entry.timestamp.isoformat(),
        "modifier": entry.modifier,
        "action": entry.action.value,
        "field": entry.field,
        "oldValue": entry.old_value,
        "newValue": entry.new_value,
        "comment": entry.comment,
        "version": entry.version,
        "changeType": entry.change_type.value if entry.change_type else None,
        "parentId": entry.parent_id,
        "summary": entry.summary,
        "differenceSummary": entry.difference_summary,
    }


def map_node(node: GraphNode) -> Dict[str, Any]:
    display = node.display
    return {
        "id": node.node_id,
        "level": node.level,
        "position": {"x": node.position.x, "y": node.position.y},
        "size": {"width": node.width, "height": node.height},
        "action": node.action,
        "synthetic": node.is_synthetic,
        "style": {"icon": node.style.icon, "colorClass": node.style.color_class},
        "highlight": {
            "focused": node.is_focused,
            "multiSelected": node.is_multi_selected,
            "mergeCandidate": node.is_merge_candidate,
            "mergeMode": node.is_merge_mode,
        },
        "displayFields": {
            "label": display.version_label,
            "modifier": display.modifier,
            "timestamp": display.timestamp,
            "commitHash": display.commit_hash,
            "branchName": display.branch_name,
            "field": display.field,
            "oldValue": display.old_value,
            "newValue": display.new_value,
            "comment": display.comment,
            "changeType": display.change_type,
            "parentId": display.parent_id,
            "summary": display.summary,
            "differenceSummary": display.difference_summary,
            "isInitial": display.is_initial,
            "isCurrent": display.is_current,
        },
    }


def map_edge(edge: GraphEdge) -> Dict[str, Any]:
    style: Dict[str, Any] = {
        "stroke": edge.style.stroke,
        "strokeWidth": edge.style.stroke_width,
    }
    if edge.style.dash:
        style["strokeDasharray"] = edge.style.dash
    return {
        "id": edge.edge_id,
        "source": edge.source_id,
        "target": edge.target_id,
        "kind": edge.kind.value,
        "style": style,
    }


def map_selection(state: SelectionState) -> Dict[str, Any]:
    return {
        "mode": state.mode.value,
        "focusedNode": state.focused_node_id,
        "multiSelected": list(state.multi_selected),
        "mergeCandidates": list(state.merge_candidates),
        "canConfirmMerge": state.can_confirm_merge,
    }


def map_snapshot(snapshot: GraphSnapshot, selection: Optional[SelectionState] = None) -> Dict[str, Any]:
    """GraphSnapshot (+ selection) -> {snapshotId, nodes, edges, selection}."""
    payload: Dict[str, Any] = {
        "snapshotId": snapshot.snapshot_id,
        "entryCount": snapshot.entry_count,
        "maxLevel": snapshot.max_level,
        "nodes": [map_node(n) for n in snapshot.nodes],
        "edges": [map_edge(e) for e in snapshot.edges],
    }
    if selection is not None:
        payload["selection"] = map_selection(selection)
    return payload


def map_version(version: VersionData) -> Dict[str, Any]:
    return {
        "versionId": version.version_id,
        "version": version.version,
        "timestamp": version.timestamp.isoformat(),
        "modifier": version.modifier,
        "action": version.action,
        "field": version.field,
        "comment": version.comment,
    }


def map_error(error: Error) -> Dict[str, Any]:
    return {
        "code": error.code.name,
        "message": error.message,
        "context": dict(error.context),
    }
