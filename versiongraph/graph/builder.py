"""
Graph Builder
=============

Pure transformation: history entries -> renderable lineage graph.

STEPS:
1. Tree assembly. Roots are entries without a parent, or whose parent is
   not part of the input (filtered out). Children keep input order.
2. Levels and positions from the LayoutEngine.
3. Lineage edges parent -> child, styled by the child's action.
4. Merge edges. Every merged entry receives an edge from each leaf that
   precedes it in the input. This reconstructs multi-parent lineage that
   the data model never stores.
   Completeness is counted against the leaves that precede the merge
   entry; a leaf appended after it (a later root, say) is never one of
   its merge sources.
5. One synthetic current-state node below the deepest level, pointed at
   by the most recently appended entry.

INVARIANT: build() never mutates its input and returns a new snapshot.
Every edge points from an earlier entry to a later one (or to the
synthetic node), so the result is a DAG.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..contracts.graph import (
    CURRENT_ACTION, CURRENT_STATE_ID, EdgeKind, GraphEdge, GraphNode,
    GraphSnapshot, NodeDisplay, Position,
)
from ..contracts.history import HistoryAction, HistoryEntry
from .layout import LayoutConfig, LayoutEngine, LayoutResult
from .styles import commit_hash, edge_style, node_style


@dataclass
class DisplayConfig:
    """Text shown where an entry has nothing to say."""
    summary_placeholder: str = "AI will generate version summary..."
    difference_placeholder: str = (
        "e.g. +1 Communication criteria, Modified Safety description, "
        "Changed Theory category..."
    )
    criteria_name: str = "Overall Evaluation Criteria"
    current_modifier: str = "Current System"
    current_label: str = "(unnamed)"
    branch_name: str = "main"


@dataclass(frozen=True)
class LineageForest:
    """Declared lineage restricted to the input entries."""
    roots: Tuple[str, ...]
    children: Dict[str, Tuple[str, ...]]
    leaves: Tuple[str, ...]

    @staticmethod
    def assemble(entries: Tuple[HistoryEntry, ...]) -> LineageForest:
        present = {e.id for e in entries}
        roots: List[str] = []
        children: Dict[str, List[str]] = {}

        for entry in entries:
            if entry.is_root or entry.parent_id not in present:
                roots.append(entry.id)
            else:
                children.setdefault(entry.parent_id, []).append(entry.id)

        leaves = tuple(e.id for e in entries if e.id not in children)
        return LineageForest(
            roots=tuple(roots),
            children={k: tuple(v) for k, v in children.items()},
            leaves=leaves,
        )


class GraphBuilder:
    """
    Builds GraphSnapshots from history entries.

    Holds only configuration; every build starts from scratch.
    """

    def __init__(
        self,
        layout_config: Optional[LayoutConfig] = None,
        display_config: Optional[DisplayConfig] = None
    ):
        self._layout = LayoutEngine(layout_config)
        self._display = display_config or DisplayConfig()

    def build(
        self,
        entries: Iterable[HistoryEntry],
        latest_id: Optional[str] = None
    ) -> GraphSnapshot:
        """
        Build the graph for `entries`.

        latest_id anchors the current-state edge (normally the store's
        latest entry). When it is absent from `entries` the last input
        entry is used instead.
        """
        entries = tuple(entries)
        forest = LineageForest.assemble(entries)
        layout = self._layout.layout(forest.roots, forest.children)

        nodes = [
            self._entry_node(entry, index, layout)
            for index, entry in enumerate(entries, start=1)
        ]
        current = self._current_node(layout)
        nodes.append(current)

        edges = self._lineage_edges(entries)
        edges.extend(self._merge_edges(entries, forest))

        anchor = self._current_anchor(entries, latest_id)
        if anchor is not None:
            edges.append(GraphEdge(
                edge_id=f"{anchor}-{CURRENT_STATE_ID}",
                source_id=anchor,
                target_id=CURRENT_STATE_ID,
                kind=EdgeKind.CURRENT,
                style=edge_style(EdgeKind.CURRENT, HistoryAction.MODIFIED),
            ))

        return GraphSnapshot(
            nodes=tuple(nodes),
            edges=tuple(edges),
            entry_count=len(entries),
            max_level=current.level,
        )

    # =========================================================================
    # NODES
    # =========================================================================

    def _entry_node(self, entry: HistoryEntry, index: int, layout: LayoutResult) -> GraphNode:
        placement = layout.placements[entry.id]
        config = self._layout.config
        return GraphNode(
            node_id=entry.id,
            level=placement.level,
            position=Position(x=placement.x, y=placement.y),
            action=entry.action.value,
            display=NodeDisplay(
                version_label=entry.version or entry.id,
                modifier=entry.modifier,
                timestamp=entry.timestamp.isoformat(),
                commit_hash=commit_hash(entry, index),
                field=entry.field,
                old_value=entry.old_value,
                new_value=entry.new_value,
                comment=entry.comment,
                change_type=entry.change_type.value if entry.change_type else None,
                parent_id=entry.parent_id,
                summary=entry.summary or self._display.summary_placeholder,
                difference_summary=entry.difference_summary or self._display.difference_placeholder,
                branch_name=self._display.branch_name,
                is_initial=entry.action == HistoryAction.CREATED and entry.is_root,
            ),
            style=node_style(entry.action.value),
            width=config.node_width,
            height=config.node_height,
        )

    def _current_node(self, layout: LayoutResult) -> GraphNode:
        placement, width = self._layout.current_state_placement(layout)
        return GraphNode(
            node_id=CURRENT_STATE_ID,
            level=placement.level,
            position=Position(x=placement.x, y=placement.y),
            action=CURRENT_ACTION,
            display=NodeDisplay(
                version_label=self._display.current_label,
                modifier=self._display.current_modifier,
                timestamp="",
                commit_hash="HEAD",
                field="Current State",
                new_value=f'Current state of overall evaluation criteria: "{self._display.criteria_name}"',
                comment="Current active version of the evaluation framework",
                branch_name=self._display.branch_name,
                is_current=True,
            ),
            style=node_style(CURRENT_ACTION),
            width=width,
            height=self._layout.config.node_height,
            is_synthetic=True,
        )

    # =========================================================================
    # EDGES
    # =========================================================================

    @staticmethod
    def _lineage_edges(entries: Tuple[HistoryEntry, ...]) -> List[GraphEdge]:
        present = {e.id for e in entries}
        return [
            GraphEdge(
                edge_id=f"{entry.parent_id}-{entry.id}",
                source_id=entry.parent_id,
                target_id=entry.id,
                kind=EdgeKind.LINEAGE,
                style=edge_style(EdgeKind.LINEAGE, entry.action),
            )
            for entry in entries
            # Parents hidden by a filter simply drop the edge
            if entry.parent_id is not None and entry.parent_id in present
        ]

    @staticmethod
    def _merge_edges(entries: Tuple[HistoryEntry, ...], forest: LineageForest) -> List[GraphEdge]:
        leaves: Set[str] = set(forest.leaves)
        edges: List[GraphEdge] = []

        for position, merge_entry in enumerate(entries):
            if merge_entry.action != HistoryAction.MERGED:
                continue
            for leaf in entries[:position]:
                if leaf.id not in leaves:
                    continue
                edges.append(GraphEdge(
                    edge_id=f"{leaf.id}-{merge_entry.id}-merge",
                    source_id=leaf.id,
                    target_id=merge_entry.id,
                    kind=EdgeKind.MERGE,
                    style=edge_style(EdgeKind.MERGE, merge_entry.action),
                ))

        return edges

    @staticmethod
    def _current_anchor(entries: Tuple[HistoryEntry, ...], latest_id: Optional[str]) -> Optional[str]:
        if not entries:
            return None
        if latest_id is not None and any(e.id == latest_id for e in entries):
            return latest_id
        return entries[-1].id
