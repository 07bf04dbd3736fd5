"""
Lineage Topology
================

Structural queries over a built snapshot using NetworkX.

ALLOWED:
- Acyclicity and branching checks (declared lineage must be a forest)
- Ancestry and root-to-node paths over declared lineage
- Connected components

Reconstructed merge edges are display-only; ancestry never follows them.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Set

import networkx as nx

from ..contracts.graph import EdgeKind, GraphSnapshot


@dataclass(frozen=True)
class TopologyReport:
    """Immutable structural summary of a snapshot."""
    node_count: int
    edge_count: int
    is_dag: bool
    lineage_is_forest: bool
    root_count: int
    component_count: int


class LineageTopology:
    """
    Wraps a NetworkX DiGraph built from a GraphSnapshot.

    Two views are kept: the full graph (all edge kinds) and the
    declared lineage (lineage edges only).
    """

    def __init__(self, snapshot: GraphSnapshot):
        self._graph = nx.DiGraph()
        self._lineage = nx.DiGraph()

        for node in snapshot.nodes:
            self._graph.add_node(node.node_id, level=node.level, synthetic=node.is_synthetic)
            if not node.is_synthetic:
                self._lineage.add_node(node.node_id, level=node.level)

        for edge in snapshot.edges:
            self._graph.add_edge(edge.source_id, edge.target_id, kind=edge.kind.value)
            if edge.kind == EdgeKind.LINEAGE:
                self._lineage.add_edge(edge.source_id, edge.target_id)

    @property
    def graph(self) -> nx.DiGraph:
        return self._graph

    def is_dag(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph)

    def lineage_is_forest(self) -> bool:
        """Every entry has at most one declared parent and there are no cycles."""
        if self._lineage.number_of_nodes() == 0:
            return True
        return nx.is_branching(self._lineage)

    def roots(self) -> List[str]:
        return [n for n in self._lineage.nodes if self._lineage.in_degree(n) == 0]

    def ancestors(self, node_id: str) -> Set[str]:
        """Declared ancestors of node_id (merge edges are not followed)."""
        if node_id not in self._lineage:
            return set()
        return set(nx.ancestors(self._lineage, node_id))

    def descendants(self, node_id: str) -> Set[str]:
        """Declared descendants of node_id."""
        if node_id not in self._lineage:
            return set()
        return set(nx.descendants(self._lineage, node_id))

    def lineage_path(self, node_id: str) -> Optional[List[str]]:
        """Root-to-node path over declared lineage, or None if unknown."""
        if node_id not in self._lineage:
            return None
        path = [node_id]
        current = node_id
        while True:
            parents = list(self._lineage.predecessors(current))
            if not parents:
                break
            current = parents[0]
            path.append(current)
        path.reverse()
        return path

    def merge_sources(self, node_id: str) -> List[str]:
        """Reconstructed parents of a merge entry."""
        if node_id not in self._graph:
            return []
        return [
            u for u, _, kind in self._graph.in_edges(node_id, data='kind')
            if kind == EdgeKind.MERGE.value
        ]

    def topological_order(self) -> List[str]:
        return list(nx.topological_sort(self._graph))

    def report(self) -> TopologyReport:
        return TopologyReport(
            node_count=self._graph.number_of_nodes(),
            edge_count=self._graph.number_of_edges(),
            is_dag=self.is_dag(),
            lineage_is_forest=self.lineage_is_forest(),
            root_count=len(self.roots()),
            component_count=(
                nx.number_weakly_connected_components(self._graph)
                if self._graph.number_of_nodes() else 0
            ),
        )

