"""
Graph Visualization Contracts

Responsibility:
Renderable projection of the history lineage. Produced fresh on every
rebuild and never mutated afterwards, so a rendering surface may keep
holding an older snapshot while a new one is computed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple
import hashlib


CURRENT_STATE_ID = "current-state"
CURRENT_ACTION = "current"


class EdgeKind(Enum):
    """Where an edge came from."""
    LINEAGE = "lineage"   # declared parent_id
    MERGE = "merge"       # reconstructed leaf -> merge entry
    CURRENT = "current"   # virtual pointer to the present


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class NodeStyle:
    """Style tags for a node, keyed by action."""
    icon: str
    color_class: str


@dataclass(frozen=True)
class EdgeStyle:
    """Stroke description for an edge."""
    stroke: str
    stroke_width: float = 2.0
    dash: Optional[str] = None  # e.g. "5,5"

    @property
    def is_dashed(self) -> bool:
        return self.dash is not None


@dataclass(frozen=True)
class NodeDisplay:
    """Detail-panel fields carried by a node."""
    version_label: str
    modifier: str
    timestamp: str
    commit_hash: str
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    comment: Optional[str] = None
    change_type: Optional[str] = None
    parent_id: Optional[str] = None
    summary: Optional[str] = None
    difference_summary: Optional[str] = None
    branch_name: str = "main"
    is_initial: bool = False
    is_current: bool = False


@dataclass(frozen=True)
class GraphNode:
    """Renderable graph node."""
    node_id: str
    level: int
    position: Position
    action: str
    display: NodeDisplay
    style: NodeStyle
    width: float
    height: float
    is_synthetic: bool = False

    # Selection highlights
    is_focused: bool = False
    is_multi_selected: bool = False
    is_merge_candidate: bool = False
    is_merge_mode: bool = False


@dataclass(frozen=True)
class GraphEdge:
    """Renderable graph edge."""
    edge_id: str
    source_id: str
    target_id: str
    kind: EdgeKind
    style: EdgeStyle


@dataclass(frozen=True)
class GraphSnapshot:
    """
    Pre-layouted lineage graph.
    Same entries -> same snapshot_id.
    """
    nodes: Tuple[GraphNode, ...]
    edges: Tuple[GraphEdge, ...]
    entry_count: int
    max_level: int
    snapshot_id: str = field(default="")

    def __post_init__(self):
        if not self.snapshot_id:
            object.__setattr__(self, 'snapshot_id', self.compute_id())

    def compute_id(self) -> str:
        content = (
            f"{','.join(n.node_id for n in self.nodes)}|"
            f"{','.join(e.edge_id for e in self.edges)}"
        )
        return f"snap_{hashlib.sha256(content.encode()).hexdigest()[:12]}"

    def node(self, node_id: str) -> Optional[GraphNode]:
        for n in self.nodes:
            if n.node_id == node_id:
                return n
        return None

    def edges_of_kind(self, kind: EdgeKind) -> Tuple[GraphEdge, ...]:
        return tuple(e for e in self.edges if e.kind == kind)

    def incoming(self, node_id: str, kind: Optional[EdgeKind] = None) -> Tuple[GraphEdge, ...]:
        return tuple(
            e for e in self.edges
            if e.target_id == node_id and (kind is None or e.kind == kind)
        )

    @property
    def current_node(self) -> Optional[GraphNode]:
        return self.node(CURRENT_STATE_ID)
