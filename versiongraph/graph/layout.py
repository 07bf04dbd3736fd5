"""
Layout Engine
=============

Assigns every node of a lineage forest a level and a 2-D position.

ALGORITHM:
- Root trees are laid out left to right, each shifted by
  root_index * root_spacing so distinct trees never share an offset
- level(root) = 0, level(child) = level(parent) + 1, y = level * level_spacing
- A leaf sits at the offset handed down by its parent
- Child i of an internal node receives offset + i * child_spacing, and the
  internal node is centred on the mean x of its children

KNOWN LIMITATION:
Bottom-up centring without collision avoidance. Sibling subtrees of very
different width can overlap; graphs stay small and positions remain
draggable on the rendering surface.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np


@dataclass
class LayoutConfig:
    """Spacing and node size, in surface units."""
    level_spacing: float = 200.0
    child_spacing: float = 300.0
    root_spacing: float = 800.0
    node_width: float = 240.0
    node_height: float = 160.0

    def __post_init__(self):
        for name in ('level_spacing', 'child_spacing', 'root_spacing', 'node_width', 'node_height'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")


@dataclass(frozen=True)
class NodePlacement:
    level: int
    x: float
    y: float


@dataclass(frozen=True)
class LayoutResult:
    """Placements for every laid-out node plus the forest's extent."""
    placements: Dict[str, NodePlacement]
    max_level: int
    min_x: float
    max_x: float

    @property
    def is_empty(self) -> bool:
        return not self.placements

    @property
    def span(self) -> float:
        return self.max_x - self.min_x


class LayoutEngine:
    """
    Simplified bottom-up centring tree layout.

    Traversal is iterative so a long chain of edits does not
    run into the interpreter's recursion limit.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self._config = config or LayoutConfig()

    @property
    def config(self) -> LayoutConfig:
        return self._config

    def layout(
        self,
        roots: Sequence[str],
        children: Mapping[str, Sequence[str]]
    ) -> LayoutResult:
        placements: Dict[str, NodePlacement] = {}

        for root_index, root_id in enumerate(roots):
            self._layout_tree(root_id, root_index * self._config.root_spacing, children, placements)

        if not placements:
            return LayoutResult(placements={}, max_level=0, min_x=0.0, max_x=0.0)

        xs = np.fromiter((p.x for p in placements.values()), dtype=float)
        return LayoutResult(
            placements=placements,
            max_level=max(p.level for p in placements.values()),
            min_x=float(xs.min()),
            max_x=float(xs.max()),
        )

    def _layout_tree(
        self,
        root_id: str,
        offset: float,
        children: Mapping[str, Sequence[str]],
        placements: Dict[str, NodePlacement]
    ) -> None:
        # (node_id, level, offset, children_done)
        stack: List[Tuple[str, int, float, bool]] = [(root_id, 0, offset, False)]

        while stack:
            node_id, level, node_offset, children_done = stack.pop()
            kids = children.get(node_id, ())
            y = level * self._config.level_spacing

            if not kids:
                placements[node_id] = NodePlacement(level=level, x=node_offset, y=y)
                continue

            if children_done:
                child_xs = [placements[k].x for k in kids]
                placements[node_id] = NodePlacement(level=level, x=float(np.mean(child_xs)), y=y)
                continue

            # Revisit after all children are placed
            stack.append((node_id, level, node_offset, True))
            for i in reversed(range(len(kids))):
                stack.append((kids[i], level + 1, node_offset + i * self._config.child_spacing, False))

    def current_state_placement(self, result: LayoutResult) -> Tuple[NodePlacement, float]:
        """
        Placement and width for the synthetic current-state node:
        one level below the deepest node, centred across the full span.
        """
        if result.is_empty:
            return NodePlacement(level=0, x=0.0, y=0.0), self._config.node_width

        level = result.max_level + 1
        x = (result.min_x + result.max_x) / 2
        width = result.span + self._config.node_width
        return NodePlacement(level=level, x=x, y=level * self._config.level_spacing), width
