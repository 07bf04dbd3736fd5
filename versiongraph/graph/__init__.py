"""
Graph Layer
===========

Pure derivation of a renderable lineage graph from history entries.

INVARIANTS:
- Graphs are rebuilt from scratch, never patched
- Declared lineage (parent_id) defines level and position
- Reconstructed merge lineage is display-only

Modules:
- builder: entries -> nodes + edges
- layout: level and 2-D position assignment
- styles: action -> style tags, commit hashes
- topology: NetworkX structural queries
- mermaid: text export
"""

from .builder import GraphBuilder, DisplayConfig, LineageForest
from .layout import LayoutEngine, LayoutConfig, LayoutResult, NodePlacement
from .topology import LineageTopology, TopologyReport
from .mermaid import render_mermaid

__all__ = [
    'GraphBuilder',
    'DisplayConfig',
    'LineageForest',
    'LayoutEngine',
    'LayoutConfig',
    'LayoutResult',
    'NodePlacement',
    'LineageTopology',
    'TopologyReport',
    'render_mermaid',
]
