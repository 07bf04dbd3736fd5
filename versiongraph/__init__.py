"""
Version Graph Engine
====================

In-memory lineage graph over a rubric's append-only edit history.

LAYER FLOW:
===========
1. History: append-only store (source of truth) + filtered views
2. Graph: forest assembly, layout, lineage/merge/current edges
3. Interaction: selection state machine, merge synthesis, message bus
4. Observability: audit log and metrics for every layer

The engine module wires these together for a host UI; the api package
exposes the same operations over HTTP.
"""

from .engine import VersionGraphEngine, EngineConfig, build_view
from .history import HistoryStore, FilterEngine, FilterCriteria
from .graph import GraphBuilder, LayoutEngine, LayoutConfig, DisplayConfig
from .interaction import SelectionController, SelectionMode, MergeOperation, MessageBus

__all__ = [
    'VersionGraphEngine',
    'EngineConfig',
    'build_view',
    'HistoryStore',
    'FilterEngine',
    'FilterCriteria',
    'GraphBuilder',
    'LayoutEngine',
    'LayoutConfig',
    'DisplayConfig',
    'SelectionController',
    'SelectionMode',
    'MergeOperation',
    'MessageBus',
]
