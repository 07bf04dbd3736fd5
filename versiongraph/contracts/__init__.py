"""
Contracts Module

Explicit types shared by every layer of the version graph engine.
No layer may import implementation details from another layer;
they exchange these contracts instead.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. Recoverable failures are Error values, programmer errors are raised
3. All timestamps use UTC and are never mutated
"""

from .base import (
    ErrorCode, Error, ValidationError, Result, LineageInvariantError,
    Timestamp, TimeRange, generate_entry_id,
)
from .history import (
    HistoryAction, ChangeType, HistoryEntry, HistoryEntryInput, VersionData,
)
from .graph import (
    CURRENT_STATE_ID, CURRENT_ACTION, EdgeKind, Position, NodeStyle, EdgeStyle,
    NodeDisplay, GraphNode, GraphEdge, GraphSnapshot,
)
from .events import (
    AuditEventType, AuditLogEntry, MetricPoint,
    VersionLoadRequested, VersionsMerged, GraphRebuilt,
)

__all__ = [
    'ErrorCode', 'Error', 'ValidationError', 'Result', 'LineageInvariantError',
    'Timestamp', 'TimeRange', 'generate_entry_id',
    'HistoryAction', 'ChangeType', 'HistoryEntry', 'HistoryEntryInput', 'VersionData',
    'CURRENT_STATE_ID', 'CURRENT_ACTION', 'EdgeKind', 'Position', 'NodeStyle',
    'EdgeStyle', 'NodeDisplay', 'GraphNode', 'GraphEdge', 'GraphSnapshot',
    'AuditEventType', 'AuditLogEntry', 'MetricPoint',
    'VersionLoadRequested', 'VersionsMerged', 'GraphRebuilt',
]
