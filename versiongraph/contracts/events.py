"""
Event Contracts

Immutable records that cross layer boundaries:
- audit entries and metric points consumed by observability
- messages published on the engine's message bus
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .base import Timestamp
from .graph import GraphSnapshot
from .history import HistoryEntry, VersionData


# =============================================================================
# AUDIT
# =============================================================================

class AuditEventType(Enum):
    """What kind of operation an audit entry records."""
    HISTORY = "history"
    FILTER = "filter"
    BUILD = "build"
    SELECTION = "selection"
    MERGE = "merge"
    ERROR = "error"
    SYSTEM = "system"


@dataclass(frozen=True)
class AuditLogEntry:
    """One audited engine operation. metadata is ordered (key, value) pairs."""
    entry_id: str
    event_type: AuditEventType
    timestamp: Timestamp
    layer: str
    action: str
    entity_id: Optional[str] = None
    metadata: Tuple[Tuple[str, str], ...] = ()

    def get(self, key: str) -> Optional[str]:
        return dict(self.metadata).get(key)


@dataclass(frozen=True)
class MetricPoint:
    """A single recorded value of a named metric."""
    metric_name: str
    value: float
    timestamp: Timestamp
    labels: Tuple[Tuple[str, str], ...] = ()


# =============================================================================
# BUS MESSAGES
# =============================================================================

@dataclass(frozen=True)
class VersionLoadRequested:
    """The user asked to load a version into the rubric editor."""
    version: VersionData


@dataclass(frozen=True)
class VersionsMerged:
    """A merge entry was appended."""
    merge_entry: HistoryEntry
    merged_entries: Tuple[HistoryEntry, ...]


@dataclass(frozen=True)
class GraphRebuilt:
    """A new snapshot replaced the previous one."""
    snapshot: GraphSnapshot
    reason: str
