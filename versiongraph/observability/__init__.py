"""
Observability Layer
===================

Audit trail and metrics for the version graph engine.

Every layer reports here through the ObservabilityEngine; nothing in
this package feeds back into graph building, filtering or merging.

LAYERS:
- history: appends and lineage violations
- filter: criteria changes
- graph: rebuilds
- interaction: selection, merge and version-load requests
- api: reserved for the HTTP boundary
"""

from __future__ import annotations
from collections import Counter, deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, Iterable, List, Optional, Tuple
import hashlib
import itertools

from ..contracts.base import Timestamp, TimeRange
from ..contracts.events import AuditEventType, AuditLogEntry, MetricPoint


LAYERS = ('history', 'filter', 'graph', 'interaction', 'api')


class LogCollector:
    """
    Bounded audit trail for one layer.

    Oldest entries fall off once max_entries is reached; the number
    dropped is kept so reports can tell the trail is incomplete.
    """

    def __init__(self, layer_name: str, max_entries: Optional[int] = None):
        self._layer_name = layer_name
        self._entries: Deque[AuditLogEntry] = deque(maxlen=max_entries)
        self._dropped = 0

    def collect(self, entry: AuditLogEntry):
        if self._entries.maxlen is not None and len(self._entries) == self._entries.maxlen:
            self._dropped += 1
        self._entries.append(entry)

    def get_entries(
        self,
        time_range: Optional[TimeRange] = None,
        event_type: Optional[AuditEventType] = None
    ) -> List[AuditLogEntry]:
        return [
            e for e in self._entries
            if (time_range is None or time_range.contains(e.timestamp))
            and (event_type is None or e.event_type == event_type)
        ]

    @property
    def layer_name(self) -> str:
        return self._layer_name

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def dropped_count(self) -> int:
        return self._dropped


# =============================================================================
# METRICS
# =============================================================================

class MetricType(Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    TIMING = "timing"


@dataclass(frozen=True)
class MetricDefinition:
    name: str
    metric_type: MetricType
    description: str
    labels: Tuple[str, ...] = ()


DEFAULT_METRICS: Tuple[MetricDefinition, ...] = (
    MetricDefinition("history_entries_total", MetricType.COUNTER,
                     "History entries appended", ("action",)),
    MetricDefinition("graph_rebuilds_total", MetricType.COUNTER,
                     "Store -> filter -> build rebuilds", ("reason",)),
    MetricDefinition("graph_build_duration_ms", MetricType.TIMING,
                     "Filter, build and highlight time in milliseconds"),
    MetricDefinition("graph_nodes", MetricType.GAUGE,
                     "Nodes in the latest snapshot, current-state included"),
    MetricDefinition("graph_edges", MetricType.GAUGE,
                     "Edges in the latest snapshot"),
    MetricDefinition("merges_total", MetricType.COUNTER,
                     "Merge entries appended"),
    MetricDefinition("merge_validation_failures_total", MetricType.COUNTER,
                     "Merge requests rejected by validation", ("error_code",)),
    MetricDefinition("selection_events_total", MetricType.COUNTER,
                     "Node clicks and merge-mode changes", ("mode",)),
)


class MetricsCollector:
    """
    Series of metric points keyed by metric name.

    Each series keeps at most max_points points, newest last; totals
    and aggregates cover the retained window only.
    """

    def __init__(
        self,
        definitions: Iterable[MetricDefinition] = DEFAULT_METRICS,
        max_points: Optional[int] = None
    ):
        self._definitions: Dict[str, MetricDefinition] = {d.name: d for d in definitions}
        self._max_points = max_points
        self._series: Dict[str, Deque[MetricPoint]] = {
            name: deque(maxlen=max_points) for name in self._definitions
        }

    def record(self, metric_name: str, value: float, labels: Optional[Dict[str, str]] = None):
        series = self._series.get(metric_name)
        if series is None:
            series = self._series[metric_name] = deque(maxlen=self._max_points)
        series.append(MetricPoint(
            metric_name=metric_name,
            value=value,
            timestamp=Timestamp.now(),
            labels=tuple(sorted(labels.items())) if labels else (),
        ))

    def get_metric(self, metric_name: str, time_range: Optional[TimeRange] = None) -> List[MetricPoint]:
        points = self._series.get(metric_name, [])
        if time_range is None:
            return list(points)
        return [p for p in points if time_range.contains(p.timestamp)]

    def get_latest(self, metric_name: str) -> Optional[MetricPoint]:
        points = self._series.get(metric_name)
        return points[-1] if points else None

    def get_definition(self, metric_name: str) -> Optional[MetricDefinition]:
        return self._definitions.get(metric_name)

    def total(self, metric_name: str) -> float:
        """Sum of all points; meaningful for counters."""
        return sum(p.value for p in self._series.get(metric_name, ()))

    def compute_aggregates(
        self,
        metric_name: str,
        time_range: Optional[TimeRange] = None
    ) -> Dict[str, float]:
        values = [p.value for p in self.get_metric(metric_name, time_range)]
        if not values:
            return {}
        return {
            'count': len(values),
            'sum': sum(values),
            'min': min(values),
            'max': max(values),
            'avg': sum(values) / len(values),
        }


# =============================================================================
# ENGINE
# =============================================================================

@dataclass
class ObservabilityConfig:
    enable_audit: bool = True
    enable_metrics: bool = True
    max_entries_per_layer: Optional[int] = 10_000
    max_points_per_metric: Optional[int] = 10_000


class ObservabilityEngine:
    """
    Single sink for audit entries and metric points.

    Read access only; callers get copies of the collected data.
    """

    def __init__(self, config: Optional[ObservabilityConfig] = None):
        self._config = config or ObservabilityConfig()
        self._sequence = itertools.count(1)
        self._collectors: Dict[str, LogCollector] = {
            layer: LogCollector(layer, self._config.max_entries_per_layer)
            for layer in LAYERS
        }
        self._metrics = (
            MetricsCollector(max_points=self._config.max_points_per_metric)
            if self._config.enable_metrics else None
        )

    def collect_audit(self, entry: AuditLogEntry):
        # Unknown layers are not an error; they simply have no trail
        if self._config.enable_audit and entry.layer in self._collectors:
            self._collectors[entry.layer].collect(entry)

    def log_audit(
        self,
        action: str,
        layer: str,
        event_type: AuditEventType = AuditEventType.SYSTEM,
        entity_id: Optional[str] = None,
        outcome: str = "success",
        details: str = "",
        **metadata: str
    ) -> AuditLogEntry:
        """Build an audit entry from keyword metadata and collect it."""
        now = Timestamp.now()
        digest = hashlib.sha256(
            f"{layer}|{action}|{next(self._sequence)}|{now.to_iso()}".encode()
        ).hexdigest()[:16]

        entry = AuditLogEntry(
            entry_id=f"audit_{digest}",
            event_type=event_type,
            timestamp=now,
            layer=layer,
            action=action,
            entity_id=entity_id,
            metadata=(("outcome", outcome), ("details", details))
            + tuple((k, str(v)) for k, v in sorted(metadata.items())),
        )
        self.collect_audit(entry)
        return entry

    def collect_metric(self, metric_name: str, value: float, labels: Optional[Dict[str, str]] = None):
        if self._metrics is not None:
            self._metrics.record(metric_name, value, labels)

    def get_unified_log(
        self,
        time_range: Optional[TimeRange] = None,
        layers: Optional[List[str]] = None
    ) -> List[AuditLogEntry]:
        """Entries from the given layers (all by default), oldest first."""
        entries = [
            entry
            for layer in (layers or LAYERS)
            if layer in self._collectors
            for entry in self._collectors[layer].get_entries(time_range=time_range)
        ]
        return sorted(entries, key=lambda e: e.timestamp.value)

    def get_layer_log(self, layer_name: str, event_type: Optional[AuditEventType] = None) -> List[AuditLogEntry]:
        collector = self._collectors.get(layer_name)
        return collector.get_entries(event_type=event_type) if collector else []

    def get_metrics(self) -> Optional[MetricsCollector]:
        return self._metrics

    def generate_audit_report(self, time_range: Optional[TimeRange] = None) -> Dict:
        """Counts by layer and event type, plus the covered time span."""
        entries = self.get_unified_log(time_range=time_range)
        return {
            'total_entries': len(entries),
            'by_layer': dict(Counter(e.layer for e in entries)),
            'by_event_type': dict(Counter(e.event_type.value for e in entries)),
            'dropped': {
                layer: c.dropped_count for layer, c in self._collectors.items() if c.dropped_count
            },
            'time_range': {
                'start': entries[0].timestamp.to_iso() if entries else None,
                'end': entries[-1].timestamp.to_iso() if entries else None,
            },
            'generated_at': Timestamp.now().to_iso(),
        }
